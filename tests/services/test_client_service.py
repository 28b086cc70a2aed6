"""
Tests for the client service (list, detail, create, cascade delete).
"""

import pytest

from dashboard.services.client_service import (
    CLIENT_LIST_COLUMNS,
    build_search_filter,
    create_client,
    delete_client,
    flatten_client_row,
    get_client_detail,
    list_clients,
    total_pages,
)


class TestBuildSearchFilter:

    @pytest.mark.parametrize("search", [None, "", "j", "  j  "])
    def test_short_terms_do_not_filter(self, search):
        assert build_search_filter(search) is None

    def test_matches_name_and_email(self):
        assert build_search_filter(" jan ") == (
            "first_name.ilike.%jan%,last_name.ilike.%jan%,email.ilike.%jan%"
        )

    def test_strips_filter_syntax(self):
        assert build_search_filter("de,(Vries)") == (
            "first_name.ilike.%deVries%,last_name.ilike.%deVries%,email.ilike.%deVries%"
        )


class TestFlattenClientRow:

    def test_flattens_relations(self):
        row = flatten_client_row({
            "id": "c1",
            "first_name": "Jan",
            "advisors": {"name": "Sanne Jansen"},
            "house_objects": [{"mortgage_amount": 200000}, {"mortgage_amount": 1}],
        })

        assert row["advisor_name"] == "Sanne Jansen"
        assert row["mortgage_amount"] == 200000

    def test_missing_relations(self):
        row = flatten_client_row({"id": "c1", "advisors": None, "house_objects": []})

        assert row["advisor_name"] is None
        assert row["mortgage_amount"] is None


class TestListClients:

    @pytest.mark.asyncio
    async def test_search_sort_and_range(self, supabase_client, mock_response):
        select = supabase_client.table.return_value.select.return_value
        ordered = select.or_.return_value.order.return_value
        ordered.range.return_value.execute.return_value = mock_response(
            data=[{"id": "c1", "last_name": "de Vries", "advisors": None, "house_objects": []}],
            count=101,
        )

        rows, total = await list_clients(
            supabase_client,
            search="vries",
            sort_field="age",
            sort_direction="desc",
            page=2,
            page_size=100,
        )

        assert total == 101
        assert rows[0]["last_name"] == "de Vries"
        supabase_client.table.assert_called_once_with("clients")
        supabase_client.table.return_value.select.assert_called_once_with(
            CLIENT_LIST_COLUMNS, count="exact"
        )
        select.or_.return_value.order.assert_called_once_with("age", desc=True)
        ordered.range.assert_called_once_with(100, 199)

    @pytest.mark.asyncio
    async def test_short_search_is_ignored(self, supabase_client, mock_response):
        select = supabase_client.table.return_value.select.return_value
        select.order.return_value.range.return_value.execute.return_value = mock_response(
            data=[], count=0
        )

        rows, total = await list_clients(supabase_client, search="v", page_size=100)

        assert (rows, total) == ([], 0)
        select.or_.assert_not_called()
        select.order.assert_called_once_with("last_name", desc=False)
        select.order.return_value.range.assert_called_once_with(0, 99)

    @pytest.mark.asyncio
    async def test_rejects_unknown_sort_field(self, supabase_client):
        with pytest.raises(ValueError):
            await list_clients(supabase_client, sort_field="password")

    @pytest.mark.asyncio
    async def test_rejects_page_zero(self, supabase_client):
        with pytest.raises(ValueError):
            await list_clients(supabase_client, page=0)


def test_total_pages():
    assert total_pages(0, 100) == 0
    assert total_pages(100, 100) == 1
    assert total_pages(101, 100) == 2


class TestGetClientDetail:

    @pytest.mark.asyncio
    async def test_resolves_email_then_projection(self, supabase_client, mock_response):
        supabase_client.table.return_value.select.return_value.eq.return_value.execute.return_value = (
            mock_response(data=[{"email": "jan@example.nl"}])
        )
        supabase_client.rpc.return_value.execute.return_value = mock_response(
            data=[{"id": "c1", "email": "jan@example.nl", "house_id": 9}]
        )

        detail = await get_client_detail(supabase_client, "c1")

        assert detail["house_id"] == 9
        supabase_client.rpc.assert_called_once_with("full_client_v2", {"p_email": "jan@example.nl"})

    @pytest.mark.asyncio
    async def test_unknown_client(self, supabase_client, mock_response):
        supabase_client.table.return_value.select.return_value.eq.return_value.execute.return_value = (
            mock_response(data=[])
        )

        assert await get_client_detail(supabase_client, "missing") is None
        supabase_client.rpc.assert_not_called()


class TestCreateClient:

    @pytest.mark.asyncio
    async def test_blank_optionals_become_null(self, supabase_client, mock_response):
        supabase_client.table.return_value.insert.return_value.execute.return_value = (
            mock_response(data=[{"id": "new"}])
        )

        created = await create_client(
            supabase_client,
            first_name=" Eva ",
            last_name="Mulder",
            email="eva@example.nl",
            phone="",
            city="  ",
            country="Nederland",
        )

        assert created == {"id": "new"}
        inserted = supabase_client.table.return_value.insert.call_args.args[0]
        assert inserted["first_name"] == "Eva"
        assert inserted["phone"] is None
        assert inserted["city"] is None
        assert inserted["country"] == "Nederland"
        assert "supabase_auth_id" not in inserted

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, supabase_client):
        with pytest.raises(ValueError):
            await create_client(supabase_client, first_name=" ", last_name="Mulder", email="e@x.nl")

        supabase_client.table.assert_not_called()


class TestDeleteClient:

    @pytest.mark.asyncio
    async def test_returns_deleted_counts(self, supabase_client, mock_response):
        supabase_client.rpc.return_value.execute.return_value = mock_response(data=[{
            "client_deleted": 1,
            "house_objects_deleted": 2,
            "partners_deleted": None,
        }])

        counts = await delete_client(supabase_client, "c1")

        assert counts == {"client_deleted": 1, "house_objects_deleted": 2, "partners_deleted": 0}
        supabase_client.rpc.assert_called_once_with("delete_client_cascade", {"p_client_id": "c1"})

    @pytest.mark.asyncio
    async def test_nothing_deleted(self, supabase_client, mock_response):
        supabase_client.rpc.return_value.execute.return_value = mock_response(data=[])

        assert await delete_client(supabase_client, "missing") == {}
