"""
Shared constants for the dashboard: roles, table names, RPC names.

Table and RPC names mirror the Supabase project. delete_client_cascade is not
part of the existing schema and has to be deployed together with this service.
"""

# dashboard_role enum in the database
DASHBOARD_ROLES = {
    'SUPER_ADMIN': 'super_admin',
    'OFFICE_ADMIN': 'office_admin',
}

TABLES = {
    'CLIENTS': 'clients',
    'ADVISORS': 'advisors',
    'OFFICES': 'offices',
    'DASHBOARD_USERS': 'dashboard_users',
    'ADMIN_USERS': 'admin_users',
    'HOUSE_OBJECTS': 'house_objects',
    'CONTRACTS': 'contracts',
    'INSURANCES': 'insurances',
    'FINANCIAL_GOALS': 'financial_goals',
    'INVESTMENTS': 'investments',
    'LIABILITIES': 'liabilities',
    'PARTNERS': 'partners',
}

RPC = {
    # Wide joined row for the client detail editor
    'FULL_CLIENT': 'full_client_v2',
    # Role + office of the calling dashboard user
    'GET_DASHBOARD_USER': 'get_dashboard_user',
    # Removes a client and all of its child rows
    'DELETE_CLIENT_CASCADE': 'delete_client_cascade',
}

# Columns the client list can be ordered by
CLIENT_SORT_FIELDS = (
    'first_name',
    'last_name',
    'email',
    'phone',
    'gender',
    'age',
)

# Columns the client list search matches against (case-insensitive substring)
CLIENT_SEARCH_FIELDS = ('first_name', 'last_name', 'email')
