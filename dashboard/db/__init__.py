"""
Database access layer for the advisory client dashboard.

All user-initiated reads and writes go through a per-request Supabase client
that carries the caller's JWT, so Row Level Security decides which clients,
advisors and offices a dashboard user can see.

DO NOT define table schemas, migrations, or RLS policies here. They live in
the Supabase project.
"""

from .client import get_anon_client, get_service_role_client, get_supabase_client

__all__ = ["get_supabase_client", "get_anon_client", "get_service_role_client"]
