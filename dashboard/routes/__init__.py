"""
FastAPI routers for all API endpoints.

Each module defines a router for one screen of the dashboard (clients,
advisors, offices, dashboard users, auth) plus the update-client-data
function endpoint.
"""
