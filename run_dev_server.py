"""
Local development server for the advisor dashboard backend.

Starts uvicorn with auto-reload and prints the main endpoints.
"""

import os

import uvicorn

if __name__ == "__main__":
    port = int(os.getenv("PORT", "8000"))
    base_url = f"http://localhost:{port}"

    print("=" * 60)
    print("Starting Advisor Dashboard Backend")
    print("=" * 60)
    print()
    print("API Endpoints:")
    print(f"   - Health Check:  GET   {base_url}/health")
    print(f"   - Login:         POST  {base_url}/auth/login")
    print(f"   - Clients:       GET   {base_url}/clients")
    print(f"   - Save client:   POST  {base_url}/functions/update-client-data")
    print(f"   - API Docs:            {base_url}/docs")
    print()
    print("Authentication:")
    print("   All endpoints except /health and /auth/login require:")
    print("   Authorization: Bearer <supabase access token>")
    print()
    print("Test with curl:")
    print(f'   curl "{base_url}/clients?search=jan&sort_field=last_name" \\')
    print('     -H "Authorization: Bearer $TOKEN"')
    print()
    print("=" * 60)
    print(f"Starting server on {base_url}")
    print("Press Ctrl+C to stop")
    print("=" * 60)
    print()

    uvicorn.run(
        "dashboard.main:app",
        host="0.0.0.0",
        port=port,
        reload=True,
        log_level=os.getenv("LOG_LEVEL", "info").lower()
    )
