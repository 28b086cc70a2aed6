"""
FastAPI application entry point for the advisory client dashboard backend.

This module creates the FastAPI app instance and registers all routers.
"""

import os
import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from dashboard.config import settings
from dashboard.routes.advisors import router as advisors_router
from dashboard.routes.auth import router as auth_router
from dashboard.routes.clients import router as clients_router
from dashboard.routes.dashboard_users import router as dashboard_users_router
from dashboard.routes.functions import router as functions_router
from dashboard.routes.health import router as health_router
from dashboard.routes.offices import router as offices_router

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


def _get_cors_origins() -> list[str]:
    """
    Get allowed CORS origins based on environment.

    - ENVIRONMENT=production: Uses CORS_ALLOWED_ORIGINS env var (required)
    - Anything else: allows all origins for local development

    Returns:
        List of allowed origin URLs, or ["*"] for development.
    """
    environment = os.getenv("ENVIRONMENT", "development")

    if environment == "production":
        cors_origins = os.getenv("CORS_ALLOWED_ORIGINS", "")
        if cors_origins:
            origins = [origin.strip() for origin in cors_origins.split(",")]
            logger.info(f"CORS configured for production with {len(origins)} allowed origins")
            return origins
        # The dashboard is a browser app, so without explicit origins it cannot work
        logger.warning(
            "CORS_ALLOWED_ORIGINS not set in production; falling back to CORS_ORIGINS"
        )
        return [origin.strip() for origin in settings.CORS_ORIGINS if origin.strip()]
    else:
        logger.info(f"CORS configured for {environment}: allowing all origins")
        return ["*"]


app = FastAPI(
    title="Advisor Dashboard API",
    description="Backend service for the financial-advisory client dashboard",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc"
)


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may carry exception instances that are not JSON serializable
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log validation errors (without the body, which may hold client PII)."""
    logger.error(
        f"Validation error on {request.method} {request.url.path}: {exc.errors()}"
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "details": jsonable_errors(exc),
        }
    )


cors_origins = _get_cors_origins()
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(clients_router)
app.include_router(advisors_router)
app.include_router(offices_router)
app.include_router(dashboard_users_router)
app.include_router(functions_router)

logger.info("FastAPI app initialized successfully")
