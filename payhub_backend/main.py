"""PayHub Onboarding Backend - Main Application Entry Point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .core.exceptions import PayHubException
from .core.logging import (
    RequestIdMiddleware,
    get_logger,
    setup_logging,
    shutdown_logging,
)
from .modules.documents import router as documents_router
from .modules.documents.storage import build_storage_client
from .modules.dwolla import DwollaClient
from .modules.dwolla.routers import router as dwolla_router
from .modules.jobs import router as jobs_router
from .modules.profiles import router as profiles_router
from .modules.tenants import owners_router as beneficial_owners_router
from .modules.tenants import router as tenant_router
from .modules.transactions import router as transactions_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    setup_logging(
        log_to_file=settings.log_to_file,
        log_level=settings.log_level,
        log_file_path=settings.log_file_path,
        use_json_format=settings.log_format == "json",
    )
    logger.info("Starting PayHub application...")
    logger.info(f"Environment: {settings.app_env}")
    logger.info(f"Dwolla environment: {settings.dwolla_environment}")

    app.state.dwolla_client = DwollaClient.from_settings(settings)
    app.state.storage_client = build_storage_client(settings)

    if settings.dwolla_webhook_url:
        try:
            await app.state.dwolla_client.sync_webhook_subscription(
                settings.dwolla_webhook_url
            )
        except Exception:
            logger.exception("Could not sync the Dwolla webhook subscription")

    yield

    # Shutdown
    logger.info("Shutting down PayHub application...")
    await app.state.dwolla_client.aclose()
    shutdown_logging()


# Create FastAPI application
app = FastAPI(
    title=settings.api_title,
    description="Tenant onboarding and contractor payments over Dwolla",
    version=settings.api_version,
    docs_url="/api/docs" if settings.app_debug else None,
    redoc_url="/api/redoc" if settings.app_debug else None,
    openapi_url="/api/openapi.json" if settings.app_debug else None,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request ID middleware for request tracing
app.add_middleware(RequestIdMiddleware)


# Global exception handler
@app.exception_handler(PayHubException)
async def payhub_exception_handler(request: Request, exc: PayHubException):
    """Render PayHub exceptions with their category and details."""
    if exc.status_code >= 500:
        logger.error(f"{exc.category}: {exc.message}", extra={"details": exc.details})
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": exc.message,
            "error": {"category": exc.category, "details": exc.details},
            "data": None,
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unhandled exceptions."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": "Internal server error",
            "error": {
                "category": "internal_failure",
                "details": {"error": str(exc)} if settings.app_debug else {},
            },
            "data": None,
        },
    )


# Health check endpoint
@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.api_version,
        "env": settings.app_env,
    }


# Register routers
app.include_router(tenant_router, prefix=settings.api_prefix)
app.include_router(beneficial_owners_router, prefix=settings.api_prefix)
app.include_router(profiles_router, prefix=settings.api_prefix)
app.include_router(jobs_router, prefix=settings.api_prefix)
app.include_router(transactions_router, prefix=settings.api_prefix)
app.include_router(documents_router, prefix=settings.api_prefix)
app.include_router(dwolla_router, prefix=settings.api_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "payhub_backend.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.app_debug,
    )
