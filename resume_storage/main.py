"""
FastAPI application entry point.

This module creates and configures the FastAPI application.
The storage bucket is provisioned in the lifespan hook, before the first
request is accepted; if provisioning fails the app refuses to start.

For local development:
    uvicorn resume_storage.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.dependencies import build_storage_service
from .api.routes import health, storage
from .config.settings import Settings, get_settings
from .core.storage import StorageService

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Builds the storage service (unless one was injected) and runs bucket
    provisioning exactly once. A StorageProvisioningError propagates and
    aborts startup.
    """
    settings: Settings = app.state.settings

    logger.info(
        "Resume storage API starting",
        extra={
            "version": settings.api_version,
            "bucket": settings.storage_bucket,
            "mock_mode": settings.storage_mock_mode,
        }
    )

    # Validate configuration
    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    if app.state.storage_service is None:
        app.state.storage_service = build_storage_service(settings)

    await app.state.storage_service.initialize()

    yield

    logger.info("Resume storage API shutting down")


def create_app(
    settings: Optional[Settings] = None,
    storage_service: Optional[StorageService] = None,
) -> FastAPI:
    """
    Application factory.

    Tests pass their own settings and a service backed by the mock store.
    """
    settings = settings or get_settings()

    logging.getLogger().setLevel(settings.log_level.upper())

    app = FastAPI(
        title=settings.api_title,
        version=__version__,
        description="""
        File storage for the resume builder.

        Upload profile pictures, resume previews and resume PDFs, and delete
        them again. Stored files are publicly readable at the returned URL.

        All storage endpoints require an API key in the `X-API-Key` header.
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.storage_service = storage_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        storage.router,
        prefix="/api/v1/storage",
        tags=["Storage"],
    )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Catch-all exception handler.

        Logs the full error server-side but returns a generic message.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error. Please contact support if this persists."
            }
        )

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": __version__,
        }
    )

    return app


# Create the application instance
# This is what uvicorn imports
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "resume_storage.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
