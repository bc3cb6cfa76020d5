"""
FastAPI dependency injection.

Routes never build their own clients. The storage service is created and
initialized once in the application lifespan and handed out from
app.state, so tests can swap in a service backed by the mock store.
"""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader

from ..config.settings import Settings, get_settings
from ..core.storage import StorageService, StorageServiceConfig
from ..infrastructure.storage.client import S3Config, create_object_store

logger = logging.getLogger(__name__)

# API Key security scheme
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

def get_app_settings(request: Request) -> Settings:
    """Settings the running app was created with."""
    return getattr(request.app.state, "settings", None) or get_settings()


async def verify_api_key(
    settings: Annotated[Settings, Depends(get_app_settings)],
    api_key: str = Security(api_key_header),
) -> str:
    """
    Validate API key from request header.

    Raises 403 if key is invalid or missing.
    """
    if not api_key:
        logger.warning("Request missing API key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="API key required. Provide X-API-Key header.",
        )

    if api_key not in settings.api_keys_list:
        logger.warning(
            "Invalid API key attempt",
            extra={"key_prefix": api_key[:8]}
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )

    return api_key


# ---------------------------------------------------------------------------
# Service Dependencies
# ---------------------------------------------------------------------------

def build_storage_service(settings: Settings) -> StorageService:
    """
    Create the storage service from settings.

    This is the only place settings are translated into the service's
    explicit config. The returned service still needs initialize().
    """
    s3_config = S3Config(
        access_key_id=settings.storage_access_key_id,
        secret_access_key=settings.storage_secret_access_key,
        bucket_name=settings.storage_bucket,
        endpoint_url=settings.storage_endpoint_url or None,
        region=settings.storage_region,
    )
    store = create_object_store(config=s3_config, mock_mode=settings.storage_mock_mode)

    config = StorageServiceConfig(
        bucket_name=settings.storage_bucket,
        public_base_url=settings.public_base_url,
        skip_bucket_check=settings.storage_skip_bucket_check,
    )
    return StorageService(config, store)


def get_storage_service(request: Request) -> StorageService:
    """Provide the process-wide storage service created at startup."""
    service = getattr(request.app.state, "storage_service", None)
    if service is None or not service.initialized:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage service is not ready",
        )
    return service


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

AuthenticatedUser = Annotated[str, Depends(verify_api_key)]
StorageServiceDep = Annotated[StorageService, Depends(get_storage_service)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
