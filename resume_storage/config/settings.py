"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Settings are read once here and handed to the storage service as an explicit
config object; nothing below this layer looks at the environment.

Mock mode enables local development without a real object store.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like api_keys), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "Resume Storage API"
    api_version: str = "v1"
    api_keys: str = Field(
        default="dev-key-1,dev-key-2",
        description="Comma-separated API keys accepted in the X-API-Key header."
    )

    # S3-compatible Storage Configuration
    storage_access_key_id: str = Field(
        default="",
        description="Access key ID for the S3-compatible store"
    )
    storage_secret_access_key: str = Field(
        default="",
        description="Secret access key for the S3-compatible store"
    )
    storage_endpoint_url: Optional[str] = Field(
        default=None,
        description="Endpoint URL (MinIO, R2). Leave empty for AWS S3."
    )
    storage_region: str = Field(
        default="us-east-1",
        description="Region name. R2 uses 'auto'."
    )
    storage_bucket: str = Field(
        default="resume-storage",
        description="Bucket holding all user files"
    )
    storage_url: str = Field(
        default="http://localhost:9000/resume-storage",
        description="Public base URL that stored object keys are appended to"
    )
    storage_skip_bucket_check: bool = Field(
        default=False,
        description="Skip bucket verification/creation at startup. Paths must then be made public manually."
    )
    storage_mock_mode: bool = Field(
        default=False,
        description="Use in-memory mock instead of a real object store. Enables local dev without credentials."
    )

    # Application Behavior
    max_upload_size_mb: int = Field(
        default=10,
        description="Maximum upload size in MB for pictures and resumes."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins. Use * for development only."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def api_keys_list(self) -> list[str]:
        """Parse comma-separated API keys into a list."""
        return [key.strip() for key in self.api_keys.split(",") if key.strip()]

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def public_base_url(self) -> str:
        """Public base URL without a trailing slash."""
        return self.storage_url.rstrip("/")

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set based on mock mode settings.

        Returns list of missing required fields.
        This is separate from Pydantic validation because requirements
        depend on whether we're in mock mode.
        """
        missing = []

        if not self.storage_bucket:
            missing.append("STORAGE_BUCKET")
        if not self.storage_url:
            missing.append("STORAGE_URL")

        # credentials only required if not in mock mode
        if not self.storage_mock_mode:
            if not self.storage_access_key_id:
                missing.append("STORAGE_ACCESS_KEY_ID")
            if not self.storage_secret_access_key:
                missing.append("STORAGE_SECRET_ACCESS_KEY")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once per process.
    For tests, call get_settings.cache_clear() to reset.
    """
    return Settings()
