# python
# app/core/config.py
"""Configuration settings for the Tutor File Sharing API.

Uses Pydantic BaseSettings for environment variable management.
"""
from enum import Enum

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentEnum(str, Enum):
    development = "development"
    testing = "testing"
    staging = "staging"
    production = "production"


class LogLevelEnum(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormatEnum(str, Enum):
    simple = "simple"
    json = "json"


class StorageBackendEnum(str, Enum):
    local = "local"
    s3 = "s3"


class Settings(BaseSettings):
    # Pydantic v2 settings configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===== Application Settings =====
    app_name: str = Field(default="Tutor File Sharing API", description="Application name")
    environment: EnvironmentEnum = Field(
        default=EnvironmentEnum.development, description="Environment type"
    )
    debug: bool = Field(default=False, description="Debug mode")
    version: str = Field(default="1.0.0", description="Application version")

    # ===== Security Settings =====
    # No default: the token signing secret must always be injected.
    secret_key: str = Field(..., min_length=32, description="Secret key for JWT encoding")
    algorithm: str = Field(default="HS256", description="JWT algorithm")
    access_token_expire_minutes: int = Field(
        default=7 * 24 * 60, description="Session token lifetime (7 days)"
    )
    admin_key_hash: str | None = Field(
        default=None, description="pbkdf2_sha256 hash of the admin access key"
    )
    admin_principal_id: str = Field(default="admin", description="Admin principal identifier")
    admin_display_name: str = Field(default="Admin", description="Admin display name")
    auth_rate_limit: str = Field(
        default="5/15minutes", description="Rate limit for admin login attempts"
    )
    general_rate_limit: str = Field(
        default="100/15minutes", description="Per-client rate limit for all other routes"
    )

    # ===== Database Settings =====
    database_url: str | None = Field(default=None, description="Database connection URL")
    db_pool_size: int = Field(default=20, description="Database connection pool size")
    db_max_overflow: int = Field(default=0, description="Database max overflow connections")

    # Test database URL
    test_database_url: str | None = Field(default=None, description="Test database URL")

    # ===== File Storage Settings =====
    storage_backend: StorageBackendEnum = Field(
        default=StorageBackendEnum.local, description="Object store backend"
    )
    local_storage_path: str = Field(default="./storage", description="Local blob directory")
    local_storage_url_prefix: str = Field(
        default="/media", description="URL prefix the local blob directory is served under"
    )

    aws_access_key_id: str | None = Field(default=None, description="AWS access key ID")
    aws_secret_access_key: str | None = Field(default=None, description="AWS secret access key")
    s3_bucket_name: str | None = Field(default=None, description="S3 bucket name")
    s3_region: str = Field(default="us-east-1", description="S3 region")
    s3_endpoint_url: str | None = Field(default=None, description="S3 endpoint URL (R2, MinIO)")
    s3_public_base_url: str | None = Field(
        default=None, description="Public base URL for objects, if the bucket is public"
    )

    download_url_expire_seconds: int = Field(
        default=15 * 60, description="Lifetime of signed download URLs in seconds"
    )

    # ===== Application Limits =====
    max_file_size: int = Field(default=10485760, description="Maximum file size in bytes (10MB)")
    max_filename_length: int = Field(default=255, description="Maximum file name length")
    max_student_name_length: int = Field(default=100, description="Maximum student name length")
    max_email_length: int = Field(default=100, description="Maximum student email length")
    max_description_length: int = Field(default=500, description="Maximum description length")
    max_submission_category_length: int = Field(
        default=50, description="Maximum submission category length"
    )
    max_file_category_length: int = Field(default=100, description="Maximum file category length")

    # ===== CORS Settings =====
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000",
        description="Allowed CORS origins (comma-separated)",
    )

    @property
    def allowed_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        if isinstance(self.allowed_origins, str):
            return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]
        return self.allowed_origins if isinstance(self.allowed_origins, list) else []

    # ===== Background Tasks (Celery) =====
    celery_broker_url: str = Field(
        default="redis://localhost:6379/1", description="Celery broker URL"
    )
    celery_result_backend: str = Field(
        default="redis://localhost:6379/2", description="Celery result backend"
    )
    purge_interval_minutes: int = Field(
        default=15, description="Interval of the rejected-blob purge task"
    )

    # ===== Monitoring & Logging =====
    log_level: LogLevelEnum = Field(default=LogLevelEnum.INFO, description="Logging level")
    log_format: LogFormatEnum = Field(default=LogFormatEnum.simple, description="Log format")

    # ===== Server Settings =====
    host: str = Field(default="127.0.0.1", description="Host to bind the server")
    port: int = Field(default=8000, description="Port to bind the server")

    # ===== Computed Properties =====
    @property
    def is_development(self) -> bool:
        return self.environment == EnvironmentEnum.development

    @property
    def is_production(self) -> bool:
        return self.environment == EnvironmentEnum.production

    @property
    def is_testing(self) -> bool:
        return self.environment == EnvironmentEnum.testing

    @property
    def has_admin_credentials(self) -> bool:
        return bool(self.admin_key_hash)

    # ===== Validation Methods =====
    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        if v and isinstance(v, str):
            lv = v.lower()
            if lv in ["dev", "develop"]:
                return "development"
            if lv in ["prod"]:
                return "production"
            if lv in ["test"]:
                return "testing"
            return lv
        return v

    @field_validator("max_file_size")
    @classmethod
    def validate_file_size(cls, v):
        if v > 100 * 1024 * 1024:
            raise ValueError("Maximum file size cannot exceed 100MB")
        return v

    @field_validator("local_storage_url_prefix")
    @classmethod
    def validate_url_prefix(cls, v: str) -> str:
        v = "/" + v.strip().strip("/")
        if v == "/":
            raise ValueError("Local storage URL prefix cannot be the root path")
        return v

    @model_validator(mode="after")
    def check_storage_backend(self):
        if self.storage_backend == StorageBackendEnum.s3 and not self.s3_bucket_name:
            raise ValueError("S3_BUCKET_NAME is required when STORAGE_BACKEND is 's3'")
        return self


settings = Settings()


class ConfigValidator:
    @staticmethod
    def validate_required_settings():
        errors = []
        if not settings.database_url:
            errors.append("DATABASE_URL is required")
        if not settings.admin_key_hash:
            errors.append("ADMIN_KEY_HASH is required")
        if settings.is_production and settings.storage_backend == StorageBackendEnum.local:
            errors.append("STORAGE_BACKEND must be 's3' in production")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")

    @staticmethod
    def get_feature_status() -> dict:
        return {
            "admin_login_enabled": settings.has_admin_credentials,
            "storage_backend": settings.storage_backend.value,
            "environment": settings.environment.value,
        }


def get_config_summary() -> dict:
    return {
        "app_name": settings.app_name,
        "version": settings.version,
        "environment": settings.environment.value,
        "debug": settings.debug,
        "features": ConfigValidator.get_feature_status(),
        "database_configured": bool(settings.database_url),
    }


__all__ = [
    "settings",
    "Settings",
    "ConfigValidator",
    "get_config_summary",
    "EnvironmentEnum",
    "LogLevelEnum",
    "LogFormatEnum",
    "StorageBackendEnum",
]
