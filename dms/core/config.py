"""Application configuration with validation."""

from enum import Enum
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class StorageBackend(str, Enum):
    """Where uploaded file bytes are kept."""
    S3 = "s3"
    LOCAL = "local"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


_DEFAULT_JWT_SECRET = "dev-insecure-key-change-me"
_DEFAULT_ADMIN_PASSWORD = "admin123"


class Settings(BaseSettings):
    """
    Application settings with validation.

    Uses Pydantic for configuration validation, preventing
    common security issues like wildcard CORS.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./dms.db",
        description="Database connection URL"
    )
    # Connection pool tuning (PostgreSQL only; ignored for SQLite).
    db_pool_size: int = Field(default=5)
    db_max_overflow: int = Field(default=10)
    db_pool_timeout: int = Field(default=30)
    db_pool_recycle: int = Field(default=1800)

    # Session tokens
    jwt_secret_key: str = Field(
        default=_DEFAULT_JWT_SECRET,
        description="JWT signing secret (override in production)"
    )
    jwt_algorithm: str = Field(default="HS256")
    token_expire_hours: int = Field(
        default=24,
        description="Lifetime of a session token"
    )
    session_cookie_name: str = Field(default="dms_session")
    session_cookie_secure: bool = Field(
        default=False,
        description="Mark the session cookie Secure (HTTPS only)"
    )

    # Blob storage
    storage_backend: StorageBackend = Field(
        default=StorageBackend.LOCAL,
        description="Blob store backend: 's3' or 'local'"
    )
    storage_local_root: str = Field(
        default="./storage",
        description="Directory used by the local backend"
    )
    storage_public_base_url: str = Field(
        default="http://localhost:8000/files",
        description="Base URL recorded for files kept by the local backend"
    )
    s3_bucket: str = Field(default="")
    s3_endpoint_url: str = Field(
        default="",
        description="Custom endpoint for S3-compatible stores (empty = AWS)"
    )
    s3_region: str = Field(default="us-east-1")
    s3_access_key_id: str = Field(default="")
    s3_secret_access_key: str = Field(default="")
    signed_url_expiry_seconds: int = Field(
        default=3600,
        description="Lifetime of signed download URLs"
    )
    legacy_url_prefixes: str = Field(
        default="",
        description="Extra URL prefixes (comma-separated) that legacy versions without a public id may be fetched from"
    )

    # Uploads
    max_upload_mb: int = Field(
        default=10,
        description="Largest accepted upload in megabytes"
    )

    # Initial admin account, created when the user table is empty
    seed_admin_email: str = Field(default="admin@example.com")
    seed_admin_password: str = Field(default=_DEFAULT_ADMIN_PASSWORD)
    seed_admin_name: str = Field(default="System Administrator")

    # Audit Log Retention
    audit_retention_days: int = Field(
        default=365,
        description="Days to keep audit log entries (0 = keep forever)"
    )

    # Rate Limiting
    rate_limit_per_minute: int = Field(
        default=120,
        description="Maximum requests per client per minute (0 = unlimited)"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    def get_legacy_url_prefixes(self) -> List[str]:
        """Legacy prefixes, each ending in "/" so a bare host cannot match a longer one."""
        prefixes = [p.strip() for p in self.legacy_url_prefixes.split(",") if p.strip()]
        return [p if p.endswith("/") else f"{p}/" for p in prefixes]

    def get_cors_origins(self) -> List[str]:
        """
        Get CORS origins as a list.

        Parses comma-separated string and validates no wildcards.
        """
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]

        # SECURITY: Prevent wildcard CORS
        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )

        return origins

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    def insecure_settings(self) -> list[str]:
        """List the security-relevant settings still at unsafe values."""
        problems: list[str] = []

        if self.jwt_secret_key == _DEFAULT_JWT_SECRET:
            problems.append(
                "JWT_SECRET_KEY is using the default insecure value. "
                "Generate a secure key: openssl rand -hex 32"
            )

        if self.seed_admin_password == _DEFAULT_ADMIN_PASSWORD:
            problems.append(
                "SEED_ADMIN_PASSWORD is the default. "
                "Set a strong password for the initial admin account."
            )

        origins = self.get_cors_origins()
        localhost_origins = [o for o in origins if "localhost" in o or "127.0.0.1" in o]
        if localhost_origins:
            problems.append(
                f"CORS allows localhost origins: {localhost_origins}. "
                "Remove localhost origins for production."
            )

        if self.storage_backend == StorageBackend.S3 and not self.s3_bucket:
            problems.append("STORAGE_BACKEND=s3 requires S3_BUCKET to be set.")

        return problems

    def validate_production_config(self) -> None:
        """Validate configuration for production environment.

        In production, fails startup if security-critical settings use insecure defaults.
        In development, returns quietly and main.py logs the problems as warnings.

        Raises:
            ConfigurationError: If production config is insecure.
        """
        errors = self.insecure_settings()
        if errors and self.environment == Environment.PRODUCTION:
            raise ConfigurationError(
                "Production configuration is insecure:\n  - " + "\n  - ".join(errors)
            )

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
