"""Application settings and configuration.

This module defines all configuration options for the Code Share board.
Settings are loaded from environment variables; SECRET_KEY and ADMIN_PASSWORD
have no default and must be provided.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Code Share", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    admin_password: str = Field(alias="ADMIN_PASSWORD")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Snapshot store: "database" keeps the document in one SQL row,
    # "file" keeps it in a JSON file rewritten on every save.
    store_backend: str = Field(default="database", alias="STORE_BACKEND")
    database_url: str = Field(default="sqlite:///./codeshare.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    store_path: str = Field(default="./database.json", alias="STORE_PATH")
    store_conflict_retries: int = Field(default=3, alias="STORE_CONFLICT_RETRIES")

    # Realtime channel
    realtime_enabled: bool = Field(default=True, alias="REALTIME_ENABLED")
    realtime_queue_size: int = Field(default=256, alias="REALTIME_QUEUE_SIZE")

    # Visitor identity
    trust_forwarded_for: bool = Field(default=False, alias="TRUST_FORWARDED_FOR")

    # Per-visitor request limit on /api routes (limits notation)
    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    rate_limit: str = Field(default="100 per 15 minutes", alias="RATE_LIMIT")
    rate_limit_storage_uri: str = Field(default="memory://", alias="RATE_LIMIT_STORAGE_URI")

    # Admin uploads
    upload_dir: str = Field(default="./uploads", alias="UPLOAD_DIR")
    upload_max_bytes: int = Field(default=5 * 1024 * 1024, alias="UPLOAD_MAX_BYTES")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return the database URL with any async driver suffix removed.

        Alembic runs synchronously, so ``sqlite+aiosqlite://`` becomes
        ``sqlite://`` and ``postgresql+asyncpg://`` becomes ``postgresql://``.
        """
        scheme, sep, rest = self.database_url.partition("://")
        for suffix in ("+aiosqlite", "+asyncpg"):
            scheme = scheme.removesuffix(suffix)
        return f"{scheme}{sep}{rest}"


settings = Settings()
