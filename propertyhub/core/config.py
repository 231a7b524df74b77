
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "PropertyHub API"
    app_env: str = "development"
    app_port: int = 8000
    app_version: str = "1.0.0"
    frontend_url: str = "http://localhost:3000"
    max_upload_size_mb: int = 10

    # Database (SQLite via aiosqlite for local dev, any async URL in prod)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./propertyhub_dev.db",
        alias="DATABASE_URL",
    )
    auto_create_tables: bool = Field(
        default=True, alias="AUTO_CREATE_TABLES",
    )  # Alembic owns the schema outside local dev
    sql_echo: bool = Field(default=False, alias="SQL_ECHO")
    audit_log_enabled: bool = Field(default=True, alias="AUDIT_LOG_ENABLED")

    # Auth
    jwt_secret_key: str = Field(
        default="change-me-in-production", alias="JWT_SECRET_KEY",
    )
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=15, alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    refresh_token_expire_days: int = Field(
        default=7, alias="REFRESH_TOKEN_EXPIRE_DAYS",
    )
    password_reset_expire_minutes: int = Field(
        default=60, alias="PASSWORD_RESET_EXPIRE_MINUTES",
    )
    password_hash_rounds: int = Field(
        default=12, alias="PASSWORD_HASH_ROUNDS",
    )  # bcrypt cost factor; tests drop this to 4
    password_min_length: int = Field(default=8, alias="PASSWORD_MIN_LENGTH")

    # File storage
    upload_dir: str = Field(default="./uploads", alias="UPLOAD_DIR")
    pdf_text_max_chars: int = Field(default=5000, alias="PDF_TEXT_MAX_CHARS")

    # Land Registry CSV import
    import_batch_size: int = Field(default=1000, alias="IMPORT_BATCH_SIZE")
    import_max_file_size_mb: int = Field(default=50, alias="IMPORT_MAX_FILE_SIZE_MB")
    import_large_file_threshold: int = Field(
        default=100_000, alias="IMPORT_LARGE_FILE_THRESHOLD",
    )
    import_progress_ttl_seconds: int = Field(
        default=3600, alias="IMPORT_PROGRESS_TTL_SECONDS",
    )  # finished imports stay queryable for an hour

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "extra": "ignore",
    }

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

settings = Settings()
