"""Pydantic models for Bizdir configuration.

These models define the structure of config.toml and secrets.env files.
"""

from pathlib import Path

from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8000
    enforce_https: bool = False
    # CORS configuration - empty list means same-origin only
    cors_origins: list[str] = []


class DatabaseConfig(BaseModel):
    """MongoDB database configuration.

    Leaving ``mongodb_url`` unset keeps the directory in memory. Setting it
    means persistence is expected: if the server cannot be reached at startup
    the API refuses requests instead of silently falling back.
    """

    mongodb_url: str | None = None
    mongodb_database: str = "bizdir"
    # Explicit opt-out, keeps a configured URL around without using it
    disabled: bool = False
    server_selection_timeout_ms: int = 5000
    # Connection pool settings
    min_pool_size: int = 1
    max_pool_size: int = 50

    @property
    def configured(self) -> bool:
        """Whether a MongoDB URL has been provided."""
        return bool(self.mongodb_url)


class StorageConfig(BaseModel):
    """File storage configuration."""

    data_dir: Path = Field(default_factory=lambda: Path("data"))
    max_upload_mb: int = 10

    @property
    def max_upload_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_mb * 1024 * 1024


class AuthConfig(BaseModel):
    """Authentication configuration.

    Authentication only applies when the directory is backed by MongoDB,
    because that is where user accounts live.
    """

    enabled: bool = True
    token_lifetime_minutes: int = 120
    auth_rate_limit_per_minute: int = 10


class ImportConfig(BaseModel):
    """Spreadsheet import configuration."""

    max_rows: int = 5000


class ExportConfig(BaseModel):
    """Export configuration."""

    default_basename: str = "businesses"


class BizdirConfig(BaseModel):
    """Main Bizdir configuration loaded from config.toml."""

    app_name: str = "Bizdir"
    server: ServerConfig = Field(default_factory=ServerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    # "import" is a keyword, hence the alias
    import_: ImportConfig = Field(default_factory=ImportConfig, alias="import")
    export: ExportConfig = Field(default_factory=ExportConfig)

    model_config = {"populate_by_name": True}


class SecretsConfig(BaseModel):
    """Secrets loaded from secrets.env file.

    These are sensitive values that should not be stored in config.toml.
    """

    secret_key: str | None = None
