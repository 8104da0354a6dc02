"""Global settings instance for Bizdir.

This module provides a unified settings object that combines:
- Configuration from config.toml
- Secrets from secrets.env
- Environment variable overrides
"""

import logging
import secrets as secrets_module
from pathlib import Path

from bizdir.config.loader import load_config, load_secrets
from bizdir.config.schema import BizdirConfig, SecretsConfig

logger = logging.getLogger(__name__)


class Settings:
    """Unified settings object combining config and secrets.

    Provides a flat interface for the values handlers read most often while
    keeping the structured BizdirConfig available through ``config``.
    """

    def __init__(
        self,
        config: BizdirConfig | None = None,
        secrets: SecretsConfig | None = None,
    ):
        self._config = config or load_config()
        self._secrets = secrets or load_secrets()

        if not self._secrets.secret_key:
            self._secrets.secret_key = secrets_module.token_urlsafe(32)
            logger.warning(
                "SECURITY WARNING: No secret key configured. "
                "A random secret key has been generated. Access tokens will be invalidated "
                "when the server restarts. Set BIZDIR_SECRET_KEY for production use."
            )

    @property
    def config(self) -> BizdirConfig:
        """Get the full configuration object."""
        return self._config

    @property
    def secrets(self) -> SecretsConfig:
        """Get the secrets configuration object."""
        return self._secrets

    # Application
    @property
    def app_name(self) -> str:
        return self._config.app_name

    # Server
    @property
    def host(self) -> str:
        return self._config.server.host

    @property
    def port(self) -> int:
        return self._config.server.port

    @property
    def enforce_https(self) -> bool:
        return self._config.server.enforce_https

    @property
    def cors_origins(self) -> list[str]:
        return self._config.server.cors_origins

    # Database
    @property
    def mongodb_url(self) -> str | None:
        return self._config.database.mongodb_url

    @property
    def mongodb_database(self) -> str:
        return self._config.database.mongodb_database

    @property
    def database_configured(self) -> bool:
        return self._config.database.configured

    @property
    def database_disabled(self) -> bool:
        return self._config.database.disabled

    # Storage
    @property
    def data_dir(self) -> Path:
        return self._config.storage.data_dir

    @property
    def max_upload_size_bytes(self) -> int:
        return self._config.storage.max_upload_bytes

    # Auth
    @property
    def auth_enabled(self) -> bool:
        return self._config.auth.enabled

    @property
    def token_lifetime_minutes(self) -> int:
        return self._config.auth.token_lifetime_minutes

    @property
    def auth_rate_limit_per_minute(self) -> int:
        return self._config.auth.auth_rate_limit_per_minute

    # Import / export
    @property
    def import_max_rows(self) -> int:
        return self._config.import_.max_rows

    @property
    def export_default_basename(self) -> str:
        return self._config.export.default_basename

    # Secrets
    @property
    def secret_key(self) -> str:
        return self._secrets.secret_key or ""


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance, loading it on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance.

    This is primarily useful for testing to reload configuration.
    """
    global _settings
    _settings = None


class _SettingsProxy:
    """Proxy object that lazily loads settings on first access."""

    def __getattr__(self, name: str):
        return getattr(get_settings(), name)

    def __repr__(self) -> str:
        return repr(get_settings())


settings = _SettingsProxy()
