"""Bizdir configuration module.

This module provides TOML-based configuration with environment variable overrides.

Configuration is loaded from the following locations (in order of priority):
1. Environment variables (highest priority)
2. ./config.toml (project root - for development)
3. ~/.config/bizdir/config.toml (user config)
4. /opt/bizdir/config.toml (production install)
5. /etc/bizdir/config.toml (system config)

Secrets are loaded from secrets.env files in the same directories.
"""

from bizdir.config.schema import (
    AuthConfig,
    BizdirConfig,
    DatabaseConfig,
    ExportConfig,
    ImportConfig,
    SecretsConfig,
    ServerConfig,
    StorageConfig,
)
from bizdir.config.settings import Settings, get_settings, reset_settings, settings

__all__ = [
    "AuthConfig",
    "BizdirConfig",
    "DatabaseConfig",
    "ExportConfig",
    "ImportConfig",
    "SecretsConfig",
    "ServerConfig",
    "Settings",
    "StorageConfig",
    "get_settings",
    "reset_settings",
    "settings",
]
