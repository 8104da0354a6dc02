"""Tests for the Bizdir configuration system."""

import os
from pathlib import Path
from unittest.mock import patch

from bizdir.config.loader import (
    apply_env_overrides,
    find_config_file,
    get_config_search_paths,
    get_secrets_search_paths,
    load_config,
    load_secrets,
    load_toml_file,
    parse_env_file,
)
from bizdir.config.schema import (
    AuthConfig,
    BizdirConfig,
    DatabaseConfig,
    ImportConfig,
    SecretsConfig,
    ServerConfig,
    StorageConfig,
)
from bizdir.config.settings import Settings, get_settings, reset_settings


class TestSchemaDefaults:
    """Test default values in schema models."""

    def test_server_config_defaults(self):
        config = ServerConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 8000
        assert config.enforce_https is False
        assert config.cors_origins == []

    def test_database_config_defaults(self):
        """An unset URL means the directory stays in memory."""
        config = DatabaseConfig()
        assert config.mongodb_url is None
        assert config.configured is False
        assert config.disabled is False
        assert config.mongodb_database == "bizdir"

    def test_storage_config_defaults(self):
        config = StorageConfig()
        assert config.data_dir == Path("data")
        assert config.max_upload_mb == 10
        assert config.max_upload_bytes == 10 * 1024 * 1024

    def test_auth_config_defaults(self):
        config = AuthConfig()
        assert config.enabled is True
        assert config.token_lifetime_minutes == 120

    def test_bizdir_config_defaults(self):
        config = BizdirConfig()
        assert config.app_name == "Bizdir"
        assert isinstance(config.import_, ImportConfig)
        assert config.import_.max_rows == 5000
        assert config.export.default_basename == "businesses"

    def test_import_section_by_keyword_name(self):
        config = BizdirConfig(**{"import": {"max_rows": 10}})
        assert config.import_.max_rows == 10


class TestConfigSearchPaths:
    """Test configuration file search paths."""

    def test_config_search_paths_order(self):
        paths = get_config_search_paths()
        assert paths == [
            Path.cwd() / "config.toml",
            Path.home() / ".config" / "bizdir" / "config.toml",
            Path("/opt/bizdir/config.toml"),
            Path("/etc/bizdir/config.toml"),
        ]

    def test_secrets_search_paths_order(self):
        paths = get_secrets_search_paths()
        assert len(paths) == 4
        assert paths[0] == Path.cwd() / "secrets.env"
        assert paths[-1] == Path("/etc/bizdir/secrets.env")

    def test_find_config_file_in_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "config.toml").write_text('app_name = "Here"\n')
        assert find_config_file() == tmp_path / "config.toml"


class TestTomlLoading:
    """Test TOML file loading."""

    def test_load_toml_file(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text(
            """
app_name = "TestApp"

[server]
port = 9000

[database]
mongodb_url = "mongodb://testhost:27017"
"""
        )

        data = load_toml_file(config_file)
        assert data["app_name"] == "TestApp"
        assert data["server"]["port"] == 9000
        assert data["database"]["mongodb_url"] == "mongodb://testhost:27017"

    def test_load_config_from_file(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text(
            """
[database]
mongodb_url = "mongodb://db:27017"
disabled = true

[import]
max_rows = 250

[export]
default_basename = "adressen"
"""
        )

        config = load_config(config_file)
        assert config.database.configured is True
        assert config.database.disabled is True
        assert config.import_.max_rows == 250
        assert config.export.default_basename == "adressen"
        # Defaults should still apply
        assert config.server.host == "127.0.0.1"


class TestEnvFileParsing:
    """Test .env file parsing."""

    def test_parse_env_file(self, tmp_path):
        env_file = tmp_path / "secrets.env"
        env_file.write_text(
            """
# This is a comment
KEY1="double quoted value"
KEY2='single quoted value'

KEY3=unquoted value
not a pair
"""
        )

        result = parse_env_file(env_file)
        assert result == {
            "KEY1": "double quoted value",
            "KEY2": "single quoted value",
            "KEY3": "unquoted value",
        }


class TestEnvOverrides:
    """Test environment variable overrides."""

    def test_apply_database_overrides(self):
        config_dict = {}

        with patch.dict(
            os.environ,
            {
                "BIZDIR_MONGODB_URL": "mongodb://custom:27017",
                "BIZDIR_DATABASE_DISABLED": "yes",
                "BIZDIR_DATABASE_TIMEOUT_MS": "250",
            },
        ):
            apply_env_overrides(config_dict)

        assert config_dict["database"] == {
            "mongodb_url": "mongodb://custom:27017",
            "disabled": True,
            "server_selection_timeout_ms": 250,
        }

    def test_apply_import_and_auth_overrides(self):
        config_dict = {"auth": {"enabled": True}}

        with patch.dict(
            os.environ,
            {"BIZDIR_IMPORT_MAX_ROWS": "42", "BIZDIR_AUTH_ENABLED": "false"},
        ):
            apply_env_overrides(config_dict)

        config = BizdirConfig(**config_dict)
        assert config.import_.max_rows == 42
        assert config.auth.enabled is False

    def test_env_overrides_file_values(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text('[server]\nport = 5000\n')

        with patch.dict(os.environ, {"BIZDIR_PORT": "6000"}):
            config = load_config(config_file)

        assert config.server.port == 6000

    def test_server_section_has_no_unused_keys(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text('[server]\nport = 5000\nworkers = 4\ndebug = true\n')

        with patch.dict(os.environ, {"BIZDIR_DEBUG": "true", "BIZDIR_SERVER_WORKERS": "8"}):
            config = load_config(config_file)

        assert config.server.port == 5000
        assert set(config.server.model_dump()) == {
            "host",
            "port",
            "enforce_https",
            "cors_origins",
        }


class TestSecretsLoading:
    """Test secrets loading."""

    def test_load_secrets_from_file(self, tmp_path):
        secrets_file = tmp_path / "secrets.env"
        secrets_file.write_text("BIZDIR_SECRET_KEY=file-secret-key\n")

        with patch.dict(os.environ, {"BIZDIR_SECRET_KEY": ""}):
            secrets = load_secrets(secrets_file)

        assert secrets.secret_key == "file-secret-key"

    def test_load_secrets_env_override(self, tmp_path):
        secrets_file = tmp_path / "secrets.env"
        secrets_file.write_text("BIZDIR_SECRET_KEY=file-secret-key\n")

        with patch.dict(os.environ, {"BIZDIR_SECRET_KEY": "env-secret-key"}):
            secrets = load_secrets(secrets_file)

        assert secrets.secret_key == "env-secret-key"


class TestSettings:
    """Test the Settings class."""

    def setup_method(self):
        reset_settings()

    def teardown_method(self):
        reset_settings()

    def test_settings_generates_secret_key(self):
        settings = Settings(config=BizdirConfig(), secrets=SecretsConfig())
        assert len(settings.secret_key) > 20

    def test_settings_property_accessors(self):
        config = BizdirConfig(
            app_name="TestApp",
            server=ServerConfig(port=9000),
            database=DatabaseConfig(mongodb_url="mongodb://db:27017", mongodb_database="testdb"),
        )
        settings = Settings(config=config, secrets=SecretsConfig(secret_key="test-key"))

        assert settings.app_name == "TestApp"
        assert settings.port == 9000
        assert settings.database_configured is True
        assert settings.mongodb_database == "testdb"
        assert settings.secret_key == "test-key"
        assert settings.import_max_rows == 5000
        assert settings.max_upload_size_bytes == 10 * 1024 * 1024

    def test_get_settings_singleton(self):
        assert get_settings() is get_settings()

    def test_reset_settings_clears_cache(self):
        s1 = get_settings()
        reset_settings()
        assert get_settings() is not s1
