"""Tests for configuration manager."""

import tempfile
from pathlib import Path

import pytest  # type: ignore[import-not-found]
import yaml  # type: ignore[import-untyped]

from work_hours.core.config import CONFIG_ENV_VAR, ConfigManager, default_config_path


@pytest.fixture
def temp_config_path():
    """Create a temporary config file path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "config.yml"


class TestConfigManager:
    """Test ConfigManager."""

    def test_initialization_creates_default_config(self, temp_config_path: Path) -> None:
        """Test that initialization creates default configuration."""
        assert not temp_config_path.exists()

        config = ConfigManager(temp_config_path)

        assert temp_config_path.exists()
        assert config.get("version") == "1.0"
        assert config.get("general.data_dir") == "~/.work-hours/data"
        assert config.get("general.user_id") == "local"
        assert config.get("export.locale") == "en"
        assert config.get("api.enabled") is False

    def test_load_existing_config(self, temp_config_path: Path) -> None:
        """Test loading existing configuration."""
        config_data = {
            "version": "1.0",
            "general": {"data_dir": "/custom/path", "user_id": "alice"},
            "export": {"locale": "he", "currency_symbol": "$"},
        }
        with open(temp_config_path, "w") as f:
            yaml.dump(config_data, f)

        config = ConfigManager(temp_config_path)

        assert config.get("general.data_dir") == "/custom/path"
        assert config.get("general.user_id") == "alice"
        assert config.get("export.locale") == "he"
        assert config.get("export.currency_symbol") == "$"

    def test_merge_with_defaults(self, temp_config_path: Path) -> None:
        """Test that partial config is merged with defaults."""
        with open(temp_config_path, "w") as f:
            yaml.dump({"version": "1.0", "export": {"locale": "he"}}, f)

        config = ConfigManager(temp_config_path)

        assert config.get("export.locale") == "he"
        assert config.get("export.default_format") == "excel"
        assert config.get("general.time_format") == "%H:%M"

    def test_get_nonexistent_key_returns_default(self, temp_config_path: Path) -> None:
        """Test getting nonexistent key returns default."""
        config = ConfigManager(temp_config_path)

        assert config.get("nonexistent.key") is None
        assert config.get("nonexistent.key", "default") == "default"
        assert config.get("general.nonexistent", 42) == 42

    def test_set_value_is_persisted(self, temp_config_path: Path) -> None:
        """Test setting configuration values."""
        config = ConfigManager(temp_config_path)

        config.set("api.port", 8080)

        assert config.get("api.port") == 8080
        assert ConfigManager(temp_config_path).get("api.port") == 8080

    def test_set_creates_missing_keys(self, temp_config_path: Path) -> None:
        """Test that set creates missing intermediate keys."""
        config = ConfigManager(temp_config_path)

        config.set("custom.nested.value", "test")

        assert config.get("custom.nested.value") == "test"

    def test_validate_valid_config(self, temp_config_path: Path) -> None:
        """Test validation of valid configuration."""
        assert ConfigManager(temp_config_path).validate() is True

    def test_invalid_value_is_rolled_back(self, temp_config_path: Path) -> None:
        """Test that an invalid value raises and leaves config unchanged."""
        config = ConfigManager(temp_config_path)

        with pytest.raises(ValueError, match="Invalid configuration"):
            config.set("api.port", 70000)

        assert config.get("api.port") == 8000
        assert ConfigManager(temp_config_path).get("api.port") == 8000

    def test_invalid_enum_value(self, temp_config_path: Path) -> None:
        """Test that invalid enum value raises ValueError."""
        config = ConfigManager(temp_config_path)

        with pytest.raises(ValueError, match="Invalid configuration"):
            config.set("export.locale", "fr")

        assert config.get("export.locale") == "en"

    def test_empty_user_id_is_invalid(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)

        with pytest.raises(ValueError):
            config.set("general.user_id", "")

    def test_invalid_file_is_backed_up(self, temp_config_path: Path) -> None:
        """Test that a config file failing validation is replaced by defaults."""
        with open(temp_config_path, "w") as f:
            yaml.dump({"version": "1.0", "api": {"port": "not-a-port"}}, f)

        with pytest.raises(ValueError, match="backed up"):
            ConfigManager(temp_config_path)

        assert temp_config_path.with_suffix(".yml.backup").exists()
        assert ConfigManager(temp_config_path).get("api.port") == 8000

    def test_reset_to_defaults(self, temp_config_path: Path) -> None:
        """Test resetting configuration to defaults."""
        config = ConfigManager(temp_config_path)
        config.set("export.locale", "he")

        config.reset()

        assert config.get("export.locale") == "en"

    def test_get_all_keys(self, temp_config_path: Path) -> None:
        keys = ConfigManager(temp_config_path).get_all_keys()

        assert "general.user_id" in keys
        assert "api.authentication.token_expiry_hours" in keys
        assert "general" not in keys

    def test_data_dir_is_expanded(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)

        assert config.data_dir == Path.home() / ".work-hours" / "data"

    def test_ensure_api_secret_key(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)
        assert config.get("api.authentication.secret_key") is None

        key = config.ensure_api_secret_key()

        assert key
        assert config.ensure_api_secret_key() == key
        assert ConfigManager(temp_config_path).get("api.authentication.secret_key") == key

    def test_unicode_values_survive_save(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)
        config.set("export.currency_symbol", "₪")

        assert ConfigManager(temp_config_path).get("export.currency_symbol") == "₪"

    def test_save_leaves_only_config_file(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)
        config.set("general.user_id", "alice")
        config.set("api.port", 9000)

        assert [p.name for p in temp_config_path.parent.iterdir()] == ["config.yml"]

    def test_schema_rejects_wrong_type(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)

        with pytest.raises(ValueError, match="Invalid configuration"):
            config.set("display.show_seconds", "sometimes")
        assert config.get("display.show_seconds") is True


class TestConfigLocation:
    """The settings file location can be overridden from the environment."""

    def test_env_var_overrides_default_path(
        self, temp_config_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(CONFIG_ENV_VAR, str(temp_config_path))

        config = ConfigManager()

        assert default_config_path() == temp_config_path
        assert config.config_path == temp_config_path
        assert temp_config_path.exists()

    def test_default_path_without_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)

        assert default_config_path() == Path.home() / ".work-hours" / "config.yml"
