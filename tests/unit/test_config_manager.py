"""Tests for ConfigManager."""

from pathlib import Path

import pytest
import yaml

from kakuyomu_dl.config.manager import ConfigManager
from kakuyomu_dl.config.schema import GlobalConfig
from kakuyomu_dl.utils.errors import InvalidConfigError


class TestConfigManager:
    """Tests for ConfigManager class."""

    def test_init_with_custom_dir(self, tmp_path: Path) -> None:
        """Test ConfigManager initialization with custom directory."""
        manager = ConfigManager(config_dir=tmp_path)
        assert manager.config_dir == tmp_path
        assert manager.config_file == tmp_path / "config.yaml"

    def test_load_config_creates_default_if_missing(self, tmp_path: Path) -> None:
        """Test that load_config creates default config if file doesn't exist."""
        manager = ConfigManager(config_dir=tmp_path)
        config = manager.load_config()

        assert isinstance(config, GlobalConfig)
        assert manager.config_file.exists()

        # The generated file is itself loadable
        assert ConfigManager(config_dir=tmp_path).load_config() == config

    def test_load_config_without_creating_default(self, tmp_path: Path) -> None:
        """Test defaults are returned without writing a file when asked not to."""
        manager = ConfigManager(config_dir=tmp_path / "config")
        config = manager.load_config(create_default=False)

        assert config == GlobalConfig()
        assert not manager.config_file.exists()
        assert not manager.config_dir.exists()

    def test_load_config_from_existing_file(self, tmp_path: Path, sample_config_dict: dict) -> None:
        """Test loading config from existing file."""
        with open(tmp_path / "config.yaml", "w") as f:
            yaml.safe_dump(sample_config_dict, f)

        config = ConfigManager(config_dir=tmp_path).load_config()

        assert config.save_dir == Path("~/novels")
        assert config.http.timeout_seconds == 10
        assert config.browser.load_more_delay_ms == 250
        assert config.browser.max_load_more_clicks == 200

    def test_load_invalid_yaml_raises(self, tmp_path: Path) -> None:
        """Test malformed YAML raises InvalidConfigError."""
        (tmp_path / "config.yaml").write_text("browser: [unclosed")

        with pytest.raises(InvalidConfigError):
            ConfigManager(config_dir=tmp_path).load_config()

    def test_load_invalid_values_raises(self, tmp_path: Path) -> None:
        """Test values failing validation raise InvalidConfigError."""
        (tmp_path / "config.yaml").write_text("log_level: LOUD\n")

        with pytest.raises(InvalidConfigError, match="Invalid configuration"):
            ConfigManager(config_dir=tmp_path).load_config()

    def test_save_config(self, tmp_path: Path) -> None:
        """Test saving configuration."""
        manager = ConfigManager(config_dir=tmp_path)
        manager.save_config(GlobalConfig(log_level="DEBUG", save_dir=Path("/tmp/novels")))

        with open(manager.config_file) as f:
            data = yaml.safe_load(f)
        assert data["log_level"] == "DEBUG"
        assert data["save_dir"] == "/tmp/novels"

    def test_set_value_nested(self, tmp_path: Path) -> None:
        """Test setting a dotted key converts and persists the value."""
        manager = ConfigManager(config_dir=tmp_path)

        updated = manager.set_value("browser.load_more_delay_ms", "800")

        assert updated.browser.load_more_delay_ms == 800
        assert manager.load_config().browser.load_more_delay_ms == 800

    def test_set_value_bool(self, tmp_path: Path) -> None:
        """Test boolean strings are accepted."""
        manager = ConfigManager(config_dir=tmp_path)
        assert manager.set_value("browser.headless", "false").browser.headless is False

    @pytest.mark.parametrize("key", ["nope", "browser.nope", "browser", "http.user_agent.x"])
    def test_set_value_unknown_key(self, tmp_path: Path, key: str) -> None:
        """Test unknown keys are rejected."""
        with pytest.raises(InvalidConfigError, match="Unknown config key"):
            ConfigManager(config_dir=tmp_path).set_value(key, "1")

    def test_set_value_invalid(self, tmp_path: Path) -> None:
        """Test values failing validation are rejected and not saved."""
        manager = ConfigManager(config_dir=tmp_path)

        with pytest.raises(InvalidConfigError, match="Invalid value"):
            manager.set_value("browser.max_load_more_clicks", "0")

        assert manager.load_config().browser.max_load_more_clicks == 200
