"""Configuration manager for loading and saving kakuyomu-dl config."""

from pathlib import Path

import yaml
from pydantic import ValidationError

from kakuyomu_dl.config.defaults import DEFAULT_GLOBAL_CONFIG, get_default_config_content
from kakuyomu_dl.config.schema import GlobalConfig
from kakuyomu_dl.utils.errors import InvalidConfigError
from kakuyomu_dl.utils.paths import get_config_dir, get_config_file


class ConfigManager:
    """Manages the kakuyomu-dl configuration file."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize the config manager.

        Args:
            config_dir: Optional custom config directory. Defaults to the platform config dir.
        """
        if config_dir is None:
            self.config_dir = get_config_dir()
            self.config_file = get_config_file()
        else:
            self.config_dir = config_dir
            self.config_file = config_dir / "config.yaml"

    def load_config(self, create_default: bool = True) -> GlobalConfig:
        """Load and validate global configuration.

        Args:
            create_default: Write the default config file when none exists

        Returns:
            Validated GlobalConfig instance

        Raises:
            InvalidConfigError: If config is invalid
        """
        if not self.config_file.exists():
            if create_default:
                self._create_default_config()
            return DEFAULT_GLOBAL_CONFIG.model_copy(deep=True)

        try:
            with open(self.config_file, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            return GlobalConfig(**data)
        except (yaml.YAMLError, ValidationError, TypeError) as e:
            raise InvalidConfigError(
                f"Invalid configuration in {self.config_file}: {e}"
            ) from e

    def save_config(self, config: GlobalConfig) -> None:
        """Save global configuration.

        Args:
            config: GlobalConfig instance to save
        """
        data = config.model_dump(mode="json")

        self.config_dir.mkdir(parents=True, exist_ok=True)

        with open(self.config_file, "w", encoding="utf-8") as f:
            yaml.safe_dump(
                data, f, default_flow_style=False, sort_keys=False, allow_unicode=True
            )

    def set_value(self, key: str, value: str) -> GlobalConfig:
        """Set a single config value using a dotted key such as ``browser.headless``.

        Raises:
            InvalidConfigError: If the key is unknown or the value fails validation
        """
        config = self.load_config()
        data = config.model_dump(mode="json")

        *parents, leaf = key.split(".")
        target = data
        for part in parents:
            if not isinstance(target.get(part), dict):
                raise InvalidConfigError(f"Unknown config key: {key}")
            target = target[part]

        if leaf not in target or isinstance(target[leaf], dict):
            raise InvalidConfigError(f"Unknown config key: {key}")

        target[leaf] = value

        try:
            updated = GlobalConfig(**data)
        except ValidationError as e:
            raise InvalidConfigError(f"Invalid value for {key}: {value}") from e

        self.save_config(updated)
        return updated

    def _create_default_config(self) -> None:
        """Create default config.yaml file."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(get_default_config_content(), encoding="utf-8")
