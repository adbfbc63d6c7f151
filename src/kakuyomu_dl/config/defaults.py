"""Default configuration values."""

import yaml

from kakuyomu_dl.config.schema import GlobalConfig

DEFAULT_GLOBAL_CONFIG = GlobalConfig()


def get_default_config_content() -> str:
    """Render the default config.yaml content."""
    data = DEFAULT_GLOBAL_CONFIG.model_dump(mode="json")
    header = "# kakuyomu-dl configuration\n"
    return header + yaml.safe_dump(
        data, default_flow_style=False, sort_keys=False, allow_unicode=True
    )
