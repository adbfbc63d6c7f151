"""Filesystem locations for kakuyomu-dl."""

from pathlib import Path

import platformdirs

APP_NAME = "kakuyomu-dl"


def get_config_dir() -> Path:
    """Get the user configuration directory."""
    return Path(platformdirs.user_config_dir(APP_NAME))


def get_config_file() -> Path:
    """Get the path of the global config file."""
    return get_config_dir() / "config.yaml"
