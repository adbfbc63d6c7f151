"""Utility functions and helpers for kakuyomu-dl."""

from kakuyomu_dl.utils.errors import (
    ConfigError,
    DiscoveryError,
    FetchError,
    InvalidConfigError,
    KakuyomuDLError,
    ListFileError,
    NetworkError,
)
from kakuyomu_dl.utils.paths import get_config_dir, get_config_file

__all__ = [
    # Errors
    "KakuyomuDLError",
    "ConfigError",
    "InvalidConfigError",
    "DiscoveryError",
    "NetworkError",
    "FetchError",
    "ListFileError",
    # Paths
    "get_config_dir",
    "get_config_file",
]
