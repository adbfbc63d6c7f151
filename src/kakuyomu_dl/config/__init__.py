"""Configuration management for kakuyomu-dl."""

from kakuyomu_dl.config.manager import ConfigManager
from kakuyomu_dl.config.schema import BrowserConfig, GlobalConfig, HttpConfig

__all__ = ["ConfigManager", "GlobalConfig", "BrowserConfig", "HttpConfig"]
