"""Configuration schema models using Pydantic."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class HttpConfig(BaseModel):
    """Chapter page fetch configuration."""

    user_agent: str = "Mozilla/5.0"
    timeout_seconds: float = Field(default=30.0, gt=0)


class BrowserConfig(BaseModel):
    """Browser automation configuration for table-of-contents discovery."""

    headless: bool = True
    navigation_timeout_ms: int = Field(default=30_000, gt=0)
    load_more_delay_ms: int = Field(default=500, ge=0)
    max_load_more_clicks: int = Field(default=200, ge=1)  # Guards against pages that never settle


class GlobalConfig(BaseModel):
    """Global kakuyomu-dl configuration."""

    version: str = "1"
    save_dir: Path = Field(default=Path("."))
    log_level: LogLevel = "WARNING"  # Console level when --verbose is not given

    http: HttpConfig = Field(default_factory=HttpConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
