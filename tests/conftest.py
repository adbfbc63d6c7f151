"""Shared fixtures for kakuyomu-dl tests."""

import json
from typing import Any

import pytest

from kakuyomu_dl.config.schema import BrowserConfig, GlobalConfig

TOC_URL = "https://kakuyomu.jp/works/1177354054881234567"


@pytest.fixture
def toc_url() -> str:
    """Table-of-contents URL used across tests."""
    return TOC_URL


@pytest.fixture
def sample_config_dict() -> dict[str, Any]:
    """A valid config.yaml payload."""
    return {
        "version": "1",
        "save_dir": "~/novels",
        "log_level": "INFO",
        "http": {"user_agent": "Mozilla/5.0", "timeout_seconds": 10},
        "browser": {"headless": True, "load_more_delay_ms": 250},
    }


@pytest.fixture
def fast_config() -> GlobalConfig:
    """Config with short browser delays."""
    return GlobalConfig(
        browser=BrowserConfig(load_more_delay_ms=1, max_load_more_clicks=5),
    )


@pytest.fixture
def make_next_data():
    """Build ``#__NEXT_DATA__`` text around an Apollo state dict."""

    def _make(state: dict[str, Any]) -> str:
        return json.dumps(
            {"props": {"pageProps": {"__APOLLO_STATE__": state}}, "page": "/works/[workId]"},
            ensure_ascii=False,
        )

    return _make


@pytest.fixture
def make_chapter_page():
    """Build a chapter page with the given body markup."""

    def _make(body: str, title: str = "第1話") -> str:
        return (
            "<html><head><title>" + title + "</title></head><body>"
            '<header class="widget-episodeTitle">' + title + "</header>"
            '<div class="widget-episodeBody js-episode-body">' + body + "</div>"
            "</body></html>"
        )

    return _make
