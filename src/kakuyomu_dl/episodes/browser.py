"""Browser automation capability used for table-of-contents discovery.

The resolver only talks to the narrow ``BrowserPage`` protocol so it can be
driven by a fake page in tests. ``open_playwright_page`` supplies the real
implementation backed by Playwright's async API.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Protocol

from playwright.async_api import Page, async_playwright
from pydantic import BaseModel

from kakuyomu_dl.config.schema import BrowserConfig

logger = logging.getLogger(__name__)


class Link(BaseModel):
    """An anchor found on a page."""

    text: str
    href: str  # Raw href attribute, may be relative


class BrowserPage(Protocol):
    """Minimal page-automation surface needed by the resolver."""

    @property
    def url(self) -> str: ...

    async def goto(self, url: str) -> None: ...

    async def text_of(self, selector: str) -> str | None: ...

    async def query_links(self, selector: str) -> list[Link]: ...

    async def click_if_present(self, selector: str) -> bool: ...

    async def wait(self, milliseconds: int) -> None: ...


class PlaywrightPage:
    """``BrowserPage`` implementation wrapping a Playwright page."""

    def __init__(self, page: Page, navigation_timeout_ms: int = 30_000) -> None:
        self._page = page
        self._navigation_timeout_ms = navigation_timeout_ms

    @property
    def url(self) -> str:
        return self._page.url

    async def goto(self, url: str) -> None:
        logger.debug(f"Navigating to {url}")
        await self._page.goto(
            url, wait_until="domcontentloaded", timeout=self._navigation_timeout_ms
        )

    async def text_of(self, selector: str) -> str | None:
        element = await self._page.query_selector(selector)
        if element is None:
            return None
        return await element.text_content()

    async def query_links(self, selector: str) -> list[Link]:
        raw = await self._page.eval_on_selector_all(
            selector,
            """els => els.map(el => ({
                text: el.textContent || '',
                href: el.getAttribute('href') || ''
            }))""",
        )
        return [Link(**item) for item in raw]

    async def click_if_present(self, selector: str) -> bool:
        element = await self._page.query_selector(selector)
        if element is None:
            return False
        await element.click()
        return True

    async def wait(self, milliseconds: int) -> None:
        await self._page.wait_for_timeout(milliseconds)


@asynccontextmanager
async def open_playwright_page(config: BrowserConfig) -> AsyncIterator[BrowserPage]:
    """Launch chromium and yield a single page, closing the browser afterwards."""
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=config.headless)
        try:
            page = await browser.new_page()
            yield PlaywrightPage(page, navigation_timeout_ms=config.navigation_timeout_ms)
        finally:
            await browser.close()
