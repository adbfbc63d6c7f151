"""Resolve a Kakuyomu table-of-contents page into its ordered episode list.

Two strategies are tried in order and the first non-empty result wins:

1. Structured state: read the Apollo cache embedded in ``#__NEXT_DATA__``.
2. UI interaction: walk every range tab ("1〜30", "31〜60", ...), press
   "つづきを表示" until it disappears and collect the episode links.
"""

import logging
import re
from collections.abc import Callable, Iterable
from contextlib import AbstractAsyncContextManager
from urllib.parse import urljoin, urlparse

from kakuyomu_dl.config.schema import BrowserConfig
from kakuyomu_dl.episodes.apollo import ApolloStore
from kakuyomu_dl.episodes.browser import BrowserPage, open_playwright_page
from kakuyomu_dl.episodes.models import Episode

logger = logging.getLogger(__name__)

NEXT_DATA_SELECTOR = "#__NEXT_DATA__"
EPISODE_LINK_SELECTOR = 'a[href*="/episodes/"]'
LOAD_MORE_SELECTOR = 'button:has-text("つづきを表示")'
SHARD_LABEL_RE = re.compile(r"\d+〜\d+")

PageFactory = Callable[[BrowserConfig], AbstractAsyncContextManager[BrowserPage]]


def is_absolute_http_url(url: str) -> bool:
    """Check that ``url`` is an absolute http(s) URL with a host."""
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def filter_episodes(episodes: Iterable[Episode]) -> list[Episode]:
    """Drop untitled or non-absolute entries and duplicate URLs, keeping order."""
    seen: set[str] = set()
    result = []
    for episode in episodes:
        if not episode.title or not is_absolute_http_url(episode.url):
            continue
        if episode.url in seen:
            continue
        seen.add(episode.url)
        result.append(episode)
    return result


def episodes_from_store(store: ApolloStore, toc_url: str) -> list[Episode]:
    """Build the episode list from an Apollo cache.

    Episodes are sorted by ``publishedAt`` only when every retained record
    carries one; otherwise store order is kept.
    """
    work = store.work()
    work_id = work.id if work else ""
    base = toc_url.rstrip("/")

    episodes = []
    for record in store.episodes():
        owner_id = store.work_id_for(record, default=work_id)
        url = f"{base}/episodes/{record.id}" if owner_id else ""
        if not record.title or not url:
            continue
        episodes.append(
            Episode(title=record.title, url=url, published_at=record.published_at)
        )

    if episodes and all(ep.published_at for ep in episodes):
        episodes.sort(key=lambda ep: ep.published_at or "")

    return episodes


class IndexResolver:
    """Turn a table-of-contents URL into a deduplicated episode list.

    Example:
        >>> resolver = IndexResolver(BrowserConfig())
        >>> episodes = await resolver.resolve("https://kakuyomu.jp/works/1177354054")
    """

    def __init__(
        self,
        config: BrowserConfig | None = None,
        page_factory: PageFactory | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            config: Browser automation settings
            page_factory: Opens a ``BrowserPage`` (default: Playwright chromium)
        """
        self.config = config or BrowserConfig()
        self.page_factory = page_factory or open_playwright_page

    async def resolve(self, toc_url: str) -> list[Episode]:
        """Resolve all episodes of a work.

        Args:
            toc_url: Table-of-contents URL of the work

        Returns:
            Ordered, deduplicated episodes; empty if nothing could be found
        """
        async with self.page_factory(self.config) as page:
            await page.goto(toc_url)

            episodes = await self._from_structured_state(page, toc_url)
            if episodes:
                logger.info(f"Resolved {len(episodes)} episodes from embedded state")
                return episodes

            logger.info("Embedded state unavailable, falling back to page interaction")
            episodes = filter_episodes(await self._from_page_interaction(page, toc_url))
            logger.info(f"Resolved {len(episodes)} episodes from page interaction")
            return episodes

    async def _from_structured_state(self, page: BrowserPage, toc_url: str) -> list[Episode]:
        raw = await page.text_of(NEXT_DATA_SELECTOR)
        if not raw:
            logger.debug(f"No {NEXT_DATA_SELECTOR} element on {toc_url}")
            return []

        try:
            store = ApolloStore.from_next_data(raw)
            return filter_episodes(episodes_from_store(store, toc_url))
        except (ValueError, AttributeError) as e:
            logger.debug(f"Could not read embedded state: {e}")
            return []

    async def _from_page_interaction(self, page: BrowserPage, toc_url: str) -> list[Episode]:
        shard_urls = await self._discover_shards(page, toc_url)
        logger.debug(f"Walking {len(shard_urls)} table-of-contents tab(s)")

        episodes: list[Episode] = []
        seen: set[str] = set()

        for shard_url in shard_urls:
            await page.goto(shard_url)
            await self._expand_all(page)

            for link in await page.query_links(EPISODE_LINK_SELECTOR):
                title = link.text.strip()
                url = urljoin(page.url, link.href)
                # Untitled anchors (icons, "next" buttons) must not claim the URL first
                if not title or not link.href or url in seen:
                    continue
                seen.add(url)
                episodes.append(Episode(title=title, url=url))

        return episodes

    async def _discover_shards(self, page: BrowserPage, toc_url: str) -> list[str]:
        shard_urls = [toc_url]
        for link in await page.query_links("a"):
            if not link.href or not SHARD_LABEL_RE.search(link.text):
                continue
            url = urljoin(page.url, link.href)
            if url not in shard_urls:
                shard_urls.append(url)
        return shard_urls

    async def _expand_all(self, page: BrowserPage) -> None:
        for _ in range(self.config.max_load_more_clicks):
            if not await page.click_if_present(LOAD_MORE_SELECTOR):
                return
            await page.wait(self.config.load_more_delay_ms)

        logger.warning(
            f"Load-more button still present after {self.config.max_load_more_clicks} "
            f"clicks on {page.url}; episode list may be incomplete"
        )
