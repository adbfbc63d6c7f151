"""Download pipeline orchestration.

Resolves the episode list of a work once, then fetches and converts every
episode in order into a single Aozora Bunko text file.
"""

import logging
import re
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager, nullcontext
from datetime import date, datetime
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel

from kakuyomu_dl.aozora import convert_markup, extract_body, format_chapter
from kakuyomu_dl.config.schema import GlobalConfig
from kakuyomu_dl.episodes.models import Episode
from kakuyomu_dl.episodes.resolver import IndexResolver
from kakuyomu_dl.fetcher import PageFetcher
from kakuyomu_dl.listfile import ListEntry
from kakuyomu_dl.output import save_text_file
from kakuyomu_dl.utils.errors import DiscoveryError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, dict[str, Any]], None]

_UNSAFE_FILENAME_RE = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


class ChapterFetcher(Protocol):
    async def fetch(self, url: str) -> str: ...


class DownloadOptions(BaseModel):
    """Options for downloading a single work."""

    url: str
    output_path: Path
    dry_run: bool = False
    since: date | None = None  # Skip episodes published before this date


class DownloadResult(BaseModel):
    """Outcome of downloading a single work."""

    url: str
    output_path: Path
    episode_count: int
    char_count: int
    saved: bool


def parse_update_date(value: str) -> date:
    """Parse ``YY-MM-DD`` or ``YYYY-MM-DD`` into a date.

    Raises:
        ValueError: If the value matches neither format
    """
    for fmt in ("%Y-%m-%d", "%y-%m-%d"):
        try:
            return datetime.strptime(value.strip(), fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Invalid date '{value}', expected YY-MM-DD")


def safe_filename(name: str, default: str = "output") -> str:
    """Make a title usable as a file name."""
    cleaned = _UNSAFE_FILENAME_RE.sub("_", name).strip().strip(".")
    return cleaned or default


def filter_since(episodes: list[Episode], since: date | None) -> list[Episode]:
    """Keep episodes published on or after ``since``; undated episodes are kept."""
    if since is None:
        return episodes
    return [
        ep for ep in episodes if ep.published_date is None or ep.published_date >= since
    ]


class DownloadOrchestrator:
    """Drive discovery, conversion and persistence for one or more works.

    Example:
        >>> orchestrator = DownloadOrchestrator(config)
        >>> result = await orchestrator.run(
        ...     DownloadOptions(url=toc_url, output_path=Path("novel.txt"))
        ... )
    """

    def __init__(
        self,
        config: GlobalConfig,
        resolver: IndexResolver | None = None,
        fetcher: ChapterFetcher | None = None,
        writer: Callable[[Path, str], None] | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            config: Global configuration
            resolver: Episode resolver (default: browser-backed IndexResolver)
            fetcher: Chapter page fetcher (default: a PageFetcher per run)
            writer: Persists the finished text (default: atomic file write)
        """
        self.config = config
        self.resolver = resolver or IndexResolver(config.browser)
        self.fetcher = fetcher
        self.writer = writer or save_text_file

    async def run(
        self,
        options: DownloadOptions,
        progress_callback: ProgressCallback | None = None,
    ) -> DownloadResult:
        """Download one work.

        Args:
            options: What to download and where to write it
            progress_callback: Receives ``(step_name, step_data)`` events

        Returns:
            DownloadResult describing what was written

        Raises:
            DiscoveryError: If no episodes could be resolved
            FetchError: If any chapter page fails to download
        """
        progress = progress_callback or (lambda step, data: None)

        episodes = await self._discover(options.url, progress)
        episodes = filter_since(episodes, options.since)

        if not episodes:
            logger.info(f"No episodes published since {options.since} for {options.url}")
            return DownloadResult(
                url=options.url,
                output_path=options.output_path,
                episode_count=0,
                char_count=0,
                saved=False,
            )

        async with self._fetcher_context() as fetcher:
            text = await self._download_episodes(episodes, fetcher, progress)

        if options.dry_run:
            progress("save_skipped", {"path": str(options.output_path)})
            saved = False
        else:
            self.writer(options.output_path, text)
            progress("save_complete", {"path": str(options.output_path), "chars": len(text)})
            saved = True

        return DownloadResult(
            url=options.url,
            output_path=options.output_path,
            episode_count=len(episodes),
            char_count=len(text),
            saved=saved,
        )

    async def run_batch(
        self,
        entries: list[ListEntry],
        save_dir: Path,
        dry_run: bool = False,
        since: date | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> list[DownloadResult]:
        """Download every work of a crawl list, in list order.

        The first failure aborts the remaining entries.

        Args:
            entries: Parsed list file entries
            save_dir: Directory receiving ``<file_name>.txt`` files
            dry_run: Skip writing files
            since: Date filter; an entry's own ``update`` applies when this is None
            progress_callback: Receives ``(step_name, step_data)`` events
        """
        progress = progress_callback or (lambda step, data: None)
        results = []

        for index, entry in enumerate(entries, start=1):
            if not entry.url:
                logger.warning(f"Skipping '{entry.title}': no url in list entry")
                continue

            progress(
                "target_start",
                {"index": index, "total": len(entries), "title": entry.title},
            )

            file_name = entry.file_name or safe_filename(entry.title)
            options = DownloadOptions(
                url=entry.url,
                output_path=save_dir / f"{file_name}.txt",
                dry_run=dry_run,
                since=since if since is not None else self._entry_since(entry),
            )
            results.append(await self.run(options, progress_callback=progress))

        return results

    async def _discover(self, url: str, progress: ProgressCallback) -> list[Episode]:
        progress("discovery_start", {"url": url})

        try:
            episodes = await self.resolver.resolve(url)
        except Exception as e:
            raise DiscoveryError(f"Episode discovery failed for {url}: {e}") from e

        if not episodes:
            raise DiscoveryError(f"No episode URLs could be resolved from {url}")

        progress("discovery_complete", {"episode_count": len(episodes)})
        return episodes

    async def _download_episodes(
        self,
        episodes: list[Episode],
        fetcher: ChapterFetcher,
        progress: ProgressCallback,
    ) -> str:
        chapters = []
        total = len(episodes)

        for index, episode in enumerate(episodes, start=1):
            page_html = await fetcher.fetch(episode.url)
            body = convert_markup(extract_body(page_html))
            chapters.append(format_chapter(body, episode.title) + "\n")

            logger.debug(f"Converted episode {index}/{total}: {episode.title}")
            progress("episode_complete", {"index": index, "total": total, "title": episode.title})

        return "".join(chapters)

    def _fetcher_context(self) -> AbstractAsyncContextManager[ChapterFetcher]:
        if self.fetcher is not None:
            return nullcontext(self.fetcher)
        return PageFetcher(self.config.http)

    @staticmethod
    def _entry_since(entry: ListEntry) -> date | None:
        if not entry.update:
            return None
        try:
            return parse_update_date(entry.update)
        except ValueError:
            logger.warning(f"Ignoring invalid update date '{entry.update}' for '{entry.title}'")
            return None
