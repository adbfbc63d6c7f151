"""Episode discovery for Kakuyomu works."""

from kakuyomu_dl.episodes.browser import BrowserPage, Link, open_playwright_page
from kakuyomu_dl.episodes.models import Episode
from kakuyomu_dl.episodes.resolver import IndexResolver, filter_episodes

__all__ = [
    "Episode",
    "IndexResolver",
    "filter_episodes",
    "BrowserPage",
    "Link",
    "open_playwright_page",
]
