"""Chapter page fetching over HTTP."""

import logging
from types import TracebackType

import httpx

from kakuyomu_dl.config.schema import HttpConfig
from kakuyomu_dl.utils.errors import FetchError

logger = logging.getLogger(__name__)


class PageFetcher:
    """Fetch HTML pages with a fixed client signature.

    Use as an async context manager so the underlying connection pool is
    closed when the run ends:

        >>> async with PageFetcher(HttpConfig()) as fetcher:
        ...     html = await fetcher.fetch("https://kakuyomu.jp/works/1/episodes/2")
    """

    def __init__(
        self,
        config: HttpConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            config: HTTP settings (user agent, timeout)
            transport: Optional transport override, used by tests
        """
        self.config = config or HttpConfig()
        self._client = httpx.AsyncClient(
            headers={"User-Agent": self.config.user_agent},
            timeout=self.config.timeout_seconds,
            follow_redirects=True,
            transport=transport,
        )

    async def fetch(self, url: str) -> str:
        """Fetch a page and return its decoded body.

        Raises:
            FetchError: On a non-2xx status or a transport failure
        """
        logger.debug(f"GET {url}")
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            raise FetchError(None, url, f"Request failed: {url}: {e}") from e

        if not response.is_success:
            raise FetchError(response.status_code, url)

        return response.text

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "PageFetcher":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
