"""HTTP retrieval of podcast feeds."""

import logging
from typing import Optional
from urllib.parse import urljoin

import requests

from ..errors import FeedFetchError

logger = logging.getLogger(__name__)


class FeedFetcher:
    """Fetches raw feed text, following redirects itself.

    Redirects are followed recursively with no hop limit, so a redirect
    loop only ends when a request fails or times out.

    Example:
        fetcher = FeedFetcher()
        xml = fetcher.fetch("https://example.com/feed.xml")
    """

    USER_AGENT = "PodcastUploader/1.0"
    DEFAULT_TIMEOUT = 30

    def __init__(
        self,
        timeout: int = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        user_agent: Optional[str] = None,
    ):
        """Initialize the feed fetcher.

        Args:
            timeout: Per-request timeout in seconds
            session: Optional requests session to reuse
            user_agent: Custom user agent string for requests
        """
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": user_agent or self.USER_AGENT})

    def fetch(self, url: str) -> str:
        """Fetch a feed and return its body as text.

        Args:
            url: Feed URL

        Returns:
            Feed content

        Raises:
            FeedFetchError: On a non-success status, connection error or timeout
        """
        logger.debug(f"Fetching feed: {url}")

        try:
            response = self._session.get(url, timeout=self.timeout, allow_redirects=False)
        except requests.Timeout:
            raise FeedFetchError(f"Feed fetch timeout: {url}")
        except requests.RequestException as e:
            raise FeedFetchError(f"Feed fetch failed for {url}: {e}")

        location = response.headers.get("location")
        if 300 <= response.status_code < 400 and location:
            target = urljoin(url, location)
            logger.debug(f"Following redirect {response.status_code}: {url} -> {target}")
            return self.fetch(target)

        if not 200 <= response.status_code < 300:
            raise FeedFetchError(f"HTTP {response.status_code}: {response.reason}")

        return response.text

    def close(self):
        """Close the underlying HTTP session."""
        self._session.close()
