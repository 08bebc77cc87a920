"""Downloads episode assets and artwork into scratch storage.

Files are streamed to disk in chunks; large downloads log progress
periodically.
"""

import logging
import os
import secrets
import time
from typing import Optional
from urllib.parse import unquote, urlparse

import requests

from ..errors import DownloadError

logger = logging.getLogger(__name__)

# Log progress only for downloads larger than this
PROGRESS_MIN_BYTES = 10 * 1024 * 1024
PROGRESS_INTERVAL_SECONDS = 10


def url_extension(url: str, default: str) -> str:
    """File extension of a URL's path, or ``default`` when it has none."""
    path = unquote(urlparse(url).path)
    _, ext = os.path.splitext(os.path.basename(path))
    return ext or default


def scratch_filename(url: str, default_ext: str = ".mp3", label: Optional[str] = None) -> str:
    """Unique scratch file name: ``<epoch-ms>_<label or random hex><ext>``."""
    stamp = int(time.time() * 1000)
    suffix = label or secrets.token_hex(4)
    return f"{stamp}_{suffix}{url_extension(url, default_ext)}"


class AssetDownloader:
    """Downloads a URL to a local file.

    Example:
        downloader = AssetDownloader(timeout=600)
        size = downloader.download(episode.enclosure_url, "/tmp/work/ep.mp3")
    """

    DEFAULT_USER_AGENT = "PodcastUploader/1.0"
    DEFAULT_CHUNK_SIZE = 8192
    DEFAULT_TIMEOUT = 600  # 10 minutes

    def __init__(
        self,
        timeout: int = DEFAULT_TIMEOUT,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the downloader.

        Args:
            timeout: Download timeout in seconds
            chunk_size: Chunk size for streaming downloads
            user_agent: Custom user agent string
            session: Optional requests session to reuse
        """
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.user_agent = user_agent or self.DEFAULT_USER_AGENT
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self.user_agent})

    def download(self, url: str, output_path: str, show_progress: bool = True) -> int:
        """Download a file.

        Args:
            url: URL to download
            output_path: Path to save file
            show_progress: Log progress for large files

        Returns:
            Number of bytes written

        Raises:
            DownloadError: On a non-success status, connection error or timeout
        """
        try:
            response = self._session.get(
                url,
                stream=True,
                timeout=self.timeout,
                allow_redirects=True,
            )
        except requests.Timeout:
            raise DownloadError(f"Download timeout: {url}")
        except requests.RequestException as e:
            raise DownloadError(f"Download failed for {url}: {e}")

        try:
            if response.status_code != 200:
                raise DownloadError(f"Download failed: HTTP {response.status_code}")

            total_size = 0
            if "content-length" in response.headers:
                try:
                    total_size = int(response.headers["content-length"])
                except ValueError:
                    pass

            downloaded = 0
            last_log = time.monotonic()
            with open(output_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if not chunk:
                        continue
                    f.write(chunk)
                    downloaded += len(chunk)

                    if show_progress and total_size > PROGRESS_MIN_BYTES:
                        now = time.monotonic()
                        if now - last_log > PROGRESS_INTERVAL_SECONDS:
                            logger.info(
                                f"Download progress: {downloaded / total_size * 100:.1f}% "
                                f"({downloaded / 1024 / 1024:.1f}MB)"
                            )
                            last_log = now
        except requests.RequestException as e:
            raise DownloadError(f"Download interrupted for {url}: {e}")
        finally:
            response.close()

        return downloaded

    def close(self):
        """Close the downloader and release resources."""
        self._session.close()
