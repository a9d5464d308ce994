"""
Marketplace download client.

Fetches plugin archives over HTTP so they can be passed to
PluginRegistry.install(). Browsing and searching the marketplace API is
left to the interactive front end.
"""

import logging
import tempfile
from pathlib import Path

import httpx

from shellpack.errors import FileOperationFailed, NetworkFailed, ShellpackError
from shellpack.fileio import create_dir
from shellpack.plugin.archive import cleanup
from shellpack.recovery import DEFAULT_POLICY, RetryPolicy, with_recovery

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://market-api.yshsr.org"
DOWNLOAD_PREFIX = "shellpack_download_"


class MarketplaceClient:
    """HTTP client for the plugin marketplace."""

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ):
        """
        Initialize MarketplaceClient.

        Args:
            api_url: Marketplace base URL; relative download URLs resolve against it
            timeout: Request timeout in seconds
            client: Preconfigured httpx.Client (tests pass one with a MockTransport)
        """
        self.api_url = api_url.rstrip("/")
        self.client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "MarketplaceClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _absolute(self, url: str) -> str:
        if url.startswith(("http://", "https://")):
            return url
        return f"{self.api_url}/{url.lstrip('/')}"

    def download(self, url: str, dest: Path) -> Path:
        """
        Stream a file to dest.

        Args:
            url: Absolute URL, or a path relative to the marketplace base URL
            dest: File to write

        Returns:
            dest

        Raises:
            NetworkFailed: On transport errors or a non-success status
            FileOperationFailed: If dest cannot be written
        """
        url = self._absolute(url)
        logger.info("Downloading %s", url)

        try:
            with self.client.stream("GET", url) as response:
                if response.is_error:
                    raise NetworkFailed(
                        url, f"HTTP {response.status_code}", response.status_code
                    )
                with open(dest, "wb") as f:
                    for chunk in response.iter_bytes():
                        f.write(chunk)
        except httpx.HTTPError as e:
            raise NetworkFailed(url, str(e)) from e
        except OSError as e:
            raise FileOperationFailed.from_os_error(dest, e) from e

        return dest

    def fetch_archive(
        self,
        url: str,
        download_dir: Path | None = None,
        policy: RetryPolicy = DEFAULT_POLICY,
    ) -> Path:
        """
        Download a plugin archive, retrying transient failures.

        Args:
            url: Archive URL
            download_dir: Directory to save into (a new temp dir by default)
            policy: Retry policy for network failures

        Returns:
            Path to the downloaded .tar.gz
        """
        owns_dir = download_dir is None
        if owns_dir:
            download_dir = Path(tempfile.mkdtemp(prefix=DOWNLOAD_PREFIX))
        else:
            create_dir(download_dir)

        filename = url.rstrip("/").rsplit("/", 1)[-1].split("?", 1)[0] or "plugin.tar.gz"
        dest = download_dir / filename

        try:
            return with_recovery(lambda: self.download(url, dest), policy)
        except ShellpackError:
            if owns_dir:
                cleanup(download_dir)
            raise
