"""
Async client for the remote app catalog: fetches the index document and
downloads the artifacts it points to.
"""

import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Optional

import aiohttp
import pydantic

from rookie_cli import __version__
from rookie_cli.exceptions import NetworkError, ParseError
from rookie_cli.models.catalog import CatalogIndex
from rookie_cli.models.servers import ServersConfig
from rookie_cli.utils.path import artifact_file_name, create_dir

from .downloader import Downloader, ProgressCallback
from .servers import load_server_config

log = logging.getLogger(__name__)


class CatalogClient:
    """
    Client for a catalog server.

    The aiohttp session is created on first use and must be released with
    `close()`, or by using the client as an async context manager.
    """

    def __init__(self, timeout: float = 60.0):
        """
        Args:
            timeout: Total seconds allowed for the index request, and the
                per-read limit while streaming a download.
        """
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None
        self._downloader = Downloader(sock_read_timeout=timeout)

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _initialize_session(self) -> aiohttp.ClientSession:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    "User-Agent": f"rookie-cli/{__version__}",
                    "Accept-Encoding": "gzip, deflate",
                },
                timeout=aiohttp.ClientTimeout(total=self.timeout, connect=15),
            )
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    @staticmethod
    def load_server_config(path: Path) -> ServersConfig:
        """Loads the server selection file. See `catalog.servers.load_server_config`."""
        return load_server_config(path)

    async def fetch_catalog(self, index_url: str) -> CatalogIndex:
        """
        Fetches and validates the catalog index.

        Raises:
            NetworkError: On connection errors, timeouts, or a non-2xx status.
            ParseError: If the body is not JSON or does not match the schema.
        """
        session = await self._initialize_session()
        start_time = time.monotonic()
        try:
            async with session.get(index_url) as r:
                r.raise_for_status()
                # Static hosts often serve JSON as text/plain, so decode manually.
                body = (await r.text()).removeprefix("\ufeff")
        except aiohttp.ClientResponseError as e:
            raise NetworkError(
                f"Catalog request failed with HTTP {e.status}: {index_url}"
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise NetworkError(
                f"Could not fetch catalog from {index_url}: {str(e) or type(e).__name__}"
            ) from e

        duration_ms = (time.monotonic() - start_time) * 1000
        log.debug(f"Fetched catalog index ({len(body)} chars) in {duration_ms:.0f} ms.")

        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid server index JSON: {e}") from e
        if data is None:
            raise ParseError("Invalid server index JSON: document is null.")

        try:
            return CatalogIndex.model_validate(data)
        except pydantic.ValidationError as e:
            raise ParseError(f"Server index does not match the expected format:\n{e}") from e

    async def download_artifact(
        self,
        artifact_url: str,
        destination_folder: Path,
        on_progress: ProgressCallback | None = None,
    ) -> Path:
        """
        Downloads an artifact into `destination_folder`, creating it if needed.

        The file is named after the URL's last path segment ('download.apk' when
        empty) and silently replaces any file of the same name.

        Returns:
            The absolute path of the downloaded file.

        Raises:
            NetworkError: On any transport failure. A partial file may remain.
        """
        folder = Path(destination_folder).expanduser().resolve()
        create_dir(folder)
        out_path = folder / artifact_file_name(artifact_url)

        session = await self._initialize_session()
        try:
            size = await self._downloader.download_file(
                session, artifact_url, out_path, on_progress=on_progress
            )
        except aiohttp.ClientResponseError as e:
            raise NetworkError(
                f"Download failed with HTTP {e.status}: {artifact_url}"
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise NetworkError(
                f"Download of {artifact_url} failed: {str(e) or type(e).__name__}"
            ) from e

        log.debug(f"Saved {size} bytes to '{out_path}'.")
        return out_path
