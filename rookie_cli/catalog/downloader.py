"""
Handles the low-level streaming of an artifact over HTTP to a local file.
"""

import logging
import os
from pathlib import Path
from typing import Callable

import aiofiles
import aiohttp

log = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


class Downloader:
    """A single-attempt chunked file downloader. Failures are not retried."""

    CHUNK_SIZE = 262144  # 256 KB

    def __init__(self, sock_read_timeout: float = 60.0, sock_connect_timeout: float = 15.0):
        self.timeout = aiohttp.ClientTimeout(
            total=None, sock_connect=sock_connect_timeout, sock_read=sock_read_timeout
        )

    async def download_file(
        self,
        session: aiohttp.ClientSession,
        url: str,
        destination_path: Path,
        on_progress: ProgressCallback | None = None,
    ) -> int:
        """
        Streams `url` into `destination_path`, overwriting any existing file.

        Args:
            session: The HTTP session to issue the request on.
            url: Absolute artifact URL.
            destination_path: Target file; its folder must already exist.
            on_progress: Called with the received fraction (0.0-1.0) when the
                server sends a Content-Length.

        Returns:
            The number of bytes written.

        Raises:
            aiohttp.ClientError, asyncio.TimeoutError: On transport failures. A
            partially written file is left in place.
        """
        async with session.get(url, allow_redirects=True, timeout=self.timeout) as response:
            response.raise_for_status()
            total_size = response.content_length or 0

            bytes_downloaded = 0
            async with aiofiles.open(destination_path, "wb") as f:
                async for chunk in response.content.iter_chunked(self.CHUNK_SIZE):
                    await f.write(chunk)
                    bytes_downloaded += len(chunk)
                    if on_progress and total_size > 0:
                        on_progress(min(1.0, bytes_downloaded / total_size))

        log.debug(
            f"Downloaded {bytes_downloaded} bytes to "
            f"'{os.path.basename(destination_path)}'."
        )
        return bytes_downloaded
