"""
Streams the playlist file over HTTP in chunks, reporting byte-level progress.
"""

import asyncio
import logging

import aiohttp

from iptv_catalog.api.client import XtreamClient, mask_url
from iptv_catalog.exceptions import DownloadError
from iptv_catalog.models.catalog import Credentials
from iptv_catalog.models.progress import Observer, ProgressEvent, notify
from iptv_catalog.utils.formatting import format_size

log = logging.getLogger(__name__)

PHASE_DOWNLOAD = "download"


class PlaylistDownloader:
    """A streaming playlist downloader that materializes the body as text."""

    DEFAULT_CHUNK_SIZE = 65536  # 64 KB

    def __init__(self, client: XtreamClient, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self._client = client
        self.chunk_size = chunk_size
        self.bytes_received = 0

    async def download(
        self, credentials: Credentials, on_progress: Observer | None = None
    ) -> str:
        """
        Downloads the full playlist for an account.

        Args:
            credentials: The account whose playlist is fetched.
            on_progress: Receives a `ProgressEvent` after every chunk.

        Returns:
            The playlist body decoded as UTF-8.

        Raises:
            DownloadError: On a non-2xx status or any transport failure.
        """
        url = self._client.playlist_url(credentials)
        notify(on_progress, ProgressEvent("Fetching playlist..."))
        log.debug(f"Streaming playlist from {mask_url(url)}")

        chunks: list[bytes] = []
        self.bytes_received = 0
        try:
            async with self._client.session.get(
                url,
                timeout=self._client.stream_timeout,
                headers={"Accept-Encoding": "identity"},
                allow_redirects=True,
            ) as response:
                if not 200 <= response.status < 300:
                    raise DownloadError(
                        f"Failed to fetch playlist (HTTP {response.status}"
                        f"{' ' + response.reason if response.reason else ''})"
                    )

                # Content-Length of an encoded body does not count decoded bytes
                encoding = response.headers.get("Content-Encoding", "identity")
                content_length = (
                    response.content_length or 0
                    if encoding.lower() == "identity"
                    else 0
                )
                last_percent = 0

                async for chunk in response.content.iter_chunked(self.chunk_size):
                    chunks.append(chunk)
                    self.bytes_received += len(chunk)

                    if content_length > 0:
                        percent = min(
                            100, round(self.bytes_received / content_length * 100)
                        )
                        last_percent = max(last_percent, percent)
                        notify(
                            on_progress,
                            ProgressEvent(
                                f"Downloading playlist: {last_percent}%",
                                last_percent,
                                PHASE_DOWNLOAD,
                            ),
                        )
                    else:
                        notify(
                            on_progress,
                            ProgressEvent(
                                "Downloading playlist: "
                                f"{format_size(self.bytes_received)}"
                            ),
                        )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DownloadError(f"Failed to read playlist: {e}") from e

        log.info(f"Downloaded playlist ({format_size(self.bytes_received)}).")
        return decode_playlist(b"".join(chunks))


def decode_playlist(payload: bytes) -> str:
    """Decodes a playlist body as UTF-8, tolerating a BOM and stray bytes."""
    return payload.decode("utf-8-sig", errors="replace")
