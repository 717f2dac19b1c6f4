"""
Async HTTP client for an Xtream-style IPTV server.
"""

import logging
from typing import Any

import aiohttp
from yarl import URL

from iptv_catalog.models.catalog import Credentials
from iptv_catalog.models.config import DEFAULT_USER_AGENT

log = logging.getLogger(__name__)


def mask_url(url: URL | str) -> str:
    """Renders a URL for logs with the password query value hidden."""
    url = URL(str(url))
    if "password" not in url.query:
        return str(url)
    return str(url.update_query(password="***"))


class XtreamClient:
    """
    Owns the aiohttp session used for every request of a refresh and builds
    the server URLs from a set of credentials.

    Timeouts:
    - streaming playlist reads have no total deadline, only connect/read limits
    - account calls are bounded by a total timeout
    """

    PLAYLIST_PATH = "get.php"
    ACCOUNT_PATH = "player_api.php"

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        connect_timeout: float = 15.0,
        read_timeout: float = 90.0,
        account_timeout: float = 60.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        """
        Initializes the client.

        Args:
            session: An existing session to reuse. The client never closes a
                session it did not create.
            connect_timeout: Seconds allowed to establish a connection.
            read_timeout: Seconds allowed between two reads of a response body.
            account_timeout: Total seconds allowed for an account API call.
            user_agent: User-Agent header sent with every request.
        """
        self._session = session
        self._owns_session = session is None
        self.user_agent = user_agent

        self.stream_timeout = aiohttp.ClientTimeout(
            total=None, sock_connect=connect_timeout, sock_read=read_timeout
        )
        self.account_timeout = aiohttp.ClientTimeout(
            total=account_timeout,
            connect=connect_timeout,
            sock_read=min(read_timeout, account_timeout),
        )

    @property
    def session(self) -> aiohttp.ClientSession:
        """Returns an open session, creating one on first use."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=4,
                ttl_dns_cache=300,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers={
                    "User-Agent": self.user_agent,
                    "Accept-Encoding": "gzip, deflate",
                },
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            log.debug("Xtream client session closed.")

    async def __aenter__(self) -> "XtreamClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @staticmethod
    def _build_url(
        credentials: Credentials, path: str, **extra: Any
    ) -> URL:
        query = {"username": credentials.username, "password": credentials.password}
        query.update(extra)
        return URL(f"{credentials.server}/{path}").with_query(query)

    def playlist_url(self, credentials: Credentials) -> URL:
        return self._build_url(
            credentials, self.PLAYLIST_PATH, type="m3u_plus", output="ts"
        )

    def account_url(self, credentials: Credentials) -> URL:
        return self._build_url(credentials, self.ACCOUNT_PATH)

    async def get_json(self, url: URL) -> Any:
        """GETs a JSON document, raising aiohttp errors for non-2xx answers."""
        log.debug(f"GET {mask_url(url)}")
        async with self.session.get(url, timeout=self.account_timeout) as r:
            r.raise_for_status()
            # Panel servers commonly answer JSON with a text/html content type
            return await r.json(content_type=None)
