"""Test helpers: a sample playlist, an event collector and a local HTTP server."""

import asyncio
import threading
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from contextlib import asynccontextmanager, contextmanager

from aiohttp import web
from aiohttp.test_utils import TestServer, unused_port

from iptv_catalog.models.catalog import Credentials

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

SAMPLE_PLAYLIST = """#EXTM3U x-tvg-url="http://example.com/epg.xml"
#EXTINF:-1 tvg-id="bbc1" tvg-name="BBC One" tvg-logo="http://logo/bbc1.png" group-title="News",BBC One
http://server/live/user/pass/1.ts
#EXTINF:-1 tvg-id="cnn" tvg-name="CNN" tvg-logo="http://logo/cnn.png" group-title="News",CNN
http://server/live/user/pass/2.ts
#EXTINF:-1 tvg-name="The Matrix" tvg-logo="" group-title="Movies",The Matrix
http://server/movie/user/pass/10.mkv
#EXTINF:-1 tvg-name="Dark S01E01" group-title="Series: Dark",Dark S01E01
http://server/series/user/pass/20.mkv
#EXTINF:-1 tvg-name="Radio 1",Radio 1
http://server/radio/1.mp3
"""


class EventCollector:
    """A progress observer that records every event it receives."""

    def __init__(self):
        self.events = []

    def on_progress(self, event) -> None:
        self.events.append(event)

    def percents(self, phase=None) -> list[int]:
        return [
            e.percent
            for e in self.events
            if e.percent is not None and getattr(e, "phase", None) == phase
        ]

    @property
    def messages(self) -> list[str]:
        return [e.message for e in self.events]


def make_credentials(server: str, username: str = "user", password: str = "pass"):
    return Credentials(username=username, password=password, server=server)


@asynccontextmanager
async def serve(routes: dict[str, Handler]) -> AsyncIterator[str]:
    """Runs a local aiohttp server for the given GET routes and yields its base URL."""
    app = web.Application()
    for path, handler in routes.items():
        app.router.add_get(path, handler)
    async with TestServer(app) as server:
        yield f"http://{server.host}:{server.port}"


@contextmanager
def serve_in_thread(routes: dict[str, Handler]) -> Iterator[str]:
    """
    Runs a local aiohttp server on its own event loop in a background thread,
    for code under test that calls `asyncio.run` itself (the CLI).
    """
    loop = asyncio.new_event_loop()
    app = web.Application()
    for path, handler in routes.items():
        app.router.add_get(path, handler)
    runner = web.AppRunner(app)
    loop.run_until_complete(runner.setup())
    port = unused_port()
    loop.run_until_complete(web.TCPSite(runner, "127.0.0.1", port).start())

    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        asyncio.run_coroutine_threadsafe(runner.cleanup(), loop).result(timeout=10)
        loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout=10)
        loop.close()


def text_handler(body: str, status: int = 200, calls: list | None = None) -> Handler:
    async def handler(request: web.Request) -> web.Response:
        if calls is not None:
            calls.append(dict(request.query))
        return web.Response(text=body, status=status)

    return handler


def json_handler(payload, status: int = 200, calls: list | None = None) -> Handler:
    async def handler(request: web.Request) -> web.Response:
        if calls is not None:
            calls.append(dict(request.query))
        return web.json_response(payload, status=status)

    return handler


def chunked_handler(parts: list[bytes]) -> Handler:
    """Streams the parts with chunked encoding, so no Content-Length is declared."""

    async def handler(request: web.Request) -> web.StreamResponse:
        response = web.StreamResponse()
        response.enable_chunked_encoding()
        await response.prepare(request)
        for part in parts:
            await response.write(part)
        await response.write_eof()
        return response

    return handler


def account_payload(auth=1, status="Active") -> dict:
    return {
        "user_info": {
            "username": "user",
            "password": "pass",
            "message": "Welcome",
            "auth": auth,
            "status": status,
            "exp_date": "1767225600",
            "is_trial": "0",
            "active_cons": "0",
            "created_at": "1704067200",
            "max_connections": "1",
            "allowed_output_formats": ["m3u8", "ts"],
        },
        "server_info": {
            "url": "example.com",
            "port": "8080",
            "https_port": "8443",
            "server_protocol": "http",
            "rtmp_port": "8880",
            "timezone": "Europe/London",
            "timestamp_now": 1735689600,
            "time_now": "2025-01-01 00:00:00",
        },
    }
