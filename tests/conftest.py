"""Fixtures for Cider API client tests."""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator, Generator, Mapping
from dataclasses import dataclass, field
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from cider_api import CiderClient

TEST_TOKEN = "test-token-12345"


@pytest.fixture
def now_playing_payload() -> dict[str, Any]:
    """Return a GET /now-playing response for a playing track."""
    return {
        "status": "ok",
        "info": {
            "name": "Never Be Like You",
            "artistName": "Flume",
            "albumName": "Skin",
            "artwork": {
                "width": 3000,
                "height": 3000,
                "url": "https://example.com/{w}x{h}bb.jpg",
            },
            "durationInMillis": 234000,
            "playParams": {"id": "1719861213", "kind": "song"},
            "url": "https://music.apple.com/ca/album/skin/1719860281",
            "isrc": "AUUM71600506",
            "currentPlaybackTime": 42.5,
            "remainingTime": 191.5,
            "shuffleMode": 1,
            "repeatMode": 0,
            "inFavorites": True,
            "inLibrary": True,
            "genreNames": ["Electronic", "Music"],
            "trackNumber": 3,
            "discNumber": 1,
            "releaseDate": "2016-05-27T12:00:00Z",
            "hasLyrics": True,
            "isAppleDigitalMaster": True,
            "audioTraits": ["lossless", "lossy-stereo"],
            "previews": [{"url": "https://audio-ssl.itunes.apple.com/preview.m4a"}],
        },
    }


@pytest.fixture
def queue_payload() -> list[dict[str, Any]]:
    """Return a GET /queue response with the first item playing."""
    return [
        {
            "id": "1719861213",
            "type": "song",
            "attributes": {
                "name": "Never Be Like You",
                "artistName": "Flume",
                "albumName": "Skin",
                "durationInMillis": 234000,
            },
            "_state": {"current": 2},
        },
        {
            "id": "1719861214",
            "type": "song",
            "attributes": {
                "name": "Say It",
                "artistName": "Flume",
                "albumName": "Skin",
                "durationInMillis": 252000,
            },
        },
    ]


# =============================================================================
# Mocked transport
# =============================================================================


def make_mock_response(
    status: int = 200,
    body: bytes | str | dict[str, Any] | list[Any] | None = None,
    reason: str = "OK",
) -> MagicMock:
    """Build a mock aiohttp response usable as an async context manager."""
    if isinstance(body, (dict, list)):
        raw = json.dumps(body).encode()
    elif isinstance(body, str):
        raw = body.encode()
    else:
        raw = body or b""

    mock_response = MagicMock()
    mock_response.status = status
    mock_response.reason = reason
    mock_response.read = AsyncMock(return_value=raw)
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)
    return mock_response


@pytest.fixture
def mock_session() -> MagicMock:
    """Return a mock aiohttp session answering 200 with an empty body."""
    session = MagicMock()
    session.request = MagicMock(return_value=make_mock_response())
    session.closed = False
    session.close = AsyncMock()
    return session


@pytest.fixture
def patched_session(mock_session: MagicMock) -> Generator[MagicMock]:
    """Patch aiohttp so clients create mock_session instead of a real one."""
    with (
        patch("aiohttp.ClientSession", return_value=mock_session),
        patch("aiohttp.TCPConnector"),
    ):
        yield mock_session


# =============================================================================
# Fake Cider server
# =============================================================================


@dataclass
class RecordedRequest:
    """A request received by the fake Cider server."""

    method: str
    path: str
    headers: Mapping[str, str]
    body: Any = None


@dataclass
class FakeCider:
    """In-process stand-in for the Cider RPC server.

    Unregistered routes answer 200 {"status": "ok"}.
    """

    requests: list[RecordedRequest] = field(default_factory=list)
    routes: dict[tuple[str, str], tuple[int, Any]] = field(default_factory=dict)
    base_url: str = ""
    port: int = 0

    def respond(self, method: str, path: str, status: int = 200, body: Any = None) -> None:
        """Register the response for a method and path.

        body may be None (empty), bytes/str (sent verbatim) or JSON data.
        """
        self.routes[(method, path)] = (status, body)

    def last(self) -> RecordedRequest:
        """Return the most recent request."""
        assert self.requests, "no request received"
        return self.requests[-1]

    async def handle(self, request: web.Request) -> web.Response:
        """Record the request and send the registered response."""
        raw = await request.read()
        self.requests.append(
            RecordedRequest(
                method=request.method,
                path=request.path,
                headers=request.headers,
                body=json.loads(raw) if raw else None,
            )
        )
        status, body = self.routes.get((request.method, request.path), (200, {"status": "ok"}))
        if body is None:
            return web.Response(status=status)
        if isinstance(body, (bytes, str)):
            return web.Response(
                status=status,
                body=body.encode() if isinstance(body, str) else body,
                content_type="application/json",
            )
        return web.json_response(body, status=status)


@pytest_asyncio.fixture
async def fake_cider() -> AsyncGenerator[FakeCider]:
    """Start a fake Cider server on a free loopback port."""
    fake = FakeCider()
    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", fake.handle)
    server = TestServer(app, host="127.0.0.1")
    await server.start_server()
    fake.base_url = f"http://127.0.0.1:{server.port}"
    fake.port = server.port
    yield fake
    await server.close()


@pytest_asyncio.fixture
async def cider_client(fake_cider: FakeCider) -> AsyncGenerator[CiderClient]:
    """Return a client pointed at the fake server, authenticated with TEST_TOKEN."""
    client = CiderClient.from_base_url(fake_cider.base_url, api_token=TEST_TOKEN)
    yield client
    await client.close()
