"""Cider API client."""

from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Self

import aiohttp

from .const import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT,
    ENDPOINT_ACTIVE,
    ENDPOINT_ADD_TO_LIBRARY,
    ENDPOINT_AMAPI_RUN_V3,
    ENDPOINT_AUTOPLAY,
    ENDPOINT_IS_PLAYING,
    ENDPOINT_NEXT,
    ENDPOINT_NOW_PLAYING,
    ENDPOINT_PAUSE,
    ENDPOINT_PLAY,
    ENDPOINT_PLAY_LATER,
    ENDPOINT_PLAY_NEXT,
    ENDPOINT_PLAY_PAUSE,
    ENDPOINT_PREVIOUS,
    ENDPOINT_QUEUE,
    ENDPOINT_QUEUE_CLEAR,
    ENDPOINT_QUEUE_MOVE,
    ENDPOINT_QUEUE_REMOVE,
    ENDPOINT_REPEAT_MODE,
    ENDPOINT_SEEK,
    ENDPOINT_SET_RATING,
    ENDPOINT_SHUFFLE_MODE,
    ENDPOINT_STOP,
    ENDPOINT_TOGGLE_AUTOPLAY,
    ENDPOINT_TOGGLE_REPEAT,
    ENDPOINT_TOGGLE_SHUFFLE,
    ENDPOINT_VOLUME,
    HEADER_APP_TOKEN,
    HTTP_GET,
    HTTP_POST,
    PLAYBACK_PREFIX,
    POOL_KEEPALIVE_TIMEOUT,
    POOL_LIMIT_PER_HOST,
    RATING_DISLIKE,
    RATING_LIKE,
    USER_AGENT_TEMPLATE,
    VOLUME_MAX,
    VOLUME_MIN,
    AmApiRequest,
    QueueMoveRequest,
    QueueRemoveRequest,
    RatingRequest,
    SeekRequest,
    VolumeRequest,
    sanitize_token,
)
from .exceptions import (
    CiderConnectionError,
    CiderHTTPError,
    CiderTimeoutError,
)
from .models import (
    PlayItem,
    PlayHref,
    PlayUrl,
    parse_autoplay,
    parse_is_playing,
    parse_repeat_mode,
    parse_shuffle_mode,
    parse_volume,
)
from .normalize import (
    HttpExchange,
    normalize_active,
    normalize_active_failure,
    normalize_command,
    normalize_now_playing,
    normalize_passthrough,
    normalize_queue,
    normalize_typed,
)

if TYPE_CHECKING:
    from .models import NowPlaying, PlayTarget, QueueItem

_LOGGER = logging.getLogger(__name__)

# Version for User-Agent header
__version__ = "0.1.0"


@dataclass(frozen=True, slots=True)
class CiderConfig:
    """Where and how to reach the Cider RPC server.

    Attributes:
        base_url: Scheme, host and port, without a trailing slash.
        api_token: Token sent in the apptoken header, or None to send none.
    """

    base_url: str
    api_token: str | None = None


class _SessionHandle:
    """aiohttp session shared by a client and every copy made from it.

    The session is created lazily on first use so a client can be built
    outside a running event loop.
    """

    def __init__(
        self,
        timeout: aiohttp.ClientTimeout,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    async def get(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session.

        Returns:
            Active aiohttp client session.
        """
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                connector=aiohttp.TCPConnector(
                    limit_per_host=POOL_LIMIT_PER_HOST,
                    keepalive_timeout=POOL_KEEPALIVE_TIMEOUT,
                ),
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session if it was created here."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()


class CiderClient:
    """Async client for the Cider music player RPC API.

    Cider serves a local HTTP API (default http://127.0.0.1:10767) for
    controlling playback, managing the queue and querying track information.

    Copies made with with_token() share the connection pool of the client
    they were made from; closing any of them closes the pool.

    Example:
        ```python
        async with CiderClient(api_token="your-token") as client:
            await client.async_is_active()
            track = await client.async_now_playing()
            if track is not None:
                print(f"{track.name} by {track.artist_name}")
            await client.async_seek_ms(30_000)
        ```
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        api_token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Initialize the Cider client.

        Args:
            host: Host the RPC server listens on. Defaults to loopback.
            port: RPC port. Defaults to 10767.
            api_token: Token from Settings > Connectivity > Manage External
                Application Access, or None if authentication is off.
            timeout: Whole-request timeout in seconds.
            connect_timeout: Connection timeout in seconds.
            session: Optional aiohttp session to reuse. If not provided,
                     a new session will be created and owned by the client.
        """
        self._config = CiderConfig(base_url=f"http://{host}:{port}", api_token=api_token)
        self._handle = _SessionHandle(
            aiohttp.ClientTimeout(total=timeout, connect=connect_timeout),
            session,
        )

    @classmethod
    def from_base_url(
        cls,
        base_url: str,
        api_token: str | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> Self:
        """Create a client targeting an arbitrary base URL.

        Args:
            base_url: e.g. "http://192.168.1.20:10767".
            api_token: Optional API token.
            session: Optional aiohttp session to reuse.

        Returns:
            A new client.
        """
        client = cls(api_token=api_token, session=session)
        client._config = CiderConfig(base_url=base_url.rstrip("/"), api_token=api_token)
        return client

    def with_token(self, token: str) -> Self:
        """Return a copy of this client that authenticates with token.

        The copy shares this client's connection pool.
        """
        clone = copy.copy(self)
        clone._config = replace(self._config, api_token=token)
        return clone

    async def __aenter__(self) -> Self:
        """Enter async context manager."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit async context manager."""
        await self.close()

    @property
    def config(self) -> CiderConfig:
        """Return the client configuration."""
        return self._config

    @property
    def base_url(self) -> str:
        """Return the base URL for API requests."""
        return self._config.base_url

    @property
    def api_token(self) -> str | None:
        """Return the API token, if any."""
        return self._config.api_token

    def _build_url(self, path: str, raw: bool = False) -> str:
        """Build an absolute URL.

        Args:
            path: Endpoint path, e.g. "/now-playing".
            raw: Resolve against the base URL instead of /api/v1/playback.

        Returns:
            Absolute request URL.
        """
        if raw:
            return f"{self._config.base_url}{path}"
        return f"{self._config.base_url}{PLAYBACK_PREFIX}{path}"

    def _get_headers(self) -> dict[str, str]:
        """Build headers for API requests.

        The apptoken header is only present when a token is configured.

        Returns:
            Dictionary of HTTP headers.
        """
        headers = {
            "User-Agent": USER_AGENT_TEMPLATE.format(version=__version__),
            "Accept": "application/json",
        }
        if self._config.api_token is not None:
            headers[HEADER_APP_TOKEN] = self._config.api_token
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        data: object | None = None,
        raw: bool = False,
    ) -> HttpExchange:
        """Make an HTTP request to the Cider API and read the whole body.

        Args:
            method: HTTP method (GET, POST).
            path: Endpoint path.
            data: Optional JSON body.
            raw: Resolve path against the base URL instead of the playback
                namespace.

        Returns:
            The completed exchange. The status is not interpreted here.

        Raises:
            CiderTimeoutError: Request timed out.
            CiderConnectionError: Connection failed.
            CiderHTTPError: Any other client-side failure.
        """
        url = self._build_url(path, raw=raw)
        headers = self._get_headers()

        _LOGGER.debug(
            "Cider API request: %s %s (token=%s, data=%s)",
            method,
            url,
            sanitize_token(self._config.api_token),
            data,
        )

        session = await self._handle.get()

        try:
            async with session.request(
                method,
                url,
                headers=headers,
                json=data,
            ) as response:
                body = await response.read()
                _LOGGER.debug(
                    "Cider API response: %s %s for %s %s",
                    response.status,
                    response.reason,
                    method,
                    path,
                )
                return HttpExchange(
                    method=method,
                    path=path,
                    status=response.status,
                    reason=response.reason,
                    body=body,
                )

        except TimeoutError as err:
            _LOGGER.warning("Cider API timeout for %s %s", method, path)
            raise CiderTimeoutError(
                f"Request timed out after {self._handle.timeout.total}s"
            ) from err

        except aiohttp.ClientConnectorError as err:
            _LOGGER.warning(
                "Cider API connection error for %s %s: %s",
                method,
                path,
                err,
            )
            raise CiderConnectionError(
                f"Failed to connect to {self._config.base_url}: {err}"
            ) from err

        except aiohttp.ClientError as err:
            _LOGGER.warning(
                "Cider API client error for %s %s: %s",
                method,
                path,
                err,
            )
            raise CiderHTTPError(f"Client error: {err}") from err

    async def _command(self, path: str, data: object | None = None) -> None:
        """Send a fire-and-forget POST command."""
        exchange = await self._request(HTTP_POST, path, data)
        normalize_command(exchange)

    # =========================================================================
    # Status
    # =========================================================================

    async def async_is_active(self) -> None:
        """Check that Cider is running and the RPC server is reachable.

        Cider answers GET /active with 204 No Content when alive.

        Raises:
            CiderUnauthorizedError: The token was rejected.
            CiderApiError: Connection refused, timed out, or an unexpected status.
        """
        _LOGGER.debug("Checking Cider connection at %s", self._config.base_url)
        try:
            exchange = await self._request(HTTP_GET, ENDPOINT_ACTIVE)
        except CiderHTTPError as err:
            raise normalize_active_failure(err) from err
        normalize_active(exchange)

    async def async_is_playing(self) -> bool:
        """Return True if music is currently playing.

        Raises:
            CiderHTTPError: The request failed.
            CiderApiError: The response could not be parsed.
        """
        exchange = await self._request(HTTP_GET, ENDPOINT_IS_PLAYING)
        return normalize_typed(exchange, parse_is_playing).is_playing

    async def async_now_playing(self) -> NowPlaying | None:
        """Get the currently playing track.

        Returns:
            Catalog metadata plus live playback state, or None when nothing is
            loaded or the response could not be parsed.

        Raises:
            CiderHTTPError: The request failed.
        """
        exchange = await self._request(HTTP_GET, ENDPOINT_NOW_PLAYING)
        return normalize_now_playing(exchange)

    # =========================================================================
    # Playback control
    # =========================================================================

    async def async_play(self) -> None:
        """Resume playback.

        With nothing loaded, Cider applies its "Play Button on Stopped
        Action" setting.
        """
        await self._command(ENDPOINT_PLAY)

    async def async_pause(self) -> None:
        """Pause playback. No-op if already paused."""
        await self._command(ENDPOINT_PAUSE)

    async def async_play_pause(self) -> None:
        """Toggle between playing and paused."""
        await self._command(ENDPOINT_PLAY_PAUSE)

    async def async_stop(self) -> None:
        """Stop playback and unload the current track. The queue is kept."""
        await self._command(ENDPOINT_STOP)

    async def async_next(self) -> None:
        """Skip to the next track in the queue."""
        await self._command(ENDPOINT_NEXT)

    async def async_previous(self) -> None:
        """Go back to the previously played track."""
        await self._command(ENDPOINT_PREVIOUS)

    async def async_seek(self, position: float) -> None:
        """Seek to a position in the current track.

        Args:
            position: Target offset in seconds (e.g. 30.0).

        Raises:
            CiderHTTPError: The request failed or the server rejected it.
        """
        body: SeekRequest = {"position": float(position)}
        await self._command(ENDPOINT_SEEK, body)

    async def async_seek_ms(self, position_ms: int) -> None:
        """Seek to a position given in milliseconds."""
        await self.async_seek(position_ms / 1000)

    # =========================================================================
    # Play items
    # =========================================================================

    async def async_play_target(self, target: PlayTarget) -> None:
        """Start playback of a URL, a catalog item or an API href.

        Args:
            target: PlayUrl, PlayItem or PlayHref.

        Raises:
            CiderHTTPError: The request failed or the server rejected it.
        """
        await self._command(target.endpoint, target.to_body())

    async def async_play_url(self, url: str) -> None:
        """Start playback of an Apple Music URL (Share > Apple Music)."""
        await self.async_play_target(PlayUrl(url))

    async def async_play_item(self, item_type: str, item_id: str) -> None:
        """Start playback of a catalog item.

        Args:
            item_type: Apple Music type, "songs", "albums", "playlists", ...
            item_id: Catalog ID; always sent as a string.
        """
        await self.async_play_target(PlayItem(item_type, item_id))

    async def async_play_item_href(self, href: str) -> None:
        """Start playback of an Apple Music API href (/v1/catalog/...)."""
        await self.async_play_target(PlayHref(href))

    async def async_play_next(self, item_type: str, item_id: str) -> None:
        """Insert a catalog item at the start of the queue."""
        await self._command(ENDPOINT_PLAY_NEXT, PlayItem(item_type, item_id).to_body())

    async def async_play_later(self, item_type: str, item_id: str) -> None:
        """Append a catalog item to the end of the queue."""
        await self._command(ENDPOINT_PLAY_LATER, PlayItem(item_type, item_id).to_body())

    # =========================================================================
    # Queue
    # =========================================================================

    async def async_get_queue(self) -> list[QueueItem]:
        """Get the playback queue.

        The list holds history, the playing track and upcoming items; use
        QueueItem.is_current to find the active one.

        Returns:
            Queue items, or an empty list when the queue is empty or the
            response could not be parsed.

        Raises:
            CiderHTTPError: The request failed.
        """
        exchange = await self._request(HTTP_GET, ENDPOINT_QUEUE)
        return normalize_queue(exchange)

    async def async_queue_move_to_position(
        self,
        start_index: int,
        destination_index: int,
        return_queue: bool | None = None,
    ) -> None:
        """Move a queue item.

        Both indices are 1-based and sent as given. The queue includes
        history items, so the first "Up Next" entry is usually not index 1.

        Args:
            start_index: Current index of the item.
            destination_index: Target index.
            return_queue: Ask Cider to include the updated queue in its reply.
                Omitted from the request when None.
        """
        body: QueueMoveRequest = {
            "startIndex": start_index,
            "destinationIndex": destination_index,
        }
        if return_queue is not None:
            body["returnQueue"] = return_queue
        await self._command(ENDPOINT_QUEUE_MOVE, body)

    async def async_queue_remove_by_index(self, index: int) -> None:
        """Remove the queue item at a 1-based index."""
        body: QueueRemoveRequest = {"index": index}
        await self._command(ENDPOINT_QUEUE_REMOVE, body)

    async def async_clear_queue(self) -> None:
        """Clear all items from the queue."""
        await self._command(ENDPOINT_QUEUE_CLEAR)

    # =========================================================================
    # Volume
    # =========================================================================

    async def async_get_volume(self) -> float:
        """Return the current volume (0.0 muted to 1.0 full).

        Raises:
            CiderHTTPError: The request failed.
            CiderApiError: The response could not be parsed.
        """
        exchange = await self._request(HTTP_GET, ENDPOINT_VOLUME)
        return normalize_typed(exchange, parse_volume).volume

    async def async_set_volume(self, volume: float) -> None:
        """Set the volume; values outside 0.0 to 1.0 are clamped and NaN is 0.0."""
        level = float(volume)
        if math.isnan(level):
            level = VOLUME_MIN
        body: VolumeRequest = {"volume": min(max(level, VOLUME_MIN), VOLUME_MAX)}
        await self._command(ENDPOINT_VOLUME, body)

    # =========================================================================
    # Library / ratings
    # =========================================================================

    async def async_add_to_library(self) -> None:
        """Add the current track to the library. No-op if already there."""
        await self._command(ENDPOINT_ADD_TO_LIBRARY)

    async def async_set_rating(self, rating: int) -> None:
        """Rate the current track.

        Args:
            rating: -1 dislike, 0 unset, 1 like. Clamped to that range.
        """
        clamped = min(max(int(rating), RATING_DISLIKE), RATING_LIKE)
        body: RatingRequest = {"rating": clamped}
        await self._command(ENDPOINT_SET_RATING, body)

    # =========================================================================
    # Repeat / shuffle / autoplay
    # =========================================================================

    async def async_get_repeat_mode(self) -> int:
        """Return the repeat mode: 0 off, 1 repeat this song, 2 repeat all."""
        exchange = await self._request(HTTP_GET, ENDPOINT_REPEAT_MODE)
        return normalize_typed(exchange, parse_repeat_mode).value

    async def async_toggle_repeat(self) -> None:
        """Cycle repeat mode: repeat one, repeat all, off."""
        await self._command(ENDPOINT_TOGGLE_REPEAT)

    async def async_get_shuffle_mode(self) -> int:
        """Return the shuffle mode: 0 off, 1 on."""
        exchange = await self._request(HTTP_GET, ENDPOINT_SHUFFLE_MODE)
        return normalize_typed(exchange, parse_shuffle_mode).value

    async def async_toggle_shuffle(self) -> None:
        """Toggle shuffle."""
        await self._command(ENDPOINT_TOGGLE_SHUFFLE)

    async def async_get_autoplay(self) -> bool:
        """Return True if autoplay is on."""
        exchange = await self._request(HTTP_GET, ENDPOINT_AUTOPLAY)
        return normalize_typed(exchange, parse_autoplay).value

    async def async_toggle_autoplay(self) -> None:
        """Toggle autoplay."""
        await self._command(ENDPOINT_TOGGLE_AUTOPLAY)

    # =========================================================================
    # Apple Music API passthrough
    # =========================================================================

    async def async_amapi_run_v3(self, path: str) -> object:
        """Run a raw Apple Music API request through Cider.

        Args:
            path: Apple Music API path, e.g. "/v1/me/library/songs" or
                "/v1/catalog/us/search?term=flume&types=songs".

        Returns:
            The decoded JSON response, as Apple Music sent it.

        Raises:
            CiderHTTPError: The request failed or the server rejected it.
            CiderApiError: The response is not JSON.
        """
        body: AmApiRequest = {"path": path}
        exchange = await self._request(
            HTTP_POST,
            ENDPOINT_AMAPI_RUN_V3,
            body,
            raw=True,
        )
        return normalize_passthrough(exchange)

    async def close(self) -> None:
        """Close the client session.

        Only closes the session if it was created by this client.
        Sessions provided externally are not closed.
        """
        await self._handle.close()
