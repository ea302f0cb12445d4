"""Outcome normalization for Cider API exchanges.

Cider's RPC server is inconsistent about how it signals "nothing there": a
missing track may come back as 404 or 204 depending on the version, and some
builds answer with bodies that do not match the documented shape. Each
function here applies the policy of one endpoint family to a completed
exchange and returns a typed value or raises a classified error. They do no
I/O and keep no state.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from http import HTTPStatus
from typing import Final, TypeVar

from .exceptions import (
    CiderApiError,
    CiderConnectionError,
    CiderHTTPError,
    CiderTimeoutError,
    CiderUnauthorizedError,
)
from .models import (
    NowPlaying,
    QueueItem,
    parse_envelope,
    parse_now_playing_response,
    parse_queue,
)

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

# Statuses Cider uses to say "nothing loaded" / "queue empty"
EMPTY_RESULT_STATUSES: Final = frozenset({HTTPStatus.NO_CONTENT, HTTPStatus.NOT_FOUND})

ACTIVE_STATUSES: Final = frozenset({HTTPStatus.OK, HTTPStatus.NO_CONTENT})
UNAUTHORIZED_STATUSES: Final = frozenset({HTTPStatus.UNAUTHORIZED, HTTPStatus.FORBIDDEN})


@dataclass(frozen=True, slots=True)
class HttpExchange:
    """A completed request/response pair, body fully read.

    Attributes:
        method: HTTP method of the request.
        path: Endpoint path as passed to the client (for messages).
        status: HTTP status code of the response.
        reason: HTTP reason phrase, if the server sent one.
        body: Raw response body.
    """

    method: str
    path: str
    status: int
    reason: str | None = None
    body: bytes = b""

    @property
    def ok(self) -> bool:
        """Return True for a 2xx status."""
        return 200 <= self.status < 300

    def text(self) -> str:
        """Return the body decoded as UTF-8."""
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> object:
        """Decode the body as JSON.

        Raises:
            ValueError: The body is not valid JSON.
            RecursionError: The body nests deeper than the decoder allows.
        """
        return json.loads(self.body)


def _raise_for_status(exchange: HttpExchange) -> None:
    if exchange.ok:
        return
    _LOGGER.debug(
        "Cider API rejected %s %s: %s %s",
        exchange.method,
        exchange.path,
        exchange.status,
        exchange.reason,
    )
    raise CiderHTTPError(
        f"HTTP {exchange.status} for {exchange.method} {exchange.path}",
        status=exchange.status,
    )


def normalize_active(exchange: HttpExchange) -> None:
    """Apply the connectivity check policy.

    Raises:
        CiderUnauthorizedError: The token was rejected (401/403).
        CiderApiError: Any other status than 200/204.
    """
    if exchange.status in ACTIVE_STATUSES:
        return
    if exchange.status in UNAUTHORIZED_STATUSES:
        raise CiderUnauthorizedError
    raise CiderApiError(f"Unexpected response (HTTP {exchange.status})")


def normalize_active_failure(err: CiderHTTPError) -> CiderApiError:
    """Turn a transport failure of the connectivity check into an API error.

    Args:
        err: The error raised by the transport.

    Returns:
        A CiderApiError whose message says whether the connection was
        refused, timed out, or failed otherwise. The caller raises it.
    """
    cause = err.__cause__ if err.__cause__ is not None else err
    if isinstance(err, CiderTimeoutError):
        return CiderApiError("Connection timed out")
    if isinstance(err, CiderConnectionError):
        return CiderApiError(f"Connection refused ({cause})")
    return CiderApiError(f"Network error ({cause})")


def normalize_command(exchange: HttpExchange) -> None:
    """Apply the fire-and-forget policy: only the status matters.

    Raises:
        CiderHTTPError: The server answered with a non-2xx status.
    """
    _raise_for_status(exchange)


def normalize_typed(
    exchange: HttpExchange,
    parser: Callable[[dict[str, object]], T],
) -> T:
    """Apply the typed query policy: strict parse, no fallback.

    Args:
        exchange: The completed exchange.
        parser: Strict payload parser for the flattened envelope fields.

    Returns:
        The parsed payload.

    Raises:
        CiderApiError: The body is not JSON or does not match the payload.
    """
    try:
        return parse_envelope(exchange.json(), parser).data
    except (ValueError, RecursionError) as err:
        _LOGGER.debug(
            "Cider API returned an unexpected body for %s %s (HTTP %s): %s",
            exchange.method,
            exchange.path,
            exchange.status,
            err,
        )
        raise CiderApiError(
            f"Invalid response for {exchange.path} (HTTP {exchange.status}): {err}"
        ) from err


def normalize_now_playing(exchange: HttpExchange) -> NowPlaying | None:
    """Apply the now-playing policy.

    Returns:
        The current track, or None when nothing is loaded. 404, 204 and any
        body that does not parse all mean "nothing loaded".
    """
    if exchange.status in EMPTY_RESULT_STATUSES:
        return None
    try:
        return parse_envelope(exchange.json(), parse_now_playing_response).data.info
    except (ValueError, RecursionError) as err:
        _LOGGER.debug("Treating unparseable now-playing response as empty: %s", err)
        return None


def normalize_queue(exchange: HttpExchange) -> list[QueueItem]:
    """Apply the queue policy.

    Returns:
        The queue entries. 404, 204 and any body that is not an array of
        objects all yield an empty list.
    """
    if exchange.status in EMPTY_RESULT_STATUSES:
        return []
    try:
        return parse_queue(json.loads(exchange.text()))
    except (ValueError, RecursionError) as err:
        _LOGGER.debug("Treating unparseable queue response as empty: %s", err)
        return []


def normalize_passthrough(exchange: HttpExchange) -> object:
    """Apply the Apple Music passthrough policy.

    Returns:
        The decoded JSON body, untouched.

    Raises:
        CiderHTTPError: The server answered with a non-2xx status.
        CiderApiError: The body is not JSON.
    """
    _raise_for_status(exchange)
    try:
        return exchange.json()
    except (ValueError, RecursionError) as err:
        raise CiderApiError(f"Invalid JSON from {exchange.path}: {err}") from err
