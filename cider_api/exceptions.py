"""Exceptions for the Cider API client."""

from __future__ import annotations


class CiderError(Exception):
    """Base exception for the Cider API client."""


class CiderHTTPError(CiderError):
    """Exception raised when an HTTP exchange fails.

    Covers transport-level failures as well as non-2xx responses to
    fire-and-forget commands and the Apple Music passthrough.

    Attributes:
        status: HTTP status code, or None when no response was received.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        """Initialize the HTTP error.

        Args:
            message: The error message.
            status: HTTP status code of the rejected response, if any.
        """
        super().__init__(message)
        self.status = status


class CiderConnectionError(CiderHTTPError):
    """Exception raised when the Cider RPC server cannot be reached.

    This includes refused connections, resets and DNS failures.
    """

    def __init__(self, message: str) -> None:
        """Initialize connection error.

        Args:
            message: The error message.
        """
        super().__init__(message, status=None)


class CiderTimeoutError(CiderConnectionError):
    """Exception raised when a request times out.

    Inherits from CiderConnectionError as timeouts are a form of connection failure.
    """


class CiderNotReachableError(CiderError):
    """Cider is not running or its port is unreachable.

    Reserved for applications that check the player process themselves;
    the client reports unreachable servers as CiderConnectionError.
    """

    def __init__(self, message: str = "Cider is not running or not reachable") -> None:
        """Initialize not reachable error."""
        super().__init__(message)


class CiderUnauthorizedError(CiderError):
    """Exception raised when the API token is rejected.

    Raised for HTTP 401 or 403 responses to the connectivity check.
    """

    def __init__(self, message: str = "Invalid API token") -> None:
        """Initialize unauthorized error."""
        super().__init__(message)


class CiderNothingPlayingError(CiderError):
    """No track is currently loaded.

    Not raised by CiderClient.async_now_playing, which returns None instead.
    """

    def __init__(self, message: str = "No track currently playing") -> None:
        """Initialize nothing playing error."""
        super().__init__(message)


class CiderApiError(CiderError):
    """Catch-all for unexpected API responses."""
