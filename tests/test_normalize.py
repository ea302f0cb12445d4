"""Tests for response normalization."""

from __future__ import annotations

import json
from typing import Any

import pytest

from cider_api.exceptions import (
    CiderApiError,
    CiderConnectionError,
    CiderHTTPError,
    CiderTimeoutError,
    CiderUnauthorizedError,
)
from cider_api.models import parse_volume
from cider_api.normalize import (
    HttpExchange,
    normalize_active,
    normalize_active_failure,
    normalize_command,
    normalize_now_playing,
    normalize_passthrough,
    normalize_queue,
    normalize_typed,
)


DEEP_ARRAY = b"[" * 100_000 + b"]" * 100_000


def _exchange(status: int, body: Any = b"", method: str = "GET", path: str = "/x") -> HttpExchange:
    if not isinstance(body, bytes):
        body = json.dumps(body).encode()
    return HttpExchange(method=method, path=path, status=status, body=body)


class TestHttpExchange:
    """Test HttpExchange helpers."""

    @pytest.mark.parametrize(
        ("status", "ok"),
        [(200, True), (204, True), (299, True), (199, False), (404, False)],
    )
    def test_ok(self, status: int, ok: bool) -> None:
        """Test ok covers 2xx only."""
        assert _exchange(status).ok is ok

    def test_text_replaces_invalid_utf8(self) -> None:
        """Test invalid bytes do not raise."""
        assert _exchange(200, b"ok\xff").text() == "ok\ufffd"

    def test_json_invalid(self) -> None:
        """Test invalid JSON raises ValueError."""
        with pytest.raises(ValueError):
            _exchange(200, b"not json").json()


class TestNormalizeActive:
    """Test connectivity check policy."""

    @pytest.mark.parametrize("status", [200, 204])
    def test_alive(self, status: int) -> None:
        """Test 200 and 204 pass."""
        normalize_active(_exchange(status))

    @pytest.mark.parametrize("status", [401, 403])
    def test_unauthorized(self, status: int) -> None:
        """Test 401 and 403 raise CiderUnauthorizedError."""
        with pytest.raises(CiderUnauthorizedError):
            normalize_active(_exchange(status))

    @pytest.mark.parametrize("status", [201, 302, 404, 418, 500])
    def test_unexpected(self, status: int) -> None:
        """Test other statuses raise CiderApiError naming the code."""
        with pytest.raises(CiderApiError, match=f"HTTP {status}"):
            normalize_active(_exchange(status))

    def test_failure_timeout(self) -> None:
        """Test a timeout maps to a timed out message."""
        err = normalize_active_failure(CiderTimeoutError("slow"))
        assert str(err) == "Connection timed out"

    def test_failure_refused(self) -> None:
        """Test a connection error names its cause."""
        cause = OSError("Connection refused")
        transport = CiderConnectionError("failed")
        transport.__cause__ = cause
        err = normalize_active_failure(transport)
        assert str(err) == "Connection refused (Connection refused)"

    def test_failure_other(self) -> None:
        """Test other transport errors map to a network error."""
        err = normalize_active_failure(CiderHTTPError("Client error: reset"))
        assert str(err) == "Network error (Client error: reset)"


class TestNormalizeCommand:
    """Test fire-and-forget policy."""

    @pytest.mark.parametrize("status", [200, 201, 204])
    def test_success(self, status: int) -> None:
        """Test 2xx passes regardless of body."""
        normalize_command(_exchange(status, b"<html>", method="POST"))

    @pytest.mark.parametrize("status", [400, 404, 500, 503])
    def test_failure(self, status: int) -> None:
        """Test non-2xx raises CiderHTTPError with the status."""
        with pytest.raises(CiderHTTPError) as exc_info:
            normalize_command(_exchange(status, method="POST", path="/play"))
        assert exc_info.value.status == status
        assert str(exc_info.value) == f"HTTP {status} for POST /play"


class TestNormalizeTyped:
    """Test typed query policy."""

    def test_parsed(self) -> None:
        """Test a valid body is parsed."""
        result = normalize_typed(_exchange(200, {"status": "ok", "volume": 0.4}), parse_volume)
        assert result.volume == pytest.approx(0.4)

    def test_status_ignored(self) -> None:
        """Test a parseable body wins over a non-2xx status."""
        result = normalize_typed(_exchange(500, {"status": "ok", "volume": 1.0}), parse_volume)
        assert result.volume == 1.0

    @pytest.mark.parametrize("body", [b"", b"null", b"[]", {"status": "ok"}, {"volume": 0.5}])
    def test_invalid(self, body: Any) -> None:
        """Test unparseable bodies raise CiderApiError."""
        with pytest.raises(CiderApiError):
            normalize_typed(_exchange(200, body), parse_volume)

    def test_too_deeply_nested(self) -> None:
        """Test a body nested past the decoder limit raises CiderApiError."""
        body = b'{"status": "ok", "volume": ' + DEEP_ARRAY + b"}"
        with pytest.raises(CiderApiError):
            normalize_typed(_exchange(200, body), parse_volume)


class TestNormalizeNowPlaying:
    """Test now-playing policy."""

    def test_track(self, now_playing_payload: dict[str, Any]) -> None:
        """Test a valid body gives the track."""
        track = normalize_now_playing(_exchange(200, now_playing_payload))
        assert track is not None
        assert track.name == "Never Be Like You"

    @pytest.mark.parametrize("status", [204, 404])
    def test_empty_statuses(self, status: int, now_playing_payload: dict[str, Any]) -> None:
        """Test 204 and 404 give None even with a body."""
        assert normalize_now_playing(_exchange(status, now_playing_payload)) is None

    @pytest.mark.parametrize(
        "body", [b"", b"not json", {"garbage": True}, {"status": "ok", "info": []}]
    )
    def test_unparseable(self, body: Any) -> None:
        """Test unparseable bodies give None."""
        assert normalize_now_playing(_exchange(200, body)) is None

    def test_too_deeply_nested(self) -> None:
        """Test a body nested past the decoder limit gives None."""
        body = b'{"status": "ok", "info": ' + DEEP_ARRAY + b"}"
        assert normalize_now_playing(_exchange(200, body)) is None


class TestNormalizeQueue:
    """Test queue policy."""

    def test_items(self, queue_payload: list[dict[str, Any]]) -> None:
        """Test a valid array gives items."""
        assert len(normalize_queue(_exchange(200, queue_payload))) == 2

    def test_empty_array(self) -> None:
        """Test an empty array gives an empty list."""
        assert normalize_queue(_exchange(200, [])) == []

    @pytest.mark.parametrize("status", [204, 404])
    def test_empty_statuses(self, status: int) -> None:
        """Test 204 and 404 give an empty list."""
        assert normalize_queue(_exchange(status)) == []

    @pytest.mark.parametrize("body", [b"", b"oops", {"not": "an array"}, [1, 2]])
    def test_unparseable(self, body: Any) -> None:
        """Test unparseable bodies give an empty list."""
        assert normalize_queue(_exchange(200, body)) == []

    def test_too_deeply_nested(self) -> None:
        """Test a body nested past the decoder limit gives an empty list."""
        assert normalize_queue(_exchange(200, DEEP_ARRAY)) == []


class TestNormalizePassthrough:
    """Test Apple Music passthrough policy."""

    def test_json_returned(self) -> None:
        """Test the decoded body is returned untouched."""
        body = {"data": [{"id": "1"}], "meta": {"total": 1}}
        assert normalize_passthrough(_exchange(200, body, method="POST")) == body

    def test_http_error(self) -> None:
        """Test non-2xx raises CiderHTTPError."""
        with pytest.raises(CiderHTTPError) as exc_info:
            normalize_passthrough(_exchange(500, method="POST"))
        assert exc_info.value.status == 500

    def test_invalid_json(self) -> None:
        """Test a non-JSON body raises CiderApiError."""
        with pytest.raises(CiderApiError):
            normalize_passthrough(_exchange(200, b"<html>", method="POST"))

    def test_too_deeply_nested(self) -> None:
        """Test a body nested past the decoder limit raises CiderApiError."""
        with pytest.raises(CiderApiError):
            normalize_passthrough(_exchange(200, DEEP_ARRAY, method="POST"))
