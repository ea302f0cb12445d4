"""Async client for the Cider music player RPC API."""

from __future__ import annotations

from .api import CiderClient, CiderConfig, __version__
from .const import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    POSITION_MS_MAX,
    RATING_DISLIKE,
    RATING_LIKE,
    RATING_NONE,
    REPEAT_MODE_ALL,
    REPEAT_MODE_OFF,
    REPEAT_MODE_ONE,
    SHUFFLE_MODE_OFF,
    SHUFFLE_MODE_ON,
)
from .exceptions import (
    CiderApiError,
    CiderConnectionError,
    CiderError,
    CiderHTTPError,
    CiderNotReachableError,
    CiderNothingPlayingError,
    CiderTimeoutError,
    CiderUnauthorizedError,
)
from .models import (
    ApiResponse,
    Artwork,
    AutoplayResponse,
    IsPlayingResponse,
    KeyUrls,
    NowPlaying,
    NowPlayingResponse,
    PlayHref,
    PlayItem,
    PlayParams,
    PlayTarget,
    PlayUrl,
    Preview,
    QueueContainer,
    QueueContext,
    QueueItem,
    QueueItemAttributes,
    QueueItemState,
    RepeatModeResponse,
    ShuffleModeResponse,
    VolumeResponse,
)

__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "POSITION_MS_MAX",
    "RATING_DISLIKE",
    "RATING_LIKE",
    "RATING_NONE",
    "REPEAT_MODE_ALL",
    "REPEAT_MODE_OFF",
    "REPEAT_MODE_ONE",
    "SHUFFLE_MODE_OFF",
    "SHUFFLE_MODE_ON",
    "ApiResponse",
    "Artwork",
    "AutoplayResponse",
    "CiderApiError",
    "CiderClient",
    "CiderConfig",
    "CiderConnectionError",
    "CiderError",
    "CiderHTTPError",
    "CiderNotReachableError",
    "CiderNothingPlayingError",
    "CiderTimeoutError",
    "CiderUnauthorizedError",
    "IsPlayingResponse",
    "KeyUrls",
    "NowPlaying",
    "NowPlayingResponse",
    "PlayHref",
    "PlayItem",
    "PlayParams",
    "PlayTarget",
    "PlayUrl",
    "Preview",
    "QueueContainer",
    "QueueContext",
    "QueueItem",
    "QueueItemAttributes",
    "QueueItemState",
    "RepeatModeResponse",
    "ShuffleModeResponse",
    "VolumeResponse",
    "__version__",
]
