"""Constants for the Cider API client."""

from __future__ import annotations

from typing import Final, NotRequired, TypedDict

# Default values
DEFAULT_HOST: Final = "127.0.0.1"
DEFAULT_PORT: Final = 10767
DEFAULT_TIMEOUT: Final = 2  # seconds, whole request
DEFAULT_CONNECT_TIMEOUT: Final = 1  # seconds, the server is always on loopback

# Connection pool
POOL_LIMIT_PER_HOST: Final = 2
POOL_KEEPALIVE_TIMEOUT: Final = 10  # seconds an idle connection is kept

# HTTP constants
HEADER_APP_TOKEN: Final = "apptoken"
USER_AGENT_TEMPLATE: Final = "cider-api-python/{version}"

# HTTP methods
HTTP_GET: Final = "GET"
HTTP_POST: Final = "POST"

# Namespaces
PLAYBACK_PREFIX: Final = "/api/v1/playback"

# Playback endpoints (relative to PLAYBACK_PREFIX)
ENDPOINT_ACTIVE: Final = "/active"
ENDPOINT_IS_PLAYING: Final = "/is-playing"
ENDPOINT_NOW_PLAYING: Final = "/now-playing"
ENDPOINT_PLAY: Final = "/play"
ENDPOINT_PAUSE: Final = "/pause"
ENDPOINT_PLAY_PAUSE: Final = "/playpause"
ENDPOINT_STOP: Final = "/stop"
ENDPOINT_NEXT: Final = "/next"
ENDPOINT_PREVIOUS: Final = "/previous"
ENDPOINT_SEEK: Final = "/seek"
ENDPOINT_PLAY_URL: Final = "/play-url"
ENDPOINT_PLAY_ITEM: Final = "/play-item"
ENDPOINT_PLAY_ITEM_HREF: Final = "/play-item-href"
ENDPOINT_PLAY_NEXT: Final = "/play-next"
ENDPOINT_PLAY_LATER: Final = "/play-later"
ENDPOINT_QUEUE: Final = "/queue"
ENDPOINT_QUEUE_MOVE: Final = "/queue/move-to-position"
ENDPOINT_QUEUE_REMOVE: Final = "/queue/remove-by-index"
ENDPOINT_QUEUE_CLEAR: Final = "/queue/clear-queue"
ENDPOINT_VOLUME: Final = "/volume"
ENDPOINT_ADD_TO_LIBRARY: Final = "/add-to-library"
ENDPOINT_SET_RATING: Final = "/set-rating"
ENDPOINT_REPEAT_MODE: Final = "/repeat-mode"
ENDPOINT_TOGGLE_REPEAT: Final = "/toggle-repeat"
ENDPOINT_SHUFFLE_MODE: Final = "/shuffle-mode"
ENDPOINT_TOGGLE_SHUFFLE: Final = "/toggle-shuffle"
ENDPOINT_AUTOPLAY: Final = "/autoplay"
ENDPOINT_TOGGLE_AUTOPLAY: Final = "/toggle-autoplay"

# Raw endpoints (relative to the base URL)
ENDPOINT_AMAPI_RUN_V3: Final = "/api/v1/amapi/run-v3"

# Value ranges
VOLUME_MIN: Final = 0.0
VOLUME_MAX: Final = 1.0
RATING_DISLIKE: Final = -1
RATING_NONE: Final = 0
RATING_LIKE: Final = 1

# Artwork URL placeholders
ARTWORK_WIDTH_PLACEHOLDER: Final = "{w}"
ARTWORK_HEIGHT_PLACEHOLDER: Final = "{h}"

# Queue item state marking the active entry
QUEUE_STATE_CURRENT: Final = 2

# Largest playback position in milliseconds (unsigned 64-bit)
POSITION_MS_MAX: Final = 2**64 - 1

# Repeat modes
REPEAT_MODE_OFF: Final = 0
REPEAT_MODE_ONE: Final = 1
REPEAT_MODE_ALL: Final = 2

# Shuffle modes
SHUFFLE_MODE_OFF: Final = 0
SHUFFLE_MODE_ON: Final = 1


# =============================================================================
# TypedDicts for Request Bodies
# =============================================================================
# Key names follow the wire casing, not Python naming.
# =============================================================================


class SeekRequest(TypedDict):
    """Body for POST /seek."""

    position: float  # seconds


class VolumeRequest(TypedDict):
    """Body for POST /volume."""

    volume: float


class RatingRequest(TypedDict):
    """Body for POST /set-rating."""

    rating: int


class PlayUrlRequest(TypedDict):
    """Body for POST /play-url."""

    url: str


class PlayItemRequest(TypedDict):
    """Body for POST /play-item, /play-next and /play-later."""

    type: str
    id: str


class PlayItemHrefRequest(TypedDict):
    """Body for POST /play-item-href."""

    href: str


class QueueMoveRequest(TypedDict):
    """Body for POST /queue/move-to-position."""

    startIndex: int
    destinationIndex: int
    returnQueue: NotRequired[bool]


class QueueRemoveRequest(TypedDict):
    """Body for POST /queue/remove-by-index."""

    index: int


class AmApiRequest(TypedDict):
    """Body for POST /api/v1/amapi/run-v3."""

    path: str


# =============================================================================
# TypedDicts for API Responses
# =============================================================================
# These describe what Cider usually sends. Parsers in models.py never trust
# them and fall back to zero values for anything missing or mistyped.
# =============================================================================


class CiderArtwork(TypedDict, total=False):
    """Artwork object inside track payloads."""

    width: int
    height: int
    url: str
    textColor1: str
    textColor2: str
    textColor3: str
    textColor4: str
    bgColor: str
    hasP3: bool


class CiderPlayParams(TypedDict):
    """playParams object inside track payloads."""

    id: str
    kind: str


class CiderPreview(TypedDict):
    """Preview entry inside track payloads."""

    url: str


class CiderTrackInfo(TypedDict, total=False):
    """info object of GET /now-playing and attributes of queue items."""

    name: str
    artistName: str
    albumName: str
    artwork: CiderArtwork
    durationInMillis: int
    playParams: CiderPlayParams
    url: str
    isrc: str
    currentPlaybackTime: float
    remainingTime: float
    shuffleMode: int
    repeatMode: int
    inFavorites: bool
    inLibrary: bool
    genreNames: list[str]
    trackNumber: int
    discNumber: int
    releaseDate: str
    audioLocale: str
    composerName: str
    hasLyrics: bool
    hasTimeSyncedLyrics: bool
    isVocalAttenuationAllowed: bool
    isMasteredForItunes: bool
    isAppleDigitalMaster: bool
    audioTraits: list[str]
    previews: list[CiderPreview]


class CiderQueueItemState(TypedDict, total=False):
    """_state object of a queue item."""

    current: int


class CiderQueueContainer(TypedDict, total=False):
    """_container object of a queue item."""

    id: str
    type: str
    href: str
    name: str
    attributes: object


class CiderQueueContext(TypedDict, total=False):
    """_context object of a queue item."""

    featureName: str


# Keys contain dashes, so the functional syntax is required.
CiderKeyUrls = TypedDict(
    "CiderKeyUrls",
    {
        "hls-key-cert-url": str,
        "hls-key-server-url": str,
        "widevine-cert-url": str,
    },
    total=False,
)


CiderQueueItem = TypedDict(
    "CiderQueueItem",
    {
        "id": str,
        "type": str,
        "assetURL": str,
        "hlsMetadata": object,
        "flavor": str,
        "attributes": CiderTrackInfo,
        "playbackType": int,
        "_container": CiderQueueContainer,
        "_context": CiderQueueContext,
        "_state": CiderQueueItemState,
        "_songId": str,
        "assets": list[object],
        "keyURLs": CiderKeyUrls,
    },
    total=False,
)


# =============================================================================
# Utility Functions
# =============================================================================


def sanitize_token(token: str | None) -> str:
    """Sanitize an API token for safe logging.

    Args:
        token: The full API token, or None when unauthenticated.

    Returns:
        "N/A" without a token, otherwise a truncated token safe for logging
        (first 4 + last 2 chars).
    """
    if token is None:
        return "N/A"
    if len(token) <= 6:
        return "***"
    return f"{token[:4]}...{token[-2:]}"
