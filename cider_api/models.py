"""Data models for the Cider API client.

Wire payloads are described by the TypedDicts in const.py; the frozen
dataclasses here are what callers receive. Parsers are lenient: a field that
is missing or has an unexpected JSON type resolves to its zero value instead
of failing the whole payload. Only the strict payload parsers used by the
typed queries (is-playing, volume, repeat/shuffle mode, autoplay) reject
missing or mistyped fields.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Generic, TypeAlias, TypeVar, cast

from .const import (
    ARTWORK_HEIGHT_PLACEHOLDER,
    ARTWORK_WIDTH_PLACEHOLDER,
    ENDPOINT_PLAY_ITEM,
    ENDPOINT_PLAY_ITEM_HREF,
    ENDPOINT_PLAY_URL,
    POSITION_MS_MAX,
    QUEUE_STATE_CURRENT,
    CiderArtwork,
    CiderQueueItem,
    CiderTrackInfo,
    PlayItemHrefRequest,
    PlayItemRequest,
    PlayUrlRequest,
)

T = TypeVar("T")


# =============================================================================
# Field coercion
# =============================================================================


def _as_str(value: object) -> str:
    return value if isinstance(value, str) else ""


def _as_optional_str(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _as_int(value: object) -> int:
    # bool is an int subclass but never a valid JSON integer here
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return 0


def _as_optional_int(value: object) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _as_float(value: object) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = float(value)
        if math.isfinite(number):
            return number
    return 0.0


def _as_bool(value: object) -> bool:
    return value if isinstance(value, bool) else False


def _as_optional_bool(value: object) -> bool | None:
    return value if isinstance(value, bool) else None


def _as_str_tuple(value: object) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(item for item in value if isinstance(item, str))


def _as_mapping(value: object) -> dict[str, object] | None:
    return value if isinstance(value, dict) else None


# =============================================================================
# Common types
# =============================================================================


@dataclass(frozen=True, slots=True)
class Artwork:
    """Artwork metadata for a track, album or station.

    The url may contain {w} and {h} placeholders for the desired image
    dimensions. Colour fields are hex strings present on some container
    artwork (radio stations).

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        url: URL template.
        text_color1: Primary text colour.
        text_color2: Secondary text colour.
        text_color3: Tertiary text colour.
        text_color4: Quaternary text colour.
        bg_color: Background colour.
        has_p3: Whether the artwork uses the Display P3 colour space.
    """

    width: int = 0
    height: int = 0
    url: str = ""
    text_color1: str | None = None
    text_color2: str | None = None
    text_color3: str | None = None
    text_color4: str | None = None
    bg_color: str | None = None
    has_p3: bool | None = None

    def url_for_size(self, size: int) -> str:
        """Return the artwork URL with {w} and {h} replaced by size.

        Args:
            size: Square edge length in pixels.

        Returns:
            Ready-to-use URL. A URL without placeholders is returned unchanged.

        Examples:
            >>> Artwork(url="https://example.com/{w}x{h}bb.jpg").url_for_size(300)
            'https://example.com/300x300bb.jpg'
        """
        edge = str(size)
        return self.url.replace(ARTWORK_WIDTH_PLACEHOLDER, edge).replace(
            ARTWORK_HEIGHT_PLACEHOLDER, edge
        )


@dataclass(frozen=True, slots=True)
class PlayParams:
    """Play parameters identifying a playable item.

    Attributes:
        id: Apple Music catalog ID.
        kind: Item kind ("song", "album", "radioStation", ...).
    """

    id: str = ""
    kind: str = ""


@dataclass(frozen=True, slots=True)
class Preview:
    """A short AAC preview clip."""

    url: str = ""


# =============================================================================
# Now Playing
# =============================================================================


@dataclass(frozen=True, slots=True)
class NowPlaying:
    """Currently playing track returned by GET /now-playing.

    Apple Music catalog metadata enriched with the live playback state Cider
    injects (position, remaining time, shuffle/repeat, library flags).
    """

    name: str = ""
    artist_name: str = ""
    album_name: str = ""
    artwork: Artwork = field(default_factory=Artwork)
    duration_in_millis: int = 0
    play_params: PlayParams | None = None
    url: str | None = None
    isrc: str | None = None
    current_playback_time: float = 0.0
    remaining_time: float = 0.0
    shuffle_mode: int = 0
    repeat_mode: int = 0
    in_favorites: bool = False
    in_library: bool = False
    genre_names: tuple[str, ...] = field(default_factory=tuple)
    track_number: int = 0
    disc_number: int = 0
    release_date: str | None = None
    audio_locale: str | None = None
    composer_name: str | None = None
    has_lyrics: bool = False
    has_time_synced_lyrics: bool = False
    is_vocal_attenuation_allowed: bool = False
    is_mastered_for_itunes: bool = False
    is_apple_digital_master: bool = False
    audio_traits: tuple[str, ...] = field(default_factory=tuple)
    previews: tuple[Preview, ...] = field(default_factory=tuple)

    @property
    def song_id(self) -> str | None:
        """Return the catalog ID from play_params, if present."""
        if self.play_params is None:
            return None
        return self.play_params.id

    @property
    def current_position_ms(self) -> int:
        """Return the playback position in milliseconds.

        Rounded half up. Negative positions, reported transiently at seek
        boundaries, are clamped to zero; positions too large to represent
        saturate at POSITION_MS_MAX.
        """
        millis = max(self.current_playback_time, 0.0) * 1000.0
        if not math.isfinite(millis) or millis >= POSITION_MS_MAX:
            return POSITION_MS_MAX
        whole = math.floor(millis)
        return whole + 1 if millis - whole >= 0.5 else whole

    def artwork_url(self, size: int) -> str:
        """Return the artwork URL at the given square size."""
        return self.artwork.url_for_size(size)


# =============================================================================
# Queue
# =============================================================================


@dataclass(frozen=True, slots=True)
class QueueItemAttributes:
    """Track attributes within a QueueItem.

    Same catalog metadata as NowPlaying plus the live playback state.
    """

    name: str = ""
    artist_name: str = ""
    album_name: str = ""
    duration_in_millis: int = 0
    artwork: Artwork | None = None
    play_params: PlayParams | None = None
    url: str | None = None
    isrc: str | None = None
    genre_names: tuple[str, ...] = field(default_factory=tuple)
    track_number: int = 0
    disc_number: int = 0
    release_date: str | None = None
    audio_locale: str | None = None
    composer_name: str | None = None
    has_lyrics: bool = False
    has_time_synced_lyrics: bool = False
    is_vocal_attenuation_allowed: bool = False
    is_mastered_for_itunes: bool = False
    is_apple_digital_master: bool = False
    audio_traits: tuple[str, ...] = field(default_factory=tuple)
    previews: tuple[Preview, ...] = field(default_factory=tuple)
    current_playback_time: float = 0.0
    remaining_time: float = 0.0


@dataclass(frozen=True, slots=True)
class QueueItemState:
    """Playback state of a QueueItem; current == 2 marks the playing item."""

    current: int | None = None


@dataclass(frozen=True, slots=True)
class QueueContainer:
    """The playlist, station or album a queue item was sourced from.

    Attributes vary by container type and are kept as raw JSON.
    """

    id: str | None = None
    container_type: str | None = None
    href: str | None = None
    name: str | None = None
    attributes: object | None = None


@dataclass(frozen=True, slots=True)
class QueueContext:
    """How a queue item was queued."""

    feature_name: str | None = None


@dataclass(frozen=True, slots=True)
class KeyUrls:
    """DRM key URLs for HLS playback."""

    hls_key_cert_url: str | None = None
    hls_key_server_url: str | None = None
    widevine_cert_url: str | None = None


@dataclass(frozen=True, slots=True)
class QueueItem:
    """A single item of the Cider playback queue.

    The queue returned by GET /queue contains history, the playing track and
    upcoming items. Most useful data lives in attributes; asset_url, assets
    and key_urls are Apple Music streaming internals.
    """

    id: str | None = None
    item_type: str | None = None
    asset_url: str | None = None
    hls_metadata: object | None = None
    flavor: str | None = None
    attributes: QueueItemAttributes | None = None
    playback_type: int | None = None
    container: QueueContainer | None = None
    context: QueueContext | None = None
    state: QueueItemState | None = None
    song_id: str | None = None
    assets: tuple[object, ...] | None = None
    key_urls: KeyUrls | None = None

    @property
    def is_current(self) -> bool:
        """Return True if this is the currently playing item."""
        return self.state is not None and self.state.current == QUEUE_STATE_CURRENT


# =============================================================================
# Play targets
# =============================================================================


@dataclass(frozen=True, slots=True)
class PlayUrl:
    """Play an Apple Music web URL (https://music.apple.com/...)."""

    url: str

    @property
    def endpoint(self) -> str:
        """Return the playback endpoint for this target."""
        return ENDPOINT_PLAY_URL

    def to_body(self) -> PlayUrlRequest:
        """Return the JSON request body."""
        return {"url": self.url}


@dataclass(frozen=True, slots=True)
class PlayItem:
    """Play a catalog item by Apple Music type ("songs", "albums", ...) and ID."""

    item_type: str
    id: str

    @property
    def endpoint(self) -> str:
        """Return the playback endpoint for this target."""
        return ENDPOINT_PLAY_ITEM

    def to_body(self) -> PlayItemRequest:
        """Return the JSON request body.

        The catalog ID is always sent as a string; Cider rejects numbers.
        """
        return {"type": self.item_type, "id": str(self.id)}


@dataclass(frozen=True, slots=True)
class PlayHref:
    """Play an item by Apple Music API href (/v1/catalog/us/songs/...)."""

    href: str

    @property
    def endpoint(self) -> str:
        """Return the playback endpoint for this target."""
        return ENDPOINT_PLAY_ITEM_HREF

    def to_body(self) -> PlayItemHrefRequest:
        """Return the JSON request body."""
        return {"href": self.href}


PlayTarget: TypeAlias = PlayUrl | PlayItem | PlayHref


# =============================================================================
# Response envelope and typed-query payloads
# =============================================================================


@dataclass(frozen=True, slots=True)
class ApiResponse(Generic[T]):
    """A {"status": ..., <fields>} response with its payload split out.

    Attributes:
        status: Status string, typically "ok".
        data: Endpoint-specific payload built from the flattened fields.
    """

    status: str
    data: T


@dataclass(frozen=True, slots=True)
class IsPlayingResponse:
    """Payload of GET /is-playing."""

    is_playing: bool


@dataclass(frozen=True, slots=True)
class NowPlayingResponse:
    """Payload of GET /now-playing."""

    info: NowPlaying


@dataclass(frozen=True, slots=True)
class VolumeResponse:
    """Payload of GET /volume (0.0 to 1.0)."""

    volume: float


@dataclass(frozen=True, slots=True)
class RepeatModeResponse:
    """Payload of GET /repeat-mode: 0 off, 1 repeat one, 2 repeat all."""

    value: int


@dataclass(frozen=True, slots=True)
class ShuffleModeResponse:
    """Payload of GET /shuffle-mode: 0 off, 1 on."""

    value: int


@dataclass(frozen=True, slots=True)
class AutoplayResponse:
    """Payload of GET /autoplay."""

    value: bool


# =============================================================================
# Parser Functions
# =============================================================================


def unwrap_envelope(payload: object) -> tuple[str, dict[str, object]]:
    """Split a status envelope into its status and flattened fields.

    Args:
        payload: Decoded JSON body.

    Returns:
        Tuple of (status, remaining fields).

    Raises:
        ValueError: payload is not an object or carries no string status.
    """
    if not isinstance(payload, dict):
        raise ValueError(f"Expected a JSON object, got {type(payload).__name__}")
    status = payload.get("status")
    if not isinstance(status, str):
        raise ValueError("Response has no status field")
    fields = {key: value for key, value in payload.items() if key != "status"}
    return status, fields


def parse_envelope(
    payload: object,
    parser: Callable[[dict[str, object]], T],
) -> ApiResponse[T]:
    """Parse a status envelope and its flattened payload.

    Args:
        payload: Decoded JSON body.
        parser: Builds the payload type from the flattened fields.

    Returns:
        The parsed envelope.

    Raises:
        ValueError: The envelope or its payload does not match.
    """
    status, fields = unwrap_envelope(payload)
    return ApiResponse(status=status, data=parser(fields))


def _require(fields: dict[str, object], key: str) -> object:
    if key not in fields:
        raise ValueError(f"Response is missing field {key!r}")
    return fields[key]


def _require_bool(fields: dict[str, object], key: str) -> bool:
    value = _require(fields, key)
    if not isinstance(value, bool):
        raise ValueError(f"Field {key!r} is not a boolean: {value!r}")
    return value


def _require_int(fields: dict[str, object], key: str) -> int:
    value = _require(fields, key)
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"Field {key!r} is not an integer: {value!r}")
    return value


def _require_float(fields: dict[str, object], key: str) -> float:
    value = _require(fields, key)
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ValueError(f"Field {key!r} is not a number: {value!r}")
    return float(value)


def parse_is_playing(fields: dict[str, object]) -> IsPlayingResponse:
    """Parse the GET /is-playing payload strictly."""
    return IsPlayingResponse(is_playing=_require_bool(fields, "is_playing"))


def parse_volume(fields: dict[str, object]) -> VolumeResponse:
    """Parse the GET /volume payload strictly."""
    return VolumeResponse(volume=_require_float(fields, "volume"))


def parse_repeat_mode(fields: dict[str, object]) -> RepeatModeResponse:
    """Parse the GET /repeat-mode payload strictly."""
    return RepeatModeResponse(value=_require_int(fields, "value"))


def parse_shuffle_mode(fields: dict[str, object]) -> ShuffleModeResponse:
    """Parse the GET /shuffle-mode payload strictly."""
    return ShuffleModeResponse(value=_require_int(fields, "value"))


def parse_autoplay(fields: dict[str, object]) -> AutoplayResponse:
    """Parse the GET /autoplay payload strictly."""
    return AutoplayResponse(value=_require_bool(fields, "value"))


def parse_now_playing_response(fields: dict[str, object]) -> NowPlayingResponse:
    """Parse the GET /now-playing payload.

    The info object itself must be present; its fields are lenient.

    Raises:
        ValueError: info is missing or not an object.
    """
    info = _as_mapping(fields.get("info"))
    if info is None:
        raise ValueError("Response has no info object")
    return NowPlayingResponse(info=parse_now_playing(cast(CiderTrackInfo, info)))


def parse_artwork(data: CiderArtwork) -> Artwork:
    """Parse an artwork object.

    Args:
        data: Raw artwork from API response.

    Returns:
        Parsed Artwork instance.
    """
    return Artwork(
        width=_as_int(data.get("width")),
        height=_as_int(data.get("height")),
        url=_as_str(data.get("url")),
        text_color1=_as_optional_str(data.get("textColor1")),
        text_color2=_as_optional_str(data.get("textColor2")),
        text_color3=_as_optional_str(data.get("textColor3")),
        text_color4=_as_optional_str(data.get("textColor4")),
        bg_color=_as_optional_str(data.get("bgColor")),
        has_p3=_as_optional_bool(data.get("hasP3")),
    )


def parse_play_params(data: object) -> PlayParams | None:
    """Parse a playParams object, or None when absent."""
    mapping = _as_mapping(data)
    if mapping is None:
        return None
    return PlayParams(id=_as_str(mapping.get("id")), kind=_as_str(mapping.get("kind")))


def parse_previews(data: object) -> tuple[Preview, ...]:
    """Parse a previews list, skipping entries that are not objects."""
    if not isinstance(data, list):
        return ()
    return tuple(
        Preview(url=_as_str(item.get("url"))) for item in data if isinstance(item, dict)
    )


def parse_now_playing(data: CiderTrackInfo) -> NowPlaying:
    """Parse the info object of GET /now-playing.

    Args:
        data: Raw track info from API response.

    Returns:
        Parsed NowPlaying instance.
    """
    artwork = _as_mapping(data.get("artwork"))

    return NowPlaying(
        name=_as_str(data.get("name")),
        artist_name=_as_str(data.get("artistName")),
        album_name=_as_str(data.get("albumName")),
        artwork=parse_artwork(cast(CiderArtwork, artwork)) if artwork is not None else Artwork(),
        duration_in_millis=_as_int(data.get("durationInMillis")),
        play_params=parse_play_params(data.get("playParams")),
        url=_as_optional_str(data.get("url")),
        isrc=_as_optional_str(data.get("isrc")),
        current_playback_time=_as_float(data.get("currentPlaybackTime")),
        remaining_time=_as_float(data.get("remainingTime")),
        shuffle_mode=_as_int(data.get("shuffleMode")),
        repeat_mode=_as_int(data.get("repeatMode")),
        in_favorites=_as_bool(data.get("inFavorites")),
        in_library=_as_bool(data.get("inLibrary")),
        genre_names=_as_str_tuple(data.get("genreNames")),
        track_number=_as_int(data.get("trackNumber")),
        disc_number=_as_int(data.get("discNumber")),
        release_date=_as_optional_str(data.get("releaseDate")),
        audio_locale=_as_optional_str(data.get("audioLocale")),
        composer_name=_as_optional_str(data.get("composerName")),
        has_lyrics=_as_bool(data.get("hasLyrics")),
        has_time_synced_lyrics=_as_bool(data.get("hasTimeSyncedLyrics")),
        is_vocal_attenuation_allowed=_as_bool(data.get("isVocalAttenuationAllowed")),
        is_mastered_for_itunes=_as_bool(data.get("isMasteredForItunes")),
        is_apple_digital_master=_as_bool(data.get("isAppleDigitalMaster")),
        audio_traits=_as_str_tuple(data.get("audioTraits")),
        previews=parse_previews(data.get("previews")),
    )


def parse_queue_item_attributes(data: CiderTrackInfo) -> QueueItemAttributes:
    """Parse the attributes object of a queue item."""
    artwork = _as_mapping(data.get("artwork"))

    return QueueItemAttributes(
        name=_as_str(data.get("name")),
        artist_name=_as_str(data.get("artistName")),
        album_name=_as_str(data.get("albumName")),
        duration_in_millis=_as_int(data.get("durationInMillis")),
        artwork=parse_artwork(cast(CiderArtwork, artwork)) if artwork is not None else None,
        play_params=parse_play_params(data.get("playParams")),
        url=_as_optional_str(data.get("url")),
        isrc=_as_optional_str(data.get("isrc")),
        genre_names=_as_str_tuple(data.get("genreNames")),
        track_number=_as_int(data.get("trackNumber")),
        disc_number=_as_int(data.get("discNumber")),
        release_date=_as_optional_str(data.get("releaseDate")),
        audio_locale=_as_optional_str(data.get("audioLocale")),
        composer_name=_as_optional_str(data.get("composerName")),
        has_lyrics=_as_bool(data.get("hasLyrics")),
        has_time_synced_lyrics=_as_bool(data.get("hasTimeSyncedLyrics")),
        is_vocal_attenuation_allowed=_as_bool(data.get("isVocalAttenuationAllowed")),
        is_mastered_for_itunes=_as_bool(data.get("isMasteredForItunes")),
        is_apple_digital_master=_as_bool(data.get("isAppleDigitalMaster")),
        audio_traits=_as_str_tuple(data.get("audioTraits")),
        previews=parse_previews(data.get("previews")),
        current_playback_time=_as_float(data.get("currentPlaybackTime")),
        remaining_time=_as_float(data.get("remainingTime")),
    )


def parse_queue_item(data: CiderQueueItem) -> QueueItem:
    """Parse one entry of GET /queue.

    Args:
        data: Raw queue item from API response.

    Returns:
        Parsed QueueItem instance.
    """
    attributes = _as_mapping(data.get("attributes"))
    container = _as_mapping(data.get("_container"))
    context = _as_mapping(data.get("_context"))
    state = _as_mapping(data.get("_state"))
    key_urls = _as_mapping(data.get("keyURLs"))
    assets = data.get("assets")

    return QueueItem(
        id=_as_optional_str(data.get("id")),
        item_type=_as_optional_str(data.get("type")),
        asset_url=_as_optional_str(data.get("assetURL")),
        hls_metadata=data.get("hlsMetadata"),
        flavor=_as_optional_str(data.get("flavor")),
        attributes=(
            parse_queue_item_attributes(cast(CiderTrackInfo, attributes))
            if attributes is not None
            else None
        ),
        playback_type=_as_optional_int(data.get("playbackType")),
        container=(
            QueueContainer(
                id=_as_optional_str(container.get("id")),
                container_type=_as_optional_str(container.get("type")),
                href=_as_optional_str(container.get("href")),
                name=_as_optional_str(container.get("name")),
                attributes=container.get("attributes"),
            )
            if container is not None
            else None
        ),
        context=(
            QueueContext(feature_name=_as_optional_str(context.get("featureName")))
            if context is not None
            else None
        ),
        state=(
            QueueItemState(current=_as_optional_int(state.get("current")))
            if state is not None
            else None
        ),
        song_id=_as_optional_str(data.get("_songId")),
        assets=tuple(assets) if isinstance(assets, list) else None,
        key_urls=(
            KeyUrls(
                hls_key_cert_url=_as_optional_str(key_urls.get("hls-key-cert-url")),
                hls_key_server_url=_as_optional_str(key_urls.get("hls-key-server-url")),
                widevine_cert_url=_as_optional_str(key_urls.get("widevine-cert-url")),
            )
            if key_urls is not None
            else None
        ),
    )


def parse_queue(payload: object) -> list[QueueItem]:
    """Parse the bare JSON array returned by GET /queue.

    Raises:
        ValueError: payload is not an array of objects.
    """
    if not isinstance(payload, list):
        raise ValueError(f"Expected a JSON array, got {type(payload).__name__}")
    items: list[QueueItem] = []
    for index, entry in enumerate(payload):
        if not isinstance(entry, dict):
            raise ValueError(f"Queue entry {index} is not an object")
        items.append(parse_queue_item(cast(CiderQueueItem, entry)))
    return items


__all__ = [
    "ApiResponse",
    "Artwork",
    "AutoplayResponse",
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
    "parse_artwork",
    "parse_autoplay",
    "parse_envelope",
    "parse_is_playing",
    "parse_now_playing",
    "parse_now_playing_response",
    "parse_queue",
    "parse_queue_item",
    "parse_repeat_mode",
    "parse_shuffle_mode",
    "parse_volume",
    "unwrap_envelope",
]
