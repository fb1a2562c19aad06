"""Domain models for ytdlp-hybrid.

All models are **frozen** dataclasses: immutable value objects with no
behaviour beyond data access and a few constructors.  They carry zero
I/O and no dependencies on external packages.

Every field of :class:`TrackInfo` and :class:`PlaylistInfo` is always
populated: values missing upstream are replaced with the sentinels below
so downstream consumers never have to probe for absent keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field

UNKNOWN_TITLE: str = "Unknown Title"
UNKNOWN_ARTIST: str = "Unknown Artist"
UNKNOWN_DURATION: str = "Unknown"
UNKNOWN_PLAYLIST: str = "Unknown Playlist"
UNKNOWN_AUTHOR: str = "Unknown"

DEFAULT_STREAM_QUALITY: str = "bestaudio[ext=m4a]/bestaudio[ext=webm]/bestaudio"
"""yt-dlp format selector: audio-only m4a, then webm, then any best audio."""

EXTRACTOR_IDENTIFIER: str = "ytdlp-extractor"
"""Source tag stamped on every track this package produces."""


# ---------------------------------------------------------------------------
# Track / playlist metadata
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class TrackInfo:
    """Normalized metadata for a single playable item."""

    id: str
    """Backend identifier (an 11-character video ID on YouTube)."""

    title: str = UNKNOWN_TITLE
    author: str = UNKNOWN_ARTIST

    duration: str = UNKNOWN_DURATION
    """Display duration, ``H:MM:SS`` / ``M:SS`` or ``"Unknown"``."""

    thumbnail_url: str | None = None

    canonical_url: str = ""
    """Page URL handed back to yt-dlp when the stream is resolved."""

    view_count: str | int = "0"
    """Display string from search backends or a raw count from yt-dlp."""

    description: str = ""


@dataclass(frozen=True, slots=True)
class PlaylistInfo:
    """Normalized playlist with its tracks in source enumeration order."""

    id: str
    title: str = UNKNOWN_PLAYLIST
    description: str = ""
    thumbnail_url: str | None = None
    author: str = UNKNOWN_AUTHOR
    canonical_url: str = ""
    tracks: tuple[TrackInfo, ...] = ()

    def __len__(self) -> int:
        return len(self.tracks)


# ---------------------------------------------------------------------------
# Host-facing wrappers
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ResolvedTrack:
    """A :class:`TrackInfo` annotated with how and for whom it was resolved."""

    info: TrackInfo
    requested_by: str | None = None

    query_type: str = "arbitrary"
    """``"arbitrary"`` (direct URL/playlist), ``"search"`` or ``"autoplay"``."""

    source: str = EXTRACTOR_IDENTIFIER
    original_query: str | None = None
    related_to: str | None = None
    playlist_id: str | None = None

    @property
    def url(self) -> str:
        return self.info.canonical_url

    @property
    def title(self) -> str:
        return self.info.title

    @property
    def author(self) -> str:
        return self.info.author


@dataclass(frozen=True, slots=True)
class ExtractorResult:
    """Single-or-many result returned to the host for one query."""

    playlist: PlaylistInfo | None = None
    tracks: tuple[ResolvedTrack, ...] = ()

    @classmethod
    def empty(cls) -> ExtractorResult:
        """The "nothing found" result."""
        return cls()

    def __len__(self) -> int:
        return len(self.tracks)

    def __bool__(self) -> bool:
        return len(self.tracks) > 0


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Per-request context supplied by the host."""

    requested_by: str | None = None
    history: tuple[str, ...] = field(default_factory=tuple)
    """Canonical URLs of tracks already played in this session."""


@dataclass(frozen=True, slots=True)
class BridgeResult:
    """Stream handed to another extractor that bridged a track to us."""

    stream: str
    type: str = "arbitrary"
