"""Raw-dict → domain-model normalization (pure).

Backends describe the same things in different shapes: yt-dlp emits
flat JSON documents, YouTube Music responses use ``videoId`` and
``artists`` lists, and YouTube web-style payloads nest display strings
inside ``{"text": ...}`` objects.  Everything here tolerates all of
them and always fills sentinels for missing fields.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any

from ytdlp_hybrid.core.models import (
    UNKNOWN_ARTIST,
    UNKNOWN_AUTHOR,
    UNKNOWN_DURATION,
    UNKNOWN_PLAYLIST,
    UNKNOWN_TITLE,
    PlaylistInfo,
    TrackInfo,
)
from ytdlp_hybrid.core.url_classifier import playlist_url, watch_url

_PLAYABLE_TYPES: frozenset[str] = frozenset({"video", "compactvideo", "song"})


# ---------------------------------------------------------------------------
# Duration
# ---------------------------------------------------------------------------

def format_duration(seconds: object) -> str:
    """Render a duration in seconds as ``H:MM:SS`` or ``M:SS``.

    Non-numeric, NaN, infinite and negative input yields ``"Unknown"``.
    """
    if isinstance(seconds, bool):
        return UNKNOWN_DURATION
    try:
        value = float(seconds)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return UNKNOWN_DURATION
    if math.isnan(value) or math.isinf(value) or value < 0:
        return UNKNOWN_DURATION

    total = int(value)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def text_of(value: Any) -> str | None:
    """Return the display text of a plain string or a ``{"text": ...}`` node."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, Mapping):
        text = value.get("text")
        if isinstance(text, str) and text:
            return text
    return None


def name_of(value: Any) -> str | None:
    """Return the name of a plain string or a ``{"name": ...}`` node."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, Mapping):
        name = value.get("name")
        if isinstance(name, str) and name:
            return name
    return None


def first_thumbnail(raw: Mapping[str, Any]) -> str | None:
    """Pick the first thumbnail URL from whichever key the backend used."""
    for key in ("thumbnails", "thumbnail"):
        node = raw.get(key)
        if isinstance(node, str) and node:
            return node
        if isinstance(node, Mapping):
            if isinstance(node.get("url"), str):
                return node["url"]
            node = node.get("thumbnails")
        if isinstance(node, Sequence) and not isinstance(node, str) and node:
            head = node[0]
            if isinstance(head, Mapping) and isinstance(head.get("url"), str):
                return head["url"]
    return None


def entry_id(raw: Mapping[str, Any]) -> str | None:
    for key in ("id", "video_id", "videoId"):
        value = raw.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def _entry_author(raw: Mapping[str, Any]) -> str:
    author = name_of(raw.get("author")) or name_of(raw.get("channel"))
    if author:
        return author
    artists = raw.get("artists")
    if isinstance(artists, Sequence) and not isinstance(artists, str):
        names = [name for name in (name_of(a) for a in artists) if name]
        if names:
            return ", ".join(names)
    return UNKNOWN_ARTIST


def _entry_duration(raw: Mapping[str, Any]) -> str:
    for key in ("duration", "length"):
        value = raw.get(key)
        text = text_of(value)
        if text:
            return text
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return format_duration(value)
    if raw.get("duration_seconds") is not None:
        return format_duration(raw["duration_seconds"])
    return UNKNOWN_DURATION


def _entry_views(raw: Mapping[str, Any]) -> str | int:
    for key in ("view_count", "views"):
        value = raw.get(key)
        text = text_of(value)
        if text:
            return text
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return "0"


# ---------------------------------------------------------------------------
# Entries (search results, playlist items, watch-next items)
# ---------------------------------------------------------------------------

def normalize_entry(raw: Mapping[str, Any]) -> TrackInfo | None:
    """Convert one listing entry into a :class:`TrackInfo`.

    Returns ``None`` when the entry carries no video ID.
    """
    video_id = entry_id(raw)
    if video_id is None:
        return None
    return TrackInfo(
        id=video_id,
        title=text_of(raw.get("title")) or UNKNOWN_TITLE,
        author=_entry_author(raw),
        duration=_entry_duration(raw),
        thumbnail_url=first_thumbnail(raw),
        canonical_url=watch_url(video_id),
        view_count=_entry_views(raw),
    )


def is_playable_entry(raw: object) -> bool:
    """Watch-next filter: a video item that has both an ID and a title."""
    if not isinstance(raw, Mapping):
        return False
    kind = raw.get("type", "video")
    if not isinstance(kind, str) or kind.lower() not in _PLAYABLE_TYPES:
        return False
    if raw.get("isAvailable") is False:
        return False
    return entry_id(raw) is not None and text_of(raw.get("title")) is not None


def playable_entries(feed: object, limit: int) -> list[TrackInfo]:
    """Filter a watch-next feed to playable items and normalize the first *limit*."""
    if not isinstance(feed, Sequence) or isinstance(feed, str) or limit <= 0:
        return []
    tracks: list[TrackInfo] = []
    for raw in feed:
        if not is_playable_entry(raw):
            continue
        track = normalize_entry(raw)
        if track is not None:
            tracks.append(track)
        if len(tracks) >= limit:
            break
    return tracks


# ---------------------------------------------------------------------------
# Full documents
# ---------------------------------------------------------------------------

def normalize_basic_info(video_id: str, basic: Mapping[str, Any]) -> TrackInfo:
    """Convert a backend ``basic_info`` block (single-video lookup)."""
    duration: str
    text = text_of(basic.get("duration"))
    if text:
        duration = text
    elif basic.get("duration_seconds") is not None:
        duration = format_duration(basic["duration_seconds"])
    else:
        duration = UNKNOWN_DURATION

    views = basic.get("view_count")
    return TrackInfo(
        id=video_id,
        title=text_of(basic.get("title")) or UNKNOWN_TITLE,
        author=name_of(basic.get("author")) or UNKNOWN_ARTIST,
        duration=duration,
        thumbnail_url=first_thumbnail(basic),
        canonical_url=watch_url(video_id),
        view_count=views if isinstance(views, (str, int)) and not isinstance(views, bool) else 0,
        description=text_of(basic.get("short_description")) or "",
    )


def normalize_ytdlp_document(
    info: Mapping[str, Any],
    *,
    fallback_id: str | None = None,
    canonical_url: str | None = None,
) -> TrackInfo:
    """Convert a yt-dlp ``-J`` JSON document into a :class:`TrackInfo`."""
    raw_id = info.get("id")
    track_id = fallback_id or (str(raw_id) if raw_id else "unknown")
    url = canonical_url or info.get("webpage_url") or info.get("original_url") or ""
    views = info.get("view_count")
    return TrackInfo(
        id=track_id,
        title=info.get("title") or info.get("fulltitle") or UNKNOWN_TITLE,
        author=info.get("uploader") or info.get("channel") or UNKNOWN_ARTIST,
        duration=format_duration(info["duration"]) if info.get("duration") else UNKNOWN_DURATION,
        thumbnail_url=info.get("thumbnail") or None,
        canonical_url=str(url),
        view_count=views if isinstance(views, int) and not isinstance(views, bool) else 0,
        description=info.get("description") or "",
    )


def playlist_entries(raw: Mapping[str, Any]) -> list[Any] | None:
    """Return the entry list of a playlist response, or ``None`` if absent.

    Accepts ``videos``, ``items`` (web-style payloads) and ``tracks``
    (YouTube Music payloads).
    """
    for key in ("videos", "items", "tracks"):
        value = raw.get(key)
        if isinstance(value, Sequence) and not isinstance(value, str):
            return list(value)
    return None


def build_playlist(
    playlist_id: str,
    raw: Mapping[str, Any],
    tracks: Sequence[TrackInfo],
) -> PlaylistInfo:
    """Assemble playlist-level metadata around already-resolved *tracks*."""
    info = raw.get("info") if isinstance(raw.get("info"), Mapping) else {}
    title = text_of(info.get("title")) or text_of(raw.get("title")) or UNKNOWN_PLAYLIST
    description = text_of(info.get("description")) or text_of(raw.get("description")) or ""
    author = name_of(info.get("author")) or name_of(raw.get("author")) or UNKNOWN_AUTHOR
    return PlaylistInfo(
        id=playlist_id,
        title=title,
        description=description,
        thumbnail_url=first_thumbnail(info) or first_thumbnail(raw),
        author=author,
        canonical_url=playlist_url(playlist_id),
        tracks=tuple(tracks),
    )
