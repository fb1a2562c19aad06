"""Pure URL classification for the recognized video site (YouTube).

No side effects and no I/O: every function returns a value for any
string input and never raises.
"""

from __future__ import annotations

import re
from urllib.parse import urlparse

_RECOGNIZED_SITE_RE = re.compile(
    r"^(https?://)?(www\.)?(youtube\.com|youtu\.be|m\.youtube\.com)",
    re.IGNORECASE,
)
_PLAYLIST_ID_RE = re.compile(r"[?&]list=([a-zA-Z0-9_-]+)")
_VIDEO_ID_RE = re.compile(
    r"(?:youtube\.com/(?:[^/]+/.+/|(?:v|e(?:mbed)?)/|.*[?&]v=)|youtu\.be/)"
    r"([^\"&?/\s]{11})",
    re.IGNORECASE,
)

_DENIED_SCHEMES: frozenset[str] = frozenset({"file", "ftp", "mailto"})

WATCH_URL_TEMPLATE: str = "https://www.youtube.com/watch?v={}"
PLAYLIST_URL_TEMPLATE: str = "https://www.youtube.com/playlist?list={}"


def is_url(value: str) -> bool:
    """Return ``True`` when *value* parses as an absolute URL.

    Mirrors WHATWG-style strict parsing: a scheme is required, and
    hierarchical schemes additionally need a host.  Strings containing
    whitespace are rejected so that ``"artist: title"`` stays a search.
    """
    if not isinstance(value, str) or not value:
        return False
    if any(ch.isspace() for ch in value):
        return False
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    if not parsed.scheme or not re.fullmatch(r"[a-zA-Z][a-zA-Z0-9+.-]*", parsed.scheme):
        return False
    if parsed.scheme.lower() in ("http", "https", "ftp", "ws", "wss"):
        return bool(parsed.netloc)
    return bool(parsed.netloc or parsed.path)


def is_recognized_site_url(value: str) -> bool:
    """Match bare, ``www``, mobile and short-link hosts, scheme optional."""
    if not isinstance(value, str):
        return False
    return _RECOGNIZED_SITE_RE.match(value) is not None


def is_playlist_url(value: str) -> bool:
    """Recognized-site URL that also carries a ``list=`` parameter."""
    return is_recognized_site_url(value) and _PLAYLIST_ID_RE.search(value) is not None


def extract_playlist_id(value: str) -> str | None:
    if not isinstance(value, str):
        return None
    match = _PLAYLIST_ID_RE.search(value)
    return match.group(1) if match else None


def extract_video_id(value: str) -> str | None:
    """Return the 11-character video ID embedded in *value*, if any."""
    if not isinstance(value, str):
        return None
    match = _VIDEO_ID_RE.search(value)
    return match.group(1) if match else None


def validate_url(value: object) -> bool:
    """Non-empty, parseable URL whose scheme is not ``file``/``ftp``/``mailto``."""
    if not isinstance(value, str) or not value:
        return False
    if not is_url(value):
        return False
    return urlparse(value).scheme.lower() not in _DENIED_SCHEMES


def watch_url(video_id: str) -> str:
    return WATCH_URL_TEMPLATE.format(video_id)


def playlist_url(playlist_id: str) -> str:
    return PLAYLIST_URL_TEMPLATE.format(playlist_id)
