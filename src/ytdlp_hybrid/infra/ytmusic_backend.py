"""ytmusicapi backed implementation of :class:`~ytdlp_hybrid.core.protocols.MetadataBackend`.

This module is the **only** place in the codebase that imports
``ytmusicapi``.  It reshapes YouTube Music responses into the documents
the protocol promises; exception mapping happens one level up in
:mod:`ytdlp_hybrid.infra.metadata_client`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import requests

from ytdlp_hybrid.core.protocols import Credential
from ytdlp_hybrid.exceptions import ConfigurationError
from ytdlp_hybrid.infra.cookies import cookie_pairs

logger = logging.getLogger(__name__)

WATCH_NEXT_LIMIT: int = 25
YTM_ORIGIN: str = "https://music.youtube.com"
SAPISID_COOKIE: str = "__Secure-3PAPISID"


def _import_ytmusic() -> type[Any]:
    """Import ytmusicapi lazily so CLI bootstrap paths work without it."""
    try:
        from ytmusicapi import YTMusic
    except ModuleNotFoundError as exc:
        raise ConfigurationError(
            "ytmusicapi is not installed. Install with: pip install ytmusicapi",
        ) from exc
    return YTMusic


def auth_headers(credential: Credential | None) -> dict[str, str] | None:
    """Turn cookie material into ytmusicapi browser-auth headers.

    Every credential shape is read as cookies, exactly as the yt-dlp
    cookie file reads it.  ytmusicapi only treats a header set as a
    browser session when ``authorization`` carries ``SAPISIDHASH``; it
    recomputes the hash per request from the ``__Secure-3PAPISID``
    cookie, so a credential without that cookie stays anonymous.
    """
    if not credential:
        return None
    try:
        pairs = [(name.strip(), value.strip()) for name, value in cookie_pairs(credential)]
    except TypeError as exc:
        logger.warning("Unusable YouTube Music credential, continuing anonymously: %s", exc)
        return None
    pairs = [(name, value) for name, value in pairs if name and value]
    if not pairs:
        return None
    if not any(name == SAPISID_COOKIE for name, _ in pairs):
        logger.warning(
            "Credential has no %s cookie, YouTube Music session stays anonymous",
            SAPISID_COOKIE,
        )
        return None
    return {
        "cookie": "; ".join(f"{name}={value}" for name, value in pairs),
        "x-goog-authuser": "0",
        "authorization": "SAPISIDHASH 0",
        "origin": YTM_ORIGIN,
    }


def check_client_variant(client_variant: str | None) -> None:
    """Reject a client variant ytmusicapi does not know as a language.

    Raises
    ------
    ConfigurationError
        When *client_variant* is not one of ytmusicapi's languages.
    """
    if client_variant is None:
        return
    try:
        from ytmusicapi.constants import SUPPORTED_LANGUAGES
    except ModuleNotFoundError as exc:
        raise ConfigurationError(
            "ytmusicapi is not installed. Install with: pip install ytmusicapi",
        ) from exc
    if client_variant not in SUPPORTED_LANGUAGES:
        raise ConfigurationError(
            f"Unsupported client variant: {client_variant!r}",
            hint="Use a YouTube Music language code: " + ", ".join(sorted(SUPPORTED_LANGUAGES)),
        )


class YTMusicBackend:
    """One YouTube Music session.

    Usage::

        backend = YTMusicBackend.create(cookie_string, None)
        results = backend.search("daft punk", limit=5)
    """

    def __init__(self, client: Any, http: requests.Session) -> None:
        self._client = client
        self._http = http

    @classmethod
    def create(
        cls,
        credential: Credential | None,
        client_variant: str | None,
    ) -> YTMusicBackend:
        """Open a session authenticated with *credential*.

        *client_variant* selects the interface language of the session
        (``"en"``, ``"de"`` …); ytmusicapi rejects unknown values.
        """
        ytmusic_class = _import_ytmusic()
        http = requests.Session()
        kwargs: dict[str, Any] = {"requests_session": http}
        headers = auth_headers(credential)
        if headers:
            kwargs["auth"] = headers
        if client_variant:
            kwargs["language"] = client_variant
        try:
            client = ytmusic_class(**kwargs)
        except Exception:
            http.close()
            raise
        logger.debug(
            "Created YouTube Music session (authenticated=%s)", headers is not None,
        )
        return cls(client, http)

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def search(self, query: str, *, limit: int) -> list[dict[str, Any]]:
        results = self._client.search(query, filter="videos", limit=limit)
        return [item for item in results or [] if isinstance(item, dict)]

    def get_info(
        self, video_id: str, *, watch_next: bool = True,
    ) -> dict[str, Any] | None:
        song = self._client.get_song(video_id)
        details = (song or {}).get("videoDetails")
        if not details:
            return None
        return {
            "basic_info": self._basic_info(details),
            "watch_next_feed": self._watch_next(video_id) if watch_next else [],
        }

    def get_playlist(self, playlist_id: str) -> dict[str, Any] | None:
        # limit=None follows every continuation page.
        return self._client.get_playlist(playlist_id, limit=None)

    def sign_out(self) -> None:
        self._http.close()

    # ------------------------------------------------------------------
    # Reshaping
    # ------------------------------------------------------------------

    @staticmethod
    def _basic_info(details: Mapping[str, Any]) -> dict[str, Any]:
        length = details.get("lengthSeconds")
        thumbnail = details.get("thumbnail") or {}
        return {
            "title": details.get("title"),
            "author": details.get("author"),
            "duration_seconds": int(length) if str(length or "").isdigit() else None,
            "view_count": details.get("viewCount"),
            "thumbnails": thumbnail.get("thumbnails") or [],
            "short_description": details.get("shortDescription") or "",
        }

    def _watch_next(self, video_id: str) -> list[dict[str, Any]]:
        """Watch-next entries tagged as videos; empty if the lookup fails."""
        try:
            playlist = self._client.get_watch_playlist(
                videoId=video_id, limit=WATCH_NEXT_LIMIT,
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("Watch-next lookup failed for %s: %s", video_id, exc)
            return []
        return [
            {"type": "video", **track}
            for track in (playlist or {}).get("tracks") or []
            if isinstance(track, dict)
        ]
