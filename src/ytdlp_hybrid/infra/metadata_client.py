"""Async client for the structured metadata backend (YouTube Music).

Owns the process-wide backend session through :class:`SessionManager`
and exposes search, single-video, playlist and related-item lookups as
coroutines.  Blocking backend calls run in a worker thread under a
fixed timeout; an abandoned call only ever returns into a discarded
future, never into shared state.

Raw backend exceptions are mapped here onto
:class:`~ytdlp_hybrid.exceptions.HybridExtractorError` subclasses.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from ytdlp_hybrid.core.batching import DEFAULT_BATCH_SIZE, resolve_in_batches
from ytdlp_hybrid.core.models import PlaylistInfo, TrackInfo
from ytdlp_hybrid.core.normalize import (
    build_playlist,
    normalize_basic_info,
    normalize_entry,
    playable_entries,
    playlist_entries,
)
from ytdlp_hybrid.core.protocols import Credential, MetadataBackend, SessionFactory
from ytdlp_hybrid.exceptions import (
    BackendTimeoutError,
    BackendUnavailableError,
    HybridExtractorError,
    MetadataBackendError,
    NotFoundError,
    PrivateOrUnavailableError,
)
from ytdlp_hybrid.infra.ytmusic_backend import YTMusicBackend

logger = logging.getLogger(__name__)

SEARCH_TIMEOUT_SECONDS: float = 10.0
PLAYLIST_TIMEOUT_SECONDS: float = 15.0
INFO_TIMEOUT_SECONDS: float = 15.0

T = TypeVar("T")

_PRIVATE_SIGNALS: tuple[str, ...] = ("unviewable", "private", "sign in")
_NOT_FOUND_SIGNALS: tuple[str, ...] = ("not found", "404", "does not exist")


# ---------------------------------------------------------------------------
# Session ownership
# ---------------------------------------------------------------------------

class SessionManager:
    """Single owner of the live backend session.

    The session is created lazily and reused while the credential stays
    the same.  A different credential tears the old session down and
    creates a new one.  Creation and replacement are serialized behind
    an :class:`asyncio.Lock`, so concurrent requests never observe a
    half-replaced session.

    Sign-out is best-effort: its failures are logged and never
    propagated.  A failed creation leaves no session (``None``) rather
    than raising, so callers can fall back to the other backend; the
    next call retries.
    """

    def __init__(self, factory: SessionFactory | None = None) -> None:
        self._factory: SessionFactory = factory or YTMusicBackend.create
        self._lock = asyncio.Lock()
        self._session: MetadataBackend | None = None
        self._credential: Credential | None = None
        self.creations: int = 0
        """Number of sessions created so far (diagnostics)."""

    @property
    def current(self) -> MetadataBackend | None:
        return self._session

    async def ensure_session(
        self,
        credential: Credential | None,
        client_variant: str | None = None,
    ) -> MetadataBackend | None:
        """Return a live session for *credential*, or ``None`` if unavailable."""
        async with self._lock:
            if self._session is not None and credential == self._credential:
                return self._session

            await self._sign_out_locked()
            try:
                session = await asyncio.to_thread(self._factory, credential, client_variant)
            except Exception as exc:  # noqa: BLE001
                logger.error("Failed to initialize YouTube service: %s", exc)
                self._session = None
                return None

            self._session = session
            self._credential = credential
            self.creations += 1
            return session

    async def close(self) -> None:
        """Tear down the current session (best-effort)."""
        async with self._lock:
            await self._sign_out_locked()

    async def _sign_out_locked(self) -> None:
        session, self._session = self._session, None
        if session is None:
            return
        try:
            await asyncio.to_thread(session.sign_out)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Ignoring sign-out failure: %s", exc)


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class MetadataBackendClient:
    """Coroutine façade over a :class:`SessionManager`.

    Parameters
    ----------
    sessions:
        Session owner.  A fresh ytmusicapi-backed manager when omitted.
    credential:
        Cookie material forwarded to the backend session.
    client_variant:
        Backend client selector forwarded to the session factory.
    batch_size:
        Playlist entries resolved concurrently per group.
    """

    def __init__(
        self,
        sessions: SessionManager | None = None,
        *,
        credential: Credential | None = None,
        client_variant: str | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        self._sessions = sessions or SessionManager()
        self._credential = credential
        self._client_variant = client_variant
        self._batch_size = batch_size

    @property
    def sessions(self) -> SessionManager:
        return self._sessions

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def search(self, query: str, limit: int = 1) -> list[TrackInfo]:
        """Search for videos; empty when nothing matched or no session exists.

        Raises
        ------
        BackendTimeoutError
            When the backend does not answer within 10 seconds.
        """
        session = await self._sessions.ensure_session(self._credential, self._client_variant)
        if session is None:
            logger.warning("YouTube service not available, search for %r skipped", query)
            return []

        raw = await self._call("search", SEARCH_TIMEOUT_SECONDS, session.search, query, limit=limit)
        tracks = [
            track
            for track in (normalize_entry(item) for item in raw or [] if isinstance(item, Mapping))
            if track is not None
        ]
        return tracks[:limit]

    async def get_video_info(self, video_id: str) -> TrackInfo:
        """Return metadata for one video.

        Raises
        ------
        NotFoundError
            When the backend knows no such video.
        BackendUnavailableError
            When no session could be created.
        """
        raw = await self._info(video_id, watch_next=False)
        return normalize_basic_info(video_id, raw.get("basic_info") or {})

    async def get_raw_info(self, video_id: str) -> dict[str, Any]:
        """Return the backend info document (``basic_info`` + ``watch_next_feed``)."""
        return await self._info(video_id, watch_next=True)

    async def get_playlist(self, playlist_id: str) -> PlaylistInfo:
        """Fetch a playlist and resolve its entries in bounded batches.

        Entries without an ID, or that fail to normalize, are dropped.

        Raises
        ------
        PrivateOrUnavailableError
            When the response lists no entries at all.
        NotFoundError
            When the backend knows no such playlist.
        BackendTimeoutError
            When the backend does not answer within 15 seconds.
        """
        session = await self._require_session()
        raw = await self._call("playlist", PLAYLIST_TIMEOUT_SECONDS, session.get_playlist, playlist_id)
        if not raw:
            raise NotFoundError(
                "Playlist not found. Please check the playlist ID.",
            )

        entries = playlist_entries(raw)
        if entries is None:
            raise PrivateOrUnavailableError(
                "Playlist is private or unavailable.",
                hint="Please check your YouTube cookies.",
            )

        tracks = await resolve_in_batches(entries, self._resolve_entry, batch_size=self._batch_size)
        logger.debug(
            "Playlist %s: %d of %d entries resolved", playlist_id, len(tracks), len(entries),
        )
        return build_playlist(playlist_id, raw, tracks)

    async def get_related(self, video_id: str, limit: int = 10) -> list[TrackInfo]:
        """Watch-next recommendations for *video_id*, playable items only."""
        session = await self._sessions.ensure_session(self._credential, self._client_variant)
        if session is None:
            return []
        raw = await self._call("related", INFO_TIMEOUT_SECONDS, session.get_info, video_id)
        if not raw:
            return []
        feed = [
            entry for entry in raw.get("watch_next_feed") or []
            if not (isinstance(entry, Mapping) and entry.get("videoId", entry.get("id")) == video_id)
        ]
        return playable_entries(feed, limit)

    async def close(self) -> None:
        await self._sessions.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _require_session(self) -> MetadataBackend:
        session = await self._sessions.ensure_session(self._credential, self._client_variant)
        if session is None:
            raise BackendUnavailableError("YouTube service not available")
        return session

    async def _info(self, video_id: str, *, watch_next: bool) -> dict[str, Any]:
        session = await self._require_session()
        raw = await self._call(
            "video info", INFO_TIMEOUT_SECONDS, session.get_info, video_id, watch_next=watch_next,
        )
        if not raw:
            raise NotFoundError(f"Video not found: {video_id}")
        return raw

    @staticmethod
    async def _resolve_entry(entry: Any) -> TrackInfo | None:
        if not isinstance(entry, Mapping):
            return None
        return normalize_entry(entry)

    @staticmethod
    async def _call(
        what: str,
        timeout: float,
        func: Callable[..., T],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Run a blocking backend call in a thread under *timeout*."""
        try:
            return await asyncio.wait_for(asyncio.to_thread(func, *args, **kwargs), timeout)
        except asyncio.TimeoutError as exc:
            raise BackendTimeoutError(
                f"YouTube {what} request timed out. Please try again.",
            ) from exc
        except HybridExtractorError:
            raise
        except Exception as exc:
            raise _map_backend_error(exc, what) from exc


def _map_backend_error(exc: Exception, what: str) -> HybridExtractorError:
    """Translate a raw backend failure into the domain taxonomy."""
    message = str(exc)
    lowered = message.lower()
    if any(signal in lowered for signal in _PRIVATE_SIGNALS):
        return PrivateOrUnavailableError(
            f"This {what} is private or requires authentication.",
            hint="Please check your YouTube cookies.",
        )
    if any(signal in lowered for signal in _NOT_FOUND_SIGNALS):
        return NotFoundError(f"YouTube {what} not found: {message}")
    logger.error("YouTube %s error: %s", what, message)
    return MetadataBackendError(f"YouTube {what} error: {message}")
