"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols, never on concrete
implementations.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, Union

from ytdlp_hybrid.core.models import PlaylistInfo, TrackInfo

Credential = Union[str, Mapping[str, Any], Sequence[Any]]
"""Opaque cookie material: a raw ``name=value; ...`` string or a collection."""


class MetadataBackend(Protocol):
    """One live session against the structured search/info service.

    Methods are blocking; the client runs them off the event loop under
    a timeout.  Implementations may raise anything; the client maps
    failures into :class:`~ytdlp_hybrid.exceptions.HybridExtractorError`.
    """

    def search(self, query: str, *, limit: int) -> list[dict[str, Any]]:
        """Return video search results as listing entries."""
        ...  # pragma: no cover

    def get_info(
        self, video_id: str, *, watch_next: bool = True,
    ) -> dict[str, Any] | None:
        """Return ``{"basic_info": {...}, "watch_next_feed": [...]}`` or ``None``.

        ``basic_info`` carries ``title``, ``author``, ``duration_seconds``,
        ``view_count``, ``thumbnails`` and ``short_description``;
        ``watch_next_feed`` lists recommended entries, each with a ``type``.
        With *watch_next* false the feed is left empty and not requested.
        """
        ...  # pragma: no cover

    def get_playlist(self, playlist_id: str) -> dict[str, Any] | None:
        """Return the raw playlist document (``videos``/``items``/``tracks``)."""
        ...  # pragma: no cover

    def sign_out(self) -> None:
        """Release the session.  Callers treat failures as best-effort."""
        ...  # pragma: no cover


class SessionFactory(Protocol):
    """Creates a :class:`MetadataBackend` for a credential and client variant."""

    def __call__(
        self,
        credential: Credential | None,
        client_variant: str | None,
    ) -> MetadataBackend:
        ...  # pragma: no cover


class MetadataSource(Protocol):
    """Async metadata operations the orchestrator relies on."""

    async def search(self, query: str, limit: int = 1) -> list[TrackInfo]:
        ...  # pragma: no cover

    async def get_video_info(self, video_id: str) -> TrackInfo:
        ...  # pragma: no cover

    async def get_playlist(self, playlist_id: str) -> PlaylistInfo:
        ...  # pragma: no cover

    async def get_related(self, video_id: str, limit: int = 10) -> list[TrackInfo]:
        ...  # pragma: no cover

    async def get_raw_info(self, video_id: str) -> dict[str, Any]:
        ...  # pragma: no cover

    async def close(self) -> None:
        ...  # pragma: no cover


class StreamExtractor(Protocol):
    """Async operations backed by the external yt-dlp executable."""

    async def resolve_stream_url(
        self,
        page_url: str,
        quality: str | None = None,
        credential: Credential | None = None,
    ) -> str:
        ...  # pragma: no cover

    async def fetch_metadata_json(
        self,
        page_url: str,
        credential: Credential | None = None,
    ) -> TrackInfo:
        ...  # pragma: no cover

    async def fetch_flat_info(self, page_url: str) -> TrackInfo:
        ...  # pragma: no cover

    async def probe(self, page_url: str) -> bool:
        ...  # pragma: no cover

    def require_binary(self) -> None:
        """Raise :class:`~ytdlp_hybrid.exceptions.BinaryNotFoundError` if absent."""
        ...  # pragma: no cover
