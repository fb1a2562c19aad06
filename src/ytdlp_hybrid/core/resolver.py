"""Resolution orchestrator.

:class:`HybridExtractor` is the façade a host registers.  It classifies
each query, picks the backend(s) to consult and applies the fallback
policy between the metadata backend and the yt-dlp executable:

* single-video URL: yt-dlp metadata first, metadata backend second;
* playlist URL: metadata backend only (mixes are synthesized);
* other sites: yt-dlp flat info only;
* search: metadata backend, degrading to an empty result;
* stream: yt-dlp, fresh on every call.

The façade keeps no per-request state.  Backends are injected through
the :mod:`ytdlp_hybrid.core.protocols` contracts; see
:func:`ytdlp_hybrid.extractor.create_extractor` for the default wiring.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ytdlp_hybrid.core.mix import MixMaterializer, is_mix_id
from ytdlp_hybrid.core.models import (
    EXTRACTOR_IDENTIFIER,
    UNKNOWN_ARTIST,
    BridgeResult,
    ExtractorResult,
    PlaylistInfo,
    RequestContext,
    ResolvedTrack,
    TrackInfo,
)
from ytdlp_hybrid.core.protocols import MetadataSource, StreamExtractor
from ytdlp_hybrid.core.url_classifier import (
    extract_playlist_id,
    extract_video_id,
    is_playlist_url,
    is_recognized_site_url,
    is_url,
    validate_url,
    watch_url,
)
from ytdlp_hybrid.exceptions import HybridExtractorError, InvalidURLError

if TYPE_CHECKING:
    from ytdlp_hybrid.config import ExtractorOptions

logger = logging.getLogger(__name__)

SEARCH_RESULT_LIMIT: int = 1
RELATED_FETCH_LIMIT: int = 10
RELATED_FALLBACK_LIMIT: int = 5
AUTOPLAY_LIMIT: int = 5


class HybridExtractor:
    """Host-facing extractor combining the metadata backend and yt-dlp.

    Parameters
    ----------
    options:
        Feature switches, stream quality and the shared credential.
    metadata:
        Structured search/info source.
    extractor:
        yt-dlp backed stream and metadata source.
    """

    identifier: str = EXTRACTOR_IDENTIFIER

    def __init__(
        self,
        options: ExtractorOptions,
        *,
        metadata: MetadataSource,
        extractor: StreamExtractor,
    ) -> None:
        self._options = options
        self._metadata = metadata
        self._extractor = extractor
        self._mixes = MixMaterializer(metadata)

    @property
    def options(self) -> ExtractorOptions:
        return self._options

    @property
    def priority(self) -> int:
        return self._options.priority

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def activate(self) -> None:
        """Verify the yt-dlp executable.

        Raises
        ------
        BinaryNotFoundError
            When the configured executable does not exist.
        """
        self._extractor.require_binary()
        logger.debug("Extractor %s activated", self.identifier)

    async def deactivate(self) -> None:
        """Release the metadata backend session (best-effort)."""
        await self._metadata.close()
        logger.debug("Extractor %s deactivated", self.identifier)

    # ------------------------------------------------------------------
    # Query handling
    # ------------------------------------------------------------------

    async def validate(self, query: str, query_type: str | None = None) -> bool:
        """Whether this extractor can handle *query*; never raises."""
        if is_url(query):
            if not self._options.enable_direct_urls:
                return False
            if is_recognized_site_url(query) and self._options.enable_youtube_search:
                return True
            return await self._extractor.probe(query)
        return self._options.enable_youtube_search

    async def handle(
        self,
        query: str,
        context: RequestContext | None = None,
    ) -> ExtractorResult:
        """Resolve *query* into tracks.

        URLs propagate their errors; searches degrade to an empty result.
        """
        context = context or RequestContext()
        if is_url(query):
            return await self.handle_direct_url(query, context)
        return await self.handle_search(query, context)

    async def handle_direct_url(
        self,
        url: str,
        context: RequestContext | None = None,
    ) -> ExtractorResult:
        """Resolve a page URL, playlist or single video.

        Raises
        ------
        InvalidURLError
            For unsafe schemes or a site URL without a video ID.
        HybridExtractorError
            The last backend error when no source could resolve *url*.
        """
        context = context or RequestContext()
        if not validate_url(url):
            raise InvalidURLError(f"Invalid URL provided: {url}")

        if is_recognized_site_url(url):
            if is_playlist_url(url):
                return await self.handle_playlist(url, context)
            info = await self._video_info(url)
        else:
            info = await self._extractor.fetch_flat_info(url)

        return ExtractorResult(
            tracks=(ResolvedTrack(info, requested_by=context.requested_by),),
        )

    async def handle_playlist(
        self,
        url: str,
        context: RequestContext | None = None,
    ) -> ExtractorResult:
        """Resolve a playlist URL; ``RD`` IDs are synthesized as mixes."""
        context = context or RequestContext()
        playlist_id = extract_playlist_id(url)
        if not playlist_id:
            raise InvalidURLError(f"No playlist ID found in URL: {url}")

        playlist: PlaylistInfo
        if is_mix_id(playlist_id):
            playlist = await self._mixes.materialize(playlist_id)
        else:
            playlist = await self._metadata.get_playlist(playlist_id)

        tracks = tuple(
            ResolvedTrack(
                info,
                requested_by=context.requested_by,
                playlist_id=playlist.id,
            )
            for info in playlist.tracks
        )
        logger.debug("Playlist %s resolved to %d tracks", playlist.id, len(tracks))
        return ExtractorResult(playlist=playlist, tracks=tracks)

    async def handle_search(
        self,
        query: str,
        context: RequestContext | None = None,
        *,
        limit: int = SEARCH_RESULT_LIMIT,
    ) -> ExtractorResult:
        """Search the metadata backend.  Failures yield an empty result."""
        context = context or RequestContext()
        try:
            found = await self._metadata.search(query, limit)
        except HybridExtractorError as exc:
            logger.warning("Search for %r failed: %s", query, exc)
            return ExtractorResult.empty()

        if not found:
            logger.debug("No results for %r", query)
            return ExtractorResult.empty()

        return ExtractorResult(
            tracks=tuple(
                ResolvedTrack(
                    info,
                    requested_by=context.requested_by,
                    query_type="search",
                    original_query=query,
                )
                for info in found[:limit]
            ),
        )

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    async def stream(self, track: ResolvedTrack | TrackInfo) -> str:
        """Resolve a fresh playable URL for *track*.  Never cached."""
        info = track.info if isinstance(track, ResolvedTrack) else track
        if not info.canonical_url:
            raise InvalidURLError("Track has no URL to stream.")
        return await self._extractor.resolve_stream_url(
            info.canonical_url,
            self._options.stream_quality,
            self._options.cookies,
        )

    async def get_related_tracks(
        self,
        track: ResolvedTrack,
        history: RequestContext | tuple[str, ...] | list[str] = (),
    ) -> list[ResolvedTrack]:
        """Autoplay candidates for *track*, excluding already played URLs."""
        if not is_recognized_site_url(track.url):
            return []

        played = set(history.history if isinstance(history, RequestContext) else history)
        played.add(track.url)

        candidates = await self._related_candidates(track)
        fresh = [info for info in candidates if info.canonical_url not in played]

        return [
            ResolvedTrack(
                info,
                requested_by=track.requested_by,
                query_type="autoplay",
                related_to=track.url,
            )
            for info in fresh[:AUTOPLAY_LIMIT]
        ]

    # ------------------------------------------------------------------
    # Bridging
    # ------------------------------------------------------------------

    async def bridge(
        self,
        track: ResolvedTrack,
        source_identifier: str | None = None,
    ) -> BridgeResult | None:
        """Stream a track that another extractor resolved.

        Returns ``None`` for our own tracks or when no stream is found.
        """
        if (source_identifier or track.source) == self.identifier:
            return None
        try:
            return BridgeResult(stream=await self.stream(track))
        except HybridExtractorError as exc:
            logger.error("Bridge failed for %s: %s", track.url, exc)
            return None

    @staticmethod
    def create_bridge_query(track: ResolvedTrack | TrackInfo) -> str:
        return f"{track.author} - {track.title}"

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _video_info(self, url: str) -> TrackInfo:
        video_id = extract_video_id(url)
        if not video_id:
            raise InvalidURLError(f"No video ID found in URL: {url}")

        try:
            return await self._extractor.fetch_metadata_json(
                watch_url(video_id), self._options.cookies,
            )
        except HybridExtractorError as exc:
            logger.warning(
                "yt-dlp metadata failed for %s, trying YouTube API: %s", video_id, exc,
            )
        return await self._metadata.get_video_info(video_id)

    async def _related_candidates(self, track: ResolvedTrack) -> list[TrackInfo]:
        video_id = track.info.id or extract_video_id(track.url)
        related: list[TrackInfo] = []
        if video_id:
            try:
                related = await self._metadata.get_related(video_id, RELATED_FETCH_LIMIT)
            except HybridExtractorError as exc:
                logger.warning("Related lookup failed for %s: %s", video_id, exc)

        if related or track.author == UNKNOWN_ARTIST:
            return related

        try:
            return await self._metadata.search(f"{track.author} music", RELATED_FALLBACK_LIMIT)
        except HybridExtractorError as exc:
            logger.warning("Related fallback search failed: %s", exc)
            return []
