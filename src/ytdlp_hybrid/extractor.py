"""Default wiring of :class:`~ytdlp_hybrid.core.resolver.HybridExtractor`."""

from __future__ import annotations

from ytdlp_hybrid.config import ExtractorOptions
from ytdlp_hybrid.core.resolver import HybridExtractor
from ytdlp_hybrid.infra.metadata_client import MetadataBackendClient, SessionManager
from ytdlp_hybrid.infra.ytdlp_cli import YtDlpCliClient


def create_extractor(
    options: ExtractorOptions | None = None,
    *,
    sessions: SessionManager | None = None,
) -> HybridExtractor:
    """Build an extractor backed by ytmusicapi and the yt-dlp executable.

    *options* default to :meth:`ExtractorOptions.from_env`.  Pass a
    shared *sessions* manager to reuse one backend session across
    several extractors.
    """
    options = options or ExtractorOptions.from_env()
    metadata = MetadataBackendClient(
        sessions,
        credential=options.cookies,
        client_variant=options.client,
    )
    extractor = YtDlpCliClient(options.ytdlp_path, default_quality=options.stream_quality)
    return HybridExtractor(options, metadata=metadata, extractor=extractor)
