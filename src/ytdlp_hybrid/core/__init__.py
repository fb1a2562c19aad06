"""Core layer: classification, normalization and the fallback policy.

Rules
-----
* No ``print()`` calls.
* No imports from ``cli`` or ``infra``.
* Backends are reached only through :mod:`ytdlp_hybrid.core.protocols`.
"""

from ytdlp_hybrid.core.models import (
    BridgeResult,
    ExtractorResult,
    PlaylistInfo,
    RequestContext,
    ResolvedTrack,
    TrackInfo,
)
from ytdlp_hybrid.core.protocols import MetadataBackend, MetadataSource, StreamExtractor
from ytdlp_hybrid.core.resolver import HybridExtractor

__all__: list[str] = [
    "BridgeResult",
    "ExtractorResult",
    "HybridExtractor",
    "MetadataBackend",
    "MetadataSource",
    "PlaylistInfo",
    "RequestContext",
    "ResolvedTrack",
    "StreamExtractor",
    "TrackInfo",
]
