"""Infrastructure layer: yt-dlp processes, ytmusicapi sessions, cookie files.

Every raw third-party or OS exception is caught here and re-raised as a
:class:`~ytdlp_hybrid.exceptions.HybridExtractorError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output.
"""

from ytdlp_hybrid.infra.binary_locator import BinaryStatus, detect_ytdlp, require_ytdlp
from ytdlp_hybrid.infra.metadata_client import MetadataBackendClient, SessionManager
from ytdlp_hybrid.infra.ytdlp_cli import YtDlpCliClient
from ytdlp_hybrid.infra.ytmusic_backend import YTMusicBackend

__all__: list[str] = [
    "BinaryStatus",
    "MetadataBackendClient",
    "SessionManager",
    "YTMusicBackend",
    "YtDlpCliClient",
    "detect_ytdlp",
    "require_ytdlp",
]
