"""Auto-generated "mix" playlists.

A mix (``RD`` + seed video ID) is not an enumerable playlist entity, so
it is synthesized: the seed video first, followed by up to 19 playable
entries from the seed's watch-next recommendations.
"""

from __future__ import annotations

import logging
import re

from ytdlp_hybrid.core.models import PlaylistInfo
from ytdlp_hybrid.core.normalize import normalize_basic_info, playable_entries, text_of
from ytdlp_hybrid.core.protocols import MetadataSource
from ytdlp_hybrid.core.url_classifier import playlist_url
from ytdlp_hybrid.exceptions import InvalidMixIdError, MixUnavailableError

logger = logging.getLogger(__name__)

MIX_PREFIX: str = "RD"
MIX_MAX_TRACKS: int = 20
PLATFORM_NAME: str = "YouTube"

_SEED_RE = re.compile(r"[A-Za-z0-9_-]{11}")


def is_mix_id(playlist_id: str) -> bool:
    return playlist_id.startswith(MIX_PREFIX)


def parse_mix_seed(playlist_id: str) -> str:
    """Return the seed video ID of a mix playlist ID.

    Raises
    ------
    InvalidMixIdError
        When the ID lacks the prefix or the seed is not 11 ID characters.
    """
    seed = playlist_id[len(MIX_PREFIX):] if is_mix_id(playlist_id) else ""
    if not _SEED_RE.fullmatch(seed):
        raise InvalidMixIdError(
            f"Invalid YouTube Mix playlist ID format: {playlist_id!r}",
        )
    return seed


class MixMaterializer:
    """Builds a :class:`PlaylistInfo` for a mix from its seed video."""

    def __init__(self, source: MetadataSource) -> None:
        self._source = source

    async def materialize(self, playlist_id: str) -> PlaylistInfo:
        """Synthesize the mix playlist for *playlist_id*.

        Raises
        ------
        InvalidMixIdError
            If *playlist_id* is malformed.
        MixUnavailableError
            If the seed video cannot be fetched for any reason.
        """
        seed_id = parse_mix_seed(playlist_id)

        try:
            raw = await self._source.get_raw_info(seed_id)
        except Exception as exc:
            logger.error("Mix playlist generation failed for %s: %s", playlist_id, exc)
            raise MixUnavailableError(
                "Unable to access Mix playlist. "
                "This may be a private or unavailable Mix.",
            ) from exc

        basic = raw.get("basic_info") or {}
        seed = normalize_basic_info(seed_id, basic)
        feed = raw.get("watch_next_feed") or []
        related = [t for t in playable_entries(feed, len(feed)) if t.id != seed_id]
        tracks = (seed, *related[:MIX_MAX_TRACKS - 1])

        seed_title = text_of(basic.get("title")) or "Unknown"
        logger.debug("Synthesized mix %s with %d tracks", playlist_id, len(tracks))
        return PlaylistInfo(
            id=playlist_id,
            title=f"Mix - {seed_title}",
            description="YouTube Mix playlist (auto-generated)",
            thumbnail_url=seed.thumbnail_url,
            author=PLATFORM_NAME,
            canonical_url=playlist_url(playlist_id),
            tracks=tracks,
        )
