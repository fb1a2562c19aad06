"""ytdlp-hybrid: audio source resolution over yt-dlp and YouTube Music.

Search, playlist and related-track lookups go through ytmusicapi; page
metadata and fresh stream URLs come from the yt-dlp executable.
"""

from ytdlp_hybrid.version import __version__

__all__: list[str] = ["__version__"]
