"""Extractor options and their environment-variable loader.

Options mirror what a host passes when it registers the extractor.
:meth:`ExtractorOptions.from_env` fills them from ``YTDLP_HYBRID_*``
variables for the CLI and for hosts configured through the environment.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from ytdlp_hybrid.core.models import DEFAULT_STREAM_QUALITY
from ytdlp_hybrid.core.protocols import Credential
from ytdlp_hybrid.exceptions import ConfigurationError
from ytdlp_hybrid.infra.binary_locator import DEFAULT_BINARY_NAME
from ytdlp_hybrid.infra.ytmusic_backend import check_client_variant


ENV_PREFIX: str = "YTDLP_HYBRID_"

_TRUE_VALUES: frozenset[str] = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSE_VALUES: frozenset[str] = frozenset({"0", "false", "f", "no", "n", "off"})


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"{ENV_PREFIX}{name} must be a boolean, got {raw!r}",
        hint="Use one of: 1/0, true/false, yes/no, on/off.",
    )


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from exc


def read_cookie_file(path: str | os.PathLike[str]) -> str:
    """Read a raw ``name=value; ...`` cookie string from *path*."""
    try:
        return Path(path).expanduser().read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise ConfigurationError(f"Cannot read cookie file {path}: {exc}") from exc


@dataclass(frozen=True, slots=True)
class ExtractorOptions:
    """Configuration of one :class:`~ytdlp_hybrid.core.resolver.HybridExtractor`."""

    ytdlp_path: str = DEFAULT_BINARY_NAME
    """Path to the yt-dlp executable, or a bare name looked up on PATH."""

    priority: int = 100
    enable_youtube_search: bool = True
    enable_direct_urls: bool = True
    stream_quality: str = DEFAULT_STREAM_QUALITY

    cookies: Credential | None = None
    """Opaque cookie material shared by both backends."""

    client: str | None = None
    """Metadata backend client variant: a YouTube Music language code."""

    def __post_init__(self) -> None:
        if not self.ytdlp_path or not str(self.ytdlp_path).strip():
            raise ConfigurationError("ytdlp_path must not be empty.")
        if not self.stream_quality.strip():
            raise ConfigurationError("stream_quality must not be empty.")
        check_client_variant(self.client)

    def with_overrides(self, **changes: Any) -> ExtractorOptions:
        """Return a copy with the non-``None`` *changes* applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> ExtractorOptions:
        """Build options from ``YTDLP_HYBRID_*`` environment variables.

        ``COOKIES`` holds a raw cookie string; ``COOKIES_FILE`` names a
        file containing one and wins when both are set.

        Raises
        ------
        ConfigurationError
            For malformed values or an unreadable cookie file.
        """
        env = os.environ if env is None else env

        cookies: str | None = env.get(ENV_PREFIX + "COOKIES") or None
        cookies_file = env.get(ENV_PREFIX + "COOKIES_FILE")
        if cookies_file:
            cookies = read_cookie_file(cookies_file) or None

        return cls(
            ytdlp_path=env.get(ENV_PREFIX + "YTDLP_PATH") or DEFAULT_BINARY_NAME,
            priority=_env_int(env, "PRIORITY", 100),
            enable_youtube_search=_env_bool(env, "ENABLE_SEARCH", True),
            enable_direct_urls=_env_bool(env, "ENABLE_DIRECT_URLS", True),
            stream_quality=env.get(ENV_PREFIX + "STREAM_QUALITY") or DEFAULT_STREAM_QUALITY,
            cookies=cookies,
            client=env.get(ENV_PREFIX + "CLIENT") or None,
        )
