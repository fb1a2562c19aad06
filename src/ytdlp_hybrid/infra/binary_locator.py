"""Infrastructure: yt-dlp executable detection and install guidance.

This module locates the yt-dlp executable the extractor client runs,
either at a configured path or on the system PATH, and provides
platform-specific installation guidance when it is missing.

Rules
-----
* Detection via the filesystem and :func:`shutil.which` only, no subprocess.
* No permanent PATH modification.
* No automatic installation.
* No ``print()``; callers handle user-facing output.
"""

from __future__ import annotations

import os
import platform
import shutil
from dataclasses import dataclass
from pathlib import Path

from ytdlp_hybrid.exceptions import BinaryNotFoundError

DEFAULT_BINARY_NAME: str = "yt-dlp"


# ---------------------------------------------------------------------------
# Detection result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class BinaryStatus:
    """Result of a yt-dlp detection probe.

    Attributes
    ----------
    found : bool
        Whether an executable was located.
    path : Path | None
        Absolute path to the executable, or ``None``.
    version_hint : str
        Human-readable status string (e.g. ``"found at …"`` or ``"not found"``).
    install_commands : tuple[str, ...]
        Suggested shell commands for installing yt-dlp on the current
        platform.  Empty when the executable is already present.
    """

    found: bool
    path: Path | None
    version_hint: str
    install_commands: tuple[str, ...]


# ---------------------------------------------------------------------------
# Detection logic
# ---------------------------------------------------------------------------

def detect_ytdlp(configured: str | os.PathLike[str] | None = None) -> BinaryStatus:
    """Probe for the yt-dlp executable.

    A configured value containing a path separator must point at an
    existing file; a bare name (or ``None``) is looked up on PATH.
    Returns a :class:`BinaryStatus` regardless of the outcome; the
    caller decides whether to abort or merely warn.
    """
    candidate = os.fspath(configured) if configured else DEFAULT_BINARY_NAME
    resolved: Path | None = None

    if os.sep in candidate or (os.altsep and os.altsep in candidate):
        path = Path(candidate).expanduser()
        if path.is_file():
            resolved = path.resolve()
    else:
        found = shutil.which(candidate)
        if found is not None:
            resolved = Path(found).resolve()

    if resolved is not None:
        return BinaryStatus(
            found=True,
            path=resolved,
            version_hint=f"found at {resolved}",
            install_commands=(),
        )

    return BinaryStatus(
        found=False,
        path=None,
        version_hint=f"not found ({candidate})",
        install_commands=_platform_install_commands(),
    )


def require_ytdlp(configured: str | os.PathLike[str] | None = None) -> Path:
    """Locate yt-dlp or raise :class:`BinaryNotFoundError`."""
    status = detect_ytdlp(configured)
    if not status.found or status.path is None:
        hint_lines: list[str] = []
        if status.install_commands:
            hint_lines.append("Install yt-dlp using one of:")
            hint_lines.extend(f"  {cmd}" for cmd in status.install_commands)
        raise BinaryNotFoundError(
            f"yt-dlp binary not found at: {configured or DEFAULT_BINARY_NAME}",
            hint="\n".join(hint_lines) if hint_lines else None,
        )
    return status.path


# ---------------------------------------------------------------------------
# Platform-specific install guidance
# ---------------------------------------------------------------------------

def _platform_install_commands() -> tuple[str, ...]:
    """Return install commands appropriate for the current OS."""
    system = platform.system().lower()
    if system == "windows":
        return (
            "pip install yt-dlp",
            "winget install yt-dlp.yt-dlp",
        )
    if system == "linux":
        return (
            "pip install yt-dlp",
            "sudo apt install yt-dlp",
            "sudo pacman -S yt-dlp",
        )
    if system == "darwin":
        return ("pip install yt-dlp", "brew install yt-dlp")
    return ("pip install yt-dlp",)
