"""Credential transcoding for the yt-dlp ``--cookies`` argument.

yt-dlp reads the Netscape cookie-jar format: one cookie per line with
seven tab-separated columns.  The file written here lives only for a
single extractor run and is removed whatever the run's outcome.
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from ytdlp_hybrid.core.protocols import Credential

logger = logging.getLogger(__name__)

COOKIE_DOMAIN: str = ".youtube.com"

_HEADER: str = (
    "# Netscape HTTP Cookie File\n"
    "# This is a generated file! Do not edit.\n"
    "\n"
)


def cookie_pairs(credential: Credential) -> list[tuple[str, str]]:
    """Flatten the supported credential shapes into ``(name, value)`` pairs.

    Raises
    ------
    TypeError
        For shapes that carry no recognizable cookies.
    """
    if isinstance(credential, str):
        pairs: list[tuple[str, str]] = []
        for chunk in credential.split(";"):
            name, sep, value = chunk.strip().partition("=")
            if sep:
                pairs.append((name, value))
        return pairs
    if isinstance(credential, Mapping):
        return [(str(name), str(value)) for name, value in credential.items()]
    if isinstance(credential, (list, tuple)):
        pairs = []
        for item in credential:
            if isinstance(item, Mapping) and "name" in item and "value" in item:
                pairs.append((str(item["name"]), str(item["value"])))
            elif isinstance(item, (list, tuple)) and len(item) == 2:
                pairs.append((str(item[0]), str(item[1])))
            else:
                raise TypeError(f"Unsupported cookie entry: {item!r}")
        return pairs
    raise TypeError(f"Unsupported credential type: {type(credential).__name__}")


def to_netscape(credential: Credential) -> str:
    """Transcode *credential* into Netscape cookie-jar text.

    Every cookie is scoped to the YouTube domain and root path, expires
    with the session, and is flagged secure when its name says so.
    """
    lines = [_HEADER]
    for raw_name, raw_value in cookie_pairs(credential):
        name, value = raw_name.strip(), raw_value.strip()
        if not name or not value:
            continue
        secure = "TRUE" if "Secure" in name else "FALSE"
        lines.append(
            "\t".join((COOKIE_DOMAIN, "TRUE", "/", secure, "0", name, value)) + "\n",
        )
    return "".join(lines)


def _has_content(credential: Any) -> bool:
    if credential is None:
        return False
    if isinstance(credential, str):
        return bool(credential.strip())
    return bool(credential)


@contextlib.contextmanager
def cookie_file(credential: Credential | None, kind: str) -> Iterator[Path | None]:
    """Yield a uniquely named cookie file for one run, or ``None``.

    *kind* (``"stream"`` / ``"metadata"``) only tags the filename.  A
    transcoding or write failure is logged and yields ``None`` so the
    run proceeds without cookies.  The file is deleted on exit.
    """
    if not _has_content(credential):
        yield None
        return

    path: Path | None = None
    try:
        text = to_netscape(credential)  # type: ignore[arg-type]
        fd, name = tempfile.mkstemp(prefix=f"ytdlp-hybrid-{kind}-", suffix=".txt")
        path = Path(name)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
    except (OSError, TypeError, ValueError) as exc:
        logger.warning("Failed to write %s cookies, continuing without: %s", kind, exc)
        _remove(path)
        path = None

    try:
        yield path
    finally:
        _remove(path)


def _remove(path: Path | None) -> None:
    """Best-effort unlink; failures are logged, never raised."""
    if path is None:
        return
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.debug("Could not remove cookie file %s: %s", path, exc)
