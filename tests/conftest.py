"""Shared pytest fixtures for the ytdlp-hybrid test suite.

Guidelines
----------
* No internet access in any test.
* The yt-dlp executable is never run: ``asyncio.create_subprocess_exec``
  is patched at the infra boundary.
* ytmusicapi never sends requests: sessions come from fake factories,
  and the real client is only constructed offline.
* Core tests must be pure: backends are AsyncMock fakes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from ytdlp_hybrid.config import ENV_PREFIX


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's YTDLP_HYBRID_* variables out of every test."""
    import os

    for name in list(os.environ):
        if name.startswith(ENV_PREFIX):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_binary(tmp_path: Path) -> Path:
    """An existing file standing in for the yt-dlp executable."""
    binary = tmp_path / "yt-dlp"
    binary.write_text("#!/bin/sh\n", encoding="utf-8")
    binary.chmod(0o755)
    return binary


class ChunkReader:
    """Minimal ``asyncio.StreamReader`` stand-in serving canned bytes."""

    def __init__(self, data: bytes = b"") -> None:
        self._data = data
        self.reads = 0

    async def read(self, n: int = -1) -> bytes:
        self.reads += 1
        if n < 0:
            n = len(self._data)
        chunk, self._data = self._data[:n], self._data[n:]
        return chunk


def make_process(
    stdout: bytes = b"",
    stderr: bytes = b"",
    returncode: int = 0,
) -> MagicMock:
    """Fake ``asyncio.subprocess.Process`` with canned output."""
    proc = MagicMock()
    proc.stdout = ChunkReader(stdout)
    proc.stderr = ChunkReader(stderr)
    proc.returncode = returncode
    proc.kill = MagicMock()
    proc.wait = AsyncMock(return_value=returncode)
    return proc


def listing_entry(video_id: str, title: str | None = None, **extra: Any) -> dict[str, Any]:
    """Flat listing entry in the YouTube Music shape."""
    entry: dict[str, Any] = {
        "videoId": video_id,
        "title": title if title is not None else f"Title {video_id}",
        "artists": [{"name": "Artist", "id": "UC1"}],
        "duration": "3:45",
    }
    entry.update(extra)
    return entry
