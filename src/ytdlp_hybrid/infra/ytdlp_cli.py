"""yt-dlp executable backed implementation of :class:`~ytdlp_hybrid.core.protocols.StreamExtractor`.

This module is the **only** place in the codebase that spawns yt-dlp.
Each operation runs the executable once with a fixed argument vector,
a wall-clock timeout and a bounded stdout.  Process, OS and JSON
failures are caught here and re-raised as typed
:class:`~ytdlp_hybrid.exceptions.HybridExtractorError` subclasses.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ytdlp_hybrid.core.models import DEFAULT_STREAM_QUALITY, TrackInfo
from ytdlp_hybrid.core.normalize import normalize_ytdlp_document
from ytdlp_hybrid.core.protocols import Credential
from ytdlp_hybrid.core.url_classifier import extract_video_id, watch_url
from ytdlp_hybrid.exceptions import (
    BackendTimeoutError,
    BinaryNotFoundError,
    ExtractorError,
    HybridExtractorError,
    InvalidResultError,
    append_ytdlp_upgrade_suggestion,
)
from ytdlp_hybrid.infra.binary_locator import require_ytdlp
from ytdlp_hybrid.infra.cookies import cookie_file

logger = logging.getLogger(__name__)

EXTRACT_TIMEOUT_SECONDS: float = 15.0
PROBE_TIMEOUT_SECONDS: float = 10.0

STREAM_OUTPUT_LIMIT: int = 1024 * 1024
# ``-J`` documents list every format and easily exceed the stream bound.
METADATA_OUTPUT_LIMIT: int = 16 * 1024 * 1024
_READ_CHUNK_SIZE: int = 64 * 1024

_COMMON_ARGS: tuple[str, ...] = (
    "--no-playlist",
    "--no-warnings",
    "--no-check-certificates",
)


@dataclass(frozen=True, slots=True)
class ProcessOutput:
    """Decoded result of one yt-dlp run."""

    stdout: str
    stderr: str
    returncode: int


class YtDlpCliClient:
    """Runs the yt-dlp executable for stream URLs and metadata documents.

    Usage::

        client = YtDlpCliClient("/usr/local/bin/yt-dlp")
        url = await client.resolve_stream_url("https://youtu.be/dQw4w9WgXcQ")

    Nothing is cached: stream URLs expire, so every call spawns a new
    process.
    """

    # Substrings in yt-dlp diagnostics that point at access problems
    # rather than a broken extractor.
    _ACCESS_SIGNALS: tuple[str, ...] = (
        "private video",
        "sign in to confirm",
        "members-only",
        "login required",
        "http error 403",
    )

    def __init__(
        self,
        binary: str | os.PathLike[str] | None = None,
        *,
        default_quality: str = DEFAULT_STREAM_QUALITY,
    ) -> None:
        self._binary = binary
        self._default_quality = default_quality

    # ------------------------------------------------------------------
    # Binary
    # ------------------------------------------------------------------

    def require_binary(self) -> Path:
        """Return the executable path or raise :class:`BinaryNotFoundError`."""
        return require_ytdlp(self._binary)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def resolve_stream_url(
        self,
        page_url: str,
        quality: str | None = None,
        credential: Credential | None = None,
    ) -> str:
        """Resolve a fresh, directly playable media URL for *page_url*.

        Raises
        ------
        InvalidResultError
            When yt-dlp prints something other than an ``http`` URL.
        ExtractorError
            When yt-dlp fails without output.
        BackendTimeoutError
            When the run exceeds 15 seconds.
        """
        args = [
            "-f", quality or self._default_quality,
            "--get-url",
            *_COMMON_ARGS,
            "--prefer-insecure",
            "--skip-download",
            "--no-cache-dir",
            "--socket-timeout", "10",
            "--retries", "3",
            "--fragment-retries", "3",
        ]
        with cookie_file(credential, "stream") as cookies:
            if cookies is not None:
                args += ["--cookies", str(cookies)]
            args.append(page_url)
            out = await self._run(
                args,
                timeout=EXTRACT_TIMEOUT_SECONDS,
                output_limit=STREAM_OUTPUT_LIMIT,
            )

        self._raise_for_failure(out, "stream")
        stream_url = next(
            (line.strip() for line in out.stdout.splitlines() if line.strip()),
            "",
        )
        if not stream_url.startswith("http"):
            raise InvalidResultError(
                "Invalid streaming URL returned",
                hint=append_ytdlp_upgrade_suggestion(
                    "The requested quality may not exist for this page.",
                ),
            )
        logger.debug("Stream URL obtained for %s", page_url)
        return stream_url

    async def fetch_metadata_json(
        self,
        page_url: str,
        credential: Credential | None = None,
    ) -> TrackInfo:
        """Fetch the full metadata document for a single video page."""
        args = [
            "-J",
            *_COMMON_ARGS,
            "--socket-timeout", "10",
            "--retries", "2",
        ]
        with cookie_file(credential, "metadata") as cookies:
            if cookies is not None:
                args += ["--cookies", str(cookies)]
            args.append(page_url)
            out = await self._run(
                args,
                timeout=EXTRACT_TIMEOUT_SECONDS,
                output_limit=METADATA_OUTPUT_LIMIT,
            )

        self._raise_for_failure(out, "metadata")
        info = self._parse_document(out.stdout)
        video_id = extract_video_id(page_url)
        return normalize_ytdlp_document(
            info,
            fallback_id=video_id,
            canonical_url=watch_url(video_id) if video_id else page_url,
        )

    async def fetch_flat_info(self, page_url: str) -> TrackInfo:
        """Fetch metadata for a non-YouTube page without playlist expansion."""
        args = ["-J", "--flat-playlist", "--no-warnings", page_url]
        out = await self._run(
            args,
            timeout=EXTRACT_TIMEOUT_SECONDS,
            output_limit=METADATA_OUTPUT_LIMIT,
        )
        self._raise_for_failure(out, "info")
        info = self._parse_document(out.stdout)
        if not info.get("webpage_url"):
            info = {**info, "webpage_url": page_url}
        return normalize_ytdlp_document(info)

    async def probe(self, page_url: str) -> bool:
        """Ask yt-dlp whether it supports *page_url*; never raises."""
        try:
            out = await self._run(
                ["--simulate", "--quiet", page_url],
                timeout=PROBE_TIMEOUT_SECONDS,
                output_limit=STREAM_OUTPUT_LIMIT,
            )
        except HybridExtractorError as exc:
            logger.debug("Probe failed for %s: %s", page_url, exc)
            return False
        return out.returncode == 0

    # ------------------------------------------------------------------
    # Process plumbing
    # ------------------------------------------------------------------

    async def _run(
        self,
        args: list[str],
        *,
        timeout: float,
        output_limit: int,
    ) -> ProcessOutput:
        """Spawn yt-dlp with *args* and collect its output.

        The child is killed when *timeout* elapses so no process outlives
        the call.
        """
        binary = self.require_binary()
        logger.debug("Running %s %s", binary.name, " ".join(args))

        try:
            proc = await asyncio.create_subprocess_exec(
                str(binary),
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                **_platform_spawn_kwargs(),
            )
        except FileNotFoundError as exc:
            raise BinaryNotFoundError(f"yt-dlp binary not found at: {binary}") from exc
        except OSError as exc:
            raise ExtractorError(f"Could not start yt-dlp: {exc}") from exc

        try:
            raw_out, raw_err = await asyncio.wait_for(
                self._collect(proc, output_limit), timeout,
            )
        except asyncio.TimeoutError as exc:
            await _terminate(proc)
            raise BackendTimeoutError(
                f"yt-dlp did not finish within {timeout:g} seconds.",
                hint="The site may be slow or blocking requests. Please try again.",
            ) from exc

        return ProcessOutput(
            stdout=raw_out.decode("utf-8", errors="replace"),
            stderr=raw_err.decode("utf-8", errors="replace"),
            returncode=proc.returncode if proc.returncode is not None else -1,
        )

    @staticmethod
    async def _collect(
        proc: asyncio.subprocess.Process,
        output_limit: int,
    ) -> tuple[bytes, bytes]:
        """Read stdout in chunks, killing the child once it passes *output_limit*."""
        stderr_task = asyncio.ensure_future(proc.stderr.read())
        chunks: list[bytes] = []
        size = 0
        try:
            while True:
                chunk = await proc.stdout.read(_READ_CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > output_limit:
                    await _terminate(proc)
                    raise ExtractorError(
                        f"yt-dlp output exceeded {output_limit} bytes.",
                        returncode=proc.returncode,
                    )
                chunks.append(chunk)
            raw_err = await stderr_task
        finally:
            if not stderr_task.done():
                stderr_task.cancel()
        await proc.wait()
        return b"".join(chunks), raw_err

    @classmethod
    def _raise_for_failure(cls, out: ProcessOutput, what: str) -> None:
        """Raise :class:`ExtractorError` when a run produced nothing usable."""
        if out.stdout.strip():
            return
        if out.returncode == 0 and not out.stderr.strip():
            raise InvalidResultError(f"yt-dlp returned no {what} output.")

        diagnostic = out.stderr.strip() or f"exit status {out.returncode}"
        lowered = diagnostic.lower()
        hint: str | None = None
        if any(signal in lowered for signal in cls._ACCESS_SIGNALS):
            hint = "The video may be private or require authentication cookies."
        logger.error("yt-dlp %s error: %s", what, diagnostic)
        raise ExtractorError(
            f"yt-dlp {what} error: {diagnostic}",
            stderr=out.stderr,
            returncode=out.returncode,
            hint=hint,
        )

    @staticmethod
    def _parse_document(stdout: str) -> dict[str, Any]:
        try:
            info: Any = json.loads(stdout)
        except json.JSONDecodeError as exc:
            raise InvalidResultError(f"yt-dlp returned malformed JSON: {exc}") from exc
        if not isinstance(info, dict):
            raise InvalidResultError("yt-dlp returned an unexpected data structure.")
        return info


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    with contextlib.suppress(ProcessLookupError):
        proc.kill()
    with contextlib.suppress(ProcessLookupError):
        await proc.wait()


def _platform_spawn_kwargs() -> dict[str, Any]:
    """Keep a console window from flashing up on Windows."""
    if sys.platform == "win32":
        return {"creationflags": subprocess.CREATE_NO_WINDOW}
    return {}
