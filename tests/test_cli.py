"""Tests for command routing and the error boundary (cli/app.py).

The extractor factory is patched; no backend is ever contacted.

Coverage:
* ``resolve`` / ``stream`` / ``related`` / ``search`` dispatch and exit codes.
* The extractor is always activated and deactivated.
* ``--ytdlp-path`` and ``--cookies-file`` reach the options.
* ``search --pick`` streams the chosen result.
* ``cli()`` maps exceptions to exit codes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ytdlp_hybrid.cli import exit_codes
from ytdlp_hybrid.cli.app import cli, main
from ytdlp_hybrid.core.models import ExtractorResult, ResolvedTrack, TrackInfo
from ytdlp_hybrid.exceptions import InvalidURLError, SelectionCancelledError

FACTORY = "ytdlp_hybrid.extractor.create_extractor"
VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


def _resolved(video_id: str = "dQw4w9WgXcQ", title: str = "Song") -> ResolvedTrack:
    return ResolvedTrack(
        TrackInfo(
            id=video_id,
            title=title,
            author="Artist",
            duration="3:33",
            canonical_url=f"https://www.youtube.com/watch?v={video_id}",
        ),
    )


def _fake_extractor(**results: Any) -> MagicMock:
    extractor = MagicMock()
    extractor.activate = AsyncMock()
    extractor.deactivate = AsyncMock()
    extractor.handle = AsyncMock(return_value=results.get("handle", ExtractorResult.empty()))
    extractor.handle_direct_url = AsyncMock(
        return_value=results.get("direct", ExtractorResult(tracks=(_resolved(),))),
    )
    extractor.handle_search = AsyncMock(
        return_value=results.get("search", ExtractorResult.empty()),
    )
    extractor.get_related_tracks = AsyncMock(return_value=results.get("related", []))
    extractor.stream = AsyncMock(return_value="https://stream/fresh")
    return extractor


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("ytdlp_hybrid.cli.app.configure_logging", lambda verbose: None)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

class TestResolve:
    def test_tracks_rendered(self, capsys: pytest.CaptureFixture[str]) -> None:
        extractor = _fake_extractor(handle=ExtractorResult(tracks=(_resolved(title="Found It"),)))
        with patch(FACTORY, return_value=extractor):
            code = main(["resolve", "some query"])

        assert code == exit_codes.SUCCESS
        assert "Found It" in capsys.readouterr().out
        extractor.activate.assert_awaited_once()
        extractor.deactivate.assert_awaited_once()

    def test_nothing_found(self) -> None:
        extractor = _fake_extractor()
        with patch(FACTORY, return_value=extractor):
            assert main(["resolve", "zzz"]) == exit_codes.NOTHING_FOUND

    def test_deactivated_after_error(self) -> None:
        extractor = _fake_extractor()
        extractor.handle.side_effect = InvalidURLError("bad")
        with patch(FACTORY, return_value=extractor), pytest.raises(InvalidURLError):
            main(["resolve", "file:///etc/passwd"])
        extractor.deactivate.assert_awaited_once()


class TestStream:
    def test_prints_stream_url(self, capsys: pytest.CaptureFixture[str]) -> None:
        extractor = _fake_extractor()
        with patch(FACTORY, return_value=extractor):
            code = main(["stream", VIDEO_URL])

        assert code == exit_codes.SUCCESS
        assert "https://stream/fresh" in capsys.readouterr().out
        extractor.handle_direct_url.assert_awaited_once_with(VIDEO_URL)


class TestRelated:
    def test_lists_related(self, capsys: pytest.CaptureFixture[str]) -> None:
        extractor = _fake_extractor(related=[_resolved("aaaaaaaaaaa", "Next Up")])
        with patch(FACTORY, return_value=extractor):
            code = main(["related", VIDEO_URL])
        assert code == exit_codes.SUCCESS
        assert "Next Up" in capsys.readouterr().out

    def test_none_related(self) -> None:
        with patch(FACTORY, return_value=_fake_extractor()):
            assert main(["related", VIDEO_URL]) == exit_codes.NOTHING_FOUND


class TestSearch:
    def test_limit_forwarded(self) -> None:
        extractor = _fake_extractor(search=ExtractorResult(tracks=(_resolved(),)))
        with patch(FACTORY, return_value=extractor):
            assert main(["search", "daft punk", "--limit", "3"]) == exit_codes.SUCCESS
        extractor.handle_search.assert_awaited_once_with("daft punk", limit=3)

    def test_pick_streams_choice(self, capsys: pytest.CaptureFixture[str]) -> None:
        tracks = (_resolved("aaaaaaaaaaa", "One"), _resolved("bbbbbbbbbbb", "Two"))
        extractor = _fake_extractor(search=ExtractorResult(tracks=tracks))
        with (
            patch(FACTORY, return_value=extractor),
            patch(
                "ytdlp_hybrid.cli.result_prompt.prompt_track_selection",
                return_value=tracks[1],
            ),
        ):
            code = main(["search", "daft punk", "--pick"])

        assert code == exit_codes.SUCCESS
        extractor.stream.assert_awaited_once_with(tracks[1])
        assert "https://stream/fresh" in capsys.readouterr().out

    def test_pick_cancelled(self) -> None:
        extractor = _fake_extractor(search=ExtractorResult(tracks=(_resolved(),)))
        with (
            patch(FACTORY, return_value=extractor),
            patch(
                "ytdlp_hybrid.cli.result_prompt.prompt_track_selection",
                side_effect=SelectionCancelledError("No track selected."),
            ),
            pytest.raises(SelectionCancelledError),
        ):
            main(["search", "daft punk", "--pick"])


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

class TestOptions:
    def test_flags_reach_options(self, tmp_path: Path) -> None:
        cookies = tmp_path / "cookies.txt"
        cookies.write_text("SID=abc\n", encoding="utf-8")
        with patch(FACTORY, return_value=_fake_extractor()) as factory:
            main(["--ytdlp-path", "/opt/yt-dlp", "--cookies-file", str(cookies), "resolve", "q"])

        options = factory.call_args.args[0]
        assert options.ytdlp_path == "/opt/yt-dlp"
        assert options.cookies == "SID=abc"

    def test_env_used_without_flags(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("YTDLP_HYBRID_STREAM_QUALITY", "worstaudio")
        with patch(FACTORY, return_value=_fake_extractor()) as factory:
            main(["resolve", "q"])
        assert factory.call_args.args[0].stream_quality == "worstaudio"


# ---------------------------------------------------------------------------
# Error boundary
# ---------------------------------------------------------------------------

class TestErrorBoundary:
    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (InvalidURLError("bad", hint="check it"), exit_codes.GENERAL_ERROR),
            (KeyboardInterrupt(), exit_codes.KEYBOARD_INTERRUPT),
            (RuntimeError("kaboom"), exit_codes.UNEXPECTED_ERROR),
        ],
    )
    def test_exit_codes(self, error: BaseException, expected: int) -> None:
        with patch("ytdlp_hybrid.cli.app.main", side_effect=error), pytest.raises(SystemExit) as exc_info:
            cli()
        assert exc_info.value.code == expected

    def test_success(self) -> None:
        with patch("ytdlp_hybrid.cli.app.main", return_value=exit_codes.SUCCESS), pytest.raises(SystemExit) as exc_info:
            cli()
        assert exc_info.value.code == exit_codes.SUCCESS
