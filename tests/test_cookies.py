"""Tests for credential transcoding (infra/cookies.py).

Coverage:
* Netscape line format for every credential shape.
* Secure flag heuristic and skipped empty cookies.
* Temporary files are unique per call and always removed.
* Transcoding failure degrades to "no cookies".
"""

from __future__ import annotations

from pathlib import Path

import pytest

from ytdlp_hybrid.infra.cookies import COOKIE_DOMAIN, cookie_file, to_netscape


def _cookie_lines(text: str) -> list[list[str]]:
    return [line.split("\t") for line in text.splitlines() if line and not line.startswith("#")]


# ---------------------------------------------------------------------------
# Transcoding
# ---------------------------------------------------------------------------

class TestToNetscape:
    def test_header(self) -> None:
        assert to_netscape("a=1").startswith("# Netscape HTTP Cookie File\n")

    def test_raw_string(self) -> None:
        lines = _cookie_lines(to_netscape("SID=abc; __Secure-3PSID=xyz; HSID=q=1"))
        assert lines == [
            [COOKIE_DOMAIN, "TRUE", "/", "FALSE", "0", "SID", "abc"],
            [COOKIE_DOMAIN, "TRUE", "/", "TRUE", "0", "__Secure-3PSID", "xyz"],
            [COOKIE_DOMAIN, "TRUE", "/", "FALSE", "0", "HSID", "q=1"],
        ]

    def test_mapping(self) -> None:
        lines = _cookie_lines(to_netscape({"SID": "abc"}))
        assert lines == [[COOKIE_DOMAIN, "TRUE", "/", "FALSE", "0", "SID", "abc"]]

    def test_structured_list(self) -> None:
        lines = _cookie_lines(to_netscape([{"name": "SID", "value": "a"}, ("HSID", "b")]))
        assert [line[5:] for line in lines] == [["SID", "a"], ["HSID", "b"]]

    def test_empty_name_or_value_skipped(self) -> None:
        lines = _cookie_lines(to_netscape("=orphan; SID=; HSID=ok; junk"))
        assert [line[5:] for line in lines] == [["HSID", "ok"]]

    def test_unsupported_type(self) -> None:
        with pytest.raises(TypeError):
            to_netscape(42)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Temporary file lifecycle
# ---------------------------------------------------------------------------

class TestCookieFile:
    @pytest.mark.parametrize("credential", [None, "", "   ", {}, []])
    def test_no_credential_yields_none(self, credential: object) -> None:
        with cookie_file(credential, "stream") as path:  # type: ignore[arg-type]
            assert path is None

    def test_written_then_removed(self) -> None:
        with cookie_file("SID=abc", "stream") as path:
            assert path is not None
            assert path.exists()
            assert path.name.startswith("ytdlp-hybrid-stream-")
            assert "SID\tabc" in path.read_text(encoding="utf-8")
        assert not path.exists()

    def test_removed_on_error(self) -> None:
        captured: list[Path] = []
        with pytest.raises(RuntimeError):
            with cookie_file("SID=abc", "metadata") as path:
                assert path is not None
                captured.append(path)
                raise RuntimeError("extractor failed")
        assert not captured[0].exists()

    def test_unique_per_call(self) -> None:
        with cookie_file("SID=a", "stream") as first, cookie_file("SID=b", "stream") as second:
            assert first is not None and second is not None
            assert first != second
            assert "SID\ta" in first.read_text(encoding="utf-8")
            assert "SID\tb" in second.read_text(encoding="utf-8")

    def test_bad_credential_degrades(self) -> None:
        with cookie_file([object()], "stream") as path:
            assert path is None
