"""Tests for the default extractor wiring (extractor.py)."""

from __future__ import annotations

from ytdlp_hybrid.config import ExtractorOptions
from ytdlp_hybrid.core.resolver import HybridExtractor
from ytdlp_hybrid.extractor import create_extractor
from ytdlp_hybrid.infra.metadata_client import SessionManager


class TestCreateExtractor:
    def test_uses_given_options(self) -> None:
        options = ExtractorOptions(ytdlp_path="/opt/yt-dlp", priority=3)
        extractor = create_extractor(options)
        assert isinstance(extractor, HybridExtractor)
        assert extractor.options is options
        assert extractor.priority == 3

    def test_defaults_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("YTDLP_HYBRID_PRIORITY", "42")
        assert create_extractor().priority == 42

    def test_shared_sessions(self) -> None:
        sessions = SessionManager()
        first = create_extractor(ExtractorOptions(), sessions=sessions)
        second = create_extractor(ExtractorOptions(), sessions=sessions)
        assert first._metadata.sessions is second._metadata.sessions is sessions
