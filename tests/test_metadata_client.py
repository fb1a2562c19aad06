"""Tests for the metadata backend client (infra/metadata_client.py).

Sessions come from a fake factory returning MagicMock backends, so
ytmusicapi is never constructed.

Coverage:
* Session reuse while the credential is unchanged; exactly one
  recreation (with sign-out) when it changes.
* A failing factory degrades to "no session".
* Search trimming, playlist shapes, private and missing playlists.
* Timeouts and raw backend error translation.
* Related items exclude the seed and unplayable entries.
"""

from __future__ import annotations

import time
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from ytdlp_hybrid.exceptions import (
    BackendTimeoutError,
    BackendUnavailableError,
    MetadataBackendError,
    NotFoundError,
    PrivateOrUnavailableError,
)
from ytdlp_hybrid.infra.metadata_client import MetadataBackendClient, SessionManager

from conftest import listing_entry


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class _Factory:
    """Session factory recording every creation."""

    def __init__(self, backend: MagicMock | None = None, error: Exception | None = None) -> None:
        self.backend = backend
        self.error = error
        self.calls: list[tuple[Any, Any]] = []
        self.created: list[MagicMock] = []

    def __call__(self, credential: Any, client_variant: Any) -> MagicMock:
        self.calls.append((credential, client_variant))
        if self.error is not None:
            raise self.error
        session = self.backend or MagicMock()
        self.created.append(session)
        return session


def _client(backend: MagicMock, **kwargs: Any) -> MetadataBackendClient:
    return MetadataBackendClient(SessionManager(_Factory(backend)), **kwargs)


# ---------------------------------------------------------------------------
# Session ownership
# ---------------------------------------------------------------------------

class TestSessionManager:
    @pytest.mark.asyncio
    async def test_reused_while_credential_unchanged(self) -> None:
        factory = _Factory()
        sessions = SessionManager(factory)
        first = await sessions.ensure_session("SID=a", "en")
        second = await sessions.ensure_session("SID=a", "en")
        assert first is second
        assert sessions.creations == 1

    @pytest.mark.asyncio
    async def test_recreated_once_on_credential_change(self) -> None:
        factory = _Factory()
        sessions = SessionManager(factory)
        old = await sessions.ensure_session("SID=a")
        new = await sessions.ensure_session("SID=b")
        again = await sessions.ensure_session("SID=b")

        assert new is not old
        assert again is new
        assert sessions.creations == 2
        old.sign_out.assert_called_once()
        assert [c[0] for c in factory.calls] == ["SID=a", "SID=b"]

    @pytest.mark.asyncio
    async def test_sign_out_failure_ignored(self) -> None:
        factory = _Factory()
        sessions = SessionManager(factory)
        old = await sessions.ensure_session("SID=a")
        old.sign_out.side_effect = RuntimeError("network down")
        assert await sessions.ensure_session("SID=b") is not None

    @pytest.mark.asyncio
    async def test_failing_factory_yields_none(self) -> None:
        sessions = SessionManager(_Factory(error=RuntimeError("bad cookies")))
        assert await sessions.ensure_session("SID=a") is None
        assert sessions.current is None
        assert sessions.creations == 0

    @pytest.mark.asyncio
    async def test_close(self) -> None:
        sessions = SessionManager(_Factory())
        session = await sessions.ensure_session(None)
        await sessions.close()
        session.sign_out.assert_called_once()
        assert sessions.current is None


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

class TestSearch:
    @pytest.mark.asyncio
    async def test_normalizes_and_trims(self) -> None:
        backend = MagicMock()
        backend.search.return_value = [
            listing_entry("aaaaaaaaaaa"),
            {"title": "no id"},
            listing_entry("bbbbbbbbbbb"),
            listing_entry("ccccccccccc"),
        ]
        client = _client(backend)
        tracks = await client.search("daft punk", limit=2)
        assert [t.id for t in tracks] == ["aaaaaaaaaaa", "bbbbbbbbbbb"]
        backend.search.assert_called_once_with("daft punk", limit=2)

    @pytest.mark.asyncio
    async def test_no_session_returns_empty(self) -> None:
        client = MetadataBackendClient(SessionManager(_Factory(error=RuntimeError("x"))))
        assert await client.search("anything") == []

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        backend = MagicMock()
        backend.search.side_effect = lambda *a, **k: time.sleep(0.2)
        client = _client(backend)
        with (
            patch("ytdlp_hybrid.infra.metadata_client.SEARCH_TIMEOUT_SECONDS", 0.01),
            pytest.raises(BackendTimeoutError, match="timed out"),
        ):
            await client.search("slow")

    @pytest.mark.asyncio
    async def test_credential_change_between_calls(self) -> None:
        factory = _Factory()
        sessions = SessionManager(factory)
        await MetadataBackendClient(sessions, credential="SID=a").search("x")
        await MetadataBackendClient(sessions, credential="SID=a").search("y")
        await MetadataBackendClient(sessions, credential="SID=b").search("z")
        assert sessions.creations == 2


# ---------------------------------------------------------------------------
# Single video
# ---------------------------------------------------------------------------

class TestVideoInfo:
    @pytest.mark.asyncio
    async def test_info(self) -> None:
        backend = MagicMock()
        backend.get_info.return_value = {
            "basic_info": {"title": "Song", "author": "Artist", "duration_seconds": 200},
            "watch_next_feed": [],
        }
        track = await _client(backend).get_video_info("abcdefghijk")
        assert track.title == "Song"
        assert track.duration == "3:20"
        backend.get_info.assert_called_once_with("abcdefghijk", watch_next=False)

    @pytest.mark.asyncio
    async def test_not_found(self) -> None:
        backend = MagicMock()
        backend.get_info.return_value = None
        with pytest.raises(NotFoundError):
            await _client(backend).get_video_info("abcdefghijk")

    @pytest.mark.asyncio
    async def test_no_session(self) -> None:
        client = MetadataBackendClient(SessionManager(_Factory(error=RuntimeError("x"))))
        with pytest.raises(BackendUnavailableError):
            await client.get_video_info("abcdefghijk")


# ---------------------------------------------------------------------------
# Playlists
# ---------------------------------------------------------------------------

class TestPlaylist:
    @pytest.mark.asyncio
    async def test_videos_shape_with_nested_entries(self) -> None:
        backend = MagicMock()
        backend.get_playlist.return_value = {
            "info": {"title": {"text": "Mixtape"}, "author": {"name": "Owner"}},
            "videos": [
                {"id": "aaaaaaaaaaa", "title": {"text": "One"}, "author": {"name": "X"}},
                {"title": {"text": "Missing id"}},
                {"id": "bbbbbbbbbbb", "title": {"text": "Two"}},
            ],
        }
        playlist = await _client(backend).get_playlist("PL1")
        assert playlist.title == "Mixtape"
        assert playlist.author == "Owner"
        assert [t.title for t in playlist.tracks] == ["One", "Two"]

    @pytest.mark.asyncio
    async def test_tracks_shape_flat_entries(self) -> None:
        backend = MagicMock()
        backend.get_playlist.return_value = {
            "title": "Flat",
            "author": {"name": "Someone"},
            "tracks": [listing_entry(f"id{n:09d}") for n in range(23)],
        }
        playlist = await _client(backend, batch_size=10).get_playlist("PL2")
        assert len(playlist) == 23
        assert [t.id for t in playlist.tracks] == [f"id{n:09d}" for n in range(23)]

    @pytest.mark.asyncio
    async def test_empty_playlist_is_valid(self) -> None:
        backend = MagicMock()
        backend.get_playlist.return_value = {"title": "Empty", "items": []}
        playlist = await _client(backend).get_playlist("PL3")
        assert len(playlist) == 0
        assert playlist.title == "Empty"

    @pytest.mark.asyncio
    async def test_no_entry_shape_is_private(self) -> None:
        backend = MagicMock()
        backend.get_playlist.return_value = {"title": "Hidden"}
        with pytest.raises(PrivateOrUnavailableError):
            await _client(backend).get_playlist("PL4")

    @pytest.mark.asyncio
    async def test_missing(self) -> None:
        backend = MagicMock()
        backend.get_playlist.return_value = None
        with pytest.raises(NotFoundError, match="Playlist not found"):
            await _client(backend).get_playlist("PL5")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("message", "expected"),
        [
            ("The playlist does not exist.", NotFoundError),
            ("This playlist type is unviewable.", PrivateOrUnavailableError),
            ("Server returned HTTP 500", MetadataBackendError),
        ],
    )
    async def test_error_translation(self, message: str, expected: type[Exception]) -> None:
        backend = MagicMock()
        backend.get_playlist.side_effect = Exception(message)
        with pytest.raises(expected):
            await _client(backend).get_playlist("PL6")


# ---------------------------------------------------------------------------
# Related
# ---------------------------------------------------------------------------

class TestRelated:
    @pytest.mark.asyncio
    async def test_filters_and_limits(self) -> None:
        backend = MagicMock()
        backend.get_info.return_value = {
            "basic_info": {"title": "Seed"},
            "watch_next_feed": [
                listing_entry("seedseedsee"),
                {"type": "playlist", "videoId": "ppppppppppp", "title": "PL"},
                listing_entry("aaaaaaaaaaa"),
                {"videoId": "nnnnnnnnnnn"},
                listing_entry("bbbbbbbbbbb"),
                listing_entry("ccccccccccc"),
            ],
        }
        related = await _client(backend).get_related("seedseedsee", limit=2)
        assert [t.id for t in related] == ["aaaaaaaaaaa", "bbbbbbbbbbb"]

    @pytest.mark.asyncio
    async def test_no_session(self) -> None:
        client = MetadataBackendClient(SessionManager(_Factory(error=RuntimeError("x"))))
        assert await client.get_related("abcdefghijk") == []
