"""Interactive track selection for ``ytdlp-hybrid search --pick``."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ytdlp_hybrid.cli.render import render_tracks, track_label
from ytdlp_hybrid.core.models import ResolvedTrack
from ytdlp_hybrid.exceptions import ConfigurationError, SelectionCancelledError


def _import_questionary() -> Any:
    """Import questionary lazily for interactive selection."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise ConfigurationError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def prompt_track_selection(tracks: Sequence[ResolvedTrack]) -> ResolvedTrack:
    """Show *tracks* and let the user pick one with the arrow keys.

    Raises
    ------
    SelectionCancelledError
        If the prompt is dismissed (Esc / Ctrl+C return ``None``).
    """
    questionary = _import_questionary()

    render_tracks(tracks, title="Search results")

    choices = [
        questionary.Choice(title=track_label(i, track.info), value=i)
        for i, track in enumerate(tracks)
    ]
    selected: int | None = questionary.select(
        "Select a track to stream:",
        choices=choices,
        use_arrow_keys=True,
        use_shortcuts=False,
    ).ask()

    if selected is None:
        raise SelectionCancelledError(
            "No track selected.",
            hint="Use arrow keys to pick a track, then press Enter.",
        )
    return tracks[selected]
