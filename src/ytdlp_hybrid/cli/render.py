"""Rich tables for resolved tracks and playlists.

Presentation only: every function takes already-normalized values and
prints them.  Rich is imported lazily, as in :mod:`ytdlp_hybrid.cli.console`.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ytdlp_hybrid.cli.console import console, output
from ytdlp_hybrid.core.models import ExtractorResult, PlaylistInfo, ResolvedTrack, TrackInfo
from ytdlp_hybrid.exceptions import ConfigurationError


def _import_rich_table() -> type[Any]:
    try:
        from rich.table import Table
    except ModuleNotFoundError as exc:
        raise ConfigurationError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Table


def _format_views(views: str | int) -> str:
    if isinstance(views, int):
        return f"{views:,}"
    return str(views)


def track_label(index: int, info: TrackInfo) -> str:
    """One-line label: ``"  1.  Title - Author  [3:45]"``."""
    return f"  {index + 1}.  {info.title} - {info.author}  [{info.duration}]"


def render_playlist_header(playlist: PlaylistInfo) -> None:
    console.print()
    console.print(f"[bold cyan]Playlist:[/bold cyan] {playlist.title}")
    console.print(f"[bold cyan]Author:[/bold cyan]   {playlist.author}")
    console.print(f"[bold cyan]Tracks:[/bold cyan]   {len(playlist)}")
    if playlist.description:
        console.print(f"[dim]{playlist.description}[/dim]")
    console.print()


def render_tracks(tracks: Sequence[ResolvedTrack | TrackInfo], *, title: str = "Tracks") -> None:
    """Print *tracks* as a table on stdout."""
    table_class = _import_rich_table()
    table = table_class(
        title=title,
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    table.add_column("#", justify="right", style="dim", width=4)
    table.add_column("Title", justify="left", min_width=20)
    table.add_column("Author", justify="left", min_width=12)
    table.add_column("Duration", justify="right", min_width=8)
    table.add_column("Views", justify="right", min_width=6)
    table.add_column("URL", justify="left", overflow="fold")

    for i, track in enumerate(tracks, start=1):
        info = track.info if isinstance(track, ResolvedTrack) else track
        table.add_row(
            str(i),
            info.title,
            info.author,
            info.duration,
            _format_views(info.view_count),
            info.canonical_url,
        )

    output.print(table)


def render_result(result: ExtractorResult) -> None:
    if result.playlist is not None:
        render_playlist_header(result.playlist)
    render_tracks(result.tracks, title=result.playlist.title if result.playlist else "Tracks")
