"""CLI application entry point and command routing for ytdlp-hybrid.

This module is the **sole error boundary** for the application.  It
catches :class:`~ytdlp_hybrid.exceptions.HybridExtractorError`,
``KeyboardInterrupt`` and any unexpected ``Exception``, renders them via
Rich and returns well-defined exit codes.

Commands
--------
* ``ytdlp-hybrid resolve <query>``   resolve a URL, playlist or search
* ``ytdlp-hybrid stream <url>``      print a fresh stream URL
* ``ytdlp-hybrid related <url>``     list autoplay candidates
* ``ytdlp-hybrid search <query>``    list search results (``--pick`` to choose)
* ``ytdlp-hybrid doctor``            environment diagnostics
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable

from ytdlp_hybrid.cli import exit_codes
from ytdlp_hybrid.cli.console import configure_logging, console, output
from ytdlp_hybrid.config import ExtractorOptions, read_cookie_file
from ytdlp_hybrid.core.resolver import HybridExtractor
from ytdlp_hybrid.exceptions import HybridExtractorError
from ytdlp_hybrid.version import __version__

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ytdlp-hybrid",
        description="Resolve tracks and stream URLs through YouTube Music and yt-dlp.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output to stderr.",
    )
    parser.add_argument(
        "--ytdlp-path",
        default=None,
        help="Path to the yt-dlp executable (default: yt-dlp on PATH).",
    )
    parser.add_argument(
        "--cookies-file",
        default=None,
        help="File holding a raw YouTube cookie string.",
    )

    commands = parser.add_subparsers(dest="command", metavar="<command>")

    resolve = commands.add_parser("resolve", help="Resolve a URL, playlist or search query.")
    resolve.add_argument("query", help="URL or search phrase.")

    stream = commands.add_parser("stream", help="Print a fresh stream URL for a page.")
    stream.add_argument("url", help="Page URL to stream.")

    related = commands.add_parser("related", help="List autoplay candidates for a video.")
    related.add_argument("url", help="YouTube video URL.")

    search = commands.add_parser("search", help="Search YouTube videos.")
    search.add_argument("query", help="Search phrase.")
    search.add_argument(
        "--limit",
        type=int,
        default=5,
        help="Maximum number of results (default: 5).",
    )
    search.add_argument(
        "--pick",
        action="store_true",
        help="Choose a result interactively and print its stream URL.",
    )

    commands.add_parser("doctor", help="Check the runtime environment.")
    return parser


def _load_options(args: argparse.Namespace) -> ExtractorOptions:
    options = ExtractorOptions.from_env()
    cookies = read_cookie_file(args.cookies_file) if args.cookies_file else None
    return options.with_overrides(ytdlp_path=args.ytdlp_path, cookies=cookies or None)


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _run_with_extractor(
    options: ExtractorOptions,
    command: Callable[..., Awaitable[int]],
    *args: object,
) -> int:
    """Activate an extractor, run *command* with it and always deactivate."""
    from ytdlp_hybrid.extractor import create_extractor

    async def runner() -> int:
        extractor = create_extractor(options)
        await extractor.activate()
        try:
            return await command(extractor, *args)
        finally:
            await extractor.deactivate()

    return asyncio.run(runner())


async def _resolve(extractor: HybridExtractor, query: str) -> int:
    from ytdlp_hybrid.cli.render import render_result

    result = await extractor.handle(query)
    if not result:
        console.print(f"[yellow]No results for[/yellow] {query}")
        return exit_codes.NOTHING_FOUND
    render_result(result)
    return exit_codes.SUCCESS


async def _stream(extractor: HybridExtractor, url: str) -> int:
    result = await extractor.handle_direct_url(url)
    if not result:
        return exit_codes.NOTHING_FOUND
    stream_url = await extractor.stream(result.tracks[0])
    output.print(stream_url)
    return exit_codes.SUCCESS


async def _related(extractor: HybridExtractor, url: str) -> int:
    from ytdlp_hybrid.cli.render import render_tracks

    result = await extractor.handle_direct_url(url)
    if not result:
        return exit_codes.NOTHING_FOUND
    related = await extractor.get_related_tracks(result.tracks[0])
    if not related:
        console.print("[yellow]No related tracks found.[/yellow]")
        return exit_codes.NOTHING_FOUND
    render_tracks(related, title=f"Related to {result.tracks[0].title}")
    return exit_codes.SUCCESS


async def _search(extractor: HybridExtractor, query: str, limit: int, pick: bool) -> int:
    from ytdlp_hybrid.cli.render import render_tracks
    from ytdlp_hybrid.cli.result_prompt import prompt_track_selection

    result = await extractor.handle_search(query, limit=max(limit, 1))
    if not result:
        console.print(f"[yellow]No results for[/yellow] {query}")
        return exit_codes.NOTHING_FOUND
    if not pick:
        render_tracks(result.tracks, title=f"Results for {query}")
        return exit_codes.SUCCESS

    # questionary runs its own event loop; leave ours for the prompt.
    chosen = await asyncio.to_thread(prompt_track_selection, result.tracks)
    console.print(f"\n[bold]Resolving stream…[/bold]  {chosen.title}\n")
    output.print(await extractor.stream(chosen))
    return exit_codes.SUCCESS


def _handle_doctor(ytdlp_path: str | None) -> int:
    from ytdlp_hybrid.cli.doctor import run_doctor

    return run_doctor(ytdlp_path)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the ytdlp-hybrid CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return exit_codes.SUCCESS

    if args.command == "doctor":
        return _handle_doctor(args.ytdlp_path)

    options = _load_options(args)
    logger.debug("Running %s with yt-dlp at %s", args.command, options.ytdlp_path)

    if args.command == "resolve":
        return _run_with_extractor(options, _resolve, args.query)
    if args.command == "stream":
        return _run_with_extractor(options, _stream, args.url)
    if args.command == "related":
        return _run_with_extractor(options, _related, args.url)
    return _run_with_extractor(options, _search, args.query, args.limit, args.pick)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point."""
    try:
        code = main()
        sys.exit(code)
    except HybridExtractorError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {exc.hint}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
