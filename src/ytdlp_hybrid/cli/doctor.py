"""``ytdlp-hybrid doctor``: environment diagnostics.

Collects one ``(label, value, status)`` row per requirement and renders
them as a Rich table.  The yt-dlp executable and ytmusicapi are
critical; a missing ``yt_dlp`` Python module only warns, since the
executable may come from a system package.
"""

from __future__ import annotations

import platform
import sys

from ytdlp_hybrid.cli import exit_codes
from ytdlp_hybrid.cli.console import console
from ytdlp_hybrid.infra.binary_locator import detect_ytdlp
from ytdlp_hybrid.version import __version__


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> tuple[str, str, str]:
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    status = "[green]OK[/green]" if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", version, status


def _ytdlp_binary_check(configured: str | None = None) -> tuple[str, str, str]:
    """Row for the executable that stream resolution spawns."""
    status_obj = detect_ytdlp(configured)
    if status_obj.found:
        return "yt-dlp binary", str(status_obj.path), "[green]OK[/green]"
    return "yt-dlp binary", status_obj.version_hint, "[red]FAIL[/red]"


def _ytdlp_version_check() -> tuple[str, str, str]:
    try:
        from yt_dlp.version import __version__ as ydl_ver
    except ImportError:
        return "yt-dlp module", "NOT INSTALLED", "[yellow]WARN[/yellow]"
    return "yt-dlp module", ydl_ver, "[green]OK[/green]"


def _ytmusicapi_check() -> tuple[str, str, str]:
    try:
        import ytmusicapi
    except ImportError:
        return "ytmusicapi", "NOT INSTALLED", "[red]FAIL[/red]"
    version = getattr(ytmusicapi, "__version__", "unknown")
    return "ytmusicapi", str(version), "[green]OK[/green]"


def _os_check() -> tuple[str, str, str]:
    system_raw = platform.system()
    system_display = {
        "Windows": "Windows",
        "Linux": "Linux",
        "Darwin": "macOS",
    }.get(system_raw, system_raw)
    value = f"{system_display} {platform.release()} ({platform.machine()})"
    return "OS", value, "[green]OK[/green]"


def _package_version_check() -> tuple[str, str, str]:
    return "ytdlp-hybrid", __version__, "[green]OK[/green]"


def _status_plain(status: str) -> str:
    for word in ("FAIL", "WARN", "OK"):
        if word in status:
            return word
    return status


def _print_plain_doctor_table(checks: list[tuple[str, str, str]]) -> None:
    print("\nytdlp-hybrid doctor", file=sys.stderr)
    print("=" * 64, file=sys.stderr)
    print(f"{'Component':<16} {'Value':<36} {'Status':<8}", file=sys.stderr)
    print("-" * 64, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<16} {value:<36} {_status_plain(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor(ytdlp_path: str | None = None) -> int:
    """Run all checks and render the summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when no check fails,
        :data:`exit_codes.GENERAL_ERROR` otherwise.
    """
    checks = [
        _package_version_check(),
        _python_version_check(),
        _ytdlp_binary_check(ytdlp_path),
        _ytdlp_version_check(),
        _ytmusicapi_check(),
        _os_check(),
    ]
    has_failure = any("FAIL" in status for _, _, status in checks)

    try:
        from rich.table import Table
    except ModuleNotFoundError:
        _print_plain_doctor_table(checks)
    else:
        table = Table(
            title="ytdlp-hybrid doctor",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column("Component", style="bold", min_width=14)
        table.add_column("Value", min_width=20)
        table.add_column("Status", justify="center", min_width=8)
        for label, value, status in checks:
            table.add_row(label, value, status)
        console.print()
        console.print(table)
        console.print()

    binary = detect_ytdlp(ytdlp_path)
    if not binary.found and binary.install_commands:
        console.print("[yellow]yt-dlp is not installed.[/yellow]")
        console.print("Install using one of the following commands:\n")
        for cmd in binary.install_commands:
            console.print(f"  [bold]{cmd}[/bold]")
        console.print()

    if has_failure:
        console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR
    console.print("[bold green]All checks passed.[/bold green]")
    return exit_codes.SUCCESS
