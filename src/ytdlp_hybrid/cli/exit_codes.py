"""Exit codes returned by the ``ytdlp-hybrid`` command."""

from __future__ import annotations

SUCCESS: int = 0

GENERAL_ERROR: int = 1
"""A known HybridExtractorError was caught and its message displayed."""

NOTHING_FOUND: int = 3
"""The query resolved to no tracks."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C (128 + SIGINT)."""

UNEXPECTED_ERROR: int = 2
