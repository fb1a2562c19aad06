"""Rich console and logging helpers for the CLI layer.

Rich is imported lazily so ``--help`` and ``--version`` keep working
in a broken environment.  Both the console and the log handler write
to stderr; stdout carries only command results.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from ytdlp_hybrid.exceptions import ConfigurationError

LOG_FORMAT: str = "%(name)s: %(message)s"


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` or raise ``ConfigurationError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise ConfigurationError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console(*, stderr: bool = True) -> Any:
	"""Create a Rich console targeting stderr (or stdout)."""
	console_class = _load_rich_console_class()
	return console_class(stderr=stderr)


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with a plain-text fallback."""

	def __init__(self, *, stderr: bool = True) -> None:
		self._stderr = stderr

	def print(self, *objects: object) -> None:
		try:
			rich_console = get_rich_console(stderr=self._stderr)
		except ConfigurationError:
			print(*objects, file=sys.stderr if self._stderr else sys.stdout)
			return
		rich_console.print(*objects)


def configure_logging(verbose: bool = False) -> None:
	"""Install a RichHandler on the root logger.

	WARNING by default, DEBUG with ``verbose``.  Falls back to a plain
	stream handler when rich is unavailable.
	"""
	level = logging.DEBUG if verbose else logging.WARNING
	try:
		from rich.logging import RichHandler

		handler: logging.Handler = RichHandler(
			console=get_rich_console(stderr=True),
			show_path=verbose,
			rich_tracebacks=verbose,
		)
	except (ModuleNotFoundError, ConfigurationError):
		handler = logging.StreamHandler(sys.stderr)
	handler.setFormatter(logging.Formatter(LOG_FORMAT))
	logging.basicConfig(level=level, handlers=[handler], force=True)


console = _ConsoleProxy()
output = _ConsoleProxy(stderr=False)
