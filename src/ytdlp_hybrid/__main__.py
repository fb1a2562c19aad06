"""Allow ``python -m ytdlp_hybrid`` invocation.

Delegates to the CLI error-boundary entry point so that
``python -m ytdlp_hybrid`` behaves identically to the ``ytdlp-hybrid``
console script.
"""

from __future__ import annotations

from ytdlp_hybrid.cli.app import cli

if __name__ == "__main__":
    cli()
