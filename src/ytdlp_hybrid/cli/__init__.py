"""CLI layer: argument parsing, rendering and the error boundary.

It may import from ``core``, ``infra`` and ``config``; no other layer
imports from ``cli``.
"""
