"""Bounded, order-preserving batch resolution.

Entries are processed in fixed-size groups.  Inside a group every entry
is resolved concurrently; groups run one after another so at most
*batch_size* upstream calls are in flight.  An entry whose resolver
returns ``None`` or raises is dropped without affecting its siblings.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE: int = 10

T = TypeVar("T")
R = TypeVar("R")


async def resolve_in_batches(
    entries: Sequence[T],
    resolve: Callable[[T], Awaitable[R | None]],
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> list[R]:
    """Resolve *entries* group by group, keeping input order in the output."""
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")

    results: list[R] = []
    for start in range(0, len(entries), batch_size):
        group = entries[start:start + batch_size]
        outcomes = await asyncio.gather(
            *(resolve(entry) for entry in group),
            return_exceptions=True,
        )
        for offset, outcome in enumerate(outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.debug(
                    "Dropping entry %d: %s", start + offset, outcome,
                )
                continue
            if outcome is not None:
                results.append(outcome)
    return results
