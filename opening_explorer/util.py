"""Small helpers shared across the package."""

from __future__ import annotations

import asyncio
import heapq
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    Callable,
    Iterable,
    Iterator,
    List,
    TypeVar,
    Union,
)

T = TypeVar("T")
R = TypeVar("R")

_U32_MAX = (1 << 32) - 1
_MISSING = object()


def ply(fullmoves: int, black_to_move: bool) -> int:
    """Number of half-moves played before the given position."""
    if fullmoves < 1:
        raise ValueError("fullmoves must be at least 1")
    return min((fullmoves - 1) * 2 + (1 if black_to_move else 0), _U32_MAX)


def sort_by_key_and_truncate(items: List[T], num: int, key: Callable[[T], Any]) -> None:
    """Keep only the ``num`` smallest items by ``key``, sorted, in place."""
    items[:] = heapq.nsmallest(num, items, key=key)


def _dedup(iterable: Iterable[T], key: Callable[[T], Any]) -> Iterator[T]:
    latest: Any = _MISSING
    for item in iterable:
        current = key(item)
        if latest is _MISSING or current != latest:
            latest = current
            yield item


async def _adedup(iterable: AsyncIterable[T], key: Callable[[T], Any]) -> AsyncIterator[T]:
    latest: Any = _MISSING
    async for item in iterable:
        current = key(item)
        if latest is _MISSING or current != latest:
            latest = current
            yield item


def dedup_by_key(
    iterable: Union[Iterable[T], AsyncIterable[T]], key: Callable[[T], Any]
) -> Union[Iterator[T], AsyncIterator[T]]:
    """Drop items whose key equals the key of the item just before them.

    Works on plain and asynchronous iterables alike.
    """
    if hasattr(iterable, "__aiter__"):
        return _adedup(iterable, key)  # type: ignore[arg-type]
    return _dedup(iterable, key)  # type: ignore[arg-type]


def midpoint(a: int, b: int) -> int:
    return (a + b) // 2


async def spawn_blocking(semaphore: asyncio.Semaphore, func: Callable[[], R]) -> R:
    """Run ``func`` in a worker thread while holding a semaphore permit."""
    async with semaphore:
        return await asyncio.to_thread(func)