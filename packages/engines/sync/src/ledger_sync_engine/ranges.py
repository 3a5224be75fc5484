"""Splitting a catch-up span into fixed-size contiguous sub-ranges."""

from __future__ import annotations

from collections.abc import Iterator
from typing import NamedTuple


class BlockRange(NamedTuple):
    """Inclusive range of ledger positions."""

    first: int
    last: int

    @property
    def size(self) -> int:
        return self.last - self.first + 1

    def __str__(self) -> str:
        return f"{self.first}-{self.last}"


def partition_range(first: int, last: int, size: int) -> Iterator[BlockRange]:
    """Yield ``[first, last]`` as ascending inclusive chunks of at most *size*.

    Nothing is yielded when ``first > last``.

    >>> list(partition_range(1001, 1500, 500))
    [BlockRange(first=1001, last=1500)]
    """
    if size < 1:
        raise ValueError("size must be >= 1")
    start = first
    while start <= last:
        end = min(start + size - 1, last)
        yield BlockRange(start, end)
        start = end + 1


def pending_ranges(checkpoint: int, head: int, size: int) -> Iterator[BlockRange]:
    """Sub-ranges not yet reflected by *checkpoint*, up to and including *head*."""
    return partition_range(checkpoint + 1, head, size)
