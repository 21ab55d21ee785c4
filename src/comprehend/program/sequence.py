"""Pull-based sequence returned by lazy programs."""

from __future__ import annotations

from collections.abc import Iterator
from itertools import islice
from typing import Any


class LazySequence:
    """Single-consumer, pull-based view over a lazy program's stage chain.

    Nothing is computed until an element is pulled, and each pull computes
    only as much as that element needs. Stop pulling at any time to abandon
    the sequence; there is no other cancellation.

    If a source, predicate or head raises while an element is being pulled,
    the exception reaches the caller unchanged and the sequence is finished:
    later pulls raise StopIteration.

    Example:
            >>> seq = program(limit=None)
            >>> next(seq)
            2
            >>> seq.take(3)
            [3, 5, 7]
            >>> next(seq, None)     # Option-style pull
            11

    """

    __slots__ = ("_done", "_iterator")

    def __init__(self, iterator: Iterator[Any]):
        self._iterator = iterator
        self._done = False

    def __iter__(self) -> LazySequence:
        return self

    def __next__(self) -> Any:
        if self._done:
            raise StopIteration
        try:
            return next(self._iterator)
        except BaseException:
            # Exhaustion and evaluation errors both end the sequence
            self._done = True
            raise

    @property
    def exhausted(self) -> bool:
        """True once the sequence has ended or an evaluation error escaped."""
        return self._done

    def take(self, n: int) -> list[Any]:
        """Pull at most n elements."""
        if n < 0:
            raise ValueError(f"take() needs a non-negative count, got {n}")
        return list(islice(self, n))
