"""Scope accumulator used by both lowering engines.

Walks the clause list left to right alongside a lowering engine and
answers two questions at every generator boundary: which names are bound
so far, and which filters must run before descending one level deeper.

A fresh ScopeAccumulator is created for every lowering pass. It is never
shared between the eager and lazy engines or between compilations.
"""

from __future__ import annotations

from collections.abc import Sequence

from comprehend.nodes import Filter, Generator


class ScopeAccumulator:
    """Bound names and pending filters for one lowering pass.

    Attributes:
        bound: Names currently in scope, in first-binding order. Program
            parameters come first. Rebinding a name keeps its position.
        pending: Filters collected since the last generator boundary.

    Example:
            >>> scope = ScopeAccumulator()
            >>> scope.open(outer)           # for x in ...
            ()
            >>> scope.collect(is_even)      # if x % 2 == 0
            >>> scope.open(inner)           # for y in ...
            (Filter(...),)
            >>> scope.bound
            ('x', 'y')

    """

    __slots__ = ("_bound", "_pending")

    def __init__(self, params: Sequence[str] = ()):
        self._bound: dict[str, None] = dict.fromkeys(params)
        self._pending: list[Filter] = []

    @property
    def bound(self) -> tuple[str, ...]:
        return tuple(self._bound)

    @property
    def pending(self) -> tuple[Filter, ...]:
        return tuple(self._pending)

    def open(self, generator: Generator) -> tuple[Filter, ...]:
        """Enter a generator boundary.

        Returns the filters collected since the previous boundary, in
        written order, to be conjoined and applied before this generator's
        iteration starts. Clears the pending list and brings the
        generator's names into scope.
        """
        conjunction = tuple(self._pending)
        self._pending.clear()
        self._bound.update(dict.fromkeys(generator.pattern.names()))
        return conjunction

    def collect(self, filter_: Filter) -> None:
        """Queue a filter for the next boundary. Does not alter bound names."""
        self._pending.append(filter_)

    def close(self) -> tuple[Filter, ...]:
        """Drain the filters that run just before the head."""
        conjunction = tuple(self._pending)
        self._pending.clear()
        return conjunction
