"""Binding pattern nodes: the targets generators bind elements to."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from comprehend.nodes.base import Node

# Binds nothing; never enters scope
WILDCARD = "_"


@dataclass(frozen=True, slots=True)
class Pattern(Node):
    """Base class for binding patterns."""

    def names(self) -> tuple[str, ...]:
        """Identifiers bound by this pattern, left to right."""
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class NamePattern(Pattern):
    """Single identifier: for x in ..."""

    name: str

    def names(self) -> tuple[str, ...]:
        if self.name == WILDCARD:
            return ()
        return (self.name,)

    def describe(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class StarPattern(Pattern):
    """Starred item inside a tuple pattern: for first, *rest in ..."""

    name: str

    def names(self) -> tuple[str, ...]:
        if self.name == WILDCARD:
            return ()
        return (self.name,)

    def describe(self) -> str:
        return f"*{self.name}"


@dataclass(frozen=True, slots=True)
class TuplePattern(Pattern):
    """Destructuring target: for (key, val) in ..."""

    items: Sequence[Pattern]

    @property
    def arity(self) -> int:
        """Number of fixed (non-starred) items."""
        return sum(1 for item in self.items if not isinstance(item, StarPattern))

    @property
    def has_star(self) -> bool:
        return any(isinstance(item, StarPattern) for item in self.items)

    def names(self) -> tuple[str, ...]:
        names: list[str] = []
        for item in self.items:
            names.extend(item.names())
        return tuple(names)

    def describe(self) -> str:
        inner = ", ".join(item.describe() for item in self.items)
        if len(self.items) == 1:
            inner += ","
        return f"({inner})"
