"""Clause, head and comprehension nodes: the Clause Model."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from comprehend.nodes.base import Node
from comprehend.nodes.expressions import Expr
from comprehend.nodes.patterns import Pattern


@dataclass(frozen=True, slots=True)
class Generator(Node):
    """Generator clause: for <pattern> in <source>"""

    pattern: Pattern
    source: Expr
    position: int = -1


@dataclass(frozen=True, slots=True)
class Filter(Node):
    """Filter clause: if <predicate>"""

    predicate: Expr
    position: int = -1


@dataclass(frozen=True, slots=True)
class Head(Node):
    """Base class for heads."""

    def references(self) -> tuple[str, ...]:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class ValueHead(Head):
    """One value per surviving binding: [expr for ...]"""

    expr: Expr

    def references(self) -> tuple[str, ...]:
        return self.expr.references()


@dataclass(frozen=True, slots=True)
class KeyValueHead(Head):
    """A key and a value per surviving binding: {key: value for ...}"""

    key: Expr
    value: Expr

    def references(self) -> tuple[str, ...]:
        return self.key.references() + self.value.references()


Clause = Generator | Filter


@dataclass(frozen=True, slots=True)
class Comprehension(Node):
    """A whole comprehension: ordered clauses plus a head.

    The first clause is always a Generator. Clause order defines nesting:
    the first generator is the outermost iteration.

    Attributes:
        clauses: Generators and filters, in written order
        head: Value or key/value head
        params: Free names supplied when the compiled program runs
    """

    clauses: Sequence[Clause]
    head: Head
    params: Sequence[str] = ()

    @property
    def generators(self) -> tuple[Generator, ...]:
        return tuple(c for c in self.clauses if isinstance(c, Generator))

    @property
    def filters(self) -> tuple[Filter, ...]:
        return tuple(c for c in self.clauses if isinstance(c, Filter))

    @property
    def depth(self) -> int:
        """Nesting depth: the number of generators."""
        return len(self.generators)

    @property
    def bound_names(self) -> tuple[str, ...]:
        """Every name bound by a generator, first binding order, no repeats."""
        seen: dict[str, None] = {}
        for generator in self.generators:
            for name in generator.pattern.names():
                seen.setdefault(name, None)
        return tuple(seen)
