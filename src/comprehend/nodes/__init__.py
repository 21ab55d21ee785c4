"""Comprehension AST nodes.

Immutable, slotted dataclasses. Built once by the parser, then consumed by
exactly one lowering pass per compilation.
"""

from comprehend.nodes.base import Node
from comprehend.nodes.clauses import (
    Clause,
    Comprehension,
    Filter,
    Generator,
    Head,
    KeyValueHead,
    ValueHead,
)
from comprehend.nodes.expressions import Call, Const, Expr, Name
from comprehend.nodes.patterns import (
    WILDCARD,
    NamePattern,
    Pattern,
    StarPattern,
    TuplePattern,
)

__all__ = [
    "WILDCARD",
    "Call",
    "Clause",
    "Comprehension",
    "Const",
    "Expr",
    "Filter",
    "Generator",
    "Head",
    "KeyValueHead",
    "Name",
    "NamePattern",
    "Node",
    "Pattern",
    "StarPattern",
    "TuplePattern",
    "ValueHead",
]
