"""Base node class for the comprehension AST."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all AST nodes.

    Nodes are immutable: a Comprehension is built once by the parser and
    then only read by the lowering engines.

    """
