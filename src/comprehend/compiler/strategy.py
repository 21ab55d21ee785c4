"""Output strategy selection: list or dict, decided by the head's shape."""

from __future__ import annotations

from enum import Enum

from comprehend.nodes import Head, KeyValueHead


class OutputStrategy(Enum):
    """Shape of a comprehension's output."""

    SEQUENCE = "sequence"
    ASSOCIATIVE = "associative"


def select_output(head: Head) -> OutputStrategy:
    """Key/value heads build a dict; value heads build a list."""
    if isinstance(head, KeyValueHead):
        return OutputStrategy.ASSOCIATIVE
    return OutputStrategy.SEQUENCE
