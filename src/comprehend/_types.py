"""Raw clause descriptions handed to the parser.

A front end (a host macro system, a query builder, or plain Python code)
describes a comprehension as an ordered list of ``RawClause`` entries,
in the order the programmer wrote them:

    >>> from comprehend import for_, if_, value
    >>> clauses = [
    ...     for_("x", range(5)),
    ...     if_(lambda x: x % 2 == 0),
    ...     value(lambda x: x * x),
    ... ]

Plain tuples tagged with the clause kind name are accepted as well:
``("for", "x", range(5))``, ``("if", pred)``, ``("value", expr)``,
``("key_value", key, value)``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, NamedTuple


class ClauseKind(Enum):
    """Kind tag of a raw clause."""

    FOR = "for"
    IF = "if"
    VALUE = "value"
    KEY_VALUE = "key_value"

    @property
    def is_head(self) -> bool:
        return self in (ClauseKind.VALUE, ClauseKind.KEY_VALUE)


# Number of operands each clause kind takes
CLAUSE_ARITY: dict[ClauseKind, int] = {
    ClauseKind.FOR: 2,
    ClauseKind.IF: 1,
    ClauseKind.VALUE: 1,
    ClauseKind.KEY_VALUE: 2,
}


class RawClause(NamedTuple):
    """One tagged clause description.

    Attributes:
        kind: Clause kind tag
        operands: ``(pattern, source)`` for FOR, ``(predicate,)`` for IF,
            ``(expr,)`` for VALUE, ``(key, value)`` for KEY_VALUE
    """

    kind: ClauseKind
    operands: tuple[Any, ...]

    def describe(self) -> str:
        """One-line description used in error listings."""
        if self.kind is ClauseKind.FOR and len(self.operands) == 2:
            pattern, source = self.operands
            return f"for {_describe_pattern(pattern)} in {_describe_operand(source)}"
        if self.kind is ClauseKind.IF and len(self.operands) == 1:
            return f"if {_describe_operand(self.operands[0])}"
        if self.kind is ClauseKind.VALUE and len(self.operands) == 1:
            return f"=> {_describe_operand(self.operands[0])}"
        if self.kind is ClauseKind.KEY_VALUE and len(self.operands) == 2:
            key, val = self.operands
            return f"=> {_describe_operand(key)}: {_describe_operand(val)}"
        return f"{self.kind.value} <{len(self.operands)} operands>"


def for_(pattern: Any, source: Any) -> RawClause:
    """Generator clause: bind ``pattern`` to each element of ``source``."""
    return RawClause(ClauseKind.FOR, (pattern, source))


def if_(predicate: Any) -> RawClause:
    """Filter clause: keep bindings for which ``predicate`` is truthy."""
    return RawClause(ClauseKind.IF, (predicate,))


def value(expr: Any) -> RawClause:
    """Value head: produce ``expr`` per surviving binding."""
    return RawClause(ClauseKind.VALUE, (expr,))


def key_value(key: Any, val: Any) -> RawClause:
    """Key/value head: produce a ``(key, val)`` entry per surviving binding."""
    return RawClause(ClauseKind.KEY_VALUE, (key, val))


def _describe_pattern(pattern: Any) -> str:
    if isinstance(pattern, str):
        return pattern
    if isinstance(pattern, (tuple, list)):
        return "(" + ", ".join(_describe_pattern(p) for p in pattern) + ")"
    describe = getattr(pattern, "describe", None)
    if callable(describe):
        return describe()
    return repr(pattern)


def _describe_operand(operand: Any) -> str:
    describe = getattr(operand, "describe", None)
    if callable(describe) and not isinstance(operand, type):
        return describe()
    if callable(operand):
        name = getattr(operand, "__name__", type(operand).__name__)
        return f"<{name}>"
    text = repr(operand)
    return text if len(text) <= 40 else text[:37] + "..."
