"""Expression nodes: opaque units evaluated while a program runs.

The compiler never looks inside an expression. It only needs to know which
names an expression reads so it can check reference order and pass the
current values in.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from comprehend.nodes.base import Node


@dataclass(frozen=True, slots=True)
class Expr(Node):
    """Base class for expressions."""

    def references(self) -> tuple[str, ...]:
        """Names this expression reads."""
        return ()

    def describe(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class Const(Expr):
    """Literal value captured when the clause list was built."""

    value: Any

    def describe(self) -> str:
        text = repr(self.value)
        return text if len(text) <= 40 else text[:37] + "..."


@dataclass(frozen=True, slots=True)
class Name(Expr):
    """Variable reference: a bound name or a program parameter."""

    name: str

    def references(self) -> tuple[str, ...]:
        return (self.name,)

    def describe(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Call(Expr):
    """Opaque callable invoked with the named variables, positionally.

    ``Call(lambda x, y: x + y, ("x", "y"))`` evaluates to ``func(x, y)``
    with the current values of ``x`` and ``y``.
    """

    func: Callable[..., Any]
    params: Sequence[str] = ()

    def references(self) -> tuple[str, ...]:
        return tuple(self.params)

    def describe(self) -> str:
        name = getattr(self.func, "__name__", type(self.func).__name__)
        return f"<{name}>({', '.join(self.params)})"
