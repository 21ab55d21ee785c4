"""Program introspection mixin.

Read-only views of what a compiled program does: its output shape, its
parameters, the generated Python source, and a clause summary.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from comprehend.nodes import Filter, KeyValueHead

if TYPE_CHECKING:
    import types

    from comprehend.compiler.strategy import OutputStrategy
    from comprehend.nodes import Comprehension


class ProgramIntrospectionMixin:
    """Introspection helpers shared by eager and lazy programs.

    Host attributes are declared via TYPE_CHECKING.
    """

    if TYPE_CHECKING:
        _code: types.CodeType
        _comprehension: Comprehension
        _source: str | None
        _strategy: OutputStrategy

    @property
    def comprehension(self) -> Comprehension:
        """The model this program was compiled from."""
        return self._comprehension

    @property
    def strategy(self) -> OutputStrategy:
        return self._strategy

    @property
    def params(self) -> tuple[str, ...]:
        """Names to supply when running the program."""
        return tuple(self._comprehension.params)

    @property
    def depth(self) -> int:
        return self._comprehension.depth

    @property
    def source(self) -> str | None:
        """Generated Python source, or None when keep_source is off."""
        return self._source

    @property
    def code(self) -> types.CodeType:
        """Compiled module code object; its filename comes from the config."""
        return self._code

    def describe(self) -> str:
        """Clause summary, one line per clause, nested by generator depth.

        Example:
            >>> print(program.describe())
            for x in <range>()
              if <is_even>(x)
              for y in ys
                => <pair>(x, y)
        """
        lines: list[str] = []
        depth = 0
        for clause in self._comprehension.clauses:
            indent = "  " * depth
            if isinstance(clause, Filter):
                lines.append(f"{indent}if {clause.predicate.describe()}")
                continue
            lines.append(
                f"{indent}for {clause.pattern.describe()} in {clause.source.describe()}"
            )
            depth += 1
        head = self._comprehension.head
        indent = "  " * depth
        if isinstance(head, KeyValueHead):
            lines.append(f"{indent}=> {head.key.describe()}: {head.value.describe()}")
        else:
            lines.append(f"{indent}=> {head.expr.describe()}")
        return "\n".join(lines)
