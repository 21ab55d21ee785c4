"""Compiled comprehension programs.

A program wraps the code object produced by the Compiler. Construction
executes the module once to obtain its entry function; every run after
that only calls the entry function, which owns all of its state (the
output container, or the stage chain). Programs are immutable and can be
run any number of times, with different parameters.
"""

from __future__ import annotations

import types
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from comprehend.program.introspection import ProgramIntrospectionMixin
from comprehend.program.sequence import LazySequence

if TYPE_CHECKING:
    from comprehend.compiler.strategy import OutputStrategy
    from comprehend.nodes import Comprehension


class Program(ProgramIntrospectionMixin):
    """Base class for compiled programs.

    Attributes:
        comprehension: The model this program was compiled from
        strategy: Output strategy (sequence or associative)
        params: Names to supply when running
        source: Generated Python source (when keep_source is on)
        code: Compiled module code object

    """

    __slots__ = (
        "_code",
        "_comprehension",
        "_func",
        "_source",
        "_strategy",
    )

    def __init__(
        self,
        code: types.CodeType,
        entry: str,
        comprehension: Comprehension,
        namespace: Mapping[str, Any],
        *,
        strategy: OutputStrategy,
        source: str | None = None,
    ):
        """Execute the compiled module and keep its entry function.

        Args:
            code: Compiled module code object
            entry: Name of the entry function the module defines
            comprehension: Source model (for introspection)
            namespace: User callables, constants and helpers the module reads
            strategy: Output strategy chosen at compile time
            source: Generated Python source, if kept
        """
        self._code = code
        self._comprehension = comprehension
        self._strategy = strategy
        self._source = source

        module_namespace: dict[str, Any] = dict(namespace)
        exec(code, module_namespace)
        self._func = module_namespace[entry]

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.run(*args, **kwargs)

    def run(self, *args: Any, **kwargs: Any) -> Any:
        raise NotImplementedError

    def __repr__(self) -> str:
        params = ", ".join(self.params)
        return (
            f"<{type(self).__name__}({params}) depth={self.depth} "
            f"strategy={self._strategy.value}>"
        )


class EagerProgram(Program):
    """Program that materializes its whole output before returning.

    Sources must be finite. Bounding an unbounded source (for example with
    `itertools.islice`) before running an eager program is the caller's
    responsibility; a lazy program is the right tool for infinite sources.

    Example:
            >>> program = compile_eager(model)
            >>> program(xs=[1, 2, 3])
            [1, 4, 9]

    """

    __slots__ = ()

    def run(self, *args: Any, **kwargs: Any) -> list[Any] | dict[Any, Any]:
        """Run the traversal; returns a list (value head) or dict (key/value head).

        Parameters are passed by keyword, or positionally in declared order.
        Exceptions raised by user callables propagate unchanged and the
        partially built container is discarded.
        """
        return self._func(*args, **kwargs)


class LazyProgram(Program):
    """Program that returns a pull-based LazySequence.

    Each run builds a fresh stage chain, so a program is restartable exactly
    when its sources are. Key/value heads produce `(key, value)` pairs; fold
    them into a dict (`dict(seq)` keeps the last value per key) if needed.

    Example:
            >>> program = compile_lazy(model)
            >>> seq = program(xs=[1, 2, 3])
            >>> next(seq)
            1
            >>> list(seq)
            [4, 9]

    """

    __slots__ = ()

    def run(self, *args: Any, **kwargs: Any) -> LazySequence:
        """Build the stage chain; nothing is evaluated until the first pull."""
        return LazySequence(self._func(*args, **kwargs))
