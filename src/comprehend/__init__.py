"""comprehend: compile comprehension clause lists into eager or lazy programs.

A comprehension is an ordered list of generator clauses (bind a pattern to
each element of a source) interleaved with filter clauses, finished by a
head (one value, or a key and a value). comprehend turns that description
into a Python function and runs it either eagerly, filling a list or dict,
or lazily, as a pull-based sequence.

Quickstart:
    >>> from comprehend import compile_eager, compile_lazy, for_, if_, key_value, parse, value
    >>> model = parse([
    ...     for_("x", range(10)),
    ...     if_(lambda x: x % 2 == 0),
    ...     value(lambda x: x * x),
    ... ])
    >>> compile_eager(model)()
    [0, 4, 16, 36, 64]
    >>> compile_lazy(model)().take(2)
    [0, 4]

Dict output:
    >>> pairs = [("one", 1), ("two", 2), ("three", 3)]
    >>> model = parse([
    ...     for_("key, val", pairs),
    ...     if_(lambda val: val < 3),
    ...     key_value(lambda key: key, lambda val: val),
    ... ])
    >>> compile_eager(model)()
    {'one': 1, 'two': 2}

Parameters:
    >>> from comprehend import Name
    >>> model = parse([for_("row", Name("rows")), for_("x", Name("row")), value(Name("x"))],
    ...               params=("rows",))
    >>> compile_eager(model)(rows=[[1, 2], [3]])
    [1, 2, 3]

Architecture:
Raw clauses → Parser → Comprehension (immutable AST) → Compiler → Python AST → exec()

Pipeline stages:
1. **Parser**: Validates clause order, patterns and name references
2. **Compiler**: Lowers the model with one of two engines
   - eager: nested `for` loops appending/inserting into the output
   - lazy: `filter` / `map` / `chain.from_iterable` stages over binding frames
3. **Program**: Wraps the compiled entry function with a call interface

Both engines visit bindings in the same order: standard nested-loop order,
first generator outermost. For value heads `list(lazy())` equals
`eager()`; for key/value heads `dict(lazy())` equals `eager()`.

Errors:
Grammar errors (GrammarError subclasses) are raised by `parse`, before any
lowering. Exceptions raised by your callables while a program runs are
passed through unchanged.

"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from comprehend._types import ClauseKind, RawClause, for_, if_, key_value, value
from comprehend.compiler import Compiler, OutputStrategy, ScopeAccumulator, select_output
from comprehend.config import DEFAULT_CONFIG, CompilerConfig
from comprehend.exceptions import (
    ComprehensionError,
    ErrorCode,
    GrammarError,
    InvalidClauseError,
    MalformedPatternError,
    MisplacedHeadError,
    MissingLeadingGeneratorError,
    NoHeadError,
    UnresolvedReferenceError,
)
from comprehend.nodes import (
    Call,
    Comprehension,
    Const,
    Filter,
    Generator,
    KeyValueHead,
    Name,
    NamePattern,
    StarPattern,
    TuplePattern,
    ValueHead,
)
from comprehend.parser import Parser
from comprehend.program import EagerProgram, LazyProgram, LazySequence

__version__ = "0.1.0"

__all__ = [
    "Call",
    "ClauseKind",
    "Compiler",
    "CompilerConfig",
    "Comprehension",
    "ComprehensionError",
    "Const",
    "DEFAULT_CONFIG",
    "EagerProgram",
    "ErrorCode",
    "Filter",
    "Generator",
    "GrammarError",
    "InvalidClauseError",
    "KeyValueHead",
    "LazyProgram",
    "LazySequence",
    "MalformedPatternError",
    "MisplacedHeadError",
    "MissingLeadingGeneratorError",
    "Name",
    "NamePattern",
    "NoHeadError",
    "OutputStrategy",
    "Parser",
    "RawClause",
    "ScopeAccumulator",
    "StarPattern",
    "TuplePattern",
    "UnresolvedReferenceError",
    "ValueHead",
    "__version__",
    "compile_eager",
    "compile_lazy",
    "for_",
    "if_",
    "key_value",
    "parse",
    "select_output",
    "value",
]


def parse(
    clauses: Iterable[Any],
    *,
    params: Sequence[str] = (),
    config: CompilerConfig | None = None,
) -> Comprehension:
    """Parse raw clauses into a Comprehension.

    Args:
        clauses: RawClause entries (see `for_`, `if_`, `value`, `key_value`)
            or tagged tuples such as ``("for", "x", xs)``.
        params: Free names supplied when the compiled program runs.
        config: Compiler configuration. Defaults to DEFAULT_CONFIG.

    Returns:
        The immutable clause model.

    Raises:
        GrammarError: If the clause list is not a valid comprehension.
    """
    return Parser(clauses, params=params, config=config).parse()


def compile_eager(
    model: Comprehension,
    *,
    config: CompilerConfig | None = None,
) -> EagerProgram:
    """Compile a model into a program that returns a list or dict.

    Sources must be finite; bound unbounded sources before compiling eagerly.

    Args:
        model: Parsed comprehension.
        config: Compiler configuration. Defaults to DEFAULT_CONFIG.

    Returns:
        EagerProgram; call it with the model's parameters.
    """
    return Compiler(config).compile_eager(model)


def compile_lazy(
    model: Comprehension,
    *,
    config: CompilerConfig | None = None,
) -> LazyProgram:
    """Compile a model into a program that returns a pull-based LazySequence.

    Args:
        model: Parsed comprehension.
        config: Compiler configuration. Defaults to DEFAULT_CONFIG.

    Returns:
        LazyProgram; call it with the model's parameters.
    """
    return Compiler(config).compile_lazy(model)
