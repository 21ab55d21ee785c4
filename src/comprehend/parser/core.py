"""Clause sequence parser.

Turns an ordered list of raw clause descriptions into an immutable
Comprehension, enforcing every grammar invariant up front so that the
lowering engines never see an invalid clause list:

- the list opens with a generator
- every name an expression reads is a program parameter or bound by a
  generator that precedes it
- binding patterns are valid destructuring targets
- exactly one head, and it comes last
"""

from __future__ import annotations

import difflib
import inspect
import keyword
import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Any, NoReturn

from comprehend._types import CLAUSE_ARITY, ClauseKind, RawClause
from comprehend.config import DEFAULT_CONFIG, CompilerConfig
from comprehend.exceptions import (
    GrammarError,
    InvalidClauseError,
    MalformedPatternError,
    MisplacedHeadError,
    MissingLeadingGeneratorError,
    NoHeadError,
    UnresolvedReferenceError,
)
from comprehend.nodes import (
    WILDCARD,
    Call,
    Clause,
    Comprehension,
    Const,
    Expr,
    Filter,
    Generator,
    Head,
    KeyValueHead,
    Pattern,
    ValueHead,
)
from comprehend.parser.patterns import PatternError, check_static_arity, parse_pattern
from comprehend.utils.constants import RESERVED_PREFIX

logger = logging.getLogger(__name__)


class Parser:
    """Parse raw clauses into a Comprehension.

    Pure: parsing the same input twice yields equal models.

    Example:
            >>> from comprehend import for_, if_, value
            >>> from comprehend.parser import Parser
            >>> model = Parser([
            ...     for_("x", range(5)),
            ...     if_(lambda x: x % 2 == 0),
            ...     value(lambda x: x * x),
            ... ]).parse()
            >>> model.depth
            1

    """

    __slots__ = ("_clauses", "_config", "_descriptions", "_params", "_raw")

    def __init__(
        self,
        clauses: Iterable[Any],
        *,
        params: Sequence[str] = (),
        config: CompilerConfig | None = None,
    ):
        self._raw = list(clauses)
        self._params = tuple(params)
        self._config = config or DEFAULT_CONFIG
        self._clauses: list[RawClause] = []
        self._descriptions: tuple[str, ...] = ()

    def parse(self) -> Comprehension:
        """Validate the clause list and build the model.

        Raises:
            GrammarError: The clause list violates the comprehension grammar.
            ValueError: A program parameter name is invalid.
        """
        self._check_params()
        self._clauses = [self._normalize(raw, i) for i, raw in enumerate(self._raw)]
        self._descriptions = tuple(raw.describe() for raw in self._clauses)

        if not self._clauses:
            self._error(
                MissingLeadingGeneratorError,
                "empty clause list",
                suggestion="a comprehension needs at least one generator and a head",
            )
        first = self._clauses[0]
        if first.kind is not ClauseKind.FOR:
            self._error(
                MissingLeadingGeneratorError,
                "comprehension must start with a generator",
                position=0,
                suggestion="move the filter after the generator whose names it uses"
                if first.kind is ClauseKind.IF
                else "add a generator before the head",
            )

        # Names visible at the current clause; ordered for error suggestions
        bound: dict[str, None] = dict.fromkeys(self._params)
        clauses: list[Clause] = []
        head: Head | None = None

        for position, raw in enumerate(self._clauses):
            if head is not None:
                self._error(
                    MisplacedHeadError,
                    "clause after the head",
                    position=position,
                    suggestion="the head must be the last entry",
                )

            if raw.kind is ClauseKind.FOR:
                generator = self._parse_generator(raw, position, bound)
                clauses.append(generator)
                bound.update(dict.fromkeys(generator.pattern.names()))
            elif raw.kind is ClauseKind.IF:
                predicate = self._expr(raw.operands[0], position)
                self._check_references(predicate, position, bound)
                clauses.append(Filter(predicate, position))
            elif raw.kind is ClauseKind.VALUE:
                expr = self._expr(raw.operands[0], position)
                self._check_references(expr, position, bound)
                head = ValueHead(expr)
            else:
                key = self._expr(raw.operands[0], position)
                val = self._expr(raw.operands[1], position)
                self._check_references(key, position, bound)
                self._check_references(val, position, bound)
                head = KeyValueHead(key, val)

        if head is None:
            self._error(
                NoHeadError,
                "no head expression",
                suggestion="finish the clause list with value(...) or key_value(...)",
            )

        model = Comprehension(tuple(clauses), head, self._params)
        logger.debug(
            "Parsed comprehension: %d generators, %d filters, %s head",
            model.depth,
            len(model.filters),
            type(head).__name__,
        )
        return model

    # ─────────────────────────────────────────────────────────────────────────
    # Clause handling
    # ─────────────────────────────────────────────────────────────────────────

    def _normalize(self, raw: Any, position: int) -> RawClause:
        """Accept RawClause or a plain ('for', ...) style tuple."""
        if isinstance(raw, RawClause):
            tag, operands = raw.kind, tuple(raw.operands)
        elif isinstance(raw, (tuple, list)) and raw:
            tag, *rest = raw
            operands = tuple(rest)
        else:
            self._error(
                InvalidClauseError,
                f"clause must be a RawClause or a tagged tuple, not {type(raw).__name__}",
                position=position,
            )

        # RawClause is a plain NamedTuple, so its kind may be a bare string too
        try:
            kind = tag if isinstance(tag, ClauseKind) else ClauseKind(tag)
        except ValueError:
            kinds = ", ".join(repr(k.value) for k in ClauseKind)
            self._error(
                InvalidClauseError,
                f"unknown clause kind {tag!r}",
                position=position,
                suggestion=f"use one of {kinds}",
            )

        expected = CLAUSE_ARITY[kind]
        if len(operands) != expected:
            self._error(
                InvalidClauseError,
                f"{kind.value!r} clause takes {expected} operand(s), got {len(operands)}",
                position=position,
            )
        return RawClause(kind, operands)

    def _parse_generator(
        self, raw: RawClause, position: int, bound: dict[str, None]
    ) -> Generator:
        raw_pattern, raw_source = raw.operands
        try:
            pattern = parse_pattern(raw_pattern)
        except PatternError as e:
            self._error(
                MalformedPatternError,
                e.message,
                position=position,
                suggestion=e.suggestion,
                cause=e,
            )

        source = self._expr(raw_source, position)
        # The source is evaluated before its own pattern binds anything
        self._check_references(source, position, bound)

        if self._config.check_static_arity:
            self._check_arity(pattern, source, position)
        return Generator(pattern, source, position)

    def _check_arity(self, pattern: Pattern, source: Expr, position: int) -> None:
        if not isinstance(source, Const) or not isinstance(source.value, (list, tuple)):
            return
        try:
            check_static_arity(pattern, source.value)
        except PatternError as e:
            self._error(
                MalformedPatternError,
                e.message,
                position=position,
                suggestion=e.suggestion,
                cause=e,
            )

    def _expr(self, operand: Any, position: int) -> Expr:
        """Coerce an operand: Expr as is, callables to Call, anything else Const."""
        if isinstance(operand, Expr):
            if isinstance(operand, Call):
                self._check_param_names(operand.params, position)
                return Call(operand.func, tuple(operand.params))
            return operand
        if callable(operand):
            return Call(operand, self._infer_params(operand, position))
        return Const(operand)

    def _infer_params(self, func: Callable[..., Any], position: int) -> tuple[str, ...]:
        """Positional parameters without defaults name the variables to pass."""
        name = getattr(func, "__name__", type(func).__name__)
        try:
            signature = inspect.signature(func)
        except (TypeError, ValueError) as e:
            self._error(
                InvalidClauseError,
                f"cannot read the signature of {name!r}",
                position=position,
                suggestion="wrap it as Call(func, params=(...)) with explicit names",
                cause=e,
            )

        params: list[str] = []
        for param in signature.parameters.values():
            if param.default is not inspect.Parameter.empty:
                continue
            if param.kind in (
                inspect.Parameter.POSITIONAL_ONLY,
                inspect.Parameter.POSITIONAL_OR_KEYWORD,
            ):
                params.append(param.name)
            elif param.kind is inspect.Parameter.KEYWORD_ONLY:
                self._error(
                    InvalidClauseError,
                    f"{name!r} has a required keyword-only parameter {param.name!r}",
                    position=position,
                    suggestion="give it a default or make it positional",
                )
            elif param.kind is inspect.Parameter.VAR_POSITIONAL:
                self._error(
                    InvalidClauseError,
                    f"{name!r} takes variadic positional arguments (*{param.name})",
                    position=position,
                    suggestion="wrap it as Call(func, params=(...)) with explicit names",
                )
        self._check_param_names(params, position)
        return tuple(params)

    def _check_param_names(self, params: Sequence[str], position: int) -> None:
        for param in params:
            if not isinstance(param, str) or not param.isidentifier() or keyword.iskeyword(param):
                self._error(
                    InvalidClauseError,
                    f"expression parameter {param!r} is not an identifier",
                    position=position,
                )

    def _check_references(self, expr: Expr, position: int, bound: dict[str, None]) -> None:
        for name in expr.references():
            if name in bound:
                continue
            self._error(
                UnresolvedReferenceError,
                f"name {name!r} is not bound at this point",
                position=position,
                suggestion=self._suggest(name, position, bound),
                name=name,
            )

    def _suggest(self, name: str, position: int, bound: dict[str, None]) -> str | None:
        # Bound by a later generator: the clauses are in the wrong order
        for later in self._clauses[position + 1 :]:
            if later.kind is ClauseKind.FOR:
                try:
                    names = parse_pattern(later.operands[0]).names()
                except PatternError:
                    continue
                if name in names:
                    return (
                        f"{name!r} is bound by a later generator; generators nest "
                        "outermost-first, so move that generator before this clause"
                    )
        close = difflib.get_close_matches(name, list(bound), n=1)
        if close:
            return f"did you mean {close[0]!r}?"
        if bound:
            return f"names in scope: {', '.join(bound)}"
        return "declare it as a program parameter"

    def _check_params(self) -> None:
        seen: set[str] = set()
        for param in self._params:
            if not isinstance(param, str) or not param.isidentifier() or keyword.iskeyword(param):
                raise ValueError(f"program parameter {param!r} is not an identifier")
            if param == WILDCARD:
                raise ValueError("program parameter cannot be the wildcard name '_'")
            if param.startswith(RESERVED_PREFIX):
                raise ValueError(
                    f"program parameter {param!r} uses the reserved prefix {RESERVED_PREFIX!r}"
                )
            if param in seen:
                raise ValueError(f"duplicate program parameter {param!r}")
            seen.add(param)

    def _error(
        self,
        error_cls: type[GrammarError],
        message: str,
        *,
        position: int | None = None,
        suggestion: str | None = None,
        cause: BaseException | None = None,
        **extra: Any,
    ) -> NoReturn:
        """Raise a grammar error with the clause listing attached."""
        error = error_cls(
            message,
            position=position,
            clauses=self._descriptions,
            suggestion=suggestion,
            **extra,
        )
        raise error from cause
