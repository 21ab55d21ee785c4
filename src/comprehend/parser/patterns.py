"""Binding pattern parsing and validation.

Patterns arrive as strings (``"x"``, ``"k, v"``, ``"first, *rest"``),
nested tuples/lists of strings (``("k", ("a", "b"))``), or ready-made
Pattern nodes. String patterns are parsed with Python's own ``ast`` module
so the accepted grammar is exactly Python's assignment-target grammar
restricted to names, tuples and starred names.
"""

from __future__ import annotations

import ast
import keyword
from collections.abc import Sequence
from typing import Any

from comprehend.nodes import WILDCARD, NamePattern, Pattern, StarPattern, TuplePattern
from comprehend.utils.constants import RESERVED_PREFIX


class PatternError(ValueError):
    """Pattern problem; the parser turns it into MalformedPatternError."""

    def __init__(self, message: str, suggestion: str | None = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)


def parse_pattern(raw: Any) -> Pattern:
    """Build and validate a Pattern from its raw form.

    Raises:
        PatternError: If ``raw`` is not a valid destructuring target.
    """
    pattern = _build(raw, nested=False)
    validate_pattern(pattern)
    return pattern


def _build(raw: Any, *, nested: bool) -> Pattern:
    if isinstance(raw, Pattern):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise PatternError("empty binding pattern")
        if nested and text.startswith("*"):
            return StarPattern(text[1:].strip())
        return _from_source(text)
    if isinstance(raw, (tuple, list)):
        return TuplePattern(tuple(_build(item, nested=True) for item in raw))
    raise PatternError(
        f"binding pattern must be a string, tuple or Pattern, not {type(raw).__name__}",
        suggestion="write the pattern as a string such as 'key, value'",
    )


def _from_source(text: str) -> Pattern:
    try:
        tree = ast.parse(f"{text} = None", mode="exec")
    except SyntaxError as e:
        raise PatternError(f"cannot parse binding pattern {text!r}: {e.msg}") from e
    statement = tree.body[0] if len(tree.body) == 1 else None
    if not isinstance(statement, ast.Assign) or len(statement.targets) != 1:
        raise PatternError(f"{text!r} is not a single binding pattern")
    return _from_ast(statement.targets[0], text)


def _from_ast(node: ast.expr, text: str) -> Pattern:
    if isinstance(node, ast.Name):
        return NamePattern(node.id)
    if isinstance(node, (ast.Tuple, ast.List)):
        items: list[Pattern] = []
        for elt in node.elts:
            if isinstance(elt, ast.Starred):
                if not isinstance(elt.value, ast.Name):
                    raise PatternError(f"starred item in {text!r} must be a plain name")
                items.append(StarPattern(elt.value.id))
            else:
                items.append(_from_ast(elt, text))
        return TuplePattern(tuple(items))
    raise PatternError(
        f"{ast.unparse(node)!r} in {text!r} is not a binding target",
        suggestion="patterns may only contain names, tuples and one starred name per tuple",
    )


def validate_pattern(pattern: Pattern, *, top_level: bool = True) -> None:
    """Check identifiers, starred items and duplicate names.

    Raises:
        PatternError: On the first problem found.
    """
    if isinstance(pattern, StarPattern) and top_level:
        raise PatternError(
            f"starred target {pattern.describe()!r} must be inside a tuple pattern",
            suggestion=f"write '{pattern.name}' to bind the whole element",
        )
    if isinstance(pattern, (NamePattern, StarPattern)):
        _check_identifier(pattern.name)
    elif isinstance(pattern, TuplePattern):
        stars = sum(1 for item in pattern.items if isinstance(item, StarPattern))
        if stars > 1:
            raise PatternError(
                f"multiple starred items in {pattern.describe()}",
                suggestion="use at most one starred name per tuple level",
            )
        for item in pattern.items:
            validate_pattern(item, top_level=False)
    else:
        raise PatternError(f"unknown pattern node {type(pattern).__name__}")

    if top_level:
        seen: set[str] = set()
        for name in pattern.names():
            if name in seen:
                raise PatternError(f"name {name!r} is bound twice in {pattern.describe()}")
            seen.add(name)


def _check_identifier(name: str) -> None:
    if name == WILDCARD:
        return
    if not name.isidentifier() or keyword.iskeyword(name):
        raise PatternError(f"{name!r} is not a valid identifier")
    if name.startswith(RESERVED_PREFIX):
        raise PatternError(
            f"{name!r} uses the reserved prefix {RESERVED_PREFIX!r}",
            suggestion="rename the variable",
        )


def check_static_arity(pattern: Pattern, elements: Sequence[Any]) -> None:
    """Check a tuple pattern against every element of a literal source.

    Only tuple and list elements have a statically known length; other
    elements (strings, iterators, objects) are left to run time.

    Raises:
        PatternError: On the first element whose length does not fit.
    """
    if not isinstance(pattern, TuplePattern):
        return
    for index, element in enumerate(elements):
        _check_element(pattern, element, index)


def _check_element(pattern: TuplePattern, element: Any, index: int) -> None:
    if not isinstance(element, (tuple, list)):
        return
    size = len(element)
    if pattern.has_star:
        fits = size >= pattern.arity
        expected = f"at least {pattern.arity}"
    else:
        fits = size == pattern.arity
        expected = str(pattern.arity)
    if not fits:
        raise PatternError(
            f"pattern {pattern.describe()} expects {expected} items but "
            f"source element {index} has {size}",
            suggestion="make the pattern's arity match the source elements",
        )
    if pattern.has_star:
        # Nested patterns after the star are not position-stable
        return
    for sub_pattern, sub_element in zip(pattern.items, element, strict=True):
        if isinstance(sub_pattern, TuplePattern):
            _check_element(sub_pattern, sub_element, index)
