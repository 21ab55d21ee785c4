"""Lazy lowering for the comprehend compiler.

Provides a mixin that lowers a Comprehension into a chain of pull-based
stages built from `map`, `filter` and `itertools.chain.from_iterable`.

Stages carry *binding frames*: tuples holding the current value of every
name in scope (program parameters first, then generator names in first
binding order). Each generator level contributes three small functions:

    _cq_keep_N(frame)         -> conjoined filters pending at the boundary
    _cq_expand_N(frame)       -> lazy sequence of frames for the next level
    _cq_bind_N(frame, elem)   -> frame extended with the pattern's names

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from collections.abc import Sequence
from functools import partial
from itertools import chain
from typing import TYPE_CHECKING

from comprehend.nodes import Comprehension, Filter, Generator, KeyValueHead
from comprehend.utils.constants import (
    ELEM_ARG,
    FILTER_FUNC,
    FLATTEN_FUNC,
    FRAME_ARG,
    LAZY_ENTRY,
    MAP_FUNC,
    PARTIAL_FUNC,
    RESERVED_PREFIX,
    STAGE_VAR,
    STOP_VAR,
)

if TYPE_CHECKING:
    from typing import Any

    from comprehend.compiler.scope import ScopeAccumulator
    from comprehend.nodes import Expr, Pattern

# Stage combinators available to generated lazy programs
LAZY_HELPERS = {
    MAP_FUNC: map,
    FILTER_FUNC: filter,
    FLATTEN_FUNC: chain.from_iterable,
    PARTIAL_FUNC: partial,
}


class LazyLoweringMixin:
    """Mixin for lowering to a filter/map/flatten stage chain.

    Generates (two generators, a filter between them):
        def _cq_lazy(<params>):
            _cq_stage = ((<params>,),)
            _cq_stage = _cq_flatten(_cq_map(_cq_expand_0, _cq_stage))
            _cq_stage = _cq_filter(_cq_keep_2, _cq_stage)
            _cq_stage = _cq_flatten(_cq_map(_cq_expand_2, _cq_stage))
            return _cq_map(_cq_emit, _cq_stage)

    The initial stage is a single frame holding the parameters, so even the
    outermost source is only evaluated on the first pull. Filters run in a
    stage ahead of the flatten, so a rejected frame is never expanded and
    the deeper source is never called for it.

    Stage functions that call user code re-raise a StopIteration from it as
    RuntimeError, the same conversion generators apply.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes and cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        _scope: ScopeAccumulator
        _namespace: dict[str, Any]

        def _compile_expr(self, expr: Expr, label: str) -> ast.expr: ...
        def _compile_pattern(self, pattern: Pattern) -> ast.expr: ...
        def _conjoin(self, filters: Sequence[Filter]) -> ast.expr: ...
        def _make_function(
            self, name: str, args: Sequence[str], body: list[ast.stmt]
        ) -> ast.FunctionDef: ...

    def _lower_lazy(self, model: Comprehension) -> list[ast.stmt]:
        """Generate stage functions plus the `_cq_lazy(<params>)` entry."""
        self._namespace.update(LAZY_HELPERS)

        functions: list[ast.stmt] = []
        # _cq_stage = ((<params>,),)
        entry_body: list[ast.stmt] = [
            self._assign_stage(
                ast.Tuple(elts=[self._frame_tuple(self._scope.bound)], ctx=ast.Load())
            )
        ]

        for clause in model.clauses:
            if isinstance(clause, Filter):
                self._scope.collect(clause)
                continue

            layout = self._scope.bound
            pending = self._scope.open(clause)
            if pending:
                functions.append(self._make_keep(f"keep_{clause.position}", layout, pending))
                entry_body.append(self._filter_stage(f"keep_{clause.position}"))

            functions.append(self._make_bind(clause, layout, self._scope.bound))
            functions.append(self._make_expand(clause, layout))
            entry_body.append(self._flatten_stage(f"expand_{clause.position}"))

        layout = self._scope.bound
        pending = self._scope.close()
        if pending:
            functions.append(self._make_keep("keep_head", layout, pending))
            entry_body.append(self._filter_stage("keep_head"))

        functions.append(self._make_emit(model, layout))
        # return _cq_map(_cq_emit, _cq_stage)
        entry_body.append(
            ast.Return(value=self._call(MAP_FUNC, self._ref("emit"), self._stage()))
        )

        functions.append(self._make_function(LAZY_ENTRY, model.params, entry_body))
        return functions

    # ─────────────────────────────────────────────────────────────────────────
    # Stage functions
    # ─────────────────────────────────────────────────────────────────────────

    def _make_keep(
        self, label: str, layout: Sequence[str], pending: Sequence[Filter]
    ) -> ast.FunctionDef:
        """def _cq_keep_N(frame): <unpack>; return <f1> and <f2> ..."""
        body = self._unpack_frame(layout)
        body.append(self._guard_stop(ast.Return(value=self._conjoin(pending))))
        return self._make_function(f"{RESERVED_PREFIX}{label}", [FRAME_ARG], body)

    def _make_bind(
        self, generator: Generator, layout: Sequence[str], extended: Sequence[str]
    ) -> ast.FunctionDef:
        """def _cq_bind_N(frame, elem): <unpack>; <pattern> = elem; return (<names>,)"""
        body = self._unpack_frame(layout)
        body.append(
            ast.Assign(
                targets=[self._compile_pattern(generator.pattern)],
                value=ast.Name(id=ELEM_ARG, ctx=ast.Load()),
            )
        )
        body.append(ast.Return(value=self._frame_tuple(extended)))
        return self._make_function(
            f"{RESERVED_PREFIX}bind_{generator.position}", [FRAME_ARG, ELEM_ARG], body
        )

    def _make_expand(self, generator: Generator, layout: Sequence[str]) -> ast.FunctionDef:
        """def _cq_expand_N(frame): <unpack>; return map(partial(bind_N, frame), <source>)"""
        body = self._unpack_frame(layout)
        bind = self._call(
            PARTIAL_FUNC,
            self._ref(f"bind_{generator.position}"),
            ast.Name(id=FRAME_ARG, ctx=ast.Load()),
        )
        source = self._compile_expr(generator.source, f"source_{generator.position}")
        body.append(self._guard_stop(ast.Return(value=self._call(MAP_FUNC, bind, source))))
        return self._make_function(
            f"{RESERVED_PREFIX}expand_{generator.position}", [FRAME_ARG], body
        )

    def _make_emit(self, model: Comprehension, layout: Sequence[str]) -> ast.FunctionDef:
        """def _cq_emit(frame): <unpack>; return <value> | (<key>, <value>)"""
        head = model.head
        body = self._unpack_frame(layout)
        if isinstance(head, KeyValueHead):
            result: ast.expr = ast.Tuple(
                elts=[
                    self._compile_expr(head.key, "key"),
                    self._compile_expr(head.value, "value"),
                ],
                ctx=ast.Load(),
            )
        else:
            result = self._compile_expr(head.expr, "head")
        body.append(self._guard_stop(ast.Return(value=result)))
        return self._make_function(f"{RESERVED_PREFIX}emit", [FRAME_ARG], body)

    # ─────────────────────────────────────────────────────────────────────────
    # Stage chain statements
    # ─────────────────────────────────────────────────────────────────────────

    def _filter_stage(self, label: str) -> ast.stmt:
        """_cq_stage = _cq_filter(_cq_keep_N, _cq_stage)"""
        return self._assign_stage(self._call(FILTER_FUNC, self._ref(label), self._stage()))

    def _flatten_stage(self, label: str) -> ast.stmt:
        """_cq_stage = _cq_flatten(_cq_map(_cq_expand_N, _cq_stage))"""
        return self._assign_stage(
            self._call(FLATTEN_FUNC, self._call(MAP_FUNC, self._ref(label), self._stage()))
        )

    def _guard_stop(self, stmt: ast.stmt) -> ast.stmt:
        """try: <stmt> except StopIteration as e: raise RuntimeError(...) from e

        map and filter treat a StopIteration from the function they call as
        the end of their input, which would silently truncate the sequence.
        """
        message = "StopIteration raised by a user callable in a lazy comprehension"
        handler = ast.ExceptHandler(
            type=ast.Name(id="StopIteration", ctx=ast.Load()),
            name=STOP_VAR,
            body=[
                ast.Raise(
                    exc=ast.Call(
                        func=ast.Name(id="RuntimeError", ctx=ast.Load()),
                        args=[ast.Constant(value=message)],
                        keywords=[],
                    ),
                    cause=ast.Name(id=STOP_VAR, ctx=ast.Load()),
                )
            ],
        )
        return ast.Try(body=[stmt], handlers=[handler], orelse=[], finalbody=[])

    def _assign_stage(self, value: ast.expr) -> ast.stmt:
        return ast.Assign(targets=[ast.Name(id=STAGE_VAR, ctx=ast.Store())], value=value)

    def _stage(self) -> ast.expr:
        return ast.Name(id=STAGE_VAR, ctx=ast.Load())

    def _ref(self, label: str) -> ast.expr:
        return ast.Name(id=f"{RESERVED_PREFIX}{label}", ctx=ast.Load())

    def _call(self, func: str, *args: ast.expr) -> ast.expr:
        return ast.Call(func=ast.Name(id=func, ctx=ast.Load()), args=list(args), keywords=[])

    def _unpack_frame(self, layout: Sequence[str]) -> list[ast.stmt]:
        """(a, b, c) = _cq_frame"""
        if not layout:
            return []
        return [
            ast.Assign(
                targets=[
                    ast.Tuple(
                        elts=[ast.Name(id=name, ctx=ast.Store()) for name in layout],
                        ctx=ast.Store(),
                    )
                ],
                value=ast.Name(id=FRAME_ARG, ctx=ast.Load()),
            )
        ]

    def _frame_tuple(self, layout: Sequence[str]) -> ast.expr:
        return ast.Tuple(
            elts=[ast.Name(id=name, ctx=ast.Load()) for name in layout],
            ctx=ast.Load(),
        )
