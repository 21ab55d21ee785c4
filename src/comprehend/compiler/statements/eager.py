"""Eager lowering for the comprehend compiler.

Provides a mixin that lowers a Comprehension into one Python function of
nested `for` loops filling a list or dict.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from collections.abc import Sequence
from typing import TYPE_CHECKING, cast

from comprehend.compiler.strategy import OutputStrategy
from comprehend.nodes import Clause, Comprehension, Filter, Generator, KeyValueHead
from comprehend.utils.constants import APPEND_VAR, EAGER_ENTRY, OUT_VAR

if TYPE_CHECKING:
    from comprehend.compiler.scope import ScopeAccumulator
    from comprehend.nodes import Expr, Pattern


class EagerLoweringMixin:
    """Mixin for lowering to nested loops.

    Generates (value head):
        def _cq_eager(<params>):
            _cq_out = []
            _cq_append = _cq_out.append
            for x in <source 0>:
                if not (<filter 1> and <filter 2>):
                    continue
                for y in <source 3>:
                    _cq_append(<head>)
            return _cq_out

    Key/value heads build `_cq_out = {}` and insert through a cached
    `_cq_append = _cq_out.__setitem__`, so the key is evaluated before the
    value and a repeated key keeps the last value.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes and cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        _scope: ScopeAccumulator
        _strategy: OutputStrategy

        def _compile_expr(self, expr: Expr, label: str) -> ast.expr: ...
        def _compile_pattern(self, pattern: Pattern) -> ast.expr: ...
        def _conjoin(self, filters: Sequence[Filter]) -> ast.expr: ...
        def _make_function(
            self, name: str, args: Sequence[str], body: list[ast.stmt]
        ) -> ast.FunctionDef: ...

    def _lower_eager(self, model: Comprehension) -> ast.FunctionDef:
        """Generate the `_cq_eager(<params>)` function."""
        associative = self._strategy is OutputStrategy.ASSOCIATIVE
        insert_attr = "__setitem__" if associative else "append"

        body: list[ast.stmt] = [
            # _cq_out = [] / {}
            ast.Assign(
                targets=[ast.Name(id=OUT_VAR, ctx=ast.Store())],
                value=ast.Dict(keys=[], values=[])
                if associative
                else ast.List(elts=[], ctx=ast.Load()),
            ),
            # _cq_append = _cq_out.append / _cq_out.__setitem__
            ast.Assign(
                targets=[ast.Name(id=APPEND_VAR, ctx=ast.Store())],
                value=ast.Attribute(
                    value=ast.Name(id=OUT_VAR, ctx=ast.Load()),
                    attr=insert_attr,
                    ctx=ast.Load(),
                ),
            ),
        ]
        body.extend(self._lower_eager_level(model, list(model.clauses), 0))
        # return _cq_out
        body.append(ast.Return(value=ast.Name(id=OUT_VAR, ctx=ast.Load())))

        return self._make_function(EAGER_ENTRY, model.params, body)

    def _lower_eager_level(
        self, model: Comprehension, clauses: list[Clause], index: int
    ) -> list[ast.stmt]:
        """Lower clauses[index:] into the body of the enclosing loop.

        Filters up to the next generator are collected; at the generator they
        become a `continue` guard ahead of its loop, so a rejected binding
        never reaches the deeper iteration.
        """
        while index < len(clauses) and isinstance(clauses[index], Filter):
            self._scope.collect(clauses[index])
            index += 1

        if index == len(clauses):
            stmts = self._eager_guard(self._scope.close())
            stmts.append(self._emit_head(model))
            return stmts

        generator = cast(Generator, clauses[index])
        # Source is compiled against the bindings of the enclosing levels
        iter_expr = self._compile_expr(generator.source, f"source_{generator.position}")
        stmts = self._eager_guard(self._scope.open(generator))
        stmts.append(
            ast.For(
                target=self._compile_pattern(generator.pattern),
                iter=iter_expr,
                body=self._lower_eager_level(model, clauses, index + 1),
                orelse=[],
            )
        )
        return stmts

    def _eager_guard(self, filters: Sequence[Filter]) -> list[ast.stmt]:
        """if not (<f1> and <f2> ...): continue"""
        if not filters:
            return []
        return [
            ast.If(
                test=ast.UnaryOp(op=ast.Not(), operand=self._conjoin(filters)),
                body=[ast.Continue()],
                orelse=[],
            )
        ]

    def _emit_head(self, model: Comprehension) -> ast.stmt:
        """_cq_append(<value>) or _cq_append(<key>, <value>)"""
        head = model.head
        if isinstance(head, KeyValueHead):
            args = [
                self._compile_expr(head.key, "key"),
                self._compile_expr(head.value, "value"),
            ]
        else:
            args = [self._compile_expr(head.expr, "head")]
        return ast.Expr(
            value=ast.Call(
                func=ast.Name(id=APPEND_VAR, ctx=ast.Load()),
                args=args,
                keywords=[],
            )
        )
