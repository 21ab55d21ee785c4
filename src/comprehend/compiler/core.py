"""Compiler core: the main Compiler class.

The Compiler lowers a Comprehension into a Python AST module, compiles it
to a code object, and wraps it in a program object. Lowering strategies
live in mixins; this module holds the shared plumbing.

Design Principles:
1. **AST-to-AST**: Generate `ast.Module`, not source strings
2. **Opaque expressions**: User callables and constants are placed in the
   program namespace under generated names and called, never inspected
3. **Fresh state per compilation**: Namespace, scope accumulator and
   counters are reset by every `compile_*` call

Generated names all start with `_cq_` (see `comprehend.utils.constants`).
A source at clause 0 becomes `_cq_source_0`, a filter at clause 2 becomes
`_cq_filter_2`, and so on, so compiling the same model twice yields the
same module.

"""

from __future__ import annotations

import ast
import logging
import types
from collections.abc import Sequence
from typing import Any

from comprehend.compiler.scope import ScopeAccumulator
from comprehend.compiler.statements import LoweringMixin
from comprehend.compiler.strategy import OutputStrategy, select_output
from comprehend.config import DEFAULT_CONFIG, CompilerConfig
from comprehend.nodes import (
    Call,
    Comprehension,
    Const,
    Expr,
    Filter,
    Name,
    NamePattern,
    Pattern,
    StarPattern,
    TuplePattern,
)
from comprehend.program import EagerProgram, LazyProgram
from comprehend.utils.constants import EAGER_ENTRY, LAZY_ENTRY, RESERVED_PREFIX

logger = logging.getLogger(__name__)


class Compiler(LoweringMixin):
    """Compile Comprehension models to runnable programs.

    One Compiler may be reused for any number of compilations; each call
    starts from clean state, so compiling the same model twice produces
    programs with identical behaviour and identical generated source.

    Attributes:
        _config: Compiler configuration
        _namespace: Generated name → user callable / constant / helper
        _scope: Scope accumulator for the current lowering pass
        _strategy: Output strategy of the model being compiled

    Example:
            >>> from comprehend import parse, for_, value
            >>> from comprehend.compiler import Compiler
            >>> model = parse([for_("x", range(3)), value(lambda x: x * 10)])
            >>> compiler = Compiler()
            >>> compiler.compile_eager(model)()
            [0, 10, 20]
            >>> list(compiler.compile_lazy(model)())
            [0, 10, 20]

    """

    __slots__ = ("_config", "_namespace", "_scope", "_strategy")

    def __init__(self, config: CompilerConfig | None = None):
        self._config = config or DEFAULT_CONFIG
        self._namespace: dict[str, Any] = {}
        self._scope = ScopeAccumulator()
        self._strategy = OutputStrategy.SEQUENCE

    @property
    def config(self) -> CompilerConfig:
        return self._config

    def compile_eager(self, model: Comprehension) -> EagerProgram:
        """Lower to nested loops that fill a list or dict in one pass.

        The sources must be finite: the program materializes everything
        before returning.
        """
        self._reset(model)
        function = self._lower_eager(model)
        code, source = self._finish(function)
        logger.debug(
            "Compiled eager program: %d generators, %s output",
            model.depth,
            self._strategy.value,
        )
        return EagerProgram(
            code,
            EAGER_ENTRY,
            model,
            self._namespace,
            strategy=self._strategy,
            source=source,
        )

    def compile_lazy(self, model: Comprehension) -> LazyProgram:
        """Lower to a pull-based chain of filter/map/flatten stages."""
        self._reset(model)
        functions = self._lower_lazy(model)
        code, source = self._finish(*functions)
        logger.debug(
            "Compiled lazy program: %d generators, %s output",
            model.depth,
            self._strategy.value,
        )
        return LazyProgram(
            code,
            LAZY_ENTRY,
            model,
            self._namespace,
            strategy=self._strategy,
            source=source,
        )

    def _reset(self, model: Comprehension) -> None:
        """Fresh per-compilation state; nothing leaks between compilations."""
        self._namespace = {}
        self._scope = ScopeAccumulator(model.params)
        self._strategy = select_output(model.head)

    def _finish(self, *functions: ast.stmt) -> tuple[types.CodeType, str | None]:
        """Assemble the module and compile it to a code object."""
        module = ast.Module(body=list(functions), type_ignores=[])
        ast.fix_missing_locations(module)
        source = ast.unparse(module) if self._config.keep_source else None
        code = compile(module, self._config.filename, "exec")
        return code, source

    # ─────────────────────────────────────────────────────────────────────────
    # Expression and pattern compilation
    # ─────────────────────────────────────────────────────────────────────────

    def _runtime_name(self, label: str, value: Any) -> str:
        """Place a runtime value in the program namespace under a generated name."""
        name = f"{RESERVED_PREFIX}{label}"
        self._namespace[name] = value
        return name

    def _compile_expr(self, expr: Expr, label: str) -> ast.expr:
        """Compile an opaque expression to a Python expression.

        Call  -> _cq_<label>(param, ...)
        Const -> _cq_<label>
        Name  -> name
        """
        if isinstance(expr, Call):
            func_name = self._runtime_name(label, expr.func)
            return ast.Call(
                func=ast.Name(id=func_name, ctx=ast.Load()),
                args=[ast.Name(id=param, ctx=ast.Load()) for param in expr.params],
                keywords=[],
            )
        if isinstance(expr, Const):
            return ast.Name(id=self._runtime_name(label, expr.value), ctx=ast.Load())
        if isinstance(expr, Name):
            return ast.Name(id=expr.name, ctx=ast.Load())
        raise TypeError(f"cannot compile expression node {type(expr).__name__}")

    def _compile_pattern(self, pattern: Pattern) -> ast.expr:
        """Compile a binding pattern to an assignment target."""
        if isinstance(pattern, NamePattern):
            return ast.Name(id=pattern.name, ctx=ast.Store())
        if isinstance(pattern, StarPattern):
            return ast.Starred(
                value=ast.Name(id=pattern.name, ctx=ast.Store()),
                ctx=ast.Store(),
            )
        if isinstance(pattern, TuplePattern):
            return ast.Tuple(
                elts=[self._compile_pattern(item) for item in pattern.items],
                ctx=ast.Store(),
            )
        raise TypeError(f"cannot compile pattern node {type(pattern).__name__}")

    def _conjoin(self, filters: Sequence[Filter]) -> ast.expr:
        """Combine filters with short-circuit `and`, in written order."""
        tests = [
            self._compile_expr(f.predicate, f"filter_{f.position}") for f in filters
        ]
        if len(tests) == 1:
            return tests[0]
        return ast.BoolOp(op=ast.And(), values=tests)

    def _make_function(
        self, name: str, args: Sequence[str], body: list[ast.stmt]
    ) -> ast.FunctionDef:
        return ast.FunctionDef(
            name=name,
            args=ast.arguments(
                posonlyargs=[],
                args=[ast.arg(arg=arg) for arg in args],
                vararg=None,
                kwonlyargs=[],
                kw_defaults=[],
                kwarg=None,
                defaults=[],
            ),
            body=body,
            decorator_list=[],
            returns=None,
            type_params=[],
        )
