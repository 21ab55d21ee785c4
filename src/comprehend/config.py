"""Compiler configuration.

The only per-call-site choice is the lowering target (``compile_eager`` vs
``compile_lazy``); everything else lives here and is shared by the parser
and both lowering engines.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CompilerConfig:
    """Options for parsing and compiling comprehensions.

    Attributes:
        filename: Filename given to generated code objects. Shows up in
            tracebacks raised from inside a compiled program.
        keep_source: Keep the generated Python text (``ast.unparse``) on
            compiled programs for introspection and debugging.
        check_static_arity: When a generator's source is a literal list or
            tuple of sized elements, check the binding pattern's arity
            against every element at parse time.

    Example:
            >>> from comprehend import CompilerConfig, compile_eager
            >>> config = CompilerConfig(filename="<report-query>", keep_source=False)
            >>> program = compile_eager(model, config=config)

    """

    filename: str = "<comprehension>"
    keep_source: bool = True
    check_static_arity: bool = True


DEFAULT_CONFIG = CompilerConfig()
