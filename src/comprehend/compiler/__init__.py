"""Comprehension compiler.

Lowers a Comprehension into a Python AST module, compiles it, and wraps
the result in an EagerProgram or LazyProgram.
"""

from comprehend.compiler.core import Compiler
from comprehend.compiler.scope import ScopeAccumulator
from comprehend.compiler.strategy import OutputStrategy, select_output

__all__ = ["Compiler", "OutputStrategy", "ScopeAccumulator", "select_output"]
