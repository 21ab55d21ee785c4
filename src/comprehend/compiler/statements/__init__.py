"""Lowering engines for the comprehend compiler.

The statements package holds one mixin per execution strategy:
- eager: nested `for` loops filling a list or dict
- lazy: pull-based chain of filter/map/flatten stages

Both walk the clause list with the host Compiler's ScopeAccumulator and
consult the output strategy chosen once per compilation.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

from comprehend.compiler.statements.eager import EagerLoweringMixin
from comprehend.compiler.statements.lazy import LazyLoweringMixin


class LoweringMixin(EagerLoweringMixin, LazyLoweringMixin):
    """Combined mixin for both lowering strategies.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks in each individual mixin.

    """
