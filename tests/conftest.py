"""Pytest configuration and fixtures for comprehend tests."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

import pytest

from comprehend import (
    Compiler,
    CompilerConfig,
    Comprehension,
    OutputStrategy,
    compile_eager,
    compile_lazy,
    select_output,
)


@pytest.fixture
def compiler():
    """Create a Compiler with the default configuration."""
    return Compiler()


@pytest.fixture
def compiler_no_source():
    """Create a Compiler that drops the generated source text."""
    return Compiler(CompilerConfig(keep_source=False))


@pytest.fixture
def calls():
    """Create a fresh call log shared by recording callables."""
    return CallLog()


class CallLog:
    """Records which user callables ran, in order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, tuple[Any, ...]]] = []

    def record(self, label: str, func):
        """Wrap ``func`` so each call is logged under ``label``.

        The wrapper takes ``*args``, so it must be handed to the parser as
        ``Call(wrapper, params=(...))`` with explicit names.
        """

        def wrapper(*args: Any) -> Any:
            self.events.append((label, args))
            return func(*args)

        wrapper.__name__ = label
        return wrapper

    def count(self, label: str) -> int:
        return sum(1 for name, _ in self.events if name == label)

    def labels(self) -> list[str]:
        return [name for name, _ in self.events]


class CountingIterable:
    """Iterable that counts iterations started and elements pulled."""

    def __init__(self, items: Iterable[Any]) -> None:
        self.items = list(items)
        self.iterations = 0
        self.pulled = 0

    def __iter__(self) -> Iterator[Any]:
        self.iterations += 1
        for item in self.items:
            self.pulled += 1
            yield item


def run_both(model: Comprehension, **params: Any) -> tuple[Any, Any]:
    """Run a model through both engines; lazy output is materialized.

    Args:
        model: Parsed comprehension.
        params: Program parameters.

    Returns:
        (eager result, lazy result folded into a list or dict)
    """
    eager = compile_eager(model)(**params)
    sequence = compile_lazy(model)(**params)
    if select_output(model.head) is OutputStrategy.ASSOCIATIVE:
        return eager, dict(sequence)
    return eager, list(sequence)

