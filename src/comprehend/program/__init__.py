"""Compiled comprehension programs and the lazy sequence they produce."""

from comprehend.program.core import EagerProgram, LazyProgram, Program
from comprehend.program.sequence import LazySequence

__all__ = ["EagerProgram", "LazyProgram", "LazySequence", "Program"]
