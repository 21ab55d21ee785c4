"""Clause sequence parser for comprehend.

Converts an ordered list of raw clause descriptions into an immutable
Comprehension, rejecting invalid clause lists with GrammarError subclasses
before any lowering begins.
"""

from comprehend.parser.core import Parser
from comprehend.parser.patterns import PatternError, parse_pattern

__all__ = ["Parser", "PatternError", "parse_pattern"]
