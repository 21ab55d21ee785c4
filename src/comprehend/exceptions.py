"""Exceptions for the comprehend compiler.

Exception Hierarchy:
ComprehensionError (base)
└── GrammarError                    # Structural error, raised before lowering
    ├── MissingLeadingGeneratorError  # Empty clause list or leading filter
    ├── MalformedPatternError         # Invalid destructuring target
    ├── NoHeadError                   # No terminal head expression
    ├── UnresolvedReferenceError      # Name used before it is bound
    ├── MisplacedHeadError            # Second head, or clause after the head
    └── InvalidClauseError            # Unknown kind / wrong operand count

Evaluation errors raised by user callables while a compiled program runs
are never caught or wrapped; they reach the caller unchanged.

Error Messages:
Grammar errors render the clause list with the offending clause marked:

    ```
    C-GRM-001: Grammar Error: comprehension must start with a generator
      --> clause 0
       |
    >  0 | if <filter>
       1 | for x in <source>
       |
    Suggestion: move the filter after the generator whose names it uses
      Docs: https://comprehend.readthedocs.io/en/latest/errors/#c-grm-001
    ```

"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any

from comprehend import terminal

_DOCS_BASE = "https://comprehend.readthedocs.io/en/latest/errors"


class ErrorCode(Enum):
    """Searchable error codes for comprehension grammar errors.

    Format: C-{CATEGORY}-{NUMBER}
    Categories: GRM (grammar)

    Example:
        >>> ErrorCode.NO_HEAD.docs_url
        'https://comprehend.readthedocs.io/en/latest/errors/#c-grm-003'
    """

    MISSING_LEADING_GENERATOR = "C-GRM-001"
    MALFORMED_PATTERN = "C-GRM-002"
    NO_HEAD = "C-GRM-003"
    UNRESOLVED_REFERENCE = "C-GRM-004"
    MISPLACED_HEAD = "C-GRM-005"
    INVALID_CLAUSE = "C-GRM-006"

    @property
    def docs_url(self) -> str:
        """Documentation URL for this error code."""
        return f"{_DOCS_BASE}/#{self.value.lower()}"

    @property
    def category(self) -> str:
        """Error category (e.g., 'grammar')."""
        prefix = self.value.split("-")[1]
        return {"GRM": "grammar"}.get(prefix, "unknown")


class ComprehensionError(Exception):
    """Base exception for all comprehend errors.

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format error as a short, code-prefixed summary with a docs link."""
        parts: list[str] = []
        header = str(self).strip()
        if self.code and self.code.value not in header:
            header = f"{self.code.value}: {header}"
        parts.append(header)
        if self.code:
            parts.append(f"  Docs: {self.code.docs_url}")
        return "\n".join(parts)


class GrammarError(ComprehensionError):
    """Structural error in a clause list.

    Always raised by the parser, before any lowering begins. When the
    clause listing and position are known the message includes the listing
    with the offending clause marked.

    Attributes:
        message: Error description
        position: Index of the offending clause, if any
        clauses: One-line descriptions of every raw clause
        suggestion: Actionable fix suggestion
    """

    def __init__(
        self,
        message: str,
        *,
        position: int | None = None,
        clauses: Sequence[str] = (),
        suggestion: str | None = None,
    ):
        self.message = message
        self.position = position
        self.clauses = tuple(clauses)
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        code = self.code.value if self.code else None
        parts = [terminal.format_error_header(code, f"Grammar Error: {self.message}")]

        if self.position is not None:
            parts.append(f"  --> {terminal.location(f'clause {self.position}')}")

        if self.clauses:
            parts.append(terminal.dim_text("   |"))
            for index, text in enumerate(self.clauses):
                parts.append(
                    terminal.format_clause_line(index, text, is_error=index == self.position)
                )
            parts.append(terminal.dim_text("   |"))

        if self.suggestion:
            parts.append(terminal.hint(f"Suggestion: {self.suggestion}"))

        if self.code:
            parts.append(f"  Docs: {terminal.docs_url(self.code.docs_url)}")

        return "\n".join(parts)

    def format_compact(self) -> str:
        """Format without colors, suitable for logs."""
        parts = [f"{self.code.value}: {self.message}" if self.code else self.message]
        if self.position is not None:
            parts.append(f"  --> clause {self.position}")
        if self.suggestion:
            parts.append(f"  Hint: {self.suggestion}")
        if self.code:
            parts.append(f"  Docs: {self.code.docs_url}")
        return "\n".join(parts)


class MissingLeadingGeneratorError(GrammarError):
    """The clause list is empty or does not open with a generator."""

    code = ErrorCode.MISSING_LEADING_GENERATOR


class MalformedPatternError(GrammarError):
    """A generator's binding pattern is not a valid destructuring target.

    Covers invalid or reserved identifiers, duplicate names, misplaced
    starred items, and arity that statically disagrees with a literal source.
    """

    code = ErrorCode.MALFORMED_PATTERN


class NoHeadError(GrammarError):
    """The clause list has no terminal head expression."""

    code = ErrorCode.NO_HEAD


class UnresolvedReferenceError(GrammarError):
    """An expression references a name not bound by a preceding generator.

    Attributes:
        name: The unresolved name
    """

    code = ErrorCode.UNRESOLVED_REFERENCE

    def __init__(self, message: str, *, name: str, **kwargs: Any):
        self.name = name
        super().__init__(message, **kwargs)


class MisplacedHeadError(GrammarError):
    """More than one head, or a clause following the head."""

    code = ErrorCode.MISPLACED_HEAD


class InvalidClauseError(GrammarError):
    """A raw clause has an unknown kind or the wrong number of operands."""

    code = ErrorCode.INVALID_CLAUSE
