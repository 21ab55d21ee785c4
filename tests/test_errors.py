"""Tests for grammar error formatting and error codes."""

import pytest

from comprehend import (
    ComprehensionError,
    ErrorCode,
    GrammarError,
    MissingLeadingGeneratorError,
    Name,
    NoHeadError,
    UnresolvedReferenceError,
    for_,
    if_,
    parse,
    value,
)
from comprehend import terminal


@pytest.fixture
def plain(monkeypatch):
    """Disable colors so messages can be compared verbatim."""
    monkeypatch.setattr(terminal, "_USE_COLORS", False)


class TestErrorCodes:
    """Searchable codes with docs links."""

    def test_codes_are_unique(self):
        values = [code.value for code in ErrorCode]
        assert len(values) == len(set(values))

    def test_code_format(self):
        for code in ErrorCode:
            assert code.value.startswith("C-GRM-")
            assert code.category == "grammar"

    def test_docs_url(self):
        assert ErrorCode.NO_HEAD.docs_url == (
            "https://comprehend.readthedocs.io/en/latest/errors/#c-grm-003"
        )


class TestGrammarErrorMessage:
    """Messages list the clauses and mark the offending one."""

    def test_full_message(self, plain):
        with pytest.raises(MissingLeadingGeneratorError) as exc_info:
            parse([if_(Name("x")), for_("x", Name("xs")), value(Name("x"))], params=("xs",))
        assert str(exc_info.value) == (
            "C-GRM-001: Grammar Error: comprehension must start with a generator\n"
            "  --> clause 0\n"
            "   |\n"
            ">  0 | if x\n"
            "   1 | for x in xs\n"
            "   2 | => x\n"
            "   |\n"
            "Suggestion: move the filter after the generator whose names it uses\n"
            "  Docs: https://comprehend.readthedocs.io/en/latest/errors/#c-grm-001"
        )

    def test_message_without_position(self, plain):
        with pytest.raises(NoHeadError) as exc_info:
            parse([for_("x", Name("xs"))], params=("xs",))
        message = str(exc_info.value)
        assert message.startswith("C-GRM-003: Grammar Error: no head expression")
        assert "-->" not in message
        assert "   0 | for x in xs" in message

    def test_colored_message_strips_to_plain(self, monkeypatch):
        clauses = [for_("x", [1, 2]), value(Name("y"))]
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        with pytest.raises(UnresolvedReferenceError) as colored:
            parse(clauses)
        assert "\033[" in str(colored.value)

        monkeypatch.setattr(terminal, "_USE_COLORS", False)
        with pytest.raises(UnresolvedReferenceError) as plain_error:
            parse(clauses)
        assert terminal.strip_colors(str(colored.value)) == str(plain_error.value)

    def test_callables_are_described_by_name(self, plain):
        def keep_small(x):
            return x < 3

        with pytest.raises(NoHeadError) as exc_info:
            parse([for_("x", [1, 2]), if_(keep_small)])
        assert "if <keep_small>" in str(exc_info.value)
        assert "for x in [1, 2]" in str(exc_info.value)

    def test_long_constants_are_shortened(self, plain):
        with pytest.raises(NoHeadError) as exc_info:
            parse([for_("x", list(range(100)))])
        line = str(exc_info.value).splitlines()[2]
        assert line.endswith("...")

    def test_format_compact(self):
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            parse([for_("item", [1]), value(lambda itme: itme)])
        assert exc_info.value.format_compact() == (
            "C-GRM-004: name 'itme' is not bound at this point\n"
            "  --> clause 1\n"
            "  Hint: did you mean 'item'?\n"
            "  Docs: https://comprehend.readthedocs.io/en/latest/errors/#c-grm-004"
        )

    def test_attributes(self):
        with pytest.raises(GrammarError) as exc_info:
            parse([for_("x", [1]), value(Name("y"))])
        error = exc_info.value
        assert error.message == "name 'y' is not bound at this point"
        assert error.position == 1
        assert error.clauses == ("for x in [1]", "=> y")
        assert isinstance(error, ComprehensionError)


class TestBaseError:
    """ComprehensionError without a code."""

    def test_compact_without_code(self):
        assert ComprehensionError("plain failure").format_compact() == "plain failure"
