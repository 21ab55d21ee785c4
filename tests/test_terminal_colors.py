"""Tests for terminal color utilities used by grammar error messages."""

import pytest

from comprehend import MissingLeadingGeneratorError, for_, if_, parse, value
from comprehend import terminal


class TestColorDetection:
    """Test terminal color detection logic."""

    def test_no_color_disables_colors(self, monkeypatch):
        monkeypatch.delenv("FORCE_COLOR", raising=False)
        monkeypatch.setenv("NO_COLOR", "1")
        assert terminal._should_use_colors() is False

    def test_force_color_wins_over_no_color(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        monkeypatch.setenv("FORCE_COLOR", "1")
        assert terminal._should_use_colors() is True

    def test_colorize_returns_plain_when_disabled(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", False)
        result = terminal.colorize("Error", "red", "bold")
        assert result == "Error"

    def test_colorize_adds_codes_when_enabled(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        result = terminal.colorize("Error", "red", "bold")
        assert result == "\033[31m\033[1mError\033[0m"

    def test_strip_colors_removes_ansi_codes(self):
        assert terminal.strip_colors("\033[31m\033[1mError\033[0m") == "Error"


class TestSemanticHelpers:
    """Each helper maps to its color."""

    @pytest.mark.parametrize(
        ("helper", "code"),
        [
            (terminal.error_code, "\033[91m"),
            (terminal.location, "\033[36m"),
            (terminal.hint, "\033[32m"),
            (terminal.dim_text, "\033[2m"),
            (terminal.docs_url, "\033[94m"),
        ],
    )
    def test_helper_colors(self, monkeypatch, helper, code):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        result = helper("text")
        assert code in result
        assert terminal.strip_colors(result) == "text"

    def test_helpers_plain_when_disabled(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", False)
        assert terminal.error_code("C-GRM-001") == "C-GRM-001"
        assert terminal.location("clause 3") == "clause 3"
        assert terminal.hint("Hint") == "Hint"


class TestErrorFormatting:
    """Formatted error output functions."""

    def test_format_error_header_with_code(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", False)
        result = terminal.format_error_header("C-GRM-003", "no head expression")
        assert result == "C-GRM-003: no head expression"

    def test_format_error_header_without_code(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        assert terminal.format_error_header(None, "no head") == "no head"

    def test_format_clause_line_normal(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", False)
        assert terminal.format_clause_line(4, "for x in xs") == "   4 | for x in xs"

    def test_format_clause_line_error(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        result = terminal.format_clause_line(12, "if <keep>", is_error=True)
        assert "\033[91m" in result
        assert terminal.strip_colors(result) == "> 12 | if <keep>"

    def test_exception_messages_readable_without_colors(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", False)
        with pytest.raises(MissingLeadingGeneratorError) as exc_info:
            parse([if_(True), for_("x", [1]), value(1)])
        message = str(exc_info.value)
        assert "Suggestion" in message
        assert "\033[" not in message
