"""Tests for terminal colour utilities used by error diagnostics."""

import pytest

from stencil.environment import terminal


class TestColorDetection:
    """Test terminal color detection logic."""

    def test_no_color_disables(self, monkeypatch):
        monkeypatch.delenv("FORCE_COLOR", raising=False)
        monkeypatch.setenv("NO_COLOR", "1")
        assert terminal.refresh() is False
        assert not terminal.supports_color()

    def test_force_color_overrides_no_color(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        monkeypatch.setenv("FORCE_COLOR", "1")
        assert terminal.refresh() is True
        assert terminal.supports_color()

    def test_colorize_returns_plain_when_disabled(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", False)
        result = terminal.colorize("Error", "red", "bold")
        assert result == "Error"
        assert "\033[" not in result

    def test_colorize_adds_codes_when_enabled(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        result = terminal.colorize("Error", "red", "bold")
        assert "\033[31m" in result  # red
        assert "\033[1m" in result  # bold
        assert "\033[0m" in result  # reset

    def test_strip_colors_removes_ansi_codes(self):
        colored = "\033[31m\033[1mError\033[0m"
        plain = terminal.strip_colors(colored)
        assert plain == "Error"


@pytest.fixture(autouse=True)
def _restore_colors():
    saved = terminal._USE_COLORS
    yield
    terminal._USE_COLORS = saved


class TestSemanticHelpers:
    """Test semantic color helper functions."""

    def test_error_code_formatting(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        result = terminal.error_code("S-EVL-001")
        assert "S-EVL-001" in result
        assert "\033[91m" in result

    def test_location_formatting(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        result = terminal.location("test.html:42")
        assert "test.html:42" in result
        assert "\033[36m" in result

    def test_hint_formatting(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        result = terminal.hint("Hint:")
        assert "Hint:" in result
        assert "\033[32m" in result

    def test_suggestion_formatting(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        result = terminal.suggestion("username")
        assert "username" in result
        assert "\033[92m" in result


class TestErrorFormatting:
    """Test formatted error output functions."""

    def test_format_error_header_with_code(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        result = terminal.format_error_header("S-EVL-001", "Something went wrong")
        assert "S-EVL-001" in result
        assert "Something went wrong" in result
        assert "\033[" in result

    def test_format_error_header_without_code(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        result = terminal.format_error_header(None, "Something went wrong")
        assert result == "Something went wrong"

    def test_format_source_line_normal(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        result = terminal.format_source_line(42, "{{ user }}", is_error=False)
        assert "42" in result
        assert "{{ user }}" in result
        assert "|" in result
        assert "\033[2m" in result

    def test_format_source_line_error(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        result = terminal.format_source_line(42, "{{ undefined }}", is_error=True)
        assert "{{ undefined }}" in result
        assert ">" in result
        assert "\033[91m" in result


class TestPlainTextMode:
    """Colours never change what a message says."""

    def test_helpers_return_plain_text(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", False)
        assert terminal.error_code("S-EVL-001") == "S-EVL-001"
        assert terminal.location("test.html") == "test.html"
        assert terminal.hint("Hint") == "Hint"
        assert terminal.suggestion("foo") == "foo"

    def test_exception_messages_readable_without_colors(self, monkeypatch):
        from stencil.environment.exceptions import UndefinedError

        monkeypatch.setattr(terminal, "_USE_COLORS", False)
        error_str = str(UndefinedError("undefined_var", "test.html", 5))
        assert "undefined_var" in error_str
        assert "test.html:5" in error_str
        assert "Hint" in error_str
        assert "\033[" not in error_str

    def test_colorize_unknown_style_is_ignored(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        assert terminal.colorize("text", "unknown_color") == "text"
        assert terminal.colorize("text") == "text"
