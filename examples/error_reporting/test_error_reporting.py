"""Tests for the error_reporting example."""

from stencil import ErrorCode, UndefinedError


class TestErrorReportingApp:
    """Verify the error points at the typo and lists the include stack."""

    def test_innermost_location(self, example_app) -> None:
        assert example_app.error.template_name == "nav.html"
        assert example_app.error.lineno == 3

    def test_wrapped_error(self, example_app) -> None:
        inner = example_app.error.error
        assert isinstance(inner, UndefinedError)
        assert inner.code == ErrorCode.UNDEFINED_VARIABLE
        assert "Did you mean" in inner.suggestion
        assert "username" in inner.suggestion

    def test_include_stack(self, example_app) -> None:
        assert example_app.error.template_stack == [("page.html", 2), ("layout.html", 2)]

    def test_compact_format(self, example_app) -> None:
        compact = example_app.error.format_compact()
        assert "S-EVL-001" in compact
        assert "Welcome, {{ usernme }}" in compact
