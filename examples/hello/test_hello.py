"""Tests for the hello example."""


class TestHelloApp:
    """Verify the hello example renders correctly."""

    def test_output(self, example_app) -> None:
        assert example_app.output == "Hello, World!"

    def test_rerender_with_different_context(self, example_app) -> None:
        result = example_app.template.render(name="Stencil")
        assert result == "Hello, Stencil!"

    def test_main_prints_every_greeting(self, example_stdout) -> None:
        printed = example_stdout()
        assert printed.splitlines() == [
            "Hello, World!",
            "",
            "Hello, Stencil!",
            "Hello, Jinja!",
            "Hello, Python!",
        ]
