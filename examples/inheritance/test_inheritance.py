"""Tests for the inheritance example."""

import pytest

from stencil import RenderError


class TestInheritanceApp:
    """Verify blocks resolve through the three-level chain."""

    def test_chain(self, example_app) -> None:
        assert example_app.chain == ["article.html", "section.html", "base.html"]

    def test_title_uses_super(self, example_app) -> None:
        assert "<title>Getting Started | My Site</title>" in example_app.output

    def test_nav_from_middle_template(self, example_app) -> None:
        assert "<nav>home / docs</nav>" in example_app.output

    def test_content(self, example_app) -> None:
        assert "<p>Install it.</p>" in example_app.output
        assert "<p>Render something.</p>" in example_app.output

    def test_required_block_enforced(self, example_app) -> None:
        with pytest.raises(RenderError, match="Required block 'content'"):
            example_app.env.render("section.html")
