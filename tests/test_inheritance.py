"""Tests for template inheritance: extends, blocks and super()."""

from __future__ import annotations

import pytest

from stencil import (
    CircularInheritanceError,
    Environment,
    ParseError,
    RenderError,
    TemplateNotFoundError,
)
from stencil.environment.exceptions import ErrorCode


@pytest.fixture
def env_chain(env: Environment) -> Environment:
    env.register_template(
        "base.txt",
        "<{% block title %}Base{% endblock %}|{% block body %}base body{% endblock %}>",
    )
    env.register_template(
        "middle.txt",
        '{% extends "base.txt" %}{% block title %}Middle/{{ super() }}{% endblock %}',
    )
    env.register_template(
        "leaf.txt",
        '{% extends "middle.txt" %}'
        "{% block title %}Leaf/{{ super() }}{% endblock %}"
        "{% block body %}leaf body{% endblock %}",
    )
    return env


class TestExtends:
    def test_child_overrides_block(self, env_with_templates: Environment) -> None:
        assert env_with_templates.render("child.html") == (
            "<html><head></head><body>Hello World</body></html>"
        )

    def test_parent_default_used_when_not_overridden(self, env_chain: Environment) -> None:
        assert env_chain.render("middle.txt") == "<Middle/Base|base body>"

    def test_three_levels_with_super(self, env_chain: Environment) -> None:
        assert env_chain.render("leaf.txt") == "<Leaf/Middle/Base|leaf body>"

    def test_child_text_outside_blocks_is_discarded(self, env_chain: Environment) -> None:
        env_chain.register_template(
            "noisy.txt", '{% extends "base.txt" %}ignored text{% block body %}B{% endblock %}more'
        )
        assert env_chain.render("noisy.txt") == "<Base|B>"

    def test_blocks_only_in_child_are_not_rendered(self, env_chain: Environment) -> None:
        env_chain.register_template(
            "extra.txt", '{% extends "base.txt" %}{% block sidebar %}S{% endblock %}'
        )
        assert env_chain.render("extra.txt") == "<Base|base body>"

    def test_inline_template_can_extend(self, env_chain: Environment) -> None:
        template = env_chain.from_string('{% extends "base.txt" %}{% block body %}{{ x }}{% endblock %}')
        assert template.render(x=42) == "<Base|42>"

    def test_block_reads_context(self, env_chain: Environment) -> None:
        env_chain.register_template(
            "ctx.txt", '{% extends "base.txt" %}{% block body %}Hi {{ name }}{% endblock %}'
        )
        assert env_chain.render("ctx.txt", {"name": "Ada"}) == "<Base|Hi Ada>"

    def test_scoped_modifier_is_accepted(self, env: Environment) -> None:
        assert env.from_string("{% block b scoped %}x{% endblock %}").render() == "x"


class TestNestedBlocks:
    @pytest.fixture
    def env_nested(self, env: Environment) -> Environment:
        env.register_template(
            "layout.txt",
            "{% block outer %}[{% block inner %}inner{% endblock %}]{% endblock %}",
        )
        return env

    def test_override_inner_only(self, env_nested: Environment) -> None:
        env_nested.register_template(
            "page.txt", '{% extends "layout.txt" %}{% block inner %}INNER{% endblock %}'
        )
        assert env_nested.render("page.txt") == "[INNER]"

    def test_override_outer_drops_inner(self, env_nested: Environment) -> None:
        env_nested.register_template(
            "page.txt", '{% extends "layout.txt" %}{% block outer %}OUTER{% endblock %}'
        )
        assert env_nested.render("page.txt") == "OUTER"

    def test_outer_super_renders_overridden_inner(self, env_nested: Environment) -> None:
        env_nested.register_template(
            "page.txt",
            '{% extends "layout.txt" %}'
            "{% block outer %}({{ super() }}){% endblock %}"
            "{% block inner %}new{% endblock %}",
        )
        assert env_nested.render("page.txt") == "([new])"


class TestDefinitionsInChildren:
    def test_child_set_is_visible_in_blocks(self, env_chain: Environment) -> None:
        env_chain.register_template(
            "titled.txt",
            '{% extends "base.txt" %}{% set title = "T" %}{% block body %}{{ title }}{% endblock %}',
        )
        assert env_chain.render("titled.txt") == "<Base|T>"

    def test_ancestor_set_of_same_name_wins(self, env: Environment) -> None:
        env.register_template(
            "colors.txt", "{% set color = 'red' %}{% block b %}{{ color }}{% endblock %}"
        )
        env.register_template(
            "blue.txt",
            "{% extends 'colors.txt' %}{% set color = 'blue' %}{% block b %}{{ color }}{% endblock %}",
        )
        assert env.render("blue.txt") == "red"

    def test_child_macro_usable_in_child_block(self, env_chain: Environment) -> None:
        env_chain.register_template(
            "macro_child.txt",
            '{% extends "base.txt" %}'
            "{% macro em(t) %}*{{ t }}*{% endmacro %}"
            "{% block body %}{{ em('x') }}{% endblock %}",
        )
        assert env_chain.render("macro_child.txt") == "<Base|*x*>"

    def test_child_import_usable_in_child_block(self, env_with_templates: Environment) -> None:
        env_with_templates.register_template(
            "imports.html",
            '{% extends "base.html" %}{% import "macros.html" as m %}'
            "{% block body %}{{ m.greet('Ada') }}{% endblock %}",
        )
        assert env_with_templates.render("imports.html") == (
            "<html><head></head><body>Hello Ada</body></html>"
        )


class TestSuper:
    def test_super_without_parent_definition(self, env: Environment) -> None:
        with pytest.raises(RenderError) as exc_info:
            env.from_string("{% block b %}{{ super() }}{% endblock %}").render()
        assert "no parent definition" in exc_info.value.message

    def test_super_outside_block(self, env: Environment) -> None:
        with pytest.raises(RenderError) as exc_info:
            env.from_string("{{ super() }}").render()
        assert "inside a block" in exc_info.value.message

    def test_super_is_not_escaped_twice(self, env_autoescape: Environment) -> None:
        env_autoescape.register_template("p.html", "{% block b %}<b>{{ v }}</b>{% endblock %}")
        env_autoescape.register_template(
            "c.html", '{% extends "p.html" %}{% block b %}<i>{{ super() }}</i>{% endblock %}'
        )
        assert env_autoescape.render("c.html", v="&") == "<i><b>&amp;</b></i>"


class TestRequiredBlocks:
    def test_required_block_must_be_overridden(self, env: Environment) -> None:
        env.register_template("frame.txt", "[{% block content required %}{% endblock %}]")
        with pytest.raises(RenderError) as exc_info:
            env.render("frame.txt")
        assert "Required block 'content'" in exc_info.value.message

    def test_required_block_overridden(self, env: Environment) -> None:
        env.register_template("frame.txt", "[{% block content required %}{% endblock %}]")
        env.register_template(
            "filled.txt", '{% extends "frame.txt" %}{% block content %}ok{% endblock %}'
        )
        assert env.render("filled.txt") == "[ok]"


class TestInheritanceErrors:
    def test_missing_parent(self, env: Environment) -> None:
        env.register_template("orphan.txt", '{% extends "nowhere.txt" %}')
        with pytest.raises(RenderError) as exc_info:
            env.render("orphan.txt")
        error = exc_info.value.error
        assert isinstance(error, TemplateNotFoundError)
        assert error.code == ErrorCode.TEMPLATE_NOT_FOUND

    def test_cycle(self, env: Environment) -> None:
        env.register_template("a.txt", '{% extends "b.txt" %}')
        env.register_template("b.txt", '{% extends "a.txt" %}')
        with pytest.raises(RenderError) as exc_info:
            env.render("a.txt")
        error = exc_info.value.error
        assert isinstance(error, CircularInheritanceError)
        assert error.chain == ("a.txt", "b.txt", "a.txt")
        assert "a.txt -> b.txt -> a.txt" in str(error)

    def test_self_extension(self, env: Environment) -> None:
        env.register_template("self.txt", '{% extends "self.txt" %}')
        with pytest.raises(CircularInheritanceError):
            env.resolve("self.txt")

    def test_duplicate_block_rejected_at_registration(self, env: Environment) -> None:
        with pytest.raises(ParseError) as exc_info:
            env.register_template("dup.txt", "{% block a %}{% endblock %}{% block a %}{% endblock %}")
        assert exc_info.value.code == ErrorCode.DUPLICATE_BLOCK
        assert "dup.txt" not in env.registry
