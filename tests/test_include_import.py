"""Tests for include, import and from-import."""

from __future__ import annotations

import pytest

from stencil import Environment, RenderError, TemplateNotFoundError
from stencil.environment.exceptions import ErrorCode

from .conftest import assert_contains


class TestInclude:
    def test_include(self, env_with_templates: Environment) -> None:
        result = env_with_templates.from_string('<div>{% include "partial.html" %}</div>').render()
        assert result == "<div><p>Partial content</p></div>"

    def test_include_sees_context_and_locals(self, env: Environment) -> None:
        env.register_template("item.txt", "{{ prefix }}{{ x }};")
        source = '{% set prefix = "#" %}{% for x in [1, 2] %}{% include "item.txt" %}{% endfor %}'
        assert env.from_string(source).render() == "#1;#2;"

    def test_include_without_context(self, env: Environment) -> None:
        env.register_template("bare.txt", "[{{ user }}|{{ range(2)|list }}]")
        source = '{% include "bare.txt" without context %}'
        assert env.from_string(source).render(user="ada") == "[|[0, 1]]"

    def test_include_with_context_explicit(self, env: Environment) -> None:
        env.register_template("bare.txt", "[{{ user }}]")
        source = '{% include "bare.txt" with context %}'
        assert env.from_string(source).render(user="ada") == "[ada]"

    def test_included_assignments_stay_inside(self, env: Environment) -> None:
        env.register_template("setter.txt", "{% set leaked = 1 %}")
        source = '{% include "setter.txt" %}[{{ leaked }}]'
        assert env.from_string(source).render() == "[]"

    def test_dynamic_name(self, env: Environment) -> None:
        env.register_template("card_a.txt", "A")
        env.register_template("card_b.txt", "B")
        source = '{% for k in ["a", "b"] %}{% include "card_" ~ k ~ ".txt" %}{% endfor %}'
        assert env.from_string(source).render() == "AB"

    def test_first_existing_of_list(self, env: Environment) -> None:
        env.register_template("fallback.txt", "fallback")
        source = '{% include ["custom.txt", "fallback.txt"] %}'
        assert env.from_string(source).render() == "fallback"

    def test_ignore_missing(self, env: Environment) -> None:
        assert env.from_string('[{% include "nope.txt" ignore missing %}]').render() == "[]"

    def test_missing_include(self, env: Environment) -> None:
        env.register_template("known.txt", "")
        with pytest.raises(RenderError) as exc_info:
            env.from_string('{% include "nope.txt" %}').render()
        error = exc_info.value.error
        assert isinstance(error, TemplateNotFoundError)
        assert error.code == ErrorCode.TEMPLATE_NOT_FOUND

    def test_include_of_child_template(self, env_with_templates: Environment) -> None:
        result = env_with_templates.from_string('{% include "child.html" %}').render()
        assert_contains(result, "<body>Hello World</body>")

    def test_include_depth_limit(self) -> None:
        env = Environment(max_include_depth=3)
        env.register_template("loop.txt", 'x{% include "loop.txt" %}')
        with pytest.raises(RenderError) as exc_info:
            env.render("loop.txt")
        assert exc_info.value.error.code == ErrorCode.INCLUDE_DEPTH

    def test_bounded_recursive_include(self, env: Environment) -> None:
        env.register_template(
            "tree.txt",
            "{{ node.name }}{% for node in node.children %}({% include 'tree.txt' %}){% endfor %}",
        )
        tree = {"name": "a", "children": [{"name": "b", "children": []}]}
        assert env.render("tree.txt", node=tree) == "a(b)"

    def test_autoescape_applies_in_included_template(self, env_autoescape: Environment) -> None:
        env_autoescape.register_template("esc.html", "{{ v }}")
        result = env_autoescape.from_string('{% include "esc.html" %}').render(v="<x>")
        assert result == "&lt;x&gt;"


class TestImport:
    def test_import_as_module(self, env_with_templates: Environment) -> None:
        source = '{% import "macros.html" as m %}{{ m.greet("Ada") }} {{ m.add(1, 2) }}'
        assert env_with_templates.from_string(source).render() == "Hello Ada 3"

    def test_from_import(self, env_with_templates: Environment) -> None:
        source = '{% from "macros.html" import greet, add as plus %}{{ greet("Bo") }}{{ plus(2, 2) }}'
        assert env_with_templates.from_string(source).render() == "Hello Bo4"

    def test_module_exports_variables(self, env: Environment) -> None:
        env.register_template("config.txt", "{% set version = '1.0' %}{% set _secret = 'x' %}")
        source = '{% import "config.txt" as cfg %}{{ cfg.version }}[{{ cfg._secret }}]'
        assert env.from_string(source).render() == "1.0[]"

    def test_module_output_is_discarded(self, env: Environment) -> None:
        env.register_template("noisy.txt", "NOISE{% macro m() %}ok{% endmacro %}")
        assert env.from_string('{% import "noisy.txt" as n %}{{ n.m() }}').render() == "ok"

    def test_imported_macro_sees_module_variables(self, env: Environment) -> None:
        env.register_template(
            "lib.txt", "{% set sep = '::' %}{% macro join2(a, b) %}{{ a }}{{ sep }}{{ b }}{% endmacro %}"
        )
        source = '{% from "lib.txt" import join2 %}{{ join2(1, 2) }}'
        assert env.from_string(source).render() == "1::2"

    def test_import_without_context_by_default(self, env: Environment) -> None:
        env.register_template("who.txt", "{% macro who() %}[{{ user }}]{% endmacro %}")
        source = '{% from "who.txt" import who %}{{ who() }}'
        assert env.from_string(source).render(user="ada") == "[]"

    def test_import_with_context(self, env: Environment) -> None:
        env.register_template("who.txt", "{% macro who() %}[{{ user }}]{% endmacro %}")
        source = '{% from "who.txt" import who with context %}{{ who() }}'
        assert env.from_string(source).render(user="ada") == "[ada]"

    def test_missing_name(self, env_with_templates: Environment) -> None:
        source = '{% from "macros.html" import nope %}'
        with pytest.raises(RenderError) as exc_info:
            env_with_templates.from_string(source).render()
        error = exc_info.value.error
        assert "does not export 'nope'" in error.message
        assert error.suggestion == "Available: add, greet"

    def test_missing_module(self, env: Environment) -> None:
        with pytest.raises(RenderError) as exc_info:
            env.from_string('{% import "absent.txt" as a %}').render()
        assert isinstance(exc_info.value.error, TemplateNotFoundError)

    def test_unknown_module_attribute_is_undefined(self, env_with_templates: Environment) -> None:
        source = '{% import "macros.html" as m %}[{{ m.missing }}]'
        assert env_with_templates.from_string(source).render() == "[]"
