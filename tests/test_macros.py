"""Tests for macros and call blocks."""

from __future__ import annotations

import pytest

from stencil import Environment, Markup, RenderError
from stencil.environment.exceptions import ErrorCode

FIELD = (
    '{% macro field(name, value="", type="text") -%}'
    '<input type="{{ type }}" name="{{ name }}" value="{{ value }}">'
    "{%- endmacro %}"
)


def render(env: Environment, source: str, **context: object) -> str:
    return env.from_string(source).render(**context)


class TestMacroCalls:
    def test_defaults(self, env: Environment) -> None:
        assert render(env, FIELD + "{{ field('user') }}") == (
            '<input type="text" name="user" value="">'
        )

    def test_positional_and_keyword(self, env: Environment) -> None:
        assert render(env, FIELD + "{{ field('pw', type='password') }}") == (
            '<input type="password" name="pw" value="">'
        )

    def test_default_refers_to_earlier_parameter(self, env: Environment) -> None:
        source = "{% macro m(a, b=a * 2) %}{{ a }},{{ b }}{% endmacro %}{{ m(3) }}"
        assert render(env, source) == "3,6"

    def test_default_sees_defining_scope(self, env: Environment) -> None:
        source = "{% set unit = 'px' %}{% macro size(n, u=unit) %}{{ n }}{{ u }}{% endmacro %}{{ size(4) }}"
        assert render(env, source) == "4px"

    def test_recursion(self, env: Environment) -> None:
        source = (
            "{% macro countdown(n) %}{{ n }}{% if n > 0 %} {{ countdown(n - 1) }}{% endif %}"
            "{% endmacro %}{{ countdown(3) }}"
        )
        assert render(env, source) == "3 2 1 0"

    def test_macro_output_is_markup_under_autoescape(self, env_autoescape: Environment) -> None:
        source = "{% macro bold(text) %}<b>{{ text }}</b>{% endmacro %}{{ bold('<i>') }}"
        assert render(env_autoescape, source) == "<b>&lt;i&gt;</b>"

    def test_macro_output_is_plain_str_without_autoescape(self, env: Environment) -> None:
        captured: list[object] = []
        env.register_filter("capture", lambda v: captured.append(v) or "")
        env.from_string("{% macro m() %}x{% endmacro %}{{ m()|capture }}").render()
        assert captured == ["x"]
        assert not isinstance(captured[0], Markup)

    def test_macro_is_a_value(self, env: Environment) -> None:
        source = "{% macro a() %}A{% endmacro %}{% set alias = a %}{{ alias() }}"
        assert render(env, source) == "A"


class TestVarargsAndKwargs:
    def test_varargs(self, env: Environment) -> None:
        source = "{% macro m(a) %}{{ a }}+{{ varargs|join(',') }}{% endmacro %}{{ m(1, 2, 3) }}"
        assert render(env, source) == "1+2,3"

    def test_kwargs(self, env: Environment) -> None:
        source = "{% macro m() %}{{ kwargs|dictsort }}{% endmacro %}{{ m(b=2, a=1) }}"
        assert render(env, source) == '[["a", 1], ["b", 2]]'

    def test_too_many_positional(self, env: Environment) -> None:
        with pytest.raises(RenderError) as exc_info:
            render(env, "{% macro m(a) %}{% endmacro %}{{ m(1, 2) }}")
        error = exc_info.value.error
        assert error.code == ErrorCode.ARITY
        assert "Signature: m(a)" in error.suggestion

    def test_unknown_keyword(self, env: Environment) -> None:
        with pytest.raises(RenderError) as exc_info:
            render(env, "{% macro m(a) %}{% endmacro %}{{ m(b=1) }}")
        assert exc_info.value.error.code == ErrorCode.ARITY
        assert "'b'" in exc_info.value.error.message

    def test_missing_required(self, env: Environment) -> None:
        with pytest.raises(RenderError) as exc_info:
            render(env, "{% macro m(a, b) %}{% endmacro %}{{ m(1) }}")
        assert exc_info.value.error.code == ErrorCode.ARITY
        assert "missing required argument 'b'" in exc_info.value.error.message

    def test_duplicate_argument(self, env: Environment) -> None:
        with pytest.raises(RenderError) as exc_info:
            render(env, "{% macro m(a) %}{% endmacro %}{{ m(1, a=2) }}")
        assert exc_info.value.error.code == ErrorCode.ARITY


class TestCallBlocks:
    def test_caller(self, env: Environment) -> None:
        source = (
            "{% macro panel(title) %}<{{ title }}>{{ caller() }}</{{ title }}>{% endmacro %}"
            "{% call panel('p') %}body{% endcall %}"
        )
        assert render(env, source) == "<p>body</p>"

    def test_caller_with_arguments(self, env: Environment) -> None:
        source = (
            "{% macro listing(items) %}{% for i in items %}[{{ caller(i) }}]{% endfor %}{% endmacro %}"
            "{% call(item) listing([1, 2]) %}{{ item * 10 }}{% endcall %}"
        )
        assert render(env, source) == "[10][20]"

    def test_caller_sees_call_site_scope(self, env: Environment) -> None:
        source = (
            "{% macro wrap() %}({{ caller() }}){% endmacro %}"
            "{% for x in ['a', 'b'] %}{% call wrap() %}{{ x }}{% endcall %}{% endfor %}"
        )
        assert render(env, source) == "(a)(b)"

    def test_caller_output_not_double_escaped(self, env_autoescape: Environment) -> None:
        source = (
            "{% macro wrap() %}<div>{{ caller() }}</div>{% endmacro %}"
            "{% call wrap() %}<p>{{ v }}</p>{% endcall %}"
        )
        assert render(env_autoescape, source, v="&") == "<div><p>&amp;</p></div>"

    def test_call_needs_macro(self, env: Environment) -> None:
        with pytest.raises(RenderError) as exc_info:
            render(env, "{% call f() %}x{% endcall %}", f=lambda: "")
        assert exc_info.value.error.code == ErrorCode.TYPE_MISMATCH
