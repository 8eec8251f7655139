"""Tests for ``is`` tests and the default globals."""

from __future__ import annotations

import pytest

from stencil import Environment, Markup, RenderError, pass_context
from stencil.environment.exceptions import ErrorCode


def render(env: Environment, source: str, **context: object) -> str:
    return env.from_string(source).render(**context)


def check(env: Environment, expr: str, **context: object) -> str:
    return render(env, "{% if " + expr + " %}yes{% else %}no{% endif %}", **context)


class TestBuiltinTests:
    @pytest.mark.parametrize(
        ("expr", "expected"),
        [
            ("4 is even", "yes"),
            ("3 is odd", "yes"),
            ("9 is divisibleby 3", "yes"),
            ("9 is divisibleby(4)", "no"),
            ("'abc' is string", "yes"),
            ("1 is string", "no"),
            ("1 is number", "yes"),
            ("true is number", "no"),
            ("1 is integer", "yes"),
            ("1.5 is float", "yes"),
            ("true is boolean", "yes"),
            ("none is none", "yes"),
            ("[1] is sequence", "yes"),
            ("{'a': 1} is mapping", "yes"),
            ("[1] is iterable", "yes"),
            ("2 is in [1, 2]", "yes"),
            ("'hello' is lower", "yes"),
            ("'HELLO' is upper", "yes"),
            ("'hello' is startingwith('he')", "yes"),
            ("'hello' is endingwith 'lo'", "yes"),
            ("'v1.2' is match('v\\\\d')", "yes"),
            ("3 is eq 3", "yes"),
            ("3 is ne 3", "no"),
            ("3 is gt 2", "yes"),
            ("3 is lt 2", "no"),
            ("3 is ge 3", "yes"),
            ("3 is le 2", "no"),
            ("3 is not even", "yes"),
            ("true is true", "yes"),
            ("1 is true", "no"),
            ("1 is truthy", "yes"),
            ("'' is truthy", "no"),
            ("[] is falsy", "yes"),
            ("'x' is falsy", "no"),
            ("missing is falsy", "yes"),
        ],
    )
    def test_builtin(self, env: Environment, expr: str, expected: str) -> None:
        assert check(env, expr) == expected

    def test_truthy_and_falsy(self, env: Environment) -> None:
        source = "{{ 1 is truthy }} {{ 0 is truthy }} {{ none is falsy }}"
        assert render(env, source) == "true false true"
        assert render(env, "{{ [0, 1, '', 'a']|reject('falsy')|join(',') }}") == "1,a"

    def test_defined(self, env: Environment) -> None:
        assert check(env, "value is defined", value=0) == "yes"
        assert check(env, "missing is defined") == "no"
        assert check(env, "missing is undefined") == "yes"

    def test_none_is_defined(self, env: Environment) -> None:
        assert check(env, "value is defined", value=None) == "yes"

    def test_defined_attribute_chain(self, env: Environment) -> None:
        assert check(env, "user.profile.email is defined", user={}) == "no"

    def test_defined_in_strict_mode(self, env_strict: Environment) -> None:
        assert check(env_strict, "missing is defined") == "no"
        assert check(env_strict, "user.name is undefined", user={}) == "yes"

    def test_sameas(self, env: Environment) -> None:
        item = object()
        assert check(env, "a is sameas(b)", a=item, b=item) == "yes"
        assert check(env, "a is sameas(b)", a=item, b=object()) == "no"

    def test_callable(self, env: Environment) -> None:
        source = "{% macro m() %}{% endmacro %}{{ m is callable }} {{ len is callable }} {{ 1 is callable }}"
        assert render(env, source, len=len) == "true true false"

    def test_escaped(self, env: Environment) -> None:
        assert check(env, "v is escaped", v=Markup("<b>")) == "yes"
        assert check(env, "v is escaped", v="<b>") == "no"

    def test_unknown_test_suggests_name(self, env: Environment) -> None:
        with pytest.raises(RenderError) as exc_info:
            check(env, "1 is evn")
        error = exc_info.value.error
        assert error.code == ErrorCode.UNKNOWN_TEST
        assert error.suggestion == "Did you mean 'even'?"

    def test_custom_test(self, env: Environment) -> None:
        @env.test("prime")
        def is_prime(value):
            return value > 1 and all(value % i for i in range(2, value))

        assert render(env, "{{ [2, 4, 7, 9]|select('prime')|join(',') }}") == "2,7"
        assert env.call_test("prime", 11) is True


class TestGlobals:
    def test_range(self, env: Environment) -> None:
        assert render(env, "{% for i in range(3) %}{{ i }}{% endfor %}") == "012"
        assert render(env, "{{ range(1, 10, 3)|list }}") == "[1, 4, 7]"

    def test_range_is_bounded(self, env: Environment) -> None:
        with pytest.raises(RenderError) as exc_info:
            render(env, "{{ range(1000000)|length }}")
        assert "Range too big" in exc_info.value.message

    def test_dict(self, env: Environment) -> None:
        assert render(env, "{{ dict(a=1, b=2)|dictsort }}") == '[["a", 1], ["b", 2]]'

    def test_namespace_carries_value_out_of_loop(self, env: Environment) -> None:
        source = (
            "{% set ns = namespace(total=0) %}"
            "{% for n in [1, 2, 3] %}{% set ns.total = ns.total + n %}{% endfor %}"
            "{{ ns.total }}"
        )
        assert render(env, source) == "6"

    def test_cycler(self, env: Environment) -> None:
        source = (
            "{% set row = cycler('odd', 'even') %}"
            "{% for i in range(3) %}{{ row.next() }} {% endfor %}{{ row.current }}"
        )
        assert render(env, source) == "odd even odd even"

    def test_joiner(self, env: Environment) -> None:
        source = "{% set pipe = joiner(' | ') %}{% for x in 'abc' %}{{ pipe() }}{{ x }}{% endfor %}"
        assert render(env, source) == "a | b | c"

    def test_lipsum(self, env: Environment) -> None:
        result = render(env, "{{ lipsum(2, html=false, min=5, max=5) }}")
        paragraphs = result.split("\n\n")
        assert len(paragraphs) == 2
        assert all(len(p.split()) == 5 for p in paragraphs)

    def test_context_shadows_globals(self, env: Environment) -> None:
        assert render(env, "{{ range }}", range="mine") == "mine"

    def test_environment_globals(self) -> None:
        env = Environment(globals={"site": "Example"})
        assert render(env, "{{ site }}") == "Example"
        env.add_global("year", 2026)
        assert render(env, "{{ site }} {{ year }}") == "Example 2026"
        assert render(env, "{{ range(2)|list }}") == "[0, 1]"

    def test_debug_lists_context(self, env: Environment) -> None:
        result = render(env, "{{ debug() }}", myvar=42, user={"name": "Ada"})
        assert result == 'Context:\n  myvar: 42\n  user: {"name": "Ada"}\n'

    def test_debug_sees_local_scope(self, env: Environment) -> None:
        source = "{% set total = 3 %}{% for x in ['a'] %}{{ debug() }}{% endfor %}"
        result = render(env, source, total=1)
        assert '  total: 3\n' in result
        assert '  x: "a"\n' in result
        assert "range" not in result

    def test_pass_context_global(self, env: Environment) -> None:
        @pass_context
        def greet(context, greeting="Hi"):
            return f"{greeting} {context['name']}"

        env.add_global("greet", greet)
        assert render(env, "{{ greet() }}|{{ greet('Yo') }}", name="Ada") == "Hi Ada|Yo Ada"
