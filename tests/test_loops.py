"""Tests for ``{% for %}`` and the ``loop`` variable."""

from __future__ import annotations

import pytest

from stencil import Environment, RenderError
from stencil.environment.exceptions import ErrorCode


def render(env: Environment, source: str, **context: object) -> str:
    return env.from_string(source).render(**context)


class TestIteration:
    def test_list(self, env: Environment) -> None:
        assert render(env, "{% for x in items %}{{ x }},{% endfor %}", items=[1, 2, 3]) == "1,2,3,"

    def test_string(self, env: Environment) -> None:
        assert render(env, "{% for c in 'abc' %}[{{ c }}]{% endfor %}") == "[a][b][c]"

    def test_mapping_iterates_keys(self, env: Environment) -> None:
        assert render(env, "{% for k in d %}{{ k }}{% endfor %}", d={"a": 1, "b": 2}) == "ab"

    def test_generator(self, env: Environment) -> None:
        gen = (n * n for n in range(4))
        assert render(env, "{% for n in g %}{{ n }} {% endfor %}", g=gen) == "0 1 4 9 "

    def test_tuple_unpacking(self, env: Environment) -> None:
        source = "{% for name, age in people %}{{ name }}={{ age }};{% endfor %}"
        assert render(env, source, people=[("a", 1), ("b", 2)]) == "a=1;b=2;"

    def test_parenthesized_unpacking(self, env: Environment) -> None:
        source = "{% for (a, b) in pairs %}{{ a + b }}{% endfor %}"
        assert render(env, source, pairs=[(1, 2), (3, 4)]) == "37"

    def test_unpacking_wrong_size(self, env: Environment) -> None:
        with pytest.raises(RenderError) as exc_info:
            render(env, "{% for a, b in items %}{% endfor %}", items=[(1, 2, 3)])
        assert exc_info.value.error.code == ErrorCode.TYPE_MISMATCH

    def test_else_on_empty(self, env: Environment) -> None:
        source = "{% for x in items %}{{ x }}{% else %}none{% endfor %}"
        assert render(env, source, items=[]) == "none"
        assert render(env, source, items=[1]) == "1"

    def test_undefined_iterates_as_empty(self, env: Environment) -> None:
        assert render(env, "{% for x in missing %}{{ x }}{% else %}empty{% endfor %}") == "empty"

    def test_not_iterable(self, env: Environment) -> None:
        with pytest.raises(RenderError) as exc_info:
            render(env, "{% for x in n %}{% endfor %}", n=42)
        error = exc_info.value.error
        assert error.code == ErrorCode.TYPE_MISMATCH
        assert "not iterable" in error.message

    def test_none_is_not_iterable(self, env: Environment) -> None:
        with pytest.raises(RenderError):
            render(env, "{% for x in n %}{% endfor %}", n=None)

    def test_nested_loops(self, env: Environment) -> None:
        source = "{% for row in grid %}{% for cell in row %}{{ cell }}{% endfor %}|{% endfor %}"
        assert render(env, source, grid=[[1, 2], [3]]) == "12|3|"

    def test_generic_end_tag(self, env: Environment) -> None:
        assert render(env, "{% for x in [1, 2] %}{{ x }}{% end %}") == "12"


class TestInlineFilter:
    def test_condition_filters_items(self, env: Environment) -> None:
        source = "{% for n in range(10) if n is odd %}{{ n }}{% endfor %}"
        assert render(env, source) == "13579"

    def test_length_counts_kept_items(self, env: Environment) -> None:
        source = "{% for n in [1, 2, 3, 4] if n > 2 %}{{ loop.index }}/{{ loop.length }} {% endfor %}"
        assert render(env, source) == "1/2 2/2 "

    def test_all_filtered_renders_else(self, env: Environment) -> None:
        source = "{% for n in [1, 2] if n > 5 %}{{ n }}{% else %}none{% endfor %}"
        assert render(env, source) == "none"


class TestLoopVariable:
    @pytest.mark.parametrize(
        ("expr", "expected"),
        [
            ("loop.index", "1,2,3,"),
            ("loop.index0", "0,1,2,"),
            ("loop.revindex", "3,2,1,"),
            ("loop.revindex0", "2,1,0,"),
            ("loop.first", "true,false,false,"),
            ("loop.last", "false,false,true,"),
            ("loop.length", "3,3,3,"),
            ("loop.previtem", ",a,b,"),
            ("loop.nextitem", "b,c,,"),
            ("loop.depth", "1,1,1,"),
            ("loop.cycle('x', 'y')", "x,y,x,"),
        ],
    )
    def test_attribute(self, env: Environment, expr: str, expected: str) -> None:
        source = "{% for item in items %}{{ " + expr + " }},{% endfor %}"
        assert render(env, source, items=["a", "b", "c"]) == expected

    def test_changed(self, env: Environment) -> None:
        source = (
            "{% for entry in entries %}"
            "{% if loop.changed(entry.day) %}#{{ entry.day }} {% endif %}{{ entry.text }} "
            "{% endfor %}"
        )
        entries = [
            {"day": 1, "text": "a"},
            {"day": 1, "text": "b"},
            {"day": 2, "text": "c"},
        ]
        assert render(env, source, entries=entries) == "#1 a b #2 c "

    def test_separator_idiom(self, env: Environment) -> None:
        source = "{% for x in items %}{{ x }}{% if not loop.last %}, {% endif %}{% endfor %}"
        assert render(env, source, items=[1, 2, 3]) == "1, 2, 3"

    def test_inner_loop_shadows_outer(self, env: Environment) -> None:
        source = (
            "{% for a in [1, 2] %}{% for b in 'xy' %}{{ loop.index }}{% endfor %}"
            "{{ loop.index }};{% endfor %}"
        )
        assert render(env, source) == "121;122;"

    def test_loop_not_visible_after_loop(self, env: Environment) -> None:
        assert render(env, "{% for x in [1] %}{% endfor %}[{{ loop }}]") == "[]"


class TestRecursiveLoops:
    TREE = [
        {"name": "a", "children": [{"name": "a1", "children": []}]},
        {"name": "b", "children": []},
    ]

    def test_recursive(self, env: Environment) -> None:
        source = (
            "{% for node in tree recursive %}"
            "{{ node.name }}{% if node.children %}({{ loop(node.children) }}){% endif %};"
            "{% endfor %}"
        )
        assert render(env, source, tree=self.TREE) == "a(a1;);b;"

    def test_depth(self, env: Environment) -> None:
        source = (
            "{% for node in tree recursive %}"
            "{{ node.name }}@{{ loop.depth }} {{ loop(node.children) }}"
            "{% endfor %}"
        )
        assert render(env, source, tree=self.TREE) == "a@1 a1@2 b@1 "

    def test_recursive_output_is_not_double_escaped(self, env_autoescape: Environment) -> None:
        tree = [{"name": "<a>", "children": [{"name": "<b>", "children": []}]}]
        source = (
            "{% for node in tree recursive %}"
            "<li>{{ node.name }}{{ loop(node.children) }}</li>"
            "{% endfor %}"
        )
        assert render(env_autoescape, source, tree=tree) == (
            "<li>&lt;a&gt;<li>&lt;b&gt;</li></li>"
        )

    def test_loop_call_without_recursive(self, env: Environment) -> None:
        with pytest.raises(RenderError):
            render(env, "{% for x in [1] %}{{ loop([]) }}{% endfor %}")
