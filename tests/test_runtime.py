"""Unit tests for runtime values: Undefined, Markup, LoopContext, ScopeArena, Module."""

from __future__ import annotations

import pytest

from stencil import LoopContext, Markup, Module, Undefined, UndefinedError, html_escape
from stencil.template.scope import GLOBALS, MISSING, ScopeArena


class TestUndefined:
    def test_inert_uses(self) -> None:
        value = Undefined("user")
        assert str(value) == ""
        assert not value
        assert len(value) == 0
        assert list(value) == []
        assert "x" not in value
        assert value == Undefined("other")
        assert value != 0

    def test_arithmetic_raises(self) -> None:
        with pytest.raises(UndefinedError) as exc_info:
            Undefined("count") + 1
        assert exc_info.value.name == "count"
        assert "used in arithmetic" in exc_info.value.message

    def test_attribute_access_raises(self) -> None:
        with pytest.raises(UndefinedError, match="attribute access '.title'"):
            Undefined("post").title

    def test_call_and_ordering_raise(self) -> None:
        with pytest.raises(UndefinedError):
            Undefined("fn")()
        with pytest.raises(UndefinedError):
            Undefined("n") < 3

    def test_dunder_lookup_is_attribute_error(self) -> None:
        with pytest.raises(AttributeError):
            Undefined("x").__html_format__

    def test_repr(self) -> None:
        assert repr(Undefined("x")) == "Undefined('x')"
        assert repr(Undefined()) == "Undefined"


class TestMarkup:
    def test_escape_function(self) -> None:
        assert html_escape("<a href='x'>&</a>") == "&lt;a href=&#39;x&#39;&gt;&amp;&lt;/a&gt;"
        assert html_escape(None) == ""
        assert isinstance(html_escape("plain"), Markup)

    def test_concatenation_escapes_plain(self) -> None:
        assert Markup("<b>") + "<i>" == "<b>&lt;i&gt;"
        assert "<i>" + Markup("<b>") == "&lt;i&gt;<b>"

    def test_format_and_percent(self) -> None:
        assert Markup("<p>{}</p>").format("<x>") == "<p>&lt;x&gt;</p>"
        assert Markup("<p>%s</p>") % "<x>" == "<p>&lt;x&gt;</p>"

    def test_join(self) -> None:
        assert Markup("<br>").join(["a", "<b>"]) == "a<br>&lt;b&gt;"

    def test_striptags_and_unescape(self) -> None:
        assert Markup("<p>Hello   <em>World</em></p>").striptags() == "Hello World"
        assert Markup("&lt;tag&gt; &#65;").unescape() == "<tag> A"

    def test_named_entities(self) -> None:
        text = Markup("&copy; 2026 &mdash; &eacute;t&eacute;")
        assert text.unescape() == "\u00a9 2026 \u2014 \u00e9t\u00e9"
        assert Markup("<b>caf&eacute;</b>").striptags() == "caf\u00e9"

    def test_html_protocol_respected(self) -> None:
        class Widget:
            def __html__(self) -> str:
                return "<widget/>"

        assert html_escape(Widget()) == "<widget/>"


class TestLoopContext:
    def test_positions(self) -> None:
        loop = LoopContext(["a", "b", "c"])
        seen = []
        for item in loop:
            seen.append((item, loop.index, loop.index0, loop.revindex, loop.first, loop.last))
        assert seen == [
            ("a", 1, 0, 3, True, False),
            ("b", 2, 1, 2, False, False),
            ("c", 3, 2, 1, False, True),
        ]

    def test_neighbours(self) -> None:
        loop = LoopContext([1, 2, 3])
        pairs = [(loop.previtem, loop.nextitem) for _ in loop]
        assert pairs == [(Undefined(), 2), (1, 3), (2, Undefined())]
        assert isinstance(pairs[0][0], Undefined)

    def test_cycle_and_changed(self) -> None:
        loop = LoopContext([1, 1, 2])
        cycles = []
        changes = []
        for item in loop:
            cycles.append(loop.cycle("odd", "even"))
            changes.append(loop.changed(item))
        assert cycles == ["odd", "even", "odd"]
        assert changes == [True, False, True]

    def test_depth(self) -> None:
        loop = LoopContext([], depth0=2)
        assert (loop.depth, loop.depth0, loop.length) == (3, 2, 0)

    def test_call_requires_recursive(self) -> None:
        with pytest.raises(TypeError, match="recursive"):
            LoopContext([1])([2])


class TestScopeArena:
    def test_lookup_walks_parents(self) -> None:
        arena = ScopeArena({"g": 1})
        ctx = arena.push(GLOBALS, {"c": 2})
        child = arena.push(ctx, {"l": 3})
        assert arena.lookup(child, "g") == 1
        assert arena.lookup(child, "c") == 2
        assert arena.lookup(ctx, "l") is MISSING

    def test_child_shadows_without_mutating_parent(self) -> None:
        arena = ScopeArena()
        top = arena.push(GLOBALS, {"x": "outer"})
        inner = arena.push(top)
        arena.set(inner, "x", "inner")
        assert arena.lookup(inner, "x") == "inner"
        assert arena.lookup(top, "x") == "outer"
        assert arena.parent(inner) == top

    def test_names(self) -> None:
        arena = ScopeArena({"range": range})
        frame = arena.push(GLOBALS, {"a": 1})
        assert arena.names(frame) == frozenset({"range", "a"})
        assert len(arena) == 2

    def test_variables_skip_globals(self) -> None:
        arena = ScopeArena({"range": range})
        ctx = arena.push(GLOBALS, {"a": 1, "b": 1})
        inner = arena.push(ctx, {"b": 2})
        assert arena.variables(inner) == {"a": 1, "b": 2}
        assert arena.variables(GLOBALS) == {}

    def test_bindings_are_copied(self) -> None:
        source = {"a": 1}
        arena = ScopeArena()
        frame = arena.push(GLOBALS, source)
        arena.set(frame, "a", 2)
        assert source == {"a": 1}


class TestModule:
    def test_private_names_hidden(self) -> None:
        module = Module("lib.txt", {"public": 1, "_private": 2})
        assert module.public == 1
        assert "public" in module
        assert "_private" not in module
        assert list(module) == ["public"]

    def test_missing_attribute(self) -> None:
        module = Module("lib.txt", {})
        with pytest.raises(AttributeError, match="has no attribute 'nope'"):
            module.nope
