"""Scope frames addressed by index.

A render call owns one ``ScopeArena``. Each frame is a dict of bindings
plus the index of its parent frame, so closures (macros, includes with
context) refer to frames by index and never own them. Frames are only
appended, never removed, for the lifetime of the render.

Frame layout:
    0: environment globals
    1: the caller's context
    2: the template's top-level frame
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Final

GLOBALS: Final = 0
NO_PARENT: Final = -1


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Final = _Missing()


class ScopeArena:
    """Append-only arena of scope frames.

    Example:
        >>> arena = ScopeArena({"range": range})
        >>> ctx = arena.push(GLOBALS, {"name": "World"})
        >>> arena.lookup(ctx, "name")
        'World'
        >>> arena.lookup(ctx, "range") is range
        True
    """

    __slots__ = ("_bindings", "_parents")

    def __init__(self, globals: Mapping[str, Any] | None = None) -> None:
        self._bindings: list[dict[str, Any]] = [dict(globals or {})]
        self._parents: list[int] = [NO_PARENT]

    def __len__(self) -> int:
        return len(self._bindings)

    def push(self, parent: int, bindings: Mapping[str, Any] | None = None) -> int:
        """Create a child frame of ``parent`` and return its index."""
        self._bindings.append(dict(bindings) if bindings else {})
        self._parents.append(parent)
        return len(self._bindings) - 1

    def parent(self, index: int) -> int:
        return self._parents[index]

    def frame(self, index: int) -> dict[str, Any]:
        """The bindings of one frame (not its ancestors)."""
        return self._bindings[index]

    def set(self, index: int, name: str, value: Any) -> None:
        self._bindings[index][name] = value

    def lookup(self, index: int, name: str) -> Any:
        """Walk from ``index`` up to the globals frame; MISSING if unbound."""
        bindings = self._bindings
        parents = self._parents
        while index != NO_PARENT:
            frame = bindings[index]
            if name in frame:
                return frame[name]
            index = parents[index]
        return MISSING

    def variables(self, index: int) -> dict[str, Any]:
        """Bindings visible from ``index`` without the globals frame.

        Inner frames shadow outer ones.
        """
        chain: list[dict[str, Any]] = []
        while index not in (NO_PARENT, GLOBALS):
            chain.append(self._bindings[index])
            index = self._parents[index]
        visible: dict[str, Any] = {}
        for bindings in reversed(chain):
            visible.update(bindings)
        return visible

    def names(self, index: int) -> frozenset[str]:
        """Every name visible from ``index``, for "did you mean" hints."""
        visible: set[str] = set()
        while index != NO_PARENT:
            visible.update(self._bindings[index])
            index = self._parents[index]
        return frozenset(visible)
