"""Loop iteration metadata for ``{% for %}`` blocks."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

from stencil.template.helpers import Undefined

_UNSET: Any = object()


class LoopContext:
    """Loop iteration metadata accessible as ``loop`` inside ``{% for %}``.

    Properties:
        index: 1-based iteration count (1, 2, 3, ...)
        index0: 0-based iteration count (0, 1, 2, ...)
        first: True on the first iteration
        last: True on the final iteration
        length: Total number of items
        revindex: Reverse 1-based index (counts down to 1)
        revindex0: Reverse 0-based index (counts down to 0)
        previtem: Previous item (undefined on first)
        nextitem: Next item (undefined on last)
        depth: Nesting level of a recursive loop, starting at 1
        depth0: Nesting level starting at 0

    Methods:
        cycle(*values): Return values[index0 % len(values)]
        changed(*values): True when values differ from the previous call
        loop(items): Recurse into the body of a ``recursive`` loop

    Example:
            ```jinja
            {% for item in items %}
                {{ loop.index }}/{{ loop.length }}: {{ item }}
                {%- if not loop.last %}, {% endif %}
            {% endfor %}
            ```
    """

    __slots__ = ("_depth0", "_index", "_items", "_last_changed", "_length", "_recurse")

    def __init__(
        self,
        items: list[Any],
        depth0: int = 0,
        recurse: Callable[[Any], str] | None = None,
    ) -> None:
        self._items = items
        self._length = len(items)
        self._index = 0
        self._depth0 = depth0
        self._recurse = recurse
        self._last_changed: Any = _UNSET

    def __iter__(self) -> Iterator[Any]:
        """Iterate through items, updating index for each."""
        for i, item in enumerate(self._items):
            self._index = i
            yield item

    @property
    def index(self) -> int:
        return self._index + 1

    @property
    def index0(self) -> int:
        return self._index

    @property
    def first(self) -> bool:
        return self._index == 0

    @property
    def last(self) -> bool:
        return self._index == self._length - 1

    @property
    def length(self) -> int:
        return self._length

    @property
    def revindex(self) -> int:
        return self._length - self._index

    @property
    def revindex0(self) -> int:
        return self._length - self._index - 1

    @property
    def previtem(self) -> Any:
        if self._index == 0:
            return Undefined("loop.previtem")
        return self._items[self._index - 1]

    @property
    def nextitem(self) -> Any:
        if self._index >= self._length - 1:
            return Undefined("loop.nextitem")
        return self._items[self._index + 1]

    @property
    def depth(self) -> int:
        return self._depth0 + 1

    @property
    def depth0(self) -> int:
        return self._depth0

    def cycle(self, *values: Any) -> Any:
        """Cycle through the given values.

        Example:
            {{ loop.cycle('odd', 'even') }}
        """
        if not values:
            return None
        return values[self._index % len(values)]

    def changed(self, *values: Any) -> bool:
        """True on the first call and whenever ``values`` differ from the last call."""
        if values != self._last_changed:
            self._last_changed = values
            return True
        return False

    def __call__(self, items: Any) -> str:
        """Render the loop body again for ``items`` (``recursive`` loops only)."""
        if self._recurse is None:
            raise TypeError("loop() is only callable in a loop marked 'recursive'")
        return self._recurse(items)

    def __repr__(self) -> str:
        return f"<LoopContext {self.index}/{self.length}>"
