"""Default global functions available in every template.

Globals live in frame 0 of each render's scope arena, beneath the caller's
context, so a context variable with the same name shadows them.

Functions:
    range(stop) / range(start, stop[, step]): Bounded ``range``
    dict(**kw): A plain dict from keyword arguments
    namespace(**kw): Mutable attribute bag assignable with ``{% set ns.x = ... %}``
    cycler(*items): Cycles through items on each ``next()``
    joiner(sep=", "): Returns "" on the first call and ``sep`` afterwards
    lipsum(n=5, html=True, min=20, max=100): Placeholder text
    debug(): The variables visible at the call site, one per line

Functions marked with ``@pass_context`` receive those variables as a
dict in front of their own arguments.
"""

from __future__ import annotations

import json
import random
from collections.abc import Callable, Iterator, Mapping
from typing import Any, TypeVar

from stencil.utils.html import Markup

F = TypeVar("F", bound=Callable[..., Any])

MAX_RANGE = 100_000

_LIPSUM_WORDS = (
    "lorem ipsum dolor sit amet consectetur adipiscing elit sed do eiusmod tempor "
    "incididunt ut labore et dolore magna aliqua enim ad minim veniam quis nostrud "
    "exercitation ullamco laboris nisi aliquip ex ea commodo consequat duis aute irure "
    "in reprehenderit voluptate velit esse cillum fugiat nulla pariatur excepteur sint "
    "occaecat cupidatat non proident sunt culpa qui officia deserunt mollit anim id est "
    "laborum"
).split()


def safe_range(*args: int) -> range:
    """``range`` that refuses to build more than MAX_RANGE items.

    Raises:
        OverflowError: If the range would be too large
    """
    rng = range(*args)
    if len(rng) > MAX_RANGE:
        raise OverflowError(
            f"Range too big: {len(rng)} items (maximum is {MAX_RANGE})"
        )
    return rng


def make_dict(**kwargs: Any) -> dict[str, Any]:
    return dict(kwargs)


class Namespace:
    """Mutable attribute container that survives scope boundaries.

    ``set`` inside a loop body binds in the iteration's own frame, so a
    namespace is the way to carry a value out of a loop.

    Example:
        {% set ns = namespace(found=false) %}
        {% for item in items %}{% if item.ok %}{% set ns.found = true %}{% endif %}{% endfor %}
        {{ ns.found }}
    """

    __slots__ = ("_attrs",)

    def __init__(self, **kwargs: Any) -> None:
        object.__setattr__(self, "_attrs", dict(kwargs))

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__") or name == "_attrs":
            raise AttributeError(name)
        try:
            return self._attrs[name]
        except KeyError:
            raise AttributeError(f"Namespace has no attribute '{name}'") from None

    def __setattr__(self, name: str, value: Any) -> None:
        self._attrs[name] = value

    def __getitem__(self, name: str) -> Any:
        return self._attrs[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self._attrs[name] = value

    def __contains__(self, name: object) -> bool:
        return name in self._attrs

    def __iter__(self) -> Iterator[str]:
        return iter(self._attrs)

    def __len__(self) -> int:
        return len(self._attrs)

    def __repr__(self) -> str:
        attrs = ", ".join(f"{k}={v!r}" for k, v in self._attrs.items())
        return f"<Namespace {attrs}>"


class Cycler:
    """Cycle through values, independent of any loop.

    Example:
        {% set row = cycler("odd", "even") %}
        {% for user in users %}<li class="{{ row.next() }}">{% endfor %}
    """

    __slots__ = ("_items", "_pos")

    def __init__(self, *items: Any) -> None:
        if not items:
            raise TypeError("cycler() needs at least one item")
        self._items = items
        self._pos = 0

    @property
    def current(self) -> Any:
        return self._items[self._pos]

    def next(self) -> Any:
        value = self.current
        self._pos = (self._pos + 1) % len(self._items)
        return value

    __call__ = next

    def reset(self) -> None:
        self._pos = 0

    def __repr__(self) -> str:
        return f"<Cycler {self._items!r} at {self._pos}>"


class Joiner:
    """Return the separator on every call except the first.

    Example:
        {% set pipe = joiner(" | ") %}
        {% for link in links %}{{ pipe() }}{{ link }}{% endfor %}
    """

    __slots__ = ("_sep", "_used")

    def __init__(self, sep: str = ", ") -> None:
        self._sep = sep
        self._used = False

    def __call__(self) -> str:
        if not self._used:
            self._used = True
            return ""
        return self._sep


def generate_lorem_ipsum(
    n: int = 5, html: bool = True, min: int = 20, max: int = 100
) -> str:
    """Generate ``n`` paragraphs of placeholder text.

    Each paragraph has between ``min`` and ``max`` words, starts with a
    capital and ends with a period. With ``html`` each paragraph is wrapped
    in ``<p>`` and the result is Markup.
    """
    paragraphs: list[str] = []
    for _ in range(n):
        count = random.randint(min, max) if max > min else min
        words = [random.choice(_LIPSUM_WORDS) for _ in range(count)]
        text = " ".join(words).capitalize()
        if not text.endswith("."):
            text += "."
        paragraphs.append(text)

    if not html:
        return "\n\n".join(paragraphs)
    return Markup("\n".join(f"<p>{p}</p>" for p in paragraphs))


def pass_context(func: F) -> F:
    """Mark a global function to receive the visible variables as first argument."""
    func.pass_context = True  # type: ignore[attr-defined]
    return func


@pass_context
def debug(context: Mapping[str, Any]) -> str:
    """List the variables visible at the call site as JSON, sorted by name.

    Example:
        {{ debug() }} with ``user={"name": "Ada"}`` renders::

            Context:
              user: {"name": "Ada"}
    """
    lines = ["Context:"]
    for name in sorted(context):
        dumped = json.dumps(context[name], sort_keys=True, default=str)
        lines.append(f"  {name}: {dumped}")
    return "\n".join(lines) + "\n"


DEFAULT_GLOBALS: dict[str, Any] = {
    "range": safe_range,
    "dict": make_dict,
    "namespace": Namespace,
    "cycler": Cycler,
    "joiner": Joiner,
    "lipsum": generate_lorem_ipsum,
    "debug": debug,
}
