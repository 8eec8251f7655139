"""HTML escaping and the ``Markup`` safe-string type.

``Markup`` marks text as already safe for HTML output. Autoescaping leaves
it alone and escapes everything else. Anything combined with a ``Markup``
string through ``+`` or ``%`` is escaped first, so safety survives
concatenation.

Example:
    >>> html_escape("<b>Tom & Jerry</b>")
    '&lt;b&gt;Tom &amp; Jerry&lt;/b&gt;'
    >>> Markup("<b>") + "<i>"
    Markup('<b>&lt;i&gt;')
"""

from __future__ import annotations

import html
import re
from collections.abc import Mapping
from typing import Any, SupportsIndex

_ESCAPE_TABLE = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&#34;",
        "'": "&#39;",
    }
)

_ESCAPE_CHARS = frozenset("&<>\"'")

_STRIPTAGS_RE = re.compile(r"(<!--.*?-->|<[^>]*>)", re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s+")
_INVALID_ATTR_RE = re.compile(r"[\s/>=]")


class Markup(str):
    """A string that is safe to insert into HTML without escaping."""

    __slots__ = ()

    def __new__(cls, value: Any = "") -> Markup:
        if hasattr(value, "__html__"):
            value = value.__html__()
        return super().__new__(cls, value)

    def __html__(self) -> Markup:
        return self

    def __add__(self, other: object) -> Markup:
        if isinstance(other, str) or hasattr(other, "__html__"):
            return Markup(str.__add__(self, html_escape(other)))
        return NotImplemented

    def __radd__(self, other: object) -> Markup:
        if isinstance(other, str) or hasattr(other, "__html__"):
            return Markup(str.__add__(html_escape(other), self))
        return NotImplemented

    def __mul__(self, count: SupportsIndex) -> Markup:
        return Markup(str.__mul__(self, count))

    def __mod__(self, args: Any) -> Markup:
        if isinstance(args, tuple):
            args = tuple(html_escape(arg) for arg in args)
        elif isinstance(args, Mapping):
            args = {key: html_escape(value) for key, value in args.items()}
        else:
            args = html_escape(args)
        return Markup(str.__mod__(self, args))

    def join(self, iterable: Any) -> Markup:
        return Markup(str.join(self, (html_escape(item) for item in iterable)))

    def format(self, *args: Any, **kwargs: Any) -> Markup:
        args = tuple(html_escape(arg) for arg in args)
        kwargs = {key: html_escape(value) for key, value in kwargs.items()}
        return Markup(str.format(self, *args, **kwargs))

    def striptags(self) -> str:
        """Remove tags and comments, collapse whitespace, unescape entities."""
        return striptags(self)

    def unescape(self) -> str:
        return html.unescape(str(self))

    @classmethod
    def escape(cls, value: Any) -> Markup:
        return html_escape(value)

    def __repr__(self) -> str:
        return f"Markup({str.__repr__(self)})"


def html_escape(value: Any) -> Markup:
    """Escape ``value`` for HTML and return it as ``Markup``.

    Objects with an ``__html__`` method are trusted and returned as-is.
    ``None`` escapes to the empty string.
    """
    if hasattr(value, "__html__"):
        return Markup(value.__html__())
    if value is None:
        return Markup("")
    text = value if isinstance(value, str) else str(value)
    if _ESCAPE_CHARS.isdisjoint(text):
        return Markup(text)
    return Markup(text.translate(_ESCAPE_TABLE))


def striptags(value: Any) -> str:
    """Strip SGML/XML tags and collapse runs of whitespace."""
    text = _STRIPTAGS_RE.sub("", str(value))
    text = _WHITESPACE_RE.sub(" ", text).strip()
    return html.unescape(text)


def xmlattr(values: Mapping[str, Any], autospace: bool = True) -> Markup:
    """Render a mapping as escaped HTML attributes.

    ``None`` values are skipped. Keys containing whitespace, ``/``, ``>``
    or ``=`` raise ``ValueError``.
    """
    parts: list[str] = []
    for key, value in values.items():
        if value is None:
            continue
        if _INVALID_ATTR_RE.search(key):
            raise ValueError(f"Invalid character in attribute name: {key!r}")
        parts.append(f'{html_escape(key)}="{html_escape(value)}"')
    rendered = " ".join(parts)
    if autospace and rendered:
        rendered = " " + rendered
    return Markup(rendered)
