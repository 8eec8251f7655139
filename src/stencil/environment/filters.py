"""Built-in filters for stencil templates.

Filters transform values in a pipeline: ``{{ value | filter(args) }}``.
Each filter receives the piped value as its first argument. Pipelines are
left-associative, so ``a | f | g`` is ``g(f(a))``.

Categories:
    **String**: upper, lower, capitalize, title, trim, replace, split,
        center, indent, truncate, wordwrap, wordcount, striptags, format
    **Sequence**: length/count, first, last, reverse, sort, join, list,
        batch, slice, unique, min, max, sum, map, select, reject,
        selectattr, rejectattr, groupby
    **Mapping**: items, dictsort, xmlattr
    **Conversion**: int, float, string, abs, round, tojson, pprint, urlencode
    **Safety**: safe, escape/e, forceescape
    **Fallback**: default/d, attr

Filters that need to look up other filters or tests (``map``, ``select``
and friends) are marked with ``@pass_environment`` and receive the
Environment as their first argument.

Custom Filters:
    >>> @env.filter()
    ... def double(value):
    ...     return value * 2
    >>> env.from_string("{{ 21 | double }}").render()
    '42'
"""

from __future__ import annotations

import json
import math
import pprint
import textwrap
from collections.abc import Callable, Iterable, Mapping
from itertools import groupby as _groupby
from typing import TYPE_CHECKING, Any, NamedTuple, TypeVar
from urllib.parse import quote, urlencode

from stencil.environment.exceptions import NoneComparisonError
from stencil.template.helpers import (
    Undefined,
    default_safe,
    host_attribute,
    safe_getattr,
    to_string,
)
from stencil.utils.html import Markup, html_escape, striptags, xmlattr

if TYPE_CHECKING:
    from stencil.environment.core import Environment

F = TypeVar("F", bound=Callable[..., Any])


def pass_environment(func: F) -> F:
    """Mark a filter or test to receive the Environment as first argument."""
    func.pass_environment = True  # type: ignore[attr-defined]
    return func


def _resolve_attribute(item: Any, attribute: str | int) -> Any:
    """Follow a dotted path such as ``"author.name"`` or ``"tags.0"``."""
    if isinstance(attribute, int):
        return item[attribute]
    for part in attribute.split("."):
        if part.isdigit() and not isinstance(item, Mapping):
            try:
                item = item[int(part)]
                continue
            except (IndexError, TypeError):
                return Undefined(part)
        item = safe_getattr(item, part)
    return item


def make_attrgetter(
    attribute: str | int | None,
    default: Any = None,
    lower: bool = False,
) -> Callable[[Any], Any]:
    """Key function for filters that accept ``attribute=``."""

    def getter(item: Any) -> Any:
        value = item if attribute is None else _resolve_attribute(item, attribute)
        if default is not None and isinstance(value, Undefined):
            value = default
        if lower and isinstance(value, str):
            value = value.lower()
        return value

    return getter


def _sorted(items: list[Any], key: Callable[[Any], Any], reverse: bool, attribute: Any) -> list[Any]:
    try:
        return sorted(items, key=key, reverse=reverse)
    except TypeError:
        keys = [key(item) for item in items]
        none = next((k for k in keys if k is None), None)
        other = next((k for k in keys if k is not None), None)
        if any(k is None for k in keys) and other is not None:
            raise NoneComparisonError(
                none, other, attribute=attribute if isinstance(attribute, str) else None
            ) from None
        raise


# =============================================================================
# String filters
# =============================================================================


def _filter_upper(value: Any) -> str:
    return str(value).upper()


def _filter_lower(value: Any) -> str:
    return str(value).lower()


def _filter_capitalize(value: Any) -> str:
    return str(value).capitalize()


def _filter_title(value: Any) -> str:
    """Title-case each whitespace-separated word."""
    words = str(value).split(" ")
    return " ".join(w[:1].upper() + w[1:].lower() for w in words)


def _filter_trim(value: Any, chars: str | None = None) -> str:
    return str(value).strip(chars)


def _filter_replace(value: Any, old: str, new: str, count: int | None = None) -> str:
    text = str(value)
    if count is None:
        return text.replace(str(old), str(new))
    return text.replace(str(old), str(new), count)


def _filter_split(value: Any, sep: str | None = None, maxsplit: int = -1) -> list[str]:
    return str(value).split(sep, maxsplit)


def _filter_center(value: Any, width: int = 80) -> str:
    return str(value).center(width)


def _filter_indent(
    value: Any, width: int | str = 4, first: bool = False, blank: bool = False
) -> str:
    """Indent every line but the first by ``width`` spaces (or a given string).

    ``first=True`` indents the first line too. ``blank=True`` indents empty
    lines as well.
    """
    indention = width if isinstance(width, str) else " " * width
    text = str(value)
    newline = "\n"
    lines = text.split(newline)
    out: list[str] = []
    for i, line in enumerate(lines):
        if i == 0 and not first:
            out.append(line)
        elif not line.strip() and not blank:
            out.append(line)
        else:
            out.append(indention + line)
    return newline.join(out)


def _filter_truncate(
    value: Any,
    length: int = 255,
    killwords: bool = False,
    end: str = "...",
    leeway: int = 5,
) -> str:
    """Shorten text to ``length`` characters, ending with ``end``.

    Text within ``leeway`` characters of the limit is left alone. Unless
    ``killwords`` is set the cut happens at a word boundary.
    """
    text = str(value)
    if length < len(end):
        raise ValueError(f"truncate length must be at least {len(end)}")
    if len(text) <= length + leeway:
        return text
    if killwords:
        return text[: length - len(end)] + end
    result = text[: length - len(end)].rsplit(" ", 1)[0]
    return result + end


def _filter_wordwrap(
    value: Any,
    width: int = 79,
    break_long_words: bool = True,
    wrapstring: str | None = None,
    break_on_hyphens: bool = True,
) -> str:
    wrapper = textwrap.TextWrapper(
        width=width,
        expand_tabs=False,
        replace_whitespace=False,
        break_long_words=break_long_words,
        break_on_hyphens=break_on_hyphens,
    )
    sep = "\n" if wrapstring is None else wrapstring
    return sep.join(
        sep.join(wrapper.wrap(line)) for line in str(value).splitlines()
    )


def _filter_wordcount(value: Any) -> int:
    return len(str(value).split())


def _filter_striptags(value: Any) -> str:
    return striptags(value)


def _filter_format(value: Any, *args: Any, **kwargs: Any) -> str:
    """printf-style formatting: ``{{ "%s - %s" | format("a", "b") }}``."""
    if args and kwargs:
        raise TypeError("format() takes positional or keyword arguments, not both")
    return str(value) % (kwargs or args)


# =============================================================================
# Sequence filters
# =============================================================================


def _filter_length(value: Any) -> int:
    try:
        return len(value)
    except TypeError:
        return sum(1 for _ in value)


def _filter_first(value: Any) -> Any:
    for item in value:
        return item
    return Undefined("first")


def _filter_last(value: Any) -> Any:
    items = value if isinstance(value, (list, tuple, str)) else list(value)
    if not items:
        return Undefined("last")
    return items[-1]


def _filter_reverse(value: Any) -> Any:
    if isinstance(value, str):
        return value[::-1]
    try:
        return list(reversed(value))
    except TypeError:
        items = list(value)
        items.reverse()
        return items


def _filter_sort(
    value: Any,
    reverse: bool = False,
    case_sensitive: bool = False,
    attribute: str | int | None = None,
) -> list[Any]:
    """Sort a sequence, optionally by an attribute path.

    Raises:
        NoneComparisonError: When None values meet values of another type
    """
    key = make_attrgetter(attribute, lower=not case_sensitive)
    return _sorted(list(value), key, reverse, attribute)


def _filter_join(value: Any, d: str = "", attribute: str | int | None = None) -> str:
    """Join items with ``d``. Markup separators or items yield escaped Markup."""
    items = list(value)
    if attribute is not None:
        items = [_resolve_attribute(item, attribute) for item in items]
    if hasattr(d, "__html__") or any(hasattr(item, "__html__") for item in items):
        return Markup(d).join(
            item if hasattr(item, "__html__") else to_string(item) for item in items
        )
    return str(d).join(to_string(item) for item in items)


def _filter_list(value: Any) -> list[Any]:
    return list(value)


def _filter_batch(value: Any, linecount: int, fill_with: Any = None) -> list[list[Any]]:
    """Split into rows of ``linecount`` items, padding the last one."""
    if linecount <= 0:
        raise ValueError("batch size must be positive")
    rows: list[list[Any]] = []
    row: list[Any] = []
    for item in value:
        row.append(item)
        if len(row) == linecount:
            rows.append(row)
            row = []
    if row:
        if fill_with is not None:
            row.extend([fill_with] * (linecount - len(row)))
        rows.append(row)
    return rows


def _filter_slice(value: Any, slices: int, fill_with: Any = None) -> list[list[Any]]:
    """Split into ``slices`` columns of near-equal length."""
    items = list(value)
    if slices <= 0:
        raise ValueError("slice count must be positive")
    per_slice, extra = divmod(len(items), slices)
    result: list[list[Any]] = []
    offset = 0
    for index in range(slices):
        start = offset + index * per_slice
        if index < extra:
            offset += 1
        end = offset + (index + 1) * per_slice
        column = items[start:end]
        if fill_with is not None and index >= extra:
            column.append(fill_with)
        result.append(column)
    return result


def _filter_unique(
    value: Any, case_sensitive: bool = False, attribute: str | int | None = None
) -> list[Any]:
    key = make_attrgetter(attribute, lower=not case_sensitive)
    seen: set[Any] = set()
    result: list[Any] = []
    for item in value:
        marker = key(item)
        if marker not in seen:
            seen.add(marker)
            result.append(item)
    return result


def _filter_min(
    value: Any, case_sensitive: bool = False, attribute: str | int | None = None
) -> Any:
    items = list(value)
    if not items:
        return Undefined("min")
    return min(items, key=make_attrgetter(attribute, lower=not case_sensitive))


def _filter_max(
    value: Any, case_sensitive: bool = False, attribute: str | int | None = None
) -> Any:
    items = list(value)
    if not items:
        return Undefined("max")
    return max(items, key=make_attrgetter(attribute, lower=not case_sensitive))


def _filter_sum(value: Any, attribute: str | int | None = None, start: Any = 0) -> Any:
    if attribute is not None:
        value = map(make_attrgetter(attribute), value)
    return sum(value, start)


@pass_environment
def _filter_map(env: Environment, value: Any, *args: Any, **kwargs: Any) -> list[Any]:
    """Apply a filter, or pull an attribute, for every item.

    Example:
        {{ users | map(attribute="name") | join(", ") }}
        {{ names | map("upper") | join(", ") }}
    """
    if "attribute" in kwargs:
        attribute = kwargs.pop("attribute")
        default = kwargs.pop("default", None)
        if kwargs:
            raise TypeError(f"Unexpected keyword argument {next(iter(kwargs))!r}")
        getter = make_attrgetter(attribute, default=default)
        return [getter(item) for item in value]
    if not args:
        return list(value)
    name, *rest = args
    return [env.call_filter(name, item, *rest, **kwargs) for item in value]


def _select_or_reject(
    env: Environment,
    value: Any,
    args: tuple[Any, ...],
    expected: bool,
    attribute: str | None = None,
) -> list[Any]:
    getter = make_attrgetter(attribute)
    if not args:
        return [item for item in value if bool(getter(item)) is expected]
    name, *rest = args
    return [
        item for item in value if bool(env.call_test(name, getter(item), *rest)) is expected
    ]


@pass_environment
def _filter_select(env: Environment, value: Any, *args: Any) -> list[Any]:
    """Keep items passing a test (truthy items when no test is given)."""
    return _select_or_reject(env, value, args, True)


@pass_environment
def _filter_reject(env: Environment, value: Any, *args: Any) -> list[Any]:
    """Drop items passing a test (truthy items when no test is given)."""
    return _select_or_reject(env, value, args, False)


@pass_environment
def _filter_selectattr(env: Environment, value: Any, attribute: str, *args: Any) -> list[Any]:
    """Keep items whose ``attribute`` passes a test.

    Example:
        {{ users | selectattr("active") }}
        {{ users | selectattr("age", "ge", 18) }}
    """
    return _select_or_reject(env, value, args, True, attribute)


@pass_environment
def _filter_rejectattr(env: Environment, value: Any, attribute: str, *args: Any) -> list[Any]:
    return _select_or_reject(env, value, args, False, attribute)


class _GroupTuple(NamedTuple):
    grouper: Any
    list: list[Any]


def _filter_groupby(
    value: Any,
    attribute: str | int,
    default: Any = None,
    case_sensitive: bool = False,
) -> list[_GroupTuple]:
    """Group items by an attribute, sorted by the group key.

    Example:
        {% for group in users | groupby("city") %}
            {{ group.grouper }}: {{ group.list | map(attribute="name") | join(", ") }}
        {% endfor %}
    """
    key = make_attrgetter(attribute, default=default, lower=not case_sensitive)
    items = _sorted(list(value), key, False, attribute)
    groups = [_GroupTuple(k, list(g)) for k, g in _groupby(items, key)]
    if not case_sensitive:
        display = make_attrgetter(attribute, default=default)
        groups = [_GroupTuple(display(g.list[0]), g.list) for g in groups]
    return groups


# =============================================================================
# Mapping filters
# =============================================================================


def _filter_items(value: Any) -> list[tuple[Any, Any]]:
    if isinstance(value, Undefined):
        return []
    if not isinstance(value, Mapping):
        raise TypeError(f"items() expects a mapping, got {type(value).__name__}")
    return list(value.items())


def _filter_dictsort(
    value: Mapping[Any, Any],
    case_sensitive: bool = False,
    by: str = "key",
    reverse: bool = False,
) -> list[tuple[Any, Any]]:
    """Sort a mapping's items by key (default) or by value."""
    if by == "key":
        pos = 0
    elif by == "value":
        pos = 1
    else:
        raise ValueError("You can only sort by either 'key' or 'value'")

    def sort_key(item: tuple[Any, Any]) -> Any:
        sort_value = item[pos]
        if not case_sensitive and isinstance(sort_value, str):
            sort_value = sort_value.lower()
        return sort_value

    return sorted(value.items(), key=sort_key, reverse=reverse)


def _filter_xmlattr(value: Mapping[str, Any], autospace: bool = True) -> Markup:
    cleaned = {k: v for k, v in value.items() if not isinstance(v, Undefined)}
    return xmlattr(cleaned, autospace)


# =============================================================================
# Conversion filters
# =============================================================================


def _filter_int(value: Any, default: int = 0, base: int = 10) -> int:
    """Convert to int, returning ``default`` when conversion fails."""
    try:
        if isinstance(value, str):
            return int(value, base)
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError, OverflowError):
            return default


def _filter_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _filter_string(value: Any) -> str:
    return to_string(value)


def _filter_abs(value: Any) -> Any:
    return abs(value)


def _filter_round(value: float, precision: int = 0, method: str = "common") -> float:
    """Round with ``common`` (Python's ``round``), ``ceil`` or ``floor``."""
    if method not in ("common", "ceil", "floor"):
        raise ValueError("method must be 'common', 'ceil' or 'floor'")
    if method == "common":
        return round(value, precision)
    func = getattr(math, method)
    return func(value * 10**precision) / 10**precision


_JSON_ESCAPES = {"<": "\\u003c", ">": "\\u003e", "&": "\\u0026", "'": "\\u0027"}


def _filter_tojson(value: Any, indent: int | None = None) -> Markup:
    """Serialize to JSON that is safe to embed in HTML."""
    dumped = json.dumps(value, indent=indent, sort_keys=True, default=str)
    for char, escaped in _JSON_ESCAPES.items():
        dumped = dumped.replace(char, escaped)
    return Markup(dumped)


def _filter_pprint(value: Any) -> str:
    return pprint.pformat(value)


def _filter_urlencode(value: Any) -> str:
    """Percent-encode a string, or a mapping / pair sequence as a query string."""
    if isinstance(value, str):
        return quote(value, safe="/")
    if isinstance(value, Mapping):
        return urlencode([(str(k), str(v)) for k, v in value.items()])
    if isinstance(value, Iterable):
        return urlencode([(str(k), str(v)) for k, v in value])
    return quote(str(value), safe="/")


# =============================================================================
# Safety and fallback filters
# =============================================================================


def _filter_safe(value: Any) -> Markup:
    return Markup(value)


def _filter_escape(value: Any) -> Markup:
    return html_escape(value)


def _filter_forceescape(value: Any) -> Markup:
    if hasattr(value, "__html__"):
        value = str(value.__html__())
    return html_escape(str(value))


def _filter_default(value: Any, default_value: Any = "", boolean: bool = False) -> Any:
    """Fallback for Undefined or None (any falsy value with ``boolean=True``).

    The evaluator special-cases this filter so that a strict-mode lookup
    failure in ``value`` also selects the default.
    """
    return default_safe(lambda: value, default_value, boolean)


def _filter_attr(obj: Any, name: str) -> Any:
    """Attribute lookup only, never the item: ``{{ obj | attr("name") }}``."""
    try:
        return host_attribute(obj, name)
    except AttributeError:
        return Undefined(name)


DEFAULT_FILTERS: dict[str, Callable[..., Any]] = {
    "abs": _filter_abs,
    "attr": _filter_attr,
    "batch": _filter_batch,
    "capitalize": _filter_capitalize,
    "center": _filter_center,
    "count": _filter_length,
    "d": _filter_default,
    "default": _filter_default,
    "dictsort": _filter_dictsort,
    "e": _filter_escape,
    "escape": _filter_escape,
    "first": _filter_first,
    "float": _filter_float,
    "forceescape": _filter_forceescape,
    "format": _filter_format,
    "groupby": _filter_groupby,
    "indent": _filter_indent,
    "int": _filter_int,
    "items": _filter_items,
    "join": _filter_join,
    "last": _filter_last,
    "length": _filter_length,
    "list": _filter_list,
    "lower": _filter_lower,
    "map": _filter_map,
    "max": _filter_max,
    "min": _filter_min,
    "pprint": _filter_pprint,
    "reject": _filter_reject,
    "rejectattr": _filter_rejectattr,
    "replace": _filter_replace,
    "reverse": _filter_reverse,
    "round": _filter_round,
    "safe": _filter_safe,
    "select": _filter_select,
    "selectattr": _filter_selectattr,
    "slice": _filter_slice,
    "sort": _filter_sort,
    "split": _filter_split,
    "string": _filter_string,
    "striptags": _filter_striptags,
    "sum": _filter_sum,
    "title": _filter_title,
    "tojson": _filter_tojson,
    "trim": _filter_trim,
    "truncate": _filter_truncate,
    "unique": _filter_unique,
    "upper": _filter_upper,
    "urlencode": _filter_urlencode,
    "wordcount": _filter_wordcount,
    "wordwrap": _filter_wordwrap,
    "xmlattr": _filter_xmlattr,
}
