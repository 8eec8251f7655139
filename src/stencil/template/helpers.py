"""Runtime helpers shared by the renderer and the built-in filters.

``Undefined`` is the value a lenient lookup produces for a missing name,
key or attribute. It is inert for output and truth tests and raises
``UndefinedError`` as soon as it is used for anything that needs a real
value.
"""

from __future__ import annotations

from collections.abc import (
    Callable,
    Iterator,
    Mapping,
    MutableMapping,
    MutableSequence,
    MutableSet,
)
from typing import Any, NoReturn

from stencil.environment.exceptions import UndefinedError
from stencil.render_context import get_render_context


def undefined_error(
    name: str,
    *,
    operation: str | None = None,
    available_names: frozenset[str] | None = None,
) -> UndefinedError:
    """Build an UndefinedError annotated with the current render location."""
    ctx = get_render_context()
    if ctx is None:
        return UndefinedError(name, available_names=available_names, operation=operation)
    return UndefinedError(
        name,
        ctx.template_name,
        ctx.line or None,
        available_names=available_names,
        source_snippet=ctx.snippet(),
        template_stack=list(ctx.template_stack),
        operation=operation,
    )


class Undefined:
    """Stand-in for a missing value.

    Renders as ``""``, is falsy, iterates as empty and has length 0.
    Arithmetic, attribute access, item access, calls and ordering
    comparisons raise ``UndefinedError`` naming what was missing.

    Example:
        >>> str(Undefined("user"))
        ''
        >>> Undefined("user") + 1
        Traceback (most recent call last):
        ...
        UndefinedError: Undefined variable 'user' used in arithmetic ...
    """

    __slots__ = ("_name",)

    def __init__(self, name: str = "") -> None:
        self._name = name

    @property
    def undefined_name(self) -> str:
        return self._name

    def _fail(self, operation: str) -> NoReturn:
        raise undefined_error(self._name or "value", operation=operation)

    def __str__(self) -> str:
        return ""

    def __html__(self) -> str:
        return ""

    def __repr__(self) -> str:
        return f"Undefined({self._name!r})" if self._name else "Undefined"

    def __bool__(self) -> bool:
        return False

    def __len__(self) -> int:
        return 0

    def __iter__(self) -> Iterator[Any]:
        return iter(())

    def __contains__(self, item: object) -> bool:
        return False

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Undefined)

    def __ne__(self, other: object) -> bool:
        return not isinstance(other, Undefined)

    def __hash__(self) -> int:
        return hash(Undefined)

    def __getattr__(self, name: str) -> NoReturn:
        if name.startswith("__"):
            raise AttributeError(name)
        self._fail(f"attribute access '.{name}'")

    def __getitem__(self, key: object) -> NoReturn:
        self._fail(f"item access [{key!r}]")

    def __call__(self, *args: Any, **kwargs: Any) -> NoReturn:
        self._fail("a call")

    def _arithmetic(self, *args: Any) -> NoReturn:
        self._fail("arithmetic")

    __add__ = __radd__ = __sub__ = __rsub__ = _arithmetic
    __mul__ = __rmul__ = __truediv__ = __rtruediv__ = _arithmetic
    __floordiv__ = __rfloordiv__ = __mod__ = __rmod__ = _arithmetic
    __pow__ = __rpow__ = __neg__ = __pos__ = __abs__ = _arithmetic
    __int__ = __float__ = _arithmetic

    def _ordering(self, other: object) -> NoReturn:
        self._fail("a comparison")

    __lt__ = __le__ = __gt__ = __ge__ = _ordering


def is_undefined(value: Any) -> bool:
    return isinstance(value, Undefined)


def to_string(value: Any) -> str:
    """Text form of a value in template output.

    Used for ``{{ }}`` output, ``~``, ``string`` and ``join``. Undefined is
    empty, None is ``none`` and booleans are ``true``/``false``. Lists and
    tuples render as ``[1, "a"]`` and mappings as ``{"k": v}`` with sorted
    keys; strings nested inside them are double-quoted.

    Example:
        >>> to_string([1, "a", None, True])
        '[1, "a", none, true]'
        >>> to_string({"b": 2, "a": "x"})
        '{"a": "x", "b": 2}'
    """
    if isinstance(value, str):
        return value
    if value is None:
        return "none"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, Undefined):
        return ""
    if isinstance(value, (list, tuple, range)):
        return "[" + ", ".join(_to_repr(item) for item in value) + "]"
    if isinstance(value, Mapping):
        keys = sorted(value, key=str)
        return "{" + ", ".join(f'"{key}": {_to_repr(value[key])}' for key in keys) + "}"
    return str(value)


def _to_repr(value: Any) -> str:
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, Undefined):
        return "undefined"
    return to_string(value)


def default_safe(
    value_fn: Callable[[], Any],
    default_value: Any = "",
    boolean: bool = False,
) -> Any:
    """The ``default`` filter, safe in strict mode.

    ``value_fn`` evaluates the filtered expression. A strict-mode
    ``UndefinedError`` from it selects the default, as does an Undefined or
    None result. With ``boolean=True`` any falsy value selects it.
    """
    try:
        value = value_fn()
    except UndefinedError:
        return default_value

    if boolean:
        return value if value else default_value
    if value is None or isinstance(value, Undefined):
        return default_value
    return value


def is_defined(value_fn: Callable[[], Any]) -> bool:
    """True unless evaluating ``value_fn`` is undefined in either mode.

    None counts as defined, as in Jinja.
    """
    try:
        value = value_fn()
    except UndefinedError:
        return False
    return not isinstance(value, Undefined)


# Methods of mutable containers that templates may call; none of them
# changes the container.
_READ_ONLY_METHODS = frozenset({
    "copy",
    "count",
    "difference",
    "get",
    "index",
    "intersection",
    "isdisjoint",
    "issubset",
    "issuperset",
    "items",
    "keys",
    "symmetric_difference",
    "union",
    "values",
})

_MUTABLE_CONTAINERS = (MutableMapping, MutableSequence, MutableSet)


def host_attribute(obj: Any, name: str) -> Any:
    """``getattr`` for template lookups.

    Raises:
        AttributeError: For private names and for methods of mutable
            containers that could modify them
    """
    if name.startswith("_"):
        raise AttributeError(name)
    value = getattr(obj, name)
    if (
        callable(value)
        and name not in _READ_ONLY_METHODS
        and isinstance(obj, _MUTABLE_CONTAINERS)
    ):
        raise AttributeError(name)
    return value


def safe_getattr(obj: Any, name: str, undefined_name: str | None = None) -> Any:
    """``obj.name`` as templates see it.

    Mappings try the key first and then the attribute. Other objects try
    the attribute first and then the item. Names starting with ``_`` are
    never resolved as Python attributes, and lists, dicts and sets only
    expose their read-only methods. A miss yields ``Undefined``.
    """
    if isinstance(obj, Mapping):
        try:
            return obj[name]
        except (KeyError, TypeError):
            pass
        try:
            return host_attribute(obj, name)
        except AttributeError:
            return Undefined(undefined_name or name)

    try:
        return host_attribute(obj, name)
    except AttributeError:
        pass
    try:
        return obj[name]
    except (KeyError, IndexError, TypeError):
        return Undefined(undefined_name or name)


def safe_getitem(obj: Any, key: Any, undefined_name: str | None = None) -> Any:
    """``obj[key]``: the item first, then a string key as an attribute."""
    try:
        return obj[key]
    except (KeyError, IndexError, TypeError):
        pass
    if isinstance(key, str):
        try:
            return host_attribute(obj, key)
        except AttributeError:
            pass
    return Undefined(undefined_name or repr(key))
