"""Built-in tests for stencil templates.

Tests are boolean predicates used with ``is`` in expressions:
``{% if value is test %}`` or ``{% if value is test(arg) %}``.

Categories:
**Type Tests**:
    - ``defined`` / ``undefined``: Value is (not) the Undefined sentinel
    - ``none``: Value is None
    - ``boolean``, ``integer``, ``float``, ``number``, ``string``
    - ``sequence``: Value is list, tuple, or string
    - ``mapping``: Value is a Mapping
    - ``iterable``: Value supports iteration
    - ``callable``: Value is callable (macros included)

**Boolean Tests**:
    - ``true`` / ``false``: Value is exactly True / False
    - ``truthy`` / ``falsy``: Value is true / false in an ``if``

**Number Tests**:
    - ``odd``, ``even``, ``divisibleby(n)``

**Comparison Tests**:
    - ``eq`` / ``equalto`` / ``==``, ``ne`` / ``!=``
    - ``lt`` / ``lessthan`` / ``<``, ``le`` / ``<=``
    - ``gt`` / ``greaterthan`` / ``>``, ``ge`` / ``>=``
    - ``sameas(other)``: Identity comparison
    - ``in(seq)``: Value is in sequence

**String Tests**:
    - ``lower``, ``upper``, ``escaped``
    - ``startingwith(prefix)``, ``endingwith(suffix)``, ``match(pattern)``

Negation:
    ``{% if user is not defined %}`` or ``{% if count is not even %}``

``defined`` and ``undefined`` are special-cased by the evaluator so that
a strict-mode lookup failure counts as undefined instead of raising.

Custom Tests:
    >>> env.register_test("prime", lambda n: n > 1 and all(n % i for i in range(2, n)))
    >>> # {% if 17 is prime %}Yes{% endif %}
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import Any

from stencil.template.helpers import Undefined
from stencil.template.macro import Macro


def _test_boolean(value: Any) -> bool:
    return value is True or value is False


def _test_callable(value: Any) -> bool:
    """Test if value is callable."""
    return isinstance(value, Macro) or callable(value)


def _test_defined(value: Any) -> bool:
    """Test if value is defined. None is a defined value."""
    return not isinstance(value, Undefined)


def _test_undefined(value: Any) -> bool:
    return isinstance(value, Undefined)


def _test_divisible_by(value: int, num: int) -> bool:
    """Test if value is divisible by num."""
    return value % num == 0


def _test_eq(value: Any, other: Any) -> bool:
    return bool(value == other)


def _test_escaped(value: Any) -> bool:
    """Test if value is already marked safe (has ``__html__``)."""
    return hasattr(value, "__html__") and not isinstance(value, Undefined)


def _test_even(value: int) -> bool:
    return value % 2 == 0


def _test_float(value: Any) -> bool:
    return isinstance(value, float)


def _test_ge(value: Any, other: Any) -> bool:
    return bool(value >= other)


def _test_gt(value: Any, other: Any) -> bool:
    return bool(value > other)


def _test_in(value: Any, seq: Any) -> bool:
    """Test if value is in sequence."""
    return value in seq


def _test_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _test_iterable(value: Any) -> bool:
    """Test if value is iterable."""
    try:
        iter(value)
        return True
    except TypeError:
        return False


def _test_le(value: Any, other: Any) -> bool:
    return bool(value <= other)


def _test_lower(value: str) -> bool:
    """Test if string is lowercase."""
    return str(value).islower()


def _test_lt(value: Any, other: Any) -> bool:
    return bool(value < other)


def _test_mapping(value: Any) -> bool:
    """Test if value is a mapping."""
    return isinstance(value, Mapping)


def _test_match(value: Any, pattern: str) -> bool:
    """Test if the string form of value matches a regex from its start.

    Example:
        {% for page in pages | rejectattr('path', 'match', '.*_index.*') %}
    """
    if value is None or isinstance(value, Undefined):
        return False
    return bool(re.match(pattern, str(value)))


def _test_ne(value: Any, other: Any) -> bool:
    return bool(value != other)


def _test_none(value: Any) -> bool:
    return value is None


def _test_number(value: Any) -> bool:
    """Test if value is a number (bool excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _test_odd(value: int) -> bool:
    return value % 2 == 1


def _test_sameas(value: Any, other: Any) -> bool:
    return value is other


def _test_sequence(value: Any) -> bool:
    """Test if value is a sequence."""
    return isinstance(value, (list, tuple, str))


def _test_string(value: Any) -> bool:
    return isinstance(value, str)


def _test_truthy(value: Any) -> bool:
    return bool(value)


def _test_falsy(value: Any) -> bool:
    return not value


def _test_upper(value: str) -> bool:
    """Test if string is uppercase."""
    return str(value).isupper()


def _test_startingwith(value: Any, prefix: str) -> bool:
    return str(value).startswith(prefix)


def _test_endingwith(value: Any, suffix: str) -> bool:
    return str(value).endswith(suffix)


DEFAULT_TESTS: dict[str, Callable[..., bool]] = {
    "boolean": _test_boolean,
    "callable": _test_callable,
    "defined": _test_defined,
    "divisibleby": _test_divisible_by,
    "endingwith": _test_endingwith,
    "eq": _test_eq,
    "equalto": _test_eq,
    "==": _test_eq,
    "escaped": _test_escaped,
    "even": _test_even,
    "false": lambda v: v is False,
    "falsy": _test_falsy,
    "float": _test_float,
    "ge": _test_ge,
    ">=": _test_ge,
    "gt": _test_gt,
    "greaterthan": _test_gt,
    ">": _test_gt,
    "in": _test_in,
    "integer": _test_integer,
    "iterable": _test_iterable,
    "le": _test_le,
    "<=": _test_le,
    "lower": _test_lower,
    "lt": _test_lt,
    "lessthan": _test_lt,
    "<": _test_lt,
    "mapping": _test_mapping,
    "match": _test_match,
    "ne": _test_ne,
    "!=": _test_ne,
    "none": _test_none,
    "number": _test_number,
    "odd": _test_odd,
    "sameas": _test_sameas,
    "sequence": _test_sequence,
    "startingwith": _test_startingwith,
    "string": _test_string,
    "true": lambda v: v is True,
    "truthy": _test_truthy,
    "undefined": _test_undefined,
    "upper": _test_upper,
}
