"""Output and formatting nodes for the stencil AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from stencil.nodes.base import Node
from stencil.nodes.expressions import Expr, Filter


@dataclass(frozen=True, slots=True)
class Output(Node):
    """Output expression: {{ expr }}"""

    expr: Expr


@dataclass(frozen=True, slots=True)
class Data(Node):
    """Literal text between template constructs."""

    value: str


@dataclass(frozen=True, slots=True)
class FilterBlock(Node):
    """Apply filters to block output: {% filter upper | trim %}...{% endfilter %}

    ``filters`` are applied left to right; each has ``value=None``.
    """

    filters: Sequence[Filter]
    body: Sequence[Node]


@dataclass(frozen=True, slots=True)
class Autoescape(Node):
    """Control autoescaping: {% autoescape true %}...{% endautoescape %}"""

    enabled: Expr
    body: Sequence[Node]


@dataclass(frozen=True, slots=True)
class Do(Node):
    """Evaluate for side effects only: {% do items.append(x) %}"""

    expr: Expr
