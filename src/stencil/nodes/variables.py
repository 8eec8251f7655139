"""Variable binding nodes for the stencil AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from stencil.nodes.base import Node
from stencil.nodes.expressions import Expr, Filter


@dataclass(frozen=True, slots=True)
class Set(Node):
    """Bind in the current scope: {% set x = expr %}, {% set a, b = pair %},
    {% set ns.count = ns.count + 1 %}"""

    target: Expr
    value: Expr


@dataclass(frozen=True, slots=True)
class Capture(Node):
    """Block-form set: {% set x | upper %}...{% endset %}"""

    name: str
    body: Sequence[Node]
    filters: Sequence[Filter] = ()
