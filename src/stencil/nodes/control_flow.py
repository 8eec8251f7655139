"""Control flow nodes for the stencil AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from stencil.nodes.base import Node
from stencil.nodes.expressions import Expr


@dataclass(frozen=True, slots=True)
class If(Node):
    """Conditional: {% if cond %}...{% elif cond %}...{% else %}...{% endif %}"""

    test: Expr
    body: Sequence[Node]
    elif_: Sequence[tuple[Expr, Sequence[Node]]] = ()
    else_: Sequence[Node] = ()


@dataclass(frozen=True, slots=True)
class For(Node):
    """For loop: {% for x in items if cond recursive %}...{% else %}...{% endfor %}

    ``empty`` holds the else-branch, rendered when no item survives ``test``.
    """

    target: Expr
    iter: Expr
    body: Sequence[Node]
    empty: Sequence[Node] = ()
    recursive: bool = False
    test: Expr | None = None
