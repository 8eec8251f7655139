"""Macro definition and call-block nodes for the stencil AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from stencil.nodes.base import Node
from stencil.nodes.expressions import Expr, FuncCall


@dataclass(frozen=True, slots=True)
class MacroParam(Node):
    """A single declared macro parameter."""

    name: str


@dataclass(frozen=True, slots=True)
class Macro(Node):
    """Macro definition: {% macro name(a, b=1) %}...{% endmacro %}

    ``defaults`` align with the trailing ``params``, as in Python.
    """

    name: str
    params: Sequence[MacroParam]
    body: Sequence[Node]
    defaults: Sequence[Expr] = ()

    @property
    def args(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.params)


@dataclass(frozen=True, slots=True)
class CallBlock(Node):
    """Call a macro passing the body as ``caller``:
    {% call(user) render_list(users) %}{{ user.name }}{% endcall %}"""

    call: FuncCall
    body: Sequence[Node]
    caller_params: Sequence[MacroParam] = ()
    caller_defaults: Sequence[Expr] = ()
