"""Template structure nodes for the stencil AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from stencil.nodes.base import Node
from stencil.nodes.expressions import Expr


@dataclass(frozen=True, slots=True)
class Extends(Node):
    """Template inheritance: {% extends "base.txt" %}"""

    template: str


@dataclass(frozen=True, slots=True)
class Block(Node):
    """Named block for inheritance: {% block name %}...{% endblock %}"""

    name: str
    body: Sequence[Node]
    scoped: bool = False
    required: bool = False


@dataclass(frozen=True, slots=True)
class Include(Node):
    """Include another template: {% include "partial.txt" [ignore missing] [with context] %}"""

    template: Expr
    with_context: bool = True
    ignore_missing: bool = False


@dataclass(frozen=True, slots=True)
class Import(Node):
    """Import a template as a module: {% import "macros.txt" as m %}"""

    template: Expr
    target: str
    with_context: bool = False


@dataclass(frozen=True, slots=True)
class FromImport(Node):
    """Import specific names: {% from "macros.txt" import button, card as c %}"""

    template: Expr
    names: Sequence[tuple[str, str | None]]
    with_context: bool = False


@dataclass(frozen=True, slots=True)
class With(Node):
    """Scoped bindings: {% with x = expr, y = 2 %}...{% endwith %}"""

    targets: Sequence[tuple[str, Expr]]
    body: Sequence[Node]


@dataclass(frozen=True, slots=True)
class Template(Node):
    """Root node representing a complete template."""

    body: Sequence[Node]
    extends: Extends | None = None
