"""Special block rendering: ``filter`` and ``autoescape``.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from stencil.utils.html import Markup

if TYPE_CHECKING:
    from stencil.nodes import Autoescape, Expr, Filter, FilterBlock, Node


class SpecialBlockMixin:
    """Mixin for blocks that transform or re-escape their body.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.
    """

    if TYPE_CHECKING:
        _autoescape: bool

        # From ExpressionEvaluatorMixin
        def evaluate(self, expr: Expr, frame: int) -> Any: ...
        def _apply_filter(self, node: Filter, value: Any, frame: int) -> Any: ...

        # From BasicStatementMixin
        def _to_output(self, value: Any) -> str: ...

        # From Renderer core
        def _render_nodes(self, nodes: Sequence[Node], frame: int, buf: list[str]) -> None: ...

    def _render_filter_block(self, node: FilterBlock, frame: int, buf: list[str]) -> None:
        """Render the body, then pipe the text through each filter in turn."""
        inner: list[str] = []
        self._render_nodes(node.body, frame, inner)
        value: Any = "".join(inner)
        if self._autoescape:
            value = Markup(value)
        for filter_node in node.filters:
            value = self._apply_filter(filter_node, value, frame)
        buf.append(self._to_output(value))

    def _render_autoescape(self, node: Autoescape, frame: int, buf: list[str]) -> None:
        previous = self._autoescape
        self._autoescape = bool(self.evaluate(node.enabled, frame))
        try:
            self._render_nodes(node.body, frame, buf)
        finally:
            self._autoescape = previous
