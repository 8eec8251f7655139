"""Basic statement rendering.

Provides the mixin for raw text, ``{{ expression }}`` output and ``do``.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from stencil.template.helpers import to_string
from stencil.utils.html import html_escape

if TYPE_CHECKING:
    from stencil.nodes import Data, Do, Expr, Output


class BasicStatementMixin:
    """Mixin for rendering text and output nodes.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.
    """

    if TYPE_CHECKING:
        _autoescape: bool

        # From ExpressionEvaluatorMixin
        def evaluate(self, expr: Expr, frame: int) -> Any: ...

    def _to_output(self, value: Any) -> str:
        """Stringify a value for output.

        Text comes from ``to_string``. With autoescaping on, it is escaped
        unless the value has ``__html__``; Markup passes through.
        """
        if not self._autoescape:
            return to_string(value)
        if not hasattr(value, "__html__"):
            value = to_string(value)
        return str(html_escape(value))

    def _render_data(self, node: Data, frame: int, buf: list[str]) -> None:
        if node.value:
            buf.append(node.value)

    def _render_output(self, node: Output, frame: int, buf: list[str]) -> None:
        buf.append(self._to_output(self.evaluate(node.expr, frame)))

    def _render_do(self, node: Do, frame: int, buf: list[str]) -> None:
        self.evaluate(node.expr, frame)
