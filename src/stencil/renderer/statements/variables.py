"""Variable assignment rendering: ``set``, block ``set`` and ``with``.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from stencil.environment.exceptions import ErrorCode, EvalError
from stencil.environment.globals import Namespace
from stencil.nodes import Getattr, Name, Tuple
from stencil.utils.html import Markup

if TYPE_CHECKING:
    from stencil.nodes import Capture, Expr, Filter, Node, Set, With
    from stencil.template.scope import ScopeArena


class VariableAssignmentMixin:
    """Mixin for binding names in scope frames.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.
    """

    if TYPE_CHECKING:
        _arena: ScopeArena
        _autoescape: bool

        # From ExpressionEvaluatorMixin
        def evaluate(self, expr: Expr, frame: int) -> Any: ...
        def _apply_filter(self, node: Filter, value: Any, frame: int) -> Any: ...
        def _error(self, message: str, node: Node | None = None, **kwargs: Any) -> EvalError: ...

        # From Renderer core
        def _render_nodes(self, nodes: Sequence[Node], frame: int, buf: list[str]) -> None: ...

    def _bind_target(self, target: Expr, value: Any, frame: int) -> None:
        """Assign ``value`` to a name, a tuple of targets or a namespace attribute."""
        if isinstance(target, Name):
            self._arena.set(frame, target.name, value)
            return

        if isinstance(target, Tuple):
            try:
                values = list(value)
            except TypeError:
                raise self._error(
                    f"cannot unpack non-iterable {type(value).__name__}",
                    target,
                    code=ErrorCode.TYPE_MISMATCH,
                ) from None
            if len(values) != len(target.items):
                raise self._error(
                    f"cannot unpack {len(values)} values into {len(target.items)} targets",
                    target,
                    code=ErrorCode.TYPE_MISMATCH,
                )
            for item_target, item in zip(target.items, values, strict=True):
                self._bind_target(item_target, item, frame)
            return

        if isinstance(target, Getattr):
            obj = self.evaluate(target.obj, frame)
            if not isinstance(obj, Namespace):
                raise self._error(
                    f"cannot assign attribute '{target.attr}' on {type(obj).__name__}",
                    target,
                    suggestion="Only namespace() objects accept {% set ns.attr = value %}",
                )
            setattr(obj, target.attr, value)
            return

        raise self._error(f"cannot assign to {type(target).__name__}", target)

    def _render_set(self, node: Set, frame: int, buf: list[str]) -> None:
        self._bind_target(node.target, self.evaluate(node.value, frame), frame)

    def _render_capture(self, node: Capture, frame: int, buf: list[str]) -> None:
        inner: list[str] = []
        self._render_nodes(node.body, frame, inner)
        value: Any = "".join(inner)
        if self._autoescape:
            value = Markup(value)
        for filter_node in node.filters:
            value = self._apply_filter(filter_node, value, frame)
        self._arena.set(frame, node.name, value)

    def _render_with(self, node: With, frame: int, buf: list[str]) -> None:
        # Values are evaluated in the enclosing frame, before any binding.
        bindings = {name: self.evaluate(expr, frame) for name, expr in node.targets}
        self._render_nodes(node.body, self._arena.push(frame, bindings), buf)
