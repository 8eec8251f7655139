"""Control flow rendering: ``if`` and ``for``.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from stencil.environment.exceptions import ErrorCode, EvalError
from stencil.template.helpers import Undefined
from stencil.template.loop_context import LoopContext
from stencil.utils.html import Markup

if TYPE_CHECKING:
    from stencil.nodes import Expr, For, If, Node
    from stencil.template.scope import ScopeArena


class ControlFlowMixin:
    """Mixin for rendering conditionals and loops.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.
    """

    if TYPE_CHECKING:
        _arena: ScopeArena
        _autoescape: bool

        # From ExpressionEvaluatorMixin
        def evaluate(self, expr: Expr, frame: int) -> Any: ...
        def _error(self, message: str, node: Node | None = None, **kwargs: Any) -> EvalError: ...

        # From Renderer core
        def _render_nodes(self, nodes: Sequence[Node], frame: int, buf: list[str]) -> None: ...

        # From VariableAssignmentMixin
        def _bind_target(self, target: Expr, value: Any, frame: int) -> None: ...

    def _render_if(self, node: If, frame: int, buf: list[str]) -> None:
        """First truthy branch wins. Branches share the enclosing frame."""
        if self.evaluate(node.test, frame):
            self._render_nodes(node.body, frame, buf)
            return
        for test, body in node.elif_:
            if self.evaluate(test, frame):
                self._render_nodes(body, frame, buf)
                return
        self._render_nodes(node.else_, frame, buf)

    def _render_for(self, node: For, frame: int, buf: list[str]) -> None:
        iterable = self.evaluate(node.iter, frame)
        self._render_loop(node, iterable, frame, buf, depth0=0)

    def _render_loop(
        self,
        node: For,
        iterable: Any,
        frame: int,
        buf: list[str],
        depth0: int,
    ) -> None:
        """Run one (possibly recursive) level of a ``for`` loop.

        Each iteration gets its own child frame holding ``loop`` and the
        loop targets, so assignments in the body never leak out. The
        inline ``if`` filter runs before ``loop`` is built, so
        ``loop.length`` counts only the kept items.
        """
        items = self._loop_items(iterable, node)

        if node.test is not None:
            kept = []
            for item in items:
                test_frame = self._arena.push(frame)
                self._bind_target(node.target, item, test_frame)
                if self.evaluate(node.test, test_frame):
                    kept.append(item)
            items = kept

        if not items:
            self._render_nodes(node.empty, frame, buf)
            return

        recurse = None
        if node.recursive:

            def recurse(children: Any) -> str:
                inner: list[str] = []
                self._render_loop(node, children, frame, inner, depth0 + 1)
                out = "".join(inner)
                return Markup(out) if self._autoescape else out

        loop = LoopContext(items, depth0, recurse)
        for item in loop:
            iter_frame = self._arena.push(frame, {"loop": loop})
            self._bind_target(node.target, item, iter_frame)
            self._render_nodes(node.body, iter_frame, buf)

    def _loop_items(self, iterable: Any, node: For) -> list[Any]:
        if isinstance(iterable, Undefined):
            return []
        if isinstance(iterable, Mapping):
            return list(iterable.keys())
        if iterable is None or not isinstance(iterable, Iterable):
            raise self._error(
                f"'{type(iterable).__name__}' object is not iterable",
                node,
                code=ErrorCode.TYPE_MISMATCH,
                suggestion="Use | default([]) for values that may be missing",
            )
        return list(iterable)
