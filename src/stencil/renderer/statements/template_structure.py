"""Template structure rendering: blocks, ``super()``, include and import.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Any

from stencil.environment.exceptions import ErrorCode, EvalError, TemplateNotFoundError
from stencil.template.core import Template
from stencil.template.macro import Module
from stencil.template.scope import GLOBALS
from stencil.utils.html import Markup

if TYPE_CHECKING:
    from stencil.environment.core import Environment
    from stencil.nodes import Block, Expr, FromImport, Import, Include, Node
    from stencil.template.core import BlockLayer, ResolvedTemplate
    from stencil.template.scope import ScopeArena


class TemplateStructureMixin:
    """Mixin for blocks and cross-template statements.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.
    """

    if TYPE_CHECKING:
        _env: Environment
        _arena: ScopeArena
        _autoescape: bool
        _resolved: ResolvedTemplate
        _block_stack: list[tuple[str, tuple[BlockLayer, ...], int]]

        # From ExpressionEvaluatorMixin
        def evaluate(self, expr: Expr, frame: int) -> Any: ...
        def _error(self, message: str, node: Node | None = None, **kwargs: Any) -> EvalError: ...

        # From Renderer core
        def _in_template(self, template: Template | None) -> AbstractContextManager[None]: ...
        def _nested(self, template: Template) -> AbstractContextManager[None]: ...
        def _render_nodes(self, nodes: Sequence[Node], frame: int, buf: list[str]) -> None: ...
        def _render_resolved(
            self, resolved: ResolvedTemplate, frame: int, buf: list[str]
        ) -> None: ...

    # ─────────────────────────────────────────────────────────────────────────
    # Blocks
    # ─────────────────────────────────────────────────────────────────────────

    def _render_block(self, node: Block, frame: int, buf: list[str]) -> None:
        """Render the most-derived definition of the block.

        Blocks inside macros are not part of the inheritance chain and
        render their own body.
        """
        layers = self._resolved.layers(node.name)
        if not any(layer.block is node for layer in layers):
            self._render_nodes(node.body, frame, buf)
            return
        self._render_block_layer(node.name, layers, 0, frame, buf)

    def _render_block_layer(
        self,
        name: str,
        layers: tuple[BlockLayer, ...],
        index: int,
        frame: int,
        buf: list[str],
    ) -> None:
        layer = layers[index]
        if index == 0 and layer.block.required:
            raise self._error(
                f"Required block '{name}' was not overridden",
                layer.block,
                suggestion=f"Define {{% block {name} %}} in the child template",
            )
        self._block_stack.append((name, layers, index))
        try:
            with self._in_template(layer.template):
                self._render_nodes(layer.body, frame, buf)
        finally:
            self._block_stack.pop()

    def _render_super(self, frame: int) -> str:
        """Render the next definition of the enclosing block up the chain.

        Raises:
            EvalError: Outside a block, or when no ancestor defines it
        """
        if not self._block_stack:
            raise self._error("super() can only be called inside a block")
        name, layers, index = self._block_stack[-1]
        if index + 1 >= len(layers):
            raise self._error(
                f"Block '{name}' has no parent definition for super() to render"
            )
        inner: list[str] = []
        self._render_block_layer(name, layers, index + 1, frame, inner)
        out = "".join(inner)
        return Markup(out) if self._autoescape else out

    # ─────────────────────────────────────────────────────────────────────────
    # Include and import
    # ─────────────────────────────────────────────────────────────────────────

    def _lookup_template(self, target: Any, node: Node) -> Template:
        if isinstance(target, Template):
            return target
        if not isinstance(target, str):
            raise self._error(
                f"Template name must be a string, got {type(target).__name__}",
                node,
                code=ErrorCode.TYPE_MISMATCH,
            )
        return self._env.get_template(target)

    def _resolve(self, template: Template) -> ResolvedTemplate:
        if template.name is not None and template.name in self._env.registry:
            return self._env.registry.resolve(template.name)
        return self._env.registry.resolve_template(template)

    def _render_include(self, node: Include, frame: int, buf: list[str]) -> None:
        """Render another template in place.

        A list of names renders the first one that exists. ``with context``
        (the default) lets the included template read the includer's
        variables; ``without context`` gives it only the globals. Either
        way its own assignments stay in its own frame.
        """
        target = self.evaluate(node.template, frame)
        candidates = list(target) if isinstance(target, (list, tuple)) else [target]

        template: Template | None = None
        for candidate in candidates:
            try:
                template = self._lookup_template(candidate, node)
            except TemplateNotFoundError:
                continue
            break

        if template is None:
            if node.ignore_missing:
                return
            names = [str(c) for c in candidates]
            raise TemplateNotFoundError(
                names[0] if len(names) == 1 else ", ".join(names),
                frozenset(self._env.registry.names()),
            )

        resolved = self._resolve(template)
        include_frame = self._arena.push(frame if node.with_context else GLOBALS)
        with self._nested(template):
            self._render_resolved(resolved, include_frame, buf)

    def _load_module(self, template_expr: Expr, with_context: bool, frame: int) -> Module:
        """Run a template's top level and collect its bindings.

        Output is discarded. Macros defined by the module keep its frame,
        so they see the module's own top-level variables.
        """
        template = self._lookup_template(self.evaluate(template_expr, frame), template_expr)
        resolved = self._resolve(template)
        module_frame = self._arena.push(frame if with_context else GLOBALS)
        with self._nested(template):
            self._render_resolved(resolved, module_frame, [])
        return Module(template.display_name, dict(self._arena.frame(module_frame)))

    def _render_import(self, node: Import, frame: int, buf: list[str]) -> None:
        module = self._load_module(node.template, node.with_context, frame)
        self._arena.set(frame, node.target, module)

    def _render_from_import(self, node: FromImport, frame: int, buf: list[str]) -> None:
        module = self._load_module(node.template, node.with_context, frame)
        for name, alias in node.names:
            if name not in module:
                raise self._error(
                    f"Template '{module.name}' does not export '{name}'",
                    node,
                    suggestion=(
                        f"Available: {', '.join(sorted(module))}" if len(module.exports) else None
                    ),
                )
            self._arena.set(frame, alias or name, module.exports[name])
