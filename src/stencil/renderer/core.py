"""Renderer: walks a resolved template's AST and produces output text.

One Renderer is built per ``render()`` call. It owns the scope arena, the
output buffers and the block stack used by ``super()``, so nothing is
shared between concurrent renders.

Scope layout:
    frame 0 holds the environment globals, frame 1 the caller's context,
    frame 2 the template's top level. Loops, ``with`` blocks, macro calls
    and includes push child frames; assignment always binds in the current
    frame and lookup walks parent links up to frame 0.

Error handling:
    Every template switch (root body, block layer, macro body, included
    or imported template) goes through ``_in_template``, which keeps the
    RenderContext location current and wraps the first failure in a
    ``RenderError`` pointing at the innermost template and line.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from stencil.environment.exceptions import ErrorCode, EvalError, RenderError, TemplateError
from stencil.render_context import (
    get_render_context,
    render_context,
    reset_render_context,
    set_render_context,
)
from stencil.renderer.evaluator import ExpressionEvaluatorMixin
from stencil.renderer.statements import StatementRenderingMixin
from stencil.template.scope import GLOBALS, ScopeArena

if TYPE_CHECKING:
    from stencil.environment.core import Environment
    from stencil.nodes import Node
    from stencil.render_context import RenderContext
    from stencil.template.core import BlockLayer, ResolvedTemplate, Template

logger = logging.getLogger(__name__)

# Nodes whose line becomes the current error location. Pure text and
# containers whose children carry their own lines are left out.
_LINE_TRACKED_NODES = frozenset(
    {
        "Output",
        "If",
        "For",
        "Set",
        "Capture",
        "With",
        "Macro",
        "CallBlock",
        "Do",
        "Include",
        "Import",
        "FromImport",
        "FilterBlock",
        "Autoescape",
        "Block",
    }
)

# Top-level statements of a child template that still run when it extends
# another template. Everything else in the child body is discarded.
_DEFINITION_NODES = frozenset({"Set", "Capture", "Macro", "Import", "FromImport", "Do"})


class Renderer(ExpressionEvaluatorMixin, StatementRenderingMixin):
    """Render one resolved template.

    Example:
        >>> resolved = env.resolve("page.txt")
        >>> Renderer(env, resolved).render({"title": "Home"})
        '...'
    """

    def __init__(self, env: Environment, resolved: ResolvedTemplate):
        self._env = env
        self._resolved = resolved
        self._arena = ScopeArena(env.globals)
        self._strict = env.strict
        self._autoescape = env.select_autoescape(resolved.name)
        self._block_stack: list[tuple[str, tuple[BlockLayer, ...], int]] = []
        self._templates: list[Template] = []
        self._node_dispatch = self._get_node_dispatch()
        self._expr_dispatch = self._get_expr_dispatch()

    def _get_node_dispatch(self) -> dict[str, Callable[[Any, int, list[str]], None]]:
        return {
            "Data": self._render_data,
            "Output": self._render_output,
            "Do": self._render_do,
            "If": self._render_if,
            "For": self._render_for,
            "Set": self._render_set,
            "Capture": self._render_capture,
            "With": self._render_with,
            "Macro": self._render_macro,
            "CallBlock": self._render_call_block,
            "Block": self._render_block,
            "Include": self._render_include,
            "Import": self._render_import,
            "FromImport": self._render_from_import,
            "FilterBlock": self._render_filter_block,
            "Autoescape": self._render_autoescape,
        }

    def render(self, context: Mapping[str, Any]) -> str:
        """Render with ``context`` as the caller's variables.

        Raises:
            RenderError: wrapping the first error encountered
        """
        template = self._resolved.template
        buf: list[str] = []
        with render_context(
            template_name=template.display_name,
            source=template.source,
            max_include_depth=self._env.max_include_depth,
        ):
            context_frame = self._arena.push(GLOBALS, context)
            self._render_resolved(self._resolved, self._arena.push(context_frame), buf)
        logger.debug(
            "Rendered %s (%d frames, %d chunks)",
            template.display_name,
            len(self._arena),
            len(buf),
        )
        return "".join(buf)

    # ─────────────────────────────────────────────────────────────────────────
    # Template switching
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def _current_template(self) -> Template | None:
        return self._templates[-1] if self._templates else None

    def _render_resolved(self, resolved: ResolvedTemplate, frame: int, buf: list[str]) -> None:
        """Render an inheritance chain into ``buf``.

        Definitions at the top level of each non-root template run first,
        most-derived first. Then the root body renders, with every block
        taking its most-derived layer.
        """
        previous = self._resolved
        self._resolved = resolved
        try:
            for template in resolved.chain[:-1]:
                definitions = [
                    node for node in template.ast.body if type(node).__name__ in _DEFINITION_NODES
                ]
                with self._in_template(template):
                    self._render_nodes(definitions, frame, [])
            with self._in_template(resolved.root):
                self._render_nodes(resolved.body, frame, buf)
        finally:
            self._resolved = previous

    @contextmanager
    def _in_template(self, template: Template | None) -> Iterator[None]:
        """Point the render context at ``template`` for the duration.

        The previous location is restored afterwards. Any failure that is
        not yet a RenderError is wrapped in one here, at the innermost
        template it escaped from.
        """
        ctx = get_render_context()
        if template is None or ctx is None:
            yield
            return

        saved = (ctx.template_name, ctx.source, ctx.line)
        ctx.template_name = template.display_name
        ctx.source = template.source
        self._templates.append(template)
        try:
            yield
        except RenderError:
            raise
        except Exception as exc:
            raise self._wrap_error(exc, ctx) from exc
        finally:
            self._templates.pop()
            ctx.template_name, ctx.source, ctx.line = saved

    @contextmanager
    def _nested(self, template: Template) -> Iterator[None]:
        """Enter an included or imported template, one include level deeper.

        Raises:
            EvalError: INCLUDE_DEPTH when the include chain is too deep
        """
        ctx = get_render_context()
        if ctx is None:
            yield
            return
        ctx.check_include_depth(template.display_name)
        logger.debug(
            "Entering %s at include depth %d", template.display_name, ctx.include_depth + 1
        )
        token = set_render_context(ctx.child_context(template.display_name, template.source))
        try:
            yield
        finally:
            reset_render_context(token)

    def _wrap_error(self, exc: Exception, ctx: RenderContext) -> RenderError:
        error: TemplateError
        if isinstance(exc, TemplateError):
            error = exc
        else:
            error = EvalError(
                f"{type(exc).__name__}: {exc}",
                code=ErrorCode.RUNTIME_ERROR,
                template_name=ctx.template_name,
                lineno=ctx.line or None,
                source_snippet=ctx.snippet(),
                template_stack=list(ctx.template_stack),
            )
            error.__cause__ = exc
        lineno = getattr(error, "lineno", None) or ctx.line or None
        return RenderError(
            error,
            template_name=ctx.template_name,
            lineno=lineno,
            template_stack=list(ctx.template_stack),
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Node dispatch
    # ─────────────────────────────────────────────────────────────────────────

    def _render_nodes(self, nodes: Sequence[Node], frame: int, buf: list[str]) -> None:
        ctx = get_render_context()
        dispatch = self._node_dispatch
        for node in nodes:
            kind = type(node).__name__
            if ctx is not None and kind in _LINE_TRACKED_NODES:
                ctx.line = node.lineno
            handler = dispatch.get(kind)
            if handler is None:
                raise self._error(f"Cannot render {kind} node", node)
            handler(node, frame, buf)
