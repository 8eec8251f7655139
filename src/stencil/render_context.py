"""Per-render state held in a ContextVar.

The renderer records which template and line it is working on here, so
errors raised deep inside filters, tests or ``Undefined`` operations can be
annotated with a location without threading that state through every call.

Thread Safety:
    ContextVars are per-thread (and per-task). Concurrent renders each see
    their own RenderContext.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field

from stencil.environment.exceptions import (
    ErrorCode,
    EvalError,
    SourceSnippet,
    build_source_snippet,
)


@dataclass
class RenderContext:
    """Per-render state isolated from the user's context.

    Attributes:
        template_name: Current template name for error messages
        source: Current template source for runtime error snippets
        line: Line of the node being rendered
        include_depth: Current include/import depth
        max_include_depth: Maximum allowed include depth
        template_stack: (template_name, line) pairs leading to this template
    """

    template_name: str | None = None
    source: str | None = None
    line: int = 0

    # 50 is deep enough for real hierarchies and catches runaway recursion.
    include_depth: int = 0
    max_include_depth: int = 50

    template_stack: list[tuple[str, int]] = field(default_factory=list)

    def snippet(self) -> SourceSnippet | None:
        """Source snippet around the current line, when the source is known."""
        if self.source and self.line:
            return build_source_snippet(self.source, self.line)
        return None

    def check_include_depth(self, template_name: str) -> None:
        """Raise EvalError if including ``template_name`` would go too deep."""
        if self.include_depth >= self.max_include_depth:
            raise EvalError(
                f"Maximum include depth exceeded ({self.max_include_depth}) "
                f"when including '{template_name}'",
                code=ErrorCode.INCLUDE_DEPTH,
                template_name=self.template_name,
                lineno=self.line or None,
                template_stack=list(self.template_stack),
                suggestion="Check for circular includes: a -> b -> a",
            )

    def child_context(
        self, template_name: str | None = None, source: str | None = None
    ) -> RenderContext:
        """Context for an included or imported template, one level deeper.

        The current location is appended to ``template_stack`` for traces.
        """
        new_stack = self.template_stack.copy()
        if self.template_name and self.line > 0:
            new_stack.append((self.template_name, self.line))

        return RenderContext(
            template_name=template_name or self.template_name,
            source=source,
            line=0,
            include_depth=self.include_depth + 1,
            max_include_depth=self.max_include_depth,
            template_stack=new_stack,
        )


_render_context: ContextVar[RenderContext | None] = ContextVar(
    "render_context",
    default=None,
)


def get_render_context() -> RenderContext | None:
    """Current render context, or None outside a render call."""
    return _render_context.get()


@contextmanager
def render_context(
    template_name: str | None = None,
    source: str | None = None,
    max_include_depth: int = 50,
) -> Iterator[RenderContext]:
    """Install a fresh RenderContext for the duration of the block.

    Example:
        with render_context(template_name="page.txt", source=src) as ctx:
            output = renderer.render(context)
    """
    ctx = RenderContext(
        template_name=template_name,
        source=source,
        max_include_depth=max_include_depth,
    )
    token: Token[RenderContext | None] = _render_context.set(ctx)
    try:
        yield ctx
    finally:
        _render_context.reset(token)


def set_render_context(ctx: RenderContext) -> Token[RenderContext | None]:
    """Set a RenderContext and return the reset token.

    Used for includes and imports, which restore the parent context manually.
    """
    return _render_context.set(ctx)


def reset_render_context(token: Token[RenderContext | None]) -> None:
    """Restore the context that was active before ``set_render_context``."""
    _render_context.reset(token)
