"""Filter, autoescape and do statement parsing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from stencil._types import TokenType
from stencil.nodes import Autoescape, Do, Expr, Filter, FilterBlock, Node
from stencil.parser.blocks.core import BlockStackMixin


class SpecialBlockParsingMixin(BlockStackMixin):
    """Mixin for ``filter``, ``autoescape`` and ``do``."""

    if TYPE_CHECKING:
        def _parse_body(self, stop_on_continuation: bool = False) -> list[Node]: ...
        def _parse_expression(self, with_condexpr: bool = True) -> Expr: ...
        def _parse_filter_stage(self, value: Expr | None) -> Filter: ...
        def _match(self, *types: TokenType) -> bool: ...

    def _parse_filter_block(self) -> FilterBlock:
        """Parse {% filter upper | replace("A", "B") %}...{% endfilter %}."""
        start = self._advance()  # consume 'filter'
        self._push_block("filter", start)

        filters = [self._parse_filter_stage(None)]
        while self._match(TokenType.PIPE):
            self._advance()
            filters.append(self._parse_filter_stage(None))
        self._expect(TokenType.BLOCK_END)

        body = self._parse_body()
        self._consume_end_tag("filter")
        return FilterBlock(
            lineno=start.lineno,
            col_offset=start.col_offset,
            filters=tuple(filters),
            body=tuple(body),
        )

    def _parse_autoescape(self) -> Autoescape:
        """Parse {% autoescape true %}...{% endautoescape %}."""
        start = self._advance()  # consume 'autoescape'
        self._push_block("autoescape", start)
        enabled = self._parse_expression()
        self._expect(TokenType.BLOCK_END)

        body = self._parse_body()
        self._consume_end_tag("autoescape")
        return Autoescape(
            lineno=start.lineno,
            col_offset=start.col_offset,
            enabled=enabled,
            body=tuple(body),
        )

    def _parse_do(self) -> Do:
        """Parse {% do expr %}."""
        start = self._advance()  # consume 'do'
        expr = self._parse_expression()
        self._expect(TokenType.BLOCK_END)
        return Do(lineno=start.lineno, col_offset=start.col_offset, expr=expr)
