"""Variable binding block parsing: set (both forms) and with."""

from __future__ import annotations

from typing import TYPE_CHECKING

from stencil._types import TokenType
from stencil.nodes import Capture, Expr, Filter, Name, Node, Set, With
from stencil.parser.blocks.core import BlockStackMixin


class VariableBlockParsingMixin(BlockStackMixin):
    """Mixin for parsing ``set`` and ``with``."""

    if TYPE_CHECKING:
        def _parse_body(self, stop_on_continuation: bool = False) -> list[Node]: ...
        def _parse_expression(self, with_condexpr: bool = True) -> Expr: ...
        def _parse_tuple_or_expression(self) -> Expr: ...
        def _parse_assign_target(self) -> Expr: ...
        def _parse_filter_stage(self, value: Expr | None) -> Filter: ...
        def _expect_name(self, what: str = "name") -> str: ...
        def _match(self, *types: TokenType) -> bool: ...

    def _parse_set(self) -> Set | Capture:
        """Parse {% set x = expr %} or {% set x | filter %}...{% endset %}."""
        start = self._advance()  # consume 'set'
        target = self._parse_assign_target()

        if self._match(TokenType.ASSIGN):
            self._advance()
            value = self._parse_tuple_or_expression()
            self._expect(TokenType.BLOCK_END)
            return Set(lineno=start.lineno, col_offset=start.col_offset, target=target, value=value)

        if not isinstance(target, Name):
            raise self._error(
                "Block-form set needs a single variable name",
                suggestion="Use {% set name %}...{% endset %}",
            )

        filters: list[Filter] = []
        while self._match(TokenType.PIPE):
            self._advance()
            filters.append(self._parse_filter_stage(None))
        self._expect(TokenType.BLOCK_END)

        self._push_block("set", start)
        body = self._parse_body()
        self._consume_end_tag("set")
        return Capture(
            lineno=start.lineno,
            col_offset=start.col_offset,
            name=target.name,
            body=tuple(body),
            filters=tuple(filters),
        )

    def _parse_with(self) -> With:
        """Parse {% with a = 1, b = x %}...{% endwith %}."""
        start = self._advance()  # consume 'with'
        self._push_block("with", start)

        targets: list[tuple[str, Expr]] = []
        while not self._match(TokenType.BLOCK_END):
            if targets:
                self._expect(TokenType.COMMA)
            name = self._expect_name("variable name")
            self._expect(TokenType.ASSIGN)
            targets.append((name, self._parse_expression()))
        self._expect(TokenType.BLOCK_END)

        body = self._parse_body()
        self._consume_end_tag("with")
        return With(
            lineno=start.lineno,
            col_offset=start.col_offset,
            targets=tuple(targets),
            body=tuple(body),
        )
