"""Control flow block parsing: if/elif/else and for/else."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from stencil._types import TokenType
from stencil.environment.exceptions import ErrorCode
from stencil.nodes import Expr, For, If, Node
from stencil.parser.blocks.core import BlockStackMixin


class ControlFlowBlockParsingMixin(BlockStackMixin):
    """Mixin for parsing ``if`` and ``for`` statements.

    Required Host Attributes:
        - All from BlockStackMixin
        - _parse_body, _parse_expression, _parse_assign_target
        - _match_name
    """

    if TYPE_CHECKING:
        def _parse_body(self, stop_on_continuation: bool = False) -> list[Node]: ...
        def _parse_expression(self, with_condexpr: bool = True) -> Expr: ...
        def _parse_assign_target(self) -> Expr: ...
        def _match_name(self, *names: str) -> bool: ...

    def _continuation(self) -> str | None:
        """Return 'elif'/'else' when the next tag is a continuation."""
        if self._current.type != TokenType.BLOCK_BEGIN:
            return None
        keyword = self._peek(1)
        if keyword.type == TokenType.NAME and keyword.value in ("elif", "else"):
            return str(keyword.value)
        return None

    def _parse_if(self) -> If:
        """Parse {% if %}...{% elif %}...{% else %}...{% endif %}."""
        start = self._advance()  # consume 'if'
        self._push_block("if", start)
        test = self._parse_expression()
        self._expect(TokenType.BLOCK_END)
        body = self._parse_body(stop_on_continuation=True)

        elif_: list[tuple[Expr, Sequence[Node]]] = []
        else_: list[Node] = []
        seen_else = False
        while (keyword := self._continuation()) is not None:
            tag = self._peek(1)
            if seen_else:
                raise self._error(
                    f"Unexpected '{{% {keyword} %}}' after '{{% else %}}'",
                    tag,
                    code=ErrorCode.UNEXPECTED_TOKEN,
                )
            self._advance()  # '{%'
            self._advance()  # keyword
            if keyword == "elif":
                cond = self._parse_expression()
                self._expect(TokenType.BLOCK_END)
                elif_.append((cond, tuple(self._parse_body(stop_on_continuation=True))))
            else:
                self._expect(TokenType.BLOCK_END)
                else_ = self._parse_body(stop_on_continuation=True)
                seen_else = True

        self._consume_end_tag("if")
        return If(
            lineno=start.lineno,
            col_offset=start.col_offset,
            test=test,
            body=tuple(body),
            elif_=tuple(elif_),
            else_=tuple(else_),
        )

    def _parse_for(self) -> For:
        """Parse {% for target in iter [if cond] [recursive] %}...{% else %}...{% endfor %}."""
        start = self._advance()  # consume 'for'
        self._push_block("for", start)

        target = self._parse_assign_target()
        if not self._match_name("in"):
            raise self._error(
                "Expected 'in' in for loop",
                suggestion="Loop syntax: {% for item in items %}",
            )
        self._advance()
        iterable = self._parse_expression(with_condexpr=False)

        test: Expr | None = None
        if self._match_name("if"):
            self._advance()
            test = self._parse_expression(with_condexpr=False)

        recursive = False
        if self._match_name("recursive"):
            self._advance()
            recursive = True

        self._expect(TokenType.BLOCK_END)
        body = self._parse_body(stop_on_continuation=True)

        empty: list[Node] = []
        keyword = self._continuation()
        if keyword == "elif":
            raise self._error("'elif' is not allowed in a for loop", self._peek(1))
        if keyword == "else":
            self._advance()
            self._advance()
            self._expect(TokenType.BLOCK_END)
            empty = self._parse_body()

        self._consume_end_tag("for")
        return For(
            lineno=start.lineno,
            col_offset=start.col_offset,
            target=target,
            iter=iterable,
            body=tuple(body),
            empty=tuple(empty),
            recursive=recursive,
            test=test,
        )
