"""Block stack management shared by the statement parsing mixins."""

from __future__ import annotations

from typing import TYPE_CHECKING

from stencil._types import Token, TokenType
from stencil.environment.exceptions import ErrorCode

if TYPE_CHECKING:
    from stencil.parser.errors import ParseError


class BlockStackMixin:
    """Track open block constructs so end tags can be validated.

    Each entry is ``(kind, lineno, col_offset)`` of the opening tag. An end
    tag closes the innermost entry when it is ``{% end %}`` or
    ``{% end<kind> %}``; anything else is reported against the construct
    that is still open.
    """

    if TYPE_CHECKING:
        _block_stack: list[tuple[str, int, int]]

        @property
        def _current(self) -> Token: ...
        def _peek(self, offset: int = 0) -> Token: ...
        def _advance(self) -> Token: ...
        def _expect(self, token_type: TokenType) -> Token: ...
        def _error(
            self,
            message: str,
            token: Token | None = None,
            suggestion: str | None = None,
            code: ErrorCode | None = None,
        ) -> ParseError: ...

    def _push_block(self, kind: str, token: Token) -> None:
        self._block_stack.append((kind, token.lineno, token.col_offset))

    def _unclosed_error(self, token: Token) -> ParseError:
        kind, lineno, _ = self._block_stack[-1]
        return self._error(
            f"Unclosed '{kind}' block (opened at line {lineno})",
            token,
            suggestion=f"Add {{% end{kind} %}} to close it",
            code=ErrorCode.UNCLOSED_BLOCK,
        )

    def _consume_end_tag(self, kind: str) -> None:
        """Consume ``{% end %}`` / ``{% end<kind> %}`` closing the innermost block.

        The current token must be the BLOCK_BEGIN of the end tag, or EOF
        (reported as an unclosed block).
        """
        if self._current.type == TokenType.EOF:
            raise self._unclosed_error(self._current)

        self._expect(TokenType.BLOCK_BEGIN)
        tag = self._current
        name = tag.value if tag.type == TokenType.NAME else None
        if name not in ("end", f"end{kind}"):
            opened_kind, lineno, _ = self._block_stack[-1]
            raise self._error(
                f"Unexpected '{{% {name or tag.value} %}}': "
                f"'{opened_kind}' block opened at line {lineno} is still open",
                tag,
                suggestion=f"Close the '{opened_kind}' block with {{% end{opened_kind} %}} first",
                code=ErrorCode.MISMATCHED_END,
            )
        self._advance()
        # `{% endblock content %}` repeats the block name
        if kind == "block" and self._current.type == TokenType.NAME:
            self._advance()
        self._expect(TokenType.BLOCK_END)
        self._block_stack.pop()
