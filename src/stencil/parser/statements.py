"""Statement-level parsing: template body, output tags and tag dispatch."""

from __future__ import annotations

from difflib import get_close_matches
from typing import TYPE_CHECKING

from stencil._types import Token, TokenType
from stencil.environment.exceptions import ErrorCode
from stencil.nodes import Data, Node, Output

if TYPE_CHECKING:
    from stencil.nodes import Expr
    from stencil.parser.errors import ParseError


class StatementParsingMixin:
    """Parse template bodies and dispatch ``{% tag %}`` statements.

    ``_STATEMENTS`` maps each keyword to the method of a block mixin that
    handles it. Dispatch is a dict lookup on the keyword.
    """

    _STATEMENTS: dict[str, str] = {
        "if": "_parse_if",
        "for": "_parse_for",
        "set": "_parse_set",
        "with": "_parse_with",
        "block": "_parse_block_tag",
        "extends": "_parse_extends",
        "include": "_parse_include",
        "import": "_parse_import",
        "from": "_parse_from_import",
        "macro": "_parse_macro",
        "call": "_parse_call",
        "filter": "_parse_filter_block",
        "autoescape": "_parse_autoescape",
        "do": "_parse_do",
    }

    _CONTINUATION_KEYWORDS = frozenset({"elif", "else"})

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
        def _parse_expression(self, with_condexpr: bool = True) -> Expr: ...

    @staticmethod
    def _is_end_keyword(value: object) -> bool:
        return isinstance(value, str) and value.startswith("end")

    def _parse_body(self, stop_on_continuation: bool = False) -> list[Node]:
        """Parse nodes until EOF, an end tag, or (optionally) elif/else.

        The stopping tag is left unconsumed for the caller.
        """
        body: list[Node] = []
        while True:
            token = self._current
            if token.type == TokenType.EOF:
                return body
            if token.type == TokenType.DATA:
                body.append(self._parse_data())
            elif token.type == TokenType.VARIABLE_BEGIN:
                body.append(self._parse_output())
            elif token.type == TokenType.COMMENT_BEGIN:
                self._skip_comment()
            elif token.type == TokenType.BLOCK_BEGIN:
                keyword = self._peek(1)
                if keyword.type == TokenType.NAME:
                    if self._is_end_keyword(keyword.value):
                        return body
                    if keyword.value in self._CONTINUATION_KEYWORDS:
                        if stop_on_continuation:
                            return body
                        raise self._error(
                            f"Unexpected '{{% {keyword.value} %}}' outside of if/for",
                            keyword,
                            code=ErrorCode.UNEXPECTED_TOKEN,
                        )
                result = self._parse_statement()
                if result is not None:
                    body.append(result)
            else:
                raise self._error(f"Unexpected token {token.value!r}")

    def _parse_data(self) -> Data:
        token = self._advance()
        return Data(lineno=token.lineno, col_offset=token.col_offset, value=str(token.value))

    def _parse_output(self) -> Output:
        start = self._advance()  # consume '{{'
        expr = self._parse_expression()
        self._expect(TokenType.VARIABLE_END)
        return Output(lineno=start.lineno, col_offset=start.col_offset, expr=expr)

    def _skip_comment(self) -> None:
        self._advance()  # COMMENT_BEGIN
        self._expect(TokenType.COMMENT_END)

    def _parse_statement(self) -> Node | None:
        """Parse a ``{% keyword ... %}`` statement via the dispatch table."""
        self._advance()  # consume '{%'
        keyword = self._current
        if keyword.type != TokenType.NAME:
            raise self._error(
                "Expected statement keyword after '{%'", code=ErrorCode.UNKNOWN_TAG
            )

        method = self._STATEMENTS.get(str(keyword.value))
        if method is None:
            matches = get_close_matches(str(keyword.value), self._STATEMENTS, n=1)
            raise self._error(
                f"Unknown statement '{keyword.value}'",
                keyword,
                suggestion=f"Did you mean '{matches[0]}'?" if matches else None,
                code=ErrorCode.UNKNOWN_TAG,
            )
        return getattr(self, method)()
