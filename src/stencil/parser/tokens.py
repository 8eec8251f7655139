"""Token navigation for the parser."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from stencil._types import Token, TokenType
from stencil.environment.exceptions import ErrorCode
from stencil.parser.errors import ParseError


class TokenNavigationMixin:
    """Cursor over the token list: peek, advance, expect.

    Required Host Attributes:
        - _tokens: Sequence[Token]
        - _pos: int
        - _name, _source: used for error context
    """

    if TYPE_CHECKING:
        _tokens: Sequence[Token]
        _pos: int
        _name: str | None
        _source: str | None

    @property
    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _peek(self, offset: int = 0) -> Token:
        index = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[index]

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        if token.type != TokenType.EOF:
            self._pos += 1
        return token

    def _match(self, *types: TokenType) -> bool:
        return self._current.type in types

    def _match_name(self, *names: str) -> bool:
        current = self._current
        return current.type == TokenType.NAME and current.value in names

    def _expect(self, token_type: TokenType) -> Token:
        if self._current.type != token_type:
            raise self._error(
                f"Expected {token_type.value}, got {_describe(self._current)}",
            )
        return self._advance()

    def _expect_name(self, what: str = "name") -> str:
        if self._current.type != TokenType.NAME:
            raise self._error(f"Expected {what}, got {_describe(self._current)}")
        return str(self._advance().value)

    def _error(
        self,
        message: str,
        token: Token | None = None,
        suggestion: str | None = None,
        code: ErrorCode | None = None,
    ) -> ParseError:
        return ParseError(
            message,
            token or self._current,
            source=self._source,
            filename=self._name,
            suggestion=suggestion,
            code=code,
        )


def _describe(token: Token) -> str:
    if token.type == TokenType.EOF:
        return "end of template"
    if token.type in (TokenType.NAME, TokenType.STRING, TokenType.INTEGER, TokenType.FLOAT):
        return f"{token.type.value} {token.value!r}"
    return repr(str(token.value))
