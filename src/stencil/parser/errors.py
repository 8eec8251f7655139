"""Parser error handling.

Provides ParseError with source context and suggestions.
"""

from __future__ import annotations

from stencil._types import Token
from stencil.environment.exceptions import ErrorCode, TemplateSyntaxError


class ParseError(TemplateSyntaxError):
    """Parser error anchored at a token.

    Displays the offending line with a caret under the token, matching the
    lexer's format:

        Syntax Error: Unclosed 'for' block (opened at line 2)
          --> page.txt:5:0
           |
        >  5 | {% endif %}
             | ^
    """

    code: ErrorCode | None = ErrorCode.UNEXPECTED_TOKEN

    def __init__(
        self,
        message: str,
        token: Token,
        source: str | None = None,
        filename: str | None = None,
        suggestion: str | None = None,
        code: ErrorCode | None = None,
    ):
        self.token = token
        super().__init__(
            message,
            lineno=token.lineno,
            name=filename,
            source=source,
            col_offset=token.col_offset,
            suggestion=suggestion,
            code=code,
        )
