"""Recursive descent parser producing the stencil AST.

The Parser is composed from mixins, one per grammar area:

- TokenNavigationMixin: cursor over the token list
- ExpressionParsingMixin: expression grammar and precedence
- StatementParsingMixin: template body and ``{% tag %}`` dispatch
- blocks.*: one mixin per family of statements
"""

from __future__ import annotations

from collections.abc import Iterable

from stencil._types import Token, TokenType
from stencil.environment.exceptions import ErrorCode
from stencil.nodes import Extends, Template
from stencil.parser.blocks import (
    ControlFlowBlockParsingMixin,
    FunctionBlockParsingMixin,
    SpecialBlockParsingMixin,
    TemplateStructureBlockParsingMixin,
    VariableBlockParsingMixin,
)
from stencil.parser.expressions import ExpressionParsingMixin
from stencil.parser.statements import StatementParsingMixin
from stencil.parser.tokens import TokenNavigationMixin


class Parser(
    TokenNavigationMixin,
    ExpressionParsingMixin,
    StatementParsingMixin,
    ControlFlowBlockParsingMixin,
    VariableBlockParsingMixin,
    FunctionBlockParsingMixin,
    TemplateStructureBlockParsingMixin,
    SpecialBlockParsingMixin,
):
    """Parse a token stream into a ``nodes.Template``.

    A Parser is single-use: create one per template.

    Example:
        >>> from stencil.lexer import tokenize
        >>> Parser(tokenize("Hi {{ name }}"), name="hi.txt").parse()
        Template(lineno=1, col_offset=0, body=(...), extends=None)
    """

    def __init__(
        self,
        tokens: Iterable[Token],
        name: str | None = None,
        source: str | None = None,
    ):
        self._tokens = list(tokens)
        if not self._tokens or self._tokens[-1].type != TokenType.EOF:
            last = self._tokens[-1] if self._tokens else None
            self._tokens.append(
                Token(TokenType.EOF, "", last.lineno if last else 1, last.col_offset if last else 0)
            )
        self._pos = 0
        self._name = name
        self._source = source
        self._block_stack: list[tuple[str, int, int]] = []
        self._block_names: set[str] = set()
        self._extends: Extends | None = None

    def parse(self) -> Template:
        """Parse the whole template.

        Raises:
            ParseError: On unexpected tokens, unknown statements, or
                unmatched/unclosed blocks.
        """
        body = self._parse_body()
        if self._current.type != TokenType.EOF:
            # _parse_body stops at an end tag; at the top level nothing is open.
            tag = self._peek(1)
            raise self._error(
                f"Unexpected '{{% {tag.value} %}}' with no open block",
                tag,
                code=ErrorCode.MISMATCHED_END,
            )
        return Template(lineno=1, col_offset=0, body=tuple(body), extends=self._extends)
