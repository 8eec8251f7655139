"""Token types shared by the lexer and parser."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenType(str, Enum):
    """Kinds of tokens produced by the lexer."""

    # Template structure
    DATA = "data"
    VARIABLE_BEGIN = "variable_begin"
    VARIABLE_END = "variable_end"
    BLOCK_BEGIN = "block_begin"
    BLOCK_END = "block_end"
    COMMENT_BEGIN = "comment_begin"
    COMMENT_END = "comment_end"

    # Literals and names
    NAME = "name"
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"

    # Operators
    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"
    FLOORDIV = "floordiv"
    MOD = "mod"
    POW = "pow"
    TILDE = "tilde"
    PIPE = "pipe"
    DOT = "dot"
    COMMA = "comma"
    COLON = "colon"
    ASSIGN = "assign"
    LPAREN = "lparen"
    RPAREN = "rparen"
    LBRACKET = "lbracket"
    RBRACKET = "rbracket"
    LBRACE = "lbrace"
    RBRACE = "rbrace"
    EQ = "eq"
    NE = "ne"
    LT = "lt"
    LE = "le"
    GT = "gt"
    GE = "ge"

    EOF = "eof"


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexical token.

    Attributes:
        type: Token kind
        value: Raw lexeme (decoded for strings, numeric for numbers)
        lineno: 1-based source line
        col_offset: 0-based source column
    """

    type: TokenType
    value: str | int | float
    lineno: int
    col_offset: int

    def __repr__(self) -> str:
        return f"Token({self.type.value}, {self.value!r}, {self.lineno}:{self.col_offset})"


# Two-character operators are matched before single-character ones.
OPERATORS: dict[str, TokenType] = {
    "==": TokenType.EQ,
    "!=": TokenType.NE,
    "<=": TokenType.LE,
    ">=": TokenType.GE,
    "//": TokenType.FLOORDIV,
    "**": TokenType.POW,
    "+": TokenType.ADD,
    "-": TokenType.SUB,
    "*": TokenType.MUL,
    "/": TokenType.DIV,
    "%": TokenType.MOD,
    "~": TokenType.TILDE,
    "|": TokenType.PIPE,
    ".": TokenType.DOT,
    ",": TokenType.COMMA,
    ":": TokenType.COLON,
    "=": TokenType.ASSIGN,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "<": TokenType.LT,
    ">": TokenType.GT,
}
