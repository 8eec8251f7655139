"""Template lexer.

Splits template source into a lazy token stream with three modes:

- data (default): literal text becomes DATA tokens
- variable: ``{{ ... }}`` produces expression tokens
- block: ``{% ... %}`` produces statement tokens

Comments ``{# ... #}`` are emitted as a COMMENT_BEGIN/COMMENT_END pair with
no content. ``{% raw %}...{% endraw %}`` is resolved here, so its body
reaches the parser as plain DATA.

Whitespace control:
    ``{{-`` / ``{%-`` / ``{#-`` strip whitespace before the tag,
    ``-}}`` / ``-%}`` / ``-#}`` strip whitespace after it,
    ``{%+`` opts a single tag out of ``lstrip_blocks``.

Example:
    >>> [t.type.value for t in tokenize("Hi {{ name }}")]
    ['data', 'variable_begin', 'name', 'variable_end', 'eof']
"""

from __future__ import annotations

import re
from bisect import bisect_right
from collections.abc import Generator, Iterator
from dataclasses import dataclass

from stencil._types import OPERATORS, Token, TokenType
from stencil.environment.exceptions import ErrorCode, TemplateSyntaxError

_TAG_START_RE = re.compile(r"\{\{|\{%|\{#")
_NAME_RE = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*")
_NUMBER_RE = re.compile(
    r"(?P<int>\d(?:_?\d)*)(?P<frac>\.\d(?:_?\d)*)?(?P<exp>[eE][+-]?\d(?:_?\d)*)?"
)
_RAW_BEGIN_RE = re.compile(r"\{%([-+]?)\s*raw\s*(-?)%\}")
_RAW_END_RE = re.compile(r"\{%(-?)\s*endraw\s*(-?)%\}")

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "\\": "\\",
    "'": "'",
    '"': '"',
    "0": "\0",
}

_CLOSERS = {
    "{{": ("}}", TokenType.VARIABLE_BEGIN, TokenType.VARIABLE_END, ErrorCode.UNCLOSED_VARIABLE),
    "{%": ("%}", TokenType.BLOCK_BEGIN, TokenType.BLOCK_END, ErrorCode.UNCLOSED_TAG),
}

_OPENING = {TokenType.LPAREN, TokenType.LBRACKET, TokenType.LBRACE}
_CLOSING = {TokenType.RPAREN, TokenType.RBRACKET, TokenType.RBRACE}


class LexError(TemplateSyntaxError):
    """Lexical error: unterminated delimiter or string, or a stray character."""

    code: ErrorCode | None = ErrorCode.UNCLOSED_TAG


@dataclass(frozen=True, slots=True)
class LexerConfig:
    """Whitespace handling options, mirrored from the Environment."""

    trim_blocks: bool = False
    lstrip_blocks: bool = False
    keep_trailing_newline: bool = False


class Lexer:
    """Tokenizer for a single template source.

    ``tokenize()`` returns a fresh generator every call, so a Lexer can be
    iterated any number of times.
    """

    __slots__ = ("_source", "_config", "_name", "_line_starts")

    def __init__(
        self,
        source: str,
        config: LexerConfig | None = None,
        name: str | None = None,
    ):
        self._source = source
        self._config = config or LexerConfig()
        self._name = name
        self._line_starts = [0] + [m.end() for m in re.finditer(r"\n", source)]

    def _position(self, pos: int) -> tuple[int, int]:
        """Return (lineno, col_offset) for an absolute offset."""
        line_index = bisect_right(self._line_starts, pos) - 1
        return line_index + 1, pos - self._line_starts[line_index]

    def _token(self, type_: TokenType, value: str | int | float, pos: int) -> Token:
        lineno, col = self._position(pos)
        return Token(type_, value, lineno, col)

    def _error(self, message: str, pos: int, code: ErrorCode) -> LexError:
        lineno, col = self._position(pos)
        return LexError(
            message,
            lineno=lineno,
            name=self._name,
            source=self._source,
            col_offset=col,
            code=code,
        )

    def _at_line_start(self, data_start: int, raw: str) -> bool:
        # Decided on the untrimmed segment, before trim_blocks removes its newline.
        if "\n" in raw:
            return True
        return data_start == 0 or self._source[data_start - 1] == "\n"

    def tokenize(self) -> Iterator[Token]:
        """Yield tokens for the whole source, ending with EOF."""
        source = self._source
        config = self._config
        pos = 0
        strip_next = False
        trim_next = False

        while pos < len(source):
            match = _TAG_START_RE.search(source, pos)
            end = match.start() if match else len(source)
            text = source[pos:end]

            if strip_next:
                text = text.lstrip()
            elif trim_next:
                if text.startswith("\r\n"):
                    text = text[2:]
                elif text.startswith("\n"):
                    text = text[1:]

            if match is not None:
                marker = source[match.end() : match.end() + 1]
                if marker == "-":
                    text = text.rstrip()
                elif (
                    config.lstrip_blocks
                    and match.group() != "{{"
                    and marker != "+"
                    and self._at_line_start(pos, source[pos:end])
                ):
                    head, _, tail = text.rpartition("\n")
                    if not tail.strip(" \t"):
                        text = head + "\n" if "\n" in text else ""
            elif not config.keep_trailing_newline:
                if text.endswith("\r\n"):
                    text = text[:-2]
                elif text.endswith("\n"):
                    text = text[:-1]

            if text:
                yield self._token(TokenType.DATA, text, pos)
            if match is None:
                break

            opener = match.group()
            if opener == "{#":
                pos, strip_next = self._skip_comment(match.start())
                yield self._token(TokenType.COMMENT_BEGIN, "{#", match.start())
                yield self._token(TokenType.COMMENT_END, "#}", pos - 2)
                trim_next = config.trim_blocks
                continue

            if opener == "{%":
                raw = _RAW_BEGIN_RE.match(source, match.start())
                if raw is not None:
                    pos, strip_next = yield from self._lex_raw(raw)
                    trim_next = config.trim_blocks
                    continue

            pos, strip_next = yield from self._lex_tag(match.start(), opener)
            trim_next = opener == "{%" and config.trim_blocks

        yield self._token(TokenType.EOF, "", len(source))

    def _skip_comment(self, start: int) -> tuple[int, bool]:
        close = self._source.find("#}", start + 2)
        if close == -1:
            raise self._error("Unclosed comment", start, ErrorCode.UNCLOSED_COMMENT)
        strip = close > start + 2 and self._source[close - 1] == "-"
        return close + 2, strip

    def _lex_raw(self, raw: re.Match[str]) -> Generator[Token, None, tuple[int, bool]]:
        body_start = raw.end()
        end = _RAW_END_RE.search(self._source, body_start)
        if end is None:
            raise self._error("Unclosed raw block", raw.start(), ErrorCode.UNCLOSED_TAG)
        text = self._source[body_start : end.start()]
        if raw.group(2) == "-":
            text = text.lstrip()
        if end.group(1) == "-":
            text = text.rstrip()
        if text:
            yield self._token(TokenType.DATA, text, body_start)
        return end.end(), end.group(2) == "-"

    def _lex_tag(
        self, start: int, opener: str
    ) -> Generator[Token, None, tuple[int, bool]]:
        """Lex one ``{{ }}`` or ``{% %}`` tag; returns (next_pos, strip_after)."""
        source = self._source
        closer, begin_type, end_type, unclosed = _CLOSERS[opener]
        yield self._token(begin_type, opener, start)

        pos = start + 2
        if source[pos : pos + 1] in ("-", "+"):
            pos += 1

        depth = 0
        length = len(source)
        while True:
            while pos < length and source[pos].isspace():
                pos += 1
            if pos >= length:
                kind = "variable" if opener == "{{" else "block tag"
                raise self._error(f"Unclosed {kind} '{opener}'", start, unclosed)

            if depth == 0:
                if source.startswith("-" + closer, pos):
                    yield self._token(end_type, closer, pos + 1)
                    return pos + 3, True
                if source.startswith(closer, pos):
                    yield self._token(end_type, closer, pos)
                    return pos + 2, False

            char = source[pos]

            name = _NAME_RE.match(source, pos)
            if name is not None:
                yield self._token(TokenType.NAME, name.group(), pos)
                pos = name.end()
                continue

            number = _NUMBER_RE.match(source, pos)
            if number is not None:
                text = number.group().replace("_", "")
                if number.group("frac") or number.group("exp"):
                    yield self._token(TokenType.FLOAT, float(text), pos)
                else:
                    yield self._token(TokenType.INTEGER, int(text), pos)
                pos = number.end()
                continue

            if char in ("'", '"'):
                value, end = self._read_string(pos)
                yield self._token(TokenType.STRING, value, pos)
                pos = end
                continue

            op_type = OPERATORS.get(source[pos : pos + 2]) or OPERATORS.get(char)
            if op_type is None:
                raise self._error(
                    f"Unexpected character {char!r}", pos, ErrorCode.UNEXPECTED_CHARACTER
                )
            width = 2 if source[pos : pos + 2] in OPERATORS else 1
            if op_type in _OPENING:
                depth += 1
            elif op_type in _CLOSING and depth > 0:
                depth -= 1
            yield self._token(op_type, source[pos : pos + width], pos)
            pos += width

    def _read_string(self, start: int) -> tuple[str, int]:
        source = self._source
        quote = source[start]
        chars: list[str] = []
        pos = start + 1
        while pos < len(source):
            char = source[pos]
            if char == quote:
                return "".join(chars), pos + 1
            if char == "\\" and pos + 1 < len(source):
                escape = source[pos + 1]
                if escape == "u" and re.fullmatch(r"[0-9a-fA-F]{4}", source[pos + 2 : pos + 6]):
                    chars.append(chr(int(source[pos + 2 : pos + 6], 16)))
                    pos += 6
                    continue
                chars.append(_ESCAPES.get(escape, "\\" + escape))
                pos += 2
                continue
            chars.append(char)
            pos += 1
        raise self._error("Unterminated string literal", start, ErrorCode.UNCLOSED_STRING)


def tokenize(
    source: str,
    *,
    trim_blocks: bool = False,
    lstrip_blocks: bool = False,
    keep_trailing_newline: bool = False,
    name: str | None = None,
) -> list[Token]:
    """Tokenize ``source`` eagerly. Convenience wrapper over ``Lexer``."""
    config = LexerConfig(
        trim_blocks=trim_blocks,
        lstrip_blocks=lstrip_blocks,
        keep_trailing_newline=keep_trailing_newline,
    )
    return list(Lexer(source, config, name=name).tokenize())
