"""Macro and call-block parsing.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from stencil._types import TokenType
from stencil.nodes import CallBlock, Expr, FuncCall, Macro, MacroParam, Node
from stencil.parser.blocks.core import BlockStackMixin


class FunctionBlockParsingMixin(BlockStackMixin):
    """Mixin for parsing ``macro`` definitions and ``call`` blocks."""

    if TYPE_CHECKING:
        def _parse_body(self, stop_on_continuation: bool = False) -> list[Node]: ...
        def _parse_expression(self, with_condexpr: bool = True) -> Expr: ...
        def _expect_name(self, what: str = "name") -> str: ...
        def _match(self, *types: TokenType) -> bool: ...

    def _parse_param_list(self) -> tuple[tuple[MacroParam, ...], tuple[Expr, ...]]:
        """Parse ``(a, b, c=1, d="x")``.

        Defaults must trail, as in Python: once a parameter has a default,
        every following parameter needs one too.
        """
        params: list[MacroParam] = []
        defaults: list[Expr] = []
        self._expect(TokenType.LPAREN)
        while not self._match(TokenType.RPAREN):
            if params:
                self._expect(TokenType.COMMA)
                if self._match(TokenType.RPAREN):
                    break
            token = self._current
            name = self._expect_name("parameter name")
            if any(p.name == name for p in params):
                raise self._error(f"Duplicate parameter '{name}'", token)
            params.append(MacroParam(lineno=token.lineno, col_offset=token.col_offset, name=name))
            if self._match(TokenType.ASSIGN):
                self._advance()
                defaults.append(self._parse_expression())
            elif defaults:
                raise self._error(
                    f"Parameter '{name}' without a default follows one with a default",
                    token,
                    suggestion="Move parameters with defaults to the end",
                )
        self._expect(TokenType.RPAREN)
        return tuple(params), tuple(defaults)

    def _parse_macro(self) -> Macro:
        """Parse {% macro name(args) %}...{% endmacro %}.

        Example:
            {% macro field(name, value="", type="text") %}
                <input type="{{ type }}" name="{{ name }}" value="{{ value }}">
            {% endmacro %}

            {{ field("user") }}
        """
        start = self._advance()  # consume 'macro'
        self._push_block("macro", start)

        name = self._expect_name("macro name")
        params, defaults = self._parse_param_list()
        self._expect(TokenType.BLOCK_END)

        body = self._parse_body()
        self._consume_end_tag("macro")

        return Macro(
            lineno=start.lineno,
            col_offset=start.col_offset,
            name=name,
            params=params,
            body=tuple(body),
            defaults=defaults,
        )

    def _parse_call(self) -> CallBlock:
        """Parse {% call[(params)] macro(args) %}body{% endcall %}.

        The body becomes a ``caller`` macro visible inside the called macro:

            {% call(item) listing(items) %}<b>{{ item }}</b>{% endcall %}
        """
        start = self._advance()  # consume 'call'
        self._push_block("call", start)

        caller_params: tuple[MacroParam, ...] = ()
        caller_defaults: tuple[Expr, ...] = ()
        if self._match(TokenType.LPAREN):
            caller_params, caller_defaults = self._parse_param_list()

        call_token = self._current
        call = self._parse_expression()
        if not isinstance(call, FuncCall):
            raise self._error(
                "Expected a macro call after 'call'",
                call_token,
                suggestion="Call block syntax: {% call my_macro(args) %}...{% endcall %}",
            )
        self._expect(TokenType.BLOCK_END)

        body = self._parse_body()
        self._consume_end_tag("call")

        return CallBlock(
            lineno=start.lineno,
            col_offset=start.col_offset,
            call=call,
            body=tuple(body),
            caller_params=caller_params,
            caller_defaults=caller_defaults,
        )
