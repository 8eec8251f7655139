"""Expression parsing.

Recursive descent, loosest binding first:

    conditional → or → and → not → comparison/test → concat (~)
    → additive → multiplicative → power → unary → postfix → filters

Filters are attached after unary and postfix access, so ``-x|abs`` is
``abs(-x)`` and ``a + b|upper`` is ``a + upper(b)``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from stencil._types import Token, TokenType
from stencil.environment.exceptions import ErrorCode
from stencil.nodes import (
    BinOp,
    BoolOp,
    Compare,
    Concat,
    CondExpr,
    Const,
    Dict,
    Expr,
    Filter,
    FuncCall,
    Getattr,
    Getitem,
    List,
    Name,
    Slice,
    Test,
    Tuple,
    UnaryOp,
)

if TYPE_CHECKING:
    from stencil.parser.errors import ParseError

_COMPARE_OPS = {
    TokenType.EQ: "==",
    TokenType.NE: "!=",
    TokenType.LT: "<",
    TokenType.LE: "<=",
    TokenType.GT: ">",
    TokenType.GE: ">=",
}

_ADDITIVE_OPS = {TokenType.ADD: "+", TokenType.SUB: "-"}

_MULTIPLICATIVE_OPS = {
    TokenType.MUL: "*",
    TokenType.DIV: "/",
    TokenType.FLOORDIV: "//",
    TokenType.MOD: "%",
}

_CONSTANTS = {
    "true": True,
    "True": True,
    "false": False,
    "False": False,
    "none": None,
    "None": None,
}

# Names that end an argument-less test (`x is defined and y`).
_TEST_ARG_STOP = frozenset({"and", "or", "else", "if", "in", "is", "not", "recursive"})


class ExpressionParsingMixin:
    """Mixin implementing the expression grammar.

    Host attributes come from TokenNavigationMixin.
    """

    if TYPE_CHECKING:

        @property
        def _current(self) -> Token: ...
        def _peek(self, offset: int = 0) -> Token: ...
        def _advance(self) -> Token: ...
        def _expect(self, token_type: TokenType) -> Token: ...
        def _expect_name(self, what: str = "name") -> str: ...
        def _match(self, *types: TokenType) -> bool: ...
        def _match_name(self, *names: str) -> bool: ...
        def _error(
            self,
            message: str,
            token: Token | None = None,
            suggestion: str | None = None,
            code: ErrorCode | None = None,
        ) -> ParseError: ...

    def _parse_expression(self, with_condexpr: bool = True) -> Expr:
        """Parse a full expression, including ``a if b else c``."""
        expr = self._parse_or()
        if not with_condexpr:
            return expr
        while self._match_name("if"):
            token = self._advance()
            test = self._parse_or()
            if_false: Expr | None = None
            if self._match_name("else"):
                self._advance()
                if_false = self._parse_expression()
            expr = CondExpr(
                lineno=token.lineno,
                col_offset=token.col_offset,
                test=test,
                if_true=expr,
                if_false=if_false,
            )
        return expr

    def _parse_tuple_or_expression(self) -> Expr:
        """Parse ``a, b, c`` as an implicit tuple (used by ``set`` values)."""
        start = self._current
        first = self._parse_expression()
        if not self._match(TokenType.COMMA):
            return first
        items = [first]
        while self._match(TokenType.COMMA):
            self._advance()
            if self._match(TokenType.BLOCK_END, TokenType.VARIABLE_END):
                break
            items.append(self._parse_expression())
        return Tuple(lineno=start.lineno, col_offset=start.col_offset, items=tuple(items))

    def _parse_or(self) -> Expr:
        start = self._current
        values = [self._parse_and()]
        while self._match_name("or"):
            self._advance()
            values.append(self._parse_and())
        if len(values) == 1:
            return values[0]
        return BoolOp(lineno=start.lineno, col_offset=start.col_offset, op="or", values=tuple(values))

    def _parse_and(self) -> Expr:
        start = self._current
        values = [self._parse_not()]
        while self._match_name("and"):
            self._advance()
            values.append(self._parse_not())
        if len(values) == 1:
            return values[0]
        return BoolOp(
            lineno=start.lineno, col_offset=start.col_offset, op="and", values=tuple(values)
        )

    def _parse_not(self) -> Expr:
        if self._match_name("not"):
            token = self._advance()
            return UnaryOp(
                lineno=token.lineno,
                col_offset=token.col_offset,
                op="not",
                operand=self._parse_not(),
            )
        return self._parse_compare()

    def _parse_compare(self) -> Expr:
        start = self._current
        left = self._parse_concat()
        ops: list[str] = []
        comparators: list[Expr] = []

        while True:
            token_type = self._current.type
            if token_type in _COMPARE_OPS:
                self._advance()
                ops.append(_COMPARE_OPS[token_type])
            elif self._match_name("in"):
                self._advance()
                ops.append("in")
            elif self._match_name("not") and self._peek(1).type == TokenType.NAME and (
                self._peek(1).value == "in"
            ):
                self._advance()
                self._advance()
                ops.append("not in")
            else:
                break
            comparators.append(self._parse_concat())

        if ops:
            left = Compare(
                lineno=start.lineno,
                col_offset=start.col_offset,
                left=left,
                ops=tuple(ops),
                comparators=tuple(comparators),
            )

        while self._match_name("is"):
            left = self._parse_test(left)
        return left

    def _parse_test(self, value: Expr) -> Test:
        """Parse ``is [not] name``, ``is name(args)`` or ``is name arg``."""
        token = self._advance()  # consume 'is'
        negated = False
        if self._match_name("not"):
            self._advance()
            negated = True

        if self._match(TokenType.NAME):
            name = str(self._advance().value)
        elif self._current.type in _COMPARE_OPS:
            # `x is == 3` style aliases
            name = _COMPARE_OPS[self._advance().type]
        else:
            raise self._error(
                "Expected test name after 'is'",
                suggestion="Tests look like: {% if n is divisibleby(3) %}",
                code=ErrorCode.INVALID_EXPRESSION,
            )

        args: tuple[Expr, ...] = ()
        kwargs: dict[str, Expr] = {}
        if self._match(TokenType.LPAREN):
            args, kwargs = self._parse_call_args()
        elif self._starts_test_argument():
            args = (self._parse_postfix(self._parse_primary()),)

        return Test(
            lineno=token.lineno,
            col_offset=token.col_offset,
            value=value,
            name=name,
            args=args,
            kwargs=kwargs,
            negated=negated,
        )

    def _starts_test_argument(self) -> bool:
        current = self._current
        if current.type in (TokenType.STRING, TokenType.INTEGER, TokenType.FLOAT):
            return True
        if current.type in (TokenType.LBRACKET, TokenType.LBRACE):
            return True
        return current.type == TokenType.NAME and current.value not in _TEST_ARG_STOP

    def _parse_concat(self) -> Expr:
        start = self._current
        nodes = [self._parse_additive()]
        while self._match(TokenType.TILDE):
            self._advance()
            nodes.append(self._parse_additive())
        if len(nodes) == 1:
            return nodes[0]
        return Concat(lineno=start.lineno, col_offset=start.col_offset, nodes=tuple(nodes))

    def _parse_additive(self) -> Expr:
        left = self._parse_multiplicative()
        while self._current.type in _ADDITIVE_OPS:
            token = self._advance()
            right = self._parse_multiplicative()
            left = BinOp(
                lineno=token.lineno,
                col_offset=token.col_offset,
                op=_ADDITIVE_OPS[token.type],
                left=left,
                right=right,
            )
        return left

    def _parse_multiplicative(self) -> Expr:
        left = self._parse_power()
        while self._current.type in _MULTIPLICATIVE_OPS:
            token = self._advance()
            right = self._parse_power()
            left = BinOp(
                lineno=token.lineno,
                col_offset=token.col_offset,
                op=_MULTIPLICATIVE_OPS[token.type],
                left=left,
                right=right,
            )
        return left

    def _parse_power(self) -> Expr:
        left = self._parse_unary()
        while self._match(TokenType.POW):
            token = self._advance()
            right = self._parse_unary()
            left = BinOp(
                lineno=token.lineno, col_offset=token.col_offset, op="**", left=left, right=right
            )
        return left

    def _parse_unary(self, with_filter: bool = True) -> Expr:
        if self._match(TokenType.SUB, TokenType.ADD):
            token = self._advance()
            node: Expr = UnaryOp(
                lineno=token.lineno,
                col_offset=token.col_offset,
                op="-" if token.type == TokenType.SUB else "+",
                operand=self._parse_unary(with_filter=False),
            )
        else:
            node = self._parse_primary()
        node = self._parse_postfix(node)
        if with_filter:
            node = self._parse_filters(node)
        return node

    def _parse_primary(self) -> Expr:
        token = self._current

        if token.type == TokenType.NAME:
            self._advance()
            if token.value in _CONSTANTS:
                return Const(
                    lineno=token.lineno, col_offset=token.col_offset, value=_CONSTANTS[token.value]
                )
            return Name(lineno=token.lineno, col_offset=token.col_offset, name=str(token.value))

        if token.type == TokenType.STRING:
            self._advance()
            value = str(token.value)
            # Adjacent literals concatenate: "a" "b" -> "ab"
            while self._match(TokenType.STRING):
                value += str(self._advance().value)
            return Const(lineno=token.lineno, col_offset=token.col_offset, value=value)

        if token.type in (TokenType.INTEGER, TokenType.FLOAT):
            self._advance()
            return Const(lineno=token.lineno, col_offset=token.col_offset, value=token.value)

        if token.type == TokenType.LPAREN:
            return self._parse_paren()

        if token.type == TokenType.LBRACKET:
            self._advance()
            items = self._parse_sequence_items(TokenType.RBRACKET)
            return List(lineno=token.lineno, col_offset=token.col_offset, items=items)

        if token.type == TokenType.LBRACE:
            return self._parse_dict()

        raise self._error(
            f"Unexpected {token.value!r} in expression"
            if token.type != TokenType.EOF
            else "Unexpected end of template in expression",
            code=ErrorCode.INVALID_EXPRESSION,
        )

    def _parse_paren(self) -> Expr:
        start = self._advance()  # consume '('
        if self._match(TokenType.RPAREN):
            self._advance()
            return Tuple(lineno=start.lineno, col_offset=start.col_offset, items=())
        first = self._parse_expression()
        if self._match(TokenType.RPAREN):
            self._advance()
            return first
        items = [first]
        while self._match(TokenType.COMMA):
            self._advance()
            if self._match(TokenType.RPAREN):
                break
            items.append(self._parse_expression())
        self._expect(TokenType.RPAREN)
        return Tuple(lineno=start.lineno, col_offset=start.col_offset, items=tuple(items))

    def _parse_sequence_items(self, closer: TokenType) -> tuple[Expr, ...]:
        items: list[Expr] = []
        while not self._match(closer):
            if items:
                self._expect(TokenType.COMMA)
                if self._match(closer):
                    break
            items.append(self._parse_expression())
        self._expect(closer)
        return tuple(items)

    def _parse_dict(self) -> Dict:
        start = self._advance()  # consume '{'
        keys: list[Expr] = []
        values: list[Expr] = []
        while not self._match(TokenType.RBRACE):
            if keys:
                self._expect(TokenType.COMMA)
                if self._match(TokenType.RBRACE):
                    break
            keys.append(self._parse_expression())
            self._expect(TokenType.COLON)
            values.append(self._parse_expression())
        self._expect(TokenType.RBRACE)
        return Dict(
            lineno=start.lineno, col_offset=start.col_offset, keys=tuple(keys), values=tuple(values)
        )

    def _parse_postfix(self, node: Expr) -> Expr:
        while True:
            token = self._current
            if token.type == TokenType.DOT:
                self._advance()
                attr_token = self._current
                if attr_token.type == TokenType.NAME:
                    attr = str(self._advance().value)
                    node = Getattr(
                        lineno=token.lineno, col_offset=token.col_offset, obj=node, attr=attr
                    )
                elif attr_token.type == TokenType.INTEGER:
                    # items.0 is items[0]
                    self._advance()
                    key = Const(
                        lineno=attr_token.lineno,
                        col_offset=attr_token.col_offset,
                        value=attr_token.value,
                    )
                    node = Getitem(
                        lineno=token.lineno, col_offset=token.col_offset, obj=node, key=key
                    )
                else:
                    raise self._error(
                        "Expected attribute name after '.'", code=ErrorCode.INVALID_EXPRESSION
                    )
            elif token.type == TokenType.LBRACKET:
                node = self._parse_subscript(node)
            elif token.type == TokenType.LPAREN:
                args, kwargs, dyn_args, dyn_kwargs = self._parse_full_call_args()
                node = FuncCall(
                    lineno=token.lineno,
                    col_offset=token.col_offset,
                    func=node,
                    args=args,
                    kwargs=kwargs,
                    dyn_args=dyn_args,
                    dyn_kwargs=dyn_kwargs,
                )
            else:
                return node

    def _parse_subscript(self, node: Expr) -> Expr:
        start = self._advance()  # consume '['
        parts: list[Expr | None] = [None]
        is_slice = False
        if not self._match(TokenType.COLON):
            parts[0] = self._parse_expression()
        while self._match(TokenType.COLON) and len(parts) < 3:
            is_slice = True
            self._advance()
            if self._match(TokenType.COLON, TokenType.RBRACKET):
                parts.append(None)
            else:
                parts.append(self._parse_expression())
        self._expect(TokenType.RBRACKET)

        if not is_slice:
            key = parts[0]
            assert key is not None
            return Getitem(lineno=start.lineno, col_offset=start.col_offset, obj=node, key=key)

        parts.extend([None] * (3 - len(parts)))
        key = Slice(
            lineno=start.lineno,
            col_offset=start.col_offset,
            start=parts[0],
            stop=parts[1],
            step=parts[2],
        )
        return Getitem(lineno=start.lineno, col_offset=start.col_offset, obj=node, key=key)

    def _parse_call_args(self) -> tuple[tuple[Expr, ...], dict[str, Expr]]:
        """Parse ``(a, b, key=value)``; splats are rejected here."""
        args, kwargs, dyn_args, dyn_kwargs = self._parse_full_call_args()
        if dyn_args is not None or dyn_kwargs is not None:
            raise self._error(
                "*args / **kwargs are only allowed in function calls",
                code=ErrorCode.INVALID_EXPRESSION,
            )
        return args, kwargs

    def _parse_full_call_args(
        self,
    ) -> tuple[tuple[Expr, ...], dict[str, Expr], Expr | None, Expr | None]:
        self._expect(TokenType.LPAREN)
        args: list[Expr] = []
        kwargs: dict[str, Expr] = {}
        dyn_args: Expr | None = None
        dyn_kwargs: Expr | None = None

        first = True
        while not self._match(TokenType.RPAREN):
            if not first:
                self._expect(TokenType.COMMA)
                if self._match(TokenType.RPAREN):
                    break
            first = False

            if self._match(TokenType.MUL):
                self._advance()
                dyn_args = self._parse_expression()
            elif self._match(TokenType.POW):
                self._advance()
                dyn_kwargs = self._parse_expression()
            elif self._match(TokenType.NAME) and self._peek(1).type == TokenType.ASSIGN:
                key = str(self._advance().value)
                self._advance()  # consume '='
                kwargs[key] = self._parse_expression()
            else:
                if kwargs:
                    raise self._error(
                        "Positional argument follows keyword argument",
                        code=ErrorCode.INVALID_EXPRESSION,
                    )
                args.append(self._parse_expression())

        self._expect(TokenType.RPAREN)
        return tuple(args), kwargs, dyn_args, dyn_kwargs

    def _parse_filters(self, node: Expr | None) -> Expr:
        while self._match(TokenType.PIPE):
            self._advance()
            node = self._parse_filter_stage(node)
        assert node is not None
        return node

    def _parse_filter_stage(self, value: Expr | None) -> Filter:
        """Parse ``name`` / ``name(args)`` after a ``|`` (or at the start of
        ``{% filter %}``). Dotted names are joined: ``|my.filter``."""
        token = self._current
        name = self._expect_name("filter name")
        while self._match(TokenType.DOT):
            self._advance()
            name += "." + self._expect_name("filter name")
        args: tuple[Expr, ...] = ()
        kwargs: dict[str, Expr] = {}
        if self._match(TokenType.LPAREN):
            args, kwargs = self._parse_call_args()
        return Filter(
            lineno=token.lineno,
            col_offset=token.col_offset,
            value=value,
            name=name,
            args=args,
            kwargs=kwargs,
        )

    def _parse_assign_target(self) -> Expr:
        """Parse a ``set``/``for`` target: ``x``, ``a, b``, ``(a, b)`` or ``ns.attr``."""
        start = self._current
        targets: list[Expr] = []
        while True:
            if self._match(TokenType.LPAREN):
                self._advance()
                inner = self._parse_assign_target()
                self._expect(TokenType.RPAREN)
                targets.append(inner)
            else:
                token = self._current
                name = self._expect_name("assignment target")
                target: Expr = Name(
                    lineno=token.lineno, col_offset=token.col_offset, name=name, ctx="store"
                )
                if self._match(TokenType.DOT):
                    self._advance()
                    attr = self._expect_name("attribute name")
                    target = Getattr(
                        lineno=token.lineno,
                        col_offset=token.col_offset,
                        obj=Name(lineno=token.lineno, col_offset=token.col_offset, name=name),
                        attr=attr,
                    )
                targets.append(target)
            if not self._match(TokenType.COMMA):
                break
            self._advance()

        if len(targets) == 1:
            return targets[0]
        return Tuple(
            lineno=start.lineno, col_offset=start.col_offset, items=tuple(targets), ctx="store"
        )
