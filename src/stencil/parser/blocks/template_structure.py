"""Template structure parsing: block, extends, include, import, from-import."""

from __future__ import annotations

from typing import TYPE_CHECKING

from stencil._types import TokenType
from stencil.environment.exceptions import ErrorCode
from stencil.nodes import Block, Expr, Extends, FromImport, Import, Include, Node
from stencil.parser.blocks.core import BlockStackMixin


class TemplateStructureBlockParsingMixin(BlockStackMixin):
    """Mixin for parsing template structure statements.

    Required Host Attributes:
        - All from BlockStackMixin
        - _block_names: set[str]
        - _extends: Extends | None
        - _parse_body, _parse_expression, _match, _match_name, _expect_name
    """

    if TYPE_CHECKING:
        _block_names: set[str]
        _extends: Extends | None

        def _parse_body(self, stop_on_continuation: bool = False) -> list[Node]: ...
        def _parse_expression(self, with_condexpr: bool = True) -> Expr: ...
        def _expect_name(self, what: str = "name") -> str: ...
        def _match(self, *types: TokenType) -> bool: ...
        def _match_name(self, *names: str) -> bool: ...

    def _parse_block_tag(self) -> Block:
        """Parse {% block name [scoped] [required] %}...{% endblock %}."""
        start = self._advance()  # consume 'block'
        name_token = self._current
        name = self._expect_name("block name")

        scoped = required = False
        while self._match_name("scoped", "required"):
            if self._advance().value == "scoped":
                scoped = True
            else:
                required = True
        self._expect(TokenType.BLOCK_END)

        if name in self._block_names:
            raise self._error(
                f"Block '{name}' defined twice",
                name_token,
                suggestion="Block names must be unique within a template",
                code=ErrorCode.DUPLICATE_BLOCK,
            )
        self._block_names.add(name)

        self._push_block("block", start)
        body = self._parse_body()
        self._consume_end_tag("block")

        return Block(
            lineno=start.lineno,
            col_offset=start.col_offset,
            name=name,
            body=tuple(body),
            scoped=scoped,
            required=required,
        )

    def _parse_extends(self) -> None:
        """Parse {% extends "base.txt" %}.

        Records the parent on the parser; the node lives on the Template
        root rather than in the body.
        """
        start = self._advance()  # consume 'extends'
        if self._block_stack:
            raise self._error(
                "'extends' must appear at the top level of a template",
                start,
            )
        if self._current.type != TokenType.STRING:
            raise self._error(
                "'extends' needs a string literal template name",
                suggestion='Use {% extends "base.txt" %}',
                code=ErrorCode.INVALID_EXPRESSION,
            )
        parent = str(self._advance().value)
        self._expect(TokenType.BLOCK_END)

        if self._extends is not None:
            raise self._error(
                f"Template already extends '{self._extends.template}'",
                start,
                suggestion="A template can extend only one parent",
            )
        self._extends = Extends(lineno=start.lineno, col_offset=start.col_offset, template=parent)
        return None

    def _parse_context_modifier(self, default: bool) -> bool:
        """Parse an optional ``with context`` / ``without context`` suffix."""
        if not self._match_name("with", "without"):
            return default
        keyword = self._advance().value
        if not self._match_name("context"):
            raise self._error(
                f"Expected 'context' after '{keyword}'",
                suggestion=f"Use '{keyword} context'",
            )
        self._advance()
        return keyword == "with"

    def _parse_include(self) -> Include:
        """Parse {% include "partial.txt" [ignore missing] [with|without context] %}."""
        start = self._advance()  # consume 'include'
        template = self._parse_expression()

        ignore_missing = False
        if self._match_name("ignore"):
            self._advance()
            if not self._match_name("missing"):
                raise self._error(
                    "Expected 'missing' after 'ignore'",
                    suggestion="Use '{% include \"x.txt\" ignore missing %}'",
                )
            self._advance()
            ignore_missing = True

        with_context = self._parse_context_modifier(default=True)
        self._expect(TokenType.BLOCK_END)

        return Include(
            lineno=start.lineno,
            col_offset=start.col_offset,
            template=template,
            with_context=with_context,
            ignore_missing=ignore_missing,
        )

    def _parse_import(self) -> Import:
        """Parse {% import "macros.txt" as m [with context] %}."""
        start = self._advance()  # consume 'import'
        template = self._parse_expression()

        if not self._match_name("as"):
            raise self._error("Expected 'as' after template name in import")
        self._advance()
        target = self._expect_name("alias name")
        with_context = self._parse_context_modifier(default=False)
        self._expect(TokenType.BLOCK_END)

        return Import(
            lineno=start.lineno,
            col_offset=start.col_offset,
            template=template,
            target=target,
            with_context=with_context,
        )

    def _parse_from_import(self) -> FromImport:
        """Parse {% from "macros.txt" import name1, name2 as alias [with context] %}."""
        start = self._advance()  # consume 'from'
        template = self._parse_expression()

        if not self._match_name("import"):
            raise self._error("Expected 'import' after template name")
        self._advance()

        names: list[tuple[str, str | None]] = []
        while True:
            if self._match_name("with", "without") and names:
                break
            name = self._expect_name("name to import")
            alias: str | None = None
            if self._match_name("as"):
                self._advance()
                alias = self._expect_name("alias name")
            names.append((name, alias))
            if not self._match(TokenType.COMMA):
                break
            self._advance()

        with_context = self._parse_context_modifier(default=False)
        self._expect(TokenType.BLOCK_END)

        return FromImport(
            lineno=start.lineno,
            col_offset=start.col_offset,
            template=template,
            names=tuple(names),
            with_context=with_context,
        )
