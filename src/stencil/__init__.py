"""Stencil: a small Jinja-compatible template engine.

Quickstart:
    >>> from stencil import Environment
    >>> env = Environment()
    >>> env.from_string("Hello {{ name }}!").render(name="World")
    'Hello World!'

Registered templates and inheritance:
    >>> env.register_template("base.txt", "[{% block body %}{% endblock %}]")
    <Template base.txt>
    >>> env.register_template("page.txt", '{% extends "base.txt" %}{% block body %}hi{% endblock %}')
    <Template page.txt>
    >>> env.render("page.txt")
    '[hi]'

Architecture:
Template Source -> Lexer -> Parser -> Stencil AST -> Registry (resolves extends) -> Renderer

Pipeline stages:
1. **Lexer**: Splits source into text and tag tokens, applying whitespace control
2. **Parser**: Builds an immutable AST with line and column on every node
3. **Registry**: Stores templates by name and flattens ``extends`` chains
4. **Renderer**: Walks the AST against an arena of scope frames

Undefined policy:
``Environment(undefined="lenient")`` (the default) renders missing values as
empty strings and fails only when they are used for arithmetic, calls or
attribute access. ``Environment(undefined="strict")`` raises
``UndefinedError`` at the first missing lookup. ``| default(...)`` and
``is defined`` work in both modes.

Errors:
``Environment.render`` raises ``RenderError`` for every failure; the
original lex, parse, resolve or eval error is its ``.error``.
"""

from stencil._types import Token, TokenType
from stencil.environment import (
    CircularInheritanceError,
    Environment,
    ErrorCode,
    EvalError,
    FilterRegistry,
    NoneComparisonError,
    RenderError,
    ResolveError,
    SourceSnippet,
    TemplateError,
    TemplateNotFoundError,
    TemplateRegistry,
    TemplateSyntaxError,
    UndefinedError,
    build_source_snippet,
    pass_context,
    pass_environment,
)
from stencil.lexer import LexError, Lexer, LexerConfig, tokenize
from stencil.parser import ParseError, Parser
from stencil.render_context import RenderContext, get_render_context, render_context
from stencil.renderer import Renderer
from stencil.template import (
    LoopContext,
    Macro,
    Markup,
    Module,
    ResolvedTemplate,
    Template,
    Undefined,
)
from stencil.utils.html import html_escape

__version__ = "0.1.0"

__all__ = [
    "CircularInheritanceError",
    "Environment",
    "ErrorCode",
    "EvalError",
    "FilterRegistry",
    "LexError",
    "Lexer",
    "LexerConfig",
    "LoopContext",
    "Macro",
    "Markup",
    "Module",
    "NoneComparisonError",
    "ParseError",
    "Parser",
    "RenderContext",
    "RenderError",
    "Renderer",
    "ResolveError",
    "ResolvedTemplate",
    "SourceSnippet",
    "Template",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRegistry",
    "TemplateSyntaxError",
    "Token",
    "TokenType",
    "Undefined",
    "UndefinedError",
    "__version__",
    "build_source_snippet",
    "get_render_context",
    "html_escape",
    "pass_context",
    "pass_environment",
    "render_context",
    "tokenize",
]
