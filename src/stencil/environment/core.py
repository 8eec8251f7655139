"""Environment: configuration, registries and the render entry point.

The Environment is the central configuration object. It holds the
lexer options, the undefined policy, filters, tests, globals and the
template registry, and it is what every Template renders through.

Thread-Safety:
    Filters, tests and templates are replaced copy-on-write, so renders
    running on other threads always see a complete map. Registration is
    meant to happen during setup; concurrent writers to the same name must
    be serialized by the caller.

Example:
    >>> env = Environment()
    >>> env.register_template("base.txt", "<{% block body %}{% endblock %}>")
    <Template base.txt>
    >>> env.register_template("page.txt", '{% extends "base.txt" %}{% block body %}{{ x }}{% endblock %}')
    <Template page.txt>
    >>> env.render("page.txt", x=1)
    '<1>'
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from difflib import get_close_matches
from typing import Any, TypeVar

from stencil.environment.exceptions import RenderError, TemplateError
from stencil.environment.filters import DEFAULT_FILTERS
from stencil.environment.globals import DEFAULT_GLOBALS
from stencil.environment.registry import FilterRegistry, TemplateRegistry
from stencil.environment.tests import DEFAULT_TESTS
from stencil.lexer import Lexer, LexerConfig
from stencil.parser import Parser
from stencil.template.core import ResolvedTemplate, Template

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

UNDEFINED_POLICIES = ("lenient", "strict")


def _suggest(name: str, candidates: Any) -> str | None:
    matches = get_close_matches(name, list(candidates), n=1, cutoff=0.6)
    return f"Did you mean '{matches[0]}'?" if matches else None


@dataclass
class Environment:
    """Central configuration and template registry.

    Attributes:
        autoescape: HTML-escape output; a bool or ``callable(name) -> bool``
        undefined: ``"lenient"`` (missing values are Undefined) or
            ``"strict"`` (missing values raise UndefinedError)
        trim_blocks: Drop the first newline after a block tag
        lstrip_blocks: Strip whitespace before a block tag on its line
        keep_trailing_newline: Keep the source's final newline
        max_include_depth: Include/import recursion limit
        globals: Variables available in every template

    Raises:
        ValueError: If ``undefined`` is not a known policy
    """

    autoescape: bool | Callable[[str | None], bool] = False
    undefined: str = "lenient"
    trim_blocks: bool = False
    lstrip_blocks: bool = False
    keep_trailing_newline: bool = False
    max_include_depth: int = 50
    globals: dict[str, Any] = field(default_factory=dict)

    _filters: dict[str, Callable[..., Any]] = field(init=False, repr=False)
    _tests: dict[str, Callable[..., Any]] = field(init=False, repr=False)
    _registry: TemplateRegistry = field(init=False, repr=False)
    _lexer_config: LexerConfig = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.undefined not in UNDEFINED_POLICIES:
            raise ValueError(
                f"undefined must be one of {', '.join(UNDEFINED_POLICIES)}, got {self.undefined!r}"
            )
        if self.max_include_depth < 1:
            raise ValueError(f"max_include_depth must be positive, got {self.max_include_depth}")
        self.globals = {**DEFAULT_GLOBALS, **(self.globals or {})}
        self._filters = DEFAULT_FILTERS.copy()
        self._tests = DEFAULT_TESTS.copy()
        self._registry = TemplateRegistry(self)
        self._lexer_config = LexerConfig(
            trim_blocks=self.trim_blocks,
            lstrip_blocks=self.lstrip_blocks,
            keep_trailing_newline=self.keep_trailing_newline,
        )

    @property
    def strict(self) -> bool:
        return self.undefined == "strict"

    # ─────────────────────────────────────────────────────────────────────────
    # Filters, tests and globals
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def filters(self) -> FilterRegistry:
        """Dict-like view of the filters (``env.filters["name"] = func``)."""
        return FilterRegistry(self, "_filters")

    @property
    def tests(self) -> FilterRegistry:
        """Dict-like view of the tests (``env.tests["name"] = func``)."""
        return FilterRegistry(self, "_tests")

    def register_filter(self, name: str, func: Callable[..., Any]) -> None:
        """Register a filter; it receives the piped value first."""
        self.filters[name] = func

    def register_test(self, name: str, func: Callable[..., Any]) -> None:
        """Register a test for ``value is name(args)``."""
        self.tests[name] = func

    def filter(self, name: str | None = None) -> Callable[[F], F]:
        """Decorator to register a filter.

        Example:
            >>> @env.filter()
            ... def double(value):
            ...     return value * 2
        """

        def decorator(func: F) -> F:
            self.register_filter(name or func.__name__, func)
            return func

        return decorator

    def test(self, name: str | None = None) -> Callable[[F], F]:
        """Decorator to register a test.

        Example:
            >>> @env.test("prime")
            ... def is_prime(value):
            ...     return value > 1 and all(value % i for i in range(2, value))
        """

        def decorator(func: F) -> F:
            self.register_test(name or func.__name__, func)
            return func

        return decorator

    def add_global(self, name: str, value: Any) -> None:
        globals_ = self.globals.copy()
        globals_[name] = value
        self.globals = globals_
        logger.debug("Registered global %r", name)

    def call_filter(self, name: str, value: Any, *args: Any, **kwargs: Any) -> Any:
        """Apply a registered filter from Python code.

        Raises:
            KeyError: If no filter is registered under ``name``
        """
        func = self._filters[name]
        if getattr(func, "pass_environment", False):
            return func(self, value, *args, **kwargs)
        return func(value, *args, **kwargs)

    def call_test(self, name: str, value: Any, *args: Any, **kwargs: Any) -> bool:
        """Apply a registered test from Python code.

        Raises:
            KeyError: If no test is registered under ``name``
        """
        func = self._tests[name]
        if getattr(func, "pass_environment", False):
            return bool(func(self, value, *args, **kwargs))
        return bool(func(value, *args, **kwargs))

    def suggest_filter(self, name: str) -> str | None:
        return _suggest(name, self._filters)

    def suggest_test(self, name: str) -> str | None:
        return _suggest(name, self._tests)

    def select_autoescape(self, name: str | None) -> bool:
        """Whether output of template ``name`` is HTML-escaped."""
        if callable(self.autoescape):
            return bool(self.autoescape(name))
        return bool(self.autoescape)

    # ─────────────────────────────────────────────────────────────────────────
    # Templates
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def registry(self) -> TemplateRegistry:
        return self._registry

    def compile(self, source: str, name: str | None = None) -> Template:
        """Lex and parse ``source`` into a Template without registering it.

        Raises:
            LexError: Malformed delimiters or tokens
            ParseError: Malformed statements or expressions
        """
        tokens = Lexer(source, self._lexer_config, name=name).tokenize()
        ast = Parser(tokens, name, source).parse()
        return Template(self, name, source, ast)

    def register_template(self, name: str, source: str) -> Template:
        """Parse and register ``source`` under ``name``, replacing any prior entry.

        Raises:
            LexError: Malformed delimiters or tokens
            ParseError: Malformed statements or expressions
        """
        return self._registry.register(name, source)

    def get_template(self, name: str) -> Template:
        """Look up a registered template.

        Raises:
            TemplateNotFoundError: If ``name`` was never registered
        """
        return self._registry.get(name)

    def from_string(self, source: str, name: str | None = None) -> Template:
        """Compile an unregistered template.

        It can still extend, include and import registered templates.
        """
        return self.compile(source, name)

    def resolve(self, name: str) -> ResolvedTemplate:
        """Resolve a registered template's inheritance chain.

        Raises:
            TemplateNotFoundError: ``name`` or an ancestor is missing
            CircularInheritanceError: The ``extends`` chain loops
        """
        return self._registry.resolve(name)

    def render(
        self, name: str, context: Mapping[str, Any] | None = None, /, **kwargs: Any
    ) -> str:
        """Render registered template ``name``.

        Raises:
            RenderError: wrapping the first error encountered, including a
                missing template or a cyclic ``extends`` chain
        """
        try:
            template = self.get_template(name)
        except TemplateError as exc:
            raise RenderError(exc, template_name=name) from exc
        return self.render_template(template, {**(context or {}), **kwargs})

    def render_template(self, template: Template, context: Mapping[str, Any]) -> str:
        """Resolve ``template`` and render it with ``context``.

        Raises:
            RenderError: wrapping the first error encountered
        """
        from stencil.renderer import Renderer

        try:
            if template.name is not None and self._registry.find(template.name) is template:
                resolved = self._registry.resolve(template.name)
            else:
                resolved = self._registry.resolve_template(template)
        except TemplateError as exc:
            raise RenderError(exc, template_name=template.display_name) from exc
        return Renderer(self, resolved).render(context)
