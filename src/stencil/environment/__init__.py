"""Environment package: configuration, registries, filters, tests, errors.

Public API:
    Environment: Central configuration and template registry
    TemplateRegistry: Named templates and resolved inheritance chains
    FilterRegistry: Dict-like view over filters or tests
    Exceptions: TemplateError and its subclasses
"""

from stencil.environment.exceptions import (
    CircularInheritanceError,
    ErrorCode,
    EvalError,
    NoneComparisonError,
    RenderError,
    ResolveError,
    SourceSnippet,
    TemplateError,
    TemplateNotFoundError,
    TemplateSyntaxError,
    UndefinedError,
    build_source_snippet,
)
from stencil.environment.core import Environment
from stencil.environment.filters import DEFAULT_FILTERS, pass_environment
from stencil.environment.globals import DEFAULT_GLOBALS, Cycler, Joiner, Namespace, pass_context
from stencil.environment.registry import FilterRegistry, TemplateRegistry
from stencil.environment.tests import DEFAULT_TESTS

__all__ = [
    "DEFAULT_FILTERS",
    "DEFAULT_GLOBALS",
    "DEFAULT_TESTS",
    "CircularInheritanceError",
    "Cycler",
    "Environment",
    "ErrorCode",
    "EvalError",
    "FilterRegistry",
    "Joiner",
    "Namespace",
    "NoneComparisonError",
    "RenderError",
    "ResolveError",
    "SourceSnippet",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRegistry",
    "TemplateSyntaxError",
    "UndefinedError",
    "build_source_snippet",
    "pass_context",
    "pass_environment",
]
