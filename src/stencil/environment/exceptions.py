"""Exceptions for the stencil template engine.

Exception Hierarchy:
TemplateError (base)
├── TemplateSyntaxError       # Lex/parse-time error
│   ├── LexError              # Unterminated delimiter, bad character (stencil.lexer)
│   └── ParseError            # Unexpected token, unmatched block (stencil.parser.errors)
├── ResolveError              # Registry lookup / inheritance failure
│   ├── TemplateNotFoundError # Unknown template name
│   └── CircularInheritanceError
├── EvalError                 # Expression evaluation failure
│   ├── UndefinedError        # Undefined variable access
│   └── NoneComparisonError   # Attempted None comparison (sorting)
└── RenderError               # Wraps the first error hit during render()

Error Messages:
Errors carry the template name and line, a source snippet where the
source is known, and a hint when there is an obvious fix:

    ```
    S-EVL-001: Undefined variable 'titl' in article.html:5
       |
    >  5 | <h1>{{ titl }}</h1>
       |
      Hint: Did you mean 'title'? Or use {{ titl | default('') }}
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from enum import Enum
from typing import Any

from stencil.environment import terminal

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------


class ErrorCode(Enum):
    """Searchable error codes for stencil errors.

    Format: S-{CATEGORY}-{NUMBER}
    Categories: LEX (lexer), PAR (parser), RES (registry resolution),
    EVL (evaluation), RND (render wrapper)
    """

    # Lexer errors (S-LEX-xxx)
    UNCLOSED_TAG = "S-LEX-001"
    UNCLOSED_COMMENT = "S-LEX-002"
    UNCLOSED_VARIABLE = "S-LEX-003"
    UNCLOSED_STRING = "S-LEX-004"
    UNEXPECTED_CHARACTER = "S-LEX-005"

    # Parser errors (S-PAR-xxx)
    UNEXPECTED_TOKEN = "S-PAR-001"
    UNCLOSED_BLOCK = "S-PAR-002"
    INVALID_EXPRESSION = "S-PAR-003"
    UNKNOWN_TAG = "S-PAR-004"
    DUPLICATE_BLOCK = "S-PAR-005"
    MISMATCHED_END = "S-PAR-006"

    # Resolution errors (S-RES-xxx)
    TEMPLATE_NOT_FOUND = "S-RES-001"
    CIRCULAR_INHERITANCE = "S-RES-002"

    # Evaluation errors (S-EVL-xxx)
    UNDEFINED_VARIABLE = "S-EVL-001"
    UNKNOWN_FILTER = "S-EVL-002"
    UNKNOWN_TEST = "S-EVL-003"
    FILTER_ERROR = "S-EVL-004"
    ARITY = "S-EVL-005"
    TYPE_MISMATCH = "S-EVL-006"
    DIVISION_BY_ZERO = "S-EVL-007"
    NONE_COMPARISON = "S-EVL-008"
    INCLUDE_DEPTH = "S-EVL-009"
    RUNTIME_ERROR = "S-EVL-010"

    # Render wrapper (S-RND-xxx)
    RENDER_FAILED = "S-RND-001"

    @property
    def category(self) -> str:
        """Error category (e.g., 'lexer', 'parser', 'evaluation')."""
        prefix = self.value.split("-")[1]
        return {
            "LEX": "lexer",
            "PAR": "parser",
            "RES": "resolution",
            "EVL": "evaluation",
            "RND": "render",
        }.get(prefix, "unknown")


# ---------------------------------------------------------------------------
# Source snippets
# ---------------------------------------------------------------------------


def format_template_stack(stack: list[tuple[str, int]] | None) -> str:
    """Format the include/extends chain for error messages.

    Example:
        >>> print(format_template_stack([("base.txt", 4), ("nav.txt", 2)]))
        Template stack:
          • base.txt:4
          • nav.txt:2
    """
    if not stack:
        return ""

    lines = [terminal.dim_text("Template stack:")]
    for template_name, line_num in stack:
        lines.append(f"  • {terminal.location(f'{template_name}:{line_num}')}")
    return "\n".join(lines)


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template source context around an error line.

    Attributes:
        lines: Tuple of (line_number, line_content) pairs around the error.
        error_line: The 1-based line number where the error occurred.
        column: Optional column offset for caret pointer.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int
    column: int | None = None

    def format(self) -> str:
        """Format snippet in Rust-inspired diagnostic style with colors."""
        parts: list[str] = [terminal.dim_text("   |")]
        for lineno, content in self.lines:
            is_error = lineno == self.error_line
            parts.append(terminal.format_source_line(lineno, content, is_error=is_error))
            if is_error and self.column is not None:
                caret = " " * self.column + "^"
                parts.append(f"{terminal.dim_text('     |')} {terminal.error_line(caret)}")
        parts.append(terminal.dim_text("   |"))
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 2,
    column: int | None = None,
) -> SourceSnippet:
    """Build a SourceSnippet from template source.

    Args:
        source: Full template source text.
        error_line: 1-based line number of the error.
        context_lines: Number of lines to show before/after the error line.
        column: Optional column offset for caret pointer.
    """
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line, column=column)


def _location(name: str | None, lineno: int | None, col_offset: int | None = None) -> str:
    loc = name or "<template>"
    if lineno:
        loc += f":{lineno}"
        if col_offset is not None:
            loc += f":{col_offset}"
    return loc


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class TemplateError(Exception):
    """Base exception for all stencil template errors.

    Enables broad exception handling:

        >>> try:
        ...     env.render("page.txt", ctx)
        ... except TemplateError as e:
        ...     log.error("Template error: %s", e)

    Attributes:
        code: ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format error as a structured, human-readable summary."""
        header = str(self)
        if self.code and self.code.value not in header:
            header = f"{self.code.value}: {header}"
        return header


class TemplateSyntaxError(TemplateError):
    """Parse-time syntax error in template source.

    When ``source`` and ``lineno`` are provided, the error message includes
    a source snippet with the offending line. If ``col_offset`` is also
    given, a caret (``^``) points at the exact column.
    """

    code: ErrorCode | None = ErrorCode.UNEXPECTED_TOKEN

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        name: str | None = None,
        source: str | None = None,
        col_offset: int | None = None,
        suggestion: str | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.lineno = lineno
        self.name = name
        self.source = source
        self.col_offset = col_offset
        self.suggestion = suggestion
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    def _snippet(self) -> SourceSnippet | None:
        if self.source and self.lineno:
            return build_source_snippet(
                self.source, self.lineno, context_lines=0, column=self.col_offset
            )
        return None

    def _format_message(self) -> str:
        location = _location(self.name, self.lineno, self.col_offset)
        parts = [f"Syntax Error: {self.message}", f"  --> {terminal.location(location)}"]
        snippet = self._snippet()
        if snippet is not None:
            parts.append(snippet.format())
        if self.suggestion:
            parts.append(f"  {terminal.hint('Suggestion:')} {self.suggestion}")
        return "\n".join(parts)

    def format_compact(self) -> str:
        """Format syntax error as structured terminal diagnostic."""
        parts = [
            terminal.format_error_header(self.code.value if self.code else None, self.message),
            f"  --> {terminal.location(_location(self.name, self.lineno))}",
        ]
        snippet = self._snippet()
        if snippet is not None:
            parts.append(snippet.format())
        if self.suggestion:
            parts.append(f"  {terminal.hint('Hint:')} {self.suggestion}")
        return "\n".join(parts)


class ResolveError(TemplateError):
    """A template name could not be resolved to a renderable template."""

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND


class TemplateNotFoundError(ResolveError):
    """No template is registered under the requested name.

    Example:
        >>> env.get_template("nonexistent.txt")
        TemplateNotFoundError: Template 'nonexistent.txt' not found
    """

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND

    def __init__(self, name: str, available: frozenset[str] | None = None):
        self.name = name
        msg = f"Template '{name}' not found"
        if available:
            matches = get_close_matches(name, available, n=1, cutoff=0.6)
            if matches:
                msg += f". Did you mean '{terminal.suggestion(matches[0])}'?"
        super().__init__(msg)


class CircularInheritanceError(ResolveError):
    """The ``extends`` chain loops back on itself.

    ``chain`` holds every template visited, ending with the repeated name:
    ``("a.txt", "b.txt", "a.txt")``.
    """

    code: ErrorCode | None = ErrorCode.CIRCULAR_INHERITANCE

    def __init__(self, chain: tuple[str, ...]):
        self.chain = chain
        super().__init__(f"Circular template inheritance: {' -> '.join(chain)}")


class EvalError(TemplateError):
    """Expression evaluation failure with debugging context.

    Output Format:
            ```
            Eval Error: unsupported operand types for +: 'str' and 'int'
              Location: page.txt:3
              Expression: {{ title + 1 }}
              Suggestion: Use ~ to concatenate strings
            ```

    Attributes:
        message: Error description
        expression: Template expression that failed
        values: Dict of variable names → values for context
        template_name: Name of the template
        lineno: Line number in template source
        suggestion: Actionable fix suggestion
    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        expression: str | None = None,
        values: dict[str, Any] | None = None,
        template_name: str | None = None,
        lineno: int | None = None,
        suggestion: str | None = None,
        source_snippet: SourceSnippet | None = None,
        template_stack: list[tuple[str, int]] | None = None,
    ):
        self.message = message
        if code is not None:
            self.code = code
        self.expression = expression
        self.values = values or {}
        self.template_name = template_name
        self.lineno = lineno
        self.suggestion = suggestion
        self.source_snippet = source_snippet
        self.template_stack = template_stack or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [f"Eval Error: {self.message}"]

        if self.template_name or self.lineno:
            parts.append(
                f"  Location: {terminal.location(_location(self.template_name, self.lineno))}"
            )

        if self.source_snippet:
            parts.append(self.source_snippet.format())

        if self.expression:
            parts.append(f"  Expression: {self.expression}")

        if self.values:
            parts.append("  Values:")
            for name, value in self.values.items():
                value_repr = repr(value)
                if len(value_repr) > 80:
                    value_repr = value_repr[:77] + "..."
                parts.append(f"    {name} = {value_repr} ({type(value).__name__})")

        if self.suggestion:
            parts.append(f"  {terminal.hint('Suggestion:')} {self.suggestion}")

        return "\n".join(parts)

    def format_compact(self) -> str:
        """Format evaluation error as structured terminal diagnostic."""
        parts = [terminal.format_error_header(self.code.value if self.code else None, self.message)]
        parts.append(
            f"  Location: {terminal.location(_location(self.template_name, self.lineno))}"
        )
        if self.source_snippet:
            parts.append(self.source_snippet.format())
        if self.template_stack:
            parts.append("")
            parts.append(format_template_stack(self.template_stack))
        if self.suggestion:
            parts.append(f"  {terminal.hint('Hint:')} {self.suggestion}")
        return "\n".join(parts)


class NoneComparisonError(EvalError):
    """Attempted to compare None values, typically during sorting.

    Example:
        >>> {{ posts | sort(attribute='weight') }}
        NoneComparisonError: Cannot compare NoneType with int when sorting by 'weight'
    """

    code: ErrorCode | None = ErrorCode.NONE_COMPARISON

    def __init__(
        self,
        left_value: Any,
        right_value: Any,
        attribute: str | None = None,
        **kwargs: Any,
    ):
        msg = f"Cannot compare {type(left_value).__name__} with {type(right_value).__name__}"
        if attribute:
            msg += f" when sorting by '{attribute}'"
            suggestion = f"Ensure all items have '{attribute}' set, or filter out None values"
        else:
            suggestion = "Use | default(fallback) to replace None values before sorting"
        super().__init__(
            msg,
            values={"left": left_value, "right": right_value},
            suggestion=suggestion,
            **kwargs,
        )


class UndefinedError(EvalError):
    """Raised when an undefined value is used.

    In strict mode this fires as soon as an unknown name is looked up. In
    lenient mode the lookup yields an ``Undefined`` sentinel, and this error
    fires only when the sentinel is used in a way that needs a real value
    (arithmetic, attribute access, calls).

    If ``available_names`` is provided, a "Did you mean?" suggestion is
    included when a close match is found.

    To fix:
        - Pass the variable in render(): env.render("page.txt", {"var": ...})
        - Use the default filter: {{ var | default("fallback") }}
    """

    code: ErrorCode | None = ErrorCode.UNDEFINED_VARIABLE

    def __init__(
        self,
        name: str,
        template: str | None = None,
        lineno: int | None = None,
        available_names: frozenset[str] | None = None,
        source_snippet: SourceSnippet | None = None,
        template_stack: list[tuple[str, int]] | None = None,
        operation: str | None = None,
    ):
        self.name = name
        self.operation = operation
        self._available_names = available_names
        message = f"Undefined variable '{name}'"
        if operation:
            message += f" used in {operation}"
        super().__init__(
            message,
            template_name=template,
            lineno=lineno,
            suggestion=self._hint(),
            source_snippet=source_snippet,
            template_stack=template_stack,
        )

    def _hint(self) -> str:
        hint = f"Use {{{{ {self.name} | default('') }}}} for optional variables"
        if self._available_names:
            matches = get_close_matches(self.name, self._available_names, n=1, cutoff=0.6)
            if matches:
                hint = f"Did you mean '{terminal.suggestion(matches[0])}'? Or u" + hint[1:]
        return hint

    def _format_message(self) -> str:
        msg = f"{self.message} in {terminal.location(_location(self.template_name, self.lineno))}"
        if self.source_snippet:
            msg += "\n" + self.source_snippet.format()
        if self.template_stack:
            msg += "\n\n" + format_template_stack(self.template_stack)
        if self.suggestion:
            msg += f"\n  {terminal.hint('Hint:')} {self.suggestion}"
        return msg


class RenderError(TemplateError):
    """Top-level render failure wrapping the first error encountered.

    ``Environment.render`` never lets a bare lex, parse, resolve or eval
    error escape: it raises ``RenderError`` from the original so callers
    can handle one type while still reaching the cause via ``.error``
    (also available as ``__cause__``).

    Attributes:
        error: The wrapped TemplateError
        template_name: Template being rendered when the error occurred
        lineno: Line of the node that failed, when known
        template_stack: Include chain leading to the failure
    """

    code: ErrorCode | None = ErrorCode.RENDER_FAILED

    def __init__(
        self,
        error: TemplateError,
        *,
        template_name: str | None = None,
        lineno: int | None = None,
        template_stack: list[tuple[str, int]] | None = None,
    ):
        self.error = error
        self.template_name = template_name
        self.lineno = lineno
        self.template_stack = template_stack or []
        self.message = getattr(error, "message", None) or str(error).splitlines()[0]
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        kind = type(self.error).__name__
        loc = _location(self.template_name, self.lineno)
        parts = [f"Render Error in {terminal.location(loc)}: {kind}: {self.message}"]
        if self.template_stack:
            parts.append(format_template_stack(self.template_stack))
        return "\n".join(parts)

    def format_compact(self) -> str:
        """Delegate to the wrapped error, prefixed with the render location."""
        loc = _location(self.template_name, self.lineno)
        return f"{terminal.dim_text('while rendering')} {terminal.location(loc)}\n" + (
            self.error.format_compact()
        )
