"""ANSI colouring for error diagnostics.

Colour is decided once at import time from the environment:
``FORCE_COLOR`` wins, then ``NO_COLOR`` (https://no-color.org/), then
whether stdout is a TTY. Call ``refresh()`` after changing either variable.
"""

from __future__ import annotations

import os
import re
import sys
from typing import Literal

_CODES = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "red": "\033[31m",
    "yellow": "\033[33m",
    "cyan": "\033[36m",
    "green": "\033[32m",
    "bright_red": "\033[91m",
    "bright_green": "\033[92m",
}

Style = Literal[
    "reset", "bold", "dim", "red", "yellow", "cyan", "green", "bright_red", "bright_green"
]

_ANSI_RE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


def _detect() -> bool:
    if os.environ.get("FORCE_COLOR"):
        return True
    if os.environ.get("NO_COLOR"):
        return False
    return sys.stdout.isatty()


_USE_COLORS = _detect()


def refresh() -> bool:
    """Re-read FORCE_COLOR / NO_COLOR / TTY state and return the new setting."""
    global _USE_COLORS
    _USE_COLORS = _detect()
    return _USE_COLORS


def supports_color() -> bool:
    """True when diagnostics are being coloured."""
    return _USE_COLORS


def colorize(text: str, *styles: Style) -> str:
    """Wrap ``text`` in the given ANSI styles, or return it unchanged.

    Example:
        >>> colorize("Error", "red", "bold")  # with colours on
        '\\x1b[31m\\x1b[1mError\\x1b[0m'
    """
    if not _USE_COLORS or not styles:
        return text
    prefix = "".join(_CODES.get(style, "") for style in styles)
    if not prefix:
        return text
    return f"{prefix}{text}{_CODES['reset']}"


def strip_colors(text: str) -> str:
    """Remove ANSI escape sequences."""
    return _ANSI_RE.sub("", text)


def error_code(text: str) -> str:
    return colorize(text, "bright_red", "bold")


def location(text: str) -> str:
    return colorize(text, "cyan")


def line_number(text: str) -> str:
    return colorize(text, "yellow")


def error_line(text: str) -> str:
    return colorize(text, "bright_red")


def hint(text: str) -> str:
    return colorize(text, "green")


def suggestion(text: str) -> str:
    return colorize(text, "bright_green", "bold")


def dim_text(text: str) -> str:
    return colorize(text, "dim")


def format_error_header(code: str | None, message: str) -> str:
    """``S-EVL-001: message`` with the code highlighted."""
    if code:
        return f"{error_code(code)}: {message}"
    return message


def format_source_line(lineno: int, content: str, is_error: bool = False) -> str:
    """Format one snippet line, marking the error line with ``>``."""
    marker = ">" if is_error else " "
    number = line_number(f"{marker}{lineno:>3}")
    body = error_line(content) if is_error else dim_text(content)
    return f"{number} | {body}"
