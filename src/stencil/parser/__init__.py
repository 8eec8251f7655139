"""Template parser: tokens in, immutable AST out."""

from stencil.parser.core import Parser
from stencil.parser.errors import ParseError

__all__ = ["ParseError", "Parser"]
