"""AST-walking renderer.

Renderer interprets a ResolvedTemplate directly: statements append to an
output buffer, expressions evaluate against an index-based scope arena.
"""

from stencil.renderer.core import Renderer

__all__ = ["Renderer"]
