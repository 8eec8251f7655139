"""Base node class for the stencil AST."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all AST nodes.

    Every node records where it came from so evaluation errors can point at
    the offending line. Nodes are immutable; a parsed template can be shared
    between concurrent renders.
    """

    lineno: int
    col_offset: int
