"""Static analysis over the stencil AST."""

from stencil.analysis.visitor import collect_blocks, iter_child_nodes, references_names

__all__ = ["collect_blocks", "iter_child_nodes", "references_names"]
