"""Generic child traversal for stencil AST nodes.

Nodes are dataclasses, so children are found by walking their fields:
a field may hold a node, a sequence of nodes, ``(test, body)`` pairs
(``If.elif_``), or a ``name -> expr`` mapping (call kwargs).
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import fields
from typing import Any

from stencil.nodes import Block, Macro, Name, Node


def _iter_value(value: Any) -> Iterator[Node]:
    if isinstance(value, Node):
        yield value
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from _iter_value(item)
    elif isinstance(value, dict):
        for item in value.values():
            yield from _iter_value(item)


def iter_child_nodes(node: Node) -> Iterator[Node]:
    """Yield the direct children of ``node`` in field order."""
    for f in fields(node):
        if f.name in ("lineno", "col_offset"):
            continue
        yield from _iter_value(getattr(node, f.name))


def references_names(body: Iterable[Node], names: frozenset[str]) -> frozenset[str]:
    """Which of ``names`` are loaded somewhere in ``body``.

    Nested macro definitions are not entered; their names belong to them.
    """
    found: set[str] = set()
    stack = list(body)
    while stack:
        node = stack.pop()
        if isinstance(node, Name) and node.ctx == "load" and node.name in names:
            found.add(node.name)
        if isinstance(node, Macro):
            stack.extend(node.defaults)
            continue
        stack.extend(iter_child_nodes(node))
    return frozenset(found)


def collect_blocks(body: Iterable[Node]) -> dict[str, Block]:
    """Every ``{% block %}`` in ``body``, nested ones included, by name."""
    blocks: dict[str, Block] = {}
    stack = list(reversed(list(body)))
    while stack:
        node = stack.pop()
        if isinstance(node, Block):
            blocks.setdefault(node.name, node)
        if isinstance(node, Macro):
            continue
        stack.extend(reversed(list(iter_child_nodes(node))))
    return blocks
