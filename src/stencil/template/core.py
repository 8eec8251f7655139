"""Template objects and resolved inheritance chains.

A ``Template`` is one parsed source. Rendering never uses it alone: the
registry first resolves it into a ``ResolvedTemplate``, which records the
whole ``extends`` chain and, for every block name, the stack of
definitions from most-derived to root.
"""

from __future__ import annotations

import weakref
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from stencil.analysis import collect_blocks

if TYPE_CHECKING:
    from stencil.environment.core import Environment
    from stencil.nodes import Block, Node
    from stencil.nodes import Template as TemplateNode


class Template:
    """A parsed template ready for rendering.

    Templates are immutable after construction and safe to render from
    several threads at once; every ``render()`` call builds its own scope
    arena and output buffer.

    Memory Safety:
        Holds the Environment through ``weakref.ref`` so the
        ``Environment -> registry -> Template`` cycle does not leak.

    Attributes:
        name: Registry name, or None for an inline template
        source: Original source text
        ast: Root ``nodes.Template``
        blocks: Read-only mapping of every block defined here, nested included
        parent: Name of the template this one extends, or None

    Example:
        >>> env = Environment()
        >>> env.from_string("Hello, {{ name | upper }}!").render(name="World")
        'Hello, WORLD!'
    """

    __slots__ = ("_ast", "_blocks", "_env_ref", "_name", "_source")

    def __init__(
        self,
        env: Environment,
        name: str | None,
        source: str,
        ast: TemplateNode,
    ):
        self._env_ref: weakref.ref[Environment] = weakref.ref(env)
        self._name = name
        self._source = source
        self._ast = ast
        self._blocks: Mapping[str, Block] = MappingProxyType(collect_blocks(ast.body))

    @property
    def _env(self) -> Environment:
        env = self._env_ref()
        if env is None:
            raise RuntimeError(
                f"Environment has been garbage collected (template: {self._name or 'unknown'})"
            )
        return env

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def source(self) -> str:
        return self._source

    @property
    def ast(self) -> TemplateNode:
        return self._ast

    @property
    def blocks(self) -> Mapping[str, Block]:
        return self._blocks

    @property
    def parent(self) -> str | None:
        extends = self._ast.extends
        return extends.template if extends is not None else None

    @property
    def display_name(self) -> str:
        return self._name or "<string>"

    def render(self, *args: Any, **kwargs: Any) -> str:
        """Render with a context dict and/or keyword variables.

        Raises:
            RenderError: wrapping the first error encountered.

        Example:
            >>> t.render(name="World")
            'Hello, World!'
            >>> t.render({"name": "World"})
            'Hello, World!'
        """
        ctx: dict[str, Any] = {}
        if args:
            if len(args) == 1 and isinstance(args[0], Mapping):
                ctx.update(args[0])
            else:
                raise TypeError(
                    f"render() takes at most 1 positional argument (a mapping), got {len(args)}"
                )
        ctx.update(kwargs)
        return self._env.render_template(self, ctx)

    def __repr__(self) -> str:
        return f"<Template {self._name or '(inline)'}>"


@dataclass(frozen=True, slots=True)
class BlockLayer:
    """One definition of a block, with the template that defines it."""

    template: Template
    block: Block

    @property
    def body(self) -> tuple[Node, ...]:
        return tuple(self.block.body)


@dataclass(frozen=True, slots=True)
class ResolvedTemplate:
    """An inheritance chain flattened for rendering.

    Attributes:
        chain: Templates from the requested one (most-derived) up to the root
        blocks: Block name to its layers, most-derived first
    """

    chain: tuple[Template, ...]
    blocks: Mapping[str, tuple[BlockLayer, ...]]

    @property
    def template(self) -> Template:
        """The template that was asked for."""
        return self.chain[0]

    @property
    def root(self) -> Template:
        """The ancestor whose body is actually rendered."""
        return self.chain[-1]

    @property
    def body(self) -> tuple[Node, ...]:
        return tuple(self.root.ast.body)

    @property
    def name(self) -> str | None:
        return self.template.name

    def layers(self, name: str) -> tuple[BlockLayer, ...]:
        return self.blocks.get(name, ())
