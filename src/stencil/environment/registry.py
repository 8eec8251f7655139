"""Filter/test views and the template registry.

``FilterRegistry`` gives a Jinja2-style dict interface over the
environment's filter and test maps. ``TemplateRegistry`` stores named
templates and resolves their ``extends`` chains.

Thread-Safety:
    Every mutation builds a new dict and swaps it in (copy-on-write), so a
    concurrent reader always sees a complete map. Writers to the same name
    must be serialized by the caller; no locks are taken here.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, ItemsView, Iterator, KeysView, ValuesView
from types import MappingProxyType
from typing import TYPE_CHECKING

from stencil.environment.exceptions import CircularInheritanceError, TemplateNotFoundError
from stencil.template.core import BlockLayer, ResolvedTemplate

if TYPE_CHECKING:
    from stencil.environment.core import Environment
    from stencil.template.core import Template

logger = logging.getLogger(__name__)


class FilterRegistry:
    """Dict-like interface for filters/tests that matches Jinja2's API.

    Supports:
        - env.filters['name'] = func
        - env.filters.update({'name': func})
        - func = env.filters['name']
        - 'name' in env.filters

    All mutations use copy-on-write for thread-safety.
    """

    __slots__ = ("_attr", "_env")

    def __init__(self, env: Environment, attr: str):
        self._env = env
        self._attr = attr

    def _get_dict(self) -> dict[str, Callable]:
        return getattr(self._env, self._attr)

    def _set_dict(self, d: dict[str, Callable]) -> None:
        setattr(self._env, self._attr, d)

    def __getitem__(self, name: str) -> Callable:
        return self._get_dict()[name]

    def __setitem__(self, name: str, func: Callable) -> None:
        if not callable(func):
            raise TypeError(f"{self._attr.strip('_')[:-1]} '{name}' must be callable")
        new = self._get_dict().copy()
        new[name] = func
        self._set_dict(new)
        logger.debug("Registered %s %r", self._attr.strip("_")[:-1], name)

    def __delitem__(self, name: str) -> None:
        new = self._get_dict().copy()
        del new[name]
        self._set_dict(new)

    def __contains__(self, name: object) -> bool:
        return name in self._get_dict()

    def __iter__(self) -> Iterator[str]:
        return iter(self._get_dict())

    def __len__(self) -> int:
        return len(self._get_dict())

    def get(self, name: str, default: Callable | None = None) -> Callable | None:
        return self._get_dict().get(name, default)

    def update(self, mapping: dict[str, Callable]) -> None:
        """Batch update (Jinja2 compatibility)."""
        new = self._get_dict().copy()
        new.update(mapping)
        self._set_dict(new)

    def copy(self) -> dict[str, Callable]:
        return self._get_dict().copy()

    def keys(self) -> KeysView[str]:
        return self._get_dict().keys()

    def values(self) -> ValuesView[Callable]:
        return self._get_dict().values()

    def items(self) -> ItemsView[str, Callable]:
        return self._get_dict().items()


class TemplateRegistry:
    """Named templates plus a cache of resolved inheritance chains.

    ``register`` compiles source through the owning Environment (so its
    lexer options apply) and replaces any previous template of that name.
    Every registration clears the resolution cache, since any chain may
    pass through the replaced template.

    Example:
        >>> registry = env.registry
        >>> registry.register("base.txt", "[{% block body %}{% endblock %}]")
        <Template base.txt>
        >>> registry.register("page.txt", '{% extends "base.txt" %}{% block body %}hi{% endblock %}')
        <Template page.txt>
        >>> [t.name for t in registry.resolve("page.txt").chain]
        ['page.txt', 'base.txt']
    """

    __slots__ = ("_env", "_resolved", "_templates")

    def __init__(self, env: Environment):
        self._env = env
        self._templates: dict[str, Template] = {}
        self._resolved: dict[str, ResolvedTemplate] = {}

    def register(self, name: str, source: str) -> Template:
        """Parse ``source`` and store it under ``name``.

        Raises:
            LexError: Malformed delimiters or tokens
            ParseError: Malformed statements or expressions
        """
        template = self._env.compile(source, name)
        replaced = name in self._templates
        templates = self._templates.copy()
        templates[name] = template
        self._templates = templates
        if self._resolved:
            logger.debug("Resolution cache cleared (%d entries)", len(self._resolved))
        self._resolved = {}
        logger.debug("%s template %r", "Replaced" if replaced else "Registered", name)
        return template

    def get(self, name: str) -> Template:
        """Look up a registered template.

        Raises:
            TemplateNotFoundError: If ``name`` was never registered
        """
        try:
            return self._templates[name]
        except KeyError:
            raise TemplateNotFoundError(name, frozenset(self._templates)) from None

    def find(self, name: str) -> Template | None:
        """Registered template ``name``, or None."""
        return self._templates.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def names(self) -> list[str]:
        """Registered names, sorted."""
        return sorted(self._templates)

    def clear_cache(self) -> None:
        self._resolved = {}

    def resolve(self, name: str) -> ResolvedTemplate:
        """Resolve a registered template's inheritance chain.

        Raises:
            TemplateNotFoundError: ``name`` or an ancestor is not registered
            CircularInheritanceError: The chain loops back on itself
        """
        cached = self._resolved.get(name)
        if cached is not None:
            return cached
        resolved = self.resolve_template(self.get(name))
        resolved_map = self._resolved.copy()
        resolved_map[name] = resolved
        self._resolved = resolved_map
        return resolved

    def resolve_template(self, template: Template) -> ResolvedTemplate:
        """Resolve any template, registered or inline, without caching.

        The chain is walked iteratively from child to parent. A name seen
        twice means a cycle, reported with the full path.
        """
        chain: list[Template] = [template]
        visited: list[str] = [template.display_name]
        parent = template.parent
        while parent is not None:
            if parent in visited:
                raise CircularInheritanceError((*visited, parent))
            current = self.get(parent)
            chain.append(current)
            visited.append(parent)
            parent = current.parent

        blocks: dict[str, list[BlockLayer]] = {}
        for member in chain:
            for block_name, block in member.blocks.items():
                blocks.setdefault(block_name, []).append(BlockLayer(member, block))

        logger.debug("Resolved %s", " -> ".join(visited))
        return ResolvedTemplate(
            chain=tuple(chain),
            blocks=MappingProxyType({k: tuple(v) for k, v in blocks.items()}),
        )
