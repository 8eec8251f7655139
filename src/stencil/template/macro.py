"""Macro and module values.

A ``Macro`` is plain data: the parameter list, default expressions, body
nodes and the index of the scope frame it was defined in. The renderer
interprets it on call. Nothing here closes over renderer state.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from stencil.analysis import references_names

if TYPE_CHECKING:
    from stencil.nodes import Expr, Node
    from stencil.template.core import Template

_SPECIAL_NAMES = frozenset({"varargs", "kwargs", "caller"})


@dataclass(frozen=True, slots=True, eq=False)
class Macro:
    """A macro bound in a scope frame.

    Attributes:
        name: Macro name (``"caller"`` for a call-block body)
        params: Declared parameter names, in order
        defaults: Default expressions aligned with the trailing params
        body: Body nodes
        frame: Index of the defining frame; calls open a child of it
        template: Template the body belongs to, for error locations
        catch_varargs: Body reads ``varargs``, so extra positionals are allowed
        catch_kwargs: Body reads ``kwargs``, so unknown keywords are allowed
        caller: Body reads ``caller``
    """

    name: str
    params: tuple[str, ...]
    defaults: tuple[Expr, ...]
    body: tuple[Node, ...]
    frame: int
    template: Template | None = None
    catch_varargs: bool = False
    catch_kwargs: bool = False
    caller: bool = False

    @classmethod
    def define(
        cls,
        name: str,
        params: tuple[str, ...],
        defaults: tuple[Expr, ...],
        body: tuple[Node, ...],
        frame: int,
        template: Template | None = None,
    ) -> Macro:
        """Build a Macro, working out which special names its body uses."""
        used = references_names(body, _SPECIAL_NAMES - set(params))
        return cls(
            name=name,
            params=params,
            defaults=defaults,
            body=body,
            frame=frame,
            template=template,
            catch_varargs="varargs" in used,
            catch_kwargs="kwargs" in used,
            caller="caller" in used,
        )

    @property
    def required(self) -> tuple[str, ...]:
        """Parameters without a default."""
        return self.params[: len(self.params) - len(self.defaults)]

    def default_for(self, param: str) -> Expr | None:
        index = self.params.index(param) - len(self.required)
        return self.defaults[index] if index >= 0 else None

    def __repr__(self) -> str:
        return f"<Macro {self.name}({', '.join(self.params)})>"


@dataclass(frozen=True, slots=True, eq=False)
class Module:
    """The result of ``{% import "x" as m %}``.

    Exposes the imported template's top-level macros and variables as
    attributes. Names starting with ``_`` are private and not exported.
    """

    name: str
    exports: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        public = {k: v for k, v in self.exports.items() if not k.startswith("_")}
        object.__setattr__(self, "exports", MappingProxyType(public))

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__") or name in ("name", "exports"):
            raise AttributeError(name)
        try:
            return self.exports[name]
        except KeyError:
            raise AttributeError(f"Module '{self.name}' has no attribute '{name}'") from None

    def __contains__(self, name: object) -> bool:
        return name in self.exports

    def __iter__(self) -> Iterator[str]:
        return iter(self.exports)

    def __repr__(self) -> str:
        return f"<Module {self.name!r}>"
