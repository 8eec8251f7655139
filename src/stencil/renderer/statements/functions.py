"""Macro rendering: definitions, calls and ``{% call %}`` blocks.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Any

from stencil.environment.exceptions import ErrorCode, EvalError
from stencil.template.macro import Macro
from stencil.utils.html import Markup

if TYPE_CHECKING:
    from stencil.nodes import CallBlock, Expr, Node
    from stencil.nodes import Macro as MacroNode
    from stencil.template.core import Template
    from stencil.template.scope import ScopeArena


class FunctionRenderingMixin:
    """Mixin for defining and calling macros.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.
    """

    if TYPE_CHECKING:
        _arena: ScopeArena
        _autoescape: bool

        # From ExpressionEvaluatorMixin
        def evaluate(self, expr: Expr, frame: int) -> Any: ...
        def _error(self, message: str, node: Node | None = None, **kwargs: Any) -> EvalError: ...
        def _eval_args(
            self, args: Any, kwargs: Any, frame: int
        ) -> tuple[list[Any], dict[str, Any]]: ...

        # From BasicStatementMixin
        def _to_output(self, value: Any) -> str: ...

        # From Renderer core
        @property
        def _current_template(self) -> Template | None: ...
        def _in_template(self, template: Template | None) -> AbstractContextManager[None]: ...
        def _render_nodes(self, nodes: Sequence[Node], frame: int, buf: list[str]) -> None: ...

    def _render_macro(self, node: MacroNode, frame: int, buf: list[str]) -> None:
        macro = Macro.define(
            node.name,
            tuple(node.args),
            tuple(node.defaults),
            tuple(node.body),
            frame,
            self._current_template,
        )
        self._arena.set(frame, node.name, macro)

    def _arity_error(self, macro: Macro, message: str) -> EvalError:
        return self._error(
            f"Macro '{macro.name}' {message}",
            code=ErrorCode.ARITY,
            suggestion=f"Signature: {macro.name}({', '.join(macro.params)})",
        )

    def _call_macro(
        self,
        macro: Macro,
        args: list[Any],
        kwargs: dict[str, Any],
        caller: Macro | None = None,
    ) -> str:
        """Call ``macro`` and return its rendered body.

        Arguments bind positionally, then by keyword. Parameters still
        unbound take their defaults, evaluated inside the call frame so a
        default can refer to an earlier parameter. Extra positionals land in
        ``varargs`` and unknown keywords in ``kwargs``, but only when the
        body reads those names.

        Raises:
            EvalError: ARITY on too many, unknown or missing arguments
        """
        params = macro.params
        if len(args) > len(params) and not macro.catch_varargs:
            raise self._arity_error(
                macro, f"takes {len(params)} positional argument(s) but {len(args)} were given"
            )

        bound: dict[str, Any] = dict(zip(params, args, strict=False))
        extra_kwargs: dict[str, Any] = {}
        for key, value in kwargs.items():
            if key in params:
                if key in bound:
                    raise self._arity_error(macro, f"got multiple values for argument '{key}'")
                bound[key] = value
            elif key == "caller" and macro.caller:
                caller = value
            elif macro.catch_kwargs:
                extra_kwargs[key] = value
            else:
                raise self._arity_error(macro, f"got an unexpected keyword argument '{key}'")

        call_frame = self._arena.push(macro.frame)
        inner: list[str] = []
        with self._in_template(macro.template):
            for param in params:
                if param in bound:
                    self._arena.set(call_frame, param, bound[param])
                    continue
                default = macro.default_for(param)
                if default is None:
                    raise self._arity_error(macro, f"missing required argument '{param}'")
                self._arena.set(call_frame, param, self.evaluate(default, call_frame))

            self._arena.set(call_frame, "varargs", tuple(args[len(params) :]))
            self._arena.set(call_frame, "kwargs", extra_kwargs)
            if caller is not None:
                self._arena.set(call_frame, "caller", caller)

            self._render_nodes(macro.body, call_frame, inner)

        out = "".join(inner)
        return Markup(out) if self._autoescape else out

    def _render_call_block(self, node: CallBlock, frame: int, buf: list[str]) -> None:
        """``{% call m(args) %}body{% endcall %}``: call ``m`` with ``caller`` bound.

        The body becomes a macro named ``caller`` whose scope is the call
        site, so it sees the variables visible where the block appears.
        """
        caller = Macro.define(
            "caller",
            tuple(p.name for p in node.caller_params),
            tuple(node.caller_defaults),
            tuple(node.body),
            frame,
            self._current_template,
        )
        call = node.call
        func = self.evaluate(call.func, frame)
        args, kwargs = self._eval_args(call.args, call.kwargs, frame)
        if call.dyn_args is not None:
            args.extend(self.evaluate(call.dyn_args, frame))
        if call.dyn_kwargs is not None:
            kwargs.update(self.evaluate(call.dyn_kwargs, frame))

        if not isinstance(func, Macro):
            raise self._error(
                f"{{% call %}} needs a macro, got {type(func).__name__}",
                call,
                code=ErrorCode.TYPE_MISMATCH,
            )
        result = self._call_macro(func, args, kwargs, caller=caller)
        buf.append(self._to_output(result))
