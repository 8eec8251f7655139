"""Expression evaluation for the renderer.

Provides a mixin that evaluates expression nodes against a scope frame.
Node dispatch is a dict lookup on the node class name.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import inspect
import operator
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from stencil.environment.exceptions import (
    ErrorCode,
    EvalError,
    NoneComparisonError,
    TemplateError,
    build_source_snippet,
)
from stencil.environment.filters import _filter_default
from stencil.environment.tests import _test_defined, _test_undefined
from stencil.nodes import Const, FuncCall, Getattr, Getitem, Name, Slice
from stencil.render_context import get_render_context
from stencil.template.helpers import (
    Undefined,
    default_safe,
    is_defined,
    safe_getattr,
    safe_getitem,
    to_string,
    undefined_error,
)
from stencil.template.macro import Macro
from stencil.template.scope import MISSING

if TYPE_CHECKING:
    from stencil.environment.core import Environment
    from stencil.nodes import (
        BinOp,
        BoolOp,
        Compare,
        Concat,
        CondExpr,
        Dict,
        Expr,
        Filter,
        List,
        Node,
        Test,
        Tuple,
        UnaryOp,
    )
    from stencil.template.scope import ScopeArena


_BINOPS: dict[str, Callable[[Any, Any], Any]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
    "//": operator.floordiv,
    "%": operator.mod,
    "**": operator.pow,
}

_COMPARE_OPS: dict[str, Callable[[Any, Any], Any]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": lambda a, b: a in b,
    "not in": lambda a, b: a not in b,
}

_DEFAULT_FILTER_NAMES = frozenset({"default", "d"})


def describe(node: Node) -> str:
    """Short source-like description of an expression for messages."""
    if isinstance(node, Name):
        return node.name
    if isinstance(node, Getattr):
        return f"{describe(node.obj)}.{node.attr}"
    if isinstance(node, Getitem):
        if isinstance(node.key, Const):
            return f"{describe(node.obj)}[{node.key.value!r}]"
        return f"{describe(node.obj)}[...]"
    if isinstance(node, FuncCall):
        return f"{describe(node.func)}()"
    if isinstance(node, Const):
        return repr(node.value)
    return type(node).__name__.lower()


def _is_arity_error(func: Callable[..., Any], args: list[Any], kwargs: dict[str, Any]) -> bool:
    """True when ``args``/``kwargs`` cannot bind to ``func``'s signature."""
    try:
        inspect.signature(func).bind(*args, **kwargs)
    except TypeError:
        return True
    except ValueError:
        return False
    return False


class ExpressionEvaluatorMixin:
    """Evaluate expression nodes.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.
    """

    if TYPE_CHECKING:
        # Host attributes (from Renderer.__init__)
        _env: Environment
        _arena: ScopeArena
        _strict: bool
        _autoescape: bool

        # From FunctionRenderingMixin
        def _call_macro(
            self,
            macro: Macro,
            args: list[Any],
            kwargs: dict[str, Any],
            caller: Macro | None = None,
        ) -> str: ...

        # From TemplateStructureRenderingMixin
        def _render_super(self, frame: int) -> str: ...

    # ─────────────────────────────────────────────────────────────────────────
    # Dispatch
    # ─────────────────────────────────────────────────────────────────────────

    def _get_expr_dispatch(self) -> dict[str, Callable[[Any, int], Any]]:
        return {
            "Const": self._eval_const,
            "Name": self._eval_name,
            "Tuple": self._eval_tuple,
            "List": self._eval_list,
            "Dict": self._eval_dict,
            "Getattr": self._eval_getattr,
            "Getitem": self._eval_getitem,
            "FuncCall": self._eval_call,
            "Filter": self._eval_filter,
            "Test": self._eval_test,
            "BinOp": self._eval_binop,
            "UnaryOp": self._eval_unaryop,
            "Compare": self._eval_compare,
            "BoolOp": self._eval_boolop,
            "CondExpr": self._eval_condexpr,
            "Concat": self._eval_concat,
        }

    def evaluate(self, expr: Expr, frame: int) -> Any:
        """Evaluate ``expr`` in scope ``frame``.

        Raises:
            EvalError: On undefined names (strict), bad operands, unknown
                filters or tests, wrong arity, division by zero
        """
        handler = self._expr_dispatch.get(type(expr).__name__)
        if handler is None:
            raise self._error(f"Cannot evaluate {type(expr).__name__} node", expr)
        return handler(expr, frame)

    _expr_dispatch: dict[str, Callable[[Any, int], Any]]

    def _error(
        self,
        message: str,
        node: Node | None = None,
        *,
        code: ErrorCode = ErrorCode.RUNTIME_ERROR,
        suggestion: str | None = None,
        values: dict[str, Any] | None = None,
    ) -> EvalError:
        """EvalError located at ``node`` in the template being rendered."""
        ctx = get_render_context()
        lineno = node.lineno if node is not None else (ctx.line if ctx else None)
        source = ctx.source if ctx else None
        return EvalError(
            message,
            code=code,
            expression=describe(node) if node is not None else None,
            values=values,
            template_name=ctx.template_name if ctx else None,
            lineno=lineno or None,
            suggestion=suggestion,
            source_snippet=build_source_snippet(source, lineno) if source and lineno else None,
            template_stack=list(ctx.template_stack) if ctx else None,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Literals and names
    # ─────────────────────────────────────────────────────────────────────────

    def _eval_const(self, node: Const, frame: int) -> Any:
        return node.value

    def _eval_name(self, node: Name, frame: int) -> Any:
        value = self._arena.lookup(frame, node.name)
        if value is MISSING:
            if self._strict:
                raise undefined_error(node.name, available_names=self._arena.names(frame))
            return Undefined(node.name)
        return value

    def _eval_tuple(self, node: Tuple, frame: int) -> tuple[Any, ...]:
        return tuple(self.evaluate(item, frame) for item in node.items)

    def _eval_list(self, node: List, frame: int) -> list[Any]:
        return [self.evaluate(item, frame) for item in node.items]

    def _eval_dict(self, node: Dict, frame: int) -> dict[Any, Any]:
        return {
            self.evaluate(key, frame): self.evaluate(value, frame)
            for key, value in zip(node.keys, node.values, strict=True)
        }

    # ─────────────────────────────────────────────────────────────────────────
    # Access
    # ─────────────────────────────────────────────────────────────────────────

    def _check_defined(self, value: Any, node: Node) -> Any:
        if self._strict and isinstance(value, Undefined):
            raise undefined_error(describe(node))
        return value

    def _eval_getattr(self, node: Getattr, frame: int) -> Any:
        obj = self.evaluate(node.obj, frame)
        value = safe_getattr(obj, node.attr, describe(node))
        return self._check_defined(value, node)

    def _eval_getitem(self, node: Getitem, frame: int) -> Any:
        obj = self.evaluate(node.obj, frame)
        if isinstance(node.key, Slice):
            key = slice(
                *(
                    self.evaluate(part, frame) if part is not None else None
                    for part in (node.key.start, node.key.stop, node.key.step)
                )
            )
            try:
                return obj[key]
            except TypeError as exc:
                raise self._error(str(exc), node, code=ErrorCode.TYPE_MISMATCH) from exc
        key = self.evaluate(node.key, frame)
        value = safe_getitem(obj, key, describe(node))
        return self._check_defined(value, node)

    # ─────────────────────────────────────────────────────────────────────────
    # Calls, filters and tests
    # ─────────────────────────────────────────────────────────────────────────

    def _eval_args(
        self, args: Any, kwargs: Mapping[str, Expr], frame: int
    ) -> tuple[list[Any], dict[str, Any]]:
        return (
            [self.evaluate(arg, frame) for arg in args],
            {key: self.evaluate(value, frame) for key, value in kwargs.items()},
        )

    def _eval_call(self, node: FuncCall, frame: int) -> Any:
        func_node = node.func
        if (
            isinstance(func_node, Name)
            and func_node.name == "super"
            and self._arena.lookup(frame, "super") is MISSING
        ):
            if node.args or node.kwargs:
                raise self._error("super() takes no arguments", node, code=ErrorCode.ARITY)
            return self._render_super(frame)

        func = self.evaluate(func_node, frame)
        args, kwargs = self._eval_args(node.args, node.kwargs, frame)
        if node.dyn_args is not None:
            args.extend(self.evaluate(node.dyn_args, frame))
        if node.dyn_kwargs is not None:
            kwargs.update(self.evaluate(node.dyn_kwargs, frame))

        if isinstance(func, Macro):
            return self._call_macro(func, args, kwargs)
        if not isinstance(func, Undefined) and getattr(func, "pass_context", False):
            args = [self._arena.variables(frame), *args]
        return self._invoke(func, args, kwargs, node)

    def _invoke(
        self, func: Any, args: list[Any], kwargs: dict[str, Any], node: FuncCall
    ) -> Any:
        """Call a Python callable, turning its failures into EvalError."""
        if isinstance(func, Undefined):
            func(*args, **kwargs)
        name = describe(node.func)
        if not callable(func):
            raise self._error(
                f"'{name}' is not callable ({type(func).__name__})",
                node,
                code=ErrorCode.TYPE_MISMATCH,
            )
        try:
            return func(*args, **kwargs)
        except TemplateError:
            raise
        except TypeError as exc:
            code = ErrorCode.ARITY if _is_arity_error(func, args, kwargs) else ErrorCode.RUNTIME_ERROR
            raise self._error(f"{name}(): {exc}", node, code=code) from exc
        except Exception as exc:
            raise self._error(f"{name}() raised {type(exc).__name__}: {exc}", node) from exc

    def _eval_filter(self, node: Filter, frame: int) -> Any:
        if node.value is None:
            raise self._error(f"Filter '{node.name}' has no input", node)
        if node.name in _DEFAULT_FILTER_NAMES and self._env.filters.get(node.name) is _filter_default:
            args, kwargs = self._eval_args(node.args, node.kwargs, frame)
            value_node = node.value
            return default_safe(lambda: self.evaluate(value_node, frame), *args, **kwargs)
        value = self.evaluate(node.value, frame)
        return self._apply_filter(node, value, frame)

    def _apply_filter(self, node: Filter, value: Any, frame: int) -> Any:
        """Run one filter stage on ``value``."""
        func = self._env.filters.get(node.name)
        if func is None:
            raise self._error(
                f"Unknown filter '{node.name}'",
                node,
                code=ErrorCode.UNKNOWN_FILTER,
                suggestion=self._env.suggest_filter(node.name),
            )
        args, kwargs = self._eval_args(node.args, node.kwargs, frame)
        if getattr(func, "pass_environment", False):
            args = [self._env, value, *args]
        else:
            args = [value, *args]
        return self._run_callable(func, args, kwargs, node, kind="Filter")

    def _run_callable(
        self,
        func: Callable[..., Any],
        args: list[Any],
        kwargs: dict[str, Any],
        node: Node,
        kind: str,
    ) -> Any:
        name = getattr(node, "name", "?")
        try:
            return func(*args, **kwargs)
        except TemplateError:
            raise
        except TypeError as exc:
            if _is_arity_error(func, args, kwargs):
                raise self._error(
                    f"{kind} '{name}' called with wrong arguments: {exc}",
                    node,
                    code=ErrorCode.ARITY,
                ) from exc
            raise self._error(
                f"{kind} '{name}' failed: {exc}", node, code=ErrorCode.FILTER_ERROR
            ) from exc
        except Exception as exc:
            raise self._error(
                f"{kind} '{name}' failed: {type(exc).__name__}: {exc}",
                node,
                code=ErrorCode.FILTER_ERROR,
            ) from exc

    def _eval_test(self, node: Test, frame: int) -> bool:
        func = self._env.tests.get(node.name)
        if func is None:
            raise self._error(
                f"Unknown test '{node.name}'",
                node,
                code=ErrorCode.UNKNOWN_TEST,
                suggestion=self._env.suggest_test(node.name),
            )

        if func is _test_defined or func is _test_undefined:
            value_node = node.value
            result = is_defined(lambda: self.evaluate(value_node, frame))
            if func is _test_undefined:
                result = not result
        else:
            value = self.evaluate(node.value, frame)
            args, kwargs = self._eval_args(node.args, node.kwargs, frame)
            if getattr(func, "pass_environment", False):
                call_args = [self._env, value, *args]
            else:
                call_args = [value, *args]
            result = bool(self._run_callable(func, call_args, kwargs, node, kind="Test"))
        return not result if node.negated else result

    # ─────────────────────────────────────────────────────────────────────────
    # Operators
    # ─────────────────────────────────────────────────────────────────────────

    def _eval_binop(self, node: BinOp, frame: int) -> Any:
        left = self.evaluate(node.left, frame)
        right = self.evaluate(node.right, frame)
        try:
            return _BINOPS[node.op](left, right)
        except ZeroDivisionError as exc:
            raise self._error(
                "Division by zero",
                node,
                code=ErrorCode.DIVISION_BY_ZERO,
                values={"left": left, "right": right},
            ) from exc
        except TypeError as exc:
            suggestion = None
            if node.op == "+" and (isinstance(left, str) or isinstance(right, str)):
                suggestion = "Use ~ to concatenate strings: {{ a ~ b }}"
            raise self._error(
                f"unsupported operand types for {node.op}: "
                f"'{type(left).__name__}' and '{type(right).__name__}'",
                node,
                code=ErrorCode.TYPE_MISMATCH,
                suggestion=suggestion,
                values={"left": left, "right": right},
            ) from exc

    def _eval_unaryop(self, node: UnaryOp, frame: int) -> Any:
        operand = self.evaluate(node.operand, frame)
        if node.op == "not":
            return not operand
        try:
            return -operand if node.op == "-" else +operand
        except TypeError as exc:
            raise self._error(
                f"bad operand type for unary {node.op}: '{type(operand).__name__}'",
                node,
                code=ErrorCode.TYPE_MISMATCH,
            ) from exc

    def _eval_compare(self, node: Compare, frame: int) -> bool:
        left = self.evaluate(node.left, frame)
        for op, comparator in zip(node.ops, node.comparators, strict=True):
            right = self.evaluate(comparator, frame)
            try:
                result = _COMPARE_OPS[op](left, right)
            except TypeError as exc:
                if left is None or right is None:
                    ctx = get_render_context()
                    raise NoneComparisonError(
                        left,
                        right,
                        template_name=ctx.template_name if ctx else None,
                        lineno=node.lineno or None,
                    ) from exc
                raise self._error(
                    f"'{op}' not supported between '{type(left).__name__}' "
                    f"and '{type(right).__name__}'",
                    node,
                    code=ErrorCode.TYPE_MISMATCH,
                ) from exc
            if not result:
                return False
            left = right
        return True

    def _eval_boolop(self, node: BoolOp, frame: int) -> Any:
        value: Any = None
        for operand in node.values:
            value = self.evaluate(operand, frame)
            if node.op == "or" and value:
                return value
            if node.op == "and" and not value:
                return value
        return value

    def _eval_condexpr(self, node: CondExpr, frame: int) -> Any:
        if self.evaluate(node.test, frame):
            return self.evaluate(node.if_true, frame)
        if node.if_false is None:
            return Undefined("else")
        return self.evaluate(node.if_false, frame)

    def _eval_concat(self, node: Concat, frame: int) -> str:
        return "".join(to_string(self.evaluate(part, frame)) for part in node.nodes)
