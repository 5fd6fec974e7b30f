"""Constant-expression evaluation over parsed expression nodes.

The resolver reduces an expression sub-tree (scalars, magic constants,
named and class constants, arrays, arithmetic/bitwise/logical operators,
ternaries and casts) into a PHP value, recording whether the whole
expression is a direct reference to a named constant.

Only the outermost node (depth 1) can mark the result as a constant
reference; ``A + 1`` evaluates ``A`` but is not itself a reference.
Unsupported node kinds evaluate to ``None``.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import structlog

from parsereflect.core.errors import NotFoundError, ResolutionError
from parsereflect.resolver import operators
from parsereflect.resolver.context import EvaluationContext
from parsereflect.syntax.nodes import (
    ArrayExpr,
    BinaryOpExpr,
    CastExpr,
    ClassConstFetchExpr,
    ConstFetchExpr,
    Expr,
    ExprKind,
    Name,
    ScalarExpr,
    TernaryExpr,
    UnaryOpExpr,
    UnsupportedExpr,
)

log = structlog.get_logger(__name__)

# Literal names that are never reported as constant references
NOT_CONSTANTS = frozenset({"true", "false", "null"})

_BINARY_FUNCTIONS: dict[ExprKind, Callable[[Any, Any], Any]] = {
    ExprKind.BINARY_PLUS: operators.add,
    ExprKind.BINARY_MINUS: operators.sub,
    ExprKind.BINARY_MUL: operators.mul,
    ExprKind.BINARY_DIV: operators.div,
    ExprKind.BINARY_MOD: operators.mod,
    ExprKind.BINARY_POW: operators.power,
    ExprKind.BINARY_BITWISE_OR: operators.bit_or,
    ExprKind.BINARY_BITWISE_AND: operators.bit_and,
    ExprKind.BINARY_BITWISE_XOR: operators.bit_xor,
    ExprKind.BINARY_SHIFT_LEFT: operators.shift_left,
    ExprKind.BINARY_SHIFT_RIGHT: operators.shift_right,
    ExprKind.BINARY_EQUAL: operators.loose_equals,
    ExprKind.BINARY_NOT_EQUAL: lambda a, b: not operators.loose_equals(a, b),
    ExprKind.BINARY_IDENTICAL: operators.strict_equals,
    ExprKind.BINARY_NOT_IDENTICAL: lambda a, b: not operators.strict_equals(a, b),
    ExprKind.BINARY_SMALLER: lambda a, b: operators.compare(a, b) < 0,
    ExprKind.BINARY_SMALLER_OR_EQUAL: lambda a, b: operators.compare(a, b) <= 0,
    ExprKind.BINARY_GREATER: lambda a, b: operators.compare(a, b) > 0,
    ExprKind.BINARY_GREATER_OR_EQUAL: lambda a, b: operators.compare(a, b) >= 0,
    ExprKind.BINARY_SPACESHIP: operators.compare,
}

_UNARY_FUNCTIONS: dict[ExprKind, Callable[[Any], Any]] = {
    ExprKind.BOOLEAN_NOT: lambda v: not operators.to_bool(v),
    ExprKind.BITWISE_NOT: operators.bit_not,
    ExprKind.UNARY_MINUS: operators.negate,
    ExprKind.UNARY_PLUS: operators.identity,
}


@dataclass(frozen=True, slots=True)
class ExpressionValue:
    """Result of one evaluation.

    Attributes:
        value: The PHP value (``dict`` for arrays).
        is_constant_reference: The expression directly aliases a named or
            class constant.
        constant_name: Symbolic name of that constant (``NAME``,
            ``Ns\\NAME`` or ``Class::NAME``).
    """

    value: Any
    is_constant_reference: bool = False
    constant_name: str | None = None


class ExpressionResolver:
    """
    Evaluates expression nodes within an ``EvaluationContext``.

    Usage::

        resolver = ExpressionResolver(EvaluationContext.for_class(cls))
        result = resolver.evaluate(const_node.value)
        result.value, result.is_constant_reference, result.constant_name
    """

    def __init__(self, context: EvaluationContext) -> None:
        self._context = context
        self._depth = 0
        self._is_constant = False
        self._constant_name: str | None = None
        self._handlers: dict[ExprKind, Callable[[Any], Any]] = {
            ExprKind.SCALAR_INT: self._resolve_scalar,
            ExprKind.SCALAR_FLOAT: self._resolve_scalar,
            ExprKind.SCALAR_STRING: self._resolve_scalar,
            ExprKind.MAGIC_CLASS: self._resolve_magic_class,
            ExprKind.MAGIC_METHOD: self._resolve_magic_method,
            ExprKind.MAGIC_FUNCTION: self._resolve_magic_function,
            ExprKind.MAGIC_NAMESPACE: self._resolve_magic_namespace,
            ExprKind.MAGIC_DIR: self._resolve_magic_dir,
            ExprKind.MAGIC_FILE: self._resolve_magic_file,
            ExprKind.MAGIC_LINE: self._resolve_magic_line,
            ExprKind.MAGIC_TRAIT: self._resolve_magic_trait,
            ExprKind.CONST_FETCH: self._resolve_const_fetch,
            ExprKind.CLASS_CONST_FETCH: self._resolve_class_const_fetch,
            ExprKind.ARRAY: self._resolve_array,
            ExprKind.BINARY_CONCAT: self._resolve_concat,
            ExprKind.BINARY_BOOLEAN_AND: self._resolve_and,
            ExprKind.BINARY_LOGICAL_AND: self._resolve_and,
            ExprKind.BINARY_BOOLEAN_OR: self._resolve_or,
            ExprKind.BINARY_LOGICAL_OR: self._resolve_or,
            ExprKind.BINARY_LOGICAL_XOR: self._resolve_xor,
            ExprKind.BINARY_COALESCE: self._resolve_coalesce,
            ExprKind.TERNARY: self._resolve_ternary,
            ExprKind.CAST: self._resolve_cast,
        }
        for kind in _BINARY_FUNCTIONS:
            self._handlers[kind] = self._resolve_binary
        for kind in _UNARY_FUNCTIONS:
            self._handlers[kind] = self._resolve_unary

    @property
    def context(self) -> EvaluationContext:
        return self._context

    def evaluate(self, node: Expr) -> ExpressionValue:
        """Evaluate a whole expression.

        Raises:
            ResolutionError: A class constant operand can not be resolved,
                or the expression divides by zero.
        """
        self._depth = 0
        self._is_constant = False
        self._constant_name = None
        value = self._resolve(node)
        return ExpressionValue(value, self._is_constant, self._constant_name)

    def _resolve(self, node: Expr | None) -> Any:
        if node is None:
            return None
        self._depth += 1
        try:
            handler = self._handlers.get(node.kind, self._resolve_unsupported)
            return handler(node)
        finally:
            self._depth -= 1

    def _mark_constant(self, name: str) -> None:
        self._is_constant = True
        self._constant_name = name

    # ------------------------------------------------------------------
    # Scalars and magic constants
    # ------------------------------------------------------------------

    def _resolve_scalar(self, node: ScalarExpr) -> Any:
        return node.value

    def _resolve_magic_class(self, node: Expr) -> str:  # noqa: ARG002
        return self._context.class_name

    def _resolve_magic_method(self, node: Expr) -> str:  # noqa: ARG002
        if self._context.method_name and self._context.declaring_class is not None:
            return f"{self._context.class_name}::{self._context.method_name}"
        return ""

    def _resolve_magic_function(self, node: Expr) -> str:  # noqa: ARG002
        return self._context.function_name

    def _resolve_magic_namespace(self, node: Expr) -> str:  # noqa: ARG002
        return self._context.namespace_name

    def _resolve_magic_dir(self, node: Expr) -> str:  # noqa: ARG002
        return os.path.dirname(self._context.file_name) if self._context.file_name else ""

    def _resolve_magic_file(self, node: Expr) -> str:  # noqa: ARG002
        return self._context.file_name or ""

    def _resolve_magic_line(self, node: Expr) -> int:
        return node.line

    def _resolve_magic_trait(self, node: Expr) -> str:  # noqa: ARG002
        declaring = self._context.declaring_class
        if declaring is not None and declaring.is_trait():
            return declaring.name
        return ""

    # ------------------------------------------------------------------
    # Named and class constants
    # ------------------------------------------------------------------

    def _lookup_namespace_constant(self, short_name: str) -> tuple[bool, Any]:
        try:
            namespace = self._context.get_file_namespace()
        except NotFoundError:
            return False, None
        if namespace is None or not namespace.has_constant(short_name):
            return False, None
        return True, namespace.get_constant(short_name)

    def _resolve_const_fetch(self, node: ConstFetchExpr) -> Any:
        name: Name = node.name
        constant_name = name.value
        value: Any = None
        resolved = False

        if not name.fully_qualified or name.namespace_name == self._context.namespace_name:
            resolved, value = self._lookup_namespace_constant(name.short_name)
            if resolved and self._context.namespace_name:
                constant_name = f"{self._context.namespace_name}\\{name.short_name}"

        host = self._context.engine.host
        if not resolved:
            if host.has_constant(constant_name):
                value, resolved = host.get_constant(constant_name), True
            elif not name.fully_qualified and host.has_constant(name.short_name):
                value, resolved = host.get_constant(name.short_name), True

        if self._depth == 1 and constant_name.lower() not in NOT_CONSTANTS:
            self._mark_constant(constant_name)
            if self._context.is_parameter and not resolved:
                return constant_name

        if not resolved:
            log.debug("constant_unresolved", constant=constant_name, file=self._context.file_name)
        return value

    def _resolve_class_const_fetch(self, node: ClassConstFetchExpr) -> Any:
        constant = node.constant
        class_ref = node.class_ref
        if isinstance(class_ref, Name):
            class_name = class_ref.value
            is_special = class_ref.is_special_class_name
        else:
            operand = self._resolve(class_ref)
            if not isinstance(operand, str) or not operand:
                raise ResolutionError.unsupported_class_operand(class_ref.kind.value, constant)
            # Strings used as class names are always fully qualified
            class_name = operand.lstrip("\\")
            is_special = False

        top_level = self._depth == 1
        is_class_keyword = constant.lower() == "class"

        if is_special and self._context.is_parameter and not is_class_keyword:
            symbolic = f"{class_name}::{constant}"
            if top_level:
                self._mark_constant(symbolic)
            return symbolic

        target = self._fetch_class(class_name, is_special, constant)
        if is_class_keyword:
            return target.name

        if top_level:
            self._mark_constant(f"{class_name}::{constant}")
        if not target.has_constant(constant):
            log.debug("class_constant_missing", class_name=target.name, constant=constant)
            return None
        return target.get_constant(constant)

    def _fetch_class(self, class_name: str, is_special: bool, constant: str) -> Any:
        ctx = self._context
        declaring = ctx.declaring_class
        if is_special:
            if declaring is None:
                raise ResolutionError.unresolvable_class(class_name, constant)
            if class_name.lower() == "parent":
                parent = declaring.get_parent_class()
                if parent is None:
                    raise ResolutionError.unresolvable_class(class_name, constant)
                return parent
            return declaring
        if declaring is not None and declaring.name.lower() == class_name.lower():
            return declaring
        try:
            return ctx.engine.get_class(class_name)
        except NotFoundError as e:
            raise ResolutionError.unresolvable_class(class_name, constant) from e

    # ------------------------------------------------------------------
    # Arrays
    # ------------------------------------------------------------------

    def _resolve_array(self, node: ArrayExpr) -> dict[int | str, Any]:
        result: dict[int | str, Any] = {}
        next_index: int | None = None

        def append(key: int | str, value: Any) -> None:
            nonlocal next_index
            result[key] = value
            if isinstance(key, int):
                next_index = key + 1 if next_index is None else max(next_index, key + 1)

        for item in node.items:
            value = self._resolve(item.value)
            if item.unpack:
                if isinstance(value, dict):
                    for key, inner in value.items():
                        # Unpacked integer keys are renumbered
                        if isinstance(key, int):
                            key = next_index or 0
                        append(key, inner)
                continue
            if item.key is None:
                key = next_index or 0
            else:
                key = operators.to_array_key(self._resolve(item.key))
            append(key, value)
        return result

    # ------------------------------------------------------------------
    # Operators
    # ------------------------------------------------------------------

    def _resolve_binary(self, node: BinaryOpExpr) -> Any:
        left = self._resolve(node.left)
        right = self._resolve(node.right)
        try:
            return _BINARY_FUNCTIONS[node.kind](left, right)
        except ZeroDivisionError as e:
            raise ResolutionError.division_by_zero(node.text) from e
        except (ValueError, OverflowError) as e:
            log.warning("expression_not_evaluated", expression=node.text, reason=str(e))
            return None

    def _resolve_unary(self, node: UnaryOpExpr) -> Any:
        return _UNARY_FUNCTIONS[node.kind](self._resolve(node.operand))

    def _resolve_concat(self, node: BinaryOpExpr) -> Any:
        if self._context.is_class_context and self._context.is_parameter:
            return node.text
        return operators.concat(self._resolve(node.left), self._resolve(node.right))

    def _resolve_and(self, node: BinaryOpExpr) -> bool:
        return operators.to_bool(self._resolve(node.left)) and operators.to_bool(
            self._resolve(node.right)
        )

    def _resolve_or(self, node: BinaryOpExpr) -> bool:
        return operators.to_bool(self._resolve(node.left)) or operators.to_bool(
            self._resolve(node.right)
        )

    def _resolve_xor(self, node: BinaryOpExpr) -> bool:
        left = operators.to_bool(self._resolve(node.left))
        right = operators.to_bool(self._resolve(node.right))
        return left != right

    def _resolve_coalesce(self, node: BinaryOpExpr) -> Any:
        left = self._resolve(node.left)
        return left if left is not None else self._resolve(node.right)

    def _resolve_ternary(self, node: TernaryExpr) -> Any:
        cond = self._resolve(node.cond)
        if node.if_true is None:
            return cond if operators.to_bool(cond) else self._resolve(node.if_false)
        if operators.to_bool(cond):
            return self._resolve(node.if_true)
        return self._resolve(node.if_false)

    def _resolve_cast(self, node: CastExpr) -> Any:
        return operators.cast(node.target, self._resolve(node.operand))

    def _resolve_unsupported(self, node: Expr) -> None:
        node_type = node.node_type if isinstance(node, UnsupportedExpr) else node.kind.value
        log.debug("expression_unsupported", node_type=node_type, expression=node.text)
        return None
