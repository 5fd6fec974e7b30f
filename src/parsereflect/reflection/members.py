"""Member descriptors: methods, parameters, properties and class constants.

Descriptors are thin views over syntax nodes. Values (constant values,
property and parameter defaults) are evaluated on first request through the
``ExpressionResolver`` with the declaring entity as context.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from parsereflect.reflection.cell import Cell
from parsereflect.reflection.modifiers import (
    IS_ABSTRACT,
    IS_FINAL,
    IS_PRIVATE,
    IS_PROTECTED,
    IS_PUBLIC,
    IS_READONLY,
    IS_STATIC,
    VISIBILITY_MASK,
    get_modifier_names,
    member_flags,
)
from parsereflect.reflection.types import ReflectionType, reflect_type
from parsereflect.resolver import operators
from parsereflect.resolver.context import EvaluationContext
from parsereflect.resolver.expression import ExpressionResolver, ExpressionValue
from parsereflect.syntax.nodes import (
    NO_SPAN,
    ClassConstStatement,
    ConstDeclarator,
    Expr,
    MethodNode,
    ParamNode,
    PropertyDeclarator,
    PropertyStatement,
    Span,
    TypeRef,
)

if TYPE_CHECKING:
    from parsereflect.engine import ReflectionEngine
    from parsereflect.reflection.class_like import ReflectionClass
    from parsereflect.reflection.function import ReflectionFunction

_DISPLAY_TYPES = {
    "null": "null",
    "bool": "bool",
    "int": "int",
    "float": "float",
    "string": "string",
    "array": "array",
}


class _VisibilityMixin:
    """Predicates over a ``get_modifiers()`` flag set."""

    def get_modifiers(self) -> int:
        raise NotImplementedError

    def is_public(self) -> bool:
        return bool(self.get_modifiers() & IS_PUBLIC)

    def is_protected(self) -> bool:
        return bool(self.get_modifiers() & IS_PROTECTED)

    def is_private(self) -> bool:
        return bool(self.get_modifiers() & IS_PRIVATE)


class ReflectionParameter:
    """A parameter of a method or function."""

    def __init__(
        self,
        function: ReflectionMethod | ReflectionFunction,
        node: ParamNode,
        position: int,
        *,
        optional: bool = False,
    ) -> None:
        self._function = function
        self._node = node
        self._position = position
        self._optional = optional
        self._default: Cell[ExpressionValue | None] = Cell()

    def __repr__(self) -> str:
        return f"ReflectionParameter(${self.name}, position={self._position})"

    @property
    def name(self) -> str:
        return self._node.name

    def get_name(self) -> str:
        return self._node.name

    def get_position(self) -> int:
        return self._position

    def get_declaring_function(self) -> ReflectionMethod | ReflectionFunction:
        return self._function

    def get_declaring_class(self) -> ReflectionClass | None:
        if isinstance(self._function, ReflectionMethod):
            return self._function.get_declaring_class()
        return None

    def get_type(self) -> ReflectionType | None:
        return reflect_type(self._node.type)

    def has_type(self) -> bool:
        return self._node.type is not None

    def allows_null(self) -> bool:
        param_type = self.get_type()
        if param_type is None or param_type.allows_null():
            return True
        # Implicitly nullable: ``Foo $x = null``
        default = self._node.default
        return default is not None and default.text.strip().lower() == "null"

    def is_optional(self) -> bool:
        return self._optional

    def is_variadic(self) -> bool:
        return self._node.variadic

    def is_passed_by_reference(self) -> bool:
        return self._node.by_ref

    def can_be_passed_by_value(self) -> bool:
        return not self._node.by_ref

    def is_promoted(self) -> bool:
        return bool(self._node.promoted)

    def is_default_value_available(self) -> bool:
        return self._node.default is not None

    def _evaluate_default(self) -> ExpressionValue | None:
        def compute() -> ExpressionValue | None:
            if self._node.default is None:
                return None
            if isinstance(self._function, ReflectionMethod):
                context = EvaluationContext.for_method(self._function, is_parameter=True)
            else:
                context = EvaluationContext.for_function(self._function, is_parameter=True)
            return ExpressionResolver(context).evaluate(self._node.default)

        return self._default.get_or_compute(compute)

    def get_default_value(self) -> Any:
        """Evaluated default; ``None`` when no default is declared."""
        result = self._evaluate_default()
        return result.value if result is not None else None

    def is_default_value_constant(self) -> bool:
        result = self._evaluate_default()
        return result is not None and result.is_constant_reference

    def get_default_value_constant_name(self) -> str | None:
        result = self._evaluate_default()
        return result.constant_name if result is not None else None


def build_parameters(
    function: ReflectionMethod | ReflectionFunction, params: tuple[ParamNode, ...]
) -> list[ReflectionParameter]:
    """Parameters are optional only if every following one is optional too."""
    optional_flags: list[bool] = []
    all_following_optional = True
    for param in reversed(params):
        all_following_optional = all_following_optional and (
            param.variadic or param.default is not None
        )
        optional_flags.append(all_following_optional)
    optional_flags.reverse()
    return [
        ReflectionParameter(function, param, position, optional=optional)
        for position, (param, optional) in enumerate(zip(params, optional_flags, strict=True))
    ]


class ReflectionMethod(_VisibilityMixin):
    """A method declared by a class-like."""

    def __init__(self, declaring_class: ReflectionClass, node: MethodNode) -> None:
        self._class = declaring_class
        self._node = node
        self._parameters: Cell[list[ReflectionParameter]] = Cell()

    @classmethod
    def from_name(cls, engine: ReflectionEngine, class_name: str, method_name: str) -> ReflectionMethod:
        """Reflect a method declared directly in ``class_name``."""
        from parsereflect.reflection.class_like import ReflectionClass

        node = engine.parse_class_method(class_name, method_name)
        return cls(ReflectionClass(engine, class_name), node)

    def __repr__(self) -> str:
        return f"ReflectionMethod({self._class.name}::{self.name})"

    @property
    def engine(self) -> ReflectionEngine:
        return self._class.engine

    @property
    def name(self) -> str:
        return self._node.name

    @property
    def class_name(self) -> str:
        return self._class.name

    @property
    def node(self) -> MethodNode:
        return self._node

    @property
    def doc_comment(self) -> str | None:
        return self._node.doc_comment

    @property
    def start_line(self) -> int:
        return self._node.span.start_line

    @property
    def end_line(self) -> int:
        return self._node.span.end_line

    @property
    def file_name(self) -> str | None:
        return self._class.file_name

    def get_name(self) -> str:
        return self._node.name

    def get_short_name(self) -> str:
        return self._node.name

    def get_declaring_class(self) -> ReflectionClass:
        return self._class

    def get_modifiers(self) -> int:
        flags = member_flags(self._node.modifiers)
        if self._class.is_interface():
            flags |= IS_ABSTRACT
        return flags

    def is_static(self) -> bool:
        return bool(self.get_modifiers() & IS_STATIC)

    def is_abstract(self) -> bool:
        return bool(self.get_modifiers() & IS_ABSTRACT)

    def is_final(self) -> bool:
        return bool(self.get_modifiers() & IS_FINAL)

    def is_constructor(self) -> bool:
        return self._node.name.lower() == "__construct"

    def is_destructor(self) -> bool:
        return self._node.name.lower() == "__destruct"

    def is_user_defined(self) -> bool:
        return True

    def returns_reference(self) -> bool:
        return self._node.by_ref

    def get_parameters(self) -> list[ReflectionParameter]:
        return self._parameters.get_or_compute(lambda: build_parameters(self, self._node.params))

    def get_number_of_parameters(self) -> int:
        return len(self._node.params)

    def get_number_of_required_parameters(self) -> int:
        return sum(1 for p in self.get_parameters() if not p.is_optional())

    def get_return_type(self) -> ReflectionType | None:
        return reflect_type(self._node.return_type)

    def has_return_type(self) -> bool:
        return self._node.return_type is not None


class ReflectionProperty(_VisibilityMixin):
    """A declared (or constructor-promoted) property."""

    def __init__(
        self,
        declaring_class: ReflectionClass,
        name: str,
        modifiers: frozenset[str],
        *,
        type_ref: TypeRef | None = None,
        default: Expr | None = None,
        doc_comment: str | None = None,
        span: Span = NO_SPAN,
        promoted: bool = False,
    ) -> None:
        self._class = declaring_class
        self._name = name
        self._modifiers = modifiers
        self._type_ref = type_ref
        self._default_node = default
        self._doc_comment = doc_comment
        self._span = span
        self._promoted = promoted
        self._default: Cell[Any] = Cell()

    @classmethod
    def from_statement(
        cls, declaring_class: ReflectionClass, stmt: PropertyStatement, prop: PropertyDeclarator
    ) -> ReflectionProperty:
        return cls(
            declaring_class,
            prop.name,
            stmt.modifiers,
            type_ref=stmt.type,
            default=prop.default,
            doc_comment=stmt.doc_comment,
            span=prop.span,
        )

    @classmethod
    def from_promoted_parameter(
        cls, declaring_class: ReflectionClass, param: ParamNode
    ) -> ReflectionProperty:
        return cls(
            declaring_class,
            param.name,
            param.promoted,
            type_ref=param.type,
            span=param.span,
            promoted=True,
        )

    @classmethod
    def from_name(
        cls, engine: ReflectionEngine, class_name: str, property_name: str
    ) -> ReflectionProperty:
        from parsereflect.reflection.class_like import ReflectionClass

        stmt, prop = engine.parse_class_property(class_name, property_name)
        return cls.from_statement(ReflectionClass(engine, class_name), stmt, prop)

    def __repr__(self) -> str:
        return f"ReflectionProperty({self._class.name}::${self._name})"

    @property
    def engine(self) -> ReflectionEngine:
        return self._class.engine

    @property
    def name(self) -> str:
        return self._name

    @property
    def class_name(self) -> str:
        return self._class.name

    @property
    def doc_comment(self) -> str | None:
        return self._doc_comment

    @property
    def start_line(self) -> int:
        return self._span.start_line

    def get_name(self) -> str:
        return self._name

    def get_declaring_class(self) -> ReflectionClass:
        return self._class

    def get_modifiers(self) -> int:
        return member_flags(self._modifiers)

    def is_static(self) -> bool:
        return bool(self.get_modifiers() & IS_STATIC)

    def is_readonly(self) -> bool:
        return bool(self.get_modifiers() & IS_READONLY)

    def is_promoted(self) -> bool:
        return self._promoted

    def is_default(self) -> bool:
        return True

    def get_type(self) -> ReflectionType | None:
        return reflect_type(self._type_ref)

    def has_type(self) -> bool:
        return self._type_ref is not None

    def has_default_value(self) -> bool:
        # Untyped properties default to null implicitly
        if self._default_node is not None:
            return True
        return self._type_ref is None and not self._promoted

    def get_default_value(self) -> Any:
        def compute() -> Any:
            if self._default_node is None:
                return None
            resolver = ExpressionResolver(EvaluationContext.for_property(self))
            return resolver.evaluate(self._default_node).value

        return self._default.get_or_compute(compute)


class ReflectionClassConstant(_VisibilityMixin):
    """A class constant; its value is evaluated once by the declaring class."""

    def __init__(
        self, declaring_class: ReflectionClass, stmt: ClassConstStatement, const: ConstDeclarator
    ) -> None:
        self._class = declaring_class
        self._stmt = stmt
        self._const = const

    @classmethod
    def from_name(
        cls, engine: ReflectionEngine, class_name: str, constant_name: str
    ) -> ReflectionClassConstant:
        from parsereflect.reflection.class_like import ReflectionClass

        stmt, const = engine.parse_class_constant(class_name, constant_name)
        return cls(ReflectionClass(engine, class_name), stmt, const)

    def __repr__(self) -> str:
        return f"ReflectionClassConstant({self._class.name}::{self.name})"

    def __str__(self) -> str:
        value = self.get_value()
        return "Constant [ {} {} {} ] {{ {} }}\n".format(
            " ".join(get_modifier_names(self.get_modifiers())),
            _DISPLAY_TYPES.get(operators.php_type(value), "mixed"),
            self.name,
            operators.to_string(value),
        )

    @property
    def name(self) -> str:
        return self._const.name

    @property
    def class_name(self) -> str:
        return self._class.name

    @property
    def doc_comment(self) -> str | None:
        return self._stmt.doc_comment

    def get_name(self) -> str:
        return self._const.name

    def get_declaring_class(self) -> ReflectionClass:
        return self._class

    def get_modifiers(self) -> int:
        flags = member_flags(self._stmt.modifiers)
        return flags & (VISIBILITY_MASK | IS_FINAL)

    def is_final(self) -> bool:
        return bool(self.get_modifiers() & IS_FINAL)

    def get_value(self) -> Any:
        return self._class.get_constant(self._const.name)
