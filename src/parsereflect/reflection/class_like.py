"""Syntax-tree-backed reflection of classes, interfaces and traits.

``ReflectionClass`` computes its members lazily and caches each derived
field for the lifetime of the instance:

- constants (evaluated one at a time, on first request)
- methods / properties (direct first, then inherited)
- direct and transitive interfaces
- parent class (absent vs not-yet-computed kept distinct)

Inherited members are merged by visiting the parent class first, then the
direct interfaces. A class reappearing in its own inheritance chain raises
``ResolutionError`` instead of recursing forever.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol

import structlog

from parsereflect.core.errors import NotFoundError, ResolutionError
from parsereflect.reflection.cell import Cell
from parsereflect.reflection.members import (
    ReflectionClassConstant,
    ReflectionMethod,
    ReflectionProperty,
)
from parsereflect.reflection.modifiers import IS_EXPLICIT_ABSTRACT, IS_FINAL, IS_IMPLICIT_ABSTRACT
from parsereflect.resolver.context import EvaluationContext
from parsereflect.resolver.expression import ExpressionResolver
from parsereflect.syntax.nodes import (
    ClassConstStatement,
    ClassKind,
    ClassLikeNode,
    ConstDeclarator,
    MethodNode,
    PropertyStatement,
    TraitUseNode,
)

if TYPE_CHECKING:
    from parsereflect.engine import ReflectionEngine
    from parsereflect.reflection.file import ReflectionFile, ReflectionFileNamespace

log = structlog.get_logger(__name__)


class ClassLike(Protocol):
    """Capabilities shared by parsed classes and host built-ins."""

    @property
    def name(self) -> str: ...

    @property
    def short_name(self) -> str: ...

    @property
    def namespace_name(self) -> str: ...

    @property
    def file_name(self) -> str | None: ...

    def is_interface(self) -> bool: ...

    def is_trait(self) -> bool: ...

    def is_abstract(self) -> bool: ...

    def is_final(self) -> bool: ...

    def is_user_defined(self) -> bool: ...

    def get_modifiers(self) -> int: ...

    def get_parent_class(self) -> ClassLike | None: ...

    def get_interfaces(self) -> dict[str, Any]: ...

    def get_interface_names(self) -> list[str]: ...

    def implements_interface(self, interface_name: str) -> bool: ...

    def is_subclass_of(self, class_name: str) -> bool: ...

    def get_constants(self) -> dict[str, Any]: ...

    def get_constant(self, name: str) -> Any: ...

    def has_constant(self, name: str) -> bool: ...

    def get_methods(self) -> list[Any]: ...

    def get_method(self, name: str) -> Any: ...

    def has_method(self, name: str) -> bool: ...

    def get_properties(self) -> list[Any]: ...

    def has_property(self, name: str) -> bool: ...


class ReflectionClass:
    """Reflection of a class-like entity, sourced from its syntax tree.

    Construct by name (located and parsed through the engine) or by a
    name and an already parsed node::

        cls = ReflectionClass(engine, "App\\Entity\\User")
        cls = ReflectionClass(engine, "App\\Entity\\User", node)

    Raises:
        NotFoundError: (by name) the class can not be located or parsed.
    """

    def __init__(
        self,
        engine: ReflectionEngine,
        class_name: str,
        node: ClassLikeNode | None = None,
        *,
        file_namespace: ReflectionFileNamespace | None = None,
    ) -> None:
        class_name = class_name.lstrip("\\")
        self._engine = engine
        self._node = node if node is not None else engine.parse_class(class_name)
        self._namespace_name = class_name.rpartition("\\")[0]
        self._file_namespace = file_namespace

        self._constant_nodes: Cell[dict[str, tuple[ClassConstStatement, ConstDeclarator]]] = Cell()
        self._constant_values: dict[str, Any] = {}
        self._constants: Cell[dict[str, Any]] = Cell()
        self._methods: Cell[list[Any]] = Cell()
        self._properties: Cell[list[Any]] = Cell()
        self._direct_interfaces: Cell[dict[str, ClassLike]] = Cell()
        self._interfaces: Cell[dict[str, ClassLike]] = Cell()
        self._parent: Cell[ClassLike | None] = Cell()

    def __repr__(self) -> str:
        return f"ReflectionClass({self.name!r})"

    # ------------------------------------------------------------------
    # Identity and location
    # ------------------------------------------------------------------

    @property
    def engine(self) -> ReflectionEngine:
        return self._engine

    @property
    def node(self) -> ClassLikeNode:
        return self._node

    @property
    def name(self) -> str:
        if self._namespace_name:
            return f"{self._namespace_name}\\{self._node.name}"
        return self._node.name

    @property
    def short_name(self) -> str:
        return self._node.name

    @property
    def namespace_name(self) -> str:
        return self._namespace_name

    @property
    def file_name(self) -> str | None:
        return self._node.file_name or None

    @property
    def start_line(self) -> int:
        return self._node.span.start_line

    @property
    def end_line(self) -> int:
        return self._node.span.end_line

    @property
    def doc_comment(self) -> str | None:
        return self._node.doc_comment

    def in_namespace(self) -> bool:
        return bool(self._namespace_name)

    def get_file(self) -> ReflectionFile:
        if not self.file_name:
            raise NotFoundError.class_not_located(self.name)
        return self._engine.get_file(self.file_name)

    def get_file_namespace(self) -> ReflectionFileNamespace:
        if self._file_namespace is None:
            if not self.file_name:
                raise NotFoundError.namespace_not_found(self._namespace_name, "")
            self._file_namespace = self._engine.get_file_namespace(
                self.file_name, self._namespace_name
            )
        return self._file_namespace

    # ------------------------------------------------------------------
    # Kind and modifiers
    # ------------------------------------------------------------------

    def is_interface(self) -> bool:
        return self._node.kind == ClassKind.INTERFACE

    def is_trait(self) -> bool:
        return self._node.kind == ClassKind.TRAIT

    def is_anonymous(self) -> bool:
        return False

    def is_internal(self) -> bool:
        return False

    def is_user_defined(self) -> bool:
        return True

    def is_final(self) -> bool:
        return self._node.kind == ClassKind.CLASS and "final" in self._node.modifiers

    def is_abstract(self) -> bool:
        if self._node.kind == ClassKind.CLASS and "abstract" in self._node.modifiers:
            return True
        # An interface declaring methods reports itself abstract
        return self.is_interface() and bool(self.get_methods())

    def get_modifiers(self) -> int:
        flags = 0
        if self._node.kind == ClassKind.CLASS and "abstract" in self._node.modifiers:
            flags |= IS_EXPLICIT_ABSTRACT
        if any(m.is_abstract() for m in self._direct_methods()):
            flags |= IS_IMPLICIT_ABSTRACT
        if self.is_final():
            flags |= IS_FINAL
        return flags

    def is_instantiable(self) -> bool:
        if self.is_interface() or self.is_trait() or self.is_abstract():
            return False
        constructor = self.get_constructor()
        if constructor is None:
            return True
        return bool(constructor.is_public())

    def is_cloneable(self) -> bool:
        if self.is_interface() or self.is_trait() or self.is_abstract():
            return False
        clone = self.get_method("__clone")
        if clone is not None:
            return bool(clone.is_public())
        return True

    def is_iterable(self) -> bool:
        return self.implements_interface("Traversable")

    # ------------------------------------------------------------------
    # Hierarchy
    # ------------------------------------------------------------------

    def get_parent_class(self) -> ClassLike | None:
        """Parent class, or ``None`` when the class extends nothing.

        Raises:
            NotFoundError: The declared parent can not be located.
        """
        return self._parent.get_or_compute(self._find_parent)

    def _find_parent(self) -> ClassLike | None:
        if self._node.kind != ClassKind.CLASS or not self._node.extends:
            return None
        return self._engine.get_class(self._node.extends[0].value)

    def get_parent_class_name(self) -> str | None:
        if self._node.kind != ClassKind.CLASS or not self._node.extends:
            return None
        return self._node.extends[0].value

    def _find_direct_interfaces(self) -> dict[str, ClassLike]:
        refs = self._node.extends if self.is_interface() else self._node.implements
        interfaces: dict[str, ClassLike] = {}
        for ref in refs:
            try:
                interface = self._engine.get_class(ref.value)
            except NotFoundError:
                log.warning("interface_not_found", class_name=self.name, interface=ref.value)
                continue
            interfaces[interface.name] = interface
        return interfaces

    def _bases(self) -> list[ClassLike]:
        bases: list[ClassLike] = []
        parent = self.get_parent_class()
        if parent is not None:
            bases.append(parent)
        bases.extend(self._direct_interfaces.get_or_compute(self._find_direct_interfaces).values())
        return bases

    def _collect(self, kind: str, collector: Callable[[ClassLike], None]) -> None:
        """Feed the parent, then each direct interface, to ``collector``."""
        with self._engine.resolving(
            kind, self.name, lambda: ResolutionError.cyclic_hierarchy(self.name)
        ):
            for base in self._bases():
                collector(base)

    def get_interfaces(self) -> dict[str, ClassLike]:
        """All interfaces, direct and inherited, keyed by name."""

        def compute() -> dict[str, ClassLike]:
            interfaces: dict[str, ClassLike] = {}

            def collect(base: ClassLike) -> None:
                if base.is_interface():
                    interfaces.setdefault(base.name, base)
                for name, interface in base.get_interfaces().items():
                    interfaces.setdefault(name, interface)

            self._collect("interfaces", collect)
            return interfaces

        return self._interfaces.get_or_compute(compute)

    def get_interface_names(self) -> list[str]:
        return list(self.get_interfaces())

    def implements_interface(self, interface_name: str) -> bool:
        wanted = interface_name.lstrip("\\").lower()
        if self.is_interface() and self.name.lower() == wanted:
            return True
        return any(name.lower() == wanted for name in self.get_interfaces())

    def is_subclass_of(self, class_name: str) -> bool:
        """True if ``class_name`` appears in the parent chain (interfaces excluded)."""
        if self._node.kind != ClassKind.CLASS:
            return False
        wanted = class_name.lstrip("\\").lower()
        extends = self.get_parent_class_name()
        if extends is not None and extends.lower() == wanted:
            return True
        with self._engine.resolving(
            "subclass", self.name, lambda: ResolutionError.cyclic_hierarchy(self.name)
        ):
            parent = self.get_parent_class()
            return parent.is_subclass_of(class_name) if parent is not None else False

    def get_trait_names(self) -> list[str]:
        return [
            trait.value
            for stmt in self._node.stmts
            if isinstance(stmt, TraitUseNode)
            for trait in stmt.traits
        ]

    def get_traits(self) -> dict[str, ClassLike]:
        return {name: self._engine.get_class(name) for name in self.get_trait_names()}

    # ------------------------------------------------------------------
    # Constants
    # ------------------------------------------------------------------

    def _declared_constants(self) -> dict[str, tuple[ClassConstStatement, ConstDeclarator]]:
        def compute() -> dict[str, tuple[ClassConstStatement, ConstDeclarator]]:
            return {
                const.name: (stmt, const)
                for stmt in self._node.stmts
                if isinstance(stmt, ClassConstStatement)
                for const in stmt.consts
            }

        return self._constant_nodes.get_or_compute(compute)

    def _evaluate_constant(self, name: str) -> Any:
        if name in self._constant_values:
            return self._constant_values[name]
        _, const = self._declared_constants()[name]
        with self._engine.resolving(
            "constant",
            f"{self.name}::{name}",
            lambda: ResolutionError.cyclic_constant(self.name, name),
        ):
            resolver = ExpressionResolver(EvaluationContext.for_class(self))
            value = resolver.evaluate(const.value).value
        self._constant_values[name] = value
        return value

    def has_constant(self, name: str) -> bool:
        """True if declared here or inherited; evaluates nothing."""
        if name in self._declared_constants():
            return True
        found = False

        def collect(base: ClassLike) -> None:
            nonlocal found
            found = found or base.has_constant(name)

        self._collect("has-constant", collect)
        return found

    def get_constant(self, name: str) -> Any:
        """Value of one constant (declared or inherited), ``None`` if absent."""
        if name in self._declared_constants():
            return self._evaluate_constant(name)
        owner: ClassLike | None = None

        def collect(base: ClassLike) -> None:
            nonlocal owner
            if owner is None and base.has_constant(name):
                owner = base

        self._collect("has-constant", collect)
        return owner.get_constant(name) if owner is not None else None

    def get_constants(self) -> dict[str, Any]:
        """All constant values; declared constants win over inherited ones."""

        def compute() -> dict[str, Any]:
            constants = {name: self._evaluate_constant(name) for name in self._declared_constants()}

            def collect(base: ClassLike) -> None:
                for name, value in base.get_constants().items():
                    constants.setdefault(name, value)

            self._collect("constants", collect)
            return constants

        return self._constants.get_or_compute(compute)

    def get_reflection_constants(self) -> list[ReflectionClassConstant]:
        constants = [
            ReflectionClassConstant(self, stmt, const)
            for stmt, const in self._declared_constants().values()
        ]
        seen = {c.name for c in constants}

        def collect(base: ClassLike) -> None:
            if not isinstance(base, ReflectionClass):
                return
            for inherited in base.get_reflection_constants():
                if inherited.name not in seen:
                    seen.add(inherited.name)
                    constants.append(inherited)

        self._collect("reflection-constants", collect)
        return constants

    def get_reflection_constant(self, name: str) -> ReflectionClassConstant | None:
        return next((c for c in self.get_reflection_constants() if c.name == name), None)

    # ------------------------------------------------------------------
    # Methods
    # ------------------------------------------------------------------

    def _direct_methods(self) -> list[ReflectionMethod]:
        return [
            ReflectionMethod(self, stmt) for stmt in self._node.stmts if isinstance(stmt, MethodNode)
        ]

    def get_methods(self) -> list[Any]:
        """Direct methods followed by everything inherited (duplicates kept)."""

        def compute() -> list[Any]:
            methods: list[Any] = list(self._direct_methods())
            self._collect("methods", lambda base: methods.extend(base.get_methods()))
            return methods

        return self._methods.get_or_compute(compute)

    def get_method(self, name: str) -> Any:
        """First method matching ``name`` case-insensitively, or ``None``."""
        wanted = name.lower()
        return next((m for m in self.get_methods() if m.get_name().lower() == wanted), None)

    def has_method(self, name: str) -> bool:
        return self.get_method(name) is not None

    def get_constructor(self) -> Any:
        return self.get_method("__construct")

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    def _direct_properties(self) -> list[ReflectionProperty]:
        properties: list[ReflectionProperty] = []
        for stmt in self._node.stmts:
            if isinstance(stmt, PropertyStatement):
                properties.extend(ReflectionProperty.from_statement(self, stmt, p) for p in stmt.props)
            elif isinstance(stmt, MethodNode) and stmt.name.lower() == "__construct":
                properties.extend(
                    ReflectionProperty.from_promoted_parameter(self, param)
                    for param in stmt.params
                    if param.promoted
                )
        return properties

    def get_properties(self) -> list[Any]:
        """Direct properties followed by everything inherited (duplicates kept)."""

        def compute() -> list[Any]:
            properties: list[Any] = list(self._direct_properties())
            self._collect("properties", lambda base: properties.extend(base.get_properties()))
            return properties

        return self._properties.get_or_compute(compute)

    def get_property(self, name: str) -> Any:
        return next((p for p in self.get_properties() if p.name == name), None)

    def has_property(self, name: str) -> bool:
        return self.get_property(name) is not None

    def get_default_properties(self) -> dict[str, Any]:
        defaults: dict[str, Any] = {}
        for prop in self.get_properties():
            if prop.name not in defaults:
                defaults[prop.name] = prop.get_default_value()
        return defaults
