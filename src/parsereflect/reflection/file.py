"""Reflection of parsed files and their namespace sections."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from parsereflect.core.errors import ResolutionError
from parsereflect.reflection.cell import Cell
from parsereflect.reflection.class_like import ReflectionClass
from parsereflect.reflection.function import ReflectionFunction
from parsereflect.resolver.context import EvaluationContext
from parsereflect.resolver.expression import ExpressionResolver
from parsereflect.syntax.nodes import (
    ClassLikeNode,
    ConstDeclarator,
    ConstStatement,
    FileSyntaxTree,
    FunctionNode,
    NamespaceNode,
    ScalarExpr,
    UseNode,
)

if TYPE_CHECKING:
    from parsereflect.engine import ReflectionEngine


class ReflectionFileNamespace:
    """One namespace section of a file: its classes, functions and constants.

    Constants are evaluated lazily, one at a time, and memoized.
    """

    def __init__(self, engine: ReflectionEngine, file_name: str, node: NamespaceNode) -> None:
        self._engine = engine
        self._file_name = file_name
        self._node = node
        self._classes: Cell[dict[str, ReflectionClass]] = Cell()
        self._functions: Cell[dict[str, ReflectionFunction]] = Cell()
        self._constant_nodes: Cell[dict[str, ConstDeclarator]] = Cell()
        self._constant_values: dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"ReflectionFileNamespace({self._node.name!r}, {self._file_name!r})"

    @property
    def engine(self) -> ReflectionEngine:
        return self._engine

    @property
    def name(self) -> str:
        return self._node.name

    @property
    def file_name(self) -> str:
        return self._file_name

    @property
    def node(self) -> NamespaceNode:
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

    def get_file_namespace(self) -> ReflectionFileNamespace:
        return self

    def _qualify(self, short_name: str) -> str:
        return f"{self._node.name}\\{short_name}" if self._node.name else short_name

    # Classes

    def get_classes(self) -> dict[str, ReflectionClass]:
        def compute() -> dict[str, ReflectionClass]:
            classes: dict[str, ReflectionClass] = {}
            for stmt in self._node.stmts:
                if isinstance(stmt, ClassLikeNode):
                    name = self._qualify(stmt.name)
                    classes[name] = ReflectionClass(self._engine, name, stmt, file_namespace=self)
            return classes

        return self._classes.get_or_compute(compute)

    def get_class(self, name: str) -> ReflectionClass | None:
        """Find a class by short or fully-qualified name (case-insensitive)."""
        wanted = name.lstrip("\\").lower()
        if "\\" not in wanted:
            wanted = self._qualify(wanted).lower()
        return next((c for n, c in self.get_classes().items() if n.lower() == wanted), None)

    def has_class(self, name: str) -> bool:
        return self.get_class(name) is not None

    # Functions

    def get_functions(self) -> dict[str, ReflectionFunction]:
        def compute() -> dict[str, ReflectionFunction]:
            return {
                self._qualify(stmt.name): ReflectionFunction(self, stmt)
                for stmt in self._node.stmts
                if isinstance(stmt, FunctionNode)
            }

        return self._functions.get_or_compute(compute)

    def get_function(self, name: str) -> ReflectionFunction | None:
        wanted = name.lstrip("\\").lower()
        if "\\" not in wanted:
            wanted = self._qualify(wanted).lower()
        return next((f for n, f in self.get_functions().items() if n.lower() == wanted), None)

    def has_function(self, name: str) -> bool:
        return self.get_function(name) is not None

    # Constants

    def _declared_constants(self) -> dict[str, ConstDeclarator]:
        def compute() -> dict[str, ConstDeclarator]:
            return {
                const.name: const
                for stmt in self._node.stmts
                if isinstance(stmt, ConstStatement)
                for const in stmt.consts
            }

        return self._constant_nodes.get_or_compute(compute)

    def has_constant(self, name: str) -> bool:
        return name in self._declared_constants()

    def get_constant(self, name: str) -> Any:
        """Value of a namespace constant, ``None`` if not declared here."""
        if name in self._constant_values:
            return self._constant_values[name]
        const = self._declared_constants().get(name)
        if const is None:
            return None
        qualified = self._qualify(name)
        with self._engine.resolving(
            "namespace-constant",
            f"{self._file_name}:{qualified}",
            lambda: ResolutionError.cyclic_constant(self._node.name, name),
        ):
            resolver = ExpressionResolver(EvaluationContext.for_namespace(self))
            value = resolver.evaluate(const.value).value
        self._constant_values[name] = value
        return value

    def get_constants(self) -> dict[str, Any]:
        return {name: self.get_constant(name) for name in self._declared_constants()}

    # Imports

    def get_namespace_aliases(self) -> dict[str, str]:
        """Class imports: alias -> fully-qualified name."""
        aliases: dict[str, str] = {}
        for stmt in self._node.stmts:
            if isinstance(stmt, UseNode) and stmt.kind == "class":
                aliases.update(stmt.aliases)
        return aliases


class ReflectionFile:
    """A parsed file and its namespace sections."""

    def __init__(self, engine: ReflectionEngine, file_name: str, tree: FileSyntaxTree) -> None:
        self._engine = engine
        self._file_name = file_name
        self._tree = tree
        self._namespaces: Cell[dict[str, ReflectionFileNamespace]] = Cell()

    def __repr__(self) -> str:
        return f"ReflectionFile({self._file_name!r})"

    @property
    def name(self) -> str:
        return self._file_name

    @property
    def tree(self) -> FileSyntaxTree:
        return self._tree

    @property
    def error_count(self) -> int:
        return self._tree.error_count

    def get_file_namespaces(self) -> dict[str, ReflectionFileNamespace]:
        def compute() -> dict[str, ReflectionFileNamespace]:
            namespaces: dict[str, ReflectionFileNamespace] = {}
            for node in self._tree.namespaces:
                # First section wins when a name repeats
                if node.name not in namespaces:
                    namespaces[node.name] = ReflectionFileNamespace(
                        self._engine, self._file_name, node
                    )
            return namespaces

        return self._namespaces.get_or_compute(compute)

    def get_file_namespace(self, name: str) -> ReflectionFileNamespace | None:
        return self.get_file_namespaces().get(name.strip("\\"))

    def has_file_namespace(self, name: str) -> bool:
        return self.get_file_namespace(name) is not None

    def is_strict_mode(self) -> bool:
        strict = self._tree.declares.get("strict_types")
        return isinstance(strict, ScalarExpr) and strict.value == 1
