"""Reflection of namespace-level functions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from parsereflect.reflection.cell import Cell
from parsereflect.reflection.members import ReflectionParameter, build_parameters
from parsereflect.reflection.types import ReflectionType, reflect_type
from parsereflect.syntax.nodes import FunctionNode

if TYPE_CHECKING:
    from parsereflect.engine import ReflectionEngine
    from parsereflect.reflection.file import ReflectionFileNamespace


class ReflectionFunction:
    def __init__(self, namespace: ReflectionFileNamespace, node: FunctionNode) -> None:
        self._namespace = namespace
        self._node = node
        self._parameters: Cell[list[ReflectionParameter]] = Cell()

    def __repr__(self) -> str:
        return f"ReflectionFunction({self.name!r})"

    @property
    def engine(self) -> ReflectionEngine:
        return self._namespace.engine

    @property
    def name(self) -> str:
        if self._namespace.name:
            return f"{self._namespace.name}\\{self._node.name}"
        return self._node.name

    @property
    def short_name(self) -> str:
        return self._node.name

    @property
    def namespace_name(self) -> str:
        return self._namespace.name

    @property
    def file_name(self) -> str:
        return self._namespace.file_name

    @property
    def doc_comment(self) -> str | None:
        return self._node.doc_comment

    @property
    def start_line(self) -> int:
        return self._node.span.start_line

    @property
    def end_line(self) -> int:
        return self._node.span.end_line

    def get_name(self) -> str:
        return self.name

    def get_short_name(self) -> str:
        return self._node.name

    def in_namespace(self) -> bool:
        return bool(self._namespace.name)

    def get_file_namespace(self) -> ReflectionFileNamespace:
        return self._namespace

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
