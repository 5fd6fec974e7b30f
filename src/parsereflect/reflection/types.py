"""Declared types of parameters, properties and return values."""

from __future__ import annotations

from dataclasses import dataclass

from parsereflect.syntax.names import BUILTIN_TYPES
from parsereflect.syntax.nodes import TypeRef

# Order the host runtime uses when printing built-ins inside a union
_BUILTIN_ORDER = ("object", "array", "string", "int", "float", "bool", "false", "null")

_ALWAYS_NULLABLE = frozenset({"null", "mixed"})


@dataclass(frozen=True)
class ReflectionNamedType:
    name: str
    nullable: bool = False

    def get_name(self) -> str:
        return self.name

    def allows_null(self) -> bool:
        return self.nullable or self.name in _ALWAYS_NULLABLE

    def is_builtin(self) -> bool:
        return self.name in BUILTIN_TYPES

    def __str__(self) -> str:
        if self.nullable and self.name not in _ALWAYS_NULLABLE:
            return f"?{self.name}"
        return self.name


@dataclass(frozen=True)
class ReflectionUnionType:
    types: tuple[ReflectionNamedType, ...]

    def get_types(self) -> list[ReflectionNamedType]:
        return list(self.types)

    def allows_null(self) -> bool:
        return any(t.allows_null() for t in self.types)

    def __str__(self) -> str:
        names = [str(t) for t in self.types]
        # iterable is itself Traversable|array
        if "iterable" in names:
            names.remove("iterable")
            names.extend(("Traversable", "array"))
        class_names = [n for n in names if n not in _BUILTIN_ORDER]
        builtins = sorted((n for n in names if n in _BUILTIN_ORDER), key=_BUILTIN_ORDER.index)
        return "|".join(class_names + builtins)


@dataclass(frozen=True)
class ReflectionIntersectionType:
    types: tuple[ReflectionNamedType, ...]

    def get_types(self) -> list[ReflectionNamedType]:
        return list(self.types)

    def allows_null(self) -> bool:
        return False

    def __str__(self) -> str:
        return "&".join(str(t) for t in self.types)


ReflectionType = ReflectionNamedType | ReflectionUnionType | ReflectionIntersectionType


def reflect_type(ref: TypeRef | None) -> ReflectionType | None:
    """Build the reflection type for a parsed type declaration."""
    if ref is None or not ref.names:
        return None
    if ref.kind == "named" or len(ref.names) == 1:
        return ReflectionNamedType(ref.names[0], nullable=ref.nullable)
    members = tuple(ReflectionNamedType(name) for name in ref.names)
    if ref.kind == "intersection":
        return ReflectionIntersectionType(members)
    return ReflectionUnionType(members)
