"""Reflection objects built from parsed source."""

from parsereflect.reflection.class_like import ClassLike, ReflectionClass
from parsereflect.reflection.file import ReflectionFile, ReflectionFileNamespace
from parsereflect.reflection.function import ReflectionFunction
from parsereflect.reflection.members import (
    ReflectionClassConstant,
    ReflectionMethod,
    ReflectionParameter,
    ReflectionProperty,
)
from parsereflect.reflection.types import (
    ReflectionIntersectionType,
    ReflectionNamedType,
    ReflectionType,
    ReflectionUnionType,
)

__all__ = [
    "ClassLike",
    "ReflectionClass",
    "ReflectionClassConstant",
    "ReflectionFile",
    "ReflectionFileNamespace",
    "ReflectionFunction",
    "ReflectionIntersectionType",
    "ReflectionMethod",
    "ReflectionNamedType",
    "ReflectionParameter",
    "ReflectionProperty",
    "ReflectionType",
    "ReflectionUnionType",
]
