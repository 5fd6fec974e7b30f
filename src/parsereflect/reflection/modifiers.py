"""Modifier bit flags, numerically identical to the host runtime's."""

from __future__ import annotations

from collections.abc import Iterable

IS_PUBLIC = 1
IS_PROTECTED = 2
IS_PRIVATE = 4
IS_STATIC = 16
IS_FINAL = 32
IS_ABSTRACT = 64
IS_READONLY = 128

# Class-level flags
IS_IMPLICIT_ABSTRACT = 16
IS_EXPLICIT_ABSTRACT = 64

_MEMBER_FLAGS = {
    "public": IS_PUBLIC,
    "protected": IS_PROTECTED,
    "private": IS_PRIVATE,
    "static": IS_STATIC,
    "final": IS_FINAL,
    "abstract": IS_ABSTRACT,
    "readonly": IS_READONLY,
}

VISIBILITY_MASK = IS_PUBLIC | IS_PROTECTED | IS_PRIVATE


def member_flags(modifiers: Iterable[str]) -> int:
    """Fold modifier keywords into flags; no visibility keyword means public."""
    flags = 0
    for modifier in modifiers:
        flags |= _MEMBER_FLAGS.get(modifier.lower(), 0)
    if not flags & VISIBILITY_MASK:
        flags |= IS_PUBLIC
    return flags


def get_modifier_names(flags: int) -> list[str]:
    """Keywords for a flag set, in declaration order."""
    names: list[str] = []
    if flags & IS_ABSTRACT:
        names.append("abstract")
    if flags & IS_FINAL:
        names.append("final")
    if flags & IS_PUBLIC:
        names.append("public")
    elif flags & IS_PRIVATE:
        names.append("private")
    elif flags & IS_PROTECTED:
        names.append("protected")
    if flags & IS_STATIC:
        names.append("static")
    if flags & IS_READONLY:
        names.append("readonly")
    return names


def get_class_modifier_names(flags: int) -> list[str]:
    """Keywords for class-level flags, where abstract may be implicit."""
    names: list[str] = []
    if flags & (IS_IMPLICIT_ABSTRACT | IS_EXPLICIT_ABSTRACT):
        names.append("abstract")
    if flags & IS_FINAL:
        names.append("final")
    return names
