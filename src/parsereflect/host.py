"""Host runtime emulation: predefined constants and built-in class-likes.

Reflection of user code regularly reaches entities that are not declared in
any source file (``PHP_EOL``, ``\\Countable``, ``\\Exception``). The host
environment answers for those so the engine never has to locate them.
"""

from __future__ import annotations

import math
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field

from parsereflect.reflection.modifiers import (
    IS_ABSTRACT,
    IS_EXPLICIT_ABSTRACT,
    IS_IMPLICIT_ABSTRACT,
    IS_PUBLIC,
)

ScalarValue = int | float | str | bool | None

# Case-insensitive literal constants
_LITERAL_CONSTANTS: dict[str, ScalarValue] = {"true": True, "false": False, "null": None}

PREDEFINED_CONSTANTS: dict[str, ScalarValue] = {
    "PHP_EOL": "\n",
    "PHP_INT_MAX": 9223372036854775807,
    "PHP_INT_MIN": -9223372036854775808,
    "PHP_INT_SIZE": 8,
    "PHP_FLOAT_EPSILON": sys.float_info.epsilon,
    "PHP_FLOAT_MAX": sys.float_info.max,
    "PHP_FLOAT_MIN": sys.float_info.min,
    "PHP_FLOAT_DIG": sys.float_info.dig,
    "NAN": math.nan,
    "INF": math.inf,
    "PHP_VERSION": "8.3.0",
    "PHP_MAJOR_VERSION": 8,
    "PHP_MINOR_VERSION": 3,
    "PHP_RELEASE_VERSION": 0,
    "PHP_VERSION_ID": 80300,
    "PHP_OS": "Linux",
    "PHP_OS_FAMILY": "Linux",
    "PHP_MAXPATHLEN": 4096,
    "DIRECTORY_SEPARATOR": "/",
    "PATH_SEPARATOR": ":",
    "E_ERROR": 1,
    "E_WARNING": 2,
    "E_PARSE": 4,
    "E_NOTICE": 8,
    "E_CORE_ERROR": 16,
    "E_CORE_WARNING": 32,
    "E_COMPILE_ERROR": 64,
    "E_COMPILE_WARNING": 128,
    "E_USER_ERROR": 256,
    "E_USER_WARNING": 512,
    "E_USER_NOTICE": 1024,
    "E_STRICT": 2048,
    "E_RECOVERABLE_ERROR": 4096,
    "E_DEPRECATED": 8192,
    "E_USER_DEPRECATED": 16384,
    "E_ALL": 32767,
    "M_PI": math.pi,
    "M_E": math.e,
    "M_SQRT2": math.sqrt(2),
    "SORT_REGULAR": 0,
    "SORT_NUMERIC": 1,
    "SORT_STRING": 2,
    "SORT_FLAG_CASE": 8,
    "COUNT_NORMAL": 0,
    "COUNT_RECURSIVE": 1,
    "STR_PAD_LEFT": 0,
    "STR_PAD_RIGHT": 1,
    "STR_PAD_BOTH": 2,
    "ENT_QUOTES": 3,
    "PREG_SPLIT_NO_EMPTY": 1,
    "JSON_UNESCAPED_SLASHES": 64,
    "JSON_PRETTY_PRINT": 128,
    "JSON_UNESCAPED_UNICODE": 256,
    "JSON_THROW_ON_ERROR": 4194304,
}

_THROWABLE_METHODS = (
    "getMessage",
    "getCode",
    "getFile",
    "getLine",
    "getTrace",
    "getPrevious",
    "getTraceAsString",
    "__toString",
)

# name -> (kind, parent, interfaces, methods)
_BUILTIN_CLASSES: dict[str, tuple[str, str | None, tuple[str, ...], tuple[str, ...]]] = {
    "Traversable": ("interface", None, (), ()),
    "Iterator": ("interface", None, ("Traversable",), ("current", "key", "next", "rewind", "valid")),
    "IteratorAggregate": ("interface", None, ("Traversable",), ("getIterator",)),
    "ArrayAccess": (
        "interface",
        None,
        (),
        ("offsetExists", "offsetGet", "offsetSet", "offsetUnset"),
    ),
    "Countable": ("interface", None, (), ("count",)),
    "Stringable": ("interface", None, (), ("__toString",)),
    "JsonSerializable": ("interface", None, (), ("jsonSerialize",)),
    "Serializable": ("interface", None, (), ("serialize", "unserialize")),
    "Throwable": ("interface", None, ("Stringable",), _THROWABLE_METHODS),
    "stdClass": ("class", None, (), ()),
    "ArrayIterator": (
        "class",
        None,
        ("Iterator", "ArrayAccess", "Countable"),
        ("__construct", "current", "key", "next", "rewind", "valid", "count"),
    ),
    "ArrayObject": (
        "class",
        None,
        ("IteratorAggregate", "ArrayAccess", "Countable"),
        ("__construct", "getIterator", "count"),
    ),
    "Exception": ("class", None, ("Throwable",), ("__construct", *_THROWABLE_METHODS)),
    "Error": ("class", None, ("Throwable",), ("__construct", *_THROWABLE_METHODS)),
    "ErrorException": ("class", "Exception", (), ("getSeverity",)),
    "LogicException": ("class", "Exception", (), ()),
    "RuntimeException": ("class", "Exception", (), ()),
    "BadFunctionCallException": ("class", "LogicException", (), ()),
    "BadMethodCallException": ("class", "BadFunctionCallException", (), ()),
    "DomainException": ("class", "LogicException", (), ()),
    "InvalidArgumentException": ("class", "LogicException", (), ()),
    "LengthException": ("class", "LogicException", (), ()),
    "OutOfRangeException": ("class", "LogicException", (), ()),
    "OutOfBoundsException": ("class", "RuntimeException", (), ()),
    "OverflowException": ("class", "RuntimeException", (), ()),
    "RangeException": ("class", "RuntimeException", (), ()),
    "UnderflowException": ("class", "RuntimeException", (), ()),
    "UnexpectedValueException": ("class", "RuntimeException", (), ()),
    "TypeError": ("class", "Error", (), ()),
    "ValueError": ("class", "Error", (), ()),
    "ArithmeticError": ("class", "Error", (), ()),
    "DivisionByZeroError": ("class", "ArithmeticError", (), ()),
}


@dataclass(frozen=True)
class NativeMethod:
    """A method of a built-in class-like; all are public."""

    name: str
    class_name: str
    abstract: bool = False

    def get_name(self) -> str:
        return self.name

    def get_declaring_class_name(self) -> str:
        return self.class_name

    def get_modifiers(self) -> int:
        return IS_PUBLIC | (IS_ABSTRACT if self.abstract else 0)

    def is_public(self) -> bool:
        return True

    def is_private(self) -> bool:
        return False

    def is_protected(self) -> bool:
        return False

    def is_static(self) -> bool:
        return False

    def is_abstract(self) -> bool:
        return self.abstract

    def is_final(self) -> bool:
        return False

    def is_constructor(self) -> bool:
        return self.name.lower() == "__construct"

    def is_user_defined(self) -> bool:
        return False


@dataclass
class NativeClass:
    """A class-like known to the host runtime, reflected without parsing.

    Exposes the same query surface as ``ReflectionClass`` for everything
    built-ins have: name, hierarchy, methods and modifiers.
    """

    name: str
    kind: str
    host: HostEnvironment = field(repr=False)
    parent_name: str | None = None
    interface_names: tuple[str, ...] = ()
    method_names: tuple[str, ...] = ()

    @property
    def short_name(self) -> str:
        return self.name.rsplit("\\", 1)[-1]

    @property
    def namespace_name(self) -> str:
        return ""

    @property
    def file_name(self) -> str | None:
        return None

    @property
    def start_line(self) -> int | None:
        return None

    @property
    def end_line(self) -> int | None:
        return None

    @property
    def doc_comment(self) -> str | None:
        return None

    def in_namespace(self) -> bool:
        return False

    def is_internal(self) -> bool:
        return True

    def is_user_defined(self) -> bool:
        return False

    def is_interface(self) -> bool:
        return self.kind == "interface"

    def is_trait(self) -> bool:
        return False

    def is_final(self) -> bool:
        return False

    def is_abstract(self) -> bool:
        return self.is_interface() and bool(self.method_names)

    def is_instantiable(self) -> bool:
        return not self.is_interface()

    def is_cloneable(self) -> bool:
        return not self.is_interface()

    def is_iterable(self) -> bool:
        return not self.is_interface() and self.implements_interface("Traversable")

    def get_modifiers(self) -> int:
        if self.is_interface():
            return IS_IMPLICIT_ABSTRACT | IS_EXPLICIT_ABSTRACT if self.method_names else 0
        return 0

    def get_parent_class(self) -> NativeClass | None:
        if self.parent_name is None:
            return None
        return self.host.get_class(self.parent_name)

    def get_parent_class_name(self) -> str | None:
        return self.parent_name

    def get_interfaces(self) -> dict[str, NativeClass]:
        interfaces: dict[str, NativeClass] = {}
        parent = self.get_parent_class()
        if parent is not None:
            interfaces.update(parent.get_interfaces())
        for interface_name in self.interface_names:
            interface = self.host.get_class(interface_name)
            if interface is None:
                continue
            interfaces[interface.name] = interface
            interfaces.update(interface.get_interfaces())
        return interfaces

    def get_interface_names(self) -> list[str]:
        return list(self.get_interfaces())

    def implements_interface(self, interface_name: str) -> bool:
        wanted = interface_name.lstrip("\\").lower()
        return any(name.lower() == wanted for name in self.get_interfaces())

    def is_subclass_of(self, class_name: str) -> bool:
        wanted = class_name.lstrip("\\").lower()
        parent = self.get_parent_class()
        while parent is not None:
            if parent.name.lower() == wanted:
                return True
            parent = parent.get_parent_class()
        return self.implements_interface(wanted)

    def get_constants(self) -> dict[str, object]:
        return {}

    def get_constant(self, name: str) -> object | None:  # noqa: ARG002
        return None

    def has_constant(self, name: str) -> bool:  # noqa: ARG002
        return False

    def get_methods(self) -> list[NativeMethod]:
        methods = [
            NativeMethod(name, self.name, abstract=self.is_interface()) for name in self.method_names
        ]
        seen = {name.lower() for name in self.method_names}
        inherited: list[NativeMethod] = []
        parent = self.get_parent_class()
        if parent is not None:
            inherited.extend(parent.get_methods())
        for interface in self.get_interfaces().values():
            inherited.extend(interface.get_methods())
        for method in inherited:
            if method.name.lower() not in seen:
                seen.add(method.name.lower())
                methods.append(method)
        return methods

    def get_method(self, name: str) -> NativeMethod | None:
        wanted = name.lower()
        return next((m for m in self.get_methods() if m.name.lower() == wanted), None)

    def has_method(self, name: str) -> bool:
        return self.get_method(name) is not None

    def get_constructor(self) -> NativeMethod | None:
        return self.get_method("__construct")

    def get_properties(self) -> list[object]:
        return []

    def has_property(self, name: str) -> bool:  # noqa: ARG002
        return False

    def get_trait_names(self) -> list[str]:
        return []


@dataclass
class HostEnvironment:
    """Constants and class-likes the emulated runtime already defines."""

    constants: dict[str, ScalarValue] = field(default_factory=lambda: dict(PREDEFINED_CONSTANTS))
    classes: dict[str, tuple[str, str | None, tuple[str, ...], tuple[str, ...]]] = field(
        default_factory=lambda: dict(_BUILTIN_CLASSES)
    )

    @classmethod
    def default(cls, extra_constants: Mapping[str, ScalarValue] | None = None) -> HostEnvironment:
        host = cls()
        if extra_constants:
            host.constants.update({k.lstrip("\\"): v for k, v in extra_constants.items()})
        return host

    def _lookup_class(self, class_name: str) -> str | None:
        wanted = class_name.lstrip("\\").lower()
        return next((name for name in self.classes if name.lower() == wanted), None)

    def has_class(self, class_name: str) -> bool:
        return self._lookup_class(class_name) is not None

    def get_class(self, class_name: str) -> NativeClass | None:
        name = self._lookup_class(class_name)
        if name is None:
            return None
        kind, parent, interfaces, methods = self.classes[name]
        return NativeClass(
            name=name,
            kind=kind,
            host=self,
            parent_name=parent,
            interface_names=interfaces,
            method_names=methods,
        )

    def has_constant(self, name: str) -> bool:
        name = name.lstrip("\\")
        return name.lower() in _LITERAL_CONSTANTS or name in self.constants

    def get_constant(self, name: str) -> ScalarValue:
        name = name.lstrip("\\")
        if name.lower() in _LITERAL_CONSTANTS:
            return _LITERAL_CONSTANTS[name.lower()]
        return self.constants.get(name)
