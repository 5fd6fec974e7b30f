"""parsereflect error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Lookup (class/method/property/namespace not found)
- 4xxx: Expression resolution
- 5xxx: Syntax layer
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Lookup (3xxx)
    CLASS_NOT_LOCATED = 3001
    CLASS_NOT_IN_FILE = 3002
    METHOD_NOT_FOUND = 3003
    PROPERTY_NOT_FOUND = 3004
    CONSTANT_NOT_FOUND = 3005
    NAMESPACE_NOT_FOUND = 3006

    # Resolution (4xxx)
    UNRESOLVABLE_CLASS = 4001
    UNSUPPORTED_CLASS_OPERAND = 4002
    CYCLIC_CONSTANT = 4003
    CYCLIC_HIERARCHY = 4004
    DIVISION_BY_ZERO = 4005

    # Syntax (5xxx)
    GRAMMAR_UNAVAILABLE = 5001
    EXPRESSION_NOT_PARSED = 5002


@dataclass(frozen=True, slots=True)
class ParseReflectError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CLASS_NOT_LOCATED')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(ParseReflectError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class NotFoundError(ParseReflectError):
    """A requested class, member or namespace is absent from the located source."""

    @classmethod
    def class_not_located(cls, class_name: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.CLASS_NOT_LOCATED,
            message=f"Class {class_name} was not found by locator",
            details={"class": class_name},
        )

    @classmethod
    def class_not_in_file(cls, class_name: str, file_name: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.CLASS_NOT_IN_FILE,
            message=f"Class {class_name} was not found in the {file_name}",
            details={"class": class_name, "file": file_name},
        )

    @classmethod
    def method_not_found(cls, class_name: str, method_name: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.METHOD_NOT_FOUND,
            message=f"Method {method_name} was not found in the {class_name}",
            details={"class": class_name, "method": method_name},
        )

    @classmethod
    def property_not_found(cls, class_name: str, property_name: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.PROPERTY_NOT_FOUND,
            message=f"Property {property_name} was not found in the {class_name}",
            details={"class": class_name, "property": property_name},
        )

    @classmethod
    def constant_not_found(cls, class_name: str, constant_name: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.CONSTANT_NOT_FOUND,
            message=f"Constant {constant_name} was not found in the {class_name}",
            details={"class": class_name, "constant": constant_name},
        )

    @classmethod
    def namespace_not_found(cls, namespace_name: str, file_name: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.NAMESPACE_NOT_FOUND,
            message=f"Namespace {namespace_name} was not found in the file {file_name}",
            details={"namespace": namespace_name, "file": file_name},
        )


class ResolutionError(ParseReflectError):
    """An expression could not be reduced to a value."""

    @classmethod
    def unresolvable_class(cls, class_name: str, constant_name: str = "") -> "ResolutionError":
        return cls(
            code=ErrorCode.UNRESOLVABLE_CLASS,
            message=f"Can not resolve class {class_name}",
            details={"class": class_name, "constant": constant_name},
        )

    @classmethod
    def unsupported_class_operand(cls, operand_kind: str, constant_name: str) -> "ResolutionError":
        return cls(
            code=ErrorCode.UNSUPPORTED_CLASS_OPERAND,
            message=f"Unable to resolve class constant {constant_name} from a {operand_kind} operand",
            details={"operand": operand_kind, "constant": constant_name},
        )

    @classmethod
    def cyclic_constant(cls, class_name: str, constant_name: str) -> "ResolutionError":
        return cls(
            code=ErrorCode.CYCLIC_CONSTANT,
            message=f"Cannot declare self-referencing constant {class_name}::{constant_name}",
            details={"class": class_name, "constant": constant_name},
        )

    @classmethod
    def cyclic_hierarchy(cls, class_name: str) -> "ResolutionError":
        return cls(
            code=ErrorCode.CYCLIC_HIERARCHY,
            message=f"Class {class_name} appears in its own inheritance chain",
            details={"class": class_name},
        )

    @classmethod
    def division_by_zero(cls, expression: str) -> "ResolutionError":
        return cls(
            code=ErrorCode.DIVISION_BY_ZERO,
            message=f"Division by zero in {expression}",
            details={"expression": expression},
        )


class SyntaxLayerError(ParseReflectError):
    """Parser-level failures."""

    @classmethod
    def grammar_unavailable(cls, module: str) -> "SyntaxLayerError":
        return cls(
            code=ErrorCode.GRAMMAR_UNAVAILABLE,
            message=f"Language not available: {module}",
            details={"module": module},
        )

    @classmethod
    def expression_not_parsed(cls, code: str) -> "SyntaxLayerError":
        return cls(
            code=ErrorCode.EXPRESSION_NOT_PARSED,
            message="Unable to create parse node for value.",
            details={"code": code},
        )
