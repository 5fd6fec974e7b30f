"""parsereflect - static, syntax-tree-backed reflection of PHP source code."""

from parsereflect.cache import SourceCache
from parsereflect.core.errors import (
    ConfigError,
    NotFoundError,
    ParseReflectError,
    ResolutionError,
    SyntaxLayerError,
)
from parsereflect.engine import ReflectionEngine
from parsereflect.host import HostEnvironment, NativeClass
from parsereflect.locator import CallableLocator, ClassMapLocator, Locator, Psr4Locator
from parsereflect.reflection import (
    ReflectionClass,
    ReflectionClassConstant,
    ReflectionFile,
    ReflectionFileNamespace,
    ReflectionFunction,
    ReflectionMethod,
    ReflectionParameter,
    ReflectionProperty,
)
from parsereflect.resolver import EvaluationContext, ExpressionResolver, ExpressionValue

__version__ = "0.1.0"

__all__ = [
    "CallableLocator",
    "ClassMapLocator",
    "ConfigError",
    "EvaluationContext",
    "ExpressionResolver",
    "ExpressionValue",
    "HostEnvironment",
    "Locator",
    "NativeClass",
    "NotFoundError",
    "ParseReflectError",
    "Psr4Locator",
    "ReflectionClass",
    "ReflectionClassConstant",
    "ReflectionEngine",
    "ReflectionFile",
    "ReflectionFileNamespace",
    "ReflectionFunction",
    "ReflectionMethod",
    "ReflectionParameter",
    "ReflectionProperty",
    "ResolutionError",
    "SourceCache",
    "SyntaxLayerError",
    "__version__",
]
