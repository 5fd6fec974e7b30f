"""Evaluation context: where an expression lives in the reflected source."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from parsereflect.engine import ReflectionEngine
    from parsereflect.reflection.class_like import ClassLike, ReflectionClass
    from parsereflect.reflection.file import ReflectionFileNamespace
    from parsereflect.reflection.function import ReflectionFunction
    from parsereflect.reflection.members import ReflectionMethod, ReflectionProperty


@dataclass(frozen=True)
class EvaluationContext:
    """The reflection entity that requested an evaluation.

    Attributes:
        engine: Engine used to reach other classes and file namespaces.
        file_name: File declaring the expression, if known.
        namespace_name: Namespace section of the expression ("" for global).
        declaring_class: Class-like that ``self``/``parent`` refer to.
        function_name: Function or method short name for ``__FUNCTION__``.
        method_name: Method name for ``__METHOD__`` (empty outside methods).
        is_class_context: The requesting entity is the class-like itself.
        is_parameter: Evaluating a parameter default; unresolved references
            may degrade to their symbolic names.
        owner: Entity providing ``get_file_namespace()`` for namespace
            constant lookups; the engine is asked when absent.
    """

    engine: ReflectionEngine
    file_name: str | None = None
    namespace_name: str = ""
    declaring_class: ClassLike | None = None
    function_name: str = ""
    method_name: str = ""
    is_class_context: bool = False
    is_parameter: bool = False
    owner: Any = None

    @property
    def class_name(self) -> str:
        return self.declaring_class.name if self.declaring_class is not None else ""

    def get_file_namespace(self) -> ReflectionFileNamespace | None:
        """Namespace section the expression belongs to.

        Raises:
            NotFoundError: The section is missing from the file.
        """
        if self.owner is not None:
            namespace: ReflectionFileNamespace = self.owner.get_file_namespace()
            return namespace
        if not self.file_name:
            return None
        return self.engine.get_file_namespace(self.file_name, self.namespace_name)

    @classmethod
    def for_class(
        cls, reflection_class: ReflectionClass, *, is_parameter: bool = False
    ) -> EvaluationContext:
        return cls(
            engine=reflection_class.engine,
            file_name=reflection_class.file_name,
            namespace_name=reflection_class.namespace_name,
            declaring_class=reflection_class,
            is_class_context=True,
            is_parameter=is_parameter,
            owner=reflection_class,
        )

    @classmethod
    def for_method(
        cls, method: ReflectionMethod, *, is_parameter: bool = False
    ) -> EvaluationContext:
        # Parameter defaults are evaluated against the declaring class
        declaring = method.get_declaring_class()
        return cls(
            engine=method.engine,
            file_name=declaring.file_name,
            namespace_name=declaring.namespace_name,
            declaring_class=declaring,
            function_name=method.name,
            method_name=method.name,
            is_class_context=is_parameter,
            is_parameter=is_parameter,
            owner=declaring,
        )

    @classmethod
    def for_property(cls, prop: ReflectionProperty) -> EvaluationContext:
        declaring = prop.get_declaring_class()
        return cls(
            engine=prop.engine,
            file_name=declaring.file_name,
            namespace_name=declaring.namespace_name,
            declaring_class=declaring,
            owner=declaring,
        )

    @classmethod
    def for_function(
        cls, function: ReflectionFunction, *, is_parameter: bool = False
    ) -> EvaluationContext:
        return cls(
            engine=function.engine,
            file_name=function.file_name,
            namespace_name=function.namespace_name,
            function_name=function.name,
            is_parameter=is_parameter,
            owner=function,
        )

    @classmethod
    def for_namespace(cls, namespace: ReflectionFileNamespace) -> EvaluationContext:
        return cls(
            engine=namespace.engine,
            file_name=namespace.file_name,
            namespace_name=namespace.name,
            owner=namespace,
        )
