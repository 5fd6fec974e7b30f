"""Constant-expression evaluation."""

from parsereflect.resolver.context import EvaluationContext
from parsereflect.resolver.expression import ExpressionResolver, ExpressionValue

__all__ = [
    "EvaluationContext",
    "ExpressionResolver",
    "ExpressionValue",
]
