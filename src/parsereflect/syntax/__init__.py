"""PHP syntax layer: tree-sitter parsing, name resolution and syntax nodes."""

from parsereflect.syntax.names import NameScope
from parsereflect.syntax.nodes import (
    ClassKind,
    ClassLikeNode,
    Expr,
    ExprKind,
    FileSyntaxTree,
    Name,
    NamespaceNode,
)
from parsereflect.syntax.treesitter import PhpParser

__all__ = [
    "ClassKind",
    "ClassLikeNode",
    "Expr",
    "ExprKind",
    "FileSyntaxTree",
    "Name",
    "NameScope",
    "NamespaceNode",
    "PhpParser",
]
