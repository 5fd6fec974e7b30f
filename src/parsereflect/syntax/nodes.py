"""Immutable syntax nodes produced by the PHP parser.

The tree-sitter concrete syntax tree is converted into these dataclasses
once per parse. Names inside them are already resolved: class references
are fully qualified, constant references are fully qualified only when the
source makes them so (see ``names.NameScope``).

Node hierarchy::

    FileSyntaxTree
      NamespaceNode*            one section per ``namespace`` (or the global one)
        ClassLikeNode           class / interface / trait
          ClassConstStatement   -> ConstDeclarator*
          PropertyStatement     -> PropertyDeclarator*
          MethodNode            -> ParamNode*
          TraitUseNode
        FunctionNode            -> ParamNode*
        ConstStatement          -> ConstDeclarator*   (``const X = ...`` / ``define()``)
        UseNode

Expressions are ``Expr`` subclasses tagged with an ``ExprKind``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

SPECIAL_CLASS_NAMES = frozenset({"self", "parent", "static"})


@dataclass(frozen=True, slots=True)
class Span:
    """Source position of a node (1-based lines, 0-based byte offsets)."""

    start_line: int
    end_line: int
    start_byte: int = 0
    end_byte: int = 0


NO_SPAN = Span(0, 0)


@dataclass(frozen=True, slots=True)
class Name:
    """A (resolved) name reference.

    ``value`` never carries a leading backslash; ``fully_qualified`` records
    whether the name is known to be absolute.
    """

    value: str
    fully_qualified: bool = False

    def __str__(self) -> str:
        return self.value

    @property
    def is_special_class_name(self) -> bool:
        return not self.fully_qualified and self.value.lower() in SPECIAL_CLASS_NAMES

    @property
    def short_name(self) -> str:
        return self.value.rsplit("\\", 1)[-1]

    @property
    def namespace_name(self) -> str:
        head, sep, _ = self.value.rpartition("\\")
        return head if sep else ""


# ============================================================================
# EXPRESSIONS
# ============================================================================


class ExprKind(str, Enum):
    """Tag identifying the shape of an expression node."""

    SCALAR_INT = "scalar-int"
    SCALAR_FLOAT = "scalar-float"
    SCALAR_STRING = "scalar-string"

    MAGIC_CLASS = "magic-class"
    MAGIC_METHOD = "magic-method"
    MAGIC_FUNCTION = "magic-function"
    MAGIC_NAMESPACE = "magic-namespace"
    MAGIC_DIR = "magic-dir"
    MAGIC_FILE = "magic-file"
    MAGIC_LINE = "magic-line"
    MAGIC_TRAIT = "magic-trait"

    CONST_FETCH = "const-fetch"
    CLASS_CONST_FETCH = "class-constant-fetch"
    ARRAY = "array"

    BINARY_PLUS = "binary-plus"
    BINARY_MINUS = "binary-minus"
    BINARY_MUL = "binary-mul"
    BINARY_DIV = "binary-div"
    BINARY_MOD = "binary-mod"
    BINARY_POW = "binary-pow"
    BINARY_BITWISE_OR = "binary-bitwise-or"
    BINARY_BITWISE_AND = "binary-bitwise-and"
    BINARY_BITWISE_XOR = "binary-bitwise-xor"
    BINARY_SHIFT_LEFT = "binary-shift-left"
    BINARY_SHIFT_RIGHT = "binary-shift-right"
    BINARY_CONCAT = "binary-concat"
    BINARY_BOOLEAN_AND = "binary-boolean-and"
    BINARY_BOOLEAN_OR = "binary-boolean-or"
    BINARY_LOGICAL_AND = "binary-logical-and"
    BINARY_LOGICAL_OR = "binary-logical-or"
    BINARY_LOGICAL_XOR = "binary-logical-xor"
    BINARY_EQUAL = "binary-equal"
    BINARY_NOT_EQUAL = "binary-not-equal"
    BINARY_IDENTICAL = "binary-identical"
    BINARY_NOT_IDENTICAL = "binary-not-identical"
    BINARY_SMALLER = "binary-smaller"
    BINARY_SMALLER_OR_EQUAL = "binary-smaller-or-equal"
    BINARY_GREATER = "binary-greater"
    BINARY_GREATER_OR_EQUAL = "binary-greater-or-equal"
    BINARY_SPACESHIP = "binary-spaceship"
    BINARY_COALESCE = "binary-coalesce"

    BOOLEAN_NOT = "boolean-not"
    BITWISE_NOT = "bitwise-not"
    UNARY_MINUS = "unary-minus"
    UNARY_PLUS = "unary-plus"

    TERNARY = "ternary"
    CAST = "cast"

    UNSUPPORTED = "unsupported"


# Operator token -> binary kind
BINARY_OPERATORS: dict[str, ExprKind] = {
    "+": ExprKind.BINARY_PLUS,
    "-": ExprKind.BINARY_MINUS,
    "*": ExprKind.BINARY_MUL,
    "/": ExprKind.BINARY_DIV,
    "%": ExprKind.BINARY_MOD,
    "**": ExprKind.BINARY_POW,
    "|": ExprKind.BINARY_BITWISE_OR,
    "&": ExprKind.BINARY_BITWISE_AND,
    "^": ExprKind.BINARY_BITWISE_XOR,
    "<<": ExprKind.BINARY_SHIFT_LEFT,
    ">>": ExprKind.BINARY_SHIFT_RIGHT,
    ".": ExprKind.BINARY_CONCAT,
    "&&": ExprKind.BINARY_BOOLEAN_AND,
    "||": ExprKind.BINARY_BOOLEAN_OR,
    "and": ExprKind.BINARY_LOGICAL_AND,
    "or": ExprKind.BINARY_LOGICAL_OR,
    "xor": ExprKind.BINARY_LOGICAL_XOR,
    "==": ExprKind.BINARY_EQUAL,
    "!=": ExprKind.BINARY_NOT_EQUAL,
    "<>": ExprKind.BINARY_NOT_EQUAL,
    "===": ExprKind.BINARY_IDENTICAL,
    "!==": ExprKind.BINARY_NOT_IDENTICAL,
    "<": ExprKind.BINARY_SMALLER,
    "<=": ExprKind.BINARY_SMALLER_OR_EQUAL,
    ">": ExprKind.BINARY_GREATER,
    ">=": ExprKind.BINARY_GREATER_OR_EQUAL,
    "<=>": ExprKind.BINARY_SPACESHIP,
    "??": ExprKind.BINARY_COALESCE,
}

UNARY_OPERATORS: dict[str, ExprKind] = {
    "!": ExprKind.BOOLEAN_NOT,
    "~": ExprKind.BITWISE_NOT,
    "-": ExprKind.UNARY_MINUS,
    "+": ExprKind.UNARY_PLUS,
}

# Upper-cased magic constant -> kind
MAGIC_CONSTANTS: dict[str, ExprKind] = {
    "__CLASS__": ExprKind.MAGIC_CLASS,
    "__METHOD__": ExprKind.MAGIC_METHOD,
    "__FUNCTION__": ExprKind.MAGIC_FUNCTION,
    "__NAMESPACE__": ExprKind.MAGIC_NAMESPACE,
    "__DIR__": ExprKind.MAGIC_DIR,
    "__FILE__": ExprKind.MAGIC_FILE,
    "__LINE__": ExprKind.MAGIC_LINE,
    "__TRAIT__": ExprKind.MAGIC_TRAIT,
}


@dataclass(frozen=True, slots=True)
class Expr:
    """Base expression node.

    ``text`` is the verbatim source of the expression.
    """

    kind: ExprKind
    text: str = ""
    line: int = 0


@dataclass(frozen=True, slots=True)
class ScalarExpr(Expr):
    value: int | float | str = 0


@dataclass(frozen=True, slots=True)
class MagicConstExpr(Expr):
    pass


@dataclass(frozen=True, slots=True)
class ConstFetchExpr(Expr):
    name: Name = Name("")


@dataclass(frozen=True, slots=True)
class ClassConstFetchExpr(Expr):
    # Either a resolved class Name or an arbitrary expression yielding a class name
    class_ref: Name | Expr = Name("")
    constant: str = ""


@dataclass(frozen=True, slots=True)
class ArrayItem:
    value: Expr
    key: Expr | None = None
    unpack: bool = False
    by_ref: bool = False


@dataclass(frozen=True, slots=True)
class ArrayExpr(Expr):
    items: tuple[ArrayItem, ...] = ()


@dataclass(frozen=True, slots=True)
class BinaryOpExpr(Expr):
    left: Expr | None = None
    right: Expr | None = None


@dataclass(frozen=True, slots=True)
class UnaryOpExpr(Expr):
    operand: Expr | None = None


@dataclass(frozen=True, slots=True)
class TernaryExpr(Expr):
    cond: Expr | None = None
    if_true: Expr | None = None  # None for the short ``cond ?: else`` form
    if_false: Expr | None = None


@dataclass(frozen=True, slots=True)
class CastExpr(Expr):
    target: str = ""
    operand: Expr | None = None


@dataclass(frozen=True, slots=True)
class UnsupportedExpr(Expr):
    # tree-sitter node type, kept for diagnostics
    node_type: str = ""


# ============================================================================
# TYPES
# ============================================================================


@dataclass(frozen=True, slots=True)
class TypeRef:
    """A declared parameter/property/return type.

    ``names`` holds one entry for a plain type and several for a union or
    intersection. Class names are fully qualified; builtin names are lower-cased.
    """

    names: tuple[str, ...]
    nullable: bool = False
    kind: str = "named"  # named, union, intersection
    text: str = ""


# ============================================================================
# DECLARATIONS
# ============================================================================


class ClassKind(str, Enum):
    CLASS = "class"
    INTERFACE = "interface"
    TRAIT = "trait"


@dataclass(frozen=True, slots=True)
class ConstDeclarator:
    name: str
    value: Expr
    span: Span = NO_SPAN


@dataclass(frozen=True, slots=True)
class ClassConstStatement:
    modifiers: frozenset[str]
    consts: tuple[ConstDeclarator, ...]
    span: Span = NO_SPAN
    doc_comment: str | None = None


@dataclass(frozen=True, slots=True)
class PropertyDeclarator:
    name: str  # without the leading "$"
    default: Expr | None = None
    span: Span = NO_SPAN


@dataclass(frozen=True, slots=True)
class PropertyStatement:
    modifiers: frozenset[str]
    props: tuple[PropertyDeclarator, ...]
    type: TypeRef | None = None
    span: Span = NO_SPAN
    doc_comment: str | None = None


@dataclass(frozen=True, slots=True)
class ParamNode:
    name: str  # without the leading "$"
    type: TypeRef | None = None
    default: Expr | None = None
    by_ref: bool = False
    variadic: bool = False
    promoted: frozenset[str] = frozenset()  # constructor promotion modifiers
    span: Span = NO_SPAN


@dataclass(frozen=True, slots=True)
class MethodNode:
    name: str
    modifiers: frozenset[str]
    params: tuple[ParamNode, ...] = ()
    return_type: TypeRef | None = None
    by_ref: bool = False
    has_body: bool = True
    span: Span = NO_SPAN
    doc_comment: str | None = None


@dataclass(frozen=True, slots=True)
class TraitUseNode:
    traits: tuple[Name, ...]
    span: Span = NO_SPAN


ClassMember = ClassConstStatement | PropertyStatement | MethodNode | TraitUseNode


@dataclass(frozen=True, slots=True)
class ClassLikeNode:
    kind: ClassKind
    name: str  # short name
    modifiers: frozenset[str] = frozenset()
    extends: tuple[Name, ...] = ()  # one entry for classes, several for interfaces
    implements: tuple[Name, ...] = ()
    stmts: tuple[ClassMember, ...] = ()
    span: Span = NO_SPAN
    doc_comment: str | None = None
    file_name: str = ""


@dataclass(frozen=True, slots=True)
class FunctionNode:
    name: str  # short name
    params: tuple[ParamNode, ...] = ()
    return_type: TypeRef | None = None
    by_ref: bool = False
    span: Span = NO_SPAN
    doc_comment: str | None = None


@dataclass(frozen=True, slots=True)
class ConstStatement:
    """Namespace-level constants: ``const A = 1, B = 2;`` or ``define('A', 1);``."""

    consts: tuple[ConstDeclarator, ...]
    span: Span = NO_SPAN
    doc_comment: str | None = None
    via_define: bool = False


@dataclass(frozen=True, slots=True)
class UseNode:
    """``use`` imports; ``kind`` is class, function or const."""

    kind: str
    aliases: tuple[tuple[str, str], ...]  # (alias, fully qualified name)
    span: Span = NO_SPAN


NamespaceMember = ClassLikeNode | FunctionNode | ConstStatement | UseNode


@dataclass(frozen=True, slots=True)
class NamespaceNode:
    name: str  # "" for the global namespace
    stmts: tuple[NamespaceMember, ...] = ()
    span: Span = NO_SPAN
    doc_comment: str | None = None


@dataclass(frozen=True, slots=True)
class FileSyntaxTree:
    """All namespace sections of one file, in source order."""

    file_name: str
    namespaces: tuple[NamespaceNode, ...] = ()
    declares: dict[str, Expr] = field(default_factory=dict)
    error_count: int = 0
