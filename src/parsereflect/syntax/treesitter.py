"""Tree-sitter parsing of PHP sources into reflection syntax nodes.

This module provides:
- Grammar loading for tree-sitter-php
- Conversion of the concrete syntax tree into ``parsereflect.syntax.nodes``
- Name resolution of class/constant references while converting
- Standalone expression parsing (default values given as text)

The converter is tolerant: node kinds it does not model are dropped at the
statement level and become ``UnsupportedExpr`` at the expression level.
"""

from __future__ import annotations

import importlib
import re
from dataclasses import dataclass, field
from typing import Any

import structlog
import tree_sitter

from parsereflect.core.errors import SyntaxLayerError
from parsereflect.syntax.names import NameScope
from parsereflect.syntax.nodes import (
    BINARY_OPERATORS,
    MAGIC_CONSTANTS,
    UNARY_OPERATORS,
    ArrayExpr,
    ArrayItem,
    BinaryOpExpr,
    CastExpr,
    ClassConstFetchExpr,
    ClassConstStatement,
    ClassKind,
    ClassLikeNode,
    ClassMember,
    ConstDeclarator,
    ConstFetchExpr,
    ConstStatement,
    Expr,
    ExprKind,
    FileSyntaxTree,
    FunctionNode,
    MagicConstExpr,
    MethodNode,
    Name,
    NamespaceMember,
    NamespaceNode,
    ParamNode,
    PropertyDeclarator,
    PropertyStatement,
    ScalarExpr,
    Span,
    TernaryExpr,
    TraitUseNode,
    TypeRef,
    UnaryOpExpr,
    UnsupportedExpr,
    UseNode,
)

log = structlog.get_logger(__name__)

GRAMMAR_MODULE = "tree_sitter_php"
LANGUAGE_FUNC = "language_php"

_CLASS_LIKE_KINDS = {
    "class_declaration": ClassKind.CLASS,
    "interface_declaration": ClassKind.INTERFACE,
    "trait_declaration": ClassKind.TRAIT,
}

_MODIFIER_NODES = {
    "abstract_modifier": "abstract",
    "final_modifier": "final",
    "static_modifier": "static",
    "readonly_modifier": "readonly",
    "var_modifier": "public",
}

_PARAM_NODES = frozenset({"simple_parameter", "variadic_parameter", "property_promotion_parameter"})

_NAME_NODES = frozenset({"name", "qualified_name"})

# Children of a string literal that do not interpolate anything
_PLAIN_STRING_PARTS = frozenset(
    {"string_content", "string_value", "escape_sequence", "text", "nowdoc_string"}
)

_SKIPPED_TOP_LEVEL = frozenset({"php_tag", "text", "text_interpolation", "comment"})

_DOUBLE_QUOTE_ESCAPE = re.compile(
    r"\\(?:([nrtvef\\$\"])|([0-7]{1,3})|x([0-9A-Fa-f]{1,2})|u\{([0-9A-Fa-f]+)\})"
)
_SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "e": "\x1b",
    "f": "\f",
    "\\": "\\",
    "$": "$",
    '"': '"',
}


def _text(node: Any) -> str:
    if node is None or not node.text:
        return ""
    text: str = node.text.decode("utf-8", errors="replace")
    return text


def _span(node: Any) -> Span:
    return Span(
        start_line=node.start_point[0] + 1,
        end_line=node.end_point[0] + 1,
        start_byte=node.start_byte,
        end_byte=node.end_byte,
    )


def _doc_comment(node: Any) -> str | None:
    """Return the ``/** ... */`` comment directly preceding a declaration."""
    prev = node.prev_sibling
    if prev is not None and prev.type == "comment":
        text = _text(prev)
        if text.startswith("/**"):
            return text
    return None


def parse_int_literal(text: str) -> int:
    """Parse a PHP integer literal (decimal, hex, octal, binary, with ``_``)."""
    raw = text.replace("_", "").lower()
    if raw.startswith("0x"):
        return int(raw[2:], 16)
    if raw.startswith("0b"):
        return int(raw[2:], 2)
    if raw.startswith("0o"):
        return int(raw[2:], 8)
    if len(raw) > 1 and raw.startswith("0"):
        return int(raw[1:], 8)
    return int(raw)


def parse_float_literal(text: str) -> float:
    return float(text.replace("_", ""))


def unescape_single_quoted(body: str) -> str:
    return re.sub(r"\\([\\'])", r"\1", body)


def unescape_double_quoted(body: str) -> str:
    def replace(match: re.Match[str]) -> str:
        simple, octal, hexa, codepoint = match.groups()
        if simple is not None:
            return _SIMPLE_ESCAPES[simple]
        if octal is not None:
            return chr(int(octal, 8) & 0xFF)
        if hexa is not None:
            return chr(int(hexa, 16))
        return chr(int(codepoint, 16))

    return _DOUBLE_QUOTE_ESCAPE.sub(replace, body)


def _strip_quotes(text: str) -> str:
    if text[:1] in ("b", "B"):
        text = text[1:]
    return text[1:-1] if len(text) >= 2 else ""


def _heredoc_body(text: str) -> str:
    """Extract the body of a heredoc/nowdoc, removing closing-marker indentation."""
    lines = text.split("\n")
    if len(lines) < 2:
        return ""
    closing = lines[-1]
    indent = len(closing) - len(closing.lstrip(" \t"))
    body = [line[indent:] if not line[:indent].strip() else line.lstrip() for line in lines[1:-1]]
    return "\n".join(body)


@dataclass
class _SectionBuilder:
    """Accumulates the statements of one namespace section."""

    name: str
    scope: NameScope
    start_line: int = 0
    end_line: int = 0
    start_byte: int = 0
    end_byte: int = 0
    doc_comment: str | None = None
    stmts: list[NamespaceMember] = field(default_factory=list)

    def touch(self, node: Any) -> None:
        if not self.start_line:
            self.start_line = node.start_point[0] + 1
            self.start_byte = node.start_byte
        self.end_line = node.end_point[0] + 1
        self.end_byte = node.end_byte

    def build(self) -> NamespaceNode:
        return NamespaceNode(
            name=self.name,
            stmts=tuple(self.stmts),
            span=Span(self.start_line, self.end_line, self.start_byte, self.end_byte),
            doc_comment=self.doc_comment,
        )


class _Converter:
    """Converts one tree-sitter tree into syntax nodes."""

    def __init__(self, file_name: str) -> None:
        self.file_name = file_name

    # ------------------------------------------------------------------
    # Program / namespaces
    # ------------------------------------------------------------------

    def convert_program(self, root: Any) -> FileSyntaxTree:
        sections: list[_SectionBuilder] = []
        declares: dict[str, Expr] = {}
        active: _SectionBuilder | None = None

        for child in root.named_children:
            node_type = child.type
            if node_type in _SKIPPED_TOP_LEVEL:
                continue
            if node_type == "declare_statement":
                self._collect_declares(child, declares)
                continue
            if node_type == "namespace_definition":
                name_node = child.child_by_field_name("name")
                namespace = _text(name_node).strip().lstrip("\\")
                builder = _SectionBuilder(namespace, NameScope(namespace=namespace))
                builder.doc_comment = _doc_comment(child)
                builder.touch(child)
                sections.append(builder)
                body = child.child_by_field_name("body")
                if body is not None:
                    for member in body.named_children:
                        self._convert_namespace_member(member, builder)
                    builder.touch(child)
                    active = None
                else:
                    active = builder
                continue
            if active is None:
                active = _SectionBuilder("", NameScope())
                sections.append(active)
            self._convert_namespace_member(child, active)
            active.touch(child)

        return FileSyntaxTree(
            file_name=self.file_name,
            namespaces=tuple(section.build() for section in sections),
            declares=declares,
            error_count=_count_errors(root),
        )

    def _collect_declares(self, node: Any, declares: dict[str, Expr]) -> None:
        for directive in node.named_children:
            if directive.type != "declare_directive" or not directive.named_children:
                continue
            key, sep, _ = _text(directive).partition("=")
            if sep:
                literal = directive.named_children[-1]
                declares[key.strip().lower()] = self.convert_expr(literal, NameScope())

    def _convert_namespace_member(self, node: Any, builder: _SectionBuilder) -> None:
        node_type = node.type
        scope = builder.scope
        member: NamespaceMember | None = None
        if node_type == "namespace_use_declaration":
            member = self._convert_use(node, scope)
        elif node_type in _CLASS_LIKE_KINDS:
            member = self._convert_class_like(node, scope)
        elif node_type == "function_definition":
            member = self._convert_function(node, scope)
        elif node_type == "const_declaration":
            member = ConstStatement(
                consts=self._convert_const_elements(node, scope),
                span=_span(node),
                doc_comment=_doc_comment(node),
            )
        elif node_type == "expression_statement":
            member = self._convert_define(node, scope)
        if member is not None:
            builder.stmts.append(member)

    # ------------------------------------------------------------------
    # Imports
    # ------------------------------------------------------------------

    def _convert_use(self, node: Any, scope: NameScope) -> UseNode:
        kind = "class"
        for child in node.children:
            if not child.is_named and child.type.lower() in ("function", "const"):
                kind = child.type.lower()
        if kind == "class":
            # Newer grammars place the keyword inside the first clause
            clause = next(
                (c for c in node.named_children if c.type == "namespace_use_clause"), None
            )
            if clause is not None:
                kind = _use_clause_kind(clause) or kind

        prefix = ""
        aliases: list[tuple[str, str]] = []
        for child in node.named_children:
            if child.type == "namespace_name":
                prefix = _text(child).lstrip("\\")
            elif child.type == "namespace_use_clause":
                aliases.append(self._convert_use_clause(child, "", kind, scope))
            elif child.type == "namespace_use_group":
                for clause in child.named_children:
                    if clause.type in ("namespace_use_clause", "namespace_use_group_clause"):
                        aliases.append(self._convert_use_clause(clause, prefix, kind, scope))

        return UseNode(kind=kind, aliases=tuple(aliases), span=_span(node))

    def _convert_use_clause(
        self, clause: Any, prefix: str, kind: str, scope: NameScope
    ) -> tuple[str, str]:
        path = ""
        alias: str | None = None
        seen_as = False
        for sub in clause.children:
            if not sub.is_named:
                token = sub.type.lower()
                if token == "as":
                    seen_as = True
                elif token in ("function", "const"):
                    kind = token
            elif sub.type == "namespace_aliasing_clause":
                alias = _text(sub.named_children[-1]) if sub.named_children else None
            elif sub.type in ("name", "qualified_name", "namespace_name"):
                if seen_as:
                    alias = _text(sub)
                elif not path:
                    path = _text(sub)

        full_name = f"{prefix}\\{path}" if prefix else path
        full_name = full_name.lstrip("\\")
        visible_as = scope.add_use(kind, full_name, alias)
        return visible_as, full_name

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    @staticmethod
    def _modifiers(node: Any) -> frozenset[str]:
        modifiers: set[str] = set()
        for child in node.children:
            if child.type == "visibility_modifier":
                modifiers.add(_text(child).strip().lower())
            elif child.type in _MODIFIER_NODES:
                modifiers.add(_MODIFIER_NODES[child.type])
        return frozenset(modifiers)

    def _convert_class_like(self, node: Any, scope: NameScope) -> ClassLikeNode:
        extends: tuple[Name, ...] = ()
        implements: tuple[Name, ...] = ()
        for child in node.named_children:
            if child.type == "base_clause":
                extends = tuple(
                    scope.resolve_class(_text(n)) for n in child.named_children if n.type in _NAME_NODES
                )
            elif child.type == "class_interface_clause":
                implements = tuple(
                    scope.resolve_class(_text(n)) for n in child.named_children if n.type in _NAME_NODES
                )

        body = node.child_by_field_name("body")
        return ClassLikeNode(
            kind=_CLASS_LIKE_KINDS[node.type],
            name=_text(node.child_by_field_name("name")),
            modifiers=self._modifiers(node),
            extends=extends,
            implements=implements,
            stmts=self._convert_class_body(body, scope) if body is not None else (),
            span=_span(node),
            doc_comment=_doc_comment(node),
            file_name=self.file_name,
        )

    def _convert_class_body(self, body: Any, scope: NameScope) -> tuple[ClassMember, ...]:
        members: list[ClassMember] = []
        for child in body.named_children:
            node_type = child.type
            if node_type == "const_declaration":
                members.append(
                    ClassConstStatement(
                        modifiers=self._modifiers(child),
                        consts=self._convert_const_elements(child, scope),
                        span=_span(child),
                        doc_comment=_doc_comment(child),
                    )
                )
            elif node_type == "property_declaration":
                members.append(
                    PropertyStatement(
                        modifiers=self._modifiers(child),
                        props=self._convert_property_elements(child, scope),
                        type=self._convert_type(child.child_by_field_name("type"), scope),
                        span=_span(child),
                        doc_comment=_doc_comment(child),
                    )
                )
            elif node_type == "method_declaration":
                members.append(self._convert_method(child, scope))
            elif node_type == "use_declaration":
                members.append(
                    TraitUseNode(
                        traits=tuple(
                            scope.resolve_class(_text(n))
                            for n in child.named_children
                            if n.type in _NAME_NODES
                        ),
                        span=_span(child),
                    )
                )
        return tuple(members)

    def _convert_const_elements(self, node: Any, scope: NameScope) -> tuple[ConstDeclarator, ...]:
        consts: list[ConstDeclarator] = []
        for element in node.named_children:
            if element.type != "const_element" or not element.named_children:
                continue
            named = element.named_children
            value = (
                self.convert_expr(named[-1], scope)
                if len(named) > 1
                else UnsupportedExpr(ExprKind.UNSUPPORTED, node_type="missing")
            )
            consts.append(ConstDeclarator(name=_text(named[0]), value=value, span=_span(element)))
        return tuple(consts)

    def _convert_property_elements(
        self, node: Any, scope: NameScope
    ) -> tuple[PropertyDeclarator, ...]:
        props: list[PropertyDeclarator] = []
        for element in node.named_children:
            if element.type != "property_element":
                continue
            name_node = element.child_by_field_name("name")
            default_node = element.child_by_field_name("default_value")
            for child in element.named_children:
                if name_node is None and child.type == "variable_name":
                    name_node = child
                elif default_node is None and child.type == "property_initializer":
                    default_node = child.named_children[0] if child.named_children else None
                elif default_node is None and child.type not in ("variable_name", "comment"):
                    default_node = child
            props.append(
                PropertyDeclarator(
                    name=_text(name_node).lstrip("$"),
                    default=self.convert_expr(default_node, scope) if default_node else None,
                    span=_span(element),
                )
            )
        return tuple(props)

    def _convert_method(self, node: Any, scope: NameScope) -> MethodNode:
        return MethodNode(
            name=_text(node.child_by_field_name("name")),
            modifiers=self._modifiers(node),
            params=self._convert_params(node.child_by_field_name("parameters"), scope),
            return_type=self._convert_type(node.child_by_field_name("return_type"), scope),
            by_ref=any(child.type == "reference_modifier" for child in node.children),
            has_body=node.child_by_field_name("body") is not None,
            span=_span(node),
            doc_comment=_doc_comment(node),
        )

    def _convert_function(self, node: Any, scope: NameScope) -> FunctionNode:
        return FunctionNode(
            name=_text(node.child_by_field_name("name")),
            params=self._convert_params(node.child_by_field_name("parameters"), scope),
            return_type=self._convert_type(node.child_by_field_name("return_type"), scope),
            by_ref=any(child.type == "reference_modifier" for child in node.children),
            span=_span(node),
            doc_comment=_doc_comment(node),
        )

    def _convert_params(self, node: Any, scope: NameScope) -> tuple[ParamNode, ...]:
        if node is None:
            return ()
        params: list[ParamNode] = []
        for param in node.named_children:
            if param.type not in _PARAM_NODES:
                continue
            name_node = param.child_by_field_name("name")
            if name_node is None:
                name_node = next((c for c in param.named_children if c.type == "variable_name"), None)
            default_node = param.child_by_field_name("default_value")
            promoted = (
                self._modifiers(param)
                if param.type == "property_promotion_parameter"
                else frozenset()
            )
            params.append(
                ParamNode(
                    name=_text(name_node).lstrip("$"),
                    type=self._convert_type(param.child_by_field_name("type"), scope),
                    default=self.convert_expr(default_node, scope) if default_node else None,
                    by_ref=any(c.type == "reference_modifier" for c in param.children),
                    variadic=param.type == "variadic_parameter",
                    promoted=promoted,
                    span=_span(param),
                )
            )
        return tuple(params)

    def _convert_type(self, node: Any, scope: NameScope) -> TypeRef | None:
        if node is None:
            return None
        text = _text(node)
        node_type = node.type
        if node_type == "optional_type":
            inner = self._convert_type(node.named_children[0], scope) if node.named_children else None
            return TypeRef(inner.names if inner else (), nullable=True, text=text)
        if node_type in ("union_type", "intersection_type", "disjunctive_normal_form_type"):
            names: list[str] = []
            nullable = False
            for child in node.named_children:
                sub = self._convert_type(child, scope)
                if sub is not None:
                    names.extend(sub.names)
                    nullable = nullable or sub.nullable
            return TypeRef(
                tuple(names),
                nullable=nullable or "null" in names,
                kind="intersection" if node_type == "intersection_type" else "union",
                text=text,
            )
        resolved = scope.resolve_type(text)
        return TypeRef((resolved,), nullable=resolved in ("null", "mixed"), text=text)

    def _convert_define(self, node: Any, scope: NameScope) -> ConstStatement | None:
        call = node.named_children[0] if node.named_children else None
        if call is None or call.type != "function_call_expression":
            return None
        function = call.child_by_field_name("function")
        if _text(function).lstrip("\\").lower() != "define":
            return None
        arguments = call.child_by_field_name("arguments")
        values = (
            [a.named_children[-1] for a in arguments.named_children if a.type == "argument" and a.named_children]
            if arguments is not None
            else []
        )
        if len(values) < 2:
            return None
        name_expr = self.convert_expr(values[0], scope)
        if not isinstance(name_expr, ScalarExpr) or not isinstance(name_expr.value, str):
            return None
        declarator = ConstDeclarator(
            name=name_expr.value.lstrip("\\"),
            value=self.convert_expr(values[1], scope),
            span=_span(node),
        )
        return ConstStatement(
            consts=(declarator,), span=_span(node), doc_comment=_doc_comment(node), via_define=True
        )

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def convert_expr(self, node: Any, scope: NameScope) -> Expr:
        node_type = node.type
        text = _text(node)
        line = node.start_point[0] + 1

        if node_type == "parenthesized_expression" and node.named_children:
            return self.convert_expr(node.named_children[0], scope)
        if node_type == "integer":
            return ScalarExpr(ExprKind.SCALAR_INT, text, line, value=parse_int_literal(text))
        if node_type == "float":
            return ScalarExpr(ExprKind.SCALAR_FLOAT, text, line, value=parse_float_literal(text))
        if node_type == "string":
            value = unescape_single_quoted(_strip_quotes(text))
            return ScalarExpr(ExprKind.SCALAR_STRING, text, line, value=value)
        if node_type == "encapsed_string":
            if not _is_plain_string(node):
                return UnsupportedExpr(ExprKind.UNSUPPORTED, text, line, node_type=node_type)
            value = unescape_double_quoted(_strip_quotes(text))
            return ScalarExpr(ExprKind.SCALAR_STRING, text, line, value=value)
        if node_type in ("heredoc", "nowdoc"):
            if not _is_plain_string(node):
                return UnsupportedExpr(ExprKind.UNSUPPORTED, text, line, node_type=node_type)
            body = _heredoc_body(text)
            if node_type == "heredoc":
                body = unescape_double_quoted(body)
            return ScalarExpr(ExprKind.SCALAR_STRING, text, line, value=body)
        if node_type in ("boolean", "null"):
            return ConstFetchExpr(ExprKind.CONST_FETCH, text, line, name=Name(text.strip()))
        if node_type in _NAME_NODES:
            magic = MAGIC_CONSTANTS.get(text.upper())
            if magic is not None:
                return MagicConstExpr(magic, text, line)
            return ConstFetchExpr(
                ExprKind.CONST_FETCH, text, line, name=scope.resolve_constant(text)
            )
        if node_type == "class_constant_access_expression":
            return self._convert_class_const_fetch(node, scope)
        if node_type == "array_creation_expression":
            return self._convert_array(node, scope)
        if node_type == "binary_expression":
            return self._convert_binary(node, scope)
        if node_type == "unary_op_expression":
            return self._convert_unary(node, scope)
        if node_type == "conditional_expression":
            return self._convert_ternary(node, scope)
        if node_type == "cast_expression":
            type_node = node.child_by_field_name("type")
            value_node = node.child_by_field_name("value")
            if type_node is None or value_node is None:
                return UnsupportedExpr(ExprKind.UNSUPPORTED, text, line, node_type=node_type)
            return CastExpr(
                ExprKind.CAST,
                text,
                line,
                target=_text(type_node).strip("() \t").lower(),
                operand=self.convert_expr(value_node, scope),
            )

        return UnsupportedExpr(ExprKind.UNSUPPORTED, text, line, node_type=node_type)

    def _convert_class_const_fetch(self, node: Any, scope: NameScope) -> Expr:
        text = _text(node)
        line = node.start_point[0] + 1
        if len(node.children) < 3:
            return UnsupportedExpr(ExprKind.UNSUPPORTED, text, line, node_type=node.type)
        qualifier = node.children[0]
        constant = _text(node.children[-1])
        class_ref: Name | Expr
        if qualifier.type == "relative_scope":
            class_ref = Name(_text(qualifier).strip().lower())
        elif qualifier.type in _NAME_NODES:
            class_ref = scope.resolve_class(_text(qualifier))
        else:
            class_ref = self.convert_expr(qualifier, scope)
        return ClassConstFetchExpr(
            ExprKind.CLASS_CONST_FETCH, text, line, class_ref=class_ref, constant=constant
        )

    def _convert_array(self, node: Any, scope: NameScope) -> Expr:
        items: list[ArrayItem] = []
        for element in node.named_children:
            if element.type != "array_element_initializer":
                continue
            parts = [c for c in element.named_children if c.type != "comment"]
            if not parts:
                continue
            has_arrow = any(not c.is_named and c.type == "=>" for c in element.children)
            has_spread = any(not c.is_named and c.type == "..." for c in element.children)
            if parts[0].type == "variadic_unpacking" and parts[0].named_children:
                value = self.convert_expr(parts[0].named_children[0], scope)
                items.append(ArrayItem(value=value, unpack=True))
            elif has_arrow and len(parts) >= 2:
                items.append(
                    ArrayItem(
                        value=self.convert_expr(parts[-1], scope),
                        key=self.convert_expr(parts[0], scope),
                        by_ref=parts[-1].type == "by_ref",
                    )
                )
            else:
                items.append(
                    ArrayItem(
                        value=self.convert_expr(parts[-1], scope),
                        unpack=has_spread,
                        by_ref=parts[-1].type == "by_ref",
                    )
                )
        return ArrayExpr(ExprKind.ARRAY, _text(node), node.start_point[0] + 1, items=tuple(items))

    def _convert_binary(self, node: Any, scope: NameScope) -> Expr:
        text = _text(node)
        line = node.start_point[0] + 1
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        operator = node.child_by_field_name("operator")
        if operator is None and len(node.children) >= 3:
            operator = node.children[1]
        kind = BINARY_OPERATORS.get(_text(operator).strip().lower())
        if kind is None or left is None or right is None:
            return UnsupportedExpr(ExprKind.UNSUPPORTED, text, line, node_type=node.type)
        return BinaryOpExpr(
            kind,
            text,
            line,
            left=self.convert_expr(left, scope),
            right=self.convert_expr(right, scope),
        )

    def _convert_unary(self, node: Any, scope: NameScope) -> Expr:
        text = _text(node)
        line = node.start_point[0] + 1
        operator = node.child_by_field_name("operator")
        operand = node.child_by_field_name("argument")
        if operator is None and node.children:
            operator = node.children[0]
        if operand is None and node.named_children:
            operand = node.named_children[-1]
        kind = UNARY_OPERATORS.get(_text(operator).strip())
        if kind is None or operand is None:
            return UnsupportedExpr(ExprKind.UNSUPPORTED, text, line, node_type=node.type)
        return UnaryOpExpr(kind, text, line, operand=self.convert_expr(operand, scope))

    def _convert_ternary(self, node: Any, scope: NameScope) -> Expr:
        text = _text(node)
        line = node.start_point[0] + 1
        cond = node.child_by_field_name("condition")
        body = node.child_by_field_name("body")
        alternative = node.child_by_field_name("alternative")
        if cond is None or alternative is None:
            named = node.named_children
            if len(named) == 3:
                cond, body, alternative = named
            elif len(named) == 2:
                cond, alternative = named
            else:
                return UnsupportedExpr(ExprKind.UNSUPPORTED, text, line, node_type=node.type)
        return TernaryExpr(
            ExprKind.TERNARY,
            text,
            line,
            cond=self.convert_expr(cond, scope),
            if_true=self.convert_expr(body, scope) if body is not None else None,
            if_false=self.convert_expr(alternative, scope),
        )


def _is_plain_string(node: Any) -> bool:
    """True when a string literal has no interpolated parts."""
    stack = list(node.named_children)
    while stack:
        child = stack.pop()
        if child.type in ("heredoc_body", "nowdoc_body"):
            stack.extend(child.named_children)
        elif child.type not in _PLAIN_STRING_PARTS and not child.type.startswith(("heredoc_", "nowdoc_")):
            return False
    return True


def _use_clause_kind(clause: Any) -> str | None:
    """``function`` or ``const`` when the clause carries that keyword."""
    for sub in clause.children:
        if not sub.is_named and sub.type.lower() in ("function", "const"):
            return str(sub.type.lower())
    return None


def _count_errors(root: Any) -> int:
    errors = 0
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            errors += 1
        stack.extend(node.children)
    return errors


@dataclass
class PhpParser:
    """
    Tree-sitter parser for PHP sources.

    Usage::

        parser = PhpParser()

        # Parse a file into namespace sections
        tree = parser.parse(Path("src/Foo.php").read_bytes(), "src/Foo.php")

        # Parse a standalone expression
        expr = parser.parse_expression("1 << 3 | self::FLAG")
    """

    _parser: Any = field(default=None, repr=False)
    _language: Any = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self._parser = tree_sitter.Parser()

    def _get_language(self) -> Any:
        if self._language is None:
            try:
                mod = importlib.import_module(GRAMMAR_MODULE)
                lang_fn = getattr(mod, LANGUAGE_FUNC)
                self._language = tree_sitter.Language(lang_fn())
            except (ImportError, AttributeError) as err:
                raise SyntaxLayerError.grammar_unavailable(GRAMMAR_MODULE) from err
        return self._language

    def _parse_tree(self, content: bytes) -> Any:
        self._parser.language = self._get_language()
        return self._parser.parse(content)

    def parse(self, content: bytes | str, file_name: str = "") -> FileSyntaxTree:
        """Parse PHP source into a ``FileSyntaxTree``.

        Args:
            content: File content (bytes or text).
            file_name: Canonical path recorded on class-like nodes.
        """
        if isinstance(content, str):
            content = content.encode("utf-8")
        tree = self._parse_tree(content)
        result = _Converter(file_name).convert_program(tree.root_node)
        log.debug(
            "php_parsed",
            file=file_name,
            namespaces=len(result.namespaces),
            errors=result.error_count,
        )
        return result

    def parse_expression(self, code: str, namespace: str = "") -> Expr:
        """Parse a standalone PHP expression, e.g. a default value given as text."""
        prefix = f"namespace {namespace};\n" if namespace else ""
        tree = self._parse_tree(f"<?php\n{prefix}return {code};\n".encode())
        for child in tree.root_node.named_children:
            if child.type == "return_statement" and child.named_children:
                return _Converter("").convert_expr(
                    child.named_children[0], NameScope(namespace=namespace)
                )
        raise SyntaxLayerError.expression_not_parsed(code)
