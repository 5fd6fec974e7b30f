"""Tests for the tree-sitter PHP parser and syntax node conversion."""

import pytest

from parsereflect.core.errors import SyntaxLayerError
from parsereflect.syntax import ClassKind, ExprKind, PhpParser
from parsereflect.syntax.nodes import (
    ClassConstFetchExpr,
    ClassConstStatement,
    ClassLikeNode,
    ConstFetchExpr,
    ConstStatement,
    FunctionNode,
    MethodNode,
    PropertyStatement,
    ScalarExpr,
    TraitUseNode,
    UseNode,
)
from parsereflect.syntax.treesitter import (
    parse_float_literal,
    parse_int_literal,
    unescape_double_quoted,
    unescape_single_quoted,
)


@pytest.fixture(scope="module")
def parser() -> PhpParser:
    return PhpParser()


class TestLiterals:
    """Literal decoding helpers."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [("42", 42), ("0x1f", 31), ("0b11", 3), ("0o17", 15), ("017", 15), ("1_000_000", 1000000)],
    )
    def test_given_int_literal_when_parsed_then_value(self, text: str, expected: int) -> None:
        """All integer notations are decoded."""
        assert parse_int_literal(text) == expected

    def test_given_float_literal_when_parsed_then_value(self) -> None:
        """Float notations, separators included, are decoded."""
        assert parse_float_literal("1_000.5") == 1000.5
        assert parse_float_literal("1e3") == 1000.0

    def test_given_escapes_when_unescaped_then_quote_rules(self) -> None:
        """Single quotes only unescape quote and backslash; double quotes expand more."""
        assert unescape_single_quoted("it\\'s \\n") == "it's \\n"
        assert unescape_double_quoted("a\\tb\\x41\\u{1F600}\\101") == "a\tbA\U0001F600A"


class TestParseFile:
    """Whole-file conversion."""

    def test_given_file_without_namespace_when_parsed_then_global_section(
        self, parser: PhpParser
    ) -> None:
        """Code outside any namespace lands in the "" section."""
        # When
        tree = parser.parse("<?php\nclass Foo {}\nfunction bar() {}\n", "foo.php")

        # Then
        assert [ns.name for ns in tree.namespaces] == [""]
        stmts = tree.namespaces[0].stmts
        assert isinstance(stmts[0], ClassLikeNode)
        assert stmts[0].file_name == "foo.php"
        assert isinstance(stmts[1], FunctionNode)
        assert tree.error_count == 0

    def test_given_unbraced_namespaces_when_parsed_then_split_sections(
        self, parser: PhpParser
    ) -> None:
        """Each namespace statement starts a new section."""
        # When
        tree = parser.parse(
            "<?php\nnamespace A;\nclass One {}\nnamespace B\\C;\nclass Two extends \\A\\One {}\n"
        )

        # Then
        assert [ns.name for ns in tree.namespaces] == ["A", "B\\C"]
        two = tree.namespaces[1].stmts[0]
        assert isinstance(two, ClassLikeNode)
        assert two.extends[0].value == "A\\One"

    def test_given_class_members_when_parsed_then_converted(self, parser: PhpParser) -> None:
        """Constants, properties, methods and trait uses become member nodes."""
        # When
        tree = parser.parse(
            "<?php\n"
            "namespace App;\n"
            "use Lib\\Base;\n"
            "/** Doc */\n"
            "abstract class Widget extends Base implements \\Countable {\n"
            "    use Helpers;\n"
            "    private const A = 1, B = 2;\n"
            "    protected static ?int $count = null;\n"
            "    abstract public function render(string $tpl = 'x'): string;\n"
            "}\n"
        )

        # Then
        widget = tree.namespaces[0].stmts[1]
        assert isinstance(widget, ClassLikeNode)
        assert widget.kind == ClassKind.CLASS
        assert widget.modifiers == frozenset({"abstract"})
        assert widget.doc_comment == "/** Doc */"
        assert [n.value for n in widget.extends] == ["Lib\\Base"]
        assert [n.value for n in widget.implements] == ["Countable"]
        trait_use, consts, props, method = widget.stmts
        assert isinstance(trait_use, TraitUseNode)
        assert trait_use.traits[0].value == "App\\Helpers"
        assert isinstance(consts, ClassConstStatement)
        assert [c.name for c in consts.consts] == ["A", "B"]
        assert consts.modifiers == frozenset({"private"})
        assert isinstance(props, PropertyStatement)
        assert props.modifiers == frozenset({"protected", "static"})
        assert props.props[0].name == "count"
        assert props.type is not None and props.type.nullable is True
        assert isinstance(method, MethodNode)
        assert method.has_body is False
        assert method.params[0].name == "tpl"

    def test_given_interface_and_trait_when_parsed_then_kinds(self, parser: PhpParser) -> None:
        """Interfaces extend other interfaces; traits are their own kind."""
        # When
        stmts = parser.parse(
            "<?php\ninterface I extends J, K {}\ntrait T {}\n"
        ).namespaces[0].stmts

        # Then
        assert stmts[0].kind == ClassKind.INTERFACE
        assert [n.value for n in stmts[0].extends] == ["J", "K"]
        assert stmts[1].kind == ClassKind.TRAIT

    def test_given_use_statements_when_parsed_then_aliases(self, parser: PhpParser) -> None:
        """Group, aliased and function/const imports are recorded."""
        # When
        stmts = parser.parse(
            "<?php\nuse A\\{B, C as D};\nuse function F\\g;\nuse const H\\I;\n"
        ).namespaces[0].stmts

        # Then
        assert all(isinstance(s, UseNode) for s in stmts)
        assert stmts[0].aliases == (("B", "A\\B"), ("D", "A\\C"))
        assert stmts[1].kind == "function"
        assert stmts[2].kind == "const"
        assert stmts[2].aliases == (("I", "H\\I"),)

    def test_given_aliased_const_import_when_referenced_then_fully_qualified(
        self, parser: PhpParser
    ) -> None:
        """Imported constants and functions are recorded with their own kind."""
        # When
        stmts = parser.parse(
            "<?php\nnamespace App;\nuse const Lib\\LIMIT as CAP;\n"
            "use function Lib\\helper;\nconst X = CAP;\n"
        ).namespaces[0].stmts

        # Then
        const_use, function_use, const_stmt = stmts
        assert isinstance(const_use, UseNode)
        assert const_use.kind == "const"
        assert const_use.aliases == (("CAP", "Lib\\LIMIT"),)
        assert isinstance(function_use, UseNode)
        assert function_use.kind == "function"
        assert isinstance(const_stmt, ConstStatement)
        fetch = const_stmt.consts[0].value
        assert isinstance(fetch, ConstFetchExpr)
        assert fetch.name.value == "Lib\\LIMIT"

    def test_given_const_and_define_when_parsed_then_const_statements(
        self, parser: PhpParser
    ) -> None:
        """const and define() both declare namespace constants."""
        # When
        stmts = parser.parse("<?php\nconst X = 1;\ndefine('Y', 2);\n").namespaces[0].stmts

        # Then
        assert isinstance(stmts[0], ConstStatement)
        assert isinstance(stmts[1], ConstStatement)
        assert stmts[1].via_define is True
        assert stmts[1].consts[0].name == "Y"

    def test_given_declare_when_parsed_then_recorded(self, parser: PhpParser) -> None:
        """declare() directives are recorded on the tree."""
        # When
        tree = parser.parse("<?php\ndeclare(strict_types=1);\nclass A {}\n")

        # Then
        strict = tree.declares["strict_types"]
        assert isinstance(strict, ScalarExpr)
        assert strict.value == 1

    def test_given_broken_source_when_parsed_then_errors_counted(self, parser: PhpParser) -> None:
        """Syntax errors do not abort parsing."""
        # When
        tree = parser.parse("<?php\nclass Broken {\n  const A = ;\n}\nclass Fine {}\n")

        # Then
        assert tree.error_count > 0


class TestParseExpression:
    """Standalone expressions."""

    def test_given_constant_when_parsed_then_const_fetch(self, parser: PhpParser) -> None:
        """Bare names are constant fetches."""
        # When
        expr = parser.parse_expression("FOO")

        # Then
        assert isinstance(expr, ConstFetchExpr)
        assert expr.kind == ExprKind.CONST_FETCH
        assert expr.name.value == "FOO"

    def test_given_class_constant_in_namespace_when_parsed_then_resolved(
        self, parser: PhpParser
    ) -> None:
        """Class references in expressions are namespace-qualified."""
        # When
        expr = parser.parse_expression("Config::MAX", "App")

        # Then
        assert isinstance(expr, ClassConstFetchExpr)
        assert str(expr.class_ref) == "App\\Config"
        assert expr.constant == "MAX"

    @pytest.mark.parametrize(
        ("code", "kind"),
        [
            ("1 + 2", ExprKind.BINARY_PLUS),
            ("1 . 2", ExprKind.BINARY_CONCAT),
            ("a ?? b", ExprKind.BINARY_COALESCE),
            ("1 <=> 2", ExprKind.BINARY_SPACESHIP),
            ("-1", ExprKind.UNARY_MINUS),
            ("!a", ExprKind.BOOLEAN_NOT),
            ("a ? 1 : 2", ExprKind.TERNARY),
            ("(string) 1", ExprKind.CAST),
            ("[1, 2]", ExprKind.ARRAY),
            ("__DIR__", ExprKind.MAGIC_DIR),
            ("new Foo()", ExprKind.UNSUPPORTED),
            ('"interpolated $x"', ExprKind.UNSUPPORTED),
        ],
    )
    def test_given_expression_when_parsed_then_kind(
        self, parser: PhpParser, code: str, kind: ExprKind
    ) -> None:
        """Expressions are tagged with their kind."""
        assert parser.parse_expression(code).kind == kind

    def test_given_nowdoc_when_parsed_then_body_without_indent(self, parser: PhpParser) -> None:
        """Nowdoc bodies are taken literally with closing indentation removed."""
        # When
        expr = parser.parse_expression("<<<'TXT'\n    line one\n      line two\n    TXT\n")

        # Then
        assert isinstance(expr, ScalarExpr)
        assert expr.value == "line one\n  line two"

    def test_given_statement_when_parsed_as_expression_then_error(self, parser: PhpParser) -> None:
        """Code that is not an expression can not be parsed as one."""
        with pytest.raises(SyntaxLayerError):
            parser.parse_expression("")
