"""Tests for constant-expression evaluation."""

import math
from collections.abc import Callable
from pathlib import Path

import pytest

from parsereflect.core.errors import ResolutionError
from parsereflect.engine import ReflectionEngine
from parsereflect.host import HostEnvironment
from parsereflect.locator import ClassMapLocator
from parsereflect.resolver import EvaluationContext, ExpressionResolver, ExpressionValue

PhpProject = Callable[..., ReflectionEngine]


def _evaluate(engine: ReflectionEngine, code: str, **context: object) -> ExpressionValue:
    node = engine.parse_expression(code, str(context.get("namespace_name", "")))
    return ExpressionResolver(EvaluationContext(engine, **context)).evaluate(node)  # type: ignore[arg-type]


@pytest.fixture
def engine() -> ReflectionEngine:
    return ReflectionEngine(ClassMapLocator({}))


class TestScalarsAndOperators:
    """Literal and operator evaluation without any class context."""

    @pytest.mark.parametrize(
        ("code", "expected"),
        [
            ("42", 42),
            ("0x1A", 26),
            ("0b101", 5),
            ("1_000", 1000),
            ("1.5", 1.5),
            ("'it\\'s'", "it's"),
            ('"a\\tb"', "a\tb"),
            ("1 + 2 * 3", 7),
            ("(1 + 2) * 3", 9),
            ("10 / 4", 2.5),
            ("10 / 5", 2),
            ("2 ** 3", 8),
            ("-7 % 3", -1),
            ("1 << 4 | 1", 17),
            ("~0", -1),
            ("'a' . 'b' . 1", "ab1"),
            ("1 < 2", True),
            ("1 <=> 2", -1),
            ("'1' == '01'", True),
            ("1 === 1.0", False),
            ("!0", True),
            ("true && false", False),
            ("true xor true", False),
            ("null ?? 'fallback'", "fallback"),
            ("0 ?: 'short'", "short"),
            ("1 ? 'yes' : 'no'", "yes"),
            ("(int) '12abc'", 12),
            ("(bool) ''", False),
            ("-(3)", -3),
        ],
    )
    def test_given_expression_when_evaluated_then_host_value(
        self, engine: ReflectionEngine, code: str, expected: object
    ) -> None:
        """Operators follow the host language semantics."""
        # Given / When
        result = _evaluate(engine, code)

        # Then
        assert result.value == expected
        assert type(result.value) is type(expected)

    def test_given_division_by_zero_when_evaluated_then_raises(
        self, engine: ReflectionEngine
    ) -> None:
        """Division by zero is a resolution error."""
        with pytest.raises(ResolutionError) as exc_info:
            _evaluate(engine, "1 / 0")
        assert exc_info.value.code.name == "DIVISION_BY_ZERO"

    def test_given_unsupported_node_when_evaluated_then_none(
        self, engine: ReflectionEngine
    ) -> None:
        """Function calls are not constant expressions and yield None."""
        # When
        result = _evaluate(engine, "strlen('abc')")

        # Then
        assert result.value is None
        assert result.is_constant_reference is False

    @pytest.mark.parametrize(
        ("code", "expected"),
        [("2 ** PHP_INT_MAX", math.inf), ("-2 ** PHP_INT_MAX", -math.inf)],
    )
    def test_given_huge_exponent_when_evaluated_then_infinity(
        self, engine: ReflectionEngine, code: str, expected: float
    ) -> None:
        """Powers beyond the float range overflow to INF instead of growing an integer."""
        assert _evaluate(engine, code).value == expected


class TestShortCircuit:
    """Operands that are never reached are never evaluated."""

    @pytest.mark.parametrize(
        ("code", "expected"),
        [
            ("false && Missing::X", False),
            ("true || Missing::X", True),
            ("false and Missing::X", False),
            ("true or Missing::X", True),
            ("1 ? 'a' : Missing::X", "a"),
            ("0 ? Missing::X : 'b'", "b"),
            ("'set' ?: Missing::X", "set"),
            ("'set' ?? Missing::X", "set"),
        ],
    )
    def test_given_unreachable_operand_when_evaluated_then_not_resolved(
        self, engine: ReflectionEngine, code: str, expected: object
    ) -> None:
        """An unknown class in a skipped branch does not raise."""
        assert _evaluate(engine, code).value == expected

    def test_given_reached_operand_when_evaluated_then_raises(
        self, engine: ReflectionEngine
    ) -> None:
        """The same operand raises once it is actually needed."""
        with pytest.raises(ResolutionError):
            _evaluate(engine, "true && Missing::X")


class TestArrays:
    """Array literal evaluation."""

    def test_given_list_when_evaluated_then_sequential_keys(self, engine: ReflectionEngine) -> None:
        """Keyless items get the next integer key."""
        assert _evaluate(engine, "[1, 2, 3]").value == {0: 1, 1: 2, 2: 3}

    def test_given_mixed_keys_when_evaluated_then_next_key_follows_largest(
        self, engine: ReflectionEngine
    ) -> None:
        """The next implicit key follows the largest integer key so far."""
        # When
        result = _evaluate(engine, "[5 => 'a', 'b', 'x' => 'c', '9' => 'd', 'e']")

        # Then
        assert result.value == {5: "a", 6: "b", "x": "c", 9: "d", 10: "e"}

    def test_given_spread_when_evaluated_then_int_keys_renumbered(
        self, engine: ReflectionEngine
    ) -> None:
        """Unpacked integer keys are appended; string keys are kept."""
        # When
        result = _evaluate(engine, "[0, ...[1, 2], ...['k' => 3]]")

        # Then
        assert result.value == {0: 0, 1: 1, 2: 2, "k": 3}

    def test_given_array_syntax_when_evaluated_then_same_as_short_syntax(
        self, engine: ReflectionEngine
    ) -> None:
        """Long array() syntax is supported."""
        assert _evaluate(engine, "array('a' => 1)").value == {"a": 1}


class TestConstantReferences:
    """Named constants and the constant-reference flag."""

    def test_given_host_constant_when_evaluated_then_reference_marked(
        self, engine: ReflectionEngine
    ) -> None:
        """A bare predefined constant is a constant reference."""
        # When
        result = _evaluate(engine, "PHP_INT_MAX")

        # Then
        assert result.value == 2**63 - 1
        assert result.is_constant_reference is True
        assert result.constant_name == "PHP_INT_MAX"

    def test_given_nested_constant_when_evaluated_then_not_a_reference(
        self, engine: ReflectionEngine
    ) -> None:
        """Only the outermost node can be a constant reference."""
        # When
        result = _evaluate(engine, "PHP_INT_MAX - 1")

        # Then
        assert result.value == 2**63 - 2
        assert result.is_constant_reference is False
        assert result.constant_name is None

    @pytest.mark.parametrize("code", ["true", "FALSE", "null"])
    def test_given_literal_names_when_evaluated_then_never_references(
        self, engine: ReflectionEngine, code: str
    ) -> None:
        """true, false and null are never reported as constants."""
        assert _evaluate(engine, code).is_constant_reference is False

    def test_given_configured_constant_when_evaluated_then_host_value(self) -> None:
        """Extra host constants come from configuration."""
        # Given
        engine = ReflectionEngine(
            ClassMapLocator({}), host=HostEnvironment.default({"APP_ENV": "test"})
        )

        # When / Then
        assert _evaluate(engine, "APP_ENV").value == "test"

    def test_given_unknown_constant_in_parameter_mode_then_symbolic_name(
        self, engine: ReflectionEngine
    ) -> None:
        """Parameter defaults degrade to the constant's name when unresolved."""
        # When
        result = _evaluate(engine, "UNKNOWN_FLAG", is_parameter=True)

        # Then
        assert result.value == "UNKNOWN_FLAG"
        assert result.is_constant_reference is True

    def test_given_unknown_constant_outside_parameter_mode_then_none(
        self, engine: ReflectionEngine
    ) -> None:
        """Unresolved constants evaluate to None but stay references."""
        # When
        result = _evaluate(engine, "UNKNOWN_FLAG")

        # Then
        assert result.value is None
        assert result.constant_name == "UNKNOWN_FLAG"

    def test_given_namespaced_fallback_when_evaluated_then_global_constant(
        self, engine: ReflectionEngine
    ) -> None:
        """Unqualified names fall back to the global scope."""
        assert _evaluate(engine, "E_ALL", namespace_name="App").value == 32767


class TestMagicConstants:
    """Magic constants reflect the evaluation context."""

    def test_given_context_when_magic_constants_then_context_values(
        self, engine: ReflectionEngine
    ) -> None:
        """__NAMESPACE__, __FILE__, __DIR__ and __LINE__ use the context."""
        # Given
        context = {"namespace_name": "App", "file_name": "/src/app/Config.php"}

        # When / Then
        assert _evaluate(engine, "__NAMESPACE__", **context).value == "App"
        assert _evaluate(engine, "__FILE__", **context).value == "/src/app/Config.php"
        assert _evaluate(engine, "__DIR__", **context).value == "/src/app"
        assert isinstance(_evaluate(engine, "__LINE__").value, int)

    def test_given_no_class_when_magic_class_then_empty(self, engine: ReflectionEngine) -> None:
        """__CLASS__ is empty outside classes."""
        assert _evaluate(engine, "__CLASS__").value == ""


class TestClassConstantFetch:
    """Class constant fetches through the engine."""

    def test_given_other_class_when_fetched_then_value_and_reference(
        self, php_project: PhpProject
    ) -> None:
        """Class::CONST loads the class and returns its value."""
        # Given
        engine = php_project(
            {"Limits.php": "<?php\nnamespace App;\nclass Limits { const MAX = 10; }\n"},
            classes={"App\\Limits": "Limits.php"},
        )

        # When
        result = _evaluate(engine, "\\App\\Limits::MAX")

        # Then
        assert result.value == 10
        assert result.is_constant_reference is True
        assert result.constant_name == "App\\Limits::MAX"

    def test_given_nested_class_constant_when_evaluated_then_not_a_reference(
        self, php_project: PhpProject
    ) -> None:
        """A class constant inside a larger expression is only a value."""
        # Given
        engine = php_project(
            {"Limits.php": "<?php\nnamespace App;\nclass Limits { const MAX = 10; }\n"},
            classes={"App\\Limits": "Limits.php"},
        )

        # When
        result = _evaluate(engine, "\\App\\Limits::MAX + 1")

        # Then
        assert result.value == 11
        assert result.is_constant_reference is False
        assert result.constant_name is None

    def test_given_class_keyword_when_fetched_then_qualified_name(
        self, php_project: PhpProject
    ) -> None:
        """Class::class yields the fully-qualified class name."""
        # Given
        engine = php_project(
            {"Limits.php": "<?php\nnamespace App;\nclass Limits {}\n"},
            classes={"App\\Limits": "Limits.php"},
        )

        # When / Then
        assert _evaluate(engine, "Limits::class", namespace_name="App").value == "App\\Limits"

    def test_given_missing_class_when_fetched_then_raises(self, engine: ReflectionEngine) -> None:
        """An unknown class operand is a resolution error."""
        with pytest.raises(ResolutionError) as exc_info:
            _evaluate(engine, "Missing::VALUE")
        assert exc_info.value.details["class"] == "Missing"

    def test_given_self_without_class_when_fetched_then_raises(
        self, engine: ReflectionEngine
    ) -> None:
        """self:: needs a declaring class."""
        with pytest.raises(ResolutionError):
            _evaluate(engine, "self::VALUE")

    def test_given_self_in_parameter_mode_then_symbolic(self, engine: ReflectionEngine) -> None:
        """self::X in a parameter default stays symbolic."""
        # When
        result = _evaluate(engine, "self::VALUE", is_parameter=True)

        # Then
        assert result.value == "self::VALUE"
        assert result.constant_name == "self::VALUE"

    def test_given_non_string_operand_when_fetched_then_raises(
        self, engine: ReflectionEngine
    ) -> None:
        """Only string operands can name a class dynamically."""
        with pytest.raises(ResolutionError) as exc_info:
            _evaluate(engine, "(1 + 1)::VALUE")
        assert exc_info.value.code.name == "UNSUPPORTED_CLASS_OPERAND"


class TestNamespaceConstants:
    """Constants declared in the file namespace of the context."""

    def test_given_namespace_constant_when_evaluated_then_file_value(
        self, php_project: PhpProject, tmp_path: Path
    ) -> None:
        """Namespace constants win over host constants and are qualified."""
        # Given
        engine = php_project(
            {"consts.php": "<?php\nnamespace App;\nconst PHP_EOL = 'custom';\nconst LIMIT = 5 * 2;\n"}
        )
        path = str((tmp_path / "consts.php").resolve())

        # When
        eol = _evaluate(engine, "PHP_EOL", file_name=path, namespace_name="App")
        limit = _evaluate(engine, "LIMIT + 1", file_name=path, namespace_name="App")

        # Then
        assert eol.value == "custom"
        assert eol.constant_name == "App\\PHP_EOL"
        assert limit.value == 11
