"""Tests for ReflectionEngine: locating, parsing, caching and lookups."""

from collections.abc import Callable
from pathlib import Path

import pytest

from parsereflect.config.models import CacheConfig, HostConfig, ReflectConfig
from parsereflect.core.errors import ErrorCode, NotFoundError, ResolutionError
from parsereflect.engine import ReflectionEngine
from parsereflect.host import NativeClass
from parsereflect.locator import ClassMapLocator
from parsereflect.reflection import ReflectionClass
from parsereflect.syntax.nodes import MethodNode, ScalarExpr

PhpProject = Callable[..., ReflectionEngine]

INVOICE = """<?php
namespace App\\Billing;

class Invoice
{
    const PREFIX = 'INV';
    protected $total = 0;

    public function send() {}
}
"""


@pytest.fixture
def engine(php_project: PhpProject) -> ReflectionEngine:
    return php_project(
        {"Invoice.php": INVOICE, "Empty.php": "<?php\nnamespace App\\Billing;\n"},
        classes={"App\\Billing\\Invoice": "Invoice.php", "App\\Billing\\Missing": "Empty.php"},
    )


class TestParseFile:
    """Parsing and the source cache."""

    def test_given_same_file_when_parsed_twice_then_cached_tree_returned(
        self, engine: ReflectionEngine, tmp_path: Path
    ) -> None:
        # When
        first = engine.parse_file(tmp_path / "Invoice.php")
        second = engine.parse_file(str(tmp_path / "Invoice.php"))

        # Then
        assert first is second
        assert tmp_path / "Invoice.php" in engine.cache

    def test_given_inline_content_when_parsed_then_cache_untouched(
        self, engine: ReflectionEngine, tmp_path: Path
    ) -> None:
        """Explicit content re-parses every time and is never cached."""
        # When
        tree = engine.parse_file(tmp_path / "Draft.php", content="<?php\nnamespace Draft;\n")

        # Then
        assert [ns.name for ns in tree.namespaces] == ["Draft"]
        assert len(engine.cache) == 0

    def test_given_small_capacity_when_limit_lowered_then_oldest_evicted(
        self, engine: ReflectionEngine, tmp_path: Path
    ) -> None:
        # Given
        engine.parse_file(tmp_path / "Invoice.php")
        engine.parse_file(tmp_path / "Empty.php")

        # When
        engine.set_maximum_cached_files(1)

        # Then
        assert len(engine.cache) == 1
        assert tmp_path / "Empty.php" in engine.cache

    def test_given_resized_cache_when_parsed_again_then_same_tree(
        self, engine: ReflectionEngine, tmp_path: Path
    ) -> None:
        """Files that survive a resize are still served from the cache."""
        # Given
        engine.parse_file(tmp_path / "Invoice.php")
        kept = engine.parse_file(tmp_path / "Empty.php")

        # When
        engine.set_maximum_cached_files(1)

        # Then
        assert engine.parse_file(tmp_path / "Empty.php") is kept

    def test_given_zero_capacity_when_parsing_then_nothing_cached(
        self, php_project: PhpProject, tmp_path: Path
    ) -> None:
        engine = php_project({"Invoice.php": INVOICE}, max_cached_files=0)

        first = engine.parse_file(tmp_path / "Invoice.php")

        assert first is not engine.parse_file(tmp_path / "Invoice.php")
        assert len(engine.cache) == 0


class TestParseClass:
    """Class lookups through the locator."""

    def test_given_located_class_when_parsed_then_node_returned(
        self, engine: ReflectionEngine
    ) -> None:
        node = engine.parse_class("\\app\\billing\\INVOICE")

        assert node.name == "Invoice"

    def test_given_unknown_class_when_located_then_not_found(
        self, engine: ReflectionEngine
    ) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            engine.locate_class_file("App\\Nope")

        assert exc_info.value.code == ErrorCode.CLASS_NOT_LOCATED

    def test_given_class_absent_from_its_file_when_parsed_then_not_found(
        self, engine: ReflectionEngine
    ) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            engine.parse_class("App\\Billing\\Missing")

        assert exc_info.value.code == ErrorCode.CLASS_NOT_IN_FILE

    def test_given_declared_members_when_parsed_then_fragments_returned(
        self, engine: ReflectionEngine
    ) -> None:
        """Member fragments come from the class body itself."""
        # When
        method = engine.parse_class_method("App\\Billing\\Invoice", "SEND")
        _, prop = engine.parse_class_property("App\\Billing\\Invoice", "total")
        _, const = engine.parse_class_constant("App\\Billing\\Invoice", "PREFIX")

        # Then
        assert isinstance(method, MethodNode)
        assert method.name == "send"
        assert prop.name == "total"
        assert isinstance(const.value, ScalarExpr)
        assert const.value.value == "INV"

    @pytest.mark.parametrize(
        ("lookup", "code"),
        [
            ("parse_class_method", ErrorCode.METHOD_NOT_FOUND),
            ("parse_class_property", ErrorCode.PROPERTY_NOT_FOUND),
            ("parse_class_constant", ErrorCode.CONSTANT_NOT_FOUND),
        ],
    )
    def test_given_undeclared_member_when_parsed_then_not_found(
        self, engine: ReflectionEngine, lookup: str, code: ErrorCode
    ) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            getattr(engine, lookup)("App\\Billing\\Invoice", "nothing")

        assert exc_info.value.code == code

    def test_given_missing_namespace_when_parsed_then_not_found(
        self, engine: ReflectionEngine, tmp_path: Path
    ) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            engine.parse_file_namespace(tmp_path / "Invoice.php", "Other")

        assert exc_info.value.code == ErrorCode.NAMESPACE_NOT_FOUND


class TestGetClass:
    """Reflection factories."""

    def test_given_user_class_when_reflected_then_parsed_reflection(
        self, engine: ReflectionEngine
    ) -> None:
        cls = engine.get_class("App\\Billing\\Invoice")

        assert isinstance(cls, ReflectionClass)
        assert cls.get_constant("PREFIX") == "INV"

    @pytest.mark.parametrize("name", ["\\Countable", "exception", "ArrayIterator"])
    def test_given_builtin_name_when_reflected_then_native_class(
        self, engine: ReflectionEngine, name: str
    ) -> None:
        """Built-ins never hit the locator."""
        assert isinstance(engine.get_class(name), NativeClass)

    def test_given_config_when_engine_built_then_settings_applied(self, tmp_path: Path) -> None:
        # Given
        config = ReflectConfig(
            cache=CacheConfig(max_cached_files=3),
            host=HostConfig(constants={"APP_VERSION": "1.2"}),
        )

        # When
        engine = ReflectionEngine.from_config(ClassMapLocator({}), config)

        # Then
        assert engine.cache.max_entries == 3
        assert engine.host.get_constant("APP_VERSION") == "1.2"
        assert engine.host.has_constant("PHP_EOL")


class TestResolving:
    """Cycle guard."""

    def test_given_key_in_progress_when_reentered_then_on_cycle_raised(
        self, engine: ReflectionEngine
    ) -> None:
        def on_cycle() -> ResolutionError:
            return ResolutionError.cyclic_constant("App\\A", "X")

        with engine.resolving("constant", "App\\A::X", on_cycle):
            with pytest.raises(ResolutionError):
                with engine.resolving("constant", "app\\a::x", on_cycle):
                    pass
            # A different kind is tracked separately
            with engine.resolving("hierarchy", "App\\A::X", on_cycle):
                pass

        with engine.resolving("constant", "App\\A::X", on_cycle):
            pass

    def test_given_error_inside_guard_when_raised_then_type_kept_and_key_released(
        self, engine: ReflectionEngine
    ) -> None:
        """Errors raised while a key is in progress propagate unchanged."""

        def on_cycle() -> ResolutionError:
            return ResolutionError.cyclic_constant("App\\A", "X")

        # When
        with pytest.raises(NotFoundError) as exc_info:
            with engine.resolving("constant", "App\\A::X", on_cycle):
                raise NotFoundError.class_not_located("App\\Gone")

        # Then
        assert exc_info.value.code == ErrorCode.CLASS_NOT_LOCATED
        with engine.resolving("constant", "App\\A::X", on_cycle):
            pass
