"""Tests for class locators."""

import json
from pathlib import Path

import pytest

from parsereflect.core.errors import ConfigError
from parsereflect.locator import CallableLocator, ClassMapLocator, Psr4Locator


class TestCallableLocator:
    """Plain function adapter."""

    def test_given_function_when_locating_then_leading_backslash_stripped(self) -> None:
        """The function receives names without a leading backslash."""
        # Given
        seen: list[str] = []

        def locate(name: str) -> Path | None:
            seen.append(name)
            return Path("/src/Foo.php") if name == "App\\Foo" else None

        locator = CallableLocator(locate)

        # When / Then
        assert locator.locate_class("\\App\\Foo") == str(Path("/src/Foo.php"))
        assert locator.locate_class("App\\Bar") is None
        assert seen == ["App\\Foo", "App\\Bar"]


class TestClassMapLocator:
    """Static class maps."""

    def test_given_class_map_when_locating_then_case_insensitive(self) -> None:
        """Class names match regardless of case."""
        # Given
        locator = ClassMapLocator({"\\App\\Model\\User": "/src/User.php"})

        # When / Then
        assert locator.locate_class("app\\model\\USER") == "/src/User.php"
        assert locator.locate_class("App\\Model\\Post") is None


class TestPsr4Locator:
    """PSR-4 autoload rules."""

    @pytest.fixture
    def project(self, tmp_path: Path) -> Path:
        for relative in ("src/Model/User.php", "lib/Model/Post.php", "tests/UserTest.php"):
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("<?php\n")
        return tmp_path

    def test_given_prefixes_when_locating_then_first_existing_file_wins(
        self, project: Path
    ) -> None:
        """Every base directory of a prefix is tried in order."""
        # Given
        locator = Psr4Locator({"App\\": [project / "src", project / "lib"]})

        # When / Then
        assert locator.locate_class("App\\Model\\User") == str(project / "src/Model/User.php")
        assert locator.locate_class("App\\Model\\Post") == str(project / "lib/Model/Post.php")
        assert locator.locate_class("App\\Model\\Missing") is None
        assert locator.locate_class("Other\\Model\\User") is None

    def test_given_nested_prefixes_when_locating_then_longest_prefix_first(
        self, project: Path
    ) -> None:
        """A more specific prefix takes precedence."""
        # Given
        (project / "special").mkdir()
        (project / "special/User.php").write_text("<?php\n")
        locator = Psr4Locator({"App\\": project / "src", "App\\Model\\": project / "special"})

        # When / Then
        assert locator.locate_class("App\\Model\\User") == str(project / "special/User.php")

    def test_given_composer_json_when_loaded_then_autoload_and_dev_rules(
        self, project: Path
    ) -> None:
        """Both autoload and autoload-dev psr-4 sections are read."""
        # Given
        composer = project / "composer.json"
        composer.write_text(
            json.dumps(
                {
                    "autoload": {"psr-4": {"App\\": ["src/", "lib/"]}},
                    "autoload-dev": {"psr-4": {"App\\Tests\\": "tests/"}},
                }
            )
        )

        # When
        locator = Psr4Locator.from_composer_json(composer)

        # Then
        assert locator.locate_class("App\\Model\\Post") == str(project / "lib/Model/Post.php")
        assert locator.locate_class("App\\Tests\\UserTest") == str(project / "tests/UserTest.php")

    def test_given_invalid_composer_json_when_loaded_then_config_error(
        self, tmp_path: Path
    ) -> None:
        """Unreadable composer files raise ConfigError."""
        # Given
        composer = tmp_path / "composer.json"
        composer.write_text("{not json")

        # When / Then
        with pytest.raises(ConfigError):
            Psr4Locator.from_composer_json(composer)
        with pytest.raises(ConfigError):
            Psr4Locator.from_composer_json(tmp_path / "missing.json")
