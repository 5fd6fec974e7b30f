"""Tests for CLI utilities.

Covers:
- parse_psr4_options() option parsing
- build_engine() locator chaining and logging setup
- format_value() and to_jsonable() rendering
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path

import click
import pytest
import structlog
from click.testing import CliRunner

from parsereflect.cli.main import cli
from parsereflect.cli.utils import build_engine, format_value, parse_psr4_options, to_jsonable


class TestParsePsr4Options:
    """Tests for parse_psr4_options function."""

    def test_repeated_prefix_collects_directories(self) -> None:
        result = parse_psr4_options(("App\\=src", "App\\=lib", "Tests\\=tests"))
        assert result == {"App\\": ["src", "lib"], "Tests\\": ["tests"]}

    @pytest.mark.parametrize("value", ["App", "App\\="])
    def test_missing_directory_rejected(self, value: str) -> None:
        with pytest.raises(click.BadParameter):
            parse_psr4_options((value,))


class TestBuildEngine:
    """Tests for build_engine function."""

    def test_explicit_files_take_precedence(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Classes declared in --file sources win over PSR-4 rules."""
        # Given
        monkeypatch.chdir(tmp_path)
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "User.php").write_text("<?php\nnamespace App;\nclass User {}\n")
        override = tmp_path / "override.php"
        override.write_text("<?php\nnamespace App;\nclass User { const X = 1; }\n")

        # When
        engine = build_engine(psr4=(f"App\\={tmp_path / 'src'}",), files=(override,))

        # Then
        assert engine.locate_class_file("App\\User") == str(override)
        assert engine.get_class("App\\User").get_constant("X") == 1

    def test_psr4_used_when_no_file_matches(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "User.php").write_text("<?php\nnamespace App;\nclass User {}\n")

        engine = build_engine(psr4=(f"App\\={tmp_path / 'src'}",))

        assert engine.locate_class_file("App\\User") == str(tmp_path / "src" / "User.php")

    def test_invalid_composer_becomes_click_exception(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        composer = tmp_path / "composer.json"
        composer.write_text("{broken")

        with pytest.raises(click.ClickException, match="CONFIG_PARSE_ERROR"):
            build_engine(composer=composer)

    def test_invalid_project_config_becomes_click_exception(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".parsereflect").mkdir()
        (tmp_path / ".parsereflect" / "config.yaml").write_text(
            "cache:\n  max_cached_files: -2\n"
        )

        with pytest.raises(click.ClickException, match="CONFIG_INVALID_VALUE"):
            build_engine()


class TestBuildEngineLogging:
    """build_engine applies the logging section of the loaded settings."""

    def setup_method(self) -> None:
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()

    def teardown_method(self) -> None:
        for handler in logging.getLogger().handlers:
            handler.close()
        logging.getLogger().handlers.clear()
        structlog.reset_defaults()

    @staticmethod
    def _write_config(root: Path, level: str, log_file: Path) -> None:
        (root / ".parsereflect").mkdir()
        (root / ".parsereflect" / "config.yaml").write_text(
            f"logging:\n  level: {level}\n  outputs:\n"
            f"    - format: json\n      destination: {log_file}\n"
        )

    def test_project_logging_section_applied(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Events go to the configured file output at the configured level."""
        # Given
        monkeypatch.chdir(tmp_path)
        log_file = tmp_path / "logs" / "reflect.jsonl"
        self._write_config(tmp_path, "DEBUG", log_file)
        source = tmp_path / "User.php"
        source.write_text("<?php\nclass User {}\n")

        # When
        engine = build_engine()
        engine.parse_file(source)

        # Then
        assert logging.getLogger().level == logging.DEBUG
        events = [json.loads(line)["event"] for line in log_file.read_text().splitlines()]
        assert "source_cache_miss" in events

    def test_verbose_forces_debug_over_configured_level(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        # Given
        monkeypatch.chdir(tmp_path)
        log_file = tmp_path / "reflect.jsonl"
        self._write_config(tmp_path, "ERROR", log_file)
        source = tmp_path / "User.php"
        source.write_text("<?php\nclass User {}\n")

        # When
        build_engine().parse_file(source)
        quiet = log_file.read_text() if log_file.exists() else ""
        build_engine(verbose=True).parse_file(source)

        # Then
        assert "source_cache_miss" not in quiet
        assert "source_cache_miss" in log_file.read_text()

    def test_eval_command_uses_configured_output(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Commands reconfigure logging once settings are loaded."""
        # Given
        monkeypatch.chdir(tmp_path)
        log_file = tmp_path / "reflect.jsonl"
        self._write_config(tmp_path, "DEBUG", log_file)
        source = tmp_path / "Limits.php"
        source.write_text("<?php\nclass Limits { const MAX = 3; }\n")

        # When
        result = CliRunner().invoke(cli, ["eval", "Limits::MAX", "--file", str(source)])

        # Then
        assert result.exit_code == 0, result.output
        assert "source_cache_miss" in log_file.read_text()


class TestFormatValue:
    """Tests for format_value and to_jsonable."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, "null"),
            (True, "true"),
            (False, "false"),
            (42, "42"),
            (1.5, "1.5"),
            ("it's", "'it\\'s'"),
            ({0: "a", "k": [1]}, "[0 => 'a', 'k' => [1]]"),
        ],
    )
    def test_format_value(self, value: object, expected: str) -> None:
        assert format_value(value) == expected

    def test_to_jsonable_stringifies_keys_and_non_finite_floats(self) -> None:
        result = to_jsonable({0: math.inf, "nested": {1: math.nan}})
        assert result == {"0": "inf", "nested": {"1": "nan"}}
