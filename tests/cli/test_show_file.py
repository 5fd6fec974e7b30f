"""Tests for parsereflect file command."""

import json
from pathlib import Path

from click.testing import CliRunner

from parsereflect.cli.main import cli

runner = CliRunner()


class TestFileCommand:
    """parsereflect file command tests."""

    def test_given_file_when_json_then_namespaces_listed(self, widgets_file: Path) -> None:
        # When
        result = runner.invoke(cli, ["file", str(widgets_file), "--json"])

        # Then
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["strict_types"] is False
        assert data["syntax_errors"] == 0
        [namespace] = data["namespaces"]
        assert namespace["name"] == "App"
        assert namespace["classes"] == ["App\\HasName", "App\\Base", "App\\Widget"]
        assert namespace["functions"] == ["App\\make_widget"]
        assert namespace["constants"] == {"DEFAULT_SIZE": 16}

    def test_given_strict_file_when_listed_then_flag_shown(
        self, tmp_path: Path, monkeypatch
    ) -> None:
        # Given
        monkeypatch.chdir(tmp_path)
        path = tmp_path / "strict.php"
        path.write_text("<?php\ndeclare(strict_types=1);\n\nconst GREETING = 'hi';\n")

        # When
        result = runner.invoke(cli, ["file", str(path)])

        # Then
        assert result.exit_code == 0, result.output
        assert "strict_types=1" in result.output
        assert "(global)" in result.output
        assert "GREETING = 'hi'" in result.output

    def test_given_missing_path_when_listed_then_usage_error(self, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["file", str(tmp_path / "nope.php")])

        assert result.exit_code == 2
