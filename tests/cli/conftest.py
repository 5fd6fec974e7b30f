"""Shared fixtures for CLI tests."""

from pathlib import Path

import pytest

WIDGETS = """<?php
namespace App;

interface HasName
{
    public function name(): string;
}

abstract class Base implements HasName, \\Countable
{
    const PREFIX = 'base';

    protected $items = [];

    public function count(): int
    {
        return 0;
    }
}

final class Widget extends Base
{
    const LABEL = self::PREFIX . '-widget';

    public function name(): string
    {
        return 'widget';
    }
}

function make_widget(): Widget
{
    return new Widget();
}

const DEFAULT_SIZE = 2 * 8;
"""


@pytest.fixture
def widgets_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A PHP file with an interface, an abstract base and a final class."""
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "Widgets.php"
    path.write_text(WIDGETS)
    return path
