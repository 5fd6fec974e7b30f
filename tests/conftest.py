"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local parsereflect package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of parsereflect modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("parsereflect"):
        del sys.modules[module_name]

from parsereflect.engine import ReflectionEngine  # noqa: E402
from parsereflect.locator import ClassMapLocator  # noqa: E402

PhpProject = Callable[..., ReflectionEngine]


@pytest.fixture
def php_project(tmp_path: Path) -> PhpProject:
    """Write PHP files and return an engine locating the classes they declare.

    Usage::

        engine = php_project({"Shape.php": "<?php class Shape {}"}, classes={"Shape": "Shape.php"})

    Each entry in ``classes`` maps a fully-qualified class name to a file key.
    """

    def factory(
        files: dict[str, str],
        classes: dict[str, str] | None = None,
        **engine_kwargs: object,
    ) -> ReflectionEngine:
        for file_name, source in files.items():
            path = tmp_path / file_name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(source)
        class_map = {name: tmp_path / file_name for name, file_name in (classes or {}).items()}
        return ReflectionEngine(ClassMapLocator(class_map), **engine_kwargs)  # type: ignore[arg-type]

    return factory
