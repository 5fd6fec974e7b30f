"""Class locators: map a fully-qualified class name to its source file."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Protocol

import structlog

from parsereflect.core.errors import ConfigError

log = structlog.get_logger(__name__)


class Locator(Protocol):
    """Protocol for class locators.

    Implementations return the path of the file declaring the class, or
    ``None`` when the class is unknown to them.
    """

    def locate_class(self, class_name: str) -> str | None:
        """Locate the file for a fully-qualified class name (no leading ``\\``)."""
        ...


class CallableLocator:
    """Adapts a plain function ``(class_name) -> path | None``."""

    def __init__(self, fn: Callable[[str], str | Path | None]) -> None:
        self._fn = fn

    def locate_class(self, class_name: str) -> str | None:
        result = self._fn(class_name.lstrip("\\"))
        return str(result) if result else None


class ClassMapLocator:
    """Static class map, case-insensitive like the host runtime."""

    def __init__(self, class_map: Mapping[str, str | Path]) -> None:
        self._map = {name.lstrip("\\").lower(): str(path) for name, path in class_map.items()}

    def locate_class(self, class_name: str) -> str | None:
        return self._map.get(class_name.lstrip("\\").lower())


class Psr4Locator:
    """PSR-4 autoload rules: ``Vendor\\Pkg\\`` prefix -> base directories.

    The longest matching prefix is tried first; the first existing file wins.
    """

    def __init__(self, prefixes: Mapping[str, str | Path | Iterable[str | Path]]) -> None:
        rules: list[tuple[str, list[Path]]] = []
        for prefix, dirs in prefixes.items():
            normalized = prefix.strip("\\")
            normalized = f"{normalized}\\" if normalized else ""
            if isinstance(dirs, (str, Path)):
                dirs = [dirs]
            rules.append((normalized, [Path(d) for d in dirs]))
        self._rules = sorted(rules, key=lambda rule: len(rule[0]), reverse=True)

    @classmethod
    def from_composer_json(cls, path: str | Path) -> Psr4Locator:
        """Build from the ``autoload`` and ``autoload-dev`` psr-4 sections."""
        composer_path = Path(path)
        try:
            data = json.loads(composer_path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError.parse_error(str(composer_path), str(e)) from e

        base = composer_path.parent
        prefixes: dict[str, list[Path]] = {}
        for section in ("autoload", "autoload-dev"):
            psr4 = data.get(section, {}).get("psr-4", {})
            for prefix, dirs in psr4.items():
                if isinstance(dirs, str):
                    dirs = [dirs]
                prefixes.setdefault(prefix, []).extend(base / d for d in dirs)
        log.debug("psr4_rules_loaded", composer=str(composer_path), prefixes=len(prefixes))
        return cls(prefixes)

    def locate_class(self, class_name: str) -> str | None:
        class_name = class_name.lstrip("\\")
        for prefix, dirs in self._rules:
            if prefix and not class_name.startswith(prefix):
                continue
            relative = class_name[len(prefix) :].replace("\\", "/") + ".php"
            for directory in dirs:
                candidate = directory / relative
                if candidate.is_file():
                    return str(candidate)
        return None
