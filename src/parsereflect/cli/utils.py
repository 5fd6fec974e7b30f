"""CLI utilities."""

from pathlib import Path
from typing import Any

import click

from parsereflect.config import load_config
from parsereflect.core.errors import ParseReflectError
from parsereflect.core.logging import configure_logging
from parsereflect.engine import ReflectionEngine
from parsereflect.locator import CallableLocator, ClassMapLocator, Locator, Psr4Locator
from parsereflect.syntax.nodes import ClassLikeNode


def parse_psr4_options(values: tuple[str, ...]) -> dict[str, list[str]]:
    """Turn repeated ``PREFIX=DIR`` options into a PSR-4 prefix map.

    Raises:
        click.BadParameter: An option lacks the ``=`` separator
    """
    prefixes: dict[str, list[str]] = {}
    for value in values:
        prefix, sep, directory = value.partition("=")
        if not sep or not directory:
            raise click.BadParameter(f"expected PREFIX=DIR, got '{value}'", param_hint="--psr4")
        prefixes.setdefault(prefix, []).append(directory)
    return prefixes


def _file_class_map(engine: ReflectionEngine, file_path: Path) -> dict[str, str]:
    """Map every class-like declared in a file to that file."""
    tree = engine.parse_file(file_path)
    class_map: dict[str, str] = {}
    for namespace in tree.namespaces:
        for stmt in namespace.stmts:
            if isinstance(stmt, ClassLikeNode):
                name = f"{namespace.name}\\{stmt.name}" if namespace.name else stmt.name
                class_map[name] = str(file_path)
    return class_map


def build_engine(
    *,
    composer: Path | None = None,
    psr4: tuple[str, ...] = (),
    files: tuple[Path, ...] = (),
    verbose: bool = False,
) -> ReflectionEngine:
    """Build an engine whose locator chains every source given on the command line.

    Explicit files are consulted first, then ``--psr4`` rules, then composer.json.
    Logging is reconfigured from the loaded settings; ``verbose`` forces DEBUG.

    Raises:
        click.ClickException: Configuration or a source file could not be read
    """
    locators: list[Locator] = []
    try:
        config = load_config()
    except ParseReflectError as e:
        raise click.ClickException(str(e)) from e

    logging_config = config.logging
    if verbose:
        logging_config = logging_config.model_copy(update={"level": "DEBUG"})
    configure_logging(config=logging_config)

    engine = ReflectionEngine.from_config(
        CallableLocator(lambda name: _first_match(locators, name)), config
    )
    try:
        for file_path in files:
            locators.append(ClassMapLocator(_file_class_map(engine, file_path)))
        if psr4:
            locators.append(Psr4Locator(parse_psr4_options(psr4)))
        if composer is not None:
            locators.append(Psr4Locator.from_composer_json(composer))
    except ParseReflectError as e:
        raise click.ClickException(str(e)) from e
    except OSError as e:
        raise click.ClickException(f"Cannot read source: {e}") from e
    return engine


def _first_match(locators: list[Locator], class_name: str) -> str | None:
    for locator in locators:
        file_name = locator.locate_class(class_name)
        if file_name:
            return file_name
    return None


def to_jsonable(value: Any) -> Any:
    """Convert evaluated values (arrays with int keys, floats) for JSON output."""
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, float) and (value != value or value in (float("inf"), float("-inf"))):
        return str(value)
    return value


def format_value(value: Any) -> str:
    """Render an evaluated value the way the host language would export it."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"
    if isinstance(value, dict):
        items = ", ".join(f"{format_value(k)} => {format_value(v)}" for k, v in value.items())
        return f"[{items}]"
    return repr(value)


def is_verbose(ctx: click.Context) -> bool:
    """Whether the group's ``-v`` flag was given."""
    return bool(ctx.obj and ctx.obj.get("verbose"))
