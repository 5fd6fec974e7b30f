"""parsereflect file command - list what a source file declares."""

import json
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.markup import escape

from parsereflect.cli.utils import build_engine, format_value, is_verbose, to_jsonable
from parsereflect.core.errors import ParseReflectError
from parsereflect.reflection.file import ReflectionFile


def summarize_file(reflection: ReflectionFile) -> dict[str, Any]:
    """Namespaces of a file with their classes, functions and constants."""
    return {
        "file": reflection.name,
        "strict_types": reflection.is_strict_mode(),
        "syntax_errors": reflection.error_count,
        "namespaces": [
            {
                "name": namespace.name,
                "aliases": namespace.get_namespace_aliases(),
                "classes": list(namespace.get_classes()),
                "functions": list(namespace.get_functions()),
                "constants": namespace.get_constants(),
            }
            for namespace in reflection.get_file_namespaces().values()
        ],
    }


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--composer",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="composer.json locating classes referenced by constants",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def file_command(ctx: click.Context, path: Path, composer: Path | None, as_json: bool) -> None:
    """List namespaces, classes, functions and constants declared in PATH."""
    engine = build_engine(composer=composer, files=(path,), verbose=is_verbose(ctx))
    try:
        summary = summarize_file(engine.get_file(path))
    except ParseReflectError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(json.dumps(to_jsonable(summary), indent=2))
        return

    console = Console()
    console.print(f"[bold]{escape(summary['file'])}[/bold]")
    if summary["strict_types"]:
        console.print("  [dim]strict_types=1[/dim]")
    if summary["syntax_errors"]:
        console.print(f"  [yellow]{summary['syntax_errors']} syntax error(s)[/yellow]")

    for namespace in summary["namespaces"]:
        label = escape(namespace["name"]) or "(global)"
        console.print(f"\n[bold]namespace[/bold] {label}")
        for name in namespace["classes"]:
            console.print(f"  [cyan]class[/cyan] {escape(name)}")
        for name in namespace["functions"]:
            console.print(f"  [cyan]function[/cyan] {escape(name)}")
        for name, value in namespace["constants"].items():
            console.print(f"  [cyan]const[/cyan] {escape(name)} = {escape(format_value(value))}")
