"""parsereflect class command - summarize a reflected class."""

import json
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from parsereflect.cli.utils import build_engine, format_value, is_verbose, to_jsonable
from parsereflect.core.errors import ParseReflectError
from parsereflect.reflection.class_like import ClassLike
from parsereflect.reflection.modifiers import get_class_modifier_names, get_modifier_names


def _kind(cls: ClassLike) -> str:
    if cls.is_interface():
        return "interface"
    if cls.is_trait():
        return "trait"
    return "class"


def summarize_class(cls: ClassLike) -> dict[str, Any]:
    """Collect the reflected facts shown by the command."""
    parent = cls.get_parent_class()
    return {
        "name": cls.name,
        "kind": _kind(cls),
        "file": cls.file_name,
        "modifiers": get_class_modifier_names(cls.get_modifiers()),
        "parent": parent.name if parent is not None else None,
        "interfaces": cls.get_interface_names(),
        "constants": cls.get_constants(),
        "methods": [
            {
                "name": m.name,
                "class": m.class_name,
                "modifiers": get_modifier_names(m.get_modifiers()),
            }
            for m in cls.get_methods()
        ],
        "properties": [
            {
                "name": p.name,
                "class": p.class_name,
                "modifiers": get_modifier_names(p.get_modifiers()),
            }
            for p in cls.get_properties()
        ],
    }


def _members_table(title: str, members: list[dict[str, Any]]) -> Table:
    table = Table(title=title, title_justify="left", box=None, padding=(0, 1), pad_edge=False)
    table.add_column("Name", style="cyan")
    table.add_column("Modifiers", style="dim")
    table.add_column("Declared in")
    for member in members:
        table.add_row(member["name"], " ".join(member["modifiers"]), member["class"])
    return table


@click.command()
@click.argument("class_name")
@click.option(
    "--composer",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="composer.json whose PSR-4 rules locate classes",
)
@click.option("--psr4", multiple=True, metavar="PREFIX=DIR", help="PSR-4 rule (repeatable)")
@click.option(
    "--file",
    "files",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Source file declaring classes (repeatable)",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def class_command(
    ctx: click.Context,
    class_name: str,
    composer: Path | None,
    psr4: tuple[str, ...],
    files: tuple[Path, ...],
    as_json: bool,
) -> None:
    """Reflect CLASS_NAME: parent, interfaces, constants, methods and properties."""
    engine = build_engine(composer=composer, psr4=psr4, files=files, verbose=is_verbose(ctx))
    try:
        summary = summarize_class(engine.get_class(class_name))
    except ParseReflectError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(json.dumps(to_jsonable(summary), indent=2))
        return

    console = Console()
    heading = " ".join([*summary["modifiers"], summary["kind"]])
    console.print(f"[bold]{heading}[/bold] {escape(summary['name'])}")
    if summary["file"]:
        console.print(f"  [dim]{escape(summary['file'])}[/dim]")
    if summary["parent"]:
        console.print(f"  extends [cyan]{summary['parent']}[/cyan]")
    if summary["interfaces"]:
        console.print(f"  implements [cyan]{', '.join(summary['interfaces'])}[/cyan]")

    if summary["constants"]:
        table = Table(
            title="Constants", title_justify="left", box=None, padding=(0, 1), pad_edge=False
        )
        table.add_column("Name", style="cyan")
        table.add_column("Value")
        for name, value in summary["constants"].items():
            table.add_row(name, escape(format_value(value)))
        console.print(table)
    if summary["methods"]:
        console.print(_members_table("Methods", summary["methods"]))
    if summary["properties"]:
        console.print(_members_table("Properties", summary["properties"]))
