"""parsereflect CLI - static reflection of PHP sources."""

import click

from parsereflect import __version__
from parsereflect.cli.evaluate import eval_command
from parsereflect.cli.show_class import class_command
from parsereflect.cli.show_file import file_command
from parsereflect.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="parsereflect")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """parsereflect - reflect PHP classes without loading them."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(class_command, name="class")
cli.add_command(file_command, name="file")
cli.add_command(eval_command, name="eval")


if __name__ == "__main__":
    cli()
