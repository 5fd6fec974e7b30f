"""parsereflect eval command - evaluate a constant expression."""

import json
from pathlib import Path

import click

from parsereflect.cli.utils import build_engine, format_value, is_verbose, to_jsonable
from parsereflect.core.errors import ParseReflectError
from parsereflect.resolver import EvaluationContext, ExpressionResolver


@click.command()
@click.argument("expression")
@click.option("--namespace", default="", help="Namespace the expression is written in")
@click.option(
    "--composer",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="composer.json locating classes referenced by the expression",
)
@click.option(
    "--file",
    "files",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Source file declaring referenced classes (repeatable)",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def eval_command(
    ctx: click.Context,
    expression: str,
    namespace: str,
    composer: Path | None,
    files: tuple[Path, ...],
    as_json: bool,
) -> None:
    """Evaluate EXPRESSION, e.g. "PHP_INT_MAX + 1" or "Foo::BAR . '!'"."""
    namespace = namespace.strip("\\")
    engine = build_engine(composer=composer, files=files, verbose=is_verbose(ctx))
    try:
        node = engine.parse_expression(expression, namespace)
        context = EvaluationContext(engine, namespace_name=namespace)
        result = ExpressionResolver(context).evaluate(node)
    except ParseReflectError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(
            json.dumps(
                {
                    "value": to_jsonable(result.value),
                    "is_constant_reference": result.is_constant_reference,
                    "constant_name": result.constant_name,
                }
            )
        )
    else:
        click.echo(format_value(result.value))
