"""Command-line interface for protojson code generation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click
from lark.exceptions import LarkError
from rich.console import Console
from rich.table import Table

from protojson.generator import parse, python
from protojson.generator.parser import ValidationError
from protojson.generator.types import is_scalar

if TYPE_CHECKING:
    from protojson.generator.types import SchemaFile

logger = logging.getLogger(__name__)


def _load_schema(input_file: str) -> SchemaFile:
    """Read and parse a schema file, reporting errors as click exceptions."""
    with open(input_file, encoding="utf-8") as f:
        text = f.read()

    try:
        return parse(text)
    except ValidationError as exc:
        raise click.ClickException(f"{input_file}: {exc}") from exc
    except LarkError as exc:
        raise click.ClickException(f"{input_file}: syntax error: {exc}") from exc


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """protojson schema compiler."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input schema file")
@click.option("--output", "-o", "output_file", required=True, help="Output file")
@click.option(
    "--runtime-import",
    "runtime_import",
    default="protojson.proto",
    show_default=True,
    help="Import path of the runtime used by generated code",
)
def gen(input_file: str, output_file: str, runtime_import: str) -> None:
    """Generate Python message classes from a schema file."""
    schema = _load_schema(input_file)
    generated_file = python.render(
        schema, runtime_import=runtime_import, source=Path(input_file).name
    )

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(generated_file)

    logger.info(
        "Generated %d messages and %d enums into %s",
        len(schema.messages),
        len(schema.enums),
        output_file,
    )


@cli.command()
@click.option("--output", "-o", "output_path", default=".", help="Output directory")
@click.option("--name", default="protojson_runtime", help="Runtime package name")
def runtime(output_path: str, name: str) -> None:
    """Write the runtime package for use without installing protojson."""
    runtime_dir = Path(output_path) / name
    runtime_dir.mkdir(parents=True, exist_ok=True)
    for filename, content in python.runtime().items():
        (runtime_dir / filename).write_text(content)
    click.echo(f"Generated Python runtime in {runtime_dir}")


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input schema file")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_file: str, output_json: bool) -> None:
    """Display the messages and enums declared in a schema file."""
    schema = _load_schema(input_file)

    if output_json:
        click.echo(schema.to_json(indent=2))
    else:
        _output_plain(schema)


def _output_plain(schema: SchemaFile) -> None:
    """Output schema info using rich text formatting."""
    console = Console()
    enum_names = {e.name for e in schema.enums}

    if schema.package:
        console.print(f"[bold cyan]Package[/bold cyan] {schema.package}")
        console.print()

    for message in schema.messages:
        console.print(f"[bold cyan]message[/bold cyan] {message.name}")
        table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        table.add_column("#", style="green", justify="right")
        table.add_column("Field", style="white")
        table.add_column("Type", style="yellow")
        table.add_column("Kind", style="dim")

        for f in message.fields:
            if is_scalar(f.type_name):
                kind = "scalar"
            elif f.type_name in enum_names:
                kind = "enum"
            else:
                kind = "message"
            if f.repeated:
                kind = f"repeated {kind}"
            table.add_row(str(f.number), f.name, f.type_name, kind)

        console.print(table)
        console.print()

    for enum in schema.enums:
        console.print(f"[bold cyan]enum[/bold cyan] {enum.name}")
        table = Table(show_header=False, box=None, padding=(0, 2, 0, 2))
        table.add_column("Name", style="white")
        table.add_column("Value", style="green", justify="right")
        for value in enum.values:
            table.add_row(value.name, str(value.number))
        console.print(table)
        console.print()


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
