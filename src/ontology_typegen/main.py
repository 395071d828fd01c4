"""
Ontology Typegen CLI: compiles an RDF vocabulary such as schema.org into pydantic models.

Usage:
    # Models for the latest schema.org release, printed to stdout
    uv run ontology-typegen generate

    # From a local N-Triples file, without deprecated terms
    uv run ontology-typegen generate --file data/schema.nt --nodeprecated -o schema_types.py

    # Against named context prefixes
    uv run ontology-typegen generate --context "schema:https://schema.org,rdf:http://www.w3.org/2000/01/rdf-schema"
"""

import asyncio
import sys
from pathlib import Path

import click
from dotenv import load_dotenv

from ontology_typegen.config import DEFAULT_CONTEXT, DEFAULT_ONTOLOGY, ENV_CONTEXT, ENV_ONTOLOGY

load_dotenv()


@click.group()
@click.version_option(version="0.1.0")
def cli():
    """Ontology Typegen — RDF vocabulary to pydantic models."""
    pass


@cli.command()
@click.option(
    "--ontology",
    envvar=ENV_ONTOLOGY,
    default=DEFAULT_ONTOLOGY,
    show_default=True,
    help="URL of the ontology to load.",
)
@click.option(
    "--file", "file_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Local ontology file. Takes precedence over --ontology.",
)
@click.option(
    "--context",
    envvar=ENV_CONTEXT,
    default=DEFAULT_CONTEXT,
    show_default=True,
    help="A context URL, or comma-separated name:URL prefixes.",
)
@click.option(
    "--deprecated/--nodeprecated",
    default=True,
    show_default=True,
    help="Include deprecated classes, properties and enum values.",
)
@click.option(
    "--verbose/--noverbose",
    default=False,
    help="Print every diagnostic found while compiling.",
)
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the module to this file instead of stdout.",
)
def generate(
    ontology: str,
    file_path: Path | None,
    context: str,
    deprecated: bool,
    verbose: bool,
    output: Path | None,
):
    """Generate a module of pydantic models from an ontology."""
    from rich.markup import escape

    from ontology_typegen.context import Context
    from ontology_typegen.errors import TypegenError
    from ontology_typegen.generator import generate_module
    from ontology_typegen.models import GeneratorOptions
    from ontology_typegen.utils import console

    source = file_path.resolve() if file_path is not None else ontology
    console.rule("[bold]Generating types[/bold]")
    console.print(f"  Source:      {source}")
    console.print(f"  Context:     {context}")
    console.print(f"  Deprecated:  {'included' if deprecated else 'excluded'}")
    console.print()

    try:
        options = GeneratorOptions(include_deprecated=deprecated, context=Context.parse(context))
        text, result = asyncio.run(generate_module(source, options))
    except (TypegenError, OSError) as exc:
        console.print(f"\n[bold red]Failed:[/bold red] {escape(str(exc))}")
        sys.exit(1)

    if verbose:
        for diagnostic in result.diagnostics:
            console.print(f"  [dim]{escape(str(diagnostic))}[/dim]")

    if output is None:
        click.echo(text, nl=False)
    else:
        output = output.resolve()
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
        console.print(f"  Written to:  {output}")

    console.print(f"\n[bold green]Success![/bold green]")
    console.print(f"  Stats:       {result.stats}")
    console.print(f"  Diagnostics: {len(result.diagnostics)}")
    sys.exit(0)


if __name__ == "__main__":
    cli()
