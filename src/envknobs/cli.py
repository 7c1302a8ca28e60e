"""envknobs command-line interface.

Commands take a schema file (YAML or JSON, see :mod:`envknobs.loader`):

- ``envknobs example SCHEMA``: write a documented .env.example
- ``envknobs check SCHEMA``: report missing, invalid and valid variables of an env file
- ``envknobs sync SCHEMA TARGET...``: bring env files in line with the schema
- ``envknobs validate SCHEMA``: validate env files plus the process environment
"""

import asyncio
import logging
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .exceptions import SchemaError, ValidationError
from .file_handler import DEFAULT_TARGETS, EnvFileHandler
from .loader import load_schema
from .schema import Schema

console = Console()
err_console = Console(stderr=True)


def _load(schema_file: str) -> Schema:
    try:
        return load_schema(schema_file)
    except SchemaError as e:
        err_console.print(f"[red]Invalid schema: {escape(str(e))}[/red]")
        sys.exit(2)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """envknobs - typed environment variable validation"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@cli.command()
@click.argument("schema_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", default=".env.example", help="Output file path")
def example(schema_file: str, output: str):
    """Generate a documented example env file"""
    schema = _load(schema_file)
    asyncio.run(EnvFileHandler.generate_example(schema, output))
    console.print(f"[green]Wrote {len(schema)} variables to {output}[/green]")


@cli.command()
@click.argument("schema_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--env-file", "-e", default=".env", help="Env file to check")
def check(schema_file: str, env_file: str):
    """Check an env file against the schema"""
    schema = _load(schema_file)
    result = asyncio.run(EnvFileHandler.validate(schema, env_file))

    table = Table(title=f"Variables in {env_file}")
    table.add_column("Variable", style="cyan")
    table.add_column("Status")
    for name in result.missing:
        table.add_row(name, "[red]missing[/red]")
    for name in result.invalid:
        table.add_row(name, "[yellow]invalid[/yellow]")
    for name in result.valid:
        table.add_row(name, "[green]valid[/green]")
    console.print(table)

    if not result.ok:
        console.print(
            f"[red]{len(result.missing)} missing, {len(result.invalid)} invalid[/red]"
        )
        sys.exit(1)
    console.print("[green]All variables are valid[/green]")


@cli.command()
@click.argument("schema_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("targets", nargs=-1)
@click.option("--source", "-s", default=".env", help="Source env file")
def sync(schema_file: str, targets: tuple[str, ...], source: str):
    """Synchronize env files with the schema and a source file"""
    schema = _load(schema_file)
    target_envs = targets or DEFAULT_TARGETS
    asyncio.run(EnvFileHandler.sync(schema, source, target_envs))
    for target in target_envs:
        console.print(f"[green]Synced {target}[/green]")


@cli.command()
@click.argument("schema_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--env-file", "-e", "env_files", multiple=True, help="Env file(s), later ones win"
)
def validate(schema_file: str, env_files: tuple[str, ...]):
    """Validate env files and the process environment"""
    schema = _load(schema_file)
    try:
        config = asyncio.run(EnvFileHandler.load(schema, *env_files))
    except ValidationError as e:
        console.print(f"[red]{e.message}[/red]")
        for line in e.errors:
            console.print(f"  {line}", markup=False)
        sys.exit(1)

    console.print(f"[green]{len(config)} variables valid[/green]")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
