"""CLI for propkit.

Convention-based: discovers .propkit/ by walking up from cwd.

Usage:
    propkit init                                         # Initialize .propkit/ in cwd
    propkit types                                        # Registered property types
    propkit check property0003 '"open"'                  # Create-path check for one value
    propkit create '{"property0002": "Fan noise"}'       # Plan an issue create
    propkit update ISSUE '[{"property_id": ...}]'        # Plan an issue update
    propkit filter 'property0003:select:in:new'          # Compile a filter query
"""

from __future__ import annotations

from pathlib import Path

import click

from propkit import __version__
from propkit.cli_commands import filters as filter_commands
from propkit.cli_commands import schema as schema_commands
from propkit.cli_commands import values as value_commands
from propkit.config import (
    CONFIG_FILENAME,
    PROPKIT_DIR_NAME,
    default_config,
    default_system_schema,
    write_config,
    write_schema,
)


@click.group()
@click.version_option(version=__version__, prog_name="propkit")
def cli() -> None:
    """propkit: typed property processing for issue records."""


@cli.command()
@click.option("--force", is_flag=True, help="Overwrite an existing config and schema")
def init(force: bool) -> None:
    """Initialize .propkit/ in the current directory."""
    cwd = Path.cwd()
    propkit_dir = cwd / PROPKIT_DIR_NAME

    if propkit_dir.exists() and not force:
        click.echo(f"{PROPKIT_DIR_NAME}/ already exists in {cwd} (use --force to reset)")
        return

    propkit_dir.mkdir(exist_ok=True)
    config = default_config()
    write_config(propkit_dir, config)
    definitions = default_system_schema()
    schema_file = write_schema(propkit_dir, definitions, config)

    click.echo(f"Initialized {PROPKIT_DIR_NAME}/ in {cwd}")
    click.echo(f"  Config: {propkit_dir / CONFIG_FILENAME}")
    click.echo(f"  Schema: {schema_file} ({len(definitions)} properties)")


schema_commands.register(cli)
value_commands.register(cli)
filter_commands.register(cli)


if __name__ == "__main__":
    cli()
