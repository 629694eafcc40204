"""CLI commands for the type registry and the project schema."""

from __future__ import annotations

import click

from propkit.cli_common import echo_json, load_project
from propkit.registry import default_registry


@click.command("types")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def types_cmd(as_json: bool) -> None:
    """List registered property types with their update operations."""
    rows = [
        {
            "type": t,
            "creatable": default_registry.has_processor(t),
            "operations": default_registry.allowed_operations(t),
            "filterable": default_registry.is_filterable(t),
        }
        for t in default_registry.registered_types()
    ]
    if as_json:
        echo_json(rows)
        return
    for row in rows:
        ops = ", ".join(row["operations"]) or "-"
        flags = []
        if row["creatable"]:
            flags.append("create")
        if row["filterable"]:
            flags.append("filter")
        click.echo(f"{row['type']:<14} ops: {ops:<22} {' '.join(flags)}")


@click.command("properties")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def properties_cmd(as_json: bool) -> None:
    """List the properties defined in the project schema."""
    project = load_project(as_json)
    definitions = sorted(project.schema.values(), key=lambda d: d.id)
    if as_json:
        echo_json([d.to_dict() for d in definitions])
        return
    for d in definitions:
        marker = " (readonly)" if d.readonly else ""
        click.echo(f"{d.id}  {d.type:<13} {d.name}{marker}")


def register(cli: click.Group) -> None:
    """Register schema commands with the CLI group."""
    cli.add_command(types_cmd)
    cli.add_command(properties_cmd)
