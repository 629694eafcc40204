"""CLI command that compiles filter conditions into a query."""

from __future__ import annotations

import click

from propkit.cli_common import echo_json, fail, parse_json_arg
from propkit.errors import UnsupportedOperatorError
from propkit.filter_query import build_filter_query, deserialize_filters, serialize_filters
from propkit.models import FilterCondition


@click.command("filter")
@click.argument("expr", required=False, default="")
@click.option("--conditions", "conditions_json", default=None, help="JSON list of filter condition objects")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def filter_cmd(expr: str, conditions_json: str | None, as_json: bool) -> None:
    """Compile filters given as id:type:op:value;... and/or a JSON list."""
    conditions = deserialize_filters(expr)
    if conditions_json is not None:
        raw = parse_json_arg(conditions_json, "--conditions", as_json)
        if not isinstance(raw, list) or not all(isinstance(item, dict) for item in raw):
            fail("--conditions must be a JSON list of objects", as_json)
        conditions.extend(FilterCondition.from_dict(item) for item in raw)
    try:
        query = build_filter_query(conditions)
    except UnsupportedOperatorError as e:
        fail(str(e), as_json)
    if as_json:
        echo_json({"filters": serialize_filters(conditions), "query": query})
        return
    if not query:
        click.echo("No filters: matches every issue")
        return
    for fragment in query["AND"]:
        predicate = ", ".join(f"{op} {value!r}" for op, value in fragment["value"].items())
        click.echo(f"  [{fragment['storage']}] {fragment['property_id']} {predicate}")


def register(cli: click.Group) -> None:
    """Register filter commands with the CLI group."""
    cli.add_command(filter_cmd)
