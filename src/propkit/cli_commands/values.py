"""CLI commands that run the create and update pipelines: check, create, update."""

from __future__ import annotations

from typing import Any

import click

from propkit.cli_common import echo_json, fail, fail_with_errors, get_definition, load_project, parse_json_arg
from propkit.errors import UnsupportedTypeError
from propkit.issues import prepare_issue_create, prepare_issue_update
from propkit.models import DbInsertData
from propkit.registry import default_registry

DEFAULT_ISSUE_ID = "new-issue"


def _describe_insert(data: DbInsertData) -> None:
    for row in data.single_values or ():
        click.echo(f"  single  {row.property_id} ({row.property_type}) = {row.value!r}")
    for mrow in data.multi_values or ():
        click.echo(f"  multi   {mrow.property_id} ({mrow.property_type}) [{mrow.position}] = {mrow.value!r}")


@click.command("check")
@click.argument("property_id")
@click.argument("value_json")
@click.option("--issue-id", default=DEFAULT_ISSUE_ID, help="Issue id used in the planned rows")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def check(property_id: str, value_json: str, issue_id: str, as_json: bool) -> None:
    """Validate one create-time value and show the rows it would write."""
    project = load_project(as_json)
    definition = get_definition(project, property_id, as_json)
    value = parse_json_arg(value_json, "VALUE_JSON", as_json)
    try:
        processor = default_registry.get_processor(definition.type)
    except UnsupportedTypeError as e:
        fail(str(e), as_json)
    data, result = processor.process(definition, value, issue_id)
    payload: dict[str, Any] = {"property_id": definition.id, **result.to_dict()}
    if data is None:
        fail_with_errors(result.errors, as_json, payload)
    payload["data"] = data.to_dict()
    if as_json:
        echo_json(payload)
        return
    click.echo(f"{definition.name}: valid")
    _describe_insert(data)


@click.command("create")
@click.argument("values_json")
@click.option("--issue-id", default=DEFAULT_ISSUE_ID, help="Issue id used in the planned rows")
@click.option("--issue-number", type=int, default=None, help="Business number stored in the system id property")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def create(values_json: str, issue_id: str, issue_number: int | None, as_json: bool) -> None:
    """Plan the rows for a new issue from a {property_id: value} object."""
    project = load_project(as_json)
    values = parse_json_arg(values_json, "VALUES_JSON", as_json)
    if not isinstance(values, dict):
        fail("VALUES_JSON must be an object of {property_id: value}", as_json)
    try:
        result = prepare_issue_create(issue_id, values, project.schema, issue_number=issue_number)
    except UnsupportedTypeError as e:
        fail(str(e), as_json)
    if not result.success or result.data is None:
        fail_with_errors(result.errors, as_json, result.to_dict())
    if as_json:
        echo_json(result.to_dict())
        return
    click.echo(f"Planned create for {issue_id}")
    _describe_insert(result.data)


def _parse_counts(count: tuple[str, ...], as_json: bool) -> dict[str, int]:
    counts: dict[str, int] = {}
    for item in count:
        if "=" not in item:
            fail(f"Invalid count format: {item} (expected PROPERTY_ID=N)", as_json)
        key, raw = item.split("=", 1)
        try:
            counts[key] = int(raw)
        except ValueError:
            fail(f"Invalid count for {key}: {raw!r} is not an integer", as_json)
    return counts


@click.command("update")
@click.argument("issue_id")
@click.argument("operations_json")
@click.option("--count", multiple=True, help="Current row count of a multi-valued property as PROPERTY_ID=N")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def update(issue_id: str, operations_json: str, count: tuple[str, ...], as_json: bool) -> None:
    """Plan storage mutations for a list of update operations."""
    project = load_project(as_json)
    operations = parse_json_arg(operations_json, "OPERATIONS_JSON", as_json)
    if isinstance(operations, dict):
        operations = [operations]
    if not isinstance(operations, list):
        fail("OPERATIONS_JSON must be an operation object or a list of them", as_json)
    counts = _parse_counts(count, as_json)
    try:
        result = prepare_issue_update(issue_id, operations, project.schema, current_counts=counts)
    except UnsupportedTypeError as e:
        fail(str(e), as_json)
    if not result.success:
        fail_with_errors(result.errors, as_json, result.to_dict())
    if as_json:
        echo_json(result.to_dict())
        return
    click.echo(f"Planned {len(result.operations)} operation(s) for {issue_id}")
    for planned in result.operations:
        r = planned.result
        parts = []
        if r.single_value_remove:
            parts.append("remove value")
        if r.single_value_update is not None:
            parts.append(f"set {r.single_value_update.value!r}")
        if r.multi_value_remove_positions:
            parts.append(f"remove {len(r.multi_value_remove_positions)} position(s)")
        if r.multi_value_creates:
            created = ", ".join(
                f"{c.value!r}@{'next' if c.position is None else c.position}" for c in r.multi_value_creates
            )
            parts.append(f"create {created}")
        click.echo(f"  {planned.property_id} {planned.operation_type}: {'; '.join(parts) or 'no-op'}")


def register(cli: click.Group) -> None:
    """Register value pipeline commands with the CLI group."""
    cli.add_command(check)
    cli.add_command(create)
    cli.add_command(update)
