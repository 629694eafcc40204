"""Shared CLI helpers.

Provides project loading and output helpers so that both the main
``cli.py`` and the ``cli_commands/*.py`` modules can use them without
circular imports.
"""

from __future__ import annotations

import json as json_mod
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NoReturn

import click

from propkit.config import PROPKIT_DIR_NAME, find_propkit_root, load_schema, read_config
from propkit.logging import setup_logging
from propkit.models import PropertyDefinition
from propkit.types.core import ProjectConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Project:
    propkit_dir: Path
    config: ProjectConfig
    schema: dict[str, PropertyDefinition]


def fail(message: str, as_json: bool) -> NoReturn:
    """Report an error the way the caller asked for and exit 1."""
    if as_json:
        click.echo(json_mod.dumps({"error": message}))
    else:
        click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def fail_with_errors(
    errors: list[str] | tuple[str, ...], as_json: bool, payload: dict[str, Any] | None = None
) -> NoReturn:
    """Report validation errors and exit 1. ``payload`` is echoed as-is under --json."""
    if as_json:
        click.echo(json_mod.dumps(payload if payload is not None else {"errors": list(errors)}, indent=2, default=str))
    else:
        for err in errors:
            click.echo(f"  {err}", err=True)
    sys.exit(1)


def echo_json(data: Any) -> None:
    click.echo(json_mod.dumps(data, indent=2, default=str))


def parse_json_arg(text: str, what: str, as_json: bool) -> Any:
    try:
        return json_mod.loads(text)
    except json_mod.JSONDecodeError as exc:
        fail(f"Invalid JSON for {what}: {exc.msg}", as_json)


def load_project(as_json: bool = False) -> Project:
    """Discover .propkit/, start file logging, and load the schema."""
    try:
        propkit_dir = find_propkit_root()
    except FileNotFoundError:
        fail(f"No {PROPKIT_DIR_NAME}/ found. Run 'propkit init' first.", as_json)
    config = read_config(propkit_dir)
    try:
        setup_logging(propkit_dir, config.get("log_level", "INFO"))
    except ValueError:
        setup_logging(propkit_dir)
        logger.warning("Unknown log_level %r in config, using INFO", config.get("log_level"))
    try:
        schema = load_schema(propkit_dir, config)
    except ValueError as e:
        fail(str(e), as_json)
    return Project(propkit_dir=propkit_dir, config=config, schema=schema)


def get_definition(project: Project, property_id: str, as_json: bool) -> PropertyDefinition:
    definition = project.schema.get(property_id)
    if definition is None:
        fail(f"Property {property_id} does not exist", as_json)
    return definition
