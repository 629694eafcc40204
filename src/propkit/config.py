"""Project files: ``.propkit/config.json`` and the property schema.

The schema file is a JSON list of property definitions::

    [{"id": "property0002", "name": "Title", "type": "text",
      "config": {"maxLength": 200}, "nullable": false}, ...]
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from propkit.constants import (
    PROPERTY_ASSIGNEE,
    PROPERTY_CATEGORY,
    PROPERTY_CREATED_AT,
    PROPERTY_DESCRIPTION,
    PROPERTY_DIAGNOSIS,
    PROPERTY_ID,
    PROPERTY_ID_TYPE_MAP,
    PROPERTY_LABEL,
    PROPERTY_MINERS,
    PROPERTY_PRIORITY,
    PROPERTY_REPORTER,
    PROPERTY_STATUS,
    PROPERTY_TITLE,
    PROPERTY_UPDATED_AT,
)
from propkit.models import PropertyDefinition
from propkit.types.core import ProjectConfig, PropertyDefinitionDict, SelectOptionDict

logger = logging.getLogger(__name__)

PROPKIT_DIR_NAME = ".propkit"
CONFIG_FILENAME = "config.json"
SCHEMA_FILENAME = "properties.json"
CONFIG_VERSION = 1


def default_config() -> ProjectConfig:
    return ProjectConfig(version=CONFIG_VERSION, schema_file=SCHEMA_FILENAME, log_level="INFO")


def find_propkit_root(start: Path | None = None) -> Path:
    """Walk up from start (default cwd) looking for .propkit/ directory.

    Returns the .propkit/ directory path (not the project root).
    """
    current = (start or Path.cwd()).resolve()
    for parent in [current, *current.parents]:
        candidate = parent / PROPKIT_DIR_NAME
        if candidate.is_dir():
            return candidate
    msg = f"No {PROPKIT_DIR_NAME}/ directory found in {current} or any parent"
    raise FileNotFoundError(msg)


def read_config(propkit_dir: Path) -> ProjectConfig:
    """Read .propkit/config.json. Returns defaults if missing or corrupt.

    Keys missing from the file are filled from the defaults.
    """
    config = default_config()
    config_path = propkit_dir / CONFIG_FILENAME
    if not config_path.exists():
        return config
    try:
        raw = json.loads(config_path.read_text())
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Failed to read %s, using defaults: %s", config_path, exc)
        return config
    if not isinstance(raw, dict):
        logger.warning("%s does not contain a JSON object, using defaults", config_path)
        return config
    if isinstance(raw.get("version"), int):
        config["version"] = raw["version"]
    if isinstance(raw.get("schema_file"), str) and raw["schema_file"]:
        config["schema_file"] = raw["schema_file"]
    if isinstance(raw.get("log_level"), str) and raw["log_level"]:
        config["log_level"] = raw["log_level"].upper()
    return config


def write_config(propkit_dir: Path, config: dict[str, Any] | ProjectConfig) -> None:
    """Write .propkit/config.json."""
    config_path = propkit_dir / CONFIG_FILENAME
    config_path.write_text(json.dumps(config, indent=2) + "\n")


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


def schema_path(propkit_dir: Path, config: ProjectConfig | None = None) -> Path:
    config = config or read_config(propkit_dir)
    return propkit_dir / config.get("schema_file", SCHEMA_FILENAME)


def parse_schema(raw: Any) -> dict[str, PropertyDefinition]:
    """Build definitions keyed by id. Raises ValueError naming the bad entry."""
    if not isinstance(raw, list):
        msg = f"Property schema must be a JSON list, got {type(raw).__name__}"
        raise ValueError(msg)
    schema: dict[str, PropertyDefinition] = {}
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict):
            msg = f"Schema entry #{index + 1} must be an object, got {type(entry).__name__}"
            raise ValueError(msg)
        if "id" not in entry or "type" not in entry:
            msg = f"Schema entry #{index + 1} requires 'id' and 'type'"
            raise ValueError(msg)
        try:
            definition = PropertyDefinition.from_dict(entry)
        except ValueError as exc:
            msg = f"Schema entry #{index + 1} is invalid: {exc}"
            raise ValueError(msg) from exc
        if definition.id in schema:
            msg = f"Schema entry #{index + 1} duplicates property id '{definition.id}'"
            raise ValueError(msg)
        schema[definition.id] = definition
    return schema


def load_schema(propkit_dir: Path, config: ProjectConfig | None = None) -> dict[str, PropertyDefinition]:
    """Read the schema file. A missing file yields the system schema."""
    path = schema_path(propkit_dir, config)
    if not path.exists():
        logger.warning("Schema file %s not found, using the system properties", path)
        return {d.id: d for d in default_system_schema()}
    try:
        raw = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        msg = f"Schema file {path} is not valid JSON: {exc}"
        raise ValueError(msg) from exc
    return parse_schema(raw)


def write_schema(propkit_dir: Path, definitions: list[PropertyDefinition], config: ProjectConfig | None = None) -> Path:
    path = schema_path(propkit_dir, config)
    entries: list[PropertyDefinitionDict] = [d.to_dict() for d in definitions]
    path.write_text(json.dumps(entries, indent=2) + "\n")
    return path


def _options(*names: str) -> list[SelectOptionDict]:
    return [{"id": name.lower().replace(" ", "_"), "name": name} for name in names]


def default_system_schema() -> list[PropertyDefinition]:
    """The built-in properties every project starts with."""
    types = PROPERTY_ID_TYPE_MAP
    return [
        PropertyDefinition(PROPERTY_ID, "ID", types[PROPERTY_ID], readonly=True),
        PropertyDefinition(PROPERTY_TITLE, "Title", types[PROPERTY_TITLE], {"maxLength": 200}, nullable=False),
        PropertyDefinition(
            PROPERTY_STATUS,
            "Status",
            types[PROPERTY_STATUS],
            {"options": _options("New", "In Progress", "Resolved", "Closed")},
        ),
        PropertyDefinition(PROPERTY_CREATED_AT, "Created At", types[PROPERTY_CREATED_AT], readonly=True),
        PropertyDefinition(PROPERTY_UPDATED_AT, "Updated At", types[PROPERTY_UPDATED_AT], readonly=True),
        PropertyDefinition(PROPERTY_DESCRIPTION, "Description", types[PROPERTY_DESCRIPTION], {"maxLength": 10000}),
        PropertyDefinition(
            PROPERTY_PRIORITY,
            "Priority",
            types[PROPERTY_PRIORITY],
            {"options": _options("Low", "Medium", "High", "Urgent")},
        ),
        PropertyDefinition(
            PROPERTY_CATEGORY,
            "Category",
            types[PROPERTY_CATEGORY],
            {"options": _options("Hardware", "Network", "Power")},
        ),
        PropertyDefinition(
            PROPERTY_DIAGNOSIS,
            "Diagnosis",
            types[PROPERTY_DIAGNOSIS],
            {"options": _options("Fan Failure", "Hashboard Fault", "Overheating", "Unknown")},
        ),
        PropertyDefinition(
            PROPERTY_LABEL,
            "Labels",
            types[PROPERTY_LABEL],
            {"options": _options("Urgent", "Recurring", "Warranty"), "maxSelect": 3},
        ),
        PropertyDefinition(PROPERTY_MINERS, "Miners", types[PROPERTY_MINERS], {"maxSelect": 50}),
        PropertyDefinition(PROPERTY_ASSIGNEE, "Assignee", types[PROPERTY_ASSIGNEE]),
        PropertyDefinition(PROPERTY_REPORTER, "Reporter", types[PROPERTY_REPORTER]),
    ]
