"""Shared pytest fixtures for propkit tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from propkit.config import PROPKIT_DIR_NAME, default_config, default_system_schema, write_config, write_schema
from propkit.constants import PROPERTY_TITLE
from propkit.models import PropertyDefinition

STATUS_OPTIONS = [
    {"id": "open", "name": "Open"},
    {"id": "in_progress", "name": "In Progress"},
    {"id": "closed", "name": "Closed"},
]
LABEL_OPTIONS = [
    {"id": "urgent", "name": "Urgent"},
    {"id": "recurring", "name": "Recurring"},
    {"id": "warranty", "name": "Warranty"},
]


@pytest.fixture
def title_def() -> PropertyDefinition:
    return PropertyDefinition(PROPERTY_TITLE, "Title", "text", {"maxLength": 20}, nullable=False)


@pytest.fixture
def text_def() -> PropertyDefinition:
    return PropertyDefinition("property0100", "Serial", "text", {"minLength": 3, "maxLength": 10})


@pytest.fixture
def rich_text_def() -> PropertyDefinition:
    return PropertyDefinition("property0006", "Description", "rich_text", {"maxLength": 50})


@pytest.fixture
def select_def() -> PropertyDefinition:
    return PropertyDefinition("property0003", "Status", "select", {"options": STATUS_OPTIONS})


@pytest.fixture
def multi_select_def() -> PropertyDefinition:
    return PropertyDefinition("property0010", "Labels", "multi_select", {"options": LABEL_OPTIONS, "maxSelect": 2})


@pytest.fixture
def miners_def() -> PropertyDefinition:
    return PropertyDefinition("property0011", "Miners", "miners", {"maxSelect": 3})


@pytest.fixture
def user_def() -> PropertyDefinition:
    return PropertyDefinition("property0012", "Assignee", "user")


@pytest.fixture
def schema(
    title_def: PropertyDefinition,
    text_def: PropertyDefinition,
    rich_text_def: PropertyDefinition,
    select_def: PropertyDefinition,
    multi_select_def: PropertyDefinition,
    miners_def: PropertyDefinition,
    user_def: PropertyDefinition,
) -> dict[str, PropertyDefinition]:
    """A small schema covering every processed type plus a readonly system id."""
    readonly_id = PropertyDefinition("property0001", "ID", "id", readonly=True)
    defs = [readonly_id, title_def, text_def, rich_text_def, select_def, multi_select_def, miners_def, user_def]
    return {d.id: d for d in defs}


@pytest.fixture
def propkit_project(tmp_path: Path) -> Path:
    """A tmp directory set up as a propkit project (.propkit/ with config + schema).

    Returns the project root (parent of .propkit/).
    """
    propkit_dir = tmp_path / PROPKIT_DIR_NAME
    propkit_dir.mkdir()
    config = default_config()
    write_config(propkit_dir, config)
    write_schema(propkit_dir, default_system_schema(), config)
    return tmp_path


@pytest.fixture
def cli_runner() -> CliRunner:
    """Click CLI test runner."""
    return CliRunner()
