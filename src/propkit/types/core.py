# IMPORT CONSTRAINT: types/ modules must only import from typing, stdlib, and each other.
"""TypedDicts for the ``to_dict()`` returns of the frozen models."""

from typing import Any, NotRequired, TypedDict

# Compiled filter predicate: {"storage", "property_id", "property_type"?, "value"}
# or an AND envelope {"AND": [...]}. Kept open because executors extend it.
QueryFragment = dict[str, Any]


class ProjectConfig(TypedDict, total=False):
    """Shape of .propkit/config.json."""

    version: int
    schema_file: str
    log_level: str


class SelectOptionDict(TypedDict):
    id: str
    name: str
    color: NotRequired[str]


class PropertyDefinitionDict(TypedDict):
    id: str
    name: str
    type: str
    config: dict[str, Any]
    nullable: bool
    readonly: bool


class ValidationResultDict(TypedDict):
    valid: bool
    errors: list[str]


class SingleValueRecordDict(TypedDict):
    issue_id: str
    property_id: str
    property_type: str
    value: str | None
    number_value: float | None


class MultiValueRecordDict(TypedDict):
    issue_id: str
    property_id: str
    property_type: str
    value: str | None
    number_value: float | None
    position: int


class DbInsertDataDict(TypedDict, total=False):
    single_values: list[SingleValueRecordDict]
    multi_values: list[MultiValueRecordDict]


class SingleValueUpdateDict(TypedDict):
    value: str | None
    number_value: float | None


class MultiValueDataDict(TypedDict):
    value: str | None
    position: int | None
    number_value: float | None


class DbOperationResultDict(TypedDict, total=False):
    single_value_remove: bool
    single_value_update: SingleValueUpdateDict
    multi_value_remove_positions: list[int]
    multi_value_updates: dict[str, MultiValueDataDict]
    multi_value_creates: list[MultiValueDataDict]


class FilterConditionDict(TypedDict):
    """camelCase wire shape of a filter condition."""

    propertyId: str
    propertyType: str
    operator: str
    value: Any
    config: NotRequired[dict[str, Any]]
