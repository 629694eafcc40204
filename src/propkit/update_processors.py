"""Update-path processors: validate one operation and plan its storage mutations.

Single-valued types accept SET and REMOVE. Multi-valued types accept ADD,
UPDATE and REMOVE. An illegal operation for a type is a format failure,
never an exception.

Multi-value positions
---------------------
UPDATE always removes every existing row and recreates the set numbered
``0..n-1`` in input order, so positions stay dense. The engine cannot read
storage, so "every existing row" is ``range(current_count)`` when the caller
knows the count and ``range(MULTI_VALUE_POSITION_CEILING)`` otherwise. ADD
appends at ``current_count`` when known; otherwise its create carries
``position=None`` and the executor must assign ``max + 1`` atomically.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from propkit.constants import (
    MULTI_VALUE_OPERATIONS,
    MULTI_VALUE_POSITION_CEILING,
    PROPERTY_TITLE,
    SINGLE_VALUE_OPERATIONS,
    TYPE_MINERS,
    TYPE_MULTI_SELECT,
    TYPE_RICH_TEXT,
    TYPE_SELECT,
    TYPE_TEXT,
    TYPE_USER,
)
from propkit.models import (
    DbOperationResult,
    MultiValueData,
    PropertyDefinition,
    SingleValueUpdate,
    ValidationResult,
)
from propkit.operations import AddOperation, PropertyOperation, RemoveOperation, SetOperation, UpdateOperation
from propkit.validation import find_duplicates, is_blank, is_unset
from propkit.value_processors import check_max_length, check_max_select, check_option_list, check_text_constraints

UpdateRule = Callable[[PropertyDefinition, PropertyOperation], ValidationResult]
UpdateTransform = Callable[[PropertyDefinition, PropertyOperation, str, int | None], DbOperationResult]


@dataclass(frozen=True)
class UpdateProcessor:
    """The update pipeline for one property type."""

    property_type: str
    allowed_operations: frozenset[str]
    format_rule: UpdateRule
    business_rule: UpdateRule
    transform: UpdateTransform

    def validate_format(self, definition: PropertyDefinition, operation: PropertyOperation) -> ValidationResult:
        if operation.operation_type not in self.allowed_operations:
            allowed = ", ".join(sorted(self.allowed_operations))
            return ValidationResult.fail(
                f"Property type {self.property_type} does not support operation "
                f"'{operation.operation_type}' (supported: {allowed})"
            )
        return self.format_rule(definition, operation)

    def validate_business_rules(
        self, definition: PropertyDefinition, operation: PropertyOperation
    ) -> ValidationResult:
        return self.business_rule(definition, operation)

    def transform_to_db_operations(
        self,
        definition: PropertyDefinition,
        operation: PropertyOperation,
        issue_id: str,
        *,
        current_count: int | None = None,
    ) -> DbOperationResult:
        return self.transform(definition, operation, issue_id, current_count)

    def process(
        self,
        definition: PropertyDefinition,
        operation: PropertyOperation,
        issue_id: str,
        *,
        current_count: int | None = None,
    ) -> tuple[DbOperationResult | None, ValidationResult]:
        """Run all three stages. Returns (None, failure) at the first failing stage."""
        result = self.validate_format(definition, operation)
        if not result.valid:
            return None, result
        result = self.validate_business_rules(definition, operation)
        if not result.valid:
            return None, result
        return self.transform_to_db_operations(definition, operation, issue_id, current_count=current_count), result


# ---------------------------------------------------------------------------
# Single-valued types
# ---------------------------------------------------------------------------


def _set_value_format(definition: PropertyDefinition, operation: PropertyOperation) -> ValidationResult:
    if isinstance(operation, SetOperation) and operation.value is not None and not isinstance(operation.value, str):
        return ValidationResult.fail("SET value must be a string or null")
    return ValidationResult.ok()


def _text_business(definition: PropertyDefinition, operation: PropertyOperation) -> ValidationResult:
    if not isinstance(operation, SetOperation):
        return ValidationResult.ok()
    value = operation.value
    if definition.id == PROPERTY_TITLE and is_blank(value):
        return ValidationResult.fail("Title cannot be empty")
    if value is None:
        if not definition.nullable:
            return ValidationResult.fail(f"Property {definition.name} cannot be empty")
        return ValidationResult.ok()
    return check_text_constraints(definition, value)


def _rich_text_business(definition: PropertyDefinition, operation: PropertyOperation) -> ValidationResult:
    if not isinstance(operation, SetOperation):
        return ValidationResult.ok()
    if not definition.nullable and is_blank(operation.value):
        return ValidationResult.fail(f"Property {definition.name} cannot be empty")
    if operation.value is None:
        return ValidationResult.ok()
    return check_max_length(definition, operation.value)


def _select_business(definition: PropertyDefinition, operation: PropertyOperation) -> ValidationResult:
    if not isinstance(operation, SetOperation) or is_unset(operation.value):
        return ValidationResult.ok()
    ids, result = check_option_list(definition)
    if ids is None:
        return result
    if operation.value not in ids:
        return ValidationResult.fail(f'Selected value "{operation.value}" is not a valid option')
    return ValidationResult.ok()


def _no_business_rule(definition: PropertyDefinition, operation: PropertyOperation) -> ValidationResult:
    return ValidationResult.ok()


def _single_transform(unset_empty: bool) -> UpdateTransform:
    """SET writes unconditionally, even when the stored value is identical."""

    def transform(
        definition: PropertyDefinition, operation: PropertyOperation, issue_id: str, current_count: int | None
    ) -> DbOperationResult:
        if isinstance(operation, RemoveOperation):
            return DbOperationResult(single_value_remove=True)
        if isinstance(operation, SetOperation):
            value = operation.value
            if unset_empty and value == "":
                value = None
            return DbOperationResult(single_value_update=SingleValueUpdate(value=value))
        return DbOperationResult()

    return transform


# ---------------------------------------------------------------------------
# Multi-valued types
# ---------------------------------------------------------------------------


def _multi_format(definition: PropertyDefinition, operation: PropertyOperation) -> ValidationResult:
    if isinstance(operation, AddOperation) and not isinstance(operation.value, str):
        return ValidationResult.fail("ADD value must be a string")
    if isinstance(operation, UpdateOperation):
        for item in operation.values:
            if not isinstance(item, str):
                return ValidationResult.fail("UPDATE values must all be strings")
    return ValidationResult.ok()


def _multi_select_business(definition: PropertyDefinition, operation: PropertyOperation) -> ValidationResult:
    if isinstance(operation, RemoveOperation):
        return ValidationResult.ok()
    ids, result = check_option_list(definition)
    if ids is None:
        return result
    if isinstance(operation, AddOperation):
        if operation.value not in ids:
            return ValidationResult.fail(f'Selected value "{operation.value}" is not a valid option')
        return ValidationResult.ok()
    if isinstance(operation, UpdateOperation):
        values = list(operation.values)
        if find_duplicates(values):
            return ValidationResult.fail("UPDATE values contain duplicate option ids")
        for value in values:
            if value not in ids:
                return ValidationResult.fail(f'Selected value "{value}" is not a valid option')
        return check_max_select(definition, len(values), "options")
    return ValidationResult.ok()


def _miners_business(definition: PropertyDefinition, operation: PropertyOperation) -> ValidationResult:
    if isinstance(operation, UpdateOperation):
        values = list(operation.values)
        if find_duplicates(values):
            return ValidationResult.fail("UPDATE values contain duplicate miner ids")
        return check_max_select(definition, len(values), "miners", zero_is_unbounded=False)
    # ADD cannot be checked against maxSelect without the current rows.
    return ValidationResult.ok()


def _existing_positions(current_count: int | None) -> tuple[int, ...]:
    if current_count is None:
        return tuple(range(MULTI_VALUE_POSITION_CEILING))
    return tuple(range(max(current_count, 0)))


def _multi_transform(
    definition: PropertyDefinition, operation: PropertyOperation, issue_id: str, current_count: int | None
) -> DbOperationResult:
    if isinstance(operation, RemoveOperation):
        return DbOperationResult(multi_value_remove_positions=_existing_positions(current_count))
    if isinstance(operation, AddOperation):
        position = None if current_count is None else max(current_count, 0)
        return DbOperationResult(multi_value_creates=(MultiValueData(value=operation.value, position=position),))
    if isinstance(operation, UpdateOperation):
        return DbOperationResult(
            multi_value_remove_positions=_existing_positions(current_count),
            multi_value_creates=tuple(
                MultiValueData(value=value, position=index) for index, value in enumerate(operation.values)
            ),
        )
    return DbOperationResult()


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------

TEXT_UPDATE_PROCESSOR = UpdateProcessor(
    TYPE_TEXT, SINGLE_VALUE_OPERATIONS, _set_value_format, _text_business, _single_transform(unset_empty=False)
)
RICH_TEXT_UPDATE_PROCESSOR = UpdateProcessor(
    TYPE_RICH_TEXT,
    SINGLE_VALUE_OPERATIONS,
    _set_value_format,
    _rich_text_business,
    _single_transform(unset_empty=False),
)
SELECT_UPDATE_PROCESSOR = UpdateProcessor(
    TYPE_SELECT, SINGLE_VALUE_OPERATIONS, _set_value_format, _select_business, _single_transform(unset_empty=True)
)
USER_UPDATE_PROCESSOR = UpdateProcessor(
    TYPE_USER, SINGLE_VALUE_OPERATIONS, _set_value_format, _no_business_rule, _single_transform(unset_empty=True)
)
MULTI_SELECT_UPDATE_PROCESSOR = UpdateProcessor(
    TYPE_MULTI_SELECT, MULTI_VALUE_OPERATIONS, _multi_format, _multi_select_business, _multi_transform
)
MINERS_UPDATE_PROCESSOR = UpdateProcessor(
    TYPE_MINERS, MULTI_VALUE_OPERATIONS, _multi_format, _miners_business, _multi_transform
)

UPDATE_PROCESSORS: Mapping[str, UpdateProcessor] = MappingProxyType(
    {
        p.property_type: p
        for p in (
            TEXT_UPDATE_PROCESSOR,
            RICH_TEXT_UPDATE_PROCESSOR,
            SELECT_UPDATE_PROCESSOR,
            USER_UPDATE_PROCESSOR,
            MULTI_SELECT_UPDATE_PROCESSOR,
            MINERS_UPDATE_PROCESSOR,
        )
    }
)
