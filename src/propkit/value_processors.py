"""Create-path processors: validate a new issue's property value and plan its rows.

Each property type is a ``ValueProcessor`` record of three pure functions,
run in the fixed order ``format -> business rules -> transform``. A failed
stage returns a ``ValidationResult`` with the first failing rule; only
``transform`` assumes its input already passed both checks.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from propkit.constants import (
    TYPE_MINERS,
    TYPE_MULTI_SELECT,
    TYPE_RICH_TEXT,
    TYPE_SELECT,
    TYPE_TEXT,
    TYPE_USER,
)
from propkit.models import DbInsertData, MultiValueRecord, PropertyDefinition, SingleValueRecord, ValidationResult
from propkit.validation import (
    coerce_to_string,
    config_int,
    find_duplicates,
    is_option_scalar,
    is_string_coercible,
    is_unset,
    option_ids,
)

logger = logging.getLogger(__name__)

FormatRule = Callable[[PropertyDefinition, Any], ValidationResult]
BusinessRule = Callable[[PropertyDefinition, Any], ValidationResult]
InsertTransform = Callable[[PropertyDefinition, Any, str], DbInsertData]


@dataclass(frozen=True)
class ValueProcessor:
    """The create pipeline for one property type."""

    property_type: str
    format_rule: FormatRule
    business_rule: BusinessRule
    transform: InsertTransform

    def validate_format(self, definition: PropertyDefinition, value: Any) -> ValidationResult:
        return self.format_rule(definition, value)

    def validate_business_rules(self, definition: PropertyDefinition, value: Any) -> ValidationResult:
        return self.business_rule(definition, value)

    def transform_to_db_format(self, definition: PropertyDefinition, value: Any, issue_id: str) -> DbInsertData:
        return self.transform(definition, value, issue_id)

    def process(
        self, definition: PropertyDefinition, value: Any, issue_id: str
    ) -> tuple[DbInsertData | None, ValidationResult]:
        """Run all three stages. Returns (None, failure) at the first failing stage."""
        result = self.validate_format(definition, value)
        if not result.valid:
            return None, result
        result = self.validate_business_rules(definition, value)
        if not result.valid:
            return None, result
        return self.transform_to_db_format(definition, value, issue_id), result


# ---------------------------------------------------------------------------
# Row builders
# ---------------------------------------------------------------------------


def single_value(
    issue_id: str,
    definition: PropertyDefinition,
    property_type: str,
    value: str | None,
    number_value: float | None = None,
) -> DbInsertData:
    return DbInsertData(
        single_values=(
            SingleValueRecord(
                issue_id=issue_id,
                property_id=definition.id,
                property_type=property_type,
                value=value,
                number_value=number_value,
            ),
        )
    )


def multi_values(issue_id: str, definition: PropertyDefinition, property_type: str, items: Any) -> DbInsertData:
    """One row per item; position is the item's index in the input."""
    if not items:
        return DbInsertData(multi_values=())
    return DbInsertData(
        multi_values=tuple(
            MultiValueRecord(
                issue_id=issue_id,
                property_id=definition.id,
                property_type=property_type,
                value=coerce_to_string(item),
                position=index,
            )
            for index, item in enumerate(items)
        )
    )


# ---------------------------------------------------------------------------
# Text-like rules (shared with the update path)
# ---------------------------------------------------------------------------


def check_nullable_text(definition: PropertyDefinition, value: Any) -> ValidationResult:
    if value is None:
        if not definition.nullable:
            return ValidationResult.fail(f"Property {definition.name} cannot be empty")
        return ValidationResult.ok()
    if not is_string_coercible(value):
        return ValidationResult.fail(f"Property {definition.name} must be a string")
    return ValidationResult.ok()


def check_text_constraints(definition: PropertyDefinition, text: str) -> ValidationResult:
    """minLength, maxLength and pattern, in that order."""
    config = definition.config
    min_length = config_int(config, "minLength")
    if min_length is not None and len(text) < min_length:
        return ValidationResult.fail(f"Property {definition.name} must be at least {min_length} characters")
    max_length = config_int(config, "maxLength")
    if max_length is not None and len(text) > max_length:
        return ValidationResult.fail(f"Property {definition.name} must be at most {max_length} characters")
    pattern = config.get("pattern")
    if isinstance(pattern, str):
        try:
            regex = re.compile(pattern)
        except re.error as exc:
            # A broken pattern is a schema problem; the value is not at fault.
            logger.warning(
                "Ignoring invalid pattern for property %s: %s",
                definition.name,
                exc,
                extra={"property_id": definition.id, "property_type": definition.type},
            )
            return ValidationResult.ok()
        if not regex.search(text):
            message = config.get("patternErrorMessage")
            if not isinstance(message, str) or not message:
                message = f"Property {definition.name} has an invalid format"
            return ValidationResult.fail(message)
    return ValidationResult.ok()


def check_max_length(definition: PropertyDefinition, text: str) -> ValidationResult:
    max_length = config_int(definition.config, "maxLength")
    if max_length is not None and len(text) > max_length:
        return ValidationResult.fail(f"Property {definition.name} must be at most {max_length} characters")
    return ValidationResult.ok()


def check_option_list(definition: PropertyDefinition) -> tuple[list[str] | None, ValidationResult]:
    ids = option_ids(definition.config)
    if ids is None:
        return None, ValidationResult.fail(f"Property {definition.name} is misconfigured: no options defined")
    return ids, ValidationResult.ok()


def check_max_select(
    definition: PropertyDefinition, count: int, noun: str, *, zero_is_unbounded: bool = True
) -> ValidationResult:
    """Bound ``count`` by ``config.maxSelect``.

    multi_select schemas use 0 for "no limit"; miners treat any number,
    0 included, as a real bound.
    """
    max_select = config_int(definition.config, "maxSelect")
    if max_select is None or (zero_is_unbounded and max_select == 0):
        return ValidationResult.ok()
    if count > max_select:
        return ValidationResult.fail(f"Property {definition.name} allows at most {max_select} {noun}")
    return ValidationResult.ok()


# ---------------------------------------------------------------------------
# text
# ---------------------------------------------------------------------------


def _text_business(definition: PropertyDefinition, value: Any) -> ValidationResult:
    if value is None:
        return ValidationResult.ok()
    return check_text_constraints(definition, coerce_to_string(value))


def _text_transform(definition: PropertyDefinition, value: Any, issue_id: str) -> DbInsertData:
    stored = None if value is None else coerce_to_string(value)
    return single_value(issue_id, definition, TYPE_TEXT, stored)


# ---------------------------------------------------------------------------
# rich_text
# ---------------------------------------------------------------------------


def _rich_text_business(definition: PropertyDefinition, value: Any) -> ValidationResult:
    if value is None:
        return ValidationResult.ok()
    return check_max_length(definition, coerce_to_string(value))


def _rich_text_transform(definition: PropertyDefinition, value: Any, issue_id: str) -> DbInsertData:
    stored = None if value is None else coerce_to_string(value)
    return single_value(issue_id, definition, TYPE_RICH_TEXT, stored)


# ---------------------------------------------------------------------------
# select
# ---------------------------------------------------------------------------


def _select_format(definition: PropertyDefinition, value: Any) -> ValidationResult:
    if value is None:
        return ValidationResult.ok()
    if not is_option_scalar(value):
        return ValidationResult.fail(f"Property {definition.name} must be a string or number")
    return ValidationResult.ok()


def _select_business(definition: PropertyDefinition, value: Any) -> ValidationResult:
    if value is None:
        return ValidationResult.ok()
    ids, result = check_option_list(definition)
    if ids is None:
        return result
    if value == "":
        return ValidationResult.ok()
    if coerce_to_string(value) not in ids:
        return ValidationResult.fail(f"Property {definition.name} value is not a valid option")
    return ValidationResult.ok()


def _select_transform(definition: PropertyDefinition, value: Any, issue_id: str) -> DbInsertData:
    stored = None if is_unset(value) else coerce_to_string(value)
    return single_value(issue_id, definition, TYPE_SELECT, stored)


# ---------------------------------------------------------------------------
# multi_select / miners
# ---------------------------------------------------------------------------


def _list_format(noun: str) -> FormatRule:
    def rule(definition: PropertyDefinition, value: Any) -> ValidationResult:
        if value is None:
            return ValidationResult.ok()
        if not isinstance(value, (list, tuple)):
            return ValidationResult.fail(f"Property {definition.name} must be a list")
        for i, item in enumerate(value):
            if not is_option_scalar(item):
                return ValidationResult.fail(
                    f"Property {definition.name}: {noun} #{i + 1} must be a string or number"
                )
        return ValidationResult.ok()

    return rule


def _multi_select_business(definition: PropertyDefinition, value: Any) -> ValidationResult:
    if not value:
        return ValidationResult.ok()
    ids, result = check_option_list(definition)
    if ids is None:
        return result
    items = [coerce_to_string(item) for item in value]
    for item in items:
        if item not in ids:
            return ValidationResult.fail(f'Property {definition.name} value "{item}" is not a valid option')
    if find_duplicates(items):
        return ValidationResult.fail(f"Property {definition.name} contains duplicate options")
    return check_max_select(definition, len(items), "options")


def _miners_business(definition: PropertyDefinition, value: Any) -> ValidationResult:
    if not value:
        return ValidationResult.ok()
    items = [coerce_to_string(item) for item in value]
    if find_duplicates(items):
        return ValidationResult.fail(f"Property {definition.name} contains duplicate miner ids")
    # Whether each miner exists is the inventory service's concern.
    return check_max_select(definition, len(items), "miners", zero_is_unbounded=False)


def _multi_select_transform(definition: PropertyDefinition, value: Any, issue_id: str) -> DbInsertData:
    return multi_values(issue_id, definition, TYPE_MULTI_SELECT, value)


def _miners_transform(definition: PropertyDefinition, value: Any, issue_id: str) -> DbInsertData:
    return multi_values(issue_id, definition, TYPE_MINERS, value)


# ---------------------------------------------------------------------------
# user
# ---------------------------------------------------------------------------


def _user_format(definition: PropertyDefinition, value: Any) -> ValidationResult:
    if is_unset(value):
        return ValidationResult.ok()
    if not isinstance(value, str):
        return ValidationResult.fail(f"Property {definition.name} must be a string")
    return ValidationResult.ok()


def _user_business(definition: PropertyDefinition, value: Any) -> ValidationResult:
    # User existence is resolved by the identity service before this point.
    return ValidationResult.ok()


def _user_transform(definition: PropertyDefinition, value: Any, issue_id: str) -> DbInsertData:
    stored = None if is_unset(value) else coerce_to_string(value)
    return single_value(issue_id, definition, TYPE_USER, stored)


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------

TEXT_PROCESSOR = ValueProcessor(TYPE_TEXT, check_nullable_text, _text_business, _text_transform)
RICH_TEXT_PROCESSOR = ValueProcessor(TYPE_RICH_TEXT, check_nullable_text, _rich_text_business, _rich_text_transform)
SELECT_PROCESSOR = ValueProcessor(TYPE_SELECT, _select_format, _select_business, _select_transform)
MULTI_SELECT_PROCESSOR = ValueProcessor(
    TYPE_MULTI_SELECT, _list_format("option"), _multi_select_business, _multi_select_transform
)
MINERS_PROCESSOR = ValueProcessor(TYPE_MINERS, _list_format("miner id"), _miners_business, _miners_transform)
USER_PROCESSOR = ValueProcessor(TYPE_USER, _user_format, _user_business, _user_transform)

VALUE_PROCESSORS: Mapping[str, ValueProcessor] = MappingProxyType(
    {
        p.property_type: p
        for p in (
            TEXT_PROCESSOR,
            RICH_TEXT_PROCESSOR,
            SELECT_PROCESSOR,
            MULTI_SELECT_PROCESSOR,
            MINERS_PROCESSOR,
            USER_PROCESSOR,
        )
    }
)
