"""Filter transformers: compile one ``FilterCondition`` into a query fragment.

A fragment names the storage table and the property, plus a value predicate::

    {"storage": "single", "property_id": "property0003",
     "property_type": "select", "value": {"in": ["open", "blocked"]}}

Predicates are ``{"eq": x}``, ``{"in": [...]}``, ``{"contains": s}``,
``{"startsWith": s}`` or ``{"endsWith": s}``. An empty ``in`` list matches
nothing.

Every transformer offers ``validate`` (cheap, never raises), ``preprocess``
(returns a normalized copy) and ``compile`` (raises
``UnsupportedOperatorError`` for operators it does not handle). Unknown
property types get ``DEFAULT_FILTER_TRANSFORMER``, which degrades to string
equality instead of failing.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Final, Literal

from propkit.constants import (
    OPERATOR_CONTAINS,
    OPERATOR_ENDS_WITH,
    OPERATOR_EQ,
    OPERATOR_IN,
    OPERATOR_STARTS_WITH,
    TYPE_ID,
    TYPE_MINERS,
    TYPE_MULTI_SELECT,
    TYPE_RICH_TEXT,
    TYPE_SELECT,
    TYPE_TEXT,
    TYPE_USER,
)
from propkit.errors import UnsupportedOperatorError
from propkit.models import FilterCondition
from propkit.types.core import QueryFragment
from propkit.validation import coerce_to_string, to_number

logger = logging.getLogger(__name__)

Storage = Literal["single", "multi"]
STORAGE_SINGLE: Final = "single"
STORAGE_MULTI: Final = "multi"

ConditionCheck = Callable[[FilterCondition], bool]
ConditionRewrite = Callable[[FilterCondition], FilterCondition]
ConditionCompiler = Callable[[FilterCondition], QueryFragment]


def has_identity(condition: FilterCondition) -> bool:
    """A condition must name a property, its type, and an operator."""
    return bool(condition.property_id and condition.property_type and condition.operator)


def _unchanged(condition: FilterCondition) -> FilterCondition:
    return condition


@dataclass(frozen=True)
class FilterTransformer:
    """validate -> preprocess -> compile for one property type."""

    property_type: str | None
    operators: frozenset[str]
    compile_rule: ConditionCompiler
    validate_rule: ConditionCheck = has_identity
    preprocess_rule: ConditionRewrite = _unchanged
    is_default: bool = False

    def validate(self, condition: FilterCondition) -> bool:
        return has_identity(condition) and self.validate_rule(condition)

    def preprocess(self, condition: FilterCondition) -> FilterCondition:
        return self.preprocess_rule(condition)

    def compile(self, condition: FilterCondition) -> QueryFragment:
        if not self.is_default and condition.operator not in self.operators:
            raise UnsupportedOperatorError(condition.operator, condition.property_type)
        return self.compile_rule(condition)


def fragment(storage: Storage, condition: FilterCondition, predicate: Any, *, with_type: bool = True) -> QueryFragment:
    result: QueryFragment = {"storage": storage, "property_id": condition.property_id}
    if with_type:
        result["property_type"] = condition.property_type
    result["value"] = predicate
    return result


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _is_nonempty_list(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and len(value) > 0


def _is_nonblank_str(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


# ---------------------------------------------------------------------------
# select
# ---------------------------------------------------------------------------


def _select_validate(condition: FilterCondition) -> bool:
    if condition.operator == OPERATOR_IN:
        return _is_nonempty_list(condition.value)
    if condition.operator == OPERATOR_EQ:
        return condition.value is not None
    return False


def _promote_in_value(condition: FilterCondition) -> FilterCondition:
    if condition.operator == OPERATOR_IN and not isinstance(condition.value, (list, tuple)):
        return replace(condition, value=[condition.value])
    return condition


def _select_compile(condition: FilterCondition) -> QueryFragment:
    if condition.operator == OPERATOR_IN:
        values = [coerce_to_string(v) for v in _as_list(condition.value)]
        return fragment(STORAGE_SINGLE, condition, {"in": values})
    return fragment(STORAGE_SINGLE, condition, {"eq": coerce_to_string(condition.value)})


# ---------------------------------------------------------------------------
# id
# ---------------------------------------------------------------------------


def _id_validate(condition: FilterCondition) -> bool:
    if condition.operator == OPERATOR_EQ:
        return to_number(condition.value) is not None
    if condition.operator == OPERATOR_IN:
        if not isinstance(condition.value, (list, tuple)):
            return False
        return all(to_number(v) is not None for v in condition.value)
    return False


def _id_preprocess(condition: FilterCondition) -> FilterCondition:
    if condition.operator == OPERATOR_EQ:
        return replace(condition, value=to_number(condition.value))
    if condition.operator == OPERATOR_IN and isinstance(condition.value, (list, tuple)):
        return replace(condition, value=[to_number(v) for v in condition.value])
    return condition


def _id_compile(condition: FilterCondition) -> QueryFragment:
    if condition.operator == OPERATOR_IN:
        values = [coerce_to_string(v) for v in _as_list(condition.value)]
        return fragment(STORAGE_SINGLE, condition, {"in": values})
    return fragment(STORAGE_SINGLE, condition, {"eq": coerce_to_string(condition.value)})


# ---------------------------------------------------------------------------
# text / rich_text
# ---------------------------------------------------------------------------

_TEXT_OPERATORS: frozenset[str] = frozenset({OPERATOR_CONTAINS, OPERATOR_EQ, OPERATOR_STARTS_WITH, OPERATOR_ENDS_WITH})


def _text_validate(condition: FilterCondition) -> bool:
    return condition.operator in _TEXT_OPERATORS and _is_nonblank_str(condition.value)


def _text_preprocess(condition: FilterCondition) -> FilterCondition:
    if isinstance(condition.value, str):
        return replace(condition, value=condition.value.strip())
    return condition


def _text_compile(condition: FilterCondition) -> QueryFragment:
    return fragment(STORAGE_SINGLE, condition, {condition.operator: condition.value})


def _rich_text_validate(condition: FilterCondition) -> bool:
    return condition.operator == OPERATOR_CONTAINS and _is_nonblank_str(condition.value)


# ---------------------------------------------------------------------------
# multi_select
# ---------------------------------------------------------------------------


def _in_list_validate(condition: FilterCondition) -> bool:
    return condition.operator == OPERATOR_IN and _is_nonempty_list(condition.value)


def _multi_select_compile(condition: FilterCondition) -> QueryFragment:
    values = [coerce_to_string(v) for v in _as_list(condition.value)]
    return fragment(STORAGE_MULTI, condition, {"in": values})


# ---------------------------------------------------------------------------
# miners
# ---------------------------------------------------------------------------


def _miners_validate(condition: FilterCondition) -> bool:
    return condition.property_type == TYPE_MINERS and _in_list_validate(condition)


def _miners_preprocess(condition: FilterCondition) -> FilterCondition:
    if condition.operator == OPERATOR_IN and isinstance(condition.value, (list, tuple)):
        return replace(condition, value=[coerce_to_string(v) for v in condition.value if v])
    return condition


def _miners_compile(condition: FilterCondition) -> QueryFragment:
    values = [coerce_to_string(v) for v in _as_list(condition.value) if v]
    return fragment(STORAGE_MULTI, replace(condition, property_type=TYPE_MINERS), {"in": values})


# ---------------------------------------------------------------------------
# user
# ---------------------------------------------------------------------------


def _user_validate(condition: FilterCondition) -> bool:
    if condition.property_type != TYPE_USER or condition.operator != OPERATOR_IN:
        return False
    if not isinstance(condition.value, (list, tuple)):
        return False
    return all(_is_nonblank_str(v) for v in condition.value)


def _user_preprocess(condition: FilterCondition) -> FilterCondition:
    items = [("" if v is None else coerce_to_string(v)) for v in _as_list(condition.value)]
    return replace(condition, value=[v for v in items if v.strip()])


def _user_compile(condition: FilterCondition) -> QueryFragment:
    user_ids = [coerce_to_string(v) for v in _as_list(condition.value)]
    return fragment(STORAGE_SINGLE, replace(condition, property_type=TYPE_USER), {"in": user_ids})


# ---------------------------------------------------------------------------
# default
# ---------------------------------------------------------------------------


def _default_compile(condition: FilterCondition) -> QueryFragment:
    logger.warning(
        "No filter transformer for property type '%s', falling back to string equality",
        condition.property_type,
        extra={
            "property_id": condition.property_id,
            "property_type": condition.property_type,
            "operator": condition.operator,
        },
    )
    text = "null" if condition.value is None else coerce_to_string(condition.value)
    return fragment(STORAGE_SINGLE, condition, {"eq": text}, with_type=False)


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------

SELECT_FILTER = FilterTransformer(
    TYPE_SELECT,
    frozenset({OPERATOR_IN, OPERATOR_EQ}),
    _select_compile,
    _select_validate,
    _promote_in_value,
)
ID_FILTER = FilterTransformer(TYPE_ID, frozenset({OPERATOR_EQ, OPERATOR_IN}), _id_compile, _id_validate, _id_preprocess)
TEXT_FILTER = FilterTransformer(TYPE_TEXT, _TEXT_OPERATORS, _text_compile, _text_validate, _text_preprocess)
RICH_TEXT_FILTER = FilterTransformer(TYPE_RICH_TEXT, frozenset({OPERATOR_CONTAINS}), _text_compile, _rich_text_validate)
MULTI_SELECT_FILTER = FilterTransformer(
    TYPE_MULTI_SELECT,
    frozenset({OPERATOR_IN}),
    _multi_select_compile,
    _in_list_validate,
    _promote_in_value,
)
MINERS_FILTER = FilterTransformer(
    TYPE_MINERS, frozenset({OPERATOR_IN}), _miners_compile, _miners_validate, _miners_preprocess
)
USER_FILTER = FilterTransformer(TYPE_USER, frozenset({OPERATOR_IN}), _user_compile, _user_validate, _user_preprocess)

DEFAULT_FILTER_TRANSFORMER = FilterTransformer(None, frozenset(), _default_compile, is_default=True)

FILTER_TRANSFORMERS: Mapping[str, FilterTransformer] = MappingProxyType(
    {
        t.property_type: t
        for t in (
            TEXT_FILTER,
            ID_FILTER,
            SELECT_FILTER,
            RICH_TEXT_FILTER,
            MULTI_SELECT_FILTER,
            MINERS_FILTER,
            USER_FILTER,
        )
        if t.property_type is not None
    }
)
