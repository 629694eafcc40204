"""Combine filter conditions into one query, and carry them in a compact string.

``build_filter_query`` runs each condition through its transformer and ANDs
the surviving fragments. Invalid conditions are dropped with a warning, so a
half-built filter in a UI never blocks the listing. No OR/NOT or grouping.

The string form is ``propertyId:propertyType:operator:value`` segments joined
by ``;``, with the value percent-encoded::

    property0003:select:in:open%2Cblocked;property0002:text:contains:pump
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import quote, unquote

from propkit.constants import OPERATOR_IN, TYPE_ID
from propkit.models import FilterCondition
from propkit.registry import PropertyTypeRegistry, default_registry
from propkit.types.core import QueryFragment
from propkit.validation import coerce_to_string, to_number

logger = logging.getLogger(__name__)

_SEGMENT_SEP = ";"
_FIELD_SEP = ":"
_LIST_SEP = ","
_NULL_TOKEN = "null"


def _as_condition(raw: FilterCondition | Mapping[str, Any]) -> FilterCondition:
    if isinstance(raw, FilterCondition):
        return raw
    return FilterCondition.from_dict(raw)


def compile_condition(
    condition: FilterCondition, registry: PropertyTypeRegistry | None = None
) -> QueryFragment | None:
    """validate -> preprocess -> compile for one condition. None when it is invalid."""
    transformer = (registry or default_registry).get_filter_transformer(condition.property_type)
    if not transformer.validate(condition):
        logger.warning(
            "Skipping invalid filter condition on %s",
            condition.property_id or "<missing property>",
            extra={
                "property_id": condition.property_id,
                "property_type": condition.property_type,
                "operator": condition.operator,
            },
        )
        return None
    return transformer.compile(transformer.preprocess(condition))


def build_filter_query(
    conditions: Iterable[FilterCondition | Mapping[str, Any]],
    registry: PropertyTypeRegistry | None = None,
) -> QueryFragment:
    """AND every valid condition. Returns ``{}`` (match everything) when none survive.

    ``UnsupportedOperatorError`` from a transformer propagates: it means the
    caller built a condition no UI should be able to produce.
    """
    fragments: list[QueryFragment] = []
    for raw in conditions:
        compiled = compile_condition(_as_condition(raw), registry)
        if compiled is not None:
            fragments.append(compiled)
    if not fragments:
        return {}
    return {"AND": fragments}


# ---------------------------------------------------------------------------
# String codec
# ---------------------------------------------------------------------------


def _decode_value(property_type: str, operator: str, text: str) -> Any:
    if text == _NULL_TOKEN:
        return None
    if operator == OPERATOR_IN:
        items = text.split(_LIST_SEP)
        if property_type == TYPE_ID:
            return [_maybe_number(item) for item in items]
        return items
    if property_type == TYPE_ID:
        return _maybe_number(text)
    return text


def _maybe_number(text: str) -> Any:
    number = to_number(text)
    return text if number is None else number


def deserialize_filters(text: str | None) -> list[FilterCondition]:
    """Parse ``id:type:op:value;...`` into conditions.

    Segments without exactly four fields or with an undecodable value are
    skipped with a warning; the rest are still returned.
    """
    if not text:
        return []
    conditions: list[FilterCondition] = []
    for segment in text.split(_SEGMENT_SEP):
        if not segment:
            continue
        parts = segment.split(_FIELD_SEP)
        if len(parts) != 4 or not all(parts[:3]):
            logger.warning("Skipping malformed filter segment: %r", segment)
            continue
        property_id, property_type, operator, encoded = parts
        try:
            decoded = unquote(encoded, errors="strict")
        except UnicodeDecodeError as exc:
            logger.warning("Skipping filter segment with undecodable value %r: %s", segment, exc)
            continue
        conditions.append(
            FilterCondition(
                property_id=property_id,
                property_type=property_type,
                operator=operator,
                value=_decode_value(property_type, operator, decoded),
            )
        )
    return conditions


def _encode_value(value: Any) -> str:
    if value is None:
        return _NULL_TOKEN
    if isinstance(value, (list, tuple)):
        text = _LIST_SEP.join(coerce_to_string(v) for v in value)
    else:
        text = coerce_to_string(value)
    return quote(text, safe="")


def serialize_filters(conditions: Iterable[FilterCondition | Mapping[str, Any]]) -> str:
    """Inverse of ``deserialize_filters``.

    List items are joined with ``,`` before encoding, so an item that itself
    contains a comma comes back split.
    """
    segments = []
    for raw in conditions:
        condition = _as_condition(raw)
        segments.append(
            _FIELD_SEP.join(
                (
                    condition.property_id,
                    condition.property_type,
                    condition.operator,
                    _encode_value(condition.value),
                )
            )
        )
    return _SEGMENT_SEP.join(segments)
