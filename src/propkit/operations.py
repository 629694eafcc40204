"""Update operation variants and their wire form.

On the wire an operation is ``{property_id, operation_type, operation_payload}``.
Inside the engine it is one of four frozen variants, so processors match on
the variant instead of probing a loose payload for keys.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

from propkit.constants import OP_ADD, OP_REMOVE, OP_SET, OP_UPDATE
from propkit.types.inputs import OperationRequestArgs


@dataclass(frozen=True)
class SetOperation:
    """Replace the single stored value."""

    operation_type: ClassVar[str] = OP_SET
    value: Any

    def payload(self) -> dict[str, Any]:
        return {"value": self.value}


@dataclass(frozen=True)
class RemoveOperation:
    """Delete every stored row for the property."""

    operation_type: ClassVar[str] = OP_REMOVE

    def payload(self) -> dict[str, Any]:
        return {}


@dataclass(frozen=True)
class AddOperation:
    """Append one element to a multi-valued property."""

    operation_type: ClassVar[str] = OP_ADD
    value: Any

    def payload(self) -> dict[str, Any]:
        return {"value": self.value}


@dataclass(frozen=True)
class UpdateOperation:
    """Replace the whole ordered set of a multi-valued property."""

    operation_type: ClassVar[str] = OP_UPDATE
    values: tuple[Any, ...]

    def payload(self) -> dict[str, Any]:
        return {"values": list(self.values)}


PropertyOperation = SetOperation | RemoveOperation | AddOperation | UpdateOperation


@dataclass(frozen=True)
class OperationRequest:
    property_id: str
    operation: PropertyOperation

    def to_dict(self) -> OperationRequestArgs:
        return {
            "property_id": self.property_id,
            "operation_type": self.operation.operation_type,
            "operation_payload": self.operation.payload(),
        }


def parse_operation(operation_type: Any, payload: Any) -> tuple[PropertyOperation | None, str | None]:
    """Turn a wire operation into a variant.

    Returns (operation, None) on success or (None, error_message) on failure.
    Only the payload *keys* are checked here; value types are the update
    processor's format check.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        return None, "operation_payload must be an object"
    if operation_type == OP_SET:
        if "value" not in payload:
            return None, "SET payload must contain a 'value' field"
        return SetOperation(value=payload["value"]), None
    if operation_type == OP_REMOVE:
        return RemoveOperation(), None
    if operation_type == OP_ADD:
        if "value" not in payload:
            return None, "ADD payload must contain a 'value' field"
        return AddOperation(value=payload["value"]), None
    if operation_type == OP_UPDATE:
        if "values" not in payload:
            return None, "UPDATE payload must contain a 'values' field"
        values = payload["values"]
        if not isinstance(values, (list, tuple)):
            return None, "UPDATE 'values' field must be a list"
        return UpdateOperation(values=tuple(values)), None
    return None, f"Unknown operation type: {operation_type}"


def parse_operation_request(raw: Any) -> tuple[OperationRequest | None, str | None]:
    """Parse ``{property_id, operation_type, operation_payload}``."""
    if not isinstance(raw, Mapping):
        return None, "operation must be an object"
    property_id = raw.get("property_id")
    if not isinstance(property_id, str) or not property_id:
        return None, "operation requires a non-empty 'property_id'"
    operation, error = parse_operation(raw.get("operation_type"), raw.get("operation_payload"))
    if operation is None:
        return None, error
    return OperationRequest(property_id=property_id, operation=operation), None


# ---------------------------------------------------------------------------
# Wire builders
# ---------------------------------------------------------------------------


def create_property_operation(
    property_id: str, operation_type: str, operation_payload: dict[str, Any]
) -> OperationRequestArgs:
    return {
        "property_id": property_id,
        "operation_type": operation_type,
        "operation_payload": operation_payload,
    }


def create_set_operation(property_id: str, value: str | None) -> OperationRequestArgs:
    return create_property_operation(property_id, OP_SET, {"value": value})


def create_remove_operation(property_id: str) -> OperationRequestArgs:
    return create_property_operation(property_id, OP_REMOVE, {})


def create_add_operation(property_id: str, value: str) -> OperationRequestArgs:
    return create_property_operation(property_id, OP_ADD, {"value": value})


def create_update_operation(property_id: str, values: list[str]) -> OperationRequestArgs:
    return create_property_operation(property_id, OP_UPDATE, {"values": list(values)})
