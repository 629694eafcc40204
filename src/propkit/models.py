"""Frozen data contracts exchanged between callers, processors and executors.

Definitions are read-only inputs owned by the schema store. Records and
operation results are write plans handed to the storage executor; the engine
never keeps them.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from propkit.types.core import (
    DbInsertDataDict,
    DbOperationResultDict,
    FilterConditionDict,
    MultiValueDataDict,
    MultiValueRecordDict,
    PropertyDefinitionDict,
    SingleValueRecordDict,
    SingleValueUpdateDict,
    ValidationResultDict,
)

# ---------------------------------------------------------------------------
# Definitions
# ---------------------------------------------------------------------------


def _freeze(config: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(config or {}))


@dataclass(frozen=True)
class PropertyDefinition:
    """A typed, named attribute that issues can carry."""

    id: str
    name: str
    type: str
    config: Mapping[str, Any] = field(default_factory=dict)
    nullable: bool = True
    readonly: bool = False

    def __post_init__(self) -> None:
        if not self.id:
            msg = "Property definition requires a non-empty id"
            raise ValueError(msg)
        if not self.type:
            msg = f"Property '{self.id}' requires a non-empty type"
            raise ValueError(msg)
        object.__setattr__(self, "config", _freeze(self.config))

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> PropertyDefinition:
        config = raw.get("config") or {}
        if not isinstance(config, Mapping):
            msg = f"Property '{raw.get('id')}': 'config' must be an object, got {type(config).__name__}"
            raise ValueError(msg)
        return cls(
            id=str(raw["id"]),
            name=str(raw.get("name", raw["id"])),
            type=str(raw["type"]),
            config=config,
            nullable=bool(raw.get("nullable", True)),
            readonly=bool(raw.get("readonly", False)),
        )

    def to_dict(self) -> PropertyDefinitionDict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "config": dict(self.config),
            "nullable": self.nullable,
            "readonly": self.readonly,
        }


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of one validation stage. Returned, never raised."""

    valid: bool
    errors: tuple[str, ...] = ()

    @classmethod
    def ok(cls) -> ValidationResult:
        return _OK

    @classmethod
    def fail(cls, *errors: str) -> ValidationResult:
        return cls(valid=False, errors=errors)

    def to_dict(self) -> ValidationResultDict:
        return {"valid": self.valid, "errors": list(self.errors)}


_OK = ValidationResult(valid=True)

# ---------------------------------------------------------------------------
# Create path
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SingleValueRecord:
    issue_id: str
    property_id: str
    property_type: str
    value: str | None
    number_value: float | None = None

    def to_dict(self) -> SingleValueRecordDict:
        return {
            "issue_id": self.issue_id,
            "property_id": self.property_id,
            "property_type": self.property_type,
            "value": self.value,
            "number_value": self.number_value,
        }


@dataclass(frozen=True)
class MultiValueRecord:
    issue_id: str
    property_id: str
    property_type: str
    value: str | None
    position: int
    number_value: float | None = None

    def to_dict(self) -> MultiValueRecordDict:
        return {
            "issue_id": self.issue_id,
            "property_id": self.property_id,
            "property_type": self.property_type,
            "value": self.value,
            "number_value": self.number_value,
            "position": self.position,
        }


@dataclass(frozen=True)
class DbInsertData:
    """Rows to insert for one property of a new issue.

    ``None`` means "no instruction of this kind"; an empty tuple means "insert
    nothing" (a multi-valued property created empty).
    """

    single_values: tuple[SingleValueRecord, ...] | None = None
    multi_values: tuple[MultiValueRecord, ...] | None = None

    def to_dict(self) -> DbInsertDataDict:
        result: DbInsertDataDict = {}
        if self.single_values is not None:
            result["single_values"] = [r.to_dict() for r in self.single_values]
        if self.multi_values is not None:
            result["multi_values"] = [r.to_dict() for r in self.multi_values]
        return result


# ---------------------------------------------------------------------------
# Update path
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SingleValueUpdate:
    value: str | None
    number_value: float | None = None

    def to_dict(self) -> SingleValueUpdateDict:
        return {"value": self.value, "number_value": self.number_value}


@dataclass(frozen=True)
class MultiValueData:
    """One multi-value row to write.

    ``position=None`` means the executor must assign the next free position
    (``max(position) + 1``) atomically with the insert.
    """

    value: str | None
    position: int | None
    number_value: float | None = None

    def to_dict(self) -> MultiValueDataDict:
        return {"value": self.value, "position": self.position, "number_value": self.number_value}


@dataclass(frozen=True)
class DbOperationResult:
    """Storage mutations for one update operation.

    Each field is an independent instruction set; the executor applies
    whichever are present. Removal and creation from the same result must be
    applied in one transaction.
    """

    single_value_remove: bool = False
    single_value_update: SingleValueUpdate | None = None
    multi_value_remove_positions: tuple[int, ...] | None = None
    multi_value_updates: Mapping[int, MultiValueData] | None = None
    multi_value_creates: tuple[MultiValueData, ...] | None = None

    @property
    def needs_position_assignment(self) -> bool:
        """True when some create leaves its position to the executor."""
        return any(c.position is None for c in self.multi_value_creates or ())

    def to_dict(self) -> DbOperationResultDict:
        result: DbOperationResultDict = {}
        if self.single_value_remove:
            result["single_value_remove"] = True
        if self.single_value_update is not None:
            result["single_value_update"] = self.single_value_update.to_dict()
        if self.multi_value_remove_positions is not None:
            result["multi_value_remove_positions"] = list(self.multi_value_remove_positions)
        if self.multi_value_updates is not None:
            # JSON object keys are strings
            result["multi_value_updates"] = {str(pos): d.to_dict() for pos, d in self.multi_value_updates.items()}
        if self.multi_value_creates is not None:
            result["multi_value_creates"] = [c.to_dict() for c in self.multi_value_creates]
        return result


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FilterCondition:
    """A user-authored predicate on one property."""

    property_id: str
    property_type: str
    operator: str
    value: Any = None
    config: Mapping[str, Any] | None = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> FilterCondition:
        """Accept camelCase (wire) or snake_case keys. Missing keys become empty strings."""
        return cls(
            property_id=str(raw.get("propertyId", raw.get("property_id", "")) or ""),
            property_type=str(raw.get("propertyType", raw.get("property_type", "")) or ""),
            operator=str(raw.get("operator", "") or ""),
            value=raw.get("value"),
            config=raw.get("config"),
        )

    def to_dict(self) -> FilterConditionDict:
        result: FilterConditionDict = {
            "propertyId": self.property_id,
            "propertyType": self.property_type,
            "operator": self.operator,
            "value": self.value,
        }
        if self.config is not None:
            result["config"] = dict(self.config)
        return result
