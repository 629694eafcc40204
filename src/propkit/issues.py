"""Issue-level planning: run the per-property pipelines over a whole request.

Nothing here touches storage. A successful plan is handed to the executor,
which applies it in one transaction; a failed plan carries the messages to
show the user.

Create collects every property's errors so a form can highlight them all at
once. Update stops at the first failing operation, since later operations
may depend on earlier ones.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from propkit.constants import OP_ADD, PROPERTY_ID, TYPE_ID
from propkit.models import DbInsertData, DbOperationResult, MultiValueRecord, PropertyDefinition, SingleValueRecord
from propkit.operations import (
    AddOperation,
    PropertyOperation,
    RemoveOperation,
    UpdateOperation,
    parse_operation_request,
)
from propkit.registry import PropertyTypeRegistry, default_registry

logger = logging.getLogger(__name__)

Schema = Mapping[str, PropertyDefinition]

BATCH_ABORTED_MESSAGE = "Not created: another issue in the batch failed validation"


def index_schema(definitions: Iterable[PropertyDefinition]) -> dict[str, PropertyDefinition]:
    """Key definitions by property id. Later duplicates replace earlier ones."""
    return {d.id: d for d in definitions}


@dataclass(frozen=True)
class CreateIssueResult:
    issue_id: str
    success: bool
    errors: tuple[str, ...] = ()
    data: DbInsertData | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"issue_id": self.issue_id, "success": self.success}
        if self.errors:
            result["errors"] = list(self.errors)
        if self.data is not None:
            result["data"] = self.data.to_dict()
        return result


@dataclass(frozen=True)
class PlannedOperation:
    """One validated operation and the mutations it needs."""

    property_id: str
    property_type: str
    operation_type: str
    result: DbOperationResult

    def to_dict(self) -> dict[str, Any]:
        return {
            "property_id": self.property_id,
            "property_type": self.property_type,
            "operation_type": self.operation_type,
            "result": self.result.to_dict(),
        }


@dataclass(frozen=True)
class UpdateIssueResult:
    issue_id: str
    success: bool
    errors: tuple[str, ...] = ()
    operations: tuple[PlannedOperation, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"issue_id": self.issue_id, "success": self.success}
        if self.errors:
            result["errors"] = list(self.errors)
        if self.success:
            result["operations"] = [op.to_dict() for op in self.operations]
        return result


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


def prepare_issue_create(
    issue_id: str,
    property_values: Mapping[str, Any],
    schema: Schema,
    *,
    issue_number: int | None = None,
    registry: PropertyTypeRegistry | None = None,
) -> CreateIssueResult:
    """Validate and transform every supplied property value for a new issue.

    ``UnsupportedTypeError`` propagates: a schema entry with no processor is a
    deployment bug, not a user error.
    """
    registry = registry or default_registry

    readonly = [pid for pid in property_values if pid in schema and schema[pid].readonly]
    if readonly:
        names = ", ".join(schema[pid].name for pid in readonly)
        return CreateIssueResult(issue_id=issue_id, success=False, errors=(f"Cannot set readonly properties: {names}",))

    errors: list[str] = []
    single: list[SingleValueRecord] = []
    multi: list[MultiValueRecord] = []

    for property_id, value in property_values.items():
        definition = schema.get(property_id)
        if definition is None:
            errors.append(f"Property {property_id} does not exist")
            continue
        processor = registry.get_processor(definition.type)
        data, result = processor.process(definition, value, issue_id)
        if data is None:
            errors.extend(result.errors)
            continue
        single.extend(data.single_values or ())
        multi.extend(data.multi_values or ())

    if errors:
        logger.info("Rejected create for issue %s", issue_id, extra={"errors": errors})
        return CreateIssueResult(issue_id=issue_id, success=False, errors=tuple(errors))

    if issue_number is not None:
        single.insert(
            0,
            SingleValueRecord(
                issue_id=issue_id,
                property_id=PROPERTY_ID,
                property_type=TYPE_ID,
                value=str(issue_number),
                number_value=issue_number,
            ),
        )

    logger.debug("Planned create for issue %s: %d single, %d multi rows", issue_id, len(single), len(multi))
    return CreateIssueResult(
        issue_id=issue_id,
        success=True,
        data=DbInsertData(single_values=tuple(single), multi_values=tuple(multi)),
    )


def prepare_batch_create(
    requests: Sequence[tuple[str, Mapping[str, Any]]],
    schema: Schema,
    *,
    first_issue_number: int | None = None,
    registry: PropertyTypeRegistry | None = None,
) -> list[CreateIssueResult]:
    """Plan several creates as one unit: either all succeed or none carry data.

    ``requests`` is a sequence of ``(issue_id, property_values)``. When
    ``first_issue_number`` is given, issues are numbered consecutively from it
    in request order.
    """
    results = [
        prepare_issue_create(
            issue_id,
            values,
            schema,
            issue_number=None if first_issue_number is None else first_issue_number + index,
            registry=registry,
        )
        for index, (issue_id, values) in enumerate(requests)
    ]
    if all(r.success for r in results):
        return results

    failed = sum(1 for r in results if not r.success)
    logger.info("Rejected batch create: %d of %d issues failed validation", failed, len(results))
    return [
        r if not r.success else CreateIssueResult(issue_id=r.issue_id, success=False, errors=(BATCH_ABORTED_MESSAGE,))
        for r in results
    ]


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------


def _count_after(operation: PropertyOperation, count: int | None) -> int | None:
    """Row count of a multi-valued property once ``operation`` has been applied."""
    if isinstance(operation, UpdateOperation):
        return len(operation.values)
    if isinstance(operation, RemoveOperation):
        return 0
    if isinstance(operation, AddOperation) and count is not None:
        return count + 1
    return count


def _update_failure(issue_id: str, message: str) -> UpdateIssueResult:
    logger.info("Rejected update for issue %s: %s", issue_id, message, extra={"errors": [message]})
    return UpdateIssueResult(issue_id=issue_id, success=False, errors=(message,))


def prepare_issue_update(
    issue_id: str,
    operations: Sequence[Mapping[str, Any]],
    schema: Schema,
    *,
    current_counts: Mapping[str, int] | None = None,
    registry: PropertyTypeRegistry | None = None,
) -> UpdateIssueResult:
    """Validate and plan wire-form operations against one issue.

    ``current_counts`` maps a multi-valued property id to its current row
    count. Without it, ADD leaves the position to the executor and
    REMOVE/UPDATE clear every position up to the ceiling. Later operations on
    the same property are planned against the count left by earlier ones.
    """
    registry = registry or default_registry
    counts: dict[str, int | None] = dict(current_counts or {})

    # Every property must exist and be writable before anything is planned.
    for raw in operations:
        property_id = raw.get("property_id") if isinstance(raw, Mapping) else None
        if not isinstance(property_id, str) or not property_id:
            return _update_failure(issue_id, "Operation is missing 'property_id'")
        definition = schema.get(property_id)
        if definition is None:
            return _update_failure(issue_id, f"Property does not exist: {property_id}")
        if definition.readonly:
            return _update_failure(issue_id, f"Property is readonly: {definition.name}")

    planned: list[PlannedOperation] = []
    for raw in operations:
        definition = schema[raw["property_id"]]
        request, parse_error = parse_operation_request(raw)
        if request is None:
            return _update_failure(issue_id, f"Error processing property {definition.name}: {parse_error}")

        processor = registry.get_update_processor(definition.type)
        db_result, validation = processor.process(
            definition, request.operation, issue_id, current_count=counts.get(definition.id)
        )
        if db_result is None:
            return _update_failure(
                issue_id, f"Error processing property {definition.name}: {', '.join(validation.errors)}"
            )
        if OP_ADD in processor.allowed_operations:
            counts[definition.id] = _count_after(request.operation, counts.get(definition.id))
        planned.append(
            PlannedOperation(
                property_id=definition.id,
                property_type=definition.type,
                operation_type=request.operation.operation_type,
                result=db_result,
            )
        )

    logger.debug("Planned %d operations for issue %s", len(planned), issue_id)
    return UpdateIssueResult(issue_id=issue_id, success=True, operations=tuple(planned))
