"""Tags shared by every layer: property types, operation types, filter operators.

Tags are plain strings on the wire, so they are modelled as ``Literal``
aliases plus module constants rather than enums.
"""

from __future__ import annotations

from typing import Final, Literal

# ---------------------------------------------------------------------------
# Property types
# ---------------------------------------------------------------------------

PropertyType = Literal[
    "id",
    "text",
    "number",
    "select",
    "multi_select",
    "datetime",
    "boolean",
    "user",
    "relationship",
    "rich_text",
    "miners",
]

TYPE_ID: Final = "id"
TYPE_TEXT: Final = "text"
TYPE_NUMBER: Final = "number"
TYPE_SELECT: Final = "select"
TYPE_MULTI_SELECT: Final = "multi_select"
TYPE_DATETIME: Final = "datetime"
TYPE_BOOLEAN: Final = "boolean"
TYPE_USER: Final = "user"
TYPE_RELATIONSHIP: Final = "relationship"
TYPE_RICH_TEXT: Final = "rich_text"
TYPE_MINERS: Final = "miners"

ALL_PROPERTY_TYPES: frozenset[str] = frozenset(
    {
        TYPE_ID,
        TYPE_TEXT,
        TYPE_NUMBER,
        TYPE_SELECT,
        TYPE_MULTI_SELECT,
        TYPE_DATETIME,
        TYPE_BOOLEAN,
        TYPE_USER,
        TYPE_RELATIONSHIP,
        TYPE_RICH_TEXT,
        TYPE_MINERS,
    }
)

# Stored as ordered rows in the multi-value table; everything else is one row.
MULTI_VALUE_TYPES: frozenset[str] = frozenset({TYPE_MULTI_SELECT, TYPE_MINERS})

FILTERABLE_PROPERTY_TYPES: tuple[str, ...] = (TYPE_ID, TYPE_TEXT, TYPE_SELECT, TYPE_MINERS, TYPE_USER)

# ---------------------------------------------------------------------------
# Update operations
# ---------------------------------------------------------------------------

OperationType = Literal["set", "remove", "add", "update"]

OP_SET: Final = "set"
OP_REMOVE: Final = "remove"
OP_ADD: Final = "add"
OP_UPDATE: Final = "update"

ALL_OPERATION_TYPES: frozenset[str] = frozenset({OP_SET, OP_REMOVE, OP_ADD, OP_UPDATE})
SINGLE_VALUE_OPERATIONS: frozenset[str] = frozenset({OP_SET, OP_REMOVE})
MULTI_VALUE_OPERATIONS: frozenset[str] = frozenset({OP_ADD, OP_UPDATE, OP_REMOVE})

# Upper bound used for "remove every position" when the caller cannot say how
# many rows currently exist.
MULTI_VALUE_POSITION_CEILING: Final = 1000

# ---------------------------------------------------------------------------
# Filter operators
# ---------------------------------------------------------------------------

FilterOperator = Literal[
    "eq",
    "contains",
    "startsWith",
    "endsWith",
    "regex",
    "gt",
    "gte",
    "lt",
    "lte",
    "between",
    "in",
    "notIn",
    "isNull",
    "isNotNull",
]

OPERATOR_EQ: Final = "eq"
OPERATOR_CONTAINS: Final = "contains"
OPERATOR_STARTS_WITH: Final = "startsWith"
OPERATOR_ENDS_WITH: Final = "endsWith"
OPERATOR_IN: Final = "in"

# ---------------------------------------------------------------------------
# System properties
# ---------------------------------------------------------------------------

PROPERTY_ID: Final = "property0001"
PROPERTY_TITLE: Final = "property0002"
PROPERTY_STATUS: Final = "property0003"
PROPERTY_CREATED_AT: Final = "property0004"
PROPERTY_UPDATED_AT: Final = "property0005"
PROPERTY_DESCRIPTION: Final = "property0006"
PROPERTY_PRIORITY: Final = "property0007"
PROPERTY_CATEGORY: Final = "property0008"
PROPERTY_DIAGNOSIS: Final = "property0009"
PROPERTY_LABEL: Final = "property0010"
PROPERTY_MINERS: Final = "property0011"
PROPERTY_ASSIGNEE: Final = "property0012"
PROPERTY_REPORTER: Final = "property0013"

PROPERTY_ID_TYPE_MAP: dict[str, str] = {
    PROPERTY_ID: TYPE_ID,
    PROPERTY_TITLE: TYPE_TEXT,
    PROPERTY_STATUS: TYPE_SELECT,
    PROPERTY_CREATED_AT: TYPE_DATETIME,
    PROPERTY_UPDATED_AT: TYPE_DATETIME,
    PROPERTY_DESCRIPTION: TYPE_RICH_TEXT,
    PROPERTY_PRIORITY: TYPE_SELECT,
    PROPERTY_CATEGORY: TYPE_SELECT,
    PROPERTY_DIAGNOSIS: TYPE_SELECT,
    PROPERTY_LABEL: TYPE_MULTI_SELECT,
    PROPERTY_MINERS: TYPE_MINERS,
    PROPERTY_ASSIGNEE: TYPE_USER,
    PROPERTY_REPORTER: TYPE_USER,
}
