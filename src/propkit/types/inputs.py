# IMPORT CONSTRAINT: types/ modules must only import from typing, stdlib, and each other.
"""TypedDict contracts for raw request input.

These describe the JSON a request layer hands over. They are a
*static-analysis* aid: the parse functions in ``propkit.operations`` do the
runtime checking.
"""

# NOTE: Do NOT add ``from __future__ import annotations`` to this module.
# It breaks TypedDict.__required_keys__ / __optional_keys__ introspection
# on Python <3.14, which test_type_contracts.py relies on.

from typing import Any, TypedDict


class OperationRequestArgs(TypedDict):
    property_id: str
    operation_type: str
    operation_payload: dict[str, Any]
