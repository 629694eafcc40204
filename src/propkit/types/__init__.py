# IMPORT CONSTRAINT: types/ modules must only import from typing, stdlib, and each other.
# NEVER import from models.py, registry.py, or any processor module (circular imports).
"""Typed dict contracts for propkit data shapes."""

from __future__ import annotations

from propkit.types.core import (
    DbInsertDataDict,
    DbOperationResultDict,
    FilterConditionDict,
    MultiValueDataDict,
    MultiValueRecordDict,
    ProjectConfig,
    PropertyDefinitionDict,
    QueryFragment,
    SelectOptionDict,
    SingleValueRecordDict,
    SingleValueUpdateDict,
    ValidationResultDict,
)
from propkit.types.inputs import OperationRequestArgs

__all__ = [
    "DbInsertDataDict",
    "DbOperationResultDict",
    "FilterConditionDict",
    "MultiValueDataDict",
    "MultiValueRecordDict",
    "OperationRequestArgs",
    "ProjectConfig",
    "PropertyDefinitionDict",
    "QueryFragment",
    "SelectOptionDict",
    "SingleValueRecordDict",
    "SingleValueUpdateDict",
    "ValidationResultDict",
]
