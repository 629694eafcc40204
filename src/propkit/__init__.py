"""propkit: typed property processing for issue records."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("propkit")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

from propkit.errors import UnsupportedOperatorError, UnsupportedTypeError
from propkit.filter_query import build_filter_query, deserialize_filters, serialize_filters
from propkit.issues import prepare_batch_create, prepare_issue_create, prepare_issue_update
from propkit.models import DbInsertData, DbOperationResult, FilterCondition, PropertyDefinition, ValidationResult
from propkit.registry import (
    PropertyTypeRegistry,
    default_registry,
    get_filter_transformer,
    get_processor,
    get_update_processor,
)

__all__ = [
    "DbInsertData",
    "DbOperationResult",
    "FilterCondition",
    "PropertyDefinition",
    "PropertyTypeRegistry",
    "UnsupportedOperatorError",
    "UnsupportedTypeError",
    "ValidationResult",
    "__version__",
    "build_filter_query",
    "default_registry",
    "deserialize_filters",
    "get_filter_transformer",
    "get_processor",
    "get_update_processor",
    "prepare_batch_create",
    "prepare_issue_create",
    "prepare_issue_update",
    "serialize_filters",
]
