"""Property type registry: type tag -> processor / update processor / filter transformer.

The three tables are frozen when the registry is constructed. The module-level
``default_registry`` holds the built-in types; plugins build their own
registry with extra entries instead of mutating a global.

Lookup policy differs by table:

- value and update processors fail loudly (``UnsupportedTypeError``), since a
  missing processor means a value could be silently dropped;
- filter transformers never fail: unknown types get the default transformer,
  which degrades to string equality and logs a warning when it compiles.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import TypeVar

from propkit.errors import UnsupportedTypeError
from propkit.filters import DEFAULT_FILTER_TRANSFORMER, FILTER_TRANSFORMERS, FilterTransformer
from propkit.update_processors import UPDATE_PROCESSORS, UpdateProcessor
from propkit.value_processors import VALUE_PROCESSORS, ValueProcessor

logger = logging.getLogger(__name__)


T = TypeVar("T", ValueProcessor, UpdateProcessor, FilterTransformer)


def _merge(base: Mapping[str, T], extra: Iterable[T] | None, kind: str) -> dict[str, T]:
    table = dict(base)
    for entry in extra or ():
        property_type = getattr(entry, "property_type", None)
        if not property_type:
            msg = f"Cannot register {kind} without a property_type: {entry!r}"
            raise ValueError(msg)
        if property_type in table:
            logger.debug("Overriding built-in %s for type: %s", kind, property_type)
        table[property_type] = entry
    return table


class PropertyTypeRegistry:
    """Immutable lookup tables for one set of property types."""

    def __init__(
        self,
        *,
        processors: Iterable[ValueProcessor] | None = None,
        update_processors: Iterable[UpdateProcessor] | None = None,
        filter_transformers: Iterable[FilterTransformer] | None = None,
        default_filter: FilterTransformer = DEFAULT_FILTER_TRANSFORMER,
    ) -> None:
        self._processors: Mapping[str, ValueProcessor] = MappingProxyType(
            _merge(VALUE_PROCESSORS, processors, "processor")
        )
        self._update_processors: Mapping[str, UpdateProcessor] = MappingProxyType(
            _merge(UPDATE_PROCESSORS, update_processors, "update processor")
        )
        self._filter_transformers: Mapping[str, FilterTransformer] = MappingProxyType(
            _merge(FILTER_TRANSFORMERS, filter_transformers, "filter transformer")
        )
        self._default_filter = default_filter

    # -- Lookups ------------------------------------------------------------

    def get_processor(self, property_type: str) -> ValueProcessor:
        """Create-path processor for a type. Raises UnsupportedTypeError if unknown."""
        processor = self._processors.get(property_type)
        if processor is None:
            raise UnsupportedTypeError(property_type, "processor")
        return processor

    def get_update_processor(self, property_type: str) -> UpdateProcessor:
        """Update-path processor for a type. Raises UnsupportedTypeError if unknown."""
        processor = self._update_processors.get(property_type)
        if processor is None:
            raise UnsupportedTypeError(property_type, "update processor")
        return processor

    def get_filter_transformer(self, property_type: str) -> FilterTransformer:
        """Filter transformer for a type, or the default transformer."""
        transformer = self._filter_transformers.get(property_type)
        if transformer is None:
            logger.debug("No filter transformer for type '%s' -- using default", property_type)
            return self._default_filter
        return transformer

    # -- Introspection ------------------------------------------------------

    def registered_types(self) -> list[str]:
        """Every type tag known to any table, sorted."""
        return sorted(set(self._processors) | set(self._update_processors) | set(self._filter_transformers))

    def has_processor(self, property_type: str) -> bool:
        return property_type in self._processors

    def supports_updates(self, property_type: str) -> bool:
        return property_type in self._update_processors

    def is_filterable(self, property_type: str) -> bool:
        """True when a dedicated (non-default) filter transformer exists."""
        return property_type in self._filter_transformers

    def allowed_operations(self, property_type: str) -> list[str]:
        processor = self._update_processors.get(property_type)
        if processor is None:
            return []
        return sorted(processor.allowed_operations)


default_registry = PropertyTypeRegistry()


def get_processor(property_type: str) -> ValueProcessor:
    return default_registry.get_processor(property_type)


def get_update_processor(property_type: str) -> UpdateProcessor:
    return default_registry.get_update_processor(property_type)


def get_filter_transformer(property_type: str) -> FilterTransformer:
    return default_registry.get_filter_transformer(property_type)
