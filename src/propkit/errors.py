"""Exceptions for caller and configuration bugs.

Bad user data never raises: it comes back as a ``ValidationResult``. The
errors here signal a wiring problem (an unregistered type tag, a filter
operator a transformer cannot compile) and are not meant to be turned into
user-facing messages.
"""

from __future__ import annotations


class UnsupportedTypeError(ValueError):
    """Raised when no value/update processor is registered for a type tag."""

    def __init__(self, property_type: str, kind: str = "processor") -> None:
        self.property_type = property_type
        self.kind = kind
        super().__init__(f"No {kind} registered for property type '{property_type}'")


class UnsupportedOperatorError(ValueError):
    """Raised when a filter transformer is asked to compile an operator it does not handle."""

    def __init__(self, operator: str, property_type: str) -> None:
        self.operator = operator
        self.property_type = property_type
        super().__init__(f"Filter operator '{operator}' is not supported for property type '{property_type}'")
