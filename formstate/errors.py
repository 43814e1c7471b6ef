"""Exception types for the formstate engine.

Field validation failures are never raised: they are plain messages carried in
the errors map. The exceptions here cover configuration mistakes and misuse of
the form lifecycle.
"""

from typing import Any, Optional


class FormStateError(Exception):
    """Base class for all formstate exceptions."""


class SchemaError(FormStateError):
    """Raised when a form schema is malformed.

    Attributes:
        field: Name of the offending field, if the error is field-specific
        entry: The offending schema entry
    """

    def __init__(self, message: str, field: Optional[str] = None, entry: Any = None):
        self.field = field
        self.entry = entry
        super().__init__(message)


__all__ = [
    "FormStateError",
    "SchemaError",
]
