"""Core type definitions for the formstate engine.

This module defines the fundamental types shared by the validator library and
the form controller:
- ValidationRule / FieldSchema / FormSchema: the declarative validation model
- FormValues / FormErrors / TouchedSet: the per-field maps held by a form
- FormStatus: lifecycle states of a form (idle or submitting)
- ActionType: actions accepted by the form reducer
- ChangeEvent: the input event forwarded by a view on field change
- FormState: the aggregate state of a single form
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Sequence, Union

from typing_extensions import TypeAlias

ValidationRule: TypeAlias = Callable[[Any], str]
"""A rule maps a field value to an error message; ``""`` means valid."""

FieldSchema: TypeAlias = Union[ValidationRule, Sequence[ValidationRule]]
FormSchema: TypeAlias = Mapping[str, FieldSchema]
FormValues: TypeAlias = Dict[str, Any]
FormErrors: TypeAlias = Dict[str, str]
TouchedSet: TypeAlias = Dict[str, bool]
FormValidator: TypeAlias = Callable[[Mapping[str, Any]], FormErrors]

CHECKBOX_KIND = "checkbox"


class FormStatus(str, Enum):
    """Form lifecycle states.

    A form is idle except while a submit attempt is in flight. Invalidity is
    carried by the errors map, not by a status.
    """
    IDLE = "idle"
    SUBMITTING = "submitting"


class ActionType(str, Enum):
    """Actions understood by the form reducer."""
    CHANGE = "change"
    BLUR = "blur"
    SET_FIELD = "set_field"
    VALIDATE = "validate"
    SUBMIT = "submit"
    SUBMIT_COMPLETE = "submit_complete"
    RESET = "reset"


@dataclass(frozen=True)
class ChangeEvent:
    """A field change forwarded by the presentation layer.

    Attributes:
        name: Field name the change applies to
        value: Raw input value
        kind: Input kind (e.g. "text", "number", "checkbox")
        checked: Checked state, only meaningful for checkbox inputs

    Examples:
        >>> ChangeEvent(name="agree", kind="checkbox", checked=True).field_value
        True
        >>> ChangeEvent(name="email", value="a@b.co").field_value
        'a@b.co'
    """
    name: str
    value: Any = None
    kind: str = "text"
    checked: bool = False

    @property
    def is_checkbox(self) -> bool:
        return self.kind == CHECKBOX_KIND

    @property
    def field_value(self) -> Any:
        """Value to store for this event: checked state for checkboxes."""
        return self.checked if self.is_checkbox else self.value

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChangeEvent":
        """Create ChangeEvent from a mapping, accepting "type" for "kind"."""
        return cls(
            name=data["name"],
            value=data.get("value"),
            kind=data.get("kind", data.get("type", "text")),
            checked=bool(data.get("checked", False)),
        )


@dataclass(frozen=True)
class FormState:
    """Aggregate state of a single form.

    Instances are never mutated; the reducer returns a new FormState for every
    action.

    Attributes:
        values: Current field values
        errors: Current error message per field ("" or absent means no error)
        touched: Fields the user has interacted with
        is_submitting: Whether a submit attempt is in flight

    Examples:
        >>> state = FormState(values={"name": ""})
        >>> state.status
        <FormStatus.IDLE: 'idle'>
        >>> state.to_dict()
        {'values': {'name': ''}, 'errors': {}, 'touched': {}, 'isSubmitting': False}
    """
    values: FormValues = field(default_factory=dict)
    errors: FormErrors = field(default_factory=dict)
    touched: TouchedSet = field(default_factory=dict)
    is_submitting: bool = False

    @property
    def status(self) -> FormStatus:
        return FormStatus.SUBMITTING if self.is_submitting else FormStatus.IDLE

    @property
    def is_valid(self) -> bool:
        """True when no field currently carries an error message."""
        return not any(self.errors.values())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "values": dict(self.values),
            "errors": dict(self.errors),
            "touched": dict(self.touched),
            "isSubmitting": self.is_submitting,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FormState":
        """Create FormState from dict."""
        return cls(
            values=dict(data.get("values", {})),
            errors=dict(data.get("errors", {})),
            touched=dict(data.get("touched", {})),
            is_submitting=bool(data.get("isSubmitting", False)),
        )


__all__ = [
    "ValidationRule",
    "FieldSchema",
    "FormSchema",
    "FormValues",
    "FormErrors",
    "TouchedSet",
    "FormValidator",
    "CHECKBOX_KIND",
    "FormStatus",
    "ActionType",
    "ChangeEvent",
    "FormState",
]
