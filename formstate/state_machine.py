"""Form state machine and reducer for formstate.

All form state changes go through ``reduce_form``, a pure transition function
``(state, action, validator) -> new state``. FormState is immutable, so every
action produces a fresh state with copied maps and the previous state stays
valid for inspection or undo.

The status machine is small: a form is IDLE, or SUBMITTING while a submit
attempt is in flight.

Usage:
    >>> from formstate.rules import required
    >>> from formstate.validation import create_validator
    >>> validate = create_validator({"name": required})
    >>> state = FormState(values={"name": ""})
    >>> state = reduce_form(state, FormAction.blur("name"), validate)
    >>> state.errors
    {'name': 'This field is required'}
    >>> state = reduce_form(state, FormAction.change("name", "Ada"), validate)
    >>> state.errors
    {'name': ''}
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Set

from formstate.errors import FormStateError
from formstate.types import ActionType, FormState, FormStatus, FormValidator


class InvalidStateTransitionError(FormStateError):
    """Raised when attempting an invalid status transition.

    Attributes:
        current_state: The status before the attempted transition
        target_state: The status that was attempted
    """

    def __init__(self, current_state: FormStatus, target_state: FormStatus, message: str):
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(message)


VALID_TRANSITIONS: Dict[FormStatus, Set[FormStatus]] = {
    FormStatus.IDLE: {FormStatus.SUBMITTING},
    FormStatus.SUBMITTING: {FormStatus.IDLE},
}


def can_transition(current: FormStatus, target: FormStatus) -> bool:
    return target in VALID_TRANSITIONS.get(current, set())


def check_transition(current: FormStatus, target: FormStatus) -> None:
    """Raise InvalidStateTransitionError unless ``current -> target`` is allowed."""
    if not can_transition(current, target):
        raise InvalidStateTransitionError(
            current_state=current,
            target_state=target,
            message=(
                f"Invalid state transition: cannot transition from "
                f"'{current.value}' to '{target.value}'"
            ),
        )


@dataclass(frozen=True)
class FormAction:
    """An action applied to a form by ``reduce_form``.

    Attributes:
        type: The action type
        field: Target field for CHANGE, SET_FIELD and BLUR
        value: New value for CHANGE and SET_FIELD
        values: Replacement values for RESET
    """
    type: ActionType
    field: Optional[str] = None
    value: Any = None
    values: Optional[Mapping[str, Any]] = None

    @classmethod
    def change(cls, field: str, value: Any) -> "FormAction":
        return cls(type=ActionType.CHANGE, field=field, value=value)

    @classmethod
    def set_field(cls, field: str, value: Any) -> "FormAction":
        return cls(type=ActionType.SET_FIELD, field=field, value=value)

    @classmethod
    def blur(cls, field: str) -> "FormAction":
        return cls(type=ActionType.BLUR, field=field)

    @classmethod
    def validate(cls) -> "FormAction":
        return cls(type=ActionType.VALIDATE)

    @classmethod
    def submit(cls) -> "FormAction":
        return cls(type=ActionType.SUBMIT)

    @classmethod
    def submit_complete(cls) -> "FormAction":
        return cls(type=ActionType.SUBMIT_COMPLETE)

    @classmethod
    def reset(cls, values: Mapping[str, Any]) -> "FormAction":
        return cls(type=ActionType.RESET, values=values)


def _assign(state: FormState, field: str, value: Any) -> FormState:
    # Editing a field clears its displayed error; revalidation waits for blur or submit.
    errors = dict(state.errors)
    if errors.get(field):
        errors[field] = ""
    return FormState(
        values={**state.values, field: value},
        errors=errors,
        touched=dict(state.touched),
        is_submitting=state.is_submitting,
    )


def _blur(state: FormState, field: str, validator: FormValidator) -> FormState:
    # Only the blurred field is passed in, so sibling fields read as None here.
    field_errors = validator({field: state.values.get(field)})
    errors = dict(state.errors)
    if field_errors.get(field):
        errors[field] = field_errors[field]
    return FormState(
        values=dict(state.values),
        errors=errors,
        touched={**state.touched, field: True},
        is_submitting=state.is_submitting,
    )


def reduce_form(state: FormState, action: FormAction, validator: FormValidator) -> FormState:
    """Apply an action to a form state and return the resulting state.

    Args:
        state: Current form state (left unchanged)
        action: Action to apply
        validator: Whole-form validator used by BLUR, VALIDATE and SUBMIT

    Returns:
        The new FormState

    Raises:
        InvalidStateTransitionError: On SUBMIT while already submitting
        ValueError: On an unknown action type
    """
    if action.type in (ActionType.CHANGE, ActionType.SET_FIELD):
        return _assign(state, action.field, action.value)

    if action.type == ActionType.BLUR:
        return _blur(state, action.field, validator)

    if action.type == ActionType.VALIDATE:
        return FormState(
            values=dict(state.values),
            errors=dict(validator(state.values)),
            touched=dict(state.touched),
            is_submitting=state.is_submitting,
        )

    if action.type == ActionType.SUBMIT:
        check_transition(state.status, FormStatus.SUBMITTING)
        touched = dict(state.touched)
        touched.update((name, True) for name in state.values)
        return FormState(
            values=dict(state.values),
            errors=dict(validator(state.values)),
            touched=touched,
            is_submitting=True,
        )

    if action.type == ActionType.SUBMIT_COMPLETE:
        # A reset during the submit may already have returned the form to idle.
        if not state.is_submitting:
            return state
        return FormState(
            values=dict(state.values),
            errors=dict(state.errors),
            touched=dict(state.touched),
            is_submitting=False,
        )

    if action.type == ActionType.RESET:
        return FormState(values=dict(action.values or {}))

    raise ValueError(f"Unknown action type: {action.type!r}")


__all__ = [
    "InvalidStateTransitionError",
    "VALID_TRANSITIONS",
    "can_transition",
    "check_transition",
    "FormAction",
    "reduce_form",
]
