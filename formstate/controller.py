"""FormController: the stateful shell around the form reducer.

A FormController owns the state of a single form and is the only thing that
writes to it. A view forwards raw input events into the handlers and reads
``controller.state`` (or the ``values``/``errors``/``touched``/
``is_submitting`` shortcuts) to render.

Usage:
    >>> from formstate.rules import compose, email, required
    >>> from formstate.validation import create_validator
    >>> validate = create_validator({"email": compose(required, email)})
    >>> form = FormController({"email": ""}, validate)
    >>> form.handle_change(ChangeEvent(name="email", value="nope"))
    >>> form.handle_blur("email")
    >>> form.errors
    {'email': 'Please enter a valid email address'}
    >>> form.touched
    {'email': True}
"""

import inspect
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from formstate.events import EventEmitter, FormEvent, FormEventType
from formstate.state_machine import FormAction, reduce_form
from formstate.types import (
    ChangeEvent,
    FormErrors,
    FormState,
    FormStatus,
    FormValidator,
    FormValues,
    TouchedSet,
)

logger = logging.getLogger(__name__)

SubmitCallback = Callable[[FormValues], Any]
SubmitErrorHook = Callable[[BaseException], None]


def _no_errors(values: Mapping[str, Any]) -> FormErrors:
    return {}


class FormController:
    """Lifecycle manager for a single form.

    Attributes:
        initial_values: Values the form was initialized with, restored by reset_form
        events: EventEmitter receiving a FormEvent for every handled action

    Args:
        initial_values: Initial field values (defaults to an empty form)
        validate: Whole-form validator, usually built with create_validator
        on_submit_error: Called with the exception when a submit callback fails
        events: Emitter to publish events on (a new one is created if omitted)
    """

    def __init__(
        self,
        initial_values: Optional[Mapping[str, Any]] = None,
        validate: Optional[FormValidator] = None,
        on_submit_error: Optional[SubmitErrorHook] = None,
        events: Optional[EventEmitter] = None,
    ):
        self.events = events if events is not None else EventEmitter()
        if on_submit_error is not None:
            self.events.on(FormEventType.SUBMIT_FAILED, lambda event: on_submit_error(event.error))
        self.initialize(initial_values, validate)

    def initialize(
        self,
        initial_values: Optional[Mapping[str, Any]] = None,
        validate: Optional[FormValidator] = None,
    ) -> None:
        """(Re)start the form with fresh values, no errors and nothing touched."""
        self.initial_values: FormValues = dict(initial_values or {})
        self._validate: FormValidator = validate or _no_errors
        self._state = FormState(values=dict(self.initial_values))

    @property
    def state(self) -> FormState:
        return self._state

    @property
    def values(self) -> FormValues:
        return self._state.values

    @property
    def errors(self) -> FormErrors:
        return self._state.errors

    @property
    def touched(self) -> TouchedSet:
        return self._state.touched

    @property
    def is_submitting(self) -> bool:
        return self._state.is_submitting

    @property
    def status(self) -> FormStatus:
        return self._state.status

    def dispatch(self, action: FormAction) -> FormState:
        """Apply an action through the reducer and store the resulting state."""
        logger.debug("Applying %s action (field=%r)", action.type.value, action.field)
        self._state = reduce_form(self._state, action, self._validate)
        return self._state

    def _emit(
        self,
        event_type: FormEventType,
        field: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        self.events.emit(FormEvent(
            event_id=f"evt_{uuid.uuid4().hex[:16]}",
            type=event_type,
            ts=datetime.now(timezone.utc),
            status=self.status,
            field=field,
            payload=payload,
            error=error,
        ))

    def _emit_validation(self) -> bool:
        if self.state.is_valid:
            self._emit(FormEventType.VALIDATION_PASSED)
            return True
        failed = {name: message for name, message in self.errors.items() if message}
        self._emit(FormEventType.VALIDATION_FAILED, payload={"errors": failed})
        return False

    def handle_change(self, event: ChangeEvent) -> None:
        """Store the input's new value and clear that field's error, if any.

        Checkbox inputs store their checked state instead of the raw value.
        """
        value = event.field_value
        self.dispatch(FormAction.change(event.name, value))
        self._emit(FormEventType.FIELD_CHANGED, field=event.name, payload={"value": value})

    def set_field_value(self, name: str, value: Any) -> None:
        """Programmatic counterpart of handle_change."""
        self.dispatch(FormAction.set_field(name, value))
        self._emit(FormEventType.FIELD_SET, field=name, payload={"value": value})

    def handle_blur(self, name: str) -> None:
        """Mark a field touched and validate that field alone."""
        self.dispatch(FormAction.blur(name))
        self._emit(
            FormEventType.FIELD_BLURRED,
            field=name,
            payload={"error": self.errors.get(name, "")},
        )

    def validate_form(self) -> bool:
        """Validate all values, replacing the errors map.

        Returns:
            True if no field has an error message
        """
        self.dispatch(FormAction.validate())
        return self._emit_validation()

    def handle_submit(self, on_submit: SubmitCallback) -> Callable[[], Awaitable[bool]]:
        """Build a submit handler that validates and then calls ``on_submit``.

        The returned coroutine function marks every field touched and
        validates the whole form. When valid, it calls ``on_submit`` with a
        copy of the values, awaiting the result if it is awaitable. An
        exception raised by ``on_submit`` is logged and published as a
        ``submit.failed`` event but never propagated. The form always ends
        the attempt idle.

        Args:
            on_submit: Sync or async callback receiving the form values

        Returns:
            An async callable returning True when on_submit ran and succeeded

        Examples:
            >>> import asyncio
            >>> form = FormController({"name": "Ada"})
            >>> submitted = []
            >>> asyncio.run(form.handle_submit(submitted.append)())
            True
            >>> submitted
            [{'name': 'Ada'}]
        """
        async def submit() -> bool:
            if self.is_submitting:
                logger.warning("Ignoring submit: form is already submitting")
                return False

            self.dispatch(FormAction.submit())
            self._emit(FormEventType.SUBMIT_STARTED)
            succeeded = False
            try:
                if self._emit_validation():
                    try:
                        result = on_submit(dict(self.values))
                        if inspect.isawaitable(result):
                            await result
                    except Exception as exc:
                        logger.exception("Form submission error")
                        self._emit(FormEventType.SUBMIT_FAILED, error=exc)
                    else:
                        succeeded = True
                        self._emit(FormEventType.SUBMIT_SUCCEEDED)
            finally:
                self.dispatch(FormAction.submit_complete())
            return succeeded

        return submit

    def reset_form(self, new_values: Optional[Mapping[str, Any]] = None) -> None:
        """Restore values (the initial ones by default) and clear everything else."""
        values = self.initial_values if new_values is None else new_values
        self.dispatch(FormAction.reset(values))
        self._emit(FormEventType.FORM_RESET)


__all__ = [
    "FormController",
    "SubmitCallback",
    "SubmitErrorHook",
]
