"""formstate: form validation rules and form state management.

formstate provides:
- Composable field validation rules returning human-readable messages
- Schema aggregation of per-field rules into a whole-form validator
- A form controller tracking values, errors, touched fields and submission
- A pure reducer making every form state transition explicit
- An event stream for observing edits, validation and submit outcomes

Basic usage:
    >>> from formstate import FormController, create_validator
    >>> from formstate.rules import compose, email, min_length, required
    >>> validate = create_validator({
    ...     "name": required,
    ...     "email": compose(required, email),
    ...     "password": [required, min_length(8)],
    ... })
    >>> form = FormController({"name": "", "email": "", "password": ""}, validate)
    >>> form.validate_form()
    False
    >>> form.errors["password"]
    'This field is required'
"""

__version__ = "0.1.0"

# Version info
VERSION = (0, 1, 0)

# Core exports
from formstate.controller import FormController
from formstate.errors import FormStateError, SchemaError
from formstate.events import EventEmitter, FormEvent, FormEventType
from formstate.state_machine import FormAction, InvalidStateTransitionError, reduce_form
from formstate.types import ChangeEvent, FormState, FormStatus
from formstate.validation import create_validator, schema_from_json_schema

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "FormController",
    "FormStateError",
    "SchemaError",
    "EventEmitter",
    "FormEvent",
    "FormEventType",
    "FormAction",
    "InvalidStateTransitionError",
    "reduce_form",
    "ChangeEvent",
    "FormState",
    "FormStatus",
    "create_validator",
    "schema_from_json_schema",
]
