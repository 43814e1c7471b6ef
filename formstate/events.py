"""Event system for formstate.

Every action applied by a FormController emits a typed FormEvent. Embedding
code subscribes through an EventEmitter to observe field edits, validation
outcomes and submit attempts, including submit callbacks that failed (those
failures are never re-raised to the caller of the submit handler, so the
``submit.failed`` event is the way to surface them).
"""

import json
import logging
from dataclasses import dataclass, field as dataclass_field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .types import FormStatus

logger = logging.getLogger(__name__)


class FormEventType(str, Enum):
    """Event types emitted by a form controller."""
    FIELD_CHANGED = "field.changed"
    FIELD_BLURRED = "field.blurred"
    FIELD_SET = "field.set"
    VALIDATION_PASSED = "validation.passed"
    VALIDATION_FAILED = "validation.failed"
    SUBMIT_STARTED = "submit.started"
    SUBMIT_SUCCEEDED = "submit.succeeded"
    SUBMIT_FAILED = "submit.failed"
    FORM_RESET = "form.reset"


@dataclass(frozen=True)
class FormEvent:
    """A single event in a form's lifecycle.

    Attributes:
        event_id: Unique event identifier (e.g., "evt_3f2a...")
        type: Event type from FormEventType
        ts: UTC timestamp when the event occurred
        status: Form status after this event
        field: Field the event relates to, if any
        payload: Optional event-specific data (e.g., the new value, errors)
        error: Exception raised by a submit callback, for submit.failed events

    Examples:
        >>> from datetime import datetime, timezone
        >>> event = FormEvent(
        ...     event_id="evt_001",
        ...     type=FormEventType.FIELD_BLURRED,
        ...     ts=datetime.now(timezone.utc),
        ...     status=FormStatus.IDLE,
        ...     field="email",
        ... )
        >>> event.to_dict()["type"]
        'field.blurred'
    """
    event_id: str
    type: FormEventType
    ts: datetime
    status: FormStatus
    field: Optional[str] = None
    payload: Optional[Dict[str, Any]] = None
    error: Optional[BaseException] = dataclass_field(default=None, compare=False)

    def __post_init__(self):
        if isinstance(self.type, str):
            object.__setattr__(self, "type", FormEventType(self.type))
        if isinstance(self.status, str):
            object.__setattr__(self, "status", FormStatus(self.status))

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization.

        Timestamps are ISO 8601 strings and exceptions are rendered with repr().
        """
        result: Dict[str, Any] = {
            "eventId": self.event_id,
            "type": self.type.value,
            "ts": self.ts.isoformat(),
            "status": self.status.value,
        }
        if self.field is not None:
            result["field"] = self.field
        if self.payload is not None:
            result["payload"] = self.payload
        if self.error is not None:
            result["error"] = repr(self.error)
        return result

    def to_jsonl(self) -> str:
        """Convert event to a single-line JSON string."""
        return json.dumps(self.to_dict(), separators=(',', ':'), default=repr)


EventListener = Callable[[FormEvent], None]
"""Type alias for event listener callbacks.

Listeners are called synchronously when events are emitted.
"""


class EventEmitter:
    """Dispatches form events to registered listeners.

    Listeners for a specific event type run first, then wildcard listeners,
    each group in registration order. A listener that raises is logged and
    skipped; the remaining listeners and the emitting controller carry on.

    Examples:
        >>> emitter = EventEmitter()
        >>> seen = []
        >>> emitter.on(FormEventType.SUBMIT_FAILED, seen.append)
        >>> emitter.listener_count()
        1
    """

    def __init__(self):
        self._listeners: Dict[FormEventType, List[EventListener]] = {}
        self._any_listeners: List[EventListener] = []

    def on(self, event_type: FormEventType, listener: EventListener) -> None:
        """Subscribe to a specific event type."""
        self._listeners.setdefault(event_type, []).append(listener)

    def on_any(self, listener: EventListener) -> None:
        """Subscribe to all event types."""
        self._any_listeners.append(listener)

    def off(self, event_type: FormEventType, listener: EventListener) -> None:
        """Unsubscribe from a specific event type. Unknown listeners are ignored."""
        listeners = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)

    def off_any(self, listener: EventListener) -> None:
        """Remove a wildcard subscription. Unknown listeners are ignored."""
        if listener in self._any_listeners:
            self._any_listeners.remove(listener)

    def emit(self, event: FormEvent) -> None:
        """Dispatch an event to all registered listeners."""
        for listener in self._listeners.get(event.type, []) + self._any_listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Listener %r failed handling %s", listener, event.type.value)

    def clear(self) -> None:
        """Remove all event listeners."""
        self._listeners.clear()
        self._any_listeners.clear()

    def listener_count(self, event_type: Optional[FormEventType] = None) -> int:
        """Count registered listeners.

        Args:
            event_type: If provided, count listeners for this type only.
                        If None, count all listeners (including wildcard).
        """
        if event_type is not None:
            return len(self._listeners.get(event_type, []))
        return len(self._any_listeners) + sum(len(ls) for ls in self._listeners.values())


__all__ = [
    "FormEvent",
    "FormEventType",
    "EventListener",
    "EventEmitter",
]
