"""
Event channel between rendered controls and the edit workflow.

Row action triggers are emitted with EVENT priority: every emission is kept
and delivered before ordinary value updates, so a rapid double click is
never coalesced. VALUE emissions under the same name replace each other.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, List

logger = logging.getLogger(__name__)


class EventPriority(str, Enum):
    EVENT = "event"
    VALUE = "value"


@dataclass(frozen=True)
class Event:
    name: str
    value: Any = None
    priority: EventPriority = EventPriority.VALUE


class EventQueue:
    """Per-session queue of pending events."""

    def __init__(self):
        self._events: List[Event] = []
        self._values: List[Event] = []

    def emit(self, name: str, value: Any = None,
             priority: EventPriority = EventPriority.VALUE) -> Event:
        event = Event(name=name, value=value, priority=EventPriority(priority))

        if event.priority is EventPriority.EVENT:
            self._events.append(event)
        else:
            self._values = [e for e in self._values if e.name != name]
            self._values.append(event)

        logger.debug(f"Emitted {event.priority.value} event {name}={value!r}")
        return event

    def pending(self) -> List[Event]:
        """Pending events in delivery order, without consuming them."""
        return list(self._events) + list(self._values)

    def drain(self) -> List[Event]:
        """Consume and return all pending events in delivery order."""
        events = self.pending()
        self._events = []
        self._values = []
        return events

    def clear(self) -> None:
        self._events = []
        self._values = []

    def __len__(self) -> int:
        return len(self._events) + len(self._values)
