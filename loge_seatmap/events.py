from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional


logger = logging.getLogger(__name__)


class EventType(str, Enum):
    data_loaded = "dataLoaded"
    filter_changed = "filterChanged"
    selection_changed = "selectionChanged"


@dataclass(frozen=True)
class Event:
    type: EventType
    state: Any
    revision: int = 0


Subscriber = Callable[[Event], None]


class EventChannel:
    """
    Typed pub/sub. Subscribing with event_type=None receives every event.
    """

    def __init__(self) -> None:
        self._subscribers: dict[Optional[EventType], list[Subscriber]] = {}

    def subscribe(self, callback: Subscriber, event_type: Optional[EventType] = None) -> Callable[[], None]:
        self._subscribers.setdefault(event_type, []).append(callback)

        def _unsubscribe() -> None:
            subs = self._subscribers.get(event_type, [])
            if callback in subs:
                subs.remove(callback)
            if not subs:
                self._subscribers.pop(event_type, None)

        return _unsubscribe

    def subscriber_count(self, event_type: Optional[EventType] = None) -> int:
        return len(self._subscribers.get(event_type, []))

    def publish(self, event: Event) -> None:
        targets = list(self._subscribers.get(event.type, [])) + list(self._subscribers.get(None, []))
        for callback in targets:
            try:
                callback(event)
            except Exception:  # noqa: BLE001 - one bad subscriber must not starve the rest
                logger.exception("subscriber %r failed on %s", callback, event.type.value)
