from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Iterable, Mapping, Optional

from .config import Settings
from .events import Event, EventChannel, EventType
from .filters import FilterKey, filter_rows
from .normalizer import FieldPaths
from .scheduler import Debouncer, ThreadingScheduler
from .segmentation import GroupBooking, Segment, SegmentationEngine, segment_group_bookings
from .state import (
    Action,
    ChangeFilter,
    ClearSelection,
    LoadRecords,
    Reactions,
    SeatMapState,
    SelectSegment,
)
from .topology import VenueTopology


logger = logging.getLogger(__name__)


class SeatMapController:
    """
    Owns the seat map state and runs one reaction at a time.

    Every reaction is applied under a single lock, then the resulting
    events are published with the new state.
    """

    def __init__(
        self,
        topology: Optional[VenueTopology] = None,
        *,
        settings: Optional[Settings] = None,
        scheduler=None,
        paths: Optional[FieldPaths] = None,
    ):
        self.settings = settings or Settings()
        self.topology = topology if topology is not None else VenueTopology.default()
        self.reactions = Reactions(SegmentationEngine(self.topology), paths=paths)
        self.channel = EventChannel()
        self.debouncer = Debouncer(scheduler or ThreadingScheduler(), self.settings.debounce_seconds)
        self._state = SeatMapState()
        self._revision = 0
        self._lock = threading.RLock()

    @property
    def state(self) -> SeatMapState:
        return self._state

    @property
    def cache(self):
        return self.reactions.cache

    def dispatch(self, action: Action) -> SeatMapState:
        with self._lock:
            new_state, events = self.reactions.apply(self._state, action)
            self._state = new_state
            if events:
                self._revision += 1
            for event_type in events:
                self.channel.publish(Event(type=event_type, state=new_state, revision=self._revision))
            return new_state

    def subscribe(self, event_type: EventType, callback: Callable[[Event], None]) -> Callable[[], None]:
        return self.channel.subscribe(callback, event_type)

    def on_change(self, callback: Callable[[SeatMapState], None]) -> Callable[[], None]:
        """Called with the full derived state after any reaction that changed it."""
        last_seen = {"revision": 0}

        def _relay(event: Event) -> None:
            # a reaction may publish several events; report each new state once
            if event.revision == last_seen["revision"]:
                return
            last_seen["revision"] = event.revision
            callback(event.state)

        return self.channel.subscribe(_relay)

    def load_records(self, records: Iterable[Mapping[str, Any]]) -> SeatMapState:
        self.debouncer.cancel()
        state = self.dispatch(LoadRecords(tuple(records)))
        logger.info(
            "loaded %d seat(s) in %d row(s); %d record(s) skipped",
            state.report.accepted,
            len(state.normalized),
            state.report.skipped,
        )
        return state

    def set_filter(self, day: str = "", event: str = "") -> SeatMapState:
        self.debouncer.cancel()
        return self.dispatch(ChangeFilter(day=day or "", event=event or ""))

    def request_filter(self, day: str = "", event: str = "") -> None:
        """Debounced set_filter; only the last request in the quiet period is applied."""
        action = ChangeFilter(day=day or "", event=event or "")

        def _apply() -> None:
            logger.debug("applying debounced filter %r/%r", action.day, action.event)
            self.dispatch(action)

        self.debouncer.submit(_apply)

    def select(self, segment_id: str) -> SeatMapState:
        return self.dispatch(SelectSegment(segment_id=segment_id))

    def clear_selection(self) -> SeatMapState:
        return self.dispatch(ClearSelection())

    def rows(self) -> list[tuple[str, list[Segment]]]:
        return [(row, list(segs)) for row, segs in self._state.segments]

    def rows_for(self, day: str = "", event: str = "") -> list[tuple[str, list[Segment]]]:
        """Segments under another filter, leaving the current filter and selection alone."""
        key = FilterKey.of(day, event)
        with self._lock:
            filtered = filter_rows(self._state.normalized, key.day, key.event)
            segments = self.reactions.segments_for(key, filtered)
        return [(row, list(segs)) for row, segs in segments]

    def group_booking_segments(self, bookings: Iterable[GroupBooking]) -> list[tuple[str, list[Segment]]]:
        return segment_group_bookings(bookings)
