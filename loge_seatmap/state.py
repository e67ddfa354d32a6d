from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Optional, Union

from .cache import ResultCache
from .events import EventType
from .filters import FilterKey, filter_rows
from .normalizer import FieldPaths, NormalizationReport, NormalizedSeat, RecordNormalizer
from .projector import DetailProjector, DetailView
from .segmentation import Segment, SegmentationEngine


RowSegments = tuple[tuple[str, tuple[Segment, ...]], ...]


@dataclass(frozen=True)
class SeatMapState:
    normalized: Mapping[str, list[NormalizedSeat]] = field(default_factory=dict)
    report: NormalizationReport = field(default_factory=NormalizationReport)
    filter_key: FilterKey = FilterKey()
    filtered: Mapping[str, list[NormalizedSeat]] = field(default_factory=dict)
    segments: RowSegments = ()
    selected_segment_id: Optional[str] = None
    selection: DetailView = DetailView()

    def all_segments(self) -> list[Segment]:
        return [seg for _, segs in self.segments for seg in segs]

    def find_segment(self, segment_id: str) -> Optional[Segment]:
        for seg in self.all_segments():
            if seg.segment_id == segment_id:
                return seg
        return None

    def to_dict(self) -> dict:
        return {
            "filter": {"day": self.filter_key.day, "event": self.filter_key.event},
            "rows": [
                {"row": row, "segments": [s.to_dict() for s in segs]} for row, segs in self.segments
            ],
            "seat_count": sum(len(seats) for seats in self.filtered.values()),
            "selected_segment_id": self.selected_segment_id,
            "selection": self.selection.to_dict(),
            "skipped_records": self.report.skipped,
        }


@dataclass(frozen=True)
class LoadRecords:
    records: tuple[Mapping[str, Any], ...]


@dataclass(frozen=True)
class ChangeFilter:
    day: str = ""
    event: str = ""


@dataclass(frozen=True)
class SelectSegment:
    segment_id: str


@dataclass(frozen=True)
class ClearSelection:
    pass


Action = Union[LoadRecords, ChangeFilter, SelectSegment, ClearSelection]


class Reactions:
    """
    (state, action) -> (state', events to publish).

    The only mutable piece is the segment cache, which is reset whenever
    records are reloaded.
    """

    def __init__(
        self,
        engine: SegmentationEngine,
        *,
        paths: Optional[FieldPaths] = None,
        cache: Optional[ResultCache] = None,
        projector: Optional[DetailProjector] = None,
    ):
        self.engine = engine
        self.paths = paths
        self.cache: ResultCache = cache if cache is not None else ResultCache()
        self.projector = projector or DetailProjector()

    def apply(self, state: SeatMapState, action: Action) -> tuple[SeatMapState, list[EventType]]:
        if isinstance(action, LoadRecords):
            return self._load(state, action.records)
        if isinstance(action, ChangeFilter):
            return self._change_filter(state, FilterKey.of(action.day, action.event))
        if isinstance(action, SelectSegment):
            return self._select(state, action.segment_id)
        if isinstance(action, ClearSelection):
            return self._clear_selection(state)
        raise TypeError(f"unknown action: {action!r}")

    def segments_for(self, key: FilterKey, filtered: Mapping[str, list[NormalizedSeat]]) -> RowSegments:
        def compute() -> RowSegments:
            return tuple((row, tuple(segs)) for row, segs in self.engine.segment_rows(filtered))

        return self.cache.get_or_compute(key, compute)

    def _derive(self, state: SeatMapState, key: FilterKey) -> SeatMapState:
        filtered = filter_rows(state.normalized, key.day, key.event)
        return replace(
            state,
            filter_key=key,
            filtered=filtered,
            segments=self.segments_for(key, filtered),
            selected_segment_id=None,
            selection=DetailView.empty(),
        )

    def _load(self, state: SeatMapState, records: Iterable[Mapping[str, Any]]) -> tuple[SeatMapState, list[EventType]]:
        normalizer = RecordNormalizer(self.paths)
        normalized = normalizer.normalize(records)
        self.cache.clear()
        had_selection = state.selected_segment_id is not None
        new_state = self._derive(replace(state, normalized=normalized, report=normalizer.report), state.filter_key)
        events = [EventType.data_loaded]
        if had_selection:
            events.append(EventType.selection_changed)
        return new_state, events

    def _change_filter(self, state: SeatMapState, key: FilterKey) -> tuple[SeatMapState, list[EventType]]:
        if key == state.filter_key and state.segments:
            return state, []
        had_selection = state.selected_segment_id is not None
        events = [EventType.filter_changed]
        if had_selection:
            events.append(EventType.selection_changed)
        return self._derive(state, key), events

    def _select(self, state: SeatMapState, segment_id: str) -> tuple[SeatMapState, list[EventType]]:
        if segment_id == state.selected_segment_id:
            return self._clear_selection(state)
        clicked = state.find_segment(segment_id)
        view = self.projector.project(clicked, state.all_segments())
        new_state = replace(
            state,
            selected_segment_id=None if view.is_empty else segment_id,
            selection=view,
        )
        return new_state, [EventType.selection_changed]

    def _clear_selection(self, state: SeatMapState) -> tuple[SeatMapState, list[EventType]]:
        if state.selected_segment_id is None:
            return state, []
        return replace(state, selected_segment_id=None, selection=DetailView.empty()), [EventType.selection_changed]
