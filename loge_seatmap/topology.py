from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .errors import TopologyError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Pillar:
    """Inclusive seat-number span of a row taken by an obstruction."""

    row: str
    start: int
    end: int

    def covers(self, seat_number: int) -> bool:
        return self.start <= seat_number <= self.end

    @property
    def width(self) -> int:
        return self.end - self.start + 1


@dataclass(frozen=True)
class SectionSpan:
    start: int
    end: int

    def covers(self, seat_number: int) -> bool:
        return self.start <= seat_number <= self.end


DEFAULT_PILLARS: tuple[Pillar, ...] = (Pillar(row="E", start=40, end=41),)


@dataclass
class VenueTopology:
    """
    Static registry of pillars and rendered sections, keyed by row label.

    A row with no entries behaves as one fully contiguous section.
    """

    pillars: dict[str, list[Pillar]] = field(default_factory=dict)
    sections: dict[str, list[SectionSpan]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for row, pillars in self.pillars.items():
            _validate_spans(row, pillars, kind="pillar")
            self.pillars[row] = sorted(pillars, key=lambda p: p.start)
        for row, spans in self.sections.items():
            _validate_spans(row, spans, kind="section")
            self.sections[row] = sorted(spans, key=lambda s: s.start)

    @classmethod
    def build(
        cls,
        pillars: Iterable[Pillar] = (),
        sections: Optional[dict[str, Iterable[tuple[int, int]]]] = None,
    ) -> "VenueTopology":
        by_row: dict[str, list[Pillar]] = {}
        for p in pillars:
            by_row.setdefault(p.row, []).append(p)
        spans = {row: [SectionSpan(int(s), int(e)) for s, e in items] for row, items in (sections or {}).items()}
        return cls(pillars=by_row, sections=spans)

    @classmethod
    def default(cls) -> "VenueTopology":
        return cls.build(DEFAULT_PILLARS)

    def pillars_in(self, row: str) -> list[Pillar]:
        return self.pillars.get(row, [])

    def is_obstructed_gap(self, row: str, prev_seat: int, curr_seat: int) -> bool:
        for p in self.pillars_in(row):
            if prev_seat + 1 == p.start and curr_seat == p.end + 1:
                return True
        return False

    def is_addressable(self, row: str, seat_number: int) -> bool:
        return not any(p.covers(seat_number) for p in self.pillars_in(row))

    def member_seats(self, row: str, start: int, end: int) -> list[int]:
        return [n for n in range(start, end + 1) if self.is_addressable(row, n)]

    def section_of(self, row: str, seat_number: int) -> Optional[int]:
        if not self.is_addressable(row, seat_number):
            return None
        for idx, span in enumerate(self.sections.get(row, [])):
            if span.covers(seat_number):
                return idx
        return None

    def to_dict(self) -> dict:
        return {
            "pillars": [
                {"row": p.row, "start": p.start, "end": p.end}
                for row in sorted(self.pillars)
                for p in self.pillars[row]
            ],
            "sections": {row: [[s.start, s.end] for s in spans] for row, spans in sorted(self.sections.items())},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "VenueTopology":
        try:
            pillars = [Pillar(row=str(p["row"]), start=int(p["start"]), end=int(p["end"])) for p in data.get("pillars", [])]
            sections = {str(row): [(int(s), int(e)) for s, e in spans] for row, spans in (data.get("sections") or {}).items()}
        except (KeyError, TypeError, ValueError) as e:
            raise TopologyError(f"invalid topology data: {e}") from e
        topo = cls.build(pillars, sections)
        logger.info(
            "loaded topology: %d pillar(s), %d row(s) with section layout",
            sum(len(v) for v in topo.pillars.values()),
            len(topo.sections),
        )
        return topo


def _validate_spans(row: str, spans: list, *, kind: str) -> None:
    ordered = sorted(spans, key=lambda s: s.start)
    prev_end: Optional[int] = None
    for s in ordered:
        if s.start < 0 or s.end < s.start:
            raise TopologyError(f"invalid {kind} span in row {row}: {s.start}-{s.end}")
        if prev_end is not None and s.start <= prev_end:
            raise TopologyError(f"overlapping {kind} spans in row {row} at seat {s.start}")
        prev_end = s.end
