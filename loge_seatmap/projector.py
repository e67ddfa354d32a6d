from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Iterable, Optional

from .segmentation import Segment


def compress_ranges(nums: Iterable[int]) -> list[tuple[int, int]]:
    nums = sorted(set(nums))
    out = []
    for _, g in itertools.groupby(enumerate(nums), lambda x: x[1] - x[0]):
        block = list(g)
        out.append((block[0][1], block[-1][1]))
    return out


def format_seat_ranges(nums: Iterable[int]) -> str:
    return ", ".join(str(s) if s == e else f"{s}-{e}" for s, e in compress_ranges(nums))


@dataclass(frozen=True)
class DetailView:
    kind: str = "none"  # none / single / group
    segment_id: str = ""
    row: str = ""
    booking_id: str = ""
    display_name: str = ""
    day: str = ""
    event: str = ""
    record_id: str = ""
    seat_number: Optional[int] = None
    seat_numbers: tuple[int, ...] = ()
    seat_range: str = ""
    title: str = ""

    @classmethod
    def empty(cls) -> "DetailView":
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.kind == "none"

    @property
    def seat_count(self) -> int:
        return len(self.seat_numbers)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "segment_id": self.segment_id,
            "row": self.row,
            "booking_id": self.booking_id,
            "display_name": self.display_name,
            "day": self.day,
            "event": self.event,
            "record_id": self.record_id,
            "seat_number": self.seat_number,
            "seat_numbers": list(self.seat_numbers),
            "seat_count": self.seat_count,
            "seat_range": self.seat_range,
            "title": self.title,
        }


class DetailProjector:
    def project(self, clicked: Optional[Segment], rendered: Iterable[Segment]) -> DetailView:
        rendered = list(rendered)
        if clicked is None or not any(s.segment_id == clicked.segment_id for s in rendered):
            return DetailView.empty()

        if clicked.is_multi_segment:
            siblings = [s for s in rendered if s.aggregation_key == clicked.aggregation_key]
            seats = sorted({n for s in siblings for n in s.member_seats})
            span = clicked.original_range
            title = f"Row {clicked.row} seats {span.start}-{span.end}" if span else ""
            return self._group_view(clicked, seats, title)

        if not clicked.is_connected:
            return DetailView(
                kind="single",
                segment_id=clicked.segment_id,
                row=clicked.row,
                booking_id=clicked.booking_id,
                display_name=clicked.display_name,
                day=clicked.day,
                event=clicked.event,
                record_id=clicked.record_ids[0] if clicked.record_ids else "",
                seat_number=clicked.start_seat,
                seat_numbers=clicked.member_seats,
                seat_range=str(clicked.start_seat),
                title=f"Row {clicked.row} seat {clicked.start_seat}",
            )

        title = f"Row {clicked.row} seats {clicked.start_seat}-{clicked.end_seat}"
        return self._group_view(clicked, list(clicked.member_seats), title)

    @staticmethod
    def _group_view(clicked: Segment, seats: list[int], title: str) -> DetailView:
        return DetailView(
            kind="group",
            segment_id=clicked.segment_id,
            row=clicked.row,
            booking_id=clicked.booking_id,
            display_name=clicked.display_name,
            day=clicked.day,
            event=clicked.event,
            seat_numbers=tuple(seats),
            seat_range=format_seat_ranges(seats),
            title=title,
        )
