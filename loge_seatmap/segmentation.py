from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from itertools import groupby
from typing import Iterable, Iterator, Mapping, Optional

from .normalizer import SINGLE_BOOKING_PREFIX, NormalizedSeat
from .topology import VenueTopology


logger = logging.getLogger(__name__)

SEAT_ID_RE = re.compile(r"^\s*([A-Za-z]+)\s*(\d+)\s*$")


@dataclass(frozen=True)
class SeatRange:
    start: int
    end: int


@dataclass(frozen=True)
class Segment:
    row: str
    booking_id: str
    start_seat: int
    end_seat: int
    # addressable seat numbers, ascending; pillar numbers are never members
    member_seats: tuple[int, ...]
    is_connected: bool
    is_multi_segment: bool = False
    original_range: Optional[SeatRange] = None
    day: str = ""
    event: str = ""
    display_name: str = ""
    record_ids: tuple[str, ...] = ()

    @property
    def member_seat_ids(self) -> tuple[str, ...]:
        return tuple(f"{self.row}{n}" for n in self.member_seats)

    @property
    def seat_count(self) -> int:
        return len(self.member_seats)

    @property
    def segment_id(self) -> str:
        base = f"{self.row}{self.start_seat}-{self.end_seat}:{self.booking_id}"
        if self.day or self.event:
            return f"{base}@{self.day}/{self.event}"
        return base

    @property
    def aggregation_key(self) -> tuple[str, str, str, str]:
        return (self.booking_id, self.row, self.day, self.event)

    def to_dict(self) -> dict:
        return {
            "segment_id": self.segment_id,
            "row": self.row,
            "booking_id": self.booking_id,
            "start_seat": self.start_seat,
            "end_seat": self.end_seat,
            "member_seat_ids": list(self.member_seat_ids),
            "seat_count": self.seat_count,
            "is_connected": self.is_connected,
            "is_multi_segment": self.is_multi_segment,
            "original_range": (
                {"start": self.original_range.start, "end": self.original_range.end}
                if self.original_range is not None
                else None
            ),
            "day": self.day,
            "event": self.event,
            "display_name": self.display_name,
            "record_ids": list(self.record_ids),
        }


@dataclass(frozen=True)
class GroupBooking:
    group_name: str
    seat_count: int
    seat_locations: tuple[str, ...]

    @classmethod
    def from_dict(cls, data: Mapping) -> "GroupBooking":
        locations = data.get("seatLocations", data.get("seat_locations")) or ()
        count = data.get("seatCount", data.get("seat_count"))
        return cls(
            group_name=str(data.get("groupName", data.get("group_name")) or ""),
            seat_count=int(count) if count is not None else len(locations),
            seat_locations=tuple(str(s) for s in locations),
        )


def split_seat_id(seat_id: str) -> Optional[tuple[str, int]]:
    m = SEAT_ID_RE.match(seat_id or "")
    if not m:
        return None
    return m.group(1).upper(), int(m.group(2))


def row_sort_key(label: str) -> tuple:
    # A..Z before AA; numeric labels first, by value
    if label.isdigit():
        return (0, int(label), "")
    return (1, len(label), label.upper())


class SegmentationEngine:
    """
    Turns one row's seats into per-booking segments.

    With obstruction_aware=False (group-booking input) runs break on any
    non-consecutive gap and the topology is ignored.
    """

    def __init__(self, topology: Optional[VenueTopology] = None, *, obstruction_aware: bool = True):
        self.topology = topology if topology is not None else VenueTopology()
        self.obstruction_aware = obstruction_aware

    def _extends(self, row: str, prev_seat: int, curr_seat: int) -> bool:
        if curr_seat == prev_seat + 1:
            return True
        return self.obstruction_aware and self.topology.is_obstructed_gap(row, prev_seat, curr_seat)

    def _runs(self, row: str, ordered: list[NormalizedSeat]) -> Iterator[list[NormalizedSeat]]:
        run = [ordered[0]]
        for seat in ordered[1:]:
            if self._extends(row, run[-1].seat_number, seat.seat_number):
                run.append(seat)
            else:
                yield run
                run = [seat]
        yield run

    def _split_sections(self, row: str, run: list[NormalizedSeat]) -> list[list[NormalizedSeat]]:
        if not self.obstruction_aware:
            return [run]
        return [list(g) for _, g in groupby(run, key=lambda s: self.topology.section_of(row, s.seat_number))]

    def _member_seats(self, row: str, start: int, end: int) -> tuple[int, ...]:
        if self.obstruction_aware:
            return tuple(self.topology.member_seats(row, start, end))
        return tuple(range(start, end + 1))

    def _make_segment(
        self, row: str, booking_id: str, seats: list[NormalizedSeat], original: Optional[SeatRange]
    ) -> Segment:
        first = seats[0]
        start, end = first.seat_number, seats[-1].seat_number
        members = self._member_seats(row, start, end)
        return Segment(
            row=row,
            booking_id=booking_id,
            start_seat=start,
            end_seat=end,
            member_seats=members,
            is_connected=len(seats) > 1 and len(members) > 1,
            is_multi_segment=original is not None,
            original_range=original,
            day=first.day,
            event=first.event,
            display_name=first.display_name,
            record_ids=tuple(s.record_id for s in seats),
        )

    def _group_by_booking(
        self, seats: Iterable[NormalizedSeat], row: str
    ) -> dict[tuple[str, str, str], list[NormalizedSeat]]:
        # one booking can hold the same seats on several days or events
        groups: dict[tuple[str, str, str], list[NormalizedSeat]] = {}
        for seat in seats:
            if seat.row != row:
                logger.debug("seat %s ignored while segmenting row %s", seat.seat_id, row)
                continue
            if self.obstruction_aware and not self.topology.is_addressable(row, seat.seat_number):
                logger.warning("seat %s (record %s) lies inside a pillar; skipped", seat.seat_id, seat.record_id)
                continue
            booking_id = seat.booking_id or f"{SINGLE_BOOKING_PREFIX}{seat.record_id}"
            groups.setdefault((booking_id, seat.day, seat.event), []).append(seat)
        return groups

    def segment(self, seats: Iterable[NormalizedSeat], row: str) -> list[Segment]:
        out: list[Segment] = []
        for (booking_id, _, _), group in self._group_by_booking(seats, row).items():
            ordered = sorted(group, key=lambda s: s.seat_number)
            for run in self._runs(row, ordered):
                parts = self._split_sections(row, run)
                original = None
                if len(parts) > 1:
                    original = SeatRange(run[0].seat_number, run[-1].seat_number)
                    logger.debug(
                        "booking %s in row %s split into %d section(s) over %d-%d",
                        booking_id,
                        row,
                        len(parts),
                        original.start,
                        original.end,
                    )
                for part in parts:
                    out.append(self._make_segment(row, booking_id, part, original))
        out.sort(key=lambda seg: (seg.start_seat, seg.booking_id, seg.day, seg.event))
        return out

    def segment_rows(self, rows: Mapping[str, Iterable[NormalizedSeat]]) -> list[tuple[str, list[Segment]]]:
        result = []
        for row in sorted(rows, key=row_sort_key):
            segments = self.segment(rows[row], row)
            if segments:
                result.append((row, segments))
        return result


def group_bookings_to_rows(bookings: Iterable[GroupBooking]) -> dict[str, list[NormalizedSeat]]:
    rows: dict[str, list[NormalizedSeat]] = {}
    for booking in bookings:
        parsed = 0
        for location in booking.seat_locations:
            split = split_seat_id(location)
            if split is None:
                logger.warning("group %r: malformed seat id %r skipped", booking.group_name, location)
                continue
            row, number = split
            rows.setdefault(row, []).append(
                NormalizedSeat(
                    row=row,
                    seat_number=number,
                    day="",
                    event="",
                    record_id=f"{row}{number}",
                    booking_id=booking.group_name or f"{SINGLE_BOOKING_PREFIX}{row}{number}",
                    display_name=booking.group_name,
                )
            )
            parsed += 1
        if parsed != booking.seat_count:
            logger.warning(
                "group %r declares %d seat(s) but lists %d valid location(s)",
                booking.group_name,
                booking.seat_count,
                parsed,
            )
    return rows


def segment_group_bookings(bookings: Iterable[GroupBooking]) -> list[tuple[str, list[Segment]]]:
    engine = SegmentationEngine(obstruction_aware=False)
    return engine.segment_rows(group_bookings_to_rows(bookings))
