from __future__ import annotations

from typing import Mapping, NamedTuple

from .normalizer import NormalizedSeat


DAY_OPTIONS: tuple[dict, ...] = tuple(
    {"label": d, "value": d}
    for d in (
        "Day 1 - Friday",
        "Day 2 - Saturday",
        "Day 3 - Sunday",
        "Day 4 - Monday",
        "Day 5 - Tuesday",
        "Day 6 - Wednesday",
        "Day 7 - Thursday",
        "Day 8 - Friday",
        "Day 9 - Saturday",
        "Day 10 - Sunday",
    )
)

EVENT_OPTIONS: tuple[dict, ...] = (
    {"label": "Rodeo", "value": "Rodeo"},
    {"label": "Evening Show", "value": "Evening Show"},
)


class FilterKey(NamedTuple):
    """(day, event); an empty string in either slot matches everything."""

    day: str = ""
    event: str = ""

    @classmethod
    def of(cls, day: object = "", event: object = "") -> "FilterKey":
        return cls(day=str(day or "").strip(), event=str(event or "").strip())

    def matches(self, seat: NormalizedSeat) -> bool:
        return (not self.day or seat.day == self.day) and (not self.event or seat.event == self.event)


def filter_rows(
    normalized: Mapping[str, list[NormalizedSeat]], day: str = "", event: str = ""
) -> dict[str, list[NormalizedSeat]]:
    key = FilterKey.of(day, event)
    out: dict[str, list[NormalizedSeat]] = {}
    for row, seats in normalized.items():
        kept = [s for s in seats if key.matches(s)]
        if kept:
            out[row] = kept
    return out
