from __future__ import annotations

from typing import Iterable

from .projector import DetailView, format_seat_ranges
from .segmentation import Segment


def _segment_line(seg: Segment, width: int) -> str:
    seats = format_seat_ranges(seg.member_seats)
    label = seg.display_name or seg.booking_id
    if len(label) > width:
        label = label[: max(0, width - 1)] + "…"
    flags = []
    if seg.is_connected:
        flags.append("connected")
    if seg.is_multi_segment and seg.original_range is not None:
        flags.append(f"part of {seg.original_range.start}-{seg.original_range.end}")
    suffix = f" [{', '.join(flags)}]" if flags else ""
    return f"  {seats:<16} {seg.seat_count:>3}  {label.ljust(width)}  {seg.segment_id}{suffix}"


def render_rows(rows: Iterable[tuple[str, list[Segment]]], *, name_width: int = 20) -> str:
    name_width = max(3, int(name_width))
    lines = []
    for row, segments in rows:
        lines.append(f"Row {row}")
        lines.extend(_segment_line(seg, name_width) for seg in segments)
    if not lines:
        return "(no seats)"
    return "\n".join(lines)


def render_detail(view: DetailView) -> str:
    if view.is_empty:
        return "No selection"
    if view.kind == "single":
        return "\n".join(
            [
                view.title,
                f"Seat: {view.seat_number}",
                f"Day: {view.day}",
                f"Event: {view.event}",
                f"Account: {view.display_name}",
                f"Record: {view.record_id}",
            ]
        )
    return "\n".join(
        [
            view.title,
            f"Group: {view.display_name or view.booking_id}",
            f"Seats: {view.seat_range}",
            f"Count: {view.seat_count}",
            f"Day: {view.day}",
            f"Event: {view.event}",
        ]
    )
