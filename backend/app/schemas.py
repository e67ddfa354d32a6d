from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class RecordsUpload(BaseModel):
    # Raw CRM rows; validated field by field by the normalizer, not here.
    records: list[dict[str, Any]]


class FilterQuery(BaseModel):
    day: str = ""
    event: str = ""

    @field_validator("day", "event")
    @classmethod
    def _strip(cls, v: str) -> str:
        return (v or "").strip()


class SelectionRequest(BaseModel):
    segment_id: str = Field(min_length=1)


class GroupBookingIn(BaseModel):
    groupName: str
    seatCount: int = Field(ge=0)
    seatLocations: list[str] = Field(default_factory=list)


class GroupBookingsUpload(BaseModel):
    groupBookings: list[GroupBookingIn]


class SeatRangeOut(BaseModel):
    start: int
    end: int


class SegmentOut(BaseModel):
    segment_id: str
    row: str
    booking_id: str
    start_seat: int
    end_seat: int
    member_seat_ids: list[str]
    seat_count: int
    is_connected: bool
    is_multi_segment: bool
    original_range: Optional[SeatRangeOut] = None
    day: str = ""
    event: str = ""
    display_name: str = ""
    record_ids: list[str] = Field(default_factory=list)


class RowOut(BaseModel):
    row: str
    segments: list[SegmentOut]


class DetailOut(BaseModel):
    kind: str
    segment_id: str = ""
    row: str = ""
    booking_id: str = ""
    display_name: str = ""
    day: str = ""
    event: str = ""
    record_id: str = ""
    seat_number: Optional[int] = None
    seat_numbers: list[int] = Field(default_factory=list)
    seat_count: int = 0
    seat_range: str = ""
    title: str = ""


class StateOut(BaseModel):
    filter: FilterQuery
    rows: list[RowOut]
    seat_count: int
    selected_segment_id: Optional[str] = None
    selection: DetailOut
    skipped_records: int = 0


class LoadSummary(BaseModel):
    total: int
    accepted: int
    skipped_missing: int
    skipped_unparseable: int
    rows: int
