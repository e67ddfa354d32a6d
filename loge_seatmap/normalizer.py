from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional


logger = logging.getLogger(__name__)

_MISSING = object()

SINGLE_BOOKING_PREFIX = "single:"


@dataclass(frozen=True)
class FieldPaths:
    """Where each value lives inside a raw record (dotted paths)."""

    row: str = "PricebookEntry.Product2.Row__c"
    seat_number: str = "PricebookEntry.Product2.Seat_Number__c"
    day: str = "PricebookEntry.Product2.Day_of_Stampede__c"
    event: str = "PricebookEntry.Product2.Event_Type__c"
    record_id: str = "Id"
    booking_id: str = "OpportunityId"
    display_name: str = "Opportunity.Account.Name"


@dataclass(frozen=True)
class NormalizedSeat:
    row: str
    seat_number: int
    day: str
    event: str
    record_id: str
    booking_id: str
    display_name: str

    @property
    def seat_id(self) -> str:
        return f"{self.row}{self.seat_number}"


@dataclass
class NormalizationReport:
    total: int = 0
    accepted: int = 0
    skipped_missing: int = 0
    skipped_unparseable: int = 0

    @property
    def skipped(self) -> int:
        return self.skipped_missing + self.skipped_unparseable


def resolve_path(record: Mapping[str, Any], path: str) -> Any:
    """
    Look up a dotted path: a literal flat key wins, otherwise walk nested mappings.
    Returns the module sentinel when any step is absent.
    """
    if path in record:
        return record[path]
    node: Any = record
    for part in path.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return _MISSING
        node = node[part]
    return node


def parse_seat_number(raw: Any) -> Optional[int]:
    # float first, then truncate; "32.0" and 32.7 both become 32
    if isinstance(raw, bool):
        return None
    try:
        value = float(str(raw).strip()) if not isinstance(raw, (int, float)) else float(raw)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(value):
        return None
    number = int(value)
    if number < 0:
        return None
    return number


def _text(value: Any) -> str:
    if value is _MISSING or value is None:
        return ""
    return str(value).strip()


class RecordNormalizer:
    def __init__(self, paths: Optional[FieldPaths] = None):
        self.paths = paths or FieldPaths()
        self.report = NormalizationReport()

    @property
    def skipped(self) -> int:
        return self.report.skipped

    def normalize_one(self, record: Mapping[str, Any], index: int) -> Optional[NormalizedSeat]:
        p = self.paths
        row = _text(resolve_path(record, p.row))
        raw_number = resolve_path(record, p.seat_number)
        if not row or raw_number is _MISSING or raw_number is None or raw_number == "":
            self.report.skipped_missing += 1
            logger.debug("record %d skipped: missing row or seat number", index)
            return None

        seat_number = parse_seat_number(raw_number)
        if seat_number is None:
            self.report.skipped_unparseable += 1
            logger.warning("record %d skipped: unparseable seat number %r in row %s", index, raw_number, row)
            return None

        record_id = _text(resolve_path(record, p.record_id)) or f"record-{index}"
        booking_id = _text(resolve_path(record, p.booking_id)) or f"{SINGLE_BOOKING_PREFIX}{record_id}"
        return NormalizedSeat(
            row=row,
            seat_number=seat_number,
            day=_text(resolve_path(record, p.day)),
            event=_text(resolve_path(record, p.event)),
            record_id=record_id,
            booking_id=booking_id,
            display_name=_text(resolve_path(record, p.display_name)),
        )

    def normalize(self, records: Iterable[Mapping[str, Any]]) -> dict[str, list[NormalizedSeat]]:
        self.report = NormalizationReport()
        grouped: dict[str, list[NormalizedSeat]] = {}
        for index, record in enumerate(records):
            self.report.total += 1
            if not isinstance(record, Mapping):
                self.report.skipped_missing += 1
                logger.debug("record %d skipped: not a mapping", index)
                continue
            seat = self.normalize_one(record, index)
            if seat is None:
                continue
            grouped.setdefault(seat.row, []).append(seat)
            self.report.accepted += 1

        if self.report.skipped:
            logger.info(
                "normalized %d of %d record(s); skipped %d missing, %d unparseable",
                self.report.accepted,
                self.report.total,
                self.report.skipped_missing,
                self.report.skipped_unparseable,
            )
        return grouped


def normalize(
    records: Iterable[Mapping[str, Any]], paths: Optional[FieldPaths] = None
) -> dict[str, list[NormalizedSeat]]:
    return RecordNormalizer(paths).normalize(records)
