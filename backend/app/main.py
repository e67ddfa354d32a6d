from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from loge_seatmap.config import Settings
from loge_seatmap.controller import SeatMapController
from loge_seatmap.errors import SeatMapError
from loge_seatmap.filters import DAY_OPTIONS, EVENT_OPTIONS
from loge_seatmap.segmentation import GroupBooking, segment_group_bookings
from loge_seatmap.storage import load_records, load_topology

from .schemas import (
    DetailOut,
    FilterQuery,
    GroupBookingsUpload,
    LoadSummary,
    RecordsUpload,
    RowOut,
    SelectionRequest,
    StateOut,
)


logger = logging.getLogger(__name__)

settings = Settings.from_env()

app = FastAPI(title="Loge Seat Map API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_controller_instance: Optional[SeatMapController] = None


def build_controller(cfg: Settings) -> SeatMapController:
    controller = SeatMapController(load_topology(cfg.topology_file), settings=cfg)
    if cfg.records_file:
        controller.load_records(load_records(cfg.records_file))
    return controller


def _controller() -> SeatMapController:
    global _controller_instance
    if _controller_instance is None:
        _controller_instance = build_controller(settings)
    return _controller_instance


@app.exception_handler(SeatMapError)
def _seat_map_error(request: Request, exc: SeatMapError) -> JSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


def reset_controller(controller: Optional[SeatMapController] = None) -> None:
    global _controller_instance
    _controller_instance = controller


def _rows_payload(rows) -> list[dict]:
    return [{"row": row, "segments": [s.to_dict() for s in segs]} for row, segs in rows]


@app.get("/health")
def health() -> dict:
    return {"ok": True}


@app.get("/options")
def options() -> dict:
    return {"days": list(DAY_OPTIONS), "events": list(EVENT_OPTIONS)}


@app.put("/records", response_model=LoadSummary)
def replace_records(payload: RecordsUpload, controller: SeatMapController = Depends(_controller)) -> LoadSummary:
    state = controller.load_records(payload.records)
    report = state.report
    return LoadSummary(
        total=report.total,
        accepted=report.accepted,
        skipped_missing=report.skipped_missing,
        skipped_unparseable=report.skipped_unparseable,
        rows=len(state.normalized),
    )


@app.get("/segments", response_model=list[RowOut])
def list_segments(
    day: Optional[str] = None, event: Optional[str] = None, controller: SeatMapController = Depends(_controller)
) -> list[dict]:
    # read-only: the shared filter and selection change only through PUT /filter
    if day is None and event is None:
        return _rows_payload(controller.rows())
    q = FilterQuery(day=day or "", event=event or "")
    return _rows_payload(controller.rows_for(q.day, q.event))


@app.put("/filter", response_model=StateOut)
def change_filter(payload: FilterQuery, controller: SeatMapController = Depends(_controller)) -> dict:
    return controller.set_filter(payload.day, payload.event).to_dict()


@app.get("/state", response_model=StateOut)
def current_state(controller: SeatMapController = Depends(_controller)) -> dict:
    return controller.state.to_dict()


@app.post("/selection", response_model=DetailOut)
def select_segment(payload: SelectionRequest, controller: SeatMapController = Depends(_controller)) -> dict:
    state = controller.select(payload.segment_id)
    if state.selection.is_empty and state.find_segment(payload.segment_id) is None:
        raise HTTPException(status_code=404, detail="segment not found under the current filter")
    return state.selection.to_dict()


@app.delete("/selection", response_model=DetailOut)
def clear_selection(controller: SeatMapController = Depends(_controller)) -> dict:
    return controller.clear_selection().selection.to_dict()


@app.post("/group-bookings/segments", response_model=list[RowOut])
def group_booking_segments(payload: GroupBookingsUpload) -> list[dict]:
    bookings = [
        GroupBooking(group_name=b.groupName, seat_count=b.seatCount, seat_locations=tuple(b.seatLocations))
        for b in payload.groupBookings
    ]
    return _rows_payload(segment_group_bookings(bookings))
