from __future__ import annotations

import argparse
import json
import logging

from .config import Settings
from .controller import SeatMapController
from .errors import SeatMapError
from .filters import DAY_OPTIONS, EVENT_OPTIONS
from .render import render_detail, render_rows
from .segmentation import segment_group_bookings
from .storage import load_group_bookings, load_records, load_topology


def _add_data_args(p: argparse.ArgumentParser, settings: Settings) -> None:
    p.add_argument("--records", required=True, help="Path to a JSON file of raw seat records")
    p.add_argument(
        "--topology",
        default=settings.topology_file,
        help="Path to a topology JSON file (default: built-in pillars)",
    )
    p.add_argument("--day", default="", help="Only seats on this day (default: all)")
    p.add_argument("--event", default="", help="Only seats for this event type (default: all)")


def _controller(args: argparse.Namespace, settings: Settings) -> SeatMapController:
    controller = SeatMapController(load_topology(args.topology), settings=settings)
    controller.load_records(load_records(args.records))
    controller.set_filter(args.day, args.event)
    return controller


def cmd_options(args: argparse.Namespace, settings: Settings) -> int:
    print("Days:")
    for opt in DAY_OPTIONS:
        print(f"  {opt['value']}")
    print("Events:")
    for opt in EVENT_OPTIONS:
        print(f"  {opt['value']}")
    return 0


def cmd_segments(args: argparse.Namespace, settings: Settings) -> int:
    controller = _controller(args, settings)
    if args.json:
        print(json.dumps(controller.state.to_dict(), indent=2))
    else:
        print(render_rows(controller.rows(), name_width=args.width))
    skipped = controller.state.report.skipped
    if skipped:
        print(f"({skipped} record(s) skipped)")
    return 0


def cmd_detail(args: argparse.Namespace, settings: Settings) -> int:
    controller = _controller(args, settings)
    view = controller.select(args.segment).selection
    if args.json:
        print(json.dumps(view.to_dict(), indent=2))
    else:
        print(render_detail(view))
    return 0 if not view.is_empty else 1


def cmd_groups(args: argparse.Namespace, settings: Settings) -> int:
    rows = segment_group_bookings(load_group_bookings(args.bookings))
    print(render_rows(rows, name_width=args.width))
    return 0


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="loge_seatmap", description="Loge seat map: connected seats and group bookings.")
    p.add_argument("--log-level", default=settings.log_level, help=f"Logging level (default: {settings.log_level})")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_options = sub.add_parser("options", help="List the day and event filter values")
    p_options.set_defaults(func=cmd_options)

    p_segments = sub.add_parser("segments", help="Show seat segments per row")
    _add_data_args(p_segments, settings)
    p_segments.add_argument("--width", type=int, default=20, help="Name column width")
    p_segments.add_argument("--json", action="store_true", help="Print the full state as JSON")
    p_segments.set_defaults(func=cmd_segments)

    p_detail = sub.add_parser("detail", help="Show the detail view for one segment")
    _add_data_args(p_detail, settings)
    p_detail.add_argument("--segment", required=True, help="Segment id as printed by 'segments'")
    p_detail.add_argument("--json", action="store_true", help="Print the detail view as JSON")
    p_detail.set_defaults(func=cmd_detail)

    p_groups = sub.add_parser("groups", help="Show segments for pre-grouped bookings")
    p_groups.add_argument("--bookings", required=True, help="Path to a group bookings JSON file")
    p_groups.add_argument("--width", type=int, default=20, help="Name column width")
    p_groups.set_defaults(func=cmd_groups)

    return p


def main(argv: list[str] | None = None) -> int:
    settings = Settings.from_env()
    p = build_parser(settings)
    args = p.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        return int(args.func(args, settings))
    except SeatMapError as e:
        print(f"Error: {e}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
