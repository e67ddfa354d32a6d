from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from .errors import StorageError
from .segmentation import GroupBooking
from .topology import VenueTopology


logger = logging.getLogger(__name__)


def load_json(path: str | Path) -> Any:
    p = Path(path)
    if not p.exists():
        raise StorageError(f"file not found: {p}")
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise StorageError(f"failed to read JSON from {p}: {e}") from e


def save_json(data: Any, path: str | Path) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def load_records(path: str | Path) -> list[dict]:
    """Accepts a bare list of records or {"records": [...]}."""
    data = load_json(path)
    if isinstance(data, dict):
        data = data.get("records")
    if not isinstance(data, list):
        raise StorageError(f"{path}: expected a list of records")
    logger.debug("read %d raw record(s) from %s", len(data), path)
    return data


def load_topology(path: Optional[str | Path]) -> VenueTopology:
    if path is None:
        return VenueTopology.default()
    data = load_json(path)
    if not isinstance(data, dict):
        raise StorageError(f"{path}: topology must be a JSON object")
    return VenueTopology.from_dict(data)


def save_topology(topology: VenueTopology, path: str | Path) -> None:
    save_json(topology.to_dict(), path)


def load_group_bookings(path: str | Path) -> list[GroupBooking]:
    """Accepts {"groupBookings": [...]} or a bare list."""
    data = load_json(path)
    if isinstance(data, dict):
        data = data.get("groupBookings", data.get("group_bookings"))
    if not isinstance(data, list):
        raise StorageError(f"{path}: expected a list of group bookings")
    try:
        return [GroupBooking.from_dict(item) for item in data]
    except (AttributeError, TypeError, ValueError) as e:
        raise StorageError(f"{path}: invalid group booking: {e}") from e
