from __future__ import annotations


class SeatMapError(Exception):
    pass


class TopologyError(SeatMapError):
    pass


class RecordError(SeatMapError):
    pass


class StorageError(SeatMapError):
    pass
