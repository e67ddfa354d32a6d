from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


DEFAULT_DEBOUNCE_MS = 100


@dataclass(frozen=True)
class Settings:
    topology_file: Optional[str] = None
    records_file: Optional[str] = None
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    log_level: str = "INFO"

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "Settings":
        env = os.environ if environ is None else environ
        try:
            debounce_ms = int(env.get("LOGE_SEATMAP_DEBOUNCE_MS", DEFAULT_DEBOUNCE_MS))
        except ValueError:
            debounce_ms = DEFAULT_DEBOUNCE_MS
        return cls(
            topology_file=env.get("LOGE_SEATMAP_TOPOLOGY_FILE") or None,
            records_file=env.get("LOGE_SEATMAP_RECORDS_FILE") or None,
            debounce_ms=max(0, debounce_ms),
            log_level=(env.get("LOGE_SEATMAP_LOG_LEVEL") or "INFO").upper(),
        )
