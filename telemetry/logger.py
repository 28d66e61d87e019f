from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional


def _now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime())


@dataclass
class TelemetryLogger:
    path: Optional[Path] = None
    enabled: bool = True
    flush_each_write: bool = False
    _calls: int = 0
    _failures: int = 0
    _started_at: float = field(default_factory=time.time)

    def init(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Touch file (don’t overwrite)
        self.path.touch(exist_ok=True)
        self.log("telemetry_init", file=str(self.path))

    def log(self, event: str, **fields: Any) -> None:
        if not self.enabled or self.path is None:
            return

        row: Dict[str, Any] = {
            "t": time.time(),
            "ts": _now_iso(),
            "event": event,
            **fields,
        }

        try:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(row, ensure_ascii=False, default=str) + "\n")
                if self.flush_each_write:
                    f.flush()
        except OSError:
            # Telemetry must never break the client.
            return

    def store_call(self, table: str, method: str, status: Optional[int], duration_ms: float,
                   error_code: Optional[str] = None) -> None:
        """One remote store request."""
        self._calls += 1
        if error_code:
            self._failures += 1
        self.log(
            "store_call",
            table=table,
            method=method,
            status=status,
            duration_ms=round(duration_ms, 1),
            error_code=error_code,
        )

    @property
    def call_count(self) -> int:
        return self._calls

    @property
    def failure_count(self) -> int:
        return self._failures

    def close(self) -> None:
        """Write a session summary line."""
        self.log(
            "session_end",
            seconds=round(time.time() - self._started_at, 1),
            store_calls=self._calls,
            store_failures=self._failures,
        )


# global singleton (easy import everywhere)
telemetry = TelemetryLogger()
