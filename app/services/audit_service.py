from __future__ import annotations

import json
from pathlib import Path
from threading import RLock
from typing import Any, Optional

from app.core.config import settings
from app.core.security import Clock, utcnow


class EventLogger:
    """Append-only JSON-lines audit trail of account and HR actions.

    Callers must never put passwords or tokens into ``details``.
    """

    def __init__(self, event_path: Path | None = None, clock: Clock = utcnow) -> None:
        self.event_path = event_path or settings.event_log_path
        self.event_path.parent.mkdir(parents=True, exist_ok=True)
        self.lock = RLock()
        self.clock = clock

    def log_event(
        self,
        event_type: str,
        actor: Optional[str],
        details: dict[str, Any] | None = None,
    ) -> None:
        payload = {
            "timestamp": self.clock().isoformat(),
            "event_type": event_type,
            "actor": actor,
            "details": details or {},
        }
        line = json.dumps(payload, default=str)
        with self.lock:
            with self.event_path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")

    def read_events(self) -> list[dict[str, Any]]:
        if not self.event_path.exists():
            return []

        with self.lock:
            lines = self.event_path.read_text(encoding="utf-8").splitlines()

        events: list[dict[str, Any]] = []
        for raw in lines:
            if not raw.strip():
                continue
            try:
                events.append(json.loads(raw))
            except json.JSONDecodeError:
                continue
        return events

    def recent_events(self, limit: int = 100, event_type: str | None = None) -> list[dict[str, Any]]:
        events = self.read_events()
        if event_type:
            events = [e for e in events if e.get("event_type") == event_type]
        return events[-limit:]
