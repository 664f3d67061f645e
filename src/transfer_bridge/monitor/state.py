"""Progress state owned by a task completion monitor."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Protocol

# Far enough in the past that the first cycles admit every task in the lookback window.
INITIAL_WATERMARK = datetime(2009, 11, 10, 23, 0, 0, tzinfo=UTC)


class MonitorState(Protocol):
    """Watermark and handled-routing-id set for one monitor."""

    watermark: datetime

    def is_handled(self, routing_id: str) -> bool:
        raise NotImplementedError

    def mark_handled(self, routing_id: str) -> None:
        raise NotImplementedError


class InMemoryMonitorState:
    """Process-lifetime state. Entries are never evicted."""

    def __init__(self, watermark: datetime = INITIAL_WATERMARK) -> None:
        self.watermark = watermark
        self._handled: set[str] = set()

    def is_handled(self, routing_id: str) -> bool:
        return routing_id in self._handled

    def mark_handled(self, routing_id: str) -> None:
        self._handled.add(routing_id)

    def __len__(self) -> int:
        return len(self._handled)
