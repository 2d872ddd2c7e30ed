"""Traffic log model: a bounded record of control channel lines."""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from typing import Literal

TRAFFIC_LOG_SIZE = 500

Direction = Literal["sent", "received"]


@dataclass
class TrafficEntry:
    """One line that crossed the control channel."""

    direction: Direction
    line: str
    timestamp: float

    def to_dict(self) -> dict:
        return {
            "direction": self.direction,
            "line": self.line,
            "timestamp": self.timestamp,
        }


class TrafficRecorder:
    """Observer keeping the most recent ``maxlen`` lines, oldest first."""

    def __init__(self, maxlen: int = TRAFFIC_LOG_SIZE) -> None:
        self._entries: deque[TrafficEntry] = deque(maxlen=maxlen)

    def __len__(self) -> int:
        return len(self._entries)

    def on_sent(self, line: str) -> None:
        self._entries.append(TrafficEntry("sent", line, time.time()))

    def on_received(self, line: str) -> None:
        self._entries.append(TrafficEntry("received", line, time.time()))

    def entries(self, limit: int | None = None) -> list[TrafficEntry]:
        """Return recorded entries, or only the last ``limit`` of them."""
        entries = list(self._entries)
        if limit is not None:
            entries = entries[-limit:] if limit > 0 else []
        return entries

    def clear(self) -> None:
        self._entries.clear()
