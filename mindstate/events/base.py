"""Event types emitted by the artifact detector."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


class EventType(Enum):
    BLINK = auto()
    CLENCH = auto()


@dataclass
class Event:
    type: EventType
    timestamp: float
    value: float = 0.0        # peak amplitude (µV) that triggered the event
    count: int = 0            # cumulative count of this type, including this one
    metadata: dict = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"Event({self.type.name}, value={self.value:.1f}, count={self.count})"
