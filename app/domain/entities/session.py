from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from app.domain.entities.slot import AvailableSlot


class Step(str, Enum):
    GREETING = "greeting"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    CONFIRMED = "confirmed"
    CLOSING = "closing"


@dataclass(frozen=True)
class HistoryEntry:
    role: str  # "user" | "assistant"
    text: str


@dataclass(frozen=True)
class Session:
    step: Step = Step.GREETING
    history: tuple[HistoryEntry, ...] = field(default_factory=tuple)
    proposed_slot: AvailableSlot | None = None

    def with_entry(self, role: str, text: str, limit: int) -> "Session":
        history = self.history + (HistoryEntry(role=role, text=text),)
        if len(history) > limit:
            # drop the oldest half
            history = history[len(history) // 2 :]
        return replace(self, history=history)
