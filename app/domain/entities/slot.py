from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time


@dataclass(frozen=True)
class SlotCandidate:
    date: date
    local_start: time
    zone: str
    duration_minutes: int


@dataclass(frozen=True)
class AvailableSlot:
    candidate: SlotCandidate
    start: datetime  # UTC
    end: datetime  # UTC

    @property
    def date(self) -> date:
        return self.candidate.date

    @property
    def label(self) -> str:
        return self.candidate.local_start.strftime("%H:%M")

    @property
    def start_iso(self) -> str:
        return self.start.isoformat()

    @property
    def end_iso(self) -> str:
        return self.end.isoformat()

    def describe(self) -> str:
        return f"{self.candidate.date.strftime('%A %d %B')} at {self.label}"
