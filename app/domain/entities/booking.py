from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class BookingRequest:
    title: str
    start: datetime
    end: datetime
