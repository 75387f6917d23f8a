from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from app.domain.entities.busy_interval import BusyInterval


class CalendarPort(ABC):
    @abstractmethod
    def fetch_busy_intervals(self, start: datetime, end: datetime) -> list[BusyInterval]:
        """Busy spans between start and end.

        Raises UpstreamUnavailable on transport/authorization failure and
        ParseError when the provider returns instants that cannot be read.
        """
        raise NotImplementedError

    @abstractmethod
    def book_slot(self, title: str, start: datetime, end: datetime) -> str:
        """Create calendar event. Returns event_id."""
        raise NotImplementedError
