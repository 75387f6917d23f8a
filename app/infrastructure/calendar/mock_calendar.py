from __future__ import annotations

import logging
from datetime import datetime

from app.application.ports.calendar import CalendarPort
from app.domain.entities.busy_interval import BusyInterval


class MockCalendar(CalendarPort):
    def __init__(self, busy: list[BusyInterval] | None = None) -> None:
        self._busy: list[BusyInterval] = list(busy or [])
        self._events: dict[str, tuple[str, datetime, datetime]] = {}
        self._logger = logging.getLogger(__name__)

    @property
    def events(self) -> dict[str, tuple[str, datetime, datetime]]:
        return dict(self._events)

    def fetch_busy_intervals(self, start: datetime, end: datetime) -> list[BusyInterval]:
        booked = [BusyInterval(start=s, end=e) for _, s, e in self._events.values()]
        return [b for b in self._busy + booked if b.overlaps(start, end)]

    def book_slot(self, title: str, start: datetime, end: datetime) -> str:
        event_id = f"mock_event_{len(self._events) + 1}"
        self._events[event_id] = (title, start, end)
        self._logger.info(
            "Mock calendar event created",
            extra={
                "event_id": event_id,
                "start": start.isoformat(),
                "end": end.isoformat(),
                "title": title,
            },
        )
        return event_id
