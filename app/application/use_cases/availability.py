from __future__ import annotations

import logging
from datetime import datetime, time, timedelta, timezone

from app.application.ports.calendar import CalendarPort
from app.application.utils.availability import AvailabilityOptions, generate_available_slots
from app.domain.entities.slot import AvailableSlot


class AvailabilityUseCase:
    def __init__(
        self,
        calendar: CalendarPort,
        options: AvailabilityOptions,
        window_days: int = 7,
    ) -> None:
        self._calendar = calendar
        self._options = options
        self._window_days = window_days
        self._logger = logging.getLogger(__name__)

    @property
    def options(self) -> AvailabilityOptions:
        return self._options

    def find_available_slots(self, now: datetime | None = None) -> list[AvailableSlot]:
        """
        Free slots from now until the end of the window, earliest first.
        Calendar failures propagate; there is no guessing without busy data.
        """
        now = now or datetime.now(timezone.utc)
        tz = self._options.tz
        window_start = now.astimezone(tz).date()
        window_end = window_start + timedelta(days=self._window_days)
        range_end = datetime.combine(window_end + timedelta(days=1), time.min, tzinfo=tz)

        busy = self._calendar.fetch_busy_intervals(now, range_end)
        slots = generate_available_slots(busy, window_start, window_end, self._options)
        upcoming = [slot for slot in slots if slot.start >= now]

        self._logger.info(
            "Availability computed",
            extra={"busy_count": len(busy), "slot_count": len(upcoming), "timezone": self._options.timezone},
        )
        return upcoming

    def earliest_slot(self, now: datetime | None = None) -> AvailableSlot | None:
        slots = self.find_available_slots(now)
        return slots[0] if slots else None
