"""
Slot availability: turn calendar busy spans into a list of free appointment slots.

Busy spans arrive as absolute instants (any source offset). The slot grid is laid
out in local wall-clock time of the business timezone, so on a DST change day the
slots stay e.g. 30 wall-clock minutes apart. Each candidate is converted to UTC
for the overlap test, which is half-open: a slot ending exactly when a busy span
starts is still free. Wall-clock starts that do not exist locally (the hour skipped
by a spring-forward change) are left out of the grid.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any, Iterable, Iterator
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.application.exceptions import ParseError
from app.domain.entities.busy_interval import BusyInterval
from app.domain.entities.slot import AvailableSlot, SlotCandidate

UTC = timezone.utc

NO_SLOTS_TEXT = "No available slots in the requested period."


@dataclass(frozen=True)
class AvailabilityOptions:
    working_hours: tuple[int, int] = (9, 18)
    slot_interval_minutes: int = 30
    timezone: str = "Europe/Zurich"

    def __post_init__(self) -> None:
        start, end = self.working_hours
        if not 0 <= start < end <= 24:
            raise ValueError(f"Invalid working hours: {self.working_hours}")
        if self.slot_interval_minutes <= 0:
            raise ValueError("slot_interval_minutes must be positive")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {self.timezone}") from e

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def parse_instant(value: Any, default_zone: tzinfo = UTC) -> datetime:
    """Parse an ISO 8601 value into an aware UTC datetime.

    Values without an offset are read as wall-clock time in ``default_zone``.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        raw = value.strip()
        if raw[-1] in ("Z", "z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError as e:
            raise ParseError(f"Unparseable instant: {value!r}") from e
    else:
        raise ParseError(f"Unparseable instant: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=default_zone)
    return parsed.astimezone(UTC)


def parse_busy_intervals(raw: Iterable[dict[str, Any]], default_zone: tzinfo = UTC) -> list[BusyInterval]:
    """Convert provider ``{"start", "end"}`` records. One bad record fails the whole call."""
    intervals: list[BusyInterval] = []
    for item in raw:
        if not isinstance(item, dict):
            raise ParseError(f"Busy interval must be an object, got {type(item).__name__}")
        start = parse_instant(item.get("start"), default_zone)
        end = parse_instant(item.get("end"), default_zone)
        if start >= end:
            raise ParseError(f"Busy interval ends before it starts: {item!r}")
        intervals.append(BusyInterval(start=start, end=end))
    return intervals


def iter_days(window_start: date, window_end: date) -> Iterator[date]:
    day = window_start
    while day <= window_end:
        yield day
        day += timedelta(days=1)


def _exists_locally(day: date, local_start: time, tz: ZoneInfo) -> bool:
    """False for wall-clock times skipped by a spring-forward transition."""
    local = datetime.combine(day, local_start, tzinfo=tz)
    return local.astimezone(UTC).astimezone(tz).time() == local_start


def generate_slot_grid(window_start: date, window_end: date, options: AvailabilityOptions) -> list[SlotCandidate]:
    step = options.slot_interval_minutes
    first = options.working_hours[0] * 60
    last = options.working_hours[1] * 60

    tz = options.tz
    candidates: list[SlotCandidate] = []
    for day in iter_days(window_start, window_end):
        # a slot must end by the close of working hours
        for offset in range(first, last - step + 1, step):
            local_start = time(offset // 60, offset % 60)
            if not _exists_locally(day, local_start, tz):
                continue
            candidates.append(
                SlotCandidate(
                    date=day,
                    local_start=local_start,
                    zone=options.timezone,
                    duration_minutes=step,
                )
            )
    return candidates


def candidate_instants(candidate: SlotCandidate) -> tuple[datetime, datetime]:
    local = datetime.combine(candidate.date, candidate.local_start, tzinfo=ZoneInfo(candidate.zone))
    start = local.astimezone(UTC)
    return start, start + timedelta(minutes=candidate.duration_minutes)


def generate_available_slots(
    busy: Iterable[BusyInterval],
    window_start: date,
    window_end: date,
    options: AvailabilityOptions,
) -> list[AvailableSlot]:
    """Free slots in day-then-time order; the first element is the earliest."""
    busy_list = list(busy)
    slots: list[AvailableSlot] = []
    for candidate in generate_slot_grid(window_start, window_end, options):
        start, end = candidate_instants(candidate)
        if any(interval.overlaps(start, end) for interval in busy_list):
            continue
        slots.append(AvailableSlot(candidate=candidate, start=start, end=end))
    return slots


def format_slots_for_prompt(slots: Iterable[AvailableSlot]) -> str:
    by_date: dict[date, list[str]] = {}
    for slot in slots:
        by_date.setdefault(slot.date, []).append(slot.label)

    if not by_date:
        return NO_SLOTS_TEXT

    lines = ["AVAILABLE TIME SLOTS:", ""]
    for day in sorted(by_date):
        lines.append(f"{day.isoformat()}: {', '.join(by_date[day])}")
    lines.append("")
    lines.append("IMPORTANT: Only suggest times from this list.")
    return "\n".join(lines)
