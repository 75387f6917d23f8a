"""End-to-end tests for HandleIncomingMessageUseCase with mock adapters."""

from __future__ import annotations

import threading
import time
from datetime import datetime, timedelta, timezone

from app.application.exceptions import UpstreamUnavailable
from app.application.ports.message_platform import MessagePlatformPort
from app.application.use_cases.availability import AvailabilityUseCase
from app.application.use_cases.dedup_gate import DeduplicationGate
from app.application.use_cases.handle_incoming_message import APOLOGY_TEXT, HandleIncomingMessageUseCase
from app.application.use_cases.send_reply import SendReplyUseCase
from app.application.use_cases.session_machine import FAREWELL_TEXT, SessionStateMachine
from app.application.utils.availability import AvailabilityOptions
from app.domain.entities.message import Message
from app.domain.entities.session import Step
from app.infrastructure.calendar.mock_calendar import MockCalendar
from app.infrastructure.store.memory_store import MemoryProcessedMessageStore, MemorySessionStore
from app.infrastructure.whatsapp.mock_platform import MockWhatsAppPlatform

UTC = timezone.utc
OPTIONS = AvailabilityOptions(working_hours=(9, 18), slot_interval_minutes=60, timezone="UTC")
PHONE = "41790000000"


class FailingPlatform(MessagePlatformPort):
    def send_text(self, correspondent_id, text):
        raise UpstreamUnavailable("whatsapp down")


class UnbookableCalendar(MockCalendar):
    def book_slot(self, title, start, end):
        raise UpstreamUnavailable("insert failed")


class SlowCalendar(MockCalendar):
    def fetch_busy_intervals(self, start, end):
        time.sleep(3)
        return super().fetch_busy_intervals(start, end)


def _build(calendar=None, platform=None, auto_reply_enabled=True, max_age_seconds=10):
    calendar = calendar or MockCalendar()
    platform = platform or MockWhatsAppPlatform()
    sessions = MemorySessionStore()
    machine = SessionStateMachine(
        store=sessions,
        availability=AvailabilityUseCase(calendar=calendar, options=OPTIONS, window_days=1),
        appointment_title="Beauty Salon Appointment",
    )
    use_case = HandleIncomingMessageUseCase(
        gate=DeduplicationGate(store=MemoryProcessedMessageStore(), max_age_seconds=max_age_seconds),
        machine=machine,
        calendar=calendar,
        send_reply=SendReplyUseCase(platform=platform, auto_reply_enabled=auto_reply_enabled),
    )
    return use_case, calendar, platform, sessions


def _message(text: str, at: datetime, mid: str, sender: str = PHONE) -> Message:
    return Message(id=mid, correspondent_id=sender, text=text, timestamp=int(at.timestamp()), platform="whatsapp")


def test_full_conversation_books_one_event(now):
    use_case, calendar, platform, _ = _build()

    for i, text in enumerate(("Hi", "Yes please", "Thanks", "Bye")):
        use_case.handle(_message(text, now, f"wamid.{i}"), now=now)

    assert len(platform.sent) == 4
    assert len(calendar.events) == 1
    title, start, end = next(iter(calendar.events.values()))
    assert title == "Beauty Salon Appointment"
    assert start == datetime(2025, 1, 6, 9, tzinfo=UTC)
    assert platform.sent[-1] == (PHONE, FAREWELL_TEXT)


def test_redelivered_message_gets_exactly_one_reply(now):
    use_case, _, platform, _ = _build()
    message = _message("Hi", now, "wamid.1")

    use_case.handle(message, now=now)
    use_case.handle(message, now=now)

    assert len(platform.sent) == 1


def test_same_text_with_new_message_id_is_still_suppressed(now):
    use_case, _, platform, _ = _build()

    use_case.handle(_message("Hi", now, "wamid.1"), now=now)
    use_case.handle(_message("Hi", now, "wamid.2"), now=now)

    assert len(platform.sent) == 1


def test_stale_message_gets_no_reply(now):
    use_case, _, platform, sessions = _build()

    use_case.handle(_message("Hi", now - timedelta(seconds=11), "wamid.1"), now=now)

    assert platform.sent == []
    assert sessions.get(PHONE) is None


def test_calendar_outage_answers_with_apology(now):
    class DownCalendar(MockCalendar):
        def fetch_busy_intervals(self, start, end):
            raise UpstreamUnavailable("down")

    use_case, _, platform, _ = _build(calendar=DownCalendar())

    use_case.handle(_message("Hi", now, "wamid.1"), now=now)

    assert platform.sent == [(PHONE, APOLOGY_TEXT)]


def test_failed_booking_apologises_and_restarts_session(now):
    use_case, _, platform, sessions = _build(calendar=UnbookableCalendar())

    use_case.handle(_message("Hi", now, "wamid.1"), now=now)
    use_case.handle(_message("Yes", now, "wamid.2"), now=now)

    assert platform.sent[-1] == (PHONE, APOLOGY_TEXT)
    assert sessions.get(PHONE) is None


def test_delivery_failure_does_not_raise(now):
    use_case, _, _, sessions = _build(platform=FailingPlatform())

    use_case.handle(_message("Hi", now, "wamid.1"), now=now)

    assert sessions.get(PHONE).step is Step.AWAITING_CONFIRMATION


def test_auto_reply_disabled_sends_nothing(now):
    use_case, _, platform, sessions = _build(auto_reply_enabled=False)

    use_case.handle(_message("Hi", now, "wamid.1"), now=now)

    assert platform.sent == []
    assert sessions.get(PHONE).step is Step.AWAITING_CONFIRMATION


def test_concurrent_messages_from_one_correspondent_advance_one_step_each(now):
    use_case, calendar, platform, sessions = _build()
    messages = [_message(f"message {i}", now, f"wamid.{i}") for i in range(3)]

    threads = [threading.Thread(target=use_case.handle, args=(m,), kwargs={"now": now}) for m in messages]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(platform.sent) == 3
    assert len(calendar.events) == 1
    assert sessions.get(PHONE).step is Step.CLOSING


def test_waiting_behind_a_slow_turn_does_not_make_a_message_stale():
    use_case, _, platform, sessions = _build(calendar=SlowCalendar(), max_age_seconds=2)
    first = Message(id="wamid.1", correspondent_id=PHONE, text="Hi", timestamp=int(time.time()), platform="whatsapp")

    worker = threading.Thread(target=use_case.handle, args=(first,))
    worker.start()
    time.sleep(0.1)
    second = Message(id="wamid.2", correspondent_id=PHONE, text="Yes", timestamp=int(time.time()), platform="whatsapp")
    use_case.handle(second)
    worker.join()

    assert len(platform.sent) == 2
    assert sessions.get(PHONE).step is Step.CONFIRMED
