from __future__ import annotations

import logging
from datetime import datetime

from app.application.exceptions import AdmissionRejected, ParseError, UpstreamUnavailable
from app.application.ports.calendar import CalendarPort
from app.application.use_cases.dedup_gate import DeduplicationGate
from app.application.use_cases.send_reply import SendReplyUseCase
from app.application.use_cases.session_machine import SessionStateMachine
from app.application.utils.keyed_lock import KeyedLock
from app.domain.entities.message import Message

APOLOGY_TEXT = "Sorry, something went wrong on our side. Please try again in a few minutes."


class HandleIncomingMessageUseCase:
    def __init__(
        self,
        gate: DeduplicationGate,
        machine: SessionStateMachine,
        calendar: CalendarPort,
        send_reply: SendReplyUseCase,
        locks: KeyedLock | None = None,
    ) -> None:
        self._gate = gate
        self._machine = machine
        self._calendar = calendar
        self._send_reply = send_reply
        self._locks = locks or KeyedLock()
        self._logger = logging.getLogger(__name__)

    def handle(self, message: Message, now: datetime | None = None) -> None:
        """
        Process one inbound message end to end. Never raises.

        Admission runs on receipt, before waiting for the correspondent lock, so
        time spent queued behind an earlier turn never counts as message age.
        Messages from the same correspondent are then answered one at a time.
        """
        try:
            if not self._admit(message, now):
                return
            with self._locks.hold(message.correspondent_id):
                self._respond(message, now)
        except Exception as e:
            self._logger.exception(
                "Unhandled error processing message",
                extra={"message_id": message.id, "correspondent_id": message.correspondent_id, "error": str(e)},
            )

    def _admit(self, message: Message, now: datetime | None) -> bool:
        try:
            self._gate.admit(
                correspondent_id=message.correspondent_id,
                text=message.text,
                timestamp=message.timestamp,
                message_id=message.id,
                now_ts=now.timestamp() if now else None,
            )
        except AdmissionRejected as e:
            self._logger.info(
                "Message not admitted",
                extra={"message_id": message.id, "correspondent_id": message.correspondent_id, "reason": e.reason},
            )
            return False
        return True

    def _respond(self, message: Message, now: datetime | None) -> None:
        try:
            reply = self._machine.advance(message.correspondent_id, message.text, now=now)
        except (UpstreamUnavailable, ParseError) as e:
            self._logger.error(
                "Could not compute reply",
                extra={"message_id": message.id, "correspondent_id": message.correspondent_id, "error": str(e)},
            )
            self._deliver(message.correspondent_id, APOLOGY_TEXT)
            return

        if reply.booking is not None:
            try:
                event_id = self._calendar.book_slot(reply.booking.title, reply.booking.start, reply.booking.end)
            except UpstreamUnavailable as e:
                self._logger.error(
                    "Booking failed",
                    extra={"correspondent_id": message.correspondent_id, "slot": reply.booking.start.isoformat(), "error": str(e)},
                )
                # start over so the next message proposes a fresh slot
                self._machine.discard(message.correspondent_id)
                self._deliver(message.correspondent_id, APOLOGY_TEXT)
                return
            self._logger.info(
                "Appointment booked",
                extra={"correspondent_id": message.correspondent_id, "event_id": event_id, "slot": reply.booking.start.isoformat()},
            )

        self._deliver(message.correspondent_id, reply.text)

    def _deliver(self, correspondent_id: str, text: str) -> None:
        try:
            self._send_reply.execute(correspondent_id, text)
        except UpstreamUnavailable as e:
            self._logger.error("Reply not delivered", extra={"correspondent_id": correspondent_id, "error": str(e)})
