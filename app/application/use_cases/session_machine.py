from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable

from app.application.exceptions import LLMContractError, UnknownSessionStep, UpstreamUnavailable
from app.application.ports.llm import TextGeneratorPort
from app.application.ports.session_store import SessionStorePort
from app.application.use_cases.availability import AvailabilityUseCase
from app.application.utils.availability import format_slots_for_prompt
from app.domain.entities.booking import BookingRequest
from app.domain.entities.reply import Reply
from app.domain.entities.session import Session, Step
from app.domain.entities.slot import AvailableSlot

TransitionFn = Callable[[Step, str], Step]

_SCRIPT: dict[Step, Step] = {
    Step.GREETING: Step.AWAITING_CONFIRMATION,
    Step.AWAITING_CONFIRMATION: Step.CONFIRMED,
    Step.CONFIRMED: Step.CLOSING,
    Step.CLOSING: Step.GREETING,
}

NO_AVAILABILITY_TEXT = (
    "Sorry, we have no free appointments in the coming days. "
    "Please message us again later and we will find you a time."
)
CONFIRMED_TEXT = "Thank you! We look forward to seeing you."
FAREWELL_TEXT = "Goodbye! Send us a message anytime to book another appointment."


def scripted_transition(step: Step, text: str) -> Step:
    """Linear script. The message text is not interpreted."""
    return _SCRIPT[step]


def resolve_step(raw: object) -> Step:
    try:
        return Step(raw)
    except ValueError as e:
        raise UnknownSessionStep(f"Unknown session step: {raw!r}") from e


class SessionStateMachine:
    def __init__(
        self,
        store: SessionStorePort,
        availability: AvailabilityUseCase,
        appointment_title: str,
        business_name: str = "",
        history_limit: int = 20,
        transition: TransitionFn = scripted_transition,
        text_generator: TextGeneratorPort | None = None,
    ) -> None:
        self._store = store
        self._availability = availability
        self._appointment_title = appointment_title
        self._business_name = business_name
        self._history_limit = history_limit
        self._transition = transition
        self._text_generator = text_generator
        self._logger = logging.getLogger(__name__)

    def advance(self, correspondent_id: str, incoming_text: str, now: datetime | None = None) -> Reply:
        """
        Answer one inbound message and move the session one step along the script.

        Raises UpstreamUnavailable or ParseError when slots cannot be computed;
        the session is left untouched in that case.
        """
        session = self._store.get(correspondent_id) or Session()
        session = session.with_entry("user", incoming_text, self._history_limit)

        try:
            step = resolve_step(session.step)
        except UnknownSessionStep:
            self._logger.warning(
                "Unknown session step, closing session",
                extra={"correspondent_id": correspondent_id, "step": session.step},
            )
            step = Step.CLOSING

        booking: BookingRequest | None = None
        if step is Step.CLOSING:
            text = FAREWELL_TEXT
        elif step is Step.CONFIRMED:
            text = CONFIRMED_TEXT
        elif step is Step.AWAITING_CONFIRMATION and session.proposed_slot is not None:
            slot = session.proposed_slot
            text = f"✅ Your appointment has been booked for {slot.describe()}."
            booking = BookingRequest(title=self._appointment_title, start=slot.start, end=slot.end)
        else:
            step = Step.GREETING
            slots = self._availability.find_available_slots(now)
            if not slots:
                self._store.put(
                    correspondent_id,
                    session.with_entry("assistant", NO_AVAILABILITY_TEXT, self._history_limit),
                )
                self._logger.info("No free slot to propose", extra={"correspondent_id": correspondent_id})
                return Reply(text=NO_AVAILABILITY_TEXT, step=step)
            session = replace(session, proposed_slot=slots[0])
            text = self._proposal_text(session, slots)

        if step is Step.CLOSING:
            self._store.delete(correspondent_id)
        else:
            session = replace(session, step=self._transition(step, incoming_text))
            self._store.put(correspondent_id, session.with_entry("assistant", text, self._history_limit))

        self._logger.info("Session advanced", extra={"correspondent_id": correspondent_id, "step": step.value})
        return Reply(text=text, step=step, booking=booking)

    def discard(self, correspondent_id: str) -> None:
        self._store.delete(correspondent_id)

    def _proposal_text(self, session: Session, slots: list[AvailableSlot]) -> str:
        slot = slots[0]
        fallback = (
            f"Hi{' and welcome to ' + self._business_name if self._business_name else ''}! "
            f"Our earliest free appointment is {slot.describe()}. Would you like to book it?"
        )
        if self._text_generator is None:
            return fallback

        try:
            return self._text_generator.write_slot_proposal(
                business_name=self._business_name,
                slots_text=format_slots_for_prompt(slots),
                proposed=slot.describe(),
                history=[{"role": entry.role, "content": entry.text} for entry in session.history],
            )
        except (UpstreamUnavailable, LLMContractError) as e:
            self._logger.warning("Text generation failed, using template", extra={"error": str(e)})
            return fallback
