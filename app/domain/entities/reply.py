from __future__ import annotations

from dataclasses import dataclass

from app.domain.entities.booking import BookingRequest
from app.domain.entities.session import Step


@dataclass(frozen=True)
class Reply:
    text: str
    step: Step
    booking: BookingRequest | None = None
