from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field

from app.application.exceptions import ParseError
from app.domain.entities.message import Message

logger = logging.getLogger(__name__)


def parse_timestamp(value: Any) -> int:
    """WhatsApp sends seconds since epoch as a decimal string."""
    if isinstance(value, bool):
        raise ParseError(f"Unparseable message timestamp: {value!r}")
    try:
        return int(str(value).strip())
    except (TypeError, ValueError) as e:
        raise ParseError(f"Unparseable message timestamp: {value!r}") from e


class WebhookEventDTO(BaseModel):
    object: str | None = None
    entry: list[dict[str, Any]] = Field(default_factory=list)

    def extract_messages(self) -> list[Message]:
        """Text messages in delivery order. Non-text events are ignored."""
        messages: list[Message] = []
        for entry in self.entry or []:
            for change in entry.get("changes", []) or []:
                value = change.get("value") or {}
                for msg in value.get("messages", []) or []:
                    if msg.get("type", "text") != "text":
                        continue
                    text = (msg.get("text") or {}).get("body")
                    mid = msg.get("id")
                    sender = msg.get("from")
                    if not (mid and sender and text):
                        continue

                    try:
                        timestamp = parse_timestamp(msg.get("timestamp"))
                    except ParseError as e:
                        logger.warning("Skipping message with bad timestamp", extra={"message_id": mid, "error": str(e)})
                        continue

                    messages.append(
                        Message(
                            id=str(mid),
                            correspondent_id=str(sender),
                            text=str(text),
                            timestamp=timestamp,
                            platform="whatsapp",
                        )
                    )

        return messages
