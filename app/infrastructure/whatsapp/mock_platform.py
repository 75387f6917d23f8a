from __future__ import annotations

import logging

from app.application.ports.message_platform import MessagePlatformPort


class MockWhatsAppPlatform(MessagePlatformPort):
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []
        self._logger = logging.getLogger(__name__)

    def send_text(self, correspondent_id: str, text: str) -> None:
        self.sent.append((correspondent_id, text))
        self._logger.info(
            "Mock send to WhatsApp", extra={"correspondent_id": correspondent_id, "reply_text": text}
        )
