from __future__ import annotations

import httpx

from app.application.exceptions import UpstreamUnavailable
from app.application.ports.message_platform import MessagePlatformPort
from app.infrastructure.whatsapp.whatsapp_client import WhatsAppClient


class WhatsAppPlatform(MessagePlatformPort):
    def __init__(self, client: WhatsAppClient) -> None:
        self._client = client

    def send_text(self, correspondent_id: str, text: str) -> None:
        try:
            self._client.send_text(to=correspondent_id, text=text)
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"WhatsApp send failed: {e}") from e
