from __future__ import annotations

import logging

import httpx


class WhatsAppClient:
    def __init__(
        self,
        access_token: str,
        phone_number_id: str,
        api_version: str = "v17.0",
        timeout: float = 10.0,
    ) -> None:
        self._access_token = access_token
        self._send_endpoint = f"https://graph.facebook.com/{api_version}/{phone_number_id}/messages"
        self._client = httpx.Client(timeout=timeout)
        self._logger = logging.getLogger(__name__)

    def send_text(self, to: str, text: str) -> None:
        payload = {
            "messaging_product": "whatsapp",
            "to": to,
            "text": {"body": text},
        }
        headers = {"Authorization": f"Bearer {self._access_token}"}
        resp = self._client.post(self._send_endpoint, headers=headers, json=payload)
        if resp.status_code >= 400:
            try:
                error_json = resp.json()
                error_code = error_json.get("error", {}).get("code")
                error_message = error_json.get("error", {}).get("message")
            except ValueError:
                error_code = None
                error_message = resp.text

            self._logger.error(
                "WhatsApp send failed",
                extra={
                    "status": resp.status_code,
                    "error_code": error_code,
                    "error_message": error_message,
                    "correspondent_id": to,
                    "text_length": len(text),
                },
            )
            resp.raise_for_status()
