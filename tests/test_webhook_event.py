"""Tests for WhatsApp webhook payload extraction."""

from __future__ import annotations

import pytest

from app.application.dto.webhook_event import WebhookEventDTO, parse_timestamp
from app.application.exceptions import ParseError


def _payload(*messages):
    return {
        "object": "whatsapp_business_account",
        "entry": [
            {
                "id": "123",
                "changes": [
                    {
                        "field": "messages",
                        "value": {
                            "messaging_product": "whatsapp",
                            "metadata": {"phone_number_id": "555"},
                            "messages": list(messages),
                        },
                    }
                ],
            }
        ],
    }


def _text(body, mid="wamid.1", sender="41790000000", ts="1736150000"):
    return {"from": sender, "id": mid, "timestamp": ts, "type": "text", "text": {"body": body}}


def test_extracts_text_messages():
    event = WebhookEventDTO.model_validate(_payload(_text("Hi"), _text("Hello", mid="wamid.2")))

    messages = event.extract_messages()

    assert [m.text for m in messages] == ["Hi", "Hello"]
    assert messages[0].correspondent_id == "41790000000"
    assert messages[0].timestamp == 1736150000
    assert messages[0].platform == "whatsapp"


def test_ignores_non_text_and_status_events():
    image = {"from": "41790000000", "id": "wamid.3", "timestamp": "1736150000", "type": "image", "image": {}}
    status_only = {
        "object": "whatsapp_business_account",
        "entry": [{"changes": [{"value": {"statuses": [{"id": "wamid.1", "status": "read"}]}}]}],
    }

    assert WebhookEventDTO.model_validate(_payload(image)).extract_messages() == []
    assert WebhookEventDTO.model_validate(status_only).extract_messages() == []


def test_message_with_bad_timestamp_is_skipped():
    event = WebhookEventDTO.model_validate(_payload(_text("Hi", ts="yesterday"), _text("Ok", mid="wamid.2")))

    assert [m.text for m in event.extract_messages()] == ["Ok"]


@pytest.mark.parametrize("value", ["abc", None, "", True])
def test_parse_timestamp_rejects_garbage(value):
    with pytest.raises(ParseError):
        parse_timestamp(value)


def test_parse_timestamp_accepts_int_and_str():
    assert parse_timestamp("1736150000") == 1736150000
    assert parse_timestamp(1736150000) == 1736150000
