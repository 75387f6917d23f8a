from __future__ import annotations

import json
import logging
import time
from typing import Callable

from app.application.exceptions import DuplicateMessage, StaleMessage
from app.application.ports.processed_store import ProcessedMessageStorePort


def text_key(correspondent_id: str, text: str) -> str:
    return "text:" + json.dumps([correspondent_id, text], ensure_ascii=False)


def message_id_key(message_id: str) -> str:
    return f"mid:{message_id}"


class DeduplicationGate:
    """
    Admission filter in front of the conversation script.

    Rejects messages older than ``max_age_seconds`` (delayed webhook retries) and
    messages whose ``(correspondent_id, text)`` pair or provider message id was
    already recorded. Identical text repeated by the same correspondent is
    suppressed as well until its record expires from the store.
    """

    def __init__(
        self,
        store: ProcessedMessageStorePort,
        max_age_seconds: float = 10.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._max_age_seconds = max_age_seconds
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def admit(
        self,
        correspondent_id: str,
        text: str,
        timestamp: float,
        message_id: str | None = None,
        now_ts: float | None = None,
    ) -> None:
        """
        Record the message as processed or raise.

        The record is written here, before any reply is generated, so a failure
        further down never lets a redelivery through a second time.

        Raises:
            StaleMessage: message is older than the staleness threshold
            DuplicateMessage: message was already admitted
        """
        if now_ts is None:
            now_ts = self._clock()

        age = now_ts - timestamp
        if age > self._max_age_seconds:
            raise StaleMessage(correspondent_id, age)

        if message_id and not self._store.add_if_absent(message_id_key(message_id), now_ts):
            raise DuplicateMessage(correspondent_id)

        if not self._store.add_if_absent(text_key(correspondent_id, text), now_ts):
            raise DuplicateMessage(correspondent_id)

        self._logger.debug("Message admitted", extra={"correspondent_id": correspondent_id, "message_id": message_id})
