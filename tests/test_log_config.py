"""Tests for the log line formatter."""

import logging

from app.core.log_config import ContextFormatter


def _record(**extra):
    record = logging.LogRecord("app.test", logging.INFO, __file__, 1, "Message not admitted", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_appends_context_keys_in_fixed_order():
    formatter = ContextFormatter("%(levelname)s %(message)s")

    line = formatter.format(_record(reason="duplicate", correspondent_id="41790000000"))

    assert line == "INFO Message not admitted | correspondent_id=41790000000 reason=duplicate"


def test_skips_empty_and_unknown_keys():
    formatter = ContextFormatter("%(message)s")

    line = formatter.format(_record(error="", message_count=2))

    assert line == "Message not admitted"
