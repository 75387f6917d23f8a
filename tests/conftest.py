"""Shared test fixtures."""

from __future__ import annotations

import os
from datetime import datetime, timezone

import pytest


def pytest_configure(config):
    """Set test environment variables before app.core.config is imported."""
    os.environ["ENV"] = "test"
    os.environ["AUTO_REPLY_ENABLED"] = "true"
    os.environ.pop("OPENAI_API_KEY", None)
    os.environ.pop("GOOGLE_CREDENTIALS", None)
    os.environ.pop("WHATSAPP_TOKEN", None)


@pytest.fixture
def now() -> datetime:
    # Monday morning, before opening hours
    return datetime(2025, 1, 6, 7, 30, tzinfo=timezone.utc)
