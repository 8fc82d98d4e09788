"""
Tests for structured logging setup.
"""

import logging

import pytest
import structlog

from eventbook.core.config import Settings
from eventbook.core.logging import service_context, setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


def test_service_context_keeps_bound_keys(settings):
    processor = service_context(settings)

    event = processor(None, "info", {"event": "booking_created", "environment": "override"})

    assert event["service"] == settings.APP_NAME
    assert event["version"] == settings.APP_VERSION
    assert event["environment"] == "override"


def test_setup_logging_is_idempotent(settings, restore_logging):
    """Repeated setup replaces the structlog handler instead of stacking it."""
    setup_logging(settings)
    setup_logging(settings)

    structlog_handlers = [
        h for h in logging.getLogger().handlers
        if isinstance(h.formatter, structlog.stdlib.ProcessorFormatter)
    ]
    assert len(structlog_handlers) == 1


def test_production_renders_json(capsys, restore_logging):
    settings = Settings(DATABASE_URL="sqlite+aiosqlite:///:memory:", ENVIRONMENT="production")
    setup_logging(settings)

    logging.getLogger("sqlalchemy.pool").warning("pool exhausted")

    out = capsys.readouterr().out
    assert '"event": "pool exhausted"' in out
    assert '"environment": "production"' in out
