"""
Global pytest fixtures for cstrlist tests.

This module provides:
- Fault handling for native crashes (a bad pointer read segfaults)
- Common string sets
- Logger isolation
"""

import faulthandler
import logging

import pytest

# Enable faulthandler to trace native crashes (segfaults)
faulthandler.enable()


# =============================================================================
# Test Data
# =============================================================================

TOPICS = ["sensors/temp", "sensors/rh", "alerts/#"]

UNICODE_STRINGS = ["café", "日本語", "\U0001f389 party", ""]


@pytest.fixture
def topics() -> list[str]:
    """A small list of MQTT-style topic names."""
    return list(TOPICS)


@pytest.fixture
def unicode_strings() -> list[str]:
    """Strings with multi-byte UTF-8 content and an empty string."""
    return list(UNICODE_STRINGS)


@pytest.fixture
def cstrlist():
    """The cstrlist package."""
    import cstrlist

    return cstrlist


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture
def restore_logger():
    """Restore the cstrlist logger's handlers and level after the test."""
    from cstrlist._logging import logger

    handlers = logger.handlers[:]
    level = logger.level
    yield logger
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)


@pytest.fixture
def captured_debug_logs(restore_logger):
    """Capture cstrlist records at DEBUG level."""

    class _ListHandler(logging.Handler):
        def __init__(self):
            super().__init__(logging.DEBUG)
            self.records: list[logging.LogRecord] = []

        def emit(self, record):
            self.records.append(record)

    handler = _ListHandler()
    restore_logger.addHandler(handler)
    restore_logger.setLevel(logging.DEBUG)
    return handler.records
