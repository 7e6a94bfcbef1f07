"""Shared pytest configuration for the object mapper test suite."""

import logging

import pytest
import structlog

# Handler types installed by setup_logging; pytest's capture handlers are subclasses
_INSTALLED_HANDLER_TYPES = (logging.StreamHandler, logging.FileHandler)


@pytest.fixture(autouse=True)
def reset_logging():
    """Restore structlog defaults and the root logger after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level

    yield

    structlog.reset_defaults()
    for handler in list(root.handlers):
        if handler not in handlers and type(handler) in _INSTALLED_HANDLER_TYPES:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
