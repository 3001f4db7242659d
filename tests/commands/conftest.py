"""Fixtures for CLI tests."""

from __future__ import annotations

import logging
from collections.abc import Generator

import pytest

from storyweb.config.logging import APP_LOGGER


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Every invocation reconfigures logging; put the root logger back afterwards."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    app = logging.getLogger(APP_LOGGER)
    app_level = app.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    app.setLevel(app_level)
