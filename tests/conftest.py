"""Shared pytest configuration."""

import sys

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def reset_logging():
    """Restore the default loguru sink after CLI tests reconfigure it."""
    yield
    logger.remove()
    logger.add(sys.stderr)
