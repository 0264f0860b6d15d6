"""
Shared pytest fixtures for lwwdict tests.
"""

import logging
from datetime import datetime, timedelta

import pytest

from lwwdict import LWWDict


EXAMPLE_TIME = datetime(2007, 7, 7, 7, 7, 7)


@pytest.fixture
def example_time() -> datetime:
    """A fixed wall-clock instant shared by timestamp-sensitive tests."""
    return EXAMPLE_TIME


@pytest.fixture
def empty_dict() -> LWWDict:
    return LWWDict()


@pytest.fixture
def seeded_dict() -> LWWDict:
    """Two keys seeded at EXAMPLE_TIME."""
    return LWWDict({"first": "firstValue", "second": "secondValue"}, EXAMPLE_TIME)


@pytest.fixture
def later():
    """Return EXAMPLE_TIME shifted by keyword arguments to timedelta."""

    def _later(**kwargs) -> datetime:
        return EXAMPLE_TIME + timedelta(**kwargs)

    return _later


@pytest.fixture(autouse=True)
def reset_lwwdict_logging():
    """Reset logging state before each test.

    Removes all handlers except NullHandler and resets the level to
    NOTSET, so logging configured by one test cannot leak into another.
    """
    logger = logging.getLogger("lwwdict")

    def _reset():
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
            if not isinstance(handler, logging.NullHandler):
                handler.close()
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.NOTSET)

    _reset()
    yield
    _reset()
