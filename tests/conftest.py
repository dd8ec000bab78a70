import logging

import pytest


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """The CLI and service reconfigure the root logger; undo it after each test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
