"""
Shared test fixtures
"""

import logging

import pytest


class ListHandler(logging.Handler):
    """Collects log records from one logger"""

    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)

    @property
    def messages(self):
        return [record.getMessage() for record in self.records]


@pytest.fixture
def capture_logger():
    """
    Attach a ListHandler to a named logger at DEBUG level.

    The banking_demo sink loggers do not propagate, so caplog cannot see them.
    """
    attached = []

    def attach(name):
        logger = logging.getLogger(name)
        handler = ListHandler()
        attached.append((logger, handler, logger.level))
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
        return handler

    yield attach

    for logger, handler, level in attached:
        logger.removeHandler(handler)
        logger.setLevel(level)
