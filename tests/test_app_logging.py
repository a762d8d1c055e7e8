"""Tests for logging configuration."""

import logging

from recipe_costing.app_logging import configure_logging


def test_configure_logging_adds_one_handler() -> None:
    logger = logging.getLogger("recipe_costing")
    logger.handlers.clear()

    configure_logging()
    configure_logging(logging.DEBUG)

    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    assert logger.propagate is False


def test_module_loggers_inherit_handler() -> None:
    configure_logging()

    child = logging.getLogger("recipe_costing.services.resync")

    assert child.getEffectiveLevel() <= logging.INFO
    assert not child.handlers
