import logging

import pytest

from transcript_search.logging_utils import ROOT_LOGGER_NAME, configure_logging


@pytest.fixture()
def package_logger():
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    level = logger.level
    handlers = list(logger.handlers)
    logger.handlers = []
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)


def test_first_call_uses_env_level(package_logger, monkeypatch) -> None:
    monkeypatch.setenv("TRANSCRIPT_SEARCH_LOG_LEVEL", "warning")

    configure_logging()

    assert package_logger.level == logging.WARNING


def test_explicit_level_survives_later_default_calls(package_logger) -> None:
    configure_logging("DEBUG")
    configure_logging()

    assert package_logger.level == logging.DEBUG


def test_explicit_level_overrides_previous_level(package_logger) -> None:
    configure_logging("DEBUG")
    configure_logging("ERROR")

    assert package_logger.level == logging.ERROR


def test_handler_installed_once(package_logger) -> None:
    configure_logging()
    configure_logging("INFO")

    assert len(package_logger.handlers) == 1
