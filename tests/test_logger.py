"""
Tests for package logging setup.
"""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from union_loans.utils.logger import LOGGER_NAME, get_logger, setup_logger


@pytest.fixture
def package_logger():
    log = logging.getLogger(LOGGER_NAME)
    saved_handlers, saved_level = list(log.handlers), log.level
    yield log
    log.handlers[:] = saved_handlers
    log.setLevel(saved_level)


def test_library_is_silent_by_default(package_logger: logging.Logger) -> None:
    assert any(isinstance(h, logging.NullHandler) for h in package_logger.handlers)


def test_setup_adds_one_stream_handler(package_logger: logging.Logger) -> None:
    setup_logger("DEBUG")
    setup_logger("DEBUG")

    streams = [h for h in package_logger.handlers if not isinstance(h, logging.NullHandler)]
    assert len(streams) == 1
    assert package_logger.level == logging.DEBUG


def test_level_from_environment(package_logger: logging.Logger, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("UNION_LOANS_LOG_LEVEL", "warning")
    with patch("union_loans.utils.config.load_config"):
        setup_logger()
    assert package_logger.level == logging.WARNING


def test_unknown_level_name_falls_back_to_info(package_logger: logging.Logger) -> None:
    setup_logger("chatty")
    assert package_logger.level == logging.INFO


def test_child_logger() -> None:
    assert get_logger().name == "union_loans"
    assert get_logger("cache").name == "union_loans.cache"
