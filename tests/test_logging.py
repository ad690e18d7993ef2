"""Tests for jacquez logging setup."""

from __future__ import annotations

import logging

from jacquez.logging import CONSOLE_FORMAT, VERBOSE_FORMAT, configure_logging, get_logger


def test_get_logger_nests_under_package_logger() -> None:
    assert get_logger().name == "jacquez"
    assert get_logger("github").name == "jacquez.github"


def test_reconfiguring_replaces_handlers() -> None:
    configure_logging(verbose=True)
    logger = configure_logging()

    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert logger.handlers[0].formatter._fmt == CONSOLE_FORMAT


def test_verbose_console_names_subsystem(tmp_path) -> None:
    log_file = tmp_path / "jacquez.log"

    logger = configure_logging(verbose=True, log_file=log_file)
    get_logger("guidelines").debug("Loading contributing guidelines")
    for handler in logger.handlers:
        handler.flush()

    assert logger.level == logging.DEBUG
    assert logger.handlers[0].formatter._fmt == VERBOSE_FORMAT
    assert "DEBUG jacquez.guidelines: Loading contributing guidelines" in log_file.read_text(encoding="utf-8")
    configure_logging()
