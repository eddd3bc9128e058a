"""Tests for the application logger utility."""

from __future__ import annotations

import logging
import logging.handlers

import todoist_cli.utils.logger as logger_mod
from todoist_cli.utils.logger import enable_debug_output, get_logger


def test_get_logger_creates_log_file(tmp_path):
    """Logger creates the log file inside user_log_dir."""
    logger = get_logger()

    assert (tmp_path / "logs" / "todoist.log").exists()
    assert isinstance(logger, logging.Logger)
    assert logger.name == "todoist_cli"


def test_get_logger_returns_singleton():
    assert get_logger() is get_logger()


def test_rotating_handler():
    handler = get_logger().handlers[0]
    assert isinstance(handler, logging.handlers.RotatingFileHandler)
    assert handler.maxBytes == 5 * 1024 * 1024
    assert handler.backupCount == 3


def test_does_not_propagate():
    assert get_logger().propagate is False


def test_module_loggers_reach_log_file(tmp_path):
    get_logger()
    logging.getLogger("todoist_cli.services.merge").info("merged something")

    text = (tmp_path / "logs" / "todoist.log").read_text()
    assert "merged something" in text
    assert "[todoist_cli.services.merge]" in text


def test_enable_debug_output_adds_stderr_handler_once():
    enable_debug_output()
    enable_debug_output()

    stream_handlers = [
        h
        for h in get_logger().handlers
        if type(h) is logging.StreamHandler
    ]
    assert len(stream_handlers) == 1
    assert logger_mod._debug_handler is stream_handlers[0]


def test_debug_output_written_to_stderr(capsys):
    enable_debug_output()
    get_logger().warning("visible on stderr")
    assert "visible on stderr" in capsys.readouterr().err
