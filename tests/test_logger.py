"""Tests for logging setup and helpers."""

from __future__ import annotations

import logging
import sys

import pytest

from stack_combiner.utils.helpers import get_file_size_str, time_function
from stack_combiner.utils.logger import LogCapture, setup_logger


def test_console_only_logger():
    logger = setup_logger(debug=True, log_to_file=False)

    assert logger.name == "stack_combiner"
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_file_logger_writes_to_log_dir(tmp_path):
    logger = setup_logger(log_dir=tmp_path)
    logger.info("hello from the test")
    for handler in logger.handlers:
        handler.flush()

    log_files = list(tmp_path.glob("combiner_*.log"))
    assert len(log_files) == 1
    assert "hello from the test" in log_files[0].read_text()


def test_setup_registers_exception_hook():
    setup_logger(log_to_file=False)

    assert sys.excepthook is not sys.__excepthook__


def test_log_capture_records_messages():
    logger = setup_logger(log_to_file=False)

    with LogCapture(logger, "addition") as capture:
        logger.info("inside")

    assert capture.get_logs() == ["inside"]


def test_log_capture_does_not_swallow_errors():
    logger = setup_logger(log_to_file=False)

    with pytest.raises(RuntimeError), LogCapture(logger, "addition"):
        raise RuntimeError("boom")


def test_log_capture_times_and_counts_warnings(caplog):
    logger = setup_logger(log_to_file=False)

    with caplog.at_level(logging.INFO, logger="stack_combiner"):
        with LogCapture(logger, "serial addition") as capture:
            logger.info("adding")
            logger.warning("ranks differ")

    assert capture.elapsed >= 0
    assert [record.getMessage() for record in capture.warnings] == ["ranks differ"]
    assert capture not in logger.handlers
    assert caplog.messages[0] == "Starting serial addition"
    assert caplog.messages[-1].startswith("Finished serial addition in ")
    assert caplog.messages[-1].endswith("(1 warnings)")


def test_log_capture_logs_failure(caplog):
    logger = setup_logger(log_to_file=False)

    with caplog.at_level(logging.ERROR, logger="stack_combiner"):
        with pytest.raises(ValueError), LogCapture(logger, "loop addition"):
            raise ValueError("bad input")

    assert any(message.startswith("loop addition failed after") and "bad input" in message
               for message in caplog.messages)


def test_time_function_logs_duration(caplog):
    @time_function
    def work():
        return 42

    with caplog.at_level(logging.DEBUG, logger="stack_combiner"):
        assert work() == 42

    assert any("Function work took" in message for message in caplog.messages)


def test_file_size_str(tmp_path):
    path = tmp_path / "data.bin"
    path.write_bytes(b"x" * 2048)

    assert get_file_size_str(str(path)) == "2.00 KB"
    assert get_file_size_str(str(tmp_path / "missing")) == "N/A"
