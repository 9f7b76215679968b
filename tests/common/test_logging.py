import logging
import pytest
from unittest.mock import patch
from src.common.logging import log_execution_time, setup_logger

logger = logging.getLogger("tests.timing")

def test_setup_logger_is_idempotent():
    first = setup_logger("tests.setup", "debug")
    second = setup_logger("tests.setup")
    assert first is second
    assert len(second.handlers) == 1
    assert second.level == logging.INFO

def test_slow_call_warns(caplog):
    @log_execution_time(logger, slow_after=0.5)
    def write():
        return "ok"

    with patch("src.common.logging.time.perf_counter", side_effect=[0.0, 2.0]):
        with caplog.at_level(logging.DEBUG, logger="tests.timing"):
            assert write() == "ok"
    assert caplog.records[-1].levelno == logging.WARNING
    assert "write took 2.000s" in caplog.records[-1].message

def test_fast_call_logs_debug(caplog):
    @log_execution_time(logger)
    def write():
        return 1

    with caplog.at_level(logging.DEBUG, logger="tests.timing"):
        write()
    assert caplog.records[-1].levelno == logging.DEBUG

def test_failure_is_logged_and_raised(caplog):
    @log_execution_time(logger)
    def write():
        raise RuntimeError("disk full")

    with pytest.raises(RuntimeError):
        write()
    assert "write failed: disk full" in caplog.records[-1].message
