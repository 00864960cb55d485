"""Tests for structured logging functionality."""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys
from datetime import date
from decimal import Decimal

import pytest

from debtsage.config import BaseConfig
from debtsage.errors import NoConvergenceError
from debtsage.logging_config import JSONFormatter, get_logger, setup_logging
from debtsage.services.debts import DebtSnapshot, calculate_payoff_plan


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Detach handlers installed by setup_logging so files are released."""
    yield
    logger = logging.getLogger("debtsage")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


def _record(**kwargs):
    record = logging.LogRecord(
        name="test.logger",
        level=kwargs.pop("level", logging.INFO),
        pathname="test.py",
        lineno=42,
        msg=kwargs.pop("msg", "Test message"),
        args=(),
        exc_info=kwargs.pop("exc_info", None),
    )
    record.module = "test_module"
    record.funcName = "test_function"
    for key, value in kwargs.items():
        setattr(record, key, value)
    return record


def test_json_formatter():
    """Test that JSONFormatter correctly formats log records."""
    log_data = json.loads(JSONFormatter().format(_record()))

    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "test.logger"
    assert log_data["message"] == "Test message"
    assert log_data["module"] == "test_module"
    assert log_data["function"] == "test_function"
    assert log_data["line"] == 42
    assert "timestamp" in log_data
    assert "extra" not in log_data


def test_json_formatter_with_exception():
    """Test that JSONFormatter correctly handles exceptions."""
    try:
        raise ValueError("Test error")
    except ValueError:
        exc_info = sys.exc_info()

    log_data = json.loads(
        JSONFormatter().format(_record(level=logging.ERROR, msg="Error occurred", exc_info=exc_info))
    )

    assert log_data["exception"]["type"] == "ValueError"
    assert "Test error" in log_data["exception"]["message"]
    assert log_data["exception"]["traceback"] is not None


def test_json_formatter_serialises_decimal_and_date_extras():
    record = _record(total_interest=Decimal("158.71"), payoff_date=date(2027, 3, 1))
    log_data = json.loads(JSONFormatter().format(record))

    assert log_data["extra"]["total_interest"] == "158.71"
    assert log_data["extra"]["payoff_date"] == "2027-03-01"


def test_setup_logging(tmp_path):
    """Test that logging setup creates log files with rotation."""
    config = BaseConfig()
    config.DATA_DIR = str(tmp_path)
    config.DEV_MODE = True

    logger = setup_logging(config)

    assert logger.name == "debtsage"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 2  # Console + File

    log_file = tmp_path / "logs" / "debtsage.log"
    assert log_file.exists()

    logger.info("Test info message")
    logger.warning("Test warning message")
    for handler in logger.handlers:
        handler.flush()

    lines = [line for line in log_file.read_text().splitlines() if line.strip()]
    assert len(lines) >= 3
    for line in lines:
        log_entry = json.loads(line)
        assert "timestamp" in log_entry
        assert "level" in log_entry
        assert "message" in log_entry
    assert json.loads(lines[0])["message"] == "Logging initialized"


def test_setup_logging_twice_does_not_duplicate_handlers(tmp_path):
    config = BaseConfig()
    config.DATA_DIR = str(tmp_path)

    setup_logging(config)
    logger = setup_logging(config)

    assert len(logger.handlers) == 2


def test_get_logger():
    """Test that get_logger returns properly namespaced loggers."""
    logger1 = get_logger("module1")
    logger2 = get_logger("module2")

    assert logger1.name == "debtsage.module1"
    assert logger2.name == "debtsage.module2"
    assert logger1 != logger2


@pytest.mark.parametrize("dev_mode", [True, False])
def test_logging_levels_by_mode(tmp_path, dev_mode):
    """Test that console logging level adjusts based on dev mode."""
    config = BaseConfig()
    config.DATA_DIR = str(tmp_path)
    config.DEV_MODE = dev_mode

    logger = setup_logging(config)

    console_handlers = [
        handler
        for handler in logger.handlers
        if isinstance(handler, logging.StreamHandler)
        and not isinstance(handler, logging.handlers.RotatingFileHandler)
    ]
    assert len(console_handlers) == 1

    expected_level = logging.INFO if dev_mode else logging.WARNING
    assert console_handlers[0].level == expected_level


def test_plan_calculation_is_logged(caplog, three_debts):
    with caplog.at_level(logging.INFO, logger="debtsage"):
        calculate_payoff_plan(three_debts, "avalanche", 500, date(2025, 1, 1))

    records = [r for r in caplog.records if r.getMessage() == "Payoff plan calculated"]
    assert len(records) == 1
    assert records[0].name == "debtsage.services.debts"
    assert records[0].strategy == "avalanche"
    assert records[0].debts == 3


def test_non_convergence_is_logged_as_warning(caplog):
    debts = [DebtSnapshot(id=1, balance="1000", interest_rate="24", min_payment="20")]
    with caplog.at_level(logging.INFO, logger="debtsage"):
        with pytest.raises(NoConvergenceError):
            calculate_payoff_plan(debts, "snowball", 20, date(2025, 1, 1), max_months=24)

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert [r.getMessage() for r in warnings] == ["Payoff simulation did not converge"]
    assert warnings[0].max_months == 24
