"""Tests for structured logging setup and performance timing."""

import json
import logging
import sys

import pytest

from mlops.logging_config import (
    LogFormat,
    LoggingConfig,
    LogLevel,
    configure_logging,
    get_logger,
    log_performance,
)
from mlops.logging_config.setup import ConsoleFormatter, StructuredFormatter
from mlops.settings import Settings


def _record(msg="hello", level=logging.INFO, **extra):
    record = logging.LogRecord("mlops.test", level, __file__, 10, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLoggingConfig:
    def test_defaults(self):
        cfg = LoggingConfig()
        assert cfg.level == LogLevel.INFO
        assert cfg.format == LogFormat.JSON
        assert cfg.service_name == "mlops"
        assert "sqlalchemy.engine" in cfg.quiet_loggers

    def test_from_settings(self):
        cfg = LoggingConfig.from_settings(
            Settings(log_level="debug", log_format="console", service_name="trainer")
        )
        assert cfg.level == LogLevel.DEBUG
        assert cfg.format == LogFormat.CONSOLE
        assert cfg.service_name == "trainer"

    def test_from_settings_ignores_unknown_values(self):
        cfg = LoggingConfig.from_settings(Settings(log_level="loud", log_format="xml"))
        assert cfg.level == LogLevel.INFO
        assert cfg.format == LogFormat.JSON


class TestFormatters:
    def test_structured_formatter_emits_json(self):
        formatter = StructuredFormatter(service_name="mlops")
        entry = json.loads(formatter.format(_record(run_id="r-1", version=3)))
        assert entry["message"] == "hello"
        assert entry["level"] == "INFO"
        assert entry["service"] == "mlops"
        assert entry["run_id"] == "r-1"
        assert entry["version"] == 3
        assert "line" in entry

    def test_structured_formatter_without_caller(self):
        formatter = StructuredFormatter(include_caller=False)
        entry = json.loads(formatter.format(_record()))
        assert "module" not in entry

    def test_structured_formatter_includes_exception(self):
        formatter = StructuredFormatter()
        try:
            raise ValueError("bad input")
        except ValueError:
            record = _record(level=logging.ERROR)
            record.exc_info = sys.exc_info()
        entry = json.loads(formatter.format(record))
        assert entry["exception"]["type"] == "ValueError"
        assert entry["exception"]["message"] == "bad input"

    def test_console_formatter_includes_bound_fields(self):
        line = ConsoleFormatter().format(_record(msg="registered", experiment_id="e-1"))
        assert "INFO" in line
        assert "registered" in line
        assert "experiment_id=e-1" in line


class TestConfigureLogging:
    def test_json_handler_installed(self, restore_root_logger):
        configure_logging(LoggingConfig(level=LogLevel.WARNING))
        root = restore_root_logger
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)
        assert root.level == logging.WARNING
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    def test_env_overrides(self, restore_root_logger, monkeypatch):
        monkeypatch.setenv("MLOPS_LOG_LEVEL", "debug")
        monkeypatch.setenv("MLOPS_LOG_FORMAT", "console")
        configure_logging()
        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, ConsoleFormatter)

    def test_get_logger(self):
        assert get_logger("mlops.x") is logging.getLogger("mlops.x")


class TestLogPerformance:
    def test_returns_result_and_logs_debug(self, caplog):
        @log_performance(threshold_ms=60_000, logger_name="mlops.perf")
        def add(a, b):
            return a + b

        with caplog.at_level(logging.DEBUG, logger="mlops.perf"):
            assert add(2, 3) == 5

        assert any("completed in" in r.getMessage() for r in caplog.records)
        assert all(hasattr(r, "duration_ms") for r in caplog.records)

    def test_slow_call_logs_warning(self, caplog):
        @log_performance(threshold_ms=0, logger_name="mlops.perf")
        def noop():
            return None

        with caplog.at_level(logging.DEBUG, logger="mlops.perf"):
            noop()

        assert any(
            r.levelno == logging.WARNING and "Slow operation" in r.getMessage()
            for r in caplog.records
        )

    def test_failure_is_logged_and_reraised(self, caplog):
        @log_performance(logger_name="mlops.perf")
        def fail():
            raise KeyError("missing")

        with caplog.at_level(logging.DEBUG, logger="mlops.perf"):
            with pytest.raises(KeyError):
                fail()

        assert any(
            r.levelno == logging.ERROR and "KeyError" in r.getMessage()
            for r in caplog.records
        )

    def test_preserves_function_metadata(self):
        @log_performance()
        def documented():
            """Docstring."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docstring."
