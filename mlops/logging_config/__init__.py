"""Structured logging for the run registry.

Provides JSON / console formatters and performance timing for
repository operations.
"""

from mlops.logging_config.config import LogFormat, LoggingConfig, LogLevel
from mlops.logging_config.performance import log_performance
from mlops.logging_config.setup import configure_logging, get_logger

__all__ = [
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "configure_logging",
    "get_logger",
    "log_performance",
]
