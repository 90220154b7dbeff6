"""
Structured JSON logging for the life expectancy pipeline

Modules log through get_logger(__name__). Loggers inside the lifeexp
package share one handler installed on the "lifeexp" logger, configured
from LOG_LEVEL and LOG_FORMAT on first use.
"""
import logging
import os
import sys
import time
from typing import Any

from pythonjsonlogger import jsonlogger

PACKAGE_LOGGER_NAME = "lifeexp"

JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(module)s %(funcName)s %(message)s"
TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s - %(message)s"


class PipelineJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter with stable key names: timestamp, level, logger,
    module, function, message, plus any `extra` fields.
    """

    def __init__(self):
        super().__init__(
            fmt=JSON_FORMAT,
            datefmt="%Y-%m-%dT%H:%M:%S",
            rename_fields={
                "asctime": "timestamp",
                "levelname": "level",
                "name": "logger",
                "funcName": "function",
            },
        )


def setup_logger(
    name: str = PACKAGE_LOGGER_NAME,
    level: str | None = None,
    format_type: str | None = None,
) -> logging.Logger:
    """
    Install a single stdout handler on a logger

    Args:
        name: Logger name
        level: Log level name, defaults to LOG_LEVEL or INFO
        format_type: "json" or "text", defaults to LOG_FORMAT or "json"

    Returns:
        Configured logger instance
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = logging.getLevelName(level_name)
    if not isinstance(log_level, int):
        log_level = logging.INFO
    format_type = (format_type or os.getenv("LOG_FORMAT", "json")).lower()

    handler = logging.StreamHandler(sys.stdout)
    if format_type == "json":
        handler.setFormatter(PipelineJsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(fmt=TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    logger = logging.getLogger(name)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(log_level)
    logger.propagate = False
    return logger


def get_logger(name: str = PACKAGE_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger, configuring its handler on first use

    Loggers under the lifeexp package propagate to the package logger,
    which is configured once; any other name gets its own handler.
    """
    in_package = name == PACKAGE_LOGGER_NAME or name.startswith(PACKAGE_LOGGER_NAME + ".")
    owner = logging.getLogger(PACKAGE_LOGGER_NAME if in_package else name)
    if not owner.handlers:
        setup_logger(owner.name)
    return logging.getLogger(name)


class log_operation:
    """
    Context manager logging the start, end and duration of a pipeline step

    Fields passed to annotate() inside the block are added to the
    completion record.

    Usage:
        with log_operation("deduplicate", logger=logger, dataset_id="wle") as op:
            store, stats = deduplicator.run(store)
            op.annotate(**stats)
    """

    def __init__(self, operation_name: str, logger: logging.Logger | None = None, **extra_fields):
        self.operation_name = operation_name
        self.logger = logger or get_logger()
        self.fields: dict[str, Any] = {"operation": operation_name, **extra_fields}
        self.result_fields: dict[str, Any] = {}
        self.duration: float | None = None
        self._started: float | None = None

    def annotate(self, **fields) -> None:
        self.result_fields.update(fields)

    def __enter__(self):
        self._started = time.perf_counter()
        self.logger.info(f"Starting: {self.operation_name}", extra=self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self._started
        fields = {**self.fields, **self.result_fields, "duration_seconds": round(self.duration, 3)}

        if exc_type is None:
            self.logger.info(f"Completed: {self.operation_name}", extra={**fields, "status": "success"})
        else:
            self.logger.error(
                f"Failed: {self.operation_name}",
                extra={
                    **fields,
                    "status": "error",
                    "error_type": exc_type.__name__,
                    "error_message": str(exc_val),
                },
                exc_info=True,
            )
        return False
