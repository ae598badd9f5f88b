"""
Logging utilities for the object fetcher.

Provides structured logging with JSON or console output.
"""

import logging
import sys
from typing import Any, Optional

import structlog


def setup_fetcher_logger(name: str, level: str = "INFO", json_logs: bool = False) -> structlog.BoundLogger:
    """
    Set up structured logging for the fetcher.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_logs: Whether to output JSON format logs

    Returns:
        Configured structlog logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
    )
    logging.getLogger().setLevel(log_level)

    # SDK internals are chatty at DEBUG
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    if json_logs:
        processors = [
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.dev.ConsoleRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger(name)


def get_fetcher_logger(name: str) -> structlog.BoundLogger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return structlog.get_logger(name)


class FetcherLoggerAdapter:
    """
    Logger adapter that adds fetcher context to all log messages.
    """

    def __init__(self, logger: structlog.BoundLogger, processor_id: str):
        self.logger = logger.bind(processor_id=processor_id)
        self.processor_id = processor_id

    def log_fetch_succeeded(
        self, unit_id: str, bucket: str, key: str, content_length: int, transfer_millis: int, **kwargs: Any
    ) -> None:
        """Log a successful retrieval"""
        self.logger.info(
            "fetch_succeeded",
            unit_id=unit_id,
            bucket=bucket,
            key=key,
            content_length=content_length,
            transfer_millis=transfer_millis,
            **kwargs,
        )

    def log_fetch_failed(
        self,
        unit_id: str,
        error_type: str,
        error_message: str,
        bucket: Optional[str] = None,
        key: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        """Log a failure that routes the unit to failure"""
        self.logger.error(
            "fetch_failed",
            unit_id=unit_id,
            bucket=bucket,
            key=key,
            error_type=error_type,
            error_message=error_message,
            **kwargs,
        )

    def info(self, message: str, **kwargs: Any) -> None:
        self.logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.logger.error(message, **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        self.logger.debug(message, **kwargs)
