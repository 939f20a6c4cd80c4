"""
Structured JSON logging for repository operations.

Records emitted by the template and repositories carry Cosmos DB context
(container, entity, operation, request charge, activity id) as ``extra``
fields. StructuredJsonFormatter groups them under a ``cosmos`` key so log
queries can filter on them without parsing messages.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any

PACKAGE_LOGGER = "cosmos_repository"

COSMOS_CONTEXT_FIELDS = ("container", "entity", "operation", "request_charge", "activity_id")


class StructuredJsonFormatter(logging.Formatter):
    """
    Single-line JSON formatter.

    Output fields:
    - timestamp: ISO 8601 in UTC
    - level, logger, message
    - cosmos: the Cosmos context fields present on the record
    - exception: formatted traceback, when there is one
    """

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = {
            name: getattr(record, name)
            for name in COSMOS_CONTEXT_FIELDS
            if getattr(record, name, None) is not None
        }
        if context:
            log_obj["cosmos"] = context

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=str)


def configure_structured_logging(
    level: int = logging.INFO,
    logger_name: str | None = PACKAGE_LOGGER,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """
    Send a logger's records to a stream as structured JSON.

    Args:
        level: Logging level (default: INFO)
        logger_name: Logger to configure (default: the package logger,
            None for the root logger)
        stream: Destination (default: stdout)

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)

    # Replace handlers so repeated calls do not duplicate output
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(StructuredJsonFormatter())

    logger.addHandler(handler)
    logger.setLevel(level)

    return logger


class RepositoryLoggerAdapter(logging.LoggerAdapter):
    """Stamps the container and entity of one repository on its records."""

    def __init__(self, logger: logging.Logger, entity_information: Any):
        super().__init__(
            logger,
            {
                "container": entity_information.container_name,
                "entity": entity_information.domain_class.__name__,
            },
        )

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        # Per-call extra (e.g. operation) is kept alongside the repository context
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs
