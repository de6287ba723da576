"""
Logging Configuration

Structured logging setup using structlog. Every canvassing component logs
snake_case event names with keyword context, e.g.
``logger.info("property_status_changed", property_id=..., new_status=...)``.
"""
import logging
import sys
from typing import Any, List, Optional

import structlog
from structlog.types import EventDict, Processor

from config.settings import settings

SERVICE_NAME = "canvasser"


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Stamp service and environment on every entry."""
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("environment", settings.environment)
    return event_dict


def _processors(log_format: str) -> List[Processor]:
    chain: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_app_context,
    ]
    if log_format == "console":
        chain.append(structlog.dev.ConsoleRenderer())
    else:
        chain.extend([
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ])
    return chain


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> structlog.BoundLogger:
    """
    Configure structured logging for the application.

    Args:
        log_level: Override for settings.log_level
        log_format: Override for settings.log_format ("json" or "console")

    Returns:
        Logger bound to the service name
    """
    level = logging.getLevelName((log_level or settings.log_level).upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    structlog.configure(
        processors=_processors(log_format or settings.log_format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger(SERVICE_NAME)


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """Logger for a module (pass __name__)."""
    return structlog.get_logger(name) if name else structlog.get_logger()
