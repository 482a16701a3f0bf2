"""
structlog setup for the ledger service.

Development gets colored console output; staging and production emit one
JSON object per line. Quantities and prices are Decimals throughout the
ledger, so they are rendered as plain strings before either renderer sees
them.
"""

import logging
import sys
from decimal import Decimal
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from stockledger.config.settings import get_settings

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("aiosqlite", "uvicorn.access")


def add_service_info(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    settings = get_settings()
    event_dict.setdefault("service", settings.app_name)
    event_dict.setdefault("version", settings.app_version)
    event_dict.setdefault("env", settings.environment)
    return event_dict


def render_decimals(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Render Decimal values as ``"25"`` rather than ``Decimal('25')``."""
    for key, value in event_dict.items():
        if isinstance(value, Decimal):
            event_dict[key] = _decimal_text(value)
        elif isinstance(value, (list, tuple)):
            event_dict[key] = [_decimal_text(v) if isinstance(v, Decimal) else v for v in value]
    return event_dict


def _decimal_text(value: Decimal) -> str:
    if not value.is_finite():
        return str(value)
    return format(value.normalize(), "f")


def _renderer(environment: str) -> list[Processor]:
    if environment == "development":
        return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]
    return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]


def configure_logging(level: str | None = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        level: Override for ``Settings.log_level``
    """
    settings = get_settings()
    level = level or settings.log_level

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        add_service_info,
        render_decimals,
        *_renderer(settings.environment),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=getattr(logging, level))
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_ledger_context(**values: Any) -> None:
    """Bind tenant or key fields onto every log line for the current task."""
    structlog.contextvars.bind_contextvars(**{k: v for k, v in values.items() if v is not None})
