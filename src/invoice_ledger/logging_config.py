"""structlog setup for Invoice Ledger.

Console output is colored key/value lines for interactive use; JSON output is
one object per line for log shippers. Both go to stderr through the standard
library, so command output on stdout is never mixed with log events.
"""

import logging
import sys
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from invoice_ledger.config import Settings, get_settings


def _plain_values(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_plain_values(item) for item in value]
    return value


def render_domain_values(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Turn Decimals and enums (tax rates, statuses) into plain strings."""
    return {key: _plain_values(value) for key, value in event_dict.items()}


def _add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    settings = get_settings()
    event_dict["app"] = settings.app_name
    event_dict["environment"] = settings.environment.value
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        render_domain_values,
    ]


def get_console_processors() -> list[Processor]:
    """Processors for development output."""
    return [
        *_shared_processors(),
        structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        ),
    ]


def get_json_processors() -> list[Processor]:
    """Processors for production output."""
    return [
        *_shared_processors(),
        _add_app_context,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(sort_keys=True),
    ]


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the stdlib root logger from settings.

    Called once by the CLI before a command runs. Library use without this
    call falls back to structlog's defaults.
    """
    if settings is None:
        settings = get_settings()

    level = getattr(logging, settings.log_level.value)
    processors = (
        get_json_processors() if settings.log_format == "json" else get_console_processors()
    )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    if settings.log_file:
        _add_file_handler(settings.log_file, level)


def _add_file_handler(log_file: Path, level: int) -> None:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logging.getLogger().addHandler(handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger, e.g. ``logger = get_logger(__name__)``."""
    return structlog.stdlib.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Bind keys for the duration of a block.

    Example:
        with LogContext(source_file="documents.json"):
            documents = load_documents_file("documents.json")
    """

    def __init__(self, **kwargs: Any) -> None:
        self.kwargs = kwargs

    def __enter__(self) -> "LogContext":
        bind_context(**self.kwargs)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.kwargs)
