"""structlog configuration for the ingestion service.

Console output is human-readable in development and JSON lines elsewhere.
When LOG_FILE is set, every event is also appended (as JSON) to a size-rotated
file so operators can grep past ingestion batches after a restart.
"""

from __future__ import annotations

import logging
import logging.handlers
import sys

import structlog

from menu_ingest.config import settings

LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def _add_service_name(
    _logger: structlog.types.WrappedLogger, _method: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    event_dict.setdefault("service", settings.service_name)
    return event_dict


def _file_handler(path: str, shared: list[structlog.types.Processor]) -> logging.Handler | None:
    """Rotating JSON file handler, or None if the file cannot be opened."""
    try:
        handler = logging.handlers.RotatingFileHandler(
            path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS
        )
    except OSError as exc:
        # structlog is not configured yet
        print(
            f"WARNING: Could not open log file {path!r}: {exc}. Logging to stdout only.",
            file=sys.stderr,
        )
        return None
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.JSONRenderer(),
            ],
        )
    )
    return handler


def configure_logging() -> None:
    """Route structlog through stdlib logging with a console and optional file sink."""
    shared: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _add_service_name,
    ]

    console_renderer: structlog.types.Processor = (
        structlog.dev.ConsoleRenderer()
        if settings.environment == "development"
        else structlog.processors.JSONRenderer()
    )
    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                console_renderer,
            ],
        )
    )

    handlers: list[logging.Handler] = [console]
    if settings.log_file:
        file_handler = _file_handler(settings.log_file, shared)
        if file_handler is not None:
            handlers.append(file_handler)

    level = logging.getLevelNamesMapping().get(settings.log_level.upper(), logging.INFO)
    root = logging.getLogger()
    root.handlers = handlers
    root.setLevel(level)

    structlog.configure(
        processors=[
            *shared,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
