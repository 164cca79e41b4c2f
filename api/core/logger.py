"""structlog configuration shared by the CLI, services and scripts.

Every record, whether it comes from structlog or from stdlib loggers such as
sqlalchemy and alembic, goes through one stdout handler. Context bound for a
unit of work (see core.database.session_scope) is merged into each record,
so a service's "task.created" line carries the operation and owner_id that
the caller opened the unit of work with.

Usage:
    from core import get_logger
    logger = get_logger(__name__)
    logger.info("task.created", task_id=42, owner_id=7)
"""

import logging
import sys

import structlog
from structlog.types import Processor

from core.config import Settings, get_settings

__all__ = ["configure_logging", "get_logger"]

# Chatty at INFO; only their warnings are interesting here
_QUIET_LOGGERS = ("aiosqlite", "sqlalchemy.engine.Engine")


def _renderer(settings: Settings) -> Processor:
    if settings.log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stdout.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
    )


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and stdlib logging. Call once at process startup.

    Level and output format come from settings (LOG_LEVEL, LOG_FORMAT).
    Calling it again replaces the previous handler.
    """
    settings = settings or get_settings()

    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                _renderer(settings),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(settings.log_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Example:
        logger = get_logger(__name__)
        logger.warning("task.ownership.rejected", task_id=9, owner_id=2)
    """
    return structlog.stdlib.get_logger(name)
