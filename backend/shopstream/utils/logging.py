# /shopstream/utils/logging.py

import logging
import sys
from typing import List

import structlog

from shopstream.config.settings import settings

# Every module logs through logging.getLogger(__name__); records are rendered
# by structlog. Request method and path bound by the HTTP middleware are
# merged into each line.

QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "openai")


def shared_processors() -> List:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def renderer_for(environment: str):
    """Readable console lines in development, one JSON object per line elsewhere."""
    if environment == "development":
        return structlog.dev.ConsoleRenderer(colors=False)
    return structlog.processors.JSONRenderer()


def setup_logging(environment: str = settings.environment, level: str = settings.log_level) -> logging.Handler:
    """
    Routes stdlib logging through structlog and returns the installed handler.

    Safe to call more than once (the lifespan runs per TestClient): a handler
    installed by an earlier call is replaced, not stacked.
    """
    processors = shared_processors()
    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer_for(environment),
        ],
        foreign_pre_chain=processors,
    ))

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if isinstance(existing.formatter, structlog.stdlib.ProcessorFormatter):
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level.upper())

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler
