"""Logging setup for the review gate.

Logs go through structlog and are written to stderr, because stdout carries the
workflow commands that the Actions runner parses. Standard `logging` records from
libraries (httpx) are routed through the same formatter.

```
from src.logging_config import get_logger

logger = get_logger(__name__)
logger.info("Fetched reviews", review_count=3)
```

`LOG_LEVEL` sets the level (default INFO). `LOG_RENDERER=json` switches from the
console renderer to JSON lines.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog
import structlog.contextvars

LOG_LEVEL_ENV_VAR = "LOG_LEVEL"
LOG_RENDERER_ENV_VAR = "LOG_RENDERER"


def _get_log_renderer() -> structlog.types.Processor:
    """Return the JSON renderer when requested, the console renderer otherwise."""
    if os.getenv(LOG_RENDERER_ENV_VAR, "").lower() == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=False,
        pad_event=0,
        exception_formatter=structlog.dev.plain_traceback,
        sort_keys=True,
    )


def configure_logging(level: str | None = None) -> None:
    """Configure structlog and the root logger to write to stderr."""
    common_processors: list[structlog.types.Processor] = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.contextvars.merge_contextvars,
    ]

    structlog.configure(
        processors=[
            *common_processors,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_get_log_renderer(),
            foreign_pre_chain=common_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(stream_handler)

    log_level = (level or os.getenv(LOG_LEVEL_ENV_VAR, "INFO")).upper()
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))
    # httpx logs every request at INFO; keep it for debug runs only.
    httpx_level = logging.DEBUG if root_logger.level <= logging.DEBUG else logging.WARNING
    logging.getLogger("httpx").setLevel(httpx_level)


# Binds values for the duration of a `with` block and restores the previous ones on exit.
log_context = structlog.contextvars.bound_contextvars


def get_logger(name: str, **kwargs: Any) -> structlog.BoundLogger:
    """Get a structlog logger bound to `name`."""
    return structlog.get_logger(name, **kwargs)
