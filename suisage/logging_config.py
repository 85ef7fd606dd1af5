"""
Logging setup for the SuiSage server and CLI.

Every record, whether it comes from structlog or a plain ``logging`` logger,
goes through one ``ProcessorFormatter`` so the ``query_id`` and ``request_id``
bound in contextvars appear on each line a query produces.
"""

import logging
import sys
from typing import List, Optional, TextIO

import structlog

from .config import settings

SERVICE_NAME = "suisage"

# HTTP clients log every request at INFO; the SDK repeats its retries.
QUIET_LOGGERS = ("uvicorn.access", "httpcore", "httpx", "anthropic")


def _add_service(logger, method_name, event_dict):
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _pre_chain(json_logs: bool) -> List[structlog.types.Processor]:
    processors: List[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_logs:
        processors += [_add_service, structlog.processors.format_exc_info]
    return processors


def _resolve_level(log_level: Optional[str]) -> int:
    name = (log_level or settings.log_level or "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def setup_logging(
    log_level: Optional[str] = None,
    json_logs: Optional[bool] = None,
    stream: Optional[TextIO] = None,
) -> logging.Handler:
    """Install the root handler and configure structlog.

    ``json_logs`` defaults to ``settings.log_json``; when that is unset too,
    DEBUG gets the console renderer and every other level gets JSON lines.
    Returns the installed handler.
    """
    level = _resolve_level(log_level)
    if json_logs is None:
        json_logs = settings.log_json if settings.log_json is not None else level != logging.DEBUG

    pre_chain = _pre_chain(json_logs)
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return handler
