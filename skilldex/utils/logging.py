"""
Structured logging for skilldex.

structlog is configured once at import. Console output is used by default;
set LOG_JSON=1 for one JSON object per line. The level comes from LOG_LEVEL,
falling back to the configured log_level; debug forces DEBUG.

Every entry emitted while a corpus scan or a disclosure query is in progress
carries its scan_id / query_id, so the entries of one refresh or one query
can be grouped.

Usage:
    from skilldex.utils.logging import get_logger

    logger = get_logger(__name__)
    logger.info("catalog_initialized", document_count=count)
    logger.warning("document_parse_failed", path=path, error=str(e))
"""

import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from uuid import uuid4

import structlog
from structlog.types import FilteringBoundLogger

from skilldex.config.settings import SkilldexSettings, settings

query_id_var: ContextVar[str | None] = ContextVar("query_id", default=None)
scan_id_var: ContextVar[str | None] = ContextVar("scan_id", default=None)

# Query text is user input of arbitrary length
MAX_QUERY_CHARS = 200


def add_context(
    logger: FilteringBoundLogger, method_name: str, event_dict: dict
) -> dict:
    """Attach the active scan/query ids."""
    if query_id := query_id_var.get():
        event_dict.setdefault("query_id", query_id)
    if scan_id := scan_id_var.get():
        event_dict.setdefault("scan_id", scan_id)
    return event_dict


def truncate_query(
    logger: FilteringBoundLogger, method_name: str, event_dict: dict
) -> dict:
    query = event_dict.get("query")
    if isinstance(query, str) and len(query) > MAX_QUERY_CHARS:
        event_dict["query"] = query[:MAX_QUERY_CHARS] + "..."
    return event_dict


def resolve_log_level(config: SkilldexSettings | None = None) -> str:
    """
    Pick the log level: DEBUG when debug is on, else LOG_LEVEL, else the
    configured log_level (SKILLDEX_LOG_LEVEL or .env).
    """
    config = config or settings
    if config.debug:
        return "DEBUG"
    return (os.getenv("LOG_LEVEL") or config.log_level).upper()


def configure_logging(log_level: str | None = None, json_logs: bool | None = None) -> None:
    """
    Configure structlog on top of the standard logging module.

    Args:
        log_level: Minimum level; resolved from settings when omitted
        json_logs: Render JSON instead of console output; read from LOG_JSON when omitted
    """
    if log_level is None:
        log_level = resolve_log_level()
    level = getattr(logging, log_level.upper(), logging.INFO)
    if json_logs is None:
        json_logs = os.getenv("LOG_JSON", "").lower() in ("true", "1", "yes")

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    processors = [
        structlog.contextvars.merge_contextvars,
        add_context,
        truncate_query,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback)
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "skilldex") -> FilteringBoundLogger:
    return structlog.get_logger(name)


@contextmanager
def scan_context(scan_id: str | None = None) -> Iterator[str]:
    """Tag log entries emitted inside the block with a scan id."""
    scan_id = scan_id or uuid4().hex[:12]
    token = scan_id_var.set(scan_id)
    try:
        yield scan_id
    finally:
        scan_id_var.reset(token)


@contextmanager
def query_context(query_id: str | None = None) -> Iterator[str]:
    """Tag log entries emitted inside the block with a query id."""
    query_id = query_id or uuid4().hex[:12]
    token = query_id_var.set(query_id)
    try:
        yield query_id
    finally:
        query_id_var.reset(token)


configure_logging()


__all__ = [
    "configure_logging",
    "get_logger",
    "query_context",
    "scan_context",
]
