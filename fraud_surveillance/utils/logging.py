"""structlog setup for the scoring workflow.

Workflow components log snake_case events with keyword fields. Everything
logged inside a submission carries its ``submission_id`` through contextvars,
including the events of every retry attempt.
"""

import sys
import uuid
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import structlog
from structlog.contextvars import bound_contextvars, merge_contextvars

from fraud_surveillance.config.settings import settings


def configure_structured_logging(
    level: Optional[str] = None, log_format: Optional[str] = None
) -> None:
    """Install the structlog processor chain.

    Console rendering is used only when stderr is a terminal and the format
    is ``console``; any other combination renders JSON lines.
    """
    level = (level or settings.log_level).upper()
    log_format = (log_format or settings.log_format).lower()

    processors: list[Any] = [
        merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]
    if sys.stderr.isatty() and log_format == "console":
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_structured_logger(name: str, component: Optional[str] = None, **context: Any):
    """Return a structlog logger bound to ``component`` and any extra fields."""
    log = structlog.get_logger(name)
    if component:
        context["component"] = component
    return log.bind(**context) if context else log


def new_submission_id() -> str:
    return uuid.uuid4().hex


@contextmanager
def submission_context(entity_id: str, action: str) -> Iterator[str]:
    """Bind a fresh submission id for everything logged inside the block.

    Example:
        >>> with submission_context("ann-001", "content-analysis") as submission_id:
        ...     log.info("evidence_submitted")  # carries submission_id
    """
    submission_id = new_submission_id()
    with bound_contextvars(submission_id=submission_id, entity_id=entity_id, action=action):
        yield submission_id


configure_structured_logging()


__all__ = [
    "configure_structured_logging",
    "get_structured_logger",
    "new_submission_id",
    "submission_context",
]
