"""Structured JSON logging configuration using structlog.

Call ``configure_logging()`` once at application startup in ``api/main.py``.
Modules then use either the stdlib logging API or structlog directly:

Stdlib usage (scraper internals)::

    import logging
    logger = logging.getLogger(__name__)
    logger.info("scraper: fetched %s", url)

Structlog usage (service and API layers)::

    import structlog
    logger = structlog.get_logger(__name__)
    logger.info("profile_job_created", job_id=job.id, total_urls=3)

A ``request_id`` context variable is populated by the request-logging
middleware in ``api/main.py``; the job controller wraps each run in
:func:`job_log_context`, which binds ``job_id``.  Both are merged into every
record emitted inside that context.

Rendered page markup and "about" text are personal data and can run to
hundreds of kilobytes; :func:`_clip_profile_text` shortens them before any
renderer sees them.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

import structlog
from structlog.types import EventDict, WrappedLogger

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
"""Per-request ID propagated from the HTTP middleware to log processors."""


_SECRET_SUBSTRINGS: frozenset[str] = frozenset({
    "api_key",
    "apikey",
    "x-goog-api-key",
    "password",
    "secret",
    "token",
    "authorization",
    "cookie",
})
"""Lower-cased substrings that identify event-dict keys whose values must be
redacted before the record reaches any renderer."""


def _redact_secrets(
    logger: WrappedLogger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Replace values of secret-bearing keys with a redaction marker.

    Scans top-level keys and one level of nested ``dict`` values
    (e.g. ``headers={...}``).  Matching is case-insensitive.
    """
    redacted = "[REDACTED]"
    for key in list(event_dict.keys()):
        key_lower = key.lower()
        if any(secret in key_lower for secret in _SECRET_SUBSTRINGS):
            event_dict[key] = redacted
            continue
        val = event_dict[key]
        if isinstance(val, dict):
            for nested_key in list(val.keys()):
                if any(secret in str(nested_key).lower() for secret in _SECRET_SUBSTRINGS):
                    val[nested_key] = redacted
    return event_dict


_PROFILE_TEXT_KEYS: frozenset[str] = frozenset({"html", "markup", "about", "about_text"})

#: Characters of profile text kept in a log record.
MAX_LOGGED_TEXT_CHARS: int = 120


def _clip_profile_text(
    logger: WrappedLogger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Shorten profile markup and about text to a prefix plus their length."""
    for key in _PROFILE_TEXT_KEYS.intersection(event_dict):
        value = event_dict[key]
        if isinstance(value, str) and len(value) > MAX_LOGGED_TEXT_CHARS:
            event_dict[key] = f"{value[:MAX_LOGGED_TEXT_CHARS]}... [{len(value)} chars]"
    return event_dict


def _inject_request_id(
    logger: WrappedLogger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Add the current request ID to the event dict unless already bound."""
    rid = request_id_var.get()
    if rid is not None and "request_id" not in event_dict:
        event_dict["request_id"] = rid
    return event_dict


def configure_logging(log_level: str = "INFO") -> None:
    """Configure structlog and stdlib logging.

    ``DEBUG`` selects structlog's coloured ``ConsoleRenderer``; every other
    level emits newline-delimited JSON on stdout.  Stdlib ``logging`` records
    are routed through the same processor chain, so both APIs produce
    identical output.

    Safe to call repeatedly (tests do): the root handler is replaced, not
    appended.

    Args:
        log_level: Logging verbosity string, case-insensitive.
    """
    level_upper = log_level.upper()
    numeric_level = getattr(logging, level_upper, logging.INFO)
    is_development = level_upper == "DEBUG"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _inject_request_id,
        _redact_secrets,
        _clip_profile_text,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if is_development:
        final_renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer(
            colors=True,
        )
    else:
        final_renderer = structlog.processors.JSONRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            final_renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    # Playwright's driver and httpx are chatty at INFO.
    if not is_development:
        for noisy_logger in ("uvicorn.access", "httpx", "httpcore", "asyncio"):
            logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@contextmanager
def job_log_context(job_id: str) -> Iterator[None]:
    """Bind ``job_id`` to every record emitted while one job is processed.

    Works across ``await`` points because structlog stores the binding in a
    context variable, which each asyncio task copies on creation.
    """
    with structlog.contextvars.bound_contextvars(job_id=job_id):
        yield
