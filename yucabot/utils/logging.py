"""Structured logging for the API server and the CLI.

Every record, whether it comes from structlog or from a standard-library
logger (uvicorn, httpx, the Supabase client), passes through one processor
chain and ends in one renderer: JSON in production, a console renderer
everywhere else.

Request-scoped fields live in :mod:`structlog.contextvars`.  The request
logging middleware binds a ``request_id`` with :func:`bind_request_context`,
so every event logged while that request is served carries it.

Provider credentials must never reach a log line.  ``_redact_secrets`` masks
any event key that looks like one, whichever module logged it.
"""

import logging
import sys
import uuid
from collections.abc import MutableMapping
from typing import Any

import structlog

_REDACTED = "***"
_SECRET_KEY_MARKERS = ("api_key", "service_role_key", "authorization", "password", "token")

# Third-party loggers that are too chatty at INFO.  httpx logs one line per
# provider call, which the providers already log with more context.
_NOISY_LOGGERS: dict[str, int] = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "hpack": logging.WARNING,
}


def _redact_secrets(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    for key in event_dict:
        if any(marker in key.lower() for marker in _SECRET_KEY_MARKERS) and event_dict[key]:
            event_dict[key] = _REDACTED
    return event_dict


def _processor_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _redact_secrets,
    ]


def _select_renderer(json_output: bool) -> structlog.types.Processor:
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> structlog.BoundLogger:
    """Route structlog and stdlib logging through one renderer.

    Args:
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR).
        json_output: Render JSON lines instead of console output.
                     ``yucabot.main`` turns this on for ``APP_ENV=production``.

    Returns:
        The root structlog logger.
    """
    level_name = log_level.upper()
    processors = _processor_chain()
    renderer = _select_renderer(json_output)

    structlog.configure(
        processors=[*processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level_name)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *processors,
                renderer,
            ],
        )
    )
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level_name)

    for name, level in _NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(max(level, root_logger.level))

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structlog logger bound to ``name``, configuring defaults if needed."""
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(logger_name=name)


def bind_request_context(request_id: str | None = None, **fields: Any) -> str:
    """Start a fresh logging context for one request and return its id.

    A missing *request_id* gets a random hex id.  Any earlier bindings in
    this context are dropped.
    """
    request_id = request_id or uuid.uuid4().hex
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, **fields)
    return request_id


def clear_request_context() -> None:
    """Drop every request-scoped logging field."""
    structlog.contextvars.clear_contextvars()
