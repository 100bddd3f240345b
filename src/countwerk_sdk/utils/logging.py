from __future__ import annotations

import logging
import sys
from typing import Any, cast

import structlog


def configure_logging(level: str = "INFO", json: bool = True) -> None:
    """Route structlog events from the pricing engine and billing client to stdout.

    Events are rendered by a stdlib :class:`logging.StreamHandler`, so records
    from third-party loggers (``httpx``) share the same format.

    Args:
        level: Standard logging level name, e.g. ``"DEBUG"`` or ``"WARNING"``.
        json: Render JSON lines when ``True``, coloured console output otherwise.
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    renderer: structlog.types.Processor
    if json:
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
            foreign_pre_chain=pre_chain,
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level)


def get_logger(name: str, **initial_values: Any) -> structlog.BoundLogger:
    """Return a structlog logger named *name*, optionally pre-bound with context."""
    return cast(structlog.BoundLogger, structlog.get_logger(name, **initial_values))


def bind_pricing_context(**values: Any) -> None:
    """Bind key/values (e.g. ``profile_version_id``) to every event in this context."""
    structlog.contextvars.bind_contextvars(**values)


def clear_pricing_context() -> None:
    """Drop everything bound with :func:`bind_pricing_context`."""
    structlog.contextvars.clear_contextvars()
