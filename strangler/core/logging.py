"""Logging helpers and structlog configuration.

Library modules log through stdlib ``logging``. Applications that want
structured output call `configure_structlog()` once at startup: it puts a
``structlog.stdlib.ProcessorFormatter`` on the ``strangler`` logger, so
stdlib records and structlog events go through the same processors and
renderer.

ContextVar injection:
  The dispatcher stores the mode resolved for the current call in
  ``_mode_var``; every line rendered during that call carries it as
  ``strangler_mode``, including lines from the comparison task (asyncio
  copies the context).
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator, Optional, TextIO

import structlog

_mode_var: ContextVar[str] = ContextVar("strangler_mode", default="")


def get_current_mode() -> str:
    """Return the mode of the call in progress, or empty string if none."""
    return _mode_var.get()


@contextmanager
def bind_mode(mode: str) -> Iterator[None]:
    """Expose ``mode`` to log processors for the duration of one call."""
    token = _mode_var.set(mode)
    try:
        yield
    finally:
        _mode_var.reset(token)


def _inject_context_vars(
    logger: logging.Logger,
    method: str,
    event_dict: dict,
) -> dict:
    """Structlog processor: inject the current strangler mode."""
    mode = get_current_mode()
    if mode:
        event_dict["strangler_mode"] = mode
    return event_dict


HANDLER_NAME = "strangler-structlog"


def configure_structlog(
    debug: Optional[bool] = None,
    stream: Optional[TextIO] = None,
    logger_name: str = "strangler",
) -> logging.Handler:
    """Configure structlog and route ``logger_name`` records through it.

    ``debug`` picks the console renderer over JSON and DEBUG over INFO;
    when omitted it comes from ``StranglerSettings.debug``
    (``STRANGLER_DEBUG``). Pass ``logger_name=""`` to format every record
    through structlog. Calling again replaces the previous handler.

    Returns the installed handler.
    """
    if debug is None:
        # Deferred: the settings module imports this one indirectly.
        from strangler.core.config import get_settings

        debug = get_settings().debug

    shared_processors: list = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _inject_context_vars,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if debug:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    target = logging.getLogger(logger_name)
    for existing in list(target.handlers):
        if existing.get_name() == HANDLER_NAME:
            target.removeHandler(existing)
    target.addHandler(handler)
    target.setLevel(logging.DEBUG if debug else logging.INFO)
    return handler


def log_error(logger: Any, message: str, *args: Any, exc: BaseException | None = None) -> None:
    """Report an error through a caller-supplied logger.

    Loggers without a callable ``error`` are skipped. When ``exc`` is given
    it is passed as the last formatting argument, so ``message`` must end
    with a placeholder for it; stdlib loggers also get the traceback.
    """
    error = getattr(logger, "error", None)
    if not callable(error):
        return
    if exc is None:
        error(message, *args)
    elif isinstance(logger, (logging.Logger, logging.LoggerAdapter)):
        error(message, *args, exc, exc_info=exc)
    else:
        error(message, *args, exc)
