"""Structured logging setup for SnapTreeLib.

Library modules log through ``structlog.get_logger(__name__)`` and never
configure logging themselves. Applications that want SnapTreeLib's events
rendered consistently with their own stdlib logging call
``configure_logging`` once at startup.
"""

import logging
import sys
from typing import Any, List

import structlog
from structlog.stdlib import ProcessorFormatter


def configure_logging(*, json_output: bool = False, level: str = "INFO", stream=None) -> None:
    """Route structlog and stdlib logging through one processor chain.

    Args:
        json_output: Render JSON lines instead of console output
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        stream: Output stream, stdout by default
    """
    log_level = getattr(logging, level.upper())

    shared_processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[*shared_processors, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        ProcessorFormatter(
            processors=[
                ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                renderer,
            ],
            foreign_pre_chain=shared_processors,
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Bound structlog logger for ``name`` (typically ``__name__``)."""
    return structlog.get_logger(name)
