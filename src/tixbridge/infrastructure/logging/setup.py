"""Structured logging setup using structlog.

JSON lines in production, colored console everywhere else. Standard library
loggers (uvicorn, httpx, sqlalchemy) are routed through the same renderer,
and values bound with ``bind_request_context`` are merged into every event
emitted while a request is being handled.
"""

import logging
import sys
from typing import Any, Literal, TextIO

import structlog

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

_NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "uvicorn.access")


def _pre_chain() -> list[structlog.typing.Processor]:
    """Processors applied to both structlog and foreign stdlib records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            {
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            }
        ),
    ]


def _renderer(json_format: bool) -> structlog.typing.Processor:
    if json_format:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=True)


def configure_logging(
    level: LogLevel = "INFO",
    json_format: bool = False,
    *,
    stream: TextIO | None = None,
) -> None:
    """Route structlog and stdlib logging through one handler.

    Args:
        level: Root log level
        json_format: JSON lines if True, colored console otherwise
        stream: Output stream (defaults to stdout)
    """
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *pre_chain,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(json_format),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_request_context(**values: Any) -> None:
    """Attach key/values to every log event in the current context."""
    structlog.contextvars.bind_contextvars(**values)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a bound logger instance.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Configured structlog bound logger.
    """
    return structlog.get_logger(name)  # type: ignore[no-any-return]


__all__ = [
    "LogLevel",
    "bind_request_context",
    "clear_request_context",
    "configure_logging",
    "get_logger",
]
