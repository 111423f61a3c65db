"""Structured logging configuration for the PIZZINT tracker.

Uses structlog with context variables, ISO timestamps, and either console
rendering (local runs) or JSON lines (serverless / CI logs). Provides
get_logger() for named loggers and configure_logging() for one-time setup.
"""

import sys

import structlog

_configured = False


def _stderr_logger_factory(*args: object) -> structlog.PrintLogger:
    # sys.stderr is looked up per logger, never captured at configure time
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(json_output: bool = False) -> None:
    """Configure structlog processors once.

    Safe to call multiple times -- only the first invocation takes effect.

    Args:
        json_output: Render each event as a JSON line instead of the
            coloured console format.
    """
    global _configured
    if _configured:
        return

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(0),
        context_class=dict,
        logger_factory=_stderr_logger_factory,
        cache_logger_on_first_use=False,
    )
    _configured = True


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a bound logger with the given name.

    Args:
        name: Logger name, typically the module or runner name.

    Returns:
        A structlog BoundLogger instance bound with the given name.
    """
    return structlog.get_logger(logger_name=name)


def reset_logging() -> None:
    """Drop the structlog configuration so configure_logging() applies again."""
    global _configured
    structlog.reset_defaults()
    _configured = False
