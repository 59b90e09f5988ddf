"""
Modwire - Observability Package

Structured logging and tracing for installation runs.

Components:
- logging: structlog integration with trace context propagation
- tracing: OpenTelemetry tracer provider setup

Usage:
    from observability import setup_observability, get_logger

    setup_observability()
    logger = get_logger(__name__)
"""
from typing import Optional

from .logging import (
    LogContext,
    LoggingConfig,
    VerboseLogging,
    get_logger,
    setup_logging,
    shutdown_logging,
)
from .tracing import (
    TracingConfig,
    get_tracer,
    setup_tracing,
    shutdown_tracing,
)


def setup_observability(
    logging_config: Optional[LoggingConfig] = None,
    tracing_config: Optional[TracingConfig] = None,
) -> None:
    """Configure logging and tracing in one call."""
    setup_logging(logging_config)
    setup_tracing(tracing_config)


def shutdown_observability() -> None:
    shutdown_tracing()
    shutdown_logging()


__all__ = [
    "setup_observability",
    "shutdown_observability",
    "LoggingConfig",
    "LogContext",
    "VerboseLogging",
    "setup_logging",
    "get_logger",
    "shutdown_logging",
    "TracingConfig",
    "setup_tracing",
    "get_tracer",
    "shutdown_tracing",
]
