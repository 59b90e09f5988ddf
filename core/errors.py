"""
Modwire - Error Hierarchy

Error types raised while discovering and installing modules.

Features:
- A single base class carrying structured context and severity
- Configuration errors for malformed module directories
- Hook errors wrapping exceptions raised by module lifecycle hooks
- Binding errors raised by the container
- OpenTelemetry span recording for every raised error
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode


class ErrorSeverity(Enum):
    """Error severity levels."""

    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """Structured context attached to an error."""

    operation: str
    component: str
    module_name: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary for serialization."""
        return {
            "operation": self.operation,
            "component": self.component,
            "module_name": self.module_name,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }


class ModwireError(Exception):
    """
    Base exception for all loader errors.

    Every error raised by the engine or the container is fatal to the
    installation run; there is no recoverable variant.
    """

    default_severity: ErrorSeverity = ErrorSeverity.ERROR
    error_code: str = "MODWIRE_ERROR"

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        severity: Optional[ErrorSeverity] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context
        self.severity = severity or self.default_severity
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        self._record_to_span()

    def _record_to_span(self) -> None:
        """Record exception to current OpenTelemetry span."""
        span = trace.get_current_span()
        if span and span.is_recording():
            span.set_status(Status(StatusCode.ERROR, self.message))
            span.record_exception(self)
            span.set_attribute("error.code", self.error_code)
            span.set_attribute("error.severity", self.severity.value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
            "context": self.context.to_dict() if self.context else None,
            "cause": str(self.cause) if self.cause else None,
        }

    def __str__(self) -> str:
        parts = [f"[{self.error_code}] {self.message}"]
        if self.cause:
            parts.append(f" [caused by: {self.cause!r}]")
        return "".join(parts)

    def with_context(self, **kwargs: Any) -> "ModwireError":
        """Add additional context to the error."""
        if self.context:
            self.context.metadata.update(kwargs)
        else:
            self.context = ErrorContext(
                operation="unknown",
                component="unknown",
                metadata=kwargs,
            )
        return self


class ConfigurationError(ModwireError):
    """A module directory does not satisfy the on-disk convention."""

    error_code = "CONFIG_ERROR"
    default_severity = ErrorSeverity.CRITICAL

    def __init__(
        self,
        message: str,
        module_name: Optional[str] = None,
        path: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.module_name = module_name
        self.path = path


class HookError(ModwireError):
    """
    A module lifecycle hook raised.

    The exception the hook raised is kept unchanged as `cause` and as
    `__cause__`; callers that need its type read it from there.
    """

    error_code = "HOOK_ERROR"

    def __init__(
        self,
        message: str,
        module_name: Optional[str] = None,
        hook: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.module_name = module_name
        self.hook = hook


class BindingError(ModwireError):
    """A binding could not be registered or resolved."""

    error_code = "BINDING_ERROR"

    def __init__(
        self,
        message: str,
        binding_name: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.binding_name = binding_name
