"""
Modwire - Core Module

Foundational pieces shared by the engine and the container:
- Unified error hierarchy
- Error context and severity

Usage:
    from core import ConfigurationError, HookError

    try:
        install(container, "./modules")
    except HookError as e:
        print(e.module_name, e.hook, e.cause)
"""

from core.errors import (
    BindingError,
    ConfigurationError,
    ErrorContext,
    ErrorSeverity,
    HookError,
    ModwireError,
)

__all__ = [
    "ModwireError",
    "ConfigurationError",
    "HookError",
    "BindingError",
    "ErrorContext",
    "ErrorSeverity",
]
