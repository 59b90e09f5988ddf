"""
Modwire - Binding Container Package

The container discovered modules are installed into.

Usage:
    from di import Container

    container = Container()
    container.register(container.bind("clock").to(SystemClock).as_singleton())
    clock = container.resolve("clock")
"""

from di.container import (
    UNSET,
    BindingRequest,
    Container,
    ServiceDescriptor,
    ServiceLifetime,
)

__all__ = [
    "BindingRequest",      # Immutable binding under construction
    "Container",           # Named binding registry
    "ServiceDescriptor",   # Committed binding
    "ServiceLifetime",     # Singleton, Transient
    "UNSET",               # Marker for absent target/set value
]
