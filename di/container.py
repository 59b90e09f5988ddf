"""
Modwire - Binding Container

A small named-binding registry that discovered modules are installed into.

Features:
- Immutable binding requests built field-by-field
- Atomic registration of a finished request
- Singleton and Transient lifetimes
- Constructor argument hints and property overrides
- Pre-built instance registration

Usage:
    container = Container()
    container.register(
        container.bind("mailer").to(SmtpMailer).use("smtp.local", 25).as_singleton()
    )
    mailer = container.resolve("mailer")
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from core.errors import BindingError


class ServiceLifetime(Enum):
    """Binding lifetime options."""

    SINGLETON = "singleton"  # One instance for the container
    TRANSIENT = "transient"  # New instance every resolve


class _Unset:
    """Marker for a request without a `set` value."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


@dataclass(frozen=True)
class BindingRequest:
    """
    A binding under construction.

    Every builder method returns a new request; nothing reaches the
    container until the finished request is passed to `Container.register`.
    """

    name: str
    target: Any = UNSET
    args: Tuple[Any, ...] = ()
    properties: Any = UNSET
    lifetime: ServiceLifetime = ServiceLifetime.TRANSIENT

    def to(self, target: Any) -> "BindingRequest":
        """Bind to a class, factory or plain value."""
        return replace(self, target=target)

    def use(self, *args: Any) -> "BindingRequest":
        """Append constructor/factory arguments."""
        return replace(self, args=self.args + tuple(args))

    def set(self, value: Any) -> "BindingRequest":
        """Apply a property override after construction."""
        return replace(self, properties=value)

    def as_singleton(self) -> "BindingRequest":
        return replace(self, lifetime=ServiceLifetime.SINGLETON)

    @property
    def has_target(self) -> bool:
        return self.target is not UNSET

    @property
    def has_properties(self) -> bool:
        return self.properties is not UNSET


@dataclass
class ServiceDescriptor:
    """A committed binding."""

    request: BindingRequest
    instance: Any = UNSET

    @property
    def name(self) -> str:
        return self.request.name

    @property
    def lifetime(self) -> ServiceLifetime:
        return self.request.lifetime


class Container:
    """
    Named binding container.

    Manages binding registration, resolution, and singleton caching.
    """

    def __init__(self) -> None:
        self._descriptors: Dict[str, ServiceDescriptor] = {}
        self._singletons: Dict[str, Any] = {}
        self._lock = threading.RLock()
        self._initializing: set = set()

    def bind(self, name: str) -> BindingRequest:
        """Start a binding request for `name`."""
        return BindingRequest(name=name)

    def register(self, request: BindingRequest) -> "Container":
        """Commit a finished binding request, replacing any previous binding."""
        if not request.name:
            raise BindingError("Binding name must not be empty", binding_name=request.name)
        if not request.has_target:
            raise BindingError(
                f"Binding '{request.name}' has no target",
                binding_name=request.name,
            )
        with self._lock:
            self._descriptors[request.name] = ServiceDescriptor(request=request)
            self._singletons.pop(request.name, None)
        return self

    def register_instance(self, name: str, instance: Any) -> "Container":
        """Register an existing instance as singleton."""
        request = BindingRequest(name=name, target=instance, lifetime=ServiceLifetime.SINGLETON)
        with self._lock:
            self._descriptors[name] = ServiceDescriptor(request=request, instance=instance)
            self._singletons[name] = instance
        return self

    def _get_descriptor(self, name: str) -> ServiceDescriptor:
        """Get binding descriptor or raise error."""
        if name not in self._descriptors:
            raise KeyError(f"Binding '{name}' is not registered")
        return self._descriptors[name]

    def _create_instance(self, descriptor: ServiceDescriptor) -> Any:
        """Build a value from a committed binding."""
        if descriptor.instance is not UNSET:
            return descriptor.instance

        request = descriptor.request
        target = request.target
        instance = target(*request.args) if callable(target) else target

        if request.has_properties:
            self._apply_properties(request, instance)
        return instance

    @staticmethod
    def _apply_properties(request: BindingRequest, instance: Any) -> None:
        value = request.properties
        if isinstance(value, Mapping):
            for key, item in value.items():
                setattr(instance, key, item)
            return

        configure = getattr(instance, "configure", None)
        if not callable(configure):
            raise BindingError(
                f"Binding '{request.name}' has a non-mapping set value but "
                f"{type(instance).__name__} has no configure()",
                binding_name=request.name,
            )
        configure(value)

    def resolve(self, name: str) -> Any:
        """Resolve a bound value."""
        descriptor = self._get_descriptor(name)

        if descriptor.lifetime == ServiceLifetime.SINGLETON:
            with self._lock:
                if name not in self._singletons:
                    if name in self._initializing:
                        raise RecursionError(f"Circular resolution detected for '{name}'")
                    self._initializing.add(name)
                    try:
                        self._singletons[name] = self._create_instance(descriptor)
                    finally:
                        self._initializing.discard(name)
                return self._singletons[name]

        return self._create_instance(descriptor)

    def get_binding(self, name: str) -> Optional[BindingRequest]:
        """Return the committed request for `name`, if any."""
        descriptor = self._descriptors.get(name)
        return descriptor.request if descriptor else None

    def is_registered(self, name: str) -> bool:
        """Check if a binding is registered."""
        return name in self._descriptors

    def names(self) -> List[str]:
        """Registered binding names in registration order."""
        return list(self._descriptors)

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)
