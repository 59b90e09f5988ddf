"""
Modwire - Module Data Model

Typed metadata record, module descriptors, the runtime module wrapper and
the explicit outcomes reported by discovery and installation.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from core.errors import ConfigurationError
from di.container import UNSET

# Every hook is called as hook(container, module_name, module_location)
Hook = Callable[[Any, str, str], Any]
Gate = Callable[[Any, str, str], bool]

_META_KEYS = frozenset({"install", "use", "set", "singleton", "on"})
_HOOK_KEYS = {
    "installing": "installing",
    "installed": "installed",
    "all_installed": "all_installed",
    "allInstalled": "all_installed",
}


@dataclass(frozen=True)
class ModuleHooks:
    """Optional lifecycle callbacks (the `on` section of a module's metadata)."""

    installing: Optional[Gate] = None
    installed: Optional[Hook] = None
    all_installed: Optional[Hook] = None

    @classmethod
    def from_record(cls, record: Any, module_name: Optional[str] = None) -> "ModuleHooks":
        if record is None:
            return cls()
        if isinstance(record, ModuleHooks):
            return record
        if not isinstance(record, Mapping):
            raise ConfigurationError(
                f"'on' for [{module_name}] must be a mapping, got {type(record).__name__}",
                module_name=module_name,
            )
        unknown = sorted(set(record) - set(_HOOK_KEYS))
        if unknown:
            raise ConfigurationError(
                f"Unknown hook(s) for [{module_name}]: {', '.join(unknown)}",
                module_name=module_name,
            )
        if "all_installed" in record and "allInstalled" in record:
            raise ConfigurationError(
                f"Both 'all_installed' and 'allInstalled' given for [{module_name}]",
                module_name=module_name,
            )
        return cls(**{_HOOK_KEYS[key]: value for key, value in record.items()})


@dataclass(frozen=True)
class ModuleMeta:
    """
    Configuration record a module supplies about itself.

    `install` selects custom installation; when it is set, `use`, `set`
    and `singleton` are ignored. `set` defaults to UNSET so that None stays
    a legitimate value to apply. A single `use` value becomes a one-item
    tuple and a mapping given as `on` is converted to ModuleHooks.
    """

    install: Optional[Hook] = None
    use: Optional[Tuple[Any, ...]] = None
    set: Any = UNSET
    singleton: bool = False
    on: ModuleHooks = field(default_factory=ModuleHooks)

    def __post_init__(self) -> None:
        object.__setattr__(self, "use", _normalize_use(self.use))
        object.__setattr__(self, "on", ModuleHooks.from_record(self.on))

    @property
    def has_custom_install(self) -> bool:
        return self.install is not None

    @property
    def has_set(self) -> bool:
        return self.set is not UNSET

    @classmethod
    def from_record(
        cls,
        record: Any,
        module_name: Optional[str] = None,
        path: Optional[str] = None,
    ) -> "ModuleMeta":
        """Build a validated record from a `META` value (ModuleMeta or mapping)."""
        if record is None or (isinstance(record, Mapping) and not record):
            raise ConfigurationError(
                f"Invalid meta for [{module_name}]: no content",
                module_name=module_name,
                path=path,
            )

        if isinstance(record, ModuleMeta):
            meta = record
        elif isinstance(record, Mapping):
            unknown = sorted(set(record) - _META_KEYS)
            if unknown:
                raise ConfigurationError(
                    f"Unknown meta field(s) for [{module_name}]: {', '.join(unknown)}",
                    module_name=module_name,
                    path=path,
                )
            meta = cls(
                install=record.get("install"),
                use=record.get("use"),
                set=record.get("set", UNSET),
                singleton=record.get("singleton", False),
                on=ModuleHooks.from_record(record.get("on"), module_name),
            )
        else:
            raise ConfigurationError(
                f"Invalid meta for [{module_name}]: expected a mapping or ModuleMeta, "
                f"got {type(record).__name__}",
                module_name=module_name,
                path=path,
            )

        meta.validate(module_name, path)
        return meta

    def validate(self, module_name: Optional[str] = None, path: Optional[str] = None) -> None:
        if not isinstance(self.singleton, bool):
            raise ConfigurationError(
                f"'singleton' for [{module_name}] must be a bool",
                module_name=module_name,
                path=path,
            )
        callables = {
            "install": self.install,
            "on.installing": self.on.installing,
            "on.installed": self.on.installed,
            "on.all_installed": self.on.all_installed,
        }
        for key, value in callables.items():
            if value is not None and not callable(value):
                raise ConfigurationError(
                    f"'{key}' for [{module_name}] must be callable",
                    module_name=module_name,
                    path=path,
                )


def _normalize_use(value: Any) -> Optional[Tuple[Any, ...]]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return (value,)


@dataclass(frozen=True)
class ModuleDescriptor:
    """
    A discovered module's identity.

    Construction fails when metadata is missing, or when there is neither a
    payload nor a custom install procedure.
    """

    name: str
    location: str
    metadata: ModuleMeta
    payload_location: Optional[str] = None

    def __post_init__(self) -> None:
        if self.metadata is None:
            raise ConfigurationError(
                f"Invalid meta for [{self.name}]",
                module_name=self.name,
                path=self.location,
            )
        if self.payload_location is None and not self.metadata.has_custom_install:
            raise ConfigurationError(
                f"Invalid payload for [{self.name}]: no payload file and no custom install",
                module_name=self.name,
                path=self.location,
            )

    @property
    def parent_name(self) -> Optional[str]:
        """Dotted name of the enclosing module path, if nested."""
        head, _, _ = self.name.rpartition(".")
        return head or None


class DiscoveryOutcome(str, Enum):
    REGISTERED = "registered"
    SKIPPED_DUPLICATE = "skipped_duplicate"


class InstallOutcome(str, Enum):
    PENDING = "pending"
    INSTALLED = "installed"
    DECLINED = "declined"


@dataclass(frozen=True)
class SkippedModule:
    """A module directory whose name was already taken by an earlier one."""

    name: str
    location: str
    outcome: DiscoveryOutcome = DiscoveryOutcome.SKIPPED_DUPLICATE


@dataclass(frozen=True)
class DiscoveryResult:
    """Ordered, deduplicated descriptors plus the duplicates that were skipped."""

    modules: Tuple[ModuleDescriptor, ...] = ()
    skipped: Tuple[SkippedModule, ...] = ()
    roots: Tuple[str, ...] = ()

    def names(self) -> List[str]:
        return [descriptor.name for descriptor in self.modules]

    def __len__(self) -> int:
        return len(self.modules)


@dataclass
class Module:
    """Runtime wrapper tracking whether a descriptor got installed."""

    descriptor: ModuleDescriptor
    installed: bool = False
    outcome: InstallOutcome = InstallOutcome.PENDING

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def location(self) -> str:
        return self.descriptor.location

    @property
    def meta(self) -> ModuleMeta:
        return self.descriptor.metadata

    def mark_installed(self) -> None:
        self.installed = True
        self.outcome = InstallOutcome.INSTALLED

    def mark_declined(self) -> None:
        self.outcome = InstallOutcome.DECLINED


@dataclass
class InstallationReport:
    """What one installation run did."""

    modules: List[Module] = field(default_factory=list)
    skipped: List[SkippedModule] = field(default_factory=list)
    finalized: List[str] = field(default_factory=list)
    roots: Tuple[str, ...] = ()

    @property
    def installed(self) -> List[str]:
        return [m.name for m in self.modules if m.outcome == InstallOutcome.INSTALLED]

    @property
    def declined(self) -> List[str]:
        return [m.name for m in self.modules if m.outcome == InstallOutcome.DECLINED]

    def get(self, name: str) -> Optional[Module]:
        for module in self.modules:
            if module.name == name:
                return module
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "roots": list(self.roots),
            "modules": {m.name: m.outcome.value for m in self.modules},
            "skipped": [s.name for s in self.skipped],
            "installed": self.installed,
            "declined": self.declined,
            "finalized": list(self.finalized),
        }
