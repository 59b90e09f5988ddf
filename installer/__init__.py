"""
Modwire - Convention-Driven Module Installer

Discovers self-describing modules in directory trees and installs each
into a binding container.

A module is any directory containing a `meta.py` that defines `META`:

    modules/
        login/
            meta.py        META = {"singleton": True}
            payload.py     PAYLOAD = LoginService
            oauth/
                meta.py    META = {"on": {"all_installed": wire_oauth}}
                payload.py

Usage:
    from di import Container
    from installer import install

    container = Container()
    report = install(container, "./modules")
    container.resolve("login.oauth")
"""
from typing import Optional

from config import InstallerConfig
from installer.descriptor import (
    DiscoveryOutcome,
    DiscoveryResult,
    InstallationReport,
    InstallOutcome,
    Module,
    ModuleDescriptor,
    ModuleHooks,
    ModuleMeta,
    SkippedModule,
)
from installer.discovery import Discovery
from installer.lifecycle import BindingRegistry, LifecycleRunner
from installer.orchestrator import InstallationOrchestrator, RootsArg, normalize_roots
from installer.sources import (
    InMemoryModuleSource,
    LocalModuleSource,
    ModuleSource,
    load_python_file,
)


def create_installer(
    container: BindingRegistry,
    source: Optional[ModuleSource] = None,
    config: Optional[InstallerConfig] = None,
) -> InstallationOrchestrator:
    """Build an orchestrator bound to `container`."""
    return InstallationOrchestrator(container, source=source, config=config)


def install(
    container: BindingRegistry,
    roots: RootsArg = None,
    verbose: Optional[bool] = None,
    source: Optional[ModuleSource] = None,
    config: Optional[InstallerConfig] = None,
) -> InstallationReport:
    """
    Install every module found under `roots` into `container`.

    `roots` is one path or an ordered collection of paths, highest priority
    first. When omitted, the configured `MODWIRE_MODULE_ROOTS` are used.
    """
    return create_installer(container, source=source, config=config).install(roots, verbose=verbose)


__all__ = [
    "install",
    "create_installer",
    "InstallationOrchestrator",
    "Discovery",
    "LifecycleRunner",
    "BindingRegistry",
    "ModuleMeta",
    "ModuleHooks",
    "ModuleDescriptor",
    "Module",
    "DiscoveryResult",
    "DiscoveryOutcome",
    "SkippedModule",
    "InstallOutcome",
    "InstallationReport",
    "ModuleSource",
    "LocalModuleSource",
    "InMemoryModuleSource",
    "load_python_file",
    "normalize_roots",
    "RootsArg",
]
