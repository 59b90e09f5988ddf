"""
Modwire - Installation Orchestrator

Drives one installation run: discovery over every root, the lifecycle of
every discovered module in discovery order, then the final `all_installed`
pass over the modules that were installed.

The run is fail-stop. The first error propagates to the caller; modules
already installed stay installed and later modules are never attempted.
"""
from __future__ import annotations

import os
from typing import Any, Iterable, List, Optional, Union

from opentelemetry import trace
from opentelemetry.trace import SpanKind

from config import InstallerConfig, get_config
from installer.descriptor import (
    DiscoveryResult,
    InstallationReport,
    InstallOutcome,
    Module,
)
from installer.discovery import Discovery
from installer.lifecycle import BindingRegistry, LifecycleRunner
from installer.sources import LocalModuleSource, ModuleSource
from observability.logging import LogContext, VerboseLogging, get_logger
from observability.tracing import get_tracer

logger = get_logger(__name__)

RootsArg = Union[str, "os.PathLike[str]", Iterable[Union[str, "os.PathLike[str]"]], None]


def normalize_roots(roots: RootsArg, default: Iterable[Any] = ()) -> List[Any]:
    """A single path becomes a one-root list; None falls back to `default`."""
    if roots is None:
        return list(default)
    if isinstance(roots, (str, bytes, os.PathLike)):
        return [roots]
    return list(roots)


class InstallationOrchestrator:
    """
    Top-level driver of an installation run.

    Usage:
        orchestrator = InstallationOrchestrator(container)
        report = orchestrator.install(["./app/modules", "./vendor/modules"])
        print(report.installed)
    """

    def __init__(
        self,
        container: BindingRegistry,
        source: Optional[ModuleSource] = None,
        config: Optional[InstallerConfig] = None,
        tracer: Optional[trace.Tracer] = None,
    ):
        self.container = container
        self.config = config or get_config().installer
        self.source = source or LocalModuleSource()
        self.discovery = Discovery(
            self.source,
            meta_filename=self.config.meta_filename,
            payload_filename=self.config.payload_filename,
        )
        self.runner = LifecycleRunner(container, self.source)
        self.tracer = tracer or get_tracer(__name__)

    def install(self, roots: RootsArg = None, verbose: Optional[bool] = None) -> InstallationReport:
        """Discover and install every module under `roots`."""
        root_list = normalize_roots(roots, self.config.module_roots)
        if verbose is None:
            verbose = self.config.verbose

        with VerboseLogging("installer", enabled=verbose), self.tracer.start_as_current_span(
            "installer.run",
            kind=SpanKind.INTERNAL,
        ) as span:
            span.set_attribute("installer.root_count", len(root_list))

            discovered = self.discover(root_list)
            modules = [Module(descriptor) for descriptor in discovered.modules]
            logger.info(
                "Modules discovered",
                total=len(modules),
                roots=len(root_list),
                skipped=len(discovered.skipped),
            )

            for module in modules:
                self.install_module(module)
            logger.debug("All modules installed")

            report = InstallationReport(
                modules=modules,
                skipped=list(discovered.skipped),
                roots=discovered.roots,
            )
            report.finalized = self.run_final_pass(modules)

            span.set_attribute("installer.installed", len(report.installed))
            span.set_attribute("installer.declined", len(report.declined))
            logger.info(
                "Installation completed",
                installed=len(report.installed),
                declined=len(report.declined),
            )
        return report

    def discover(self, roots: List[Any]) -> DiscoveryResult:
        with self.tracer.start_as_current_span("installer.discover") as span:
            result = self.discovery.discover(roots)
            span.set_attribute("installer.module_count", len(result.modules))
            return result

    def install_module(self, module: Module) -> InstallOutcome:
        with LogContext(module=module.name), self.tracer.start_as_current_span(
            "installer.module",
            attributes={"module.name": module.name, "module.location": module.location},
        ) as span:
            outcome = self.runner.run(module)
            span.set_attribute("module.outcome", outcome.value)
            return outcome

    def run_final_pass(self, modules: List[Module]) -> List[str]:
        """Call `all_installed` on installed modules, in discovery order."""
        finalized: List[str] = []
        with self.tracer.start_as_current_span("installer.all_installed") as span:
            for module in modules:
                with LogContext(module=module.name):
                    if self.runner.all_installed(module):
                        finalized.append(module.name)
            span.set_attribute("installer.finalized", len(finalized))
        return finalized
