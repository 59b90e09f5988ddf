"""
Modwire - Module Lifecycle

Runs the per-module phases against the binding container:

1. Pre-install check  - `on.installing` may decline the module
2. Install            - custom `install` hook, or bind name -> payload
3. Post-install check - `on.installed`, observational only

plus the final-pass hook `on.all_installed`, which the orchestrator calls
once every module has been through phases 1-3.

An exception raised by a hook stops the run as a HookError naming the
module and the hook. The original exception is `HookError.cause` (also
`__cause__`); catch on its type through that attribute.
"""
from __future__ import annotations

from typing import Any, Callable, Optional, Protocol

from core.errors import HookError, ModwireError
from di.container import BindingRequest
from installer.descriptor import InstallOutcome, Module, ModuleDescriptor
from installer.sources import LocalModuleSource, ModuleSource
from observability.logging import get_logger

logger = get_logger(__name__)


class BindingRegistry(Protocol):
    """The slice of the container the convention-based install needs."""

    def bind(self, name: str) -> BindingRequest: ...

    def register(self, request: BindingRequest) -> Any: ...


class LifecycleRunner:
    """Executes the lifecycle of one module at a time."""

    def __init__(
        self,
        container: BindingRegistry,
        source: Optional[ModuleSource] = None,
        load_payload: Optional[Callable[[str], Any]] = None,
    ):
        self.container = container
        self.source = source or LocalModuleSource()
        self._load_payload = load_payload or self.source.load_payload

    def run(self, module: Module) -> InstallOutcome:
        """Run pre-check, install and post-check; mark the module on success."""
        descriptor = module.descriptor
        logger.debug("Module lifecycle started", module=descriptor.name, path=descriptor.location)

        if not self.should_install(descriptor):
            module.mark_declined()
            return InstallOutcome.DECLINED

        self.install(descriptor)
        self.post_install(descriptor)
        module.mark_installed()
        return InstallOutcome.INSTALLED

    def should_install(self, descriptor: ModuleDescriptor) -> bool:
        gate = descriptor.metadata.on.installing
        if gate is None:
            logger.debug("Pre-installation check not found, module will be installed", module=descriptor.name)
            return True

        logger.debug("Pre-installation check found", module=descriptor.name)
        accepted = bool(self._call_hook(descriptor, "installing", gate))
        if accepted:
            logger.debug("Pre-installation check passed", module=descriptor.name)
        else:
            logger.info("Pre-installation check declined the module", module=descriptor.name)
        return accepted

    def install(self, descriptor: ModuleDescriptor) -> None:
        meta = descriptor.metadata
        if meta.has_custom_install:
            logger.debug("Custom installation found", module=descriptor.name)
            self._call_hook(descriptor, "install", meta.install)
        else:
            logger.debug("Installing module by convention", module=descriptor.name)
            self.container.register(self.build_binding(descriptor))
        logger.debug("Module installed", module=descriptor.name)

    def build_binding(self, descriptor: ModuleDescriptor) -> BindingRequest:
        """Binding request for a convention-based module."""
        meta = descriptor.metadata
        artifact = self._load_payload(descriptor.payload_location)

        request = self.container.bind(descriptor.name).to(artifact)
        if meta.use is not None:
            request = request.use(*meta.use)
        if meta.has_set:
            request = request.set(meta.set)
        if meta.singleton:
            request = request.as_singleton()
        return request

    def post_install(self, descriptor: ModuleDescriptor) -> None:
        hook = descriptor.metadata.on.installed
        if hook is None:
            logger.debug("Post-installation check not found, skipped", module=descriptor.name)
            return

        logger.debug("Post-installation check found", module=descriptor.name)
        self._call_hook(descriptor, "installed", hook)
        logger.debug("Post-installation check completed", module=descriptor.name)

    def all_installed(self, module: Module) -> bool:
        """Final-pass hook. Returns True when the hook ran."""
        hook = module.meta.on.all_installed
        if not module.installed or hook is None:
            return False

        logger.debug("Final check found", module=module.name)
        self._call_hook(module.descriptor, "all_installed", hook)
        logger.debug("Final check passed", module=module.name)
        return True

    def _call_hook(self, descriptor: ModuleDescriptor, hook_name: str, hook: Callable[..., Any]) -> Any:
        try:
            return hook(self.container, descriptor.name, descriptor.location)
        except ModwireError:
            raise
        except Exception as e:
            raise HookError(
                f"Hook '{hook_name}' of [{descriptor.name}] failed: {e}",
                module_name=descriptor.name,
                hook=hook_name,
                cause=e,
            ) from e
