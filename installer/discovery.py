"""
Modwire - Module Discovery

Walks discovery roots depth-first and turns every directory holding a
metadata file into a ModuleDescriptor named after its path below the root.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional

from core.errors import ConfigurationError
from installer.descriptor import (
    DiscoveryOutcome,
    DiscoveryResult,
    ModuleDescriptor,
    ModuleMeta,
    SkippedModule,
)
from installer.sources import LocalModuleSource, ModuleSource
from observability.logging import get_logger

logger = get_logger(__name__)


class Discovery:
    """
    Recursive module discovery over one or more roots.

    Roots are walked in the order given, each subtree to completion before
    the next root. The first module to claim a dotted name keeps it; later
    directories with the same name are skipped. Entries are visited in
    sorted order.
    """

    def __init__(
        self,
        source: Optional[ModuleSource] = None,
        meta_filename: str = "meta.py",
        payload_filename: str = "payload.py",
        load_meta: Optional[Callable[[str], Any]] = None,
    ):
        self.source = source or LocalModuleSource()
        self.meta_filename = meta_filename
        self.payload_filename = payload_filename
        self._load_meta = load_meta or self.source.load_meta

    def discover(self, roots: Iterable[Any]) -> DiscoveryResult:
        found: Dict[str, ModuleDescriptor] = {}
        skipped: List[SkippedModule] = []
        resolved: List[str] = []

        for root in roots:
            root_path = self.source.resolve(root)
            if not self.source.is_dir(root_path):
                raise ConfigurationError(
                    f"Discovery root '{root_path}' is not a directory",
                    path=root_path,
                )
            resolved.append(root_path)
            logger.debug("Discovering modules", root=root_path)
            self._walk(root_path, None, found, skipped)

        return DiscoveryResult(
            modules=tuple(found.values()),
            skipped=tuple(skipped),
            roots=tuple(resolved),
        )

    def _walk(
        self,
        directory: str,
        parent: Optional[str],
        found: Dict[str, ModuleDescriptor],
        skipped: List[SkippedModule],
    ) -> None:
        for entry in sorted(self.source.list_dir(directory)):
            path = self.source.join(directory, entry)
            if not self.source.is_dir(path):
                continue

            name = f"{parent}.{entry}" if parent else entry
            if self.source.is_file(self.source.join(path, self.meta_filename)):
                outcome = self.visit_module(name, path, found)
                if outcome == DiscoveryOutcome.SKIPPED_DUPLICATE:
                    skipped.append(SkippedModule(name=name, location=path))

            # Nested modules are independent of their enclosing module.
            self._walk(path, name, found, skipped)

    def visit_module(
        self,
        name: str,
        path: str,
        found: Dict[str, ModuleDescriptor],
    ) -> DiscoveryOutcome:
        """Record the module at `path` under `name` unless the name is taken."""
        logger.debug("Module found", module=name, path=path)
        if name in found:
            logger.debug("Module already exists and will be skipped", module=name, path=path)
            return DiscoveryOutcome.SKIPPED_DUPLICATE

        found[name] = self.describe(name, path)
        return DiscoveryOutcome.REGISTERED

    def describe(self, name: str, path: str) -> ModuleDescriptor:
        """Load a module directory's metadata and build its descriptor."""
        meta_path = self.source.join(path, self.meta_filename)
        metadata = ModuleMeta.from_record(self._load_meta(meta_path), module_name=name, path=meta_path)

        payload_path: Optional[str] = self.source.join(path, self.payload_filename)
        if not self.source.is_file(payload_path):
            payload_path = None

        return ModuleDescriptor(
            name=name,
            location=path,
            metadata=metadata,
            payload_location=payload_path,
        )
