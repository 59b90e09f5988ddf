"""
Modwire - Module Sources

A module source answers the few file-tree questions discovery asks and
loads the metadata and payload files it finds. `LocalModuleSource` reads
the real file system and executes Python files; `InMemoryModuleSource`
holds a tree of ready-made objects for tests and embedding.
"""
from __future__ import annotations

import hashlib
import importlib.util
import os
import posixpath
import sys
from types import ModuleType
from typing import Any, Dict, List, Mapping, Optional, Protocol, Set, runtime_checkable

from core.errors import ConfigurationError

META_ATTRIBUTE = "META"
PAYLOAD_ATTRIBUTE = "PAYLOAD"


@runtime_checkable
class ModuleSource(Protocol):
    """File-tree and loader capability consumed by discovery and installation."""

    def resolve(self, path: Any) -> str: ...

    def join(self, *parts: str) -> str: ...

    def is_dir(self, path: str) -> bool: ...

    def is_file(self, path: str) -> bool: ...

    def list_dir(self, path: str) -> List[str]: ...

    def load_meta(self, path: str) -> Any: ...

    def load_payload(self, path: str) -> Any: ...


def load_python_file(path: str) -> ModuleType:
    """
    Execute a Python file as a fresh module.

    The module is registered in sys.modules under a name derived from its
    path so that dataclasses and pickling inside it keep working.
    """
    digest = hashlib.sha1(path.encode("utf-8")).hexdigest()[:12]
    stem = os.path.splitext(os.path.basename(path))[0]
    module_name = f"modwire_modules.m{digest}.{stem}"

    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ConfigurationError(f"Cannot load '{path}' as a Python file", path=path)

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(module_name, None)
        raise ConfigurationError(f"Failed to execute '{path}': {e}", path=path, cause=e) from e
    return module


class LocalModuleSource:
    """Module source backed by the local file system."""

    def resolve(self, path: Any) -> str:
        return os.path.abspath(os.fspath(path))

    def join(self, *parts: str) -> str:
        return os.path.join(*parts)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def is_file(self, path: str) -> bool:
        return os.path.isfile(path)

    def list_dir(self, path: str) -> List[str]:
        return os.listdir(path)

    def load_meta(self, path: str) -> Any:
        return getattr(load_python_file(path), META_ATTRIBUTE, None)

    def load_payload(self, path: str) -> Any:
        module = load_python_file(path)
        return getattr(module, PAYLOAD_ATTRIBUTE, module)


class InMemoryModuleSource:
    """
    Module source over an in-memory tree.

    Files map absolute POSIX paths to the object that loading them yields:
    a meta file holds the metadata record, a payload file holds the artifact.
    Directories are implied by file paths or added explicitly.
    """

    def __init__(self, files: Optional[Mapping[str, Any]] = None) -> None:
        self._files: Dict[str, Any] = {}
        self._dirs: Set[str] = {"/"}
        for path, content in (files or {}).items():
            self.add_file(path, content)

    def add_dir(self, path: str) -> str:
        resolved = self.resolve(path)
        current = resolved
        while current not in self._dirs:
            self._dirs.add(current)
            current = posixpath.dirname(current)
        return resolved

    def add_file(self, path: str, content: Any) -> None:
        path = self.resolve(path)
        self.add_dir(posixpath.dirname(path))
        self._files[path] = content

    def add_module(
        self,
        directory: str,
        meta: Any,
        payload: Any = None,
        *,
        with_payload: bool = True,
        meta_filename: str = "meta.py",
        payload_filename: str = "payload.py",
    ) -> None:
        self.add_file(posixpath.join(directory, meta_filename), meta)
        if with_payload:
            self.add_file(posixpath.join(directory, payload_filename), payload)

    def resolve(self, path: Any) -> str:
        return posixpath.normpath(posixpath.join("/", os.fspath(path)))

    def join(self, *parts: str) -> str:
        return posixpath.join(*parts)

    def is_dir(self, path: str) -> bool:
        return path in self._dirs

    def is_file(self, path: str) -> bool:
        return path in self._files

    def list_dir(self, path: str) -> List[str]:
        children = {
            posixpath.basename(entry)
            for entry in (*self._dirs, *self._files)
            if entry != path and posixpath.dirname(entry) == path
        }
        return sorted(children)

    def load_meta(self, path: str) -> Any:
        return self._files[path]

    def load_payload(self, path: str) -> Any:
        return self._files[path]
