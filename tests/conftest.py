"""
Modwire - Test Configuration

Pytest fixtures shared by the whole suite.
"""
import textwrap
from pathlib import Path
from typing import Callable, List, Optional

import pytest

from config import InstallerConfig
from di import Container
from installer import InMemoryModuleSource


@pytest.fixture
def container() -> Container:
    """Empty binding container."""
    return Container()


@pytest.fixture
def memory_source() -> InMemoryModuleSource:
    """Empty in-memory module tree."""
    return InMemoryModuleSource()


@pytest.fixture
def installer_config() -> InstallerConfig:
    """Installer configuration independent of the environment."""
    return InstallerConfig(
        module_roots=[],
        meta_filename="meta.py",
        payload_filename="payload.py",
        verbose=False,
    )


@pytest.fixture
def calls() -> List[str]:
    """Shared journal that hooks append to, used to assert ordering."""
    return []


@pytest.fixture
def write_module(tmp_path: Path) -> Callable[..., Path]:
    """
    Write a module directory under tmp_path.

    Usage:
        write_module("modules/login", meta="META = {}", payload="PAYLOAD = 1")
    """

    def _write(relative: str, meta: str, payload: Optional[str] = None) -> Path:
        directory = tmp_path / relative
        directory.mkdir(parents=True, exist_ok=True)
        (directory / "meta.py").write_text(textwrap.dedent(meta), encoding="utf-8")
        if payload is not None:
            (directory / "payload.py").write_text(textwrap.dedent(payload), encoding="utf-8")
        return directory

    return _write
