"""
Tests for installer/discovery.py - recursive module discovery.
"""
import os

import pytest

from core.errors import ConfigurationError
from installer.descriptor import DiscoveryOutcome, ModuleMeta
from installer.discovery import Discovery


def _custom_install(container, name, path):
    pass


class TestDiscoveryNaming:
    """Hierarchical names are built from directory segments below the root."""

    def test_top_level_module_has_no_dot(self, memory_source):
        memory_source.add_module("/mods/login", {"singleton": True}, payload=object)

        result = Discovery(memory_source).discover(["/mods"])
        assert result.names() == ["login"]

    def test_nested_modules_are_independent(self, memory_source):
        memory_source.add_module("/mods/login", {"singleton": True}, payload=object)
        memory_source.add_module("/mods/login/oauth", {"singleton": True}, payload=object)

        result = Discovery(memory_source).discover(["/mods"])
        assert result.names() == ["login", "login.oauth"]

    def test_plain_directories_are_traversed(self, memory_source):
        memory_source.add_module("/mods/auth/session", {"use": [1]}, payload=object)

        result = Discovery(memory_source).discover(["/mods"])

        assert result.names() == ["auth.session"]
        descriptor = result.modules[0]
        assert descriptor.location == "/mods/auth/session"
        assert descriptor.payload_location == "/mods/auth/session/payload.py"
        assert descriptor.metadata == ModuleMeta(use=(1,))

    def test_hidden_directories_are_not_excluded(self, memory_source):
        memory_source.add_module("/mods/.internal", {"singleton": True}, payload=object)

        result = Discovery(memory_source).discover(["/mods"])
        assert result.names() == [".internal"]

    def test_sibling_order_is_sorted(self, memory_source):
        for name in ["zeta", "alpha", "mid"]:
            memory_source.add_module(f"/mods/{name}", {"singleton": False}, payload=object)

        result = Discovery(memory_source).discover(["/mods"])
        assert result.names() == ["alpha", "mid", "zeta"]

    def test_depth_first_order(self, memory_source):
        memory_source.add_module("/mods/a", {"singleton": False}, payload=object)
        memory_source.add_module("/mods/a/x", {"singleton": False}, payload=object)
        memory_source.add_module("/mods/b", {"singleton": False}, payload=object)

        result = Discovery(memory_source).discover(["/mods"])
        assert result.names() == ["a", "a.x", "b"]

    def test_files_named_like_modules_are_ignored(self, memory_source):
        memory_source.add_file("/mods/login", "not a directory")

        result = Discovery(memory_source).discover(["/mods"])
        assert len(result) == 0


class TestDiscoveryDeduplication:
    """The first module to claim a name wins."""

    def test_first_root_wins(self, memory_source):
        memory_source.add_module("/app/login", {"singleton": True}, payload="app")
        memory_source.add_module("/vendor/login", {"singleton": False}, payload="vendor")
        memory_source.add_module("/vendor/billing", {"singleton": False}, payload="vendor")

        result = Discovery(memory_source).discover(["/app", "/vendor"])

        assert result.names() == ["login", "billing"]
        assert result.modules[0].location == "/app/login"
        assert result.modules[0].metadata.singleton is True
        assert [(s.name, s.location) for s in result.skipped] == [("login", "/vendor/login")]
        assert result.skipped[0].outcome == DiscoveryOutcome.SKIPPED_DUPLICATE

    def test_root_order_is_respected(self, memory_source):
        memory_source.add_module("/app/login", {"singleton": True}, payload="app")
        memory_source.add_module("/vendor/login", {"singleton": False}, payload="vendor")

        result = Discovery(memory_source).discover(["/vendor", "/app"])
        assert result.modules[0].location == "/vendor/login"

    def test_duplicate_is_not_loaded(self, memory_source):
        loaded = []

        def load_meta(path):
            loaded.append(path)
            return memory_source.load_meta(path)

        memory_source.add_module("/app/login", {"singleton": True}, payload="app")
        memory_source.add_module("/vendor/login", None, payload="vendor")

        result = Discovery(memory_source, load_meta=load_meta).discover(["/app", "/vendor"])

        assert result.names() == ["login"]
        assert loaded == ["/app/login/meta.py"]

    def test_same_root_twice(self, memory_source):
        memory_source.add_module("/mods/login", {"singleton": True}, payload="app")

        result = Discovery(memory_source).discover(["/mods", "/mods"])

        assert result.names() == ["login"]
        assert len(result.skipped) == 1
        assert result.roots == ("/mods", "/mods")

    def test_visit_module_outcomes(self, memory_source):
        memory_source.add_module("/mods/login", {"singleton": True}, payload="app")
        discovery = Discovery(memory_source)
        found = {}

        assert discovery.visit_module("login", "/mods/login", found) == DiscoveryOutcome.REGISTERED
        assert discovery.visit_module("login", "/mods/login", found) == DiscoveryOutcome.SKIPPED_DUPLICATE
        assert list(found) == ["login"]


class TestDiscoveryErrors:
    """Malformed module directories abort discovery."""

    def test_missing_payload_without_custom_install(self, memory_source):
        memory_source.add_module("/mods/login", {"singleton": True}, with_payload=False)

        with pytest.raises(ConfigurationError) as exc_info:
            Discovery(memory_source).discover(["/mods"])
        assert exc_info.value.module_name == "login"

    def test_missing_payload_with_custom_install(self, memory_source):
        memory_source.add_module("/mods/login", {"install": _custom_install}, with_payload=False)

        result = Discovery(memory_source).discover(["/mods"])
        assert result.modules[0].payload_location is None

    @pytest.mark.parametrize("meta", [None, {}])
    def test_empty_meta(self, memory_source, meta):
        memory_source.add_module("/mods/login", meta, payload=object)

        with pytest.raises(ConfigurationError, match="login"):
            Discovery(memory_source).discover(["/mods"])

    def test_error_halts_discovery(self, memory_source):
        loaded = []

        def load_meta(path):
            loaded.append(path)
            return memory_source.load_meta(path)

        memory_source.add_module("/mods/a", {"singleton": True}, with_payload=False)
        memory_source.add_module("/mods/b", {"singleton": True}, payload=object)

        with pytest.raises(ConfigurationError):
            Discovery(memory_source, load_meta=load_meta).discover(["/mods"])
        assert loaded == ["/mods/a/meta.py"]

    def test_root_must_be_a_directory(self, memory_source):
        with pytest.raises(ConfigurationError, match="not a directory"):
            Discovery(memory_source).discover(["/nowhere"])

    def test_empty_roots(self, memory_source):
        result = Discovery(memory_source).discover([])
        assert len(result) == 0
        assert result.roots == ()


class TestDiscoveryOnDisk:
    """Discovery over real directories with Python meta files."""

    def test_login_tree(self, tmp_path, write_module):
        write_module("mods/login", "META = {'singleton': True}\n", "PAYLOAD = 'login'\n")
        write_module("mods/login/oauth", "META = {'use': ['x']}\n", "PAYLOAD = 'oauth'\n")
        (tmp_path / "mods" / "notes").mkdir()

        result = Discovery().discover([tmp_path / "mods"])

        assert result.names() == ["login", "login.oauth"]
        login = result.modules[0]
        assert login.location == os.path.join(str(tmp_path), "mods", "login")
        assert login.payload_location == os.path.join(login.location, "payload.py")

    def test_custom_filenames(self, tmp_path):
        module_dir = tmp_path / "mods" / "login"
        module_dir.mkdir(parents=True)
        (module_dir / "module_meta.py").write_text("META = {'singleton': True}\n", encoding="utf-8")
        (module_dir / "impl.py").write_text("PAYLOAD = 1\n", encoding="utf-8")

        discovery = Discovery(meta_filename="module_meta.py", payload_filename="impl.py")
        result = discovery.discover([tmp_path / "mods"])

        assert result.modules[0].payload_location.endswith("impl.py")

    def test_meta_without_meta_attribute(self, write_module, tmp_path):
        write_module("mods/login", "VALUE = 1\n", "PAYLOAD = 1\n")

        with pytest.raises(ConfigurationError, match="Invalid meta"):
            Discovery().discover([tmp_path / "mods"])
