"""
Tests for the orchestrator — whole-instance deploy, removal and hooks.
"""

from pathlib import Path

import pytest

from rocktree.adapters.mock import MockAdapter
from rocktree.adapters.shell.filesystem import FilesystemAdapter
from rocktree.core.errors import (
    ConflictTrackingError,
    HookError,
    NotFoundError,
    RepoIOError,
    ValidationError,
)
from rocktree.core.models.config import RepositoryConfig
from rocktree.core.models.hooks import HookSet
from rocktree.core.persistence.providers import default_providers_path, load_providers
from rocktree.core.repository import paths
from rocktree.core.repository.context import RepositoryContext
from rocktree.core.repository.orchestrator import Orchestrator


class TestDeployAll:
    def test_deploys_every_kind(self, cfg: RepositoryConfig, make_instance):
        make_instance(
            "pkg", "1.0-1",
            commands={"tool": "#!/usr/bin/env lua5.1\n"},
            source={"pkg.lua": "return {}"},
            compiled={"pkg/core.so": b"\x7fELF"},
        )
        Orchestrator(RepositoryContext(cfg=cfg)).deploy_all("pkg", "1.0-1")

        assert (cfg.deploy_bin_dir / "tool").is_file()
        assert (cfg.deploy_lua_dir / "pkg.lua").read_text() == "return {}"
        assert (cfg.deploy_lib_dir / "pkg" / "core.so").read_bytes() == b"\x7fELF"

    def test_commands_stay_in_install_dir(self, cfg: RepositoryConfig, make_instance):
        make_instance("pkg", "1.0-1", commands={"tool.lua": "print(1)"})
        Orchestrator(RepositoryContext(cfg=cfg)).deploy_all("pkg", "1.0-1")
        assert (paths.kind_dir(cfg, "pkg", "1.0-1", "commands") / "tool.lua").is_file()

    def test_missing_manifest(self, cfg: RepositoryConfig, make_instance):
        make_instance("pkg", "1.0-1", source={"a.lua": "x"}, manifest=False)
        with pytest.raises(NotFoundError, match="rock_manifest file not found for pkg 1.0-1"):
            Orchestrator(RepositoryContext(cfg=cfg)).deploy_all("pkg", "1.0-1")
        assert not (cfg.deploy_lua_dir / "a.lua").exists()

    def test_empty_name(self, cfg: RepositoryConfig):
        with pytest.raises(ValidationError):
            Orchestrator(RepositoryContext(cfg=cfg)).deploy_all("", "1.0-1")

    def test_persists_providers(self, cfg: RepositoryConfig, make_instance):
        make_instance("pkg", "1.0-1", source={"a.lua": "x"})
        Orchestrator.open(RepositoryContext(cfg=cfg)).deploy_all("pkg", "1.0-1")

        table = load_providers(default_providers_path(cfg))
        record = table.find_current_provider(cfg.deploy_lua_dir / "a.lua")
        assert (record.name, record.version) == ("pkg", "1.0-1")

    def test_providers_survive_between_runs(self, cfg: RepositoryConfig, make_instance):
        make_instance("alpha", "1.0-1", source={"shared.lua": "alpha"})
        make_instance("beta", "1.0-1", source={"shared.lua": "beta"})

        Orchestrator.open(RepositoryContext(cfg=cfg)).deploy_all("alpha", "1.0-1")
        Orchestrator.open(RepositoryContext(cfg=cfg)).deploy_all("beta", "1.0-1")

        target = cfg.deploy_lua_dir / "shared.lua"
        assert target.read_text() == "beta"
        assert paths.versioned_name(target, "alpha", "1.0-1").is_file()

    def test_partial_deploy_is_persisted(self, cfg: RepositoryConfig, make_instance):
        make_instance("pkg", "1.0-1", source={"a.lua": "x", "b.lua": "y"})
        stray = cfg.deploy_lua_dir / "b.lua"
        stray.parent.mkdir(parents=True)
        stray.write_text("untracked")

        with pytest.raises(ConflictTrackingError, match="not tracked"):
            Orchestrator.open(RepositoryContext(cfg=cfg)).deploy_all("pkg", "1.0-1")

        table = load_providers(default_providers_path(cfg))
        assert str(cfg.deploy_lua_dir / "a.lua") in table.providers
        assert stray.read_text() == "untracked"

    def test_unwritable_table_fails_deploy(self, cfg: RepositoryConfig, make_instance):
        make_instance("pkg", "1.0-1", source={"a.lua": "x"})
        table_path = default_providers_path(cfg)
        table_path.mkdir(parents=True)

        with pytest.raises(RepoIOError, match="Cannot save provider table"):
            Orchestrator(RepositoryContext(cfg=cfg), providers_path=table_path).deploy_all("pkg", "1.0-1")

    def test_walk_error_wins_over_save_error(self, cfg: RepositoryConfig, make_instance):
        make_instance("pkg", "1.0-1", source={"a.lua": "x"})
        stray = cfg.deploy_lua_dir / "a.lua"
        stray.parent.mkdir(parents=True)
        stray.write_text("untracked")
        table_path = default_providers_path(cfg)
        table_path.mkdir(parents=True)

        with pytest.raises(ConflictTrackingError):
            Orchestrator(RepositoryContext(cfg=cfg), providers_path=table_path).deploy_all("pkg", "1.0-1")

    def test_unreadable_table_fails_open(self, cfg: RepositoryConfig):
        default_providers_path(cfg).mkdir(parents=True)
        with pytest.raises(RepoIOError, match="Cannot read provider table"):
            Orchestrator.open(RepositoryContext(cfg=cfg))


class _FailingDelete(FilesystemAdapter):
    """Filesystem whose delete fails for one path."""

    def __init__(self, broken: Path):
        self.broken = broken

    def delete(self, path: Path) -> None:
        if path == self.broken:
            raise RepoIOError(f"Cannot delete {path}: simulated")
        super().delete(path)


class TestRemoveAll:
    def test_removes_files_and_install_dir(self, cfg: RepositoryConfig, make_instance):
        make_instance("pkg", "1.0-1", source={"a.lua": "x"})
        make_instance("pkg", "2.0-1", source={"b.lua": "y"})
        orchestrator = Orchestrator(RepositoryContext(cfg=cfg))
        orchestrator.deploy_all("pkg", "1.0-1")

        orchestrator.remove_all("pkg", "1.0-1")

        assert not (cfg.deploy_lua_dir / "a.lua").exists()
        assert not paths.install_dir(cfg, "pkg", "1.0-1").exists()
        assert orchestrator.index.list_versions("pkg") == ["2.0-1"]

    def test_last_version_drops_package_dir(self, cfg: RepositoryConfig, make_instance):
        make_instance("pkg", "1.0-1", source={"a.lua": "x"})
        orchestrator = Orchestrator(RepositoryContext(cfg=cfg))
        orchestrator.deploy_all("pkg", "1.0-1")

        orchestrator.remove_all("pkg", "1.0-1")

        assert not paths.versions_dir(cfg, "pkg").exists()
        assert orchestrator.index.list_versions("pkg") == []

    def test_missing_manifest_keeps_install(self, cfg: RepositoryConfig, make_instance):
        install = make_instance("pkg", "1.0-1", source={"a.lua": "x"}, manifest=False)
        with pytest.raises(NotFoundError):
            Orchestrator(RepositoryContext(cfg=cfg)).remove_all("pkg", "1.0-1")
        assert install.is_dir()

    def test_forgets_providers(self, cfg: RepositoryConfig, make_instance):
        make_instance("pkg", "1.0-1", source={"a.lua": "x"})
        Orchestrator.open(RepositoryContext(cfg=cfg)).deploy_all("pkg", "1.0-1")
        Orchestrator.open(RepositoryContext(cfg=cfg)).remove_all("pkg", "1.0-1")

        assert load_providers(default_providers_path(cfg)).providers == {}

    def test_undeploy_failure_keeps_directories(self, cfg: RepositoryConfig, make_instance):
        install = make_instance("pkg", "1.0-1", source={"a.lua": "x", "b.lua": "y"})
        fs = _FailingDelete(cfg.deploy_lua_dir / "b.lua")
        orchestrator = Orchestrator(RepositoryContext(cfg=cfg, fs=fs))
        orchestrator.deploy_all("pkg", "1.0-1")

        with pytest.raises(RepoIOError, match="simulated"):
            orchestrator.remove_all("pkg", "1.0-1")

        assert not (cfg.deploy_lua_dir / "a.lua").exists()
        assert (cfg.deploy_lua_dir / "b.lua").is_file()
        assert install.is_dir()
        assert paths.versions_dir(cfg, "pkg").is_dir()
        assert orchestrator.index.list_versions("pkg") == ["1.0-1"]


class TestRunHook:
    @pytest.fixture
    def mock(self) -> MockAdapter:
        return MockAdapter()

    @pytest.fixture
    def orchestrator(self, cfg: RepositoryConfig, mock: MockAdapter) -> Orchestrator:
        return Orchestrator(RepositoryContext(cfg=cfg), runner=mock)

    def test_no_hooks(self, orchestrator: Orchestrator, mock: MockAdapter):
        orchestrator.run_hook(None, "post_install")
        assert mock.call_log == []

    def test_absent_hook(self, orchestrator: Orchestrator, mock: MockAdapter):
        orchestrator.run_hook(HookSet(commands={"other": "true"}), "post_install")
        assert mock.call_log == []

    def test_runs_command(self, orchestrator: Orchestrator, mock: MockAdapter, tmp_path: Path):
        hooks = HookSet.from_mapping({"post_install": "echo $(PREFIX)"}, {"PREFIX": "/opt/x"})
        orchestrator.run_hook(hooks, "post_install", cwd=tmp_path)

        assert mock.commands == ["echo /opt/x"]
        assert mock.call_log[0].cwd == str(tmp_path)

    def test_default_cwd_is_tree(self, orchestrator: Orchestrator, mock: MockAdapter, cfg: RepositoryConfig):
        orchestrator.run_hook(HookSet(commands={"post_install": "true"}), "post_install")
        assert mock.call_log[0].cwd == str(cfg.tree)

    def test_failure_raises(self, orchestrator: Orchestrator, mock: MockAdapter):
        mock.set_failure("post_install", "exit 3")
        with pytest.raises(HookError, match="Failed running post_install hook: exit 3"):
            orchestrator.run_hook(HookSet(commands={"post_install": "false"}), "post_install")

    def test_unavailable_runner(self, cfg: RepositoryConfig):
        runner = MockAdapter(available=False)
        orchestrator = Orchestrator(RepositoryContext(cfg=cfg), runner=runner)
        with pytest.raises(HookError, match="mock runner is not available"):
            orchestrator.run_hook(HookSet(commands={"post_install": "true"}), "post_install")
        assert runner.call_log == []

    def test_action_names_package(self, orchestrator: Orchestrator, mock: MockAdapter):
        orchestrator.run_hook(HookSet(commands={"post_install": "true"}), "post_install", package="pkg 1.0-1")
        assert mock.call_log[0].action.package == "pkg 1.0-1"
