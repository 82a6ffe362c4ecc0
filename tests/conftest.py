"""
Shared test fixtures: a temporary tree with installed instances.
"""

from collections.abc import Callable
from pathlib import Path

import pytest

from rocktree.core.config.loader import load_config
from rocktree.core.models.config import RepositoryConfig
from rocktree.core.repository import paths
from rocktree.core.repository.context import RepositoryContext
from rocktree.core.repository.manifest import build_manifest, write_manifest

InstanceFactory = Callable[..., Path]


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """A rocktree.yml for a tree rooted at tmp_path/tree."""
    path = tmp_path / "rocktree.yml"
    path.write_text("tree: tree\nlua_interpreter: lua5.1\n")
    return path


@pytest.fixture
def cfg(config_file: Path) -> RepositoryConfig:
    return load_config(config_file)


@pytest.fixture
def ctx(cfg: RepositoryConfig) -> RepositoryContext:
    return RepositoryContext(cfg=cfg)


@pytest.fixture
def make_instance(cfg: RepositoryConfig) -> InstanceFactory:
    """Create an install directory with files and a manifest.

    Usage::

        make_instance("pkg", "1.0-1", source={"a.lua": "return 1"},
                      commands={"tool": "#!/usr/bin/env lua5.1\\n"})

    Keys are relative paths; values are file contents (str or bytes).
    """

    def _make(
        name: str,
        version: str,
        commands: dict[str, str | bytes] | None = None,
        source: dict[str, str | bytes] | None = None,
        compiled: dict[str, str | bytes] | None = None,
        manifest: bool = True,
    ) -> Path:
        install = paths.install_dir(cfg, name, version)
        install.mkdir(parents=True, exist_ok=True)
        for kind, files in (("commands", commands), ("source", source), ("compiled", compiled)):
            for rel, content in (files or {}).items():
                target = paths.kind_dir(cfg, name, version, kind) / rel
                target.parent.mkdir(parents=True, exist_ok=True)
                if isinstance(content, bytes):
                    target.write_bytes(content)
                else:
                    target.write_text(content)
        if manifest:
            write_manifest(cfg, name, version, build_manifest(cfg, name, version))
        return install

    return _make
