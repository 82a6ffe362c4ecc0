"""
Repository configuration — where the tree and its deploy roots live.

Loaded from rocktree.yml by ``rocktree.core.config.loader``. The
config is an immutable value handed to every component; nothing in
rocktree reads process-wide settings.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, model_validator


class RepositoryConfig(BaseModel):
    """Resolved locations of a local tree.

    ``rocks_dir`` holds one directory per package name, each holding one
    install directory per version. The three deploy roots receive the
    files of every installed instance.
    """

    model_config = ConfigDict(frozen=True)

    tree: Path
    rocks_dir: Path | None = None
    deploy_bin_dir: Path | None = None      # commands
    deploy_lua_dir: Path | None = None      # platform-independent source modules
    deploy_lib_dir: Path | None = None      # compiled modules

    lua_extension: str = "lua"
    lib_extension: str = "so"
    lua_interpreter: str = "lua"

    @model_validator(mode="after")
    def _resolve_paths(self) -> RepositoryConfig:
        defaults = {
            "rocks_dir": Path("lib") / "luarocks" / "rocks",
            "deploy_bin_dir": Path("bin"),
            "deploy_lua_dir": Path("share") / "lua" / "5.1",
            "deploy_lib_dir": Path("lib") / "lua" / "5.1",
        }
        for field, default in defaults.items():
            value = getattr(self, field) or default
            if not value.is_absolute():
                value = self.tree / value
            # frozen model: bypass __setattr__ during validation
            object.__setattr__(self, field, value)
        return self

    @classmethod
    def for_tree(cls, tree: Path, **overrides: object) -> RepositoryConfig:
        """Build a config with default layout under ``tree``."""
        return cls(tree=tree, **overrides)

    def deploy_dir(self, kind: str) -> Path:
        """Deploy root for a manifest kind."""
        roots = {
            "commands": self.deploy_bin_dir,
            "source": self.deploy_lua_dir,
            "compiled": self.deploy_lib_dir,
        }
        root = roots[kind]
        assert root is not None  # filled by _resolve_paths
        return root

    @property
    def records_dir(self) -> Path:
        assert self.rocks_dir is not None
        return self.rocks_dir
