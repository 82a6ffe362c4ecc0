"""
Repository index — read-only queries over installed instances.

The install directories are the source of truth for what is
installed; the deploy roots are only consulted to classify commands.
None of these queries fail on a missing manifest or subtree.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from rocktree.adapters.shell.filesystem import FilesystemAdapter
from rocktree.core.errors import require_name, require_name_version
from rocktree.core.models.config import RepositoryConfig
from rocktree.core.models.manifest import RockManifest
from rocktree.core.models.package import PackageInstance
from rocktree.core.models.tree import Directory, Leaf
from rocktree.core.repository import paths
from rocktree.core.repository.manifest import load_manifest

logger = logging.getLogger(__name__)

ManifestLoader = Callable[[RepositoryConfig, str, str], RockManifest | None]


def _flatten(
    tree: Directory,
    result: dict[str, str],
    prefix: str = "",
    key_fn: Callable[[str], str] | None = None,
) -> None:
    # Later paths with the same key overwrite earlier ones; the winner
    # depends on manifest order, which is not a defined order.
    for segment, node in tree.items():
        match node:
            case Directory():
                _flatten(node, result, f"{prefix}{segment}/", key_fn)
            case Leaf():
                pathname = f"{prefix}{segment}"
                result[key_fn(pathname) if key_fn else pathname] = pathname


class RepositoryIndex:
    """Queries over the installed instances of one tree."""

    def __init__(
        self,
        cfg: RepositoryConfig,
        fs: FilesystemAdapter | None = None,
        manifest_loader: ManifestLoader = load_manifest,
    ):
        self._cfg = cfg
        self._fs = fs or FilesystemAdapter()
        self._load_manifest = manifest_loader

    def list_versions(self, name: str) -> list[str]:
        """Installed versions of ``name``; empty if none."""
        require_name(name)
        versions_dir = paths.versions_dir(self._cfg, name)
        return [
            entry for entry in self._fs.list_dir(versions_dir)
            if self._fs.is_dir(versions_dir / entry)
        ]

    def instances(self, name: str) -> list[PackageInstance]:
        return [PackageInstance(name=name, version=v) for v in self.list_versions(name)]

    def is_installed(self, name: str, version: str) -> bool:
        require_name_version(name, version)
        return self._fs.is_dir(paths.install_dir(self._cfg, name, version))

    def manifest(self, name: str, version: str) -> RockManifest | None:
        require_name_version(name, version)
        return self._load_manifest(self._cfg, name, version)

    def module_map(self, name: str, version: str) -> dict[str, str]:
        """Module identifier -> relative path, over compiled then source modules.

        Example: ``{"a": "a.lua", "sub.b": "sub/b.lua"}``.
        """
        manifest = self.manifest(name, version)
        result: dict[str, str] = {}
        if manifest is None:
            return result

        def key_fn(pathname: str) -> str:
            return paths.module_id(pathname, self._cfg)

        for tree in (manifest.compiled, manifest.source):
            if tree is not None:
                _flatten(tree, result, key_fn=key_fn)
        return result

    def command_map(self, name: str, version: str) -> dict[str, str]:
        """Command name -> relative path."""
        manifest = self.manifest(name, version)
        result: dict[str, str] = {}
        if manifest is not None and manifest.commands is not None:
            _flatten(manifest.commands, result)
        return result

    def has_compiled_executables(self, name: str, version: str) -> bool:
        """Whether any deployed command of the instance is a native binary."""
        manifest = self.manifest(name, version)
        if manifest is None or not manifest.commands:
            return False
        bin_dir = self._cfg.deploy_dir("commands")
        # TODO: check the deployed file is this instance's copy, not another provider's.
        return any(self._fs.is_native_binary(bin_dir / command) for command, _ in manifest.commands.items())
