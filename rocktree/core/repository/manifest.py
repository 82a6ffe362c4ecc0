"""
Manifest I/O — the per-instance rock_manifest.yml and hooks.yml files.

The manifest records every file an instance provides, per kind, as a
nested mapping of path segments with an MD5 checksum at each file.
An instance without a manifest predates rocktree (or is corrupt) and
is not managed.
"""

from __future__ import annotations

import hashlib
import logging
import tempfile
from pathlib import Path
from typing import Any

import yaml

from rocktree.core.errors import RepoIOError
from rocktree.core.models.config import RepositoryConfig
from rocktree.core.models.hooks import HookSet
from rocktree.core.models.manifest import KINDS, RockManifest
from rocktree.core.models.tree import Directory, Leaf, Node
from rocktree.core.repository import paths

logger = logging.getLogger(__name__)


def load_manifest(cfg: RepositoryConfig, name: str, version: str) -> RockManifest | None:
    """Load the manifest of an installed instance, or None if unmanaged."""
    path = paths.manifest_path(cfg, name, version)
    if not path.is_file():
        return None
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Cannot read manifest %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        logger.warning("Manifest %s is not a mapping", path)
        return None
    return RockManifest.from_mapping(data)


def _md5(path: Path) -> str:
    digest = hashlib.md5()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def _scan(directory: Path) -> Directory:
    entries: dict[str, Node] = {}
    for child in sorted(directory.iterdir()):
        if child.is_dir():
            entries[child.name] = _scan(child)
        else:
            entries[child.name] = Leaf(checksum=_md5(child))
    return Directory(entries=entries)


def build_manifest(cfg: RepositoryConfig, name: str, version: str) -> RockManifest:
    """Describe the files currently sitting in an install directory.

    Must run before deployment, which moves source and compiled
    modules out of the install directory.
    """
    trees: dict[str, Directory] = {}
    for kind in KINDS:
        source = paths.kind_dir(cfg, name, version, kind)
        if source.is_dir():
            try:
                trees[kind] = _scan(source)
            except OSError as e:
                raise RepoIOError(f"Cannot scan {source}: {e}") from e
    return RockManifest(**trees)


def write_manifest(cfg: RepositoryConfig, name: str, version: str, manifest: RockManifest) -> Path:
    """Write rock_manifest.yml atomically; returns its path."""
    path = paths.manifest_path(cfg, name, version)
    content = yaml.safe_dump(manifest.to_mapping(), sort_keys=True, default_flow_style=False)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".manifest_", suffix=".tmp")
        tmp = Path(tmp_path)
        try:
            with open(fd, "w", encoding="utf-8") as f:
                f.write(content)
            tmp.replace(path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise
    except OSError as e:
        raise RepoIOError(f"Cannot write manifest {path}: {e}") from e
    logger.debug("Manifest written to %s", path)
    return path


def _hook_variables(cfg: RepositoryConfig, name: str, version: str) -> dict[str, str]:
    prefix = paths.install_dir(cfg, name, version)
    return {
        "PREFIX": str(prefix),
        "BINDIR": str(paths.kind_dir(cfg, name, version, "commands")),
        "LUADIR": str(paths.kind_dir(cfg, name, version, "source")),
        "LIBDIR": str(paths.kind_dir(cfg, name, version, "compiled")),
    }


def load_hooks(cfg: RepositoryConfig, name: str, version: str) -> HookSet | None:
    """Load hooks.yml with variables already substituted, or None.

    Variables declared in the file override the instance defaults
    (``PREFIX``, ``BINDIR``, ``LUADIR``, ``LIBDIR``).
    """
    path = paths.hooks_path(cfg, name, version)
    if not path.is_file():
        return None
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise RepoIOError(f"Cannot read hooks {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("hooks"), dict):
        return None
    variables = _hook_variables(cfg, name, version)
    declared = data.get("variables")
    if isinstance(declared, dict):
        variables.update({str(k): str(v) for k, v in declared.items()})
    return HookSet.from_mapping(data["hooks"], variables)
