"""
Path naming — where instances live and how deployed files are named.

Layout under ``rocks_dir``::

    <rocks_dir>/<name>/<version>/rock_manifest.yml
    <rocks_dir>/<name>/<version>/bin/...    commands
    <rocks_dir>/<name>/<version>/lua/...    source modules
    <rocks_dir>/<name>/<version>/lib/...    compiled modules
"""

from __future__ import annotations

import re
from pathlib import Path

from rocktree.core.models.config import RepositoryConfig

MANIFEST_FILE = "rock_manifest.yml"
HOOKS_FILE = "hooks.yml"

_KIND_SUBDIRS = {
    "commands": "bin",
    "source": "lua",
    "compiled": "lib",
}


def versions_dir(cfg: RepositoryConfig, name: str) -> Path:
    """Directory holding every installed version of ``name``."""
    return cfg.records_dir / name


def install_dir(cfg: RepositoryConfig, name: str, version: str) -> Path:
    return versions_dir(cfg, name) / version


def kind_dir(cfg: RepositoryConfig, name: str, version: str, kind: str) -> Path:
    """Per-kind source directory inside an install directory."""
    return install_dir(cfg, name, version) / _KIND_SUBDIRS[kind]


def manifest_path(cfg: RepositoryConfig, name: str, version: str) -> Path:
    return install_dir(cfg, name, version) / MANIFEST_FILE


def hooks_path(cfg: RepositoryConfig, name: str, version: str) -> Path:
    return install_dir(cfg, name, version) / HOOKS_FILE


def versioned_name(path: Path, name: str, version: str) -> Path:
    """Sibling of ``path`` qualified with the owning instance.

    ``share/lua/foo/bar.lua`` for ``("foo", "1.0-1")`` becomes
    ``share/lua/foo/foo_1_0_1-bar.lua``.
    """
    name_version = re.sub(r"[-.]", "_", f"{name}_{version}")
    return path.parent / f"{name_version}-{path.name}"


def module_id(relative_path: str, cfg: RepositoryConfig) -> str:
    """Dotted module identifier for a deployed relative path.

    ``sub/b.lua`` -> ``sub.b``; ``foo/init.lua`` -> ``foo``;
    ``core.so`` -> ``core``. Unrecognized extensions are kept.
    """
    name = relative_path
    for ext in (cfg.lua_extension, cfg.lib_extension):
        suffix = f".{ext}"
        if name.endswith(suffix):
            name = name[: -len(suffix)]
            break
    name = name.replace("/", ".")
    if name.endswith(".init"):
        name = name[: -len(".init")]
    return name
