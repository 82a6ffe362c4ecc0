"""
Manifest use case — record what an install directory provides.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from rocktree.core.config.loader import load_config
from rocktree.core.errors import RepositoryError, require_name_version
from rocktree.core.repository.manifest import build_manifest, load_manifest, write_manifest


@dataclass
class ManifestResult:
    name: str
    version: str
    path: str = ""
    manifest: dict = field(default_factory=dict)
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "name": self.name,
            "version": self.version,
            "path": self.path,
            "manifest": self.manifest,
        }


def make_manifest(name: str, version: str, config_path: Path | None = None) -> ManifestResult:
    """Scan the install directory of (name, version) and write its manifest."""
    result = ManifestResult(name=name, version=version)
    try:
        require_name_version(name, version)
        cfg = load_config(config_path)
        manifest = build_manifest(cfg, name, version)
        result.path = str(write_manifest(cfg, name, version, manifest))
        result.manifest = manifest.to_mapping()
    except RepositoryError as e:
        result.error = str(e)
    return result


def show_manifest(name: str, version: str, config_path: Path | None = None) -> ManifestResult:
    """Read the stored manifest of (name, version)."""
    result = ManifestResult(name=name, version=version)
    try:
        require_name_version(name, version)
        cfg = load_config(config_path)
        manifest = load_manifest(cfg, name, version)
        if manifest is None:
            result.error = f"No manifest for {name} {version}"
            return result
        result.manifest = manifest.to_mapping()
    except RepositoryError as e:
        result.error = str(e)
    return result
