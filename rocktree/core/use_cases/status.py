"""
Status use case — what is installed, and what an instance provides.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from rocktree.core.config.loader import load_config
from rocktree.core.errors import RepositoryError
from rocktree.core.repository.index import RepositoryIndex


@dataclass
class PackageStatus:
    """Installed versions of a package, plus details for one version."""

    name: str = ""
    versions: list[str] = field(default_factory=list)
    version: str | None = None
    installed: bool = False
    managed: bool = False
    modules: dict[str, str] = field(default_factory=dict)
    commands: dict[str, str] = field(default_factory=dict)
    has_compiled_executables: bool = False
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}

        result: dict = {"name": self.name, "versions": self.versions}
        if self.version is not None:
            result.update({
                "version": self.version,
                "installed": self.installed,
                "managed": self.managed,
                "modules": self.modules,
                "commands": self.commands,
                "has_compiled_executables": self.has_compiled_executables,
            })
        return result


def get_package_status(
    name: str,
    version: str | None = None,
    config_path: Path | None = None,
) -> PackageStatus:
    """Collect status for ``name`` and, when given, for one of its versions."""
    result = PackageStatus(name=name, version=version)
    try:
        index = RepositoryIndex(load_config(config_path))
        result.versions = index.list_versions(name)
        if version is None:
            return result

        result.installed = index.is_installed(name, version)
        result.managed = index.manifest(name, version) is not None
        result.modules = index.module_map(name, version)
        result.commands = index.command_map(name, version)
        result.has_compiled_executables = index.has_compiled_executables(name, version)
    except RepositoryError as e:
        result.error = str(e)
    return result
