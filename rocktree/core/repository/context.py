"""
Repository context — the collaborators every engine function works against.

One value per operation, built by the caller and passed down
explicitly: the tree config, the filesystem primitives, the provider
table and the version comparator. Nothing here is process-global.

Concurrency: the engine takes no locks. Callers must serialize all
deploy and remove operations against the same tree.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from rocktree.adapters.shell.filesystem import FilesystemAdapter
from rocktree.core.models.config import RepositoryConfig
from rocktree.core.persistence.providers import ProviderTable
from rocktree.core.repository.versions import is_newer


@dataclass
class RepositoryContext:
    cfg: RepositoryConfig
    fs: FilesystemAdapter = field(default_factory=FilesystemAdapter)
    providers: ProviderTable = field(default_factory=ProviderTable)
    is_newer: Callable[[str, str], bool] = is_newer
