"""
Domain models — Pydantic types for the local tree.

All models are re-exported here for convenient access:

    from rocktree.core.models import Directory, Leaf, RockManifest, RepositoryConfig
"""

from rocktree.core.models.action import Action, Receipt
from rocktree.core.models.config import RepositoryConfig
from rocktree.core.models.hooks import HookSet
from rocktree.core.models.manifest import KINDS, RockManifest
from rocktree.core.models.package import PackageInstance, ProviderRecord
from rocktree.core.models.tree import Directory, Leaf, Node

__all__ = [
    "KINDS",
    # action.py
    "Action",
    # tree.py
    "Directory",
    # hooks.py
    "HookSet",
    "Leaf",
    "Node",
    # package.py
    "PackageInstance",
    "ProviderRecord",
    "Receipt",
    # config.py
    "RepositoryConfig",
    # manifest.py
    "RockManifest",
]
