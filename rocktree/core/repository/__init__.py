"""Repository core — index, conflict policy, deploy/undeploy, orchestration."""

from rocktree.core.repository.context import RepositoryContext
from rocktree.core.repository.index import RepositoryIndex
from rocktree.core.repository.orchestrator import Orchestrator

__all__ = [
    "Orchestrator",
    "RepositoryContext",
    "RepositoryIndex",
]
