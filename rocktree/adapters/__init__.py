"""Adapters — bindings to the filesystem and to external commands.

Public re-exports for convenient access.
"""

from rocktree.adapters.base import Adapter, ExecutionContext
from rocktree.adapters.mock import MockAdapter
from rocktree.adapters.shell.command import ShellCommandAdapter
from rocktree.adapters.shell.filesystem import FilesystemAdapter

__all__ = [
    "Adapter",
    "ExecutionContext",
    "FilesystemAdapter",
    "MockAdapter",
    "ShellCommandAdapter",
]
