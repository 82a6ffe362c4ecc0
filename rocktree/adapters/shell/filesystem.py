"""
Filesystem adapter — the file and directory primitives of the deploy engine.

Unlike command adapters these primitives raise: any OSError is
re-raised as RepoIOError with the failing operation and path, and the
engine stops at the first one.
"""

from __future__ import annotations

import logging
import shutil
import stat
from pathlib import Path

from rocktree.core.errors import RepoIOError

logger = logging.getLogger(__name__)

# Second line of every launcher written by wrap_as_script.
WRAPPER_MARKER = "# rocktree wrapper"

_EXEC_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


class FilesystemAdapter:
    """Thin, raising wrapper over pathlib/shutil."""

    def list_dir(self, path: Path) -> list[str]:
        """Names of entries in ``path``; empty when it is not a directory."""
        if not path.is_dir():
            return []
        try:
            return sorted(p.name for p in path.iterdir())
        except OSError as e:
            raise RepoIOError(f"Cannot list {path}: {e}") from e

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def exists(self, path: Path) -> bool:
        return path.exists() or path.is_symlink()

    def make_dir(self, path: Path) -> None:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RepoIOError(f"Could not create {path}: {e}") from e

    def move(self, source: Path, target: Path) -> None:
        """Move a file, creating the target's parent directory."""
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(target))
        except OSError as e:
            raise RepoIOError(f"Cannot move {source} to {target}: {e}") from e
        logger.debug("Moved %s -> %s", source, target)

    def delete(self, path: Path) -> None:
        """Delete a file or a whole directory tree; absent paths are fine."""
        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            else:
                path.unlink(missing_ok=True)
        except OSError as e:
            raise RepoIOError(f"Cannot delete {path}: {e}") from e
        logger.debug("Deleted %s", path)

    def remove_dir_if_empty(self, path: Path) -> None:
        if not path.is_dir():
            return
        try:
            next(path.iterdir())
        except StopIteration:
            try:
                path.rmdir()
            except OSError as e:
                raise RepoIOError(f"Cannot remove {path}: {e}") from e
            logger.debug("Removed empty directory %s", path)

    def copy_as_binary(self, source: Path, target: Path) -> None:
        """Copy a native executable and make it executable."""
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
            target.chmod(target.stat().st_mode | _EXEC_BITS)
        except OSError as e:
            raise RepoIOError(f"Cannot copy {source} to {target}: {e}") from e

    def wrap_as_script(self, source: Path, target: Path, interpreter: str) -> None:
        """Write a launcher at ``target`` that runs ``source`` with ``interpreter``.

        The script itself stays in the install directory.
        """
        content = (
            "#!/bin/sh\n"
            f"{WRAPPER_MARKER}\n"
            f'exec "{interpreter}" "{source}" "$@"\n'
        )
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
            target.chmod(0o755)
        except OSError as e:
            raise RepoIOError(f"Cannot write wrapper {target}: {e}") from e

    def read_first_line(self, path: Path) -> str:
        """First line of a file, decoded leniently; empty if unreadable."""
        try:
            with path.open("rb") as f:
                line = f.readline(256)
        except OSError:
            return ""
        return line.decode("latin-1").rstrip("\r\n")

    def is_native_binary(self, path: Path) -> bool:
        """Whether ``path`` is a compiled executable rather than a script.

        Missing files and anything starting with a shebang (including
        our own wrappers) count as scripts.
        """
        if not path.is_file():
            return False
        return not self.read_first_line(path).startswith("#!")
