"""
File tree deployment — project one instance's files into a deploy root,
and retract them again.

Both walks are best effort: the first failure aborts the rest of the
walk and propagates, and whatever was already placed (or removed)
stays that way.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from pathlib import Path

from rocktree.core.errors import ConflictTrackingError
from rocktree.core.models.tree import Directory, Leaf
from rocktree.core.repository.conflicts import resolve_conflict
from rocktree.core.repository.context import RepositoryContext
from rocktree.core.repository.paths import versioned_name

logger = logging.getLogger(__name__)

PlaceFn = Callable[[Path, Path], None]

_LUA_SHEBANG = re.compile(r"#!.*lua")


# ── Place functions ─────────────────────────────────────────────


def is_script(ctx: RepositoryContext, source: Path) -> bool:
    """Whether a command is an interpreted script rather than a native binary."""
    if source.name.endswith(f".{ctx.cfg.lua_extension}"):
        return True
    return _LUA_SHEBANG.match(ctx.fs.read_first_line(source)) is not None


def install_command(ctx: RepositoryContext, source: Path, target: Path) -> None:
    """Deploy a command: scripts get a launcher, binaries are copied."""
    if is_script(ctx, source):
        ctx.fs.wrap_as_script(source, target, ctx.cfg.lua_interpreter)
    else:
        ctx.fs.copy_as_binary(source, target)


# ── Deploy ──────────────────────────────────────────────────────


def deploy_file_tree(
    ctx: RepositoryContext,
    name: str,
    version: str,
    tree: Directory,
    source_dir: Path,
    deploy_dir: Path,
    place_fn: PlaceFn | None = None,
) -> None:
    """Place every file of ``tree`` from ``source_dir`` under ``deploy_dir``.

    An occupied target goes through conflict resolution first. When the
    file lands on the unversioned path, (name, version) becomes its
    recorded provider.

    Raises:
        RepoIOError: A filesystem primitive failed.
        ConflictTrackingError: An occupied target has no tracked provider.
    """
    place = place_fn or ctx.fs.move
    ctx.fs.make_dir(deploy_dir)

    for segment, node in tree.items():
        source = source_dir / segment
        target = deploy_dir / segment
        match node:
            case Directory():
                deploy_file_tree(ctx, name, version, node, source, target, place_fn)
                ctx.fs.remove_dir_if_empty(source)
            case Leaf():
                final = target
                if ctx.fs.exists(target):
                    try:
                        final = resolve_conflict(ctx, name, version, target)
                    except ConflictTrackingError as e:
                        raise ConflictTrackingError(f"{e} Cannot install new version.") from e
                place(source, final)
                if final == target:
                    ctx.providers.record(target, name, version)
                logger.debug("Placed %s", final)


# ── Undeploy ────────────────────────────────────────────────────


def undeploy_file_tree(
    ctx: RepositoryContext,
    name: str,
    version: str,
    tree: Directory,
    deploy_dir: Path,
) -> None:
    """Remove every file (name, version) placed for ``tree`` under ``deploy_dir``.

    A file under this instance's versioned name is removed alone, leaving
    the unversioned occupant alone. Otherwise the unversioned file is
    removed and its slot stays vacant: no remaining versioned copy is
    promoted into it.

    Raises:
        RepoIOError: A filesystem primitive failed.
    """
    for segment, node in tree.items():
        target = deploy_dir / segment
        match node:
            case Directory():
                undeploy_file_tree(ctx, name, version, node, target)
                ctx.fs.remove_dir_if_empty(target)
            case Leaf():
                versioned = versioned_name(target, name, version)
                if ctx.fs.exists(versioned):
                    ctx.fs.delete(versioned)
                else:
                    ctx.fs.delete(target)
                    ctx.providers.forget(target, name, version)
