"""
Conflict resolution — who gets the unversioned slot of a deployed path.

The single ownership rule of the tree: a different package name always
displaces the current occupant; the same package name displaces it
only with a strictly newer version. The loser is reachable only under
its versioned name.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rocktree.core.errors import ConflictTrackingError
from rocktree.core.repository.context import RepositoryContext
from rocktree.core.repository.paths import versioned_name

logger = logging.getLogger(__name__)


def resolve_conflict(ctx: RepositoryContext, name: str, version: str, target: Path) -> Path:
    """Decide where (name, version) places its file for an occupied ``target``.

    Returns ``target`` when the incoming instance wins; the occupant has
    then already been moved to its own versioned name. Otherwise returns
    the incoming instance's versioned name and moves nothing.

    Raises:
        ConflictTrackingError: ``target`` exists but has no tracked provider.
    """
    try:
        current = ctx.providers.find_current_provider(target)
    except LookupError as e:
        raise ConflictTrackingError(str(e)) from e

    if name != current.name or ctx.is_newer(version, current.version):
        relocated = versioned_name(target, current.name, current.version)
        logger.info(
            "%s %s takes over %s; moving %s %s copy to %s",
            name, version, target, current.name, current.version, relocated.name,
        )
        ctx.fs.move(target, relocated)
        return target

    logger.info(
        "%s %s keeps %s; installing %s %s as %s",
        current.name, current.version, target, name, version,
        versioned_name(target, name, version).name,
    )
    return versioned_name(target, name, version)
