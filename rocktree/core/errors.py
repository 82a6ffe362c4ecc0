"""
Repository errors — the failure taxonomy of the deployment engine.

Every public repository operation either succeeds or raises one of
these. Each layer adds at most one contextual phrase and re-raises;
nothing is retried and nothing is rolled back.
"""

from __future__ import annotations


class RepositoryError(Exception):
    """Base class for all rocktree repository failures."""


class ValidationError(RepositoryError):
    """Malformed arguments — a programmer error, always fatal."""


class NotFoundError(RepositoryError):
    """The instance has no manifest — not a managed install."""


class ConflictTrackingError(RepositoryError):
    """A deployed file exists but no provider is tracked for it."""


class RepoIOError(RepositoryError):
    """A filesystem primitive failed."""


class HookError(RepositoryError):
    """A hook command failed to run."""


def require_name(name: object) -> None:
    if not isinstance(name, str) or not name:
        raise ValidationError(f"Invalid package name: {name!r}")


def require_name_version(name: object, version: object) -> None:
    """Reject empty or non-string package coordinates."""
    require_name(name)
    if not isinstance(version, str) or not version:
        raise ValidationError(f"Invalid package version: {version!r}")
