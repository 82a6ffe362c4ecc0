"""
Deployment orchestrator — deploy or remove a whole instance.

Walks commands, source modules and compiled modules in that fixed
order, stops at the first failure, and owns the lifecycle of the
install directory. Provider records are persisted after every walk,
including a failed one, so the table matches what was actually placed.
"""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path

from rocktree.adapters.base import Adapter, ExecutionContext
from rocktree.adapters.shell.command import ShellCommandAdapter
from rocktree.core.errors import HookError, NotFoundError, RepoIOError, require_name_version
from rocktree.core.models.action import Action
from rocktree.core.models.hooks import HookSet
from rocktree.core.models.manifest import RockManifest
from rocktree.core.persistence.providers import (
    default_providers_path,
    load_providers,
    save_providers,
)
from rocktree.core.repository import paths
from rocktree.core.repository.context import RepositoryContext
from rocktree.core.repository.deploy import (
    PlaceFn,
    deploy_file_tree,
    install_command,
    undeploy_file_tree,
)
from rocktree.core.repository.index import RepositoryIndex

logger = logging.getLogger(__name__)


class Orchestrator:
    """Deploys and removes instances of one tree."""

    def __init__(
        self,
        ctx: RepositoryContext,
        index: RepositoryIndex | None = None,
        runner: Adapter | None = None,
        providers_path: Path | None = None,
    ):
        self._ctx = ctx
        self._index = index or RepositoryIndex(ctx.cfg, ctx.fs)
        self._runner = runner or ShellCommandAdapter()
        self._providers_path = providers_path

    @classmethod
    def open(cls, ctx: RepositoryContext, **kwargs) -> Orchestrator:
        """Build an orchestrator with the tree's persisted provider table."""
        path = default_providers_path(ctx.cfg)
        ctx.providers = load_providers(path)
        return cls(ctx, providers_path=path, **kwargs)

    @property
    def index(self) -> RepositoryIndex:
        return self._index

    def _require_manifest(self, name: str, version: str) -> RockManifest:
        manifest = self._index.manifest(name, version)
        if manifest is None:
            raise NotFoundError(
                f"rock_manifest file not found for {name} {version} - not a rocktree-managed install?"
            )
        return manifest

    def _save_providers(self) -> None:
        if self._providers_path is not None:
            save_providers(self._ctx.providers, self._providers_path)

    def _save_providers_after_failure(self) -> None:
        # The walk error is already propagating; it must not be replaced.
        try:
            self._save_providers()
        except RepoIOError as e:
            logger.error("Provider table not saved after failed walk: %s", e)

    def deploy_all(self, name: str, version: str) -> None:
        """Deploy every file of (name, version) into the deploy roots.

        Raises:
            NotFoundError: No manifest for the instance.
            RepoIOError, ConflictTrackingError: From the first failing file.
        """
        require_name_version(name, version)
        manifest = self._require_manifest(name, version)
        cfg = self._ctx.cfg

        try:
            for kind, tree in manifest.kinds():
                place: PlaceFn | None = None
                if kind == "commands":
                    place = partial(install_command, self._ctx)
                logger.info("Deploying %s of %s %s", kind, name, version)
                deploy_file_tree(
                    self._ctx, name, version, tree,
                    paths.kind_dir(cfg, name, version, kind),
                    cfg.deploy_dir(kind),
                    place,
                )
        except Exception:
            self._save_providers_after_failure()
            raise
        self._save_providers()

    def remove_all(self, name: str, version: str) -> None:
        """Undeploy (name, version) and delete its install directory.

        The package's records directory goes too once no version is left.
        Nothing is deleted from the records if undeployment fails.

        Raises:
            NotFoundError: No manifest for the instance.
            RepoIOError: From the first failing file.
        """
        require_name_version(name, version)
        manifest = self._require_manifest(name, version)
        cfg = self._ctx.cfg

        try:
            for kind, tree in manifest.kinds():
                logger.info("Removing %s of %s %s", kind, name, version)
                undeploy_file_tree(self._ctx, name, version, tree, cfg.deploy_dir(kind))
        except Exception:
            self._save_providers_after_failure()
            raise
        self._save_providers()

        self._ctx.fs.delete(paths.install_dir(cfg, name, version))
        if not self._index.list_versions(name):
            self._ctx.fs.delete(paths.versions_dir(cfg, name))
        logger.info("Removed %s %s", name, version)

    def run_hook(
        self,
        hooks: HookSet | None,
        hook_name: str,
        cwd: Path | None = None,
        package: str | None = None,
    ) -> None:
        """Run ``hook_name`` from an already substituted hook set, if present.

        ``package`` ("name version") tags the action for the runner.

        Raises:
            HookError: The runner is unavailable or the hook command failed.
        """
        if hooks is None:
            return
        command = hooks.get(hook_name)
        if command is None:
            return

        if not self._runner.is_available():
            raise HookError(f"Cannot run {hook_name} hook: {self._runner.name} runner is not available")

        logger.info("Running %s hook: %s", hook_name, command)
        action = Action(id=hook_name, params={"command": command}, package=package)
        context = ExecutionContext(action=action, cwd=str(cwd or self._ctx.cfg.tree))
        receipt = self._runner.run(context)
        if receipt.failed:
            raise HookError(f"Failed running {hook_name} hook: {receipt.error}")
