"""
Deploy and remove use cases — the full slice from CLI intent to audited change.

Each run loads the tree config, opens the orchestrator with the
persisted provider table, performs the operation and appends one
audit entry whatever the outcome.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path

from rocktree.adapters.base import Adapter
from rocktree.core.config.loader import load_config
from rocktree.core.errors import RepositoryError
from rocktree.core.models.config import RepositoryConfig
from rocktree.core.persistence.audit import DEFAULT_AUDIT_FILE, AuditEntry, AuditWriter
from rocktree.core.repository import paths
from rocktree.core.repository.context import RepositoryContext
from rocktree.core.repository.manifest import load_hooks
from rocktree.core.repository.orchestrator import Orchestrator

logger = logging.getLogger(__name__)

POST_INSTALL_HOOK = "post_install"


@dataclass
class OperationResult:
    """Outcome of a deploy or remove."""

    operation: str
    name: str
    version: str
    ok: bool = False
    hook_ran: bool = False
    duration_ms: int = 0
    error: str | None = None

    def to_dict(self) -> dict:
        result: dict = {
            "operation": self.operation,
            "name": self.name,
            "version": self.version,
            "status": "ok" if self.ok else "failed",
            "duration_ms": self.duration_ms,
        }
        if self.operation == "deploy":
            result["hook_ran"] = self.hook_ran
        if self.error:
            result["error"] = self.error
        return result


def _audit(cfg: RepositoryConfig, result: OperationResult) -> None:
    AuditWriter(cfg.records_dir / DEFAULT_AUDIT_FILE).write(AuditEntry(
        operation_type=result.operation,
        package=result.name,
        version=result.version,
        status="ok" if result.ok else "failed",
        duration_ms=result.duration_ms,
        errors=[result.error] if result.error else [],
    ))


def run_deploy(
    name: str,
    version: str,
    config_path: Path | None = None,
    run_hooks: bool = True,
    runner: Adapter | None = None,
) -> OperationResult:
    """Deploy (name, version), then run its post_install hook."""
    result = OperationResult(operation="deploy", name=name, version=version)
    try:
        cfg = load_config(config_path)
    except RepositoryError as e:
        result.error = str(e)
        return result

    start = time.monotonic()
    try:
        orchestrator = Orchestrator.open(RepositoryContext(cfg=cfg), runner=runner)
        orchestrator.deploy_all(name, version)
        if run_hooks:
            hooks = load_hooks(cfg, name, version)
            if hooks is not None and hooks.get(POST_INSTALL_HOOK) is not None:
                orchestrator.run_hook(
                    hooks, POST_INSTALL_HOOK,
                    cwd=paths.install_dir(cfg, name, version),
                    package=f"{name} {version}",
                )
                result.hook_ran = True
        result.ok = True
    except RepositoryError as e:
        logger.error("Deploy of %s %s failed: %s", name, version, e)
        result.error = str(e)

    result.duration_ms = int((time.monotonic() - start) * 1000)
    _audit(cfg, result)
    return result


def run_remove(name: str, version: str, config_path: Path | None = None) -> OperationResult:
    """Undeploy (name, version) and delete it from the tree."""
    result = OperationResult(operation="remove", name=name, version=version)
    try:
        cfg = load_config(config_path)
    except RepositoryError as e:
        result.error = str(e)
        return result

    start = time.monotonic()
    try:
        Orchestrator.open(RepositoryContext(cfg=cfg)).remove_all(name, version)
        result.ok = True
    except RepositoryError as e:
        logger.error("Removal of %s %s failed: %s", name, version, e)
        result.error = str(e)

    result.duration_ms = int((time.monotonic() - start) * 1000)
    _audit(cfg, result)
    return result
