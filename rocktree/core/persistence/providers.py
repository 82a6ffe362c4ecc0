"""
Provider table persistence — who occupies each unversioned deployed path.

The table is stored as JSON in ``<rocks_dir>/providers.json``. Writes
are atomic (write to temp file, then rename) so a crash mid-write
leaves the previous table intact.
"""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path

from pydantic import BaseModel, Field

from rocktree.core.errors import RepoIOError
from rocktree.core.models.config import RepositoryConfig
from rocktree.core.models.package import ProviderRecord

logger = logging.getLogger(__name__)

DEFAULT_PROVIDERS_FILE = "providers.json"


class ProviderTable(BaseModel):
    """Deployed path -> provider of the unversioned file at that path."""

    schema_version: int = 1
    providers: dict[str, ProviderRecord] = Field(default_factory=dict)

    def find_current_provider(self, path: Path) -> ProviderRecord:
        """Provider of the unversioned file at ``path``.

        Raises:
            LookupError: If nothing is tracked for ``path``.
        """
        record = self.providers.get(str(path))
        if record is None:
            raise LookupError(f"File {path} is not tracked by rocktree.")
        return record

    def record(self, path: Path, name: str, version: str) -> None:
        self.providers[str(path)] = ProviderRecord(name=name, version=version)

    def forget(self, path: Path, name: str, version: str) -> bool:
        """Drop the record for ``path`` if it names (name, version)."""
        key = str(path)
        current = self.providers.get(key)
        if current is not None and current.is_instance(name, version):
            del self.providers[key]
            return True
        return False


def default_providers_path(cfg: RepositoryConfig) -> Path:
    return cfg.records_dir / DEFAULT_PROVIDERS_FILE


def load_providers(path: Path) -> ProviderTable:
    """Load the provider table; a missing file is an empty table.

    A corrupt file is logged and treated as empty: every occupied path
    then fails conflict resolution until the table is rebuilt.

    Raises:
        RepoIOError: The file exists but cannot be read.
    """
    if not path.exists():
        logger.debug("No provider table at %s — starting empty", path)
        return ProviderTable()

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise RepoIOError(f"Cannot read provider table {path}: {e}") from e

    try:
        return ProviderTable.model_validate(json.loads(text))
    except ValueError as e:
        logger.warning("Corrupt provider table %s: %s — starting empty", path, e)
        return ProviderTable()


def save_providers(table: ProviderTable, path: Path) -> None:
    """Save the provider table (atomic write).

    Raises:
        RepoIOError: The table could not be written.
    """
    data = table.model_dump(mode="json")
    content = json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False) + "\n"

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        _fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".providers_", suffix=".tmp")
        tmp = Path(tmp_path)
        try:
            with open(_fd, "w", encoding="utf-8") as f:
                f.write(content)
            tmp.replace(path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise
    except OSError as e:
        raise RepoIOError(f"Cannot save provider table {path}: {e}") from e
    logger.debug("Provider table saved to %s (%d entries)", path, len(table.providers))
