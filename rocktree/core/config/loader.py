"""
Configuration loader — reads rocktree.yml into a RepositoryConfig.

Reads YAML, resolves relative paths against the config file's
directory, validates with Pydantic and returns an immutable config.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError as PydanticValidationError

from rocktree.core.errors import RepositoryError
from rocktree.core.models.config import RepositoryConfig

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "rocktree.yml"


class ConfigError(RepositoryError):
    """Raised when the tree configuration is invalid or missing."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for rocktree.yml starting from the given directory, walking up.

    Returns:
        Path to rocktree.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_config(path: Path | None = None) -> RepositoryConfig:
    """Load and validate the tree configuration.

    Args:
        path: Explicit path to rocktree.yml. If None, searches upward.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = find_config_file()

    if path is None:
        raise ConfigError(f"No {CONFIG_FILE} found. Create one, or specify --config.")

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading tree config from %s", path)

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    base = path.parent.resolve()
    tree = Path(str(data.get("tree", ".")))
    data["tree"] = tree if tree.is_absolute() else base / tree

    try:
        cfg = RepositoryConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid tree configuration: {e}") from e

    logger.info("Loaded tree config: %s", cfg.tree)
    return cfg
