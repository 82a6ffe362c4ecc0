"""
Rock manifest model — the per-instance list of files, grouped by kind.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Literal

from pydantic import BaseModel

from rocktree.core.models.tree import Directory

Kind = Literal["commands", "source", "compiled"]

# Deployment and removal always walk the kinds in this order.
KINDS: tuple[Kind, ...] = ("commands", "source", "compiled")


class RockManifest(BaseModel):
    """Files provided by one installed (name, version).

    A missing kind means the instance provides nothing of that kind.
    """

    commands: Directory | None = None
    source: Directory | None = None
    compiled: Directory | None = None

    def tree(self, kind: Kind) -> Directory | None:
        return getattr(self, kind)

    def kinds(self) -> Iterator[tuple[Kind, Directory]]:
        """Yield (kind, tree) for every present kind, in fixed order."""
        for kind in KINDS:
            tree = self.tree(kind)
            if tree is not None:
                yield kind, tree

    @classmethod
    def from_mapping(cls, raw: dict[str, Any]) -> RockManifest:
        """Build a manifest from its YAML mapping form."""
        trees: dict[str, Directory] = {}
        for kind in KINDS:
            value = raw.get(kind)
            if isinstance(value, dict):
                trees[kind] = Directory.from_mapping(value)
        return cls(**trees)

    def to_mapping(self) -> dict[str, Any]:
        return {kind: tree.to_mapping() for kind, tree in self.kinds()}
