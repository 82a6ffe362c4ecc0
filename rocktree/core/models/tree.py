"""
File tree model — what one package instance provides, per kind.

A tree is a tagged variant: every node is either a ``Leaf`` (a file is
here) or a ``Directory`` mapping path segments to further nodes. The
on-disk manifest stores the same shape as nested YAML mappings, where
any non-mapping value marks a file.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field


class Leaf(BaseModel):
    """A single file. The checksum is informational only."""

    kind: Literal["leaf"] = "leaf"
    checksum: str = ""


class Directory(BaseModel):
    """A directory of named nodes."""

    kind: Literal["dir"] = "dir"
    entries: dict[str, Node] = Field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.entries)

    def items(self) -> Iterator[tuple[str, Node]]:
        """Iterate over (segment, node) pairs in manifest order."""
        return iter(self.entries.items())

    @classmethod
    def from_mapping(cls, raw: dict[str, Any]) -> Directory:
        """Build a tree from the nested-mapping manifest shape.

        Mappings become directories; anything else becomes a leaf whose
        checksum is the value's string form.
        """
        entries: dict[str, Node] = {}
        for segment, value in raw.items():
            if isinstance(value, dict):
                entries[str(segment)] = cls.from_mapping(value)
            else:
                entries[str(segment)] = Leaf(checksum="" if value is None else str(value))
        return cls(entries=entries)

    def to_mapping(self) -> dict[str, Any]:
        """Inverse of :meth:`from_mapping`."""
        out: dict[str, Any] = {}
        for segment, node in self.items():
            match node:
                case Directory():
                    out[segment] = node.to_mapping()
                case Leaf():
                    out[segment] = node.checksum
        return out


Node = Annotated[Union[Leaf, Directory], Field(discriminator="kind")]

Directory.model_rebuild()
