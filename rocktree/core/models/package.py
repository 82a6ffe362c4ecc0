"""
Package identity and provider records.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class PackageInstance(BaseModel):
    """An installed unit, identified by (name, version)."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str

    def __str__(self) -> str:
        return f"{self.name} {self.version}"


class ProviderRecord(BaseModel):
    """The instance currently occupying an unversioned deployed path."""

    name: str
    version: str

    def is_instance(self, name: str, version: str) -> bool:
        return self.name == name and self.version == version
