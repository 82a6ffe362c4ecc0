"""
Hook set — per-instance commands run at fixed points of the lifecycle.

Variables of the form ``$(NAME)`` are substituted once, when the set
is built. The resulting model is frozen, so running a hook twice never
substitutes twice.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

_VARIABLE_RE = re.compile(r"\$\(([A-Za-z][A-Za-z0-9_]*)\)")


def substitute_variables(text: str, variables: dict[str, str]) -> str:
    """Replace ``$(NAME)`` with ``variables[NAME]``; unknown names stay as-is."""
    def _sub(match: re.Match[str]) -> str:
        return variables.get(match.group(1), match.group(0))

    return _VARIABLE_RE.sub(_sub, text)


class HookSet(BaseModel):
    """Substituted hook commands, keyed by hook name (e.g. ``post_install``)."""

    model_config = ConfigDict(frozen=True)

    commands: dict[str, str] = Field(default_factory=dict)

    def get(self, hook_name: str) -> str | None:
        return self.commands.get(hook_name)

    @classmethod
    def from_mapping(
        cls,
        hooks: dict[str, Any],
        variables: dict[str, Any] | None = None,
    ) -> HookSet:
        """Build a hook set, substituting variables into every command."""
        values = {str(k): str(v) for k, v in (variables or {}).items()}
        commands = {
            str(name): substitute_variables(str(command), values)
            for name, command in hooks.items()
            if command is not None
        }
        return cls(commands=commands)
