"""
Mock adapter — test double for command execution.

Records every command it is asked to run and succeeds unless told
otherwise for a given action ID.
"""

from __future__ import annotations

from rocktree.adapters.base import Adapter, ExecutionContext
from rocktree.core.models.action import Receipt


class MockAdapter(Adapter):
    """Command adapter that never spawns a process."""

    def __init__(self, adapter_name: str = "mock", available: bool = True):
        self._name = adapter_name
        self._available = available
        self._failures: dict[str, str] = {}
        self._call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ExecutionContext]:
        return self._call_log

    @property
    def commands(self) -> list[str]:
        """Commands received so far, in order."""
        return [ctx.action.params.get("command", "") for ctx in self._call_log]

    def is_available(self) -> bool:
        return self._available

    def set_failure(self, action_id: str, error: str = "Mock failure") -> None:
        """Make a specific action fail."""
        self._failures[action_id] = error

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self._call_log.append(context)
        action_id = context.action.id
        if action_id in self._failures:
            return Receipt.failure(adapter=self._name, action_id=action_id, error=self._failures[action_id])
        return Receipt.success(adapter=self._name, action_id=action_id, output="[mock] executed")

    def reset(self) -> None:
        self._call_log.clear()
        self._failures.clear()
