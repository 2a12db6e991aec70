"""Transport protocol: one remote call, no retry."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from tunnelward.types import CommandOutcome, RemoteTarget


@runtime_checkable
class Transport(Protocol):
    """Executes a command once on a target and reports how it went.

    Implementations must report remote failures (non-zero exit, refused
    connection, local timeout) as a CommandOutcome so the executor can
    retry them. Raising is reserved for problems no retry can fix.
    """

    def run(self, target: RemoteTarget, command: str, timeout: float | None = None) -> CommandOutcome: ...

    def troubleshoot_hint(self, target: RemoteTarget) -> str: ...
