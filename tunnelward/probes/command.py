"""Readiness probe backed by a single remote command."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tunnelward.types import CommandSpec, Probe, ProbeOutcome, RemoteTarget

if TYPE_CHECKING:
    from tunnelward.transport.base import Transport


def command_probe(transport: Transport, target: RemoteTarget, command: CommandSpec | str) -> Probe:
    """Turn a remote command into a readiness probe.

    Each evaluation is a single transport call; the poller supplies the
    repetition. Ready iff the command spec accepts the outcome.
    """
    spec = CommandSpec(command) if isinstance(command, str) else command

    def probe() -> ProbeOutcome:
        outcome = transport.run(target, spec.command, spec.timeout)
        return ProbeOutcome(ready=spec.accepts(outcome), text=outcome.stdout)

    return probe
