"""Verification workflows built from the executor and the poller.

Network changes are verified with commands that fail before the change
and pass once it has propagated: a VM without an external address cannot
reach Cloud Storage until Private Google Access is on, nor the package
mirrors until Cloud NAT is configured.

Example:
    report = expect_transition(
        executor, poller, vm, nat_egress_check(),
        apply=create_cloud_nat,
        deadline=180,
    )
    assert report.ok
"""

from __future__ import annotations

import shlex
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from loguru import logger

from tunnelward.executor import RemoteExecutor
from tunnelward.probes.command import command_probe
from tunnelward.types import (
    CommandSpec,
    ExecutionResult,
    PollResult,
    RemoteTarget,
    RetryPolicy,
)
from tunnelward.wait import ReadinessPoller

# =============================================================================
# Stock checks
# =============================================================================


def private_access_check(bucket: str, obj: str = "access.svg") -> CommandSpec:
    """Fetch an object's headers from Cloud Storage over the private path."""
    url = shlex.quote(f"https://storage.googleapis.com/{bucket}/{obj}")
    return CommandSpec(f"curl -I -sSf {url} && echo 'PGA works'", expect_output="PGA works")


def nat_egress_check() -> CommandSpec:
    """Reach the package mirrors, which needs outbound NAT."""
    return CommandSpec("sudo apt-get update -y && echo 'NAT works'", expect_output="NAT works")


# =============================================================================
# Before/after transitions
# =============================================================================


@dataclass(frozen=True, slots=True)
class TransitionReport:
    before: ExecutionResult
    after: PollResult

    @property
    def already_satisfied(self) -> bool:
        """The command passed before the change was applied."""
        return self.before.ok

    @property
    def ok(self) -> bool:
        return not self.before.ok and self.after.ready


def expect_transition(
    executor: RemoteExecutor,
    poller: ReadinessPoller,
    target: RemoteTarget,
    command: CommandSpec | str,
    *,
    apply: Callable[[], object],
    before: RetryPolicy | None = None,
    interval: float = 10.0,
    deadline: float = 180.0,
) -> TransitionReport:
    """Check that ``command`` fails, apply a change, then wait for it to pass.

    Args:
        executor: Runs the "before" check.
        poller: Waits for the "after" state.
        target: Where the command runs.
        command: The verification command.
        apply: The change under test. Called exactly once, between the two phases.
        before: Retry policy for the "before" check. Defaults to a single attempt.
        interval: Seconds between "after" checks.
        deadline: Seconds to wait for the change to propagate.

    Returns:
        TransitionReport. Neither phase raises on failure; inspect ``ok``.
    """
    spec = CommandSpec(command) if isinstance(command, str) else command
    log = logger.bind(component="verify", target=target.name)

    first = executor.run(target, spec, before or RetryPolicy(max_attempts=1, delay=0))
    if first.ok:
        log.warning(f"Check already passes before the change: {spec.command}")

    apply()

    after = poller.wait(
        command_probe(executor.transport, target, spec),
        interval,
        deadline,
        description=f"{target.name}: {spec.command}",
    )
    return TransitionReport(first, after)


# =============================================================================
# Named checks
# =============================================================================


@dataclass(frozen=True, slots=True)
class Check:
    name: str
    target: RemoteTarget
    command: CommandSpec
    policy: RetryPolicy = field(default_factory=RetryPolicy)


def run_checks(executor: RemoteExecutor, checks: Iterable[Check]) -> dict[str, ExecutionResult]:
    """Run every check in order. A failing check does not stop the rest."""
    results: dict[str, ExecutionResult] = {}
    for check in checks:
        result = executor.run(check.target, check.command, check.policy)
        logger.bind(component="verify", target=check.target.name).info(
            f"Check '{check.name}': {result.outcome} ({result.attempts} attempt(s))"
        )
        results[check.name] = result
    return results
