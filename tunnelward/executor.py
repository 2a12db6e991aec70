"""Retrying remote-command executor.

Runs one command against one target through a transport, masking the
failures a cold tunnel produces (handshake races, a remote agent that has
not booted yet) with bounded, fixed-delay retry.

Example:
    from tunnelward import GcloudTransport, RemoteExecutor, RemoteTarget, RetryPolicy

    executor = RemoteExecutor(GcloudTransport())
    vm = RemoteTarget("vm-internal", zone="us-east4-b")
    result = executor.run(vm, "echo hi", RetryPolicy(max_attempts=3, delay=20))
    if not result.ok:
        ...
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from loguru import logger
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from tunnelward.progress import ProgressSink, notify
from tunnelward.types import (
    CommandOutcome,
    CommandSpec,
    ExecutionResult,
    RemoteTarget,
    RetryPolicy,
)

if TYPE_CHECKING:
    from tunnelward.transport.base import Transport


def _preview(command: str, limit: int = 80) -> str:
    return command[:limit] + "..." if len(command) > limit else command


class RemoteExecutor:
    """Executes commands on remote targets with bounded retry.

    The executor holds only its collaborators. Every ``run`` call builds
    its own retry state, so calls never influence one another. Attempts
    are issued one after another on the calling thread; sessions through
    a tunnel are stateful and must not race.

    Args:
        transport: Performs a single remote call.
        progress: Optional sink for operator-facing status lines.
        sleep: Blocking delay between attempts. Injected for tests.
    """

    __slots__ = ("_transport", "_progress", "_sleep")

    def __init__(
        self,
        transport: Transport,
        *,
        progress: ProgressSink | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._transport = transport
        self._progress = progress
        self._sleep = sleep

    @property
    def transport(self) -> Transport:
        return self._transport

    def run(
        self,
        target: RemoteTarget,
        command: CommandSpec | str,
        policy: RetryPolicy | None = None,
    ) -> ExecutionResult:
        """Run ``command`` on ``target``, retrying up to ``policy.max_attempts`` times.

        Exhausting every attempt is reported as a ``failed`` result rather
        than raised. Exceptions from the transport itself (a missing CLI,
        an unsupported transport mode) are not retried and propagate.

        Args:
            target: Where to run.
            command: Command text, or a CommandSpec carrying a success predicate.
            policy: Attempt bound and inter-attempt delay. Defaults to
                3 attempts, 20 seconds apart.

        Returns:
            ExecutionResult with the captured output and attempts consumed.
        """
        spec = CommandSpec(command) if isinstance(command, str) else command
        policy = policy or RetryPolicy()
        total = policy.max_attempts
        log = logger.bind(component="executor", target=target.name)
        attempts = 0

        def attempt() -> CommandOutcome:
            nonlocal attempts
            attempts += 1
            log.debug(f"Attempt {attempts}/{total} via {target.transport}: {_preview(spec.command)}")
            notify(self._progress, f"{target.name}: attempt {attempts}/{total}")
            return self._transport.run(target, spec.command, spec.timeout)

        def before_sleep(state: RetryCallState) -> None:
            outcome: CommandOutcome = state.outcome.result()  # type: ignore[union-attr]
            reason = "timed out" if outcome.timed_out else f"exit={outcome.exit_code}"
            log.warning(
                f"Attempt {state.attempt_number}/{total} failed ({reason}). "
                f"Retrying in {policy.delay:.0f}s..."
            )
            notify(
                self._progress,
                f"{target.name}: attempt {state.attempt_number}/{total} failed, "
                f"retrying in {policy.delay:.0f}s",
            )

        retrying = Retrying(
            stop=stop_after_attempt(total),
            wait=wait_fixed(policy.delay),
            retry=retry_if_result(lambda outcome: not spec.accepts(outcome)),
            before_sleep=before_sleep,
            retry_error_callback=lambda state: state.outcome.result(),  # type: ignore[union-attr]
            sleep=self._sleep,
        )
        outcome: CommandOutcome = retrying(attempt)

        if spec.accepts(outcome):
            log.debug(f"Succeeded on attempt {attempts}/{total}")
            return ExecutionResult("success", outcome.stdout, attempts)

        hint = self._transport.troubleshoot_hint(target)
        log.error(f"All {total} attempts failed: {outcome.output[:200]}")
        notify(
            self._progress,
            f"{target.name}: failed after {attempts} attempt(s). Troubleshoot with: {hint}",
        )
        return ExecutionResult("failed", outcome.output, attempts)
