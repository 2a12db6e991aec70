"""Readiness polling.

Replaces fixed "sleep 90 and hope" waits with a probe evaluated on a
fixed interval until it reports ready or a deadline passes.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from loguru import logger

from tunnelward.progress import ProgressSink, notify
from tunnelward.types import PollResult, PollSpec, Probe


class ReadinessPoller:
    """Blocks until a probe reports ready or the deadline elapses.

    A timeout is an expected outcome, returned as ``timed_out``; the caller
    decides whether to proceed anyway or abort. Only one probe evaluation
    is ever in flight. The last sleep is cut short at the deadline, so a
    timeout overshoots it by at most one probe evaluation.

    Args:
        progress: Optional sink receiving an elapsed counter per evaluation.
        sleep: Blocking delay between evaluations. Injected for tests.
        clock: Monotonic clock used to measure elapsed time.
    """

    __slots__ = ("_progress", "_sleep", "_clock")

    def __init__(
        self,
        *,
        progress: ProgressSink | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._progress = progress
        self._sleep = sleep
        self._clock = clock

    def wait(
        self,
        probe: Probe,
        interval: float = 5.0,
        deadline: float = 120.0,
        *,
        description: str = "resource",
    ) -> PollResult:
        """Poll ``probe`` every ``interval`` seconds for up to ``deadline`` seconds.

        Raises:
            ValueError: If interval is not positive or deadline is negative.
        """
        return self.wait_for(PollSpec(probe, interval, deadline, description))

    def wait_for(self, spec: PollSpec) -> PollResult:
        log = logger.bind(component="poller", resource=spec.description)
        start = self._clock()
        evaluations = 0

        while True:
            outcome = spec.probe()
            evaluations += 1
            elapsed = self._clock() - start

            if outcome.ready:
                log.info(f"{spec.description} ready after {elapsed:.1f}s ({evaluations} checks)")
                notify(self._progress, f"{spec.description}: ready after {elapsed:.0f}s")
                return PollResult("ready", elapsed, outcome.text, evaluations)

            log.debug(f"{spec.description} not ready ({elapsed:.1f}s/{spec.deadline:.0f}s)")
            notify(
                self._progress,
                f"waiting for {spec.description}: {elapsed:.0f}s/{spec.deadline:.0f}s",
            )

            if elapsed >= spec.deadline:
                log.warning(
                    f"Timeout waiting for {spec.description} after {elapsed:.1f}s"
                )
                return PollResult("timed_out", elapsed, outcome.text, evaluations)

            self._sleep(min(spec.interval, spec.deadline - elapsed))
