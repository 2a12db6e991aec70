"""Value types shared by the executor, the poller and the transports.

Every record here is immutable and call-scoped: it is built at the start
of one ``run``/``wait`` invocation and discarded when it returns.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal, TypeAlias

TransportMode: TypeAlias = Literal["iap", "internal-ip", "direct"]
ExecutionOutcome: TypeAlias = Literal["success", "failed"]
PollOutcome: TypeAlias = Literal["ready", "timed_out"]

TRANSPORT_MODES: tuple[TransportMode, ...] = ("iap", "internal-ip", "direct")


# =============================================================================
# Remote execution
# =============================================================================


@dataclass(frozen=True, slots=True)
class RemoteTarget:
    """Where a command runs.

    Args:
        name: Instance name (or host, for direct SSH).
        zone: Zone/location the instance lives in.
        transport: How the target is reached. ``iap`` tunnels through the
            identity-aware proxy, ``internal-ip`` hops over the private
            network, ``direct`` connects straight to the host.
        project: Owning project. Overrides the transport's default.
    """

    name: str
    zone: str
    transport: TransportMode = "iap"
    project: str | None = None

    def __post_init__(self) -> None:
        if self.transport not in TRANSPORT_MODES:
            raise ValueError(
                f"transport must be one of {', '.join(TRANSPORT_MODES)}, got {self.transport!r}"
            )


@dataclass(frozen=True, slots=True)
class CommandOutcome:
    """What a single transport call yields.

    ``exit_code`` is None when no exit status could be obtained, e.g. the
    local side gave up waiting.
    """

    exit_code: int | None
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def output(self) -> str:
        return self.stdout or self.stderr


@dataclass(frozen=True, slots=True)
class CommandSpec:
    """Command text plus the predicate that decides whether an attempt succeeded.

    An attempt succeeds when its exit code equals ``expect_exit_code`` and,
    if ``expect_output`` is set, its stdout contains that marker.
    """

    command: str
    expect_output: str | None = None
    expect_exit_code: int = 0
    timeout: float | None = None

    def __post_init__(self) -> None:
        if not self.command.strip():
            raise ValueError("command must not be empty")

    def accepts(self, outcome: CommandOutcome) -> bool:
        if outcome.exit_code != self.expect_exit_code:
            return False
        return self.expect_output is None or self.expect_output in outcome.stdout


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Bounded, fixed-delay retry. No backoff, no jitter."""

    max_attempts: int = 3
    delay: float = 20.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.delay < 0:
            raise ValueError(f"delay must be >= 0, got {self.delay}")


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    outcome: ExecutionOutcome
    output: str
    attempts: int

    @property
    def ok(self) -> bool:
        return self.outcome == "success"


# =============================================================================
# Readiness polling
# =============================================================================


@dataclass(frozen=True, slots=True)
class ProbeOutcome:
    ready: bool
    text: str = ""


Probe: TypeAlias = Callable[[], ProbeOutcome]


@dataclass(frozen=True, slots=True)
class PollSpec:
    """A probe together with its polling cadence.

    Args:
        probe: No-argument callable reporting readiness.
        interval: Seconds between evaluations. Must be positive.
        deadline: Seconds after which polling gives up. Zero means a
            single evaluation.
        description: What is being waited on, for log lines.
    """

    probe: Probe
    interval: float = 5.0
    deadline: float = 120.0
    description: str = "resource"

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ValueError(f"interval must be > 0, got {self.interval}")
        if self.deadline < 0:
            raise ValueError(f"deadline must be >= 0, got {self.deadline}")


@dataclass(frozen=True, slots=True)
class PollResult:
    outcome: PollOutcome
    elapsed: float
    text: str
    evaluations: int

    @property
    def ready(self) -> bool:
        return self.outcome == "ready"
