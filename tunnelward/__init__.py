"""tunnelward - retrying remote commands and readiness polling for provisioning glue.

Example:

    from tunnelward import (
        GcloudTransport, HttpProbe, ReadinessPoller, RemoteExecutor,
        RemoteTarget, RetryPolicy,
    )

    executor = RemoteExecutor(GcloudTransport(project="my-project"))
    poller = ReadinessPoller()
    vm = RemoteTarget("vm-internal", zone="us-east4-b", transport="iap")

    smoke = executor.run(vm, "echo hi", RetryPolicy(max_attempts=3, delay=20))
    lb = poller.wait(HttpProbe("http://203.0.113.10", expect_text="Welcome"), 5, 120)
"""

from tunnelward.config import (
    load_config,
    resolve_check,
    resolve_policy,
    resolve_readiness,
    resolve_target,
    resolve_transport,
)
from tunnelward.exceptions import ConfigurationError, TransportError, TunnelwardError
from tunnelward.executor import RemoteExecutor
from tunnelward.logging import LogConfig, logging_enabled, setup_logging, teardown_logging
from tunnelward.probes import HttpProbe, command_probe
from tunnelward.progress import ConsoleProgress, ProgressSink, collect, notify
from tunnelward.transport import GcloudTransport, ParamikoTransport, Transport
from tunnelward.types import (
    CommandOutcome,
    CommandSpec,
    ExecutionResult,
    PollResult,
    PollSpec,
    Probe,
    ProbeOutcome,
    RemoteTarget,
    RetryPolicy,
)
from tunnelward.verify import (
    Check,
    TransitionReport,
    expect_transition,
    nat_egress_check,
    private_access_check,
    run_checks,
)
from tunnelward.wait import ReadinessPoller

__version__ = "0.1.0"

__all__ = [
    "Check",
    "CommandOutcome",
    "CommandSpec",
    "ConfigurationError",
    "ConsoleProgress",
    "ExecutionResult",
    "GcloudTransport",
    "HttpProbe",
    "LogConfig",
    "ParamikoTransport",
    "PollResult",
    "PollSpec",
    "Probe",
    "ProbeOutcome",
    "ProgressSink",
    "ReadinessPoller",
    "RemoteExecutor",
    "RemoteTarget",
    "RetryPolicy",
    "TransitionReport",
    "Transport",
    "TransportError",
    "TunnelwardError",
    "collect",
    "command_probe",
    "expect_transition",
    "load_config",
    "logging_enabled",
    "nat_egress_check",
    "notify",
    "private_access_check",
    "resolve_check",
    "resolve_policy",
    "resolve_readiness",
    "resolve_target",
    "resolve_transport",
    "run_checks",
    "setup_logging",
    "teardown_logging",
]
