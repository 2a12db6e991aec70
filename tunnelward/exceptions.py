"""Exception hierarchy for tunnelward.

Retry exhaustion and polling timeouts are results, not exceptions. What
is raised here signals a broken setup: a missing CLI, a transport that
cannot serve a target, or a malformed config file.
"""

from __future__ import annotations


class TunnelwardError(Exception):
    """Base exception for all tunnelward errors."""


class ConfigurationError(TunnelwardError):
    """Raised for invalid configuration or missing required settings."""


class TransportError(TunnelwardError):
    """Raised when a transport cannot attempt a command at all."""

    def __init__(self, transport: str, reason: str) -> None:
        self.transport = transport
        self.reason = reason
        super().__init__(f"{transport}: {reason}")
