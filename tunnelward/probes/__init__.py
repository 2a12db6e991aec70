"""Readiness probes."""

from tunnelward.probes.command import command_probe
from tunnelward.probes.http import HttpProbe

__all__ = ["HttpProbe", "command_probe"]
