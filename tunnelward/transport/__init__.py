"""Transports: how a single remote call reaches a target."""

from tunnelward.transport.base import Transport
from tunnelward.transport.gcloud import GcloudTransport
from tunnelward.transport.ssh import ParamikoTransport

__all__ = ["GcloudTransport", "ParamikoTransport", "Transport"]
