"""Direct SSH transport built on paramiko.

For targets with a reachable address (a bastion, a lab VM with an
external IP). Each call opens and closes its own connection.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from typing import Any

import paramiko
from loguru import logger

from tunnelward.exceptions import TransportError
from tunnelward.types import CommandOutcome, RemoteTarget


@dataclass(frozen=True, slots=True)
class ParamikoTransport:
    """Runs commands over a plain SSH connection to ``target.name``.

    Connection failures (refused, auth not yet injected, host still
    booting) come back as a failed CommandOutcome so they are retried.
    """

    username: str
    key_path: str | None = None
    port: int = 22
    connect_timeout: float = 30.0
    timeout: float = 120.0

    def _connect(self, host: str) -> paramiko.SSHClient:
        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        kwargs: dict[str, Any] = {
            "hostname": host,
            "username": self.username,
            "port": self.port,
            "timeout": self.connect_timeout,
        }
        if self.key_path:
            kwargs["key_filename"] = self.key_path
        try:
            client.connect(**kwargs)
        except BaseException:
            client.close()
            raise
        return client

    def troubleshoot_hint(self, target: RemoteTarget) -> str:
        argv = ["ssh", "-v", "-p", str(self.port)]
        if self.key_path:
            argv += ["-i", self.key_path]
        argv.append(f"{self.username}@{target.name}")
        return shlex.join(argv)

    def run(self, target: RemoteTarget, command: str, timeout: float | None = None) -> CommandOutcome:
        if target.transport != "direct":
            raise TransportError(
                "ssh",
                f"cannot reach {target.name} via {target.transport}; use GcloudTransport",
            )

        limit = timeout if timeout is not None else self.timeout
        log = logger.bind(component="ssh", target=target.name)
        log.debug(f"SSH: connecting to {target.name}:{self.port} ({self.username})")

        try:
            client = self._connect(target.name)
        except TimeoutError:
            log.debug(f"SSH: connect to {target.name} timed out")
            return CommandOutcome(exit_code=None, timed_out=True)
        except (paramiko.SSHException, OSError) as e:
            log.debug(f"SSH: connect to {target.name} failed: {e}")
            return CommandOutcome(exit_code=None, stderr=f"{type(e).__name__}: {e}")

        try:
            _, stdout, stderr = client.exec_command(command, timeout=limit)
            # Output must be drained before the exit status can arrive
            out = stdout.read().decode(errors="replace").strip()
            err = stderr.read().decode(errors="replace").strip()
            channel = stdout.channel
            if not channel.status_event.wait(limit):
                log.debug(f"SSH: no exit status from {target.name} after {limit:.0f}s")
                return CommandOutcome(exit_code=None, stdout=out, stderr=err, timed_out=True)
            code = channel.recv_exit_status()
            log.debug(f"SSH: exit_code={code}")
            return CommandOutcome(exit_code=code, stdout=out, stderr=err)
        except TimeoutError:
            log.debug(f"SSH: command on {target.name} timed out after {limit:.0f}s")
            return CommandOutcome(exit_code=None, timed_out=True)
        except (paramiko.SSHException, OSError) as e:
            return CommandOutcome(exit_code=None, stderr=f"{type(e).__name__}: {e}")
        finally:
            client.close()
