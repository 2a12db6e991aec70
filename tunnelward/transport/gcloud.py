"""``gcloud compute ssh`` transport.

Reaches instances without an external address by tunnelling through the
identity-aware proxy (or over the internal network), shelling out to the
gcloud CLI for every call.
"""

from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass

from loguru import logger

from tunnelward.exceptions import TransportError
from tunnelward.types import CommandOutcome, RemoteTarget


def _text(value: str | bytes | None) -> str:
    match value:
        case None:
            return ""
        case bytes():
            return value.decode(errors="replace").strip()
        case _:
            return value.strip()


@dataclass(frozen=True, slots=True)
class GcloudTransport:
    """Runs commands via ``gcloud compute ssh``.

    Args:
        binary: gcloud executable.
        project: Default project, used when the target does not name one.
        timeout: Local timeout in seconds for a single call, unless the
            command carries its own.
        ssh_flags: Extra flags passed through as ``--ssh-flag``.
    """

    binary: str = "gcloud"
    project: str | None = None
    timeout: float = 120.0
    ssh_flags: tuple[str, ...] = ()

    def _base_argv(self, target: RemoteTarget) -> list[str]:
        argv = [self.binary, "compute", "ssh", target.name, "--zone", target.zone]
        project = target.project or self.project
        if project:
            argv += ["--project", project]
        match target.transport:
            case "iap":
                argv.append("--tunnel-through-iap")
            case "internal-ip":
                argv.append("--internal-ip")
            case "direct":
                pass
        return argv

    def build_argv(self, target: RemoteTarget, command: str) -> list[str]:
        argv = self._base_argv(target)
        argv += [f"--ssh-flag={flag}" for flag in self.ssh_flags]
        argv += ["--quiet", "--command", command]
        return argv

    def troubleshoot_hint(self, target: RemoteTarget) -> str:
        return shlex.join([*self._base_argv(target), "--troubleshoot"])

    def run(self, target: RemoteTarget, command: str, timeout: float | None = None) -> CommandOutcome:
        argv = self.build_argv(target, command)
        limit = timeout if timeout is not None else self.timeout
        log = logger.bind(component="gcloud", target=target.name)
        log.debug(f"Running: {shlex.join(argv[:-1])} <command>")

        try:
            proc = subprocess.run(argv, capture_output=True, text=True, timeout=limit)
        except FileNotFoundError as e:
            raise TransportError("gcloud", f"'{self.binary}' not found on PATH") from e
        except subprocess.TimeoutExpired as e:
            log.warning(f"gcloud compute ssh timed out after {limit:.0f}s")
            return CommandOutcome(
                exit_code=None,
                stdout=_text(e.stdout),
                stderr=_text(e.stderr),
                timed_out=True,
            )

        log.debug(f"gcloud compute ssh exit_code={proc.returncode}")
        return CommandOutcome(
            exit_code=proc.returncode,
            stdout=_text(proc.stdout),
            stderr=_text(proc.stderr),
        )
