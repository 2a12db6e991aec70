from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from typing import Any

import pytest

from tunnelward import CommandOutcome, GcloudTransport, RemoteTarget, TransportError

pytestmark = [pytest.mark.unit, pytest.mark.xdist_group("unit")]


@dataclass
class RecordedRun:
    """Stands in for subprocess.run; queued responses are returned or raised in order."""

    calls: list[dict[str, Any]] = field(default_factory=list)
    responses: list[Any] = field(default_factory=list)

    def __call__(self, argv: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        self.calls.append({"argv": argv, **kwargs})
        response = self.responses.pop(0) if self.responses else subprocess.CompletedProcess(argv, 0, "", "")
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def recorded(monkeypatch: pytest.MonkeyPatch) -> RecordedRun:
    fake = RecordedRun()
    monkeypatch.setattr(subprocess, "run", fake)
    return fake


class TestBuildArgv:
    def test_iap_target(self):
        target = RemoteTarget("vm-internal", zone="us-east4-b", transport="iap")
        argv = GcloudTransport().build_argv(target, "echo hi")
        assert argv == [
            "gcloud", "compute", "ssh", "vm-internal",
            "--zone", "us-east4-b",
            "--tunnel-through-iap",
            "--quiet", "--command", "echo hi",
        ]

    def test_internal_ip_target(self):
        target = RemoteTarget("vm", zone="us-central1-a", transport="internal-ip")
        argv = GcloudTransport().build_argv(target, "true")
        assert "--internal-ip" in argv
        assert "--tunnel-through-iap" not in argv

    def test_direct_target_has_no_tunnel_flag(self):
        target = RemoteTarget("vm", zone="us-central1-a", transport="direct")
        argv = GcloudTransport().build_argv(target, "true")
        assert "--internal-ip" not in argv
        assert "--tunnel-through-iap" not in argv

    def test_target_project_overrides_transport_project(self):
        target = RemoteTarget("vm", zone="z", project="lab-123")
        argv = GcloudTransport(project="default-proj").build_argv(target, "true")
        assert argv[argv.index("--project") + 1] == "lab-123"

    def test_transport_project_used_as_fallback(self):
        argv = GcloudTransport(project="default-proj").build_argv(RemoteTarget("vm", zone="z"), "true")
        assert argv[argv.index("--project") + 1] == "default-proj"

    def test_no_project_flag_when_unset(self):
        argv = GcloudTransport().build_argv(RemoteTarget("vm", zone="z"), "true")
        assert "--project" not in argv

    def test_ssh_flags_passed_through(self):
        transport = GcloudTransport(ssh_flags=("-o ConnectTimeout=10",))
        argv = transport.build_argv(RemoteTarget("vm", zone="z"), "true")
        assert "--ssh-flag=-o ConnectTimeout=10" in argv
        assert argv[-2:] == ["--command", "true"]


class TestTroubleshootHint:
    def test_hint_is_copy_pasteable(self):
        target = RemoteTarget("vm-internal", zone="us-east4-b")
        hint = GcloudTransport().troubleshoot_hint(target)
        assert hint == "gcloud compute ssh vm-internal --zone us-east4-b --tunnel-through-iap --troubleshoot"


class TestRun:
    def test_success(self, recorded: RecordedRun, target: RemoteTarget):
        recorded.responses.append(subprocess.CompletedProcess([], 0, "hi\n", ""))
        outcome = GcloudTransport().run(target, "echo hi")

        assert outcome == CommandOutcome(exit_code=0, stdout="hi", stderr="")
        call = recorded.calls[0]
        assert call["argv"][-1] == "echo hi"
        assert call["capture_output"] is True
        assert call["text"] is True
        assert call["timeout"] == 120.0

    def test_non_zero_exit_is_an_outcome(self, recorded: RecordedRun, target: RemoteTarget):
        recorded.responses.append(
            subprocess.CompletedProcess([], 255, "", "ERROR: (gcloud.compute.start-iap-tunnel) failed to connect\n")
        )
        outcome = GcloudTransport().run(target, "true")
        assert outcome.exit_code == 255
        assert "failed to connect" in outcome.stderr

    def test_command_timeout_overrides_default(self, recorded: RecordedRun, target: RemoteTarget):
        GcloudTransport(timeout=60).run(target, "true", timeout=5)
        assert recorded.calls[0]["timeout"] == 5

    def test_local_timeout_is_a_timed_out_outcome(self, recorded: RecordedRun, target: RemoteTarget):
        recorded.responses.append(
            subprocess.TimeoutExpired(cmd=["gcloud"], timeout=5, output=b"partial\n", stderr=None)
        )
        outcome = GcloudTransport().run(target, "sleep 100", timeout=5)
        assert outcome.timed_out
        assert outcome.exit_code is None
        assert outcome.stdout == "partial"

    def test_missing_binary_raises(self, recorded: RecordedRun, target: RemoteTarget):
        recorded.responses.append(FileNotFoundError(2, "No such file", "gcloud"))
        with pytest.raises(TransportError, match="not found"):
            GcloudTransport().run(target, "true")
