"""TOML-based target, policy and check configuration.

Loads ~/.tunnelward/defaults.toml (global) and tunnelward.toml (project),
merges them, and resolves named entries into tunnelward objects.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, TypeAlias, TypeVar

from tunnelward.exceptions import ConfigurationError
from tunnelward.transport.gcloud import GcloudTransport
from tunnelward.types import CommandSpec, PollSpec, RemoteTarget, RetryPolicy
from tunnelward.verify import Check

RawConfig: TypeAlias = dict[str, Any]
T = TypeVar("T")

GLOBAL_CONFIG_PATH = Path.home() / ".tunnelward" / "defaults.toml"
PROJECT_CONFIG_NAME = "tunnelward.toml"

_SECTIONS = ("targets", "policies", "checks", "readiness")


def _deep_merge(base: RawConfig, override: RawConfig) -> RawConfig:
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_toml(path: Path) -> RawConfig:
    if not path.is_file():
        return {}
    with path.open("rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e


def load_config(
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
) -> RawConfig:
    global_cfg = _read_toml(global_path or GLOBAL_CONFIG_PATH)
    project_path = (project_dir or Path.cwd()) / PROJECT_CONFIG_NAME
    project_cfg = _read_toml(project_path)

    merged = _deep_merge(global_cfg, project_cfg)
    for section in _SECTIONS:
        merged.setdefault(section, {})
    return merged


def _entry(config: RawConfig, section: str, name: str, kind: str) -> RawConfig:
    entries = config.get(section, {})
    if not isinstance(entries, dict):
        raise ConfigurationError(f"[{section}] must be a table")
    if name not in entries:
        raise KeyError(
            f"{kind} '{name}' not found. Available: {', '.join(entries) or 'none'}"
        )
    if not isinstance(entries[name], dict):
        raise ConfigurationError(f"{kind} '{name}' must be a table")
    return dict(entries[name])


def _build(cls: type[T], kind: str, name: str, raw: RawConfig) -> T:
    try:
        return cls(**raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{kind} '{name}': {e}") from e


def resolve_target(name: str, config: RawConfig) -> RemoteTarget:
    raw = _entry(config, "targets", name, "Target")
    raw.setdefault("name", name)
    return _build(RemoteTarget, "Target", name, raw)


def resolve_policy(name: str, config: RawConfig) -> RetryPolicy:
    """Resolve a named retry policy. An undefined ``default`` is RetryPolicy()."""
    if name == "default" and name not in config.get("policies", {}):
        return RetryPolicy()
    raw = _entry(config, "policies", name, "Policy")
    return _build(RetryPolicy, "Policy", name, raw)


def resolve_check(name: str, config: RawConfig) -> Check:
    raw = _entry(config, "checks", name, "Check")

    target_ref = raw.pop("target", None)
    if target_ref is None:
        raise ConfigurationError(f"Check '{name}' missing 'target' field")
    policy_ref = raw.pop("policy", "default")

    command = _build(CommandSpec, "Check", name, raw)
    return Check(
        name=name,
        target=resolve_target(target_ref, config),
        command=command,
        policy=resolve_policy(policy_ref, config),
    )


def resolve_readiness(name: str, config: RawConfig) -> PollSpec:
    """Resolve an HTTP readiness gate into a PollSpec around an HttpProbe."""
    from tunnelward.probes.http import HttpProbe

    raw = _entry(config, "readiness", name, "Readiness check")

    url = raw.pop("url", None)
    if url is None:
        raise ConfigurationError(f"Readiness check '{name}' missing 'url' field")

    probe_fields = {k: raw.pop(k) for k in ("expect_text", "method", "timeout") if k in raw}
    probe = _build(HttpProbe, "Readiness check", name, {"url": url, **probe_fields})
    return _build(PollSpec, "Readiness check", name, {"probe": probe, "description": name, **raw})


def resolve_transport(config: RawConfig) -> GcloudTransport:
    raw = config.get("gcloud", {})
    if not isinstance(raw, dict):
        raise ConfigurationError("[gcloud] must be a table")
    raw = dict(raw)
    if "ssh_flags" in raw:
        if not isinstance(raw["ssh_flags"], list):
            raise ConfigurationError("[gcloud] ssh_flags must be an array of strings")
        raw["ssh_flags"] = tuple(raw["ssh_flags"])
    return _build(GcloudTransport, "Transport", "gcloud", raw)
