"""Cargo invocations: workspace metadata, registry lookups and publishing."""

from __future__ import annotations

import json
import re

import semver

from .errors import ExternalError
from .models import Workspace
from .shell import run, run_capture
from .versions import parse_version


def registry_token_var(registry: str | None) -> str:
    """Environment variable cargo reads the registry token from.

    Examples:
        None → "CARGO_REGISTRY_TOKEN"
        "my-registry" → "CARGO_REGISTRIES_MY_REGISTRY_TOKEN"
    """
    if registry is None:
        return "CARGO_REGISTRY_TOKEN"
    name = re.sub(r"[^A-Za-z0-9]+", "_", registry).strip("_").upper()
    return f"CARGO_REGISTRIES_{name}_TOKEN"


def query_metadata() -> Workspace:
    """Query workspace members through ``cargo metadata``."""
    try:
        output = run_capture("cargo", "metadata", "--format-version", "1", "--no-deps")
    except ExternalError as exc:
        raise ExternalError(f"Failed to query cargo metadata: {exc}") from exc
    try:
        data = json.loads(output)
    except json.JSONDecodeError as exc:
        raise ExternalError(f"Failed to parse cargo metadata: {exc}") from exc
    return Workspace.from_cargo_metadata(data)


def parse_search_output(output: str, crate_name: str) -> semver.Version | None:
    """Find ``crate_name = "x.y.z"`` in ``cargo search`` output."""
    prefix = f"{crate_name} = "
    for line in output.splitlines():
        if line.startswith(prefix):
            parts = line.split('"')
            if len(parts) > 1:
                return parse_version(parts[1])
    return None


def query_last_released_version(crate_name: str) -> semver.Version | None:
    """Latest version of ``crate_name`` on crates.io, or None if never published."""
    try:
        output = run_capture("cargo", "search", crate_name)
    except ExternalError as exc:
        raise ExternalError(f"Failed to query crates.io packages: {exc}") from exc
    return parse_search_output(output, crate_name)


def cargo_publish(
    manifest_path: str,
    registry: str | None,
    *,
    dry_run: bool,
    token: str | None = None,
) -> bool:
    """Run ``cargo publish`` for one manifest.

    Returns:
        True if cargo exited successfully.
    """
    args = ["cargo", "publish", "--manifest-path", manifest_path]
    if registry is not None:
        args += ["--registry", registry]
    if dry_run:
        args += ["--dry-run", "--no-verify"]
    env = {registry_token_var(registry): token} if token else None
    return run(*args, env=env) == 0
