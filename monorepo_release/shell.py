"""Shell and git utilities.

Provides simple wrappers around subprocess calls for running external tools
and git operations, plus output formatting helpers.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping

from .errors import CommandError, ExternalError


def run_capture(*args: str, env: Mapping[str, str] | None = None) -> str:
    """Run a command and return its stdout.

    Args:
        *args: Command and arguments (e.g., "cargo", "metadata").
        env: Extra environment variables layered over the current environment.

    Returns:
        Stdout of the command.

    Raises:
        CommandError: If the command exits with a non-zero status. The
                      captured stdout/stderr are attached.
        ExternalError: If the command cannot be started at all.
    """
    try:
        result = subprocess.run(
            args, capture_output=True, text=True, env=_merged_env(env)
        )
    except OSError as exc:
        raise ExternalError(f"Failed to start `{args[0]}`: {exc}") from exc
    if result.returncode != 0:
        raise CommandError(args, result.returncode, result.stdout, result.stderr)
    return result.stdout


def run(*args: str, env: Mapping[str, str] | None = None) -> int:
    """Run a command, streaming its output to the terminal.

    Unlike run_capture(), this doesn't capture output so users can follow
    long-running tools like cargo publish.

    Returns:
        The exit status of the command.
    """
    print(f"  EXEC: {' '.join(args)}")
    try:
        return subprocess.run(args, env=_merged_env(env)).returncode
    except OSError as exc:
        raise ExternalError(f"Failed to start `{args[0]}`: {exc}") from exc


def git(*args: str) -> str:
    """Run a git command and return stripped stdout."""
    return run_capture("git", *args).strip()


def git_installed() -> bool:
    try:
        git("--version")
    except ExternalError:
        return False
    return True


def current_commit() -> str:
    """Full hash of HEAD."""
    return git("rev-parse", "--verify", "HEAD")


def shorten_commit(commit: str) -> str:
    return commit[:7]


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate the release steps in terminal output.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def _merged_env(env: Mapping[str, str] | None) -> dict[str, str] | None:
    if not env:
        return None
    return {**os.environ, **env}
