"""Exception types raised by the release pipeline.

Every failure aborts the run through a single path: the CLI catches
ReleaseError and prints its message. Subclasses tell the reader what kind of
problem it was without hiding the original cause (chained via ``from``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from .validation import ValidationReport


class ReleaseError(Exception):
    """Base class for all errors that abort a release."""


class ConfigError(ReleaseError):
    """Missing or contradictory configuration, detected before any step runs."""


class PreconditionError(ReleaseError):
    """A step needs state that an earlier step should have populated."""


class ValidationError(ReleaseError):
    """Workspace versions, dependencies or registries are inconsistent."""

    def __init__(self, message: str, report: ValidationReport) -> None:
        super().__init__(message)
        self.report = report


class ExternalError(ReleaseError):
    """A network request or external tool failed."""


class CommandError(ExternalError):
    """A subprocess exited with a non-zero status."""

    def __init__(
        self, args: tuple[str, ...], returncode: int, stdout: str = "", stderr: str = ""
    ) -> None:
        self.command = args
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        message = f"`{' '.join(args)}` exited with status {returncode}"
        if stderr.strip():
            message += f"\n{stderr.strip()}"
        super().__init__(message)


class TemplateError(ReleaseError):
    """A text template is malformed or references an unknown field."""


class DependencyCycleError(ReleaseError):
    """The workspace dependency graph contains a cycle."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__(f"Dependency cycle detected: {' → '.join(cycle)}")


ChangelogErrorKind = Literal[
    "begin_missing", "end_missing", "both_missing", "end_before_begin", "empty"
]


class ChangelogError(ReleaseError):
    """Changelog markers could not be resolved to an excerpt."""

    def __init__(self, kind: ChangelogErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
