"""Mutable release state shared by all pipeline steps.

Steps run one at a time and fill in fields as they go: Init sets the commit,
the workspace snapshot and the pending version; later steps read them back.
Reading a field before the step responsible for it has run raises
PreconditionError instead of returning a default, so a mis-ordered pipeline
fails loudly.
"""

from __future__ import annotations

from pathlib import Path

import semver

from . import config as cfg
from .errors import PreconditionError
from .github import GitHubClient
from .models import Workspace
from .shell import shorten_commit
from .template import TemplateContext


class ReleaseState:
    def __init__(
        self, config: cfg.Config, *, dry_run: bool = True, no_publish: bool = False
    ) -> None:
        self.config = config
        self.dry_run = dry_run
        self.no_publish = no_publish
        self.registry_token: str | None = None
        self.github_token: str | None = None
        self.github: GitHubClient | None = None
        self.current_commit: str | None = None
        self.workspace: Workspace | None = None
        self._version: semver.Version | None = None
        self.previous_version: semver.Version | None = None
        self.previous_version_queried = False
        self.changelog: str | None = None
        self.artifacts: list[Path] | None = None
        self.release_tag: str | None = None

    @property
    def root_package_name(self) -> str:
        return self.config.workspace.root_crate

    @property
    def version(self) -> semver.Version | None:
        return self._version

    def set_version(self, version: semver.Version) -> None:
        """Record the pending version. It can only be set once per run."""
        if self._version is not None:
            raise PreconditionError(
                f"Pending version is already set to {self._version}"
            )
        self._version = version

    def record_previous_version(self, version: semver.Version | None) -> None:
        """Store the registry lookup result; None means never released."""
        self.previous_version = version
        self.previous_version_queried = True

    # Accessors for values populated by earlier steps.

    def require_version(self) -> semver.Version:
        if self._version is None:
            raise PreconditionError("Pending version is not queried yet")
        return self._version

    def require_workspace(self) -> Workspace:
        if self.workspace is None:
            raise PreconditionError("Cargo metadata is not queried yet")
        return self.workspace

    def require_current_commit(self) -> str:
        if self.current_commit is None:
            raise PreconditionError("Current commit is not queried yet")
        return self.current_commit

    def short_commit(self) -> str:
        return shorten_commit(self.require_current_commit())

    def require_artifacts(self) -> list[Path]:
        if self.artifacts is None:
            raise PreconditionError("Artifacts are not collected yet")
        return self.artifacts

    def require_release_tag(self) -> str:
        if self.release_tag is None:
            raise PreconditionError("GitHub tag is not created yet")
        return self.release_tag

    def require_github(self) -> GitHubClient:
        if self.github is None:
            raise PreconditionError("GitHub client is not initialized")
        return self.github

    # Config sections that steps rely on.

    def github_config(self) -> cfg.GitHubConfig:
        if self.config.github is None:
            raise PreconditionError("github section is missing from the config")
        return self.config.github

    def release_github_config(self) -> cfg.GitHubReleaseConfig:
        if self.config.release.github is None:
            raise PreconditionError("release.github section is missing from the config")
        return self.config.release.github

    def artifacts_config(self) -> cfg.ArtifactsConfig:
        if self.config.artifacts is None:
            raise PreconditionError("artifacts section is missing from the config")
        return self.config.artifacts

    def changelog_config(self) -> cfg.ChangelogConfig:
        if self.config.changelog is None:
            raise PreconditionError("changelog section is missing from the config")
        return self.config.changelog

    def template_context(self) -> TemplateContext:
        return TemplateContext(
            root_crate=self.root_package_name,
            version=str(self.require_version()),
            changelog=self.changelog,
        )
