"""Release configuration (``monorepo.toml``).

The file is read with tomlkit and validated into Pydantic models. Cross-section
rules that Pydantic cannot express per field live in Config.validate_sections()
and run before any release step.
"""

from __future__ import annotations

from pathlib import Path

import tomlkit
from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from tomlkit.exceptions import TOMLKitError

from .errors import ConfigError, TemplateError
from .github import Repo
from .template import TextTemplate

DEFAULT_CONFIG_FILE = "monorepo.toml"


def _check_template(value: str | None) -> str | None:
    if value is not None:
        try:
            TextTemplate(value)
        except TemplateError as exc:
            raise ValueError(str(exc)) from exc
    return value


class WorkspaceConfig(BaseModel):
    root_crate: str


class GitHubConfig(BaseModel):
    repo: Repo

    @field_validator("repo", mode="before")
    @classmethod
    def _parse_repo(cls, value: object) -> object:
        if isinstance(value, str):
            return Repo.parse(value)
        return value


class ChangelogConfig(BaseModel):
    file: Path
    start_marker_template: str | None = None
    end_marker_template: str | None = None
    print_to_stdout: bool = False
    allow_empty_changelog: bool = False

    @field_validator("start_marker_template", "end_marker_template")
    @classmethod
    def _valid_template(cls, value: str | None) -> str | None:
        return _check_template(value)


class ArtifactsConfig(BaseModel):
    directory: Path
    check_not_empty: bool = True


class GitHubReleaseConfig(BaseModel):
    check_commit_pushed: bool = True
    create_tag: bool = False
    tag_name_template: str = "v{{version}}"
    create_release_page: bool = False
    release_page_upload_artifacts: bool = True
    release_page_title_template: str = "{{root_crate}} v{{version}}"
    release_page_body_template: str = "{{changelog}}"
    print_to_stdout: bool = False

    @field_validator(
        "tag_name_template", "release_page_title_template", "release_page_body_template"
    )
    @classmethod
    def _valid_template(cls, value: str) -> str:
        _check_template(value)
        return value


class ReleaseConfig(BaseModel):
    check_version_raised: bool = True
    allow_non_path_dev_dependencies: bool = True
    registry: str | None = None
    publish_interval_seconds: int = Field(default=30, ge=0)
    github: GitHubReleaseConfig | None = None


class Config(BaseModel):
    workspace: WorkspaceConfig
    github: GitHubConfig | None = None
    changelog: ChangelogConfig | None = None
    artifacts: ArtifactsConfig | None = None
    release: ReleaseConfig = Field(default_factory=ReleaseConfig)

    def validate_sections(self) -> None:
        """Reject contradictory section combinations.

        Raises:
            ConfigError: On the first rule that is violated.
        """
        release = self.release
        if release.registry is not None and release.check_version_raised:
            # cargo search cannot reliably query custom registries, and some
            # accept a publish of an already existing version.
            raise ConfigError(
                "Querying last released version is not yet supported for custom "
                "registries, set `release.check_version_raised` to false in the "
                "config to approve skip of this step"
            )

        if release.github is not None:
            if self.github is None:
                raise ConfigError(
                    "github.repo should be specified to be able to use release.github"
                )
            if release.github.release_page_upload_artifacts and self.artifacts is None:
                raise ConfigError(
                    "artifacts should be specified when "
                    "release.github.release_page_upload_artifacts is set to true"
                )
            if release.github.create_release_page and not release.github.create_tag:
                raise ConfigError(
                    "release.github.create_tag should be enabled when "
                    "release.github.create_release_page is required"
                )

        changelog = self.changelog
        if changelog is not None and (changelog.start_marker_template is None) != (
            changelog.end_marker_template is None
        ):
            raise ConfigError(
                "Both changelog.start_marker_template and "
                "changelog.end_marker_template should be specified"
            )


def parse_config(text: str, source: str = DEFAULT_CONFIG_FILE) -> Config:
    """Parse and validate configuration text."""
    try:
        data = tomlkit.parse(text).unwrap()
    except TOMLKitError as exc:
        raise ConfigError(f"Failed to parse {source}: {exc}") from exc
    try:
        config = Config.model_validate(data)
    except PydanticValidationError as exc:
        raise ConfigError(f"Failed to parse {source}:\n{exc}") from exc
    try:
        config.validate_sections()
    except ConfigError as exc:
        raise ConfigError(f"Config validation failed: {exc}") from exc
    return config


def load_config(path: Path) -> Config:
    """Read and validate a configuration file."""
    try:
        text = path.read_text()
    except OSError as exc:
        raise ConfigError(f"Failed to read {path} config: {exc}") from exc
    return parse_config(text, str(path))
