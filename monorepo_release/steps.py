"""Release steps.

Each step reports what it is about to do, executes against the shared
ReleaseState, then reports success. Steps that create tags or releases still
run in dry-run mode (rendering names, printing what would happen) but skip
the side effect itself.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod

from .cargo import query_metadata, registry_token_var
from .changelog import extract_changelog
from .errors import ConfigError, ExternalError, PreconditionError
from .github import GitHubClient
from .graph import ordered_packages_to_publish
from .publish import publish_packages
from .shell import current_commit, git_installed
from .state import ReleaseState
from .template import render
from .validation import ConsistencyValidator
from .versions import parse_version

GITHUB_TOKEN_VAR = "GITHUB_TOKEN"


class ReleaseStep(ABC):
    @abstractmethod
    def start_message(self, state: ReleaseState) -> str: ...

    @abstractmethod
    def execute(self, state: ReleaseState) -> None: ...

    @abstractmethod
    def success_message(self, state: ReleaseState) -> str: ...


class Init(ReleaseStep):
    """Acquire tokens, record HEAD and load the workspace snapshot."""

    def start_message(self, state: ReleaseState) -> str:
        return f"Initializing release process for {state.root_package_name}"

    def execute(self, state: ReleaseState) -> None:
        self.acquire_tokens(state)
        self.process_git_state(state)
        self.process_metadata(state)

    def success_message(self, state: ReleaseState) -> str:
        return "Initialization completed"

    def acquire_tokens(self, state: ReleaseState) -> None:
        var_name = registry_token_var(state.config.release.registry)
        token = os.environ.get(var_name)
        if not token:
            raise ConfigError(
                f"Crate registry token is missing, please specify it via {var_name} env var"
            )
        state.registry_token = token

        if state.config.github is not None:
            github_token = os.environ.get(GITHUB_TOKEN_VAR)
            if not github_token:
                raise ConfigError(
                    f"GitHub token is missing, please provide it via "
                    f"{GITHUB_TOKEN_VAR} env var"
                )
            state.github_token = github_token
            state.github = GitHubClient(github_token)

    def process_git_state(self, state: ReleaseState) -> None:
        if not git_installed():
            raise ExternalError("git is missing")
        try:
            state.current_commit = current_commit()
        except ExternalError as exc:
            raise ExternalError(f"Failed to get current git commit: {exc}") from exc
        print(f"  Current commit is {state.current_commit}")

    def process_metadata(self, state: ReleaseState) -> None:
        workspace = query_metadata()
        root = workspace.by_name(state.root_package_name)
        if root is None:
            raise ConfigError(
                f"Failed to find root crate ({state.root_package_name}) in workspace"
            )
        state.workspace = workspace
        state.set_version(parse_version(root.version))
        print(
            f"  Pending version of {root.name} to release is {state.require_version()}"
        )


class CollectArtifacts(ReleaseStep):
    def start_message(self, state: ReleaseState) -> str:
        return f"Collecting artifacts from '{state.artifacts_config().directory}'"

    def execute(self, state: ReleaseState) -> None:
        config = state.artifacts_config()
        directory = config.directory
        if not directory.is_dir():
            raise ExternalError(f"Artifacts folder {directory} does not exist")

        try:
            entries = sorted(directory.iterdir())
            artifacts = [p for p in entries if p.is_file()]
        except OSError as exc:
            raise ExternalError(
                f"Failed to list artifacts folder {directory}: {exc}"
            ) from exc
        if config.check_not_empty and not entries:
            raise ExternalError(f"Artifacts folder {directory} is empty")

        for path in artifacts:
            print(f"  Found artifact: {path}")
        state.artifacts = artifacts

    def success_message(self, state: ReleaseState) -> str:
        return f"Collected {len(state.artifacts or [])} artifact(s)"


class CaptureChangelog(ReleaseStep):
    def start_message(self, state: ReleaseState) -> str:
        return f"Capturing changelog from '{state.changelog_config().file}'"

    def execute(self, state: ReleaseState) -> None:
        config = state.changelog_config()
        try:
            text = config.file.read_bytes().decode("utf-8")
        except OSError as exc:
            raise ExternalError(f"Failed to read changelog {config.file}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise ExternalError(f"Changelog {config.file} is not a text file") from exc

        begin = end = None
        if config.start_marker_template is not None:
            context = state.template_context()
            begin = render(config.start_marker_template, context)
            end = render(config.end_marker_template or "", context)

        changelog = extract_changelog(
            text, begin, end, allow_empty=config.allow_empty_changelog
        )
        if config.print_to_stdout:
            for line in changelog.splitlines():
                print(f"  {line}")
        state.changelog = changelog

    def success_message(self, state: ReleaseState) -> str:
        return "Changelog has been captured"


class ValidateCommitPushed(ReleaseStep):
    def start_message(self, state: ReleaseState) -> str:
        return (
            f"Checking that commit {state.short_commit()} is pushed "
            f"to {state.github_config().repo}"
        )

    def execute(self, state: ReleaseState) -> None:
        state.require_github().combined_status(
            state.github_config().repo, state.require_current_commit()
        )

    def success_message(self, state: ReleaseState) -> str:
        return "Success! Current commit is pushed to the remote"


class ValidateVersion(ReleaseStep):
    def start_message(self, state: ReleaseState) -> str:
        return "Validating repo versioning"

    def execute(self, state: ReleaseState) -> None:
        ConsistencyValidator(state).validate()

    def success_message(self, state: ReleaseState) -> str:
        return "Version validation done"


class CargoPublish(ReleaseStep):
    def __init__(self, *, validate: bool) -> None:
        self.validate = validate

    @classmethod
    def validate_only(cls) -> CargoPublish:
        return cls(validate=True)

    def start_message(self, state: ReleaseState) -> str:
        if self.validate:
            return "Validating cargo publish (with --dry-run)"
        return "Running cargo publish"

    def execute(self, state: ReleaseState) -> None:
        if state.dry_run and not self.validate:
            raise PreconditionError(
                "BUG: CargoPublish should not be called in non-validate mode "
                "when dry-run is specified"
            )

        packages = ordered_packages_to_publish(state.require_workspace())
        if self.validate:
            print("  Package publish order:")
            for p in packages:
                print(f"  - {p.name}")

        release = state.config.release
        publish_packages(
            packages,
            registry=release.registry,
            validate_only=self.validate,
            interval_seconds=release.publish_interval_seconds,
            token=state.registry_token,
        )

    def success_message(self, state: ReleaseState) -> str:
        if self.validate:
            return "Cargo publish validation passed"
        return "Cargo publish succeeded"


class CreateTag(ReleaseStep):
    def start_message(self, state: ReleaseState) -> str:
        return f"Creating new tag for version {state.require_version()}"

    def execute(self, state: ReleaseState) -> None:
        tag = render(
            state.release_github_config().tag_name_template, state.template_context()
        )
        state.release_tag = tag
        commit = state.require_current_commit()
        print(f"  Tag `{tag}` will be created for commit {commit}")

        if state.dry_run:
            print("  Skipping tag creation in dry run mode")
            return

        state.require_github().create_tag_ref(state.github_config().repo, tag, commit)

    def success_message(self, state: ReleaseState) -> str:
        return "Tag has been created"


class CreateRelease(ReleaseStep):
    def start_message(self, state: ReleaseState) -> str:
        return f"Creating new GitHub release for tag `{state.require_release_tag()}`"

    def execute(self, state: ReleaseState) -> None:
        release_config = state.release_github_config()
        context = state.template_context()
        title = render(release_config.release_page_title_template, context)
        body = render(release_config.release_page_body_template, context)
        tag = state.require_release_tag()

        if release_config.print_to_stdout:
            print("GitHub release title:")
            print(title)
            print("GitHub release body:")
            print(body)

        if state.dry_run:
            print("  Skipping GitHub release creation in dry run mode")
            return

        repo = state.github_config().repo
        client = state.require_github()
        release_id = client.create_release(repo, tag, title, body)

        if release_config.release_page_upload_artifacts:
            for artifact in state.require_artifacts():
                print(f"  Uploading release artifact {artifact}")
                client.upload_release_asset(repo, release_id, artifact)

    def success_message(self, state: ReleaseState) -> str:
        return "GitHub release has been created"
