"""Release pipeline: init → collect → validate → publish → tag → release.

This module assembles and runs the monorepo-release process:
1. Initialize: tokens, current commit, workspace metadata, pending version
2. Collect artifacts and capture the changelog (when configured)
3. Check that the current commit is pushed to GitHub (when configured)
4. Validate versions, dependencies and registries across the workspace
5. Dry-run publish every package, then publish for real in dependency order
6. Create the git tag and the GitHub release page (when configured)

Steps run strictly one after another. The first failing step aborts the
run; side effects of earlier steps (published crates, created tags) are
not rolled back.
"""

from __future__ import annotations

from .config import Config
from .shell import step
from .state import ReleaseState
from .steps import (
    CaptureChangelog,
    CargoPublish,
    CollectArtifacts,
    CreateRelease,
    CreateTag,
    Init,
    ReleaseStep,
    ValidateCommitPushed,
    ValidateVersion,
)


def build_steps(state: ReleaseState) -> list[ReleaseStep]:
    """Select the steps for this run from the configuration and mode flags."""
    config = state.config
    github = config.release.github

    steps: list[ReleaseStep] = [Init()]
    if config.artifacts is not None:
        steps.append(CollectArtifacts())
    if config.changelog is not None:
        steps.append(CaptureChangelog())
    if github is not None and github.check_commit_pushed:
        steps.append(ValidateCommitPushed())
    steps.append(ValidateVersion())
    steps.append(CargoPublish.validate_only())
    if not (state.dry_run or state.no_publish):
        steps.append(CargoPublish(validate=False))
    if github is not None:
        if github.create_tag:
            steps.append(CreateTag())
        if github.create_release_page:
            steps.append(CreateRelease())
    return steps


def execute_steps(steps: list[ReleaseStep], state: ReleaseState) -> None:
    """Run steps in order, stopping at the first one that raises."""
    for s in steps:
        step(s.start_message(state))
        s.execute(state)
        print(f"  ✓ {s.success_message(state)}")


def run_release(
    config: Config, *, dry_run: bool = True, no_publish: bool = False
) -> ReleaseState:
    """Execute the full release pipeline.

    Args:
        config: Validated release configuration.
        dry_run: Validate everything but skip publish, tag and release
                 creation.
        no_publish: Run the real release but skip publishing to the registry.

    Returns:
        The final release state.
    """
    if dry_run:
        print("Running release in dry-run mode!")
    else:
        print("Running release in production mode!")

    state = ReleaseState(config, dry_run=dry_run, no_publish=no_publish)
    try:
        execute_steps(build_steps(state), state)
    finally:
        if state.github is not None:
            state.github.close()

    version = state.require_version()
    if dry_run:
        summary = f"Dry run of workspace version {version} succeeded"
    else:
        summary = f"Workspace version {version} has been released!"
    print(f"\n{'=' * 60}\n{summary}\n{'=' * 60}")
    return state
