"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from monorepo_release.config import Config, ReleaseConfig, WorkspaceConfig
from monorepo_release.models import Dependency, DependencyKind, Package, Target, Workspace
from monorepo_release.state import ReleaseState
from monorepo_release.versions import parse_version

PackageFactory = Callable[..., Package]


@pytest.fixture
def make_package() -> PackageFactory:
    """Factory for workspace packages.

    ``deps`` maps dependency name → requirement (normal kind); ``dev_deps``
    and ``build_deps`` do the same for the other kinds.
    """

    def factory(
        name: str,
        version: str = "1.2.0",
        *,
        deps: dict[str, str] | None = None,
        dev_deps: dict[str, str] | None = None,
        build_deps: dict[str, str] | None = None,
        publish: list[str] | None = None,
        binary: bool = False,
    ) -> Package:
        dependencies = [
            Dependency(name=n, kind=kind, req=req)
            for kind, group in (
                (DependencyKind.NORMAL, deps),
                (DependencyKind.DEVELOPMENT, dev_deps),
                (DependencyKind.BUILD, build_deps),
            )
            for n, req in (group or {}).items()
        ]
        return Package(
            id=f"{name} {version} (path+file:///ws/{name})",
            name=name,
            version=version,
            dependencies=dependencies,
            targets=[Target(name=name, kind=["bin" if binary else "lib"])],
            manifest_path=f"/ws/{name}/Cargo.toml",
            publish=publish,
        )

    return factory


@pytest.fixture
def config() -> Config:
    """Minimal config with the registry lookup disabled."""
    return Config(
        workspace=WorkspaceConfig(root_crate="root"),
        release=ReleaseConfig(check_version_raised=False),
    )


@pytest.fixture
def make_state(config: Config) -> Callable[..., ReleaseState]:
    """Factory for a state that already went through Init."""

    def factory(
        packages: list[Package],
        version: str = "1.2.0",
        *,
        cfg: Config | None = None,
        dry_run: bool = True,
    ) -> ReleaseState:
        state = ReleaseState(cfg or config, dry_run=dry_run)
        state.workspace = Workspace(members=packages)
        state.set_version(parse_version(version))
        state.current_commit = "0123456789abcdef0123456789abcdef01234567"
        return state

    return factory
