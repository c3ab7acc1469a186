"""Tests for monorepo_release.models."""

from __future__ import annotations

from monorepo_release.models import Dependency, DependencyKind, Package, Workspace

METADATA = {
    "workspace_members": ["core 1.0.0 (path+file:///ws/core)", "app 1.0.0 (path+file:///ws/app)"],
    "packages": [
        {
            "id": "app 1.0.0 (path+file:///ws/app)",
            "name": "app",
            "version": "1.0.0",
            "manifest_path": "/ws/app/Cargo.toml",
            "publish": None,
            "dependencies": [
                {"name": "core", "req": "^1.0.0", "kind": None},
                {"name": "tests-util", "req": "*", "kind": "dev"},
                {"name": "cc", "req": "^1", "kind": "build"},
            ],
            "targets": [{"name": "app", "kind": ["bin"]}],
        },
        {
            "id": "core 1.0.0 (path+file:///ws/core)",
            "name": "core",
            "version": "1.0.0",
            "manifest_path": "/ws/core/Cargo.toml",
            "publish": ["my-registry"],
            "dependencies": [],
            "targets": [{"name": "core", "kind": ["lib"]}],
        },
        {
            "id": "serde 1.0.0 (registry+https://github.com/rust-lang/crates.io-index)",
            "name": "serde",
            "version": "1.0.0",
            "dependencies": [],
            "targets": [],
        },
    ],
}


class TestFromCargoMetadata:
    """Tests for Workspace.from_cargo_metadata()."""

    def test_keeps_members_in_member_order(self) -> None:
        """Members follow workspace_members, non-members dropped."""
        ws = Workspace.from_cargo_metadata(METADATA)
        assert ws.package_names() == ["core", "app"]

    def test_dependency_kinds(self) -> None:
        """cargo's null/dev/build kinds are mapped."""
        app = Workspace.from_cargo_metadata(METADATA).by_name("app")
        assert [d.kind for d in app.dependencies] == [
            DependencyKind.NORMAL,
            DependencyKind.DEVELOPMENT,
            DependencyKind.BUILD,
        ]
        assert app.dependencies[1].has_empty_req

    def test_publish_and_targets(self) -> None:
        """Publish lists and bin targets are kept."""
        ws = Workspace.from_cargo_metadata(METADATA)
        assert ws.by_name("app").is_binary
        assert not ws.by_name("core").is_binary
        assert ws.by_name("core").publish == ["my-registry"]


class TestPackage:
    """Tests for Package and Dependency helpers."""

    def test_publishable(self) -> None:
        """publish = [] means never published."""
        assert Package(id="a", name="a", version="1.0.0").is_publishable
        assert not Package(id="a", name="a", version="1.0.0", publish=[]).is_publishable

    def test_allows_registry(self) -> None:
        """An allow-list restricts registries; None allows all."""
        default = Package(id="a", name="a", version="1.0.0")
        restricted = Package(id="b", name="b", version="1.0.0", publish=["private"])
        assert default.allows_registry(None)
        assert default.allows_registry("private")
        assert restricted.allows_registry("private")
        assert not restricted.allows_registry(None)

    def test_full_name(self) -> None:
        assert Package(id="a", name="a", version="1.0.0").full_name == "a v1.0.0"

    def test_dependency_defaults(self) -> None:
        """A bare dependency is normal and path-only."""
        dep = Dependency(name="x")
        assert dep.kind == DependencyKind.NORMAL
        assert dep.has_empty_req
