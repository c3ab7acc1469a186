"""Data models for monorepo-release.

These Pydantic models describe a Cargo workspace as reported by
``cargo metadata``. The release pipeline never reads manifests itself; it
only works with this snapshot.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

CRATES_IO_REGISTRY_NAME = "crates-io"


class DependencyKind(str, Enum):
    NORMAL = "normal"
    BUILD = "build"
    DEVELOPMENT = "development"

    @classmethod
    def from_cargo(cls, value: str | None) -> DependencyKind:
        """Map the ``kind`` field of cargo metadata (null, "build", "dev")."""
        if value is None:
            return cls.NORMAL
        if value == "dev":
            return cls.DEVELOPMENT
        return cls(value)


class Dependency(BaseModel):
    """A dependency declared by a package.

    Attributes:
        name: Name of the package depended upon.
        kind: normal, build or development.
        req: Version requirement expression. Empty (or ``*``) when the
             dependency is linked by path only.
    """

    name: str
    kind: DependencyKind = DependencyKind.NORMAL
    req: str = ""

    @property
    def has_empty_req(self) -> bool:
        return self.req.strip() in ("", "*")


class Target(BaseModel):
    name: str
    kind: list[str] = Field(default_factory=list)


class Package(BaseModel):
    """Metadata for a single workspace member.

    Attributes:
        id: Unique package identifier.
        name: Package name.
        version: Current version string from the manifest.
        dependencies: Every declared dependency, internal or external.
        targets: Build targets; a ``bin`` target marks a binary package.
        manifest_path: Location of the package manifest.
        publish: None when every registry is allowed, otherwise the list of
                 registries the package may be published to. An empty list
                 means the package is never published.
    """

    id: str
    name: str
    version: str
    dependencies: list[Dependency] = Field(default_factory=list)
    targets: list[Target] = Field(default_factory=list)
    manifest_path: str = ""
    publish: list[str] | None = None

    @property
    def full_name(self) -> str:
        return f"{self.name} v{self.version}"

    @property
    def is_publishable(self) -> bool:
        return self.publish is None or len(self.publish) > 0

    @property
    def is_binary(self) -> bool:
        return any("bin" in target.kind for target in self.targets)

    def allows_registry(self, registry: str | None) -> bool:
        """Whether the package may be published to ``registry`` (None = crates.io)."""
        if self.publish is None:
            return True
        return (registry or CRATES_IO_REGISTRY_NAME) in self.publish


class Workspace(BaseModel):
    """Snapshot of the workspace members, in their natural listing order."""

    members: list[Package] = Field(default_factory=list)

    def package_names(self) -> list[str]:
        return [p.name for p in self.members]

    def by_name(self, name: str) -> Package | None:
        return next((p for p in self.members if p.name == name), None)

    def by_id(self, package_id: str) -> Package | None:
        return next((p for p in self.members if p.id == package_id), None)

    @classmethod
    def from_cargo_metadata(cls, data: dict[str, Any]) -> Workspace:
        """Build a snapshot from ``cargo metadata --format-version 1`` output.

        Only packages listed in ``workspace_members`` are kept, ordered as
        cargo lists the members.
        """
        raw_packages = {p["id"]: p for p in data.get("packages", [])}
        members: list[Package] = []
        for package_id in data.get("workspace_members", []):
            raw = raw_packages.get(package_id)
            if raw is None:
                continue
            members.append(
                Package(
                    id=raw["id"],
                    name=raw["name"],
                    version=raw["version"],
                    dependencies=[
                        Dependency(
                            name=d["name"],
                            kind=DependencyKind.from_cargo(d.get("kind")),
                            req=d.get("req") or "",
                        )
                        for d in raw.get("dependencies", [])
                    ],
                    targets=[
                        Target(name=t["name"], kind=list(t.get("kind", [])))
                        for t in raw.get("targets", [])
                    ],
                    manifest_path=raw.get("manifest_path", ""),
                    publish=raw.get("publish"),
                )
            )
        return cls(members=members)
