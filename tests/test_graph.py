"""Tests for monorepo_release.graph."""

from __future__ import annotations

import pytest

from monorepo_release.errors import DependencyCycleError
from monorepo_release.graph import (
    WorkspaceGraph,
    is_ordering_edge,
    ordered_packages_to_publish,
    packages_to_publish,
    publish_order,
)
from monorepo_release.models import Dependency, DependencyKind, Workspace


def _names(workspace: Workspace, ids: list[str]) -> list[str]:
    return [workspace.by_id(i).name for i in ids]


class TestPublishOrder:
    """Tests for publish_order()."""

    def test_no_deps_keeps_listing_order(self, make_package) -> None:
        """Independent packages come out in listing order."""
        ws = Workspace(members=[make_package("c"), make_package("a"), make_package("b")])
        assert _names(ws, publish_order(ws)) == ["c", "a", "b"]

    def test_linear_deps(self, make_package) -> None:
        """A chain is published from the leaf up."""
        ws = Workspace(
            members=[
                make_package("a", deps={"b": "=1.2.0"}),
                make_package("b", deps={"c": "=1.2.0"}),
                make_package("c"),
            ]
        )
        assert _names(ws, publish_order(ws)) == ["c", "b", "a"]

    def test_diamond_deps(self, make_package) -> None:
        """A shared dependency is visited once, before both dependents."""
        ws = Workspace(
            members=[
                make_package("top", deps={"left": "1.2", "right": "1.2"}),
                make_package("left", deps={"bottom": "1.2"}),
                make_package("right", deps={"bottom": "1.2"}),
                make_package("bottom"),
            ]
        )
        result = _names(ws, publish_order(ws))
        assert result == ["bottom", "left", "right", "top"]

    def test_every_edge_respected(self, make_package) -> None:
        """For every edge A -> B, B precedes A."""
        ws = Workspace(
            members=[
                make_package("app", deps={"core": "1", "macros": "1"}),
                make_package("cli", deps={"app": "1"}, dev_deps={"testkit": "1"}),
                make_package("macros", build_deps={"codegen": "1"}),
                make_package("core", deps={"serde": "1"}),
                make_package("codegen", deps={"core": "1"}),
                make_package("testkit", deps={"core": "1"}),
            ]
        )
        order = _names(ws, publish_order(ws))
        graph = WorkspaceGraph.from_workspace(ws)
        for pkg_id, deps in graph.edges.items():
            for dep_id in deps:
                assert order.index(ws.by_id(dep_id).name) < order.index(
                    ws.by_id(pkg_id).name
                )

    def test_external_deps_ignored(self, make_package) -> None:
        """Dependencies outside the workspace never become edges."""
        ws = Workspace(
            members=[
                make_package("a", deps={"serde": "1.0"}),
                make_package("b", deps={"a": "1.2"}),
            ]
        )
        graph = WorkspaceGraph.from_workspace(ws)
        assert graph.edges[ws.by_name("a").id] == []
        assert _names(ws, publish_order(ws)) == ["a", "b"]

    def test_versioned_dev_dep_orders(self, make_package) -> None:
        """A dev-dependency with a version requirement is published first."""
        ws = Workspace(
            members=[
                make_package("app", dev_deps={"testkit": "1.2.0"}),
                make_package("testkit"),
            ]
        )

        names = [p.name for p in ordered_packages_to_publish(ws)]

        assert names == ["testkit", "app"]

    def test_path_only_dev_dep_cycle_is_allowed(self, make_package) -> None:
        """A cycle through a path-only dev-dependency is legal and ignored."""
        ws = Workspace(
            members=[
                make_package("a", dev_deps={"b": ""}),
                make_package("b", deps={"a": "1.2"}),
            ]
        )
        assert _names(ws, publish_order(ws)) == ["a", "b"]

    def test_versioned_dev_dep_cycle_raises(self, make_package) -> None:
        """A versioned dev-dependency survives publishing, so its cycle is real."""
        ws = Workspace(
            members=[
                make_package("a", dev_deps={"b": "1.2.0"}),
                make_package("b", deps={"a": "1.2"}),
            ]
        )
        with pytest.raises(DependencyCycleError):
            publish_order(ws)

    def test_empty_workspace(self) -> None:
        assert publish_order(Workspace()) == []

    def test_cycle_raises(self, make_package) -> None:
        """A two-package cycle is reported with its closing node."""
        ws = Workspace(
            members=[
                make_package("a", deps={"b": "1"}),
                make_package("b", deps={"a": "1"}),
            ]
        )
        with pytest.raises(DependencyCycleError, match="cycle") as excinfo:
            publish_order(ws)
        assert len(excinfo.value.cycle) == 3
        assert excinfo.value.cycle[0] == excinfo.value.cycle[-1]

    def test_three_way_cycle_raises(self, make_package) -> None:
        """Build dependencies take part in cycle detection."""
        ws = Workspace(
            members=[
                make_package("a", deps={"b": "1"}),
                make_package("b", deps={"c": "1"}),
                make_package("c", build_deps={"a": "1"}),
            ]
        )
        with pytest.raises(DependencyCycleError):
            publish_order(ws)


class TestIsOrderingEdge:
    """Tests for is_ordering_edge()."""

    @pytest.mark.parametrize(
        ("kind", "req", "expected"),
        [
            (DependencyKind.NORMAL, "", True),
            (DependencyKind.BUILD, "1.0", True),
            (DependencyKind.DEVELOPMENT, "1.0", True),
            (DependencyKind.DEVELOPMENT, "", False),
            (DependencyKind.DEVELOPMENT, "*", False),
        ],
    )
    def test_kinds(self, kind: DependencyKind, req: str, expected: bool) -> None:
        """Only path-only dev-dependencies are left out."""
        assert is_ordering_edge(Dependency(name="x", kind=kind, req=req)) is expected


class TestPublishCandidates:
    """Tests for packages_to_publish() and ordered_packages_to_publish()."""

    def test_empty_allow_set_excluded(self, make_package) -> None:
        """publish = [] removes a package from the candidates."""
        ws = Workspace(
            members=[
                make_package("a"),
                make_package("internal", publish=[]),
                make_package("b", publish=["crates-io"]),
            ]
        )
        assert [p.name for p in packages_to_publish(ws)] == ["a", "b"]

    def test_non_publishable_dep_still_orders(self, make_package) -> None:
        """A publishable package sorts after its non-publishable dependency."""
        ws = Workspace(
            members=[
                make_package("app", deps={"helpers": "1", "core": "1"}),
                make_package("helpers", publish=[], deps={"core": "1"}),
                make_package("core"),
            ]
        )
        assert [p.name for p in ordered_packages_to_publish(ws)] == ["core", "app"]

    def test_filter_preserves_relative_order(self, make_package) -> None:
        """Filtering drops packages without reordering the rest."""
        ws = Workspace(
            members=[
                make_package("d", deps={"c": "1"}),
                make_package("c", deps={"x": "1"}),
                make_package("x", publish=[], deps={"b": "1"}),
                make_package("b", deps={"a": "1"}),
                make_package("a"),
            ]
        )
        full = _names(ws, publish_order(ws))
        filtered = [p.name for p in ordered_packages_to_publish(ws)]
        assert filtered == [n for n in full if n != "x"]
        assert "x" not in filtered
