"""Dependency graph utilities.

Provides topological sorting for determining publish order in a workspace.
Packages must be published in dependency order so that when package A
depends on package B, B is already on the registry when A is uploaded.
"""

from __future__ import annotations

from .errors import DependencyCycleError
from .models import Dependency, DependencyKind, Package, Workspace


def is_ordering_edge(dep: Dependency) -> bool:
    """Whether an in-workspace dependency constrains publish order.

    Every kind orders, except path-only dev-dependencies: cargo strips those
    from the published manifest, and they may legally form cycles.
    """
    return dep.kind != DependencyKind.DEVELOPMENT or not dep.has_empty_req


class WorkspaceGraph:
    """In-workspace dependency edges, keyed by package id.

    Every key is a workspace member and every edge points at another member;
    dependencies on packages outside the workspace are dropped since they are
    assumed to be published already.
    """

    def __init__(self, members: list[str], edges: dict[str, list[str]]) -> None:
        self.members = members
        self.edges = edges

    @classmethod
    def from_workspace(cls, workspace: Workspace) -> WorkspaceGraph:
        ids_by_name = {p.name: p.id for p in workspace.members}
        edges: dict[str, list[str]] = {}
        for package in workspace.members:
            deps: list[str] = []
            for dep in package.dependencies:
                dep_id = ids_by_name.get(dep.name)
                if dep_id is None or not is_ordering_edge(dep):
                    continue
                if dep_id not in deps:
                    deps.append(dep_id)
            edges[package.id] = deps
        return cls([p.id for p in workspace.members], edges)

    def topo_sort(self) -> list[str]:
        """Depth-first post-order over members in listing order.

        Returns:
            Package ids, dependencies before dependents.

        Raises:
            DependencyCycleError: If the edges contain a cycle.

        Example:
            If A depends on B, and B depends on C:
            topo_sort() → [C, B, A]
        """
        order: list[str] = []
        done: set[str] = set()
        # Ids on the current DFS path; revisiting one means a back-edge.
        path: list[str] = []

        def visit(node: str) -> None:
            if node in done:
                return
            if node in path:
                raise DependencyCycleError(path[path.index(node) :] + [node])
            path.append(node)
            for dep in self.edges.get(node, []):
                visit(dep)
            path.pop()
            done.add(node)
            order.append(node)

        for member in self.members:
            visit(member)
        return order


def publish_order(workspace: Workspace) -> list[str]:
    """Topologically sort all workspace members (publishable or not)."""
    return WorkspaceGraph.from_workspace(workspace).topo_sort()


def packages_to_publish(workspace: Workspace) -> list[Package]:
    """Publish candidates in listing order.

    A package with ``publish = []`` (cargo's ``publish = false``) is never a
    candidate.
    """
    return [p for p in workspace.members if p.is_publishable]


def ordered_packages_to_publish(workspace: Workspace) -> list[Package]:
    """Publish candidates in dependency order.

    Ordering uses the full graph, so a candidate depending on a non-publishable
    package still sorts after it; the non-publishable package is then filtered
    out without reordering the rest.
    """
    order = publish_order(workspace)
    candidates = {p.id: p for p in packages_to_publish(workspace)}
    return [candidates[pid] for pid in order if pid in candidates]
