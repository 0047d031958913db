"""Dependency graph produced by collection.

A collected graph is a tree of ``DependencyNode`` objects rooted at the
collection root. Conflicts have already been mediated by the backend, so each
management key appears at most once with a given version; cycles have been
cut and are reported separately on ``CollectorResult.cycles``.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from depbridge.core.coordinates import ArtifactCoordinate, Dependency


# ---------------------------------------------------------------------------
# DependencyNode: A vertex in the collected graph
# ---------------------------------------------------------------------------


@dataclass
class DependencyNode:
    """A node of the collected dependency graph.

    Attributes:
        artifact: The selected artifact, or None for the synthetic root of a
            collection started from a bare set of dependencies.
        dependency: The declaration that introduced this node (None for the
            root), with its effective scope and selected version.
        children: Direct dependencies of this node, in declaration order.
        premanaged_version: The declared version before dependency
            management replaced it, if it did.
    """

    artifact: ArtifactCoordinate | None
    dependency: Dependency | None = None
    children: list[DependencyNode] = field(default_factory=list)
    premanaged_version: str | None = None

    @property
    def scope(self) -> str:
        return self.dependency.scope if self.dependency else ""

    def label(self) -> str:
        if self.artifact is None:
            return "(root)"
        if self.dependency is None:
            return str(self.artifact)
        text = f"{self.artifact}:{self.dependency.scope}"
        if self.dependency.optional:
            text += " (optional)"
        if self.premanaged_version:
            text += f" (version managed from {self.premanaged_version})"
        return text


# ---------------------------------------------------------------------------
# CollectorResult
# ---------------------------------------------------------------------------


@dataclass
class CollectorResult:
    """Outcome of a graph-only collection.

    Attributes:
        root: Root node of the dependency tree.
        cycles: Cycles that were cut during collection, each a list of
            management keys forming the path (e.g. ``[a, b, a]``).
    """

    root: DependencyNode
    cycles: list[list[str]] = field(default_factory=list)

    def walk(self) -> Iterator[tuple[DependencyNode, tuple[DependencyNode, ...]]]:
        """Yield ``(node, parents)`` pairs in preorder, root first.

        ``parents`` lists the ancestors of ``node``, nearest first.
        """
        stack: list[tuple[DependencyNode, tuple[DependencyNode, ...]]] = [(self.root, ())]
        while stack:
            node, parents = stack.pop()
            yield node, parents
            child_parents = (node,) + parents
            for child in reversed(node.children):
                stack.append((child, child_parents))

    def nodes(self) -> list[DependencyNode]:
        """All nodes in preorder, root first."""
        return [node for node, _ in self.walk()]

    def dependencies(self) -> list[Dependency]:
        """Declarations of every non-root node, in preorder."""
        return [node.dependency for node in self.nodes()[1:] if node.dependency is not None]

    def artifacts(self) -> list[ArtifactCoordinate]:
        """Artifacts of every non-root node, in preorder."""
        return [node.artifact for node in self.nodes()[1:] if node.artifact is not None]

    def levels(self) -> list[list[DependencyNode]]:
        """Nodes grouped by depth (BFS), root level first."""
        levels: list[list[DependencyNode]] = []
        queue: deque[tuple[DependencyNode, int]] = deque([(self.root, 0)])
        while queue:
            node, depth = queue.popleft()
            if depth == len(levels):
                levels.append([])
            levels[depth].append(node)
            for child in node.children:
                queue.append((child, depth + 1))
        return levels

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable representation of the tree."""

        def _node(node: DependencyNode) -> dict[str, Any]:
            data: dict[str, Any] = {
                "artifact": str(node.artifact) if node.artifact else None,
                "scope": node.scope or None,
            }
            if node.dependency is not None and node.dependency.optional:
                data["optional"] = True
            if node.premanaged_version:
                data["premanagedVersion"] = node.premanaged_version
            data["children"] = [_node(child) for child in node.children]
            return data

        return {"root": _node(self.root), "cycles": [list(c) for c in self.cycles]}
