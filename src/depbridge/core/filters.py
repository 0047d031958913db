"""Dependency filters applied during resolution.

A ``TransformableFilter`` is an opaque predicate over graph nodes: the facade
passes it through unmodified and the backend consults it for every node of
the collected graph. Filters compose with ``AndFilter`` and ``OrFilter``.
"""

from __future__ import annotations

import fnmatch
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence

from depbridge.core.graph import DependencyNode


class TransformableFilter(ABC):
    """Predicate deciding whether a node's artifact is resolved."""

    @abstractmethod
    def accepts(self, node: DependencyNode, parents: Sequence[DependencyNode]) -> bool:
        """Return True if *node* should be included.

        Args:
            node: The candidate node.
            parents: Ancestors of the node, nearest first.
        """


class AcceptAllFilter(TransformableFilter):
    """Accepts every node."""

    def accepts(self, node: DependencyNode, parents: Sequence[DependencyNode]) -> bool:
        return True


class ScopeFilter(TransformableFilter):
    """Filters nodes by their effective scope.

    Args:
        included: Scopes to keep. None keeps every scope not excluded.
        excluded: Scopes to drop.
    """

    def __init__(
        self,
        included: Iterable[str] | None = None,
        excluded: Iterable[str] | None = None,
    ) -> None:
        self.included = frozenset(included) if included is not None else None
        self.excluded = frozenset(excluded or ())

    @classmethod
    def including(cls, *scopes: str) -> ScopeFilter:
        return cls(included=scopes)

    @classmethod
    def excluding(cls, *scopes: str) -> ScopeFilter:
        return cls(excluded=scopes)

    def accepts(self, node: DependencyNode, parents: Sequence[DependencyNode]) -> bool:
        scope = node.scope
        if not scope:
            return True
        if self.included is not None and scope not in self.included:
            return False
        return scope not in self.excluded


def _pattern_matches(pattern: str, node: DependencyNode) -> bool:
    """Match ``group[:artifact[:type[:version]]]`` with ``*`` wildcards."""
    artifact = node.artifact
    if artifact is None:
        return False
    values = [artifact.group_id, artifact.artifact_id, artifact.extension, artifact.version]
    tokens = pattern.split(":")
    if len(tokens) > len(values):
        return False
    return all(fnmatch.fnmatchcase(value, token) for value, token in zip(values, tokens))


class PatternInclusionsFilter(TransformableFilter):
    """Keeps only nodes whose artifact matches one of the patterns."""

    def __init__(self, patterns: Iterable[str]) -> None:
        self.patterns = tuple(patterns)

    def accepts(self, node: DependencyNode, parents: Sequence[DependencyNode]) -> bool:
        return any(_pattern_matches(p, node) for p in self.patterns)


class PatternExclusionsFilter(TransformableFilter):
    """Drops nodes whose artifact matches any of the patterns."""

    def __init__(self, patterns: Iterable[str]) -> None:
        self.patterns = tuple(patterns)

    def accepts(self, node: DependencyNode, parents: Sequence[DependencyNode]) -> bool:
        return not any(_pattern_matches(p, node) for p in self.patterns)


class AndFilter(TransformableFilter):
    """Accepts a node only if every member filter accepts it."""

    def __init__(self, filters: Iterable[TransformableFilter]) -> None:
        self.filters = tuple(filters)

    def accepts(self, node: DependencyNode, parents: Sequence[DependencyNode]) -> bool:
        return all(f.accepts(node, parents) for f in self.filters)


class OrFilter(TransformableFilter):
    """Accepts a node if any member filter accepts it."""

    def __init__(self, filters: Iterable[TransformableFilter]) -> None:
        self.filters = tuple(filters)

    def accepts(self, node: DependencyNode, parents: Sequence[DependencyNode]) -> bool:
        return any(f.accepts(node, parents) for f in self.filters)
