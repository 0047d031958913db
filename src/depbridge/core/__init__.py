"""Data types shared by the facade, the registry and every backend.

Public names are re-exported here so callers can write
``from depbridge.core import Dependency, BuildingRequest``.
"""

from depbridge.core.coordinates import (
    ArtifactCoordinate,
    DependableCoordinate,
    Dependency,
    Exclusion,
    ProjectModel,
)
from depbridge.core.filters import (
    AcceptAllFilter,
    AndFilter,
    OrFilter,
    PatternExclusionsFilter,
    PatternInclusionsFilter,
    ScopeFilter,
    TransformableFilter,
)
from depbridge.core.graph import CollectorResult, DependencyNode
from depbridge.core.request import BuildingRequest, RemoteRepository
from depbridge.core.results import ArtifactResult
from depbridge.core.versions import VersionConstraint, parse_version, version_key

__all__ = [
    "AcceptAllFilter",
    "AndFilter",
    "ArtifactCoordinate",
    "ArtifactResult",
    "BuildingRequest",
    "CollectorResult",
    "DependableCoordinate",
    "Dependency",
    "DependencyNode",
    "Exclusion",
    "OrFilter",
    "PatternExclusionsFilter",
    "PatternInclusionsFilter",
    "ProjectModel",
    "RemoteRepository",
    "ScopeFilter",
    "TransformableFilter",
    "VersionConstraint",
    "parse_version",
    "version_key",
]
