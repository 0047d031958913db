"""Caller-facing contracts for dependency resolution and collection.

``DependencyResolver`` and ``DependencyCollector`` are implemented twice
over: once by the facades in ``depbridge.facade``, which callers use, and
once per engine generation by the backends in ``depbridge.backends``, which
the facades delegate to. Both sides satisfy exactly the same contract, so a
backend can be swapped in for a facade and vice versa.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Collection

from depbridge.core.coordinates import DependableCoordinate, Dependency, ProjectModel
from depbridge.core.filters import TransformableFilter
from depbridge.core.graph import CollectorResult
from depbridge.core.request import BuildingRequest
from depbridge.core.results import ArtifactResult


class DependencyResolver(ABC):
    """Collects dependencies and materializes their artifacts.

    Every operation returns the resolved artifacts in the order the
    resolver produced them and raises ``DependencyResolverError`` on failure.
    """

    @abstractmethod
    def resolve_dependencies(
        self,
        building_request: BuildingRequest,
        coordinates: Collection[Dependency],
        managed_dependencies: Collection[Dependency] | None,
        filter: TransformableFilter,
    ) -> list[ArtifactResult]:
        """Resolve a set of dependencies under a set of managed dependencies."""

    @abstractmethod
    def resolve_coordinate(
        self,
        building_request: BuildingRequest,
        coordinate: DependableCoordinate,
        filter: TransformableFilter,
    ) -> list[ArtifactResult]:
        """Resolve a coordinate and its transitive dependencies."""

    @abstractmethod
    def resolve_model(
        self,
        building_request: BuildingRequest,
        model: ProjectModel,
        filter: TransformableFilter,
    ) -> list[ArtifactResult]:
        """Resolve the dependencies of a project model (not the project itself)."""


class DependencyCollector(ABC):
    """Builds dependency graphs without downloading artifacts.

    Every operation raises ``DependencyCollectorError`` on failure.
    """

    @abstractmethod
    def collect_dependency(
        self, building_request: BuildingRequest, root: Dependency
    ) -> CollectorResult:
        """Collect the graph below a dependency declaration."""

    @abstractmethod
    def collect_coordinate(
        self, building_request: BuildingRequest, root: DependableCoordinate
    ) -> CollectorResult:
        """Collect the graph below a coordinate."""

    @abstractmethod
    def collect_model(
        self, building_request: BuildingRequest, root: ProjectModel
    ) -> CollectorResult:
        """Collect the graph of a project model."""

    def collect_dependencies(
        self,
        building_request: BuildingRequest,
        root: Dependency | DependableCoordinate | ProjectModel,
    ) -> CollectorResult:
        """Collect the graph of any supported root shape."""
        if isinstance(root, Dependency):
            return self.collect_dependency(building_request, root)
        if isinstance(root, DependableCoordinate):
            return self.collect_coordinate(building_request, root)
        if isinstance(root, ProjectModel):
            return self.collect_model(building_request, root)
        raise TypeError(f"Unsupported collection root: {type(root).__name__}")

    def collect_project_graph(self, building_request: BuildingRequest) -> CollectorResult:
        """Collect the graph of the project bound to *building_request*."""
        if building_request.project is None:
            raise ValueError("The building request has no project")
        return self.collect_model(building_request, building_request.project)
