"""Generation-independent facades over the registered backends.

``DefaultDependencyResolver`` and ``DefaultDependencyCollector`` are what
callers use. Neither knows how to build a graph or download an artifact; every
call runs the same pipeline:

1. Validate the arguments. Nothing else happens if one is unset.
2. Detect the active engine generation.
3. Look up the backend registered for (capability, generation).
4. Call the same operation on the backend and return its result as is.

A failed lookup is re-raised as the facade's error type with the lookup
failure as its cause. Failures raised by the backend itself are never caught
here.
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from typing import Any

from depbridge.api import DependencyCollector, DependencyResolver
from depbridge.core.coordinates import DependableCoordinate, Dependency, ProjectModel
from depbridge.core.filters import TransformableFilter
from depbridge.core.graph import CollectorResult
from depbridge.core.request import BuildingRequest
from depbridge.core.results import ArtifactResult
from depbridge.detection import CapabilityDetector
from depbridge.exceptions import (
    DependencyCollectorError,
    DependencyResolverError,
    InvalidArgumentError,
)
from depbridge.registry import BackendRegistry, Capability

logger = logging.getLogger(__name__)


def _require(value: Any, parameter: str) -> None:
    if value is None:
        raise InvalidArgumentError(parameter)


class _BackendSelector:
    """Detect-then-lookup step shared by both facades."""

    capability: Capability
    error_type: type[Exception]

    def __init__(
        self,
        registry: BackendRegistry,
        detector: CapabilityDetector | None = None,
    ) -> None:
        self._registry = registry
        self._detector = detector or CapabilityDetector()

    def _backend(self) -> Any:
        tag = self._detector.detect()
        try:
            backend = self._registry.lookup(self.capability, tag)
        except Exception as exc:
            raise self.error_type(str(exc)) from exc
        logger.debug("Delegating to %s backend %r (generation %s)", self.capability, backend, tag)
        return backend


class DefaultDependencyResolver(_BackendSelector, DependencyResolver):
    """Resolver facade delegating to the backend of the detected generation.

    Args:
        registry: Registry holding a resolver backend per generation tag.
        detector: Generation detector; the default probes for the bundled
            generations.
    """

    capability = Capability.RESOLVER
    error_type = DependencyResolverError

    def resolve_dependencies(
        self,
        building_request: BuildingRequest,
        coordinates: Collection[Dependency],
        managed_dependencies: Collection[Dependency] | None,
        filter: TransformableFilter,
    ) -> list[ArtifactResult]:
        _require(building_request, "buildingRequest")
        _require(coordinates, "coordinates")
        _require(filter, "filter")
        return self._backend().resolve_dependencies(
            building_request, coordinates, managed_dependencies, filter
        )

    def resolve_coordinate(
        self,
        building_request: BuildingRequest,
        coordinate: DependableCoordinate,
        filter: TransformableFilter,
    ) -> list[ArtifactResult]:
        _require(building_request, "buildingRequest")
        _require(coordinate, "coordinate")
        _require(filter, "filter")
        return self._backend().resolve_coordinate(building_request, coordinate, filter)

    def resolve_model(
        self,
        building_request: BuildingRequest,
        model: ProjectModel,
        filter: TransformableFilter,
    ) -> list[ArtifactResult]:
        _require(building_request, "buildingRequest")
        _require(model, "model")
        _require(filter, "filter")
        return self._backend().resolve_model(building_request, model, filter)


class DefaultDependencyCollector(_BackendSelector, DependencyCollector):
    """Collector facade delegating to the backend of the detected generation."""

    capability = Capability.COLLECTOR
    error_type = DependencyCollectorError

    def collect_dependency(
        self, building_request: BuildingRequest, root: Dependency
    ) -> CollectorResult:
        _require(building_request, "buildingRequest")
        _require(root, "root")
        return self._backend().collect_dependency(building_request, root)

    def collect_coordinate(
        self, building_request: BuildingRequest, root: DependableCoordinate
    ) -> CollectorResult:
        _require(building_request, "buildingRequest")
        _require(root, "root")
        return self._backend().collect_coordinate(building_request, root)

    def collect_model(
        self, building_request: BuildingRequest, root: ProjectModel
    ) -> CollectorResult:
        _require(building_request, "buildingRequest")
        _require(root, "root")
        return self._backend().collect_model(building_request, root)

    def collect_dependencies(
        self,
        building_request: BuildingRequest,
        root: Dependency | DependableCoordinate | ProjectModel,
    ) -> CollectorResult:
        _require(building_request, "buildingRequest")
        _require(root, "root")
        if not isinstance(root, (Dependency, DependableCoordinate, ProjectModel)):
            raise InvalidArgumentError(
                "root", f"Unsupported collection root type {type(root).__name__}"
            )
        return self._backend().collect_dependencies(building_request, root)

    def collect_project_graph(self, building_request: BuildingRequest) -> CollectorResult:
        _require(building_request, "buildingRequest")
        _require(building_request.project, "project")
        return self._backend().collect_project_graph(building_request)
