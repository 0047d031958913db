"""Tests for DefaultDependencyCollector."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from depbridge.core.coordinates import DependableCoordinate, Dependency, ProjectModel
from depbridge.core.graph import CollectorResult, DependencyNode
from depbridge.core.request import BuildingRequest
from depbridge.detection import CapabilityDetector, GenerationProbe
from depbridge.exceptions import (
    BackendLookupError,
    DependencyCollectorError,
    InvalidArgumentError,
)
from depbridge.facade import DefaultDependencyCollector
from depbridge.registry import BackendRegistry, Capability


class _RecordingCollector:
    """Backend stub recording which collect operation was called."""

    def __init__(self, result: CollectorResult | None = None, error: Exception | None = None):
        self.result = result or CollectorResult(DependencyNode(None))
        self.error = error
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def _call(self, name: str, *args: Any) -> CollectorResult:
        self.calls.append((name, args))
        if self.error is not None:
            raise self.error
        return self.result

    def collect_dependency(self, *args: Any) -> CollectorResult:
        return self._call("collect_dependency", *args)

    def collect_coordinate(self, *args: Any) -> CollectorResult:
        return self._call("collect_coordinate", *args)

    def collect_model(self, *args: Any) -> CollectorResult:
        return self._call("collect_model", *args)

    def collect_dependencies(self, *args: Any) -> CollectorResult:
        return self._call("collect_dependencies", *args)

    def collect_project_graph(self, *args: Any) -> CollectorResult:
        return self._call("collect_project_graph", *args)


def _collector(backends: dict[str, Any], new_engine_present: bool = True) -> DefaultDependencyCollector:
    registry = BackendRegistry.from_mapping(Capability.COLLECTOR, backends)
    detector = CapabilityDetector(
        [GenerationProbe("new", "engine.v2")],
        "old",
        finder=lambda m: new_engine_present,
    )
    return DefaultDependencyCollector(registry, detector)


@pytest.fixture
def request_() -> BuildingRequest:
    return BuildingRequest(local_repository=Path("/tmp/local"))


DEPENDENCY = Dependency("g", "a", "1.0")
COORDINATE = DependableCoordinate("g", "a", "1.0")
MODEL = ProjectModel("g", "app", "1.0")


class TestValidation:
    """Unset arguments are rejected before lookup."""

    @pytest.mark.parametrize("method", ["collect_dependency", "collect_coordinate", "collect_model"])
    def test_missing_root(self, method: str, request_) -> None:
        backend = _RecordingCollector()
        with pytest.raises(InvalidArgumentError) as exc_info:
            getattr(_collector({"new": backend}), method)(request_, None)
        assert exc_info.value.parameter == "root"
        assert backend.calls == []

    @pytest.mark.parametrize(
        "method, root",
        [
            ("collect_dependency", DEPENDENCY),
            ("collect_coordinate", COORDINATE),
            ("collect_model", MODEL),
            ("collect_dependencies", MODEL),
        ],
    )
    def test_missing_building_request(self, method: str, root: Any) -> None:
        with pytest.raises(InvalidArgumentError, match="buildingRequest"):
            getattr(_collector({}), method)(None, root)

    def test_collect_dependencies_rejects_unknown_root_type(self, request_) -> None:
        backend = _RecordingCollector()
        with pytest.raises(InvalidArgumentError, match="Unsupported collection root type str"):
            _collector({"new": backend}).collect_dependencies(request_, "g:a:1.0")
        assert backend.calls == []

    def test_project_graph_requires_project(self, request_) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            _collector({}).collect_project_graph(request_)
        assert exc_info.value.parameter == "project"

    def test_project_graph_requires_request(self) -> None:
        with pytest.raises(InvalidArgumentError, match="buildingRequest"):
            _collector({}).collect_project_graph(None)


class TestDelegation:
    """Each operation reaches the same operation on the selected backend."""

    @pytest.mark.parametrize(
        "method, root",
        [
            ("collect_dependency", DEPENDENCY),
            ("collect_coordinate", COORDINATE),
            ("collect_model", MODEL),
            ("collect_dependencies", COORDINATE),
        ],
    )
    def test_same_operation_on_backend(self, method: str, root: Any, request_) -> None:
        backend = _RecordingCollector()
        result = getattr(_collector({"new": backend}), method)(request_, root)
        assert result is backend.result
        assert backend.calls == [(method, (request_, root))]

    def test_project_graph(self, request_) -> None:
        backend = _RecordingCollector()
        bound = request_.with_project(MODEL)
        _collector({"new": backend}).collect_project_graph(bound)
        assert backend.calls == [("collect_project_graph", (bound,))]

    def test_old_generation_selected(self, request_) -> None:
        new, old = _RecordingCollector(), _RecordingCollector()
        _collector({"new": new, "old": old}, new_engine_present=False).collect_model(request_, MODEL)
        assert new.calls == []
        assert old.calls[0][0] == "collect_model"

    def test_unavailable_backend(self, request_) -> None:
        old = _RecordingCollector()
        with pytest.raises(DependencyCollectorError) as exc_info:
            _collector({"old": old}).collect_coordinate(request_, COORDINATE)
        assert isinstance(exc_info.value.__cause__, BackendLookupError)
        assert old.calls == []

    def test_backend_failure_propagates_unchanged(self, request_) -> None:
        failure = DependencyCollectorError("disk full")
        backend = _RecordingCollector(error=failure)
        with pytest.raises(DependencyCollectorError) as exc_info:
            _collector({"new": backend}).collect_dependency(request_, DEPENDENCY)
        assert exc_info.value is failure
