"""Tests for DefaultDependencyResolver: validation, detection, lookup and delegation.

The facade is exercised with recording stubs for the registry and the
backend, so every test can assert exactly what reached each collaborator.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from depbridge.core.coordinates import DependableCoordinate, Dependency, ProjectModel
from depbridge.core.filters import AcceptAllFilter
from depbridge.core.request import BuildingRequest
from depbridge.core.results import ArtifactResult
from depbridge.detection import CapabilityDetector, GenerationProbe
from depbridge.exceptions import (
    BackendLookupError,
    DependencyResolverError,
    InvalidArgumentError,
)
from depbridge.facade import DefaultDependencyResolver
from depbridge.registry import BackendRegistry, Capability


# ---------------------------------------------------------------------------
# Recording stubs
# ---------------------------------------------------------------------------


class _RecordingResolver:
    """Backend stub returning a canned result or raising a canned error."""

    def __init__(self, result: Any = None, error: Exception | None = None) -> None:
        self.result = result if result is not None else []
        self.error = error
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def _call(self, name: str, *args: Any) -> Any:
        self.calls.append((name, args))
        if self.error is not None:
            raise self.error
        return self.result

    def resolve_dependencies(self, *args: Any) -> Any:
        return self._call("resolve_dependencies", *args)

    def resolve_coordinate(self, *args: Any) -> Any:
        return self._call("resolve_coordinate", *args)

    def resolve_model(self, *args: Any) -> Any:
        return self._call("resolve_model", *args)


class _RecordingRegistry(BackendRegistry):
    """Registry that records every lookup key."""

    def __init__(self) -> None:
        super().__init__()
        self.lookups: list[tuple[str, str]] = []

    def lookup(self, capability: str, tag: str) -> Any:
        self.lookups.append((str(capability), str(tag)))
        return super().lookup(capability, tag)


def _detector(new_engine_present: bool) -> CapabilityDetector:
    present = {"engine.v2"} if new_engine_present else set()
    return CapabilityDetector(
        [GenerationProbe("new", "engine.v2")], "old", finder=lambda m: m in present
    )


def _artifact(name: str) -> ArtifactResult:
    coordinate = DependableCoordinate("g", name, "1.0").to_dependency().to_artifact("1.0")
    return ArtifactResult(coordinate, Path(f"/repo/{name}-1.0.jar"))


@pytest.fixture
def request_() -> BuildingRequest:
    return BuildingRequest(local_repository=Path("/tmp/local"))


@pytest.fixture
def backends() -> dict[str, _RecordingResolver]:
    return {"new": _RecordingResolver(), "old": _RecordingResolver()}


@pytest.fixture
def registry(backends: dict[str, _RecordingResolver]) -> _RecordingRegistry:
    registry = _RecordingRegistry()
    for tag, backend in backends.items():
        registry.register(Capability.RESOLVER, tag, backend)
    return registry


COORDINATE = DependableCoordinate("g", "a", "1.0")
MODEL = ProjectModel("g", "app", "1.0")
DEPS = [Dependency("g", "a", "1.0")]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidation:
    """Unset arguments fail before detection or lookup."""

    @pytest.mark.parametrize(
        "call, parameter",
        [
            (lambda r, req: r.resolve_coordinate(None, COORDINATE, AcceptAllFilter()), "buildingRequest"),
            (lambda r, req: r.resolve_coordinate(req, None, AcceptAllFilter()), "coordinate"),
            (lambda r, req: r.resolve_coordinate(req, COORDINATE, None), "filter"),
            (lambda r, req: r.resolve_model(None, MODEL, AcceptAllFilter()), "buildingRequest"),
            (lambda r, req: r.resolve_model(req, None, AcceptAllFilter()), "model"),
            (lambda r, req: r.resolve_model(req, MODEL, None), "filter"),
            (lambda r, req: r.resolve_dependencies(None, DEPS, None, AcceptAllFilter()), "buildingRequest"),
            (lambda r, req: r.resolve_dependencies(req, None, None, AcceptAllFilter()), "coordinates"),
            (lambda r, req: r.resolve_dependencies(req, DEPS, None, None), "filter"),
        ],
    )
    def test_unset_argument_rejected_before_lookup(
        self, call, parameter: str, registry: _RecordingRegistry, request_: BuildingRequest
    ) -> None:
        probed: list[str] = []
        detector = CapabilityDetector(
            [GenerationProbe("new", "engine.v2")], "old", finder=lambda m: probed.append(m) or True
        )
        resolver = DefaultDependencyResolver(registry, detector)
        with pytest.raises(InvalidArgumentError) as exc_info:
            call(resolver, request_)
        assert exc_info.value.parameter == parameter
        assert str(exc_info.value) == f"The parameter {parameter} is not allowed to be None."
        assert registry.lookups == []
        assert probed == []

    def test_invalid_argument_is_value_error(self, registry, request_) -> None:
        resolver = DefaultDependencyResolver(registry, _detector(True))
        with pytest.raises(ValueError):
            resolver.resolve_model(request_, None, AcceptAllFilter())

    def test_empty_coordinates_and_no_managed_are_allowed(
        self, registry, backends, request_
    ) -> None:
        resolver = DefaultDependencyResolver(registry, _detector(True))
        assert resolver.resolve_dependencies(request_, [], None, AcceptAllFilter()) == []
        name, args = backends["new"].calls[0]
        assert name == "resolve_dependencies"
        assert args[1] == []
        assert args[2] is None


# ---------------------------------------------------------------------------
# Detection and lookup
# ---------------------------------------------------------------------------


class TestGenerationSelection:
    """The detected tag decides which backend is called."""

    def test_new_generation(self, registry, backends, request_) -> None:
        resolver = DefaultDependencyResolver(registry, _detector(True))
        resolver.resolve_coordinate(request_, COORDINATE, AcceptAllFilter())
        assert registry.lookups == [("resolver", "new")]
        assert len(backends["new"].calls) == 1
        assert backends["old"].calls == []

    def test_old_generation(self, registry, backends, request_) -> None:
        resolver = DefaultDependencyResolver(registry, _detector(False))
        resolver.resolve_model(request_, MODEL, AcceptAllFilter())
        assert registry.lookups == [("resolver", "old")]
        assert backends["old"].calls[0][0] == "resolve_model"
        assert backends["new"].calls == []

    def test_unavailable_backend_is_wrapped(self, request_) -> None:
        registry = _RecordingRegistry()
        old = _RecordingResolver()
        registry.register(Capability.RESOLVER, "old", old)
        resolver = DefaultDependencyResolver(registry, _detector(True))
        with pytest.raises(DependencyResolverError) as exc_info:
            resolver.resolve_coordinate(request_, COORDINATE, AcceptAllFilter())
        assert isinstance(exc_info.value.__cause__, BackendLookupError)
        assert exc_info.value.__cause__.tag == "new"
        assert old.calls == []

    def test_failing_factory_is_wrapped(self, request_) -> None:
        registry = BackendRegistry()

        def broken() -> Any:
            raise ImportError("no engine")

        registry.register_factory(Capability.RESOLVER, "new", broken)
        resolver = DefaultDependencyResolver(registry, _detector(True))
        with pytest.raises(DependencyResolverError, match="no engine"):
            resolver.resolve_model(request_, MODEL, AcceptAllFilter())


# ---------------------------------------------------------------------------
# Delegation
# ---------------------------------------------------------------------------


class TestDelegation:
    """Arguments and results pass through unchanged."""

    def test_result_identity_and_order(self, request_) -> None:
        results = [_artifact("a"), _artifact("b"), _artifact("c")]
        backend = _RecordingResolver(result=results)
        registry = BackendRegistry.from_mapping(Capability.RESOLVER, {"new": backend})
        resolver = DefaultDependencyResolver(registry, _detector(True))
        returned = resolver.resolve_coordinate(request_, COORDINATE, AcceptAllFilter())
        assert returned is results
        assert [r.artifact.artifact_id for r in returned] == ["a", "b", "c"]

    def test_arguments_passed_verbatim(self, registry, backends, request_) -> None:
        dependency_filter = AcceptAllFilter()
        managed = [Dependency("g", "a", "2.0")]
        resolver = DefaultDependencyResolver(registry, _detector(True))
        resolver.resolve_dependencies(request_, DEPS, managed, dependency_filter)
        name, args = backends["new"].calls[0]
        assert name == "resolve_dependencies"
        assert args[0] is request_
        assert args[1] is DEPS
        assert args[2] is managed
        assert args[3] is dependency_filter

    def test_backend_failure_propagates_unchanged(self, request_) -> None:
        failure = DependencyResolverError("disk full")
        backend = _RecordingResolver(error=failure)
        registry = BackendRegistry.from_mapping(Capability.RESOLVER, {"new": backend})
        resolver = DefaultDependencyResolver(registry, _detector(True))
        with pytest.raises(DependencyResolverError) as exc_info:
            resolver.resolve_model(request_, MODEL, AcceptAllFilter())
        assert exc_info.value is failure
        assert exc_info.value.__cause__ is None

    def test_unexpected_backend_errors_are_not_wrapped(self, request_) -> None:
        backend = _RecordingResolver(error=RuntimeError("boom"))
        registry = BackendRegistry.from_mapping(Capability.RESOLVER, {"new": backend})
        resolver = DefaultDependencyResolver(registry, _detector(True))
        with pytest.raises(RuntimeError, match="boom"):
            resolver.resolve_coordinate(request_, COORDINATE, AcceptAllFilter())

    def test_repeated_calls_are_idempotent(self, request_) -> None:
        results = [_artifact("a")]
        backend = _RecordingResolver(result=results)
        registry = _RecordingRegistry()
        registry.register(Capability.RESOLVER, "new", backend)
        resolver = DefaultDependencyResolver(registry, _detector(True))
        first = resolver.resolve_coordinate(request_, COORDINATE, AcceptAllFilter())
        second = resolver.resolve_coordinate(request_, COORDINATE, AcceptAllFilter())
        assert first == second
        assert registry.lookups == [("resolver", "new"), ("resolver", "new")]
