"""Tests for engine-generation detection."""

from __future__ import annotations

import pytest

from depbridge.detection import (
    DEFAULT_FALLBACK,
    CapabilityDetector,
    GenerationProbe,
    GenerationTag,
)


class _RecordingFinder:
    """Marker finder answering from a fixed set and counting probes."""

    def __init__(self, present: set[str]) -> None:
        self.present = present
        self.calls: list[str] = []

    def __call__(self, marker: str) -> bool:
        self.calls.append(marker)
        return marker in self.present


PROBES = (
    GenerationProbe("new", "engine.v2.marker"),
    GenerationProbe("mid", "engine.v1.marker"),
)


class TestCapabilityDetector:
    """Probe ordering, fallback and memoization."""

    def test_marker_present_selects_its_tag(self) -> None:
        finder = _RecordingFinder({"engine.v2.marker"})
        assert CapabilityDetector(PROBES, "old", finder=finder).detect() == "new"

    def test_first_matching_probe_wins(self) -> None:
        finder = _RecordingFinder({"engine.v2.marker", "engine.v1.marker"})
        assert CapabilityDetector(PROBES, "old", finder=finder).detect() == "new"
        assert finder.calls == ["engine.v2.marker"]

    def test_later_probe_matches(self) -> None:
        finder = _RecordingFinder({"engine.v1.marker"})
        assert CapabilityDetector(PROBES, "old", finder=finder).detect() == "mid"

    def test_no_marker_falls_back(self) -> None:
        finder = _RecordingFinder(set())
        assert CapabilityDetector(PROBES, "old", finder=finder).detect() == "old"

    def test_memoized_by_default(self) -> None:
        finder = _RecordingFinder(set())
        detector = CapabilityDetector(PROBES, "old", finder=finder)
        detector.detect()
        detector.detect()
        assert len(finder.calls) == len(PROBES)

    def test_memoize_disabled_reprobes(self) -> None:
        finder = _RecordingFinder(set())
        detector = CapabilityDetector(PROBES, "old", finder=finder, memoize=False)
        assert detector.detect() == "old"
        finder.present.add("engine.v1.marker")
        assert detector.detect() == "mid"

    def test_tags(self) -> None:
        assert CapabilityDetector(PROBES, "old").tags == ("new", "mid", "old")

    def test_duplicate_tags_rejected(self) -> None:
        with pytest.raises(ValueError, match="Duplicate"):
            CapabilityDetector(PROBES + (GenerationProbe("new", "x"),), "old")

    def test_fallback_required(self) -> None:
        with pytest.raises(ValueError, match="fallback"):
            CapabilityDetector(PROBES, "")


class TestDefaultProbes:
    """Detection with the real import machinery."""

    def test_returns_plain_string(self) -> None:
        tag = CapabilityDetector().detect()
        assert type(tag) is str
        assert tag in (GenerationTag.SAT.value, GenerationTag.LEGACY.value)

    def test_missing_marker_module(self) -> None:
        detector = CapabilityDetector(
            [GenerationProbe(GenerationTag.SAT, "depbridge_no_such_pkg.solvers")],
            DEFAULT_FALLBACK,
        )
        assert detector.detect() == "legacy"

    def test_sat_detected_when_pysat_installed(self) -> None:
        pytest.importorskip("pysat.solvers")
        assert CapabilityDetector().detect() == "sat"
