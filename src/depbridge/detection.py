"""Detection of the resolution-engine generation present in this process.

Each backend generation understands one engine API. The engines cannot be
told apart statically, so detection probes for a marker that only one
generation provides: a module importable only when that generation's engine
is installed. Probes are tried newest first; the first marker found decides
the generation. When no marker is found the fallback (oldest) generation is
assumed without further verification.

This module is the only place that inspects the runtime environment.
"""

from __future__ import annotations

import importlib.util
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class GenerationTag(str, Enum):
    """Generation tags of the bundled backends."""

    SAT = "sat"
    LEGACY = "legacy"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class GenerationProbe:
    """Maps the presence of a marker module to a generation tag.

    Attributes:
        tag: Generation selected when the marker is present.
        marker: Dotted module name unique to that generation's engine.
    """

    tag: str
    marker: str


DEFAULT_PROBES: tuple[GenerationProbe, ...] = (
    GenerationProbe(GenerationTag.SAT, "pysat.solvers"),
)

DEFAULT_FALLBACK: str = GenerationTag.LEGACY


def _module_available(name: str) -> bool:
    """Return True if *name* can be imported, without importing it."""
    try:
        return importlib.util.find_spec(name) is not None
    except (ImportError, ValueError):
        # find_spec imports parent packages; a missing parent raises.
        return False


class CapabilityDetector:
    """Selects the active generation tag.

    Args:
        probes: Ordered probes, newest generation first.
        fallback: Tag returned when no probe marker is found.
        finder: Predicate telling whether a marker is present. Defaults to
            an ``importlib`` module lookup.
        memoize: Cache the detected tag for the lifetime of this detector.
            The loaded engine cannot change after start-up, so caching only
            saves repeated probing.

    Raises:
        ValueError: If two probes share a tag or no fallback is given.
    """

    def __init__(
        self,
        probes: Sequence[GenerationProbe] = DEFAULT_PROBES,
        fallback: str = DEFAULT_FALLBACK,
        *,
        finder: Callable[[str], bool] | None = None,
        memoize: bool = True,
    ) -> None:
        tags = [str(p.tag) for p in probes]
        if len(tags) != len(set(tags)):
            raise ValueError(f"Duplicate generation tags in probes: {tags}")
        if not fallback:
            raise ValueError("A fallback generation tag is required")
        self._probes = tuple(probes)
        self._fallback = str(fallback)
        self._finder = finder or _module_available
        self._memoize = memoize
        self._detected: str | None = None

    @property
    def tags(self) -> tuple[str, ...]:
        """Every tag this detector can return, probes first."""
        return tuple(str(p.tag) for p in self._probes) + (self._fallback,)

    def detect(self) -> str:
        """Return the tag of the active generation. Never fails."""
        if self._memoize and self._detected is not None:
            return self._detected
        tag = self._probe()
        if self._memoize:
            self._detected = tag
        return tag

    def _probe(self) -> str:
        for probe in self._probes:
            if self._finder(probe.marker):
                logger.debug("Found %s; using generation %s", probe.marker, probe.tag)
                return str(probe.tag)
        logger.debug("No generation marker found; assuming %s", self._fallback)
        return self._fallback
