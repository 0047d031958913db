"""Keyed backend registry.

The ``BackendRegistry`` maps ``(capability, generation tag)`` pairs to
backend instances. It is assembled once at start-up by the composition layer
(``default_registry()`` for the bundled backends) and injected into the
facades, which only ever call ``lookup()``.

Backends may be registered eagerly as instances or lazily as factories. A
factory runs on the first lookup of its key, under a lock, and its instance
is reused afterwards; a factory failure is reported as a
``BackendLookupError`` so that callers see one failure type for "no usable
backend".
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from depbridge.detection import GenerationTag
from depbridge.exceptions import BackendLookupError

logger = logging.getLogger(__name__)


class Capability(str, Enum):
    """Backend roles a registry can serve."""

    RESOLVER = "resolver"
    COLLECTOR = "collector"

    def __str__(self) -> str:
        return self.value


BackendFactory = Callable[[], Any]


class BackendRegistry:
    """Registry of backends keyed by capability and generation tag.

    Thread safety: lookups may run concurrently. Registration is expected to
    complete before the registry is shared.
    """

    def __init__(self) -> None:
        self._backends: dict[tuple[str, str], Any] = {}
        self._factories: dict[tuple[str, str], BackendFactory] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_mapping(
        cls, capability: str, backends: Mapping[str, Any]
    ) -> BackendRegistry:
        """Build a registry serving one capability from a tag -> backend mapping."""
        registry = cls()
        for tag, backend in backends.items():
            registry.register(capability, tag, backend)
        return registry

    def register(self, capability: str, tag: str, backend: Any) -> None:
        """Register a ready backend instance, replacing any previous entry."""
        key = (str(capability), str(tag))
        self._factories.pop(key, None)
        self._backends[key] = backend

    def register_factory(self, capability: str, tag: str, factory: BackendFactory) -> None:
        """Register a factory invoked on the first lookup of the key."""
        key = (str(capability), str(tag))
        self._backends.pop(key, None)
        self._factories[key] = factory

    def tags(self, capability: str) -> list[str]:
        """Generation tags registered for *capability*, sorted."""
        cap = str(capability)
        keys = set(self._backends) | set(self._factories)
        return sorted(tag for c, tag in keys if c == cap)

    def lookup(self, capability: str, tag: str) -> Any:
        """Return the backend registered for *capability* and *tag*.

        Raises:
            BackendLookupError: If nothing is registered for the key, or the
                registered factory fails.
        """
        key = (str(capability), str(tag))
        backend = self._backends.get(key)
        if backend is not None:
            return backend

        with self._lock:
            backend = self._backends.get(key)
            if backend is not None:
                return backend
            factory = self._factories.get(key)
            if factory is None:
                raise BackendLookupError(
                    f"No {key[0]} backend registered for generation {key[1]!r} "
                    f"(available: {', '.join(self.tags(key[0])) or 'none'})",
                    capability=key[0],
                    tag=key[1],
                )
            try:
                backend = factory()
            except Exception as exc:
                raise BackendLookupError(
                    f"Unable to create {key[0]} backend for generation {key[1]!r}: {exc}",
                    capability=key[0],
                    tag=key[1],
                ) from exc
            logger.debug("Created %s backend %r for generation %s", key[0], backend, key[1])
            self._backends[key] = backend
            del self._factories[key]
            return backend


def _legacy_backend() -> Any:
    from depbridge.backends.legacy import LegacyBackend

    return LegacyBackend()


def _sat_backend() -> Any:
    # Imports python-sat; fails when the optional dependency is missing.
    from depbridge.backends.sat import SatBackend

    return SatBackend()


def default_registry() -> BackendRegistry:
    """Create a registry holding both bundled backend generations.

    Each bundled backend serves both capabilities, so it is registered under
    ``Capability.RESOLVER`` and ``Capability.COLLECTOR``. Backends are
    created lazily; the SAT backend is only instantiated if its generation is
    actually detected.
    """
    registry = BackendRegistry()
    for capability in Capability:
        registry.register_factory(capability, GenerationTag.LEGACY, _legacy_backend)
        registry.register_factory(capability, GenerationTag.SAT, _sat_backend)
    return registry
