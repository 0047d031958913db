"""depbridge exception hierarchy.

All public exceptions inherit from DepBridgeError, giving callers a single
base class to catch when they want to handle any depbridge-specific failure
without swallowing unrelated errors.
"""

from __future__ import annotations


class DepBridgeError(Exception):
    """Base exception for all depbridge errors."""


class InvalidArgumentError(DepBridgeError, ValueError):
    """Raised when a required argument of a facade operation is unset.

    Raised synchronously, before any backend is detected or looked up.

    Attributes:
        parameter: Name of the offending parameter (e.g. ``"buildingRequest"``).
    """

    def __init__(self, parameter: str, message: str | None = None) -> None:
        super().__init__(message or f"The parameter {parameter} is not allowed to be None.")
        self.parameter = parameter


class BackendLookupError(DepBridgeError, LookupError):
    """Raised by the backend registry when no usable backend is registered.

    Covers a missing (capability, tag) entry as well as a backend factory
    that fails while constructing the backend.

    Attributes:
        capability: The capability key that was looked up.
        tag: The generation tag that was looked up.
    """

    def __init__(self, message: str, capability: str, tag: str) -> None:
        super().__init__(message)
        self.capability = capability
        self.tag = tag


class DependencyResolverError(DepBridgeError):
    """Raised when dependencies cannot be resolved.

    Covers an unavailable backend for the detected engine generation and
    failures reported by the backend itself (missing artifacts, unsolvable
    version constraints, unreadable descriptors).
    """


class DependencyCollectorError(DepBridgeError):
    """Raised when a dependency graph cannot be collected."""


class ArtifactNotFoundError(DepBridgeError):
    """Raised when an artifact or descriptor is absent from every repository.

    Attributes:
        coordinate: String form of the missing coordinate.
        repositories: Identifiers of the repositories that were tried.
    """

    def __init__(self, coordinate: str, repositories: list[str]) -> None:
        tried = ", ".join(repositories) if repositories else "none"
        super().__init__(f"Could not find {coordinate} (repositories tried: {tried})")
        self.coordinate = coordinate
        self.repositories = list(repositories)


class VersionConflictError(DepBridgeError):
    """Raised when no consistent version selection exists.

    Attributes:
        conflicts: Human-readable descriptions of why selection failed.
    """

    def __init__(self, conflicts: list[str]) -> None:
        super().__init__("; ".join(conflicts))
        self.conflicts = list(conflicts)


class DescriptorError(DepBridgeError):
    """Raised when a project descriptor or coordinate string is malformed."""


class ConfigurationError(DepBridgeError):
    """Raised when a settings file or environment override is invalid."""
