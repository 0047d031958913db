"""Coordinate data types: the root shapes a collection or resolution starts from.

Three root descriptors are supported:

- ``Dependency`` -- a dependency declaration (coordinate plus scope,
  optional flag and exclusions), as found in a project's dependency list.
- ``DependableCoordinate`` -- a bare ``group:artifact[:type[:classifier]]:version``
  descriptor with no declaration semantics.
- ``ProjectModel`` -- a whole project: its own coordinate, its dependencies,
  and its dependency management section.

``ArtifactCoordinate`` identifies one concrete, downloadable file.
"""

from __future__ import annotations

import fnmatch
from dataclasses import dataclass, field

from depbridge.exceptions import DescriptorError

DEFAULT_TYPE = "jar"
DEFAULT_SCOPE = "compile"

SCOPES: frozenset[str] = frozenset({
    "compile",
    "provided",
    "runtime",
    "test",
    "system",
    "import",
})


def management_key(
    group_id: str, artifact_id: str, type_: str = DEFAULT_TYPE, classifier: str = ""
) -> str:
    """Versionless identity used for mediation and dependency management."""
    key = f"{group_id}:{artifact_id}:{type_}"
    return f"{key}:{classifier}" if classifier else key


# ---------------------------------------------------------------------------
# ArtifactCoordinate
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ArtifactCoordinate:
    """A concrete artifact: one file in a repository.

    Attributes:
        group_id: Group identifier (e.g. "org.example").
        artifact_id: Artifact identifier (e.g. "core").
        version: Resolved version (e.g. "1.2.0").
        extension: File extension (e.g. "jar", "pom", "zip").
        classifier: Optional classifier (e.g. "sources"), empty if none.
    """

    group_id: str
    artifact_id: str
    version: str
    extension: str = DEFAULT_TYPE
    classifier: str = ""

    @property
    def key(self) -> str:
        return management_key(self.group_id, self.artifact_id, self.extension, self.classifier)

    def __str__(self) -> str:
        parts = [self.group_id, self.artifact_id, self.extension]
        if self.classifier:
            parts.append(self.classifier)
        parts.append(self.version)
        return ":".join(parts)


# ---------------------------------------------------------------------------
# Exclusion
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Exclusion:
    """Excludes matching transitive dependencies below a declaration.

    Either identifier may be the wildcard ``*``.
    """

    group_id: str
    artifact_id: str

    def matches(self, group_id: str, artifact_id: str) -> bool:
        return fnmatch.fnmatchcase(group_id, self.group_id) and fnmatch.fnmatchcase(
            artifact_id, self.artifact_id
        )

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"


# ---------------------------------------------------------------------------
# DependableCoordinate
# ---------------------------------------------------------------------------


def _split_coordinate(text: str) -> tuple[str, str, str, str, str]:
    """Split ``g:a:v``, ``g:a:type:v`` or ``g:a:type:classifier:v``."""
    parts = [p.strip() for p in text.strip().split(":")]
    if len(parts) == 3:
        group_id, artifact_id, version = parts
        type_, classifier = DEFAULT_TYPE, ""
    elif len(parts) == 4:
        group_id, artifact_id, type_, version = parts
        classifier = ""
    elif len(parts) == 5:
        group_id, artifact_id, type_, classifier, version = parts
    else:
        raise DescriptorError(
            f"Invalid coordinate {text!r}: expected group:artifact[:type[:classifier]]:version"
        )
    if not group_id or not artifact_id or not version or not type_:
        raise DescriptorError(f"Invalid coordinate {text!r}: empty segment")
    return group_id, artifact_id, type_, classifier, version


@dataclass(frozen=True)
class DependableCoordinate:
    """A generic ``group:artifact[:type[:classifier]]:version`` descriptor."""

    group_id: str
    artifact_id: str
    version: str
    type: str = DEFAULT_TYPE
    classifier: str = ""

    @classmethod
    def parse(cls, text: str) -> DependableCoordinate:
        """Parse a coordinate string.

        Raises:
            DescriptorError: If the string does not have 3 to 5 segments.
        """
        group_id, artifact_id, type_, classifier, version = _split_coordinate(text)
        return cls(group_id, artifact_id, version, type_, classifier)

    def to_dependency(self, scope: str = DEFAULT_SCOPE) -> Dependency:
        return Dependency(
            group_id=self.group_id,
            artifact_id=self.artifact_id,
            version=self.version,
            type=self.type,
            classifier=self.classifier,
            scope=scope,
        )

    def __str__(self) -> str:
        parts = [self.group_id, self.artifact_id, self.type]
        if self.classifier:
            parts.append(self.classifier)
        parts.append(self.version)
        return ":".join(parts)


# ---------------------------------------------------------------------------
# Dependency
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Dependency:
    """A dependency declaration.

    Attributes:
        group_id: Group identifier.
        artifact_id: Artifact identifier.
        version: Version or version constraint (bare versions are exact,
            ranges such as ``[1.0,2.0)`` are allowed). Empty when the version
            is expected to come from dependency management.
        type: Artifact type, used as the file extension.
        classifier: Optional classifier.
        scope: One of ``SCOPES``.
        optional: Optional dependencies are not followed transitively.
        exclusions: Transitive dependencies to prune below this declaration.
    """

    group_id: str
    artifact_id: str
    version: str = ""
    type: str = DEFAULT_TYPE
    classifier: str = ""
    scope: str = DEFAULT_SCOPE
    optional: bool = False
    exclusions: tuple[Exclusion, ...] = ()

    def __post_init__(self) -> None:
        if self.scope not in SCOPES:
            raise DescriptorError(
                f"Invalid scope {self.scope!r} for {self.group_id}:{self.artifact_id}"
            )

    @classmethod
    def parse(cls, text: str) -> Dependency:
        """Parse ``g:a[:type[:classifier]]:v`` with an optional trailing ``:scope``."""
        parts = text.strip().split(":")
        scope = DEFAULT_SCOPE
        if len(parts) >= 4 and parts[-1].strip() in SCOPES:
            scope = parts.pop().strip()
        group_id, artifact_id, type_, classifier, version = _split_coordinate(":".join(parts))
        return cls(group_id, artifact_id, version, type_, classifier, scope)

    @property
    def management_key(self) -> str:
        return management_key(self.group_id, self.artifact_id, self.type, self.classifier)

    def to_artifact(self, version: str) -> ArtifactCoordinate:
        return ArtifactCoordinate(
            self.group_id, self.artifact_id, version, self.type, self.classifier
        )

    def __str__(self) -> str:
        parts = [self.group_id, self.artifact_id, self.type]
        if self.classifier:
            parts.append(self.classifier)
        parts.append(self.version or "?")
        parts.append(self.scope)
        return ":".join(parts)


# ---------------------------------------------------------------------------
# ProjectModel
# ---------------------------------------------------------------------------


@dataclass
class ProjectModel:
    """A project: its own coordinate plus declared and managed dependencies.

    Attributes:
        group_id: Project group identifier.
        artifact_id: Project artifact identifier.
        version: Project version.
        packaging: Packaging type of the project's own artifact.
        dependencies: Declared dependencies, in declaration order.
        dependency_management: Versions imposed on transitive
            dependencies with the same management key.
    """

    group_id: str
    artifact_id: str
    version: str
    packaging: str = DEFAULT_TYPE
    dependencies: list[Dependency] = field(default_factory=list)
    dependency_management: list[Dependency] = field(default_factory=list)

    @property
    def artifact(self) -> ArtifactCoordinate:
        return ArtifactCoordinate(self.group_id, self.artifact_id, self.version, self.packaging)

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.packaging}:{self.version}"
