"""Artifact results returned by resolution."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from depbridge.core.coordinates import ArtifactCoordinate


@dataclass(frozen=True)
class ArtifactResult:
    """A resolved artifact and where it was materialized.

    Attributes:
        artifact: The resolved coordinate.
        path: Location of the file in the local repository.
        repository: Identifier of the repository it came from (``"local"``
            when it was already cached).
    """

    artifact: ArtifactCoordinate
    path: Path
    repository: str = "local"
