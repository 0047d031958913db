"""Building request: the ambient configuration every backend needs.

The facade treats a ``BuildingRequest`` as an opaque, caller-owned handle.
It is passed through to backends unmodified; backends read the repository
locations and the offline flag from it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path

from depbridge.core.coordinates import ProjectModel


@dataclass(frozen=True)
class RemoteRepository:
    """A remote artifact repository.

    Attributes:
        id: Short identifier used in logs and error messages.
        url: ``http(s)://`` URL, ``file://`` URL, or plain directory path.
    """

    id: str
    url: str

    @property
    def is_http(self) -> bool:
        return self.url.startswith(("http://", "https://"))

    @property
    def path(self) -> Path:
        """Filesystem root of a file-based repository."""
        if self.url.startswith("file://"):
            return Path(self.url[len("file://"):])
        return Path(self.url)


@dataclass
class BuildingRequest:
    """Configuration for one collection or resolution.

    Attributes:
        local_repository: Directory that caches descriptors and downloaded
            artifacts; always consulted first.
        remote_repositories: Repositories searched, in order, for anything
            missing locally.
        offline: When True, remote repositories are never contacted.
        project: The current project, used by project-graph collection.
        user_properties: Free-form properties available to backends.
    """

    local_repository: Path
    remote_repositories: list[RemoteRepository] = field(default_factory=list)
    offline: bool = False
    project: ProjectModel | None = None
    user_properties: dict[str, str] = field(default_factory=dict)

    def with_project(self, project: ProjectModel | None) -> BuildingRequest:
        """Return a copy of this request bound to *project*."""
        return replace(self, project=project)
