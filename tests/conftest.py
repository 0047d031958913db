"""Shared fixtures for depbridge tests.

``RepoBuilder`` publishes descriptors and artifact files into a directory
laid out like a repository, so backends and the repository client can be
exercised against real files.
"""

from __future__ import annotations

import pathlib
from collections.abc import Iterable

import pytest
import yaml

from depbridge.core.coordinates import Dependency, ProjectModel
from depbridge.core.request import BuildingRequest, RemoteRepository
from depbridge.repository import dump_model
from depbridge.repository import layout


def _as_dependency(dep: Dependency | str) -> Dependency:
    return dep if isinstance(dep, Dependency) else Dependency.parse(dep)


class RepoBuilder:
    """Writes artifacts into a repository directory."""

    def __init__(self, root: pathlib.Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def publish(
        self,
        coordinate: str,
        dependencies: Iterable[Dependency | str] = (),
        management: Iterable[Dependency | str] = (),
        packaging: str = "jar",
        content: bytes | None = None,
    ) -> ProjectModel:
        """Publish ``group:artifact:version`` with a descriptor and a file."""
        group_id, artifact_id, version = coordinate.split(":")
        model = ProjectModel(
            group_id,
            artifact_id,
            version,
            packaging,
            [_as_dependency(d) for d in dependencies],
            [_as_dependency(d) for d in management],
        )
        descriptor = self.root / layout.descriptor_path(group_id, artifact_id, version)
        descriptor.parent.mkdir(parents=True, exist_ok=True)
        descriptor.write_text(dump_model(model), encoding="utf-8")
        artifact = self.root / layout.artifact_path(model.artifact)
        artifact.write_bytes(content if content is not None else coordinate.encode())
        return model

    def write_metadata(self, group_id: str, artifact_id: str, versions: list[str]) -> None:
        path = self.root / layout.metadata_path(group_id, artifact_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump({"versions": versions}), encoding="utf-8")


@pytest.fixture
def remote_repo(tmp_path: pathlib.Path) -> RepoBuilder:
    """An empty file-based remote repository."""
    return RepoBuilder(tmp_path / "remote")


@pytest.fixture
def local_repo_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """An empty local repository directory."""
    path = tmp_path / "local"
    path.mkdir()
    return path


@pytest.fixture
def building_request(local_repo_dir: pathlib.Path, remote_repo: RepoBuilder) -> BuildingRequest:
    """A request reading from ``remote_repo`` through ``local_repo_dir``."""
    return BuildingRequest(
        local_repository=local_repo_dir,
        remote_repositories=[RemoteRepository("central", str(remote_repo.root))],
    )
