"""Repository client: reads descriptors and downloads artifacts.

The local repository is consulted first for everything. Anything missing is
looked up in each remote repository in order. Remote repositories are either
directories (plain paths or ``file://`` URLs) or HTTP servers exposing the
same layout, fetched with ``httpx``. Whatever is fetched remotely is stored
in the local repository, so a later offline run finds it.

Remote failures (timeouts, HTTP errors) are logged and the next repository is
tried. Only when no repository can provide an item does the client raise
``ArtifactNotFoundError``.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import httpx
import yaml

from depbridge.core.coordinates import ArtifactCoordinate, ProjectModel
from depbridge.core.request import BuildingRequest, RemoteRepository
from depbridge.core.results import ArtifactResult
from depbridge.core.versions import is_version, version_key
from depbridge.exceptions import ArtifactNotFoundError, DescriptorError
from depbridge.repository import layout
from depbridge.repository.descriptors import load_model

logger = logging.getLogger(__name__)

# Timeout for all remote repository HTTP requests (seconds).
DEFAULT_TIMEOUT: float = 30.0

# User-Agent sent with every request.
USER_AGENT: str = "depbridge/0.1"

LOCAL_REPOSITORY_ID = "local"


class RepositoryClient:
    """Read-through access to the repositories of a building request.

    Args:
        building_request: Supplies the local repository, the remotes and the
            offline flag.
        http_client: Optional ``httpx.Client`` to use for HTTP remotes;
            the client does not close a client it did not create.
    """

    def __init__(
        self,
        building_request: BuildingRequest,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._local = Path(building_request.local_repository)
        self._remotes = [] if building_request.offline else list(building_request.remote_repositories)
        self._http = http_client
        self._owns_http = False
        self._descriptors: dict[tuple[str, str, str], ProjectModel] = {}
        self._versions: dict[tuple[str, str], list[str]] = {}

    def __enter__(self) -> RepositoryClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._http is not None and self._owns_http:
            self._http.close()
            self._http = None
            self._owns_http = False

    @property
    def repository_ids(self) -> list[str]:
        return [LOCAL_REPOSITORY_ID] + [r.id for r in self._remotes]

    # ------------------------------------------------------------------
    # Descriptors and versions
    # ------------------------------------------------------------------

    def read_descriptor(self, group_id: str, artifact_id: str, version: str) -> ProjectModel:
        """Return the descriptor of ``group_id:artifact_id:version``.

        Raises:
            ArtifactNotFoundError: If no repository has the descriptor.
            DescriptorError: If the descriptor is malformed.
        """
        key = (group_id, artifact_id, version)
        cached = self._descriptors.get(key)
        if cached is not None:
            return cached

        rel = layout.descriptor_path(group_id, artifact_id, version)
        local_file = self._local / rel
        if local_file.is_file():
            model = _checked_model(local_file.read_text(encoding="utf-8"), rel, key)
        else:
            for remote in self._remotes:
                text = self._read_remote_text(remote, rel)
                if text is not None:
                    break
            else:
                raise ArtifactNotFoundError(
                    f"{group_id}:{artifact_id}:{version} (descriptor)", self.repository_ids
                )
            # Only descriptors that parse and match their coordinate are cached.
            model = _checked_model(text, rel, key)
            _store(local_file, text.encode("utf-8"))
        self._descriptors[key] = model
        return model

    def list_versions(self, group_id: str, artifact_id: str) -> list[str]:
        """Return every known version of an artifact, ascending.

        Versions are merged from all repositories. An artifact known to no
        repository yields an empty list.
        """
        key = (group_id, artifact_id)
        cached = self._versions.get(key)
        if cached is not None:
            return list(cached)

        found: set[str] = set(self._local_versions(self._local, group_id, artifact_id))
        rel = layout.metadata_path(group_id, artifact_id)
        for remote in self._remotes:
            if remote.is_http:
                text = self._read_remote_text(remote, rel)
                if text is not None:
                    found.update(self._parse_metadata(text, f"{remote.id}:{rel}"))
            else:
                found.update(self._local_versions(remote.path, group_id, artifact_id))

        versions = sorted((v for v in found if is_version(v)), key=version_key)
        self._versions[key] = versions
        return list(versions)

    def _local_versions(self, root: Path, group_id: str, artifact_id: str) -> list[str]:
        metadata = root / layout.metadata_path(group_id, artifact_id)
        if metadata.is_file():
            return self._parse_metadata(metadata.read_text(encoding="utf-8"), str(metadata))
        base = root / layout.artifact_dir(group_id, artifact_id)
        if not base.is_dir():
            return []
        return [
            child.name
            for child in base.iterdir()
            if child.is_dir()
            and (child / f"{artifact_id}-{child.name}.{layout.DESCRIPTOR_EXTENSION}").is_file()
        ]

    @staticmethod
    def _parse_metadata(text: str, source: str) -> list[str]:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise DescriptorError(f"{source}: invalid YAML: {exc}") from exc
        versions = data.get("versions") if isinstance(data, dict) else None
        if not isinstance(versions, list):
            raise DescriptorError(f"{source}: 'versions' must be a list")
        if not all(isinstance(v, str) for v in versions):
            raise DescriptorError(f"{source}: 'versions' entries must be quoted strings")
        return versions

    # ------------------------------------------------------------------
    # Artifacts
    # ------------------------------------------------------------------

    def fetch(self, artifact: ArtifactCoordinate) -> ArtifactResult:
        """Materialize *artifact* in the local repository.

        Raises:
            ArtifactNotFoundError: If no repository has the file.
        """
        rel = layout.artifact_path(artifact)
        target = self._local / rel
        if target.is_file():
            return ArtifactResult(artifact, target, LOCAL_REPOSITORY_ID)

        for remote in self._remotes:
            if self._download(remote, rel, target):
                logger.info("Downloaded %s from %s", artifact, remote.id)
                return ArtifactResult(artifact, target, remote.id)
        raise ArtifactNotFoundError(str(artifact), self.repository_ids)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _client(self) -> httpx.Client:
        if self._http is None:
            self._http = httpx.Client(
                timeout=DEFAULT_TIMEOUT,
                headers={"User-Agent": USER_AGENT},
                follow_redirects=True,
            )
            self._owns_http = True
        return self._http

    def _url(self, remote: RemoteRepository, rel: str) -> str:
        return f"{remote.url.rstrip('/')}/{rel}"

    def _get(self, remote: RemoteRepository, rel: str) -> httpx.Response | None:
        url = self._url(remote, rel)
        try:
            resp = self._client().get(url)
        except httpx.TimeoutException:
            logger.warning("Timeout fetching %s", url)
            return None
        except httpx.RequestError as exc:
            logger.warning("Request error for %s: %s", url, exc)
            return None
        if resp.status_code == 404:
            return None
        if resp.is_error:
            logger.warning("HTTP %d from %s", resp.status_code, url)
            return None
        return resp

    def _read_remote_text(self, remote: RemoteRepository, rel: str) -> str | None:
        if remote.is_http:
            resp = self._get(remote, rel)
            return resp.text if resp is not None else None
        source = remote.path / rel
        if source.is_file():
            return source.read_text(encoding="utf-8")
        return None

    def _download(self, remote: RemoteRepository, rel: str, target: Path) -> bool:
        if remote.is_http:
            resp = self._get(remote, rel)
            if resp is None:
                return False
            _store(target, resp.content)
            return True
        source = remote.path / rel
        if not source.is_file():
            return False
        _store(target, source.read_bytes())
        return True


def _checked_model(text: str, source: str, key: tuple[str, str, str]) -> ProjectModel:
    """Parse a descriptor and make sure it describes *key*."""
    model = load_model(text, source)
    if (model.group_id, model.artifact_id, model.version) != key:
        raise DescriptorError(
            f"{source}: descriptor declares {model} instead of {':'.join(key)}"
        )
    return model


def _store(target: Path, data: bytes) -> None:
    """Write *data* to *target* through a temporary file in the same directory.

    The target only appears once it is complete.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}-", suffix=".part")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, target)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
