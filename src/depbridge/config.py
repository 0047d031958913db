"""User settings: repository locations and the offline flag.

Settings are read from a YAML file::

    localRepository: ~/.depbridge/repository
    offline: false
    repositories:
      - id: central
        url: https://repo.example.org/releases
      - id: team
        url: file:///srv/artifacts

and then overridden by the ``DEPBRIDGE_LOCAL_REPOSITORY`` and
``DEPBRIDGE_OFFLINE`` environment variables. Without a file, the defaults
below apply.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from depbridge.core.coordinates import ProjectModel
from depbridge.core.request import BuildingRequest, RemoteRepository
from depbridge.exceptions import ConfigurationError

CONFIG_DIR_NAME = ".depbridge"
SETTINGS_FILE_NAME = "settings.yaml"
DEFAULT_LOCAL_REPOSITORY_NAME = "repository"

ENV_LOCAL_REPOSITORY = "DEPBRIDGE_LOCAL_REPOSITORY"
ENV_OFFLINE = "DEPBRIDGE_OFFLINE"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


def default_settings_path(home: Path | None = None) -> Path:
    return (home if home is not None else Path.home()) / CONFIG_DIR_NAME / SETTINGS_FILE_NAME


def default_local_repository(home: Path | None = None) -> Path:
    return (
        (home if home is not None else Path.home())
        / CONFIG_DIR_NAME
        / DEFAULT_LOCAL_REPOSITORY_NAME
    )


@dataclass
class Settings:
    """Resolved user settings.

    Attributes:
        local_repository: Local repository directory.
        remote_repositories: Remote repositories, in search order.
        offline: Whether remotes are disabled.
    """

    local_repository: Path = field(default_factory=default_local_repository)
    remote_repositories: list[RemoteRepository] = field(default_factory=list)
    offline: bool = False

    def to_building_request(self, project: ProjectModel | None = None) -> BuildingRequest:
        """Create a building request carrying these settings."""
        return BuildingRequest(
            local_repository=self.local_repository,
            remote_repositories=list(self.remote_repositories),
            offline=self.offline,
            project=project,
        )


def _parse_bool(value: Any, source: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigurationError(f"{source}: expected a boolean, got {value!r}")


def _parse_repositories(value: Any, source: str) -> list[RemoteRepository]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigurationError(f"{source}: 'repositories' must be a list")
    repositories: list[RemoteRepository] = []
    seen: set[str] = set()
    for index, entry in enumerate(value):
        if not isinstance(entry, dict) or not entry.get("id") or not entry.get("url"):
            raise ConfigurationError(
                f"{source}: repositories[{index}] needs both 'id' and 'url'"
            )
        repo_id = str(entry["id"])
        if repo_id in seen:
            raise ConfigurationError(f"{source}: duplicate repository id {repo_id!r}")
        seen.add(repo_id)
        repositories.append(RemoteRepository(repo_id, str(entry["url"])))
    return repositories


def _read_file(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read settings file {path}: {exc}") from exc
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"{path}: invalid YAML: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: settings must be a mapping")
    return data


def load_settings(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from *path* and the environment.

    Args:
        path: Settings file. When omitted, ``~/.depbridge/settings.yaml`` is
            read if it exists; an explicit path must exist.
        environ: Environment to read overrides from (default ``os.environ``).

    Raises:
        ConfigurationError: If the file is unreadable or has invalid values.
    """
    env = os.environ if environ is None else environ
    settings = Settings()

    if path is not None:
        data = _read_file(Path(path))
        source = str(path)
    else:
        candidate = default_settings_path()
        data = _read_file(candidate) if candidate.is_file() else {}
        source = str(candidate)

    if data.get("localRepository"):
        settings.local_repository = Path(str(data["localRepository"])).expanduser()
    if "offline" in data:
        settings.offline = _parse_bool(data["offline"], f"{source}: offline")
    settings.remote_repositories = _parse_repositories(data.get("repositories"), source)

    if env.get(ENV_LOCAL_REPOSITORY):
        settings.local_repository = Path(env[ENV_LOCAL_REPOSITORY]).expanduser()
    if ENV_OFFLINE in env:
        settings.offline = _parse_bool(env[ENV_OFFLINE], ENV_OFFLINE)

    return settings
