"""YAML project descriptors.

Every artifact in a repository is described by a YAML document giving its
coordinate, its dependencies and its dependency management section:

.. code-block:: yaml

    groupId: org.example
    artifactId: app
    version: 1.0.0
    packaging: jar
    dependencies:
      - org.example:util:2.1.0
      - groupId: org.example
        artifactId: logging
        version: "[1.0,2.0)"
        scope: runtime
        optional: false
        exclusions:
          - groupId: org.legacy
            artifactId: "*"
    dependencyManagement:
      - org.example:util:2.2.0

Dependencies are either mappings or short ``g:a[:type[:classifier]]:v[:scope]``
strings. Malformed documents raise ``DescriptorError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from depbridge.core.coordinates import (
    DEFAULT_SCOPE,
    DEFAULT_TYPE,
    Dependency,
    Exclusion,
    ProjectModel,
)
from depbridge.exceptions import DescriptorError


def _require_str(data: dict[str, Any], key: str, source: str) -> str:
    value = data.get(key)
    if value is None or str(value).strip() == "":
        raise DescriptorError(f"{source}: missing required field {key!r}")
    return str(value).strip()


def _version_field(data: dict[str, Any], source: str, *, required: bool) -> str:
    """Read ``version`` as text.

    YAML turns unquoted ``1.10`` into the float ``1.1`` and ``010`` into the
    integer ``8``, so only string scalars are accepted.
    """
    value = data.get("version")
    if value is not None and not isinstance(value, str):
        raise DescriptorError(
            f"{source}: version {value!r} must be a quoted string (e.g. version: \"1.10\")"
        )
    version = (value or "").strip()
    if required and not version:
        raise DescriptorError(f"{source}: missing required field 'version'")
    return version


def _parse_exclusion(entry: Any, source: str) -> Exclusion:
    if isinstance(entry, str):
        parts = entry.split(":")
        if len(parts) != 2:
            raise DescriptorError(f"{source}: invalid exclusion {entry!r}")
        return Exclusion(parts[0].strip(), parts[1].strip())
    if isinstance(entry, dict):
        return Exclusion(
            _require_str(entry, "groupId", source),
            str(entry.get("artifactId", "*")).strip(),
        )
    raise DescriptorError(f"{source}: invalid exclusion {entry!r}")


def _parse_dependency(entry: Any, source: str) -> Dependency:
    if isinstance(entry, str):
        return Dependency.parse(entry)
    if not isinstance(entry, dict):
        raise DescriptorError(f"{source}: invalid dependency entry {entry!r}")
    return Dependency(
        group_id=_require_str(entry, "groupId", source),
        artifact_id=_require_str(entry, "artifactId", source),
        version=_version_field(entry, source, required=False),
        type=str(entry.get("type") or DEFAULT_TYPE).strip(),
        classifier=str(entry.get("classifier") or "").strip(),
        scope=str(entry.get("scope") or DEFAULT_SCOPE).strip(),
        optional=bool(entry.get("optional", False)),
        exclusions=tuple(
            _parse_exclusion(e, source) for e in entry.get("exclusions") or []
        ),
    )


def _parse_dependency_list(value: Any, field_name: str, source: str) -> list[Dependency]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise DescriptorError(f"{source}: {field_name!r} must be a list")
    return [_parse_dependency(entry, source) for entry in value]


def model_from_dict(data: Any, source: str = "<descriptor>") -> ProjectModel:
    """Build a ``ProjectModel`` from a parsed YAML mapping.

    Raises:
        DescriptorError: If required fields are missing or malformed.
    """
    if not isinstance(data, dict):
        raise DescriptorError(f"{source}: descriptor must be a mapping")
    return ProjectModel(
        group_id=_require_str(data, "groupId", source),
        artifact_id=_require_str(data, "artifactId", source),
        version=_version_field(data, source, required=True),
        packaging=str(data.get("packaging") or DEFAULT_TYPE).strip(),
        dependencies=_parse_dependency_list(data.get("dependencies"), "dependencies", source),
        dependency_management=_parse_dependency_list(
            data.get("dependencyManagement"), "dependencyManagement", source
        ),
    )


def load_model(text: str, source: str = "<descriptor>") -> ProjectModel:
    """Parse a YAML descriptor document."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise DescriptorError(f"{source}: invalid YAML: {exc}") from exc
    return model_from_dict(data, source)


def load_model_file(path: Path) -> ProjectModel:
    """Read and parse a YAML descriptor file."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DescriptorError(f"Cannot read descriptor {path}: {exc}") from exc
    return load_model(text, str(path))


def _dependency_to_dict(dep: Dependency) -> dict[str, Any]:
    data: dict[str, Any] = {"groupId": dep.group_id, "artifactId": dep.artifact_id}
    if dep.version:
        data["version"] = dep.version
    if dep.type != DEFAULT_TYPE:
        data["type"] = dep.type
    if dep.classifier:
        data["classifier"] = dep.classifier
    if dep.scope != DEFAULT_SCOPE:
        data["scope"] = dep.scope
    if dep.optional:
        data["optional"] = True
    if dep.exclusions:
        data["exclusions"] = [
            {"groupId": e.group_id, "artifactId": e.artifact_id} for e in dep.exclusions
        ]
    return data


def model_to_dict(model: ProjectModel) -> dict[str, Any]:
    data: dict[str, Any] = {
        "groupId": model.group_id,
        "artifactId": model.artifact_id,
        "version": model.version,
        "packaging": model.packaging,
    }
    if model.dependencies:
        data["dependencies"] = [_dependency_to_dict(d) for d in model.dependencies]
    if model.dependency_management:
        data["dependencyManagement"] = [
            _dependency_to_dict(d) for d in model.dependency_management
        ]
    return data


def dump_model(model: ProjectModel) -> str:
    """Serialize a ``ProjectModel`` to a YAML descriptor document."""
    return yaml.safe_dump(model_to_dict(model), sort_keys=False)
