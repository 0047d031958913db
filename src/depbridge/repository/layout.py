"""Repository layout: where descriptors, version lists and files live.

Paths are relative to a repository root and always use ``/``::

    org/example/core/metadata.yaml                    versions of org.example:core
    org/example/core/1.2.0/core-1.2.0.yaml            descriptor
    org/example/core/1.2.0/core-1.2.0.jar             artifact
    org/example/core/1.2.0/core-1.2.0-sources.jar     classified artifact
"""

from __future__ import annotations

from depbridge.core.coordinates import ArtifactCoordinate

METADATA_FILE = "metadata.yaml"
DESCRIPTOR_EXTENSION = "yaml"


def artifact_dir(group_id: str, artifact_id: str) -> str:
    return "/".join(group_id.split(".") + [artifact_id])


def metadata_path(group_id: str, artifact_id: str) -> str:
    return f"{artifact_dir(group_id, artifact_id)}/{METADATA_FILE}"


def descriptor_path(group_id: str, artifact_id: str, version: str) -> str:
    base = artifact_dir(group_id, artifact_id)
    return f"{base}/{version}/{artifact_id}-{version}.{DESCRIPTOR_EXTENSION}"


def artifact_path(artifact: ArtifactCoordinate) -> str:
    base = artifact_dir(artifact.group_id, artifact.artifact_id)
    name = f"{artifact.artifact_id}-{artifact.version}"
    if artifact.classifier:
        name += f"-{artifact.classifier}"
    return f"{base}/{artifact.version}/{name}.{artifact.extension}"
