"""Artifact repositories: layout, YAML descriptors, and the read-through client.

Public API::

    from depbridge.repository import RepositoryClient, load_model, dump_model
"""

from __future__ import annotations

from depbridge.repository.client import RepositoryClient
from depbridge.repository.descriptors import (
    dump_model,
    load_model,
    load_model_file,
    model_from_dict,
)

__all__ = [
    "RepositoryClient",
    "dump_model",
    "load_model",
    "load_model_file",
    "model_from_dict",
]
