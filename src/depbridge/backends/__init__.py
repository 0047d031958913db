"""Bundled backends, one per engine generation.

``depbridge.backends.sat`` needs the optional ``python-sat`` distribution and
is only imported by the registry factory that instantiates it.
"""

from depbridge.backends.base import GraphBuilder, RepositoryBackend
from depbridge.backends.legacy import LegacyBackend

__all__ = [
    "GraphBuilder",
    "LegacyBackend",
    "RepositoryBackend",
]
