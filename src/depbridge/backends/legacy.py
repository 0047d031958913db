"""Legacy generation: nearest-wins mediation without a solver.

Every artifact key is decided by the first declaration that reaches it in
breadth-first order. Bare versions are taken as declared and ranges resolve
to the highest available version; nothing is checked against the
requirements of declarations met later. This matches the behaviour of the
engine generations that predate constraint solving.
"""

from __future__ import annotations

from depbridge.backends.base import CollectionRoot, GraphBuilder, RepositoryBackend
from depbridge.detection import GenerationTag
from depbridge.repository.client import RepositoryClient


class LegacyBackend(RepositoryBackend):
    """Resolver and collector for the ``legacy`` generation."""

    generation = GenerationTag.LEGACY.value

    def graph_builder(self, client: RepositoryClient, root: CollectionRoot) -> GraphBuilder:
        return GraphBuilder(client, root)
