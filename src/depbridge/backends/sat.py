"""SAT generation: version selection by constraint solving.

Encodes version selection as a Boolean satisfiability instance and solves it
with a CDCL solver (Glucose3 via python-sat):

1. One variable per candidate ``(artifact key, version)``: every available
   version satisfying some reachable declaration.
2. At most one version per artifact key.
3. Each direct declaration of the root needs one satisfying candidate.
4. A selected candidate implies one satisfying candidate for each of its
   transitive declarations.

Unlike the legacy generation, every declared version is a hard
requirement: two exact, different versions of the same key are a conflict
unless dependency management overrides them. The tree is then built by the
shared breadth-first walk; at each node the highest candidate that keeps the
formula satisfiable, given the choices already made, is selected.

Importing this module requires python-sat.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque

from pysat.solvers import Solver as _PySATSolver

from depbridge.backends.base import (
    CollectionRoot,
    Edge,
    GraphBuilder,
    RepositoryBackend,
    child_edges,
)
from depbridge.core.coordinates import Exclusion, ProjectModel
from depbridge.core.graph import CollectorResult
from depbridge.core.versions import version_key
from depbridge.detection import GenerationTag
from depbridge.exceptions import ArtifactNotFoundError, VersionConflictError
from depbridge.repository.client import RepositoryClient

logger = logging.getLogger(__name__)

SOLVER_NAME = "g3"

_Candidate = tuple[str, str]


class SatGraphBuilder(GraphBuilder):
    """Graph builder whose version choices are checked by a SAT solver."""

    def __init__(self, client: RepositoryClient, root: CollectionRoot) -> None:
        super().__init__(client, root)
        self._var_map: dict[_Candidate, int] = {}
        self._versions: dict[str, list[str]] = defaultdict(list)
        self._descriptors: dict[_Candidate, ProjectModel] = {}
        self._missing: set[_Candidate] = set()
        self._exact_demands: dict[str, set[str]] = defaultdict(set)
        self._clauses: list[list[int]] = []
        self._unsatisfied_roots: list[str] = []
        self._dead_ends: list[str] = []
        self._solver: _PySATSolver | None = None
        self._assumptions: list[int] = []

    def build(self) -> CollectorResult:
        self._encode()
        if self._unsatisfied_roots:
            raise VersionConflictError(self._unsatisfied_roots)

        solver = _PySATSolver(name=SOLVER_NAME)
        try:
            for clause in self._clauses:
                solver.add_clause(clause)
            if not solver.solve():
                raise VersionConflictError(self._diagnose_failure())
            self._solver = solver
            self._assumptions = []
            return super().build()
        finally:
            self._solver = None
            solver.delete()

    def select_version(self, edge: Edge) -> str:
        candidates = sorted(
            (v for v in self._versions.get(edge.key, ()) if edge.constraint.satisfies(v)),
            key=version_key,
            reverse=True,
        )
        if not candidates:
            # Only reachable through a path whose exclusions pruned it from the encoding.
            return super().select_version(edge)
        solver = self._solver
        if solver is None:
            raise RuntimeError("SatGraphBuilder.select_version is only valid during build()")
        for version in candidates:
            var = self._var_map[(edge.key, version)]
            if solver.solve(assumptions=self._assumptions + [var]):
                self._assumptions.append(var)
                return version
        raise VersionConflictError([
            f"No version of {edge.key} satisfying {edge.constraint.raw!r} is consistent "
            f"with the versions already selected"
        ])

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def _encode(self) -> None:
        root = self.root
        root_key = root.artifact.key if root.artifact is not None else None
        exclusions = root.dependency.exclusions if root.dependency else ()
        queue: deque[tuple[_Candidate, tuple[Exclusion, ...]]] = deque()

        edges = child_edges(
            root.declarations,
            parent_scope="",
            managed=root.managed,
            exclusions=exclusions,
            transitive=root.dependency is not None,
        )
        for edge in edges:
            if edge.key == root_key:
                continue
            literals = self._candidates(edge, queue)
            if literals:
                self._clauses.append(literals)
            else:
                self._unsatisfied_roots.append(
                    f"No available version of {edge.key} satisfies {edge.constraint.raw!r}"
                )

        while queue:
            candidate, inherited = queue.popleft()
            var = self._var_map[candidate]
            descriptor = self._descriptors[candidate]
            edges = child_edges(
                descriptor.dependencies,
                parent_scope="",
                managed=root.managed,
                exclusions=inherited,
                transitive=True,
            )
            for edge in edges:
                if edge.key == root_key:
                    continue
                literals = self._candidates(edge, queue)
                if literals:
                    self._clauses.append([-var] + literals)
                else:
                    self._dead_ends.append(
                        f"{candidate[0]}@{candidate[1]} requires {edge.key} "
                        f"{edge.constraint.raw!r} but no satisfying version exists"
                    )
                    self._clauses.append([-var])

        for key, versions in self._versions.items():
            variables = [self._var_map[(key, v)] for v in versions]
            for i in range(len(variables)):
                for j in range(i + 1, len(variables)):
                    self._clauses.append([-variables[i], -variables[j]])

        logger.debug(
            "Encoded %d candidates as %d clauses", len(self._var_map), len(self._clauses)
        )

    def _candidates(
        self, edge: Edge, queue: deque[tuple[_Candidate, tuple[Exclusion, ...]]]
    ) -> list[int]:
        """Variables of every available version satisfying *edge*."""
        dep = edge.dependency
        exact = edge.constraint.exact_version
        if exact is not None:
            self._exact_demands[edge.key].add(exact)
            versions = [exact]
        else:
            versions = [
                v
                for v in self.client.list_versions(dep.group_id, dep.artifact_id)
                if edge.constraint.satisfies(v)
            ]

        literals: list[int] = []
        for version in versions:
            candidate = (edge.key, version)
            if candidate in self._missing:
                continue
            if candidate not in self._var_map:
                try:
                    descriptor = self.client.read_descriptor(
                        dep.group_id, dep.artifact_id, version
                    )
                except ArtifactNotFoundError:
                    logger.debug("Skipping unavailable candidate %s@%s", edge.key, version)
                    self._missing.add(candidate)
                    continue
                self._var_map[candidate] = len(self._var_map) + 1
                self._versions[edge.key].append(version)
                self._descriptors[candidate] = descriptor
                queue.append((candidate, edge.exclusions))
            literals.append(self._var_map[candidate])
        return literals

    def _diagnose_failure(self) -> list[str]:
        """Human-readable reasons for an unsatisfiable encoding."""
        msgs: list[str] = []
        for key, versions in sorted(self._exact_demands.items()):
            if len(versions) > 1:
                ordered = ", ".join(sorted(versions, key=version_key))
                msgs.append(f"{key} is required at incompatible versions {ordered}")
        msgs.extend(self._dead_ends)
        if not msgs:
            msgs.append(
                "Resolution failed: no satisfying assignment exists "
                "(constraint system is unsatisfiable)"
            )
        return msgs


class SatBackend(RepositoryBackend):
    """Resolver and collector for the ``sat`` generation."""

    generation = GenerationTag.SAT.value

    def graph_builder(self, client: RepositoryClient, root: CollectionRoot) -> GraphBuilder:
        return SatGraphBuilder(client, root)
