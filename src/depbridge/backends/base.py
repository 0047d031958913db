"""Graph construction and artifact resolution shared by the bundled backends.

Both bundled generations build the dependency tree the same way and differ
only in how they pick the version of each artifact:

- The tree is walked breadth first from the root, so the declaration nearest
  to the root (then the first declared) decides an artifact key; later
  declarations of an already selected key are omitted from the tree.
- Below the root, ``test`` and ``provided`` dependencies and optional
  dependencies are not followed, and scopes are derived from the parent's
  scope (``derive_scope``).
- Exclusions apply to every descendant of the declaration that carries them.
- The root's dependency management replaces the version of transitive
  dependencies and supplies missing versions of direct ones.
- A declaration pointing back at an ancestor closes a cycle; it is cut and
  recorded on ``CollectorResult.cycles``.

Resolution walks the collected tree in preorder, keeps the nodes the filter
accepts and fetches each artifact once, in walk order.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from collections import deque
from collections.abc import Callable, Collection, Iterable
from dataclasses import dataclass, field, replace

import httpx

from depbridge.api import DependencyCollector, DependencyResolver
from depbridge.core.coordinates import (
    ArtifactCoordinate,
    DependableCoordinate,
    Dependency,
    Exclusion,
    ProjectModel,
)
from depbridge.core.filters import TransformableFilter
from depbridge.core.graph import CollectorResult, DependencyNode
from depbridge.core.request import BuildingRequest
from depbridge.core.results import ArtifactResult
from depbridge.core.versions import VersionConstraint
from depbridge.exceptions import (
    ArtifactNotFoundError,
    DependencyCollectorError,
    DependencyResolverError,
    DescriptorError,
    VersionConflictError,
)
from depbridge.repository.client import RepositoryClient

logger = logging.getLogger(__name__)

NON_TRANSITIVE_SCOPES: frozenset[str] = frozenset({"test", "provided"})

_BACKEND_FAILURES = (ArtifactNotFoundError, DescriptorError, VersionConflictError)


def derive_scope(parent_scope: str, child_scope: str) -> str:
    """Effective scope of a transitive dependency.

    ``runtime`` parents demote ``compile`` children to ``runtime``;
    ``provided``, ``test`` and ``system`` parents impose their own scope.
    """
    if parent_scope == "runtime" and child_scope == "compile":
        return "runtime"
    if parent_scope in ("provided", "test", "system"):
        return parent_scope
    return child_scope


# ---------------------------------------------------------------------------
# Edges: declarations after exclusion, management and scope rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Edge:
    """A declaration ready to be turned into a graph node.

    Attributes:
        dependency: Effective declaration (derived scope, managed version).
        constraint: Version requirement the selected version must satisfy.
        exclusions: Exclusions in force for the node's descendants.
        premanaged_version: Declared version replaced by management, if any.
    """

    dependency: Dependency
    constraint: VersionConstraint
    exclusions: tuple[Exclusion, ...] = ()
    premanaged_version: str | None = None

    @property
    def key(self) -> str:
        return self.dependency.management_key


def parse_constraint(dependency: Dependency, version: str) -> VersionConstraint:
    """Build the constraint declared for *dependency*.

    Raises:
        DescriptorError: If *version* is not a version or a valid constraint.
    """
    constraint = VersionConstraint(version)
    try:
        constraint.validate()
    except ValueError as exc:
        raise DescriptorError(
            f"Invalid version {version!r} for {dependency.management_key}: {exc}"
        ) from exc
    return constraint


def child_edges(
    declarations: Iterable[Dependency],
    *,
    parent_scope: str,
    managed: dict[str, Dependency],
    exclusions: tuple[Exclusion, ...],
    transitive: bool,
) -> list[Edge]:
    """Turn the declarations of one node into edges, in declaration order.

    Args:
        declarations: Dependencies declared by the node's descriptor.
        parent_scope: Effective scope of the declaring node.
        managed: Root dependency management, keyed by management key.
        exclusions: Exclusions inherited from the node's ancestors.
        transitive: False for the root's own declarations.

    Raises:
        DescriptorError: If a declaration has no version and none is managed.
    """
    edges: list[Edge] = []
    for decl in declarations:
        if any(e.matches(decl.group_id, decl.artifact_id) for e in exclusions):
            continue
        if transitive and (decl.optional or decl.scope in NON_TRANSITIVE_SCOPES):
            continue

        version = decl.version
        premanaged = None
        managed_dep = managed.get(decl.management_key)
        if managed_dep is not None and managed_dep.version:
            if (transitive or not version) and managed_dep.version != version:
                premanaged = version or None
                version = managed_dep.version
        if not version:
            raise DescriptorError(f"No version declared or managed for {decl.management_key}")

        scope = derive_scope(parent_scope, decl.scope) if transitive else decl.scope
        effective = replace(decl, version=version, scope=scope)
        edges.append(
            Edge(
                effective,
                parse_constraint(decl, version),
                exclusions + decl.exclusions,
                premanaged,
            )
        )
    return edges


def highest_satisfying(
    client: RepositoryClient, dependency: Dependency, constraint: VersionConstraint
) -> str:
    """Exact versions as declared; otherwise the highest available match.

    Raises:
        VersionConflictError: If no available version satisfies the constraint.
    """
    exact = constraint.exact_version
    if exact is not None:
        return exact
    available = client.list_versions(dependency.group_id, dependency.artifact_id)
    chosen = constraint.select(available)
    if chosen is None:
        raise VersionConflictError([
            f"No version of {dependency.management_key} satisfies {constraint.raw!r} "
            f"(available: {', '.join(available) or 'none'})"
        ])
    return chosen


# ---------------------------------------------------------------------------
# Collection roots
# ---------------------------------------------------------------------------


@dataclass
class CollectionRoot:
    """Normalized starting point of a collection.

    Attributes:
        artifact: Root artifact, or None for a bare set of dependencies.
        dependency: Root declaration (None for project and set roots).
        declarations: The root's direct dependencies.
        managed: Dependency management applied below the root.
        resolvable: Whether the root artifact itself is part of a resolution.
    """

    artifact: ArtifactCoordinate | None
    dependency: Dependency | None
    declarations: list[Dependency]
    managed: dict[str, Dependency] = field(default_factory=dict)
    resolvable: bool = False


def _managed_map(managed: Iterable[Dependency] | None) -> dict[str, Dependency]:
    return {dep.management_key: dep for dep in managed or ()}


def dependency_root(client: RepositoryClient, root: Dependency) -> CollectionRoot:
    version = highest_satisfying(client, root, parse_constraint(root, root.version or "*"))
    descriptor = client.read_descriptor(root.group_id, root.artifact_id, version)
    dependency = replace(root, version=version)
    return CollectionRoot(
        artifact=dependency.to_artifact(version),
        dependency=dependency,
        declarations=descriptor.dependencies,
        managed=_managed_map(descriptor.dependency_management),
        resolvable=True,
    )


def model_root(model: ProjectModel) -> CollectionRoot:
    return CollectionRoot(
        artifact=model.artifact,
        dependency=None,
        declarations=list(model.dependencies),
        managed=_managed_map(model.dependency_management),
    )


def set_root(
    coordinates: Collection[Dependency], managed: Collection[Dependency] | None
) -> CollectionRoot:
    return CollectionRoot(
        artifact=None,
        dependency=None,
        declarations=list(coordinates),
        managed=_managed_map(managed),
    )


# ---------------------------------------------------------------------------
# GraphBuilder: breadth-first tree construction
# ---------------------------------------------------------------------------


# (node, its declarations, transitive, inherited exclusions, ancestor keys)
_Pending = tuple[DependencyNode, list[Dependency], bool, tuple[Exclusion, ...], tuple[str, ...]]


class GraphBuilder:
    """Builds the dependency tree of one root against one repository client.

    Subclasses change how versions are chosen by overriding
    ``select_version``.
    """

    def __init__(self, client: RepositoryClient, root: CollectionRoot) -> None:
        self.client = client
        self.root = root

    def select_version(self, edge: Edge) -> str:
        return highest_satisfying(self.client, edge.dependency, edge.constraint)

    def build(self) -> CollectorResult:
        root = self.root
        root_node = DependencyNode(root.artifact, root.dependency)
        selected: dict[str, str] = {}
        path: tuple[str, ...] = ()
        if root.artifact is not None:
            selected[root.artifact.key] = root.artifact.version
            path = (root.artifact.key,)
        exclusions = root.dependency.exclusions if root.dependency else ()

        # A dependency root is itself a declaration; its descriptor's entries are transitive.
        transitive = root.dependency is not None
        cycles: list[list[str]] = []
        queue: deque[_Pending] = deque(
            [(root_node, root.declarations, transitive, exclusions, path)]
        )

        while queue:
            node, declarations, transitive, inherited, ancestors = queue.popleft()
            edges = child_edges(
                declarations,
                parent_scope=node.scope,
                managed=root.managed,
                exclusions=inherited,
                transitive=transitive,
            )
            for edge in edges:
                key = edge.key
                if key in ancestors:
                    cycles.append(list(ancestors) + [key])
                    continue
                if key in selected:
                    continue
                version = self.select_version(edge)
                selected[key] = version
                dep = replace(edge.dependency, version=version)
                child = DependencyNode(
                    dep.to_artifact(version), dep, premanaged_version=edge.premanaged_version
                )
                node.children.append(child)
                descriptor = self.client.read_descriptor(dep.group_id, dep.artifact_id, version)
                queue.append(
                    (child, descriptor.dependencies, True, edge.exclusions, ancestors + (key,))
                )

        return CollectorResult(root_node, cycles)


def resolve_graph(
    client: RepositoryClient,
    result: CollectorResult,
    filter: TransformableFilter,
    *,
    include_root: bool,
) -> list[ArtifactResult]:
    """Fetch the accepted artifacts of a collected graph, in preorder."""
    results: list[ArtifactResult] = []
    seen: set[ArtifactCoordinate] = set()
    for node, parents in result.walk():
        if node.artifact is None:
            continue
        if node is result.root and not include_root:
            continue
        if node.artifact in seen or not filter.accepts(node, parents):
            continue
        seen.add(node.artifact)
        results.append(client.fetch(node.artifact))
    return results


# ---------------------------------------------------------------------------
# RepositoryBackend: the resolver/collector contract over a repository
# ---------------------------------------------------------------------------

RootFactory = Callable[[RepositoryClient], CollectionRoot]


class RepositoryBackend(DependencyResolver, DependencyCollector):
    """Backend implementing both contracts on top of ``RepositoryClient``.

    Args:
        http_client: Optional ``httpx.Client`` shared by every call, for
            HTTP remotes.
    """

    generation: str = ""

    def __init__(self, http_client: httpx.Client | None = None) -> None:
        self._http_client = http_client

    def __repr__(self) -> str:
        return f"{type(self).__name__}(generation={self.generation!r})"

    @abstractmethod
    def graph_builder(self, client: RepositoryClient, root: CollectionRoot) -> GraphBuilder:
        """Return the builder used for one collection."""

    def _client(self, building_request: BuildingRequest) -> RepositoryClient:
        return RepositoryClient(building_request, http_client=self._http_client)

    def _collect(self, building_request: BuildingRequest, make_root: RootFactory) -> CollectorResult:
        try:
            with self._client(building_request) as client:
                return self.graph_builder(client, make_root(client)).build()
        except _BACKEND_FAILURES as exc:
            raise DependencyCollectorError(f"Failed to collect dependencies: {exc}") from exc

    def _resolve(
        self,
        building_request: BuildingRequest,
        make_root: RootFactory,
        filter: TransformableFilter,
    ) -> list[ArtifactResult]:
        try:
            with self._client(building_request) as client:
                root = make_root(client)
                result = self.graph_builder(client, root).build()
                logger.debug(
                    "Collected %d nodes (%s generation)", len(result.nodes()), self.generation
                )
                return resolve_graph(client, result, filter, include_root=root.resolvable)
        except _BACKEND_FAILURES as exc:
            raise DependencyResolverError(f"Failed to resolve dependencies: {exc}") from exc

    # -- DependencyResolver ---------------------------------------------

    def resolve_dependencies(
        self,
        building_request: BuildingRequest,
        coordinates: Collection[Dependency],
        managed_dependencies: Collection[Dependency] | None,
        filter: TransformableFilter,
    ) -> list[ArtifactResult]:
        return self._resolve(
            building_request, lambda _: set_root(coordinates, managed_dependencies), filter
        )

    def resolve_coordinate(
        self,
        building_request: BuildingRequest,
        coordinate: DependableCoordinate,
        filter: TransformableFilter,
    ) -> list[ArtifactResult]:
        root = coordinate.to_dependency()
        return self._resolve(building_request, lambda c: dependency_root(c, root), filter)

    def resolve_model(
        self,
        building_request: BuildingRequest,
        model: ProjectModel,
        filter: TransformableFilter,
    ) -> list[ArtifactResult]:
        return self._resolve(building_request, lambda _: model_root(model), filter)

    # -- DependencyCollector --------------------------------------------

    def collect_dependency(
        self, building_request: BuildingRequest, root: Dependency
    ) -> CollectorResult:
        return self._collect(building_request, lambda c: dependency_root(c, root))

    def collect_coordinate(
        self, building_request: BuildingRequest, root: DependableCoordinate
    ) -> CollectorResult:
        dependency = root.to_dependency()
        return self._collect(building_request, lambda c: dependency_root(c, dependency))

    def collect_model(
        self, building_request: BuildingRequest, root: ProjectModel
    ) -> CollectorResult:
        return self._collect(building_request, lambda _: model_root(root))
