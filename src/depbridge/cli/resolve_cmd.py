"""``depbridge resolve [COORDINATE]`` — Resolve and download artifacts.

Collects the graph of a coordinate or ``--project`` descriptor, keeps the
nodes accepted by the ``--scope`` and ``--exclude`` filters and materializes
their artifacts in the local repository.

Exit Codes:
    0 — All artifacts resolved.
    1 — Resolution failed (missing artifact, version conflict, ...).
    2 — Invalid coordinate, project file or settings.
"""

from __future__ import annotations

import json
import sys

import click

from depbridge.cli.options import build_settings, load_root, repository_options, root_options
from depbridge.core.coordinates import ProjectModel
from depbridge.core.filters import (
    AcceptAllFilter,
    AndFilter,
    PatternExclusionsFilter,
    ScopeFilter,
    TransformableFilter,
)
from depbridge.exceptions import DependencyResolverError
from depbridge.facade import DefaultDependencyResolver
from depbridge.registry import default_registry


def _build_filter(scopes: tuple[str, ...], excludes: tuple[str, ...]) -> TransformableFilter:
    """Combine the ``--scope`` and ``--exclude`` options into one filter."""
    filters: list[TransformableFilter] = []
    if scopes:
        filters.append(ScopeFilter.including(*scopes))
    if excludes:
        filters.append(PatternExclusionsFilter(excludes))
    if not filters:
        return AcceptAllFilter()
    if len(filters) == 1:
        return filters[0]
    return AndFilter(filters)


@click.command("resolve")
@root_options
@click.option(
    "--scope", "scopes",
    multiple=True,
    type=click.Choice(["compile", "provided", "runtime", "test", "system"]),
    help="Only resolve dependencies in this scope (repeatable).",
)
@click.option(
    "--exclude", "excludes",
    multiple=True,
    metavar="G:A",
    help="Skip artifacts matching group[:artifact] (wildcards allowed, repeatable).",
)
@repository_options
def resolve_command(
    coordinate: str | None,
    project_file: str | None,
    output_format: str,
    scopes: tuple[str, ...],
    excludes: tuple[str, ...],
    settings_path: str | None,
    local_repo: str | None,
    remotes: tuple[str, ...],
    offline: bool,
) -> None:
    """Resolve the artifacts of COORDINATE or --project FILE.

    Exit code 0 on success, 1 on resolution failure, 2 on invalid input.
    """
    settings = build_settings(settings_path, local_repo, remotes, offline, output_format)
    root = load_root(coordinate, project_file, output_format)
    dependency_filter = _build_filter(scopes, excludes)

    resolver = DefaultDependencyResolver(default_registry())
    request = settings.to_building_request()
    try:
        if isinstance(root, ProjectModel):
            results = resolver.resolve_model(request, root, dependency_filter)
        else:
            results = resolver.resolve_coordinate(request, root, dependency_filter)
    except DependencyResolverError as exc:
        from depbridge.cli.output import print_error
        print_error(str(exc), output_format)
        sys.exit(1)

    if output_format == "json":
        from depbridge.cli.output import artifact_results_to_dicts
        click.echo(json.dumps(artifact_results_to_dicts(results), indent=2))
    else:
        from depbridge.cli.output import print_artifact_results
        print_artifact_results(results)
    sys.exit(0)
