"""``depbridge collect [COORDINATE]`` — Print the dependency tree of a root.

The root is either a coordinate (``group:artifact[:type[:classifier]]:version``)
or a project descriptor given with ``--project``. Nothing is downloaded
apart from descriptors.

Exit Codes:
    0 — Graph collected.
    1 — Collection failed (missing artifact, version conflict, ...).
    2 — Invalid coordinate, project file or settings.
"""

from __future__ import annotations

import sys

import click

from depbridge.cli.options import build_settings, load_root, repository_options, root_options
from depbridge.core.coordinates import ProjectModel
from depbridge.exceptions import DependencyCollectorError
from depbridge.facade import DefaultDependencyCollector
from depbridge.registry import default_registry


@click.command("collect")
@root_options
@repository_options
def collect_command(
    coordinate: str | None,
    project_file: str | None,
    output_format: str,
    settings_path: str | None,
    local_repo: str | None,
    remotes: tuple[str, ...],
    offline: bool,
) -> None:
    """Collect and print the dependency graph of COORDINATE or --project FILE.

    Exit code 0 on success, 1 on collection failure, 2 on invalid input.
    """
    settings = build_settings(settings_path, local_repo, remotes, offline, output_format)
    root = load_root(coordinate, project_file, output_format)

    collector = DefaultDependencyCollector(default_registry())
    try:
        if isinstance(root, ProjectModel):
            result = collector.collect_project_graph(settings.to_building_request(project=root))
        else:
            result = collector.collect_coordinate(settings.to_building_request(), root)
    except DependencyCollectorError as exc:
        from depbridge.cli.output import print_error
        print_error(str(exc), output_format)
        sys.exit(1)

    if output_format == "json":
        from depbridge.cli.output import collector_result_to_json
        click.echo(collector_result_to_json(result))
    else:
        from depbridge.cli.output import print_dependency_tree
        print_dependency_tree(result)
    sys.exit(0)
