"""Options and argument handling shared by the ``collect`` and ``resolve`` commands."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from depbridge.cli.output import print_error
from depbridge.config import Settings, load_settings
from depbridge.core.coordinates import DependableCoordinate, ProjectModel
from depbridge.core.request import RemoteRepository
from depbridge.exceptions import ConfigurationError, DescriptorError
from depbridge.repository import load_model_file


def repository_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add ``--settings``, ``--local-repo``, ``--remote`` and ``--offline``."""
    options = [
        click.option(
            "--settings", "settings_path",
            type=click.Path(exists=True, dir_okay=False),
            default=None,
            help="Settings file (default: ~/.depbridge/settings.yaml if present).",
        ),
        click.option(
            "--local-repo",
            type=click.Path(file_okay=False),
            default=None,
            help="Local repository directory.",
        ),
        click.option(
            "--remote", "remotes",
            multiple=True,
            metavar="ID=URL",
            help="Additional remote repository (repeatable).",
        ),
        click.option(
            "--offline",
            is_flag=True,
            default=False,
            help="Never contact remote repositories.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def root_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add the optional COORDINATE argument and ``--project``/``--format``."""
    func = click.option(
        "--format", "output_format",
        type=click.Choice(["text", "json"]),
        default="text",
        help="Output format (default: text).",
    )(func)
    func = click.option(
        "--project", "project_file",
        type=click.Path(exists=True, dir_okay=False),
        default=None,
        help="Project descriptor (YAML) to use as the root.",
    )(func)
    return click.argument("coordinate", required=False)(func)


def build_settings(
    settings_path: str | None,
    local_repo: str | None,
    remotes: tuple[str, ...],
    offline: bool,
    output_format: str,
) -> Settings:
    """Merge the settings file with command-line overrides; exit 2 on bad input."""
    try:
        settings = load_settings(settings_path)
    except ConfigurationError as exc:
        print_error(str(exc), output_format)
        sys.exit(2)

    if local_repo:
        settings.local_repository = Path(local_repo)
    for entry in remotes:
        repo_id, sep, url = entry.partition("=")
        if not sep or not repo_id.strip() or not url.strip():
            print_error(f"Invalid --remote {entry!r}: expected ID=URL", output_format)
            sys.exit(2)
        settings.remote_repositories.append(RemoteRepository(repo_id.strip(), url.strip()))
    if offline:
        settings.offline = True
    return settings


def load_root(
    coordinate: str | None, project_file: str | None, output_format: str
) -> DependableCoordinate | ProjectModel:
    """Return the coordinate or project to start from; exit 2 on bad input.

    Exactly one of *coordinate* and *project_file* must be given.
    """
    if (coordinate is None) == (project_file is None):
        print_error("Give either a COORDINATE or --project FILE", output_format)
        sys.exit(2)
    try:
        if project_file is not None:
            return load_model_file(Path(project_file))
        return DependableCoordinate.parse(coordinate)
    except DescriptorError as exc:
        print_error(str(exc), output_format)
        sys.exit(2)
