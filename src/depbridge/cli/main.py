"""depbridge CLI: collect and resolve dependencies with the active engine generation.

Entry point for the ``depbridge`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    detect   — Show the detected engine generation and registered backends.
    collect  — Print the dependency tree of a coordinate or project file.
    resolve  — Resolve and download the artifacts of a coordinate or project.

Usage::

    depbridge detect
    depbridge collect org.example:app:1.0.0
    depbridge collect --project app.yaml --format json
    depbridge resolve org.example:app:1.0.0 --scope compile --scope runtime
    depbridge resolve --project app.yaml --exclude org.legacy:*
    depbridge --verbose resolve org.example:app:1.0.0 --remote central=https://repo.example.org
"""

from __future__ import annotations

import logging

import click

from depbridge import __version__
from depbridge.cli.collect_cmd import collect_command
from depbridge.cli.detect_cmd import detect_command
from depbridge.cli.output import configure_logging
from depbridge.cli.resolve_cmd import resolve_command


@click.group()
@click.version_option(version=__version__, prog_name="depbridge")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log debug details to stderr.")
def cli(verbose: bool) -> None:
    """depbridge: dependency collection and resolution across engine generations.

    Detects which resolution engine is available, picks the matching
    backend and runs the requested operation against the configured
    artifact repositories.
    """
    if verbose:
        configure_logging(logging.DEBUG)


# Register all subcommands
cli.add_command(detect_command)
cli.add_command(collect_command)
cli.add_command(resolve_command)
