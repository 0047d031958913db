"""``depbridge detect`` — Show the active engine generation.

Exit Codes:
    0 — Always; detection falls back to the oldest generation.
"""

from __future__ import annotations

import json
import sys

import click

from depbridge.detection import CapabilityDetector
from depbridge.registry import Capability, default_registry


@click.command("detect")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
def detect_command(output_format: str) -> None:
    """Show the detected engine generation and the registered backends."""
    active = CapabilityDetector().detect()
    registry = default_registry()
    backends = {str(c): registry.tags(c) for c in Capability}

    if output_format == "json":
        click.echo(json.dumps({"generation": active, "backends": backends}, indent=2))
    else:
        from depbridge.cli.output import print_detection
        print_detection(active, backends)
    sys.exit(0)
