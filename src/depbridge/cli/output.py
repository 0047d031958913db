"""Rich output formatting helpers for the depbridge CLI.

Provides the dependency tree, the resolved artifact table and the detection
summary, plus the JSON forms used by ``--format json``.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from depbridge.core.graph import CollectorResult, DependencyNode
from depbridge.core.results import ArtifactResult

_SCOPE_STYLES: dict[str, str] = {
    "compile": "bold",
    "runtime": "cyan",
    "provided": "yellow",
    "test": "dim",
    "system": "magenta",
}

console = Console()


def scope_style(scope: str) -> str:
    """Return the Rich style string for a dependency scope."""
    return _SCOPE_STYLES.get(scope, "white")


def configure_logging(level: int) -> None:
    """Send ``depbridge`` log records to stderr through Rich."""
    logger = logging.getLogger("depbridge")
    logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)


def print_error(message: str, output_format: str = "text") -> None:
    if output_format == "json":
        click.echo(json.dumps({"error": message}))
    else:
        click.echo(f"Error: {message}")


# ---------------------------------------------------------------------------
# collect
# ---------------------------------------------------------------------------


def _node_text(node: DependencyNode) -> Text:
    if node.artifact is None:
        return Text("(dependencies)", style="bold")
    text = Text(str(node.artifact), style="bold" if node.dependency is None else "")
    if node.dependency is not None:
        text.append(f" [{node.scope}]", style=scope_style(node.scope))
        if node.dependency.optional:
            text.append(" (optional)", style="dim")
    if node.premanaged_version:
        text.append(f" (managed from {node.premanaged_version})", style="dim")
    return text


def _add_children(tree: Tree, node: DependencyNode) -> None:
    for child in node.children:
        _add_children(tree.add(_node_text(child)), child)


def print_dependency_tree(result: CollectorResult) -> None:
    """Print a collected graph as a tree, followed by any cut cycles.

    Args:
        result: Outcome of a collection.
    """
    tree = Tree(_node_text(result.root))
    _add_children(tree, result.root)
    console.print(tree)

    if result.cycles:
        console.print(f"[yellow]{len(result.cycles)} cycle(s) cut:[/yellow]")
        for cycle in result.cycles:
            console.print(Text("  " + " -> ".join(cycle), style="yellow"))
    total = len(result.nodes()) - 1
    console.print(f"[bold]{total}[/bold] dependencies collected")


def collector_result_to_json(result: CollectorResult) -> str:
    return json.dumps(result.to_dict(), indent=2)


# ---------------------------------------------------------------------------
# resolve
# ---------------------------------------------------------------------------


def artifact_results_to_dicts(results: list[ArtifactResult]) -> list[dict[str, Any]]:
    return [
        {
            "artifact": str(r.artifact),
            "file": str(r.path),
            "repository": r.repository,
        }
        for r in results
    ]


def print_artifact_results(results: list[ArtifactResult]) -> None:
    """Print the resolved artifacts in resolution order.

    Args:
        results: Artifacts returned by a resolver.
    """
    if not results:
        console.print("[dim]No artifacts resolved.[/dim]")
        return

    table = Table(title="Resolved Artifacts", show_header=True, header_style="bold")
    table.add_column("Artifact", style="bold", overflow="fold")
    table.add_column("Repository", style="dim")
    table.add_column("File", overflow="fold")
    for r in results:
        table.add_row(Text(str(r.artifact)), r.repository, Text(str(r.path)))
    console.print(table)
    downloaded = sum(1 for r in results if r.repository != "local")
    console.print(
        f"{len(results)} artifacts resolved | {downloaded} downloaded"
    )


# ---------------------------------------------------------------------------
# detect
# ---------------------------------------------------------------------------


def print_detection(active: str, backends: dict[str, list[str]]) -> None:
    """Print the detected generation and the registered backends.

    Args:
        active: Detected generation tag.
        backends: Capability name to registered generation tags.
    """
    console.print(
        Panel(Text.assemble(("Generation: ", "bold"), (active, "bold green")),
              title="Engine Detection")
    )
    table = Table(show_header=True, header_style="bold")
    table.add_column("Capability", style="bold")
    table.add_column("Generations")
    for capability in sorted(backends):
        tags = [
            Text(tag, style="bold green") if tag == active else Text(tag, style="dim")
            for tag in backends[capability]
        ]
        table.add_row(capability, Text(", ").join(tags))
    console.print(table)
