"""foldgraph CLI - typer application entry point."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from foldgraph.config import OUTPUT_FORMATS, load_config
from foldgraph.export import build_view_graph, render_dot, render_mermaid, to_elements
from foldgraph.graph import (
    FoldController,
    FoldGraphError,
    Hide,
    InvalidGraphError,
    load_graph,
)
from foldgraph.observability import close_file_logging, configure_logging

if TYPE_CHECKING:
    from foldgraph.config import RenderConfig
    from foldgraph.graph import GraphModel, ViewDelta

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="foldgraph",
    help="foldgraph: fold and unfold nested groups of a dependency graph.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


@app.callback()
def main(
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity: -v for INFO, -vv for DEBUG.",
        ),
    ] = 0,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Append all log events to this JSONL file.",
            envvar="FOLDGRAPH_LOG_FILE",
        ),
    ] = None,
) -> None:
    """foldgraph: fold and unfold nested groups of a dependency graph."""
    configure_logging(verbosity=verbose, log_file=log_file)


@app.command()
def version() -> None:
    """Show version information."""
    from foldgraph import __version__

    console.print(f"foldgraph v{__version__}")


@app.command()
def validate(
    graph_file: Annotated[Path, typer.Argument(help="Graph description (.yaml or .json)")],
) -> None:
    """Check that a graph description loads and is structurally valid."""
    model = _load_or_exit(graph_file)

    groups = sorted(model.groups())
    console.print(f"[green]✓[/green] {graph_file} is valid")
    console.print(f"  Nodes: {len(model.nodes)}")
    console.print(f"  Edges: {len(model.edges)}")
    console.print(f"  Groups: {', '.join(groups) if groups else '-'}")


@app.command()
def view(
    graph_file: Annotated[Path, typer.Argument(help="Graph description (.yaml or .json)")],
    toggle: Annotated[
        list[str] | None,
        typer.Option(
            "--toggle",
            "-t",
            help="Node to toggle, as if tapped. Repeat to apply several in order.",
        ),
    ] = None,
    output_format: Annotated[
        str | None,
        typer.Option(
            "--format",
            "-f",
            help=f"Output format: {', '.join(OUTPUT_FORMATS)}.",
        ),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Config file (default: ./foldgraph.yaml)."),
    ] = None,
) -> None:
    """Apply toggles to a graph and print the resulting active view."""
    try:
        try:
            config = load_config(config_path).with_overrides(format=output_format)
        except (FileNotFoundError, ValueError) as e:
            err_console.print(f"[red]Error:[/red] {escape(str(e))}")
            raise typer.Exit(1) from None

        model = _load_or_exit(graph_file)
        controller = FoldController(model)

        for node_id in toggle or []:
            try:
                delta = controller.on_node_activated(node_id)
            except FoldGraphError as e:
                err_console.print(f"[red]Error:[/red] {e.describe()}")
                raise typer.Exit(1) from None
            if config.format == "table":
                _print_delta(node_id, delta)

        _print_view(controller, config)
    finally:
        close_file_logging()


def _load_or_exit(graph_file: Path) -> GraphModel:
    """Load a graph, printing a readable error and exiting on failure."""
    try:
        return load_graph(graph_file)
    except InvalidGraphError as e:
        err_console.print("[red]Invalid graph[/red]")
        err_console.print(e.describe())
    except FoldGraphError as e:
        err_console.print(f"[red]Error:[/red] {e}")
    raise typer.Exit(1)


def _print_delta(node_id: str, delta: ViewDelta | None) -> None:
    if delta is None:
        console.print(f"[dim]○[/dim] {node_id}: not a foldable group, ignored")
        return
    verb = "folded" if isinstance(delta, Hide) else "unfolded"
    console.print(
        f"[cyan]●[/cyan] {delta.group_id}: {verb} "
        f"({len(delta.node_ids)} nodes, {len(delta.edge_ids)} edges)"
    )


def _print_view(controller: FoldController, config: RenderConfig) -> None:
    view_graph = build_view_graph(controller, max_label_length=config.max_label_length)

    # Machine-readable formats go to stdout verbatim, without rich wrapping
    if config.format == "elements":
        typer.echo(json.dumps(to_elements(view_graph), indent=2))
        return
    if config.format == "dot":
        typer.echo(render_dot(view_graph, rankdir=config.rankdir))
        return
    if config.format == "mermaid":
        typer.echo(render_mermaid(view_graph, rankdir=config.rankdir))
        return

    table = Table(title="Active View")
    table.add_column("Node", style="cyan")
    table.add_column("Label")
    table.add_column("Kind", style="bold")
    table.add_column("Group", style="dim")
    for node in view_graph.nodes:
        table.add_row(node.id, node.label, node.kind.value, node.parent_id or "-")

    console.print()
    console.print(table)
    console.print(f"Edges: {', '.join(e.id for e in view_graph.edges) or '-'}")
    folded = view_graph.folded_groups
    console.print(f"Folded: {', '.join(folded) if folded else '-'}")
