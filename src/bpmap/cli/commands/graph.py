"""
Graph Command - export a projection for visualization.

Writes DOT (Graphviz), a standalone HTML page, or JSON depending on the
output file suffix.
"""

from pathlib import Path
from typing import Optional, Tuple

import click

from ...analysis.projection import GraphProjector
from ...graph.export import write_export
from ..utils import (
    KIND_CHOICE,
    echo_error,
    echo_info,
    echo_success,
    handle_errors,
    open_workspace,
    project_option,
    resolve_entity,
)
from .show import HIDE_CHOICE


@click.command()
@click.argument("entity", required=False)
@click.option("-k", "--kind", type=KIND_CHOICE, help="Entity kind when the id is ambiguous")
@click.option("-o", "--output", default="bpmap.html", help="Output file (.html, .dot or .json)")
@click.option("--hide", "hide", multiple=True, type=HIDE_CHOICE,
              help="Leave systems or vendors out of the view (repeatable)")
@project_option
@handle_errors
def graph(entity: Optional[str], kind: Optional[str], output: str,
          hide: Tuple[str, ...], project_dir: str) -> None:
    """
    Export the overview, or the view focused on ENTITY, to a file.
    """
    ws = open_workspace(project_dir)
    focus = resolve_entity(ws.store, entity, kind) if entity else None
    projector = GraphProjector(ws.store, root_label=ws.settings.view.root_label)
    projection = projector.project(focus, hide=hide or tuple(ws.settings.view.hide))

    output_path = Path(output)
    try:
        write_export(projection, output_path, title=ws.settings.project_name)
    except ValueError as e:
        echo_error(str(e))
        click.echo("Supported: .html, .dot, .json")
        raise SystemExit(1)

    echo_success(f"Generated: {output_path}")
    if output_path.suffix == ".html":
        echo_info(f"Open: file://{output_path.absolute()}")
    elif output_path.suffix == ".dot":
        echo_info(f"Render with: dot -Tpng {output_path} -o graph.png")
