"""
Show & Describe Commands - print projections and entity details.

Standardized output: rich text by default, a JSON envelope with --json.
"""

import json
from typing import Optional, Tuple

import click
from rich.console import Console

from ...analysis.details import describe as describe_entity
from ...analysis.projection import GraphProjector
from ...core.types import EntityKind
from ..formatting import details_table, projection_tree
from ..utils import KIND_CHOICE, handle_errors, open_workspace, project_option, resolve_entity

console = Console()

HIDE_CHOICE = click.Choice([EntityKind.SYSTEM.value, EntityKind.VENDOR.value])


def _envelope(data) -> str:
    return json.dumps({"meta": {"status": "success"}, "data": data}, indent=2)


@click.command()
@click.argument("entity", required=False)
@click.option("-k", "--kind", type=KIND_CHOICE, help="Entity kind when the id is ambiguous")
@click.option("--hide", "hide", multiple=True, type=HIDE_CHOICE,
              help="Leave systems or vendors out of the view (repeatable)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@project_option
@handle_errors
def show(entity: Optional[str], kind: Optional[str], hide: Tuple[str, ...],
         as_json: bool, project_dir: str) -> None:
    """
    Show the overview, or the view focused on ENTITY.

    \b
    Examples:
      bpmap show                 # every process and what it uses
      bpmap show sp1             # one sub-process with its process
      bpmap show "CRM System"    # everything that depends on a system
    """
    ws = open_workspace(project_dir)
    focus = resolve_entity(ws.store, entity, kind) if entity else None
    hidden = hide or tuple(ws.settings.view.hide)

    projector = GraphProjector(ws.store, root_label=ws.settings.view.root_label)
    projection = projector.project(focus, hide=hidden)

    if as_json:
        click.echo(_envelope(projection.to_dict()))
        return
    console.print(projection_tree(projection))


@click.command()
@click.argument("entity")
@click.option("-k", "--kind", type=KIND_CHOICE, help="Entity kind when the id is ambiguous")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@project_option
@handle_errors
def describe(entity: str, kind: Optional[str], as_json: bool, project_dir: str) -> None:
    """Show what an entity belongs to and what it is connected to."""
    ws = open_workspace(project_dir)
    ref = resolve_entity(ws.store, entity, kind)
    details = describe_entity(ws.store, ref)

    if as_json:
        click.echo(_envelope(details.model_dump(mode="json")))
        return
    console.print(details_table(details))
