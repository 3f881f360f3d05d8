"""
Entity Commands - add, rename, delete and list model entities.
"""

import logging
from typing import Optional

import click
from rich.console import Console

from ...core.types import EntityKind
from ..formatting import entity_table
from ..utils import (
    KIND_CHOICE,
    echo_info,
    echo_success,
    handle_errors,
    open_workspace,
    project_option,
    resolve_entity,
)

logger = logging.getLogger(__name__)
console = Console()


@click.command()
@click.argument("kind", type=KIND_CHOICE)
@click.argument("name")
@click.option("-o", "--owner", "owner", help="Owning process (id or name), sub-processes only")
@project_option
@handle_errors
def add(kind: str, name: str, owner: Optional[str], project_dir: str) -> None:
    """
    Add a process, sub-process, system or vendor.

    \b
    Examples:
      bpmap add process "Customer Onboarding"
      bpmap add sub-process "Identity Verification" --owner p1
      bpmap add system "CRM System"
    """
    ws = open_workspace(project_dir)
    owner_id = None
    if owner is not None:
        owner_id = resolve_entity(ws.store, owner, EntityKind.PROCESS).id

    entity_id = ws.store.create(kind, name, owner_id)
    ws.save()
    echo_success(f"Created {kind} {entity_id}: {name.strip()}")


@click.command()
@click.argument("entity")
@click.argument("new_name")
@click.option("-k", "--kind", type=KIND_CHOICE, help="Entity kind when the id is ambiguous")
@project_option
@handle_errors
def rename(entity: str, new_name: str, kind: Optional[str], project_dir: str) -> None:
    """Rename an entity. Its id and links are kept."""
    ws = open_workspace(project_dir)
    ref = resolve_entity(ws.store, entity, kind)
    old_name = ws.store.require(ref.kind, ref.id).name
    ws.store.rename(ref.kind, ref.id, new_name)
    ws.save()
    echo_success(f"Renamed {ref}: {old_name} → {new_name.strip()}")


@click.command()
@click.argument("entity")
@click.option("-k", "--kind", type=KIND_CHOICE, help="Entity kind when the id is ambiguous")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation")
@project_option
@handle_errors
def delete(entity: str, kind: Optional[str], yes: bool, project_dir: str) -> None:
    """
    Delete an entity.

    Deleting a process deletes its sub-processes. Deleting a system or
    vendor unlinks it from every sub-process.
    """
    ws = open_workspace(project_dir)
    ref = resolve_entity(ws.store, entity, kind)
    name = ws.store.require(ref.kind, ref.id).name

    if ref.kind == EntityKind.PROCESS:
        owned = ws.store.sub_processes_of(ref.id)
        if owned:
            echo_info(f"Also deletes {len(owned)} sub-process(es): "
                      + ", ".join(sp.name for sp in owned))

    if not yes and not click.confirm(f"Delete {ref.kind.value} '{name}'?", default=False):
        click.echo("Aborted.")
        return

    ws.store.delete(ref.kind, ref.id)
    ws.save()
    echo_success(f"Deleted {ref}: {name}")


@click.command("list")
@click.argument("kind", type=KIND_CHOICE, required=False)
@project_option
@handle_errors
def list_entities(kind: Optional[str], project_dir: str) -> None:
    """List entities, all kinds unless KIND is given."""
    ws = open_workspace(project_dir)
    kinds = [EntityKind(kind)] if kind else list(EntityKind)
    for k in kinds:
        console.print(entity_table(ws.store, k))

    if not kind:
        stats = ws.store.stats()
        echo_info(
            f"{stats['system_links']} system link(s), {stats['vendor_links']} vendor link(s) "
            f"· storage: {ws.storage.describe()}"
        )
