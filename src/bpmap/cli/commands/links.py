"""
Links Command - set the systems and vendors a sub-process depends on.
"""

from typing import List, Optional

import click

from ...core.types import EntityKind
from ..utils import echo_info, echo_success, handle_errors, open_workspace, project_option, resolve_entity


def _split(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@click.command()
@click.argument("sub_process")
@click.option("-s", "--systems", default=None,
              help="Comma-separated system ids or names; '' removes all")
@click.option("-v", "--vendors", default=None,
              help="Comma-separated vendor ids or names; '' removes all")
@project_option
@handle_errors
def links(sub_process: str, systems: Optional[str], vendors: Optional[str], project_dir: str) -> None:
    """
    Replace the systems and/or vendors linked to a sub-process.

    Only the difference to the current links is applied. Omitted options
    leave that kind of link unchanged.

    \b
    Examples:
      bpmap links sp1 --systems s1,s3 --vendors v2
      bpmap links "Account Setup" --vendors ''
    """
    ws = open_workspace(project_dir)
    sp_ref = resolve_entity(ws.store, sub_process, EntityKind.SUB_PROCESS)

    requested = [(EntityKind.SYSTEM, systems), (EntityKind.VENDOR, vendors)]
    if all(value is None for _, value in requested):
        raise click.UsageError("Pass --systems and/or --vendors")

    # Resolve everything before changing anything.
    plan = []
    for kind, value in requested:
        if value is None:
            continue
        ids = [resolve_entity(ws.store, raw, kind).id for raw in _split(value)]
        plan.append((kind, ids))

    changed = False
    for kind, ids in plan:
        added, removed = ws.store.set_links(sp_ref.id, kind, ids)
        if added or removed:
            changed = True
            echo_info(f"{kind.value}s +{added or '[]'} -{removed or '[]'}")

    if not changed:
        echo_info("Links already up to date.")
        return

    ws.save()
    echo_success(f"Updated links of {sp_ref.id}")
