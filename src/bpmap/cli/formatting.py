"""
Rich renderables for projections, details and entity lists.
"""

from typing import Dict, List, Optional

from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from ..analysis.details import EntityDetails, RelatedEntity
from ..core.store import EntityStore
from ..core.types import EntityKind, EntityRef, Projection, ProjectionNode

KIND_STYLES: Dict[str, str] = {
    "all-process": "bold orange1",
    "process": "bold cyan",
    "sub-process": "blue",
    "system": "green",
    "vendor": "magenta",
}


def _node_label(node: ProjectionNode) -> str:
    style = KIND_STYLES.get(str(node.kind), "white")
    if node.is_root:
        return f"[{style}]{escape(node.name)}[/{style}]"
    return f"[{style}]{escape(node.name)}[/{style}] [dim]{node.kind}:{node.id}[/dim]"


def projection_tree(projection: Projection, breadcrumbs: Optional[List[EntityRef]] = None) -> Tree:
    """
    Render a projection as a tree.

    Leaves shared by several sub-processes appear under each of them.
    """
    title = "Overview" if projection.is_overview else f"Focus: {projection.focus}"
    if breadcrumbs:
        title += "  [dim](" + " › ".join(ref.id for ref in breadcrumbs) + ")[/dim]"
    tree = Tree(f"[bold]{title}[/bold]")

    children: Dict[str, List[str]] = {}
    has_parent = set()
    for source, target in projection.link_pairs():
        children.setdefault(source, []).append(target)
        has_parent.add(target)

    nodes = {node.id: node for node in projection.nodes}

    def attach(branch: Tree, node_id: str) -> None:
        child = branch.add(_node_label(nodes[node_id]))
        for target in children.get(node_id, []):
            attach(child, target)

    for node in projection.nodes:
        if node.id not in has_parent:
            attach(tree, node.id)

    if not projection.nodes or (projection.is_overview and len(projection.nodes) == 1):
        tree.add("[dim]No processes yet. Add one with 'bpmap add process NAME'.[/dim]")
    return tree


def _names(items: List[RelatedEntity]) -> str:
    if not items:
        return "[dim]none[/dim]"
    return ", ".join(f"{escape(item.name)} [dim]({item.id})[/dim]" for item in items)


def details_table(details: EntityDetails) -> Table:
    entity = details.entity
    table = Table(title=f"{entity.kind.label}: {entity.name}", show_header=False, title_justify="left")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Id", entity.id)
    if details.owner:
        table.add_row("Parent Process", _names([details.owner]))

    rows = {
        EntityKind.PROCESS: [("Sub-Processes", details.sub_processes),
                             ("Systems", details.systems),
                             ("Vendors", details.vendors)],
        EntityKind.SUB_PROCESS: [("Systems", details.systems),
                                 ("Vendors", details.vendors)],
        EntityKind.SYSTEM: [("Used by Sub-Processes", details.sub_processes),
                            ("Processes", details.processes),
                            ("Vendors", details.vendors)],
        EntityKind.VENDOR: [("Used by Sub-Processes", details.sub_processes),
                            ("Processes", details.processes),
                            ("Systems", details.systems)],
    }
    for label, items in rows[entity.kind]:
        table.add_row(label, _names(items))
    return table


def entity_table(store: EntityStore, kind: EntityKind) -> Table:
    table = Table(title=f"{kind.label}es" if kind.value.endswith("s") else f"{kind.label}s",
                  title_justify="left")
    table.add_column("Id", style="dim")
    table.add_column("Name", style=KIND_STYLES[kind.value])
    if kind == EntityKind.SUB_PROCESS:
        table.add_column("Process")
    if kind in (EntityKind.PROCESS, EntityKind.SUB_PROCESS):
        table.add_column("Systems", justify="right")
        table.add_column("Vendors", justify="right")
    else:
        table.add_column("Sub-Processes", justify="right")

    index = store.index
    for entity in store.list(kind):
        row = [entity.id, entity.name]
        if kind == EntityKind.SUB_PROCESS:
            owner = store.owner_of(entity.id)
            row.append(owner.name if owner else "")
        if kind in (EntityKind.PROCESS, EntityKind.SUB_PROCESS):
            row.append(str(len(index.related_to(entity.id, EntityKind.SYSTEM, kind))))
            row.append(str(len(index.related_to(entity.id, EntityKind.VENDOR, kind))))
        else:
            row.append(str(len(index.related_to(entity.id, EntityKind.SUB_PROCESS, kind))))
        table.add_row(*row)
    return table
