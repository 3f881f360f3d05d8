"""
Graph Projection.

Derives the node and link set to display for a focus entity (or for the
overview when there is no focus) from the entity store and its
relationship index.

Ranks:
    0 - synthetic "All Processes" root (overview only)
    1 - process
    2 - sub-process
    3 - system
    4 - vendor
"""

import logging
from typing import Dict, Iterable, List, Optional, Set

from ..config import DEFAULT_ROOT_LABEL
from ..core.store import EntityStore
from ..core.types import (
    LEAF_KINDS,
    ROOT_ID,
    ROOT_KIND,
    ROOT_RANK,
    EntityKind,
    EntityRef,
    Projection,
    ProjectionLink,
    ProjectionNode,
)

logger = logging.getLogger(__name__)


class _ProjectionBuilder:
    """Accumulates nodes and links, keeping the first occurrence of each."""

    def __init__(self, focus: Optional[EntityRef], hidden: Set[EntityKind]):
        self.focus = focus
        self.hidden = hidden
        self._nodes: Dict[str, ProjectionNode] = {}
        self._links: Dict[tuple, ProjectionLink] = {}

    def is_visible(self, kind: EntityKind, entity_id: str) -> bool:
        if kind not in self.hidden:
            return True
        return self.focus is not None and self.focus.kind == kind and self.focus.id == entity_id

    def add_node(self, node_id: str, name: str, kind, rank: int) -> None:
        if node_id not in self._nodes:
            self._nodes[node_id] = ProjectionNode(id=node_id, name=name, kind=kind, rank=rank)

    def add_link(self, source: str, target: str) -> None:
        key = (source, target)
        if key not in self._links:
            self._links[key] = ProjectionLink(source=source, target=target)

    def build(self) -> Projection:
        return Projection(
            nodes=list(self._nodes.values()),
            links=list(self._links.values()),
            focus=self.focus,
        )


class GraphProjector:
    """
    Pure projection of an EntityStore for a given focus.

    The projector keeps no state between calls: projecting the same focus
    twice without an intervening mutation yields identical node and link
    sequences.
    """

    def __init__(self, store: EntityStore, root_label: str = DEFAULT_ROOT_LABEL):
        self.store = store
        self.root_label = root_label

    def project(self, focus: Optional[EntityRef] = None,
                hide: Iterable[EntityKind] = ()) -> Projection:
        """
        Compute the visible nodes and links.

        Args:
            focus: Entity to center on. None, the root id, or a reference
                to an entity that no longer exists yield the overview.
            hide: Leaf kinds (system, vendor) to leave out. The focused
                entity itself is always shown.
        """
        hidden = {EntityKind(kind) for kind in hide if EntityKind(kind).is_leaf}
        focus = self._resolve(focus)
        builder = _ProjectionBuilder(focus, hidden)

        if focus is None:
            self._project_overview(builder)
        elif focus.kind == EntityKind.PROCESS:
            self._add_process(builder, focus.id, self.store.index.sub_processes_of(focus.id))
        elif focus.kind == EntityKind.SUB_PROCESS:
            owner = self.store.index.owner_of(focus.id)
            self._add_process(builder, owner, [focus.id])
        else:
            self._project_leaf(builder, focus)

        projection = builder.build()
        logger.debug(
            "Projected %s: %d nodes, %d links",
            focus or "overview", len(projection.nodes), len(projection.links),
        )
        return projection

    def _resolve(self, focus: Optional[EntityRef]) -> Optional[EntityRef]:
        if focus is None or focus.id == ROOT_ID:
            return None
        if not self.store.has(focus.kind, focus.id):
            logger.debug("Focus %s no longer exists, falling back to overview", focus)
            return None
        return focus

    def _project_overview(self, builder: _ProjectionBuilder) -> None:
        builder.add_node(ROOT_ID, self.root_label, ROOT_KIND, ROOT_RANK)
        for process in self.store.list(EntityKind.PROCESS):
            builder.add_link(ROOT_ID, process.id)
            self._add_process(builder, process.id, self.store.index.sub_processes_of(process.id))

    def _project_leaf(self, builder: _ProjectionBuilder, focus: EntityRef) -> None:
        index = self.store.index
        linking = set(index.related_to(focus.id, EntityKind.SUB_PROCESS, focus.kind))
        if not linking:
            self._add_entity(builder, focus.kind, focus.id)
            return

        # Walk processes in store order so the output does not depend on
        # the order links were created in.
        for process in self.store.list(EntityKind.PROCESS):
            selected = [sp for sp in index.sub_processes_of(process.id) if sp in linking]
            if selected:
                self._add_process(builder, process.id, selected)

    def _add_process(self, builder: _ProjectionBuilder, process_id: str,
                     sub_process_ids: List[str]) -> None:
        self._add_entity(builder, EntityKind.PROCESS, process_id)
        for sp in sub_process_ids:
            self._add_entity(builder, EntityKind.SUB_PROCESS, sp)
            builder.add_link(process_id, sp)
            for kind in LEAF_KINDS:
                for target_id in self.store.index.related_to(sp, kind, EntityKind.SUB_PROCESS):
                    if not builder.is_visible(kind, target_id):
                        continue
                    self._add_entity(builder, kind, target_id)
                    builder.add_link(sp, target_id)

    def _add_entity(self, builder: _ProjectionBuilder, kind: EntityKind, entity_id: str) -> None:
        entity = self.store.get(kind, entity_id)
        if entity is None:
            return
        builder.add_node(entity.id, entity.name, kind, kind.rank)
