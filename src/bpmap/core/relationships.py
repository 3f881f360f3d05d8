"""
Relationship Index.

Bidirectional adjacency between sub-processes and the systems and vendors
they depend on, plus the process -> sub-process ownership tree.

It manages:
- Forward maps (sub-process -> systems, sub-process -> vendors).
- Reverse maps (system -> sub-processes, vendor -> sub-processes).
- Ownership (process -> sub-processes, sub-process -> process).

Every value set is an insertion-ordered dict so that projections and
exports are reproducible. Process-level relationships are derived on
demand by unioning over a process's sub-processes; they are never stored.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .exceptions import NotFoundError, ValidationError
from .types import LEAF_KINDS, EntityKind

logger = logging.getLogger(__name__)

# Ordered set of ids: dict keys keep insertion order, values are unused.
IdSet = Dict[str, None]


class RelationshipIndex:
    """
    Owns every relationship of the model.

    Only ``link``, ``unlink``, ``set_links`` and ``cascade_delete_entity``
    touch the adjacency maps, and each of them updates the forward and the
    reverse side together, so ``s in forward[sp] <=> sp in reverse[s]``
    holds between calls.
    """

    def __init__(self):
        self._children: Dict[str, IdSet] = {}
        self._owner: Dict[str, str] = {}
        self._forward: Dict[EntityKind, Dict[str, IdSet]] = {kind: {} for kind in LEAF_KINDS}
        self._reverse: Dict[EntityKind, Dict[str, IdSet]] = {kind: {} for kind in LEAF_KINDS}

    # =========================================================================
    # Registration
    # =========================================================================

    def register(self, kind: EntityKind, entity_id: str,
                 owner_process_id: Optional[str] = None) -> None:
        """Create the empty relation sets for a freshly created entity."""
        if kind == EntityKind.PROCESS:
            self._children.setdefault(entity_id, {})
        elif kind == EntityKind.SUB_PROCESS:
            if owner_process_id not in self._children:
                raise ValidationError(
                    f"Sub-process {entity_id} needs a live owner process, got {owner_process_id!r}"
                )
            self._owner[entity_id] = owner_process_id
            self._children[owner_process_id][entity_id] = None
            for leaf_kind in LEAF_KINDS:
                self._forward[leaf_kind].setdefault(entity_id, {})
        else:
            self._reverse[kind].setdefault(entity_id, {})

    def has(self, kind: EntityKind, entity_id: str) -> bool:
        """Check whether the index knows an entity."""
        if kind == EntityKind.PROCESS:
            return entity_id in self._children
        if kind == EntityKind.SUB_PROCESS:
            return entity_id in self._owner
        return entity_id in self._reverse[kind]

    def kind_of(self, entity_id: str) -> Optional[EntityKind]:
        """
        Guess the kind of a bare id.

        Ids are only unique within a kind, so the first match in
        sub-process, process, system, vendor order wins.
        """
        for kind in (EntityKind.SUB_PROCESS, EntityKind.PROCESS,
                     EntityKind.SYSTEM, EntityKind.VENDOR):
            if self.has(kind, entity_id):
                return kind
        return None

    def owner_of(self, sub_process_id: str) -> Optional[str]:
        return self._owner.get(sub_process_id)

    def sub_processes_of(self, process_id: str) -> List[str]:
        return list(self._children.get(process_id, {}))

    # =========================================================================
    # Link Management
    # =========================================================================

    def link(self, sub_process_id: str, target_kind: EntityKind, target_id: str) -> bool:
        """
        Link a sub-process to a system or vendor.

        Returns False (and changes nothing) if either endpoint is missing
        or the link already exists.
        """
        target_kind = _leaf_kind(target_kind)
        forward = self._forward[target_kind].get(sub_process_id)
        reverse = self._reverse[target_kind].get(target_id)
        if forward is None or reverse is None or target_id in forward:
            return False

        forward[target_id] = None
        reverse[sub_process_id] = None
        logger.debug("Linked %s -> %s:%s", sub_process_id, target_kind.value, target_id)
        return True

    def unlink(self, sub_process_id: str, target_kind: EntityKind, target_id: str) -> bool:
        """Remove a link from both sides. Returns False if it did not exist."""
        target_kind = _leaf_kind(target_kind)
        if not self.is_linked(sub_process_id, target_kind, target_id):
            return False

        del self._forward[target_kind][sub_process_id][target_id]
        del self._reverse[target_kind][target_id][sub_process_id]
        logger.debug("Unlinked %s -> %s:%s", sub_process_id, target_kind.value, target_id)
        return True

    def is_linked(self, sub_process_id: str, target_kind: EntityKind, target_id: str) -> bool:
        forward = self._forward[_leaf_kind(target_kind)].get(sub_process_id, {})
        return target_id in forward

    def set_links(self, sub_process_id: str, target_kind: EntityKind,
                  target_ids: Iterable[str]) -> Tuple[List[str], List[str]]:
        """
        Reconcile the links of a sub-process to exactly ``target_ids``.

        Only the difference is applied: ids present on both sides are left
        in place, so their reverse entries keep their position.

        Returns:
            Tuple of (added ids, removed ids).

        Raises:
            NotFoundError: If the sub-process or any target id is unknown.
                Nothing is changed in that case.
        """
        target_kind = _leaf_kind(target_kind)
        current = self._forward[target_kind].get(sub_process_id)
        if current is None:
            raise NotFoundError(EntityKind.SUB_PROCESS.value, sub_process_id)

        wanted = list(dict.fromkeys(target_ids))
        for target_id in wanted:
            if target_id not in self._reverse[target_kind]:
                raise NotFoundError(target_kind.value, target_id)

        wanted_set = set(wanted)
        removed = [tid for tid in current if tid not in wanted_set]
        added = [tid for tid in wanted if tid not in current]

        for target_id in removed:
            self.unlink(sub_process_id, target_kind, target_id)
        for target_id in added:
            self.link(sub_process_id, target_kind, target_id)

        return added, removed

    # =========================================================================
    # Queries
    # =========================================================================

    def related_to(self, entity_id: str, target_kind: EntityKind,
                   source_kind: Optional[EntityKind] = None) -> List[str]:
        """
        Ids of ``target_kind`` related to an entity, in link order.

        Direct relationships come from the maps; process-level ones are
        unions over the owned sub-processes. For a system or vendor asked
        about the other leaf kind, the answer is every leaf travelling
        with it through a shared sub-process.
        """
        target_kind = EntityKind(target_kind)
        source_kind = EntityKind(source_kind) if source_kind else self.kind_of(entity_id)
        if source_kind is None or not self.has(source_kind, entity_id):
            return []

        if source_kind == EntityKind.PROCESS:
            if target_kind == EntityKind.SUB_PROCESS:
                return self.sub_processes_of(entity_id)
            if target_kind.is_leaf:
                return self._process_leaves(entity_id, target_kind)
            return []

        if source_kind == EntityKind.SUB_PROCESS:
            if target_kind == EntityKind.PROCESS:
                return [self._owner[entity_id]]
            if target_kind.is_leaf:
                return list(self._forward[target_kind][entity_id])
            return []

        sub_processes = list(self._reverse[source_kind][entity_id])
        if target_kind == EntityKind.SUB_PROCESS:
            return sub_processes
        if target_kind == EntityKind.PROCESS:
            return list(dict.fromkeys(self._owner[sp] for sp in sub_processes))

        leaves: IdSet = {}
        for sp in sub_processes:
            leaves.update(self._forward[target_kind][sp])
        if target_kind == source_kind:
            leaves.pop(entity_id, None)
        return list(leaves)

    def process_systems(self, process_id: str) -> List[str]:
        """Systems used by any sub-process of a process."""
        return self._process_leaves(process_id, EntityKind.SYSTEM)

    def process_vendors(self, process_id: str) -> List[str]:
        """Vendors used by any sub-process of a process."""
        return self._process_leaves(process_id, EntityKind.VENDOR)

    def _process_leaves(self, process_id: str, kind: EntityKind) -> List[str]:
        leaves: IdSet = {}
        for sp in self._children.get(process_id, {}):
            leaves.update(self._forward[kind][sp])
        return list(leaves)

    def link_count(self, kind: EntityKind) -> int:
        return sum(len(targets) for targets in self._forward[_leaf_kind(kind)].values())

    # =========================================================================
    # Cascades
    # =========================================================================

    def cascade_delete_entity(self, kind: EntityKind, entity_id: str) -> List[str]:
        """
        Drop an entity and every relationship that mentions it.

        Returns:
            Ids of the sub-processes dropped along with a process (a single
            id for a sub-process, empty for a system or vendor).
        """
        kind = EntityKind(kind)
        if not self.has(kind, entity_id):
            return []

        if kind == EntityKind.PROCESS:
            dropped = list(self._children[entity_id])
            for sp in dropped:
                self._drop_sub_process(sp)
            del self._children[entity_id]
            return dropped

        if kind == EntityKind.SUB_PROCESS:
            self._drop_sub_process(entity_id)
            return [entity_id]

        for sp in self._reverse[kind].pop(entity_id):
            del self._forward[kind][sp][entity_id]
        return []

    def _drop_sub_process(self, sub_process_id: str) -> None:
        for leaf_kind in LEAF_KINDS:
            for target_id in self._forward[leaf_kind].pop(sub_process_id):
                del self._reverse[leaf_kind][target_id][sub_process_id]
        owner = self._owner.pop(sub_process_id)
        del self._children[owner][sub_process_id]

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def check_integrity(self) -> List[str]:
        """
        List every broken invariant. An empty list means the index is sound.
        """
        problems = []
        for leaf_kind in LEAF_KINDS:
            forward = self._forward[leaf_kind]
            reverse = self._reverse[leaf_kind]
            for sp, targets in forward.items():
                if sp not in self._owner:
                    problems.append(f"forward {leaf_kind.value} set for unknown sub-process {sp}")
                for target_id in targets:
                    if sp not in reverse.get(target_id, {}):
                        problems.append(f"{sp} -> {target_id} has no reverse entry")
            for target_id, sps in reverse.items():
                for sp in sps:
                    if target_id not in forward.get(sp, {}):
                        problems.append(f"{target_id} <- {sp} has no forward entry")

        for sp, owner in self._owner.items():
            if sp not in self._children.get(owner, {}):
                problems.append(f"sub-process {sp} missing from owner {owner}")
        return problems

    def clear(self) -> None:
        self._children.clear()
        self._owner.clear()
        for leaf_kind in LEAF_KINDS:
            self._forward[leaf_kind].clear()
            self._reverse[leaf_kind].clear()


def _leaf_kind(kind: EntityKind) -> EntityKind:
    kind = EntityKind(kind)
    if not kind.is_leaf:
        raise ValidationError(f"Only systems and vendors can be linked, got {kind.value}")
    return kind
