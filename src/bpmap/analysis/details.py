"""
Entity Details.

Read model behind the detail panel: for any entity, what it belongs to and
what it is connected to, resolved to names.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..core.store import EntityStore
from ..core.types import EntityKind, EntityRef


class RelatedEntity(BaseModel):
    id: str
    name: str
    kind: EntityKind

    def ref(self) -> EntityRef:
        return EntityRef(id=self.id, kind=self.kind)


class EntityDetails(BaseModel):
    """Everything directly or derivedly related to one entity."""
    entity: RelatedEntity
    owner: Optional[RelatedEntity] = None
    processes: List[RelatedEntity] = Field(default_factory=list)
    sub_processes: List[RelatedEntity] = Field(default_factory=list)
    systems: List[RelatedEntity] = Field(default_factory=list)
    vendors: List[RelatedEntity] = Field(default_factory=list)

    def related(self) -> List[EntityRef]:
        """Every related entity, owner first, without duplicates."""
        refs = [self.owner.ref()] if self.owner else []
        for group in (self.processes, self.sub_processes, self.systems, self.vendors):
            refs.extend(item.ref() for item in group)
        return list(dict.fromkeys(refs))


def describe(store: EntityStore, ref: EntityRef) -> EntityDetails:
    """
    Build the details of an entity.

    - process: its sub-processes and the systems/vendors they use
    - sub-process: its owner and its systems/vendors
    - system/vendor: the sub-processes using it, their processes, and the
      other leaf kind travelling through those sub-processes

    Raises:
        NotFoundError: If the entity does not exist.
    """
    entity = store.require(ref.kind, ref.id)
    kind = EntityKind(ref.kind)
    index = store.index
    details = EntityDetails(entity=_entry(store, kind, entity.id))

    def resolve(target_kind: EntityKind) -> List[RelatedEntity]:
        ids = index.related_to(entity.id, target_kind, kind)
        return [_entry(store, target_kind, target_id) for target_id in ids]

    if kind == EntityKind.PROCESS:
        details.sub_processes = resolve(EntityKind.SUB_PROCESS)
        details.systems = resolve(EntityKind.SYSTEM)
        details.vendors = resolve(EntityKind.VENDOR)
    elif kind == EntityKind.SUB_PROCESS:
        details.owner = _entry(store, EntityKind.PROCESS, entity.owner_process_id)
        details.systems = resolve(EntityKind.SYSTEM)
        details.vendors = resolve(EntityKind.VENDOR)
    else:
        details.sub_processes = resolve(EntityKind.SUB_PROCESS)
        details.processes = resolve(EntityKind.PROCESS)
        if kind == EntityKind.SYSTEM:
            details.vendors = resolve(EntityKind.VENDOR)
        else:
            details.systems = resolve(EntityKind.SYSTEM)
    return details


def _entry(store: EntityStore, kind: EntityKind, entity_id: str) -> RelatedEntity:
    entity = store.require(kind, entity_id)
    return RelatedEntity(id=entity.id, name=entity.name, kind=kind)
