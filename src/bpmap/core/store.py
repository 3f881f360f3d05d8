"""
Entity Store.

Holds the four entity collections (processes, sub-processes, systems,
vendors) in insertion order and owns the RelationshipIndex that links them.
The store is the single mutation entry point for entities: creating,
renaming and deleting go through here so that the index and any
subscribed navigators stay consistent.
"""

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional

from .exceptions import NotFoundError, ValidationError
from .relationships import RelationshipIndex
from .snapshot import NamedRecord, ProcessRecord, Snapshot, SubProcessRecord
from .types import ENTITY_CLASSES, LEAF_KINDS, ROOT_ID, Entity, EntityKind, EntityRef

logger = logging.getLogger(__name__)

DeleteListener = Callable[[str, EntityKind], None]


class EntityStore:
    """
    In-memory model of processes and the systems and vendors behind them.

    The store never performs I/O. Hosts hydrate it with ``load`` and
    persist it from ``export``.
    """

    def __init__(self, index: Optional[RelationshipIndex] = None):
        self.index = index if index is not None else RelationshipIndex()
        self._entities: Dict[EntityKind, Dict[str, Entity]] = {kind: {} for kind in EntityKind}
        self._retired: Dict[EntityKind, int] = {kind: 0 for kind in EntityKind}
        self._listeners: List[DeleteListener] = []

    @classmethod
    def from_snapshot(cls, snapshot: Any) -> "EntityStore":
        store = cls()
        store.load(snapshot)
        return store

    # =========================================================================
    # Entity Management
    # =========================================================================

    def create(self, kind: EntityKind, name: str,
               owner_process_id: Optional[str] = None) -> str:
        """
        Create an entity and return its freshly allocated id.

        Raises:
            ValidationError: On an empty name, a sub-process whose owner is
                not a live process, or an owner given for any other kind.
        """
        kind = _as_kind(kind)
        name = _clean_name(name)

        if kind == EntityKind.SUB_PROCESS:
            if owner_process_id is None or self.get(EntityKind.PROCESS, owner_process_id) is None:
                raise ValidationError(
                    f"A sub-process needs an existing owner process, got {owner_process_id!r}"
                )
        elif owner_process_id is not None:
            raise ValidationError(f"A {kind.value} cannot have an owner process")

        entity_id = self.id_for(kind)
        self._insert(kind, entity_id, name, owner_process_id)
        logger.debug("Created %s %s (%s)", kind.value, entity_id, name)
        return entity_id

    def rename(self, kind: EntityKind, entity_id: str, new_name: str) -> None:
        """Rename an entity in place; its id and relationships are untouched."""
        entity = self.require(kind, entity_id)
        entity.name = _clean_name(new_name)
        logger.debug("Renamed %s %s to %s", entity.kind.value, entity_id, entity.name)

    def delete(self, kind: EntityKind, entity_id: str) -> None:
        """
        Delete an entity and everything that depends on it.

        Deleting a process deletes its sub-processes; deleting a
        sub-process, system or vendor unlinks it everywhere. Subscribers are
        told about every removed entity, owned sub-processes first.
        """
        kind = _as_kind(kind)
        self.require(kind, entity_id)

        dropped = self.index.cascade_delete_entity(kind, entity_id)
        removed: List[EntityRef] = []
        if kind == EntityKind.PROCESS:
            for sp in dropped:
                self._remove(EntityKind.SUB_PROCESS, sp)
                removed.append(EntityRef(id=sp, kind=EntityKind.SUB_PROCESS))
        self._remove(kind, entity_id)
        removed.append(EntityRef(id=entity_id, kind=kind))

        logger.debug("Deleted %s %s (cascade: %s)", kind.value, entity_id, dropped)
        for ref in removed:
            self._notify(ref)

    def get(self, kind: EntityKind, entity_id: str) -> Optional[Entity]:
        return self._entities[_as_kind(kind)].get(entity_id)

    def require(self, kind: EntityKind, entity_id: str) -> Entity:
        """Like ``get`` but raises NotFoundError for a missing entity."""
        kind = _as_kind(kind)
        entity = self._entities[kind].get(entity_id)
        if entity is None:
            raise NotFoundError(kind.value, entity_id)
        return entity

    def has(self, kind: EntityKind, entity_id: str) -> bool:
        return entity_id in self._entities[_as_kind(kind)]

    def list(self, kind: EntityKind) -> List[Entity]:
        """Entities of one kind in insertion order."""
        return list(self._entities[_as_kind(kind)].values())

    def find(self, entity_id: str) -> List[EntityRef]:
        """Every kind holding an entity with this id."""
        return [
            EntityRef(id=entity_id, kind=kind)
            for kind in EntityKind
            if entity_id in self._entities[kind]
        ]

    def refs(self) -> Iterator[EntityRef]:
        for kind in EntityKind:
            for entity_id in self._entities[kind]:
                yield EntityRef(id=entity_id, kind=kind)

    def sub_processes_of(self, process_id: str) -> List[Entity]:
        return [
            self._entities[EntityKind.SUB_PROCESS][sp]
            for sp in self.index.sub_processes_of(process_id)
        ]

    def owner_of(self, sub_process_id: str) -> Optional[Entity]:
        owner_id = self.index.owner_of(sub_process_id)
        if owner_id is None:
            return None
        return self._entities[EntityKind.PROCESS].get(owner_id)

    def id_for(self, kind: EntityKind) -> str:
        """
        Next free id for a kind.

        Scans the numeric suffix of every existing id of that kind and of
        ids deleted earlier in this session, then adds one. Ids a loaded
        snapshot gave to another kind are skipped.
        """
        kind = _as_kind(kind)
        highest = self._retired[kind]
        for entity_id in self._entities[kind]:
            suffix = _numeric_suffix(entity_id, kind.prefix)
            if suffix is not None and suffix > highest:
                highest = suffix
        candidate = f"{kind.prefix}{highest + 1}"
        while self.find(candidate):
            highest += 1
            candidate = f"{kind.prefix}{highest + 1}"
        return candidate

    # =========================================================================
    # Links
    # =========================================================================

    def set_links(self, sub_process_id: str, target_kind: EntityKind,
                  target_ids) -> tuple[List[str], List[str]]:
        """Replace the systems or vendors of a sub-process (see RelationshipIndex)."""
        self.require(EntityKind.SUB_PROCESS, sub_process_id)
        added, removed = self.index.set_links(sub_process_id, target_kind, target_ids)
        logger.debug("Links of %s: +%s -%s", sub_process_id, added, removed)
        return added, removed

    # =========================================================================
    # Subscriptions
    # =========================================================================

    def subscribe(self, listener: DeleteListener) -> None:
        """Call ``listener(entity_id, kind)`` after every entity removal."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: DeleteListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, ref: EntityRef) -> None:
        for listener in list(self._listeners):
            listener(ref.id, ref.kind)

    # =========================================================================
    # Snapshot Boundary
    # =========================================================================

    def load(self, snapshot: Any) -> None:
        """
        Replace the whole state with a snapshot.

        Links to unknown ids are dropped with a warning. Malformed
        snapshots raise ValidationError and leave the store untouched.
        """
        parsed = Snapshot.parse(snapshot)
        staging = EntityStore()
        staging._populate(parsed)

        previous = set(self.refs())
        for kind in EntityKind:
            for entity_id in self._entities[kind]:
                self._retire(kind, entity_id)
        self.index = staging.index
        self._entities = staging._entities

        current = set(self.refs())
        logger.info("Loaded snapshot: %s", self.stats())
        for ref in sorted(previous - current, key=str):
            self._notify(ref)

    def export(self) -> Dict[str, Any]:
        """Serialize the store to a snapshot dict in insertion order."""
        processes = []
        for process in self.list(EntityKind.PROCESS):
            sub_processes = [
                SubProcessRecord(
                    id=sp.id,
                    name=sp.name,
                    systems=self.index.related_to(sp.id, EntityKind.SYSTEM, EntityKind.SUB_PROCESS),
                    vendors=self.index.related_to(sp.id, EntityKind.VENDOR, EntityKind.SUB_PROCESS),
                )
                for sp in self.sub_processes_of(process.id)
            ]
            processes.append(ProcessRecord(id=process.id, name=process.name, sub_processes=sub_processes))

        snapshot = Snapshot(
            processes=processes,
            systems=[NamedRecord(id=e.id, name=e.name) for e in self.list(EntityKind.SYSTEM)],
            vendors=[NamedRecord(id=e.id, name=e.name) for e in self.list(EntityKind.VENDOR)],
        )
        return snapshot.to_dict()

    def _populate(self, snapshot: Snapshot) -> None:
        for kind, records in ((EntityKind.SYSTEM, snapshot.systems),
                              (EntityKind.VENDOR, snapshot.vendors)):
            for record in records:
                self._insert_loaded(kind, record.id, record.name)

        flat: List[ProcessRecord] = []
        for record in snapshot.processes:
            self._insert_loaded(EntityKind.PROCESS, record.id, record.name)
            if record.is_flat:
                flat.append(record)
                continue
            for sub in record.sub_processes:
                self._insert_loaded(EntityKind.SUB_PROCESS, sub.id, sub.name, record.id)
                self._link_loaded(sub)

        # Implicit sub-processes get ids only after every explicit one exists.
        for record in flat:
            sub = SubProcessRecord(
                id=self.id_for(EntityKind.SUB_PROCESS),
                name=record.name,
                systems=record.systems or [],
                vendors=record.vendors or [],
            )
            self._insert_loaded(EntityKind.SUB_PROCESS, sub.id, sub.name, record.id)
            self._link_loaded(sub)

    def _insert_loaded(self, kind: EntityKind, entity_id: str, name: str,
                       owner_process_id: Optional[str] = None) -> None:
        if entity_id == ROOT_ID:
            raise ValidationError(f"Reserved id in snapshot: {entity_id}")
        if entity_id in self._entities[kind]:
            raise ValidationError(f"Duplicate {kind.value} id in snapshot: {entity_id}")
        # Projections and links address entities by bare id.
        taken = self.find(entity_id)
        if taken:
            raise ValidationError(
                f"Id {entity_id} of {kind.value} is already used by a {taken[0].kind.value}"
            )
        self._insert(kind, entity_id, name, owner_process_id)

    def _link_loaded(self, sub: SubProcessRecord) -> None:
        for kind, target_ids in ((EntityKind.SYSTEM, sub.systems),
                                 (EntityKind.VENDOR, sub.vendors)):
            for target_id in target_ids:
                if not self.index.has(kind, target_id):
                    logger.warning(
                        "Dropping unknown %s reference %s from sub-process %s",
                        kind.value, target_id, sub.id,
                    )
                    continue
                self.index.link(sub.id, kind, target_id)

    # =========================================================================
    # Internals
    # =========================================================================

    def _insert(self, kind: EntityKind, entity_id: str, name: str,
                owner_process_id: Optional[str]) -> None:
        self.index.register(kind, entity_id, owner_process_id)
        fields = {"id": entity_id, "name": name}
        if kind == EntityKind.SUB_PROCESS:
            fields["owner_process_id"] = owner_process_id
        self._entities[kind][entity_id] = ENTITY_CLASSES[kind](**fields)

    def _remove(self, kind: EntityKind, entity_id: str) -> None:
        del self._entities[kind][entity_id]
        self._retire(kind, entity_id)

    def _retire(self, kind: EntityKind, entity_id: str) -> None:
        suffix = _numeric_suffix(entity_id, kind.prefix)
        if suffix is not None and suffix > self._retired[kind]:
            self._retired[kind] = suffix

    def stats(self) -> Dict[str, int]:
        counts = {kind.value: len(self._entities[kind]) for kind in EntityKind}
        for kind in LEAF_KINDS:
            counts[f"{kind.value}_links"] = self.index.link_count(kind)
        return counts

    def __len__(self) -> int:
        return sum(len(entities) for entities in self._entities.values())


def _as_kind(kind: Any) -> EntityKind:
    try:
        return EntityKind(kind)
    except ValueError as e:
        raise ValidationError(f"Unknown entity kind: {kind!r}") from e


def _clean_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Name must not be empty")
    return cleaned


def _numeric_suffix(entity_id: str, prefix: str) -> Optional[int]:
    if not entity_id.startswith(prefix):
        return None
    digits = entity_id[len(prefix):]
    return int(digits) if digits.isdigit() else None
