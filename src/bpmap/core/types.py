"""
Core type definitions for bpmap.

Entities are modelled as one pydantic class per kind, discriminated by a
literal ``kind`` field, so every dispatch over entity kinds goes through
``EntityKind`` instead of free-form strings.
"""

from enum import StrEnum
from typing import Annotated, Dict, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class EntityKind(StrEnum):
    """The four collections held by the entity store."""
    PROCESS = "process"
    SUB_PROCESS = "sub-process"
    SYSTEM = "system"
    VENDOR = "vendor"

    @property
    def prefix(self) -> str:
        """Identifier prefix used when allocating new ids."""
        return ID_PREFIXES[self]

    @property
    def rank(self) -> int:
        """Display tier assigned by the projector."""
        return RANKS[self]

    @property
    def is_leaf(self) -> bool:
        """Systems and vendors are referenced but never own references."""
        return self in LEAF_KINDS

    @property
    def label(self) -> str:
        return self.value.replace("-", " ").title()


ID_PREFIXES: Dict[EntityKind, str] = {
    EntityKind.PROCESS: "p",
    EntityKind.SUB_PROCESS: "sp",
    EntityKind.SYSTEM: "s",
    EntityKind.VENDOR: "v",
}

RANKS: Dict[EntityKind, int] = {
    EntityKind.PROCESS: 1,
    EntityKind.SUB_PROCESS: 2,
    EntityKind.SYSTEM: 3,
    EntityKind.VENDOR: 4,
}

LEAF_KINDS = (EntityKind.SYSTEM, EntityKind.VENDOR)

ROOT_ID = "all"
ROOT_KIND = "all-process"
ROOT_RANK = 0


class Process(BaseModel):
    """Top-level unit of work."""
    id: str
    name: str
    kind: Literal[EntityKind.PROCESS] = EntityKind.PROCESS

    model_config = ConfigDict(validate_assignment=True)


class SubProcess(BaseModel):
    """
    Step of a process.

    Holds the actual links to systems and vendors (kept in the
    relationship index, not on the model).
    """
    id: str
    name: str
    owner_process_id: str
    kind: Literal[EntityKind.SUB_PROCESS] = EntityKind.SUB_PROCESS

    model_config = ConfigDict(validate_assignment=True)


class System(BaseModel):
    id: str
    name: str
    kind: Literal[EntityKind.SYSTEM] = EntityKind.SYSTEM

    model_config = ConfigDict(validate_assignment=True)


class Vendor(BaseModel):
    id: str
    name: str
    kind: Literal[EntityKind.VENDOR] = EntityKind.VENDOR

    model_config = ConfigDict(validate_assignment=True)


Entity = Annotated[
    Union[Process, SubProcess, System, Vendor],
    Field(discriminator="kind"),
]

ENTITY_CLASSES = {
    EntityKind.PROCESS: Process,
    EntityKind.SUB_PROCESS: SubProcess,
    EntityKind.SYSTEM: System,
    EntityKind.VENDOR: Vendor,
}


class EntityRef(BaseModel):
    """
    Hashable reference to an entity.

    Used as the focus of a projection and as the unit of navigation history.
    """
    id: str
    kind: EntityKind

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.id}"


class ProjectionNode(BaseModel):
    """A node of a projected view."""
    id: str
    name: str
    kind: Union[EntityKind, Literal["all-process"]]
    rank: int

    @property
    def is_root(self) -> bool:
        return self.kind == ROOT_KIND

    def ref(self) -> EntityRef | None:
        """Reference to the underlying entity, None for the synthetic root."""
        if self.is_root:
            return None
        return EntityRef(id=self.id, kind=self.kind)


class ProjectionLink(BaseModel):
    """Directed link from the higher tier to the lower tier."""
    source: str
    target: str


class Projection(BaseModel):
    """
    Focus-dependent node and link set derived from the full model.
    """
    nodes: List[ProjectionNode] = Field(default_factory=list)
    links: List[ProjectionLink] = Field(default_factory=list)
    focus: EntityRef | None = None

    @property
    def is_overview(self) -> bool:
        return self.focus is None

    def node_ids(self) -> List[str]:
        return [node.id for node in self.nodes]

    def get_node(self, node_id: str) -> ProjectionNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def link_pairs(self) -> List[tuple[str, str]]:
        return [(link.source, link.target) for link in self.links]

    def levels(self) -> Dict[int, List[str]]:
        """Group node ids by rank, preserving node order within a rank."""
        grouped: Dict[int, List[str]] = {}
        for node in self.nodes:
            grouped.setdefault(node.rank, []).append(node.id)
        return dict(sorted(grouped.items()))

    def to_dict(self) -> Dict:
        data = self.model_dump(mode="json")
        data["levels"] = {str(rank): ids for rank, ids in self.levels().items()}
        return data
