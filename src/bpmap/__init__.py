"""
bpmap - Business Process Map.

Models an enterprise as processes, their sub-processes, and the systems and
vendors each sub-process depends on, then projects that model into
drill-down graph views.

Key Components:
- core: Entity types, the entity store, the relationship index, storage
- analysis: Graph projection, drill-down navigation, entity details
- graph: DOT / HTML / JSON export
- cli: The `bpmap` command line

Usage:
    from bpmap import EntityStore, GraphProjector

    store = EntityStore.from_snapshot(snapshot)
    projection = GraphProjector(store).project(EntityRef(id="sp1", kind="sub-process"))
"""

__version__ = "0.1.0"

from .analysis.navigator import DrillNavigator
from .analysis.projection import GraphProjector
from .core.exceptions import BpmapError, NotFoundError, ValidationError
from .core.relationships import RelationshipIndex
from .core.store import EntityStore
from .core.types import EntityKind, EntityRef, Projection

__all__ = [
    "__version__",
    "EntityStore",
    "RelationshipIndex",
    "GraphProjector",
    "DrillNavigator",
    "EntityKind",
    "EntityRef",
    "Projection",
    "BpmapError",
    "ValidationError",
    "NotFoundError",
]
