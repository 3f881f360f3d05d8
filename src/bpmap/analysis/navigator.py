"""
Drill Navigator.

Focus/history state machine on top of the GraphProjector:

    overview -> focused -> focused -> ... -> overview

``focus_on`` extends the history by one level; ``drill_up`` and ``reset``
are the only ways back.
"""

import logging
from typing import Iterable, List, Optional

from ..core.types import ROOT_ID, EntityKind, EntityRef, Projection
from .projection import GraphProjector

logger = logging.getLogger(__name__)


class DrillNavigator:
    """
    Tracks the current focus and the path of foci that led to it.

    The navigator subscribes to its store's delete notifications so that
    it never keeps a reference to a removed entity.
    """

    def __init__(self, projector: GraphProjector):
        self.projector = projector
        self.current: Optional[EntityRef] = None
        self.history: List[EntityRef] = []
        projector.store.subscribe(self.on_entity_deleted)

    @property
    def depth(self) -> int:
        """0 in the overview, 1 + history length when focused."""
        return 0 if self.current is None else len(self.history) + 1

    def focus_on(self, entity_id: str, kind: EntityKind) -> None:
        """
        Drill into an entity.

        Focusing the synthetic root resets to the overview. Any other
        target pushes the current focus onto the history, even when the
        target is already current.
        """
        if entity_id == ROOT_ID:
            self.reset()
            return

        target = EntityRef(id=entity_id, kind=kind)
        if self.current is not None:
            self.history.append(self.current)
        self.current = target
        logger.debug("Focus -> %s (depth %d)", target, self.depth)

    def drill_up(self) -> Optional[EntityRef]:
        """Return to the previous focus, or to the overview when there is none."""
        self.current = self.history.pop() if self.history else None
        logger.debug("Drill up -> %s", self.current or "overview")
        return self.current

    def reset(self) -> None:
        self.history.clear()
        self.current = None

    def on_entity_deleted(self, entity_id: str, kind: EntityKind) -> None:
        """
        Reset when the deleted entity is on the navigation path.

        Deleting a process announces each of its sub-processes too, so a
        path running through a sub-process of that process resets as well.
        """
        deleted = EntityRef(id=entity_id, kind=kind)
        if deleted in self.breadcrumbs():
            logger.info("Focused entity %s was deleted, returning to overview", deleted)
            self.reset()

    def breadcrumbs(self) -> List[EntityRef]:
        """The navigation path from the first focus to the current one."""
        if self.current is None:
            return []
        return [*self.history, self.current]

    def view(self, hide: Iterable[EntityKind] = ()) -> Projection:
        """Projection of the current focus."""
        return self.projector.project(self.current, hide=hide)

    def detach(self) -> None:
        self.projector.store.unsubscribe(self.on_entity_deleted)
