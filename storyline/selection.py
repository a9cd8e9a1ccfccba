# storyline/selection.py — which single event or arc the detail panel shows
# • Selecting one kind clears the other
# • deselect_all() also clears the "actively dragging" marker, never an in-flight date

import logging
from dataclasses import dataclass
from typing import Optional

from storyline.model import CharacterArc, Event

LOG = logging.getLogger("storyline")

EVENT = "event"
ARC = "arc"


@dataclass(frozen=True)
class SelectionSnapshot:
    event: Optional[Event] = None
    arc: Optional[CharacterArc] = None
    is_provisional: bool = False


class SelectionRouter:
    def __init__(self):
        self.event_id: Optional[str] = None
        self.arc_id: Optional[str] = None
        self.dragging_event_id: Optional[str] = None

    def select(self, kind: str, item_id: str):
        if kind == EVENT:
            self.event_id, self.arc_id = item_id, None
        elif kind == ARC:
            self.event_id, self.arc_id = None, item_id
        else:
            raise ValueError(f"unknown selection kind: {kind!r}")

    def toggle_event(self, event_id: str):
        if self.event_id == event_id:
            self.event_id = None
        else:
            self.select(EVENT, event_id)
            self.dragging_event_id = None

    def deselect_all(self):
        if self.event_id or self.arc_id or self.dragging_event_id:
            LOG.debug("deselect all (event=%s arc=%s dragging=%s)", self.event_id, self.arc_id, self.dragging_event_id)
        self.event_id = None
        self.arc_id = None
        self.dragging_event_id = None

    def mark_dragging(self, event_id: str):
        self.dragging_event_id = event_id
        if self.event_id != event_id:
            self.select(EVENT, event_id)

    def clear_dragging(self, event_id: Optional[str] = None):
        if event_id is None or self.dragging_event_id == event_id:
            self.dragging_event_id = None

    def forget(self, live_event_ids, live_arc_ids):
        """Drops references to events/arcs that disappeared; any dangling selection deselects all."""
        dangling = ((self.event_id is not None and self.event_id not in live_event_ids)
                    or (self.arc_id is not None and self.arc_id not in live_arc_ids)
                    or (self.dragging_event_id is not None and self.dragging_event_id not in live_event_ids))
        if dangling:
            LOG.debug("selection pruned: referenced item no longer exists")
            self.deselect_all()
        return dangling

    @property
    def is_provisional(self) -> bool:
        return self.event_id is not None and self.event_id == self.dragging_event_id
