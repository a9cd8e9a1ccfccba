# storyline/engine.py — timeline layout & interaction engine
# • Composes lane allocation, date range, zoom, drag and selection around one active project
# • Holds no subscriptions: the host calls on_data_changed() / recompute() when its data or viewport changes
# • Commit failures become notices the host shows without blocking

import logging
from datetime import date, timedelta
from typing import Optional

from storyline.axis import range_days
from storyline.config import LayoutMetrics, ZoomLimits
from storyline.drag import DragController, DragOutcome
from storyline.ids import new_id
from storyline.lanes import allocate_lanes
from storyline.layout import TimelineLayout, build_layout, visible_date_range
from storyline.model import Event
from storyline.selection import ARC, EVENT, SelectionRouter, SelectionSnapshot
from storyline.zoom import ZoomController

LOG = logging.getLogger("storyline")

DEFAULT_VIEWPORT_WIDTH = 1200


class TimelineEngine:
    def __init__(self, store, project_id: str, metrics: Optional[LayoutMetrics] = None,
                 limits: Optional[ZoomLimits] = None, today: Optional[date] = None):
        self.store = store
        self.project_id = project_id
        self.metrics = metrics or LayoutMetrics()
        self.zoom = ZoomController(limits)
        self.selection = SelectionRouter()
        self.drags = DragController(store)
        self.viewport_width = DEFAULT_VIEWPORT_WIDTH
        self.layout: Optional[TimelineLayout] = None
        self._today = today
        self._notices = []
        self.reload()

    # ---------- data ----------
    def reload(self):
        self.events = self.store.fetch_events(self.project_id)
        self.characters = self.store.fetch_characters(self.project_id)
        self.arcs = self.store.fetch_arcs(self.project_id)
        self._events_by_id = {e.id: e for e in self.events}
        self._arcs_by_id = {a.id: a for a in self.arcs}

    def on_data_changed(self):
        """Re-fetch and drop selection/drag state that points at vanished events or arcs."""
        self.reload()
        for event_id in self.drags.event_ids():
            if event_id not in self._events_by_id:
                self.drags.discard(event_id)
        self.selection.forget(self._events_by_id.keys(), self._arcs_by_id.keys())

    def event(self, event_id: str) -> Event:
        try:
            return self._events_by_id[event_id]
        except KeyError:
            raise KeyError(f"unknown event {event_id!r} in project {self.project_id!r}") from None

    def date_range(self):
        return visible_date_range(self.events, self.arcs, self.characters,
                                  self._events_by_id, today=self._today)

    # ---------- layout ----------
    def pixels_per_day_for(self, date_range, viewport_width: float) -> float:
        days = range_days(*date_range)
        return self.zoom.effective_pixels_per_day(self.metrics.available_width(viewport_width), days)

    def recompute(self, viewport_width: Optional[float] = None) -> Optional[TimelineLayout]:
        if viewport_width is not None:
            self.viewport_width = viewport_width
        rng = self.date_range()
        if rng is None:
            self.layout = None
            return None
        assignment = allocate_lanes(self.characters, self.events)
        self.layout = build_layout(
            self.events, self.arcs, assignment, rng,
            self.pixels_per_day_for(rng, self.viewport_width),
            self.viewport_width, self.metrics,
            selected_event_id=self.selection.event_id,
            selected_arc_id=self.selection.arc_id,
            dragging_event_id=self.selection.dragging_event_id,
            event_lookup=self._events_by_id,
        )
        return self.layout

    @property
    def current_pixels_per_day(self) -> float:
        if self.layout is not None:
            return self.layout.pixels_per_day
        rng = self.date_range()
        if rng is None:
            return self.zoom.display_pixels_per_day
        return self.pixels_per_day_for(rng, self.viewport_width)

    # ---------- zoom ----------
    def zoom_in(self):
        return self.zoom.zoom_in()

    def zoom_out(self):
        return self.zoom.zoom_out()

    def begin_magnify(self):
        self.zoom.begin_magnify()

    def update_magnify(self, multiplier: float):
        return self.zoom.update_magnify(multiplier)

    def end_magnify(self, multiplier: Optional[float] = None):
        return self.zoom.end_magnify(multiplier)

    def cancel_magnify(self):
        self.zoom.cancel_magnify()

    # ---------- drag ----------
    def begin_drag(self, event_id: str) -> bool:
        ev = self.event(event_id)
        if not self.drags.begin(ev, self.current_pixels_per_day):
            return False
        self.selection.mark_dragging(event_id)
        return True

    def drag_moved(self, event_id: str, translation_x: float):
        ev = self.event(event_id)
        provisional = self.drags.move(ev, translation_x, self.current_pixels_per_day)
        if provisional is not None:
            self.selection.mark_dragging(event_id)
        return provisional

    def drag_released(self, event_id: str, translation_x: float) -> Optional[DragOutcome]:
        ev = self.event(event_id)
        try:
            outcome = self.drags.release(ev, translation_x)
        finally:
            self.selection.clear_dragging(event_id)
        if outcome is not None and not outcome.committed:
            self._notices.append(
                f"Couldn't save the new date for “{ev.title}”; it was moved back to {outcome.final_date:%b %d, %Y}."
            )
        return outcome

    # ---------- selection ----------
    def select(self, kind: str, item_id: str):
        known = self._events_by_id if kind == EVENT else self._arcs_by_id
        if kind in (EVENT, ARC) and item_id not in known:
            raise KeyError(f"unknown {kind} {item_id!r}")
        self.selection.select(kind, item_id)

    def tap_event(self, event_id: str):
        self.event(event_id)
        self.selection.toggle_event(event_id)

    def tap_arc(self, arc_id: str):
        self.select(ARC, arc_id)

    def tap_background(self):
        self.selection.deselect_all()

    def request_deselect(self):
        self.selection.deselect_all()

    def navigate_away(self):
        self.selection.deselect_all()

    def switch_project(self, project_id: str):
        self.selection.deselect_all()
        self.project_id = project_id
        self.layout = None
        self.reload()
        LOG.info("Timeline switched to project %s", project_id)

    def current_selection(self) -> SelectionSnapshot:
        ev = self._events_by_id.get(self.selection.event_id) if self.selection.event_id else None
        arc = self._arcs_by_id.get(self.selection.arc_id) if self.selection.arc_id else None
        return SelectionSnapshot(event=ev, arc=arc, is_provisional=self.selection.is_provisional)

    # ---------- host actions ----------
    def add_new_event(self, title: str = "New Event") -> Event:
        rng = self.date_range()
        if rng is not None:
            start, end = rng
            day = start + timedelta(days=(end - start).days // 2)
        else:
            day = self._today or date.today()
        ev = self.store.add_event(Event(id=new_id(), title=title, date=day, project_id=self.project_id))
        self.reload()
        self.selection.select(EVENT, ev.id)
        LOG.info("Added event %s on %s", ev.id, day)
        return ev

    def drain_notices(self):
        out, self._notices = self._notices, []
        return out

    def snapshot(self) -> dict:
        lay = self.layout
        return {
            "project_id": self.project_id,
            "events": len(self.events),
            "characters": len(self.characters),
            "arcs": len(self.arcs),
            "pixels_per_day": self.zoom.pixels_per_day,
            "effective_pixels_per_day": lay.pixels_per_day if lay else None,
            "range": [lay.range_start.isoformat(), lay.range_end.isoformat()] if lay else None,
            "blocks": len(lay.blocks) if lay else 0,
            "arc_bars": len(lay.arcs) if lay else 0,
            "selected_event_id": self.selection.event_id,
            "selected_arc_id": self.selection.arc_id,
            "dragging_event_id": self.selection.dragging_event_id,
            "store_revision": self.store.revision,
        }
