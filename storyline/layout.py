# storyline/layout.py — screen geometry for every event block and arc bar
# • Full recomputation on each pass; no incremental diffing
# • One block per participant (same event id, independent lanes)
# • Malformed data is clamped, never raised

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Tuple

from storyline.axis import AxisTick, axis_ticks, range_days, x_position
from storyline.config import (
    DEFAULT_EVENT_COLOR, EMPTY_WINDOW_AFTER_DAYS, EMPTY_WINDOW_BEFORE_DAYS,
    MIN_RANGE_DAYS, RANGE_PADDING_DAYS, LayoutMetrics,
)
from storyline.lanes import Lane, LaneAssignment, content_height, participant_lanes

LOG = logging.getLogger("storyline")


@dataclass(frozen=True)
class EventBlock:
    visual_id: str
    event_id: str
    lane_index: int
    character_id: str
    x: float
    y: float
    width: float
    height: float
    color: str
    title: str
    day: date
    is_instantaneous: bool
    is_selected: bool = False
    is_dragging: bool = False


@dataclass(frozen=True)
class ArcBar:
    arc_id: str
    character_id: str
    lane_index: int
    x: float
    y: float
    width: float
    height: float
    color: str
    name: str
    peak_x: Optional[float] = None
    is_selected: bool = False


@dataclass(frozen=True)
class TimelineLayout:
    range_start: date
    range_end: date
    pixels_per_day: float
    content_width: float
    total_width: float
    content_height: float
    lanes: Tuple[Lane, ...]
    blocks: Tuple[EventBlock, ...]
    arcs: Tuple[ArcBar, ...]
    ticks: Tuple[AxisTick, ...]

    @property
    def day_count(self) -> int:
        return range_days(self.range_start, self.range_end)

    def blocks_for(self, event_id: str):
        return [b for b in self.blocks if b.event_id == event_id]


def _arc_events(arc, event_lookup):
    get = event_lookup.get
    return (
        get(arc.start_event_id) if arc.start_event_id else None,
        get(arc.peak_event_id) if arc.peak_event_id else None,
        get(arc.end_event_id) if arc.end_event_id else None,
    )


def visible_date_range(events, arcs, characters, event_lookup=None, today: Optional[date] = None):
    """Padded [start, end] over event and arc dates, or None when there is nothing to show."""
    lookup = event_lookup if event_lookup is not None else {e.id: e for e in events}
    days = []
    for ev in events:
        days.append(ev.date)
        days.append(ev.end_date)
    for arc in arcs:
        start_ev, peak_ev, end_ev = _arc_events(arc, lookup)
        if start_ev is not None:
            days.append(start_ev.date)
        if peak_ev is not None:
            days.append(peak_ev.date)
        if end_ev is not None:
            days.append(end_ev.date)
            days.append(end_ev.end_date)

    if not days:
        if not characters:
            return None
        today = today or date.today()
        return (today - timedelta(days=EMPTY_WINDOW_BEFORE_DAYS),
                today + timedelta(days=EMPTY_WINDOW_AFTER_DAYS))

    start = min(days) - timedelta(days=RANGE_PADDING_DAYS)
    end = max(days) + timedelta(days=RANGE_PADDING_DAYS)
    if (end - start).days < MIN_RANGE_DAYS:
        end = start + timedelta(days=MIN_RANGE_DAYS)
    return start, end


def block_width(duration_days: int, pixels_per_day: float, metrics: LayoutMetrics) -> float:
    if int(duration_days) == 0:
        return metrics.instantaneous_width
    return max(int(duration_days) * pixels_per_day, pixels_per_day)


def build_event_blocks(events, assignment: LaneAssignment, range_start: date, ppd: float,
                       metrics: LayoutMetrics, selected_event_id=None, dragging_event_id=None):
    blocks = []
    for ev in events:
        x = metrics.content_left + x_position(ev.date, range_start, ppd)
        width = block_width(ev.duration_days, ppd, metrics)
        placements = participant_lanes(ev, assignment.index_by_character)
        if not placements:
            if assignment.general_index is None:
                continue
            placements = [("", assignment.general_index)]
        for character_id, lane_index in placements:
            lane = assignment.lanes[lane_index]
            top = metrics.lane_top(lane_index)
            blocks.append(EventBlock(
                visual_id=f"{ev.id}:{character_id or 'general'}",
                event_id=ev.id,
                lane_index=lane_index,
                character_id=character_id,
                x=x,
                y=top + metrics.lane_height * metrics.block_offset_fraction,
                width=width,
                height=metrics.block_height,
                color=ev.color or lane.color or DEFAULT_EVENT_COLOR,
                title=ev.title or "Untitled Event",
                day=ev.date,
                is_instantaneous=ev.is_instantaneous,
                is_selected=(ev.id == selected_event_id),
                is_dragging=(ev.id == dragging_event_id),
            ))
    return blocks


def build_arc_bars(arcs, event_lookup, assignment: LaneAssignment, range_start: date, ppd: float,
                   metrics: LayoutMetrics, selected_arc_id=None):
    bars = []
    for arc in arcs:
        start_ev, peak_ev, end_ev = _arc_events(arc, event_lookup)
        if start_ev is None or end_ev is None:
            continue
        lane_index = assignment.lane_for(arc.character_id)
        if lane_index is None:
            LOG.debug("arc %s skipped: character %s has no lane", arc.id, arc.character_id)
            continue
        start_x = metrics.content_left + x_position(start_ev.date, range_start, ppd)
        end_x = metrics.content_left + x_position(end_ev.end_date, range_start, ppd)
        peak_x = None
        if peak_ev is not None:
            px = metrics.content_left + x_position(peak_ev.date, range_start, ppd)
            if start_x <= px <= end_x:
                peak_x = px
        lane = assignment.lanes[lane_index]
        bars.append(ArcBar(
            arc_id=arc.id,
            character_id=arc.character_id,
            lane_index=lane_index,
            x=start_x,
            y=metrics.lane_top(lane_index) + metrics.arc_top_offset,
            width=max(end_x - start_x, metrics.min_arc_width),
            height=metrics.arc_height,
            color=lane.color or DEFAULT_EVENT_COLOR,
            name=arc.name or "Untitled Arc",
            peak_x=peak_x,
            is_selected=(arc.id == selected_arc_id),
        ))
    return bars


def build_layout(events, arcs, assignment: LaneAssignment, date_range, pixels_per_day: float,
                 viewport_width: float, metrics: Optional[LayoutMetrics] = None,
                 selected_event_id=None, selected_arc_id=None, dragging_event_id=None,
                 event_lookup=None) -> TimelineLayout:
    metrics = metrics or LayoutMetrics()
    start, end = date_range
    lookup = event_lookup if event_lookup is not None else {e.id: e for e in events}
    content_width = range_days(start, end) * pixels_per_day
    total_width = max(viewport_width, content_width + metrics.lane_header_width + 2 * metrics.horizontal_padding)
    return TimelineLayout(
        range_start=start,
        range_end=end,
        pixels_per_day=pixels_per_day,
        content_width=content_width,
        total_width=total_width,
        content_height=content_height(assignment, metrics),
        lanes=assignment.lanes,
        blocks=tuple(build_event_blocks(events, assignment, start, pixels_per_day, metrics,
                                        selected_event_id, dragging_event_id)),
        arcs=tuple(build_arc_bars(arcs, lookup, assignment, start, pixels_per_day, metrics, selected_arc_id)),
        ticks=tuple(axis_ticks(start, end, pixels_per_day)),
    )
