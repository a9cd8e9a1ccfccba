"""
Timeline engine tests.

End-to-end scenarios through the facade: layout, fan-out, drag with commit
and rollback, selection routing and reaction to external deletes.
"""

from datetime import date, timedelta

import pytest

from conftest import add_arc, add_event, day
from storyline.config import LayoutMetrics
from storyline.engine import TimelineEngine
from storyline.selection import ARC, EVENT
from storyline.store import ProjectStore

M = LayoutMetrics()


class FailingStore(ProjectStore):
    def _write(self):
        raise OSError("read-only file system")


def x_of(layout, d):
    return M.content_left + (d - layout.range_start).days * layout.pixels_per_day


@pytest.fixture
def engine(store, tea_party):
    eng = TimelineEngine(store, "p1", today=date(2024, 1, 1))
    eng.recompute(800)
    return eng


# =============================================================================
# LAYOUT THROUGH THE ENGINE
# =============================================================================

class TestRecompute:

    def test_tea_party_renders_one_block_per_participant(self, engine):
        lay = engine.layout
        blocks = sorted(lay.blocks_for("tea"), key=lambda b: b.lane_index)
        assert [b.lane_index for b in blocks] == [0, 1]
        assert [b.character_id for b in blocks] == ["alice", "bob"]
        assert all(b.width == 8 for b in blocks)
        assert blocks[0].x == blocks[1].x == x_of(lay, day(5))

    def test_effective_zoom_fills_the_viewport(self, engine):
        lay = engine.recompute(2000)
        available = M.available_width(2000)
        assert lay.pixels_per_day * lay.day_count >= available - 1e-9
        assert lay.pixels_per_day > engine.zoom.pixels_per_day

    def test_zoom_in_widens_content(self, store):
        for n in range(0, 60, 5):
            add_event(store, f"e{n}", n, participants=["alice"])
        eng = TimelineEngine(store, "p1")
        before = eng.recompute(800).content_width
        eng.zoom_in()
        assert eng.recompute().content_width == pytest.approx(before * 1.4)

    def test_magnify_preview_and_cancel(self, store):
        for n in range(0, 60, 5):
            add_event(store, f"e{n}", n)
        eng = TimelineEngine(store, "p1")
        eng.begin_magnify()
        eng.update_magnify(2)
        assert eng.recompute(800).pixels_per_day == 120
        eng.cancel_magnify()
        assert eng.recompute().pixels_per_day == 60
        eng.begin_magnify()
        eng.end_magnify(0.5)
        assert eng.zoom.pixels_per_day == 30

    def test_no_project_data_gives_no_layout(self):
        s = ProjectStore()
        s.add_project("Empty", project_id="p1")
        assert TimelineEngine(s, "p1").recompute(800) is None

    def test_characters_without_events_use_default_window(self, store):
        eng = TimelineEngine(store, "p1", today=date(2024, 6, 15))
        lay = eng.recompute(800)
        assert (lay.range_start, lay.range_end) == (date(2024, 6, 14), date(2024, 7, 14))
        assert len(lay.lanes) == 2
        assert lay.blocks == ()


# =============================================================================
# DRAG
# =============================================================================

class TestDragThroughEngine:

    def test_dragging_either_copy_moves_both(self, engine, store):
        ppd = engine.layout.pixels_per_day
        assert engine.begin_drag("tea")
        engine.drag_moved("tea", 3 * ppd)
        outcome = engine.drag_released("tea", 3 * ppd)
        assert outcome.committed
        assert store.committed_date("tea") == day(8)

        lay = engine.recompute()
        blocks = lay.blocks_for("tea")
        assert len(blocks) == 2
        assert {b.x for b in blocks} == {x_of(lay, day(8))}
        assert {b.lane_index for b in blocks} == {0, 1}

    def test_provisional_date_visible_while_dragging(self, engine):
        ppd = engine.layout.pixels_per_day
        engine.begin_drag("tea")
        engine.drag_moved("tea", 2 * ppd)
        snap = engine.current_selection()
        assert snap.event.id == "tea"
        assert snap.event.date == day(7)
        assert snap.is_provisional
        lay = engine.recompute()
        assert all(b.is_dragging for b in lay.blocks_for("tea"))

        engine.drag_released("tea", 2 * ppd)
        snap = engine.current_selection()
        assert not snap.is_provisional
        assert snap.event.date == day(7)

    def test_failed_commit_rolls_back_and_notifies(self):
        s = FailingStore()
        s.add_project("W", project_id="p1")
        add_event(s, "e", 5, title="Duel")
        eng = TimelineEngine(s, "p1")
        lay = eng.recompute(800)
        ppd = lay.pixels_per_day
        eng.begin_drag("e")
        eng.drag_moved("e", 4 * ppd)
        outcome = eng.drag_released("e", 4 * ppd)

        assert not outcome.committed
        assert eng.event("e").date == day(5)
        assert s.committed_date("e") == day(5)
        assert eng.drags.active_event_id is None
        assert eng.selection.dragging_event_id is None
        (notice,) = eng.drain_notices()
        assert "Duel" in notice
        assert eng.drain_notices() == []

    def test_unexpected_store_error_rolls_back_and_notifies(self):
        class BrokenStore(ProjectStore):
            def commit(self, event):
                raise RuntimeError("database is locked")

        s = BrokenStore()
        s.add_project("W", project_id="p1")
        add_event(s, "e", 3, title="Duel")
        eng = TimelineEngine(s, "p1")
        ppd = eng.recompute(800).pixels_per_day
        eng.begin_drag("e")
        eng.drag_moved("e", 3 * ppd)
        outcome = eng.drag_released("e", 3 * ppd)

        assert not outcome.committed
        assert eng.event("e").date == s.committed_date("e") == day(3)
        assert eng.selection.dragging_event_id is None
        (notice,) = eng.drain_notices()
        assert "Duel" in notice

    def test_background_tap_mid_drag_lets_drag_finish(self, engine, store):
        ppd = engine.layout.pixels_per_day
        engine.begin_drag("tea")
        engine.drag_moved("tea", ppd)
        engine.tap_background()
        assert engine.selection.dragging_event_id is None
        assert engine.event("tea").date == day(6)  # deselect never reverts a drag
        outcome = engine.drag_released("tea", ppd)
        assert outcome.committed
        assert store.committed_date("tea") == day(6)
        assert engine.selection.dragging_event_id is None

    def test_selecting_another_item_mid_drag(self, engine, store):
        add_event(store, "other", 9, participants=["bob"])
        engine.on_data_changed()
        ppd = engine.recompute().pixels_per_day
        engine.begin_drag("tea")
        engine.select(EVENT, "other")
        outcome = engine.drag_released("tea", -ppd)
        assert outcome.committed
        assert engine.selection.event_id == "other"
        assert engine.selection.dragging_event_id is None

    def test_second_drag_is_ignored(self, engine, store):
        add_event(store, "other", 9, participants=["bob"])
        engine.on_data_changed()
        engine.begin_drag("tea")
        assert not engine.begin_drag("other")
        assert engine.drag_moved("other", 300) is None
        assert engine.event("other").date == day(9)

    def test_unknown_event(self, engine):
        with pytest.raises(KeyError):
            engine.begin_drag("nope")


# =============================================================================
# SELECTION & DATA CHANGES
# =============================================================================

class TestSelectionThroughEngine:

    def test_tap_event_toggles(self, engine):
        engine.tap_event("tea")
        assert engine.current_selection().event.id == "tea"
        engine.tap_event("tea")
        assert engine.current_selection().event is None

    def test_arc_selection_excludes_event(self, engine, store):
        add_event(store, "s", 1)
        add_arc(store, "arc", "alice", start="s", end="tea")
        engine.on_data_changed()
        engine.tap_event("tea")
        engine.tap_arc("arc")
        snap = engine.current_selection()
        assert snap.event is None
        assert snap.arc.id == "arc"
        assert engine.recompute().arcs[0].is_selected

    def test_request_deselect(self, engine):
        engine.select(EVENT, "tea")
        engine.request_deselect()
        assert engine.current_selection().event is None

    def test_select_unknown_item(self, engine):
        with pytest.raises(KeyError):
            engine.select(ARC, "missing")

    def test_external_delete_clears_selection(self, engine, store):
        engine.select(EVENT, "tea")
        store.delete_event("tea")
        engine.on_data_changed()
        assert engine.current_selection().event is None
        assert engine.selection.event_id is None

    def test_external_delete_mid_drag_discards_session(self, engine, store):
        engine.begin_drag("tea")
        store.delete_event("tea")
        engine.on_data_changed()
        assert engine.drags.active_event_id is None
        assert engine.selection.dragging_event_id is None

    def test_switch_project_deselects(self, engine, store):
        store.add_project("Other", project_id="p2")
        engine.select(EVENT, "tea")
        engine.switch_project("p2")
        assert engine.selection.event_id is None
        assert engine.events == []

    def test_navigate_away_deselects(self, engine):
        engine.select(EVENT, "tea")
        engine.navigate_away()
        assert engine.selection.event_id is None


class TestAddNewEvent:

    def test_new_event_lands_mid_range_and_is_selected(self, engine, store):
        start, end = engine.date_range()
        ev = engine.add_new_event()
        assert ev.date == start + timedelta(days=(end - start).days // 2)
        assert ev.title == "New Event"
        assert ev.duration_days == 0
        assert store.event(ev.id) is ev
        assert engine.current_selection().event is ev

    def test_new_event_in_empty_project_uses_today(self):
        s = ProjectStore()
        s.add_project("Empty", project_id="p1")
        eng = TimelineEngine(s, "p1", today=date(2024, 5, 5))
        assert eng.add_new_event().date == date(2024, 5, 5)


class TestSnapshot:

    def test_snapshot_reports_layout(self, engine):
        snap = engine.snapshot()
        assert snap["events"] == 1
        assert snap["blocks"] == 2
        assert snap["range"][0] == engine.layout.range_start.isoformat()
