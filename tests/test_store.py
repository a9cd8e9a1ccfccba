"""
Project store and JSON document tests.
"""

import json
from datetime import date

import pytest

from conftest import add_arc, add_event, day
from storyline.errors import ImportFormatError, StoreError
from storyline.ids import ensure_stable_ids
from storyline.model import Character
from storyline.sample import sample_json
from storyline.state import normalize_event, parse_document
from storyline.store import ProjectStore


class TestFetch:

    def test_fetches_are_project_scoped_and_ordered(self, store):
        store.add_project("Elsewhere", project_id="p2")
        store.add_character(Character(id="zed", name="Zed", project_id="p2"))
        add_event(store, "late", 9)
        add_event(store, "early", 1)
        assert [e.id for e in store.fetch_events("p1")] == ["early", "late"]
        assert [c.id for c in store.fetch_characters("p1")] == ["alice", "bob"]
        assert [c.id for c in store.fetch_characters("p2")] == ["zed"]

    def test_unknown_project_is_rejected(self, store):
        with pytest.raises(StoreError):
            store.add_character(Character(id="x", name="X", project_id="nope"))


class TestMutations:

    def test_revision_bumps_on_changes(self, store):
        rev = store.revision
        ev = add_event(store, "e", 1)
        store.commit(ev)
        store.delete_event("e")
        assert store.revision == rev + 3

    def test_delete_event_clears_arc_references(self, store):
        add_event(store, "s", 1)
        add_event(store, "e", 5)
        arc = add_arc(store, "arc", "alice", start="s", peak="e", end="e")
        assert store.delete_event("e")
        assert (arc.start_event_id, arc.peak_event_id, arc.end_event_id) == ("s", None, None)
        assert store.event("e") is None
        assert not store.delete_event("e")

    def test_committed_date_tracks_only_commits(self, store):
        ev = add_event(store, "e", 1)
        ev.date = day(4)
        assert store.committed_date("e") == day(1)
        store.commit(ev)
        assert store.committed_date("e") == day(4)


class TestFileBacking:

    def test_commit_writes_document(self, tmp_path, store):
        path = tmp_path / "story.json"
        store.path = path
        ev = add_event(store, "e", 2, participants=["alice"])
        store.commit(ev)
        doc = json.loads(path.read_text(encoding="utf-8"))
        assert doc["events"][0]["date"] == "2024-03-03"
        assert doc["events"][0]["participants"] == ["alice"]

    def test_open_round_trips_export(self, tmp_path, store):
        path = tmp_path / "story.json"
        add_event(store, "e", 2, participants=["alice", "bob"], color="#F43F5E")
        add_arc(store, "arc", "alice", start="e", end="e")
        path.write_text(store.export_json(), encoding="utf-8")

        reopened = ProjectStore.open(path)
        ev = reopened.event("e")
        assert ev.date == day(2)
        assert ev.participant_ids == ("alice", "bob")
        assert ev.color == "#F43F5E"
        assert reopened.arc("arc").start_event_id == "e"
        assert [c.name for c in reopened.fetch_characters("p1")] == ["Alice", "Bob"]

    def test_open_missing_file_gives_empty_store(self, tmp_path):
        assert ProjectStore.open(tmp_path / "none.json").projects() == []


class TestImport:

    def test_sample_document_loads(self):
        s = ProjectStore()
        s.load_json(sample_json())
        (project,) = s.projects()
        assert len(s.fetch_characters(project.id)) == 3
        assert len(s.fetch_arcs(project.id)) == 2

    def test_lenient_keys_and_nested_data(self):
        text = json.dumps({"Data": {
            "Characters": [{"name": "Alice", "colorHex": "#fff"}],
            "Events": [{"title": "A", "eventDate": "2024-03-05T10:00:00Z", "durationDays": "2"},
                       {"title": "no date"}],
        }})
        projects, characters, events, arcs = parse_document(text)
        assert projects[0].title == "Imported Project"
        assert characters[0].color == "#fff"
        assert characters[0].project_id == projects[0].id
        assert len(events) == 1
        assert events[0].date == date(2024, 3, 5)
        assert events[0].duration_days == 2

    def test_colorless_characters_get_palette_colors(self):
        text = json.dumps({"characters": [{"name": "A"}, {"name": "B", "color": "#123456"}, {"name": "C"}]})
        _, characters, _, _ = parse_document(text)
        assert [c.color for c in characters] == ["#3B82F6", "#123456", "#F59E0B"]

    def test_arcs_without_character_are_dropped(self):
        text = json.dumps({"arcs": [{"id": "a1", "name": "Orphan"}], "projects": [{"id": "p"}]})
        assert parse_document(text)[3] == []

    def test_invalid_json(self):
        with pytest.raises(ImportFormatError):
            parse_document("{nope")

    def test_empty_document(self):
        with pytest.raises(ImportFormatError):
            parse_document(json.dumps({"items": []}))

    def test_unknown_project_reference_falls_back_to_first_project(self):
        s = ProjectStore()
        s.load_json(json.dumps({
            "projects": [{"id": "p", "title": "Only"}],
            "events": [{"id": "e", "title": "E", "date": "2024-01-01", "project": "missing"}],
        }))
        assert [e.id for e in s.fetch_events("p")] == ["e"]

    @pytest.mark.parametrize("raw_date", ["2024-03-05", "2024/03/05", "05/03/2024"])
    def test_date_formats(self, raw_date):
        ev = normalize_event({"id": "x", "title": "x", "date": raw_date})
        assert ev.date == date(2024, 3, 5)

    def test_negative_duration_is_clamped(self):
        assert normalize_event({"id": "x", "date": "2024-03-05", "duration": -3}).duration_days == 0

    def test_ensure_stable_ids(self):
        sections = {"events": [{"title": "a"}, {"id": 7}]}
        assert ensure_stable_ids(sections)
        assert sections["events"][0]["id"]
        assert sections["events"][1]["id"] == "7"
