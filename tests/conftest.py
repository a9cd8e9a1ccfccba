from datetime import date, timedelta

import pytest

from storyline.model import Character, CharacterArc, Event
from storyline.store import ProjectStore

DAY0 = date(2024, 3, 1)


def day(n: int) -> date:
    return DAY0 + timedelta(days=n)


@pytest.fixture
def store():
    s = ProjectStore()
    s.add_project("Wonderland", project_id="p1")
    s.add_character(Character(id="alice", name="Alice", color="#8B5CF6", project_id="p1"))
    s.add_character(Character(id="bob", name="Bob", color="#10B981", project_id="p1"))
    return s


@pytest.fixture
def tea_party(store):
    return store.add_event(Event(id="tea", title="Tea Party", date=day(5), duration_days=0,
                                 participant_ids=("alice", "bob"), project_id="p1"))


def add_event(store, event_id, n, duration=0, participants=(), **kw):
    return store.add_event(Event(id=event_id, title=kw.pop("title", event_id), date=day(n),
                                 duration_days=duration, participant_ids=tuple(participants),
                                 project_id="p1", **kw))


def add_arc(store, arc_id, character_id, start=None, peak=None, end=None):
    return store.add_arc(CharacterArc(id=arc_id, name=arc_id, character_id=character_id,
                                      start_event_id=start, peak_event_id=peak, end_event_id=end,
                                      project_id="p1"))
