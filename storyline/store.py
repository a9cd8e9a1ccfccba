# storyline/store.py — in-memory project store with optional JSON file backing
# • fetch_* return live entity objects scoped to one project, in display order
# • commit(event) makes one event's date durable; failures raise CommitError
# • `revision` bumps on every structural change or successful commit (hosts poll it)

import logging
import os
import tempfile
from dataclasses import replace
from pathlib import Path
from typing import Dict, Optional

from storyline.errors import CommitError, StoreError
from storyline.ids import new_id
from storyline.model import Character, CharacterArc, Event, Project
from storyline.state import export_document, parse_document

LOG = logging.getLogger("storyline")


class ProjectStore:
    def __init__(self, path=None):
        self.path = Path(path) if path else None
        self.revision = 0
        self._projects: Dict[str, Project] = {}
        self._characters: Dict[str, Character] = {}
        self._events: Dict[str, Event] = {}
        self._arcs: Dict[str, CharacterArc] = {}
        self._committed: Dict[str, Event] = {}

    @classmethod
    def open(cls, path):
        store = cls(path)
        p = Path(path)
        if p.exists():
            store.load_json(p.read_text(encoding="utf-8"))
        return store

    # ---- reads ----
    def projects(self):
        return sorted(self._projects.values(), key=lambda p: (p.title, p.id))

    def project(self, project_id: str) -> Optional[Project]:
        return self._projects.get(project_id)

    def fetch_events(self, project_id: str):
        evs = [e for e in self._events.values() if e.project_id == project_id]
        return sorted(evs, key=lambda e: (e.date, e.title, e.id))

    def fetch_characters(self, project_id: str):
        chs = [c for c in self._characters.values() if c.project_id == project_id]
        return sorted(chs, key=lambda c: (c.name, c.id))

    def fetch_arcs(self, project_id: str):
        arcs = [a for a in self._arcs.values() if a.project_id == project_id]
        return sorted(arcs, key=lambda a: (a.name, a.id))

    def event(self, event_id: str) -> Optional[Event]:
        return self._events.get(event_id)

    def arc(self, arc_id: str) -> Optional[CharacterArc]:
        return self._arcs.get(arc_id)

    def character(self, character_id: str) -> Optional[Character]:
        return self._characters.get(character_id)

    def committed_date(self, event_id: str):
        ev = self._committed.get(event_id)
        return ev.date if ev else None

    # ---- writes ----
    def _touch(self):
        self.revision += 1

    def add_project(self, title: str, project_id: Optional[str] = None) -> Project:
        p = Project(id=project_id or new_id(), title=title)
        self._projects[p.id] = p
        self._touch()
        return p

    def add_character(self, character: Character) -> Character:
        if character.project_id not in self._projects:
            raise StoreError(f"unknown project {character.project_id!r}")
        self._characters[character.id] = character
        self._touch()
        return character

    def add_event(self, event: Event) -> Event:
        if event.project_id not in self._projects:
            raise StoreError(f"unknown project {event.project_id!r}")
        self._events[event.id] = event
        self._committed[event.id] = replace(event)
        self._touch()
        return event

    def add_arc(self, arc: CharacterArc) -> CharacterArc:
        if arc.project_id not in self._projects:
            raise StoreError(f"unknown project {arc.project_id!r}")
        self._arcs[arc.id] = arc
        self._touch()
        return arc

    def delete_event(self, event_id: str) -> bool:
        ev = self._events.pop(event_id, None)
        if ev is None:
            return False
        self._committed.pop(event_id, None)
        # arcs keep existing, they just lose the reference
        for arc in self._arcs.values():
            if arc.start_event_id == event_id:
                arc.start_event_id = None
            if arc.peak_event_id == event_id:
                arc.peak_event_id = None
            if arc.end_event_id == event_id:
                arc.end_event_id = None
        self._touch()
        LOG.info("Deleted event %s (%s)", event_id, ev.title)
        return True

    def delete_arc(self, arc_id: str) -> bool:
        if self._arcs.pop(arc_id, None) is None:
            return False
        self._touch()
        return True

    def commit(self, event: Event):
        if event.id not in self._events:
            raise CommitError(f"event {event.id} is not in the store")
        try:
            self._write()
        except OSError as exc:
            raise CommitError(f"could not save {event.title!r}: {exc}") from exc
        self._committed[event.id] = replace(event)
        self._touch()

    # ---- file backing ----
    def _write(self):
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".storyline-", suffix=".json", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(self.export_json())
            os.replace(tmp, self.path)
        except OSError:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def save(self):
        try:
            self._write()
        except OSError as exc:
            raise StoreError(f"could not save {self.path}: {exc}") from exc

    def export_json(self) -> str:
        return export_document(
            self.projects(),
            sorted(self._characters.values(), key=lambda c: (c.project_id, c.name, c.id)),
            sorted(self._events.values(), key=lambda e: (e.project_id, e.date, e.id)),
            sorted(self._arcs.values(), key=lambda a: (a.project_id, a.name, a.id)),
        )

    def load_json(self, text: str):
        projects, characters, events, arcs = parse_document(text)
        self._projects = {p.id: p for p in projects}
        # records pointing at unknown projects land in the first one
        fallback = projects[0].id
        for rec in (*characters, *events, *arcs):
            if rec.project_id not in self._projects:
                rec.project_id = fallback
        self._characters = {c.id: c for c in characters}
        self._events = {e.id: e for e in events}
        self._arcs = {a.id: a for a in arcs}
        self._committed = {e.id: replace(e) for e in events}
        self._touch()
        LOG.info("Loaded %d projects, %d characters, %d events, %d arcs",
                 len(projects), len(characters), len(events), len(arcs))

    def reset(self):
        self._projects.clear()
        self._characters.clear()
        self._events.clear()
        self._arcs.clear()
        self._committed.clear()
        self._touch()
