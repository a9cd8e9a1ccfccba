# storyline/model.py — entities handed to the engine by the store
# • Plain mutable dataclasses; the store is the system of record
# • Only Event.date is ever written by the engine (drag reschedule)

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional, Tuple


@dataclass
class Project:
    id: str
    title: str = "Untitled Project"


@dataclass
class Character:
    id: str
    name: str
    color: str = ""
    project_id: str = ""


@dataclass
class Event:
    id: str
    title: str
    date: date
    duration_days: int = 0
    participant_ids: Tuple[str, ...] = ()
    color: Optional[str] = None
    type: str = ""
    location: str = ""
    summary: str = ""
    project_id: str = ""

    @property
    def end_date(self) -> date:
        return self.date + timedelta(days=max(0, int(self.duration_days)))

    @property
    def is_instantaneous(self) -> bool:
        return int(self.duration_days) == 0


@dataclass
class CharacterArc:
    """A span over one character's lane; its dates come from the referenced events."""
    id: str
    name: str
    character_id: str
    start_event_id: Optional[str] = None
    peak_event_id: Optional[str] = None
    end_event_id: Optional[str] = None
    project_id: str = ""
    notes: str = field(default="", repr=False)
