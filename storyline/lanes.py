# storyline/lanes.py — one lane per character plus a trailing "general" lane
# • Characters ordered by name (case-sensitive), ties broken by id
# • General lane exists iff some event has no participants

from dataclasses import dataclass, field
from typing import Dict, Tuple

from storyline.config import GENERAL_LANE_NAME, LayoutMetrics


def _lane_sort_key(ch):
    return (ch.name or "", str(ch.id))


@dataclass(frozen=True)
class Lane:
    index: int
    name: str
    color: str = ""
    character_id: str = ""  # empty for the general lane

    @property
    def is_general(self) -> bool:
        return not self.character_id


@dataclass(frozen=True)
class LaneAssignment:
    lanes: Tuple[Lane, ...] = ()
    index_by_character: Dict[str, int] = field(default_factory=dict)
    has_general_lane: bool = False

    @property
    def character_count(self) -> int:
        return len(self.index_by_character)

    @property
    def general_index(self):
        return self.character_count if self.has_general_lane else None

    @property
    def lane_count(self) -> int:
        return self.character_count + (1 if self.has_general_lane else 0)

    def lane_for(self, character_id: str):
        return self.index_by_character.get(character_id)


def participant_lanes(event, index_by_character):
    """(character_id, lane index) pairs for the event's known participants, in lane order."""
    pairs = {(cid, index_by_character[cid]) for cid in event.participant_ids if cid in index_by_character}
    return sorted(pairs, key=lambda p: p[1])


def allocate_lanes(characters, events) -> LaneAssignment:
    ordered = sorted(characters, key=_lane_sort_key)
    lanes = []
    index_by_character = {}
    for i, ch in enumerate(ordered):
        index_by_character[ch.id] = i
        lanes.append(Lane(index=i, name=ch.name or "", color=ch.color or "", character_id=ch.id))
    # participants pointing at unknown characters fall back to the general lane
    has_general = any(not participant_lanes(ev, index_by_character) for ev in events)
    if has_general:
        lanes.append(Lane(index=len(ordered), name=GENERAL_LANE_NAME))
    return LaneAssignment(tuple(lanes), index_by_character, has_general)


def content_height(assignment: LaneAssignment, metrics: LayoutMetrics) -> float:
    rows = max(1, assignment.lane_count)
    return rows * metrics.lane_height + metrics.axis_header_height + metrics.bottom_margin
