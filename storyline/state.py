# storyline/state.py — JSON document <-> entities
# • Lenient importer: many key spellings, nested {data:{...}}, case-insensitive keys
# • Records without a usable id get one (see ids.ensure_stable_ids)
# • Events without a parseable date and arcs without a character are dropped

import json
from datetime import date, datetime

from storyline.config import PALETTE_MAP, PALETTE_OPTIONS
from storyline.errors import ImportFormatError
from storyline.ids import ensure_stable_ids
from storyline.model import Character, CharacterArc, Event, Project

SECTIONS = ("projects", "characters", "events", "arcs")


def _date_from_any(v):
    """Coerce many date formats into a date(). Accepts date, datetime, or string."""
    if v is None or v == "":
        return None
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    if isinstance(v, str):
        s = v.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(s).date()
        except ValueError:
            pass
        for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%d/%m/%Y", "%m/%d/%Y"):
            try:
                return datetime.strptime(s, fmt).date()
            except ValueError:
                continue
    return None


def _first(raw: dict, *keys, default=None):
    for k in keys:
        v = raw.get(k)
        if v not in (None, ""):
            return v
    return default


def _get_case_insensitive(d: dict, key: str):
    for k in d.keys():
        if k.lower() == key.lower():
            return d[k]
    return None


def _opt_id(v):
    return str(v) if v not in (None, "") else None


def pick_color_hex(position: int) -> str:
    """Palette color for a character imported without one, stable by cast order."""
    return PALETTE_MAP[PALETTE_OPTIONS[position % len(PALETTE_OPTIONS)]]


def normalize_project(raw: dict) -> Project:
    return Project(id=str(raw["id"]), title=(_first(raw, "title", "name", default="Untitled Project")).strip())


def normalize_character(raw: dict, project_id: str = "") -> Character:
    return Character(
        id=str(raw["id"]),
        name=str(_first(raw, "name", "content", default="Unnamed")).strip(),
        color=str(_first(raw, "color", "colorHex", "color_hex", default="")).strip(),
        project_id=str(_first(raw, "project", "project_id", "projectId", default=project_id)),
    )


def normalize_event(raw: dict, project_id: str = ""):
    d = _date_from_any(_first(raw, "date", "start", "eventDate", "event_date"))
    if d is None:
        return None
    try:
        duration = max(0, int(_first(raw, "duration_days", "durationDays", "duration", default=0)))
    except (TypeError, ValueError):
        duration = 0
    participants = _first(raw, "participants", "participant_ids", "characters", default=[])
    if isinstance(participants, str):
        participants = [participants]
    color = _first(raw, "color", "colorHex", "eventColorHex")
    return Event(
        id=str(raw["id"]),
        title=str(_first(raw, "title", "content", "name", default="Untitled Event")).strip(),
        date=d,
        duration_days=duration,
        participant_ids=tuple(dict.fromkeys(str(p) for p in participants)),
        color=str(color).strip() if color else None,
        type=str(_first(raw, "type", default="")).strip(),
        location=str(_first(raw, "location", "locationName", default="")).strip(),
        summary=str(_first(raw, "summary", "summaryLine", "subtitle", default="")).strip(),
        project_id=str(_first(raw, "project", "project_id", "projectId", default=project_id)),
    )


def normalize_arc(raw: dict, project_id: str = ""):
    character_id = _opt_id(_first(raw, "character", "character_id", "characterId"))
    if character_id is None:
        return None
    return CharacterArc(
        id=str(raw["id"]),
        name=str(_first(raw, "name", "title", default="Untitled Arc")).strip(),
        character_id=character_id,
        start_event_id=_opt_id(_first(raw, "start_event", "start_event_id", "startEvent")),
        peak_event_id=_opt_id(_first(raw, "peak_event", "peak_event_id", "peakEvent")),
        end_event_id=_opt_id(_first(raw, "end_event", "end_event_id", "endEvent")),
        project_id=str(_first(raw, "project", "project_id", "projectId", default=project_id)),
        notes=str(_first(raw, "notes", "description", default="")),
    )


def parse_document(text: str):
    """Returns (projects, characters, events, arcs) from a JSON export."""
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ImportFormatError(f"not valid JSON: {exc}") from exc
    if not isinstance(doc, dict):
        raise ImportFormatError("expected a JSON object with 'projects', 'characters', 'events', 'arcs'")

    root = doc
    nested = _get_case_insensitive(doc, "data")
    if isinstance(nested, dict):
        root = nested
    sections = {}
    for name in SECTIONS:
        v = _get_case_insensitive(root, name)
        sections[name] = [x for x in v if isinstance(x, dict)] if isinstance(v, list) else []
    if not any(sections.values()):
        raise ImportFormatError("document has no projects, characters, events or arcs")

    ensure_stable_ids(sections)
    if not sections["projects"]:
        sections["projects"].append({"id": "default", "title": "Imported Project"})
    default_project = str(sections["projects"][0]["id"])

    projects = [normalize_project(p) for p in sections["projects"]]
    characters = [normalize_character(c, default_project) for c in sections["characters"]]
    for i, ch in enumerate(characters):
        if not ch.color:
            ch.color = pick_color_hex(i)
    events = [e for e in (normalize_event(x, default_project) for x in sections["events"]) if e]
    arcs = [a for a in (normalize_arc(x, default_project) for x in sections["arcs"]) if a]
    return projects, characters, events, arcs


def export_document(projects, characters, events, arcs) -> str:
    payload = {
        "projects": [{"id": p.id, "title": p.title} for p in projects],
        "characters": [
            {"id": c.id, "name": c.name, "color": c.color, "project": c.project_id}
            for c in characters
        ],
        "events": [
            {
                "id": e.id,
                "title": e.title,
                "date": e.date.isoformat(),
                "duration_days": int(e.duration_days),
                "participants": list(e.participant_ids),
                "color": e.color or "",
                "type": e.type,
                "location": e.location,
                "summary": e.summary,
                "project": e.project_id,
            } for e in events
        ],
        "arcs": [
            {
                "id": a.id,
                "name": a.name,
                "character": a.character_id,
                "start_event": a.start_event_id,
                "peak_event": a.peak_event_id,
                "end_event": a.end_event_id,
                "notes": a.notes,
                "project": a.project_id,
            } for a in arcs
        ],
    }
    return json.dumps(payload, indent=2)
