# storyline/sample.py — a small demo project so an empty session has something to show

import json

SAMPLE_DOCUMENT = {
    "projects": [{"id": "tea", "title": "The Mad Tea Party"}],
    "characters": [
        {"id": "alice", "name": "Alice", "color": "#8B5CF6", "project": "tea"},
        {"id": "hatter", "name": "Hatter", "color": "#10B981", "project": "tea"},
        {"id": "hare", "name": "March Hare", "color": "#F59E0B", "project": "tea"},
    ],
    "events": [
        {"id": "rabbit-hole", "title": "Down the Rabbit Hole", "date": "2024-03-01",
         "duration_days": 0, "participants": ["alice"]},
        {"id": "pool", "title": "Pool of Tears", "date": "2024-03-03",
         "duration_days": 2, "participants": ["alice"]},
        {"id": "tea-party", "title": "Tea Party", "date": "2024-03-08",
         "duration_days": 0, "participants": ["alice", "hatter", "hare"]},
        {"id": "riddle", "title": "Unanswered Riddle", "date": "2024-03-09",
         "duration_days": 1, "participants": ["hatter"]},
        {"id": "queen", "title": "Queen's Croquet", "date": "2024-03-14",
         "duration_days": 3, "participants": ["alice"]},
        {"id": "trial", "title": "Trial of the Knave", "date": "2024-03-20",
         "duration_days": 1, "participants": ["alice", "hatter", "hare"]},
        {"id": "storm", "title": "Storm over Wonderland", "date": "2024-03-11",
         "duration_days": 2, "participants": [], "color": "#64748B"},
    ],
    "arcs": [
        {"id": "alice-growth", "name": "Alice finds her voice", "character": "alice",
         "start_event": "rabbit-hole", "peak_event": "queen", "end_event": "trial"},
        {"id": "hatter-time", "name": "Hatter's quarrel with Time", "character": "hatter",
         "start_event": "tea-party", "peak_event": "riddle", "end_event": "trial"},
    ],
}


def sample_json() -> str:
    return json.dumps(SAMPLE_DOCUMENT, indent=2)
