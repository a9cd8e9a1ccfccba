import uuid


def ensure_stable_ids(sections) -> bool:
    """
    Ensure every project/character/event/arc record has a stable string id. Returns True if mutated.
    """
    changed = False
    for records in sections.values():
        for rec in records:
            if not rec.get("id"):
                rec["id"] = str(uuid.uuid4())
                changed = True
            else:
                rec["id"] = str(rec["id"])
    return changed


def new_id() -> str:
    return str(uuid.uuid4())
