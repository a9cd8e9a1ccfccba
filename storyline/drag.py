# storyline/drag.py — drag-to-reschedule gesture state machine
# • Idle -> Dragging -> (Committing -> Idle) | (RollingBack -> Idle)
# • Transition functions are pure; DragController applies their effects to events and the store
# • Final date is recomputed from the release translation, never accumulated from moves
# • Single pointer: while one event is dragging, drags on other events are ignored

import logging
from dataclasses import dataclass, replace
from datetime import date, timedelta
from enum import Enum
from typing import Optional

from storyline.axis import round_half_away
from storyline.errors import CommitError

LOG = logging.getLogger("storyline")


class DragPhase(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    COMMITTING = "committing"
    ROLLING_BACK = "rolling_back"


@dataclass(frozen=True)
class DragSession:
    event_id: str
    phase: DragPhase = DragPhase.IDLE
    original_date: Optional[date] = None
    translation_x: float = 0.0
    pixels_per_day: float = 60.0


@dataclass(frozen=True)
class DragOutcome:
    event_id: str
    committed: bool
    original_date: date
    final_date: date
    days_delta: int
    error: str = ""


def days_for_translation(translation_x: float, pixels_per_day: float) -> int:
    if pixels_per_day <= 0:
        return 0
    return round_half_away(translation_x / pixels_per_day)


def _shifted(session: DragSession, translation_x: float) -> date:
    return session.original_date + timedelta(days=days_for_translation(translation_x, session.pixels_per_day))


# ---------- Pure transitions ----------
def start_drag(session: DragSession, current_date: date, pixels_per_day: float) -> DragSession:
    if session.phase is DragPhase.DRAGGING:
        return session  # original date is captured once per session
    if session.phase is not DragPhase.IDLE:
        raise ValueError(f"cannot start a drag while {session.phase.value}")
    return replace(session, phase=DragPhase.DRAGGING, original_date=current_date,
                   translation_x=0.0, pixels_per_day=float(pixels_per_day))


def move_drag(session: DragSession, translation_x: float):
    """Returns (session, provisional_date)."""
    if session.phase is not DragPhase.DRAGGING:
        raise ValueError(f"move while {session.phase.value}")
    session = replace(session, translation_x=float(translation_x))
    return session, _shifted(session, translation_x)


def release_drag(session: DragSession, translation_x: float):
    """Returns (session in COMMITTING, final_date)."""
    if session.phase is not DragPhase.DRAGGING:
        raise ValueError(f"release while {session.phase.value}")
    session = replace(session, phase=DragPhase.COMMITTING, translation_x=float(translation_x))
    return session, _shifted(session, translation_x)


def fail_commit(session: DragSession):
    """Returns (session in ROLLING_BACK, date to restore)."""
    if session.phase is not DragPhase.COMMITTING:
        raise ValueError(f"rollback while {session.phase.value}")
    return replace(session, phase=DragPhase.ROLLING_BACK), session.original_date


# ---------- Controller ----------
class DragController:
    def __init__(self, store):
        self.store = store
        self._sessions = {}

    def phase(self, event_id: str) -> DragPhase:
        s = self._sessions.get(event_id)
        return s.phase if s else DragPhase.IDLE

    def session(self, event_id: str) -> Optional[DragSession]:
        return self._sessions.get(event_id)

    @property
    def active_event_id(self) -> Optional[str]:
        for eid, s in self._sessions.items():
            if s.phase is DragPhase.DRAGGING:
                return eid
        return None

    def is_dragging(self, event_id: str) -> bool:
        return self.phase(event_id) is DragPhase.DRAGGING

    def begin(self, event, pixels_per_day: float) -> bool:
        active = self.active_event_id
        if active is not None and active != event.id:
            LOG.debug("drag on %s ignored: %s is already dragging", event.id, active)
            return False
        current = self._sessions.get(event.id) or DragSession(event_id=event.id)
        if current.phase in (DragPhase.COMMITTING, DragPhase.ROLLING_BACK):
            LOG.debug("drag on %s ignored: commit in flight", event.id)
            return False
        self._sessions[event.id] = start_drag(current, event.date, pixels_per_day)
        return True

    def move(self, event, translation_x: float, pixels_per_day: Optional[float] = None) -> Optional[date]:
        if not self.is_dragging(event.id):
            if not self.begin(event, pixels_per_day if pixels_per_day is not None else 60.0):
                return None
        session, provisional = move_drag(self._sessions[event.id], translation_x)
        self._sessions[event.id] = session
        if provisional != event.date:
            event.date = provisional
        return provisional

    def release(self, event, translation_x: float) -> Optional[DragOutcome]:
        session = self._sessions.get(event.id)
        if session is None or session.phase is not DragPhase.DRAGGING:
            return None
        session, final = release_drag(session, translation_x)
        self._sessions[event.id] = session
        original = session.original_date
        event.date = final
        delta = (final - original).days
        try:
            self.store.commit(event)
        except CommitError as exc:
            LOG.warning("Reschedule of %s rolled back to %s: %s", event.id, original, exc)
            return self._roll_back(event, session, exc)
        except Exception as exc:
            # any other store failure is still just "did not persist"
            LOG.exception("Unexpected commit failure for %s; rolled back to %s", event.id, original)
            return self._roll_back(event, session, exc)
        finally:
            self._sessions.pop(event.id, None)
        LOG.info("Rescheduled %s: %s -> %s (%+d days)", event.id, original, final, delta)
        return DragOutcome(event.id, True, original, final, delta)

    def _roll_back(self, event, session: DragSession, exc: Exception) -> DragOutcome:
        session, restore = fail_commit(session)
        self._sessions[event.id] = session
        event.date = restore
        return DragOutcome(event.id, False, session.original_date, restore, 0, str(exc) or type(exc).__name__)

    def discard(self, event_id: str):
        """Drop any session for an event that no longer exists; nothing is committed."""
        if self._sessions.pop(event_id, None) is not None:
            LOG.debug("drag session for %s discarded", event_id)

    def event_ids(self):
        return list(self._sessions)
