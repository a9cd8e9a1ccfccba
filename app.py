# app.py — story timeline
# - One lane per character (+ "General" for events nobody attends), arcs drawn across lanes
# - Zoom buttons + magnify preview (applied or cancelled from the sidebar)
# - Drag-to-reschedule driven through the engine's gesture state machine; failed saves roll back
# - Single selection (event or arc) shown in the detail panel, live date while dragging
# - Import/Export JSON, sample project, debug expander

import html
import logging
from pathlib import Path
import streamlit as st

from storyline.debug import render_debug_panel
from storyline.engine import TimelineEngine
from storyline.errors import StoreError
from storyline.selection import ARC, EVENT
from storyline.sidebar import render_sidebar
from storyline.store import ProjectStore
from storyline.styles import GLOBAL_CSS
from storyline.timeline import render_timeline

# ---------- Page & logging ----------
st.set_page_config(page_title="Storyline", page_icon="🧵", layout="wide")
st.markdown(GLOBAL_CSS, unsafe_allow_html=True)
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
LOG = logging.getLogger("storyline")

DATA_PATH = Path("storyline.json")

# ---------- Session ----------
ss = st.session_state
if "store" not in ss:
    try:
        ss["store"] = ProjectStore.open(DATA_PATH)
    except StoreError as exc:
        LOG.warning("Could not open %s: %s", DATA_PATH, exc)
        ss["store"] = ProjectStore(DATA_PATH)
ss.setdefault("engine", None)
ss.setdefault("project_id", None)
ss.setdefault("_last_import_hash", "")
ss.setdefault("_last_revision", -1)
ss.setdefault("viewport_width", 1200)
ss.setdefault("magnify_multiplier", 1.0)

# Pending widget resets must happen before the widgets are created this run
if ss.pop("_reset_magnify", False):
    ss["magnify_multiplier"] = 1.0

store = ss["store"]


def _ensure_engine(project_id):
    eng = ss["engine"]
    if project_id is None:
        ss["engine"] = None
        return None
    if eng is None:
        eng = TimelineEngine(store, project_id)
        ss["engine"] = eng
    elif eng.project_id != project_id:
        eng.switch_project(project_id)
    ss["project_id"] = project_id
    return eng


projects = store.projects()
if ss["project_id"] not in {p.id for p in projects}:
    ss["project_id"] = projects[0].id if projects else None
engine = _ensure_engine(ss["project_id"])

# ---------- Sidebar actions ----------
actions = render_sidebar(ss, store, engine)

if actions.get("reset"):
    store.reset()
    ss["engine"] = None
    ss["project_id"] = None
    ss["_last_import_hash"] = ""
    st.rerun()

if actions.get("imported"):
    # a new document: start over on its first project
    ss["engine"] = None
    projects = store.projects()
    ss["project_id"] = projects[0].id if projects else None
    try:
        store.save()
    except StoreError as exc:
        st.warning(str(exc))
    st.rerun()

if actions.get("switch_project"):
    engine = _ensure_engine(actions["switch_project"])

if engine is not None:
    if actions.get("zoom") == "in":
        engine.zoom_in()
    elif actions.get("zoom") == "out":
        engine.zoom_out()

    if actions.get("magnify") == "commit":
        engine.end_magnify(ss.get("magnify_multiplier", 1.0))
        ss["_reset_magnify"] = True
        st.rerun()
    elif actions.get("magnify") == "cancel":
        engine.cancel_magnify()
        ss["_reset_magnify"] = True
        st.rerun()
    elif ss.get("magnify_multiplier", 1.0) != 1.0:
        if not engine.zoom.gesture_active:
            engine.begin_magnify()
        engine.update_magnify(ss["magnify_multiplier"])

    # Store changes made elsewhere (imports, deletes) prune stale selection/drag state
    if store.revision != ss["_last_revision"]:
        engine.on_data_changed()
        ss["_last_revision"] = store.revision

# ---------- Page ----------
st.title("🧵 Story Timeline")

if engine is None:
    st.markdown('<div class="empty">No project loaded. Use <b>Load sample project</b> or import a JSON export from the sidebar.</div>',
                unsafe_allow_html=True)
    st.stop()

project = store.project(engine.project_id)
st.caption(f"{project.title if project else 'Untitled Project'} › Timeline")

c_add, c_width, c_clear = st.columns([1, 2, 1])
with c_add:
    if st.button("➕ Add event", use_container_width=True):
        ev = engine.add_new_event()
        ss["_last_revision"] = store.revision
        st.toast(f"Added “{ev.title}”", icon="🆕")
with c_width:
    st.slider("Viewport width (px)", 600, 2400, key="viewport_width", step=50)
with c_clear:
    if st.button("Clear selection", use_container_width=True):
        engine.tap_background()

layout = engine.recompute(ss["viewport_width"])
if layout is None:
    st.markdown('<div class="empty">No events. Add an event to start your timeline.</div>', unsafe_allow_html=True)
    render_debug_panel(engine)
    st.stop()

main, detail = st.columns([3, 1])

# ---- Selection picker (stands in for tapping a block or arc) ----
with main:
    options = ["(none)"] + [f"{EVENT}:{e.id}" for e in engine.events] + [f"{ARC}:{a.id}" for a in engine.arcs]
    titles = {f"{EVENT}:{e.id}": f"📌 {e.title} · {e.date:%b %d}" for e in engine.events}
    titles.update({f"{ARC}:{a.id}": f"〰️ {a.name}" for a in engine.arcs})
    sel = engine.selection
    current = f"{EVENT}:{sel.event_id}" if sel.event_id else (f"{ARC}:{sel.arc_id}" if sel.arc_id else "(none)")
    picked = st.selectbox("Select", options, index=options.index(current) if current in options else 0,
                          format_func=lambda v: titles.get(v, "(none)"))
    if picked != current:
        if picked == "(none)":
            engine.tap_background()
        else:
            kind, item_id = picked.split(":", 1)
            engine.select(kind, item_id)
        layout = engine.recompute()

    render_timeline(layout, engine.metrics)

# ---- Detail panel ----
with detail:
    snap = engine.current_selection()
    if snap.event is not None:
        ev = snap.event
        st.subheader(ev.title)
        cls = "detail-date provisional" if snap.is_provisional else "detail-date"
        st.markdown(f'<span class="{cls}">{ev.date:%A, %b %d, %Y}</span>', unsafe_allow_html=True)
        if ev.duration_days:
            st.caption(f"{ev.duration_days} day(s)")
        people = [c for c in (store.character(cid) for cid in ev.participant_ids) if c]
        if people:
            st.markdown("".join(
                f'<span class="participant"><span class="swatch" style="background:{c.color}"></span>{html.escape(c.name)}</span>'
                for c in people), unsafe_allow_html=True)
        else:
            st.write("General event")
        if ev.summary:
            st.write(ev.summary)

        # Drag by N days: feeds the gesture state machine with a pixel translation
        days = st.number_input("Drag by days", min_value=-365, max_value=365, value=0, step=1)
        if st.button("Reschedule", type="primary", use_container_width=True, disabled=days == 0):
            dx = days * layout.pixels_per_day
            if engine.begin_drag(ev.id):
                engine.drag_moved(ev.id, dx)
                outcome = engine.drag_released(ev.id, dx)
                ss["_last_revision"] = store.revision
                if outcome and outcome.committed:
                    st.toast(f"Moved to {outcome.final_date:%b %d}", icon="✅")
                st.rerun()
        if st.button("🗑 Delete event", use_container_width=True):
            store.delete_event(ev.id)
            try:
                store.save()
            except StoreError as exc:
                st.warning(str(exc))
            st.rerun()
        if st.button("Close", use_container_width=True):
            engine.request_deselect()
            st.rerun()
    elif snap.arc is not None:
        arc = snap.arc
        st.subheader(arc.name)
        owner = store.character(arc.character_id)
        if owner:
            st.markdown(f'<span class="participant"><span class="swatch" style="background:{owner.color}"></span>'
                        f'{html.escape(owner.name)}</span>', unsafe_allow_html=True)
        else:
            st.write("Unknown character")
        for label, eid in (("Start", arc.start_event_id), ("Peak", arc.peak_event_id), ("End", arc.end_event_id)):
            ref = store.event(eid) if eid else None
            st.write(f"**{label}:** " + (f"{ref.title} · {ref.date:%b %d}" if ref else "—"))
        if st.button("Close", use_container_width=True):
            engine.request_deselect()
            st.rerun()
    else:
        st.caption("Select an event or arc to see its details.")

for msg in engine.drain_notices():
    st.warning(msg)

# ---- Debug ----
render_debug_panel(engine)
