import hashlib
import logging
import streamlit as st

from storyline.errors import ImportFormatError
from storyline.sample import sample_json

LOG = logging.getLogger("storyline")

ZOOM_SLIDER_STEPS = [0.5, 0.7, 0.85, 1.0, 1.25, 1.5, 2.0]


def render_sidebar(state, store, engine):
    """Data, project and zoom controls. Returns the actions the orchestrator should apply."""
    actions = {}
    with st.sidebar:
        # --- Project picker ---
        st.header("📚 Project")
        projects = store.projects()
        if projects:
            ids = [p.id for p in projects]
            titles = {p.id: p.title for p in projects}
            current = state.get("project_id")
            index = ids.index(current) if current in ids else 0
            picked = st.selectbox("Active project", ids, index=index, format_func=lambda v: titles[v])
            if picked != current:
                actions["switch_project"] = picked
        else:
            st.caption("No projects yet. Import a JSON export or load the sample.")

        # --- Zoom ---
        st.header("🔍 Zoom")
        z1, z2 = st.columns(2)
        if z1.button("➕ Zoom in", use_container_width=True, disabled=engine is None):
            actions["zoom"] = "in"
        if z2.button("➖ Zoom out", use_container_width=True, disabled=engine is None):
            actions["zoom"] = "out"
        if engine is not None:
            st.caption(f"{engine.zoom.pixels_per_day:.0f} px/day")
            st.select_slider("Magnify", options=ZOOM_SLIDER_STEPS, key="magnify_multiplier",
                             help="Preview a pinch zoom; apply to keep it.")
            m1, m2 = st.columns(2)
            if m1.button("Apply", use_container_width=True):
                actions["magnify"] = "commit"
            if m2.button("Cancel", use_container_width=True):
                actions["magnify"] = "cancel"

        # --- Data ---
        st.header("🗂 Data")
        uploaded = st.file_uploader("Import JSON", type=["json"])
        if uploaded is not None:
            text = uploaded.read().decode("utf-8", errors="replace")
            h = hashlib.sha256(text.encode("utf-8")).hexdigest()
            if h != state.get("_last_import_hash", ""):
                state["_last_import_hash"] = h
                try:
                    store.load_json(text)
                    actions["imported"] = True
                    st.success(f"Imported {len(store.projects())} project(s).")
                except ImportFormatError as exc:
                    LOG.warning("Import failed: %s", exc)
                    st.error(f"Import failed: {exc}")

        if st.button("Load sample project"):
            store.load_json(sample_json())
            actions["imported"] = True

        st.download_button("⬇️ Export JSON", data=store.export_json(), file_name="storyline.json",
                           mime="application/json")

        st.divider()
        if st.button("Reset (clear all)", type="secondary"):
            actions["reset"] = True

    return actions
