import logging
import streamlit as st
LOG = logging.getLogger("storyline")

def render_debug_panel(engine):
    with st.expander("🐞 Debug", expanded=False):
        snap = engine.snapshot()
        snap["query_params"] = dict(st.query_params)
        st.json(snap)
        if st.button("Log snapshot"):
            LOG.info("DEBUG_SNAPSHOT: %s", snap)
            st.toast("Snapshot logged", icon="🪵")
