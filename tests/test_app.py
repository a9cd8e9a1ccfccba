"""
Streamlit page tests, run headless through streamlit.testing.
"""

from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

APP = Path(__file__).resolve().parent.parent / "app.py"


def _sidebar_button(at, label):
    return next(b for b in at.sidebar.button if b.label == label)


@pytest.fixture
def app(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)  # the page saves storyline.json in the working directory
    at = AppTest.from_file(str(APP), default_timeout=30)
    at.run()
    _sidebar_button(at, "Load sample project").click().run()
    assert not at.exception
    return at


class TestMagnifySlider:

    def test_apply_commits_and_resets_slider_without_state_warning(self, app):
        app.select_slider(key="magnify_multiplier").set_value(2.0).run()
        assert app.session_state["engine"].zoom.display_pixels_per_day == 120

        _sidebar_button(app, "Apply").click().run()

        assert not app.exception
        assert app.session_state["magnify_multiplier"] == 1.0
        assert app.session_state["engine"].zoom.pixels_per_day == 120
        assert not any("Session State" in w.value for w in app.warning)

    def test_cancel_discards_preview(self, app):
        app.select_slider(key="magnify_multiplier").set_value(0.5).run()
        _sidebar_button(app, "Cancel").click().run()

        assert not app.exception
        assert app.session_state["magnify_multiplier"] == 1.0
        assert app.session_state["engine"].zoom.pixels_per_day == 60
        assert not any("Session State" in w.value for w in app.warning)
