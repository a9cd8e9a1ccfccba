# storyline/zoom.py — pixels-per-day owner
# • Discrete steps and pinch/magnify gestures clamp to [absolute_min, absolute_max]
# • A gesture's intermediate value is preview-only until end_magnify()
# • Layout uses effective_pixels_per_day(), which never lets the range be narrower than the viewport

import logging
from typing import Optional

from storyline.config import ZoomLimits

LOG = logging.getLogger("storyline")


def content_fit_minimum(viewport_width: float, visible_range_days: float) -> float:
    return max(0.0, float(viewport_width)) / max(1.0, float(visible_range_days))


class ZoomController:
    def __init__(self, limits: Optional[ZoomLimits] = None, pixels_per_day: Optional[float] = None):
        self.limits = limits or ZoomLimits()
        self.pixels_per_day = self.clamp(self.limits.default if pixels_per_day is None else pixels_per_day)
        self._gesture_base: Optional[float] = None
        self._gesture_multiplier = 1.0

    def clamp(self, value: float) -> float:
        return max(self.limits.absolute_min, min(self.limits.absolute_max, float(value)))

    def zoom_in(self) -> float:
        self.pixels_per_day = self.clamp(self.pixels_per_day * self.limits.step_factor)
        return self.pixels_per_day

    def zoom_out(self) -> float:
        self.pixels_per_day = self.clamp(self.pixels_per_day / self.limits.step_factor)
        return self.pixels_per_day

    def set_pixels_per_day(self, value: float) -> float:
        self.pixels_per_day = self.clamp(value)
        return self.pixels_per_day

    # ---- continuous (pinch / magnify) ----
    @property
    def gesture_active(self) -> bool:
        return self._gesture_base is not None

    def begin_magnify(self):
        self._gesture_base = self.pixels_per_day
        self._gesture_multiplier = 1.0

    def update_magnify(self, multiplier: float) -> float:
        if self._gesture_base is None:
            self.begin_magnify()
        self._gesture_multiplier = float(multiplier)
        return self.display_pixels_per_day

    def end_magnify(self, multiplier: Optional[float] = None) -> float:
        if self._gesture_base is None:
            self.begin_magnify()
        m = self._gesture_multiplier if multiplier is None else float(multiplier)
        self.pixels_per_day = self.clamp(self._gesture_base * m)
        self._gesture_base = None
        self._gesture_multiplier = 1.0
        LOG.debug("magnify committed: %.2f px/day", self.pixels_per_day)
        return self.pixels_per_day

    def cancel_magnify(self):
        self._gesture_base = None
        self._gesture_multiplier = 1.0

    def continuous_zoom(self, multiplier: float) -> float:
        """One-shot gesture: apply `multiplier` to the current value and commit."""
        self.begin_magnify()
        return self.end_magnify(multiplier)

    @property
    def display_pixels_per_day(self) -> float:
        # preview while a gesture is in flight; committed value otherwise
        if self._gesture_base is None:
            return self.pixels_per_day
        return self.clamp(self._gesture_base * self._gesture_multiplier)

    def effective_pixels_per_day(self, viewport_width: float, visible_range_days: float) -> float:
        return max(self.display_pixels_per_day,
                   content_fit_minimum(viewport_width, visible_range_days),
                   self.limits.absolute_min)
