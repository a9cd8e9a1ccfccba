# storyline/config.py — drawing, zoom and range constants
# • Frozen dataclasses so a host can override sizes without touching the engine

from dataclasses import dataclass

# ---------- Palette ----------
PALETTE_MAP = {
    "Blue":   "#3B82F6",
    "Green":  "#10B981",
    "Amber":  "#F59E0B",
    "Rose":   "#F43F5E",
    "Purple": "#8B5CF6",
    "Slate":  "#64748B",
}
PALETTE_OPTIONS = list(PALETTE_MAP.keys())
DEFAULT_EVENT_COLOR = PALETTE_MAP["Blue"]
GENERAL_LANE_NAME = "General"

# ---------- Visible range ----------
RANGE_PADDING_DAYS = 2
MIN_RANGE_DAYS = 10
EMPTY_WINDOW_BEFORE_DAYS = 1
EMPTY_WINDOW_AFTER_DAYS = 29


@dataclass(frozen=True)
class LayoutMetrics:
    lane_header_width: float = 150
    horizontal_padding: float = 20
    lane_height: float = 85
    axis_header_height: float = 50
    bottom_margin: float = 50
    instantaneous_width: float = 8
    block_height: float = 44
    block_offset_fraction: float = 0.40
    arc_top_offset: float = 10
    arc_height: float = 8
    peak_tick_height: float = 12
    min_arc_width: float = 5

    @property
    def content_left(self) -> float:
        return self.lane_header_width + self.horizontal_padding

    def lane_top(self, index: int) -> float:
        return self.axis_header_height + index * self.lane_height

    def available_width(self, viewport_width: float) -> float:
        return viewport_width - self.lane_header_width - 2 * self.horizontal_padding


@dataclass(frozen=True)
class ZoomLimits:
    default: float = 60
    absolute_min: float = 10
    absolute_max: float = 300
    step_factor: float = 1.4
