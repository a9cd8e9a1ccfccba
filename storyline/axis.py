# storyline/axis.py — date <-> pixel mapping and time-axis ticks
# • Day granularity only; any date maps to an offset (never clamps, never raises)
# • Tick/label density follows the zoom level

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta

WEEK_START = 0  # Monday


def _as_date(d):
    if isinstance(d, datetime):
        return d.date()
    return d


def round_half_away(x: float) -> int:
    # round() in Python is banker's rounding; gestures want 2.5 -> 3 and -2.5 -> -3
    if x >= 0:
        return int(math.floor(x + 0.5))
    return -int(math.floor(-x + 0.5))


def days_between(start, end) -> int:
    return (_as_date(end) - _as_date(start)).days


def x_position(d, range_start, pixels_per_day: float) -> float:
    """Offset of `d` from the start of the range; leading margins are the caller's."""
    return days_between(range_start, d) * float(pixels_per_day)


def date_from_x(offset: float, range_start, pixels_per_day: float) -> date:
    ppd = float(pixels_per_day)
    if ppd <= 0:
        return _as_date(range_start)
    return _as_date(range_start) + timedelta(days=round_half_away(offset / ppd))


def range_days(range_start, range_end) -> int:
    return max(1, days_between(range_start, range_end))


@dataclass(frozen=True)
class AxisTick:
    x: float
    day: date
    height: float
    label: str = ""
    is_major: bool = False


def _label_for(d: date, offset: int, range_start: date, ppd: float):
    """Returns (label, is_major) or None when the day carries no label at this zoom."""
    first_of_month = d.day == 1
    week_start = d.weekday() == WEEK_START
    if ppd >= 65:
        return f"{d:%a} {d.day}", (week_start or first_of_month)
    if ppd >= 35:
        if week_start or first_of_month:
            return f"{d:%b} {d.day}", first_of_month
        return None
    if ppd >= 15:
        if (week_start and d.day <= 7) or first_of_month:
            if first_of_month or (offset == 0 and d == range_start):
                return f"{d:%b}", True
            return str(d.day), False
        return None
    if first_of_month:
        return f"{d:%b}", True
    return None


def axis_ticks(range_start, range_end, pixels_per_day: float):
    start = _as_date(range_start)
    total = max(0, days_between(start, range_end))
    ppd = float(pixels_per_day)
    ticks = []
    for offset in range(total + 1):
        d = start + timedelta(days=offset)
        height = 7.0 if d.weekday() == WEEK_START else 3.5
        labelled = _label_for(d, offset, start, ppd) if ppd > 0 else None
        label, major = labelled if labelled else ("", False)
        ticks.append(AxisTick(x=offset * ppd, day=d, height=height, label=label, is_major=major))
    return ticks
