# autonote_video/timeutils.py
from __future__ import annotations


# -----------------------------
# Time formatting / conversion
# -----------------------------

def ms_to_time_str(ms: int) -> str:
    if ms is None:
        ms = 0
    ms = max(0, int(ms))
    s = ms // 1000
    m = s // 60
    s = s % 60
    return f"{m:02d}:{s:02d}"


def seconds_to_time_str(sec: float) -> str:
    """MM:SS, used for annotation range badges."""
    if sec is None:
        sec = 0.0
    return ms_to_time_str(int(float(sec) * 1000.0))


def seconds_to_ms(sec: float) -> int:
    if sec is None:
        sec = 0.0
    return int(round(float(sec) * 1000.0))


def ms_to_seconds(ms: int) -> float:
    if ms is None:
        ms = 0
    return float(ms) / 1000.0


def format_hms(total_seconds: int) -> str:
    """HH:MM:SS readout for the time tracker."""
    total = max(0, int(total_seconds or 0))
    h = total // 3600
    m = (total % 3600) // 60
    s = total % 60
    return f"{h:02d}:{m:02d}:{s:02d}"


def format_minutes_seconds(total_seconds: int) -> str:
    """Compact "Xm Ys" used in the dashboard task table."""
    total = max(0, int(total_seconds or 0))
    return f"{total // 60}m {total % 60}s"


def format_hours_minutes(total_seconds: int) -> str:
    """ "Xh Ym" used in report prompts; seconds are dropped."""
    total = max(0, int(total_seconds or 0))
    return f"{total // 3600}h {(total % 3600) // 60}m"


def format_range(start: float, end: float) -> str:
    return f"{seconds_to_time_str(start)} - {seconds_to_time_str(end)}"
