# tourtrack/util/formatting.py
"""Human-readable readouts for reports and the live stats panel."""

from __future__ import annotations


def format_time(seconds: float) -> str:
    """H:MM:SS, or M:SS below one hour."""
    total = int(max(seconds, 0))
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_distance(km: float) -> str:
    if km < 1:
        return f"{round(km * 1000)} m"
    return f"{km:.2f} km"


def format_speed(kmh: float) -> str:
    return f"{kmh:.1f} km/h"


def format_elevation(meters: float) -> str:
    return f"{round(meters)} m"
