# tourtrack/export.py
"""
tourtrack.export

JSON-compatible payloads handed to the persistence/API layer.

These are thin adapters: all numbers come from tourtrack.analyze, so the
statistics stored with a tour and the ones shown during playback agree.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Sequence

from tourtrack.analyze.sync import SynchronizedPoint, synchronize
from tourtrack.analyze.track import TripStatistics, summarize, track_bounds
from tourtrack.errors import ParseError
from tourtrack.formats.gpx import GpxDocument, format_gpx_time, parse_gpx, read_gpx_text
from tourtrack.util.logging import log


def tour_statistics_payload(stats: TripStatistics) -> dict[str, float]:
    """The statistics record stored alongside a tour."""
    return {
        "distance": stats.total_distance_km,
        "duration": stats.total_duration_s,
        "avgSpeed": stats.average_speed_kmh,
        "maxSpeed": stats.max_speed_kmh,
        "elevationGain": stats.elevation_gain_m,
        "maxAltitude": stats.max_altitude_m,
    }


def synchronized_payload(synced: Sequence[SynchronizedPoint]) -> list[dict[str, Any]]:
    return [
        {
            "index": p.sequence_index,
            "videoTimestamp": p.video_time_s,
            "normalizedTime": p.normalized_time,
            "lat": p.latitude,
            "lon": p.longitude,
            "ele": p.elevation,
            "distance": p.cumulative_distance_m,
            "speed": p.speed_kmh,
            "grade": p.grade_percent,
            "originalTime": format_gpx_time(p.timestamp) if p.timestamp else None,
        }
        for p in synced
    ]


def playback_payload(
    document: GpxDocument,
    video_duration_s: Optional[float],
    *,
    mode: str = "scaled",
    truncate: bool = True,
) -> dict[str, Any]:
    """
    Response body for a tour's playback-data request.

    Samples recorded after the video ends are dropped unless `truncate`
    is False. Without a video duration the `synchronized` list is empty;
    a duration that is given but not > 0 raises InvalidDurationError.
    """
    enriched, stats = summarize(document.points)

    synced: list[SynchronizedPoint] = []
    if video_duration_s is not None:
        synced = synchronize(enriched, video_duration_s, stats=stats, mode=mode, truncate=truncate)

    bounds = track_bounds(document.points)
    return {
        "name": document.name,
        "statistics": tour_statistics_payload(stats),
        "synchronized": synchronized_payload(synced),
        "bounds": None if bounds is None else {
            "southwest": list(bounds.southwest),
            "northeast": list(bounds.northeast),
        },
    }


def tour_statistics_from_file(gpx_path: Path) -> Optional[dict[str, float]]:
    """
    Statistics to store when a tour is created from a GPX file.

    A tour may exist without GPX enrichment, so an unreadable file is
    logged and reported as None.
    """
    try:
        points = parse_gpx(read_gpx_text(gpx_path))
    except (ParseError, OSError) as e:
        log(f"GPX parsing error for {gpx_path}: {e}; continuing without GPX stats")
        return None
    _, stats = summarize(points)
    return tour_statistics_payload(stats)
