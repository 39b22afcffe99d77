# tourtrack/analyze/track.py
"""
Track analysis functions for TourTrack

`summarize()` is the single place where per-point fields and trip
statistics are defined. It is a fold over consecutive point pairs and
returns fresh immutable records; the input sequence is never touched.

Units:
  - distances along the path: meters (cumulative_distance_m)
  - trip distance: kilometers (total_distance_km)
  - speeds: km/h
  - grade: percent
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from tourtrack.analyze.geodesic import point_distance
from tourtrack.formats.gpx import TrackPoint, format_gpx_time, parse_gpx, read_gpx_text

MPS_TO_KMH = 3.6


@dataclass(frozen=True)
class EnrichedTrackPoint(TrackPoint):
    """TrackPoint plus the fields derived from the segment ending here."""

    cumulative_distance_m: float = 0.0
    speed_kmh: float = 0.0
    grade_percent: float = 0.0


@dataclass(frozen=True)
class TripStatistics:
    total_distance_km: float = 0.0
    total_duration_s: float = 0.0
    elevation_gain_m: float = 0.0
    elevation_loss_m: float = 0.0
    max_altitude_m: float = 0.0
    min_altitude_m: float = 0.0
    max_speed_kmh: float = 0.0
    average_speed_kmh: float = 0.0
    point_count: int = 0


@dataclass(frozen=True)
class TrackBounds:
    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float

    @property
    def southwest(self) -> tuple[float, float]:
        return (self.min_lat, self.min_lon)

    @property
    def northeast(self) -> tuple[float, float]:
        return (self.max_lat, self.max_lon)


def enrich(point: TrackPoint, *, cumulative_distance_m: float = 0.0,
           speed_kmh: float = 0.0, grade_percent: float = 0.0) -> EnrichedTrackPoint:
    """Copy a TrackPoint into an EnrichedTrackPoint with the given derived fields."""
    return EnrichedTrackPoint(
        latitude=point.latitude,
        longitude=point.longitude,
        elevation=point.elevation,
        timestamp=point.timestamp,
        sequence_index=point.sequence_index,
        cumulative_distance_m=cumulative_distance_m,
        speed_kmh=speed_kmh,
        grade_percent=grade_percent,
    )


def _elapsed_s(p0: TrackPoint, p1: TrackPoint) -> Optional[float]:
    if p0.timestamp is None or p1.timestamp is None:
        return None
    return (p1.timestamp - p0.timestamp).total_seconds()


def compute_step_metrics(p0: TrackPoint, p1: TrackPoint) -> tuple[float, float, float]:
    """
    Return (distance m, speed km/h, elevation difference m) for one segment.

    Speed is 0 unless both points are timestamped and time moves forward.
    Elevation difference is 0 unless both points carry an elevation.
    """
    d_m = point_distance(p0, p1)

    speed = 0.0
    elapsed = _elapsed_s(p0, p1)
    if elapsed is not None and elapsed > 0:
        speed = (d_m / elapsed) * MPS_TO_KMH

    elev_diff = 0.0
    if p0.has_elevation and p1.has_elevation:
        elev_diff = p1.elevation - p0.elevation

    return d_m, speed, elev_diff


def summarize(points: Sequence[TrackPoint]) -> tuple[list[EnrichedTrackPoint], TripStatistics]:
    """
    Derive enriched points and trip statistics from an ordered track.

    Fewer than 2 points yields unenriched copies (all derived fields 0)
    and a zeroed TripStatistics.
    """
    if len(points) < 2:
        return [enrich(p) for p in points], TripStatistics(point_count=len(points))

    enriched = [enrich(points[0])]
    cumulative = 0.0
    gain = 0.0
    loss = 0.0
    max_speed = 0.0

    for p0, p1 in zip(points, points[1:]):
        d_m, speed, elev_diff = compute_step_metrics(p0, p1)
        cumulative += d_m
        max_speed = max(max_speed, speed)

        if elev_diff > 0:
            gain += elev_diff
        else:
            loss += abs(elev_diff)

        grade = (elev_diff / d_m) * 100 if d_m > 0 else 0.0
        enriched.append(enrich(p1, cumulative_distance_m=cumulative,
                               speed_kmh=speed, grade_percent=grade))

    elevations = [p.elevation for p in points if p.has_elevation]

    total_km = enriched[-1].cumulative_distance_m / 1000
    duration = _elapsed_s(points[0], points[-1]) or 0.0
    duration = max(duration, 0.0)
    avg = total_km / duration * 3600 if total_km > 0 and duration > 0 else 0.0

    stats = TripStatistics(
        total_distance_km=total_km,
        total_duration_s=duration,
        elevation_gain_m=gain,
        elevation_loss_m=loss,
        max_altitude_m=max(elevations) if elevations else 0.0,
        min_altitude_m=min(elevations) if elevations else 0.0,
        max_speed_kmh=max_speed,
        average_speed_kmh=avg,
        point_count=len(points),
    )
    return enriched, stats


def analyze_track(gpx_path: Path) -> TripStatistics:
    """Read, parse and summarize a GPX file."""
    _, stats = summarize(parse_gpx(read_gpx_text(gpx_path)))
    return stats


# ---------------------------
# Map / chart helpers
# ---------------------------
def path_coordinates(points: Sequence[TrackPoint]) -> list[tuple[float, float]]:
    return [(p.latitude, p.longitude) for p in points]


def elevation_profile(enriched: Sequence[EnrichedTrackPoint]) -> list[dict]:
    return [
        {"distance": p.cumulative_distance_m, "elevation": p.elevation_m, "grade": p.grade_percent}
        for p in enriched
    ]


def speed_profile(enriched: Sequence[EnrichedTrackPoint]) -> list[dict]:
    return [
        {
            "distance": p.cumulative_distance_m,
            "speed": p.speed_kmh,
            "time": format_gpx_time(p.timestamp) if p.timestamp else None,
        }
        for p in enriched
    ]


def track_bounds(points: Sequence[TrackPoint]) -> Optional[TrackBounds]:
    """Bounding box of the track, or None for an empty track."""
    if not points:
        return None
    lats = [p.latitude for p in points]
    lons = [p.longitude for p in points]
    return TrackBounds(min_lat=min(lats), min_lon=min(lons), max_lat=max(lats), max_lon=max(lons))


def to_geojson(enriched: Sequence[EnrichedTrackPoint], stats: TripStatistics) -> dict:
    """
    Export the track as a GeoJSON Feature (LineString of [lon, lat, ele]).
    """
    return {
        "type": "Feature",
        "geometry": {
            "type": "LineString",
            "coordinates": [[p.longitude, p.latitude, p.elevation_m] for p in enriched],
        },
        "properties": {
            "totalPoints": stats.point_count,
            "totalDistance": stats.total_distance_km,
            "totalDuration": stats.total_duration_s,
            "elevationGain": stats.elevation_gain_m,
            "elevationLoss": stats.elevation_loss_m,
            "maxSpeed": stats.max_speed_kmh,
            "maxAltitude": stats.max_altitude_m,
            "minAltitude": stats.min_altitude_m,
            "averageSpeed": stats.average_speed_kmh,
        },
    }
