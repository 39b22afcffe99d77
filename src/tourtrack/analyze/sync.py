# tourtrack/analyze/sync.py
"""
Video / track synchronization for TourTrack

Maps each track point onto a video's playback timeline.

Strategies (chosen by data availability):
  - timestamp: the first point is timestamped and the trip lasted > 0 s.
      mode="scaled":  the whole recorded interval is stretched onto the video
      mode="elapsed": one second of track is one second of video, starting at
                      the first point (trailing samples can fall past the end)
  - distance:  otherwise; video time is proportional to distance travelled.

`truncate=True` drops points whose video time lies after the end of the
video. That is the policy used when statistics are stored at tour creation.

Everything here is a pure function of its inputs. Nothing is cached.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from tourtrack.analyze.track import (
    EnrichedTrackPoint,
    TripStatistics,
    summarize,
)
from tourtrack.errors import EmptyTrackError, InvalidDurationError
from tourtrack.formats.gpx import TrackPoint, parse_gpx

SYNC_MODES = ("scaled", "elapsed")


@dataclass(frozen=True)
class SynchronizedPoint(EnrichedTrackPoint):
    """EnrichedTrackPoint placed on the video timeline."""

    video_time_s: float = 0.0
    normalized_time: float = 0.0


@dataclass(frozen=True)
class LiveStats:
    """Readouts for the live playback panel at one playback time."""

    video_time_s: float
    current_speed_kmh: float
    current_altitude_m: float
    distance_km: float
    total_distance_km: float
    progress: float


def _check_duration(video_duration_s: float) -> float:
    try:
        value = float(video_duration_s)
    except (TypeError, ValueError) as e:
        raise InvalidDurationError(f"Video duration must be a number, got {video_duration_s!r}") from e
    if not math.isfinite(value) or value <= 0:
        raise InvalidDurationError(f"Video duration must be > 0 seconds, got {video_duration_s!r}")
    return value


def _enriched_with_stats(
    points: Sequence[TrackPoint], stats: Optional[TripStatistics]
) -> tuple[Sequence[EnrichedTrackPoint], TripStatistics]:
    if stats is not None and all(isinstance(p, EnrichedTrackPoint) for p in points):
        return points, stats
    enriched, computed = summarize(points)
    return enriched, stats if stats is not None else computed


def _timestamp_times(
    points: Sequence[EnrichedTrackPoint], stats: TripStatistics, video_duration_s: float, mode: str
) -> list[float]:
    start = points[0].timestamp

    times: list[float] = []
    prev = 0.0
    for p in points:
        if p.timestamp is None:
            # untimed sample sits with its predecessor
            times.append(prev)
            continue
        elapsed = max((p.timestamp - start).total_seconds(), 0.0)
        if mode == "scaled":
            prev = elapsed / stats.total_duration_s * video_duration_s
        else:
            prev = elapsed
        times.append(prev)
    return times


def _distance_times(
    points: Sequence[EnrichedTrackPoint], video_duration_s: float
) -> list[float]:
    total_m = points[-1].cumulative_distance_m
    if total_m <= 0:
        return [0.0] * len(points)
    return [p.cumulative_distance_m / total_m * video_duration_s for p in points]


def uses_timestamps(points: Sequence[TrackPoint], stats: TripStatistics) -> bool:
    """True when the timestamp strategy applies to this track."""
    return bool(points) and points[0].timestamp is not None and stats.total_duration_s > 0


def synchronize(
    points: Sequence[TrackPoint],
    video_duration_s: float,
    *,
    stats: Optional[TripStatistics] = None,
    mode: str = "scaled",
    truncate: bool = False,
) -> list[SynchronizedPoint]:
    """
    Assign a video time to every track point.

    `points` may be enriched points (pass their `stats` to skip the
    aggregation pass) or plain TrackPoints. Output has the same length and
    order as the input unless `truncate` is set.

    Raises:
      InvalidDurationError if video_duration_s is not > 0
      ValueError for an unknown mode
    """
    duration = _check_duration(video_duration_s)
    if mode not in SYNC_MODES:
        raise ValueError(f"Unknown sync mode {mode!r} (expected one of {SYNC_MODES})")
    if not points:
        return []

    enriched, stats = _enriched_with_stats(points, stats)

    if uses_timestamps(enriched, stats):
        times = _timestamp_times(enriched, stats, duration, mode)
    else:
        times = _distance_times(enriched, duration)

    out: list[SynchronizedPoint] = []
    for p, t in zip(enriched, times):
        if truncate and t > duration:
            continue
        out.append(
            SynchronizedPoint(
                latitude=p.latitude,
                longitude=p.longitude,
                elevation=p.elevation,
                timestamp=p.timestamp,
                sequence_index=p.sequence_index,
                cumulative_distance_m=p.cumulative_distance_m,
                speed_kmh=p.speed_kmh,
                grade_percent=p.grade_percent,
                video_time_s=t,
                normalized_time=t / duration,
            )
        )
    return out


def point_at_time(synced: Sequence[SynchronizedPoint], query_time_s: float) -> SynchronizedPoint:
    """
    Return the synchronized point closest to `query_time_s`.

    Ties go to the earliest point in sequence order.

    Raises:
      EmptyTrackError if there are no points
    """
    if not synced:
        raise EmptyTrackError("No track points to query")

    best = synced[0]
    best_diff = abs(best.video_time_s - query_time_s)
    for p in synced[1:]:
        diff = abs(p.video_time_s - query_time_s)
        if diff < best_diff:
            best, best_diff = p, diff
    return best


@dataclass(frozen=True)
class PlaybackSession:
    """
    One viewer's playback state: a synchronized track for a fixed video
    duration. Built once, then queried repeatedly as playback advances.
    """

    points: tuple[SynchronizedPoint, ...]
    stats: TripStatistics
    video_duration_s: float

    @classmethod
    def from_points(
        cls, points: Sequence[TrackPoint], video_duration_s: float, *, mode: str = "scaled"
    ) -> "PlaybackSession":
        enriched, stats = summarize(points)
        synced = synchronize(enriched, video_duration_s, stats=stats, mode=mode)
        return cls(points=tuple(synced), stats=stats, video_duration_s=float(video_duration_s))

    @classmethod
    def from_gpx(cls, text: str, video_duration_s: float, *, mode: str = "scaled") -> "PlaybackSession":
        return cls.from_points(parse_gpx(text), video_duration_s, mode=mode)

    def at(self, video_time_s: float) -> SynchronizedPoint:
        return point_at_time(self.points, video_time_s)

    def live_stats(self, video_time_s: float) -> LiveStats:
        p = self.at(video_time_s)
        total_km = self.stats.total_distance_km
        distance_km = p.cumulative_distance_m / 1000
        return LiveStats(
            video_time_s=video_time_s,
            current_speed_kmh=p.speed_kmh,
            current_altitude_m=p.elevation_m,
            distance_km=distance_km,
            total_distance_km=total_km,
            progress=distance_km / total_km if total_km > 0 else 0.0,
        )
