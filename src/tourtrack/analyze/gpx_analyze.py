#!/usr/bin/env python3
"""
tourtrack-analyze: trip statistics and video sync for GPX files.

Examples:
  tourtrack-analyze ride.gpx
  tourtrack-analyze ride.gpx --video-duration 600 --at 120
  tourtrack-analyze --tsv                 # pick files with fzf from track_root
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from tourtrack.analyze.sync import SYNC_MODES, PlaybackSession, synchronize, uses_timestamps
from tourtrack.analyze.track import TripStatistics, summarize
from tourtrack.config import load_config
from tourtrack.errors import ConfigError, ParseError, SelectionError
from tourtrack.export import playback_payload
from tourtrack.formats.gpx import parse_gpx_document, read_gpx_text
from tourtrack.util.formatting import (
    format_distance,
    format_elevation,
    format_speed,
    format_time,
)
from tourtrack.util.fzf import fzf_select_paths, list_gpx_candidates
from tourtrack.util.logging import log

TSV_HEADER = (
    "file\tpoints\tdistance_km\tduration_s\tavg_speed_kmh\tmax_speed_kmh"
    "\televation_gain_m\televation_loss_m\tmax_altitude_m\tmin_altitude_m"
)


def print_report(path: Path, name: str, stats: TripStatistics, *, tsv: bool) -> None:
    if tsv:
        print(
            f"{path}\t"
            f"{stats.point_count}\t"
            f"{stats.total_distance_km:.3f}\t"
            f"{stats.total_duration_s:.1f}\t"
            f"{stats.average_speed_kmh:.2f}\t"
            f"{stats.max_speed_kmh:.2f}\t"
            f"{stats.elevation_gain_m:.1f}\t"
            f"{stats.elevation_loss_m:.1f}\t"
            f"{stats.max_altitude_m:.1f}\t"
            f"{stats.min_altitude_m:.1f}"
        )
    else:
        print(f"\n{path}  ({name})")
        print(f"  points         : {stats.point_count}")
        print(f"  distance       : {format_distance(stats.total_distance_km)}")
        print(f"  duration       : {format_time(stats.total_duration_s)}")
        print(f"  avg speed      : {format_speed(stats.average_speed_kmh)}")
        print(f"  max speed      : {format_speed(stats.max_speed_kmh)}")
        print(f"  elevation gain : {format_elevation(stats.elevation_gain_m)}")
        print(f"  elevation loss : {format_elevation(stats.elevation_loss_m)}")
        print(f"  altitude       : {format_elevation(stats.min_altitude_m)}"
              f" .. {format_elevation(stats.max_altitude_m)}")


def print_sync(points, stats: TripStatistics, video_duration: float, *,
               mode: str, truncate: bool, at: Optional[float]) -> None:
    synced = synchronize(points, video_duration, stats=stats, mode=mode, truncate=truncate)
    strategy = f"timestamp/{mode}" if uses_timestamps(points, stats) else "distance"
    print(f"  sync           : {len(synced)}/{len(points)} points on "
          f"{format_time(video_duration)} of video ({strategy})")

    if at is None:
        return
    session = PlaybackSession(points=tuple(synced), stats=stats,
                              video_duration_s=video_duration)
    if not session.points:
        print("  live stats     : no GPS data available")
        return
    live = session.live_stats(at)
    print(f"  at {format_time(at):>11} : {format_speed(live.current_speed_kmh)}, "
          f"{format_elevation(live.current_altitude_m)}, "
          f"{format_distance(live.distance_km)} / {format_distance(live.total_distance_km)}")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="TourTrack: analyze GPX file(s) and sync them to video.")
    ap.add_argument("gpx", nargs="*",
                    help="One or more GPX files. If omitted, use fzf selection under track_root.")
    ap.add_argument("--track-root", default=None,
                    help="Where to look for GPX files (default: from config or ~/Tours/gpx)")
    out = ap.add_mutually_exclusive_group()
    out.add_argument("--tsv", action="store_true",
                     help="Print tab-separated output (good for piping).")
    out.add_argument("--json", action="store_true",
                     help="Print the playback payload as JSON.")
    ap.add_argument("--video-duration", type=float, default=None, metavar="SECONDS",
                    help="Synchronize the track to a video of this length.")
    ap.add_argument("--at", type=float, default=None, metavar="SECONDS",
                    help="Show live stats at this playback time (needs --video-duration).")
    ap.add_argument("--mode", choices=SYNC_MODES, default=None,
                    help="Timestamp sync mode (default: from config).")
    ap.add_argument("--no-truncate", action="store_true",
                    help="Keep GPS samples recorded after the video ends.")
    ap.add_argument("--plot", action="store_true",
                    help="Show an elevation profile for each file.")
    return ap


def main(argv: Optional[list[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    if args.at is not None and args.video_duration is None:
        ap.error("--at requires --video-duration")
    if args.video_duration is not None and args.video_duration <= 0:
        ap.error("--video-duration must be > 0")

    try:
        cfg = load_config()
    except ConfigError as e:
        log(f"ERROR: {e}", file=sys.stderr)
        return 2

    mode = args.mode or cfg.sync.mode
    truncate = cfg.sync.truncate_after_video and not args.no_truncate

    if args.gpx:
        selected = [Path(p).expanduser() for p in args.gpx]
    else:
        track_root = Path(args.track_root).expanduser() if args.track_root else cfg.track_root
        candidates = list_gpx_candidates(track_root)
        if not candidates:
            log(f"No GPX files found under {track_root}")
            return 1
        try:
            selected = fzf_select_paths(candidates, header="Select GPX file(s) to analyze:")
        except SelectionError as e:
            log(f"ERROR: {e}", file=sys.stderr)
            return 2
        if not selected:
            log("No selection made. Exiting.")
            return 0

    if args.tsv:
        print(TSV_HEADER)

    failed = 0
    for path in selected:
        try:
            doc = parse_gpx_document(read_gpx_text(path))
        except (ParseError, OSError) as e:
            log(f"Skipping {path}: {e}", file=sys.stderr)
            failed += 1
            continue

        if args.json:
            payload = playback_payload(doc, args.video_duration, mode=mode, truncate=truncate)
            payload["file"] = str(path)
            print(json.dumps(payload, indent=2))
            continue

        enriched, stats = summarize(doc.points)
        print_report(path, doc.name, stats, tsv=args.tsv)
        if args.video_duration is not None and not args.tsv:
            print_sync(enriched, stats, args.video_duration,
                       mode=mode, truncate=truncate, at=args.at)

        if args.plot:
            from tourtrack.visualize.plot import plot_elevation_profile
            plot_elevation_profile(enriched, show=True)

    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
