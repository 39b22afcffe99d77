# tourtrack/formats/gpx.py
"""
GPX parsing for TourTrack

This module is intentionally format-focused:
- GPX namespace handling (1.0, 1.1, or none at all)
- turning a GPX document into an ordered list of TrackPoint records
- extracting track name and metadata

Key design principle:
  The parser never touches disk itself. `read_gpx_text` is the only I/O
  helper here; everything else works on an in-memory string so the same
  code serves tour creation and playback.

Parsing is strict: one unreadable track point fails the whole document
with ParseError. There is no recovery path downstream, so a partially
parsed track would silently produce wrong statistics.
"""

from __future__ import annotations

import datetime as _dt
import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from xml.etree import ElementTree as ET

from tourtrack.errors import ParseError

DEFAULT_TRACK_NAME = "Unnamed Track"

_FRACTION_RE = re.compile(r"\.(\d+)")


def _local(tag: str) -> str:
    """
    Strip the namespace from an ElementTree tag.

    ElementTree represents namespaced tags internally as
      "{namespace-uri}tag"
    """
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _child(elem: ET.Element, name: str) -> Optional[ET.Element]:
    for c in elem:
        if _local(c.tag) == name:
            return c
    return None


def _child_text(elem: Optional[ET.Element], name: str) -> str:
    if elem is None:
        return ""
    c = _child(elem, name)
    if c is None or c.text is None:
        return ""
    return c.text.strip()


def parse_gpx_time(text: str) -> Optional[_dt.datetime]:
    """
    Parse an ISO-8601 timestamp found in GPX <time> nodes.

    Expected examples:
      - "2026-01-02T21:14:44Z"
      - "2026-01-02T21:14:44.123Z"
      - "2026-01-02T21:14:44.5Z"        (any number of fractional digits)
      - "2026-01-02T21:14:44+00:00"

    Empty text means "no timestamp" and returns None. Anything else that
    is not a valid timestamp raises ValueError.
    """
    s = (text or "").strip()
    if not s:
        return None

    # GPX times commonly use Z for UTC.
    if s.endswith("Z") or s.endswith("z"):
        s = s[:-1] + "+00:00"

    # fromisoformat on 3.10 only takes 3 or 6 fractional digits
    s = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), s, count=1)

    dt =_dt.datetime.fromisoformat(s)

    # Ensure tz-aware; if naive, assume UTC (conservative for GPX sources)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=_dt.timezone.utc)

    return dt.astimezone(_dt.timezone.utc)


def format_gpx_time(dt: _dt.datetime) -> str:
    """
    Format a datetime as GPX time (UTC with Z).
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=_dt.timezone.utc)
    dt_utc = dt.astimezone(_dt.timezone.utc)
    return dt_utc.isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class TrackPoint:
    """
    One GPS sample, exactly as read from the document.

    `elevation` and `timestamp` are optional. Formulas that need a number
    use `elevation_m`, which defaults to 0.0; presence is reported
    separately by `has_elevation` / `has_timestamp`.
    """

    latitude: float
    longitude: float
    elevation: Optional[float] = None
    timestamp: Optional[_dt.datetime] = None
    sequence_index: int = 0

    @property
    def has_elevation(self) -> bool:
        return self.elevation is not None

    @property
    def has_timestamp(self) -> bool:
        return self.timestamp is not None

    @property
    def elevation_m(self) -> float:
        return self.elevation if self.elevation is not None else 0.0


@dataclass(frozen=True)
class GpxMetadata:
    author: Optional[str] = None
    link: Optional[str] = None
    time: Optional[_dt.datetime] = None


@dataclass(frozen=True)
class GpxDocument:
    """
    A parsed GPX document: the track name, metadata and every track point.
    """
    name: str
    points: tuple[TrackPoint, ...]
    metadata: GpxMetadata = field(default_factory=GpxMetadata)


def read_gpx_text(path: Path) -> str:
    """
    Read a GPX file into a string.

    Raises:
      OSError, ParseError (not UTF-8 text)
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"GPX file is not UTF-8 text: {path}") from e


def _parse_root(text: str) -> ET.Element:
    if not isinstance(text, str):
        raise ParseError(f"GPX document must be text, got {type(text).__name__}")
    try:
        return ET.fromstring(text.lstrip("\ufeff \t\r\n"))
    except ET.ParseError as e:
        raise ParseError(f"Invalid GPX file format: {e}") from e


def _coord(trkpt: ET.Element, attr: str, limit: float, index: int) -> float:
    raw = trkpt.get(attr)
    if raw is None:
        raise ParseError(f"Track point {index} has no '{attr}' attribute")
    try:
        value = float(raw)
    except ValueError as e:
        raise ParseError(f"Track point {index} has non-numeric {attr}={raw!r}") from e
    if not math.isfinite(value) or abs(value) > limit:
        raise ParseError(f"Track point {index} has out-of-range {attr}={raw!r}")
    return value


def _parse_trkpt(trkpt: ET.Element, index: int) -> TrackPoint:
    lat = _coord(trkpt, "lat", 90.0, index)
    lon = _coord(trkpt, "lon", 180.0, index)

    ele = None
    ele_text = _child_text(trkpt, "ele")
    if ele_text:
        try:
            ele = float(ele_text)
        except ValueError as e:
            raise ParseError(f"Track point {index} has non-numeric ele={ele_text!r}") from e
        if not math.isfinite(ele):
            raise ParseError(f"Track point {index} has non-finite ele={ele_text!r}")

    time_text = _child_text(trkpt, "time")
    try:
        time = parse_gpx_time(time_text)
    except ValueError as e:
        raise ParseError(f"Track point {index} has invalid time={time_text!r}") from e

    return TrackPoint(
        latitude=lat,
        longitude=lon,
        elevation=ele,
        timestamp=time,
        sequence_index=index,
    )


def extract_trackpoints(root: ET.Element) -> list[TrackPoint]:
    """Extract ordered trackpoints from a GPX root element."""
    trkpts = [e for e in root.iter() if _local(e.tag) == "trkpt"]
    if not trkpts:
        raise ParseError("No track points found in GPX file")
    return [_parse_trkpt(trkpt, i) for i, trkpt in enumerate(trkpts)]


def _extract_metadata(root: ET.Element) -> GpxMetadata:
    md = _child(root, "metadata")
    if md is None:
        return GpxMetadata()

    author = _child_text(_child(md, "author"), "name") or None
    link_el = _child(md, "link")
    link = link_el.get("href") if link_el is not None else None

    # Metadata time is informational; unparseable values are ignored.
    try:
        time = parse_gpx_time(_child_text(md, "time"))
    except ValueError:
        time = None

    return GpxMetadata(author=author, link=link, time=time)


def parse_gpx(text: str) -> list[TrackPoint]:
    """
    Parse GPX text into an ordered list of TrackPoint.

    Raises:
      ParseError if the XML is malformed, contains no <trkpt>, or any point
      carries an unreadable lat/lon/ele/time.
    """
    return extract_trackpoints(_parse_root(text))


def parse_gpx_document(text: str) -> GpxDocument:
    """
    Parse GPX text into a GpxDocument (points, first track name, metadata).
    """
    root = _parse_root(text)
    points = extract_trackpoints(root)
    trk = _child(root, "trk")
    name = _child_text(trk, "name") or DEFAULT_TRACK_NAME
    return GpxDocument(name=name, points=tuple(points), metadata=_extract_metadata(root))
