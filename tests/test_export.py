import json

import pytest

from tourtrack.analyze.track import TripStatistics
from tourtrack.errors import InvalidDurationError
from tourtrack.export import (
    playback_payload,
    tour_statistics_from_file,
    tour_statistics_payload,
)
from tourtrack.formats.gpx import parse_gpx_document


def test_tour_statistics_payload_keys():
    stats = TripStatistics(
        total_distance_km=12.5,
        total_duration_s=3600,
        elevation_gain_m=300,
        max_altitude_m=1200,
        max_speed_kmh=42,
        average_speed_kmh=12.5,
    )
    assert tour_statistics_payload(stats) == {
        "distance": 12.5,
        "duration": 3600,
        "avgSpeed": 12.5,
        "maxSpeed": 42,
        "elevationGain": 300,
        "maxAltitude": 1200,
    }


def test_tour_statistics_from_file(sample_gpx_path):
    payload = tour_statistics_from_file(sample_gpx_path)

    assert payload["distance"] == pytest.approx(0.4448, abs=0.0005)
    assert payload["duration"] == 40
    assert payload["elevationGain"] == pytest.approx(25)
    assert payload["maxAltitude"] == 120


def test_tour_statistics_from_bad_file_degrades_to_none(tmp_path, capsys):
    bad = tmp_path / "broken.gpx"
    bad.write_text("<gpx>", encoding="utf-8")

    assert tour_statistics_from_file(bad) is None
    assert tour_statistics_from_file(tmp_path / "missing.gpx") is None
    assert "continuing without GPX stats" in capsys.readouterr().out


def test_playback_payload_is_json_serializable(sample_gpx_text):
    doc = parse_gpx_document(sample_gpx_text)
    payload = playback_payload(doc, 80)

    decoded = json.loads(json.dumps(payload))
    assert decoded["name"] == "Equator Ride"
    assert decoded["statistics"]["duration"] == 40
    assert len(decoded["synchronized"]) == 5
    assert decoded["bounds"] == {"southwest": [0.0, 0.0], "northeast": [0.0, 0.004]}

    third = decoded["synchronized"][2]
    assert third["index"] == 2
    assert third["videoTimestamp"] == pytest.approx(40)
    assert third["normalizedTime"] == pytest.approx(0.5)
    assert third["ele"] == 105
    assert third["originalTime"] == "2025-06-01T10:00:20Z"


def test_playback_payload_elapsed_truncates_by_default(sample_gpx_text):
    doc = parse_gpx_document(sample_gpx_text)
    payload = playback_payload(doc, 25, mode="elapsed")

    assert [p["videoTimestamp"] for p in payload["synchronized"]] == [0, 10, 20]


def test_playback_payload_keeps_late_samples_when_asked(gpx_factory):
    doc = parse_gpx_document(gpx_factory([
        (0, 0, None, "2025-06-01T10:00:00Z"),
        (0, 0.001, None, "2025-06-01T10:00:59Z"),
    ]))

    kept = playback_payload(doc, 30, mode="elapsed", truncate=False)
    dropped = playback_payload(doc, 30, mode="elapsed")

    assert [p["videoTimestamp"] for p in kept["synchronized"]] == [0, 59]
    assert [p["videoTimestamp"] for p in dropped["synchronized"]] == [0]


def test_playback_payload_without_video(sample_gpx_text):
    payload = playback_payload(parse_gpx_document(sample_gpx_text), None)
    assert payload["synchronized"] == []
    assert payload["statistics"]["maxAltitude"] == 120


@pytest.mark.parametrize("duration", [0, -5])
def test_playback_payload_rejects_invalid_duration(sample_gpx_text, duration):
    with pytest.raises(InvalidDurationError):
        playback_payload(parse_gpx_document(sample_gpx_text), duration)
