# tourtrack/analyze/geodesic.py
"""
Great-circle distance for TourTrack.

Every distance in the engine goes through `distance()`, so stored tour
statistics and live playback readouts share a single Earth radius.
"""

from haversine import haversine, Unit

EARTH_RADIUS_M = 6_371_000.0


def distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Haversine distance in meters on a sphere of radius EARTH_RADIUS_M.

    haversine() returns the central angle for Unit.RADIANS; scaling it here
    pins the radius instead of using the library's mean-radius constant.
    """
    if lat1 == lat2 and lon1 == lon2:
        return 0.0
    return haversine((lat1, lon1), (lat2, lon2), unit=Unit.RADIANS) * EARTH_RADIUS_M


def point_distance(p0, p1) -> float:
    """Distance in meters between two objects with latitude/longitude."""
    return distance(p0.latitude, p0.longitude, p1.latitude, p1.longitude)
