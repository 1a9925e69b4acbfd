"""
Geospatial utilities for route planning.

Includes coordinate validation, great-circle distances, a local planar
projection and the segment primitives used by zone avoidance.

The planar helpers use an equirectangular approximation anchored at an
origin point (longitude scaled by cos(origin latitude)). Errors grow with
distance from the origin and with latitude; results are acceptable for
corridors up to a few tens of kilometers (city/regional trips). Callers that
need continental distances should use haversine_distance directly.
"""
import math
from dataclasses import dataclass
from typing import List, Tuple

import polyline
from shapely.geometry import LineString, Point

from utils.distance import EARTH_RADIUS_M, haversine_distance


@dataclass(frozen=True)
class LatLng:
    """Immutable geographic point in decimal degrees."""
    lat: float
    lng: float

    def to_dict(self) -> dict:
        return {'lat': self.lat, 'lng': self.lng}


def is_valid_coordinates(latitude: float, longitude: float) -> bool:
    """
    Validate geographic coordinates, including edge cases at equator and prime meridian.

    Args:
        latitude: Latitude value (-90 to 90), where 0 is the equator
        longitude: Longitude value (-180 to 180), where 0 is the prime meridian

    Returns:
        True if coordinates are valid, False otherwise

    Examples:
        >>> is_valid_coordinates(0, 0)
        True
        >>> is_valid_coordinates(91, 0)
        False
        >>> is_valid_coordinates(float('nan'), 0)
        False
    """
    try:
        lat = float(latitude)
        lon = float(longitude)

        if math.isnan(lat) or math.isnan(lon) or math.isinf(lat) or math.isinf(lon):
            return False

        return -90 <= lat <= 90 and -180 <= lon <= 180
    except (TypeError, ValueError):
        return False


def haversine_between(a: LatLng, b: LatLng) -> float:
    """Great-circle distance in meters between two points."""
    return haversine_distance(a.lat, a.lng, b.lat, b.lng)


def to_local_xy(origin: LatLng, point: LatLng) -> Tuple[float, float]:
    """
    Project a point to planar meters relative to origin.

    Returns:
        (x, y) where x grows eastward and y northward
    """
    x = math.radians(point.lng - origin.lng) * EARTH_RADIUS_M * math.cos(math.radians(origin.lat))
    y = math.radians(point.lat - origin.lat) * EARTH_RADIUS_M
    return x, y


def from_local_xy(origin: LatLng, x: float, y: float) -> LatLng:
    """Inverse of to_local_xy."""
    lat = origin.lat + math.degrees(y / EARTH_RADIUS_M)
    lng = origin.lng + math.degrees(x / (EARTH_RADIUS_M * math.cos(math.radians(origin.lat))))
    return LatLng(lat, lng)


def point_to_segment_distance(a: LatLng, b: LatLng, c: LatLng) -> float:
    """
    Distance in meters from point c to segment a->b.

    Works in the local plane anchored at a. The projection of c onto the
    segment is clamped to the segment ends, so points beyond either end are
    measured to that end.
    """
    bx, by = to_local_xy(a, b)
    cx, cy = to_local_xy(a, c)

    if bx == 0 and by == 0:
        return math.hypot(cx, cy)

    return LineString([(0.0, 0.0), (bx, by)]).distance(Point(cx, cy))


def segment_intersects_circle(a: LatLng, b: LatLng, center: LatLng, radius_m: float) -> bool:
    """True if segment a->b comes within radius_m of center (boundary counts)."""
    return point_to_segment_distance(a, b, center) <= radius_m


def chord_projection(start: LatLng, end: LatLng, point: LatLng) -> Tuple[float, Tuple[float, float]]:
    """
    Project point onto the chord start->end.

    Returns:
        (t, (px, py)): t is the normalized position along the chord clamped
        to [0, 1]; (px, py) is the projected point in the local plane
        anchored at start. A zero-length chord projects everything onto start.
    """
    ex, ey = to_local_xy(start, end)
    if ex == 0 and ey == 0:
        return 0.0, (0.0, 0.0)

    chord = LineString([(0.0, 0.0), (ex, ey)])
    t = chord.project(Point(to_local_xy(start, point)), normalized=True)
    projected = chord.interpolate(t, normalized=True)
    return min(max(t, 0.0), 1.0), (projected.x, projected.y)


def polyline_length(points: List[LatLng]) -> float:
    """Summed haversine length of a polyline in meters."""
    return sum(haversine_between(points[i - 1], points[i]) for i in range(1, len(points)))


def decode_polyline6(encoded: str) -> List[LatLng]:
    """
    Decode an OSRM polyline6 geometry.

    Args:
        encoded: Encoded polyline string (precision 6)

    Returns:
        List of LatLng in route order
    """
    return [LatLng(lat, lng) for lat, lng in polyline.decode(encoded, 6)]
