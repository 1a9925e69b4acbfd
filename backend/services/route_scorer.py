"""
Route scoring: length plus a risk penalty for time spent inside zones.

The penalty is sampled per route vertex rather than integrated along the
path, so densely sampled geometries inside a zone collect more penalty than
sparse ones. Routes that graze a zone edge score far better than routes
through its center.
"""
from typing import Dict, Sequence

from services.zone_service import Zone
from utils.geo import LatLng, haversine_between, polyline_length

# Open tuning parameter: penalty scale per unit of depth ratio.
DEPTH_PENALTY_MULTIPLIER = 10.0


def zone_depth_ratio(point: LatLng, zone: Zone) -> float:
    """
    How deep a point sits inside a zone.

    Returns:
        (radius - distance) / radius in (0, 1] when the point is inside or on
        the boundary, 0.0 when it is outside. A zero-radius zone counts a
        point exactly at its center as fully inside.
    """
    distance = haversine_between(point, zone.center)
    if distance > zone.radius_m:
        return 0.0
    if zone.radius_m == 0:
        return 1.0
    return (zone.radius_m - distance) / zone.radius_m


def calculate_risk_penalty(route: Sequence[LatLng], zones: Sequence[Zone]) -> float:
    penalty = 0.0
    for point in route:
        for zone in zones:
            depth = zone_depth_ratio(point, zone)
            if depth > 0:
                penalty += zone.risk_weight * depth * DEPTH_PENALTY_MULTIPLIER
    return penalty


def score_route(route: Sequence[LatLng], zones: Sequence[Zone]) -> Dict[str, float]:
    """
    Score a route geometry.

    Args:
        route: Decoded route vertices
        zones: Zones contributing risk penalty

    Returns:
        Dictionary with:
        - distance: Summed haversine length in meters
        - penalty: Non-negative risk penalty
        - score: distance + penalty (lower is better)
    """
    distance = polyline_length(list(route))
    penalty = calculate_risk_penalty(route, zones)
    return {
        'distance': distance,
        'penalty': penalty,
        'score': distance + penalty
    }
