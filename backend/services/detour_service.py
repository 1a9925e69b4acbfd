"""
Detour waypoint generation.

A detour waypoint is a synthetic via-point placed just outside a zone so the
road router is pulled around it. All math happens in the local plane
anchored at the trip start (see utils.geo for the accuracy limits).
"""
import math
from typing import List, Sequence

from services.zone_service import Zone
from utils.geo import LatLng, chord_projection, from_local_xy, to_local_xy

DEFAULT_DETOUR_MARGIN_M = 60.0

# Projection round-off below this is treated as the center lying on the chord
ON_CHORD_TOLERANCE_M = 1e-6


def detour_point(
    start: LatLng,
    end: LatLng,
    zone: Zone,
    side: int = 1,
    margin_m: float = DEFAULT_DETOUR_MARGIN_M
) -> LatLng:
    """
    Bypass point for a zone on one side of the start->end chord.

    The zone center is projected onto the chord (clamped to the segment).
    The direction from the center to that projection is rotated by +90
    degrees (side=+1) or -90 degrees (side=-1), and the waypoint is placed
    radius + margin_m from the center along the rotated direction.

    Args:
        start: Trip start, also the local plane origin
        end: Trip end
        zone: Zone to go around
        side: +1 or -1, which side of the chord to pass on
        margin_m: Clearance beyond the zone radius in meters

    Returns:
        Detour waypoint in lat/lng
    """
    zx, zy = to_local_xy(start, zone.center)
    _, (px, py) = chord_projection(start, end, zone.center)

    dx, dy = px - zx, py - zy
    # Center on the chord: base direction is east (atan2(0, 0) == 0)
    if math.hypot(dx, dy) < ON_CHORD_TOLERANCE_M:
        dx, dy = 0.0, 0.0
    base_angle = math.atan2(dy, dx)
    angle = base_angle + (1 if side >= 0 else -1) * math.pi / 2

    reach = zone.radius_m + margin_m
    return from_local_xy(start, zx + reach * math.cos(angle), zy + reach * math.sin(angle))


def order_waypoints(start: LatLng, end: LatLng, waypoints: Sequence[LatLng]) -> List[LatLng]:
    """Sort waypoints by their position along the start->end chord."""
    return sorted(waypoints, key=lambda wp: chord_projection(start, end, wp)[0])
