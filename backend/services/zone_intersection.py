"""
Zone intersection checks for route polylines.
"""
from typing import Sequence, Tuple

from services.zone_service import Zone
from utils.geo import LatLng, segment_intersects_circle


def route_intersects_zones(route: Sequence[LatLng], zones: Sequence[Zone]) -> bool:
    """
    Check if any segment of a route crosses any zone.

    Args:
        route: Route vertices in order
        zones: Zones to test against

    Returns:
        True on the first segment/zone hit, False if the route clears every zone
    """
    for i in range(1, len(route)):
        a, b = route[i - 1], route[i]
        for zone in zones:
            if segment_intersects_circle(a, b, zone.center, zone.radius_m):
                return True

    return False


def zones_crossing_segment(a: LatLng, b: LatLng, zones: Sequence[Zone]) -> Tuple[Zone, ...]:
    """
    All zones whose circle the segment a->b crosses.

    Returned in the order of the zones argument so callers that build
    per-zone side choices get the same ordering on every run.
    """
    return tuple(
        zone for zone in zones
        if segment_intersects_circle(a, b, zone.center, zone.radius_m)
    )
