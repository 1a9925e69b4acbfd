"""
Tests for route/zone intersection checks
"""
import pytest

from services.zone_intersection import route_intersects_zones, zones_crossing_segment
from services.zone_service import Zone
from utils.geo import LatLng, haversine_between

START = LatLng(12.0, 79.98)
END = LatLng(12.0, 80.02)


@pytest.fixture
def center_zone():
    """500m zone sitting on the straight START-END line"""
    return Zone(LatLng(12.0, 80.0), 500.0, name='center')


@pytest.fixture
def north_zone():
    """Zone ~2.2 km north of the straight line"""
    return Zone(LatLng(12.02, 80.0), 500.0, name='north')


class TestRouteIntersectsZones:
    """Tests for route_intersects_zones"""

    def test_straight_route_through_zone(self, center_zone):
        assert route_intersects_zones([START, END], [center_zone]) is True

    def test_route_clear_of_zone(self, north_zone):
        assert route_intersects_zones([START, END], [north_zone]) is False

    def test_vertex_inside_zone_means_intersection(self, north_zone):
        """A vertex within the radius makes its segments intersect"""
        inside = LatLng(12.0185, 80.0)
        assert haversine_between(inside, north_zone.center) <= north_zone.radius_m

        route = [START, inside, END]
        assert route_intersects_zones(route, [north_zone]) is True

    def test_detour_around_zone_is_clear(self, center_zone):
        route = [START, LatLng(12.01, 80.0), END]
        assert route_intersects_zones(route, [center_zone]) is False

    def test_no_zones(self):
        assert route_intersects_zones([START, END], []) is False

    def test_single_point_route_has_no_segments(self, center_zone):
        assert route_intersects_zones([center_zone.center], [center_zone]) is False

    def test_any_zone_hit_counts(self, center_zone, north_zone):
        assert route_intersects_zones([START, END], [north_zone, center_zone]) is True


class TestZonesCrossingSegment:
    """Tests for zones_crossing_segment"""

    def test_returns_all_crossing_zones_in_order(self, center_zone):
        west = Zone(LatLng(12.0, 79.99), 300.0, name='west')
        east = Zone(LatLng(12.0, 80.01), 300.0, name='east')
        far = Zone(LatLng(12.05, 80.0), 300.0, name='far')

        crossing = zones_crossing_segment(START, END, [east, far, center_zone, west])

        assert [z.name for z in crossing] == ['east', 'center', 'west']

    def test_no_crossing(self, north_zone):
        assert zones_crossing_segment(START, END, [north_zone]) == ()

    def test_zone_beyond_segment_end(self):
        beyond = Zone(LatLng(12.0, 80.03), 500.0)  # ~1.1 km past END
        assert zones_crossing_segment(START, END, [beyond]) == ()
