"""
Tests for detour waypoint generation
"""
import pytest

from services.detour_service import detour_point, order_waypoints
from services.zone_service import Zone
from utils.geo import LatLng, chord_projection, haversine_between

START = LatLng(12.0, 79.98)
END = LatLng(12.0, 80.02)


class TestDetourPoint:
    """Tests for detour_point placement"""

    @pytest.mark.parametrize('side,margin', [(1, 60), (-1, 60), (1, 120), (-1, 80)])
    def test_distance_from_center_is_radius_plus_margin(self, side, margin):
        zone = Zone(LatLng(12.0012, 80.003), 500.0)
        waypoint = detour_point(START, END, zone, side, margin)
        assert haversine_between(waypoint, zone.center) == pytest.approx(500.0 + margin, abs=0.5)

    def test_sides_are_opposite(self):
        """Zone north of the chord: +1 and -1 land on opposite sides of the center"""
        zone = Zone(LatLng(12.001, 80.0), 500.0)
        plus = detour_point(START, END, zone, 1, 60)
        minus = detour_point(START, END, zone, -1, 60)

        # center->projection points south; +90 turns it east, -90 turns it west
        assert plus.lng > zone.center.lng
        assert minus.lng < zone.center.lng
        assert plus.lat == pytest.approx(zone.center.lat, abs=1e-6)
        assert minus.lat == pytest.approx(zone.center.lat, abs=1e-6)

    def test_center_on_chord(self):
        """Center on the chord: +1 goes north, -1 goes south"""
        zone = Zone(LatLng(12.0, 80.0), 500.0)
        plus = detour_point(START, END, zone, 1, 60)
        minus = detour_point(START, END, zone, -1, 60)

        assert plus.lat > zone.center.lat
        assert minus.lat < zone.center.lat
        assert haversine_between(plus, zone.center) == pytest.approx(560.0, abs=0.5)
        assert plus.lng == pytest.approx(zone.center.lng, abs=1e-6)

    def test_zero_radius_zone_uses_margin_only(self):
        zone = Zone(LatLng(12.0, 80.0), 0.0)
        waypoint = detour_point(START, END, zone, 1, 60)
        assert haversine_between(waypoint, zone.center) == pytest.approx(60.0, abs=0.1)

    def test_deterministic(self):
        zone = Zone(LatLng(12.0012, 80.003), 500.0)
        assert detour_point(START, END, zone, -1, 80) == detour_point(START, END, zone, -1, 80)


class TestOrderWaypoints:
    """Tests for ordering waypoints along the chord"""

    def test_orders_by_projection(self):
        near_end = LatLng(12.005, 80.015)
        near_start = LatLng(11.995, 79.985)
        middle = LatLng(12.005, 80.0)

        ordered = order_waypoints(START, END, [near_end, near_start, middle])

        assert ordered == [near_start, middle, near_end]
        ts = [chord_projection(START, END, wp)[0] for wp in ordered]
        assert ts == sorted(ts)

    def test_empty(self):
        assert order_waypoints(START, END, []) == []
