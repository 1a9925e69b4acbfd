"""
Tests for RiskScoreService
"""
import pytest

from services.risk_score_service import RiskScoreService, zone_proximity_risk
from services.zone_service import Zone
from utils.geo import LatLng

CENTER = LatLng(11.7488, 79.7479)


@pytest.fixture
def high_zone():
    return Zone(CENTER, 500.0, risk_weight=90.0, name='Zone A', zone_type='high')


@pytest.fixture
def low_zone():
    return Zone(LatLng(11.7379, 79.7390), 700.0, risk_weight=40.0, name='Zone B', zone_type='low')


@pytest.fixture
def risk_service(high_zone, low_zone):
    return RiskScoreService([high_zone, low_zone])


class TestZoneProximityRisk:
    """Tests for the default risk model"""

    def test_center_gets_full_weight(self, high_zone):
        assert zone_proximity_risk(CENTER, [high_zone]) == pytest.approx(90.0)

    def test_outside_all_zones(self, high_zone):
        assert zone_proximity_risk(LatLng(12.5, 80.5), [high_zone]) == 0.0

    def test_no_zones(self):
        assert zone_proximity_risk(CENTER, []) == 0.0


class TestScoreLocation:
    """Tests for single location scoring"""

    def test_inside_high_risk_zone(self, risk_service):
        result = risk_service.score_location(CENTER)

        assert result['riskScore'] == 90
        assert result['reasons'] == ['Inside high-risk zone: Zone A']
        assert result['zones'] == ['Zone A']

    def test_near_lower_risk_zone(self, risk_service):
        result = risk_service.score_location(LatLng(11.7379, 79.7390))

        assert result['riskScore'] == 40
        assert result['reasons'] == ['Near risk zone: Zone B']

    def test_normal_conditions(self, risk_service):
        result = risk_service.score_location(LatLng(13.0827, 80.2707))

        assert result == {'riskScore': 0, 'reasons': ['Normal conditions'], 'zones': []}

    def test_same_location_same_score(self, risk_service):
        point = LatLng(11.7470, 79.7470)
        assert risk_service.score_location(point) == risk_service.score_location(point)

    def test_custom_model_is_clamped(self, high_zone):
        service = RiskScoreService([high_zone], risk_model=lambda point, zones: 250.0)
        assert service.score_location(CENTER)['riskScore'] == 100

        service = RiskScoreService([high_zone], risk_model=lambda point, zones: -5.0)
        assert service.score_location(CENTER)['riskScore'] == 0

    def test_unnamed_zone(self):
        service = RiskScoreService([Zone(CENTER, 500.0, risk_weight=95.0)])
        assert service.score_location(CENTER)['reasons'] == ['Inside high-risk zone: unnamed']


class TestScoreItinerary:
    """Tests for itinerary scoring"""

    def test_worst_stop_wins(self, risk_service):
        stops = [LatLng(13.0827, 80.2707), CENTER, LatLng(11.7379, 79.7390)]

        result = risk_service.score_itinerary(stops)

        assert result['riskScore'] == 90
        assert result['zones'] == ['Zone A']
        assert [s['riskScore'] for s in result['stops']] == [0, 90, 40]

    def test_empty_itinerary(self, risk_service):
        with pytest.raises(ValueError):
            risk_service.score_itinerary([])
