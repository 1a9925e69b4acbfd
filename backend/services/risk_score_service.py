"""
Location risk scoring against the configured high-risk zones.

The score is a pure function of the location and the zone list, so the same
request always gets the same answer. Pass a different risk_model to
RiskScoreService to change how zones are weighed.
"""
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from services.route_scorer import zone_depth_ratio
from services.zone_service import Zone
from utils.geo import LatLng

logger = logging.getLogger(__name__)

HIGH_RISK_THRESHOLD = 70
MAX_RISK_SCORE = 100

RiskModel = Callable[[LatLng, Sequence[Zone]], float]


def zone_proximity_risk(point: LatLng, zones: Sequence[Zone]) -> float:
    """Highest risk_weight * depth ratio over the zones containing point."""
    return max((zone.risk_weight * zone_depth_ratio(point, zone) for zone in zones), default=0.0)


class RiskScoreService:
    """Scores locations (and itineraries) on a 0-100 risk scale."""

    def __init__(self, zones: Sequence[Zone] = (), risk_model: Optional[RiskModel] = None):
        self.zones = tuple(zones)
        self.risk_model = risk_model or zone_proximity_risk

    def score_location(self, point: LatLng) -> Dict[str, Any]:
        """
        Risk score for a single location.

        Returns:
            Dictionary with:
            - riskScore: Integer 0-100
            - reasons: Human-readable reasons
            - zones: Names of zones containing the point
        """
        raw = self.risk_model(point, self.zones)
        risk_score = int(round(min(max(raw, 0.0), MAX_RISK_SCORE)))
        containing = [zone for zone in self.zones if zone_depth_ratio(point, zone) > 0]

        if not containing:
            reasons = ["Normal conditions"]
        elif risk_score > HIGH_RISK_THRESHOLD:
            reasons = [f"Inside high-risk zone: {zone.name or 'unnamed'}" for zone in containing]
        else:
            reasons = [f"Near risk zone: {zone.name or 'unnamed'}" for zone in containing]

        return {
            'riskScore': risk_score,
            'reasons': reasons,
            'zones': [zone.name for zone in containing]
        }

    def score_itinerary(self, points: List[LatLng]) -> Dict[str, Any]:
        """
        Risk score for a list of stops; the overall score is the worst stop.

        Returns:
            score_location() fields for the worst stop, plus 'stops' with the
            per-stop results in input order
        """
        if not points:
            raise ValueError("Itinerary must contain at least one point")

        stops = [self.score_location(point) for point in points]
        worst = max(stops, key=lambda s: s['riskScore'])
        logger.debug(f"Scored itinerary of {len(points)} stops, worst {worst['riskScore']}")

        result = dict(worst)
        result['stops'] = stops
        return result
