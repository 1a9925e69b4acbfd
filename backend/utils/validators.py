"""
Validation utilities for routing and risk requests.

Provides centralized validation logic for:
- Coordinate ranges (latitude/longitude)
- Route request bodies (start/end, mode, profile)
- Risk score request bodies
"""
import re
from typing import Any, Dict, List

from services.routing_errors import InvalidInputError
from services.safe_route_service import ROUTE_MODES
from utils.geo import LatLng, is_valid_coordinates

# Profile is interpolated into the router URL path
PROFILE_PATTERN = re.compile(r'^[a-z][a-z0-9_-]*$')

MAX_ITINERARY_POINTS = 50


class CoordinateValidator:
    """Validator for geographic coordinates."""

    @staticmethod
    def validate_coordinates(lat: float, lng: float) -> bool:
        """
        Validate latitude and longitude ranges.

        Examples:
            >>> CoordinateValidator.validate_coordinates(12.9416, 80.0869)
            True
            >>> CoordinateValidator.validate_coordinates(91, 0)  # Invalid latitude
            False
        """
        return is_valid_coordinates(lat, lng)

    @staticmethod
    def parse_point(data: Dict[str, Any], lat_key: str, lng_key: str, label: str) -> LatLng:
        """
        Read a point out of a request body.

        Raises:
            InvalidInputError: If either key is missing, not numeric, or out of range
        """
        lat = data.get(lat_key)
        lng = data.get(lng_key)
        if lat is None or lng is None:
            raise InvalidInputError(f"{label} requires {lat_key} and {lng_key}")
        # JSON true/false would otherwise pass float() as 1.0/0.0
        if isinstance(lat, bool) or isinstance(lng, bool):
            raise InvalidInputError(f"{label} {lat_key} and {lng_key} must be valid numbers")

        try:
            lat = float(lat)
            lng = float(lng)
        except (TypeError, ValueError):
            raise InvalidInputError(f"{label} {lat_key} and {lng_key} must be valid numbers")

        if not is_valid_coordinates(lat, lng):
            raise InvalidInputError(
                f"Invalid {label} coordinates: Latitude must be between -90 and 90, "
                f"Longitude must be between -180 and 180"
            )

        return LatLng(lat, lng)


class RouteRequestValidator:
    """Validator for /api/route and /api/ai/risk request bodies."""

    @staticmethod
    def parse_route_request(data: Any, default_profile: str = 'driving') -> Dict[str, Any]:
        """
        Validate and normalize a route request.

        Args:
            data: Parsed JSON body with startLat, startLng, endLat, endLng and
                optional mode and profile
            default_profile: Profile used when the request has none

        Returns:
            {"start": LatLng, "end": LatLng, "mode": str, "profile": str}

        Raises:
            InvalidInputError: On any missing or invalid field

        Examples:
            >>> RouteRequestValidator.parse_route_request({
            ...     'startLat': 12.94, 'startLng': 80.08,
            ...     'endLat': 12.92, 'endLng': 80.10
            ... })['mode']
            'safe'
        """
        if not isinstance(data, dict):
            raise InvalidInputError("Request body must be a JSON object")

        missing = [key for key in ('startLat', 'startLng', 'endLat', 'endLng') if data.get(key) is None]
        if missing:
            raise InvalidInputError(f"start and end required. Missing fields: {', '.join(missing)}")

        start = CoordinateValidator.parse_point(data, 'startLat', 'startLng', 'start')
        end = CoordinateValidator.parse_point(data, 'endLat', 'endLng', 'end')

        mode = data.get('mode') or 'safe'
        if mode not in ROUTE_MODES:
            raise InvalidInputError(f"Invalid mode. Must be one of: {', '.join(ROUTE_MODES)}")

        profile = data.get('profile') or default_profile
        if not isinstance(profile, str) or not PROFILE_PATTERN.match(profile):
            raise InvalidInputError("Invalid profile format")

        return {'start': start, 'end': end, 'mode': mode, 'profile': profile}

    @staticmethod
    def parse_risk_request(data: Any) -> List[LatLng]:
        """
        Validate a risk request.

        Returns:
            Points to score: the itinerary stops if an itinerary is given,
            otherwise the single lat/lng location

        Raises:
            InvalidInputError: On missing or invalid coordinates
        """
        if not isinstance(data, dict):
            raise InvalidInputError("Request body must be a JSON object")

        itinerary = data.get('itinerary')
        if itinerary:
            if not isinstance(itinerary, list):
                raise InvalidInputError("itinerary must be a list of {lat, lng} points")
            if len(itinerary) > MAX_ITINERARY_POINTS:
                raise InvalidInputError(f"itinerary must have at most {MAX_ITINERARY_POINTS} points")

            points = []
            for idx, stop in enumerate(itinerary):
                if not isinstance(stop, dict):
                    raise InvalidInputError(f"itinerary[{idx}] must be an object")
                points.append(CoordinateValidator.parse_point(stop, 'lat', 'lng', f"itinerary[{idx}]"))
            return points

        return [CoordinateValidator.parse_point(data, 'lat', 'lng', 'location')]
