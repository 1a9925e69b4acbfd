"""
OSRM Routing Service for Geofence-Aware Navigation

Thin adapter over the OSRM /route endpoint. Given ordered waypoints and a
travel profile it returns the ranked candidate routes OSRM produces, each
with a polyline6 geometry, total distance and total duration.

Features:
- Works against the public OSRM demo server or a self-hosted instance
- Via-point support (start; waypoints...; end) for detour steering
- Optional alternative routes for the direct start->end request
- Normalizes transport failures into GatewayTimeoutError / GatewayUnavailableError
- Cancellable requests: a set cancel event drops the in-flight connection
"""

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Dict, List, Optional, Sequence

import requests

from services.routing_errors import GatewayTimeoutError, GatewayUnavailableError, RoutingCancelledError
from utils.geo import LatLng

# Configure logging
logger = logging.getLogger(__name__)


class OSRMRoutingService:
    """
    Service for fetching road routes from an OSRM server.

    The service knows nothing about zones: it only translates our waypoint
    lists into OSRM requests and OSRM responses into plain route dictionaries.
    """

    DEFAULT_BASE_URL = "https://router.project-osrm.org"
    DEFAULT_TIMEOUT_SECONDS = 15

    # OSRM codes meaning "request fine, nothing routable" rather than a failure
    EMPTY_RESULT_CODES = {'NoRoute', 'NoSegment'}

    # How often a cancellable request checks its cancel event
    CANCEL_POLL_SECONDS = 0.1

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        """
        Initialize the OSRM Routing Service.

        Args:
            base_url: OSRM server root. If None, reads OSRM_SERVER env variable,
                falling back to the public demo server
            timeout: Per-request timeout in seconds
        """
        self.base_url = (base_url or os.getenv('OSRM_SERVER') or self.DEFAULT_BASE_URL).rstrip('/')
        self.timeout = timeout or self.DEFAULT_TIMEOUT_SECONDS
        logger.info(f"OSRM Routing Service initialized with {self.base_url} (timeout {self.timeout}s)")

    def fetch_routes(
        self,
        points: Sequence[LatLng],
        profile: str = 'driving',
        alternatives: bool = True,
        cancel_event: Optional[threading.Event] = None
    ) -> List[Dict[str, Any]]:
        """
        Fetch candidate routes through the given points.

        Args:
            points: Ordered points, start first and end last
            profile: OSRM travel profile (driving, walking, cycling, ...)
            alternatives: Ask OSRM for alternative routes
            cancel_event: When set, the in-flight request is abandoned

        Returns:
            List of route dictionaries, best first:
            - geometry: polyline6-encoded route geometry
            - distance: Total distance in meters
            - duration: Total duration in seconds

        Raises:
            ValueError: If fewer than two points are given
            RoutingCancelledError: If cancel_event is set before or during the request
            GatewayTimeoutError: If OSRM does not answer in time
            GatewayUnavailableError: On HTTP/connection errors, OSRM error codes
                or an unreadable response body
        """
        if len(points) < 2:
            raise ValueError("At least two points are required to compute a route")

        url = f"{self.base_url}/route/v1/{profile}/{self.format_coordinates(points)}"
        params = {
            'overview': 'full',
            'geometries': 'polyline6',
            'steps': 'false',
            'alternatives': 'true' if alternatives else 'false'
        }

        try:
            response = self._get(url, params, cancel_event)
        except requests.exceptions.Timeout:
            logger.error(f"OSRM request timed out after {self.timeout}s")
            raise GatewayTimeoutError(f"OSRM did not respond within {self.timeout}s")
        except requests.exceptions.RequestException as e:
            logger.error(f"OSRM request failed: {e}")
            raise GatewayUnavailableError(f"OSRM request failed: {e}")

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Failed to parse OSRM response (HTTP {response.status_code}): {e}")
            raise GatewayUnavailableError(f"Invalid response from OSRM: {e}")

        # OSRM puts error details in the body even for 4xx responses
        code = data.get('code') if isinstance(data, dict) else None
        if code in self.EMPTY_RESULT_CODES:
            logger.info(f"OSRM found no route ({code}): {data.get('message', '')}")
            return []
        if code != 'Ok':
            message = data.get('message', 'Unknown error') if isinstance(data, dict) else 'Unknown error'
            logger.error(f"OSRM error {code} (HTTP {response.status_code}): {message}")
            raise GatewayUnavailableError(f"OSRM error: {message}")

        return self._parse_routes(data)

    def format_coordinates(self, points: Sequence[LatLng]) -> str:
        """Convert points to OSRM 'lon,lat;lon,lat;...' format."""
        return ';'.join(f"{p.lng},{p.lat}" for p in points)

    def _get(self, url: str, params: Dict[str, str], cancel_event: Optional[threading.Event]):
        """
        GET the OSRM url, abandoning the request if cancel_event is set.

        Without a cancel event this is a plain requests.get. With one, the
        request runs on a worker thread over its own session while this thread
        polls the event; on cancel the session is closed, dropping the
        connection, and RoutingCancelledError is raised.
        """
        if cancel_event is None:
            return requests.get(url, params=params, timeout=self.timeout)

        if cancel_event.is_set():
            raise RoutingCancelledError("Route calculation cancelled")

        session = requests.Session()
        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(session.get, url, params=params, timeout=self.timeout)
        try:
            while True:
                done, _ = wait([future], timeout=self.CANCEL_POLL_SECONDS)
                if done:
                    return future.result()
                if cancel_event.is_set():
                    logger.info("Cancelling in-flight OSRM request")
                    session.close()
                    raise RoutingCancelledError("Route calculation cancelled")
        finally:
            executor.shutdown(wait=False)
            if future.done():
                session.close()

    def _parse_routes(self, data: Dict[str, Any]) -> List[Dict[str, Any]]:
        routes = []
        for idx, osrm_route in enumerate(data.get('routes') or []):
            try:
                routes.append({
                    'geometry': osrm_route['geometry'],
                    'distance': float(osrm_route['distance']),
                    'duration': float(osrm_route['duration'])
                })
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed OSRM route {idx}: {e}")
                continue

        logger.debug(f"Parsed {len(routes)} OSRM routes")
        return routes
