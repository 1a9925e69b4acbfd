"""
Safe Route Service for Geofence-Aware Navigation

Steers an external road router around circular high-risk zones. The router
is asked for ordinary alternatives first; if none of them is clear of every
zone, synthetic detour waypoints are placed beside the blocking zones and the
router is asked again under a fixed list of side/margin strategies.

Search outline:
1. Base alternatives for start->end. Any safe one wins (lowest score).
2. Target zones: zones crossing the straight start->end chord, or the
   first three configured zones when the chord is clear.
3. Strategies, in order, one router call each:
   all +1 @ 60m, all -1 @ 60m, each zone flipped to -1 @ 80m,
   all +1 @ 120m, all -1 @ 120m. First safe result wins.
4. Otherwise the least-penalty candidate seen (ties: shortest) is
   returned and flagged unsafe.

The search is greedy and bounded (at most 4 + number of target zones router
calls after the base call); it returns the first safe route found, not the
best possible one.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from services.detour_service import detour_point, order_waypoints
from services.route_scorer import score_route
from services.routing_errors import (
    GatewayError,
    InvalidInputError,
    NoRouteFoundError,
    RoutingCancelledError,
)
from services.zone_intersection import route_intersects_zones, zones_crossing_segment
from services.zone_service import Zone
from utils.geo import LatLng, decode_polyline6, is_valid_coordinates
from utils.secure_logging import redact_point

# Configure logging
logger = logging.getLogger(__name__)

ROUTE_MODES = ('safe', 'fastest', 'shortest')

# Zones tried when the straight chord crosses none but every road route does.
# See DESIGN.md open questions.
FALLBACK_ZONE_LIMIT = 3

PRIMARY_MARGIN_M = 60.0
FLIP_MARGIN_M = 80.0
WIDE_MARGIN_M = 120.0


@dataclass(frozen=True)
class Attempt:
    """One detour strategy: a side (+1/-1) per target zone and a margin."""
    sides: Tuple[int, ...]
    margin_m: float


@dataclass
class Candidate:
    """
    A decoded, scored router route.

    distance_m and duration_s are the router's figures; score is the
    haversine length of the geometry plus penalty.
    """
    route: List[LatLng]
    distance_m: float
    duration_s: float
    penalty: float
    score: float
    used_waypoints: List[LatLng] = field(default_factory=list)


def build_attempts(zone_count: int) -> List[Attempt]:
    """
    Ordered detour strategies for zone_count target zones.

    Returns:
        2 + zone_count + 2 attempts; empty when there are no zones
    """
    if zone_count <= 0:
        return []

    attempts = [
        Attempt(tuple(+1 for _ in range(zone_count)), PRIMARY_MARGIN_M),
        Attempt(tuple(-1 for _ in range(zone_count)), PRIMARY_MARGIN_M),
    ]
    for flipped in range(zone_count):
        attempts.append(Attempt(
            tuple(-1 if idx == flipped else +1 for idx in range(zone_count)),
            FLIP_MARGIN_M
        ))
    attempts.append(Attempt(tuple(+1 for _ in range(zone_count)), WIDE_MARGIN_M))
    attempts.append(Attempt(tuple(-1 for _ in range(zone_count)), WIDE_MARGIN_M))
    return attempts


class SafeRouteService:
    """
    Computes routes that avoid high-risk zones.

    The zone list is passed in at construction and never modified, so one
    service instance can serve concurrent requests.
    """

    def __init__(self, router, zones: Sequence[Zone] = ()):
        """
        Initialize the Safe Route Service.

        Args:
            router: Road router exposing fetch_routes(points, profile, alternatives, cancel_event),
                e.g. OSRMRoutingService
            zones: High-risk zones to avoid
        """
        self.router = router
        self.zones: Tuple[Zone, ...] = tuple(zones)

        if not self.zones:
            logger.warning("SafeRouteService has no zones - routes will not be safety filtered")
        logger.info(f"SafeRouteService initialized with {len(self.zones)} zones")

    def calculate_route(
        self,
        start: LatLng,
        end: LatLng,
        mode: str = 'safe',
        profile: str = 'driving',
        cancel_event: Optional[threading.Event] = None
    ) -> Dict[str, Any]:
        """
        Compute a route in the requested mode.

        Args:
            start: Trip start
            end: Trip end
            mode: 'safe' (avoid zones), 'fastest' or 'shortest' (no avoidance)
            profile: Router travel profile, passed through
            cancel_event: Set it to abort the in-flight router call and skip the rest

        Returns:
            Dictionary with:
            - safe: True if the route clears every zone
            - note: Human-readable explanation of how the route was chosen
            - usedWaypoints: Detour waypoints sent to the router ([{lat, lng}])
            - route: Route geometry ([{lat, lng}])
            - distanceMeters: Router-reported distance
            - durationSeconds: Router-reported duration
            - riskPenalty: Zone penalty of the route

        Raises:
            InvalidInputError: Invalid coordinates or unknown mode
            NoRouteFoundError: The router produced no route at all
            RoutingCancelledError: cancel_event was set
        """
        for label, point in (('start', start), ('end', end)):
            if point is None or not is_valid_coordinates(point.lat, point.lng):
                raise InvalidInputError(f"Invalid {label} coordinates")

        if mode not in ROUTE_MODES:
            raise InvalidInputError(f"Invalid mode '{mode}'. Must be one of: {', '.join(ROUTE_MODES)}")

        logger.info(f"Calculating {mode} route from {redact_point(start)} to {redact_point(end)} ({profile})")

        if mode == 'safe':
            return self.find_safe_route(start, end, profile, cancel_event)
        return self.find_alternative_route(start, end, mode, profile, cancel_event)

    def find_safe_route(
        self,
        start: LatLng,
        end: LatLng,
        profile: str = 'driving',
        cancel_event: Optional[threading.Event] = None
    ) -> Dict[str, Any]:
        """Run the zone-avoidance search. See the module docstring for the steps."""
        # Step 1: base alternatives
        evaluated = self._fetch_candidates([start, end], profile, True, cancel_event)
        safe_base = [c for c in evaluated if self._is_safe(c)]
        if safe_base:
            best = min(safe_base, key=lambda c: c.score)
            logger.info(f"Base route is safe ({len(safe_base)} of {len(evaluated)} alternatives clear)")
            return self._build_result(
                best, True, f"Found safe base route ({len(safe_base)} safe alternatives)"
            )

        # Step 2: zones to steer around
        target_zones = self._select_target_zones(start, end)
        attempts = build_attempts(len(target_zones))
        logger.info(f"No safe base route; trying {len(attempts)} detour strategies around {len(target_zones)} zones")

        # Step 3: detour strategies
        fallback_candidates = list(evaluated)
        for attempt_idx, attempt in enumerate(attempts):
            waypoints = order_waypoints(start, end, [
                detour_point(start, end, zone, side, attempt.margin_m)
                for zone, side in zip(target_zones, attempt.sides)
            ])

            candidates = self._fetch_candidates(
                [start] + waypoints + [end], profile, False, cancel_event, waypoints
            )
            if not candidates:
                continue

            candidate = candidates[0]
            if self._is_safe(candidate):
                logger.info(f"Detour strategy {attempt_idx + 1}/{len(attempts)} produced a safe route")
                return self._build_result(
                    candidate, True, f"Safe route found with {len(waypoints)} waypoint(s)"
                )
            fallback_candidates.append(candidate)

        # Step 4: least risky route seen
        if fallback_candidates:
            best = self._select_fallback(fallback_candidates)
            logger.info(
                f"No fully-safe route among {len(fallback_candidates)} candidates; "
                f"returning fallback with penalty {best.penalty:.1f}"
            )
            return self._build_result(
                best, False, "No fully-safe route - returning least-risky fallback"
            )

        # Step 5: router never answered with a route
        logger.error("Router returned no routes for any attempt")
        raise NoRouteFoundError("No routes found")

    def find_alternative_route(
        self,
        start: LatLng,
        end: LatLng,
        mode: str = 'fastest',
        profile: str = 'driving',
        cancel_event: Optional[threading.Event] = None
    ) -> Dict[str, Any]:
        """
        Pick the fastest or shortest router alternative without any detouring.

        The returned 'safe' flag is informational only.
        """
        evaluated = self._fetch_candidates([start, end], profile, True, cancel_event)
        if not evaluated:
            raise NoRouteFoundError("No routes found")

        if mode == 'shortest':
            chosen = min(evaluated, key=lambda c: c.distance_m)
        else:
            chosen = min(evaluated, key=lambda c: c.duration_s)

        return self._build_result(chosen, self._is_safe(chosen), "Router alternatives used")

    # ========== Private Helper Methods ==========

    def _fetch_candidates(
        self,
        points: List[LatLng],
        profile: str,
        alternatives: bool,
        cancel_event: Optional[threading.Event],
        used_waypoints: Optional[List[LatLng]] = None
    ) -> List[Candidate]:
        """
        One router call, decoded and scored.

        Router failures are logged and yield an empty list so the search can
        move on to the next strategy.
        """
        if cancel_event is not None and cancel_event.is_set():
            logger.info("Route calculation cancelled")
            raise RoutingCancelledError("Route calculation cancelled")

        try:
            routes = self.router.fetch_routes(
                points, profile=profile, alternatives=alternatives, cancel_event=cancel_event
            )
        except GatewayError as e:
            logger.warning(f"Router call with {len(points)} points failed: {e}")
            return []

        candidates = []
        for idx, route in enumerate(routes or []):
            try:
                candidates.append(self._evaluate(route, used_waypoints or []))
            except (KeyError, TypeError, ValueError, IndexError) as e:
                logger.warning(f"Skipping undecodable route {idx}: {e}")
                continue

        return candidates

    def _evaluate(self, route: Dict[str, Any], used_waypoints: List[LatLng]) -> Candidate:
        geometry = decode_polyline6(route['geometry'])
        metrics = score_route(geometry, self.zones)

        return Candidate(
            route=geometry,
            distance_m=float(route['distance']),
            duration_s=float(route['duration']),
            penalty=metrics['penalty'],
            score=metrics['score'],
            used_waypoints=list(used_waypoints)
        )

    def _is_safe(self, candidate: Candidate) -> bool:
        return not route_intersects_zones(candidate.route, self.zones)

    def _select_target_zones(self, start: LatLng, end: LatLng) -> Tuple[Zone, ...]:
        crossing = zones_crossing_segment(start, end, self.zones)
        if crossing:
            return crossing

        logger.debug(f"Straight chord crosses no zone; using first {FALLBACK_ZONE_LIMIT} zones")
        return self.zones[:FALLBACK_ZONE_LIMIT]

    def _select_fallback(self, candidates: List[Candidate]) -> Candidate:
        """Minimum penalty, ties broken by minimum distance, then by evaluation order."""
        return min(candidates, key=lambda c: (c.penalty, c.distance_m))

    def _build_result(self, candidate: Candidate, safe: bool, note: str) -> Dict[str, Any]:
        return {
            'safe': safe,
            'note': note,
            'usedWaypoints': [wp.to_dict() for wp in candidate.used_waypoints],
            'route': [p.to_dict() for p in candidate.route],
            'distanceMeters': candidate.distance_m,
            'durationSeconds': candidate.duration_s,
            'riskPenalty': candidate.penalty
        }
