"""
High-Risk Zone Service

Loads the circular high-risk zones (geofences) that routes must avoid. Zones
are read once from a JSON file when the service is constructed and exposed
as an immutable tuple for the lifetime of the process.

Zone file format (list of objects):
    [
        {"name": "Zone A", "lat": 11.7488, "lng": 79.7479, "radius": 500,
         "risk": 90, "type": "high"}
    ]

"risk" defaults to DEFAULT_RISK_WEIGHT; "lon" is accepted in place of "lng".
"""
import json
import logging
import math
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from services.routing_errors import ZoneSourceUnavailableError
from utils.geo import LatLng, is_valid_coordinates

logger = logging.getLogger(__name__)

# Weight for zones without a risk value. Not calibrated.
DEFAULT_RISK_WEIGHT = 80.0


@dataclass(frozen=True)
class Zone:
    """Circular exclusion area."""
    center: LatLng
    radius_m: float
    risk_weight: float = DEFAULT_RISK_WEIGHT
    name: str = ''
    zone_type: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'lat': self.center.lat,
            'lng': self.center.lng,
            'radius': self.radius_m,
            'risk': self.risk_weight,
            'type': self.zone_type
        }


def parse_zone(entry: Any) -> Zone:
    """
    Build a Zone from a zone file entry.

    Raises:
        ValueError: If the entry is not an object, has missing or invalid
            coordinates, or a negative, non-finite or non-numeric radius or risk
    """
    if not isinstance(entry, dict):
        raise ValueError(f"Zone entry must be an object, got {type(entry).__name__}")

    lat = entry.get('lat')
    lng = entry.get('lng', entry.get('lon'))
    if lat is None or lng is None:
        raise ValueError("Zone entry requires lat and lng")
    if not is_valid_coordinates(lat, lng):
        raise ValueError(f"Invalid zone coordinates: ({lat}, {lng})")

    try:
        radius_m = float(entry.get('radius', 0) or 0)
        risk = entry.get('risk')
        risk_weight = DEFAULT_RISK_WEIGHT if risk is None else float(risk)
    except (TypeError, ValueError):
        raise ValueError("Zone radius and risk must be numbers")

    if not math.isfinite(radius_m) or not math.isfinite(risk_weight):
        raise ValueError(f"Zone radius and risk must be finite: radius={radius_m}, risk={risk_weight}")
    if radius_m < 0:
        raise ValueError(f"Zone radius must not be negative: {radius_m}")
    if risk_weight < 0:
        raise ValueError(f"Zone risk must not be negative: {risk_weight}")

    return Zone(
        center=LatLng(float(lat), float(lng)),
        radius_m=radius_m,
        risk_weight=risk_weight,
        name=str(entry.get('name', '')),
        zone_type=str(entry.get('type', ''))
    )


class ZoneService:
    """
    Read-only source of high-risk zones.

    A missing or unreadable zone file is not fatal: the service logs a
    warning and serves an empty zone list, which turns route planning into
    plain pass-through routing.
    """

    def __init__(self, zones_path: Optional[str] = None):
        """
        Initialize ZoneService and load zones.

        Args:
            zones_path: Path to the zone JSON file. If None, reads
                HIGHRISK_ZONES_PATH from the environment.
        """
        self.zones_path = zones_path or os.getenv('HIGHRISK_ZONES_PATH')
        self._zones: Tuple[Zone, ...] = self._load()

    @property
    def zones(self) -> Tuple[Zone, ...]:
        return self._zones

    def to_dicts(self) -> List[Dict[str, Any]]:
        """Zones in the listing format served by /api/highrisk."""
        return [zone.to_dict() for zone in self._zones]

    def _load(self) -> Tuple[Zone, ...]:
        try:
            entries = self._read_zone_file()
        except ZoneSourceUnavailableError as e:
            logger.warning(f"Could not load zones: {e} - continuing with no zones")
            return ()

        zones = []
        for idx, entry in enumerate(entries):
            try:
                zones.append(parse_zone(entry))
            except ValueError as e:
                logger.warning(f"Skipping zone entry {idx}: {e}")
                continue

        logger.info(f"Loaded {len(zones)} high-risk zones from {self.zones_path}")
        return tuple(zones)

    def _read_zone_file(self) -> List[Any]:
        if not self.zones_path:
            raise ZoneSourceUnavailableError("HIGHRISK_ZONES_PATH not set")
        if not os.path.exists(self.zones_path):
            raise ZoneSourceUnavailableError(f"zone file not found: {self.zones_path}")

        try:
            with open(self.zones_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ZoneSourceUnavailableError(f"failed to read {self.zones_path}: {e}")

        if not isinstance(data, list):
            raise ZoneSourceUnavailableError("zone file must contain a JSON list")

        return data
