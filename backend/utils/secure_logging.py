"""
Secure logging utilities for location data.

Route requests carry precise user positions. Log them at neighborhood
precision only.

Usage:
    from utils.secure_logging import redact_point

    logger.info(f"Routing from {redact_point(start)} to {redact_point(end)}")
    # Output: "Routing from (12.94, 80.09) to (12.92, 80.10)"
"""

from typing import Optional, Tuple

from utils.geo import LatLng


def redact_coordinates(lat: Optional[float], lon: Optional[float], precision: int = 2) -> Tuple[str, str]:
    """
    Redact coordinates to a safe precision level for logging.

    Precision levels:
    - 1 decimal: ~11 km (city level)
    - 2 decimals: ~1.1 km (neighborhood level) **RECOMMENDED**
    - 3 decimals: ~110 m (street level)
    - 4+ decimals: ~11 m (building level) **TOO PRECISE FOR LOGS**

    Args:
        lat: Latitude coordinate
        lon: Longitude coordinate
        precision: Number of decimal places to keep (default: 2)

    Returns:
        Rounded coordinates as strings, or ('[REDACTED]', '[REDACTED]') if None

    Examples:
        >>> redact_coordinates(12.9416, 80.0869, precision=2)
        ('12.94', '80.09')

        >>> redact_coordinates(None, None)
        ('[REDACTED]', '[REDACTED]')
    """
    if lat is None or lon is None:
        return ('[REDACTED]', '[REDACTED]')

    return (
        f"{lat:.{precision}f}",
        f"{lon:.{precision}f}"
    )


def redact_point(point: Optional[LatLng], precision: int = 2) -> str:
    """
    Format a point for log messages at reduced precision.

    Examples:
        >>> redact_point(LatLng(12.9416, 80.0869))
        '(12.94, 80.09)'
    """
    if point is None:
        lat, lng = redact_coordinates(None, None)
    else:
        lat, lng = redact_coordinates(point.lat, point.lng, precision)
    return f"({lat}, {lng})"
