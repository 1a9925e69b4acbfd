"""
Distance calculation utilities with memoization for performance optimization.
"""
import math
from functools import lru_cache

# Earth's mean radius in meters
EARTH_RADIUS_M = 6371000.0


@lru_cache(maxsize=10000)
def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great circle distance between two points on Earth using the Haversine formula.

    Memoized with an LRU cache: route scoring evaluates the same vertex/zone
    pairs many times across detour attempts.

    Args:
        lat1: Latitude of the first point in decimal degrees (-90 to 90)
        lon1: Longitude of the first point in decimal degrees (-180 to 180)
        lat2: Latitude of the second point in decimal degrees (-90 to 90)
        lon2: Longitude of the second point in decimal degrees (-180 to 180)

    Returns:
        Distance between the two points in meters

    Examples:
        >>> # One degree of latitude
        >>> round(haversine_distance(0.0, 0.0, 1.0, 0.0))
        111195

        >>> # Same point (should be 0)
        >>> haversine_distance(12.9416, 80.0869, 12.9416, 80.0869)
        0.0

    Note:
        - Does NOT validate coordinates - caller is responsible for validation
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = (math.sin(dlat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def clear_distance_cache() -> None:
    """Clear the haversine_distance LRU cache."""
    haversine_distance.cache_clear()


def get_cache_info() -> dict:
    """
    Get information about the haversine_distance cache.

    Returns:
        Dictionary with cache statistics including hits, misses, and current size
    """
    info = haversine_distance.cache_info()
    return {
        'hits': info.hits,
        'misses': info.misses,
        'maxsize': info.maxsize,
        'currsize': info.currsize
    }
