"""Great-circle distance helpers."""
import math

from src.matching.profiles import GeoPoint

EARTH_RADIUS_KM = 6371


def haversine_km(origin: GeoPoint, destination: GeoPoint) -> float:
    """Distance in kilometres between two points using the haversine formula."""
    d_lat = math.radians(destination.latitude - origin.latitude)
    d_lon = math.radians(destination.longitude - origin.longitude)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(origin.latitude))
        * math.cos(math.radians(destination.latitude))
        * math.sin(d_lon / 2) ** 2
    )
    # Rounding can push near-antipodal pairs just past 1
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c
