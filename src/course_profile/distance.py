"""Great-circle distance on a spherical Earth.

Haversine is accurate enough for a course overview (< 0.5% error) and keeps
the profile builder free of heavier geodesic dependencies.
"""

import math

# Earth's mean radius in miles
EARTH_RADIUS_MI = 3959

METERS_TO_FEET = 3.28084


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate distance between two points using Haversine formula.

    Args:
        lat1, lon1: First point coordinates in degrees
        lat2, lon2: Second point coordinates in degrees

    Returns:
        Distance in miles
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_MI * c


def meters_to_feet(meters: float) -> float:
    return meters * METERS_TO_FEET
