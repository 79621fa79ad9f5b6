"""
Geospatial helpers.

Dive-site matching only needs point-to-point distances, so a haversine
function is enough; no GIS dependency is pulled in.
"""

from math import atan2, cos, radians, sin, sqrt

EARTH_RADIUS_KM = 6371.0

# Two sites with the same name closer than this are the same site.
SITE_MATCH_RADIUS_KM = 0.1


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres between two points given in decimal degrees."""
    phi1 = radians(lat1)
    phi2 = radians(lat2)
    dphi = radians(lat2 - lat1)
    dlambda = radians(lon2 - lon1)

    h = sin(dphi / 2) ** 2 + cos(phi1) * cos(phi2) * sin(dlambda / 2) ** 2
    # Rounding can push h a hair past 1 for antipodal points.
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_KM * 2 * atan2(sqrt(h), sqrt(1 - h))


def is_same_site(lat1: float, lon1: float, lat2: float, lon2: float) -> bool:
    return haversine_km(lat1, lon1, lat2, lon2) < SITE_MATCH_RADIUS_KM
