from __future__ import annotations

import math
from dataclasses import dataclass

from ..common.validators import Coordinates
from ..core.constants import EARTH_RADIUS_METERS


@dataclass(frozen=True)
class GeofenceResult:
    distance_meters: float
    radius_meters: float
    verified: bool


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two (lat, lon) points in degrees."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def check_geofence(point: Coordinates, office: Coordinates, radius_meters: float) -> GeofenceResult:
    """Flag only: a point outside the fence is still recorded, just not verified."""
    distance = haversine_meters(point.latitude, point.longitude, office.latitude, office.longitude)
    return GeofenceResult(
        distance_meters=distance,
        radius_meters=float(radius_meters),
        verified=distance <= radius_meters,
    )
