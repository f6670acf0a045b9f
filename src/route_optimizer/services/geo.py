from __future__ import annotations

import math

from route_optimizer.services.types import Point, RawEstimate, TransportMode

EARTH_RADIUS_KM = 6371.0
ROAD_INFLATION_FACTOR = 1.25

FALLBACK_SPEED_KMH: dict[str, float] = {
    "walking": 4.5,
    "transit": 28.0,
    "driving": 35.0,
}


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    lat1_rad = math.radians(lat1)
    lng1_rad = math.radians(lng1)
    lat2_rad = math.radians(lat2)
    lng2_rad = math.radians(lng2)

    dlat = lat2_rad - lat1_rad
    dlng = lng2_rad - lng1_rad

    a = (
        math.sin(dlat / 2.0) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlng / 2.0) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_km(a: Point, b: Point) -> float:
    return haversine_km(a.lat, a.lng, b.lat, b.lng)


def fallback_speed_kmh(mode: TransportMode) -> float:
    return FALLBACK_SPEED_KMH.get(mode, FALLBACK_SPEED_KMH["driving"])


def fallback_estimate(a: Point, b: Point, mode: TransportMode) -> RawEstimate:
    """Straight-line estimate inflated to approximate the road network."""
    adjusted_km = distance_km(a, b) * ROAD_INFLATION_FACTOR
    duration_min = adjusted_km / fallback_speed_kmh(mode) * 60.0
    return RawEstimate(
        distance_km=round(adjusted_km, 2),
        duration_min=round(duration_min, 1),
        provider="fallback",
    )
