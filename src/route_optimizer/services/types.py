from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

TransportMode = Literal["driving", "transit", "walking"]
ProviderId = Literal["kakao", "odsay", "fallback"]
RouteSource = Literal["kakao", "odsay", "fallback", "mixed"]


@dataclass(slots=True, frozen=True)
class Point:
    lat: float
    lng: float
    id: str | None = None
    name: str | None = None


@dataclass(slots=True, frozen=True)
class RouteRequest:
    origin: Point
    waypoints: list[Point] = field(default_factory=list)
    destination: Point | None = None
    round_trip: bool = False
    mode: TransportMode = "driving"


@dataclass(slots=True, frozen=True)
class RawEstimate:
    distance_km: float
    duration_min: float
    provider: ProviderId


@dataclass(slots=True, frozen=True)
class SegmentEstimate:
    from_point: Point
    to_point: Point
    distance_km: float
    duration_min: float
    provider: ProviderId


@dataclass(slots=True, frozen=True)
class RouteResult:
    ordered_points: list[Point]
    segments: list[SegmentEstimate]
    total_distance_km: float
    total_duration_min: float
    source: RouteSource
    warnings: list[str]
