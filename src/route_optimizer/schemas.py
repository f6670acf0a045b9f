from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from route_optimizer.services.types import (
    Point,
    RouteRequest,
    RouteResult,
    SegmentEstimate,
    TransportMode,
)

MAX_WAYPOINTS = 25
MAX_LABEL_LENGTH = 120

MODE_SYNONYMS: dict[str, TransportMode] = {
    "driving": "driving",
    "drive": "driving",
    "car": "driving",
    "auto": "driving",
    "transit": "transit",
    "public": "transit",
    "public-transit": "transit",
    "bus": "transit",
    "subway": "transit",
    "walking": "walking",
    "walk": "walking",
    "pedestrian": "walking",
}


class PointInput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    lat: float = Field(
        ge=-90.0,
        le=90.0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("lat", "latitude", "y"),
    )
    lng: float = Field(
        ge=-180.0,
        le=180.0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("lng", "lon", "longitude", "x"),
    )
    id: str | None = None
    name: str | None = Field(default=None, validation_alias=AliasChoices("name", "title"))

    @model_validator(mode="before")
    @classmethod
    def _skip_null_aliases(cls, data: Any) -> Any:
        # A null alias yields to the next alias for the same field.
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    @field_validator("lat", "lng", mode="before")
    @classmethod
    def _reject_boolean(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("must be a number, not a boolean")
        return value

    @field_validator("id", "name", mode="before")
    @classmethod
    def _optional_label(cls, value: Any) -> str | None:
        if not isinstance(value, str):
            return None
        trimmed = value.strip()
        return trimmed[:MAX_LABEL_LENGTH] or None

    def to_point(self) -> Point:
        return Point(lat=self.lat, lng=self.lng, id=self.id, name=self.name)


class RouteOptimizeRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    start: PointInput | None = Field(
        default=None, validation_alias=AliasChoices("start", "origin")
    )
    end: PointInput | None = Field(
        default=None, validation_alias=AliasChoices("end", "destination")
    )
    waypoints: list[PointInput] = Field(
        default_factory=list,
        max_length=MAX_WAYPOINTS,
        validation_alias=AliasChoices("waypoints", "points", "stops"),
    )
    mode: TransportMode = Field(
        default="driving", validation_alias=AliasChoices("mode", "transportMode")
    )
    round_trip: bool = Field(
        default=False, validation_alias=AliasChoices("roundTrip", "round_trip")
    )

    @field_validator("waypoints", mode="before")
    @classmethod
    def _default_waypoints(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("mode", mode="before")
    @classmethod
    def _normalize_mode(cls, value: Any) -> TransportMode:
        if value is None or value == "":
            return "driving"
        if not isinstance(value, str):
            raise ValueError("mode must be a string")
        mode = MODE_SYNONYMS.get(value.strip().lower())
        if mode is None:
            raise ValueError("mode must be one of driving, transit, or walking")
        return mode

    @field_validator("round_trip", mode="before")
    @classmethod
    def _coerce_round_trip(cls, value: Any) -> bool:
        if value is None or value == "":
            return False
        if isinstance(value, bool):
            return value
        if value == "true":
            return True
        if value == "false":
            return False
        raise ValueError("roundTrip must be a boolean")

    @model_validator(mode="after")
    def _require_two_points(self) -> RouteOptimizeRequest:
        if self.start is None and self.waypoints:
            self.start, self.waypoints = self.waypoints[0], self.waypoints[1:]
        if self.start is None:
            raise ValueError(
                "A start/origin point is required. Provide start/origin or include "
                "waypoints/points with at least one item"
            )

        closing = 1 if self.end is not None or self.round_trip else 0
        if 1 + len(self.waypoints) + closing < 2:
            raise ValueError("At least two points are required to optimize a route")
        return self

    def to_route_request(self) -> RouteRequest:
        return RouteRequest(
            origin=self.start.to_point(),
            waypoints=[waypoint.to_point() for waypoint in self.waypoints],
            destination=self.end.to_point() if self.end is not None else None,
            round_trip=self.round_trip,
            mode=self.mode,
        )


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PointResponse(CamelModel):
    id: str | None = None
    name: str | None = None
    lat: float
    lng: float

    @classmethod
    def from_point(cls, point: Point) -> PointResponse:
        return cls(id=point.id, name=point.name, lat=point.lat, lng=point.lng)


class SegmentResponse(CamelModel):
    from_point: PointResponse = Field(alias="from")
    to_point: PointResponse = Field(alias="to")
    distance_km: float
    duration_min: float
    provider: Literal["kakao", "odsay", "fallback"]

    @classmethod
    def from_segment(cls, segment: SegmentEstimate) -> SegmentResponse:
        return cls(
            from_point=PointResponse.from_point(segment.from_point),
            to_point=PointResponse.from_point(segment.to_point),
            distance_km=segment.distance_km,
            duration_min=segment.duration_min,
            provider=segment.provider,
        )


class RouteOptimizeResponse(CamelModel):
    ordered_points: list[PointResponse]
    segments: list[SegmentResponse]
    total_distance_km: float
    total_duration_min: float
    source: Literal["kakao", "odsay", "fallback", "mixed"]
    warnings: list[str]

    @classmethod
    def from_result(cls, result: RouteResult) -> RouteOptimizeResponse:
        return cls(
            ordered_points=[PointResponse.from_point(point) for point in result.ordered_points],
            segments=[SegmentResponse.from_segment(segment) for segment in result.segments],
            total_distance_km=result.total_distance_km,
            total_duration_min=result.total_duration_min,
            source=result.source,
            warnings=result.warnings,
        )
