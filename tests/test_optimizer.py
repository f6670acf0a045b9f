from __future__ import annotations

import asyncio

import httpx
import pytest

from route_optimizer.exceptions import InsufficientPointsError
from route_optimizer.services.capabilities import ProviderCapabilities
from route_optimizer.services.estimation import SegmentEstimator
from route_optimizer.services.geo import haversine_km
from route_optimizer.services.optimizer import (
    NO_PROVIDER_WARNING,
    RouteOptimizerService,
    build_ordered_points,
    derive_source,
)
from route_optimizer.services.providers import KakaoDirectionsClient
from route_optimizer.services.types import Point, RawEstimate, RouteRequest, SegmentEstimate

ORIGIN = Point(lat=37.50, lng=127.00, name="origin")
NORTH_EAST = Point(lat=37.51, lng=127.01, name="north-east")
SOUTH_WEST = Point(lat=37.49, lng=126.99, name="south-west")


def _service(capabilities: ProviderCapabilities | None = None) -> RouteOptimizerService:
    return RouteOptimizerService(capabilities=capabilities or ProviderCapabilities())


@pytest.mark.asyncio
async def test_scenario_without_credentials_uses_fallback_for_every_segment() -> None:
    request = RouteRequest(origin=ORIGIN, waypoints=[NORTH_EAST, SOUTH_WEST], mode="driving")

    result = await _service().optimize(request)

    assert len(result.segments) == 2
    assert len(result.ordered_points) == 3
    assert result.source == "fallback"
    assert all(segment.provider == "fallback" for segment in result.segments)
    assert result.warnings == [NO_PROVIDER_WARNING]


@pytest.mark.asyncio
async def test_missing_credentials_are_logged_once_per_request(mocker) -> None:
    logger = mocker.patch("route_optimizer.services.optimizer.logger")
    request = RouteRequest(origin=ORIGIN, waypoints=[NORTH_EAST, SOUTH_WEST], mode="walking")

    result = await _service().optimize(request)

    logger.warning.assert_called_once_with(NO_PROVIDER_WARNING)
    for segment in result.segments:
        expected = haversine_km(
            segment.from_point.lat,
            segment.from_point.lng,
            segment.to_point.lat,
            segment.to_point.lng,
        )
        assert segment.distance_km > 0
        assert segment.distance_km == round(expected * 1.25, 2)


@pytest.mark.asyncio
async def test_round_trip_without_destination_closes_at_origin() -> None:
    request = RouteRequest(origin=ORIGIN, waypoints=[], round_trip=True)

    result = await _service().optimize(request)

    assert result.ordered_points == [ORIGIN, ORIGIN]
    assert len(result.segments) == 1
    assert result.segments[0].distance_km == 0
    assert result.segments[0].duration_min == 0
    assert result.total_distance_km == 0


@pytest.mark.asyncio
async def test_failing_provider_falls_back_with_one_warning_per_segment(settings) -> None:
    settings.KAKAO_TIMEOUT_SECONDS = 0.05

    async def hang(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200, json={})

    transport = httpx.MockTransport(hang)
    estimator = SegmentEstimator(
        {"kakao": lambda key: KakaoDirectionsClient(key, transport=transport)}
    )
    service = RouteOptimizerService(
        segment_estimator=estimator,
        capabilities=ProviderCapabilities(kakao_api_key="kakao-secret-key"),
    )
    request = RouteRequest(origin=ORIGIN, waypoints=[NORTH_EAST, SOUTH_WEST], mode="walking")

    result = await service.optimize(request)

    assert result.source == "fallback"
    assert all(segment.provider == "fallback" for segment in result.segments)
    assert len(result.warnings) == len(result.segments) == 2
    assert all(warning.startswith("KAKAO estimate failed") for warning in result.warnings)
    assert result.warnings[0] == (
        "KAKAO estimate failed for origin -> north-east (timed out after 50 ms)."
    )


@pytest.mark.asyncio
async def test_explicit_destination_is_used_over_round_trip() -> None:
    destination = Point(lat=37.60, lng=127.10, name="airport")
    request = RouteRequest(
        origin=ORIGIN, waypoints=[NORTH_EAST], destination=destination, round_trip=True
    )

    result = await _service().optimize(request)

    assert result.ordered_points[-1] == destination
    assert len(result.ordered_points) == 3


@pytest.mark.asyncio
async def test_open_route_without_closing_point() -> None:
    request = RouteRequest(origin=ORIGIN, waypoints=[SOUTH_WEST, NORTH_EAST])

    result = await _service().optimize(request)

    assert len(result.ordered_points) == 3
    assert result.ordered_points[0] == ORIGIN


@pytest.mark.asyncio
async def test_single_point_raises_insufficient_points() -> None:
    with pytest.raises(InsufficientPointsError) as exc_info:
        await _service().optimize(RouteRequest(origin=ORIGIN))

    assert str(exc_info.value) == "Route optimization requires at least two points."


@pytest.mark.asyncio
async def test_totals_match_segment_sums() -> None:
    waypoints = [Point(lat=37.5 + index * 0.013, lng=127.0 + index * 0.017) for index in range(6)]
    request = RouteRequest(origin=ORIGIN, waypoints=waypoints, round_trip=True, mode="transit")

    result = await _service().optimize(request)

    assert result.total_distance_km == pytest.approx(
        sum(segment.distance_km for segment in result.segments), abs=1e-6
    )
    assert result.total_duration_min == pytest.approx(
        round(sum(segment.duration_min for segment in result.segments), 1)
    )
    assert all(segment.distance_km >= 0 and segment.duration_min >= 0 for segment in result.segments)


@pytest.mark.asyncio
async def test_mixed_providers_report_mixed_source(mocker) -> None:
    estimator = SegmentEstimator()
    mocker.patch.object(
        estimator,
        "estimate",
        side_effect=[
            (RawEstimate(distance_km=1.2, duration_min=4.0, provider="kakao"), []),
            (RawEstimate(distance_km=0.8, duration_min=3.5, provider="fallback"), ["warn"]),
        ],
    )
    service = RouteOptimizerService(
        segment_estimator=estimator,
        capabilities=ProviderCapabilities(kakao_api_key="kakao-secret-key"),
    )

    result = await service.optimize(RouteRequest(origin=ORIGIN, waypoints=[NORTH_EAST, SOUTH_WEST]))

    assert result.source == "mixed"
    assert result.warnings == ["warn"]
    assert result.total_distance_km == 2.0
    assert result.total_duration_min == 7.5


@pytest.mark.asyncio
async def test_uses_process_capabilities_when_not_injected() -> None:
    result = await RouteOptimizerService().optimize(
        RouteRequest(origin=ORIGIN, waypoints=[NORTH_EAST])
    )

    assert result.warnings == [NO_PROVIDER_WARNING]


def test_ordered_points_are_copies_of_caller_points() -> None:
    request = RouteRequest(origin=ORIGIN, waypoints=[NORTH_EAST], round_trip=True)

    ordered = build_ordered_points(request)

    assert ordered == [ORIGIN, NORTH_EAST, ORIGIN]
    assert ordered[0] is not ORIGIN
    assert ordered[-1] is not ORIGIN
    assert ordered[1] is not NORTH_EAST


@pytest.mark.parametrize("waypoint_count", [0, 1, 5])
def test_ordered_point_count_matches_closing_point(waypoint_count: int) -> None:
    waypoints = [Point(lat=37.5, lng=127.0 + index * 0.01) for index in range(waypoint_count)]

    closed = build_ordered_points(RouteRequest(origin=ORIGIN, waypoints=waypoints, round_trip=True))
    open_route = build_ordered_points(RouteRequest(origin=ORIGIN, waypoints=waypoints))

    assert len(closed) == waypoint_count + 2
    assert len(open_route) == waypoint_count + 1


def test_single_provider_source() -> None:
    segment = SegmentEstimate(
        from_point=ORIGIN, to_point=NORTH_EAST, distance_km=1.0, duration_min=2.0, provider="odsay"
    )

    assert derive_source([segment, segment]) == "odsay"
