from __future__ import annotations

import logging
from dataclasses import replace

from route_optimizer.exceptions import InsufficientPointsError
from route_optimizer.services.capabilities import ProviderCapabilities, resolve_capabilities
from route_optimizer.services.estimation import SegmentEstimator
from route_optimizer.services.sequencing import sequence_waypoints
from route_optimizer.services.types import (
    Point,
    RouteRequest,
    RouteResult,
    RouteSource,
    SegmentEstimate,
)

logger = logging.getLogger(__name__)

NO_PROVIDER_WARNING = "No KAKAO/ODSAY API key configured. Using local fallback estimates."


class RouteOptimizerService:
    def __init__(
        self,
        segment_estimator: SegmentEstimator | None = None,
        capabilities: ProviderCapabilities | None = None,
    ) -> None:
        self.segment_estimator = segment_estimator or SegmentEstimator()
        self._capabilities = capabilities

    @property
    def capabilities(self) -> ProviderCapabilities:
        return self._capabilities or resolve_capabilities()

    async def optimize(self, request: RouteRequest) -> RouteResult:
        capabilities = self.capabilities
        warnings: list[str] = []
        if not capabilities.providers:
            logger.warning(NO_PROVIDER_WARNING)
            warnings.append(NO_PROVIDER_WARNING)

        ordered_points = build_ordered_points(request)
        if len(ordered_points) < 2:
            raise InsufficientPointsError()

        # Segments run strictly in order; warnings follow segment index.
        segments: list[SegmentEstimate] = []
        for start, finish in zip(ordered_points, ordered_points[1:]):
            estimate, segment_warnings = await self.segment_estimator.estimate(
                start, finish, request.mode, capabilities
            )
            warnings.extend(segment_warnings)
            segments.append(
                SegmentEstimate(
                    from_point=start,
                    to_point=finish,
                    distance_km=estimate.distance_km,
                    duration_min=estimate.duration_min,
                    provider=estimate.provider,
                )
            )

        return RouteResult(
            ordered_points=ordered_points,
            segments=segments,
            total_distance_km=round(sum(segment.distance_km for segment in segments), 2),
            total_duration_min=round(sum(segment.duration_min for segment in segments), 1),
            source=derive_source(segments),
            warnings=warnings,
        )


def build_ordered_points(request: RouteRequest) -> list[Point]:
    ordered = [replace(request.origin), *sequence_waypoints(request.origin, request.waypoints)]
    if request.destination is not None:
        ordered.append(replace(request.destination))
    elif request.round_trip:
        ordered.append(replace(request.origin))
    return ordered


def derive_source(segments: list[SegmentEstimate]) -> RouteSource:
    providers = {segment.provider for segment in segments}
    if len(providers) == 1:
        return segments[0].provider
    if not providers:
        return "fallback"
    return "mixed"
