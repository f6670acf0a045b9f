from __future__ import annotations

from dataclasses import replace

from route_optimizer.services.geo import distance_km
from route_optimizer.services.types import Point


def sequence_waypoints(origin: Point, waypoints: list[Point]) -> list[Point]:
    """Order waypoints by greedy nearest neighbor starting from ``origin``.

    Equal distances resolve to the earliest waypoint in input order. The
    returned points are copies and never include ``origin`` itself.
    """
    remaining = [replace(point) for point in waypoints]
    ordered: list[Point] = []
    current = origin

    while remaining:
        best_index = 0
        best_distance = float("inf")
        for index, candidate in enumerate(remaining):
            distance = distance_km(current, candidate)
            if distance < best_distance:
                best_distance = distance
                best_index = index

        current = remaining.pop(best_index)
        ordered.append(current)

    return ordered
