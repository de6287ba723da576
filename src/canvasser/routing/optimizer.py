"""
Route Optimizer

Greedy nearest-neighbor ordering of knock stops. This is a heuristic: every
candidate is visited exactly once and each step goes to the closest remaining
stop, but the total distance is not guaranteed to be minimal.
"""
from typing import List, Optional, Sequence

from config.settings import settings
from src.canvasser.models.geo import Point
from src.canvasser.models.property import Property, ROUTABLE_STATUSES
from src.canvasser.models.route import OptimizedRoute
from src.canvasser.utils.geo_utils import distance
from src.canvasser.utils.logger import get_logger

logger = get_logger(__name__)


class RouteOptimizer:
    """
    Orders candidate properties from a start point.

    Operates on the list it is given; later ledger changes only show up in
    the next call.
    """

    def __init__(self, minutes_per_mile: Optional[float] = None):
        """
        Args:
            minutes_per_mile: Walking-and-stopping pace used for time estimates
        """
        self.minutes_per_mile = minutes_per_mile or settings.route_minutes_per_mile

    def optimize(self, start: Point, candidates: Sequence[Property]) -> OptimizedRoute:
        """
        Build a visiting order with the nearest-neighbor heuristic.

        Ties go to the candidate that appears first in the input.

        Args:
            start: Where the rep is now
            candidates: Properties to visit

        Returns:
            OptimizedRoute with ordered properties, total distance in miles
            (including the leg from start) and estimated minutes
        """
        remaining: List[Property] = list(candidates)
        ordered: List[Property] = []
        current = start
        total = 0.0

        while remaining:
            nearest_index = 0
            nearest_distance = distance(current, remaining[0].location)
            for index in range(1, len(remaining)):
                leg = distance(current, remaining[index].location)
                if leg < nearest_distance:
                    nearest_index = index
                    nearest_distance = leg

            nearest = remaining.pop(nearest_index)
            ordered.append(nearest)
            total += nearest_distance
            current = nearest.location

        route = OptimizedRoute(
            properties=ordered,
            total_distance=total,
            estimated_time=total * self.minutes_per_mile,
        )
        logger.info(
            "route_optimized",
            stop_count=len(ordered),
            total_distance_miles=round(total, 3),
            estimated_minutes=round(route.estimated_time, 1),
        )
        return route

    def quick_route(self, start: Point, candidates: Sequence[Property], count: int) -> OptimizedRoute:
        """
        Optimize the `count` nearest routable properties.

        Only not_contacted and callback properties are considered.
        """
        if count <= 0:
            return OptimizedRoute()

        routable = [p for p in candidates if p.status in ROUTABLE_STATUSES]
        nearest = sorted(
            enumerate(routable),
            key=lambda pair: (distance(start, pair[1].location), pair[0]),
        )[:count]
        return self.optimize(start, [p for _, p in nearest])
