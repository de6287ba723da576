"""
Route Book

Saved routes. At most one route is active at a time.
"""
from datetime import datetime
from threading import RLock
from typing import Callable, Dict, Iterable, List, Optional

from src.canvasser.exceptions import NotFound
from src.canvasser.ledger.property_ledger import PropertyLedger, new_id, utc_now
from src.canvasser.models.property import Property
from src.canvasser.models.route import OptimizedRoute, Route, RouteStatus
from src.canvasser.utils.logger import get_logger

logger = get_logger(__name__)


class RouteBook:
    """Stores routes produced by the RouteOptimizer."""

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self.clock = clock
        self._routes: Dict[str, Route] = {}
        self._lock = RLock()

    def _require(self, route_id: str) -> Route:
        route = self._routes.get(route_id)
        if route is None:
            raise NotFound("Route", route_id)
        return route

    def save(self, name: str, optimized: OptimizedRoute, activate: bool = False) -> Route:
        """
        Persist an optimized route under a name.

        Raises:
            ValueError: Blank route name
        """
        if not name or not name.strip():
            raise ValueError("Route name must not be blank")

        now = self.clock()
        route = Route(
            id=new_id("route"),
            name=name.strip(),
            property_ids=optimized.property_ids,
            distance=round(optimized.total_distance, 2),
            estimated_time=round(optimized.estimated_time),
            status=RouteStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._routes[route.id] = route

        logger.info("route_saved", route_id=route.id, name=route.name, stop_count=len(route.property_ids))
        if activate:
            return self.activate(route.id)
        return route.model_copy(deep=True)

    def activate(self, route_id: str) -> Route:
        """
        Make a route the active one, demoting any other active route to pending.

        Raises:
            NotFound: Unknown route id
        """
        with self._lock:
            route = self._require(route_id)
            now = self.clock()
            for other in self._routes.values():
                if other.id != route_id and other.status == RouteStatus.ACTIVE:
                    other.status = RouteStatus.PENDING
                    other.updated_at = now
                    logger.info("route_deactivated", route_id=other.id)
            route.status = RouteStatus.ACTIVE
            route.updated_at = now
            result = route.model_copy(deep=True)

        logger.info("route_activated", route_id=route_id)
        return result

    def complete(self, route_id: str) -> Route:
        with self._lock:
            route = self._require(route_id)
            route.status = RouteStatus.COMPLETE
            route.updated_at = self.clock()
            result = route.model_copy(deep=True)
        logger.info("route_completed", route_id=route_id)
        return result

    def delete(self, route_id: str) -> Route:
        with self._lock:
            route = self._routes.pop(route_id, None)
        if route is None:
            raise NotFound("Route", route_id)
        logger.info("route_deleted", route_id=route_id)
        return route

    def get(self, route_id: str) -> Route:
        with self._lock:
            return self._require(route_id).model_copy(deep=True)

    def all(self) -> List[Route]:
        with self._lock:
            return [r.model_copy(deep=True) for r in self._routes.values()]

    def active(self) -> Optional[Route]:
        with self._lock:
            for route in self._routes.values():
                if route.status == RouteStatus.ACTIVE:
                    return route.model_copy(deep=True)
        return None

    def resolve(self, route_id: str, ledger: PropertyLedger) -> List[Property]:
        """
        The route's stops that still exist, in route order.

        Ids of deleted properties are skipped.
        """
        route = self.get(route_id)
        stops = []
        for property_id in route.property_ids:
            if ledger.exists(property_id):
                stops.append(ledger.get(property_id))
            else:
                logger.debug("route_stop_missing", route_id=route_id, property_id=property_id)
        return stops

    def drop_property(self, property_id: str) -> List[str]:
        """
        Remove a deleted property from every route.

        Returns:
            Ids of the routes that referenced it
        """
        touched = []
        with self._lock:
            now = self.clock()
            for route in self._routes.values():
                if property_id in route.property_ids:
                    route.property_ids = [i for i in route.property_ids if i != property_id]
                    route.updated_at = now
                    touched.append(route.id)
        return touched

    def load(self, routes: Iterable[Route]) -> None:
        """Replace the stored routes, keeping at most one active."""
        with self._lock:
            self._routes = {}
            seen_active = False
            for route in routes:
                copy = route.model_copy(deep=True)
                if copy.status == RouteStatus.ACTIVE:
                    if seen_active:
                        copy.status = RouteStatus.PENDING
                    seen_active = True
                self._routes[copy.id] = copy
            count = len(self._routes)
        logger.info("route_book_loaded", route_count=count)
