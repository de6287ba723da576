"""
Canvassing Workspace

The one service object that owns a ledger, a territory registry, a route
book and a location tracker, constructed once and handed to every consumer.
It coordinates the cross-component steps (territory assignment, cleanup on
delete, analytics) so the components never mutate each other directly.
"""
from datetime import date, datetime
from threading import RLock
from typing import Callable, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from config.settings import settings
from src.canvasser.db.repository import SnapshotRepository
from src.canvasser.geocoding.reverse_geocoder import ReverseGeocoder
from src.canvasser.ledger.property_ledger import PropertyLedger, utc_now
from src.canvasser.models.geo import Point
from src.canvasser.models.location import LocationFix
from src.canvasser.models.property import Property, PropertyDraft, PropertyStatus
from src.canvasser.models.route import OptimizedRoute, Route
from src.canvasser.models.snapshot import Analytics, CanvassingSnapshot, MapView
from src.canvasser.models.territory import Territory, TerritoryStats
from src.canvasser.reports.day_summary import DaySummary, DaySummaryAggregator
from src.canvasser.reports.knock_metrics import KnockMetrics, TimeFrame, knock_metrics, record_status_change
from src.canvasser.routing.optimizer import RouteOptimizer
from src.canvasser.routing.route_book import RouteBook
from src.canvasser.territories.registry import TerritoryRegistry
from src.canvasser.tracking.geofence import Geofence
from src.canvasser.tracking.location_tracker import LocationTracker
from src.canvasser.tracking.sources import PushPositionSource
from src.canvasser.utils.geo_utils import PointLike, point_in_polygon
from src.canvasser.utils.logger import get_logger

logger = get_logger(__name__)


class CanvassingWorkspace:
    """
    Wires the canvassing components together.

    Every argument is optional; defaults are built from settings. The default
    tracker listens to a PushPositionSource that the API feeds fixes into.
    """

    def __init__(
        self,
        ledger: Optional[PropertyLedger] = None,
        registry: Optional[TerritoryRegistry] = None,
        route_book: Optional[RouteBook] = None,
        tracker: Optional[LocationTracker] = None,
        optimizer: Optional[RouteOptimizer] = None,
        aggregator: Optional[DaySummaryAggregator] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.clock = clock
        if ledger is None:
            geocoder = ReverseGeocoder() if settings.geocoder_enabled else None
            ledger = PropertyLedger(geocoder=geocoder, clock=clock)
        self.ledger = ledger
        self.registry = registry or TerritoryRegistry(clock=clock)
        self.route_book = route_book or RouteBook(clock=clock)
        self.position_source = PushPositionSource()
        self.tracker = tracker or LocationTracker(source=self.position_source)
        self.optimizer = optimizer or RouteOptimizer()
        self.aggregator = aggregator or DaySummaryAggregator()
        self.analytics = Analytics()
        self.map_view = MapView()
        self.geofences: Dict[str, Geofence] = {}
        self._unsubscribers: Dict[str, Callable[[], None]] = {}
        self._lock = RLock()

    # ------------------------------------------------------------------
    # Snapshot round trip
    # ------------------------------------------------------------------

    def to_snapshot(self) -> CanvassingSnapshot:
        with self._lock:
            analytics = self.analytics.model_copy()
            map_view = self.map_view.model_copy()
        return CanvassingSnapshot(
            territories=self.registry.all(),
            properties=self.ledger.all(),
            routes=self.route_book.all(),
            analytics=analytics,
            map_view=map_view,
        )

    def restore(self, snapshot: CanvassingSnapshot) -> None:
        """Replace all state with a snapshot's contents."""
        self.ledger.load(snapshot.properties)
        self.registry.load(snapshot.territories)
        self.route_book.load(snapshot.routes)
        with self._lock:
            self.analytics = snapshot.analytics.model_copy()
            self.map_view = snapshot.map_view.model_copy()
        logger.info(
            "workspace_restored",
            properties=len(snapshot.properties),
            territories=len(snapshot.territories),
            routes=len(snapshot.routes),
        )

    def load(self, session: Session, key: str, repository: Optional[SnapshotRepository] = None) -> bool:
        """
        Restore from the snapshot store.

        Returns:
            False when nothing is stored under key (state left untouched)
        """
        snapshot = (repository or SnapshotRepository()).load(session, key)
        if snapshot is None:
            return False
        self.restore(snapshot)
        return True

    def save(self, session: Session, key: str, repository: Optional[SnapshotRepository] = None) -> None:
        (repository or SnapshotRepository()).save(session, key, self.to_snapshot())

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    def add_property(self, draft: PropertyDraft) -> Property:
        """
        Create a property, assigning it to the oldest territory containing it
        when the draft names none.
        """
        if draft.territory_id is None:
            containing = self.registry.locate(Point(lat=draft.latitude, lng=draft.longitude))
            if containing:
                draft = draft.model_copy(update={"territory_id": containing[0].id})
        return self.ledger.create(draft)

    def import_properties(self, drafts: Iterable[PropertyDraft]) -> List[Property]:
        created = [self.add_property(d) for d in drafts]
        logger.info("properties_imported", count=len(created))
        return created

    def change_status(self, property_id: str, status: PropertyStatus, note: Optional[str] = None) -> Property:
        """Set a property's status and count the knock."""
        prop = self.ledger.set_status(property_id, status, note)
        with self._lock:
            self.analytics = record_status_change(self.analytics, prop.status)
        return prop

    def delete_property(self, property_id: str) -> Property:
        """Delete a property and drop it from every saved route."""
        prop = self.ledger.delete(property_id)
        touched = self.route_book.drop_property(property_id)
        if touched:
            logger.info("property_removed_from_routes", property_id=property_id, route_ids=touched)
        return prop

    # ------------------------------------------------------------------
    # Territories
    # ------------------------------------------------------------------

    def _sync_territory_members(self, territory: Territory) -> None:
        """Attach unassigned properties inside the ring; detach members now outside it."""
        for prop in self.ledger.all():
            inside = point_in_polygon(prop.location, territory.ring)
            if prop.territory_id is None and inside:
                self.ledger.assign_territory(prop.id, territory.id)
            elif prop.territory_id == territory.id and not inside:
                self.ledger.assign_territory(prop.id, None)

    def create_territory(
        self,
        name: str,
        ring: Iterable[PointLike],
        color: Optional[str] = None,
        description: str = "",
        assigned_reps: Optional[List[str]] = None,
    ) -> Territory:
        territory = self.registry.create(name, ring, color, description, assigned_reps)
        self._sync_territory_members(territory)
        return territory

    def update_territory_ring(self, territory_id: str, ring: Iterable[PointLike]) -> Territory:
        territory = self.registry.update(territory_id, ring)
        self._sync_territory_members(territory)
        with self._lock:
            fence = self.geofences.get(territory_id)
        if fence is not None:
            # Keeps the inside flag; only a real boundary crossing fires
            replacement = self.watch_territory(territory_id, fence.on_enter, fence.on_exit, inside=fence.inside)
            current = self.tracker.current_fix
            if current is not None:
                replacement.update(current)
        return territory

    def delete_territory(self, territory_id: str) -> Territory:
        """Delete a territory, clear property back-references and its geofence."""
        territory = self.registry.delete(territory_id)
        self.ledger.clear_territory(territory_id)
        self.unwatch_territory(territory_id)
        return territory

    def territory_stats(self, territory_id: str) -> TerritoryStats:
        return self.registry.stats(territory_id, self.ledger)

    # ------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------

    def current_location(self) -> Point:
        """Latest accepted fix, falling back to the map center."""
        fix = self.tracker.current_fix
        if fix is not None:
            return fix.point
        with self._lock:
            return self.map_view.center

    def plan_route(self, property_ids: Iterable[str], start: Optional[Point] = None) -> OptimizedRoute:
        """Optimize a selection of properties; ids no longer in the ledger are skipped."""
        candidates = []
        for property_id in property_ids:
            if self.ledger.exists(property_id):
                candidates.append(self.ledger.get(property_id))
            else:
                logger.debug("route_candidate_missing", property_id=property_id)
        return self.optimizer.optimize(start or self.current_location(), candidates)

    def quick_route(self, count: int, start: Optional[Point] = None) -> OptimizedRoute:
        return self.optimizer.quick_route(start or self.current_location(), self.ledger.all(), count)

    def save_route(self, name: str, optimized: OptimizedRoute, activate: bool = False) -> Route:
        return self.route_book.save(name, optimized, activate=activate)

    def active_route_stops(self) -> List[Property]:
        route = self.route_book.active()
        if route is None:
            return []
        return self.route_book.resolve(route.id, self.ledger)

    # ------------------------------------------------------------------
    # Tracking
    # ------------------------------------------------------------------

    def ingest_fix(self, fix: LocationFix) -> bool:
        """
        Feed a fix posted by a client, starting tracking on first use.

        Returns:
            True if the tracker accepted the fix
        """
        if not self.tracker.is_tracking:
            self.tracker.start()
        return self.position_source.push(fix) > 0

    def watch_territory(
        self,
        territory_id: str,
        on_enter: Optional[Callable[[LocationFix], None]] = None,
        on_exit: Optional[Callable[[LocationFix], None]] = None,
        inside: bool = False,
    ) -> Geofence:
        """
        Subscribe a geofence for a territory to the tracker.

        Replaces any fence already watching the territory.

        Raises:
            NotFound: Unknown territory id
        """
        territory = self.registry.get(territory_id)
        fence = Geofence(territory.ring, on_enter=on_enter, on_exit=on_exit, name=territory.name, inside=inside)
        with self._lock:
            previous = self._unsubscribers.pop(territory_id, None)
            self.geofences[territory_id] = fence
            self._unsubscribers[territory_id] = self.tracker.subscribe(fence)
        if previous is not None:
            previous()
        return fence

    def unwatch_territory(self, territory_id: str) -> None:
        with self._lock:
            self.geofences.pop(territory_id, None)
            unsubscribe = self._unsubscribers.pop(territory_id, None)
        if unsubscribe is not None:
            unsubscribe()

    # ------------------------------------------------------------------
    # Reports and view state
    # ------------------------------------------------------------------

    def day_summary(self, day: date) -> DaySummary:
        return self.aggregator.summarize(day, self.ledger.all())

    def knock_metrics(self, time_frame: TimeFrame = TimeFrame.TODAY, now: Optional[datetime] = None) -> KnockMetrics:
        return knock_metrics(self.ledger.all(), time_frame, now or self.clock())

    def update_map_view(self, **updates) -> MapView:
        with self._lock:
            data = self.map_view.model_dump()
            data.update({k: v for k, v in updates.items() if v is not None})
            self.map_view = MapView.model_validate(data)
            return self.map_view.model_copy()
