"""
Territory Registry

Owns user-drawn sales territories. Area, centroid and overlap bookkeeping are
recomputed from the ring on every create and ring edit. Property statistics
are read from the PropertyLedger on demand; the registry never owns
properties.
"""
from datetime import datetime
from threading import RLock
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from config.settings import settings
from src.canvasser.exceptions import NotFound
from src.canvasser.ledger.property_ledger import PropertyLedger, new_id, utc_now
from src.canvasser.models.geo import Point
from src.canvasser.models.property import PropertyStatus
from src.canvasser.models.territory import Territory, TerritoryStats
from src.canvasser.utils.geo_utils import (
    PointLike,
    point_in_polygon,
    polygon_area,
    polygon_centroid,
    polygons_overlap,
    validate_ring,
)
from src.canvasser.utils.logger import get_logger

logger = get_logger(__name__)


class TerritoryRegistry:
    """
    Create, edit and delete territories while keeping overlap sets symmetric.

    Args:
        palette: Fill colors handed out in rotation when none is given
        clock: Returns the current time
    """

    def __init__(
        self,
        palette: Optional[List[str]] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.palette = palette or list(settings.territory_colors)
        self.clock = clock
        self._territories: Dict[str, Territory] = {}
        self._lock = RLock()

    def _require(self, territory_id: str) -> Territory:
        territory = self._territories.get(territory_id)
        if territory is None:
            raise NotFound("Territory", territory_id)
        return territory

    @staticmethod
    def _set_overlaps(territory: Territory, ids: Iterable[str]) -> None:
        territory.overlaps = sorted(set(ids))

    def _overlapping_ids(self, ring: List[Point], exclude: Optional[str] = None) -> List[str]:
        return [
            other.id
            for other in self._territories.values()
            if other.id != exclude and polygons_overlap(ring, other.ring)
        ]

    def create(
        self,
        name: str,
        ring: Iterable[PointLike],
        color: Optional[str] = None,
        description: str = "",
        assigned_reps: Optional[List[str]] = None,
    ) -> Territory:
        """
        Validate a drawn ring and store it as a territory.

        Args:
            name: Territory name, must not be blank
            ring: Drawn ring; an open ring is closed automatically
            color: Hex fill color (palette rotation when omitted)
            description: Free text
            assigned_reps: Rep ids working the territory

        Returns:
            Copy of the stored territory

        Raises:
            ValueError: Blank name
            InvalidPolygon: Ring has fewer than 3 distinct points or bad coordinates
        """
        if not name or not name.strip():
            raise ValueError("Territory name must not be blank")

        closed = validate_ring(ring)
        area = polygon_area(closed)
        centroid = polygon_centroid(closed)

        with self._lock:
            overlaps = self._overlapping_ids(closed)
            now = self.clock()
            territory = Territory(
                id=new_id("territory"),
                name=name.strip(),
                ring=closed,
                color=color or self.palette[len(self._territories) % len(self.palette)],
                description=description or "",
                assigned_reps=list(assigned_reps or []),
                area=area,
                centroid=centroid,
                overlaps=overlaps,
                created_at=now,
                updated_at=now,
            )
            for other_id in overlaps:
                other = self._territories[other_id]
                self._set_overlaps(other, [*other.overlaps, territory.id])
            self._territories[territory.id] = territory
            result = territory.model_copy(deep=True)

        logger.info(
            "territory_created",
            territory_id=result.id,
            name=result.name,
            area_sq_miles=round(area, 4),
            vertex_count=len(closed) - 1,
            overlap_count=len(overlaps),
        )
        return result

    def update(self, territory_id: str, ring: Iterable[PointLike]) -> Territory:
        """
        Replace a territory's ring.

        Area, centroid and overlaps are recomputed exactly as on create, and
        other territories' overlap sets are brought in line.

        Raises:
            NotFound: Unknown territory id
            InvalidPolygon: Ring is unusable; the territory is left unchanged
        """
        closed = validate_ring(ring)
        area = polygon_area(closed)
        centroid = polygon_centroid(closed)

        with self._lock:
            territory = self._require(territory_id)
            overlaps = set(self._overlapping_ids(closed, exclude=territory_id))

            for other in self._territories.values():
                if other.id == territory_id:
                    continue
                if other.id in overlaps:
                    self._set_overlaps(other, [*other.overlaps, territory_id])
                elif territory_id in other.overlaps:
                    self._set_overlaps(other, [i for i in other.overlaps if i != territory_id])

            territory.ring = closed
            territory.area = area
            territory.centroid = centroid
            self._set_overlaps(territory, overlaps)
            territory.updated_at = self.clock()
            result = territory.model_copy(deep=True)

        logger.info(
            "territory_ring_updated",
            territory_id=territory_id,
            area_sq_miles=round(area, 4),
            overlap_count=len(overlaps),
        )
        return result

    def rename(self, territory_id: str, name: str) -> Territory:
        if not name or not name.strip():
            raise ValueError("Territory name must not be blank")
        with self._lock:
            territory = self._require(territory_id)
            territory.name = name.strip()
            territory.updated_at = self.clock()
            return territory.model_copy(deep=True)

    def assign_reps(self, territory_id: str, rep_ids: List[str]) -> Territory:
        with self._lock:
            territory = self._require(territory_id)
            territory.assigned_reps = list(dict.fromkeys(rep_ids))
            territory.updated_at = self.clock()
            return territory.model_copy(deep=True)

    def delete(self, territory_id: str) -> Territory:
        """
        Remove a territory and scrub its id from every overlap set.

        Clearing Property.territory_id back-references is the caller's job
        (see CanvassingWorkspace.delete_territory).

        Raises:
            NotFound: Unknown territory id
        """
        with self._lock:
            territory = self._territories.pop(territory_id, None)
            if territory is None:
                raise NotFound("Territory", territory_id)
            for other in self._territories.values():
                if territory_id in other.overlaps:
                    self._set_overlaps(other, [i for i in other.overlaps if i != territory_id])

        logger.info("territory_deleted", territory_id=territory_id, name=territory.name)
        return territory

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, territory_id: str) -> Territory:
        with self._lock:
            return self._require(territory_id).model_copy(deep=True)

    def all(self) -> List[Territory]:
        with self._lock:
            return [t.model_copy(deep=True) for t in self._territories.values()]

    def reps_territories(self, rep_id: str) -> List[Territory]:
        """Territories a rep is assigned to."""
        with self._lock:
            return [
                t.model_copy(deep=True)
                for t in self._territories.values()
                if rep_id in t.assigned_reps
            ]

    def find_overlapping(self, territory_id: str) -> List[Territory]:
        """
        Territories that currently overlap the given one.

        Always a live recheck against current rings; the cached overlap sets
        are refreshed from the result.

        Raises:
            NotFound: Unknown territory id
        """
        with self._lock:
            territory = self._require(territory_id)
            overlapping = set(self._overlapping_ids(territory.ring, exclude=territory_id))

            if overlapping != set(territory.overlaps):
                logger.warning(
                    "territory_overlap_cache_refreshed",
                    territory_id=territory_id,
                    cached=territory.overlaps,
                    live=sorted(overlapping),
                )
            self._set_overlaps(territory, overlapping)
            for other in self._territories.values():
                if other.id == territory_id:
                    continue
                if other.id in overlapping:
                    self._set_overlaps(other, [*other.overlaps, territory_id])
                elif territory_id in other.overlaps:
                    self._set_overlaps(other, [i for i in other.overlaps if i != territory_id])

            return [
                self._territories[other_id].model_copy(deep=True)
                for other_id in sorted(overlapping)
            ]

    def locate(self, point: PointLike) -> List[Territory]:
        """Territories whose ring contains the point, oldest first."""
        with self._lock:
            matches = [
                t for t in self._territories.values()
                if point_in_polygon(point, t.ring)
            ]
            return [t.model_copy(deep=True) for t in sorted(matches, key=lambda t: t.created_at)]

    def stats(self, territory_id: str, ledger: PropertyLedger) -> TerritoryStats:
        """
        Canvassing statistics for the properties assigned to a territory.

        conversion_rate is sold / contacted, where contacted counts every
        property whose status is not not_contacted; 0.0 when nothing has
        been contacted.

        Raises:
            NotFound: Unknown territory id
        """
        with self._lock:
            self._require(territory_id)

        properties = ledger.query(territory_id=territory_id)
        statuses = [p.status for p in properties]

        contacted = sum(1 for s in statuses if s != PropertyStatus.NOT_CONTACTED)
        sold = statuses.count(PropertyStatus.SOLD)

        return TerritoryStats(
            total_properties=len(statuses),
            contacted=contacted,
            interested=statuses.count(PropertyStatus.INTERESTED),
            appointments=statuses.count(PropertyStatus.APPOINTMENT),
            sold=sold,
            dnc=statuses.count(PropertyStatus.DO_NOT_CONTACT),
            conversion_rate=sold / contacted if contacted else 0.0,
        )

    def all_with_stats(self, ledger: PropertyLedger) -> List[Tuple[Territory, TerritoryStats]]:
        return [(t, self.stats(t.id, ledger)) for t in self.all()]

    def load(self, territories: Iterable[Territory]) -> None:
        """Replace the registry contents, e.g. from a persisted snapshot."""
        with self._lock:
            self._territories = {t.id: t.model_copy(deep=True) for t in territories}
            count = len(self._territories)
        logger.info("territory_registry_loaded", territory_count=count)
