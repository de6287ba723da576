"""
Property Ledger

Owns every canvassed Property and its append-only Visit log. All mutations go
through one lock, so a status change and its audit entry are a single atomic
step. Callers receive copies; stored entities are never handed out.
"""
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Protocol
from threading import RLock

from src.canvasser.exceptions import EmptyNote, GeocodeUnavailable, InvalidTransition, NotFound
from src.canvasser.geocoding.reverse_geocoder import GeocodeResult, placeholder_address
from src.canvasser.models.property import (
    Priority,
    Property,
    PropertyDraft,
    PropertyStatus,
    Quality,
    Visit,
    VisitType,
)
from src.canvasser.utils.logger import get_logger

logger = get_logger(__name__)


class Geocoder(Protocol):
    def reverse_geocode(self, lat: float, lng: float) -> GeocodeResult: ...


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id(prefix: str) -> str:
    """Stable unique identifier with a readable entity prefix."""
    return f"{prefix}_{uuid.uuid4().hex[:16]}"


class StatusTransitions:
    """
    Table of allowed status changes.

    The default table is permissive: any status may move to any other.
    Pass an explicit mapping to tighten it; a requested change missing from
    the table raises InvalidTransition.
    """

    def __init__(self, allowed: Optional[Dict[PropertyStatus, Iterable[PropertyStatus]]] = None):
        if allowed is None:
            everything = frozenset(PropertyStatus)
            allowed = {status: everything for status in PropertyStatus}
        self._allowed: Dict[PropertyStatus, FrozenSet[PropertyStatus]] = {
            status: frozenset(targets) for status, targets in allowed.items()
        }

    def is_allowed(self, current: PropertyStatus, requested: PropertyStatus) -> bool:
        return requested in self._allowed.get(current, frozenset())

    def check(self, current: PropertyStatus, requested: PropertyStatus) -> None:
        if not self.is_allowed(current, requested):
            raise InvalidTransition(current.value, requested.value)


class PropertyLedger:
    """
    Single source of truth for properties and visits.

    Args:
        geocoder: Optional reverse geocoder used when a draft has no address
        transitions: Status transition table (permissive by default)
        clock: Returns the current time; visit timestamps come from here
    """

    def __init__(
        self,
        geocoder: Optional[Geocoder] = None,
        transitions: Optional[StatusTransitions] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.geocoder = geocoder
        self.transitions = transitions or StatusTransitions()
        self.clock = clock
        self._properties: Dict[str, Property] = {}
        self._lock = RLock()

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create(self, draft: PropertyDraft) -> Property:
        """
        Store a new property.

        When the draft has no address the geocoder is consulted; if it is
        absent or fails, a coordinate placeholder address is used.

        Args:
            draft: Validated draft; latitude and longitude are required

        Returns:
            Copy of the stored property
        """
        address = draft.address
        street_address = draft.street_address
        if address is None:
            address, resolved_street = self._resolve_address(draft.latitude, draft.longitude)
            street_address = street_address or resolved_street

        now = self.clock()
        prop = Property(
            id=new_id("property"),
            address=address,
            street_address=street_address,
            latitude=draft.latitude,
            longitude=draft.longitude,
            status=draft.status,
            quality=draft.quality,
            priority=draft.priority,
            territory_id=draft.territory_id,
            created_by=draft.created_by,
            visits=[],
            created_at=now,
            updated_at=now,
        )

        with self._lock:
            self._properties[prop.id] = prop

        logger.info(
            "property_created",
            property_id=prop.id,
            status=prop.status.value,
            created_by=prop.created_by,
        )
        return prop.model_copy(deep=True)

    def _resolve_address(self, lat: float, lng: float) -> tuple:
        if self.geocoder is None:
            return placeholder_address(lat, lng), None
        try:
            result = self.geocoder.reverse_geocode(lat, lng)
        except GeocodeUnavailable as e:
            logger.warning("property_geocode_fallback", lat=lat, lng=lng, reason=str(e))
            return placeholder_address(lat, lng), None
        return result.address, result.street_address

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _require(self, property_id: str) -> Property:
        prop = self._properties.get(property_id)
        if prop is None:
            raise NotFound("Property", property_id)
        return prop

    def _append_visit(self, prop: Property, visit_type: VisitType, **fields) -> Visit:
        now = self.clock()
        visit = Visit(id=new_id("visit"), type=visit_type, timestamp=now, **fields)
        prop.visits.append(visit)
        prop.updated_at = now
        return visit

    def set_status(
        self,
        property_id: str,
        status: PropertyStatus,
        note: Optional[str] = None,
    ) -> Property:
        """
        Change a property's status and log it.

        Appends exactly one status_change visit recording the old and new
        status plus the optional note.

        Raises:
            NotFound: Unknown property id
            InvalidTransition: The transition table rejects the change
        """
        status = PropertyStatus(status)
        note = note.strip() if note and note.strip() else None

        with self._lock:
            prop = self._require(property_id)
            previous = prop.status
            self.transitions.check(previous, status)

            visit = self._append_visit(
                prop,
                VisitType.STATUS_CHANGE,
                status=status,
                previous_status=previous,
                notes=note,
            )
            prop.status = status
            prop.last_visit_date = visit.timestamp
            result = prop.model_copy(deep=True)

        logger.info(
            "property_status_changed",
            property_id=property_id,
            previous_status=previous.value,
            new_status=status.value,
            visit_count=len(result.visits),
        )
        return result

    def append_note(self, property_id: str, text: str) -> Visit:
        """
        Attach a note without touching the status.

        Raises:
            NotFound: Unknown property id
            EmptyNote: Text is empty or whitespace
        """
        with self._lock:
            prop = self._require(property_id)
            if not text or not text.strip():
                raise EmptyNote(property_id)
            visit = self._append_visit(prop, VisitType.NOTE, notes=text.strip())

        logger.info("property_note_appended", property_id=property_id, visit_id=visit.id)
        return visit

    def log_visit(self, property_id: str, note: Optional[str] = None) -> Visit:
        """Record a knock that did not change the status."""
        note = note.strip() if note and note.strip() else None
        with self._lock:
            prop = self._require(property_id)
            visit = self._append_visit(prop, VisitType.MANUAL, notes=note)
            prop.last_visit_date = visit.timestamp

        logger.info("property_visit_logged", property_id=property_id, visit_id=visit.id)
        return visit

    def update_details(
        self,
        property_id: str,
        quality: Optional[Quality] = None,
        priority: Optional[Priority] = None,
        address: Optional[str] = None,
    ) -> Property:
        """Edit lead metadata. Does not produce a visit."""
        with self._lock:
            prop = self._require(property_id)
            if quality is not None:
                prop.quality = Quality(quality)
            if priority is not None:
                prop.priority = Priority(priority)
            if address is not None and address.strip():
                prop.address = address
            prop.updated_at = self.clock()
            return prop.model_copy(deep=True)

    def correct_location(self, property_id: str, latitude: float, longitude: float) -> Property:
        """
        Explicitly correct a mis-placed pin.

        Raises:
            NotFound: Unknown property id
            ValidationError: Coordinates out of range
        """
        with self._lock:
            prop = self._require(property_id)
            original = (prop.latitude, prop.longitude)
            prop.latitude = latitude
            try:
                prop.longitude = longitude
            except ValueError:
                prop.latitude = original[0]
                raise
            prop.updated_at = self.clock()
            result = prop.model_copy(deep=True)

        logger.info(
            "property_location_corrected",
            property_id=property_id,
            previous=original,
            latitude=latitude,
            longitude=longitude,
        )
        return result

    def assign_territory(self, property_id: str, territory_id: Optional[str]) -> Property:
        """Set or clear the territory back-reference."""
        with self._lock:
            prop = self._require(property_id)
            prop.territory_id = territory_id
            prop.updated_at = self.clock()
            return prop.model_copy(deep=True)

    def clear_territory(self, territory_id: str) -> List[str]:
        """
        Detach every property from a deleted territory.

        Returns:
            Ids of the properties that were detached
        """
        detached = []
        with self._lock:
            now = self.clock()
            for prop in self._properties.values():
                if prop.territory_id == territory_id:
                    prop.territory_id = None
                    prop.updated_at = now
                    detached.append(prop.id)

        if detached:
            logger.info("properties_detached_from_territory", territory_id=territory_id, count=len(detached))
        return detached

    def delete(self, property_id: str) -> Property:
        """
        Remove a property.

        Saved routes may still reference the id; route resolution skips it.

        Raises:
            NotFound: Unknown property id
        """
        with self._lock:
            prop = self._properties.pop(property_id, None)
        if prop is None:
            raise NotFound("Property", property_id)

        logger.info("property_deleted", property_id=property_id)
        return prop

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, property_id: str) -> Property:
        with self._lock:
            return self._require(property_id).model_copy(deep=True)

    def exists(self, property_id: str) -> bool:
        with self._lock:
            return property_id in self._properties

    def query(
        self,
        status: Optional[PropertyStatus] = None,
        quality: Optional[Quality] = None,
        territory_id: Optional[str] = None,
    ) -> List[Property]:
        """
        Properties matching every provided filter.

        A filter left as None places no constraint.
        """
        status = PropertyStatus(status) if status is not None else None
        quality = Quality(quality) if quality is not None else None

        with self._lock:
            return [
                prop.model_copy(deep=True)
                for prop in self._properties.values()
                if (status is None or prop.status == status)
                and (quality is None or prop.quality == quality)
                and (territory_id is None or prop.territory_id == territory_id)
            ]

    def all(self) -> List[Property]:
        return self.query()

    def count(self) -> int:
        with self._lock:
            return len(self._properties)

    def visits_between(self, start: datetime, end: datetime) -> List[Visit]:
        """All visits across properties with start <= timestamp < end, oldest first."""
        with self._lock:
            visits = [
                visit
                for prop in self._properties.values()
                for visit in prop.visits_between(start, end)
            ]
        return sorted(visits, key=lambda v: v.timestamp)

    def load(self, properties: Iterable[Property]) -> None:
        """Replace the ledger contents, e.g. from a persisted snapshot."""
        with self._lock:
            self._properties = {p.id: p.model_copy(deep=True) for p in properties}
            count = len(self._properties)
        logger.info("property_ledger_loaded", property_count=count)
