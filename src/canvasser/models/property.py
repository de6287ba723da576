"""
Property Data Models

Pydantic models for canvassed properties and their visit audit log.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.canvasser.models.geo import Point


class PropertyStatus(str, Enum):
    """Canvassing outcome for a property. Flat enum, no hierarchy."""

    NOT_CONTACTED = "not_contacted"
    INTERESTED = "interested"
    NOT_INTERESTED = "not_interested"
    CALLBACK = "callback"
    APPOINTMENT = "appointment"
    SOLD = "sold"
    DO_NOT_CONTACT = "dnc"
    NOT_HOME = "not_home"
    NEEDS_INSPECTION = "needs_inspection"
    KNOCK_NOT_HOME = "knock_not_home"
    FOLLOW_UP_NEEDED = "follow_up_needed"
    DOOR_HANGER = "door_hanger"


# Statuses that mean a conversation actually happened at the door
CONTACT_STATUSES = frozenset({
    PropertyStatus.INTERESTED,
    PropertyStatus.NOT_INTERESTED,
    PropertyStatus.CALLBACK,
    PropertyStatus.APPOINTMENT,
    PropertyStatus.SOLD,
})

# Statuses eligible for route planning
ROUTABLE_STATUSES = frozenset({
    PropertyStatus.NOT_CONTACTED,
    PropertyStatus.CALLBACK,
})


class Quality(str, Enum):
    HOT = "hot"
    WARM = "warm"
    COLD = "cold"
    UNSET = "unset"


class Priority(str, Enum):
    NORMAL = "normal"
    HIGH = "high"


class VisitType(str, Enum):
    STATUS_CHANGE = "status_change"
    NOTE = "note"
    MANUAL = "manual"


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys in snapshots."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class Visit(CamelModel):
    """
    Immutable audit entry attached to one property.

    Attributes:
        id: Visit identifier
        type: What kind of entry this is
        status: New status for status_change visits
        previous_status: Status before a status_change
        notes: Free-text note
        timestamp: Set by the ledger at append time
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str
    type: VisitType
    status: Optional[PropertyStatus] = None
    previous_status: Optional[PropertyStatus] = None
    notes: Optional[str] = None
    timestamp: datetime


class PropertyDraft(CamelModel):
    """
    Caller-supplied fields for creating a property.

    Latitude and longitude are required; everything else is optional.
    """

    latitude: float = Field(..., description="WGS84 latitude", ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(..., description="WGS84 longitude", ge=-180, le=180, allow_inf_nan=False)
    address: Optional[str] = Field(None, description="Street address, geocoded if absent")
    street_address: Optional[str] = None
    status: PropertyStatus = PropertyStatus.NOT_CONTACTED
    quality: Quality = Quality.UNSET
    priority: Priority = Priority.NORMAL
    territory_id: Optional[str] = None
    created_by: Optional[str] = Field(None, description="Origin tag, e.g. map_click or import")

    @field_validator("address")
    @classmethod
    def blank_address_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat whitespace-only addresses as missing."""
        if v is not None and not v.strip():
            return None
        return v


class Property(CamelModel):
    """
    A physical address canvassed or pinned on the map.

    The visits list is append-only; only the PropertyLedger appends to it.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    id: str
    address: str
    street_address: Optional[str] = None
    latitude: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180, le=180, allow_inf_nan=False)
    status: PropertyStatus = PropertyStatus.NOT_CONTACTED
    quality: Quality = Quality.UNSET
    priority: Priority = Priority.NORMAL
    territory_id: Optional[str] = None
    created_by: Optional[str] = None
    visits: List[Visit] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    last_visit_date: Optional[datetime] = None

    @property
    def location(self) -> Point:
        return Point(lat=self.latitude, lng=self.longitude)

    def visits_between(self, start: datetime, end: datetime) -> List[Visit]:
        """Visits with start <= timestamp < end, in append order."""
        return [v for v in self.visits if start <= v.timestamp < end]
