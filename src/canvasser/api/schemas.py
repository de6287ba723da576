"""
Pydantic Schemas for API Request/Response Models

Domain models (Property, Territory, Route, ...) are returned as-is; these
schemas cover request bodies and composite responses.
"""
from typing import List, Optional
from datetime import datetime

from pydantic import BaseModel, Field

from src.canvasser.models.geo import Point
from src.canvasser.models.location import LocationFix, TrackerError, TrackerState
from src.canvasser.models.property import CamelModel, Priority, Property, PropertyStatus, Quality
from src.canvasser.models.territory import Territory, TerritoryStats


class TerritoryCreate(CamelModel):
    """Drawn territory."""
    name: str
    ring: List[Point] = Field(..., description="Drawn vertices; closed automatically")
    color: Optional[str] = None
    description: str = ""
    assigned_reps: List[str] = Field(default_factory=list)


class TerritoryUpdate(CamelModel):
    """Partial territory edit. Omitted fields are left alone."""
    name: Optional[str] = None
    ring: Optional[List[Point]] = None
    assigned_reps: Optional[List[str]] = None


class TerritoryWithStats(BaseModel):
    territory: Territory
    stats: TerritoryStats


class StatusUpdate(CamelModel):
    status: PropertyStatus
    note: Optional[str] = None


class NoteCreate(BaseModel):
    text: str


class VisitCreate(BaseModel):
    note: Optional[str] = None


class PropertyDetailsUpdate(CamelModel):
    quality: Optional[Quality] = None
    priority: Optional[Priority] = None
    address: Optional[str] = None


class LocationCorrection(CamelModel):
    latitude: float
    longitude: float


class RouteOptimizeRequest(CamelModel):
    """
    Either explicit property ids, or a count for a quick route over the
    nearest routable properties.
    """
    property_ids: Optional[List[str]] = None
    count: Optional[int] = Field(None, ge=1)
    start: Optional[Point] = None


class RouteSaveRequest(CamelModel):
    name: str
    property_ids: List[str]
    start: Optional[Point] = None
    activate: bool = False


class OptimizedRouteResponse(CamelModel):
    properties: List[Property]
    total_distance: float
    estimated_time: float


class TrackingStatus(CamelModel):
    state: TrackerState
    error: Optional[TrackerError] = None
    error_message: Optional[str] = None
    current_fix: Optional[LocationFix] = None
    total_distance_miles: float = 0.0


class FixIngestResponse(CamelModel):
    accepted: bool
    tracking: TrackingStatus


class MapViewUpdate(CamelModel):
    center: Optional[Point] = None
    zoom: Optional[int] = Field(None, ge=0, le=22)
    map_type: Optional[str] = None
    show_traffic: Optional[bool] = None
    show_heatmap: Optional[bool] = None
    show_territories: Optional[bool] = None
    show_routes: Optional[bool] = None


class SnapshotResult(BaseModel):
    key: str
    loaded: bool = False
    properties: int = 0
    territories: int = 0
    routes: int = 0


class HealthCheck(BaseModel):
    """Health check response."""
    status: str
    version: str
    database: str
    timestamp: datetime
