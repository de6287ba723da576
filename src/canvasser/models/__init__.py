"""
Canvassing Data Models

Pydantic models for properties, visits, territories, routes and location fixes.
"""
from src.canvasser.models.geo import Point, BoundingBox
from src.canvasser.models.property import (
    Property,
    PropertyDraft,
    PropertyStatus,
    Priority,
    Quality,
    Visit,
    VisitType,
)
from src.canvasser.models.territory import Territory, TerritoryStats
from src.canvasser.models.route import Route, RouteStatus, OptimizedRoute
from src.canvasser.models.location import LocationFix, TrackerState, TrackerError
from src.canvasser.models.snapshot import Analytics, MapView, CanvassingSnapshot

__all__ = [
    "Point",
    "BoundingBox",
    "Property",
    "PropertyDraft",
    "PropertyStatus",
    "Priority",
    "Quality",
    "Visit",
    "VisitType",
    "Territory",
    "TerritoryStats",
    "Route",
    "RouteStatus",
    "OptimizedRoute",
    "LocationFix",
    "TrackerState",
    "TrackerError",
    "Analytics",
    "MapView",
    "CanvassingSnapshot",
]
