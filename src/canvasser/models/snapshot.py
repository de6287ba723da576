"""
Persisted Snapshot Models

Shape of the full canvassing state written to the key-value snapshot store.
"""
from typing import List

from pydantic import Field

from src.canvasser.models.geo import Point
from src.canvasser.models.property import CamelModel, Property
from src.canvasser.models.route import Route
from src.canvasser.models.territory import Territory
from config.settings import settings


class Analytics(CamelModel):
    """Running knock counters."""

    total_doors_knocked: int = 0
    contacts_made: int = 0
    appointments_set: int = 0
    sales_made: int = 0
    hours_worked: float = 0.0


class MapView(CamelModel):
    """Last-used map view settings."""

    center: Point = Field(
        default_factory=lambda: Point(lat=settings.default_map_lat, lng=settings.default_map_lng)
    )
    zoom: int = Field(default_factory=lambda: settings.default_map_zoom)
    map_type: str = "roadmap"
    show_traffic: bool = False
    show_heatmap: bool = False
    show_territories: bool = True
    show_routes: bool = True


class CanvassingSnapshot(CamelModel):
    """Full serializable state of a canvassing workspace."""

    territories: List[Territory] = Field(default_factory=list)
    properties: List[Property] = Field(default_factory=list)
    routes: List[Route] = Field(default_factory=list)
    analytics: Analytics = Field(default_factory=Analytics)
    map_view: MapView = Field(default_factory=MapView)
