"""
Territory Data Models

Pydantic models for user-drawn sales territories and their statistics.
"""
from datetime import datetime
from typing import List

from pydantic import BaseModel, Field, field_validator

from src.canvasser.models.geo import Point
from src.canvasser.models.property import CamelModel


class Territory(CamelModel):
    """
    User-drawn geographic region.

    Attributes:
        id: Territory identifier
        name: Display name, never blank
        ring: Closed ring (first point == last point), at least 4 points
        color: Hex fill color
        description: Free text
        assigned_reps: Rep ids working this territory
        area: Area in square miles, recomputed whenever the ring changes
        centroid: Area-weighted centroid of the ring
        overlaps: Ids of other territories whose area intersects this one
    """

    id: str
    name: str = Field(..., min_length=1)
    ring: List[Point] = Field(..., min_length=4)
    color: str
    description: str = ""
    assigned_reps: List[str] = Field(default_factory=list)
    area: float = Field(..., ge=0)
    centroid: Point
    overlaps: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @field_validator("overlaps")
    @classmethod
    def sorted_unique_overlaps(cls, v: List[str]) -> List[str]:
        """Overlaps behave as a set; keep them sorted for stable output."""
        return sorted(set(v))


class TerritoryStats(BaseModel):
    """Per-territory canvassing statistics derived from the property ledger."""

    total_properties: int = 0
    contacted: int = 0
    interested: int = 0
    appointments: int = 0
    sold: int = 0
    dnc: int = 0
    conversion_rate: float = Field(0.0, description="sold / contacted, 0 when nothing contacted")
