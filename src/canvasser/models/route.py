"""
Route Data Models
"""
from datetime import datetime
from enum import Enum
from typing import List

from pydantic import BaseModel, Field

from src.canvasser.models.property import CamelModel, Property


class RouteStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETE = "complete"


class OptimizedRoute(BaseModel):
    """
    Output of the route optimizer.

    Attributes:
        properties: Visiting order
        total_distance: Miles, including the leg from the start point
        estimated_time: Minutes, at the configured minutes-per-mile
    """

    properties: List[Property] = Field(default_factory=list)
    total_distance: float = 0.0
    estimated_time: float = 0.0

    @property
    def property_ids(self) -> List[str]:
        return [p.id for p in self.properties]


class Route(CamelModel):
    """Saved, ordered visiting plan."""

    id: str
    name: str = Field(..., min_length=1)
    property_ids: List[str] = Field(default_factory=list)
    distance: float = Field(0.0, ge=0)
    estimated_time: float = Field(0.0, ge=0)
    status: RouteStatus = RouteStatus.PENDING
    created_at: datetime
    updated_at: datetime
