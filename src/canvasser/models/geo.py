"""
Geographic Value Types

Points and bounding boxes shared by every canvassing component.
"""
from pydantic import BaseModel, ConfigDict, Field


class Point(BaseModel):
    """
    WGS84 coordinate pair.

    Attributes:
        lat: Latitude in decimal degrees
        lng: Longitude in decimal degrees
    """

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., description="WGS84 latitude", ge=-90, le=90, allow_inf_nan=False)
    lng: float = Field(..., description="WGS84 longitude", ge=-180, le=180, allow_inf_nan=False)

    def as_xy(self) -> tuple:
        """Return (x, y) ordering, i.e. (lng, lat), for planar libraries."""
        return (self.lng, self.lat)


class BoundingBox(BaseModel):
    """Axis-aligned box spanning a set of points."""

    model_config = ConfigDict(frozen=True)

    southwest: Point
    northeast: Point

    def contains(self, point: Point) -> bool:
        return (
            self.southwest.lat <= point.lat <= self.northeast.lat
            and self.southwest.lng <= point.lng <= self.northeast.lng
        )
