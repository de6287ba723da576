"""
Location Tracking Models
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from src.canvasser.models.geo import Point


class TrackerState(str, Enum):
    IDLE = "idle"
    TRACKING = "tracking"
    ERROR = "error"


class TrackerError(str, Enum):
    """Failure reasons recorded on the tracker. Never raised."""

    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    UNSUPPORTED = "unsupported"


TRACKER_ERROR_MESSAGES = {
    TrackerError.PERMISSION_DENIED: "Permission denied. Please enable location access.",
    TrackerError.POSITION_UNAVAILABLE: "Position unavailable. Check your GPS settings.",
    TrackerError.TIMEOUT: "Request timeout. Please try again.",
    TrackerError.UNSUPPORTED: "Geolocation is not supported on this device.",
}


class LocationFix(BaseModel):
    """One sampled device location reading."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    lng: float = Field(..., ge=-180, le=180, allow_inf_nan=False)
    accuracy: Optional[float] = Field(None, ge=0, description="Accuracy radius in meters")
    altitude: Optional[float] = None
    heading: Optional[float] = None
    speed: Optional[float] = None
    timestamp: datetime

    @property
    def point(self) -> Point:
        return Point(lat=self.lat, lng=self.lng)


class PositionError(Exception):
    """
    Raised by a PositionSource when a position cannot be acquired.

    Carries the TrackerError code the tracker records.
    """

    def __init__(self, code: TrackerError, message: Optional[str] = None):
        self.code = code
        super().__init__(message or TRACKER_ERROR_MESSAGES[code])
