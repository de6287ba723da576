"""
Live location tracking, position sources and geofences.
"""
from src.canvasser.tracking.location_tracker import LocationTracker
from src.canvasser.tracking.geofence import Geofence
from src.canvasser.tracking.sources import PositionOptions, PositionSource, PushPositionSource

__all__ = [
    "LocationTracker",
    "Geofence",
    "PositionOptions",
    "PositionSource",
    "PushPositionSource",
]
