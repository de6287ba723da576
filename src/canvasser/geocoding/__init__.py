"""
Reverse geocoding collaborator.
"""
from src.canvasser.geocoding.reverse_geocoder import (
    GeocodeResult,
    ReverseGeocoder,
    placeholder_address,
)

__all__ = [
    "GeocodeResult",
    "ReverseGeocoder",
    "placeholder_address",
]
