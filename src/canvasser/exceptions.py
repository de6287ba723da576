"""
Canvassing Errors

Exceptions surfaced synchronously to the immediate caller. Location tracker
failures are not exceptions; they are recorded as a TrackerError on the
tracker (see src.canvasser.models.location).
"""
from typing import Optional


class CanvassingError(Exception):
    """Base class for all canvassing core errors."""


class InvalidPolygon(CanvassingError):
    """
    Raised when a territory ring is unusable.

    The ring has fewer than 3 distinct points, or contains non-finite or
    out-of-range coordinates. The territory is not created or updated.
    """

    def __init__(self, reason: str, point_count: Optional[int] = None):
        self.reason = reason
        self.point_count = point_count
        super().__init__(f"Invalid polygon: {reason}")


class NotFound(CanvassingError):
    """Raised when an operation references an id that is not stored."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class EmptyNote(CanvassingError):
    """Raised when a note with no text is appended to a property."""

    def __init__(self, property_id: str):
        self.property_id = property_id
        super().__init__(f"Note text is empty for property {property_id}")


class InvalidTransition(CanvassingError):
    """Raised when the status transition table rejects a status change."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Status transition {current} -> {requested} is not allowed")


class GeocodeUnavailable(CanvassingError):
    """
    Raised by the reverse geocoder when no address could be resolved.

    Non-fatal: the ledger falls back to a coordinate placeholder address.
    """
