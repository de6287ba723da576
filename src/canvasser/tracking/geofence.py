"""
Geofence

Edge-triggered territory entry/exit notifications driven by accepted fixes.
"""
from threading import Lock
from typing import Callable, Iterable, Optional

from src.canvasser.models.geo import Point
from src.canvasser.models.location import LocationFix
from src.canvasser.utils.geo_utils import PointLike, point_in_polygon, validate_ring
from src.canvasser.utils.logger import get_logger

logger = get_logger(__name__)

ENTER = "enter"
EXIT = "exit"


class Geofence:
    """
    Watches one ring and fires on boundary crossings only.

    Staying inside or outside never fires again. Unless inside is given, the
    first observation counts as coming from outside, so a first fix inside
    fires enter.

    Instances are callable and can be passed to LocationTracker.subscribe.
    """

    def __init__(
        self,
        ring: Iterable[PointLike],
        on_enter: Optional[Callable[[LocationFix], None]] = None,
        on_exit: Optional[Callable[[LocationFix], None]] = None,
        name: Optional[str] = None,
        inside: bool = False,
    ):
        self.ring = validate_ring(ring)
        self.on_enter = on_enter
        self.on_exit = on_exit
        self.name = name
        self.inside = inside
        self._lock = Lock()

    def update(self, fix: LocationFix) -> Optional[str]:
        """
        Feed a fix.

        Returns:
            "enter", "exit" or None when nothing changed
        """
        now_inside = point_in_polygon(Point(lat=fix.lat, lng=fix.lng), self.ring)
        with self._lock:
            was_inside = self.inside
            self.inside = now_inside

        if now_inside and not was_inside:
            logger.info("geofence_entered", geofence=self.name)
            if self.on_enter:
                self.on_enter(fix)
            return ENTER
        if was_inside and not now_inside:
            logger.info("geofence_exited", geofence=self.name)
            if self.on_exit:
                self.on_exit(fix)
            return EXIT
        return None

    def __call__(self, fix: LocationFix) -> None:
        self.update(fix)
