"""
Location Tracker

Distance-filtered live location for a field rep. Raw fixes below the minimum
displacement from the last accepted fix are dropped to save battery and
suppress GPS jitter. Accepted fixes are published to subscribers and added to
a running distance-traveled total.

Failures never raise out of the tracker. They are recorded as a TrackerError
and the tracker can be started again.
"""
from threading import RLock
from typing import Any, Callable, List, Optional

from config.settings import settings
from src.canvasser.models.location import (
    LocationFix,
    PositionError,
    TRACKER_ERROR_MESSAGES,
    TrackerError,
    TrackerState,
)
from src.canvasser.tracking.sources import PositionOptions, PositionSource
from src.canvasser.utils.geo_utils import distance, distance_meters
from src.canvasser.utils.logger import get_logger

logger = get_logger(__name__)

Subscriber = Callable[[LocationFix], None]


class LocationTracker:
    """
    Idle -> Tracking -> Idle, with a transient Error state.

    Args:
        source: Platform position source; None means geolocation is unsupported
        min_displacement_meters: Movement required before a fix is accepted
        options: Accuracy, timeout and staleness passed to the source
    """

    def __init__(
        self,
        source: Optional[PositionSource] = None,
        min_displacement_meters: Optional[float] = None,
        options: Optional[PositionOptions] = None,
    ):
        self.source = source
        self.min_displacement_meters = (
            settings.min_displacement_meters
            if min_displacement_meters is None
            else min_displacement_meters
        )
        self.options = options or PositionOptions.from_settings()

        self._lock = RLock()
        self._state = TrackerState.IDLE
        self._error: Optional[TrackerError] = None
        self._watch_handle: Any = None
        # Bumped on every start/stop; fixes tagged with an older generation are stale
        self._generation = 0
        self._last_accepted: Optional[LocationFix] = None
        self._distance_anchor: Optional[LocationFix] = None
        self._distance_miles = 0.0
        self._subscribers: List[Subscriber] = []

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def is_tracking(self) -> bool:
        return self._state == TrackerState.TRACKING

    @property
    def error(self) -> Optional[TrackerError]:
        return self._error

    @property
    def error_message(self) -> Optional[str]:
        return TRACKER_ERROR_MESSAGES[self._error] if self._error else None

    @property
    def current_fix(self) -> Optional[LocationFix]:
        """Latest accepted fix. The tracker is the only writer."""
        return self._last_accepted

    @property
    def total_distance_miles(self) -> float:
        return self._distance_miles

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Receive every accepted fix.

        Returns:
            Function that removes the subscription
        """
        with self._lock:
            self._subscribers.append(callback)
        return lambda: self.unsubscribe(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> TrackerState:
        """
        Begin continuous tracking.

        Returns:
            Resulting state: TRACKING, or ERROR with self.error set
        """
        with self._lock:
            if self._state == TrackerState.TRACKING:
                return self._state
            if self.source is None:
                self._fail(TrackerError.UNSUPPORTED)
                return self._state

            self._generation += 1
            generation = self._generation
            self._state = TrackerState.TRACKING
            self._error = None

        try:
            handle = self.source.watch(
                lambda fix: self.handle_fix(fix, generation),
                lambda err: self._handle_source_error(err, generation),
                self.options,
            )
        except PositionError as e:
            with self._lock:
                if generation == self._generation:
                    self._generation += 1
                    self._fail(e.code)
            return self._state
        except Exception as e:
            logger.error("location_watch_failed", error=str(e), error_type=type(e).__name__)
            with self._lock:
                if generation == self._generation:
                    self._generation += 1
                    self._fail(TrackerError.POSITION_UNAVAILABLE)
            return self._state

        release = False
        with self._lock:
            if generation == self._generation and self._state == TrackerState.TRACKING:
                self._watch_handle = handle
            else:
                # stop() or an error arrived while the watch was being opened
                release = True
        if release:
            self.source.clear_watch(handle)
        else:
            logger.info(
                "location_tracking_started",
                min_displacement_meters=self.min_displacement_meters,
                high_accuracy=self.options.enable_high_accuracy,
            )
        return self._state

    def stop(self) -> None:
        """
        Stop tracking and release the position source.

        Safe to call at any time and more than once. The distance total is
        kept until reset_distance(), but movement while stopped is not added
        to it.
        """
        with self._lock:
            handle = self._watch_handle
            self._watch_handle = None
            self._generation += 1
            was_tracking = self._state == TrackerState.TRACKING
            self._state = TrackerState.IDLE
            self._distance_anchor = None

        if handle is not None and self.source is not None:
            self.source.clear_watch(handle)
        if was_tracking:
            logger.info("location_tracking_stopped", total_distance_miles=round(self._distance_miles, 3))

    def _fail(self, code: TrackerError) -> None:
        self._state = TrackerState.ERROR
        self._error = code
        logger.warning("location_tracking_error", error=code.value, message=TRACKER_ERROR_MESSAGES[code])

    def _handle_source_error(self, error: PositionError, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            handle = self._watch_handle
            self._watch_handle = None
            self._generation += 1
            self._distance_anchor = None
            self._fail(error.code)
        if handle is not None and self.source is not None:
            self.source.clear_watch(handle)

    # ------------------------------------------------------------------
    # Fix handling
    # ------------------------------------------------------------------

    def handle_fix(self, fix: LocationFix, generation: Optional[int] = None) -> bool:
        """
        Apply the displacement filter to a raw fix.

        Re-delivery of the already accepted fix is a no-op.

        Args:
            fix: Raw fix from the source
            generation: Watch generation the fix belongs to; None means current

        Returns:
            True if the fix was accepted and published
        """
        with self._lock:
            if generation is None:
                generation = self._generation
            if generation != self._generation or self._state != TrackerState.TRACKING:
                return False

            last = self._last_accepted
            if last is not None:
                if fix == last:
                    return False
                moved = distance_meters(last.point, fix.point)
                if moved < self.min_displacement_meters:
                    logger.debug("location_fix_discarded", moved_meters=round(moved, 2))
                    return False

            if self._distance_anchor is not None:
                self._distance_miles += distance(self._distance_anchor.point, fix.point)
            self._distance_anchor = fix
            self._last_accepted = fix
            subscribers = list(self._subscribers)

        for callback in subscribers:
            if generation != self._generation:
                break
            try:
                callback(fix)
            except Exception as e:
                logger.error(
                    "location_subscriber_failed",
                    error=str(e),
                    error_type=type(e).__name__,
                )
        return True

    def get_current_fix_once(self) -> Optional[LocationFix]:
        """
        One-shot position for "center on me" actions.

        Independent of the continuous stream: does not touch the displacement
        filter or the distance total.

        Returns:
            The fix, or None with self.error set
        """
        if self.source is None:
            with self._lock:
                self._error = TrackerError.UNSUPPORTED
            return None
        try:
            return self.source.current_position(self.options)
        except PositionError as e:
            with self._lock:
                self._error = e.code
            logger.warning("location_one_shot_failed", error=e.code.value)
            return None

    def reset_distance(self) -> None:
        with self._lock:
            self._distance_miles = 0.0
            self._distance_anchor = None
        logger.info("location_distance_reset")
