"""
Position Sources

The platform side of location tracking. A source delivers raw fixes on its
own schedule; the LocationTracker decides which of them matter.
"""
from dataclasses import dataclass
from threading import RLock
from typing import Any, Callable, Dict, Optional, Protocol

from config.settings import settings
from src.canvasser.models.location import LocationFix, PositionError, TrackerError

FixCallback = Callable[[LocationFix], Optional[bool]]
ErrorCallback = Callable[[PositionError], None]


@dataclass(frozen=True)
class PositionOptions:
    """Accuracy, timeout and staleness wanted from the platform."""

    enable_high_accuracy: bool = True
    timeout: float = 10.0
    maximum_age: float = 30.0

    @classmethod
    def from_settings(cls) -> "PositionOptions":
        return cls(
            enable_high_accuracy=settings.geolocation_high_accuracy,
            timeout=settings.geolocation_timeout_seconds,
            maximum_age=settings.geolocation_maximum_age_seconds,
        )


class PositionSource(Protocol):
    """
    Continuous and one-shot access to device positions.

    watch() and current_position() raise PositionError when the position
    cannot be acquired.
    """

    def watch(self, on_fix: FixCallback, on_error: ErrorCallback, options: PositionOptions) -> Any: ...

    def clear_watch(self, handle: Any) -> None: ...

    def current_position(self, options: PositionOptions) -> LocationFix: ...


class PushPositionSource:
    """
    Source fed by pushes, e.g. fixes posted by a mobile client over HTTP.

    push() fans a fix out to every open watch. fail() reports an error to
    every open watch. current_position() returns the latest pushed fix.
    """

    def __init__(self, permission_granted: bool = True):
        self.permission_granted = permission_granted
        self._watches: Dict[int, tuple] = {}
        self._next_handle = 1
        self._latest: Optional[LocationFix] = None
        self._lock = RLock()

    def watch(self, on_fix: FixCallback, on_error: ErrorCallback, options: PositionOptions) -> int:
        if not self.permission_granted:
            raise PositionError(TrackerError.PERMISSION_DENIED)
        with self._lock:
            handle = self._next_handle
            self._next_handle += 1
            self._watches[handle] = (on_fix, on_error)
        return handle

    def clear_watch(self, handle: int) -> None:
        with self._lock:
            self._watches.pop(handle, None)

    def current_position(self, options: PositionOptions) -> LocationFix:
        if not self.permission_granted:
            raise PositionError(TrackerError.PERMISSION_DENIED)
        with self._lock:
            latest = self._latest
        if latest is None:
            raise PositionError(TrackerError.POSITION_UNAVAILABLE)
        return latest

    @property
    def watch_count(self) -> int:
        with self._lock:
            return len(self._watches)

    def push(self, fix: LocationFix) -> int:
        """
        Deliver a fix to every open watch.

        Returns:
            Number of watches whose callback accepted the fix
        """
        with self._lock:
            self._latest = fix
            callbacks = [on_fix for on_fix, _ in self._watches.values()]
        return sum(1 for on_fix in callbacks if on_fix(fix))

    def fail(self, code: TrackerError) -> None:
        """Report a platform error to every open watch."""
        with self._lock:
            callbacks = [on_error for _, on_error in self._watches.values()]
        for on_error in callbacks:
            on_error(PositionError(code))
