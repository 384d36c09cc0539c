"""Live driver position tracking and pipeline re-triggering."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional, Protocol

from ..config import settings
from ..models.domain import LatLng, Viewport
from .geospatial import is_valid_position

logger = logging.getLogger(__name__)


class TrackingState(str, Enum):
    IDLE = "IDLE"
    TRACKING = "TRACKING"


class GeolocationErrorCode(str, Enum):
    PERMISSION_DENIED = "PERMISSION_DENIED"
    POSITION_UNAVAILABLE = "POSITION_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"
    UNSUPPORTED = "UNSUPPORTED"


NOTICE_MESSAGES: dict[GeolocationErrorCode, str] = {
    GeolocationErrorCode.PERMISSION_DENIED: "Location access was denied. Enable it to follow your position on the map.",
    GeolocationErrorCode.POSITION_UNAVAILABLE: "Your position is currently unavailable.",
    GeolocationErrorCode.TIMEOUT: "Locating your position took too long. Retrying shortly.",
    GeolocationErrorCode.UNSUPPORTED: "Geolocation is not supported on this device.",
}


class GeolocationError(Exception):
    def __init__(self, code: GeolocationErrorCode, message: str | None = None) -> None:
        self.code = GeolocationErrorCode(code)
        super().__init__(message or NOTICE_MESSAGES[self.code])


@dataclass(frozen=True, slots=True)
class PositionFix:
    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    timestamp: Optional[datetime] = None

    @property
    def position(self) -> LatLng:
        return (self.latitude, self.longitude)


@dataclass(frozen=True, slots=True)
class TrackingNotice:
    """Recoverable, user-facing message about a geolocation failure."""

    code: GeolocationErrorCode
    message: str


class GeolocationProvider(Protocol):
    def current_position(self) -> PositionFix:
        """Return a one-shot fix or raise :class:`GeolocationError`."""
        ...


class LiveTrackingController:
    """Owns the driver's live position and re-enters the map pipeline on change.

    IDLE until the first successful fix, TRACKING afterwards. Geolocation
    failures never raise and never move the controller back to IDLE; they are
    reported as :class:`TrackingNotice` objects.
    """

    def __init__(
        self,
        provider: GeolocationProvider,
        on_update: Callable[[LatLng], None] | None = None,
        on_notice: Callable[[TrackingNotice], None] | None = None,
        *,
        poll_interval_seconds: float | None = None,
        recenter_zoom: int | None = None,
        debounce_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.provider = provider
        self.on_update = on_update
        self.on_notice = on_notice
        self.poll_interval_seconds = (
            poll_interval_seconds if poll_interval_seconds is not None else settings.tracking_poll_interval_seconds
        )
        self.recenter_zoom = recenter_zoom if recenter_zoom is not None else settings.recenter_zoom
        self.debounce_seconds = debounce_seconds if debounce_seconds is not None else settings.position_debounce_seconds
        self._clock = clock

        self.state = TrackingState.IDLE
        self.driver_position: LatLng | None = None
        self.last_notice: TrackingNotice | None = None
        self._started = False
        self._last_request_at: float | None = None
        self._last_recompute_at: float | None = None
        self._pending = False

    def start(self, now: float | None = None) -> TrackingNotice | None:
        """Request the first fix and begin periodic polling."""
        self._started = True
        return self._request(self._now(now))

    def stop(self) -> None:
        self._started = False
        self._pending = False

    def poll(self, now: float | None = None) -> TrackingNotice | None:
        """Re-request the position when the poll interval has elapsed.

        Hosts call this from their timer loop; pending debounced updates are
        flushed first.
        """
        if not self._started:
            return None
        now = self._now(now)
        self.flush(now)
        if self._last_request_at is not None and now - self._last_request_at < self.poll_interval_seconds:
            return None
        return self._request(now)

    def on_position(self, fix: PositionFix, now: float | None = None) -> bool:
        """Accept a position update from a continuous watch.

        Returns True when the pipeline was re-triggered immediately, False when
        the update was coalesced into a pending recalculation.
        """
        if not is_valid_position(fix.latitude, fix.longitude):
            logger.warning(f"Ignoring invalid position fix {fix.position}")
            return False

        now = self._now(now)
        self.driver_position = fix.position
        if self.state is TrackingState.IDLE:
            logger.info("First position fix received, tracking started")
            self.state = TrackingState.TRACKING

        if (
            self.debounce_seconds > 0
            and self._last_recompute_at is not None
            and now - self._last_recompute_at < self.debounce_seconds
        ):
            self._pending = True
            return False

        self._recompute(now)
        return True

    def on_error(self, error: GeolocationError) -> TrackingNotice:
        notice = TrackingNotice(code=error.code, message=str(error))
        logger.warning(f"Geolocation unavailable ({error.code.value}): {notice.message}")
        self.last_notice = notice
        if self.on_notice is not None:
            self.on_notice(notice)
        return notice

    def flush(self, now: float | None = None) -> bool:
        """Apply the latest coalesced position once the debounce window has passed."""
        if not self._pending:
            return False
        now = self._now(now)
        if self._last_recompute_at is not None and now - self._last_recompute_at < self.debounce_seconds:
            return False
        self._recompute(now)
        return True

    def recenter(self) -> Viewport | None:
        """Viewport centered on the driver at a close zoom; None while IDLE."""
        if self.state is TrackingState.IDLE or self.driver_position is None:
            return None
        return Viewport(center=self.driver_position, zoom=self.recenter_zoom)

    @property
    def has_pending_update(self) -> bool:
        return self._pending

    def _request(self, now: float) -> TrackingNotice | None:
        self._last_request_at = now
        try:
            fix = self.provider.current_position()
        except GeolocationError as exc:
            return self.on_error(exc)
        self.on_position(fix, now)
        return None

    def _recompute(self, now: float) -> None:
        self._pending = False
        self._last_recompute_at = now
        if self.on_update is not None and self.driver_position is not None:
            self.on_update(self.driver_position)

    def _now(self, now: float | None) -> float:
        return self._clock() if now is None else now
