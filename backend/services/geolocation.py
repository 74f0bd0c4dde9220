"""
Device position sources.

Mirrors the browser "get current position" contract: a source either returns
a UserLocation or raises GeolocationError with one of a fixed set of codes,
each carrying the message shown to the user.
"""
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from domain.models import UserLocation

logger = logging.getLogger(__name__)


class GeolocationErrorCode(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    UNSUPPORTED = "unsupported"


GEOLOCATION_MESSAGES = {
    GeolocationErrorCode.PERMISSION_DENIED: "Location access denied. Please enable location services.",
    GeolocationErrorCode.POSITION_UNAVAILABLE: "Location information is unavailable.",
    GeolocationErrorCode.TIMEOUT: "Location request timed out.",
    GeolocationErrorCode.UNSUPPORTED: "Geolocation is not supported by this browser.",
}
DEFAULT_GEOLOCATION_MESSAGE = "Unable to retrieve your location."


class GeolocationError(Exception):
    def __init__(self, code: GeolocationErrorCode, detail: Optional[str] = None):
        self.code = code
        self.detail = detail
        super().__init__(detail or self.user_message)

    @property
    def user_message(self) -> str:
        return GEOLOCATION_MESSAGES.get(self.code, DEFAULT_GEOLOCATION_MESSAGE)


@dataclass(frozen=True)
class GeolocationOptions:
    timeout_s: float = 15.0
    maximum_age_s: float = 300.0


class LocationSource:
    def get_current_position(self, options: Optional[GeolocationOptions] = None) -> UserLocation:
        raise NotImplementedError


class StaticLocationSource(LocationSource):
    """A fixed position, e.g. coordinates given on the command line."""

    def __init__(self, latitude: float, longitude: float, accuracy_m: float = 0.0):
        self.latitude = latitude
        self.longitude = longitude
        self.accuracy_m = accuracy_m

    def get_current_position(self, options: Optional[GeolocationOptions] = None) -> UserLocation:
        if not (-90.0 <= self.latitude <= 90.0) or not (-180.0 <= self.longitude <= 180.0):
            raise GeolocationError(
                GeolocationErrorCode.POSITION_UNAVAILABLE,
                f"invalid coordinates {self.latitude}, {self.longitude}",
            )
        return UserLocation(latitude=self.latitude, longitude=self.longitude, accuracy_m=self.accuracy_m)


class CachingLocationSource(LocationSource):
    """
    Wrap another source with the maximum-age and timeout options.

    A cached position younger than options.maximum_age_s is returned as is;
    otherwise the wrapped source is asked on a worker thread and a
    GeolocationError(TIMEOUT) is raised if it does not answer in time.
    """

    def __init__(self, source: LocationSource):
        self.source = source
        self._cached: Optional[UserLocation] = None
        self._cached_at: float = 0.0
        self._lock = threading.Lock()

    def get_current_position(self, options: Optional[GeolocationOptions] = None) -> UserLocation:
        options = options or GeolocationOptions()
        with self._lock:
            if self._cached is not None and (time.monotonic() - self._cached_at) <= options.maximum_age_s:
                logger.debug("Using cached position (age %.1fs)", time.monotonic() - self._cached_at)
                return self._cached

        # One worker per request; a hung source must not block later requests.
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="geolocation")
        future = executor.submit(self.source.get_current_position, options)
        try:
            location = future.result(timeout=options.timeout_s)
        except FutureTimeoutError as exc:
            raise GeolocationError(GeolocationErrorCode.TIMEOUT) from exc
        finally:
            executor.shutdown(wait=False)

        with self._lock:
            self._cached = location
            self._cached_at = time.monotonic()
        return location
