"""
Location refresh orchestration: geolocate -> reverse geocode -> aggregate.

Each refresh is a strictly sequential chain. The FinderState is replaced at
the end of each stage, never merged with the previous run's results.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Callable, Optional

from domain.models import FinderState, Query
from services.essentials import EssentialsAggregator
from services.geocoding import resolve_address
from services.geolocation import (
    GeolocationError,
    GeolocationOptions,
    LocationSource,
)
from settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class EssentialsFinder:
    def __init__(
        self,
        location_source: LocationSource,
        cfg: Optional[Settings] = None,
        aggregator: Optional[EssentialsAggregator] = None,
        address_resolver: Optional[Callable[[float, float], str]] = None,
        options: Optional[GeolocationOptions] = None,
    ):
        self.location_source = location_source
        self.settings = cfg or default_settings
        self.aggregator = aggregator or EssentialsAggregator(self.settings)
        self.address_resolver = address_resolver or (lambda lat, lon: resolve_address(lat, lon, self.settings))
        self.options = options or GeolocationOptions()
        self.state = FinderState()
        self._run_lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._run_lock.locked()

    def refresh(self) -> FinderState:
        """
        Run one location refresh and return the new state.

        A refresh requested while another is in flight is ignored and the
        current state is returned unchanged.
        """
        if not self._run_lock.acquire(blocking=False):
            logger.info("Refresh already in progress; ignoring request")
            return self.state
        try:
            return self._run()
        finally:
            self._run_lock.release()

    def _run(self) -> FinderState:
        self.state = replace(self.state, loading=True, error=None)

        try:
            location = self.location_source.get_current_position(self.options)
        except GeolocationError as exc:
            logger.warning("Geolocation failed (%s): %s", exc.code.value, exc)
            self.state = replace(self.state, loading=False, error=exc.user_message)
            return self.state

        self.state = replace(self.state, location=location, address_loading=True)
        address = self.address_resolver(location.latitude, location.longitude)
        self.state = replace(self.state, address=address, address_loading=False)

        query = Query(location.latitude, location.longitude, self.settings.SEARCH_RADIUS_M)
        places = self.aggregator.run(query)
        logger.info("Refresh found %d places near %s", len(places), address)

        self.state = replace(self.state, places=places, loading=False)
        return self.state
