from unittest.mock import MagicMock

from domain.models import Query
from services.finder import EssentialsFinder
from services.geolocation import GeolocationError, GeolocationErrorCode, StaticLocationSource


def _finder(cfg, source=None, places=None, address="1 Main St, Springfield"):
    aggregator = MagicMock()
    aggregator.run.return_value = places if places is not None else []
    resolver = MagicMock(return_value=address)
    finder = EssentialsFinder(
        source or StaticLocationSource(40.0, -74.0, 15.0),
        cfg,
        aggregator=aggregator,
        address_resolver=resolver,
    )
    return finder, aggregator, resolver


def test_refresh_runs_full_chain(cfg, place_factory):
    places = [place_factory("Corner Shop", 40.001)]
    finder, aggregator, resolver = _finder(cfg, places=places)

    state = finder.refresh()

    assert state.error is None
    assert state.loading is False
    assert state.address_loading is False
    assert state.location.latitude == 40.0
    assert state.address == "1 Main St, Springfield"
    assert state.places == places
    resolver.assert_called_once_with(40.0, -74.0)
    aggregator.run.assert_called_once_with(Query(40.0, -74.0, cfg.SEARCH_RADIUS_M))


def test_geolocation_failure_sets_message_and_stops(cfg):
    source = MagicMock()
    source.get_current_position.side_effect = GeolocationError(GeolocationErrorCode.PERMISSION_DENIED)
    finder, aggregator, resolver = _finder(cfg, source=source)

    state = finder.refresh()

    assert state.error == "Location access denied. Please enable location services."
    assert state.loading is False
    assert state.location is None
    resolver.assert_not_called()
    aggregator.run.assert_not_called()


def test_second_refresh_replaces_places(cfg, place_factory):
    finder, aggregator, _ = _finder(cfg)
    aggregator.run.return_value = [place_factory("Old", 40.001)]
    finder.refresh()
    aggregator.run.return_value = [place_factory("New", 40.002)]

    state = finder.refresh()

    assert [p.name for p in state.places] == ["New"]


def test_error_cleared_on_next_successful_refresh(cfg):
    source = MagicMock()
    source.get_current_position.side_effect = [
        GeolocationError(GeolocationErrorCode.TIMEOUT),
        StaticLocationSource(40.0, -74.0).get_current_position(),
    ]
    finder, _, _ = _finder(cfg, source=source)

    assert finder.refresh().error == "Location request timed out."
    assert finder.refresh().error is None


def test_overlapping_refresh_is_ignored(cfg):
    finder, aggregator, resolver = _finder(cfg)
    before = finder.state

    finder._run_lock.acquire()
    try:
        assert finder.busy is True
        assert finder.refresh() is before
    finally:
        finder._run_lock.release()

    aggregator.run.assert_not_called()
    resolver.assert_not_called()
    assert finder.busy is False
