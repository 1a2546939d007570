"""
Unit tests for ObserverLocationService.
"""
import asyncio
import httpx
import pytest
from datetime import timedelta
from unittest.mock import AsyncMock, Mock
from firesync.exceptions import GeolocationDeniedError, GeolocationTimeoutError, GeolocationUnavailableError
from firesync.http_client.geocoding_client import NominatimClient
from firesync.key_value_store import InMemoryKeyValueStore
from firesync.schemas.location import Coordinate, ObserverLocation
from firesync.services.observer_location_service import (
	PLACEHOLDER_CITY,
	ObserverLocationService,
	StaticPositionProvider,
)
from firesync.utils.datetime_utils import to_timestamp_ms


def _geocoder(handler):
	return NominatimClient(base_url="http://geo.test", transport=httpx.MockTransport(handler))


def _calgary_geocoder():
	return _geocoder(lambda request: httpx.Response(200, json={"address": {"city": "Calgary", "state": "Alberta"}}))


def _seed(store, location, cached_at):
	store.set(ObserverLocationService.LOCATION_KEY, location.to_json())
	store.set(ObserverLocationService.LOCATION_TIMESTAMP_KEY, str(to_timestamp_ms(cached_at)))


class TestLoadCached:
	"""Test cases for ObserverLocationService.load_cached."""

	def test_fresh_entry_is_used(self, memory_store, fixed_now):
		_seed(memory_store, ObserverLocation(lat=51.04, lon=-114.07, city="Calgary, Alberta"), fixed_now - timedelta(days=6))
		service = ObserverLocationService(memory_store, geocoder=Mock())

		location = service.load_cached(fixed_now)

		assert location.city == "Calgary, Alberta"

	def test_expired_entry_is_ignored(self, memory_store, fixed_now):
		_seed(memory_store, ObserverLocation(lat=51.04, lon=-114.07, city="Calgary, Alberta"), fixed_now - timedelta(days=8))
		service = ObserverLocationService(memory_store, geocoder=Mock())
		assert service.load_cached(fixed_now) is None

	def test_placeholder_city_is_ignored(self, memory_store, fixed_now):
		_seed(memory_store, ObserverLocation(lat=51.04, lon=-114.07, city=PLACEHOLDER_CITY), fixed_now)
		service = ObserverLocationService(memory_store, geocoder=Mock())
		assert service.load_cached(fixed_now) is None

	def test_corrupt_entry_is_ignored(self, memory_store, fixed_now):
		memory_store.set(ObserverLocationService.LOCATION_KEY, "{not json")
		memory_store.set(ObserverLocationService.LOCATION_TIMESTAMP_KEY, "abc")
		service = ObserverLocationService(memory_store, geocoder=Mock())
		assert service.load_cached(fixed_now) is None


class TestResolve:
	"""Test cases for ObserverLocationService.resolve."""

	@pytest.mark.asyncio
	async def test_resolves_geocodes_and_persists(self, memory_store, fixed_now):
		seen = []

		async def on_position(location):
			seen.append(location)

		service = ObserverLocationService(
			memory_store,
			provider=StaticPositionProvider(lat=51.0447, lon=-114.0719),
			geocoder=_calgary_geocoder()
		)

		location = await service.resolve(fixed_now, on_position=on_position)

		assert location.city == "Calgary, Alberta"
		assert seen[0].city is None
		assert (seen[0].lat, seen[0].lon) == (51.0447, -114.0719)
		assert memory_store.get(ObserverLocationService.LOCATION_TIMESTAMP_KEY) == str(to_timestamp_ms(fixed_now))
		assert service.load_cached(fixed_now) == location

	@pytest.mark.asyncio
	async def test_cached_location_skips_provider(self, memory_store, fixed_now):
		cached = ObserverLocation(lat=49.28, lon=-123.12, city="Vancouver, British Columbia")
		_seed(memory_store, cached, fixed_now - timedelta(days=1))
		provider = Mock()
		provider.get_current_position = AsyncMock()
		service = ObserverLocationService(memory_store, provider=provider, geocoder=Mock())

		assert await service.resolve(fixed_now) == cached
		provider.get_current_position.assert_not_called()

	@pytest.mark.asyncio
	async def test_unconfigured_provider_is_unavailable(self, memory_store, fixed_now):
		provider = StaticPositionProvider()
		provider.lat = provider.lon = None
		service = ObserverLocationService(memory_store, provider=provider, geocoder=Mock())

		with pytest.raises(GeolocationUnavailableError):
			await service.resolve(fixed_now)

	@pytest.mark.asyncio
	async def test_denied_propagates(self, memory_store, fixed_now):
		provider = Mock()
		provider.get_current_position = AsyncMock(side_effect=GeolocationDeniedError("User denied Geolocation"))
		service = ObserverLocationService(memory_store, provider=provider, geocoder=Mock())

		with pytest.raises(GeolocationDeniedError):
			await service.resolve(fixed_now)

	@pytest.mark.asyncio
	async def test_slow_provider_times_out(self, memory_store, fixed_now):
		class SlowProvider:
			async def get_current_position(self, options):
				await asyncio.sleep(1)
				return Coordinate(latitude=51.0, longitude=-114.0)

		service = ObserverLocationService(memory_store, provider=SlowProvider(), geocoder=Mock(), timeout_seconds=0.01)

		with pytest.raises(GeolocationTimeoutError) as exc_info:
			await service.resolve(fixed_now)
		assert exc_info.value.message == "Location request timed out"

	@pytest.mark.asyncio
	async def test_geocoding_failure_uses_coordinate_label(self, memory_store, fixed_now):
		service = ObserverLocationService(
			memory_store,
			provider=StaticPositionProvider(lat=51.0447, lon=-114.0719),
			geocoder=_geocoder(lambda request: httpx.Response(500))
		)

		location = await service.resolve(fixed_now)

		assert location.city == "51.04°, -114.07°"

	@pytest.mark.asyncio
	async def test_quota_failure_does_not_fail_resolution(self, fixed_now):
		store = InMemoryKeyValueStore(quota_bytes=5)
		service = ObserverLocationService(
			store,
			provider=StaticPositionProvider(lat=51.0447, lon=-114.0719),
			geocoder=_calgary_geocoder()
		)

		location = await service.resolve(fixed_now)

		assert location.city == "Calgary, Alberta"
		assert store.get(ObserverLocationService.LOCATION_KEY) is None


class TestRemember:
	"""Test cases for ObserverLocationService.remember."""

	def test_remembered_location_is_cached(self, memory_store, fixed_now):
		service = ObserverLocationService(memory_store, geocoder=Mock())
		location = ObserverLocation(lat=45.42, lon=-75.70, city="Ottawa, Ontario")

		service.remember(location, fixed_now)

		assert service.load_cached(fixed_now + timedelta(days=3)) == location
