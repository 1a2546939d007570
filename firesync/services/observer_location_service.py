from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional, Protocol
import asyncio
import logging
import httpx
from pydantic import ValidationError
from firesync.config import settings
from firesync.exceptions import (
	GeolocationTimeoutError,
	GeolocationUnavailableError,
	QuotaExceededError,
)
from firesync.http_client.geocoding_client import NominatimClient
from firesync.key_value_store import KeyValueStore
from firesync.schemas.location import Coordinate, ObserverLocation
from firesync.utils.datetime_utils import parse_timestamp_ms, to_timestamp_ms, utc_now

logger = logging.getLogger(__name__)

# Placeholder city written before reverse geocoding completes; never served from cache
PLACEHOLDER_CITY = "Your Location"


@dataclass(frozen=True)
class PositionOptions:
	"""One-shot position request options."""
	enable_high_accuracy: bool = True
	timeout_seconds: float = 10.0
	maximum_age: int = 0


class PositionProvider(Protocol):
	"""Source of the observer's raw position."""

	async def get_current_position(self, options: PositionOptions) -> Coordinate:
		"""
		Raises:
			GeolocationDeniedError, GeolocationUnavailableError, GeolocationTimeoutError
		"""
		...


class StaticPositionProvider:
	"""Position taken from configuration (OBSERVER_LAT / OBSERVER_LON)."""

	def __init__(self, lat: Optional[float] = None, lon: Optional[float] = None):
		self.lat = lat if lat is not None else settings.observer_lat
		self.lon = lon if lon is not None else settings.observer_lon

	async def get_current_position(self, options: PositionOptions) -> Coordinate:
		if self.lat is None or self.lon is None:
			raise GeolocationUnavailableError("Geolocation not supported")
		return Coordinate(latitude=self.lat, longitude=self.lon)


class ObserverLocationService:
	"""
	Resolves where the observer is, once per session.

	A resolved location is cached with its timestamp for a week. Reverse
	geocoding is best effort: on failure the city becomes a coordinate label.
	"""
	LOCATION_KEY = "user_location"
	LOCATION_TIMESTAMP_KEY = "user_location_timestamp"

	def __init__(
		self,
		store: KeyValueStore,
		provider: Optional[PositionProvider] = None,
		geocoder: Optional[NominatimClient] = None,
		ttl: Optional[timedelta] = None,
		timeout_seconds: Optional[float] = None
	):
		self.store = store
		self.provider = provider or StaticPositionProvider()
		self.geocoder = geocoder or NominatimClient()
		self.ttl = ttl or timedelta(days=settings.location_cache_ttl_days)
		self.timeout_seconds = timeout_seconds if timeout_seconds is not None else settings.geolocation_timeout_seconds

	def load_cached(self, now: Optional[datetime] = None) -> Optional[ObserverLocation]:
		"""
		Cached location if it is younger than the TTL and carries a real city name.
		"""
		raw_location = self.store.get(self.LOCATION_KEY)
		raw_timestamp = self.store.get(self.LOCATION_TIMESTAMP_KEY)
		if raw_location is None or raw_timestamp is None:
			return None

		try:
			cached_at = parse_timestamp_ms(int(raw_timestamp))
			location = ObserverLocation.from_json(raw_location)
		except (ValueError, ValidationError) as e:
			logger.warning(f"Failed to load cached location: {str(e)}")
			return None

		age = (now or utc_now()) - cached_at
		if age >= self.ttl:
			logger.info("Cached location expired")
			return None
		if not location.city or location.city == PLACEHOLDER_CITY:
			return None

		logger.info(f"Using cached location: {location.city}")
		return location

	async def resolve(
		self,
		now: Optional[datetime] = None,
		on_position: Optional[Callable[[ObserverLocation], Awaitable[None]]] = None
	) -> ObserverLocation:
		"""
		Resolve the observer location.

		Args:
			now: Reference time for cache expiry and the persisted timestamp
			on_position: Awaited with the bare coordinate before geocoding starts

		Returns:
			ObserverLocation with city set

		Raises:
			GeolocationError: The provider failed or timed out
		"""
		cached = self.load_cached(now)
		if cached is not None:
			return cached

		options = PositionOptions(timeout_seconds=self.timeout_seconds)
		try:
			coordinate = await asyncio.wait_for(
				self.provider.get_current_position(options),
				timeout=self.timeout_seconds
			)
		except asyncio.TimeoutError:
			logger.warning("Geolocation timed out")
			raise GeolocationTimeoutError("Location request timed out")

		location = ObserverLocation(lat=coordinate.latitude, lon=coordinate.longitude)
		if on_position is not None:
			await on_position(location)

		location = location.with_city(await self.reverse_geocode(location.lat, location.lon))
		self._persist(location, now)
		logger.info(f"Location set: {location.city}")
		return location

	def remember(self, location: ObserverLocation, now: Optional[datetime] = None) -> None:
		"""Persist an externally reported location (e.g. from the HTTP surface)."""
		self._persist(location, now)

	async def reverse_geocode(self, lat: float, lon: float) -> str:
		"""City label for a coordinate, or a coordinate label when geocoding fails."""
		try:
			city = await self.geocoder.reverse(lat, lon)
		except (httpx.HTTPError, ValueError) as e:
			logger.warning(f"Geocoding failed, using coordinates: {str(e)}")
			city = None
		return city or ObserverLocation.coordinate_label(lat, lon)

	def _persist(self, location: ObserverLocation, now: Optional[datetime]) -> None:
		try:
			self.store.set(self.LOCATION_KEY, location.to_json())
			self.store.set(self.LOCATION_TIMESTAMP_KEY, str(to_timestamp_ms(now or utc_now())))
		except QuotaExceededError as e:
			logger.warning(f"Failed to cache location: {e.message}")

	async def close(self) -> None:
		await self.geocoder.close()
