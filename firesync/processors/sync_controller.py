from datetime import datetime
from typing import Callable, List, Optional
import asyncio
import logging
from firesync.config import Settings, settings as default_settings
from firesync.exceptions import (
	ApiError,
	GeolocationError,
	InvalidStateTransition,
	NoValidDataError,
	QuotaExceededError,
)
from firesync.key_value_store import KeyValueStore
from firesync.processors.fire_risk_validator import FireRiskValidator
from firesync.schemas.cache import CacheEntry
from firesync.schemas.fire_risk import FireRiskRecord, ModelInfo, ValidatedBatch
from firesync.schemas.location import ObserverLocation
from firesync.schemas.station import NearestRecord
from firesync.services.cache_store import CacheStore
from firesync.services.fire_risk_fetcher import FireRiskFetcher
from firesync.services.geo_index import GeoIndex
from firesync.services.observer_location_service import ObserverLocationService
from firesync.services.refresh_scheduler import RefreshScheduler
from firesync.state import DataSource, SyncState, SyncStatus, UpdateNotification, is_allowed_transition
from firesync.utils.datetime_utils import parse_datetime_to_utc, utc_now
from firesync.utils.fallback_data import load_fallback_dataset
from firesync.utils.risk_scale import get_risk_scale

logger = logging.getLogger(__name__)

GENERIC_LOAD_ERROR = "Failed to load Fire Weather Index predictions"
LOCATION_UNAVAILABLE = "Location unavailable"

StateListener = Callable[[SyncState], None]
UpdateListener = Callable[[UpdateNotification], None]


class SyncController:
	"""
	Orchestrates fetch, validation, caching and publication of the fire-risk dataset.

	State machine:
		IDLE -> LOADING -> READY | DEGRADED
		READY | DEGRADED -> LOADING on every cycle
		any -> IDLE on stop()

	Only one cycle runs at a time. Results of a cycle that was in flight when
	stop() was called are discarded.
	"""

	def __init__(
		self,
		fetcher: FireRiskFetcher,
		validator: FireRiskValidator,
		cache_store: CacheStore,
		geo_index: GeoIndex,
		scheduler: Optional[RefreshScheduler] = None,
		clock: Callable[[], datetime] = utc_now,
		update_notification_seconds: Optional[float] = None,
		nearest_k: Optional[int] = None,
		fallback_loader: Callable[[], List[FireRiskRecord]] = load_fallback_dataset
	):
		self.fetcher = fetcher
		self.validator = validator
		self.cache_store = cache_store
		self.geo_index = geo_index
		self.scheduler = scheduler or RefreshScheduler(self.refresh)
		self.clock = clock
		self.update_notification_seconds = (
			update_notification_seconds if update_notification_seconds is not None
			else default_settings.update_notification_seconds
		)
		self.nearest_k = nearest_k if nearest_k is not None else default_settings.nearest_measurements_k
		self.fallback_loader = fallback_loader

		self._state = SyncState()
		self._listeners: List[StateListener] = []
		self._update_listeners: List[UpdateListener] = []
		self._in_flight = False
		self._generation = 0
		self._started = False
		self._live_data: List[FireRiskRecord] = []
		self._cache_entry: Optional[CacheEntry] = None
		self._last_batch_timestamp: Optional[str] = None
		self._dismiss_handle: Optional[asyncio.TimerHandle] = None

	@property
	def state(self) -> SyncState:
		return self._state

	@property
	def is_refreshing(self) -> bool:
		return self._in_flight

	def subscribe(self, listener: StateListener) -> Callable[[], None]:
		"""
		Register a listener for every published SyncState.

		Returns:
			Callable that removes the listener
		"""
		self._listeners.append(listener)

		def unsubscribe() -> None:
			if listener in self._listeners:
				self._listeners.remove(listener)
		return unsubscribe

	def subscribe_updates(self, listener: UpdateListener) -> Callable[[], None]:
		"""Register a listener for new-batch notifications."""
		self._update_listeners.append(listener)

		def unsubscribe() -> None:
			if listener in self._update_listeners:
				self._update_listeners.remove(listener)
		return unsubscribe

	async def start(self) -> None:
		"""
		Publish the cached dataset (if any), start the aligned scheduler and
		run the initial cycle.
		"""
		if self._started:
			logger.warning("Sync controller already started")
			return
		self._started = True
		self._generation += 1

		try:
			self._restore_from_cache()
		except Exception as e:
			logger.error(f"Ignoring unusable fire risk cache: {str(e)}", exc_info=True)
		self.scheduler.start()
		await self.refresh()

	async def stop(self) -> None:
		"""Cancel the scheduler and return to IDLE, discarding any in-flight cycle."""
		self.scheduler.cancel()
		self._started = False
		self._generation += 1
		# An old-generation cycle still awaiting the network is discarded when it returns
		self._in_flight = False
		if self._dismiss_handle is not None:
			self._dismiss_handle.cancel()
			self._dismiss_handle = None
		self._transition(SyncStatus.IDLE)
		self._publish(status=SyncStatus.IDLE, loading=False, show_update_notification=False)
		logger.info("Sync controller stopped")

	async def refresh(self) -> bool:
		"""
		Run one fetch/validate/cache/publish cycle.

		Returns:
			False if a cycle was already running (nothing happens), True otherwise
		"""
		if self._in_flight:
			logger.info("Fire risk refresh already in progress, skipping")
			return False

		self._in_flight = True
		generation = self._generation
		try:
			self._transition(SyncStatus.LOADING)
			self._publish(status=SyncStatus.LOADING, loading=True, error=None)

			try:
				batch, model_info = await self._run_cycle()
			except Exception as e:
				if generation != self._generation:
					logger.info("Discarding failed fire risk cycle after stop")
					return True
				self._degrade(e)
				return True

			if generation != self._generation:
				logger.info("Discarding fire risk cycle result after stop")
				return True
			self._apply_batch(batch, model_info)
			return True
		finally:
			if generation == self._generation:
				self._in_flight = False

	def set_observer_location(self, location: ObserverLocation) -> None:
		"""Merge a resolved observer location and recompute nearest measurements."""
		self._publish(
			observer_location=location,
			location_error=None,
			nearest_measurements=self._nearest(self._state.data, location)
		)

	def set_location_error(self, message: str = LOCATION_UNAVAILABLE) -> None:
		"""Record a location failure. Dataset fields are left untouched."""
		self._publish(location_error=message)

	async def locate_observer(self, location_service: ObserverLocationService) -> Optional[ObserverLocation]:
		"""
		Resolve the observer location and merge it into the state.
		The bare coordinate is published first; the city follows once geocoded.
		"""
		async def on_position(location: ObserverLocation) -> None:
			self.set_observer_location(location)

		try:
			location = await location_service.resolve(self.clock(), on_position=on_position)
		except GeolocationError as e:
			logger.warning(f"Location error: {e.message}")
			self.set_location_error(LOCATION_UNAVAILABLE)
			return None

		self.set_observer_location(location)
		return location

	async def _run_cycle(self):
		payload = await self.fetcher.fetch()
		batch = self.validator.validate_batch(payload)
		if not batch.records:
			raise NoValidDataError("Fire risk service returned an empty batch")
		model_info = await self.fetcher.fetch_model_info() or batch.model_info
		return batch, model_info

	def _restore_from_cache(self) -> None:
		entry = self.cache_store.read()
		if entry is None or not entry.records:
			return

		records = [record.to_record(entry.batch_timestamp) for record in entry.records]
		self._cache_entry = entry
		stale = self.cache_store.is_stale(entry, self.clock())
		if stale:
			logger.warning(f"Cached fire risk data is older than {self.cache_store.stale_threshold}")
		if entry.batch_timestamp:
			self._last_batch_timestamp = entry.batch_timestamp

		self._publish(
			data=records,
			data_source=DataSource.CACHE,
			is_fallback=False,
			show_cached_warning=stale,
			last_updated=entry.batch_timestamp,
			nearest_measurements=self._nearest(records)
		)
		logger.info(f"Loaded {len(records)} cached fire risk records")

	def _apply_batch(self, batch: ValidatedBatch, model_info: Optional[ModelInfo]) -> None:
		try:
			self.cache_store.write(batch.records, self.clock(), batch.batch_timestamp)
		except QuotaExceededError as e:
			logger.warning(f"Fire risk cache cleared: {e.message}")

		previous = self._last_batch_timestamp
		new_timestamp = batch.batch_timestamp
		if previous == new_timestamp:
			self._log_same_batch(new_timestamp)
		else:
			logger.info(f"New data from backend, updating lastUpdated to: {new_timestamp}")

		self._live_data = batch.records
		self._last_batch_timestamp = new_timestamp
		self._transition(SyncStatus.READY)
		self._publish(
			status=SyncStatus.READY,
			data=batch.records,
			loading=False,
			error=None,
			last_updated=new_timestamp,
			model_info=model_info,
			data_source=DataSource.LIVE,
			is_fallback=False,
			show_cached_warning=False,
			rejection_rate=batch.rejection_rate,
			nearest_measurements=self._nearest(batch.records)
		)
		logger.info(f"Loaded {len(batch.records)} Fire Weather Index predictions")

		if previous is not None and previous != new_timestamp:
			self._notify_update(UpdateNotification(
				previous_timestamp=previous,
				batch_timestamp=new_timestamp,
				record_count=len(batch.records)
			))

	def _log_same_batch(self, batch_timestamp: str) -> None:
		if self.scheduler.within_grace_window():
			logger.info(f"Same backend data ({batch_timestamp}), server may still be producing this period's batch")
			return
		batch_time = parse_datetime_to_utc(batch_timestamp)
		if batch_time is None:
			logger.info(f"Same backend data, lastUpdated stays: {batch_timestamp}")
			return
		age_minutes = round((self.clock() - batch_time).total_seconds() / 60)
		logger.info(f"Same backend data, lastUpdated stays: {batch_timestamp} ({age_minutes} minutes old)")

	def _degrade(self, error: Exception) -> None:
		message = error.message if isinstance(error, ApiError) else GENERIC_LOAD_ERROR
		logger.error(f"Failed to fetch Fire Weather Index predictions: {str(error)}")

		show_cached_warning = False
		if self._live_data:
			data, source = self._live_data, DataSource.LIVE
		elif self._cache_entry is not None and self._cache_entry.records:
			entry = self._cache_entry
			data = [record.to_record(entry.batch_timestamp) for record in entry.records]
			source = DataSource.CACHE
			show_cached_warning = self.cache_store.is_stale(entry, self.clock())
		else:
			data, source = self.fallback_loader(), DataSource.FALLBACK
			logger.info("Using bundled fallback data for Fire Weather Index")

		self._transition(SyncStatus.DEGRADED)
		self._publish(
			status=SyncStatus.DEGRADED,
			data=data,
			loading=False,
			error=message,
			data_source=source,
			is_fallback=source == DataSource.FALLBACK,
			show_cached_warning=show_cached_warning,
			nearest_measurements=self._nearest(data)
		)

	def _notify_update(self, notification: UpdateNotification) -> None:
		self._publish(show_update_notification=True)
		for listener in list(self._update_listeners):
			try:
				listener(notification)
			except Exception as e:
				logger.error(f"Update listener failed: {str(e)}", exc_info=True)

		if self._dismiss_handle is not None:
			self._dismiss_handle.cancel()
		loop = asyncio.get_running_loop()
		self._dismiss_handle = loop.call_later(self.update_notification_seconds, self._dismiss_update_notification)

	def _dismiss_update_notification(self) -> None:
		self._dismiss_handle = None
		if self._state.show_update_notification:
			self._publish(show_update_notification=False)

	def _nearest(self, data: List[FireRiskRecord], location: Optional[ObserverLocation] = None) -> List[NearestRecord]:
		location = location or self._state.observer_location
		if location is None or not data:
			return []
		return self.geo_index.k_nearest(location.lat, location.lon, data, self.nearest_k)

	def _transition(self, requested: SyncStatus) -> None:
		current = self._state.status
		if not is_allowed_transition(current, requested):
			raise InvalidStateTransition(current.value, requested.value)

	def _publish(self, **changes) -> None:
		self._state = self._state.model_copy(update=changes)
		for listener in list(self._listeners):
			try:
				listener(self._state)
			except Exception as e:
				logger.error(f"State listener failed: {str(e)}", exc_info=True)


def build_sync_controller(store: KeyValueStore, config: Optional[Settings] = None) -> SyncController:
	"""
	Wire a SyncController from configuration.

	Args:
		store: Persistent key/value store for the dataset cache
		config: Settings instance (defaults to the module-level settings)

	Returns:
		Unstarted SyncController
	"""
	config = config or default_settings
	risk_scale = get_risk_scale(config.risk_scale)
	controller = SyncController(
		fetcher=FireRiskFetcher(),
		validator=FireRiskValidator(
			risk_scale=risk_scale,
			invalid_sample_size=config.invalid_sample_size,
			rejection_warning_rate=config.rejection_warning_rate
		),
		cache_store=CacheStore(store, max_bytes=config.cache_max_bytes),
		geo_index=GeoIndex(risk_scale=risk_scale),
		update_notification_seconds=config.update_notification_seconds,
		nearest_k=config.nearest_measurements_k
	)
	controller.scheduler = RefreshScheduler(
		controller.refresh,
		cadence_hours=config.refresh_cadence_hours,
		grace_minutes=config.refresh_grace_minutes
	)
	return controller
