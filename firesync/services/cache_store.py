from datetime import datetime, timedelta
from typing import List, Optional
import logging
from pydantic import ValidationError
from firesync.config import settings
from firesync.exceptions import QuotaExceededError
from firesync.key_value_store import KeyValueStore
from firesync.schemas.cache import CacheEntry, CACHE_SCHEMA_VERSION
from firesync.schemas.fire_risk import CompactRecord, FireRiskRecord
from firesync.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)


class CacheStore:
	"""
	Last-known-good dataset persisted under a single key.

	Staleness is reported, never acted on: an old entry is still served until a
	successful cycle overwrites it. The entry is deleted only when the store
	runs out of space.
	"""
	CACHE_KEY = "fire_risk_data_cache"

	def __init__(
		self,
		store: KeyValueStore,
		max_bytes: Optional[int] = None,
		stale_threshold: Optional[timedelta] = None
	):
		self.store = store
		self.max_bytes = max_bytes if max_bytes is not None else settings.cache_max_bytes
		self.stale_threshold = stale_threshold or timedelta(hours=settings.cache_stale_threshold_hours)

	def read(self) -> Optional[CacheEntry]:
		"""
		Load the cached entry.

		Returns:
			CacheEntry, or None when absent, unreadable, undecodable or written by
			another schema version
		"""
		try:
			raw = self.store.get(self.CACHE_KEY)
		except Exception as e:
			logger.error(f"Failed to read fire risk cache: {str(e)}")
			return None
		if raw is None:
			return None
		try:
			entry = CacheEntry.from_json(raw)
		except ValidationError as e:
			logger.error(f"Failed to parse cached fire risk data: {str(e)}")
			return None

		if entry.schema_version != CACHE_SCHEMA_VERSION:
			logger.info(
				f"Ignoring cached fire risk data with schema version {entry.schema_version} "
				f"(expected {CACHE_SCHEMA_VERSION})"
			)
			return None
		return entry

	def write(self, records: List[FireRiskRecord], now: Optional[datetime] = None, batch_timestamp: Optional[str] = None) -> bool:
		"""
		Persist compact projections of a dataset.

		Args:
			records: Validated records of the current cycle
			now: Write time (defaults to current UTC time)
			batch_timestamp: Upstream batch timestamp to restore on restart

		Returns:
			True if written, False if skipped because the entry is too large or
			the store failed

		Raises:
			QuotaExceededError: The store refused the write; the entry has been removed
		"""
		entry = CacheEntry(
			records=[CompactRecord.from_record(record) for record in records],
			cached_at=now or utc_now(),
			batch_timestamp=batch_timestamp
		)
		serialized = entry.to_json()
		size = len(serialized.encode("utf-8"))
		if size >= self.max_bytes:
			logger.warning(f"Data too large to cache ({size} bytes), skipping write")
			return False

		try:
			self.store.set(self.CACHE_KEY, serialized)
		except QuotaExceededError:
			logger.warning("Storage quota exceeded, clearing fire risk cache")
			try:
				self.store.delete(self.CACHE_KEY)
			except Exception as e:
				logger.error(f"Failed to clear fire risk cache: {str(e)}")
			raise
		except Exception as e:
			logger.error(f"Failed to write fire risk cache: {str(e)}")
			return False

		logger.info(f"Cached {len(records)} fire risk records ({size} bytes)")
		return True

	def clear(self) -> bool:
		return self.store.delete(self.CACHE_KEY)

	def age(self, now: Optional[datetime] = None, entry: Optional[CacheEntry] = None) -> Optional[timedelta]:
		"""
		Age of the cached entry.

		Args:
			now: Reference time (defaults to current UTC time)
			entry: Already-loaded entry; read from the store when omitted

		Returns:
			timedelta since the entry was written, or None if there is no entry
		"""
		entry = entry or self.read()
		if entry is None:
			return None
		return (now or utc_now()) - entry.cached_at

	def is_stale(self, entry: CacheEntry, now: Optional[datetime] = None, threshold: Optional[timedelta] = None) -> bool:
		"""Whether an entry is older than the staleness threshold. Never evicts."""
		threshold = threshold or self.stale_threshold
		return (now or utc_now()) - entry.cached_at > threshold
