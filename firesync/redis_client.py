import redis
import logging
from typing import Optional
from firesync.config import settings
from firesync.exceptions import QuotaExceededError

logger = logging.getLogger(__name__)


class FireSyncRedis:
	"""
	Redis-backed key/value store for the dataset and location caches.
	Values are stored as plain strings; callers own their serialization.
	"""

	def __init__(self, client: Optional[redis.Redis] = None):
		self.client = client or redis.Redis(
			host=settings.redis_host,
			port=settings.redis_port,
			db=settings.redis_db,
			password=settings.redis_password,
			decode_responses=True,
			socket_connect_timeout=5,
			socket_timeout=5
		)

	@staticmethod
	def _is_out_of_memory(error: redis.exceptions.ResponseError) -> bool:
		return str(error).upper().startswith("OOM")

	def get(self, key: str) -> Optional[str]:
		"""
		Read a value by key.

		Args:
			key: Redis key

		Returns:
			Stored string or None if the key doesn't exist
		"""
		try:
			return self.client.get(key)
		except redis.exceptions.RedisError as e:
			raise ValueError(f"Failed to read key {key}: {str(e)}")

	def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
		"""
		Create or overwrite a key.

		Args:
			key: Redis key
			value: String value
			ttl: Optional time-to-live in seconds

		Returns:
			True if successful

		Raises:
			QuotaExceededError: Redis refused the write because maxmemory was reached
		"""
		try:
			if ttl:
				return bool(self.client.setex(key, ttl, value))
			return bool(self.client.set(key, value))
		except redis.exceptions.ResponseError as e:
			if self._is_out_of_memory(e):
				logger.warning(f"Redis out of memory writing key {key}")
				raise QuotaExceededError(f"Redis out of memory: {str(e)}", key=key)
			raise ValueError(f"Failed to write key {key}: {str(e)}")
		except redis.exceptions.RedisError as e:
			raise ValueError(f"Failed to write key {key}: {str(e)}")

	def delete(self, key: str) -> bool:
		"""
		Delete a key.

		Returns:
			True if key was deleted, False if key didn't exist
		"""
		try:
			return bool(self.client.delete(key))
		except redis.exceptions.RedisError as e:
			raise ValueError(f"Failed to delete key {key}: {str(e)}")

	def exists(self, key: str) -> bool:
		try:
			return bool(self.client.exists(key))
		except redis.exceptions.RedisError as e:
			raise ValueError(f"Failed to check existence of key {key}: {str(e)}")

	def ping(self) -> bool:
		"""
		Test Redis connection.

		Returns:
			True if connection is alive
		"""
		try:
			return self.client.ping()
		except Exception as e:
			raise ConnectionError(f"Redis connection failed: {str(e)}")
