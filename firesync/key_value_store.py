"""
Swappable string key/value persistence.

The dataset cache and the observer location cache only need get/set/delete
on string values, so any backend that offers those can be plugged in.
"""
from typing import Dict, Optional, Protocol, runtime_checkable
import logging
from firesync.exceptions import QuotaExceededError

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
	"""Minimal synchronous string store."""

	def get(self, key: str) -> Optional[str]:
		...

	def set(self, key: str, value: str) -> bool:
		...

	def delete(self, key: str) -> bool:
		...


class InMemoryKeyValueStore:
	"""
	Process-local store backed by a dict.

	An optional byte quota mimics a browser storage limit: a write that would
	push the total size of all values past the quota raises QuotaExceededError
	and leaves the store unchanged.
	"""

	def __init__(self, quota_bytes: Optional[int] = None):
		self._data: Dict[str, str] = {}
		self.quota_bytes = quota_bytes

	def _used_bytes(self, excluding: Optional[str] = None) -> int:
		return sum(
			len(value.encode("utf-8"))
			for key, value in self._data.items()
			if key != excluding
		)

	def get(self, key: str) -> Optional[str]:
		return self._data.get(key)

	def set(self, key: str, value: str) -> bool:
		if self.quota_bytes is not None:
			needed = self._used_bytes(excluding=key) + len(value.encode("utf-8"))
			if needed > self.quota_bytes:
				raise QuotaExceededError(
					f"Storage quota exceeded writing {key}: {needed} > {self.quota_bytes} bytes",
					key=key
				)
		self._data[key] = value
		return True

	def delete(self, key: str) -> bool:
		return self._data.pop(key, None) is not None

	def exists(self, key: str) -> bool:
		return key in self._data

	def ping(self) -> bool:
		return True
