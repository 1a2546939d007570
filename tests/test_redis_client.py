"""
Unit tests for the Redis key/value store.
"""
import pytest
import redis
from unittest.mock import Mock
from firesync.exceptions import QuotaExceededError
from firesync.key_value_store import KeyValueStore
from firesync.redis_client import FireSyncRedis


@pytest.fixture
def redis_mock():
	return Mock(spec=redis.Redis)


@pytest.fixture
def store(redis_mock):
	return FireSyncRedis(client=redis_mock)


class TestFireSyncRedis:
	"""Test cases for FireSyncRedis."""

	def test_satisfies_key_value_store(self, store):
		assert isinstance(store, KeyValueStore)

	def test_get(self, store, redis_mock):
		redis_mock.get.return_value = '{"schemaVersion": 2}'
		assert store.get("fire_risk_data_cache") == '{"schemaVersion": 2}'
		redis_mock.get.assert_called_once_with("fire_risk_data_cache")

	def test_set_without_ttl(self, store, redis_mock):
		redis_mock.set.return_value = True
		assert store.set("user_location", "{}") is True
		redis_mock.set.assert_called_once_with("user_location", "{}")
		redis_mock.setex.assert_not_called()

	def test_set_with_ttl(self, store, redis_mock):
		redis_mock.setex.return_value = True
		assert store.set("user_location", "{}", ttl=60) is True
		redis_mock.setex.assert_called_once_with("user_location", 60, "{}")

	def test_out_of_memory_is_quota_exceeded(self, store, redis_mock):
		redis_mock.set.side_effect = redis.exceptions.ResponseError(
			"OOM command not allowed when used memory > 'maxmemory'."
		)

		with pytest.raises(QuotaExceededError) as exc_info:
			store.set("fire_risk_data_cache", "x" * 100)
		assert exc_info.value.key == "fire_risk_data_cache"

	def test_other_response_error_is_value_error(self, store, redis_mock):
		redis_mock.set.side_effect = redis.exceptions.ResponseError("WRONGTYPE Operation against a key")
		with pytest.raises(ValueError):
			store.set("fire_risk_data_cache", "{}")

	def test_connection_error_on_read(self, store, redis_mock):
		redis_mock.get.side_effect = redis.exceptions.ConnectionError("refused")
		with pytest.raises(ValueError):
			store.get("fire_risk_data_cache")

	def test_delete_and_exists(self, store, redis_mock):
		redis_mock.delete.return_value = 1
		redis_mock.exists.return_value = 0
		assert store.delete("user_location") is True
		assert store.exists("user_location") is False

	def test_ping(self, store, redis_mock):
		redis_mock.ping.return_value = True
		assert store.ping() is True
		redis_mock.ping.side_effect = redis.exceptions.ConnectionError("down")
		with pytest.raises(ConnectionError):
			store.ping()
