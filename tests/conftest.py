"""
Pytest configuration and fixtures.
"""
import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock
from firesync.key_value_store import InMemoryKeyValueStore
from firesync.processors.fire_risk_validator import FireRiskValidator
from firesync.schemas.fire_risk import FireRiskRecord
from firesync.services.cache_store import CacheStore
from firesync.services.fire_risk_fetcher import FireRiskFetcher
from firesync.services.geo_index import GeoIndex
from firesync.services.refresh_scheduler import RefreshScheduler
from firesync.utils.risk_scale import PROBABILITY_SCALE

BATCH_TIMESTAMP = "2025-08-25T14:00:00.123456"


def make_raw_item(
	lat=49.2827,
	lon=-123.1207,
	risk=0.42,
	location="Vancouver",
	province="BC",
	**overrides
):
	"""Build one upstream prediction item."""
	item = {
		"lat": lat,
		"lon": lon,
		"location_name": location,
		"province": province,
		"daily_fire_risk": risk,
		"danger_class": "Medium",
		"color_code": "#fbc02d",
		"weather_features": {
			"temperature": 22.5,
			"humidity": 35.0,
			"wind_speed": 14.0,
			"pressure": 1012.0,
			"fire_danger_index": 12.3
		},
		"fire_weather_indices": {
			"ffmc": 88.1,
			"dmc": 40.2,
			"dc": 310.0,
			"isi": 6.4,
			"bui": 60.5,
			"fwi": 14.9,
			"dsr": 3.1
		},
		"model_confidence": 0.9
	}
	item.update(overrides)
	return item


def make_payload(items, last_updated=BATCH_TIMESTAMP, timestamp="2025-08-25T14:05:00", model_info=None):
	"""Build an upstream batch payload."""
	payload = {
		"success": True,
		"data": items,
		"model_info": model_info if model_info is not None else {
			"model_type": "FWI",
			"version": "2.1",
			"methodology": "Canadian Fire Weather Index System",
			"r2_score": 0.81,
			"mse": 0.02,
			"mae": 0.1,
			"risk_range": [0, 1],
			"features_used": ["temperature", "humidity", "wind_speed"]
		},
		"timestamp": timestamp
	}
	if last_updated is not None:
		payload["last_updated"] = last_updated
	return payload


def make_record(record_id="r1", lat=49.2827, lon=-123.1207, risk=0.5, location="Vancouver", province="BC", **fields):
	"""Build a canonical record."""
	return FireRiskRecord(
		id=record_id,
		lat=lat,
		lon=lon,
		risk_level=risk,
		location=location,
		province=province,
		**fields
	)


@pytest.fixture
def sample_items():
	"""Ten upstream items across Canada, two with risk above the probability scale."""
	return [
		make_raw_item(49.2827, -123.1207, 0.75, "Vancouver", "BC"),
		make_raw_item(53.9171, -122.7497, 0.85, "Prince George", "BC"),
		make_raw_item(51.0447, -114.0719, 0.45, "Calgary", "AB"),
		make_raw_item(53.5461, -113.4938, 1.40, "Edmonton", "AB"),
		make_raw_item(52.1579, -106.6702, 0.55, "Saskatoon", "SK"),
		make_raw_item(49.8951, -97.1384, 0.35, "Winnipeg", "MB"),
		make_raw_item(43.6510, -79.3470, 0.25, "Toronto", "ON"),
		make_raw_item(45.4215, -75.6972, 2.10, "Ottawa", "ON"),
		make_raw_item(45.5019, -73.5674, 0.20, "Montreal", "QC"),
		make_raw_item(44.6488, -63.5752, 0.15, "Halifax", "NS"),
	]


@pytest.fixture
def sample_payload(sample_items):
	"""Batch payload built from sample_items."""
	return make_payload(sample_items)


@pytest.fixture
def memory_store():
	"""Unbounded in-memory key/value store."""
	return InMemoryKeyValueStore()


@pytest.fixture
def validator():
	"""Validator on the probability scale."""
	return FireRiskValidator(risk_scale=PROBABILITY_SCALE, invalid_sample_size=10, rejection_warning_rate=0.10)


@pytest.fixture
def cache_store(memory_store):
	"""Dataset cache over the in-memory store."""
	return CacheStore(memory_store)


@pytest.fixture
def geo_index():
	"""GeoIndex over the full station catalog."""
	return GeoIndex(risk_scale=PROBABILITY_SCALE)


@pytest.fixture
def fixed_now():
	"""Fixed reference time."""
	return datetime(2025, 8, 25, 14, 7, tzinfo=timezone.utc)


@pytest.fixture
def mock_fetcher(sample_payload):
	"""Fetcher returning sample_payload and no separate model info."""
	fetcher = Mock(spec=FireRiskFetcher)
	fetcher.fetch = AsyncMock(return_value=sample_payload)
	fetcher.fetch_model_info = AsyncMock(return_value=None)
	fetcher.close = AsyncMock()
	return fetcher


@pytest.fixture
def mock_scheduler():
	"""Scheduler stand-in that never fires."""
	scheduler = Mock(spec=RefreshScheduler)
	scheduler.within_grace_window.return_value = False
	return scheduler


@pytest.fixture
def broken_store():
	"""Store whose every call fails the way FireSyncRedis does when Redis is unreachable."""
	store = Mock(spec=InMemoryKeyValueStore)
	store.get.side_effect = ValueError("Failed to read key fire_risk_data_cache: connection refused")
	store.set.side_effect = ValueError("Failed to write key fire_risk_data_cache: connection refused")
	store.delete.side_effect = ValueError("Failed to delete key fire_risk_data_cache: connection refused")
	return store
