"""
Parser for raw fire-risk prediction items.
"""
from typing import Optional, Dict, Any
import math
import logging
from firesync.schemas.fire_risk import FireWeatherIndices

logger = logging.getLogger(__name__)

# Plausible ranges for the optional weather fields; outside values are logged only
TEMPERATURE_RANGE_C = (-60.0, 60.0)
HUMIDITY_RANGE_PCT = (0.0, 100.0)
WIND_SPEED_RANGE_KMH = (0.0, 200.0)


class FireRiskParser:
	"""Parser for extracting and normalizing fields of upstream fire-risk items."""

	@staticmethod
	def safe_float(value: Any) -> Optional[float]:
		"""
		Coerce a loosely-typed JSON value to a finite float.

		Numbers and numeric strings are accepted. Booleans, NaN, infinities,
		None and anything else are rejected.

		Args:
			value: Raw JSON value

		Returns:
			Float value, or None if the value is not a usable number
		"""
		if value is None or isinstance(value, bool):
			return None
		if isinstance(value, (int, float)):
			number = float(value)
		elif isinstance(value, str):
			try:
				number = float(value.strip())
			except ValueError:
				return None
		else:
			return None
		if math.isnan(number) or math.isinf(number):
			return None
		return number

	@staticmethod
	def is_number(value: Any) -> bool:
		"""Whether a JSON value is a real finite number (not a bool or a numeric string)."""
		if isinstance(value, bool) or not isinstance(value, (int, float)):
			return False
		return not (math.isnan(value) or math.isinf(value))

	@staticmethod
	def clean_string(value: Any) -> Optional[str]:
		"""
		Trim a display string.

		Returns:
			Trimmed string, or None if the value is not a string or is blank
		"""
		if not isinstance(value, str):
			return None
		cleaned = value.strip()
		return cleaned or None

	@staticmethod
	def record_id(lat: float, lon: float) -> str:
		"""
		Stable record key derived from coordinates rounded to 4 decimals.

		Args:
			lat: Latitude in degrees
			lon: Longitude in degrees

		Returns:
			Key like "fwi_49.2827_-123.1207"
		"""
		return f"fwi_{round(lat, 4)}_{round(lon, 4)}"

	@staticmethod
	def batch_timestamp(payload: Dict[str, Any]) -> Optional[str]:
		"""
		Extract the batch freshness timestamp.
		`last_updated` wins over `timestamp`; the value is kept verbatim apart
		from surrounding whitespace.
		"""
		for key in ("last_updated", "timestamp"):
			value = payload.get(key)
			if isinstance(value, str) and value.strip():
				return value.strip()
		return None

	@staticmethod
	def parse_weather(item: Dict[str, Any]) -> Dict[str, Optional[float]]:
		"""
		Flatten `weather_features` into record fields.

		`fire_danger_index` falls back to `fire_weather_indices.fwi`.

		Args:
			item: Raw upstream item

		Returns:
			Dictionary with temperature, humidity, wind_speed, pressure and
			fire_danger_index (each None when missing)
		"""
		weather = item.get("weather_features")
		if not isinstance(weather, dict):
			weather = {}
		indices = item.get("fire_weather_indices")
		if not isinstance(indices, dict):
			indices = {}

		fire_danger_index = FireRiskParser.safe_float(weather.get("fire_danger_index"))
		if fire_danger_index is None:
			fire_danger_index = FireRiskParser.safe_float(indices.get("fwi"))

		return {
			"temperature": FireRiskParser.safe_float(weather.get("temperature")),
			"humidity": FireRiskParser.safe_float(weather.get("humidity")),
			"wind_speed": FireRiskParser.safe_float(weather.get("wind_speed")),
			"pressure": FireRiskParser.safe_float(weather.get("pressure")),
			"fire_danger_index": fire_danger_index
		}

	@staticmethod
	def parse_fire_weather_indices(item: Dict[str, Any]) -> Optional[FireWeatherIndices]:
		"""Parse the FWI sub-indices block, or None when absent."""
		indices = item.get("fire_weather_indices")
		if not isinstance(indices, dict):
			return None
		return FireWeatherIndices(
			ffmc=FireRiskParser.safe_float(indices.get("ffmc")),
			dmc=FireRiskParser.safe_float(indices.get("dmc")),
			dc=FireRiskParser.safe_float(indices.get("dc")),
			isi=FireRiskParser.safe_float(indices.get("isi")),
			bui=FireRiskParser.safe_float(indices.get("bui")),
			fwi=FireRiskParser.safe_float(indices.get("fwi")),
			dsr=FireRiskParser.safe_float(indices.get("dsr"))
		)

	@staticmethod
	def implausible_weather(weather: Dict[str, Optional[float]]) -> Dict[str, float]:
		"""
		Return the weather fields whose values fall outside plausible ranges.
		Missing values are never implausible.
		"""
		ranges = {
			"temperature": TEMPERATURE_RANGE_C,
			"humidity": HUMIDITY_RANGE_PCT,
			"wind_speed": WIND_SPEED_RANGE_KMH,
		}
		implausible = {}
		for field, (low, high) in ranges.items():
			value = weather.get(field)
			if value is not None and not (low <= value <= high):
				implausible[field] = value
		return implausible
