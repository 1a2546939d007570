from typing import Any, Dict, List, Optional, Tuple
import logging
from firesync.config import settings
from firesync.exceptions import InvalidResponseError, NoValidRisksError, NoValidDataError
from firesync.schemas.fire_risk import FireRiskRecord, InvalidItem, ModelInfo, ValidatedBatch
from firesync.utils.fire_risk_parser import FireRiskParser
from firesync.utils.geo import format_coordinates, is_in_canada
from firesync.utils.risk_scale import RiskScale, get_risk_scale

logger = logging.getLogger(__name__)


class FireRiskValidator:
	"""
	Turns one raw prediction payload into canonical FireRiskRecords.

	Per-record failures are recovered here and reported as diagnostics;
	batch-level failures raise an ApiError subclass for the controller.
	"""

	def __init__(
		self,
		risk_scale: Optional[RiskScale] = None,
		invalid_sample_size: Optional[int] = None,
		rejection_warning_rate: Optional[float] = None
	):
		self.risk_scale = risk_scale or get_risk_scale(settings.risk_scale)
		self.invalid_sample_size = (
			invalid_sample_size if invalid_sample_size is not None else settings.invalid_sample_size
		)
		self.rejection_warning_rate = (
			rejection_warning_rate if rejection_warning_rate is not None else settings.rejection_warning_rate
		)

	def validate_batch(self, payload: Any) -> ValidatedBatch:
		"""
		Validate and normalize a raw batch.

		Args:
			payload: Decoded response `{data, model_info, timestamp, last_updated?}`

		Returns:
			ValidatedBatch with admitted records and rejection diagnostics

		Raises:
			InvalidResponseError: Payload is not a batch or carries no timestamp
			NoValidRisksError: No item has a numeric risk value
			NoValidDataError: Every item of a non-empty batch was rejected
		"""
		if not isinstance(payload, dict):
			raise InvalidResponseError("API response is not a JSON object")

		items = payload.get("data")
		if not isinstance(items, list):
			raise InvalidResponseError("API response missing or invalid data array")

		batch_timestamp = FireRiskParser.batch_timestamp(payload)
		if batch_timestamp is None:
			raise InvalidResponseError("API response missing batch timestamp")

		model_info = self._parse_model_info(payload.get("model_info"))

		if not items:
			logger.info("Fire risk batch is empty")
			return ValidatedBatch(
				records=[],
				batch_timestamp=batch_timestamp,
				total=0,
				model_info=model_info
			)

		has_numeric_risk = any(
			isinstance(item, dict) and FireRiskParser.is_number(item.get("daily_fire_risk"))
			for item in items
		)
		if not has_numeric_risk:
			raise NoValidRisksError("No valid risk values in FWI response")

		records: List[FireRiskRecord] = []
		invalid_items: List[InvalidItem] = []
		invalid_count = 0

		for index, item in enumerate(items):
			record, issues = self._transform_item(item, batch_timestamp)
			if record is None:
				invalid_count += 1
				if len(invalid_items) < self.invalid_sample_size:
					invalid_items.append(InvalidItem(index=index, item=item, issues=issues))
				continue
			records.append(record)

		total = len(items)
		rejection_rate = invalid_count / total

		if invalid_count:
			log_message = (
				f"Rejected {invalid_count} of {total} fire risk items "
				f"({rejection_rate:.1%})"
			)
			if rejection_rate > self.rejection_warning_rate:
				logger.warning(
					log_message,
					extra={"extra_fields": {"invalid_samples": [i.to_dict() for i in invalid_items]}}
				)
			else:
				logger.info(log_message)

		if not records:
			raise NoValidDataError(
				"No valid Fire Weather Index data after transformation",
				details=[i.to_dict() for i in invalid_items]
			)

		outside_canada = sum(1 for record in records if not is_in_canada(record.lat, record.lon))
		if outside_canada:
			logger.info(f"{outside_canada} fire risk records fall outside the Canadian bounding box")

		logger.info(f"Validated {len(records)} fire risk records for batch {batch_timestamp}")
		return ValidatedBatch(
			records=records,
			batch_timestamp=batch_timestamp,
			total=total,
			invalid_count=invalid_count,
			invalid_items=invalid_items,
			rejection_rate=rejection_rate,
			model_info=model_info
		)

	def _transform_item(self, item: Any, batch_timestamp: str) -> Tuple[Optional[FireRiskRecord], Dict[str, bool]]:
		"""
		Check and convert a single item.

		Returns:
			(record, issues); record is None when any check failed
		"""
		if not isinstance(item, dict):
			item = {}

		lat = FireRiskParser.safe_float(item.get("lat"))
		lon = FireRiskParser.safe_float(item.get("lon"))
		risk = FireRiskParser.safe_float(item.get("daily_fire_risk"))
		location = FireRiskParser.clean_string(item.get("location_name"))
		province = FireRiskParser.clean_string(item.get("province"))

		issues = {
			"invalidLat": lat is None or not (-90 <= lat <= 90),
			"invalidLon": lon is None or not (-180 <= lon <= 180),
			"invalidRisk": risk is None or not self.risk_scale.contains(risk),
			"missingLocation": location is None,
			"missingProvince": province is None,
		}
		if any(issues.values()):
			return None, issues

		weather = FireRiskParser.parse_weather(item)
		implausible = FireRiskParser.implausible_weather(weather)
		if implausible:
			logger.warning(f"Implausible weather values at {location}, {province} ({format_coordinates(lat, lon)}): {implausible}")

		record = FireRiskRecord(
			id=FireRiskParser.record_id(lat, lon),
			lat=lat,
			lon=lon,
			risk_level=risk,
			location=location,
			province=province,
			last_updated=batch_timestamp,
			temperature=weather["temperature"],
			humidity=weather["humidity"],
			wind_speed=weather["wind_speed"],
			pressure=weather["pressure"],
			fire_danger_index=weather["fire_danger_index"],
			model_confidence=FireRiskParser.safe_float(item.get("model_confidence")),
			danger_class=FireRiskParser.clean_string(item.get("danger_class")),
			color_code=FireRiskParser.clean_string(item.get("color_code")),
			fire_weather_indices=FireRiskParser.parse_fire_weather_indices(item)
		)
		return record, issues

	@staticmethod
	def _parse_model_info(raw: Any) -> Optional[ModelInfo]:
		if not isinstance(raw, dict):
			return None
		try:
			return ModelInfo.from_payload(raw)
		except ValueError as e:
			logger.warning(f"Ignoring malformed model_info block: {str(e)}")
			return None
