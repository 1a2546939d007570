from typing import Any, Dict, List, Optional, Tuple
from pydantic import Field
from firesync.schemas.base import BaseSchema

class FireWeatherIndices(BaseSchema):
	"""Canadian FWI System sub-indices. Display only."""
	ffmc: Optional[float] = None
	dmc: Optional[float] = None
	dc: Optional[float] = None
	isi: Optional[float] = None
	bui: Optional[float] = None
	fwi: Optional[float] = None
	dsr: Optional[float] = None

class FireRiskRecord(BaseSchema):
	"""
	One measurement grid cell or station reading.

	Only the Validator builds these from upstream payloads, so every instance
	satisfies the coordinate and risk-range constraints of the active risk scale.
	"""
	id: str
	lat: float = Field(ge=-90, le=90)
	lon: float = Field(ge=-180, le=180)
	risk_level: float
	location: str = Field(min_length=1)
	province: str = Field(min_length=1)
	last_updated: Optional[str] = None
	nearest_station: Optional[str] = None
	temperature: Optional[float] = None
	humidity: Optional[float] = None
	wind_speed: Optional[float] = None
	pressure: Optional[float] = None
	fire_danger_index: Optional[float] = None
	model_confidence: Optional[float] = None
	danger_class: Optional[str] = None
	color_code: Optional[str] = None
	fire_weather_indices: Optional[FireWeatherIndices] = None

class CompactRecord(BaseSchema):
	"""
	Reduced projection of FireRiskRecord kept in the dataset cache.
	Coefficients and sub-indices are dropped to bound storage.
	"""
	id: str
	lat: float
	lon: float
	risk_level: float
	location: str
	province: str
	temperature: Optional[float] = None
	humidity: Optional[float] = None
	wind_speed: Optional[float] = None

	@classmethod
	def from_record(cls, record: FireRiskRecord) -> "CompactRecord":
		return cls(
			id=record.id,
			lat=record.lat,
			lon=record.lon,
			risk_level=record.risk_level,
			location=record.location,
			province=record.province,
			temperature=record.temperature,
			humidity=record.humidity,
			wind_speed=record.wind_speed
		)

	def to_record(self, last_updated: Optional[str] = None) -> FireRiskRecord:
		return FireRiskRecord(
			id=self.id,
			lat=self.lat,
			lon=self.lon,
			risk_level=self.risk_level,
			location=self.location,
			province=self.province,
			last_updated=last_updated,
			temperature=self.temperature,
			humidity=self.humidity,
			wind_speed=self.wind_speed
		)

class ModelInfo(BaseSchema):
	"""Description of the upstream model that produced a batch."""
	model_type: Optional[str] = None
	version: Optional[str] = None
	methodology: Optional[str] = None
	r2_score: Optional[float] = None
	mse: Optional[float] = None
	mae: Optional[float] = None
	risk_range: Optional[Tuple[float, float]] = None
	features: List[str] = Field(default_factory=list)
	last_trained: Optional[str] = None
	confidence: Optional[str] = None

	@classmethod
	def from_payload(cls, payload: Dict[str, Any]) -> "ModelInfo":
		"""Build from either the batch `model_info` block or `/api/model/info`."""
		return cls(
			model_type=payload.get("model_type"),
			version=payload.get("version"),
			methodology=payload.get("methodology"),
			r2_score=payload.get("r2_score"),
			mse=payload.get("mse"),
			mae=payload.get("mae"),
			risk_range=payload.get("risk_range"),
			features=payload.get("features") or payload.get("features_used") or [],
			last_trained=payload.get("last_trained"),
			confidence=payload.get("confidence")
		)

class InvalidItem(BaseSchema):
	"""Diagnostic sample for one rejected upstream record."""
	index: int
	item: Any
	issues: Dict[str, bool]

class ValidatedBatch(BaseSchema):
	"""Output of the Validator for one fetch cycle."""
	records: List[FireRiskRecord]
	batch_timestamp: str
	total: int
	invalid_count: int = 0
	invalid_items: List[InvalidItem] = Field(default_factory=list)
	rejection_rate: float = 0.0
	model_info: Optional[ModelInfo] = None
