from typing import Dict, List, Optional
from pydantic import ConfigDict, Field
from firesync.schemas.base import BaseSchema
from firesync.schemas.fire_risk import FireRiskRecord

class Station(BaseSchema):
	"""Fixed named reference point. Catalog entries are never mutated."""
	model_config = ConfigDict(frozen=True)

	name: str
	lat: float
	lon: float
	province: str

class StationWeather(BaseSchema):
	"""Representative weather for a station bucket."""
	temperature: Optional[float] = None
	humidity: Optional[float] = None
	wind_speed: Optional[float] = None

class StationAggregate(BaseSchema):
	"""
	Dataset records binned to their nearest station, reduced to summary values.
	Recomputed whenever the dataset changes; never persisted.
	"""
	station: Station
	records: List[FireRiskRecord] = Field(default_factory=list)
	avg_risk: Optional[float] = None
	max_risk: Optional[float] = None
	min_risk: Optional[float] = None
	class_counts: Dict[str, int] = Field(default_factory=dict)
	high_risk_count: int = 0
	medium_risk_count: int = 0
	low_risk_count: int = 0
	weather: Optional[StationWeather] = None

	@property
	def record_count(self) -> int:
		return len(self.records)

class NearestRecord(BaseSchema):
	"""A dataset record together with its distance from a query point."""
	record: FireRiskRecord
	distance_km: float

class DangerArea(BaseSchema):
	"""Station ranked by average danger, for the high-danger summary."""
	station: str
	province: str
	avg_risk: float
	danger_class: str
	color: str
	abbreviation: str
	message: str

class DatasetStatistics(BaseSchema):
	"""Dataset-wide danger statistics."""
	total: int
	class_counts: Dict[str, int] = Field(default_factory=dict)
	mean_risk: Optional[float] = None
	min_risk: Optional[float] = None
	max_risk: Optional[float] = None
