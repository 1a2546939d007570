from firesync.schemas.fire_risk import FireRiskRecord, CompactRecord, ModelInfo, ValidatedBatch
from firesync.schemas.cache import CacheEntry
from firesync.schemas.location import Coordinate, ObserverLocation
from firesync.schemas.station import Station, StationAggregate, NearestRecord

__all__ = [
	"FireRiskRecord",
	"CompactRecord",
	"ModelInfo",
	"ValidatedBatch",
	"CacheEntry",
	"Coordinate",
	"ObserverLocation",
	"Station",
	"StationAggregate",
	"NearestRecord"
]
