from typing import Dict, List, Optional, Sequence
import logging
from firesync.schemas.fire_risk import FireRiskRecord
from firesync.schemas.station import NearestRecord, Station, StationAggregate, StationWeather
from firesync.utils.geo import distance_km
from firesync.utils.risk_scale import RiskScale, get_risk_scale
from firesync.utils.stations import CANADIAN_STATIONS
from firesync.config import settings

logger = logging.getLogger(__name__)


class GeoIndex:
	"""
	Nearest-neighbour queries over the station catalog and the live dataset.
	Linear scans; the catalog has 38 entries and datasets are a few thousand cells.
	"""

	def __init__(self, stations: Sequence[Station] = CANADIAN_STATIONS, risk_scale: Optional[RiskScale] = None):
		self.stations = tuple(stations)
		self.risk_scale = risk_scale or get_risk_scale(settings.risk_scale)

	def nearest_station(self, lat: float, lon: float) -> Station:
		"""
		Closest catalog station to a point. Ties go to the earlier catalog entry.
		"""
		nearest = self.stations[0]
		min_distance = distance_km(lat, lon, nearest.lat, nearest.lon)
		for station in self.stations[1:]:
			distance = distance_km(lat, lon, station.lat, station.lon)
			if distance < min_distance:
				nearest = station
				min_distance = distance
		return nearest

	def k_nearest(self, lat: float, lon: float, dataset: Sequence[FireRiskRecord], k: int) -> List[NearestRecord]:
		"""
		The k dataset records closest to a point, ascending by distance.

		Args:
			lat: Query latitude
			lon: Query longitude
			dataset: Records to search
			k: Maximum number of results

		Returns:
			At most min(k, len(dataset)) NearestRecords; equal distances keep input order
		"""
		if k <= 0 or not dataset:
			return []
		with_distance = [
			NearestRecord(record=record, distance_km=distance_km(lat, lon, record.lat, record.lon))
			for record in dataset
		]
		# sorted() is stable, so ties keep dataset order
		with_distance = sorted(with_distance, key=lambda nearest: nearest.distance_km)
		return with_distance[:k]

	def aggregate_by_station(self, dataset: Sequence[FireRiskRecord]) -> Dict[str, StationAggregate]:
		"""
		Bin every record to its nearest station and summarize each bucket.

		Bucketed records are copies tagged with `nearest_station`; the
		dataset itself is left untouched.

		Returns:
			Mapping of station name to aggregate, covering every catalog
			station in catalog order (empty buckets included)
		"""
		buckets: Dict[str, List[FireRiskRecord]] = {station.name: [] for station in self.stations}
		for record in dataset:
			station = self.nearest_station(record.lat, record.lon)
			buckets[station.name].append(record.model_copy(update={"nearest_station": station.name}))

		return {
			station.name: self._summarize_bucket(station, buckets[station.name])
			for station in self.stations
		}

	def _summarize_bucket(self, station: Station, records: List[FireRiskRecord]) -> StationAggregate:
		class_counts = self.risk_scale.empty_counts()
		band_counts = {"high": 0, "medium": 0, "low": 0}
		for record in records:
			class_counts[self.risk_scale.classify(record.risk_level).name] += 1
			band_counts[self.risk_scale.band(record.risk_level)] += 1

		if not records:
			return StationAggregate(station=station, class_counts=class_counts)

		risks = [record.risk_level for record in records]
		return StationAggregate(
			station=station,
			records=list(records),
			avg_risk=sum(risks) / len(risks),
			max_risk=max(risks),
			min_risk=min(risks),
			class_counts=class_counts,
			high_risk_count=band_counts["high"],
			medium_risk_count=band_counts["medium"],
			low_risk_count=band_counts["low"],
			weather=self._representative_weather(records)
		)

	@staticmethod
	def _representative_weather(records: List[FireRiskRecord]) -> Optional[StationWeather]:
		for record in records:
			if record.temperature is not None or record.humidity is not None or record.wind_speed is not None:
				return StationWeather(
					temperature=record.temperature,
					humidity=record.humidity,
					wind_speed=record.wind_speed
				)
		return None
