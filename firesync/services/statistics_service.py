"""
Dataset-wide danger statistics and the high-danger summary.
"""
from typing import Dict, List, Optional, Sequence
import logging
from firesync.config import settings
from firesync.exceptions import InvalidRequestError
from firesync.schemas.fire_risk import FireRiskRecord
from firesync.schemas.station import DangerArea, DatasetStatistics, StationAggregate
from firesync.utils.risk_scale import PROBABILITY_SCALE, RiskScale, get_risk_scale, risk_label_with_percent

logger = logging.getLogger(__name__)


class StatisticsService:
	"""Summaries computed from a dataset or from station aggregates."""

	def __init__(self, risk_scale: Optional[RiskScale] = None):
		self.risk_scale = risk_scale or get_risk_scale(settings.risk_scale)

	def summarize(self, dataset: Sequence[FireRiskRecord]) -> DatasetStatistics:
		"""
		Count records per danger class and compute the risk range.

		Args:
			dataset: Records of one cycle

		Returns:
			DatasetStatistics; mean/min/max are None for an empty dataset
		"""
		class_counts = self.risk_scale.empty_counts()
		for record in dataset:
			class_counts[self.risk_scale.classify(record.risk_level).name] += 1

		if not dataset:
			return DatasetStatistics(total=0, class_counts=class_counts)

		risks = [record.risk_level for record in dataset]
		return DatasetStatistics(
			total=len(risks),
			class_counts=class_counts,
			mean_risk=sum(risks) / len(risks),
			min_risk=min(risks),
			max_risk=max(risks)
		)

	def top_danger_areas(
		self,
		aggregates: Dict[str, StationAggregate],
		limit: int = 3,
		minimum_class: Optional[str] = None
	) -> List[DangerArea]:
		"""
		Stations with the highest average danger.

		Args:
			aggregates: Output of GeoIndex.aggregate_by_station
			limit: Maximum number of areas
			minimum_class: Lowest danger class to include (defaults to the scale's third class)

		Returns:
			DangerAreas sorted by average risk, highest first
		"""
		threshold = self._class_lower_bound(minimum_class)
		candidates = [
			aggregate for aggregate in aggregates.values()
			if aggregate.avg_risk is not None and aggregate.avg_risk >= threshold
		]
		candidates.sort(key=lambda aggregate: aggregate.avg_risk, reverse=True)

		areas = []
		for aggregate in candidates[:limit]:
			danger_class = self.risk_scale.classify(aggregate.avg_risk)
			areas.append(DangerArea(
				station=aggregate.station.name,
				province=aggregate.station.province,
				avg_risk=aggregate.avg_risk,
				danger_class=danger_class.name,
				color=danger_class.color,
				abbreviation=danger_class.abbreviation,
				message=self._danger_message(aggregate)
			))
		return areas

	def _class_lower_bound(self, class_name: Optional[str]) -> float:
		classes = self.risk_scale.classes
		if class_name is None:
			return classes[min(2, len(classes) - 1)].lower_bound
		for danger_class in classes:
			if danger_class.name.lower() == class_name.strip().lower():
				return danger_class.lower_bound
		raise InvalidRequestError(
			f"Unknown danger class '{class_name}' for scale {self.risk_scale.name}; "
			f"expected one of {', '.join(self.risk_scale.class_names)}"
		)

	def _danger_message(self, aggregate: StationAggregate) -> str:
		if self.risk_scale is PROBABILITY_SCALE:
			label = risk_label_with_percent(aggregate.avg_risk)
		else:
			label = f"{self.risk_scale.classify(aggregate.avg_risk).name} (FWI {aggregate.avg_risk:.1f})"
		return f"{aggregate.station.name}, {aggregate.station.province}: {label} across {aggregate.record_count} cells"
