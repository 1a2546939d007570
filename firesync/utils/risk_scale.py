"""
Risk scale threshold tables.

Two scales appear in this domain's history: a normalized probability in
[0, 1] and the raw Canadian Fire Weather Index (0, practically capped ~60).
The canonical scale is chosen by configuration and injected wherever risk
values are validated or classified; it is never guessed from the data.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DangerClass:
	"""One danger band: values >= lower_bound up to the next band's bound."""
	name: str
	lower_bound: float
	color: str
	abbreviation: str


@dataclass(frozen=True)
class RiskScale:
	"""
	A risk domain plus its ordered danger classes.

	`max_value=None` means the scale is unbounded above. Classes are ordered
	from least to most dangerous; the first class must start at `min_value`.
	"""
	name: str
	min_value: float
	max_value: Optional[float]
	classes: Tuple[DangerClass, ...]
	# Bounds used for the legacy high / medium / low split
	high_threshold: float
	medium_threshold: float

	def contains(self, value: float) -> bool:
		"""Whether a value is inside the declared domain."""
		if value < self.min_value:
			return False
		if self.max_value is not None and value > self.max_value:
			return False
		return True

	def classify(self, value: float) -> DangerClass:
		"""Return the danger class for a value (values below the domain get the lowest class)."""
		selected = self.classes[0]
		for danger_class in self.classes:
			if value >= danger_class.lower_bound:
				selected = danger_class
		return selected

	@property
	def class_names(self) -> Tuple[str, ...]:
		return tuple(danger_class.name for danger_class in self.classes)

	def empty_counts(self) -> Dict[str, int]:
		"""Zeroed per-class counter in class order."""
		return {name: 0 for name in self.class_names}

	def band(self, value: float) -> str:
		"""Legacy three-way split: "high", "medium" or "low"."""
		if value >= self.high_threshold:
			return "high"
		if value >= self.medium_threshold:
			return "medium"
		return "low"


PROBABILITY_SCALE = RiskScale(
	name="probability",
	min_value=0.0,
	max_value=1.0,
	classes=(
		DangerClass("Very Low", 0.0, "#388e3c", "V.LOW"),
		DangerClass("Low", 0.2, "#689f38", "LOW"),
		DangerClass("Medium", 0.4, "#fbc02d", "MED"),
		DangerClass("High", 0.6, "#f57c00", "HIGH"),
		DangerClass("Very High", 0.8, "#d32f2f", "V.HIGH"),
	),
	high_threshold=0.6,
	medium_threshold=0.4,
)

FWI_SCALE = RiskScale(
	name="fwi",
	min_value=0.0,
	max_value=None,
	classes=(
		DangerClass("Very Low", 0.0, "#4CAF50", "V.LOW"),
		DangerClass("Low", 2.0, "#8BC34A", "LOW"),
		DangerClass("Moderate", 4.0, "#FFEB3B", "MOD"),
		DangerClass("High", 8.0, "#FF9800", "HIGH"),
		DangerClass("Very High", 18.0, "#F44336", "V.HIGH"),
		DangerClass("Extreme", 30.0, "#9C27B0", "EXTREME"),
	),
	high_threshold=8.0,
	medium_threshold=4.0,
)

RISK_SCALES = {
	PROBABILITY_SCALE.name: PROBABILITY_SCALE,
	FWI_SCALE.name: FWI_SCALE,
}


def get_risk_scale(name: str) -> RiskScale:
	"""
	Look up a risk scale by configuration name.

	Args:
		name: "probability" or "fwi" (case-insensitive)

	Returns:
		The matching RiskScale, or PROBABILITY_SCALE for unknown names
	"""
	scale = RISK_SCALES.get(str(name).strip().lower())
	if scale is None:
		logger.warning(f"Unknown risk scale '{name}', defaulting to {PROBABILITY_SCALE.name}")
		return PROBABILITY_SCALE
	return scale


def risk_label_with_percent(value: float) -> str:
	"""Probability-scale label with percentage, e.g. "High (75%)"."""
	percentage = round(value * 100)
	return f"{PROBABILITY_SCALE.classify(value).name} ({percentage}%)"
