"""
Bundled static dataset served when no live or cached data is available.

Published only together with an error, so the map is never empty but the
presentation layer can still tell it is not real data.
"""
from typing import List
from firesync.schemas.fire_risk import FireRiskRecord

FALLBACK_LAST_UPDATED = "2024-08-25"

_FALLBACK_ROWS = (
	# (id, lat, lon, risk, location, province)
	("1", 49.2827, -123.1207, 0.75, "Vancouver", "BC"),
	("2", 53.9171, -122.7497, 0.85, "Prince George", "BC"),
	("3", 51.0447, -114.0719, 0.45, "Calgary", "AB"),
	("4", 53.5444, -113.4909, 0.40, "Edmonton", "AB"),
	("5", 52.1579, -106.6702, 0.55, "Saskatoon", "SK"),
	("6", 49.8951, -97.1384, 0.35, "Winnipeg", "MB"),
	("7", 43.6532, -79.3832, 0.25, "Toronto", "ON"),
	("8", 45.4215, -75.6972, 0.30, "Ottawa", "ON"),
	("9", 45.5017, -73.5673, 0.20, "Montreal", "QC"),
	("10", 44.6488, -63.5752, 0.15, "Halifax", "NS"),
)


def load_fallback_dataset() -> List[FireRiskRecord]:
	"""Return a fresh copy of the bundled fallback dataset."""
	return [
		FireRiskRecord(
			id=row_id,
			lat=lat,
			lon=lon,
			risk_level=risk,
			location=location,
			province=province,
			last_updated=FALLBACK_LAST_UPDATED
		)
		for row_id, lat, lon, risk, location, province in _FALLBACK_ROWS
	]
