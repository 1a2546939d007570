"""
Great-circle geometry helpers.
"""
import math

EARTH_RADIUS_KM = 6371.0

# Approximate bounding box of Canada
CANADA_BOUNDS = {
	"min_lat": 41.5,
	"max_lat": 83.6,
	"min_lon": -141.1,
	"max_lon": -52.5,
}


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
	"""
	Haversine distance between two coordinates.

	Args:
		lat1: Starting latitude in degrees
		lon1: Starting longitude in degrees
		lat2: Ending latitude in degrees
		lon2: Ending longitude in degrees

	Returns:
		Distance in kilometers
	"""
	d_lat = math.radians(lat2 - lat1)
	d_lon = math.radians(lon2 - lon1)
	a = (
		math.sin(d_lat / 2) ** 2
		+ math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
	)
	# Clamp: rounding can push a a hair past 1 for antipodal points
	a = min(1.0, max(0.0, a))
	return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def is_in_canada(lat: float, lon: float) -> bool:
	"""Check if a point is within Canada's approximate boundaries."""
	return (
		CANADA_BOUNDS["min_lat"] <= lat <= CANADA_BOUNDS["max_lat"]
		and CANADA_BOUNDS["min_lon"] <= lon <= CANADA_BOUNDS["max_lon"]
	)


def format_coordinates(lat: float, lon: float) -> str:
	"""Convert decimal degrees to a readable coordinate string."""
	return f"{lat:.4f}, {lon:.4f}"
