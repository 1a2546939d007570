from typing import Optional
from pydantic import Field
from firesync.schemas.base import BaseSchema

class Coordinate(BaseSchema):
	"""Coordinate with latitude and longitude."""
	latitude: float = Field(ge=-90, le=90)
	longitude: float = Field(ge=-180, le=180)

class ObserverLocation(BaseSchema):
	"""
	Where the person looking at the map is.

	Immutable once resolved; the only later change is the arrival of `city`
	from reverse geocoding, which produces a new instance via `with_city`.
	"""
	lat: float = Field(ge=-90, le=90)
	lon: float = Field(ge=-180, le=180)
	city: Optional[str] = None

	def with_city(self, city: str) -> "ObserverLocation":
		return self.model_copy(update={"city": city})

	@staticmethod
	def coordinate_label(lat: float, lon: float) -> str:
		"""Label used in place of a city name when reverse geocoding fails."""
		return f"{lat:.2f}°, {lon:.2f}°"
