"""
HTTP client for Nominatim reverse geocoding.
"""
import logging
from typing import Optional
import httpx
from firesync.config import settings
from firesync.http_client.base_client import BaseHTTPClient

logger = logging.getLogger(__name__)


class NominatimClient(BaseHTTPClient):
	"""Resolves coordinates to a short "City, State" label."""

	def __init__(
		self,
		base_url: Optional[str] = None,
		user_agent: Optional[str] = None,
		timeout: Optional[float] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None
	):
		super().__init__(
			base_url=base_url or settings.nominatim_base_url,
			default_headers={"User-Agent": user_agent or settings.geocoder_user_agent},
			timeout=timeout if timeout is not None else settings.http_timeout_seconds,
			# Best effort: one attempt, callers fall back to a coordinate label
			max_retries=1,
			retry_delay=0.0,
			transport=transport
		)

	async def reverse(self, lat: float, lon: float) -> Optional[str]:
		"""
		Reverse-geocode a coordinate.

		Args:
			lat: Latitude in degrees
			lon: Longitude in degrees

		Returns:
			"City, State", "City", or None when the response names no place
		"""
		payload = await self.get(
			"/reverse",
			params={"format": "json", "lat": lat, "lon": lon}
		)
		address = payload.get("address") if isinstance(payload, dict) else None
		if not isinstance(address, dict):
			return None

		city = address.get("city") or address.get("town") or address.get("county")
		if not city:
			return None
		state = address.get("state")
		return f"{city}, {state}" if state else city
