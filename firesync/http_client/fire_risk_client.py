"""
HTTP client for the fire-risk prediction service.
"""
import logging
from typing import Optional, Dict, Any
import httpx
from firesync.config import settings
from firesync.http_client.base_client import BaseHTTPClient

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {
	"Content-Type": "application/json",
	"Cache-Control": "no-cache, no-store, must-revalidate",
	"Pragma": "no-cache",
}


class FireRiskClient(BaseHTTPClient):
	"""Client for the prediction service's batch, model and health endpoints."""

	def __init__(
		self,
		base_url: Optional[str] = None,
		timeout: Optional[float] = None,
		max_retries: Optional[int] = None,
		retry_delay: Optional[float] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None
	):
		super().__init__(
			base_url=base_url or settings.fire_risk_api_base_url,
			default_headers=dict(NO_CACHE_HEADERS),
			timeout=timeout if timeout is not None else settings.http_timeout_seconds,
			max_retries=max_retries if max_retries is not None else settings.http_max_retries,
			retry_delay=retry_delay if retry_delay is not None else settings.http_retry_delay_seconds,
			transport=transport
		)

	async def get_fire_risk_predictions(self) -> Any:
		"""
		Fetch the current fire-risk batch.

		Returns:
			Raw decoded payload `{data, model_info, timestamp, last_updated?}`
		"""
		payload = await self.get(settings.fire_risk_predictions_path)
		if isinstance(payload, dict) and isinstance(payload.get("data"), list):
			logger.info(f"Fetched fire-risk batch with {len(payload['data'])} items")
		return payload

	async def get_model_info(self) -> Dict[str, Any]:
		"""Fetch the description of the model serving predictions."""
		return await self.get(settings.fire_risk_model_info_path)
