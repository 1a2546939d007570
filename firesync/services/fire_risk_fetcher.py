from typing import Any, Dict, Optional
import logging
import httpx
from firesync.exceptions import ApiError, HttpError, InvalidResponseError, NetworkError
from firesync.http_client.fire_risk_client import FireRiskClient
from firesync.schemas.fire_risk import ModelInfo

logger = logging.getLogger(__name__)


class FireRiskFetcher:
	"""
	Network side of a sync cycle.

	Translates every transport, HTTP and decoding failure into the ApiError
	taxonomy. It never substitutes data of its own.
	"""

	def __init__(self, client: Optional[FireRiskClient] = None):
		self.client = client or FireRiskClient()

	async def fetch(self) -> Dict[str, Any]:
		"""
		Fetch the raw fire-risk batch.

		Returns:
			Decoded payload, unvalidated

		Raises:
			HttpError: Non-2xx response (code is the status code)
			NetworkError: Transport failure
			InvalidResponseError: Body is not JSON
		"""
		try:
			return await self.client.get_fire_risk_predictions()
		except httpx.HTTPStatusError as e:
			raise self._http_error(e.response) from e
		except httpx.RequestError as e:
			logger.error(f"Network error fetching fire risk data: {str(e)}")
			raise NetworkError(details=str(e)) from e
		except ValueError as e:
			raise InvalidResponseError(
				"API response is not valid JSON",
				details=str(e)
			) from e

	async def fetch_model_info(self) -> Optional[ModelInfo]:
		"""
		Fetch model metadata. Failures are logged and yield None.
		"""
		try:
			payload = await self.client.get_model_info()
		except (httpx.HTTPError, ValueError) as e:
			logger.warning(f"Failed to fetch model info: {str(e)}")
			return None
		if not isinstance(payload, dict):
			logger.warning("Model info response is not a JSON object")
			return None
		try:
			return ModelInfo.from_payload(payload)
		except ValueError as e:
			logger.warning(f"Malformed model info response: {str(e)}")
			return None

	async def close(self) -> None:
		await self.client.close()

	@staticmethod
	def _http_error(response: httpx.Response) -> ApiError:
		details = None
		message = None
		try:
			details = response.json()
		except ValueError:
			details = None
		if isinstance(details, dict) and isinstance(details.get("message"), str):
			message = details["message"]
		logger.error(f"Fire risk service returned HTTP {response.status_code}")
		return HttpError(response.status_code, message=message, details=details)
