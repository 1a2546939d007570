from typing import Optional, Dict, Any
import asyncio
import logging
import httpx
from abc import ABC

logger = logging.getLogger(__name__)

# Statuses worth another attempt; anything else non-2xx fails immediately
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class BaseHTTPClient(ABC):
	"""
	Base HTTP client class for scalable and robust API interactions.
	Can be extended for different API clients.
	"""

	def __init__(
		self,
		base_url: str,
		default_headers: Optional[Dict[str, str]] = None,
		timeout: float = 30.0,
		max_retries: int = 3,
		retry_delay: float = 1.0,
		transport: Optional[httpx.AsyncBaseTransport] = None
	):
		self.base_url = base_url.rstrip('/')
		self.default_headers = default_headers or {}
		self.timeout = timeout
		self.max_retries = max(1, max_retries)
		self.retry_delay = retry_delay
		self.client = httpx.AsyncClient(
			base_url=self.base_url,
			headers=self.default_headers,
			timeout=self.timeout,
			transport=transport
		)

	async def _backoff(self, attempt: int) -> None:
		delay = self.retry_delay * (2 ** attempt)
		if delay > 0:
			await asyncio.sleep(delay)

	async def get(
		self,
		endpoint: str,
		params: Optional[Dict[str, Any]] = None,
		headers: Optional[Dict[str, str]] = None
	) -> Any:
		"""
		Perform a GET request.

		Transport errors and retryable statuses are retried with exponential
		backoff; the last failure is re-raised once attempts run out.

		Args:
			endpoint: API endpoint (relative to base_url)
			params: Query parameters
			headers: Additional headers (merged with default_headers)

		Returns:
			Decoded response JSON

		Raises:
			httpx.HTTPStatusError: Non-2xx response
			httpx.RequestError: Transport failure
			ValueError: Body is not valid JSON
		"""
		merged_headers = {**self.default_headers, **(headers or {})}

		for attempt in range(self.max_retries):
			try:
				response = await self.client.get(
					endpoint,
					params=params,
					headers=merged_headers
				)
				response.raise_for_status()
				return response.json()
			except httpx.HTTPStatusError as e:
				status_code = e.response.status_code
				if status_code not in RETRYABLE_STATUS_CODES or attempt == self.max_retries - 1:
					raise
				logger.warning(f"GET {endpoint} returned {status_code}, retrying (attempt {attempt + 1}/{self.max_retries})")
				await self._backoff(attempt)
			except httpx.RequestError as e:
				if attempt == self.max_retries - 1:
					raise
				logger.warning(f"GET {endpoint} failed: {str(e)}, retrying (attempt {attempt + 1}/{self.max_retries})")
				await self._backoff(attempt)

	async def close(self):
		"""Close the HTTP client."""
		await self.client.aclose()

	async def __aenter__(self):
		return self

	async def __aexit__(self, exc_type, exc_val, exc_tb):
		await self.close()
