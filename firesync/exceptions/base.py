from fastapi import status
from typing import Any, Optional

class FireSyncException(Exception):
	"""
	Base exception class for all firesync custom exceptions.
	All service layer exceptions should inherit from this.
	"""
	def __init__(
		self,
		message: str,
		status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
		detail: Optional[str] = None
	):
		self.message = message
		self.status_code = status_code
		self.detail = detail or message
		super().__init__(self.message)

class ApiError(FireSyncException):
	"""
	Failure while fetching or interpreting a fire-risk batch.

	`code` is the stringified HTTP status for HTTP failures, "NETWORK_ERROR"
	for transport failures, or one of the validation codes below.
	"""
	code: str = "API_ERROR"

	def __init__(self, message: str, code: Optional[str] = None, details: Any = None):
		super().__init__(
			message=message,
			status_code=status.HTTP_502_BAD_GATEWAY,
			detail=message
		)
		if code is not None:
			self.code = code
		self.details = details

	def to_dict(self) -> dict:
		return {"code": self.code, "message": self.message, "details": self.details}

class NetworkError(ApiError):
	"""Transport-level failure: DNS, refused connection, timeout."""
	code = "NETWORK_ERROR"

	def __init__(self, message: str = "Failed to fetch data from server", details: Any = None):
		super().__init__(message, details=details)

class HttpError(ApiError):
	"""Non-2xx response from the upstream service."""
	def __init__(self, http_status: int, message: Optional[str] = None, details: Any = None):
		self.http_status = http_status
		super().__init__(
			message or f"HTTP error! status: {http_status}",
			code=str(http_status),
			details=details
		)

class InvalidResponseError(ApiError):
	"""The response is not a batch at all (malformed top-level shape)."""
	code = "INVALID_RESPONSE"

class NoValidRisksError(ApiError):
	"""No record in the batch carried a usable numeric risk value."""
	code = "NO_VALID_RISKS"

class NoValidDataError(ApiError):
	"""Every record in a non-empty batch was individually rejected."""
	code = "NO_VALID_DATA"

class QuotaExceededError(FireSyncException):
	"""
	The persistent key/value store refused a write for lack of space.
	Maps to HTTP 507.
	"""
	def __init__(self, message: str = "Storage quota exceeded", key: Optional[str] = None):
		self.key = key
		super().__init__(
			message=message,
			status_code=status.HTTP_507_INSUFFICIENT_STORAGE,
			detail=message
		)

class GeolocationError(FireSyncException):
	"""Base class for observer position failures."""
	def __init__(self, message: str = "Location unavailable"):
		super().__init__(
			message=message,
			status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
			detail=message
		)

class GeolocationDeniedError(GeolocationError):
	"""The position provider refused to share a position."""

class GeolocationUnavailableError(GeolocationError):
	"""No position provider is available or it could not produce a fix."""

class GeolocationTimeoutError(GeolocationError):
	"""The position provider did not answer within the timeout."""

class InvalidStateTransition(FireSyncException):
	"""
	Raised when the sync state machine is asked for a transition it does not allow.
	Maps to HTTP 409.
	"""
	def __init__(self, current: str, requested: str):
		message = f"Invalid sync state transition {current} -> {requested}"
		self.current = current
		self.requested = requested
		super().__init__(
			message=message,
			status_code=status.HTTP_409_CONFLICT,
			detail=message
		)

class NotFoundError(FireSyncException):
	"""
	Exception raised when a resource is not found.
	Maps to HTTP 404.
	"""
	def __init__(self, resource_type: str, resource_id: str):
		message = f"{resource_type} '{resource_id}' not found"
		super().__init__(
			message=message,
			status_code=status.HTTP_404_NOT_FOUND,
			detail=message
		)

class InvalidRequestError(FireSyncException):
	"""
	Exception raised when a caller passes an argument the domain rejects.
	Maps to HTTP 400.
	"""
	def __init__(self, message: str, detail: Optional[str] = None):
		super().__init__(
			message=message,
			status_code=status.HTTP_400_BAD_REQUEST,
			detail=detail or message
		)
