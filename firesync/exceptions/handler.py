from functools import wraps
from typing import Any
import logging
from fastapi import HTTPException, status
from firesync.exceptions.base import (
	ApiError,
	FireSyncException,
	InvalidStateTransition,
	QuotaExceededError,
)

logger = logging.getLogger(__name__)


def error_detail(error: FireSyncException) -> Any:
	"""
	HTTP `detail` body for a domain error.

	Upstream failures keep their code/message/details triple. State and
	storage errors add their own fields; anything else is the plain message.
	"""
	if isinstance(error, ApiError):
		return error.to_dict()
	if isinstance(error, InvalidStateTransition):
		return {
			"code": "INVALID_STATE_TRANSITION",
			"message": error.message,
			"current": error.current,
			"requested": error.requested
		}
	if isinstance(error, QuotaExceededError):
		return {"code": "QUOTA_EXCEEDED", "message": error.message, "key": error.key}
	return error.detail


def handle_service_exceptions(func):
	"""
	Route decorator turning firesync errors into HTTPException.

	Usage:
		@router.get("/stations/{station_name}")
		@handle_service_exceptions
		async def get_station_aggregate(request: Request, station_name: str):
			...
	"""
	@wraps(func)
	async def wrapper(*args, **kwargs):
		try:
			return await func(*args, **kwargs)
		except FireSyncException as e:
			if e.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
				logger.error(f"{func.__name__} failed: {e.message}")
			else:
				logger.info(f"{func.__name__} rejected: {e.message}")
			raise HTTPException(
				status_code=e.status_code,
				detail=error_detail(e)
			)
		except HTTPException:
			raise
		except Exception as e:
			logger.error(f"Unexpected error in {func.__name__}: {str(e)}", exc_info=True)
			raise HTTPException(
				status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
				detail=f"Internal server error: {str(e)}"
			)
	return wrapper
