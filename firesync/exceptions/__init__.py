from firesync.exceptions.base import (
	FireSyncException,
	ApiError,
	NetworkError,
	HttpError,
	InvalidResponseError,
	NoValidRisksError,
	NoValidDataError,
	QuotaExceededError,
	GeolocationError,
	GeolocationDeniedError,
	GeolocationUnavailableError,
	GeolocationTimeoutError,
	InvalidStateTransition,
	NotFoundError,
	InvalidRequestError,
)
from firesync.exceptions.handler import handle_service_exceptions

__all__ = [
	"FireSyncException",
	"ApiError",
	"NetworkError",
	"HttpError",
	"InvalidResponseError",
	"NoValidRisksError",
	"NoValidDataError",
	"QuotaExceededError",
	"GeolocationError",
	"GeolocationDeniedError",
	"GeolocationUnavailableError",
	"GeolocationTimeoutError",
	"InvalidStateTransition",
	"NotFoundError",
	"InvalidRequestError",
	"handle_service_exceptions"
]
