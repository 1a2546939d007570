"""
Datetime utility functions.
"""
from typing import Optional
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


def parse_timestamp_ms(timestamp_ms: Optional[int]) -> Optional[datetime]:
	"""
	Convert milliseconds timestamp to datetime.

	Args:
		timestamp_ms: Timestamp in milliseconds

	Returns:
		datetime object in UTC, or None if timestamp is None
	"""
	if timestamp_ms is None:
		return None
	return datetime.fromtimestamp(timestamp_ms / 1000.0, tz=timezone.utc)


def to_timestamp_ms(dt: datetime) -> int:
	"""
	Convert a datetime to milliseconds since the epoch.
	Naive datetimes are assumed to be UTC.
	"""
	if dt.tzinfo is None:
		dt = dt.replace(tzinfo=timezone.utc)
	return int(dt.timestamp() * 1000)


def parse_datetime_to_utc(dt_string: Optional[str]) -> Optional[datetime]:
	"""
	Parse a datetime string to a datetime object in UTC.

	Handles formats like:
	- 2025-12-09T04:45:00-08:00 (with timezone offset)
	- 2025-12-09T04:45:00Z (Zulu/UTC)
	- 2025-12-09T04:45:00.123456 (no offset, assumed UTC)

	Args:
		dt_string: ISO format datetime string or None

	Returns:
		datetime object in UTC timezone or None
	"""
	if dt_string is None:
		return None
	try:
		if dt_string.endswith('Z'):
			dt_string = dt_string[:-1] + '+00:00'

		dt = datetime.fromisoformat(dt_string)

		if dt.tzinfo is not None:
			dt = dt.astimezone(timezone.utc)
		else:
			dt = dt.replace(tzinfo=timezone.utc)

		return dt
	except (ValueError, AttributeError) as e:
		logger.warning(f"Failed to parse datetime string '{dt_string}': {str(e)}")
		return None


def utc_now() -> datetime:
	"""Current time, timezone-aware UTC."""
	return datetime.now(timezone.utc)


def local_now() -> datetime:
	"""Current wall-clock time, timezone-aware in the host's local zone."""
	return datetime.now().astimezone()
