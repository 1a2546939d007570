"""
Wall-clock aligned refresh timing.

The upstream service publishes a new batch at the top of each cadence
period, so refreshes are anchored to minute 0 of the local clock rather than
to process start time.
"""
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Optional
import asyncio
import logging
from firesync.config import settings
from firesync.utils.datetime_utils import local_now

logger = logging.getLogger(__name__)


def next_refresh_boundary(now: datetime, cadence_hours: int = 1) -> datetime:
	"""
	Next aligned refresh time strictly after `now`.

	The current hour is rounded up to the next multiple of the cadence at
	minute 0. If that boundary is not in the future it moves one cadence
	forward; time already elapsed inside the hour never counts as "on time".

	Args:
		now: Current wall-clock time
		cadence_hours: Refresh period in hours

	Returns:
		Boundary datetime in the same timezone as `now`
	"""
	cadence_hours = max(1, int(cadence_hours))
	hour_start = now.replace(minute=0, second=0, microsecond=0)
	hours_to_multiple = (cadence_hours - hour_start.hour % cadence_hours) % cadence_hours
	boundary = hour_start + timedelta(hours=hours_to_multiple)
	if boundary <= now:
		boundary += timedelta(hours=cadence_hours)
	return boundary


def previous_refresh_boundary(now: datetime, cadence_hours: int = 1) -> datetime:
	"""Most recent aligned boundary at or before `now`."""
	cadence_hours = max(1, int(cadence_hours))
	hour_start = now.replace(minute=0, second=0, microsecond=0)
	return hour_start - timedelta(hours=hour_start.hour % cadence_hours)


def delay_until_next_refresh(now: datetime, cadence_hours: int = 1) -> int:
	"""Milliseconds from `now` until the next aligned boundary."""
	delta = next_refresh_boundary(now, cadence_hours) - now
	return int(delta.total_seconds() * 1000)


def within_grace_window(now: datetime, cadence_hours: int = 1, grace: timedelta = timedelta(minutes=5)) -> bool:
	"""
	Whether `now` falls within `grace` after the last aligned boundary.
	Inside this window the upstream may still be producing the new batch.
	"""
	return now - previous_refresh_boundary(now, cadence_hours) <= grace


class RefreshScheduler:
	"""
	Owns the single repeating refresh timer.

	`start()` replaces any previous timer, so there is never more than one.
	A fire that lands while the previous callback is still running is skipped.
	"""

	def __init__(
		self,
		callback: Callable[[], Awaitable[Any]],
		cadence_hours: Optional[int] = None,
		grace_minutes: Optional[int] = None,
		clock: Callable[[], datetime] = local_now,
		sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
	):
		self.callback = callback
		self.cadence_hours = cadence_hours if cadence_hours is not None else settings.refresh_cadence_hours
		grace_minutes = grace_minutes if grace_minutes is not None else settings.refresh_grace_minutes
		self.grace = timedelta(minutes=grace_minutes)
		self.clock = clock
		self._sleep = sleep
		self._timer_task: Optional[asyncio.Task] = None
		self._callback_task: Optional[asyncio.Task] = None

	@property
	def is_running(self) -> bool:
		return self._timer_task is not None and not self._timer_task.done()

	def start(self) -> None:
		"""Start (or restart) the timer. Must be called from a running event loop."""
		self.cancel()
		self._timer_task = asyncio.create_task(self._run())

	def cancel(self) -> None:
		"""Tear down the timer. A callback already running is left to finish."""
		if self._timer_task is not None:
			self._timer_task.cancel()
			self._timer_task = None
			logger.info("Cleaning up fire risk refresh timer")

	def delay_until_next_refresh(self) -> int:
		return delay_until_next_refresh(self.clock(), self.cadence_hours)

	def within_grace_window(self, now: Optional[datetime] = None) -> bool:
		return within_grace_window(now or self.clock(), self.cadence_hours, self.grace)

	async def _run(self) -> None:
		while True:
			delay_ms = self.delay_until_next_refresh()
			logger.info(f"Next fire risk update in {round(delay_ms / 60000)} minutes")
			await self._sleep(delay_ms / 1000)
			self._fire()

	def _fire(self) -> None:
		if self._callback_task is not None and not self._callback_task.done():
			logger.warning("Previous fire risk refresh still running, skipping this tick")
			return
		logger.info("Fetching scheduled fire risk update...")
		self._callback_task = asyncio.create_task(self._invoke())

	async def _invoke(self) -> None:
		try:
			await self.callback()
		except Exception as e:
			logger.error(f"Scheduled fire risk refresh failed: {str(e)}", exc_info=True)
